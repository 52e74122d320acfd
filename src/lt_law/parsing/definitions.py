"""Legal-term definition extraction.

Lithuanian statutes define terms in an article usually titled "Pagrindinės
šiame įstatyme vartojamos sąvokos" using one of two notations:
  - numbered list:  ``3. Duomenų valdytojas – juridinis asmuo, kuris ...``
  - quoted term:    ``„Duomenų subjektas“ – fizinis asmuo, ...``

Returns ParsedDefinition objects in extraction order; deduplication is by
(lower-cased term, exact definition text).
"""
from __future__ import annotations
import re
from typing import Iterable, List, Optional

from lt_law.ingest.schemas import ParsedDefinition

MAX_DEFINITIONS = 200
MIN_TERM_LENGTH = 2
MIN_DEFINITION_LENGTH = 5

# "sąvoka" (concept), "apibrėžtis" (definition), "šiame įstatyme vartojamos" (as used in this law)
DEFINITION_TRIGGER = re.compile(r"sąvok|apibrėž|šiame įstatyme vartojam", re.IGNORECASE)

# Definition text runs until the next numbered "<n>. <term> –" item or end of content
NUMBERED_DEFINITION = re.compile(
    r"(?:^|\n)\s*\d+\.\s*([^\n–—-]{2,140}?)\s*[–—-]\s*([^\n].+?)"
    r"(?=(?:\n\s*\d+\.\s*[^\n–—-]{2,140}?\s*[–—-])|$)",
    re.DOTALL,
)
QUOTED_DEFINITION = re.compile(r"„([^“]{2,140})“\s*[–—-]\s*([^\n]{5,500})")


def defines_terms(title: str, content: str) -> bool:
    return DEFINITION_TRIGGER.search(f"{title}\n{content}") is not None


def _accept(term: str, definition: str) -> bool:
    return len(term) >= MIN_TERM_LENGTH and len(definition) >= MIN_DEFINITION_LENGTH


def extract_definitions(content: str, source_provision: Optional[str] = None) -> List[ParsedDefinition]:
    if not content:
        return []
    found: List[ParsedDefinition] = []
    for pattern in (NUMBERED_DEFINITION, QUOTED_DEFINITION):
        for m in pattern.finditer(content):
            term = m.group(1).strip()
            definition = m.group(2).strip()
            if _accept(term, definition):
                found.append(ParsedDefinition(term=term, definition=definition, source_provision=source_provision))
    return dedupe_definitions(found)


def dedupe_definitions(definitions: Iterable[ParsedDefinition], limit: Optional[int] = None) -> List[ParsedDefinition]:
    seen = set()
    out: List[ParsedDefinition] = []
    for d in definitions:
        key = (d.term.lower(), d.definition)
        if key in seen:
            continue
        seen.add(key)
        out.append(d)
        if limit is not None and len(out) >= limit:
            break
    return out


__all__ = [
    'MAX_DEFINITIONS', 'DEFINITION_TRIGGER', 'defines_terms',
    'extract_definitions', 'dedupe_definitions',
]
