"""Segmentation of consolidated statute text (``tekstas_lt``) into provisions.

Source text is plain text from the TAR open-data register with headings such as::

    I SKYRIUS
    BENDROSIOS NUOSTATOS

    1 straipsnis. Įstatymo paskirtis
    4-1 straipsnis. ...

Segmentation runs in two passes:
 1. ``collect_markers`` finds structure: an ordered list of typed markers
    (chapter / article) with their offsets and heading lengths.
 2. ``slice_provisions`` is pure index arithmetic over those markers, followed by
    content cleaning, title promotion and definition extraction.

``segment`` is deterministic and does no I/O.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from lt_law.ingest.schemas import ParsedDefinition, ParsedProvision, ParseResult
from lt_law.parsing.definitions import (
    MAX_DEFINITIONS,
    dedupe_definitions,
    defines_terms,
    extract_definitions,
)

CHAPTER = 'chapter'
ARTICLE = 'article'

ARTICLE_HEADING = re.compile(r"^[ ]*(\d+[0-9A-Za-z-]*)[ ]+straipsnis\.[ ]*([^\n]*)", re.IGNORECASE | re.MULTILINE)
ARTICLE_LINE = re.compile(r"^\d+[0-9A-Za-z-]*\s+straipsnis\.", re.IGNORECASE)
CHAPTER_LINE = re.compile(r"^[IVXLCDM]+\s+SKYRIUS$", re.IGNORECASE)
AMENDMENTS_LOG = re.compile(r"\nPakeitimai:[ ]*(?:\n|$)", re.IGNORECASE)
NUMBERED_ITEM = re.compile(r"^\d+[.)]")
STRUCTURE_WORD = re.compile(r"^(SKIRSNIS|SKYRIUS|POSKYRIS)$", re.IGNORECASE)

ZERO_WIDTH = dict.fromkeys(map(ord, "\u200b\u200c\u200d\ufeff"))

CHAPTER_SUBTITLE_WINDOW = 4
MAX_PROMOTED_TITLE = 180
REF_PREFIX = 'art'


@dataclass(frozen=True)
class Marker:
    kind: str
    offset: int
    length: int
    label: str
    title: str = ''

    @property
    def end(self) -> int:
        return self.offset + self.length


def normalize_text(text: str) -> str:
    text = text.replace('\r\n', '\n').replace('\r', '\n')
    text = text.replace("\u00a0", " ").replace("\t", " ")
    return text.translate(ZERO_WIDTH)


def trim_amendments(text: str) -> str:
    """Drop the trailing "Pakeitimai:" publication log."""
    m = AMENDMENTS_LOG.search(text)
    return text[:m.start()] if m else text


def find_body_start(text: str) -> Optional[int]:
    m = ARTICLE_HEADING.search(text)
    return m.start() if m else None


def collect_chapter_markers(body: str) -> List[Marker]:
    lines = body.split('\n')
    starts: List[int] = []
    pos = 0
    for line in lines:
        starts.append(pos)
        pos += len(line) + 1

    markers: List[Marker] = []
    for i, raw in enumerate(lines):
        heading = raw.strip()
        if not CHAPTER_LINE.match(heading):
            continue
        label = heading
        last_line = i
        for j in range(i + 1, min(len(lines), i + 1 + CHAPTER_SUBTITLE_WINDOW)):
            candidate = lines[j].strip()
            if not candidate:
                continue
            if ARTICLE_LINE.match(candidate) or CHAPTER_LINE.match(candidate):
                break
            label = f"{heading} {candidate}"
            last_line = j
            break
        end = starts[last_line] + len(lines[last_line])
        markers.append(Marker(kind=CHAPTER, offset=starts[i], length=end - starts[i], label=label))
    return markers


def collect_article_markers(body: str) -> List[Marker]:
    return [
        Marker(
            kind=ARTICLE,
            offset=m.start(),
            length=m.end() - m.start(),
            label=m.group(1).strip(),
            title=(m.group(2) or '').strip(),
        )
        for m in ARTICLE_HEADING.finditer(body)
    ]


def collect_markers(body: str) -> List[Marker]:
    markers = collect_chapter_markers(body) + collect_article_markers(body)
    return sorted(markers, key=lambda mk: mk.offset)


def clean_content(raw: str) -> str:
    out: List[str] = []
    prev_blank = False
    for line in raw.split('\n'):
        trimmed = line.strip()
        if not trimmed:
            if not prev_blank:
                out.append('')
            prev_blank = True
            continue
        out.append(trimmed)
        prev_blank = False
    return '\n'.join(out).strip()


def promote_title(title: str, content: str) -> Tuple[str, str]:
    """Use a heading-like first content line as title when the heading had none."""
    if title:
        return title, content
    lines = content.split('\n')
    first = lines[0].strip()
    rest = '\n'.join(lines[1:]).strip()
    if not first or not rest:
        return title, content
    if len(first) > MAX_PROMOTED_TITLE:
        return title, content
    if NUMBERED_ITEM.match(first) or STRUCTURE_WORD.match(first):
        return title, content
    return first, rest


def provision_ref(section: str) -> str:
    return REF_PREFIX + re.sub(r"[^0-9a-z-]", "", section.lower())


def slice_provisions(body: str, markers: List[Marker]) -> ParseResult:
    provisions: List[ParsedProvision] = []
    definitions: List[ParsedDefinition] = []
    ref_counts: Dict[str, int] = {}
    chapter: Optional[str] = None

    for i, marker in enumerate(markers):
        if marker.kind == CHAPTER:
            chapter = marker.label
            continue
        end = markers[i + 1].offset if i + 1 < len(markers) else len(body)
        content = clean_content(body[marker.end:end])
        if not content:
            continue
        title_tail, content = promote_title(marker.title, content)

        section = re.sub(r"\s+", "", marker.label)
        title = f"{section} straipsnis. {title_tail}" if title_tail else f"{section} straipsnis"
        ref = provision_ref(section)
        seen = ref_counts.get(ref, 0) + 1
        ref_counts[ref] = seen
        if seen > 1:
            # repeated label (e.g. quoted amending text); "_" never occurs in a ref
            ref = f"{ref}_{seen}"

        provisions.append(ParsedProvision(provision_ref=ref, chapter=chapter, section=section, title=title, content=content))
        if defines_terms(title, content):
            definitions.extend(extract_definitions(content, ref))

    return ParseResult(provisions=provisions, definitions=dedupe_definitions(definitions, limit=MAX_DEFINITIONS))


def segment(raw_text: Optional[str]) -> ParseResult:
    """Split statute text into provisions and definitions.

    An article runs from its heading to the next marker of either kind, so a
    chapter heading ends the preceding article and is never part of its content.
    """
    text = trim_amendments(normalize_text(raw_text or ''))
    start = find_body_start(text)
    if start is None:
        return ParseResult()
    body = text[start:]
    return slice_provisions(body, collect_markers(body))


__all__ = [
    'Marker', 'CHAPTER', 'ARTICLE', 'normalize_text', 'trim_amendments',
    'collect_markers', 'collect_chapter_markers', 'collect_article_markers',
    'clean_content', 'promote_title', 'provision_ref', 'slice_provisions', 'segment',
]
