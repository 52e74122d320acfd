"""Stable corpus identifiers for upstream documents.

Assigned once over the whole corpus (never per window) so a law keeps the same
id whichever slice of the corpus a run processes:
  1. pinned ids from the known-law table,
  2. ``lt-<slug of atv_dok_nr or dokumento_id>`` truncated to MAX_SLUG_LENGTH,
  3. on collision ``-<sha256(dokumento_id)[:6]>``, then ``-2``, ``-3`` ...
"""
from __future__ import annotations

import hashlib
import re
import unicodedata
from typing import Dict, Optional, Sequence

from lt_law.errors import ConfigurationError
from lt_law.ingest.schemas import DocumentRecord, KnownLaw

ID_PREFIX = 'lt-'
MAX_SLUG_LENGTH = 48
HASH_SUFFIX_LENGTH = 6


def slugify(value: str) -> str:
    folded = unicodedata.normalize('NFKD', value).encode('ascii', 'ignore').decode('ascii')
    slug = re.sub(r"[^a-z0-9]+", "-", folded.lower()).strip('-')
    return slug


def short_hash(value: str) -> str:
    return hashlib.sha256(value.encode('utf-8')).hexdigest()[:HASH_SUFFIX_LENGTH]


def base_identifier(doc: DocumentRecord) -> str:
    slug = slugify(doc.atv_dok_nr or '') or slugify(doc.dokumento_id) or short_hash(doc.dokumento_id)
    return ID_PREFIX + slug[:MAX_SLUG_LENGTH].rstrip('-')


def assign_identifiers(
    documents: Sequence[DocumentRecord],
    known: Optional[Dict[str, KnownLaw]] = None,
) -> Dict[str, str]:
    """Return ``{dokumento_id: identifier}`` for every document."""
    known = known or {}
    assigned: Dict[str, str] = {}
    taken: Dict[str, str] = {}

    for law in known.values():
        if law.id in taken and taken[law.id] != law.document_id:
            raise ConfigurationError(f"Duplicate pinned identifier {law.id!r}")
        taken[law.id] = law.document_id

    for doc in documents:
        if doc.dokumento_id in assigned:
            continue
        law = known.get(doc.dokumento_id)
        if law is not None:
            assigned[doc.dokumento_id] = law.id
            continue
        base = base_identifier(doc)
        candidate = base
        if candidate in taken:
            candidate = f"{base}-{short_hash(doc.dokumento_id)}"
            hashed = candidate
            n = 2
            while candidate in taken:
                candidate = f"{hashed}-{n}"
                n += 1
        taken[candidate] = doc.dokumento_id
        assigned[doc.dokumento_id] = candidate
    return assigned


__all__ = ['slugify', 'short_hash', 'base_identifier', 'assign_identifiers']
