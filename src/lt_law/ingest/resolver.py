"""Edition resolution: pick one text source per document.

Edition text is not guaranteed even when edition metadata exists, so editions
are tried newest-first in batched rounds: round ``r`` fetches, in one batched
pass, the ``r``-th edition of every still-unresolved document. Documents that no
edition could serve fall back to the ``Dokumentas`` row's own ``tekstas_lt``.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from lt_law.ingest.schemas import (
    DOCUMENT_MODEL,
    EDITION_MODEL,
    DocumentRecord,
    EditionRecord,
    EditionTextRecord,
    SelectedSource,
)
from lt_law.scraper.retry import run_bounded_chain
from lt_law.utils import chunked, unique

logger = logging.getLogger(__name__)


def dedupe_editions(editions: Iterable[EditionRecord]) -> List[EditionRecord]:
    """One record per edition id, keeping the greatest ``galioja_nuo``."""
    by_id: Dict[str, EditionRecord] = {}
    for e in editions:
        prev = by_id.get(e.suvestines_id)
        if prev is None or e.galioja_nuo > prev.galioja_nuo:
            by_id[e.suvestines_id] = e
    return list(by_id.values())


def order_editions(editions: Iterable[EditionRecord], preferred_edition_id: Optional[str] = None) -> List[EditionRecord]:
    """Fallback order: preferred edition, edition in force, then newest to oldest."""
    ordered = sorted(dedupe_editions(editions), key=lambda e: e.galioja_nuo, reverse=True)
    current = next((e for e in ordered if e.is_current), None)
    if current is not None:
        ordered.remove(current)
        ordered.insert(0, current)
    if preferred_edition_id:
        preferred = next((e for e in ordered if e.suvestines_id == preferred_edition_id), None)
        if preferred is not None:
            ordered.remove(preferred)
            ordered.insert(0, preferred)
        else:
            logger.debug("Preferred edition %s not among %d editions", preferred_edition_id, len(ordered))
    return ordered


def group_editions(
    editions: Iterable[EditionRecord],
    preferred: Optional[Dict[str, str]] = None,
) -> Dict[str, List[EditionRecord]]:
    preferred = preferred or {}
    grouped: Dict[str, List[EditionRecord]] = {}
    for e in editions:
        grouped.setdefault(e.dokumento_id, []).append(e)
    return {doc_id: order_editions(eds, preferred.get(doc_id)) for doc_id, eds in grouped.items()}


def _text_of(row: Optional[EditionTextRecord]) -> str:
    if row is None:
        return ''
    return (row.tekstas_lt or '').strip()


class EditionResolver:
    def __init__(self, client) -> None:
        self.client = client

    def _fetch_texts(self, edition_ids: Sequence[str], batch_size: int) -> Dict[str, EditionTextRecord]:
        texts: Dict[str, EditionTextRecord] = {}
        for batch in chunked(list(edition_ids), batch_size):
            for row in self.client.fetch_edition_texts(batch):
                # duplicated rows: keep one that actually carries text
                if row.suvestines_id not in texts or (not _text_of(texts[row.suvestines_id]) and _text_of(row)):
                    texts[row.suvestines_id] = row
        return texts

    def resolve(
        self,
        documents: Sequence[DocumentRecord],
        editions_by_document: Dict[str, List[EditionRecord]],
        batch_size: int,
        max_rounds: int,
    ) -> Tuple[Dict[str, SelectedSource], List[str]]:
        doc_ids = unique([d.dokumento_id for d in documents])
        selected: Dict[str, SelectedSource] = {}
        active = [d for d in doc_ids if editions_by_document.get(d)]

        def run_round(r: int) -> List[str]:
            nonlocal active
            candidates: Dict[str, EditionRecord] = {}
            for doc_id in active:
                editions = editions_by_document[doc_id]
                if len(editions) > r:
                    candidates[doc_id] = editions[r]
            edition_ids = unique([e.suvestines_id for e in candidates.values()])
            texts = self._fetch_texts(edition_ids, batch_size)

            failed: List[str] = []
            for doc_id, edition in candidates.items():
                row = texts.get(edition.suvestines_id)
                text = _text_of(row)
                if text:
                    selected[doc_id] = SelectedSource(
                        model=EDITION_MODEL,
                        text=text,
                        url=(row.nuoroda if row is not None and row.nuoroda else edition.nuoroda),
                        edition=edition,
                    )
                else:
                    failed.append(doc_id)
            active = [d for d in failed if len(editions_by_document[d]) > r + 1]
            logger.info(
                "Round %d: %d candidates, %d resolved, %d carried over",
                r, len(candidates), len(candidates) - len(failed), len(active),
            )
            return active

        outcome = run_bounded_chain(run_round, is_done=lambda remaining: not remaining, max_attempts=max_rounds)
        if not outcome.done and active:
            logger.warning("Stopped after %d rounds with %d documents still holding older editions", outcome.attempts, len(active))

        unresolved = [d for d in doc_ids if d not in selected]
        return selected, unresolved

    def resolve_fallback(self, document_ids: Sequence[str], batch_size: int) -> Dict[str, SelectedSource]:
        """Use ``Dokumentas.tekstas_lt`` for documents no edition could serve."""
        selected: Dict[str, SelectedSource] = {}
        for batch in chunked(unique(list(document_ids)), batch_size):
            for row in self.client.fetch_documents_by_ids(batch, with_text=True):
                text = (row.tekstas_lt or '').strip()
                if text and row.dokumento_id not in selected:
                    selected[row.dokumento_id] = SelectedSource(model=DOCUMENT_MODEL, text=text, url=row.nuoroda)
        logger.info("Fallback: %d of %d documents resolved from document text", len(selected), len(document_ids))
        return selected


__all__ = ['dedupe_editions', 'order_editions', 'group_editions', 'EditionResolver']
