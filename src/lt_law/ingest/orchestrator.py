"""Batch ingestion run: corpus selection -> text resolution -> segmentation -> output.

Phases:
 0. select the corpus (known-law sample or every in-force law), assign ids
 1. fetch edition metadata for the target window
 2. resolve edition text in batched rounds
 3. fall back to document-level text for whatever is left
 4. segment, write seed + source records, record skips, merge run state
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional, Tuple

from lt_law import config
from lt_law.ingest.identifiers import assign_identifiers
from lt_law.ingest.known_laws import KNOWN_LAWS, index_known_laws
from lt_law.ingest.resolver import EditionResolver, group_editions
from lt_law.ingest.schemas import (
    DocumentRecord,
    EditionRecord,
    KnownLaw,
    LawStatus,
    SeedRecord,
    SelectedSource,
    SourceRecord,
)
from lt_law.ingest.state import IngestionSummary, RunState, SkippedLaw
from lt_law.ingest.store import CorpusStore
from lt_law.parsing.segmenter import segment
from lt_law.scraper.tar_client import LAW_CATEGORY
from lt_law.utils import chunked

logger = logging.getLogger(__name__)

Mode = Literal['sample', 'full']

# Upstream galioj_busena values
STATUS_MAP: Dict[str, LawStatus] = {
    'galioja': 'in_force',
    'negalioja': 'repealed',
}
# Unknown or missing status is reported as in force; consumers rely on there
# being no separate "unknown" status value.
DEFAULT_STATUS: LawStatus = 'in_force'


def map_status(value: Optional[str]) -> LawStatus:
    return STATUS_MAP.get((value or '').strip().lower(), DEFAULT_STATUS)


@dataclass
class IngestionOptions:
    mode: Mode = 'sample'
    start: int = 0
    limit: Optional[int] = None
    resume: bool = False
    metadata_chunk_size: int = config.METADATA_CHUNK_SIZE
    text_chunk_size: int = config.TEXT_CHUNK_SIZE
    fallback_chunk_size: int = config.FALLBACK_CHUNK_SIZE
    max_rounds: int = config.MAX_RESOLUTION_ROUNDS


@dataclass
class IngestionReport:
    state: RunState
    run_summary: IngestionSummary
    written: List[str] = field(default_factory=list)
    skipped: List[SkippedLaw] = field(default_factory=list)


class IngestionOrchestrator:
    def __init__(
        self,
        client,
        store: Optional[CorpusStore] = None,
        options: Optional[IngestionOptions] = None,
        known_laws: Optional[List[KnownLaw]] = None,
    ) -> None:
        self.client = client
        self.store = store or CorpusStore()
        self.options = options or IngestionOptions()
        self.known = index_known_laws(KNOWN_LAWS if known_laws is None else known_laws)
        self.resolver = EditionResolver(client)

    # ------------------------------------------------------------------
    # Corpus selection
    # ------------------------------------------------------------------
    def load_corpus(self) -> List[DocumentRecord]:
        if self.options.mode == 'full':
            docs = self.client.fetch_in_force_laws()
        elif self.options.mode == 'sample':
            docs = []
            for batch in chunked(list(self.known.keys()), self.options.metadata_chunk_size):
                docs.extend(self.client.fetch_documents_by_ids(batch))
        else:
            raise ValueError(f"Unknown ingestion mode: {self.options.mode}")
        by_id: Dict[str, DocumentRecord] = {}
        for d in docs:
            by_id.setdefault(d.dokumento_id, d)
        return [by_id[k] for k in sorted(by_id)]

    def reject_non_laws(self, corpus: List[DocumentRecord]) -> Tuple[List[DocumentRecord], List[SkippedLaw]]:
        """Drop pinned documents whose register category is not a law."""
        kept: List[DocumentRecord] = []
        rejected: List[SkippedLaw] = []
        for d in corpus:
            law = self.known.get(d.dokumento_id)
            if law is not None and (d.rusis or '').strip().lower() != LAW_CATEGORY.lower():
                rejected.append(SkippedLaw(
                    document_id=d.dokumento_id,
                    law_id=law.id,
                    reason='not_a_law',
                    details=f"rusis={d.rusis or 'unknown'}",
                ))
            else:
                kept.append(d)
        return kept, rejected

    def select_window(self, corpus: List[DocumentRecord]) -> List[DocumentRecord]:
        start = max(0, self.options.start)
        if self.options.limit is None:
            return corpus[start:]
        return corpus[start:start + max(0, self.options.limit)]

    def in_window(self, corpus: List[DocumentRecord], document_id: str) -> bool:
        """Whether an id absent from ``corpus`` sorts into the current window.

        Consecutive windows split the id space at their last document, so each
        absent id belongs to exactly one of them.
        """
        start = max(0, self.options.start)
        lower = corpus[min(start, len(corpus)) - 1].dokumento_id if start > 0 and corpus else None
        upper = None
        if self.options.limit is not None:
            end = start + max(0, self.options.limit)
            if end <= start:
                return False
            if end < len(corpus):
                upper = corpus[end - 1].dokumento_id
        return (lower is None or document_id > lower) and (upper is None or document_id <= upper)

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------
    def fetch_editions(self, documents: List[DocumentRecord]) -> Dict[str, List[EditionRecord]]:
        editions: List[EditionRecord] = []
        doc_ids = [d.dokumento_id for d in documents]
        for batch in chunked(doc_ids, self.options.metadata_chunk_size):
            editions.extend(self.client.fetch_edition_metadata(batch))
        preferred = {doc_id: law.preferred_edition_id for doc_id, law in self.known.items() if law.preferred_edition_id}
        grouped = group_editions(editions, preferred)
        logger.info("Phase 1: %d editions for %d of %d documents", len(editions), len(grouped), len(documents))
        return grouped

    def resolve_sources(
        self,
        documents: List[DocumentRecord],
        editions_by_document: Dict[str, List[EditionRecord]],
    ) -> Dict[str, SelectedSource]:
        selected, unresolved = self.resolver.resolve(
            documents,
            editions_by_document,
            batch_size=self.options.text_chunk_size,
            max_rounds=self.options.max_rounds,
        )
        logger.info("Phase 2: %d resolved from editions, %d unresolved", len(selected), len(unresolved))
        fallback = self.resolver.resolve_fallback(unresolved, self.options.fallback_chunk_size) if unresolved else {}
        logger.info("Phase 3: %d resolved from document text", len(fallback))
        merged = dict(fallback)
        merged.update(selected)  # edition text wins
        return merged

    # ------------------------------------------------------------------
    # Per-document output
    # ------------------------------------------------------------------
    def _file_name(self, law_id: str, law: Optional[KnownLaw]) -> str:
        return law.file if law is not None else f"{law_id}.json"

    def finalize(
        self,
        doc: DocumentRecord,
        law_id: str,
        source: Optional[SelectedSource],
        summary: IngestionSummary,
    ):
        """Write seed + source for one document; returns the seed path or a SkippedLaw."""
        if source is None:
            return SkippedLaw(
                document_id=doc.dokumento_id,
                law_id=law_id,
                reason='no_text',
                details='No edition or document text available',
            )

        parsed = segment(source.text)
        if not parsed.provisions:
            return SkippedLaw(
                document_id=doc.dokumento_id,
                law_id=law_id,
                reason='no_provisions',
                details=f"source_model={source.model} text_length={len(source.text)}",
            )

        law = self.known.get(doc.dokumento_id)
        seed = SeedRecord(
            id=law_id,
            title=doc.pavadinimas,
            title_en=law.title_en if law else None,
            short_name=law.short_name if law else None,
            status=map_status(doc.galioj_busena),
            issued_date=doc.priimtas or None,
            in_force_date=doc.isigalioja or None,
            url=source.url or doc.nuoroda,
            description=law.description if law else None,
            provisions=parsed.provisions,
            definitions=parsed.definitions,
        )
        edition = source.edition
        provenance = SourceRecord(
            document_id=doc.dokumento_id,
            law_id=law_id,
            atv_dok_nr=doc.atv_dok_nr,
            title=doc.pavadinimas,
            source_model=source.model,
            selected_suvestines_id=edition.suvestines_id if edition else None,
            selected_galioja_nuo=edition.galioja_nuo if edition else None,
            selected_galioja_iki=edition.galioja_iki if edition else None,
            source_url=seed.url,
            raw_text_length=len(source.text),
            provision_count=len(parsed.provisions),
            definition_count=len(parsed.definitions),
        )
        file_name = self._file_name(law_id, law)
        path = self.store.write_seed(file_name, seed)
        self.store.write_source(file_name, provenance)

        summary.processed += 1
        summary.provisions += len(parsed.provisions)
        summary.definitions += len(parsed.definitions)
        summary.count_source(source.model)
        logger.info(
            "%s (%s): %d provisions, %d definitions, %s %s",
            law_id, doc.dokumento_id, len(parsed.provisions), len(parsed.definitions),
            source.model, edition.suvestines_id if edition else '',
        )
        return path

    # ------------------------------------------------------------------
    def run(self) -> IngestionReport:
        opts = self.options
        self.store.ensure_dirs()
        prior = self.store.load_state() if opts.resume else None
        if not opts.resume:
            self.store.clear()

        corpus, rejected = self.reject_non_laws(self.load_corpus())
        ids = assign_identifiers(corpus, self.known)
        targets = self.select_window(corpus)
        logger.info("Mode=%s corpus=%d window=[%d, %s) targets=%d", opts.mode, len(corpus), opts.start, opts.limit, len(targets))

        summary = IngestionSummary(
            mode=opts.mode,
            start=opts.start,
            limit=opts.limit,
            documents_in_corpus=len(corpus),
            documents_targeted=len(targets),
        )
        # missing or rejected pinned laws belong to the window their id sorts into
        skipped: List[SkippedLaw] = [s for s in rejected if self.in_window(corpus, s.document_id)]
        if opts.mode == 'sample':
            found = {d.dokumento_id for d in corpus} | {s.document_id for s in rejected}
            for doc_id, law in sorted(self.known.items()):
                if doc_id not in found and self.in_window(corpus, doc_id):
                    skipped.append(SkippedLaw(document_id=doc_id, law_id=law.id, reason='not_found', details='Document not found in register'))
        for s in skipped:
            logger.warning("Skipped %s (%s): %s %s", s.law_id, s.document_id, s.reason, s.details)

        editions = self.fetch_editions(targets)
        sources = self.resolve_sources(targets, editions)

        written: List[str] = []
        for doc in targets:
            result = self.finalize(doc, ids[doc.dokumento_id], sources.get(doc.dokumento_id), summary)
            if isinstance(result, SkippedLaw):
                logger.warning("Skipped %s (%s): %s %s", result.law_id, result.document_id, result.reason, result.details)
                skipped.append(result)
            else:
                written.append(result)
        summary.skipped = len(skipped)

        current = RunState(summary=summary, skipped=skipped)
        state = prior.merge(current) if prior is not None else current
        self.store.write_state(state)
        logger.info(
            "Ingestion complete: %d written, %d skipped, %d provisions, %d definitions",
            summary.processed, summary.skipped, summary.provisions, summary.definitions,
        )
        return IngestionReport(state=state, run_summary=summary, written=written, skipped=skipped)


__all__ = ['IngestionOptions', 'IngestionReport', 'IngestionOrchestrator', 'map_status', 'STATUS_MAP', 'DEFAULT_STATUS']
