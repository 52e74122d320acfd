"""Persisted run state: aggregate summary plus the skip log.

Both files are re-read and merged when a run is resumed:
 - counters add up (associative, commutative),
 - skip entries are keyed by (document_id, reason); the later run's details win,
 - descriptive fields (mode, window, timestamp) come from the later run.
"""
from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from typing import Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

SkipReason = Literal['no_text', 'no_provisions', 'not_found', 'not_a_law']

COUNTER_FIELDS = ('documents_targeted', 'processed', 'skipped', 'provisions', 'definitions')


class SkippedLaw(BaseModel):
    document_id: str
    law_id: Optional[str] = None
    reason: SkipReason
    details: str = ''

    @property
    def key(self) -> Tuple[str, str]:
        return (self.document_id, self.reason)


class IngestionSummary(BaseModel):
    mode: str = 'sample'
    start: int = 0
    limit: Optional[int] = None
    runs: int = 1
    documents_in_corpus: int = 0
    documents_targeted: int = 0
    processed: int = 0
    skipped: int = 0
    provisions: int = 0
    definitions: int = 0
    source_models: Dict[str, int] = Field(default_factory=dict)
    updated_at: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def count_source(self, model: str) -> None:
        self.source_models[model] = self.source_models.get(model, 0) + 1

    def merge(self, later: 'IngestionSummary') -> 'IngestionSummary':
        """Combine with a later run's summary (``self`` is the earlier one)."""
        merged = later.model_copy(deep=True)
        for name in COUNTER_FIELDS:
            setattr(merged, name, getattr(self, name) + getattr(later, name))
        merged.runs = self.runs + later.runs
        merged.documents_in_corpus = max(self.documents_in_corpus, later.documents_in_corpus)
        models = dict(self.source_models)
        for model, n in later.source_models.items():
            models[model] = models.get(model, 0) + n
        merged.source_models = models
        return merged


def merge_skips(earlier: List[SkippedLaw], later: List[SkippedLaw]) -> List[SkippedLaw]:
    by_key: Dict[Tuple[str, str], SkippedLaw] = {}
    for entry in list(earlier) + list(later):
        by_key[entry.key] = entry
    return list(by_key.values())


class RunState(BaseModel):
    summary: IngestionSummary = Field(default_factory=IngestionSummary)
    skipped: List[SkippedLaw] = Field(default_factory=list)

    def merge(self, later: 'RunState') -> 'RunState':
        return RunState(summary=self.summary.merge(later.summary), skipped=merge_skips(self.skipped, later.skipped))


def load_run_state(summary_path: str, skipped_path: str) -> Optional[RunState]:
    """Read a previous run's files; ``None`` when there is nothing to resume from."""
    if not os.path.exists(summary_path) and not os.path.exists(skipped_path):
        return None
    state = RunState()
    if os.path.exists(summary_path):
        with open(summary_path, 'r', encoding='utf-8') as f:
            state.summary = IngestionSummary.model_validate(json.load(f))
    if os.path.exists(skipped_path):
        with open(skipped_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        entries = data.get('skipped', []) if isinstance(data, dict) else data
        state.skipped = [SkippedLaw.model_validate(e) for e in entries]
    logger.info("Loaded prior run state: %d runs, %d skip entries", state.summary.runs, len(state.skipped))
    return state


__all__ = [
    'SkipReason', 'SkippedLaw', 'IngestionSummary', 'RunState',
    'merge_skips', 'load_run_state',
]
