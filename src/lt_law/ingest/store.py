"""File-based corpus output.

Layout:
  <seed_dir>/<file>.json               one SeedRecord per law
  <source_dir>/<stem>.source.json      provenance of the text that was parsed
  <output_dir>/ingest-summary.json     run summary (merged on resume)
  <output_dir>/ingest-skipped.json     skip log (merged on resume)
"""
from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Optional

from pydantic import BaseModel

from lt_law import config
from lt_law.ingest.schemas import SeedRecord, SourceRecord
from lt_law.ingest.state import RunState, load_run_state

logger = logging.getLogger(__name__)


def write_json(path: str, data: Dict[str, Any]) -> None:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    tmp = os.path.join(directory, f".tmp_{os.path.basename(path)}")
    with open(tmp, 'w', encoding='utf-8') as f:
        f.write(json.dumps(data, ensure_ascii=False, indent=2) + "\n")
    os.replace(tmp, path)


def _dump(model: BaseModel) -> Dict[str, Any]:
    return model.model_dump(mode='json', exclude_none=True)


class CorpusStore:
    def __init__(
        self,
        seed_dir: str = config.SEED_DIR,
        source_dir: str = config.SOURCE_DIR,
        output_dir: Optional[str] = None,
    ) -> None:
        self.seed_dir = seed_dir
        self.source_dir = source_dir
        self.output_dir = output_dir or config.DATA_DIR
        self.summary_path = os.path.join(self.output_dir, config.SUMMARY_FILENAME)
        self.skipped_path = os.path.join(self.output_dir, config.SKIPPED_FILENAME)

    def ensure_dirs(self) -> None:
        for d in (self.seed_dir, self.source_dir, self.output_dir):
            os.makedirs(d, exist_ok=True)

    def clear(self) -> int:
        """Remove seed and source JSON files left by a previous run."""
        removed = 0
        for d in (self.seed_dir, self.source_dir):
            if not os.path.isdir(d):
                continue
            for name in os.listdir(d):
                if name.endswith('.json'):
                    os.remove(os.path.join(d, name))
                    removed += 1
        if removed:
            logger.info("Removed %d output files from a previous run", removed)
        return removed

    def seed_path(self, file_name: str) -> str:
        return os.path.join(self.seed_dir, file_name)

    def source_path(self, file_name: str) -> str:
        stem = file_name[:-5] if file_name.endswith('.json') else file_name
        return os.path.join(self.source_dir, f"{stem}.source.json")

    def write_seed(self, file_name: str, seed: SeedRecord) -> str:
        path = self.seed_path(file_name)
        write_json(path, _dump(seed))
        return path

    def write_source(self, file_name: str, source: SourceRecord) -> str:
        path = self.source_path(file_name)
        # keep explicit nulls (e.g. galioja_iki of a current edition) in provenance
        write_json(path, source.model_dump(mode='json'))
        return path

    def load_state(self) -> Optional[RunState]:
        return load_run_state(self.summary_path, self.skipped_path)

    def write_state(self, state: RunState) -> None:
        write_json(self.summary_path, _dump(state.summary))
        write_json(self.skipped_path, {
            'count': len(state.skipped),
            'skipped': [_dump(s) for s in state.skipped],
        })


__all__ = ['CorpusStore', 'write_json']
