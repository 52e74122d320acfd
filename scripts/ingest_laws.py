"""Ingest Lithuanian laws from the TAR open-data register into seed JSON files.

Modes:
    - sample: the curated known-law table (default)
    - full:   every law currently in force (rusis=Įstatymas, galioj_busena=galioja)

Resume semantics: with --resume, the previous ingest-summary.json and
ingest-skipped.json are merged with this run's results instead of being
replaced, and existing seed files are kept. Use --start/--limit to walk the full
corpus in windows across several runs.
"""

import argparse
import logging
import os
import sys

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
SRC_DIR = os.path.join(PROJECT_ROOT, "src")
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

from lt_law import config  # noqa: E402
from lt_law.errors import IngestError  # noqa: E402
from lt_law.ingest.orchestrator import IngestionOptions, IngestionOrchestrator  # noqa: E402
from lt_law.ingest.store import CorpusStore  # noqa: E402
from lt_law.scraper.rate_limit import RateLimiter  # noqa: E402
from lt_law.scraper.tar_client import TarClient  # noqa: E402

os.makedirs(config.LOG_DIR, exist_ok=True)
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(),
        logging.FileHandler(os.path.join(config.LOG_DIR, "ingest.log"), encoding="utf-8"),
    ]
)
logger = logging.getLogger("ingest")


def parse_args(argv=None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    ap.add_argument("--mode", choices=["sample", "full"], default="sample")
    ap.add_argument("--start", type=int, default=0)
    ap.add_argument("--limit", type=int, default=None)
    ap.add_argument("--resume", action="store_true")
    ap.add_argument("--metadata-chunk-size", type=int, default=config.METADATA_CHUNK_SIZE)
    ap.add_argument("--text-chunk-size", type=int, default=config.TEXT_CHUNK_SIZE)
    ap.add_argument("--fallback-chunk-size", type=int, default=config.FALLBACK_CHUNK_SIZE)
    ap.add_argument("--max-rounds", type=int, default=config.MAX_RESOLUTION_ROUNDS)
    ap.add_argument("--seed-dir", default=config.SEED_DIR)
    ap.add_argument("--source-dir", default=config.SOURCE_DIR)
    ap.add_argument("--output-dir", default=config.DATA_DIR)
    args = ap.parse_args(argv)
    if args.limit is not None and args.limit <= 0:
        ap.error("--limit must be positive")
    return args


def main(argv=None) -> int:
    args = parse_args(argv)
    options = IngestionOptions(
        mode=args.mode,
        start=args.start,
        limit=args.limit,
        resume=args.resume,
        metadata_chunk_size=args.metadata_chunk_size,
        text_chunk_size=args.text_chunk_size,
        fallback_chunk_size=args.fallback_chunk_size,
        max_rounds=args.max_rounds,
    )
    client = TarClient(limiter=RateLimiter(config.MIN_REQUEST_INTERVAL))
    store = CorpusStore(args.seed_dir, args.source_dir, args.output_dir)

    logger.info("Source: TAR open data API (%s)", config.API_BASE)
    try:
        report = IngestionOrchestrator(client, store, options).run()
    except IngestError as e:
        logger.error("Fatal ingestion error: %s", e)
        return 1

    s = report.state.summary
    print(f"[ingest] Seed files written: {len(report.written)}")
    print(f"[ingest] Skipped: {len(report.skipped)}")
    print(f"[ingest] Provisions: {report.run_summary.provisions} (total {s.provisions} over {s.runs} runs)")
    print(f"[ingest] Definitions: {report.run_summary.definitions} (total {s.definitions} over {s.runs} runs)")
    print(f"[ingest] Requests made: {client.requests_made}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
