import os
from dotenv import load_dotenv

load_dotenv()

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))

# Upstream register (TAR open data)
API_BASE = os.getenv("TAR_API_BASE", "https://get.data.gov.lt/datasets/gov/lrsk/teises_aktai")
USER_AGENT = os.getenv("TAR_USER_AGENT", "lt-law-ingest/0.1 (legal-data-ingestion)")
REQUEST_TIMEOUT = float(os.getenv("TAR_REQUEST_TIMEOUT", "60"))

# Politeness & resilience
MIN_REQUEST_INTERVAL = float(os.getenv("TAR_MIN_REQUEST_INTERVAL", "1.2"))  # seconds between calls
MAX_RETRIES = int(os.getenv("TAR_MAX_RETRIES", "3"))
RETRY_BACKOFF_STEP = float(os.getenv("TAR_RETRY_BACKOFF_STEP", "1.5"))  # attempt * step
MAX_PAGINATION_OFFSET = int(os.getenv("TAR_MAX_PAGINATION_OFFSET", "2000000"))

# Page sizes per query kind
METADATA_PAGE_SIZE = int(os.getenv("TAR_METADATA_PAGE_SIZE", "10000"))
TEXT_PAGE_SIZE = int(os.getenv("TAR_TEXT_PAGE_SIZE", "5000"))

# Batch chunking (bounds filter-expression length, not concurrency)
METADATA_CHUNK_SIZE = int(os.getenv("INGEST_METADATA_CHUNK_SIZE", "100"))
TEXT_CHUNK_SIZE = int(os.getenv("INGEST_TEXT_CHUNK_SIZE", "25"))
FALLBACK_CHUNK_SIZE = int(os.getenv("INGEST_FALLBACK_CHUNK_SIZE", "25"))
MAX_RESOLUTION_ROUNDS = int(os.getenv("INGEST_MAX_ROUNDS", "6"))

# Output layout
DATA_DIR = os.getenv("INGEST_DATA_DIR", os.path.join(PROJECT_ROOT, "data"))
SEED_DIR = os.getenv("INGEST_SEED_DIR", os.path.join(DATA_DIR, "seed"))
SOURCE_DIR = os.getenv("INGEST_SOURCE_DIR", os.path.join(DATA_DIR, "source"))
SUMMARY_FILENAME = os.getenv("INGEST_SUMMARY_FILENAME", "ingest-summary.json")
SKIPPED_FILENAME = os.getenv("INGEST_SKIPPED_FILENAME", "ingest-skipped.json")
LOG_DIR = os.getenv("INGEST_LOG_DIR", os.path.join(PROJECT_ROOT, "logs"))
