"""Lithuanian statute corpus ingestion from the TAR open-data register."""

__version__ = "0.1.0"
