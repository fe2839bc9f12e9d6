"""Multi-source local event aggregation and deduplication pipeline."""

__version__ = "0.1.0"
