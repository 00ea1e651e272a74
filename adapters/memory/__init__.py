"""In-memory record storage for demos and tests."""

from .source import InMemoryRecordSource, RecordNotFoundError, build_stats, sample_records

__all__ = ["InMemoryRecordSource", "RecordNotFoundError", "build_stats", "sample_records"]
