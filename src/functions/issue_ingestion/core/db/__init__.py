"""Database writers for issue records."""

from .batch_writer import BatchWriter
from .fallback_writer import FallbackWriter
from .store import IssueStore

__all__ = ["BatchWriter", "FallbackWriter", "IssueStore"]
