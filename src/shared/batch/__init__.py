"""Shared batch processing infrastructure.

Provides generic utilities for batch write pipelines:
- BackoffPolicy: Bounded exponential backoff with an optional deadline
- chunked: Contiguous, order-preserving fixed-size groups

Usage:
    from src.shared.batch import BackoffPolicy, chunked
"""

from .retry import BackoffPolicy
from .chunking import chunked

__all__ = [
    "BackoffPolicy",
    "chunked",
]
