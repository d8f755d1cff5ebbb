"""Enumeration utilities - key normalization, indexing and store logging."""

from .normalization import KeyNormalizer, NormalizedKey
from .indexing import EnumerationIndex, IndexBuilder
from .error_handling import log_store_operation

__all__ = [
    "KeyNormalizer",
    "NormalizedKey",
    "EnumerationIndex",
    "IndexBuilder",
    "log_store_operation",
]
