"""Enumeration backing stores - in-memory and AsyncPG implementations."""

from .memory_repository import InMemoryEnumerationRepository
from .asyncpg_repository import AsyncPGEnumerationRepository

__all__ = [
    "InMemoryEnumerationRepository",
    "AsyncPGEnumerationRepository",
]
