"""Enumerations feature for neo-enumerations.

Feature-First architecture for cached reference data:
- entities/: Records, enumeration type declarations and store protocols
- utils/: Key normalization, index building and store logging
- services/: Cache, lookup resolver, bootstrapper and registry
- repositories/: In-memory and AsyncPG backing stores
"""

# Core entities and protocols
from .entities import EnumerationRecord, EnumerationType, EnumerationStore

# Indexing
from .utils import KeyNormalizer, IndexBuilder, EnumerationIndex

# Services
from .services import (
    EnumerationCache,
    LookupResolver,
    Bootstrapper,
    EnumerationService,
    EnumerationRegistry,
)

# Backing stores
from .repositories import InMemoryEnumerationRepository, AsyncPGEnumerationRepository

__all__ = [
    # Entities
    "EnumerationRecord",
    "EnumerationType",
    "EnumerationStore",
    
    # Indexing
    "KeyNormalizer",
    "IndexBuilder",
    "EnumerationIndex",
    
    # Services
    "EnumerationCache",
    "LookupResolver",
    "Bootstrapper",
    "EnumerationService",
    "EnumerationRegistry",
    
    # Repositories
    "InMemoryEnumerationRepository",
    "AsyncPGEnumerationRepository",
]
