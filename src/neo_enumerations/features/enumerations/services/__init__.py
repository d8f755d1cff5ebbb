"""Enumeration services - cache, lookup, bootstrap and registry."""

from .enumeration_cache import EnumerationCache
from .lookup_resolver import LookupResolver
from .bootstrapper import Bootstrapper
from .enumeration_service import EnumerationService, EnumerationRegistry

__all__ = [
    "EnumerationCache",
    "LookupResolver",
    "Bootstrapper",
    "EnumerationService",
    "EnumerationRegistry",
]
