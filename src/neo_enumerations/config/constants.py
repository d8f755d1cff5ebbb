"""Constants and enums for neo-enumerations.

This module defines the constants and enums shared by the settings layer
and the enumerations feature.
"""

from enum import Enum
from typing import Final


class MissPolicy(str, Enum):
    """Behaviour of a lookup whose key matches no record."""
    
    RAISE = "raise"                                          # Always raise RecordNotFound
    RAISE_ONLY_FOR_TYPED_KEYS = "raise_only_for_typed_keys"  # None is a silent miss
    SILENT = "silent"                                        # Never raise, return None


class UpdateOperation(str, Enum):
    """Single-record patch operations applied to a loaded cache."""
    
    PUSH = "push"
    DELETE = "delete"


class CacheState(str, Enum):
    """Lifecycle state of an enumeration cache."""
    
    EMPTY = "empty"
    LOADED = "loaded"


class EnumerationDefaults:
    """Defaults used when an enumeration type does not override them."""
    
    ENUMERATOR_ATTRIBUTE: Final[str] = "name"
    ID_ATTRIBUTE: Final[str] = "id"
    DEFAULTS_KEY: Final[str] = "defaults"
    ALIAS_SEPARATOR: Final[str] = "_"
    DATABASE_SCHEMA: Final[str] = "public"
