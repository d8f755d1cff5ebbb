"""Exceptions module for neo-enumerations.

This module provides the complete exception hierarchy for neo-enumerations.
"""

from .base import (
    NeoEnumerationsError,
    create_error_response,
)

from .domain import (
    # Configuration Errors
    ConfigurationError,
    
    # Store Errors
    StoreError,
    ValidationError,
    
    # Lookup Errors
    InvalidKeyType,
    RecordNotFound,
    
    # Integrity Errors
    ModificationNotPermitted,
    RecordInvalid,
    IndexIntegrityViolation,
)

__all__ = [
    "NeoEnumerationsError",
    "create_error_response",
    "ConfigurationError",
    "StoreError",
    "ValidationError",
    "InvalidKeyType",
    "RecordNotFound",
    "ModificationNotPermitted",
    "RecordInvalid",
    "IndexIntegrityViolation",
]
