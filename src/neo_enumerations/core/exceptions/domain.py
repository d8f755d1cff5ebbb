"""Domain-specific exceptions for enumerations.

None of these are retried internally: they describe programmer or data
errors, not transient infrastructure failures.
"""

from typing import Any, List, Optional

from .base import NeoEnumerationsError


# Configuration Errors
class ConfigurationError(NeoEnumerationsError):
    """Raised when an enumeration type or settings are misconfigured."""
    pass


# Store Errors
class StoreError(NeoEnumerationsError):
    """Raised when the backing store fails to execute an operation."""
    pass


class ValidationError(NeoEnumerationsError):
    """Raised by a backing store when attributes fail validation."""
    pass


# Lookup Errors
class InvalidKeyType(NeoEnumerationsError, TypeError):
    """Raised when a lookup key has a type the resolver does not understand."""
    
    def __init__(self, key: Any, type_name: Optional[str] = None):
        self.key = key
        self.key_type = type(key).__name__
        self.type_name = type_name
        prefix = f"{type_name}: " if type_name else ""
        super().__init__(
            f"{prefix}lookup key should be an int, str, Enum member or tuple "
            f"of those but got a: {self.key_type}",
            details={"key": repr(key), "key_type": self.key_type, "enumeration": type_name},
        )


class RecordNotFound(NeoEnumerationsError, LookupError):
    """Raised on a lookup miss under the strict miss policies."""
    
    def __init__(self, type_name: str, key: Any, attribute: Optional[str] = None):
        self.type_name = type_name
        self.key = key
        self.attribute = attribute
        identified_by = f"{attribute} {key!r}" if attribute else f"({key!r})"
        super().__init__(
            f"Couldn't find a {type_name} identified by {identified_by}",
            details={"enumeration": type_name, "key": repr(key), "attribute": attribute},
        )


# Integrity Errors
class ModificationNotPermitted(NeoEnumerationsError):
    """Raised when enumeration data is mutated outside the permitted path."""
    
    def __init__(self, type_name: str, operation: Optional[str] = None):
        self.type_name = type_name
        self.operation = operation
        super().__init__(
            f"{type_name}: changes to enumeration records are not permitted",
            details={"enumeration": type_name, "operation": operation},
        )


class RecordInvalid(NeoEnumerationsError):
    """Raised when a record fails validation while being persisted."""
    
    def __init__(self, record: Any, errors: Optional[List[str]] = None):
        self.record = record
        self.errors = list(errors or [])
        reason = "; ".join(self.errors) if self.errors else "record is invalid"
        super().__init__(
            f"Validation failed: {reason}",
            details={"record": repr(record), "errors": self.errors},
        )


class IndexIntegrityViolation(NeoEnumerationsError):
    """Raised when two records collide on a unique index key."""
    
    def __init__(self, type_name: str, attribute: str, key: Any):
        self.type_name = type_name
        self.attribute = attribute
        self.key = key
        super().__init__(
            f"{type_name}: more than one record indexed by {attribute} {key!r}",
            details={"enumeration": type_name, "attribute": attribute, "key": repr(key)},
        )
