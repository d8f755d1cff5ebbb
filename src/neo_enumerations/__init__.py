"""Neo-Enumerations - cached reference data for NeoMultiTenant services.

Finite, rarely-changing record sets (colors, countries, status codes) are
declared as enumerations and served from a process-local, multi-key cache
in front of a backing store.
"""

from .__version__ import __version__

from .config import (
    EnumerationSettings,
    get_settings,
    setup_logging,
    MissPolicy,
    UpdateOperation,
    CacheState,
)

from .core.exceptions import (
    NeoEnumerationsError,
    ConfigurationError,
    StoreError,
    ValidationError,
    InvalidKeyType,
    RecordNotFound,
    ModificationNotPermitted,
    RecordInvalid,
    IndexIntegrityViolation,
    create_error_response,
)

from .features.enumerations import (
    EnumerationRecord,
    EnumerationType,
    EnumerationStore,
    KeyNormalizer,
    IndexBuilder,
    EnumerationIndex,
    EnumerationCache,
    LookupResolver,
    Bootstrapper,
    EnumerationService,
    EnumerationRegistry,
    InMemoryEnumerationRepository,
    AsyncPGEnumerationRepository,
)

__all__ = [
    "__version__",
    
    # Configuration
    "EnumerationSettings",
    "get_settings",
    "setup_logging",
    "MissPolicy",
    "UpdateOperation",
    "CacheState",
    
    # Exceptions
    "NeoEnumerationsError",
    "ConfigurationError",
    "StoreError",
    "ValidationError",
    "InvalidKeyType",
    "RecordNotFound",
    "ModificationNotPermitted",
    "RecordInvalid",
    "IndexIntegrityViolation",
    "create_error_response",
    
    # Enumerations
    "EnumerationRecord",
    "EnumerationType",
    "EnumerationStore",
    "KeyNormalizer",
    "IndexBuilder",
    "EnumerationIndex",
    "EnumerationCache",
    "LookupResolver",
    "Bootstrapper",
    "EnumerationService",
    "EnumerationRegistry",
    "InMemoryEnumerationRepository",
    "AsyncPGEnumerationRepository",
]
