"""Lookup key normalization.

Maps every accepted key representation onto the exact value used as an
index key: ints are ids, strings pass through, Enum members stand in for
symbols and are reduced to their string form.
"""

import re
from enum import Enum
from typing import Any, Optional, Tuple, Union

from ....config.constants import EnumerationDefaults
from ....core.exceptions import InvalidKeyType


NormalizedKey = Union[int, str]

_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]+")


class KeyNormalizer:
    """Canonicalizes lookup keys and attribute values for indexing."""
    
    @staticmethod
    def is_id(key: Any) -> bool:
        """Whether the key addresses the id index."""
        return isinstance(key, int) and not isinstance(key, bool)
    
    @staticmethod
    def is_composite(key: Any) -> bool:
        """Whether the key is a tuple/list of components."""
        return isinstance(key, (tuple, list))
    
    @classmethod
    def normalize(cls, key: Any, type_name: Optional[str] = None) -> NormalizedKey:
        """Normalize a scalar key. Raises InvalidKeyType for anything else."""
        if isinstance(key, bool):
            raise InvalidKeyType(key, type_name)
        if isinstance(key, Enum):
            return cls._symbol_to_string(key)
        if isinstance(key, (int, str)):
            return key
        raise InvalidKeyType(key, type_name)
    
    @classmethod
    def normalize_composite(cls, key: Any, type_name: Optional[str] = None) -> Tuple[NormalizedKey, ...]:
        """Normalize each component of a tuple/list key."""
        if not cls.is_composite(key):
            raise InvalidKeyType(key, type_name)
        return tuple(cls.normalize(component, type_name) for component in key)
    
    @classmethod
    def index_value(cls, value: Any) -> Any:
        """Normalize a stored attribute value into its index key."""
        if isinstance(value, Enum):
            return cls._symbol_to_string(value)
        return value
    
    @staticmethod
    def safe_alias(value: Any) -> Optional[str]:
        """Symbol-insensitive alias: lowercase, non-alphanumeric runs become '_'.
        
        ``"Hot-Red!"`` becomes ``"hot_red"``.
        """
        if not isinstance(value, str):
            return None
        alias = _NON_ALPHANUMERIC.sub(EnumerationDefaults.ALIAS_SEPARATOR, value.lower())
        alias = alias.strip(EnumerationDefaults.ALIAS_SEPARATOR)
        return alias or None
    
    @staticmethod
    def _symbol_to_string(member: Enum) -> str:
        # str-valued members (StrEnum and friends) use their value, others their name
        return member.value if isinstance(member.value, str) else member.name
