"""Enumeration type declaration.

Declares which attribute(s) form the enumerator key, how lookups behave on
a miss and which backing collection holds the records.
"""

import re
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Tuple, Union

from ....config.constants import MissPolicy, EnumerationDefaults
from ....core.exceptions import ConfigurationError, RecordInvalid
from .record import EnumerationRecord


_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def _as_tuple(value: Union[str, Iterable[str], None]) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(value)


@dataclass(frozen=True)
class EnumerationType:
    """Schema-level declaration of a cached, enumerator-indexed record set."""
    
    name: str
    enumerator_attributes: Union[str, Tuple[str, ...]] = EnumerationDefaults.ENUMERATOR_ATTRIBUTE
    collection: Optional[str] = None
    cache: bool = True
    miss_policy: Optional[MissPolicy] = None
    safe_alias_attributes: Union[str, Tuple[str, ...]] = ()
    indexed_attributes: Union[str, Tuple[str, ...]] = ()
    incremental_updates: Optional[bool] = None
    modifications_permitted: bool = False
    
    def __post_init__(self):
        if not self.name:
            raise ConfigurationError("Enumeration type name must not be empty")
        
        enumerators = _as_tuple(self.enumerator_attributes)
        if not enumerators:
            raise ConfigurationError(f"{self.name}: at least one enumerator attribute is required")
        if EnumerationDefaults.ID_ATTRIBUTE in enumerators:
            raise ConfigurationError(f"{self.name}: 'id' is always indexed and cannot be an enumerator")
        object.__setattr__(self, "enumerator_attributes", enumerators)
        
        aliases = _as_tuple(self.safe_alias_attributes)
        unknown = [attribute for attribute in aliases if attribute not in enumerators]
        if unknown:
            raise ConfigurationError(f"{self.name}: safe aliases are only supported on enumerator attributes, got: {unknown}")
        if aliases and len(enumerators) > 1:
            raise ConfigurationError(f"{self.name}: safe aliases are not supported on composite enumerators")
        object.__setattr__(self, "safe_alias_attributes", aliases)
        
        indexed = tuple(a for a in _as_tuple(self.indexed_attributes) if a not in enumerators)
        object.__setattr__(self, "indexed_attributes", indexed)
        
        if self.miss_policy is not None:
            object.__setattr__(self, "miss_policy", MissPolicy(self.miss_policy))
    
    @property
    def is_multi_attribute(self) -> bool:
        """Whether the enumerator is a composite of several attributes."""
        return len(self.enumerator_attributes) > 1
    
    @property
    def enumerator_attribute(self) -> str:
        """The leading enumerator attribute."""
        return self.enumerator_attributes[0]
    
    @property
    def collection_name(self) -> str:
        """Backing collection (table) name, derived from the type name if unset."""
        if self.collection:
            return self.collection
        return _CAMEL_BOUNDARY.sub("_", self.name).lower() + "s"
    
    def build_record(self, data: Mapping[str, Any]) -> EnumerationRecord:
        """Build a frozen record from raw backing-store data."""
        if EnumerationDefaults.ID_ATTRIBUTE not in data or data[EnumerationDefaults.ID_ATTRIBUTE] is None:
            raise RecordInvalid(dict(data), [f"{self.name}: id can't be blank"])
        return EnumerationRecord(
            id=data[EnumerationDefaults.ID_ATTRIBUTE],
            attributes=data,
            enumeration=self.name,
            enumerator_attributes=self.enumerator_attributes,
        )
    
    def validate_attributes(self, attributes: Mapping[str, Any]) -> None:
        """Check that every enumerator attribute is present and non-blank."""
        errors = [
            f"{attribute} can't be blank"
            for attribute in self.enumerator_attributes
            if attributes.get(attribute) in (None, "")
        ]
        if errors:
            raise RecordInvalid(dict(attributes), errors)
