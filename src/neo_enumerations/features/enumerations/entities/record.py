"""Enumeration record domain entity.

A record is frozen once constructed: the cache hands the same instance to
every caller until the next invalidation, so in-place mutation is refused.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from ....config.constants import EnumerationDefaults


@dataclass(frozen=True)
class EnumerationRecord:
    """Immutable enumeration record with an id and named attribute values."""
    
    id: int
    attributes: Mapping[str, Any]
    enumeration: str = ""
    enumerator_attributes: Tuple[str, ...] = field(
        default=(EnumerationDefaults.ENUMERATOR_ATTRIBUTE,), compare=False, repr=False
    )
    
    def __post_init__(self):
        if isinstance(self.id, bool) or not isinstance(self.id, int):
            raise TypeError(f"Record id must be an int, got: {type(self.id).__name__}")
        values = {k: v for k, v in dict(self.attributes).items() if k != EnumerationDefaults.ID_ATTRIBUTE}
        object.__setattr__(self, "attributes", MappingProxyType(values))
        object.__setattr__(self, "enumerator_attributes", tuple(self.enumerator_attributes))
    
    def __hash__(self) -> int:
        return hash((self.enumeration, self.id))
    
    def __getitem__(self, name: str) -> Any:
        if name == EnumerationDefaults.ID_ATTRIBUTE:
            return self.id
        return self.attributes[name]
    
    def __getattr__(self, name: str) -> Any:
        # Only called for names that are not dataclass fields
        if name.startswith("_"):
            raise AttributeError(name)
        attributes = self.__dict__.get("attributes", {})
        if name in attributes:
            return attributes[name]
        raise AttributeError(f"{self.enumeration or 'EnumerationRecord'} has no attribute {name!r}")
    
    def get(self, name: str, default: Any = None) -> Any:
        """Get an attribute value, falling back to default."""
        if name == EnumerationDefaults.ID_ATTRIBUTE:
            return self.id
        return self.attributes.get(name, default)
    
    @property
    def enumerator(self) -> Union[Any, Tuple[Any, ...]]:
        """Value of the enumerator attribute, or a tuple for composite enumerators."""
        if len(self.enumerator_attributes) == 1:
            return self.attributes.get(self.enumerator_attributes[0])
        return tuple(self.attributes.get(name) for name in self.enumerator_attributes)
    
    def to_dict(self) -> Dict[str, Any]:
        """Plain dictionary with the id and every attribute."""
        return {EnumerationDefaults.ID_ATTRIBUTE: self.id, **self.attributes}
    
    def __str__(self) -> str:
        enumerator = self.enumerator
        if isinstance(enumerator, tuple):
            return " ".join("" if value is None else str(value) for value in enumerator)
        return "" if enumerator is None else str(enumerator)
