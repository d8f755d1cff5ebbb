"""Protocol interfaces for the enumeration backing store.

The store supplies raw record data; record construction, indexing and
caching happen in the enumerations feature itself.
"""

from abc import abstractmethod
from typing import Any, AsyncContextManager, Iterable, List, Mapping, Protocol, runtime_checkable

from .enumeration_type import EnumerationType


@runtime_checkable
class EnumerationStore(Protocol):
    """Protocol for enumeration backing-store operations."""
    
    @abstractmethod
    async def list(self, enumeration_type: EnumerationType) -> List[Mapping[str, Any]]:
        """Return every record of the type, ordered by id."""
        ...
    
    @abstractmethod
    async def create(self, enumeration_type: EnumerationType, attributes: Mapping[str, Any]) -> Mapping[str, Any]:
        """Create a record and return its stored data."""
        ...
    
    @abstractmethod
    async def update(
        self,
        enumeration_type: EnumerationType,
        record_id: int,
        attributes: Mapping[str, Any]
    ) -> Mapping[str, Any]:
        """Overwrite the given attributes of a record and return its stored data."""
        ...
    
    @abstractmethod
    async def delete(self, enumeration_type: EnumerationType, record_id: int) -> bool:
        """Delete a record. Returns False if it did not exist."""
        ...
    
    @abstractmethod
    async def delete_all_except(self, enumeration_type: EnumerationType, record_ids: Iterable[int]) -> int:
        """Delete every record whose id is not listed. Returns the count deleted."""
        ...
    
    @abstractmethod
    def transaction(self, enumeration_type: EnumerationType) -> AsyncContextManager[None]:
        """Scoped transaction spanning several store calls."""
        ...
