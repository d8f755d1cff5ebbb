"""In-memory enumeration store.

Holds each enumeration collection in a process-local dict keyed by id. Used
to embed enumerations without a database and as the store in tests.
"""

import asyncio
import copy
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Iterable, List, Mapping

from ....config.constants import EnumerationDefaults
from ....core.exceptions import RecordNotFound, ValidationError
from ..entities import EnumerationType
from ..utils import KeyNormalizer, log_store_operation

logger = logging.getLogger(__name__)

ID = EnumerationDefaults.ID_ATTRIBUTE


class InMemoryEnumerationRepository:
    """EnumerationStore implementation backed by dictionaries."""
    
    def __init__(self):
        self._tables: Dict[str, Dict[int, Dict[str, Any]]] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
    
    def _table(self, enumeration_type: EnumerationType) -> Dict[int, Dict[str, Any]]:
        return self._tables.setdefault(enumeration_type.collection_name, {})
    
    def seed(self, enumeration_type: EnumerationType, rows: Iterable[Mapping[str, Any]]) -> None:
        """Insert rows directly, bypassing validation. Meant for fixtures."""
        table = self._table(enumeration_type)
        for row in rows:
            table[row[ID]] = dict(row)
    
    @log_store_operation("list records")
    async def list(self, enumeration_type: EnumerationType) -> List[Mapping[str, Any]]:
        table = self._table(enumeration_type)
        return [dict(table[record_id]) for record_id in sorted(table)]
    
    @log_store_operation("create record")
    async def create(self, enumeration_type: EnumerationType, attributes: Mapping[str, Any]) -> Mapping[str, Any]:
        table = self._table(enumeration_type)
        row = dict(attributes)
        
        record_id = row.get(ID)
        if record_id is None:
            record_id = max(table, default=0) + 1
            row[ID] = record_id
        elif not KeyNormalizer.is_id(record_id):
            raise ValidationError(f"{ID} must be an integer, got: {record_id!r}")
        elif record_id in table:
            raise ValidationError(f"{ID} {record_id} has already been taken")
        
        self._validate(enumeration_type, row)
        table[record_id] = row
        return dict(row)
    
    @log_store_operation("update record")
    async def update(
        self,
        enumeration_type: EnumerationType,
        record_id: int,
        attributes: Mapping[str, Any]
    ) -> Mapping[str, Any]:
        table = self._table(enumeration_type)
        if record_id not in table:
            raise RecordNotFound(enumeration_type.name, record_id, ID)
        
        row = {**table[record_id], **{k: v for k, v in attributes.items() if k != ID}}
        self._validate(enumeration_type, row)
        table[record_id] = row
        return dict(row)
    
    @log_store_operation("delete record")
    async def delete(self, enumeration_type: EnumerationType, record_id: int) -> bool:
        return self._table(enumeration_type).pop(record_id, None) is not None
    
    @log_store_operation("delete undeclared records")
    async def delete_all_except(self, enumeration_type: EnumerationType, record_ids: Iterable[int]) -> int:
        table = self._table(enumeration_type)
        keep = set(record_ids)
        doomed = [record_id for record_id in table if record_id not in keep]
        for record_id in doomed:
            del table[record_id]
        return len(doomed)
    
    @asynccontextmanager
    async def transaction(self, enumeration_type: EnumerationType):
        """Exclusive section over one collection, restored on error."""
        name = enumeration_type.collection_name
        lock = self._locks.setdefault(name, asyncio.Lock())
        
        async with lock:
            backup = copy.deepcopy(self._table(enumeration_type))
            try:
                yield
            except BaseException:
                self._tables[name] = backup
                logger.warning(f"Rolled back {name} transaction")
                raise
    
    def _validate(self, enumeration_type: EnumerationType, row: Mapping[str, Any]) -> None:
        for attribute in enumeration_type.enumerator_attributes:
            if row.get(attribute) in (None, ""):
                raise ValidationError(f"{attribute} can't be blank")
        
        key = self._enumerator_key(enumeration_type, row)
        for other in self._table(enumeration_type).values():
            if other[ID] != row[ID] and self._enumerator_key(enumeration_type, other) == key:
                label = ", ".join(enumeration_type.enumerator_attributes)
                raise ValidationError(f"{label} has already been taken")
    
    @staticmethod
    def _enumerator_key(enumeration_type: EnumerationType, row: Mapping[str, Any]) -> tuple:
        return tuple(KeyNormalizer.index_value(row.get(name)) for name in enumeration_type.enumerator_attributes)
