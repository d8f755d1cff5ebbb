"""Enumeration cache - the per-type owner of the snapshot and its indexes.

The current EnumerationIndex is held behind a single reference that is
swapped atomically, so readers see either the previous snapshot or a fully
built new one. Concurrent cold reads share one backing-store load, and no
lock is held while the store is queried.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from contextvars import ContextVar
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple, Union

from ....config.constants import CacheState, UpdateOperation
from ....config.settings import EnumerationSettings, get_settings
from ....core.exceptions import ConfigurationError, ModificationNotPermitted
from ..entities import EnumerationRecord, EnumerationStore, EnumerationType
from ..utils import EnumerationIndex, IndexBuilder, KeyNormalizer

logger = logging.getLogger(__name__)

# Caches bypassed or open for writes in the running task and the tasks it spawns
_uncached_caches: ContextVar[FrozenSet["EnumerationCache"]] = ContextVar(
    "neo_enumerations_uncached_caches", default=frozenset()
)
_permitted_caches: ContextVar[FrozenSet["EnumerationCache"]] = ContextVar(
    "neo_enumerations_permitted_caches", default=frozenset()
)


class EnumerationCache:
    """Process-local, multi-key cache over one enumeration type."""
    
    def __init__(self,
                 enumeration_type: EnumerationType,
                 store: EnumerationStore,
                 settings: Optional[EnumerationSettings] = None):
        self.enumeration_type = enumeration_type
        self.store = store
        self.settings = settings or get_settings()
        self.index_builder = IndexBuilder(enumeration_type)
        
        self._index: Optional[EnumerationIndex] = None
        self._generation = 0
        self._loading: Optional[asyncio.Task] = None
        self._write_lock = asyncio.Lock()
        self._stats = {
            "loads": 0,
            "hits": 0,
            "misses": 0,
            "invalidations": 0,
            "incremental_updates": 0,
        }
    
    # State
    
    @property
    def name(self) -> str:
        return self.enumeration_type.name
    
    @property
    def state(self) -> CacheState:
        """EMPTY until the first load, LOADED until the next invalidation."""
        return CacheState.LOADED if self._index is not None else CacheState.EMPTY
    
    @property
    def caching_enabled(self) -> bool:
        """Whether reads are served from (and published to) the cache."""
        return (
            self.settings.perform_caching
            and self.enumeration_type.cache
            and self not in _uncached_caches.get()
        )
    
    @property
    def modifications_permitted(self) -> bool:
        return self.enumeration_type.modifications_permitted or self in _permitted_caches.get()
    
    # Loading
    
    async def load(self) -> EnumerationIndex:
        """Return the published index, loading it from the store if EMPTY."""
        index = self._index
        if index is not None:
            return index
        
        if self._loading is None:
            self._loading = asyncio.ensure_future(self._load(self._generation))
        # One waiter being cancelled must not cancel the shared load
        return await asyncio.shield(self._loading)
    
    async def _load(self, generation: int) -> EnumerationIndex:
        task = asyncio.current_task()
        try:
            index = await self._fetch_index()
            if generation == self._generation:
                self._index = index
                self._stats["loads"] += 1
                logger.info(f"Loaded {self.name} enumeration cache: {len(index)} records")
            else:
                logger.debug(f"Discarded {self.name} load started before an invalidation")
            return index
        finally:
            if self._loading is task:
                self._loading = None
    
    async def _fetch_index(self) -> EnumerationIndex:
        rows = await self.store.list(self.enumeration_type)
        records = [self.enumeration_type.build_record(row) for row in rows]
        return self.index_builder.build(records)
    
    async def _current_index(self) -> EnumerationIndex:
        if not self.caching_enabled:
            return await self._fetch_index()
        return await self.load()
    
    # Reads
    
    async def all(self) -> Tuple[EnumerationRecord, ...]:
        """The current snapshot. The same tuple is returned until invalidation."""
        index = await self._current_index()
        return index.records
    
    async def count(self) -> int:
        index = await self._current_index()
        return len(index)
    
    async def find_by_id(self, record_id: int) -> Optional[EnumerationRecord]:
        """Look up a record by id."""
        index = await self._current_index()
        return self._record_lookup(index.by_id.get(record_id))
    
    async def find_by_enumerator(self, key: Any) -> Optional[EnumerationRecord]:
        """Look up by a normalized enumerator key (a prefix tuple for composite enumerators)."""
        index = await self._current_index()
        return self._record_lookup(index.by_enumerator.get(key))
    
    async def find_by_alias(self, alias: Optional[str]) -> Optional[EnumerationRecord]:
        """Look up by the symbol-insensitive alias of the enumerator."""
        if alias is None:
            return None
        index = await self._current_index()
        return self._record_lookup(index.by_alias.get(alias))
    
    async def find_by_attribute(
        self,
        name: str,
        key: Any
    ) -> Union[EnumerationRecord, Tuple[EnumerationRecord, ...], None]:
        """Look up by an indexed attribute.
        
        Returns a record for ``id`` and for the single enumerator attribute,
        a tuple of records for other indexed attributes, None on a miss.
        """
        value = KeyNormalizer.index_value(key)
        if name == "id":
            return await self.find_by_id(value)
        if not self.enumeration_type.is_multi_attribute and name == self.enumeration_type.enumerator_attribute:
            return await self.find_by_enumerator(value)
        
        records = await self.find_all_by_attribute(name, value)
        return records or None
    
    async def find_all_by_attribute(self, name: str, key: Any) -> Tuple[EnumerationRecord, ...]:
        """All records whose indexed attribute equals the key."""
        index = await self._current_index()
        value = KeyNormalizer.index_value(key)
        if name == "id":
            record = index.by_id.get(value)
            return self._records_lookup((record,) if record is not None else ())
        if name not in index.by_attribute:
            raise ConfigurationError(
                f"{self.name}: attribute {name!r} is not indexed",
                details={"enumeration": self.name, "attribute": name, "indexed": list(index.by_attribute)},
            )
        return self._records_lookup(index.by_attribute[name].get(value, ()))
    
    def _record_lookup(self, record: Optional[EnumerationRecord]) -> Optional[EnumerationRecord]:
        self._stats["hits" if record is not None else "misses"] += 1
        return record
    
    def _records_lookup(self, records: Tuple[EnumerationRecord, ...]) -> Tuple[EnumerationRecord, ...]:
        self._stats["hits" if records else "misses"] += 1
        return records
    
    # Invalidation
    
    async def invalidate(self) -> None:
        """Drop the snapshot and every index; the next read reloads."""
        async with self._write_lock:
            self._generation += 1
            self._index = None
            self._loading = None
            self._stats["invalidations"] += 1
        logger.info(f"Invalidated {self.name} enumeration cache")
    
    async def update_incremental(
        self,
        operation: Union[UpdateOperation, str],
        record: Union[EnumerationRecord, Mapping[str, Any]]
    ) -> None:
        """Patch the loaded snapshot for one pushed or deleted record.
        
        Observable results match an invalidate-and-reload against a store
        that reflects the change. An EMPTY cache is left EMPTY.
        """
        operation = UpdateOperation(operation)
        if not isinstance(record, EnumerationRecord):
            record = self.enumeration_type.build_record(record)
        
        async with self._write_lock:
            index = self._index
            if index is None:
                # A load already in flight may predate this write
                if self._loading is not None:
                    self._generation += 1
                    self._loading = None
                logger.debug(f"Skipped {operation.value} of {self.name} id={record.id}: cache is empty")
                return
            
            if operation is UpdateOperation.PUSH:
                self._index = self.index_builder.with_record(index, record)
            else:
                self._index = self.index_builder.without_record(index, record)
            self._stats["incremental_updates"] += 1
        
        logger.debug(f"Applied {operation.value} of {self.name} id={record.id} to cache")
    
    # Scoped switches
    
    @asynccontextmanager
    async def uncached(self):
        """Bypass the cache: reads go to the store and nothing is published."""
        token = _uncached_caches.set(_uncached_caches.get() | {self})
        try:
            yield self
        finally:
            _uncached_caches.reset(token)
    
    @asynccontextmanager
    async def permit_modifications(self):
        """Allow writes to this enumeration for the duration of the block."""
        token = _permitted_caches.set(_permitted_caches.get() | {self})
        try:
            yield self
        finally:
            _permitted_caches.reset(token)
    
    def ensure_modifiable(self, operation: str) -> None:
        """Raise ModificationNotPermitted unless writes are currently allowed."""
        if not self.modifications_permitted:
            logger.error(f"Rejected {operation} on {self.name}: modifications are not permitted")
            raise ModificationNotPermitted(self.name, operation)
    
    # Diagnostics
    
    def stats(self) -> Dict[str, Any]:
        """Cache statistics."""
        index = self._index
        return {
            "enumeration": self.name,
            "state": self.state.value,
            "records": len(index) if index is not None else 0,
            "caching_enabled": self.caching_enabled,
            **self._stats,
        }
