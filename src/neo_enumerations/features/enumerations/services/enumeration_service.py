"""Enumeration service and registry.

EnumerationService wires the cache, resolver and bootstrapper of one
enumeration type and owns the guarded single-record write path.
EnumerationRegistry gives explicit, per-process lifecycle to a set of
services keyed by enumeration type name.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from ....config.constants import EnumerationDefaults, MissPolicy, UpdateOperation
from ....config.settings import EnumerationSettings, get_settings
from ....core.exceptions import ConfigurationError, RecordInvalid, RecordNotFound, ValidationError
from ..entities import EnumerationRecord, EnumerationStore, EnumerationType
from ..utils import KeyNormalizer
from .bootstrapper import Bootstrapper
from .enumeration_cache import EnumerationCache
from .lookup_resolver import LookupResolver

logger = logging.getLogger(__name__)


class EnumerationService:
    """Facade over one enumeration type."""
    
    def __init__(self,
                 enumeration_type: EnumerationType,
                 store: EnumerationStore,
                 settings: Optional[EnumerationSettings] = None,
                 miss_policy: Optional[MissPolicy] = None):
        self.enumeration_type = enumeration_type
        self.store = store
        self.settings = settings or get_settings()
        self.cache = EnumerationCache(enumeration_type, store, self.settings)
        self.resolver = LookupResolver(self.cache, miss_policy)
        self.bootstrapper = Bootstrapper(self.cache)
    
    @property
    def name(self) -> str:
        return self.enumeration_type.name
    
    @property
    def incremental_updates(self) -> bool:
        if self.enumeration_type.incremental_updates is not None:
            return self.enumeration_type.incremental_updates
        return self.settings.prefer_incremental_updates
    
    # Reads
    
    async def resolve(self, key: Any) -> Optional[EnumerationRecord]:
        return await self.resolver.resolve(key)
    
    async def find(self, key: Any) -> Optional[EnumerationRecord]:
        return await self.resolver.find(key)
    
    async def all(self) -> Tuple[EnumerationRecord, ...]:
        return await self.cache.all()
    
    async def includes(self, key: Any) -> bool:
        return await self.resolver.includes(key)
    
    async def matches(self, record: EnumerationRecord, key: Any) -> bool:
        return await self.resolver.matches(record, key)
    
    # Cache maintenance
    
    async def invalidate(self) -> None:
        await self.cache.invalidate()
    
    async def update_incremental(
        self,
        operation: Union[UpdateOperation, str],
        record: Union[EnumerationRecord, Mapping[str, Any]]
    ) -> None:
        await self.cache.update_incremental(operation, record)
    
    async def bootstrap(self, declared: Sequence[Mapping[str, Any]]) -> List[EnumerationRecord]:
        """Administrative reconciliation of the backing store, see Bootstrapper."""
        return await self.bootstrapper.bootstrap(declared)
    
    def permit_modifications(self):
        """Async context manager allowing writes for the duration of the block."""
        return self.cache.permit_modifications()
    
    # Guarded write path
    
    async def create(self, attributes: Mapping[str, Any]) -> EnumerationRecord:
        """Create a record in the store and reflect it in the cache."""
        self.cache.ensure_modifiable("create")
        self.enumeration_type.validate_attributes(attributes)
        await self._ensure_unique(attributes, attributes.get(EnumerationDefaults.ID_ATTRIBUTE))
        
        data = await self._persist(attributes, self.store.create(self.enumeration_type, dict(attributes)))
        record = self.enumeration_type.build_record(data)
        logger.info(f"Created {self.name} id={record.id}")
        
        await self._after_write(UpdateOperation.PUSH, record)
        return record
    
    async def update(self, record_id: int, attributes: Mapping[str, Any]) -> EnumerationRecord:
        """Update a record in the store and reflect it in the cache."""
        self.cache.ensure_modifiable("update")
        current = await self._require(record_id)
        
        merged = {**current.attributes, **attributes}
        self.enumeration_type.validate_attributes(merged)
        await self._ensure_unique(merged, record_id)
        
        values = {k: v for k, v in attributes.items() if k != EnumerationDefaults.ID_ATTRIBUTE}
        data = await self._persist(merged, self.store.update(self.enumeration_type, record_id, values))
        record = self.enumeration_type.build_record(data)
        logger.info(f"Updated {self.name} id={record.id}")
        
        await self._after_write(UpdateOperation.PUSH, record)
        return record
    
    async def delete(self, record_id: int) -> bool:
        """Delete a record from the store and from the cache."""
        self.cache.ensure_modifiable("delete")
        current = await self._require(record_id)
        
        deleted = await self.store.delete(self.enumeration_type, record_id)
        if deleted:
            logger.info(f"Deleted {self.name} id={record_id}")
            await self._after_write(UpdateOperation.DELETE, current)
        return deleted
    
    async def _require(self, record_id: int) -> EnumerationRecord:
        record = await self.cache.find_by_id(record_id)
        if record is None:
            raise RecordNotFound(self.name, record_id, EnumerationDefaults.ID_ATTRIBUTE)
        return record
    
    async def _ensure_unique(self, attributes: Mapping[str, Any], record_id: Optional[int]) -> None:
        key = self.cache.index_builder.enumerator_key(
            self.enumeration_type.build_record({**attributes, EnumerationDefaults.ID_ATTRIBUTE: record_id or 0})
        )
        existing = await self.cache.find_by_enumerator(key)
        if existing is not None and existing.id != record_id:
            attribute = ", ".join(self.enumeration_type.enumerator_attributes)
            raise RecordInvalid(dict(attributes), [f"{attribute} has already been taken"])
        
        # Safe aliases are unique keys as well
        for name in self.enumeration_type.safe_alias_attributes:
            alias = KeyNormalizer.safe_alias(KeyNormalizer.index_value(attributes.get(name)))
            existing = await self.cache.find_by_alias(alias)
            if existing is not None and existing.id != record_id:
                raise RecordInvalid(dict(attributes), [f"{name} {attributes.get(name)!r} clashes with {existing.get(name)!r}"])
    
    async def _persist(self, attributes: Mapping[str, Any], operation) -> Mapping[str, Any]:
        try:
            return await operation
        except ValidationError as e:
            raise RecordInvalid(dict(attributes), [e.message]) from e
    
    async def _after_write(self, operation: UpdateOperation, record: EnumerationRecord) -> None:
        if self.incremental_updates:
            await self.cache.update_incremental(operation, record)
        else:
            await self.cache.invalidate()


class EnumerationRegistry:
    """Per-process registry of enumeration services keyed by type name."""
    
    def __init__(self, settings: Optional[EnumerationSettings] = None):
        self.settings = settings or get_settings()
        self._services: Dict[str, EnumerationService] = {}
    
    def register(self,
                 enumeration_type: EnumerationType,
                 store: EnumerationStore,
                 miss_policy: Optional[MissPolicy] = None) -> EnumerationService:
        """Register an enumeration type. Names must be unique."""
        if enumeration_type.name in self._services:
            raise ConfigurationError(f"Enumeration already registered: {enumeration_type.name}")
        
        service = EnumerationService(enumeration_type, store, self.settings, miss_policy)
        self._services[enumeration_type.name] = service
        logger.debug(f"Registered enumeration {enumeration_type.name}")
        return service
    
    def unregister(self, name: str) -> None:
        self._services.pop(name, None)
    
    def get(self, name: Union[str, EnumerationType]) -> EnumerationService:
        key = name.name if isinstance(name, EnumerationType) else name
        try:
            return self._services[key]
        except KeyError:
            raise ConfigurationError(f"Unknown enumeration: {key}") from None
    
    def __contains__(self, name: str) -> bool:
        return name in self._services
    
    @property
    def names(self) -> List[str]:
        return list(self._services)
    
    async def resolve(self, name: Union[str, EnumerationType], key: Any) -> Optional[EnumerationRecord]:
        return await self.get(name).resolve(key)
    
    async def all(self, name: Union[str, EnumerationType]) -> Tuple[EnumerationRecord, ...]:
        return await self.get(name).all()
    
    async def invalidate(self, name: Union[str, EnumerationType]) -> None:
        await self.get(name).invalidate()
    
    async def invalidate_all(self) -> None:
        for service in self._services.values():
            await service.invalidate()
    
    async def update_incremental(
        self,
        name: Union[str, EnumerationType],
        operation: Union[UpdateOperation, str],
        record: Union[EnumerationRecord, Mapping[str, Any]]
    ) -> None:
        await self.get(name).update_incremental(operation, record)
    
    async def bootstrap(
        self,
        name: Union[str, EnumerationType],
        declared: Sequence[Mapping[str, Any]]
    ) -> List[EnumerationRecord]:
        return await self.get(name).bootstrap(declared)
    
    def stats(self) -> List[Dict[str, Any]]:
        return [service.cache.stats() for service in self._services.values()]
