"""Lookup resolver - the public ``[]``-style entry point of an enumeration.

Accepts ids, enumerator strings, Enum members, None and (for composite
enumerators) tuples of those, dispatches to the right cache index and
applies the configured miss policy.
"""

import logging
from typing import Any, Iterable, List, Optional

from ....config.constants import MissPolicy
from ....core.exceptions import InvalidKeyType, RecordNotFound
from ..entities import EnumerationRecord
from ..utils import KeyNormalizer
from .enumeration_cache import EnumerationCache

logger = logging.getLogger(__name__)


class LookupResolver:
    """Resolves heterogeneous keys against an EnumerationCache."""
    
    def __init__(self, cache: EnumerationCache, miss_policy: Optional[MissPolicy] = None):
        self.cache = cache
        self.enumeration_type = cache.enumeration_type
        self.miss_policy = MissPolicy(
            miss_policy
            or self.enumeration_type.miss_policy
            or cache.settings.default_miss_policy
        )
    
    async def resolve(self, key: Any) -> Optional[EnumerationRecord]:
        """Resolve a key, applying the miss policy when nothing matches.
        
        Raises:
            InvalidKeyType: the key type is not understood, whatever the policy
            RecordNotFound: no match and the policy requires raising
        """
        record = await self.find(key)
        if record is None:
            self._handle_miss(key)
        return record
    
    async def find(self, key: Any) -> Optional[EnumerationRecord]:
        """Resolve a key without applying the miss policy."""
        type_name = self.enumeration_type.name
        
        if key is None:
            return None
        if KeyNormalizer.is_id(key):
            return await self.cache.find_by_id(key)
        
        if self.enumeration_type.is_multi_attribute:
            components = (
                KeyNormalizer.normalize_composite(key, type_name)
                if KeyNormalizer.is_composite(key)
                else (KeyNormalizer.normalize(key, type_name),)
            )
            if not components or len(components) > len(self.enumeration_type.enumerator_attributes):
                raise InvalidKeyType(key, type_name)
            # Trailing components may be omitted: the first record matching the prefix wins
            return await self.cache.find_by_enumerator(components)
        
        if KeyNormalizer.is_composite(key):
            raise InvalidKeyType(key, type_name)
        
        value = KeyNormalizer.normalize(key, type_name)
        record = await self.cache.find_by_enumerator(value)
        if record is None and self.enumeration_type.safe_alias_attributes:
            record = await self.cache.find_by_alias(KeyNormalizer.safe_alias(value))
        return record
    
    # Original-style finders
    
    async def find_by_enumerator(self, key: Any) -> Optional[EnumerationRecord]:
        """Alias of find: never raises on a miss."""
        return await self.find(key)
    
    async def find_all_by_enumerator(self, keys: Iterable[Any]) -> List[EnumerationRecord]:
        """Records for every key that matches, in key order."""
        records = []
        for key in keys:
            record = await self.find(key)
            if record is not None and record not in records:
                records.append(record)
        return records
    
    async def find_all_by_enumerator_strict(self, keys: Iterable[Any]) -> List[EnumerationRecord]:
        """Records for every key. Raises RecordNotFound naming all missing keys."""
        records = []
        missing = []
        for key in keys:
            record = await self.find(key)
            if record is None:
                missing.append(key)
            elif record not in records:
                records.append(record)
        
        if missing:
            raise RecordNotFound(self.enumeration_type.name, missing if len(missing) > 1 else missing[0])
        return records
    
    async def includes(self, key: Any) -> bool:
        """Whether a record exists for the key."""
        return await self.find(key) is not None
    
    async def matches(self, record: EnumerationRecord, key: Any) -> bool:
        """Whether the key identifies the given record.
        
        Another record compares by type and id; any other key is resolved
        first, so ``matches(red, "red")`` and ``matches(red, 1)`` both hold.
        """
        if isinstance(key, EnumerationRecord):
            return key == record
        resolved = await self.find(key)
        return resolved is not None and resolved.id == record.id
    
    async def in_list(self, record: EnumerationRecord, *keys: Any) -> bool:
        """Whether any of the keys identifies the record."""
        for key in keys:
            if await self.matches(record, key):
                return True
        return False
    
    async def all(self):
        return await self.cache.all()
    
    async def count(self) -> int:
        return await self.cache.count()
    
    def _handle_miss(self, key: Any) -> None:
        if self.miss_policy is MissPolicy.SILENT:
            return
        if self.miss_policy is MissPolicy.RAISE_ONLY_FOR_TYPED_KEYS and key is None:
            return
        logger.debug(f"Lookup miss on {self.enumeration_type.name} for {key!r}")
        raise RecordNotFound(self.enumeration_type.name, key)
