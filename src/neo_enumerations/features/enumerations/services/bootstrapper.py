"""Bootstrapper - reconciles the backing store with a declared record list.

The sync process is:
* existing records whose id is not declared are deleted
* existing records with a declared id are overwritten with the declared
  attributes, except ``defaults`` which only fill blank values
* declared records that don't exist yet are created

The whole reconciliation runs inside one store transaction with the cache
bypassed, and the cache is invalidated afterwards.
"""

import asyncio
import logging
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from ....config.constants import EnumerationDefaults
from ....core.exceptions import RecordInvalid, ValidationError
from ..entities import EnumerationRecord
from ..utils import KeyNormalizer
from .enumeration_cache import EnumerationCache

logger = logging.getLogger(__name__)

ID = EnumerationDefaults.ID_ATTRIBUTE
DEFAULTS = EnumerationDefaults.DEFAULTS_KEY


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class Bootstrapper:
    """Synchronizes one enumeration's backing store with declared records."""
    
    def __init__(self, cache: EnumerationCache):
        self.cache = cache
        self.enumeration_type = cache.enumeration_type
        self.store = cache.store
        self._lock = asyncio.Lock()
    
    async def bootstrap(self, declared: Sequence[Mapping[str, Any]]) -> List[EnumerationRecord]:
        """Make the store hold exactly the declared records.
        
        Args:
            declared: Attribute mappings, each with an ``id`` and optionally a
                ``defaults`` mapping of attributes applied only when blank
        
        Returns:
            The reconciled records, in declaration order
        
        Raises:
            RecordInvalid: a declared record is invalid or fails to save
        """
        prepared = self._prepare(declared)
        ids = [attributes[ID] for attributes, _ in prepared]
        type_name = self.enumeration_type.name
        
        logger.info(f"Bootstrapping {type_name} with {len(prepared)} records")
        
        try:
            async with self._lock:
                async with self.cache.permit_modifications(), self.cache.uncached():
                    async with self.store.transaction(self.enumeration_type):
                        deleted = await self.store.delete_all_except(self.enumeration_type, ids)
                        if deleted:
                            logger.info(f"Deleted {deleted} undeclared {type_name} records")
                        
                        existing = {row[ID]: row for row in await self.store.list(self.enumeration_type)}
                        
                        records = []
                        for attributes, defaults in prepared:
                            data = await self._save(attributes, defaults, existing.get(attributes[ID]))
                            records.append(self.enumeration_type.build_record(data))
        finally:
            await self.cache.invalidate()
        
        logger.info(f"Bootstrapped {type_name}: {len(records)} records")
        return records
    
    def _prepare(self, declared: Sequence[Mapping[str, Any]]) -> List[Tuple[Dict[str, Any], Dict[str, Any]]]:
        """Split out defaults and validate the declared set before any write."""
        prepared = []
        seen_ids = set()
        seen_keys = set()
        seen_aliases: Dict[str, Any] = {}
        
        for entry in declared:
            attributes = dict(entry)
            defaults = dict(attributes.pop(DEFAULTS, None) or {})
            
            record_id = attributes.get(ID)
            if not KeyNormalizer.is_id(record_id):
                raise RecordInvalid(dict(entry), [f"{ID} must be an integer, got: {record_id!r}"])
            if record_id in seen_ids:
                raise RecordInvalid(dict(entry), [f"{ID} {record_id} is declared more than once"])
            seen_ids.add(record_id)
            
            merged = {**defaults, **attributes}
            self.enumeration_type.validate_attributes(merged)
            
            key = tuple(
                KeyNormalizer.index_value(merged.get(name))
                for name in self.enumeration_type.enumerator_attributes
            )
            if key in seen_keys:
                raise RecordInvalid(dict(entry), [f"{', '.join(self.enumeration_type.enumerator_attributes)} has already been taken"])
            seen_keys.add(key)
            
            for name in self.enumeration_type.safe_alias_attributes:
                alias = KeyNormalizer.safe_alias(KeyNormalizer.index_value(merged.get(name)))
                if alias is None:
                    continue
                if alias in seen_aliases:
                    raise RecordInvalid(dict(entry), [f"{name} clashes with {seen_aliases[alias]!r}"])
                seen_aliases[alias] = merged.get(name)
            
            prepared.append((attributes, defaults))
        
        return prepared
    
    async def _save(
        self,
        attributes: Dict[str, Any],
        defaults: Dict[str, Any],
        current: Any
    ) -> Mapping[str, Any]:
        record_id = attributes[ID]
        try:
            if current is not None:
                values = {k: v for k, v in attributes.items() if k != ID}
                for name, value in defaults.items():
                    if _is_blank(current.get(name)):
                        values[name] = value
                return await self.store.update(self.enumeration_type, record_id, values)
            
            return await self.store.create(self.enumeration_type, {**defaults, **attributes})
        
        except ValidationError as e:
            logger.error(f"Failed to bootstrap {self.enumeration_type.name} id={record_id}: {e.message}")
            raise RecordInvalid({**defaults, **attributes}, [e.message]) from e
