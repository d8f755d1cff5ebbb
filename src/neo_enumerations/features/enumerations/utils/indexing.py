"""Index construction for enumeration snapshots.

An EnumerationIndex is never mutated once built: a reload builds a new one
and the single-record patch path derives a modified copy.
"""

import logging
from bisect import bisect_left
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ....core.exceptions import IndexIntegrityViolation
from ..entities import EnumerationRecord, EnumerationType
from .normalization import KeyNormalizer


logger = logging.getLogger(__name__)

RecordTuple = Tuple[EnumerationRecord, ...]


@dataclass(frozen=True)
class EnumerationIndex:
    """Immutable snapshot of an enumeration plus all of its indexes.
    
    Attributes:
        records: Every record, ordered by id
        by_id: id -> record
        by_enumerator: enumerator key -> record. Keys are scalars for single
            attribute enumerations and every prefix tuple for composite ones.
        by_alias: safe alias -> record
        by_attribute: attribute -> value -> records, for each enumerator
            component and secondary indexed attribute
    """
    
    records: RecordTuple
    by_id: Mapping[int, EnumerationRecord]
    by_enumerator: Mapping[Any, EnumerationRecord]
    by_alias: Mapping[str, EnumerationRecord]
    by_attribute: Mapping[str, Mapping[Any, RecordTuple]]
    
    def __len__(self) -> int:
        return len(self.records)


class IndexBuilder:
    """Builds and patches EnumerationIndex instances for one enumeration type."""
    
    def __init__(self, enumeration_type: EnumerationType):
        self.enumeration_type = enumeration_type
        self._attributes = enumeration_type.enumerator_attributes + enumeration_type.indexed_attributes
    
    # Full build
    
    def build(self, records: Iterable[EnumerationRecord]) -> EnumerationIndex:
        """Build every index in one pass over the records."""
        ordered = tuple(records)
        by_id: Dict[int, EnumerationRecord] = {}
        by_enumerator: Dict[Any, EnumerationRecord] = {}
        by_alias: Dict[str, EnumerationRecord] = {}
        by_attribute: Dict[str, Dict[Any, List[EnumerationRecord]]] = {name: {} for name in self._attributes}
        
        for record in ordered:
            if record.id in by_id:
                raise IndexIntegrityViolation(self.enumeration_type.name, "id", record.id)
            by_id[record.id] = record
            
            self._add_enumerator_keys(by_enumerator, record)
            self._add_alias(by_alias, record)
            
            for name in self._attributes:
                value = KeyNormalizer.index_value(record.get(name))
                by_attribute[name].setdefault(value, []).append(record)
        
        logger.debug(f"Built indexes for {self.enumeration_type.name}: {len(ordered)} records")
        return self._freeze(ordered, by_id, by_enumerator, by_alias, by_attribute)
    
    # Single-record patches
    
    def with_record(self, index: EnumerationIndex, record: EnumerationRecord) -> EnumerationIndex:
        """Derive an index that contains the record, replacing any record with the same id."""
        if record.id in index.by_id:
            index = self.without_record(index, index.by_id[record.id])
        
        ids = [existing.id for existing in index.records]
        position = bisect_left(ids, record.id)
        records = index.records[:position] + (record,) + index.records[position:]
        
        by_id = dict(index.by_id)
        by_id[record.id] = record
        
        by_enumerator = dict(index.by_enumerator)
        self._add_enumerator_keys(by_enumerator, record, records)
        
        by_alias = dict(index.by_alias)
        self._add_alias(by_alias, record)
        
        by_attribute = {name: {k: list(v) for k, v in values.items()} for name, values in index.by_attribute.items()}
        for name in self._attributes:
            value = KeyNormalizer.index_value(record.get(name))
            bucket = by_attribute[name].setdefault(value, [])
            bucket.insert(self._position_in(bucket, record), record)
        
        return self._freeze(records, by_id, by_enumerator, by_alias, by_attribute)
    
    def without_record(self, index: EnumerationIndex, record: EnumerationRecord) -> EnumerationIndex:
        """Derive an index without the record with the given record's id."""
        existing = index.by_id.get(record.id)
        if existing is None:
            return index
        
        records = tuple(r for r in index.records if r.id != existing.id)
        by_id = {k: v for k, v in index.by_id.items() if k != existing.id}
        by_alias = {k: v for k, v in index.by_alias.items() if v.id != existing.id}
        
        by_enumerator = {}
        orphaned = []
        for key, value in index.by_enumerator.items():
            if value.id == existing.id:
                orphaned.append(key)
            else:
                by_enumerator[key] = value
        
        # Prefix keys owned by the removed record fall to the next match in order
        if self.enumeration_type.is_multi_attribute:
            for key in orphaned:
                successor = self._first_prefix_match(records, key)
                if successor is not None:
                    by_enumerator[key] = successor
        
        by_attribute = {}
        for name, values in index.by_attribute.items():
            by_attribute[name] = {}
            for value, bucket in values.items():
                remaining = [r for r in bucket if r.id != existing.id]
                if remaining:
                    by_attribute[name][value] = remaining
        
        return self._freeze(records, by_id, by_enumerator, by_alias, by_attribute)
    
    # Key helpers
    
    def enumerator_key(self, record: EnumerationRecord) -> Any:
        """Full enumerator key of a record."""
        values = tuple(KeyNormalizer.index_value(record.get(name)) for name in self.enumeration_type.enumerator_attributes)
        return values if self.enumeration_type.is_multi_attribute else values[0]
    
    def _add_enumerator_keys(
        self,
        by_enumerator: Dict[Any, EnumerationRecord],
        record: EnumerationRecord,
        ordered: Optional[Sequence[EnumerationRecord]] = None
    ) -> None:
        key = self.enumerator_key(record)
        if key is None:
            return
        
        # A full-length key is only ever owned by a record with that exact key
        existing = by_enumerator.get(key)
        if existing is not None and existing.id != record.id:
            raise IndexIntegrityViolation(
                self.enumeration_type.name, self._enumerator_label(), key
            )
        
        if not self.enumeration_type.is_multi_attribute:
            by_enumerator[key] = record
            return
        
        # Every leading prefix maps to the first record in snapshot order
        for length in range(1, len(key) + 1):
            prefix = key[:length]
            current = by_enumerator.get(prefix)
            if current is None or (ordered is not None and self._precedes(record, current, ordered)):
                by_enumerator[prefix] = record
    
    def _add_alias(self, by_alias: Dict[str, EnumerationRecord], record: EnumerationRecord) -> None:
        for name in self.enumeration_type.safe_alias_attributes:
            alias = KeyNormalizer.safe_alias(record.get(name))
            if alias is None:
                continue
            existing = by_alias.get(alias)
            if existing is not None and existing.id != record.id:
                raise IndexIntegrityViolation(self.enumeration_type.name, f"{name} (alias)", alias)
            by_alias[alias] = record
    
    def _first_prefix_match(self, records: Sequence[EnumerationRecord], prefix: Tuple[Any, ...]) -> Optional[EnumerationRecord]:
        for candidate in records:
            if self.enumerator_key(candidate)[:len(prefix)] == prefix:
                return candidate
        return None
    
    @staticmethod
    def _precedes(record: EnumerationRecord, other: EnumerationRecord, ordered: Sequence[EnumerationRecord]) -> bool:
        positions = {r.id: i for i, r in enumerate(ordered)}
        return positions.get(record.id, len(ordered)) < positions.get(other.id, len(ordered))
    
    @staticmethod
    def _position_in(bucket: List[EnumerationRecord], record: EnumerationRecord) -> int:
        return bisect_left([r.id for r in bucket], record.id)
    
    def _enumerator_label(self) -> str:
        return ", ".join(self.enumeration_type.enumerator_attributes)
    
    @staticmethod
    def _freeze(
        records: RecordTuple,
        by_id: Dict[int, EnumerationRecord],
        by_enumerator: Dict[Any, EnumerationRecord],
        by_alias: Dict[str, EnumerationRecord],
        by_attribute: Dict[str, Dict[Any, List[EnumerationRecord]]]
    ) -> EnumerationIndex:
        return EnumerationIndex(
            records=records,
            by_id=MappingProxyType(by_id),
            by_enumerator=MappingProxyType(by_enumerator),
            by_alias=MappingProxyType(by_alias),
            by_attribute=MappingProxyType({
                name: MappingProxyType({value: tuple(bucket) for value, bucket in values.items()})
                for name, values in by_attribute.items()
            }),
        )
