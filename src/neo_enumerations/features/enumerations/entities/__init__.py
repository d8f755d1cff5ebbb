"""Enumeration entities - domain objects and protocols."""

from ....config.constants import MissPolicy, UpdateOperation
from .record import EnumerationRecord
from .enumeration_type import EnumerationType
from .protocols import EnumerationStore

__all__ = [
    "EnumerationRecord",
    "EnumerationType",
    "EnumerationStore",
    "MissPolicy",
    "UpdateOperation",
]
