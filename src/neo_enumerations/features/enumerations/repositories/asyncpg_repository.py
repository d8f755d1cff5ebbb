"""AsyncPG-based enumeration store.

Concrete implementation of the EnumerationStore protocol for PostgreSQL.
Each enumeration type maps to ``{schema}.{collection_name}`` with an integer
``id`` primary key and one column per attribute.
"""

import logging
from contextlib import asynccontextmanager
from contextvars import ContextVar
from typing import Any, Dict, Iterable, List, Mapping, Optional

import asyncpg

from ....config.settings import EnumerationSettings, get_settings
from ....core.exceptions import ConfigurationError, RecordNotFound, StoreError, ValidationError
from ..entities import EnumerationType
from ..utils import log_store_operation

logger = logging.getLogger(__name__)

# Connection of the enclosing transaction(), if any, for the running task
_transaction_connection: ContextVar[Optional[asyncpg.Connection]] = ContextVar(
    "neo_enumerations_transaction_connection", default=None
)


def _quote_identifier(name: str) -> str:
    if not name or not name.replace("_", "").isalnum():
        raise ConfigurationError(f"Invalid SQL identifier: {name!r}")
    return f'"{name}"'


class AsyncPGEnumerationRepository:
    """AsyncPG implementation of the EnumerationStore protocol."""
    
    def __init__(self, pool: asyncpg.Pool, settings: Optional[EnumerationSettings] = None):
        """Initialize with an asyncpg pool."""
        self.pool = pool
        self.settings = settings or get_settings()
        self.schema = self.settings.database_schema
        self.id_column = self.settings.id_column
    
    @classmethod
    async def from_settings(cls, settings: Optional[EnumerationSettings] = None) -> "AsyncPGEnumerationRepository":
        """Create a repository with a new pool for ``settings.database_url``."""
        settings = settings or get_settings()
        if not settings.database_url:
            raise ConfigurationError("NEO_ENUM_DATABASE_URL is required for the asyncpg repository")
        pool = await asyncpg.create_pool(settings.database_url)
        return cls(pool, settings)
    
    def _table(self, enumeration_type: EnumerationType) -> str:
        return f"{_quote_identifier(self.schema)}.{_quote_identifier(enumeration_type.collection_name)}"
    
    def _row_to_data(self, row: asyncpg.Record) -> Dict[str, Any]:
        data = dict(row)
        if self.id_column != "id":
            data["id"] = data.pop(self.id_column)
        return data
    
    @asynccontextmanager
    async def _connection(self):
        conn = _transaction_connection.get()
        if conn is not None:
            yield conn
            return
        async with self.pool.acquire() as conn:
            yield conn
    
    @asynccontextmanager
    async def transaction(self, enumeration_type: EnumerationType):
        """Run the enclosed store calls on one connection inside a transaction."""
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                token = _transaction_connection.set(conn)
                try:
                    yield
                finally:
                    _transaction_connection.reset(token)
    
    @log_store_operation("list records")
    async def list(self, enumeration_type: EnumerationType) -> List[Mapping[str, Any]]:
        query = f"SELECT * FROM {self._table(enumeration_type)} ORDER BY {_quote_identifier(self.id_column)}"
        try:
            async with self._connection() as conn:
                rows = await conn.fetch(query)
        except asyncpg.PostgresError as e:
            raise StoreError(f"Failed to list {enumeration_type.name} records: {e}") from e
        return [self._row_to_data(row) for row in rows]
    
    @log_store_operation("create record")
    async def create(self, enumeration_type: EnumerationType, attributes: Mapping[str, Any]) -> Mapping[str, Any]:
        values = {self.id_column if k == "id" else k: v for k, v in attributes.items()}
        if values.get(self.id_column) is None:
            values.pop(self.id_column, None)
        
        columns = ", ".join(_quote_identifier(name) for name in values)
        placeholders = ", ".join(f"${i}" for i in range(1, len(values) + 1))
        query = f"""
            INSERT INTO {self._table(enumeration_type)} ({columns})
            VALUES ({placeholders})
            RETURNING *
        """
        
        row = await self._execute_returning(enumeration_type, "create", query, *values.values())
        return self._row_to_data(row)
    
    @log_store_operation("update record")
    async def update(
        self,
        enumeration_type: EnumerationType,
        record_id: int,
        attributes: Mapping[str, Any]
    ) -> Mapping[str, Any]:
        values = {k: v for k, v in attributes.items() if k not in ("id", self.id_column)}
        if not values:
            query = f"SELECT * FROM {self._table(enumeration_type)} WHERE {_quote_identifier(self.id_column)} = $1"
        else:
            assignments = ", ".join(
                f"{_quote_identifier(name)} = ${i}" for i, name in enumerate(values, start=2)
            )
            query = f"""
                UPDATE {self._table(enumeration_type)}
                SET {assignments}
                WHERE {_quote_identifier(self.id_column)} = $1
                RETURNING *
            """
        
        row = await self._execute_returning(enumeration_type, "update", query, record_id, *values.values())
        if row is None:
            raise RecordNotFound(enumeration_type.name, record_id, "id")
        return self._row_to_data(row)
    
    @log_store_operation("delete record")
    async def delete(self, enumeration_type: EnumerationType, record_id: int) -> bool:
        query = f"DELETE FROM {self._table(enumeration_type)} WHERE {_quote_identifier(self.id_column)} = $1"
        try:
            async with self._connection() as conn:
                result = await conn.execute(query, record_id)
        except asyncpg.PostgresError as e:
            raise StoreError(f"Failed to delete {enumeration_type.name} id={record_id}: {e}") from e
        return self._affected_rows(result) > 0
    
    @log_store_operation("delete undeclared records")
    async def delete_all_except(self, enumeration_type: EnumerationType, record_ids: Iterable[int]) -> int:
        query = f"""
            DELETE FROM {self._table(enumeration_type)}
            WHERE NOT ({_quote_identifier(self.id_column)} = ANY($1::bigint[]))
        """
        try:
            async with self._connection() as conn:
                result = await conn.execute(query, list(record_ids))
        except asyncpg.PostgresError as e:
            raise StoreError(f"Failed to delete undeclared {enumeration_type.name} records: {e}") from e
        return self._affected_rows(result)
    
    async def _execute_returning(self, enumeration_type: EnumerationType, operation: str, query: str, *args):
        try:
            async with self._connection() as conn:
                return await conn.fetchrow(query, *args)
        except asyncpg.IntegrityConstraintViolationError as e:
            raise ValidationError(
                f"Failed to {operation} {enumeration_type.name}: {e}",
                details={"constraint": getattr(e, "constraint_name", None)}
            ) from e
        except asyncpg.PostgresError as e:
            raise StoreError(f"Failed to {operation} {enumeration_type.name}: {e}") from e
    
    @staticmethod
    def _affected_rows(status: str) -> int:
        # Command status looks like "DELETE 3"
        try:
            return int(status.split()[-1])
        except (AttributeError, IndexError, ValueError):
            return 0
