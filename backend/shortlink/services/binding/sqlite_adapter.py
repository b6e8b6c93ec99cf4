"""
SQLite-backed binding.

Each operation is a parameterized statement against one discovered table;
nothing is cached in memory, so every read sees what is committed and every
mutation is committed before the call returns.
"""
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import aiosqlite

from .base import BindingInterface
from .coercion import coerce
from .errors import InvalidTargetError, SchemaError
from .schema import TableSchema, inspect_schema, list_user_tables, quote_identifier
from ...core.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_TABLE = "urls"
SQL_DIR = Path(__file__).resolve().parent / "sql"


class SQLiteRowStore(BindingInterface):
    """
    Binding over a single-table SQLite database.

    Keys are coerced to the primary key's declared type before every
    statement, so "5" and "05" address the same row of an INTEGER key.
    Values passed to set() must be mappings of column name -> value;
    missing columns are stored as NULL.
    """

    def __init__(self, path: Union[str, Path], table_name: Optional[str] = None):
        """
        Initialize SQLite row store.

        Args:
            path: Database file (or ":memory:")
            table_name: Table to bind; defaults to the first usable table
        """
        super().__init__()
        self.path = str(path)
        self.table_name = table_name
        self.schema: Optional[TableSchema] = None
        self._db: Optional[aiosqlite.Connection] = None

    async def initialize(self):
        """Connect, make sure a usable table exists and discover its schema."""
        if self._opened:
            return
        if self.path != ":memory:" and os.path.isdir(self.path):
            raise InvalidTargetError(f"Path points to a directory, expected file: {self.path}")

        try:
            self._db = await aiosqlite.connect(self.path)
        except aiosqlite.DatabaseError as e:
            raise InvalidTargetError(f"Could not open {self.path}: {e}") from e
        self._db.row_factory = aiosqlite.Row
        try:
            self.schema = await self._discover_schema()
        except aiosqlite.DatabaseError as e:
            await self._db.close()
            self._db = None
            raise InvalidTargetError(f"{self.path} is not a usable SQLite database: {e}") from e
        except Exception:
            await self._db.close()
            self._db = None
            raise

        self._prepare_statements(self.schema)
        self._opened = True
        logger.info(
            f"SQLite store opened: {self.path} "
            f"(table {self.schema.table_name}, key {self.schema.primary_key.name} "
            f"{self.schema.primary_key.declared_type or 'untyped'})"
        )

    async def close(self):
        """Close the database connection."""
        if self._db is not None:
            await self._db.close()
            self._db = None
            logger.info(f"SQLite store closed: {self.path}")
        self._closed = True

    async def _discover_schema(self) -> TableSchema:
        try:
            return await inspect_schema(self._db, self.table_name)
        except SchemaError:
            if self.table_name not in (None, DEFAULT_TABLE):
                raise
            if DEFAULT_TABLE in await list_user_tables(self._db):
                raise
        await self._create_default_table()
        return await inspect_schema(self._db, DEFAULT_TABLE)

    async def _create_default_table(self) -> None:
        script = (SQL_DIR / "createtable.sql").read_text(encoding="utf-8")
        await self._db.executescript(script)
        await self._db.commit()
        logger.info(f"Created table {DEFAULT_TABLE} in {self.path}")

    def _prepare_statements(self, schema: TableSchema) -> None:
        table = quote_identifier(schema.table_name)
        key = quote_identifier(schema.primary_key.name)
        columns = ", ".join(quote_identifier(name) for name in schema.column_names)
        placeholders = ", ".join("?" for _ in schema.column_names)

        self._sql_get = f"SELECT * FROM {table} WHERE {key} = ?"
        self._sql_has = f"SELECT 1 FROM {table} WHERE {key} = ? LIMIT 1"
        self._sql_upsert = f"INSERT OR REPLACE INTO {table} ({columns}) VALUES ({placeholders})"
        self._sql_delete = f"DELETE FROM {table} WHERE {key} = ?"
        self._sql_keys = f"SELECT {key} FROM {table}"

    def _coerce_key(self, key: str) -> Any:
        return coerce(key, self.schema.primary_key.declared_type)

    # Operations
    async def _get(self, key: str) -> Optional[Dict[str, Any]]:
        async with self._db.execute(self._sql_get, (self._coerce_key(key),)) as cursor:
            row = await cursor.fetchone()
        return dict(row) if row is not None else None

    async def _has(self, key: str) -> bool:
        async with self._db.execute(self._sql_has, (self._coerce_key(key),)) as cursor:
            row = await cursor.fetchone()
        return row is not None

    async def _set(self, key: str, value: Any) -> bool:
        if not isinstance(value, Mapping):
            raise TypeError(
                f"SQLite store values must be mappings of column -> value, got {type(value).__name__}"
            )
        row = [self._coerce_key(key)]
        for column in self.schema.value_columns:
            row.append(coerce(value.get(column.name), column.declared_type))

        await self._db.execute(self._sql_upsert, row)
        await self._db.commit()
        return True

    async def _delete(self, key: str) -> bool:
        await self._db.execute(self._sql_delete, (self._coerce_key(key),))
        await self._db.commit()
        return True

    async def _enumerate_keys(self) -> List[str]:
        async with self._db.execute(self._sql_keys) as cursor:
            rows = await cursor.fetchall()
        return [str(row[0]) for row in rows]

    def get_stats(self) -> Dict:
        """Get information about the bound table (useful for debugging)."""
        stats = {"path": self.path, "open": self.is_open}
        if self.schema is not None:
            stats.update({
                "table": self.schema.table_name,
                "primary_key": self.schema.primary_key.name,
                "primary_key_type": self.schema.primary_key.declared_type,
                "value_columns": {
                    column.name: column.declared_type for column in self.schema.value_columns
                },
            })
        return stats
