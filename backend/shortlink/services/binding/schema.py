"""
Schema discovery for the SQLite binding.

Finds the table the binding works against, its single primary key column
and the remaining value columns with their declared types. Runs once when
the binding is opened.
"""
from dataclasses import dataclass
from typing import List, Optional, Tuple

import aiosqlite

from .errors import SchemaError
from ...core.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ColumnInfo:
    """A table column and the type it was declared with."""
    name: str
    declared_type: str


@dataclass(frozen=True)
class TableSchema:
    """Discovered layout of the bound table."""
    table_name: str
    primary_key: ColumnInfo
    value_columns: Tuple[ColumnInfo, ...]

    @property
    def column_names(self) -> List[str]:
        return [self.primary_key.name] + [column.name for column in self.value_columns]


def quote_identifier(name: str) -> str:
    """Quote a table or column name for interpolation into SQL."""
    return '"' + name.replace('"', '""') + '"'


async def list_user_tables(conn: aiosqlite.Connection) -> List[str]:
    """User tables in catalog order, excluding sqlite_* internals."""
    async with conn.execute(
        "SELECT name FROM sqlite_master WHERE type = 'table' AND name NOT LIKE 'sqlite_%'"
    ) as cursor:
        rows = await cursor.fetchall()
    return [row[0] for row in rows]


async def _table_columns(conn: aiosqlite.Connection, table_name: str) -> list:
    async with conn.execute(f"PRAGMA table_info({quote_identifier(table_name)})") as cursor:
        return await cursor.fetchall()


def _build_schema(table_name: str, rows: list) -> TableSchema:
    # PRAGMA table_info rows: (cid, name, type, notnull, dflt_value, pk)
    if not rows:
        raise SchemaError(f"Table {table_name} has no columns (or does not exist)")

    key_rows = [row for row in rows if row[5]]
    if not key_rows:
        raise SchemaError(f"Table {table_name} must have a primary key")
    if len(key_rows) > 1:
        raise SchemaError(
            f"Table {table_name} has a composite primary key "
            f"({', '.join(row[1] for row in key_rows)}); exactly one key column is required"
        )

    key_row = key_rows[0]
    primary_key = ColumnInfo(name=key_row[1], declared_type=key_row[2] or "")
    value_columns = tuple(
        ColumnInfo(name=row[1], declared_type=row[2] or "")
        for row in rows
        if row[1] != primary_key.name
    )
    return TableSchema(table_name=table_name, primary_key=primary_key, value_columns=value_columns)


async def inspect_schema(conn: aiosqlite.Connection, table_name: Optional[str] = None) -> TableSchema:
    """
    Discover the bound table.

    Args:
        conn: Open database connection
        table_name: Table to inspect; when omitted the first user table with
            columns and a single primary key is used

    Raises:
        SchemaError: If the named table is unusable, or no table qualifies
    """
    if table_name:
        schema = _build_schema(table_name, await _table_columns(conn, table_name))
        logger.debug(f"Inspected table {table_name}: key {schema.primary_key.name}")
        return schema

    for name in await list_user_tables(conn):
        try:
            schema = _build_schema(name, await _table_columns(conn, name))
        except SchemaError as e:
            logger.debug(f"Skipping table {name}: {e}")
            continue
        logger.debug(f"Selected table {name}: key {schema.primary_key.name}")
        return schema

    raise SchemaError("No user-defined table with a primary key found")
