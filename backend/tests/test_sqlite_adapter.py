import sqlite3

import pytest

from shortlink.services.binding import (
    BindingClosedError,
    CoercionError,
    InvalidTargetError,
    SchemaError,
    SQLiteRowStore,
)


def _make_db(path, *statements):
    conn = sqlite3.connect(path)
    try:
        for statement in statements:
            conn.execute(statement)
        conn.commit()
    finally:
        conn.close()


@pytest.mark.asyncio
async def test_rows_survive_restart(sqlite_path):
    _make_db(sqlite_path, "CREATE TABLE urls (id TEXT PRIMARY KEY, fulllink TEXT, expiry TEXT)")

    store = SQLiteRowStore(sqlite_path)
    await store.initialize()
    assert await store.set("k1", {"fulllink": "http://y", "expiry": "2099-01-01"})
    await store.close()

    reopened = SQLiteRowStore(sqlite_path)
    await reopened.initialize()
    try:
        assert await reopened.get("k1") == {"id": "k1", "fulllink": "http://y", "expiry": "2099-01-01"}
    finally:
        await reopened.close()


@pytest.mark.asyncio
async def test_default_table_is_created_in_empty_database(sqlite_path):
    store = SQLiteRowStore(sqlite_path)
    await store.initialize()
    try:
        assert store.schema.table_name == "urls"
        assert store.schema.primary_key.name == "id"
        assert [c.name for c in store.schema.value_columns] == ["fulllink", "expiry"]
    finally:
        await store.close()


@pytest.mark.asyncio
async def test_named_table_that_does_not_exist(sqlite_path):
    store = SQLiteRowStore(sqlite_path, table_name="missing")
    with pytest.raises(SchemaError):
        await store.initialize()
    assert not store.is_open


@pytest.mark.asyncio
async def test_directory_path_is_rejected(tmp_path):
    with pytest.raises(InvalidTargetError):
        await SQLiteRowStore(tmp_path).initialize()


@pytest.mark.asyncio
async def test_integer_keys_are_coerced(sqlite_path):
    _make_db(sqlite_path, "CREATE TABLE counters (n INTEGER PRIMARY KEY, label TEXT, hits INTEGER)")
    store = SQLiteRowStore(sqlite_path)
    await store.initialize()
    try:
        await store.set("5", {"label": "five", "hits": "3"})
        assert await store.get("05") == {"n": 5, "label": "five", "hits": 3}

        await store.set("05", {"label": "still five"})
        assert await store.enumerate_keys() == ["5"]
        assert (await store.get("5"))["label"] == "still five"

        with pytest.raises(CoercionError):
            await store.get("five")
        with pytest.raises(CoercionError):
            await store.set("6", {"hits": "many"})
    finally:
        await store.close()


@pytest.mark.asyncio
async def test_missing_columns_are_null_and_dates_normalized(sqlite_path):
    _make_db(sqlite_path, "CREATE TABLE links (id TEXT PRIMARY KEY, fulllink TEXT, expiry DATETIME)")
    store = SQLiteRowStore(sqlite_path, table_name="links")
    await store.initialize()
    try:
        await store.set("a", {"fulllink": "http://a"})
        assert await store.get("a") == {"id": "a", "fulllink": "http://a", "expiry": None}

        await store.set("b", {"fulllink": "http://b", "expiry": "2099-01-01", "extra": "ignored"})
        assert (await store.get("b"))["expiry"] == "2099-01-01T00:00:00.000Z"
    finally:
        await store.close()


@pytest.mark.asyncio
async def test_delete_has_and_enumerate(sqlite_path):
    store = SQLiteRowStore(sqlite_path)
    await store.initialize()
    try:
        await store.set("x", {"fulllink": "http://x"})
        await store.set("y", {"fulllink": "http://y"})
        assert await store.has("x")
        assert sorted(await store.enumerate_keys()) == ["x", "y"]

        assert await store.delete("x")
        assert await store.delete("never-there")
        assert not await store.has("x")
        assert await store.get("x") is None
        assert await store.enumerate_keys() == ["y"]
    finally:
        await store.close()


@pytest.mark.asyncio
async def test_values_must_be_mappings(sqlite_path):
    store = SQLiteRowStore(sqlite_path)
    await store.initialize()
    try:
        with pytest.raises(TypeError):
            await store.set("x", "http://x")
        with pytest.raises(TypeError):
            await store.get(5)
    finally:
        await store.close()


@pytest.mark.asyncio
async def test_no_in_memory_cache(sqlite_path):
    store = SQLiteRowStore(sqlite_path)
    await store.initialize()
    try:
        _make_db(sqlite_path, "INSERT INTO urls (id, fulllink) VALUES ('ext', 'http://external')")
        assert (await store.get("ext"))["fulllink"] == "http://external"
    finally:
        await store.close()


@pytest.mark.asyncio
async def test_closed_store_refuses_operations(sqlite_path):
    store = SQLiteRowStore(sqlite_path)
    with pytest.raises(BindingClosedError):
        await store.get("x")
    await store.initialize()
    await store.close()
    with pytest.raises(BindingClosedError):
        await store.enumerate_keys()


@pytest.mark.asyncio
async def test_file_that_is_not_a_database(sqlite_path):
    sqlite_path.write_bytes(b"this is definitely not an sqlite database file" * 20)
    store = SQLiteRowStore(sqlite_path)
    with pytest.raises(InvalidTargetError):
        await store.initialize()
    assert not store.is_open
