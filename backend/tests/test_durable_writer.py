import os
import threading
import time

import pytest

from shortlink.services.binding import durable_writer
from shortlink.services.binding.durable_writer import (
    read_locked,
    read_locked_sync,
    write_locked,
    write_locked_sync,
)
from shortlink.services.binding.errors import LockAcquisitionError, WriteError


def test_write_creates_file(tmp_path):
    target = tmp_path / "doc.json"
    write_locked_sync(target, "{}")
    assert target.read_text(encoding="utf-8") == "{}"


def test_truncating_write_replaces_content(tmp_path):
    target = tmp_path / "doc.json"
    target.write_text('{"a very long": "document that must disappear"}', encoding="utf-8")
    write_locked_sync(target, '{"a": 1}', mode="w")
    assert target.read_text(encoding="utf-8") == '{"a": 1}'


def test_append_mode_keeps_existing_content(tmp_path):
    target = tmp_path / "log.txt"
    write_locked_sync(target, "one\n", mode="a")
    write_locked_sync(target, "two\n", mode="a+")
    assert target.read_text(encoding="utf-8") == "one\ntwo\n"


def test_read_write_mode_overwrites_from_start(tmp_path):
    target = tmp_path / "doc.txt"
    target.write_text("abcdef", encoding="utf-8")
    write_locked_sync(target, "XY", mode="r+")
    assert target.read_text(encoding="utf-8") == "XYcdef"


def test_read_write_mode_requires_existing_file(tmp_path):
    with pytest.raises(WriteError):
        write_locked_sync(tmp_path / "missing.json", "{}", mode="r+")


def test_unknown_mode_is_rejected(tmp_path):
    with pytest.raises(ValueError):
        write_locked_sync(tmp_path / "doc.json", "{}", mode="r")


def test_writes_utf8(tmp_path):
    target = tmp_path / "doc.json"
    write_locked_sync(target, '{"ключ": "värde"}')
    assert read_locked_sync(target) == '{"ключ": "värde"}'


def test_lock_failure_raises_lock_acquisition_error(tmp_path, monkeypatch):
    def refuse(fd, exclusive=True):
        raise OSError("lock refused")

    monkeypatch.setattr(durable_writer, "_lock", refuse)
    with pytest.raises(LockAcquisitionError):
        write_locked_sync(tmp_path / "doc.json", "{}")


def test_write_failure_still_unlocks(tmp_path, monkeypatch):
    unlocked = []
    real_unlock = durable_writer._unlock

    def tracking_unlock(fd):
        unlocked.append(fd)
        real_unlock(fd)

    def failing_fsync(fd):
        raise OSError("disk full")

    monkeypatch.setattr(durable_writer, "_unlock", tracking_unlock)
    monkeypatch.setattr(durable_writer.os, "fsync", failing_fsync)

    with pytest.raises(WriteError):
        write_locked_sync(tmp_path / "doc.json", "{}")
    assert len(unlocked) == 1


@pytest.mark.skipif(os.name == "nt", reason="flock semantics")
def test_writer_blocks_while_another_holder_has_the_lock(tmp_path):
    import fcntl

    target = tmp_path / "doc.json"
    target.write_text("{}", encoding="utf-8")

    holder = open(target, "rb")
    fcntl.flock(holder.fileno(), fcntl.LOCK_EX)
    try:
        writer = threading.Thread(target=write_locked_sync, args=(target, '{"a": 1}'))
        writer.start()
        time.sleep(0.2)
        assert writer.is_alive()
        # The writer has not truncated the file while waiting for the lock
        assert target.read_text(encoding="utf-8") == "{}"
    finally:
        fcntl.flock(holder.fileno(), fcntl.LOCK_UN)
        holder.close()

    writer.join(timeout=5)
    assert not writer.is_alive()
    assert target.read_text(encoding="utf-8") == '{"a": 1}'


@pytest.mark.asyncio
async def test_async_variants(tmp_path):
    target = tmp_path / "doc.json"
    await write_locked(target, '{"k": true}')
    assert await read_locked(target) == '{"k": true}'
