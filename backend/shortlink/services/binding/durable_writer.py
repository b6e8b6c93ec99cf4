"""
Lock-guarded whole-file writes for the JSON document store.

Every write holds an exclusive OS-level lock (flock on POSIX, msvcrt on
Windows) for its whole duration. Truncating modes only truncate once the
lock is held, so a reader taking the shared lock never sees a half-written
or empty document.

The synchronous variants exist for shutdown handlers, where the event loop
can no longer be awaited.
"""
import asyncio
import os
from pathlib import Path
from typing import Union

from .errors import LockAcquisitionError, WriteError
from ...core.logging_config import get_logger

if os.name == "nt":
    import msvcrt
    fcntl = None
else:
    import fcntl
    msvcrt = None

logger = get_logger(__name__)

PathLike = Union[str, Path]

# r+  write over the existing file from the start, file must exist
# w   truncate (after locking) then write, create if missing
# w+  same as w
# a   append to the end, create if missing
# a+  same as a
_OPEN_FLAGS = {
    "r+": os.O_RDWR,
    "w": os.O_RDWR | os.O_CREAT,
    "w+": os.O_RDWR | os.O_CREAT,
    "a": os.O_RDWR | os.O_CREAT | os.O_APPEND,
    "a+": os.O_RDWR | os.O_CREAT | os.O_APPEND,
}
TRUNCATING_MODES = ("w", "w+")


def _lock(fd: int, exclusive: bool = True) -> None:
    """Block until the lock on fd is held."""
    if fcntl is not None:
        fcntl.flock(fd, fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH)
    else:
        # msvcrt has no shared locks; lock the first byte instead
        os.lseek(fd, 0, os.SEEK_SET)
        msvcrt.locking(fd, msvcrt.LK_LOCK, 1)


def _unlock(fd: int) -> None:
    if fcntl is not None:
        fcntl.flock(fd, fcntl.LOCK_UN)
    else:
        os.lseek(fd, 0, os.SEEK_SET)
        msvcrt.locking(fd, msvcrt.LK_UNLCK, 1)


def write_locked_sync(path: PathLike, content: str, mode: str = "w") -> None:
    """
    Write content to path while holding an exclusive lock.

    Args:
        path: Target file
        content: Full text to write (UTF-8)
        mode: One of r+, w, w+, a, a+. Use "w" for whole-document rewrites.

    Raises:
        LockAcquisitionError: If the exclusive lock cannot be taken
        WriteError: If the file cannot be opened or written
    """
    if mode not in _OPEN_FLAGS:
        raise ValueError(f"Unsupported write mode: {mode!r}")

    try:
        fd = os.open(str(path), _OPEN_FLAGS[mode] | getattr(os, "O_BINARY", 0), 0o666)
    except OSError as e:
        raise WriteError(f"Could not open {path} for writing: {e}") from e

    with os.fdopen(fd, "r+b") as handle:
        try:
            _lock(handle.fileno(), exclusive=True)
        except OSError as e:
            raise LockAcquisitionError(f"Could not lock {path}: {e}") from e

        try:
            if mode in TRUNCATING_MODES:
                handle.seek(0)
                handle.truncate()
            handle.write(content.encode("utf-8"))
            handle.flush()
            os.fsync(handle.fileno())
        except OSError as e:
            raise WriteError(f"Could not write {path}: {e}") from e
        finally:
            try:
                _unlock(handle.fileno())
            except OSError as e:
                # Closing the handle drops the lock anyway
                logger.debug(f"Unlock of {path} failed: {e}")


def read_locked_sync(path: PathLike) -> str:
    """Read the whole file while holding a shared lock."""
    with open(path, "rb") as handle:
        _lock(handle.fileno(), exclusive=False)
        try:
            handle.seek(0)
            data = handle.read()
        finally:
            try:
                _unlock(handle.fileno())
            except OSError as e:
                logger.debug(f"Unlock of {path} failed: {e}")
    return data.decode("utf-8")


async def write_locked(path: PathLike, content: str, mode: str = "w") -> None:
    """Async variant of write_locked_sync; runs in the default executor."""
    loop = asyncio.get_running_loop()
    await loop.run_in_executor(None, write_locked_sync, path, content, mode)


async def read_locked(path: PathLike) -> str:
    """Async variant of read_locked_sync."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, read_locked_sync, path)
