"""
JSON file-backed binding.

The whole document lives in memory (the mirror) and is written back in full
after every mutation. External edits to the file are picked up by a watcher
and merged into the mirror in place.
"""
import asyncio
import json
import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Union

from .base import BindingInterface
from .durable_writer import read_locked, read_locked_sync, write_locked, write_locked_sync
from .errors import InvalidTargetError
from .merge import merge
from .watcher import Debouncer, FileWatcher
from ...core.logging_config import get_logger

logger = get_logger(__name__)

EMPTY_DOCUMENT = "{}"


class StoreState(Enum):
    """Lifecycle of a JSON document store."""
    UNINITIALIZED = "uninitialized"
    LOADED = "loaded"
    WATCHING = "watching"
    CLOSED = "closed"


class JSONDocumentStore(BindingInterface):
    """
    Binding over a single JSON file whose root is an object.

    Reads are served from the mirror. set/delete update the mirror
    synchronously and dispatch a write-back of the whole document; write-back
    failures are logged, not raised. Write-backs run one at a time in the
    order they were dispatched.
    """

    def __init__(
        self,
        path: Union[str, Path],
        reconcile_delay: float = 0.05,
        poll_interval: float = 0.1,
        indent: Optional[int] = None,
        watch: bool = True
    ):
        """
        Initialize JSON document store.

        Args:
            path: JSON file to bind (created when missing)
            reconcile_delay: Quiet period before an external change is merged
            poll_interval: How often the watcher checks the file
            indent: Indentation used when writing the document
            watch: Whether to watch the file for external edits
        """
        super().__init__()
        self.path = Path(os.path.abspath(path))
        self.indent = indent
        self.watch = watch
        self.state = StoreState.UNINITIALIZED

        self._data: Dict[str, Any] = {}
        self._generation = 0
        self._last_synced: Optional[str] = None
        self._pending: Set[asyncio.Task] = set()
        self._write_lock: Optional[asyncio.Lock] = None

        self._debouncer = Debouncer(reconcile_delay, self._reconcile)
        self._watcher = FileWatcher(self.path, self._on_file_event, poll_interval)

    @property
    def data(self) -> Dict[str, Any]:
        """The live mirror. Mutating it directly bypasses write-back."""
        return self._data

    async def initialize(self):
        """Validate the path, create the file if needed, load it and start watching."""
        if self._opened:
            return

        await self._prepare_target()
        self._data = self._load()
        self._write_lock = asyncio.Lock()
        self._opened = True
        self.state = StoreState.LOADED

        if self.watch:
            self._watcher.start()
            self.state = StoreState.WATCHING

        logger.info(f"JSON store opened: {self.path} ({len(self._data)} keys)")

    async def close(self):
        """Stop watching, wait for write-backs and flush the mirror one last time."""
        if self._closed or not self._opened:
            self._closed = True
            self.state = StoreState.CLOSED
            return

        await self._watcher.stop()
        await self._debouncer.shutdown()
        await self.drain()
        try:
            await self.flush()
        finally:
            self._closed = True
            self.state = StoreState.CLOSED
            logger.info(f"JSON store closed: {self.path}")

    async def _prepare_target(self) -> None:
        if self.path.is_dir():
            raise InvalidTargetError(f"{self.path} is a directory")
        if self.path.is_symlink():
            logger.warning(
                f"{self.path} is a symlink, unexpected behaviour may occur "
                f"(locks and change detection apply to the link target)"
            )
        if not self.path.exists() or self.path.stat().st_size == 0:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            await write_locked(self.path, EMPTY_DOCUMENT)
            logger.info(f"Initialized empty JSON document at {self.path}")

    def _load(self) -> Dict[str, Any]:
        try:
            text = read_locked_sync(self.path)
        except UnicodeDecodeError as e:
            raise InvalidTargetError(f"{self.path} is not UTF-8 text: {e}") from e
        try:
            document = json.loads(text)
        except json.JSONDecodeError as e:
            raise InvalidTargetError(f"{self.path} does not contain valid JSON: {e}") from e
        if not isinstance(document, dict):
            raise InvalidTargetError(
                f"{self.path} must contain a JSON object at the root, got {type(document).__name__}"
            )
        self._last_synced = text
        return document

    # Operations
    async def _get(self, key: str) -> Optional[Any]:
        return self._data.get(key)

    async def _has(self, key: str) -> bool:
        return key in self._data

    async def _enumerate_keys(self) -> List[str]:
        return list(self._data.keys())

    async def _set(self, key: str, value: Any) -> bool:
        # Store what the file will hold: tuples become lists, dict keys become strings
        try:
            normalized = json.loads(self._dumps(value))
        except (TypeError, ValueError) as e:
            raise TypeError(f"Value for {key!r} is not JSON serializable: {e}") from e
        self._data[key] = normalized
        self._mutated(self._serialize())
        return True

    async def _delete(self, key: str) -> bool:
        if key not in self._data:
            return True
        del self._data[key]
        self._mutated(self._serialize())
        return True

    # Write-back
    def _dumps(self, value: Any) -> str:
        return json.dumps(value, ensure_ascii=False, allow_nan=False, indent=self.indent)

    def _serialize(self) -> str:
        return self._dumps(self._data)

    def _mutated(self, content: str) -> None:
        self._generation += 1
        task = asyncio.ensure_future(self._write_back(content))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _write_back(self, content: str) -> None:
        async with self._write_lock:
            try:
                await write_locked(self.path, content)
            except Exception as e:
                logger.error(f"Write-back to {self.path} failed, change kept in memory only: {e}")
                return
            self._last_synced = content

    async def drain(self) -> None:
        """Wait until every dispatched write-back has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def flush(self) -> None:
        """Write the current mirror now. Unlike write-backs, failures raise."""
        content = self._serialize()
        async with self._write_lock:
            await write_locked(self.path, content)
            self._last_synced = content

    def flush_sync(self) -> None:
        """Write the current mirror without the event loop (shutdown path)."""
        if not self._opened:
            return
        content = self._serialize()
        write_locked_sync(self.path, content)
        self._last_synced = content

    # Reconciliation
    def _on_file_event(self, event: str) -> None:
        if event == "removed":
            logger.warning(f"{self.path} was removed; it is recreated on the next write")
            return
        self._debouncer.trigger()

    async def _reconcile(self) -> None:
        if self._pending:
            # Our own write-backs are still landing; look again once they settle
            self._debouncer.trigger()
            return

        generation = self._generation
        try:
            text = await read_locked(self.path)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Could not read {self.path} for reconciliation: {e}")
            return

        if generation != self._generation or self._pending:
            self._debouncer.trigger()
            return
        if text == self._last_synced:
            return

        try:
            document = json.loads(text)
        except json.JSONDecodeError as e:
            logger.warning(f"Could not update from {self.path}, keeping in-memory data: {e}")
            return
        if not isinstance(document, dict):
            logger.warning(
                f"Could not update from {self.path}, root is {type(document).__name__} "
                f"not an object; keeping in-memory data"
            )
            return

        merge(self._data, document)
        self._last_synced = text
        logger.info(f"Reconciled external change to {self.path} ({len(self._data)} keys)")

    def get_stats(self) -> Dict:
        """Get statistics about the JSON store (useful for debugging)."""
        return {
            "path": str(self.path),
            "state": self.state.value,
            "total_keys": len(self._data),
            "pending_writes": len(self._pending),
            "watching": self._watcher.running
        }
