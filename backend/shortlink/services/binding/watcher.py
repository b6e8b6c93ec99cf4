"""
File change notification for the JSON document store.

FileWatcher polls the file's stat signature from an asyncio task and reports
every change. Debouncer coalesces bursts of change events into a single
callback run after a quiet period.
"""
import asyncio
import os
from pathlib import Path
from typing import Awaitable, Callable, Optional, Tuple

from ...core.logging_config import get_logger

logger = get_logger(__name__)

Signature = Optional[Tuple[int, int, int]]


class Debouncer:
    """
    Single-slot pending timer.

    Every trigger() cancels the armed timer (if any) and schedules a new one,
    so the callback runs once, `delay` seconds after the last trigger.
    """

    def __init__(self, delay: float, callback: Callable[[], Awaitable[None]]):
        self.delay = delay
        self._callback = callback
        self._handle: Optional[asyncio.TimerHandle] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    async def shutdown(self) -> None:
        self.cancel()
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None

    def _fire(self) -> None:
        self._handle = None
        self._task = asyncio.ensure_future(self._run())

    async def _run(self) -> None:
        try:
            await self._callback()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Debounced callback failed: {e}", exc_info=True)


class FileWatcher:
    """
    Polls a file's (mtime_ns, size, inode) and calls on_change(event) whenever
    it differs from the last observation. Events are "change" or "removed".
    """

    def __init__(self, path: Path, on_change: Callable[[str], None], poll_interval: float = 0.1):
        self.path = Path(path)
        self.poll_interval = poll_interval
        self._on_change = on_change
        self._signature: Signature = None
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._signature = self._stat()
        self._task = asyncio.ensure_future(self._poll())
        logger.debug(f"Watching {self.path} every {self.poll_interval}s")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    def _stat(self) -> Signature:
        try:
            st = os.stat(self.path)
        except FileNotFoundError:
            return None
        return (st.st_mtime_ns, st.st_size, st.st_ino)

    async def _poll(self) -> None:
        while True:
            await asyncio.sleep(self.poll_interval)
            signature = self._stat()
            if signature == self._signature:
                continue
            self._signature = signature
            event = "change" if signature is not None else "removed"
            logger.debug(f"Event {event} emitted on {self.path}")
            try:
                self._on_change(event)
            except Exception as e:
                logger.error(f"Change handler for {self.path} failed: {e}", exc_info=True)
