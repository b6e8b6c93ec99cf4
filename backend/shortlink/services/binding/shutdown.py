"""
Flush-on-shutdown hook for bindings.

The owning process installs the hook explicitly. On SIGINT, SIGTERM,
SIGHUP or SIGQUIT the binding is flushed synchronously and the process
exits with 0, or 1 when the flush failed. A normal interpreter exit flushes
through atexit.
"""
import atexit
import signal
import sys
from typing import Dict, Iterable, Optional

from .base import BindingInterface
from ...core.logging_config import get_logger

logger = get_logger(__name__)

SHUTDOWN_SIGNALS = ("SIGINT", "SIGTERM", "SIGHUP", "SIGQUIT")


class ShutdownHook:
    """Flushes a binding when the process is asked to terminate."""

    def __init__(self, binding: BindingInterface):
        self.binding = binding
        self._previous: Dict[int, object] = {}
        self._installed = False

    def install(self, signals: Optional[Iterable[str]] = None) -> "ShutdownHook":
        """
        Register the handler and the atexit flush.

        Args:
            signals: Signal names to handle (default: all of SHUTDOWN_SIGNALS).
                Names the platform lacks are skipped.
        """
        if self._installed:
            return self
        for name in (signals or SHUTDOWN_SIGNALS):
            signum = getattr(signal, name, None)
            if signum is None:
                continue
            try:
                self._previous[signum] = signal.signal(signum, self._handle_signal)
            except (OSError, ValueError) as e:
                # Not the main thread, or the signal cannot be caught here
                logger.warning(f"Could not register {name} handler: {e}")
        atexit.register(self.flush)
        self._installed = True
        logger.debug(f"Shutdown hook installed for {type(self.binding).__name__}")
        return self

    def uninstall(self) -> None:
        """Restore previous signal handlers and drop the atexit flush."""
        if not self._installed:
            return
        for signum, handler in self._previous.items():
            signal.signal(signum, handler)
        self._previous.clear()
        atexit.unregister(self.flush)
        self._installed = False

    def flush(self) -> bool:
        """Flush synchronously. Returns False (and logs) on failure."""
        try:
            self.binding.flush_sync()
        except Exception as e:
            logger.error(f"Flush on shutdown failed: {e}")
            return False
        return True

    def exit_code(self) -> int:
        return 0 if self.flush() else 1

    def _handle_signal(self, signum: int, frame: Optional[object]) -> None:
        logger.info(f"Received {signal.Signals(signum).name}, flushing before exit")
        code = self.exit_code()
        atexit.unregister(self.flush)
        sys.exit(code)
