"""
Abstract base class for persistence bindings.
Every backing store (JSON document, SQLite table) inherits from this class.
"""
from abc import ABC, abstractmethod
from typing import Any, List, Optional, Tuple

from .errors import BindingClosedError
from ...core.logging_config import get_logger

logger = get_logger(__name__)


class BindingInterface(ABC):
    """
    Uniform key -> value contract over a durable backing store.

    Callers only ever see get/set/delete/has/enumerate_keys. Key validation
    and the open/closed guard are done here once, so backends receive
    string keys on an open store and nothing else.
    """

    def __init__(self):
        self._opened = False
        self._closed = False

    @property
    def is_open(self) -> bool:
        return self._opened and not self._closed

    # Lifecycle
    @abstractmethod
    async def initialize(self):
        """Open the backing resource and make the binding usable."""
        pass

    @abstractmethod
    async def close(self):
        """Persist outstanding state and release the backing resource."""
        pass

    def flush_sync(self) -> None:
        """
        Persist outstanding state without the event loop.

        Called from signal handlers at process exit. Bindings that persist
        every mutation before returning have nothing to do here.
        """
        pass

    # Public operations
    async def get(self, key: str) -> Optional[Any]:
        """Return the value stored under key, or None when absent."""
        self._check_usable(key)
        return await self._get(key)

    async def set(self, key: str, value: Any) -> bool:
        """Store value under key. Returns True once the mutation is applied."""
        self._check_usable(key)
        return await self._set(key, value)

    async def delete(self, key: str) -> bool:
        """Remove key. Deleting a missing key is not an error."""
        self._check_usable(key)
        return await self._delete(key)

    async def has(self, key: str) -> bool:
        """Check whether key is present."""
        self._check_usable(key)
        return await self._has(key)

    async def enumerate_keys(self) -> List[str]:
        """List every key as a string, in the store's own order."""
        self._check_open()
        return await self._enumerate_keys()

    async def items(self) -> List[Tuple[str, Any]]:
        """Return (key, value) pairs for every key."""
        pairs = []
        for key in await self.enumerate_keys():
            value = await self._get(key)
            if value is not None:
                pairs.append((key, value))
        return pairs

    # Backend hooks
    @abstractmethod
    async def _get(self, key: str) -> Optional[Any]:
        pass

    @abstractmethod
    async def _set(self, key: str, value: Any) -> bool:
        pass

    @abstractmethod
    async def _delete(self, key: str) -> bool:
        pass

    @abstractmethod
    async def _has(self, key: str) -> bool:
        pass

    @abstractmethod
    async def _enumerate_keys(self) -> List[str]:
        pass

    def _check_open(self) -> None:
        if not self._opened:
            raise BindingClosedError(f"{type(self).__name__} has not been initialized")
        if self._closed:
            raise BindingClosedError(f"{type(self).__name__} is closed")

    def _check_usable(self, key) -> None:
        if not isinstance(key, str):
            raise TypeError(f"Binding keys must be str, got {type(key).__name__}")
        self._check_open()
