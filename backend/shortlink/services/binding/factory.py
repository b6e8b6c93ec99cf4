"""
Binding Factory for creating persistence bindings.
Implements Factory Pattern for plug-and-play backing stores.
"""
from pathlib import Path
from typing import Optional, Union

from .base import BindingInterface
from .json_adapter import JSONDocumentStore
from .sqlite_adapter import SQLiteRowStore
from ...core.logging_config import get_logger

logger = get_logger(__name__)

SQLITE_SUFFIXES = (".sqlite", ".sqlite3", ".db")


class BindingFactory:
    """
    Factory for creating bindings.
    Supports JSON (whole-document file) and SQLite (single table) backing stores.
    """

    @staticmethod
    def detect_store_type(path: Union[str, Path]) -> str:
        """Guess the store type from the file suffix."""
        if str(path) == ":memory:" or Path(path).suffix.lower() in SQLITE_SUFFIXES:
            return "sqlite"
        return "json"

    @staticmethod
    def create(store_type: Optional[str] = None, **kwargs) -> BindingInterface:
        """
        Create a binding instance (not yet opened).

        Args:
            store_type: 'json', 'sqlite', or None to detect from kwargs['path']
            **kwargs: Arguments for the specific binding (path is required)

        Returns:
            BindingInterface instance

        Examples:
            # JSON document, watched for external edits
            store = BindingFactory.create('json', path='data/urls.json')

            # SQLite table, discovered at open time
            store = BindingFactory.create('sqlite', path='data/urls.sqlite', table_name='urls')

            # Detect from suffix
            store = BindingFactory.create(path='data/urls.sqlite')
        """
        path = kwargs.get("path")
        if path is None:
            raise ValueError("A backing store path is required")

        if store_type is None:
            store_type = BindingFactory.detect_store_type(path)
        store_type = store_type.lower()

        if store_type == "json":
            return BindingFactory._create_json(**kwargs)
        elif store_type == "sqlite":
            return BindingFactory._create_sqlite(**kwargs)
        else:
            raise ValueError(
                f"Unsupported store type: {store_type}. "
                f"Supported types: 'json', 'sqlite'"
            )

    @staticmethod
    def _create_json(**kwargs) -> JSONDocumentStore:
        options = {
            name: kwargs[name]
            for name in ("reconcile_delay", "poll_interval", "indent", "watch")
            if kwargs.get(name) is not None
        }
        return JSONDocumentStore(kwargs["path"], **options)

    @staticmethod
    def _create_sqlite(**kwargs) -> SQLiteRowStore:
        return SQLiteRowStore(kwargs["path"], table_name=kwargs.get("table_name"))

    @staticmethod
    async def create_and_initialize(store_type: Optional[str] = None, **kwargs) -> BindingInterface:
        """
        Create a binding and open it.

        Args:
            store_type: Type of backing store
            **kwargs: Additional arguments

        Returns:
            Initialized BindingInterface instance
        """
        binding = BindingFactory.create(store_type, **kwargs)
        await binding.initialize()
        logger.info(f"Binding ready: {type(binding).__name__} on {kwargs['path']}")
        return binding
