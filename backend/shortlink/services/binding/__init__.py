"""
Persistence bindings: a key -> value contract over a durable backing store.
Supports a watched JSON document and a single SQLite table.
"""
from .base import BindingInterface
from .errors import (
    BindingError,
    BindingClosedError,
    CoercionError,
    InvalidTargetError,
    LockAcquisitionError,
    SchemaError,
    WriteError,
)
from .json_adapter import JSONDocumentStore, StoreState
from .sqlite_adapter import SQLiteRowStore
from .factory import BindingFactory
from .shutdown import ShutdownHook

__all__ = [
    "BindingInterface",
    "BindingError",
    "BindingClosedError",
    "CoercionError",
    "InvalidTargetError",
    "LockAcquisitionError",
    "SchemaError",
    "WriteError",
    "JSONDocumentStore",
    "StoreState",
    "SQLiteRowStore",
    "BindingFactory",
    "ShutdownHook",
]
