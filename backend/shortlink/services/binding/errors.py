"""
Exceptions raised by the persistence bindings.

Setup failures (InvalidTargetError, SchemaError) abort opening a binding.
Write failures surface from the durable writer; the JSON store only logs
them for mutation write-backs.
"""


class BindingError(Exception):
    """Base class for every binding failure."""
    pass


class InvalidTargetError(BindingError):
    """Raised when the backing path cannot hold a store (e.g. a directory)."""
    pass


class LockAcquisitionError(BindingError):
    """Raised when the exclusive file lock cannot be taken."""
    pass


class WriteError(BindingError):
    """Raised when writing the document fails after the lock was taken."""
    pass


class SchemaError(BindingError):
    """Raised when no usable table or primary key is found."""
    pass


class CoercionError(BindingError, ValueError):
    """Raised when a key or value cannot be converted to a column type."""

    def __init__(self, value, declared_type: str, reason: str = ""):
        self.value = value
        self.declared_type = declared_type
        message = f"Cannot coerce {value!r} to {declared_type}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class BindingClosedError(BindingError):
    """Raised when a binding is used before it is opened or after it is closed."""
    pass
