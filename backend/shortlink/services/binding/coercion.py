"""
Conversion of caller-supplied keys and values to a column's declared type.

The declared type name is matched case-insensitively:
    INTEGER          -> int
    REAL             -> float
    DATE, DATETIME   -> canonical ISO-8601 UTC string (YYYY-MM-DDTHH:MM:SS.mmmZ)
    anything else    -> str
None always passes through as SQL NULL.
"""
import math
from datetime import date, datetime, timezone
from typing import Any, Optional

from .errors import CoercionError


def coerce(value: Any, declared_type: Optional[str]) -> Any:
    """
    Coerce value for a column declared as declared_type.

    Raises:
        CoercionError: If value cannot be represented in the column type
    """
    if value is None:
        return None

    kind = (declared_type or "").strip().upper()
    if kind == "INTEGER":
        return _to_integer(value, kind)
    if kind == "REAL":
        return _to_real(value, kind)
    if kind in ("DATE", "DATETIME"):
        return _to_timestamp(value, kind)
    return str(value)


def _to_integer(value: Any, kind: str) -> int:
    if isinstance(value, bool):
        raise CoercionError(value, kind, "booleans are not integers")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value.is_integer():
            return int(value)
        raise CoercionError(value, kind, "not a whole number")
    try:
        return int(str(value).strip(), 10)
    except ValueError as e:
        raise CoercionError(value, kind, "not an integer") from e


def _to_real(value: Any, kind: str) -> float:
    if isinstance(value, bool):
        raise CoercionError(value, kind, "booleans are not numbers")
    try:
        result = float(value) if isinstance(value, (int, float)) else float(str(value).strip())
    except ValueError as e:
        raise CoercionError(value, kind, "not a number") from e
    if not math.isfinite(result):
        raise CoercionError(value, kind, "not a finite number")
    return result


def _to_timestamp(value: Any, kind: str) -> str:
    if isinstance(value, bool):
        raise CoercionError(value, kind, "booleans are not timestamps")
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        moment = datetime(value.year, value.month, value.day)
    elif isinstance(value, (int, float)):
        # Epoch milliseconds
        try:
            moment = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as e:
            raise CoercionError(value, kind, "timestamp out of range") from e
    else:
        text = str(value).strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            moment = datetime.fromisoformat(text)
        except ValueError as e:
            raise CoercionError(value, kind, "not an ISO-8601 timestamp") from e

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")
