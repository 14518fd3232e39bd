"""Rendering of list cells and the scalar display rules they share."""

from __future__ import annotations

import math
import struct
from datetime import datetime, timezone
from typing import Any, Iterable

from tablescope.types import UNKNOWN_VALUE, StorageType

# Long date/time form, e.g. "September 09, 2001 01:46:40 AM UTC"
LONG_DATE_FORMAT = "%B %d, %Y %I:%M:%S %p %Z"

# Bytes shown in a binary summary before it is truncated
BINARY_PREVIEW_BYTES = 16


def render_collection(prefix: str, elements: Iterable[Any]) -> str:
    """Render ``prefix{e0,e1,...}``; an empty collection renders as ``prefix{}``."""
    return f"{prefix}{{{','.join(str(e) for e in elements)}}}"


def format_integer(value: int) -> str:
    return str(int(value))


def format_boolean(value: bool) -> str:
    return "true" if value else "false"


def format_binary(value: bytes) -> str:
    """Summarize a byte sequence as its length and a hex preview.

    The summary is for display only and does not round-trip.
    """
    data = bytes(value)
    if not data:
        return "byte[0]"
    preview = data[:BINARY_PREVIEW_BYTES].hex(" ")
    if len(data) > BINARY_PREVIEW_BYTES:
        preview += " ..."
    return f"byte[{len(data)}] {preview}"


def format_date(millis: int) -> str:
    """Format epoch milliseconds as ``"<long local date/time> (<millis>)"``.

    Millis outside the range datetime can represent format as
    ``"[UNKNOWN_VALUE] (<millis>)"``.
    """
    try:
        moment = datetime.fromtimestamp(millis / 1000, tz=timezone.utc).astimezone()
    except (ValueError, OverflowError, OSError):
        return f"{UNKNOWN_VALUE} ({millis})"
    return f"{moment.strftime(LONG_DATE_FORMAT)} ({millis})"


def _non_finite(value: float) -> str | None:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    return None


def format_double(value: float) -> str:
    special = _non_finite(value)
    if special is not None:
        return special
    return repr(float(value))


def format_float(value: float) -> str:
    """Format a 32-bit float with the shortest text that reads back the same."""
    special = _non_finite(value)
    if special is not None:
        return special
    target = struct.pack("<f", value)
    for precision in range(1, 10):
        text = f"{value:.{precision}g}"
        if struct.pack("<f", float(text)) == target:
            return repr(float(text))
    return repr(float(value))


SCALAR_FORMATTERS = {
    StorageType.INTEGER: format_integer,
    StorageType.BOOLEAN: format_boolean,
    StorageType.STRING: str,
    StorageType.BINARY: format_binary,
    StorageType.DATE: format_date,
    StorageType.FLOAT: format_float,
    StorageType.DOUBLE: format_double,
}


def format_scalar(storage_type: StorageType, value: Any) -> str:
    """Return the display text of a non-null scalar value.

    Raises:
        KeyError: If ``storage_type`` is not a scalar type.
    """
    return SCALAR_FORMATTERS[storage_type](value)
