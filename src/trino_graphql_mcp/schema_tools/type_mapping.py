"""Mapping of engine-native column types to API output types.

Handles primitive types as well as parameterized types such as
``array(...)``, ``map(...)`` and ``decimal(p, s)``. Maps are exposed as a
list of ``KeyValue`` objects whose key and value are always strings.
"""

from __future__ import annotations

from typing import Final

from .models import BOOLEAN, FLOAT, INT, STRING, ListType, ObjectType, OutputType

# Defined once for the whole process and shared by every table
KEY_VALUE_TYPE: Final[ObjectType] = ObjectType(
    name="KeyValue",
    fields=(("key", STRING), ("value", STRING)),
)

_BASE_TYPES: Final[dict[str, OutputType]] = {
    "boolean": BOOLEAN,
    "tinyint": INT,
    "smallint": INT,
    "integer": INT,
    "int": INT,
    # bigint exceeds the 32-bit Int scalar; keep full precision as text
    "bigint": STRING,
    "real": FLOAT,
    "double": FLOAT,
    "float": FLOAT,
    "varchar": STRING,
    "char": STRING,
    "varbinary": STRING,
    "json": STRING,
    "uuid": STRING,
    "ipaddress": STRING,
    "date": STRING,
    "time": STRING,
    "timestamp": STRING,
    "interval": STRING,
}


def _extract_inner(native_type: str) -> str:
    """Return the text between the first ``(`` and the last ``)``.

    Example:
        >>> _extract_inner("array(array(bigint))")
        'array(bigint)'
    """
    start = native_type.index("(") + 1
    end = native_type.rindex(")")
    return native_type[start:end].strip()


def map_type(native_type: str) -> OutputType:
    """Map an engine-native type descriptor to an output type.

    Matching is case-insensitive and ignores surrounding whitespace. Unknown
    types fall back to ``String``.

    Args:
        native_type: Type as reported by the engine, e.g. ``"array(varchar)"``

    Returns:
        The corresponding output type descriptor
    """
    normalized = native_type.strip().lower()

    if normalized.startswith("array(") and normalized.endswith(")"):
        return ListType(map_type(_extract_inner(normalized)))
    if normalized.startswith("map(") and normalized.endswith(")"):
        return ListType(KEY_VALUE_TYPE)
    if normalized.startswith("decimal("):
        return STRING

    return _BASE_TYPES.get(normalized, STRING)
