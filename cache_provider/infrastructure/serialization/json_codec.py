"""
JSON Codec for Cached Values

Encodes arbitrary value graphs to compact JSON text with orjson and decodes
them back with pydantic, driven by the type the caller asks for.

Encoding rules:
- Primitives, dicts, lists/tuples/sets, dataclasses, pydantic models, enums,
  datetimes, UUIDs, Decimals and numpy scalars become JSON primitives
- A reference cycle drops the back-edge instead of failing
- ``pandas.DataFrame`` becomes ``[[[label, dtype], ...], {row}, {row}, ...]`` so
  a reader can rebuild the frame, column label types included, without
  knowing its shape in advance

Decoding never raises: blank text, malformed JSON and validation failures
all read as a cache miss (``None``).

Architectural Decision: orjson + pydantic.TypeAdapter
- orjson is the fastest JSON encoder available and already used for cache values
- TypeAdapter validates into dataclasses, models and parametrized generics
  without per-type serializer classes
"""

import dataclasses
import enum
import uuid
from datetime import date, datetime, time
from decimal import Decimal
from functools import lru_cache
from typing import Any

import numpy as np
import orjson
import pandas as pd
from pydantic import BaseModel, TypeAdapter

from cache_provider.core.exceptions import CacheSerializationError
from cache_provider.core.logging import get_logger

logger = get_logger(__name__)

# Returned for a child that points back at one of its ancestors
_BACK_EDGE = object()


# =============================================================================
# ENCODING
# =============================================================================


def encode(value: Any) -> str:
    """
    Encode a value to JSON text.

    Args:
        value: Value to cache

    Returns:
        str: Compact JSON

    Raises:
        CacheSerializationError: If the value contains an unsupported object
            or nests too deeply to encode
    """
    try:
        primitive = _to_primitive(value, set())
        return orjson.dumps(primitive).decode("utf-8")
    except (TypeError, ValueError, RecursionError) as e:
        raise CacheSerializationError.from_exception(
            e,
            message=f"Cannot encode value of type {type(value).__name__}",
            value_type=type(value).__name__,
        ) from e


def _mapping_key(key: Any) -> str:
    if isinstance(key, enum.Enum):
        key = key.value
    return key if isinstance(key, str) else str(key)


def _to_primitive(value: Any, ancestors: set[int]) -> Any:
    # numpy scalars and enums subclass float/int, orjson only takes the exact types
    if isinstance(value, np.generic):
        return _to_primitive(value.item(), ancestors)
    if isinstance(value, enum.Enum):
        return _to_primitive(value.value, ancestors)
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, (uuid.UUID, Decimal)):
        return str(value)
    if isinstance(value, pd.DataFrame):
        return _encode_table(value)

    marker = id(value)
    if marker in ancestors:
        return _BACK_EDGE

    ancestors.add(marker)
    try:
        if isinstance(value, BaseModel):
            fields = type(value).model_fields
            items = ((info.alias or name, getattr(value, name)) for name, info in fields.items())
            return _encode_items(items, ancestors)
        if dataclasses.is_dataclass(value) and not isinstance(value, type):
            items = ((f.name, getattr(value, f.name)) for f in dataclasses.fields(value))
            return _encode_items(items, ancestors)
        if isinstance(value, dict):
            return _encode_items(value.items(), ancestors)
        if isinstance(value, (list, tuple, set, frozenset)):
            encoded = (_to_primitive(item, ancestors) for item in value)
            return [item for item in encoded if item is not _BACK_EDGE]
        if hasattr(value, "__dict__"):
            items = ((k, v) for k, v in vars(value).items() if not k.startswith("_"))
            return _encode_items(items, ancestors)
    finally:
        ancestors.discard(marker)

    raise TypeError(f"Type is not JSON serializable: {type(value).__name__}")


def _encode_items(items, ancestors: set[int]) -> dict[str, Any]:
    result = {}
    for key, item in items:
        encoded = _to_primitive(item, ancestors)
        if encoded is not _BACK_EDGE:
            result[_mapping_key(key)] = encoded
    return result


def _encode_table(frame: pd.DataFrame) -> list[Any]:
    """First element: [label, dtype name] pairs. Then one object per row."""
    columns = [
        [_to_primitive(column, set()), str(dtype)] for column, dtype in frame.dtypes.items()
    ]
    cells = frame.astype(object).where(frame.notna(), None)
    rows = [
        {_mapping_key(column): _to_primitive(cell, set()) for column, cell in record.items()}
        for record in cells.to_dict("records")
    ]
    return [columns, *rows]


# =============================================================================
# DECODING
# =============================================================================


@lru_cache(maxsize=256)
def _adapter(value_type: Any) -> TypeAdapter:
    return TypeAdapter(value_type)


def _is_table_type(value_type: Any) -> bool:
    return isinstance(value_type, type) and issubclass(value_type, pd.DataFrame)


def _decode_table(payload: list[Any]) -> pd.DataFrame:
    columns, *rows = payload
    labels = [tuple(label) if isinstance(label, list) else label for label, _ in columns]
    data = {
        label: pd.Series([row.get(_mapping_key(label)) for row in rows], dtype=dtype)
        for label, (_, dtype) in zip(labels, columns)
    }
    return pd.DataFrame(data, columns=labels)


def decode(text: str | bytes | None, value_type: Any) -> Any | None:
    """
    Decode JSON text into ``value_type``.

    Args:
        text: Stored JSON text (``None`` on a cache miss)
        value_type: Expected type; a tag string, ``Any`` or ``object``
            returns the raw JSON structure

    Returns:
        The decoded value, or None if the text is blank or cannot be decoded
    """
    if text is None:
        return None
    if isinstance(text, bytes):
        text = text.decode("utf-8", errors="replace")
    if not text.strip():
        return None

    try:
        payload = orjson.loads(text)
        if payload is None:
            return None
        if isinstance(value_type, str) or value_type in (Any, object):
            return payload
        if _is_table_type(value_type):
            return _decode_table(payload)
        return _adapter(value_type).validate_python(payload)
    except Exception as e:
        logger.debug(
            "Cached value could not be decoded",
            value_type=getattr(value_type, "__name__", repr(value_type)),
            error=str(e),
        )
        return None
