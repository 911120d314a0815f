"""Closed value type for data read from JSON, YAML and TOML files.

A ``Value`` is one of: ``None``, ``bool``, ``Integer``, ``Float``, ``str``,
``list[Value]`` or ``dict[str, Value]`` (insertion-ordered). Numbers keep
their subtype explicitly; reading an ``Integer`` as a float (or the
reverse) raises ``TypeError`` instead of reinterpreting the value.
"""

from __future__ import annotations

import datetime
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Integer:
    value: int

    is_int = True
    is_float = False

    def as_int(self) -> int:
        return self.value

    def as_float(self) -> float:
        raise TypeError(f"{self.value!r} is an integer; use to_float() to convert")

    def to_float(self) -> float:
        return float(self.value)


@dataclass(frozen=True)
class Float:
    value: float

    is_int = False
    is_float = True

    def as_int(self) -> int:
        raise TypeError(f"{self.value!r} is a float; use to_int() to convert")

    def as_float(self) -> float:
        return self.value

    def to_int(self) -> int:
        return int(self.value)


Number = Union[Integer, Float]
Value = Union[None, bool, Integer, Float, str, list["Value"], dict[str, "Value"]]


def to_value(raw: Any) -> Value:
    """Convert a parsed document fragment into a ``Value``.

    Dates and times (YAML timestamps, TOML datetimes) become ISO strings;
    mapping keys become strings.
    """
    if raw is None:
        return None
    # bool before int: bool is an int subclass
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, int):
        return Integer(raw)
    if isinstance(raw, float):
        return Float(raw)
    if isinstance(raw, str):
        return raw
    if isinstance(raw, (datetime.date, datetime.time)):
        return raw.isoformat()
    if isinstance(raw, Mapping):
        return {str(k): to_value(v) for k, v in raw.items()}
    if isinstance(raw, (list, tuple)):
        return [to_value(v) for v in raw]
    raise TypeError(f"Unsupported data value type: {type(raw).__name__}")


def to_python(value: Value) -> Any:
    """Unwrap numbers so the result is plain JSON-like Python data."""
    if isinstance(value, (Integer, Float)):
        return value.value
    if isinstance(value, dict):
        return {k: to_python(v) for k, v in value.items()}
    if isinstance(value, list):
        return [to_python(v) for v in value]
    return value


__all__ = [
    "Float",
    "Integer",
    "Number",
    "Value",
    "to_python",
    "to_value",
]
