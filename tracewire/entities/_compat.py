"""Lenient wire-decoding helpers shared by the entity ``from_dict`` methods.

The trace store has renamed a few fields over time (``request_id`` became
``trace_id``, ``status`` became ``state``). Decoders accept both and prefer the
new name. Values of the wrong type fall back to a default instead of raising.
"""

from __future__ import annotations

import math
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, TypeVar

E = TypeVar('E', bound=Enum)


def resolve_field(data: Mapping[str, Any], new: str, old: str, default: Any = None) -> Any:
    """Return ``data[new]``, else ``data[old]``, else ``default`` (``None`` counts as absent)."""
    value = data.get(new)
    if value is None:
        value = data.get(old)
    return default if value is None else value


def as_str(value: Any, default: str = '') -> str:
    return value if isinstance(value, str) else default


def as_optional_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def as_int(value: Any, default: int | None = 0) -> int | None:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else default
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            pass
        try:
            parsed = float(value)
        except ValueError:
            return default
        return int(parsed) if math.isfinite(parsed) else default
    return default


def as_dict(value: Any) -> dict[str, Any]:
    return dict(value) if isinstance(value, Mapping) else {}


def as_enum(enum_cls: type[E], value: Any, default: E) -> E:
    try:
        return enum_cls(value)
    except ValueError:
        return default


def freeze(value: Any) -> Any:
    """Return a read-only copy of a mapping; other values pass through."""
    if isinstance(value, MappingProxyType):
        return value
    if isinstance(value, Mapping):
        return MappingProxyType(dict(value))
    return value


def thaw(value: Any) -> Any:
    """Inverse of ``freeze`` for encoding: read-only mappings become plain dicts."""
    return dict(value) if isinstance(value, Mapping) else value
