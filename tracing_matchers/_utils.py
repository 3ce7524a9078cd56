from __future__ import annotations as _annotations

from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic_core import to_json
from typing_extensions import TypeGuard

T = TypeVar('T')


class Unspecified:
    """A singleton to represent a predicate without a specific value, e.g. "has any tag"."""

    def __repr__(self) -> str:
        return 'UNSPECIFIED'


UNSPECIFIED = Unspecified()


def is_specified(t_or_unspecified: T | Unspecified) -> TypeGuard[T]:
    return t_or_unspecified is not UNSPECIFIED


def render_value(value: Any) -> str:
    """Render a value the same way across tags, log fields and baggage, e.g. `"value"`, `1`, `true` or `null`."""
    return to_json(value, fallback=repr).decode()


def render_mapping(mapping: Mapping[str, Any]) -> str:
    """Render a mapping as a key-sorted literal, e.g. `{"tag"=>"value"}`."""
    pairs = ', '.join(f'{render_value(key)}=>{render_value(value)}' for key, value in sorted(mapping.items()))
    return f'{{{pairs}}}'


def quote(operation_name: str) -> str:
    return f'"{operation_name}"'
