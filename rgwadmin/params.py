"""
Query parameter serialization for admin requests.

Query objects are dataclasses whose fields are declared with :func:`param`,
which records the query key and the :class:`Rule` used to render the value.
"""

from __future__ import annotations

import dataclasses
import enum
from datetime import datetime
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple
from urllib.parse import quote

from .exceptions import SerializationError

_META_KEY = "query"


class Rule(enum.Enum):
    """How a field value is rendered into the query string."""

    ALWAYS = "always"
    IF_NOT_EMPTY = "if_not_empty"
    FALSE_ONLY = "false_only"  # absence means true on the gateway side
    TRUE_ONLY = "true_only"
    TIMESTAMP = "timestamp"


def param(name: str, rule: Rule = Rule.ALWAYS, default: Any = None):
    """Declare a dataclass field serialized as query key ``name``."""
    return dataclasses.field(default=default, metadata={_META_KEY: (name, rule)})


def format_timestamp(value: datetime) -> str:
    """
    Render ``value`` as ``Y-M-D h:m:s`` without zero padding.

    The datetime's own wall-clock fields are used; no timezone conversion
    happens here.
    """
    return (
        f"{value.year}-{value.month}-{value.day} "
        f"{value.hour}:{value.minute}:{value.second}"
    )


class QueryValues:
    """Ordered multimap of query string keys to values."""

    def __init__(self, pairs: Optional[List[Tuple[str, str]]] = None) -> None:
        self._pairs: List[Tuple[str, str]] = list(pairs or [])

    def add(self, key: str, value: str) -> None:
        self._pairs.append((key, value))

    def set(self, key: str, value: str) -> None:
        """Replace every value of ``key`` with ``value``."""
        self.remove(key)
        self._pairs.append((key, value))

    def remove(self, key: str) -> None:
        self._pairs = [(k, v) for k, v in self._pairs if k != key]

    def get_all(self, key: str) -> List[str]:
        return [v for k, v in self._pairs if k == key]

    def get(self, key: str) -> Optional[str]:
        values = self.get_all(key)
        return values[0] if values else None

    def encode(self) -> str:
        """
        Encode as a query string, sorted by key.

        Repeated keys keep their insertion order.
        """
        pairs = sorted(self._pairs, key=lambda kv: kv[0])
        return "&".join(
            f"{quote(k, safe='')}={quote(v, safe='')}" for k, v in pairs
        )

    def __contains__(self, key: str) -> bool:
        return any(k == key for k, _ in self._pairs)

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        return iter(list(self._pairs))

    def __len__(self) -> int:
        return len(self._pairs)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, QueryValues):
            return self._pairs == other._pairs
        return NotImplemented

    def __repr__(self) -> str:
        return f"QueryValues({self._pairs!r})"


# ----------------------------------------------------------------------
# Rule implementations: each returns the rendered value, or None to skip
# ----------------------------------------------------------------------


def _always(value: Any) -> Optional[str]:
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise TypeError("expected a string or an integer")
    return str(value)


def _if_not_empty(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        raise TypeError("expected a string")
    return value or None


def _false_only(value: Any) -> Optional[str]:
    if not isinstance(value, bool):
        raise TypeError("expected a boolean")
    return None if value else "False"


def _true_only(value: Any) -> Optional[str]:
    if not isinstance(value, bool):
        raise TypeError("expected a boolean")
    return "True" if value else None


def _timestamp(value: Any) -> Optional[str]:
    if not isinstance(value, datetime):
        raise TypeError("expected a datetime")
    return format_timestamp(value)


_RENDERERS: Dict[Rule, Callable[[Any], Optional[str]]] = {
    Rule.ALWAYS: _always,
    Rule.IF_NOT_EMPTY: _if_not_empty,
    Rule.FALSE_ONLY: _false_only,
    Rule.TRUE_ONLY: _true_only,
    Rule.TIMESTAMP: _timestamp,
}


def serialize(obj: Any) -> QueryValues:
    """
    Build query values from a dataclass declared with :func:`param` fields.

    Args:
        obj: The query object, or ``None``.

    Returns:
        A fresh :class:`QueryValues`; empty when ``obj`` is ``None``.

    Raises:
        SerializationError: If a field value does not fit its rule.
    """
    values = QueryValues()
    if obj is None:
        return values

    for fld in dataclasses.fields(obj):
        meta = fld.metadata.get(_META_KEY)
        if meta is None:
            continue
        name, rule = meta
        value = getattr(obj, fld.name)
        if value is None:
            continue
        try:
            rendered = _RENDERERS[rule](value)
        except TypeError as exc:
            raise SerializationError(
                f"Field '{fld.name}' cannot be serialized with rule {rule.value}: {exc}",
                original=exc,
            ) from exc
        if rendered is not None:
            values.add(name, rendered)
    return values
