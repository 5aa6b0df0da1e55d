"""
Result types returned by the admin API, and the JSON decoder that builds them.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Type, TypeVar

from .exceptions import DecodeError

T = TypeVar("T")


def _mapping(data: Any, what: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise DecodeError(f"Expected a JSON object for {what}, got {type(data).__name__}")
    return data


def _str(data: Dict[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise DecodeError(f"Expected a string for '{key}', got {type(value).__name__}")
    return value


def _int(data: Dict[str, Any], key: str) -> int:
    value = data.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise DecodeError(f"Expected an integer for '{key}', got {type(value).__name__}")
    return value


def _list(data: Dict[str, Any], key: str, item_cls) -> list:
    items = data.get(key)
    if items is None:
        return []
    if not isinstance(items, list):
        raise DecodeError(f"Expected a JSON array for '{key}', got {type(items).__name__}")
    return [item_cls.from_dict(item) for item in items]


# ----------------------------------------------------------------------
# Usage
# ----------------------------------------------------------------------


@dataclass
class UsageCounters:
    """Byte and operation counters for one category, or a total."""

    bytes_sent: int = 0
    bytes_received: int = 0
    ops: int = 0
    successful_ops: int = 0

    @classmethod
    def from_dict(cls, data: Any) -> "UsageCounters":
        data = _mapping(data, "usage counters")
        return cls(
            bytes_sent=_int(data, "bytes_sent"),
            bytes_received=_int(data, "bytes_received"),
            ops=_int(data, "ops"),
            successful_ops=_int(data, "successful_ops"),
        )


@dataclass
class UsageCategory(UsageCounters):
    category: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "UsageCategory":
        counters = UsageCounters.from_dict(data)
        return cls(category=_str(data, "category"), **vars(counters))


@dataclass
class BucketUsage:
    bucket: str = ""
    time: str = ""
    epoch: int = 0
    owner: str = ""
    categories: List[UsageCategory] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "BucketUsage":
        data = _mapping(data, "bucket usage")
        return cls(
            bucket=_str(data, "bucket"),
            time=_str(data, "time"),
            epoch=_int(data, "epoch"),
            owner=_str(data, "owner"),
            categories=_list(data, "categories", UsageCategory),
        )


@dataclass
class UsageEntry:
    """Per-user usage entries, broken down by bucket."""

    user: str = ""
    buckets: List[BucketUsage] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "UsageEntry":
        data = _mapping(data, "usage entry")
        return cls(user=_str(data, "user"), buckets=_list(data, "buckets", BucketUsage))


@dataclass
class UsageSummary:
    user: str = ""
    categories: List[UsageCategory] = field(default_factory=list)
    total: UsageCounters = field(default_factory=UsageCounters)

    @classmethod
    def from_dict(cls, data: Any) -> "UsageSummary":
        data = _mapping(data, "usage summary")
        total = data.get("total")
        return cls(
            user=_str(data, "user"),
            categories=_list(data, "categories", UsageCategory),
            total=UsageCounters.from_dict(total) if total is not None else UsageCounters(),
        )


@dataclass
class Usage:
    """Bandwidth usage report returned by ``GET /admin/usage``."""

    entries: List[UsageEntry] = field(default_factory=list)
    summary: List[UsageSummary] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "Usage":
        data = _mapping(data, "usage")
        return cls(
            entries=_list(data, "entries", UsageEntry),
            summary=_list(data, "summary", UsageSummary),
        )


# ----------------------------------------------------------------------
# Users
# ----------------------------------------------------------------------


@dataclass
class SubUser:
    id: str = ""
    permissions: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "SubUser":
        data = _mapping(data, "subuser")
        return cls(id=_str(data, "id"), permissions=_str(data, "permissions"))


@dataclass
class S3Key:
    user: str = ""
    access_key: str = ""
    secret_key: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "S3Key":
        data = _mapping(data, "key")
        return cls(
            user=_str(data, "user"),
            access_key=_str(data, "access_key"),
            secret_key=_str(data, "secret_key"),
        )

    def __repr__(self) -> str:
        return f"S3Key(user={self.user!r}, access_key={self.access_key!r})"


@dataclass
class SwiftKey:
    user: str = ""
    secret_key: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "SwiftKey":
        data = _mapping(data, "swift key")
        return cls(user=_str(data, "user"), secret_key=_str(data, "secret_key"))

    def __repr__(self) -> str:
        return f"SwiftKey(user={self.user!r})"


@dataclass
class Capability:
    """A granted capability, e.g. ``usage=read``."""

    type: str = ""
    perm: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "Capability":
        data = _mapping(data, "capability")
        return cls(type=_str(data, "type"), perm=_str(data, "perm"))


@dataclass
class User:
    """User record returned by ``GET /admin/user``."""

    user_id: str = ""
    display_name: str = ""
    email: str = ""
    suspended: int = 0
    max_buckets: int = 0
    subusers: List[SubUser] = field(default_factory=list)
    keys: List[S3Key] = field(default_factory=list)
    swift_keys: List[SwiftKey] = field(default_factory=list)
    caps: List[Capability] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "User":
        data = _mapping(data, "user")
        return cls(
            user_id=_str(data, "user_id"),
            display_name=_str(data, "display_name"),
            email=_str(data, "email"),
            suspended=_int(data, "suspended"),
            max_buckets=_int(data, "max_buckets"),
            subusers=_list(data, "subusers", SubUser),
            keys=_list(data, "keys", S3Key),
            swift_keys=_list(data, "swift_keys", SwiftKey),
            caps=_list(data, "caps", Capability),
        )


def decode(body: bytes, result_cls: Type[T]) -> T:
    """
    Parse a response body into ``result_cls``.

    Raises:
        DecodeError: If the body is not JSON or does not have the shape of
                     ``result_cls``.
    """
    try:
        data = json.loads(body)
    except ValueError as exc:
        raise DecodeError(f"Response is not valid JSON: {exc}", original=exc) from exc
    return result_cls.from_dict(data)
