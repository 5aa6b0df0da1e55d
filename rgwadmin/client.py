"""
rgwadmin client - admin operations for the Ceph RADOS Gateway.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional, Tuple
from urllib.parse import urlsplit

from botocore.awsrequest import AWSRequest
from botocore.exceptions import BotoCoreError
from botocore.httpsession import URLLib3Session
from urllib3.exceptions import HTTPError

from .exceptions import (
    APIError,
    ConfigurationError,
    RequestError,
    StatusError,
    TransportError,
)
from .models import Usage, User, decode
from .params import QueryValues, Rule, param, serialize
from .signer import AdminSigner

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_PREFIX = "admin"
SUPPORTED_VERBS = ("GET", "PUT", "POST", "DELETE")


@dataclass(frozen=True)
class AdminConfig:
    """Configuration for AdminClient."""

    host: str
    access_key: str
    secret_key: str
    admin_prefix: str = DEFAULT_ADMIN_PREFIX
    transport: Any = None  # anything with send(prepared_request)
    extra_session_config: dict = field(default_factory=dict)

    @classmethod
    def from_env(cls, prefix: str = "RGW_", environ=None) -> "AdminConfig":
        """
        Read ``<prefix>HOST``, ``<prefix>ACCESS_KEY``, ``<prefix>SECRET_KEY``
        and, optionally, ``<prefix>ADMIN_PREFIX`` from the environment.
        """
        env = os.environ if environ is None else environ
        return cls(
            host=env.get(prefix + "HOST", ""),
            access_key=env.get(prefix + "ACCESS_KEY", ""),
            secret_key=env.get(prefix + "SECRET_KEY", ""),
            admin_prefix=env.get(prefix + "ADMIN_PREFIX", DEFAULT_ADMIN_PREFIX),
        )

    def __repr__(self) -> str:
        return (
            f"AdminConfig(host={self.host!r}, access_key={self.access_key!r}, "
            f"admin_prefix={self.admin_prefix!r})"
        )


@dataclass
class UsageConfig:
    """Filters for a usage query."""

    uid: Optional[str] = param("uid", Rule.IF_NOT_EMPTY)  # all users when unset
    start: Optional[datetime] = param("start", Rule.TIMESTAMP)
    end: Optional[datetime] = param("end", Rule.TIMESTAMP)  # non-inclusive
    show_entries: bool = param("show-entries", Rule.FALSE_ONLY, default=False)
    show_summary: bool = param("show-summary", Rule.FALSE_ONLY, default=False)


@dataclass
class UsageRemovalConfig:
    """Selects the usage data to remove."""

    uid: Optional[str] = param("uid", Rule.IF_NOT_EMPTY)
    start: Optional[datetime] = param("start", Rule.TIMESTAMP)
    end: Optional[datetime] = param("end", Rule.TIMESTAMP)
    # Required when uid is not given, to acknowledge multi-user removal.
    remove_all: bool = param("remove-all", Rule.TRUE_ONLY, default=False)


class AdminClient:
    """
    Client for the RADOS Gateway admin API.

    Every call is a single signed request; the client holds no per-call
    state and can be shared between threads.

    Example usage::

        from rgwadmin import AdminClient, AdminConfig, UsageConfig

        config = AdminConfig(
            host="https://rgw.example.com",
            access_key="ADMIN_ACCESS_KEY",
            secret_key="ADMIN_SECRET_KEY",
        )
        with AdminClient(config) as client:
            user = client.get_user("alice")
            usage = client.get_usage(UsageConfig(uid="alice", show_summary=True))
    """

    def __init__(self, config: AdminConfig) -> None:
        self.config = config
        self._validate_config()
        self._host = config.host.rstrip("/")
        self._signer = AdminSigner(config.access_key, config.secret_key)
        self._owns_transport = config.transport is None
        self._transport = config.transport or URLLib3Session(**config.extra_session_config)

    @classmethod
    def from_credentials(
        cls,
        host: str,
        access_key: str,
        secret_key: str,
        admin_prefix: str = DEFAULT_ADMIN_PREFIX,
        transport: Any = None,
    ) -> "AdminClient":
        return cls(AdminConfig(host, access_key, secret_key, admin_prefix, transport))

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _validate_config(self) -> None:
        conf = self.config
        if not conf.host or not conf.access_key or not conf.secret_key:
            raise ConfigurationError("host, access_key and secret_key must be set")
        parts = urlsplit(conf.host)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ConfigurationError(f"Host must be an http(s) URL: {conf.host!r}")

    def _make_request(self, verb: str, url: str) -> Tuple[bytes, int]:
        """Sign and send one request; return the raw body and status."""
        if verb not in SUPPORTED_VERBS:
            raise RequestError(f"Unsupported HTTP verb: {verb!r}")

        request = AWSRequest(method=verb, url=url)
        try:
            self._signer.sign(request)
            prepared = request.prepare()
        except ValueError as exc:
            raise RequestError(f"Malformed request URL {url!r}: {exc}", original=exc) from exc

        logger.debug("%s %s", verb, url)
        try:
            response = self._transport.send(prepared)
        except (BotoCoreError, OSError) as exc:
            raise TransportError(f"{verb} {url} failed: {exc}", original=exc) from exc

        try:
            status = response.status_code
            body = response.content
        except (BotoCoreError, HTTPError, OSError) as exc:
            raise TransportError(f"{verb} {url}: reading the response failed: {exc}", original=exc) from exc
        finally:
            _close_response(response)
        logger.debug("%s %s -> %s (%d bytes)", verb, url, status, len(body))

        code = _error_code(body)
        if code:
            raise APIError(f"{verb} {url} returned HTTP {status}", status=status, code=code, body=body)
        if status != 200:
            raise StatusError(f"{verb} {url} returned HTTP {status}", status=status, body=body)
        return body, status

    def _call(
        self,
        verb: str,
        route: str,
        values: QueryValues,
        use_prefix: bool = True,
        sub: Optional[str] = None,
    ) -> Tuple[bytes, int]:
        if use_prefix:
            route = f"/{self.config.admin_prefix}{route}"
        subquery = f"{sub}&" if sub else ""
        return self._make_request(verb, f"{self._host}{route}?{subquery}{values.encode()}")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get_usage(self, config: Optional[UsageConfig] = None) -> Usage:
        """
        Request bandwidth usage information.

        Requires the ``usage=read`` capability.

        Args:
            config: Optional filters (uid, start/end window, show-entries and
                    show-summary flags). Without it the gateway defaults apply.

        Returns:
            The decoded :class:`Usage` report.

        Raises:
            APIError: If the gateway reports an error code.
            StatusError: On a non-200 status without an error code.
            TransportError: If the request could not be sent or read.
            DecodeError: If the body is not a usage document.
        """
        values = serialize(config)
        values.add("format", "json")
        if config is not None:
            if not config.show_entries:
                values.set("show-entries", "False")
            if not config.show_summary:
                values.set("show-summary", "False")

        body, _ = self._call("GET", "/usage", values)
        return decode(body, Usage)

    def delete_usage(self, config: Optional[UsageRemovalConfig] = None) -> None:
        """
        Remove usage information.

        Requires the ``usage=write`` capability. Without a uid and a time
        window, all usage data is removed.

        Raises:
            APIError: If the gateway reports an error code.
            StatusError: On a non-200 status without an error code.
            TransportError: If the request could not be sent or read.
        """
        values = serialize(config)
        values.add("format", "json")
        self._call("DELETE", "/usage", values)

    def get_user(self, uid: Optional[str] = None) -> User:
        """
        Get user information.

        Requires the ``users=read`` capability. When ``uid`` is omitted the
        gateway is asked for every user.

        Returns:
            The decoded :class:`User`.

        Raises:
            APIError: If the gateway reports an error code.
            StatusError: On a non-200 status without an error code.
            TransportError: If the request could not be sent or read.
            DecodeError: If the body is not a single user document. Without
                         ``uid`` the gateway answers with a JSON array of
                         user ids, which always ends here.
        """
        values = QueryValues([("format", "json")])
        if uid is not None:
            values.add("uid", uid)
        body, _ = self._call("GET", "/user", values)
        return decode(body, User)

    # ------------------------------------------------------------------
    # Context manager support
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_transport:
            self._transport.close()

    def __enter__(self) -> "AdminClient":
        return self

    def __exit__(self, *_) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"AdminClient(host={self.config.host!r}, "
            f"admin_prefix={self.config.admin_prefix!r})"
        )


def _error_code(body: bytes) -> str:
    """Return the ``Code`` of an error document, or ``""``."""
    try:
        data = json.loads(body)
    except ValueError:
        return ""
    if isinstance(data, dict):
        code = data.get("Code")
        if isinstance(code, str):
            return code
    return ""


def _close_response(response) -> None:
    raw = getattr(response, "raw", None)
    if raw is not None and hasattr(raw, "close"):
        raw.close()
