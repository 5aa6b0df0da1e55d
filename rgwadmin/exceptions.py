"""
Custom exceptions for the rgwadmin client.
"""

from typing import Optional


class AdminError(Exception):
    """Base exception for all rgwadmin errors."""

    def __init__(self, message: str, code: str = "", original: Optional[Exception] = None):
        super().__init__(message)
        self.code = code
        self.original = original

    def __str__(self):
        if self.code:
            return f"[{self.code}] {super().__str__()}"
        return super().__str__()


class ConfigurationError(AdminError):
    """Raised when the client is built with missing or malformed settings."""


class RequestError(AdminError):
    """Raised when an outgoing request cannot be built."""


class TransportError(AdminError):
    """Raised when the HTTP exchange itself fails."""


class SerializationError(AdminError):
    """Raised when a query field does not match its serialization rule."""


class DecodeError(AdminError):
    """Raised when a response body is not the expected JSON document."""


class ResponseError(AdminError):
    """Base for failures reported by the gateway in its response."""

    def __init__(
        self,
        message: str,
        status: int,
        code: str = "",
        body: Optional[bytes] = None,
    ):
        super().__init__(message, code=code)
        self.status = status
        self.body = body


class APIError(ResponseError):
    """
    The gateway answered with an error document (``{"Code": ...}``).

    Raised whenever ``Code`` is non-empty, whatever the HTTP status was.
    """


class StatusError(ResponseError):
    """Raised on a non-200 status when the body carries no error code."""
