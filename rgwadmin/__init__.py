"""
rgwadmin - Python client for the Ceph RADOS Gateway admin API
"""

from .client import AdminClient, AdminConfig, UsageConfig, UsageRemovalConfig
from .exceptions import (
    AdminError,
    APIError,
    ConfigurationError,
    DecodeError,
    RequestError,
    ResponseError,
    SerializationError,
    StatusError,
    TransportError,
)
from .models import Usage, User

__version__ = "0.1.0"
__all__ = [
    "AdminClient",
    "AdminConfig",
    "UsageConfig",
    "UsageRemovalConfig",
    "Usage",
    "User",
    "AdminError",
    "APIError",
    "ConfigurationError",
    "DecodeError",
    "RequestError",
    "ResponseError",
    "SerializationError",
    "StatusError",
    "TransportError",
]
