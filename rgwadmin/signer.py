"""
SigV4 request signing for the RADOS Gateway admin API.
"""

from __future__ import annotations

import hashlib
import io
import logging
from datetime import datetime, timezone
from typing import Optional

from botocore.auth import SIGV4_TIMESTAMP, SigV4Auth
from botocore.awsrequest import AWSRequest
from botocore.credentials import Credentials

logger = logging.getLogger(__name__)

# The gateway ignores region; the service is always S3.
DEFAULT_SERVICE = "s3"
DEFAULT_REGION = "us-east-1"

CONTENT_SHA256_HEADER = "X-Amz-Content-SHA256"


def payload_digest(body) -> str:
    """
    Return the hex SHA-256 digest of a request body.

    ``None`` and empty bodies digest as ``b""``. File-like bodies are read
    from their current position and rewound afterwards.
    """
    if body is None:
        return hashlib.sha256(b"").hexdigest()
    if isinstance(body, str):
        return hashlib.sha256(body.encode("utf-8")).hexdigest()
    if isinstance(body, (bytes, bytearray)):
        return hashlib.sha256(body).hexdigest()

    start = body.tell()
    digest = hashlib.sha256()
    for chunk in iter(lambda: body.read(1024 * 1024), b""):
        digest.update(chunk)
    body.seek(start)
    return digest.hexdigest()


class AdminSigner(SigV4Auth):
    """
    SigV4 signer bound to one pair of admin credentials.

    Example usage::

        signer = AdminSigner("ACCESS", "SECRET")
        request = AWSRequest(method="GET", url="https://rgw/admin/user?format=json")
        signer.sign(request)
    """

    def __init__(
        self,
        access_key: str,
        secret_key: str,
        service: str = DEFAULT_SERVICE,
        region: str = DEFAULT_REGION,
    ) -> None:
        super().__init__(Credentials(access_key, secret_key), service, region)

    def sign(self, request: AWSRequest, when: Optional[datetime] = None) -> AWSRequest:
        """
        Sign ``request`` in place.

        Args:
            request: The request to sign. Only its headers are changed.
            when: Signing instant; defaults to now. Naive datetimes are
                  taken as UTC.

        Returns:
            The same request, for chaining.
        """
        if when is None:
            when = datetime.now(timezone.utc)
        elif when.tzinfo is not None:
            when = when.astimezone(timezone.utc)

        request.context["timestamp"] = when.strftime(SIGV4_TIMESTAMP)
        if CONTENT_SHA256_HEADER in request.headers:
            del request.headers[CONTENT_SHA256_HEADER]
        request.headers[CONTENT_SHA256_HEADER] = self._read_digest(request)

        self._modify_request_before_signing(request)
        canonical_request = self.canonical_request(request)
        string_to_sign = self.string_to_sign(request, canonical_request)
        signature = self.signature(string_to_sign, request)
        self._inject_signature_to_request(request, signature)
        logger.debug("Signed %s %s at %s", request.method, request.url, request.context["timestamp"])
        return request

    def add_auth(self, request: AWSRequest) -> None:
        self.sign(request)

    def payload(self, request: AWSRequest) -> str:
        return self._read_digest(request)

    @staticmethod
    def _read_digest(request: AWSRequest) -> str:
        body = request.data
        if body and not isinstance(body, (str, bytes, bytearray)) and not _seekable(body):
            # one-shot stream: buffer it so it can still be sent
            request.data = io.BytesIO(body.read())
            body = request.data
        return payload_digest(body or None)


def _seekable(body) -> bool:
    seekable = getattr(body, "seekable", None)
    if seekable is not None:
        return seekable()
    return hasattr(body, "seek") and hasattr(body, "tell")
