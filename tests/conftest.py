"""Shared fixtures: a recording transport that never touches the network."""

import json

import pytest

from rgwadmin import AdminClient, AdminConfig


class FakeRaw:
    def __init__(self):
        self.closed = False

    def close(self):
        self.closed = True


class FakeResponse:
    def __init__(self, status_code=200, content=b"{}"):
        if not isinstance(content, bytes):
            content = json.dumps(content).encode("utf-8")
        self.status_code = status_code
        self.content = content
        self.raw = FakeRaw()


class FakeTransport:
    """Records prepared requests and replays queued responses."""

    def __init__(self):
        self.requests = []
        self.responses = []
        self.error = None
        self.closed = False

    def reply(self, status_code=200, content=b"{}"):
        response = FakeResponse(status_code, content)
        self.responses.append(response)
        return response

    def send(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if not self.responses:
            return FakeResponse()
        return self.responses.pop(0)

    def close(self):
        self.closed = True

    @property
    def last(self):
        return self.requests[-1]


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def client(transport):
    config = AdminConfig(
        host="https://rgw.example.com",
        access_key="ACCESS",
        secret_key="SECRET",
        transport=transport,
    )
    return AdminClient(config)


class BrokenResponse(FakeResponse):
    """A response whose body stream fails while being read."""

    def __init__(self, status_code, error):
        super().__init__(status_code, b"")
        self._error = error

    @property
    def content(self):
        raise self._error

    @content.setter
    def content(self, value):
        pass
