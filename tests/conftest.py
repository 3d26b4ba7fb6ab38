import aiohttp
import pytest
from multidict import CIMultiDict


class MockStream:
    def __init__(self, body):
        self._body = body
        self.read_calls = 0

    async def iter_chunked(self, n):
        for start in range(0, len(self._body), n):
            self.read_calls += 1
            yield self._body[start:start + n]


class MockResponse:
    def __init__(self, body=b"", headers=None, content_length=None, charset=None,
                 peername=None):
        self.headers = CIMultiDict(headers or {})
        self.content_length = content_length
        self.charset = charset
        self.content = MockStream(body)
        self.peername = peername
        # aiohttp releases the connection of a fully received response
        self.connection = None

    @property
    def read_calls(self):
        return self.content.read_calls

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        pass


class MockSession:
    def __init__(self, response=None, error=None):
        self._response = response
        self._error = error
        self.requests = []
        self.timeout = None
        self.connector = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if self.connector is not None:
            await self.connector.close()

    def get(self, url, **kwargs):
        self.requests.append((url, kwargs.get("headers")))
        if self._error is not None:
            raise self._error
        if self.connector is not None:
            self.connector.peername = self._response.peername
        return self._response


class FakeLookup:
    def __init__(self, country=None, error=None):
        self.country = country
        self.error = error
        self.calls = []

    def lookup_country(self, ip):
        self.calls.append(ip)
        if self.error is not None:
            raise self.error
        return self.country


@pytest.fixture
def fake_http(monkeypatch):
    """Install a MockSession serving *response* (or raising *error*)."""

    def install(response=None, error=None):
        session = MockSession(response, error)

        def factory(connector=None, timeout=None, **kwargs):
            session.connector = connector
            session.timeout = timeout
            return session

        monkeypatch.setattr(aiohttp, "ClientSession", factory)
        return session

    return install
