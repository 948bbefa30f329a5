import socket
from typing import Dict, List, Optional

import httpcore
import httpx
import pytest

from pagefetch.fetch.fetcher import Fetcher

class MockSite:
    """
    In-memory web for fetcher tests.

    Routes are keyed by absolute URL; every request that reaches the
    transport is recorded, so tests can assert what was (not) contacted.
    """

    def __init__(self):
        self.routes: Dict[str, object] = {}
        self.requests: List[httpx.Request] = []
        self.transport = httpx.MockTransport(self._handle)

    def page(self, url: str, html: str, status_code: int = 200, headers: Optional[dict] = None):
        self.routes[str(httpx.URL(url))] = httpx.Response(status_code, html=html, headers=headers)

    def redirect(self, url: str, location: str, status_code: int = 302):
        self.routes[str(httpx.URL(url))] = httpx.Response(status_code, headers={"Location": location})

    def route(self, url: str, handler):
        self.routes[str(httpx.URL(url))] = handler

    def fetcher(self, **kwargs) -> Fetcher:
        return Fetcher(transport=self.transport, **kwargs)

    @property
    def requested_urls(self) -> List[str]:
        return [str(r.url) for r in self.requests]

    async def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        target = self.routes.get(str(request.url))
        if target is None:
            return httpx.Response(404, text="not found")
        if isinstance(target, httpx.Response):
            return httpx.Response(
                target.status_code,
                headers=target.headers,
                content=target.content,
            )
        result = target(request)
        if hasattr(result, "__await__"):
            result = await result
        return result

class ScriptedBackend(httpcore.AsyncNetworkBackend):
    """
    Socket-level stand-in for the real network.

    Serves canned raw HTTP responses per dialed address and records every
    connection attempt as (address, port, timeout).
    """

    def __init__(self, responses: Optional[Dict[str, List[bytes]]] = None, failing=()):
        self.responses = responses or {}
        self.failing = set(failing)
        self.attempts = []

    async def connect_tcp(self, host, port, timeout=None, local_address=None, socket_options=None):
        self.attempts.append((host, port, timeout))
        if host in self.failing or host not in self.responses:
            raise httpcore.ConnectError(f"connection refused: {host}")
        return httpcore.AsyncMockStream(list(self.responses[host]))

    async def sleep(self, seconds):
        pass

    @property
    def dialed(self) -> List[str]:
        return [a[0] for a in self.attempts]

def raw_http_response(body: bytes = b"", status: str = "200 OK", headers=()) -> List[bytes]:
    lines = [f"HTTP/1.1 {status}\r\n".encode()]
    lines.append(b"Content-Type: text/html; charset=utf-8\r\n")
    for name, value in headers:
        lines.append(f"{name}: {value}\r\n".encode())
    lines.append(f"Content-Length: {len(body)}\r\n".encode())
    lines.append(b"\r\n")
    if body:
        lines.append(body)
    return lines

def static_resolver(table: Dict[str, List[str]]):
    calls = []

    async def resolve(host, port):
        calls.append(host)
        if host not in table:
            raise socket.gaierror(socket.EAI_NONAME, "Name or service not known")
        return list(table[host])

    resolve.calls = calls
    return resolve

@pytest.fixture
def site():
    return MockSite()

@pytest.fixture
def no_dns(monkeypatch):
    """Fail loudly if anything touches the system resolver."""
    def _forbidden(*args, **kwargs):
        raise AssertionError("unexpected DNS lookup")

    monkeypatch.setattr(socket, "getaddrinfo", _forbidden)

@pytest.fixture
def make_backend():
    return ScriptedBackend

@pytest.fixture
def make_resolver():
    return static_resolver

@pytest.fixture
def http_response():
    return raw_http_response
