"""
End-to-end fetches through the real httpx client, pinned transport and
connection pool. Only the socket layer and DNS are scripted.
"""

import asyncio

import pytest
from pagefetch.core.errors import (
    AllCandidatesBlocked,
    BlockedAddress,
    ConnectionFailure,
    DNSResolutionFailure,
)
from pagefetch.fetch.fetcher import Fetcher
from pagefetch.net.dialer import PinnedNetworkBackend, PinnedTransport
from pagefetch.services.content import fetch_content

HTML = b"<html><head><title>Foo</title></head><body><p>Hello world</p></body></html>"

def pinned_fetcher(inner, resolver):
    backend = PinnedNetworkBackend(resolver=resolver, backend=inner)
    return Fetcher(transport=PinnedTransport(backend))

class TestPinnedFetch:
    """Fetches whose connections go through the pinned dialer"""

    def test_fetches_through_resolved_public_address(self, make_backend, make_resolver, http_response):
        inner = make_backend({"93.184.216.34": http_response(HTML)})
        resolver = make_resolver({"news.example": ["93.184.216.34"]})

        result = asyncio.run(fetch_content(
            "http://news.example/story", 5, 0, fetcher=pinned_fetcher(inner, resolver),
        ))

        assert result.title == "Foo"
        assert "Hello world" in result.content
        assert inner.dialed == ["93.184.216.34"]
        assert inner.attempts[0][1] == 80

    def test_hostname_resolving_privately_never_connects(self, make_backend, make_resolver):
        inner = make_backend()
        resolver = make_resolver({"rebind.example": ["10.0.0.1", "127.0.0.1"]})

        with pytest.raises(AllCandidatesBlocked) as exc_info:
            asyncio.run(fetch_content("http://rebind.example/", 5, 0, fetcher=pinned_fetcher(inner, resolver)))

        assert inner.attempts == []
        assert exc_info.value.url == "http://rebind.example/"

    def test_redirect_to_privately_resolving_host_is_blocked(self, make_backend, make_resolver, http_response):
        inner = make_backend({
            "93.184.216.34": http_response(status="302 Found", headers=[("Location", "http://intranet.example/admin")]),
        })
        resolver = make_resolver({
            "public.example": ["93.184.216.34"],
            "intranet.example": ["192.168.0.10"],
        })

        with pytest.raises(BlockedAddress):
            asyncio.run(fetch_content("http://public.example/", 5, 0, fetcher=pinned_fetcher(inner, resolver)))

        assert inner.dialed == ["93.184.216.34"]
        assert resolver.calls == ["public.example", "intranet.example"]

    def test_environment_proxy_is_not_used(self, make_backend, make_resolver, http_response, monkeypatch):
        monkeypatch.setenv("HTTP_PROXY", "http://10.9.9.9:3128")
        monkeypatch.setenv("ALL_PROXY", "http://10.9.9.9:3128")
        inner = make_backend({"93.184.216.34": http_response(HTML)})
        resolver = make_resolver({"news.example": ["93.184.216.34"]})

        asyncio.run(fetch_content("http://news.example/", 5, 0, fetcher=pinned_fetcher(inner, resolver)))

        assert inner.dialed == ["93.184.216.34"]

    def test_unreachable_candidates(self, make_backend, make_resolver):
        inner = make_backend(failing={"1.1.1.1", "8.8.8.8"})
        resolver = make_resolver({"down.example": ["1.1.1.1", "8.8.8.8"]})

        with pytest.raises(ConnectionFailure):
            asyncio.run(fetch_content("http://down.example/", 5, 0, fetcher=pinned_fetcher(inner, resolver)))

        assert inner.dialed == ["1.1.1.1", "8.8.8.8"]

    def test_unresolvable_host(self, make_backend, make_resolver):
        inner = make_backend()

        with pytest.raises(DNSResolutionFailure):
            asyncio.run(fetch_content("http://nxdomain.example/", 5, 0, fetcher=pinned_fetcher(inner, make_resolver({}))))

        assert inner.attempts == []
