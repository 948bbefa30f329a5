import datetime as dt
import logging
from typing import Optional

import anyio
import httpx

from pagefetch.core.errors import (
    BodyReadError,
    ConnectionFailure,
    FetchError,
    FetchTimeout,
    HTTPStatusError,
    InvalidURL,
)
from pagefetch.net.dialer import PinnedNetworkBackend, PinnedTransport
from pagefetch.net.policy import BlockPolicy
from pagefetch.net.redirects import MAX_REDIRECTS, RedirectGuard
from pagefetch.net.validator import validate_url

from .base import FetchRequest, RawPage

logger = logging.getLogger(__name__)

MAX_BODY_BYTES = 8 << 20

_BAD_LOCATION = "Invalid URL in location header"

_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)

_HEADERS = {
    "User-Agent": _USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}

class Fetcher:
    """
    Fetch untrusted URLs without letting them reach private networks.

    Each call builds its own client and pinned transport, so concurrent fetches
    share nothing. Tests may inject a transport instead.
    """

    def __init__(
        self,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        policy: Optional[BlockPolicy] = None,
        max_redirects: int = MAX_REDIRECTS,
        max_body_bytes: int = MAX_BODY_BYTES,
    ):
        self._transport = transport
        self._policy = policy
        self.max_redirects = max_redirects
        self.max_body_bytes = max_body_bytes

    def _new_transport(self) -> httpx.AsyncBaseTransport:
        if self._transport is not None:
            return self._transport
        return PinnedTransport(PinnedNetworkBackend(policy=self._policy))

    async def fetch(self, request: FetchRequest) -> RawPage:
        """Return the raw body of a successful (2xx) response, following safe redirects."""
        try:
            url = validate_url(request.url, self._policy)
            logger.info("Fetching %s (timeout=%ss)", url, request.timeout)
            with anyio.fail_after(request.timeout):
                page = await self._fetch(url, request)
        except TimeoutError as e:
            raise FetchTimeout(f"timed out after {request.timeout:g}s", request.url) from e
        except FetchError as e:
            if e.url is None:
                e.url = request.url
            logger.info("Fetch of %s failed (%s): %s", request.url, e.kind, e)
            raise

        logger.info(
            "Fetched %s: HTTP %d, %d bytes, %d redirect(s)",
            page.final_url, page.status_code, len(page.body), len(page.redirects),
        )
        return page

    async def _fetch(self, url: httpx.URL, request: FetchRequest) -> RawPage:
        guard = RedirectGuard(self._policy, self.max_redirects)
        redirects = []

        async with httpx.AsyncClient(
            transport=self._new_transport(),
            headers=_HEADERS,
            timeout=request.timeout,
            follow_redirects=False,
            trust_env=False,
        ) as client:
            outgoing = client.build_request("GET", url)
            while True:
                response = await self._send(client, outgoing)
                try:
                    if response.next_request is None:
                        return await self._read(response, request.url, redirects)
                    guard.check(response.next_request.url)
                    outgoing = response.next_request
                    redirects.append(str(outgoing.url))
                finally:
                    await response.aclose()

    async def _send(self, client: httpx.AsyncClient, outgoing: httpx.Request) -> httpx.Response:
        target = str(outgoing.url)
        try:
            return await client.send(outgoing, stream=True)
        except FetchError as e:
            if e.url is None:
                e.url = target
            raise
        except httpx.TimeoutException as e:
            raise FetchTimeout(f"request timed out: {e}", target) from e
        except httpx.UnsupportedProtocol as e:
            raise InvalidURL(f"invalid URL: {e}", target) from e
        except httpx.RemoteProtocolError as e:
            # httpx parses Location while building next_request, before the guard sees it
            if str(e).startswith(_BAD_LOCATION):
                raise InvalidURL(f"invalid redirect URL: {e}", target) from e
            raise ConnectionFailure(outgoing.url.host, e, target) from e
        except httpx.TransportError as e:
            raise ConnectionFailure(outgoing.url.host, e, target) from e

    async def _read(self, response: httpx.Response, requested_url: str, redirects) -> RawPage:
        final_url = str(response.url)
        status = int(response.status_code)
        if not 200 <= status < 300:
            raise HTTPStatusError(status, final_url)

        body = bytearray()
        try:
            async for chunk in response.aiter_bytes():
                room = self.max_body_bytes - len(body)
                body.extend(chunk[:room])
                if len(chunk) >= room:
                    logger.info("Body of %s capped at %d bytes", final_url, self.max_body_bytes)
                    break
        except (httpx.HTTPError, httpx.StreamError) as e:
            raise BodyReadError(f"failed to read response body: {e}", final_url) from e

        return RawPage(
            url=requested_url,
            final_url=final_url,
            status_code=status,
            body=bytes(body),
            encoding=response.charset_encoding,
            fetched_at=dt.datetime.now(dt.timezone.utc).isoformat(timespec="seconds"),
            redirects=list(redirects),
        )
