"""
DNS-pinned dialing for untrusted destinations.

httpx hands every new connection to the connection pool's network backend.
``PinnedNetworkBackend`` sits in that seat: it resolves the hostname itself,
drops addresses the block policy forbids, and connects only to what is left,
one candidate at a time in resolution order. Because the check runs at connect
time, a hostname that passed validation cannot rebind to a private address
afterwards.

TLS is untouched: httpcore still wraps the pinned socket using the original
hostname for SNI and certificate verification.
"""

import logging
import socket
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable, List, Optional

import anyio
import httpcore
import httpx

from pagefetch.core.config import settings
from pagefetch.core.errors import (
    AllCandidatesBlocked,
    BlockedAddress,
    ConnectionFailure,
    DNSResolutionFailure,
)
from pagefetch.net.policy import DEFAULT_POLICY, BlockPolicy, parse_ip

logger = logging.getLogger(__name__)

Resolver = Callable[[str, int], Awaitable[List[str]]]

@dataclass(frozen=True)
class Candidate:
    address: str
    blocked: bool

@dataclass(frozen=True)
class ResolvedCandidates:
    host: str
    candidates: List[Candidate]

    @property
    def allowed(self) -> List[str]:
        return [c.address for c in self.candidates if not c.blocked]

    @property
    def blocked(self) -> List[str]:
        return [c.address for c in self.candidates if c.blocked]

async def resolve_host(host: str, port: int) -> List[str]:
    """Resolve a hostname to its unique addresses, keeping resolver order."""
    infos = await anyio.getaddrinfo(host, port, type=socket.SOCK_STREAM)
    addresses: List[str] = []
    for _family, _type, _proto, _canonname, sockaddr in infos:
        address = str(sockaddr[0])
        if address not in addresses:
            addresses.append(address)
    return addresses

def classify(host: str, addresses: Iterable[str], policy: BlockPolicy) -> ResolvedCandidates:
    return ResolvedCandidates(
        host=host,
        candidates=[Candidate(a, policy.is_blocked(a)) for a in addresses],
    )

class PinnedNetworkBackend(httpcore.AsyncNetworkBackend):
    def __init__(
        self,
        policy: Optional[BlockPolicy] = None,
        resolver: Optional[Resolver] = None,
        backend: Optional[httpcore.AsyncNetworkBackend] = None,
        connect_timeout: Optional[float] = None,
        resolve_timeout: Optional[float] = None,
    ):
        self._policy = policy or DEFAULT_POLICY
        self._resolver = resolver or resolve_host
        self._backend = backend or httpcore.AnyIOBackend()
        self._connect_timeout = connect_timeout if connect_timeout is not None else settings.DIAL_TIMEOUT
        self._resolve_timeout = resolve_timeout if resolve_timeout is not None else settings.RESOLVE_TIMEOUT

    async def resolve(self, host: str, port: int) -> ResolvedCandidates:
        try:
            with anyio.fail_after(self._resolve_timeout):
                addresses = await self._resolver(host, port)
        except TimeoutError as e:
            raise DNSResolutionFailure(host, "lookup timed out") from e
        except (socket.gaierror, OSError) as e:
            raise DNSResolutionFailure(host, str(e)) from e

        if not addresses:
            raise DNSResolutionFailure(host, "no addresses returned")
        return classify(host, addresses, self._policy)

    async def connect_tcp(
        self,
        host: str,
        port: int,
        timeout: Optional[float] = None,
        local_address: Optional[str] = None,
        socket_options=None,
    ) -> httpcore.AsyncNetworkStream:
        literal = parse_ip(host)
        if literal is not None:
            if self._policy.is_blocked(literal):
                logger.warning("Refusing to dial blocked address %s", literal)
                raise BlockedAddress(str(literal))
            try:
                return await self._dial(str(literal), port, timeout, local_address, socket_options)
            except (httpcore.ConnectError, httpcore.ConnectTimeout, OSError) as e:
                raise ConnectionFailure(host, e) from e

        resolved = await self.resolve(host, port)
        allowed = resolved.allowed
        if resolved.blocked:
            logger.warning("Host %s resolved to blocked addresses %s", host, resolved.blocked)
        if not allowed:
            raise AllCandidatesBlocked(host, resolved.blocked)

        last_error: Optional[BaseException] = None
        for address in allowed:
            logger.debug("Dialing %s (%s) port %d", host, address, port)
            try:
                return await self._dial(address, port, timeout, local_address, socket_options)
            except (httpcore.ConnectError, httpcore.ConnectTimeout, OSError) as e:
                logger.debug("Dial %s (%s) failed: %s", host, address, e)
                last_error = e

        raise ConnectionFailure(host, last_error) from last_error

    async def _dial(self, address, port, timeout, local_address, socket_options):
        attempt_timeout = self._connect_timeout
        if timeout is not None:
            attempt_timeout = min(timeout, attempt_timeout)
        return await self._backend.connect_tcp(
            address,
            port,
            timeout=attempt_timeout,
            local_address=local_address,
            socket_options=socket_options,
        )

    async def sleep(self, seconds: float) -> None:
        await self._backend.sleep(seconds)

class PinnedTransport(httpx.AsyncHTTPTransport):
    """
    httpx transport whose connections all go through ``PinnedNetworkBackend``.

    Proxies are never configured here; environment proxy variables would
    otherwise let a forward proxy reach addresses the dialer refuses.
    """

    def __init__(self, network_backend: Optional[PinnedNetworkBackend] = None, http2: bool = False):
        super().__init__(http2=http2, trust_env=False, retries=0)
        self.network_backend = network_backend or PinnedNetworkBackend()
        self._pool = httpcore.AsyncConnectionPool(
            http1=True,
            http2=http2,
            retries=0,
            network_backend=self.network_backend,
        )
