"""
Typed failures for untrusted content fetching.

Every error carries a stable ``kind`` string so callers (API, CLI) can map
failures without matching on message text.
"""

from typing import Optional, Sequence

class FetchError(Exception):
    kind = "fetch_error"

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.url = url

class InvalidURL(FetchError):
    kind = "invalid_url"

class BlockedAddress(FetchError):
    kind = "blocked_address"

    def __init__(self, address: str, url: Optional[str] = None, message: Optional[str] = None):
        super().__init__(message or f"blocked private or local IP address: {address}", url)
        self.address = address

class AllCandidatesBlocked(BlockedAddress):
    """Hostname resolved, but every address it resolved to is blocked."""

    kind = "all_candidates_blocked"

    def __init__(self, host: str, addresses: Sequence[str], url: Optional[str] = None):
        super().__init__(
            host,
            url,
            message=f'blocked host "{host}": resolves to private or local IP',
        )
        self.host = host
        self.addresses = list(addresses)

class DNSResolutionFailure(FetchError):
    kind = "dns_resolution_failure"

    def __init__(self, host: str, reason: str, url: Optional[str] = None):
        super().__init__(f'could not resolve host "{host}": {reason}', url)
        self.host = host

class ConnectionFailure(FetchError):
    kind = "connection_failure"

    def __init__(self, host: str, last_error: Optional[BaseException] = None, url: Optional[str] = None):
        detail = str(last_error) if last_error else "no address could be dialed"
        super().__init__(f'failed to connect to "{host}": {detail}', url)
        self.host = host
        self.last_error = last_error

class TooManyRedirects(FetchError):
    kind = "too_many_redirects"

    def __init__(self, limit: int, url: Optional[str] = None):
        super().__init__(f"stopped after {limit} redirects", url)
        self.limit = limit

class HTTPStatusError(FetchError):
    kind = "http_status"

    def __init__(self, status_code: int, url: Optional[str] = None):
        super().__init__(f"HTTP {status_code}", url)
        self.status_code = status_code

class BodyReadError(FetchError):
    kind = "body_read_error"

class FetchTimeout(FetchError):
    kind = "timeout"

class ExtractionFailure(FetchError):
    kind = "extraction_failure"

    def __init__(self, url: Optional[str] = None):
        super().__init__("could not extract readable content", url)
