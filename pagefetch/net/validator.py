from typing import Optional

import httpx

from pagefetch.core.errors import BlockedAddress, InvalidURL
from pagefetch.net.policy import DEFAULT_POLICY, BlockPolicy, parse_ip

ALLOWED_SCHEMES = {"http", "https"}

def validate_url(raw_url: str, policy: Optional[BlockPolicy] = None) -> httpx.URL:
    """
    Check a candidate URL before any network I/O.

    Only literal-IP hosts are checked against the policy here. Hostnames are
    left to the dialer, since their resolution can change before connecting.
    """
    policy = policy or DEFAULT_POLICY
    raw = (raw_url or "").strip()
    if not raw:
        raise InvalidURL("invalid URL: empty", raw_url)

    try:
        url = httpx.URL(raw)
    except (httpx.InvalidURL, TypeError, ValueError) as e:
        raise InvalidURL(f"invalid URL: {e}", raw) from e

    if url.scheme not in ALLOWED_SCHEMES:
        raise InvalidURL(
            f'invalid URL scheme "{url.scheme}" (only http/https are allowed)', raw
        )
    if not url.host:
        raise InvalidURL("invalid URL: missing hostname", raw)

    ip = parse_ip(url.host)
    if ip is not None and policy.is_blocked(ip):
        raise BlockedAddress(str(ip), raw)

    return url
