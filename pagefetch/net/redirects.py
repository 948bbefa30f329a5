import logging
from typing import Optional, Union

import httpx

from pagefetch.core.errors import TooManyRedirects
from pagefetch.net.policy import BlockPolicy
from pagefetch.net.validator import validate_url

logger = logging.getLogger(__name__)

MAX_REDIRECTS = 10

class RedirectGuard:
    """
    Per-fetch redirect gate.

    Every Location is validated again from scratch; validation errors are
    raised as-is so a redirect to a private address surfaces as a blocked
    address, not as a redirect failure.
    """

    def __init__(self, policy: Optional[BlockPolicy] = None, max_redirects: int = MAX_REDIRECTS):
        self._policy = policy
        self.max_redirects = max_redirects
        self.followed = 0

    def check(self, location: Union[str, httpx.URL]) -> httpx.URL:
        if self.followed >= self.max_redirects:
            raise TooManyRedirects(self.max_redirects, str(location))
        url = validate_url(str(location), self._policy)
        self.followed += 1
        logger.info("Following redirect %d/%d to %s", self.followed, self.max_redirects, url)
        return url
