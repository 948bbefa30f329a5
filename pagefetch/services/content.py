import logging
from typing import Optional

from pagefetch.core.config import settings
from pagefetch.core.errors import ExtractionFailure
from pagefetch.fetch.base import FetchRequest, FetchResult
from pagefetch.fetch.extract import extract
from pagefetch.fetch.fetcher import Fetcher
from pagefetch.fetch.utils import decode_html, truncate_chars
from pagefetch.net.validator import validate_url

logger = logging.getLogger(__name__)

def build_request(url: str, timeout_seconds: Optional[float] = None, max_chars: Optional[int] = None) -> FetchRequest:
    """Normalize caller-supplied limits into an immutable request."""
    timeout = settings.CONTENT_TIMEOUT if timeout_seconds is None else timeout_seconds
    limit = settings.CONTENT_MAX_CHARS if max_chars is None else max_chars
    return FetchRequest(
        url=(url or "").strip(),
        timeout=max(float(timeout), 1.0),
        max_chars=max(int(limit), 0),
    )

async def fetch_content(
    url: str,
    timeout_seconds: Optional[float] = None,
    max_chars: Optional[int] = None,
    fetcher: Optional[Fetcher] = None,
) -> FetchResult:
    """
    Fetch an untrusted URL and return its readable title and content.

    1. Validate the URL (scheme, host, literal-IP policy)
    2. Fetch through the pinned dialer and redirect guard
    3. Decode and run the extraction chain
    4. Truncate content to max_chars characters when a limit is set

    Raises a FetchError subclass on any failure; never returns partial results.
    """
    request = build_request(url, timeout_seconds, max_chars)
    target = str(validate_url(request.url))

    page = await (fetcher or Fetcher()).fetch(request)

    html = decode_html(page.body, page.encoding)
    extraction = extract(html, page.final_url)
    if not extraction.content.strip():
        logger.info("No readable content in %s (%d bytes of HTML)", page.final_url, len(page.body))
        raise ExtractionFailure(target)

    content = truncate_chars(extraction.content, request.max_chars)
    logger.info(
        "Extracted %d chars from %s (title=%r)",
        len(content), page.final_url, extraction.title,
    )
    return FetchResult(url=target, title=extraction.title, content=content)
