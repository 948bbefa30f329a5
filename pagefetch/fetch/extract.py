"""
Readable text extraction from arbitrary HTML.

An ordered chain of stateless strategies, each ``(html, url) -> (title, content)``.
Title and content are taken independently from the first strategy that yields a
non-empty value. A strategy that raises is skipped, so ``extract`` itself never
fails; it returns empty strings and leaves the decision to the caller.
"""

import html as html_lib
import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple

from bs4 import BeautifulSoup, Comment, NavigableString
from readability import Document

from .utils import clean_line, collapse_blank_lines, join_paragraphs

logger = logging.getLogger(__name__)

Strategy = Callable[[str, str], Tuple[str, str]]

# readability-lxml's placeholder when a document has no title
_NO_TITLE = "[no-title]"

_BLOCK_TAGS = [
    "p", "div", "section", "article", "main", "h1", "h2", "h3", "h4", "h5", "h6",
    "li", "ul", "ol", "blockquote", "pre", "tr", "table", "hr", "br",
]

_COMMENTS = re.compile(r"<!--.*?-->", re.IGNORECASE | re.DOTALL)
_NOISE = re.compile(
    r"<(script|style|noscript|svg|iframe|nav|header|footer|aside)\b[^>]*>.*?</\1\s*>",
    re.IGNORECASE | re.DOTALL,
)
_BLOCKS = re.compile(
    r"</?(?:p|div|section|article|main|h[1-6]|li|ul|ol|blockquote|pre|tr|table|hr|br)\b[^>]*>",
    re.IGNORECASE,
)
_TAGS = re.compile(r"<[^>]+>", re.DOTALL)
_TITLE = re.compile(r"<title\b[^>]*>(.*?)</title\s*>", re.IGNORECASE | re.DOTALL)

@dataclass(frozen=True)
class Extraction:
    title: str = ""
    content: str = ""

def _render_text(fragment: str) -> str:
    """Flatten an HTML fragment to paragraphs of plain text."""
    soup = BeautifulSoup(fragment, "html.parser")

    for el in soup(["script", "style", "noscript"]):
        el.decompose()
    for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()

    for node in soup.find_all(string=True):
        if type(node) is NavigableString and node.find_parent("pre") is None:
            node.replace_with(NavigableString(re.sub(r"\s+", " ", str(node))))

    for el in soup.find_all(_BLOCK_TAGS):
        if el.name in ("br", "hr"):
            el.replace_with("\n")
        else:
            el.insert_before("\n")
            el.insert_after("\n")

    return join_paragraphs(soup.get_text())

def readability_strategy(html: str, source_url: str = "") -> Tuple[str, str]:
    """Main-content detection with readability-lxml."""
    doc = Document(html, url=source_url or None)
    title = clean_line(doc.title())
    if title == _NO_TITLE:
        title = ""
    content = _render_text(doc.summary(html_partial=True))
    return title, content

def extract_title(html: str) -> str:
    match = _TITLE.search(html)
    if not match:
        return ""
    return clean_line(html_lib.unescape(match.group(1)))

def extract_readable_text(html: str) -> str:
    """Tag-stripping fallback for documents readability cannot handle."""
    text = _COMMENTS.sub(" ", html)
    text = _NOISE.sub("\n", text)
    text = _BLOCKS.sub("\n", text)
    text = _TAGS.sub(" ", text)
    text = html_lib.unescape(text)
    text = collapse_blank_lines(text.replace("\r", ""))
    return join_paragraphs(text).strip()

def regex_strategy(html: str, source_url: str = "") -> Tuple[str, str]:
    return extract_title(html), extract_readable_text(html)

DEFAULT_STRATEGIES: Tuple[Strategy, ...] = (readability_strategy, regex_strategy)

def extract(
    html: str,
    source_url: str = "",
    strategies: Optional[Sequence[Strategy]] = None,
) -> Extraction:
    title = ""
    content = ""

    for strategy in strategies if strategies is not None else DEFAULT_STRATEGIES:
        if title and content:
            break
        name = getattr(strategy, "__name__", repr(strategy))
        try:
            found_title, found_content = strategy(html, source_url)
        except Exception as e:
            logger.debug("Extraction strategy %s failed for %s: %s", name, source_url, e)
            continue

        if not title and found_title:
            title = clean_line(found_title)
        if not content and found_content and found_content.strip():
            content = found_content.strip()
            logger.debug("Content for %s from %s (%d chars)", source_url, name, len(content))

    return Extraction(title=title, content=content)
