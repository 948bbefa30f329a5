import re
from typing import Optional

from bs4 import UnicodeDammit

_MULTI_NEWLINE = re.compile(r"\n{3,}")

def clean_line(text: str) -> str:
    """Collapse all whitespace runs to single spaces and trim."""
    if not text:
        return ""
    return " ".join(text.split())

def collapse_blank_lines(text: str) -> str:
    """Replace 3+ consecutive newlines with exactly one blank line"""
    return _MULTI_NEWLINE.sub("\n\n", text)

def join_paragraphs(text: str) -> str:
    """
    Normalize every line, drop empty ones and separate the survivors
    with a blank line.
    """
    lines = [clean_line(line) for line in text.replace("\r", "").split("\n")]
    return "\n\n".join(line for line in lines if line)

def truncate_chars(text: str, max_chars: int) -> str:
    """
    Keep the first max_chars characters (code points, never bytes).
    max_chars == 0 means no limit (negative limits are normalized to 0 by callers).
    """
    if max_chars <= 0 or len(text) <= max_chars:
        return text
    return text[:max_chars]

def decode_html(body: bytes, declared_encoding: Optional[str] = None) -> str:
    """
    Decode a response body. The declared charset wins when it works,
    otherwise the encoding is sniffed from the markup.
    """
    if not body:
        return ""
    known = [declared_encoding] if declared_encoding else []
    dammit = UnicodeDammit(body, known_definite_encodings=known, is_html=True)
    if dammit.unicode_markup is not None:
        return dammit.unicode_markup
    return body.decode("utf-8", errors="replace")
