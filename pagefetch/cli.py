"""Command line entry point: ``pagefetch content <url>``."""

import argparse
import asyncio
import logging
import sys

from pagefetch.core.config import settings
from pagefetch.core.errors import FetchError
from pagefetch.main import __version__
from pagefetch.net.validator import validate_url
from pagefetch.schemas import ContentResponse
from pagefetch.services import content as content_service

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pagefetch",
        description="Fetch readable text from an untrusted URL without reaching private networks.",
    )
    parser.add_argument("--version", "-v", action="version", version=f"pagefetch {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    content = sub.add_parser("content", help="Fetch readable page content")
    content.add_argument("url", help="http(s) URL to fetch")
    content.add_argument("--json", action="store_true", help="Emit JSON output")
    content.add_argument(
        "--timeout", type=int, default=settings.CONTENT_TIMEOUT,
        help=f"HTTP timeout in seconds (default: {settings.CONTENT_TIMEOUT})",
    )
    content.add_argument(
        "--max-chars", type=int, default=settings.CONTENT_MAX_CHARS,
        help=f"Max chars to output, 0 for no limit (default: {settings.CONTENT_MAX_CHARS})",
    )
    return parser

def run_content(args: argparse.Namespace) -> int:
    # URL errors are reported like usage errors, even with --json
    try:
        url = str(validate_url(args.url))
    except FetchError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        result = asyncio.run(content_service.fetch_content(url, args.timeout, args.max_chars))
    except FetchError as e:
        if args.json:
            print(ContentResponse(url=url, error=str(e)).model_dump_json(indent=2, exclude_none=True))
            return 0
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.json:
        out = ContentResponse(url=result.url, title=result.title or None, content=result.content)
        print(out.model_dump_json(indent=2, exclude_none=True))
        return 0

    if result.title:
        print(f"# {result.title}\n")
    print(result.content)
    return 0

def main(argv=None) -> int:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )
    args = build_parser().parse_args(argv)
    if args.command == "content":
        return run_content(args)
    return 2

if __name__ == "__main__":
    sys.exit(main())
