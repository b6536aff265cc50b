# ===== IMPORTS & DEPENDENCIES =====
import argparse
import asyncio
import json
import logging
import os
import sys
from typing import Any, List, Optional

# --- Configuration ---
from itch_feed.config import (
    LOG_LEVEL, ITCH_FEED_URL, DEFAULT_PAGE_LIMIT, DEFAULT_MAX_RETRIES, MAX_CONCURRENCY
)

# --- Errors ---
from itch_feed.core.errors import ExtractionError, FetchError

# --- Crawling & Parsing ---
from itch_feed.parsers.game_info_parser import parse_game_info
from itch_feed.sources.itch_feed import scrape_itch_feed

# ===== CONFIGURATION & CONSTANTS =====
logger = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value}")
    return number


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"expected a non-negative integer, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Scrape game listings from the itch.io RSS feed")
    parser.add_argument("--url", default=ITCH_FEED_URL, help="Base feed URL (the page parameter is appended)")
    parser.add_argument("--pages", type=_positive_int, default=DEFAULT_PAGE_LIMIT, help="Number of feed pages to crawl")
    parser.add_argument("--retries", type=_non_negative_int, default=DEFAULT_MAX_RETRIES, help="Max retries per request")
    parser.add_argument("--concurrency", type=_positive_int, default=MAX_CONCURRENCY, help="Max in-flight requests per stage")
    parser.add_argument("-o", "--outfile", help="Write JSON here instead of stdout")
    parser.add_argument("-i", "--infile", help="Parse a saved game page instead of crawling")
    return parser


def write_output(data: Any, outfile: Optional[str]) -> None:
    """Writes `data` as one JSON document to `outfile`, or to stdout when no file is given."""
    if outfile:
        directory = os.path.dirname(outfile)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(outfile, 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False, indent=4)
        logger.info(f"✅ Saved output to {outfile}")
    else:
        json.dump(data, sys.stdout, ensure_ascii=False, indent=4)
        sys.stdout.write("\n")


# ===== INITIALIZATION & STARTUP =====
def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=LOG_LEVEL,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        stream=sys.stderr
    )

    if args.infile:
        with open(args.infile, 'r', encoding='utf-8') as f:
            html = f.read()
        try:
            detail = parse_game_info(html)
        except ExtractionError as e:
            logger.critical(f"🔥 Could not parse game page {args.infile}: {e}")
            return 1
        write_output(detail, args.outfile)
        return 0

    try:
        records = asyncio.run(scrape_itch_feed(args.url, args.pages, args.retries, args.concurrency))
    except FetchError as e:
        logger.critical(f"🔥🔥🔥 Crawl aborted: {e}")
        return 1

    write_output(records, args.outfile)
    return 0


if __name__ == "__main__":
    sys.exit(main())
