# ===== IMPORTS & DEPENDENCIES =====
import logging
import asyncio
import aiohttp
from typing import Awaitable, List, Optional, TypeVar

from itch_feed.config import DEFAULT_MAX_RETRIES, MAX_CONCURRENCY, REQUEST_TIMEOUT
from itch_feed.core.base_client import BaseWebClient
from itch_feed.core.errors import ExtractionError, FeedDecodeError
from itch_feed.models.game import GameRecord, ListingItem
from itch_feed.parsers.feed_parser import parse_feed_page
from itch_feed.parsers.game_info_parser import parse_game_info
from itch_feed.utils.record_utils import combine_records
from itch_feed.utils.url_utils import build_page_url

# ===== CONFIGURATION & CONSTANTS =====
logger = logging.getLogger(__name__)

T = TypeVar("T")


async def gather_or_cancel(aws: List[Awaitable[T]]) -> List[T]:
    """Like asyncio.gather, but cancels the remaining tasks as soon as one fails."""
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise

# ===== CORE BUSINESS LOGIC =====
class ItchFeedSource:
    """
    Crawls the paginated itch.io RSS feed and the game page behind every item.

    Feed pages are fetched concurrently, at most `concurrency` at a time;
    game pages are fetched under a second, independent gate of the same size.
    A page whose feed cannot be decoded and an item whose game page cannot be
    parsed are logged and skipped. A fetch that fails after all retries,
    whether for a page or an item, aborts the whole crawl.
    """

    def __init__(self, client: BaseWebClient, concurrency: int = MAX_CONCURRENCY):
        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {concurrency}")
        self._client = client
        self._concurrency = concurrency

    async def _scrape_item(self, item: ListingItem, item_gate: asyncio.Semaphore) -> Optional[GameRecord]:
        async with item_gate:
            html = await self._client.fetch(item["link"])

        try:
            detail = parse_game_info(html)
        except ExtractionError as e:
            logger.warning(f"⚠️ [{self.__class__.__name__}] Skipping item '{item['plain_title']}' ({item['link']}): {type(e).__name__}: {e}")
            return None

        return combine_records(item, detail)

    async def _scrape_page(
        self,
        base_url: str,
        page: int,
        page_limit: int,
        page_gate: asyncio.Semaphore,
        item_gate: asyncio.Semaphore
    ) -> List[GameRecord]:
        page_url = build_page_url(base_url, page)
        async with page_gate:
            logger.info(f"➡️ [{self.__class__.__name__}] Fetching feed page {page}/{page_limit}: {page_url}")
            body = await self._client.fetch(page_url)

        try:
            items = parse_feed_page(body)
        except FeedDecodeError as e:
            logger.warning(f"⚠️ [{self.__class__.__name__}] Skipping feed page {page} ({page_url}): {e}")
            return []

        results = await gather_or_cancel([self._scrape_item(item, item_gate) for item in items])
        records = [record for record in results if record is not None]

        skipped = len(items) - len(records)
        if skipped:
            logger.warning(f"⚠️ [{self.__class__.__name__}] Page {page}: {skipped} of {len(items)} items skipped.")
        logger.info(f"✅ [{self.__class__.__name__}] Page {page}/{page_limit} done: {len(records)} records.")
        return records

    async def scrape(self, base_url: str, page_limit: int) -> List[GameRecord]:
        """
        Crawls feed pages 1..page_limit and returns one record per game page
        that was fetched and parsed successfully, in page then item order.
        """
        if page_limit < 1:
            raise ValueError(f"page_limit must be a positive integer, got {page_limit}")

        logger.info(f"🚀 [{self.__class__.__name__}] Starting crawl of {base_url} ({page_limit} pages, concurrency {self._concurrency})")
        page_gate = asyncio.Semaphore(self._concurrency)
        item_gate = asyncio.Semaphore(self._concurrency)

        pages = await gather_or_cancel([
            self._scrape_page(base_url, page, page_limit, page_gate, item_gate)
            for page in range(1, page_limit + 1)
        ])
        records = [record for page_records in pages for record in page_records]

        logger.info(f"🏁 [{self.__class__.__name__}] Crawl finished. Collected {len(records)} records from {page_limit} pages.")
        return records


async def scrape_itch_feed(
    base_url: str,
    page_limit: int,
    max_retries: int = DEFAULT_MAX_RETRIES,
    concurrency: int = MAX_CONCURRENCY,
    session: Optional[aiohttp.ClientSession] = None
) -> List[GameRecord]:
    """Runs a full crawl, opening a ClientSession for it unless one is given."""
    if session is not None:
        source = ItchFeedSource(BaseWebClient(session, max_retries=max_retries), concurrency=concurrency)
        return await source.scrape(base_url, page_limit)

    async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=REQUEST_TIMEOUT)) as session:
        source = ItchFeedSource(BaseWebClient(session, max_retries=max_retries), concurrency=concurrency)
        return await source.scrape(base_url, page_limit)
