# ===== IMPORTS & DEPENDENCIES =====
import logging
import asyncio
import aiohttp
from typing import Optional, Callable, Awaitable

from itch_feed.config import (
    DEFAULT_MAX_RETRIES, INITIAL_BACKOFF_SECONDS, MAX_BACKOFF_SECONDS,
    RATE_LIMIT_STATUS, REQUEST_TIMEOUT
)
from itch_feed.core.errors import FetchError, HttpError, RateLimited, RequestError, TransientNetworkError

# ===== CONFIGURATION & CONSTANTS =====
logger = logging.getLogger(__name__)

TRANSIENT_ERRORS = (asyncio.TimeoutError, aiohttp.ClientConnectionError, aiohttp.ClientPayloadError)

# ===== CORE BUSINESS LOGIC =====
class BaseWebClient:
    """
    Performs GET requests with retries and exponential backoff.

    One instance wraps one shared aiohttp session and is safe to use from
    many concurrent tasks: it keeps no per-request state on the instance.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        max_retries: int = DEFAULT_MAX_RETRIES,
        timeout: float = REQUEST_TIMEOUT,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        if max_retries < 0:
            raise ValueError(f"max_retries must be non-negative, got {max_retries}")
        self._session = session
        self._max_retries = max_retries
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._sleep = sleep
        logger.debug(f"[{self.__class__.__name__}] Initialized with max_retries={max_retries} and timeout={timeout}s")

    @property
    def max_retries(self) -> int:
        return self._max_retries

    @staticmethod
    def backoff_delay(retry: int) -> float:
        """Delay in seconds before retry number `retry` (1-based): 1, 2, 4, ... capped at 300."""
        return min(MAX_BACKOFF_SECONDS, INITIAL_BACKOFF_SECONDS * (2 ** (retry - 1)))

    async def fetch(self, url: str, max_retries: Optional[int] = None) -> str:
        """
        Fetches `url` and returns the response body as text.

        HTTP 429 and transport failures (connection errors, timeouts) are
        retried up to `max_retries` times, so at most `max_retries + 1`
        requests are made. Any other non-2xx status raises HttpError at once.
        When the retries are exhausted the last error is raised. Other client
        errors (invalid URL, too many redirects) raise RequestError without
        retrying. Undecodable bytes in the body are replaced, not fatal.
        """
        if max_retries is None:
            max_retries = self._max_retries

        retries = 0
        delay = INITIAL_BACKOFF_SECONDS
        while True:
            logger.debug(f"➡️ [{self.__class__.__name__}] Fetching {url} (attempt {retries + 1}/{max_retries + 1})")
            try:
                async with self._session.get(url, timeout=self._timeout) as response:
                    if response.status == RATE_LIMIT_STATUS:
                        error: FetchError = RateLimited(url)
                    elif 200 <= response.status < 300:
                        return await response.text(errors="replace")
                    else:
                        logger.error(f"❌ [{self.__class__.__name__}] Unrecoverable status {response.status} on {url}. Giving up.")
                        raise HttpError(url, response.status)
            except TRANSIENT_ERRORS as e:
                error = TransientNetworkError(url, e)
            except aiohttp.ClientError as e:
                logger.error(f"❌ [{self.__class__.__name__}] Request to {url} failed: {type(e).__name__}: {e}. Giving up.")
                raise RequestError(url, e) from e

            if retries >= max_retries:
                logger.error(f"❌ [{self.__class__.__name__}] {error}. Giving up after {retries} retries.")
                raise error

            logger.warning(f"⚠️ [{self.__class__.__name__}] {error} (attempt {retries + 1}/{max_retries + 1}). Retrying in {delay}s...")
            await self._sleep(delay)
            delay = min(MAX_BACKOFF_SECONDS, delay * 2)
            retries += 1
