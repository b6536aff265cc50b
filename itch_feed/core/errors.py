# ===== TYPES & INTERFACES =====
from typing import Optional


class ItchFeedError(Exception):
    """Root of every error raised while crawling the itch.io feed."""


# --- Fetch errors: fatal once the retry budget is spent ---
class FetchError(ItchFeedError):
    def __init__(self, url: str, message: str):
        super().__init__(f"{message} ({url})")
        self.url = url


class TransientNetworkError(FetchError):
    """Connection failure or timeout. Retried, then fatal."""

    def __init__(self, url: str, cause: Optional[BaseException] = None):
        reason = type(cause).__name__ if cause else "network error"
        super().__init__(url, f"Transient network error: {reason}")
        self.cause = cause


class RateLimited(FetchError):
    """HTTP 429. Retried with exponential backoff, then fatal."""

    def __init__(self, url: str):
        super().__init__(url, "Rate limited (HTTP 429)")
        self.status = 429


class HttpError(FetchError):
    """Any other non-success status. Never retried."""

    def __init__(self, url: str, status: int):
        super().__init__(url, f"HTTP error status {status}")
        self.status = status


class RequestError(FetchError):
    """The request could not be made at all (bad URL, redirect loop). Never retried."""

    def __init__(self, url: str, cause: BaseException):
        super().__init__(url, f"Request failed: {type(cause).__name__}: {cause}")
        self.cause = cause


# --- Feed decoding: the page is skipped ---
class FeedDecodeError(ItchFeedError):
    pass


# --- Detail extraction: the item is skipped ---
class ExtractionError(ItchFeedError):
    pass


class MissingElements(ExtractionError):
    def __init__(self, cell_count: int):
        super().__init__(f"Expected a label cell and a data cell in info table row, found {cell_count} cell(s)")
        self.cell_count = cell_count


class MissingData(ExtractionError):
    def __init__(self, field_kind):
        super().__init__(f"Could not locate data for info table field {field_kind.name}")
        self.field_kind = field_kind


class InvalidData(ExtractionError):
    def __init__(self, field_kind, found: str):
        super().__init__(f"Invalid data for info table field {field_kind.name}, found: {found!r}")
        self.field_kind = field_kind
        self.found = found
