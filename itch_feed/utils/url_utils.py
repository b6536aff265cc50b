# ===== IMPORTS & DEPENDENCIES =====
from urllib.parse import urlparse, urlunparse, parse_qs, urlencode

from itch_feed.config import PAGE_QUERY_PARAM

# ===== UTILITY FUNCTIONS =====

def build_page_url(base_url: str, page: int) -> str:
    """
    Appends the page number to a feed URL: 'https://itch.io/games.xml' -> 'https://itch.io/games.xml?page=2'.
    An existing query string is kept and any previous page parameter replaced.
    """
    parsed = urlparse(base_url)
    query_params = parse_qs(parsed.query, keep_blank_values=True)
    query_params[PAGE_QUERY_PARAM] = [str(page)]
    return urlunparse(parsed._replace(query=urlencode(query_params, doseq=True)))
