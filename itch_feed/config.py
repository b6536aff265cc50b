# ===== CONFIGURATION & CONSTANTS =====
import os

# --- General Settings ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# --- Itch.io Feed Source ---
ITCH_FEED_URL = os.getenv("ITCH_FEED_URL", "https://itch.io/games/newest.xml")
DEFAULT_PAGE_LIMIT = int(os.getenv("ITCH_PAGE_LIMIT", "1"))
PAGE_QUERY_PARAM = "page"

# --- Fetching & Retry Policy ---
DEFAULT_MAX_RETRIES = int(os.getenv("ITCH_MAX_RETRIES", "5"))
REQUEST_TIMEOUT = float(os.getenv("ITCH_REQUEST_TIMEOUT", "30"))
INITIAL_BACKOFF_SECONDS = 1
MAX_BACKOFF_SECONDS = 300
RATE_LIMIT_STATUS = 429

# Applied independently to the page stage and the item stage
MAX_CONCURRENCY = int(os.getenv("ITCH_MAX_CONCURRENCY", "50"))

# --- Detail Page Parsing ---
# lxml does not insert an implied <tbody>, so rows are matched with or without one
INFO_TABLE_ROW_SELECTOR = "div.game_info_panel_widget table tr"
RATING_VALUE_SELECTOR = '[itemprop="ratingValue"]'
RATING_COUNT_SELECTOR = '[itemprop="ratingCount"]'
INFO_DATE_FORMAT = "%d %B %Y @ %H:%M UTC"
OUTPUT_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
HTML_PARSER = "lxml"

# --- Feed Item Fields ---
# XML tag name -> ListingItem key
FEED_ITEM_FIELDS = {
    "guid": "guid",
    "title": "title",
    "plainTitle": "plain_title",
    "link": "link",
    "price": "price",
    "description": "description",
    "pubDate": "pub_date",
    "createDate": "create_date",
    "updateDate": "update_date",
}
