# ===== IMPORTS & DEPENDENCIES =====
import logging
import xml.etree.ElementTree as ET
from typing import List

from itch_feed.config import FEED_ITEM_FIELDS
from itch_feed.core.errors import FeedDecodeError
from itch_feed.models.game import ListingItem

# ===== CONFIGURATION & CONSTANTS =====
logger = logging.getLogger(__name__)

# ===== CORE BUSINESS LOGIC =====
def _decode_item(item: ET.Element, position: int) -> ListingItem:
    values = {}
    for tag, key in FEED_ITEM_FIELDS.items():
        elem = item.find(tag)
        if elem is None:
            raise FeedDecodeError(f"Item #{position} is missing required field <{tag}>")
        values[key] = elem.text or ""
    return ListingItem(**values)


def parse_feed_page(body: str) -> List[ListingItem]:
    """
    Decodes one page of the itch.io RSS feed into listing items.

    The document must be an <rss> element wrapping a <channel>; every
    <item> in the channel must carry all of the fields in FEED_ITEM_FIELDS.
    A channel without items decodes to an empty list.
    """
    try:
        root = ET.fromstring(body)
    except ET.ParseError as e:
        raise FeedDecodeError(f"Malformed feed XML: {e}") from e

    if root.tag != "rss":
        raise FeedDecodeError(f"Expected <rss> root element, found <{root.tag}>")

    channel = root.find("channel")
    if channel is None:
        raise FeedDecodeError("Feed has no <channel> element")

    items = [_decode_item(item, i) for i, item in enumerate(channel.findall("item"), start=1)]
    logger.debug(f"[feed_parser] Decoded {len(items)} items from feed page.")
    return items
