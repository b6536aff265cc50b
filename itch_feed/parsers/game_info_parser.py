# ===== IMPORTS & DEPENDENCIES =====
import logging
import re
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Dict, List, Optional

from bs4 import BeautifulSoup
from bs4.element import PreformattedString, Tag

from itch_feed.config import (
    HTML_PARSER, INFO_DATE_FORMAT, INFO_TABLE_ROW_SELECTOR, OUTPUT_DATE_FORMAT,
    RATING_COUNT_SELECTOR, RATING_VALUE_SELECTOR
)
from itch_feed.core.errors import InvalidData, MissingData, MissingElements
from itch_feed.models.game import DetailRecord, Link, Rating, empty_detail_record

# ===== CONFIGURATION & CONSTANTS =====
logger = logging.getLogger(__name__)

SCORE_PATTERN = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|[+-]?(?:inf|infinity|nan)", re.IGNORECASE)
COUNT_PATTERN = re.compile(r"[+-]?\d+")
COUNT_RANGE = (-2 ** 31, 2 ** 31 - 1)


class FieldKind(Enum):
    """The kinds of rows the "More information" table can hold."""
    STATUS = "status"
    RELEASE_DATE = "release_date"
    UPDATED_DATE = "updated_date"
    PUBLISH_DATE = "published_date"
    PLATFORMS = "platforms"
    RATING = "rating"
    AUTHORS = "authors"
    GENRES = "genres"
    MADE_WITH = "made_with"
    TAGS = "tags"
    AVERAGE_SESSION = "average_session"
    LANGUAGES = "languages"
    INPUTS = "inputs"
    LINKS = "links"
    ACCESSIBILITY = "accessibility"


# Exact label text -> field kind. Labels not listed here are ignored.
INFO_TABLE_LABELS: Dict[str, FieldKind] = {
    "Status": FieldKind.STATUS,
    "Release date": FieldKind.RELEASE_DATE,
    "Updated": FieldKind.UPDATED_DATE,
    "Published": FieldKind.PUBLISH_DATE,
    "Platforms": FieldKind.PLATFORMS,
    "Rating": FieldKind.RATING,
    "Author": FieldKind.AUTHORS,
    "Authors": FieldKind.AUTHORS,
    "Genre": FieldKind.GENRES,
    "Genres": FieldKind.GENRES,
    "Made with": FieldKind.MADE_WITH,
    "Tag": FieldKind.TAGS,
    "Tags": FieldKind.TAGS,
    "Average session": FieldKind.AVERAGE_SESSION,
    "Language": FieldKind.LANGUAGES,
    "Languages": FieldKind.LANGUAGES,
    "Inputs": FieldKind.INPUTS,
    "Links": FieldKind.LINKS,
    "Accessibility": FieldKind.ACCESSIBILITY,
}

# ===== UTILITY FUNCTIONS =====

def parse_text(cell: Tag, kind: FieldKind) -> str:
    return cell.get_text().strip()


def parse_list(cell: Tag, kind: FieldKind) -> List[str]:
    """
    Splits the cell's text nodes on newlines and keeps the non-empty pieces.
    Itch separates anchors with ", " text nodes, so bare commas are dropped.
    Order is preserved and duplicates are kept.
    """
    values = []
    for text in cell.find_all(string=True):
        # Comments, CDATA and doctypes are not text
        if isinstance(text, PreformattedString):
            continue
        for piece in text.split("\n"):
            piece = piece.strip()
            if piece and piece != ",":
                values.append(piece)
    return values


def parse_date(cell: Tag, kind: FieldKind) -> str:
    """Reads the <abbr title="05 March 2023 @ 14:30 UTC"> timestamp and returns it as ISO-8601 UTC."""
    abbr = cell.find("abbr")
    if abbr is None or abbr.get("title") is None:
        raise MissingData(kind)

    title = abbr["title"]
    try:
        parsed = datetime.strptime(title, INFO_DATE_FORMAT)
    except ValueError as e:
        raise InvalidData(kind, title) from e
    return parsed.replace(tzinfo=timezone.utc).strftime(OUTPUT_DATE_FORMAT)


def _content_attribute(cell: Tag, selector: str, kind: FieldKind) -> str:
    elem = cell.select_one(selector)
    if elem is None or elem.get("content") is None:
        raise MissingData(kind)
    return elem["content"]


def parse_rating(cell: Tag, kind: FieldKind) -> Rating:
    """Score and count must be plain numbers: no whitespace, no digit separators, count within 32 bits."""
    score_str = _content_attribute(cell, RATING_VALUE_SELECTOR, kind)
    if not SCORE_PATTERN.fullmatch(score_str):
        raise InvalidData(kind, score_str)
    score = float(score_str)

    count_str = _content_attribute(cell, RATING_COUNT_SELECTOR, kind)
    if not COUNT_PATTERN.fullmatch(count_str):
        raise InvalidData(kind, count_str)
    count = int(count_str)
    if not COUNT_RANGE[0] <= count <= COUNT_RANGE[1]:
        raise InvalidData(kind, count_str)

    return Rating(score=score, count=count)


def parse_links(cell: Tag, kind: FieldKind) -> List[Link]:
    links: List[Link] = []
    for anchor in cell.find_all("a"):
        href = anchor.get("href")
        if href is None:
            raise MissingData(kind)
        links.append(Link(name=anchor.get_text().strip(), url=href))
    return links


FIELD_PARSERS: Dict[FieldKind, Callable[[Tag, FieldKind], object]] = {
    FieldKind.STATUS: parse_text,
    FieldKind.RELEASE_DATE: parse_text,
    FieldKind.UPDATED_DATE: parse_date,
    FieldKind.PUBLISH_DATE: parse_date,
    FieldKind.PLATFORMS: parse_list,
    FieldKind.RATING: parse_rating,
    FieldKind.AUTHORS: parse_list,
    FieldKind.GENRES: parse_list,
    FieldKind.MADE_WITH: parse_list,
    FieldKind.TAGS: parse_list,
    FieldKind.AVERAGE_SESSION: parse_text,
    FieldKind.LANGUAGES: parse_list,
    FieldKind.INPUTS: parse_list,
    FieldKind.LINKS: parse_links,
    FieldKind.ACCESSIBILITY: parse_list,
}


def check_dispatch_tables() -> None:
    """Fails loudly if a field kind has no label, no parser or no record field."""
    kinds = set(FieldKind)
    unlabeled = kinds - set(INFO_TABLE_LABELS.values())
    unhandled = kinds - set(FIELD_PARSERS)
    unmapped = {kind for kind in kinds if kind.value not in DetailRecord.__annotations__}
    if unlabeled or unhandled or unmapped:
        raise RuntimeError(
            f"Info table dispatch is incomplete: unlabeled={sorted(k.name for k in unlabeled)}, "
            f"unhandled={sorted(k.name for k in unhandled)}, unmapped={sorted(k.name for k in unmapped)}"
        )


check_dispatch_tables()

# ===== CORE BUSINESS LOGIC =====

def label_to_field_kind(label: str) -> Optional[FieldKind]:
    return INFO_TABLE_LABELS.get(label.strip())


def parse_game_info(html: str) -> DetailRecord:
    """
    Extracts the "More information" table of an itch.io game page.

    Every row of the table must have exactly a label cell and a data cell,
    otherwise MissingElements is raised. Rows with an unknown label are
    skipped. Rating and date rows raise MissingData / InvalidData when their
    nested data is absent or malformed. When a label occurs twice the last
    row wins.
    """
    soup = BeautifulSoup(html, HTML_PARSER)
    record = empty_detail_record()

    for row in soup.select(INFO_TABLE_ROW_SELECTOR):
        cells = row.select("td")
        if len(cells) != 2:
            raise MissingElements(len(cells))

        label_cell, data_cell = cells
        kind = label_to_field_kind(label_cell.get_text())
        if kind is None:
            logger.debug(f"[game_info_parser] Skipping unrecognized info table label '{label_cell.get_text().strip()}'.")
            continue

        record[kind.value] = FIELD_PARSERS[kind](data_cell, kind)

    return record
