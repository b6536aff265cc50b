# ===== TYPES & INTERFACES =====

from typing import TypedDict, List


class ListingItem(TypedDict):
    """
    One <item> from a page of the itch.io RSS feed. Produced by the feed
    decoder and never modified afterwards; the three dates are carried
    verbatim as they appear in the feed.

    Attributes:
        guid (str): The feed's identifier for the item.
        title (str): The title as published (may contain price decorations).
        plain_title (str): The bare game title.
        link (str): Canonical URL of the game's page. Unique key of a record.
        price (str): Display price string (e.g. '$4.99').
        description (str): Short description from the feed.
        pub_date (str): Publish timestamp string.
        create_date (str): Creation timestamp string.
        update_date (str): Last update timestamp string.
    """
    guid: str
    title: str
    plain_title: str
    link: str
    price: str
    description: str
    pub_date: str
    create_date: str
    update_date: str


class Rating(TypedDict):
    score: float
    count: int


class Link(TypedDict):
    name: str
    url: str


class DetailRecord(TypedDict):
    """
    Metadata pulled from the "More information" table of a game page.
    Fields whose row is absent from the table keep their defaults
    (see `empty_detail_record`).
    """
    status: str
    release_date: str
    updated_date: str
    published_date: str
    platforms: List[str]
    rating: Rating
    authors: List[str]
    genres: List[str]
    made_with: List[str]
    tags: List[str]
    average_session: str
    languages: List[str]
    inputs: List[str]
    links: List[Link]
    accessibility: List[str]


class GameRecord(ListingItem, DetailRecord):
    """A feed item merged with its detail page metadata, keyed by `link`."""


def empty_detail_record() -> DetailRecord:
    """Returns a DetailRecord with every field at its default value."""
    return DetailRecord(
        status="",
        release_date="",
        updated_date="",
        published_date="",
        platforms=[],
        rating=Rating(score=0.0, count=0),
        authors=[],
        genres=[],
        made_with=[],
        tags=[],
        average_session="",
        languages=[],
        inputs=[],
        links=[],
        accessibility=[],
    )
