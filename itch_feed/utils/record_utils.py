# ===== IMPORTS & DEPENDENCIES =====
import copy

from itch_feed.models.game import DetailRecord, GameRecord, ListingItem

# ===== UTILITY FUNCTIONS =====

def combine_records(item: ListingItem, detail: DetailRecord) -> GameRecord:
    """Merges a feed item and its detail page metadata into one output record. Never fails."""
    return GameRecord(
        guid=item["guid"],
        link=item["link"],
        title=item["title"],
        plain_title=item["plain_title"],
        price=item["price"],
        description=item["description"],
        pub_date=item["pub_date"],
        create_date=item["create_date"],
        update_date=item["update_date"],
        status=detail["status"],
        release_date=detail["release_date"],
        updated_date=detail["updated_date"],
        published_date=detail["published_date"],
        platforms=list(detail["platforms"]),
        rating=copy.copy(detail["rating"]),
        authors=list(detail["authors"]),
        genres=list(detail["genres"]),
        made_with=list(detail["made_with"]),
        tags=list(detail["tags"]),
        average_session=detail["average_session"],
        languages=list(detail["languages"]),
        inputs=list(detail["inputs"]),
        links=[copy.copy(link) for link in detail["links"]],
        accessibility=list(detail["accessibility"]),
    )
