import pytest

from itch_feed.core.errors import InvalidData, MissingData, MissingElements
from itch_feed.models.game import empty_detail_record
from itch_feed.parsers.game_info_parser import (
    FIELD_PARSERS, INFO_TABLE_LABELS, FieldKind, check_dispatch_tables, label_to_field_kind, parse_game_info
)


def game_page(*rows: str) -> str:
    return f"""
    <html><body>
      <div class="game_info_panel_widget base_widget">
        <table>
          <tbody>
            {''.join(rows)}
          </tbody>
        </table>
      </div>
    </body></html>
    """


def row(label: str, data: str) -> str:
    return f"<tr><td>{label}</td><td>{data}</td></tr>"


RATING_CELL = (
    '<div class="aggregate_rating" itemprop="aggregateRating">'
    '<div class="star_value" itemprop="ratingValue" content="4.5"></div>'
    '<span class="rating_count" itemprop="ratingCount" content="120">(120<span> total ratings</span>)</span>'
    '</div>'
)

FULL_PAGE = game_page(
    row("Updated", '<abbr title="06 March 2023 @ 08:15 UTC"><span>Mar 06, 2023</span></abbr>'),
    row("Published", '<abbr title="05 March 2023 @ 14:30 UTC"><span>Mar 05, 2023</span></abbr>'),
    row("Status", '<a href="https://itch.io/games/released">Released</a>'),
    row("Platforms", '<a href="/games/platform-windows">Windows</a>, <a href="/games/platform-linux">Linux</a>'),
    row("Rating", RATING_CELL),
    row("Author", '<a href="https://doggo.itch.io">Doggo Studio</a>'),
    row("Genre", '<a href="/games/genre-rpg">Role Playing</a>, <a href="/games/genre-adventure">Adventure</a>'),
    row("Made with", '<a href="/game-development/engines/made-with-godot">Godot</a>'),
    row("Tags", '<a href="/games/tag-2d">2D</a>,\n<a href="/games/tag-dogs">Dogs</a>,\n<a href="/games/tag-roguelike">Roguelike</a>'),
    row("Average session", "About a half-hour"),
    row("Languages", '<a href="/games/lang-en">English</a>, <a href="/games/lang-de">German</a>'),
    row("Inputs", '<a href="/games/input-keyboard">Keyboard</a>, <a href="/games/input-xbox-controller">Xbox controller</a>'),
    row("Links", '<a href="https://doggo.dev">Homepage</a>, <a href="https://twitter.com/doggo">Twitter/X</a>'),
    row("Accessibility", '<a href="/games/accessibility-subtitles">Subtitles</a>'),
    row("Release date", '<abbr title="01 April 2023 @ 00:00 UTC">Apr 01, 2023</abbr>'),
)


def test_parse_game_info_extracts_every_field():
    record = parse_game_info(FULL_PAGE)

    assert record["status"] == "Released"
    assert record["updated_date"] == "2023-03-06T08:15:00Z"
    assert record["published_date"] == "2023-03-05T14:30:00Z"
    assert record["release_date"] == "Apr 01, 2023"
    assert record["platforms"] == ["Windows", "Linux"]
    assert record["rating"] == {"score": 4.5, "count": 120}
    assert record["authors"] == ["Doggo Studio"]
    assert record["genres"] == ["Role Playing", "Adventure"]
    assert record["made_with"] == ["Godot"]
    assert record["tags"] == ["2D", "Dogs", "Roguelike"]
    assert record["average_session"] == "About a half-hour"
    assert record["languages"] == ["English", "German"]
    assert record["inputs"] == ["Keyboard", "Xbox controller"]
    assert record["links"] == [
        {"name": "Homepage", "url": "https://doggo.dev"},
        {"name": "Twitter/X", "url": "https://twitter.com/doggo"},
    ]
    assert record["accessibility"] == ["Subtitles"]


def test_page_without_info_table_yields_defaults():
    assert parse_game_info("<html><body><p>No table here</p></body></html>") == empty_detail_record()


def test_status_row_sets_only_status():
    record = parse_game_info(game_page(row("Status", "Released")))

    expected = empty_detail_record()
    expected["status"] = "Released"
    assert record == expected


@pytest.mark.parametrize("label", ["Download", "More information", "status", "Platform", "Author(s)"])
def test_unrecognized_labels_leave_record_untouched(label):
    record = parse_game_info(game_page(row(label, "<a href='/x'>Something</a>")))
    assert record == empty_detail_record()


@pytest.mark.parametrize("singular,plural,field", [
    ("Author", "Authors", "authors"),
    ("Genre", "Genres", "genres"),
    ("Tag", "Tags", "tags"),
    ("Language", "Languages", "languages"),
])
def test_singular_and_plural_labels_fill_the_same_field(singular, plural, field):
    cell = '<a href="/a">One</a>, <a href="/b">Two</a>'
    assert parse_game_info(game_page(row(singular, cell)))[field] == ["One", "Two"]
    assert parse_game_info(game_page(row(plural, cell)))[field] == ["One", "Two"]


def test_list_fields_keep_order_and_duplicates():
    record = parse_game_info(game_page(row("Tags", '<a>b</a>, <a>a</a>, <a>b</a>')))
    assert record["tags"] == ["b", "a", "b"]


def test_duplicate_labels_last_row_wins():
    record = parse_game_info(game_page(
        row("Status", "In development"),
        row("Status", "Released"),
        row("Tags", "<a>first</a>"),
        row("Tag", "<a>second</a>"),
    ))
    assert record["status"] == "Released"
    assert record["tags"] == ["second"]


@pytest.mark.parametrize("bad_row", [
    "<tr><td>Status</td></tr>",
    "<tr><td>Status</td><td>Released</td><td>extra</td></tr>",
    "<tr></tr>",
])
def test_row_without_exactly_two_cells_fails_extraction(bad_row):
    with pytest.raises(MissingElements):
        parse_game_info(game_page(row("Status", "Released"), bad_row))


def test_missing_rating_count_is_missing_data():
    cell = RATING_CELL.replace('itemprop="ratingCount"', 'itemprop="somethingElse"')
    with pytest.raises(MissingData) as excinfo:
        parse_game_info(game_page(row("Rating", cell)))
    assert excinfo.value.field_kind is FieldKind.RATING


def test_missing_rating_value_content_is_missing_data():
    cell = RATING_CELL.replace(' content="4.5"', "")
    with pytest.raises(MissingData):
        parse_game_info(game_page(row("Rating", cell)))


@pytest.mark.parametrize("old,new,found", [
    ('content="4.5"', 'content="four"', "four"),
    ('content="120"', 'content="12.5"', "12.5"),
])
def test_unparsable_rating_is_invalid_data(old, new, found):
    with pytest.raises(InvalidData) as excinfo:
        parse_game_info(game_page(row("Rating", RATING_CELL.replace(old, new))))
    assert excinfo.value.field_kind is FieldKind.RATING
    assert excinfo.value.found == found


def test_date_without_abbr_is_missing_data():
    with pytest.raises(MissingData) as excinfo:
        parse_game_info(game_page(row("Updated", "Mar 06, 2023")))
    assert excinfo.value.field_kind is FieldKind.UPDATED_DATE


def test_date_with_unexpected_format_is_invalid_data():
    with pytest.raises(InvalidData) as excinfo:
        parse_game_info(game_page(row("Published", '<abbr title="2023-03-05 14:30">Mar 05</abbr>')))
    assert excinfo.value.field_kind is FieldKind.PUBLISH_DATE
    assert excinfo.value.found == "2023-03-05 14:30"


def test_link_without_href_is_missing_data():
    cell = '<a href="https://doggo.dev">Homepage</a>, <a>Broken</a>'
    with pytest.raises(MissingData) as excinfo:
        parse_game_info(game_page(row("Links", cell)))
    assert excinfo.value.field_kind is FieldKind.LINKS


def test_label_lookup_is_exact_apart_from_surrounding_whitespace():
    assert label_to_field_kind("  Made with\n") is FieldKind.MADE_WITH
    assert label_to_field_kind("Made With") is None


def test_dispatch_tables_cover_every_field_kind():
    check_dispatch_tables()
    assert set(INFO_TABLE_LABELS.values()) == set(FieldKind)
    assert set(FIELD_PARSERS) == set(FieldKind)
    assert set(empty_detail_record()) == {kind.value for kind in FieldKind}


def test_table_without_tbody_is_still_read():
    html = (
        '<html><body><div class="game_info_panel_widget"><table>'
        '<tr><td>Status</td><td>Released</td></tr>'
        '<tr><td>Platforms</td><td><a>Windows</a>, <a>Linux</a></td></tr>'
        '</table></div></body></html>'
    )
    record = parse_game_info(html)

    assert record["status"] == "Released"
    assert record["platforms"] == ["Windows", "Linux"]


def test_html_comments_are_not_list_entries():
    record = parse_game_info(game_page(row("Tags", "<a>A</a><!-- hidden -->, <a>B</a>")))
    assert record["tags"] == ["A", "B"]


@pytest.mark.parametrize("score,count,found", [
    ("4.5", "1_20", "1_20"),
    ("4.5", " 120", " 120"),
    ("4.5", "2147483648", "2147483648"),
    ("4_5", "120", "4_5"),
    ("4.5 ", "120", "4.5 "),
    ("", "120", ""),
])
def test_rating_numbers_must_be_plain(score, count, found):
    cell = RATING_CELL.replace('content="4.5"', f'content="{score}"').replace('content="120"', f'content="{count}"')
    with pytest.raises(InvalidData) as excinfo:
        parse_game_info(game_page(row("Rating", cell)))
    assert excinfo.value.found == found


@pytest.mark.parametrize("score,count,expected", [
    ("5", "0", {"score": 5.0, "count": 0}),
    ("3.75", "+42", {"score": 3.75, "count": 42}),
    (".5", "2147483647", {"score": 0.5, "count": 2147483647}),
    ("1e0", "1", {"score": 1.0, "count": 1}),
])
def test_plain_rating_numbers_are_accepted(score, count, expected):
    cell = RATING_CELL.replace('content="4.5"', f'content="{score}"').replace('content="120"', f'content="{count}"')
    assert parse_game_info(game_page(row("Rating", cell)))["rating"] == expected
