"""Tests for the content mapper."""

import json

import pytest

from gitfolio.content.mapper import (
    CONTENT_RULES,
    MillisecondClock,
    commit_message,
    deserialize,
    filename_for,
    folder_for,
    sanitize_media_name,
    serialize,
    slugify,
    title_from_filename,
    to_path,
    try_deserialize,
)
from gitfolio.content.models import (
    BlogPost,
    ContentKind,
    MediaAsset,
    Quote,
    Recipe,
    SinglePage,
)
from gitfolio.repository.encoding import decode_bytes
from gitfolio.repository.exceptions import MalformedContent


class TestSlugify:
    """Test filename slugs."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Banana Bread", "banana-bread"),
            ("  Mom's  Best -- Cookies!  ", "mom-s-best-cookies"),
            ("snake_case_title", "snake-case-title"),
            ("Nelson Mandela", "nelson-mandela"),
            ("جبران خليل جبران", "جبران-خليل-جبران"),
            ("!!!", "untitled"),
            ("", "untitled"),
        ],
    )
    def test_slugify(self, text: str, expected: str):
        assert slugify(text) == expected

    @pytest.mark.parametrize(
        "text", ["Banana Bread", "  a--b  ", "Crème Brûlée", "!!!", "x_y z"]
    )
    def test_slugify_is_idempotent(self, text: str):
        assert slugify(slugify(text)) == slugify(text)


class TestMediaNames:
    """Test uploaded file name sanitizing."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("cake.jpg", "cake.jpg"),
            ("My Cake.JPG", "my-cake.jpg"),
            ("C:\\Users\\amna\\Photo 1.png", "photo-1.png"),
            ("../../etc/passwd", "passwd"),
            ("clip", "clip"),
        ],
    )
    def test_sanitize_media_name(self, name: str, expected: str):
        assert sanitize_media_name(name) == expected

    def test_title_from_filename(self):
        assert title_from_filename("banana-bread.md") == "Banana Bread"
        assert title_from_filename("about.md") == "About"


class TestFilenames:
    """Test generated filenames and paths."""

    def test_markdown_filename_comes_from_title(self):
        assert filename_for(BlogPost(title="Banana Bread", body="x")) == (
            "banana-bread.md"
        )
        assert filename_for(Recipe(title="Banana Bread", body="x")) == (
            "banana-bread.md"
        )

    def test_quote_filename_has_author_and_timestamp(self):
        quote = Quote(quote="It always seems impossible.", author="Nelson Mandela")
        assert filename_for(quote, timestamp_ms=1700000000000) == (
            "nelson-mandela-1700000000000.json"
        )

    def test_media_filename_is_timestamp_prefixed(self):
        asset = MediaAsset(kind=ContentKind.IMAGE, original_name="Cake.JPG", data=b"x")
        assert filename_for(asset, timestamp_ms=1700000000000) == (
            "1700000000000-cake.jpg"
        )

    def test_single_page_filename_is_fixed(self):
        assert filename_for(SinglePage(kind=ContentKind.ABOUT, body="x")) == "about.md"
        assert filename_for(SinglePage(kind=ContentKind.STORE, body="x")) == "store.md"

    def test_generated_timestamps_differ(self):
        """Should never give two quotes in a row the same name."""
        quote = Quote(quote="q", author="a")
        names = {filename_for(quote) for _ in range(50)}
        assert len(names) == 50

    @pytest.mark.parametrize(
        "kind,folder",
        [
            (ContentKind.BLOG, "content/blogs"),
            (ContentKind.RECIPE, "content/recipes"),
            (ContentKind.QUOTE, "content/quotes"),
            (ContentKind.IMAGE, "img/photos"),
            (ContentKind.VIDEO, "content/videos"),
            (ContentKind.ABOUT, "content/about"),
            (ContentKind.STORE, "content/store"),
        ],
    )
    def test_folders(self, kind: ContentKind, folder: str):
        assert folder_for(kind) == folder

    def test_every_kind_has_a_rule(self):
        assert set(CONTENT_RULES) == set(ContentKind)

    def test_to_path(self):
        assert to_path(ContentKind.BLOG, "a.md") == "content/blogs/a.md"
        assert to_path("images", "/1-x.png") == "img/photos/1-x.png"


class TestClock:
    """Test the millisecond clock."""

    def test_same_millisecond_gives_increasing_values(self):
        clock = MillisecondClock(now=lambda: 1700000000.0)
        assert [clock.next() for _ in range(3)] == [
            1700000000000,
            1700000000001,
            1700000000002,
        ]

    def test_clock_follows_time(self):
        times = iter([1.0, 5.0])
        clock = MillisecondClock(now=lambda: next(times))
        assert clock.next() == 1000
        assert clock.next() == 5000


class TestSerialization:
    """Test bodies written for each kind."""

    def test_markdown_body_is_stored_as_is(self):
        post = BlogPost(title="T", body="# Heading\n\nText")
        assert serialize(post) == "# Heading\n\nText"

    def test_quote_is_pretty_json(self):
        quote = Quote(quote="العلم نور", author="Proverb")
        body = serialize(quote)

        assert json.loads(body) == {"quote": "العلم نور", "author": "Proverb"}
        assert "العلم نور" in body
        assert "\n  " in body

    def test_media_is_base64(self):
        asset = MediaAsset(kind=ContentKind.IMAGE, original_name="a.png", data=b"\x89P")
        assert decode_bytes(serialize(asset)) == b"\x89P"

    def test_quote_round_trip(self):
        quote = Quote(quote="Be kind.", author="Anon")
        restored = deserialize(
            ContentKind.QUOTE, serialize(quote), filename="anon-1.json"
        )
        assert restored == Quote(quote="Be kind.", author="Anon", filename="anon-1.json")

    def test_markdown_title_comes_from_filename(self):
        recipe = deserialize(ContentKind.RECIPE, "body", filename="banana-bread.md")
        assert isinstance(recipe, Recipe)
        assert recipe.title == "Banana Bread"
        assert recipe.body == "body"

    def test_media_recovers_original_name(self):
        asset = deserialize(ContentKind.VIDEO, "AAAA", filename="1700000000000-clip.mp4")
        assert isinstance(asset, MediaAsset)
        assert asset.kind is ContentKind.VIDEO
        assert asset.original_name == "clip.mp4"

    def test_page_deserializes_to_single_page(self):
        page = deserialize(ContentKind.STORE, "Shop", filename="store.md")
        assert page == SinglePage(kind=ContentKind.STORE, body="Shop", filename="store.md")


class TestMalformedContent:
    """Test files that do not fit their kind."""

    @pytest.mark.parametrize("body", ["not json", "[1, 2]", ""])
    def test_malformed_quote_raises(self, body: str):
        with pytest.raises(MalformedContent):
            deserialize(ContentKind.QUOTE, body, filename="x.json")

    def test_try_deserialize_returns_none(self):
        assert try_deserialize(ContentKind.QUOTE, "{oops", filename="x.json") is None

    def test_try_deserialize_returns_item(self):
        item = try_deserialize(
            ContentKind.QUOTE, '{"quote": "q", "author": "a"}', filename="a-1.json"
        )
        assert isinstance(item, Quote)


class TestCommitMessages:
    """Test commit message wording."""

    def test_commit_messages(self):
        assert commit_message(ContentKind.BLOG, "a.md", "Create") == "Create blog: a.md"
        assert commit_message(ContentKind.QUOTE, "q.json", "Update") == (
            "Update quote: q.json"
        )
        assert commit_message(ContentKind.IMAGE, "1-x.png", "Delete") == (
            "Delete image: 1-x.png"
        )
