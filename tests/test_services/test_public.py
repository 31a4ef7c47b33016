"""Tests for the public viewer."""

import pytest
import respx
from httpx import Response

from gitfolio.content.models import ContentKind
from gitfolio.context import GitfolioContext
from gitfolio.services.public import PublicSite, RecipeHighlight
from tests.fixtures.github import CONTENTS_URL, DOWNLOAD_URL, FakeContentsAPI

PHOTO_URL = f"{DOWNLOAD_URL}/octo/site/main/img/photos"


@pytest.fixture
def site(context: GitfolioContext) -> PublicSite:
    return PublicSite(context, render=lambda markdown: f"<div>{markdown}</div>")


@pytest.fixture
def published(github: FakeContentsAPI) -> FakeContentsAPI:
    github.seed("img/photos/1700000000000-cake.jpg", b"\xff\xd8cake")
    github.seed("img/photos/1700000000100-pie.jpg", b"\xff\xd8pie")
    github.seed(
        "content/recipes/cake.md",
        "Mix.\n![thumbnail](/img/photos/1700000000000-cake.jpg)\nBake.",
    )
    github.seed("content/recipes/soup.md", "No pictures here.")
    github.seed("content/blogs/hello-world.md", "# Hello")
    github.seed(
        "content/quotes/nelson-mandela-1.json",
        '{"quote": "It always seems impossible until it\'s done.", '
        '"author": "Nelson Mandela"}',
    )
    github.seed("content/quotes/broken-2.json", "{not json")
    github.seed("content/about/about.md", "About me")
    github.seed("content/store/store.md", "Shop")
    return github


class TestFetchAll:
    """Test assembling the public feed."""

    @pytest.mark.asyncio
    async def test_feed_contains_every_category(
        self, published: FakeContentsAPI, site: PublicSite
    ):
        feed = await site.fetch_all()

        assert [image.name for image in feed.images] == [
            "1700000000100-pie.jpg",
            "1700000000000-cake.jpg",
        ]
        assert [quote.author for quote in feed.quotes] == ["Nelson Mandela"]
        assert sorted(card.filename for card in feed.recipes) == ["cake.md", "soup.md"]
        assert [card.title for card in feed.blogs] == ["Hello World"]
        assert feed.about == "<div>About me</div>"
        assert feed.store == "<div>Shop</div>"

    @pytest.mark.asyncio
    async def test_recipe_highlights(
        self, published: FakeContentsAPI, site: PublicSite
    ):
        """Only recipes with an image are highlighted."""
        feed = await site.fetch_all()

        assert feed.recipe_highlights == [
            RecipeHighlight(
                image=f"{PHOTO_URL}/1700000000000-cake.jpg", recipe_file="cake.md"
            )
        ]

    @pytest.mark.asyncio
    async def test_recipe_body_is_resolved_and_rendered(
        self, published: FakeContentsAPI, site: PublicSite
    ):
        feed = await site.fetch_all()
        cake = next(card for card in feed.recipes if card.filename == "cake.md")

        assert cake.title == "Cake"
        assert cake.id == published.sha("content/recipes/cake.md")
        assert cake.html == (
            f"<div>Mix.\n![]({PHOTO_URL}/1700000000000-cake.jpg)\nBake.</div>"
        )

    @pytest.mark.asyncio
    async def test_empty_repository(self, github: FakeContentsAPI, site: PublicSite):
        feed = await site.fetch_all()

        assert feed.images == []
        assert feed.quotes == []
        assert feed.recipes == []
        assert feed.blogs == []
        assert feed.about == ""
        assert feed.store == ""
        assert feed.recipe_highlights == []

    @pytest.mark.asyncio
    async def test_failing_category_is_empty(self, site: PublicSite):
        """A folder that cannot be read leaves the rest of the feed intact."""
        about = {
            "type": "file",
            "name": "about.md",
            "path": "content/about/about.md",
            "sha": "abc",
            "encoding": "base64",
            "content": "QWJvdXQgbWU=\n",
        }
        with respx.mock:
            respx.get(f"{CONTENTS_URL}/content/blogs").mock(
                return_value=Response(500, json={"message": "Server Error"})
            )
            respx.get(f"{CONTENTS_URL}/content/about").mock(
                return_value=Response(200, json=[about])
            )
            respx.get(f"{CONTENTS_URL}/content/about/about.md").mock(
                return_value=Response(200, json=about)
            )
            respx.route(url__startswith=CONTENTS_URL).mock(
                return_value=Response(404, json={"message": "Not Found"})
            )

            feed = await site.fetch_all()

        assert feed.blogs == []
        assert feed.about == "<div>About me</div>"


class TestSingleCategories:
    """Test per-category loaders."""

    @pytest.mark.asyncio
    async def test_fetch_quotes_skips_malformed(
        self, published: FakeContentsAPI, site: PublicSite
    ):
        quotes = await site.fetch_quotes()

        assert len(quotes) == 1
        assert quotes[0].filename == "nelson-mandela-1.json"

    @pytest.mark.asyncio
    async def test_fetch_page_for_missing_folder(
        self, github: FakeContentsAPI, site: PublicSite
    ):
        assert await site.fetch_page(ContentKind.STORE) == ""

    @pytest.mark.asyncio
    async def test_locally_edited_page_is_shown(
        self, github: FakeContentsAPI, context: GitfolioContext
    ):
        """Anonymous edits appear on the public pages of the same session."""
        await context.client.write(
            "content/about/about.md", "Local about", "Update about: about.md"
        )

        page = await PublicSite(context).fetch_page(ContentKind.ABOUT)

        assert page == "Local about"
