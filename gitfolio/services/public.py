"""Public viewer: assembles every category of published content."""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Optional

from gitfolio.content.mapper import title_from_filename, to_path, try_deserialize
from gitfolio.content.markdown import resolve_images
from gitfolio.content.models import ContentKind, Quote
from gitfolio.context import GitfolioContext
from gitfolio.core.logging import get_module_logger
from gitfolio.repository.exceptions import RepositoryError
from gitfolio.repository.models import RepositoryEntry
from gitfolio.services.common import list_or_empty, newest_first

logger = get_module_logger("public_site")


def _passthrough(markdown: str) -> str:
    return markdown


@dataclass
class MarkdownCard:
    """A rendered blog post or recipe."""

    id: str
    filename: str
    title: str
    html: str
    highlight_image: Optional[str] = None


@dataclass
class RecipeHighlight:
    image: str
    recipe_file: str


@dataclass
class PublicFeed:
    """Everything the public pages display."""

    images: list[RepositoryEntry] = field(default_factory=list)
    quotes: list[Quote] = field(default_factory=list)
    recipes: list[MarkdownCard] = field(default_factory=list)
    blogs: list[MarkdownCard] = field(default_factory=list)
    about: str = ""
    store: str = ""
    recipe_highlights: list[RecipeHighlight] = field(default_factory=list)


class PublicSite:
    """Loads published content for anonymous visitors."""

    def __init__(
        self,
        context: GitfolioContext,
        render: Optional[Callable[[str], str]] = None,
    ):
        """Initialize the viewer.

        Args:
            context: Application context
            render: Markdown to HTML renderer; bodies are left as Markdown
                when omitted
        """
        self.context = context
        self.client = context.client
        self.render = render or _passthrough

    async def fetch_all(self) -> PublicFeed:
        """Load every category.

        Images load first since Markdown bodies resolve their references
        against the image listing. The remaining categories load
        concurrently; any that fails comes back empty.
        """
        images = await self.fetch_images()
        quotes, recipes, blogs, about, store = await asyncio.gather(
            self.fetch_quotes(),
            self.fetch_markdown(ContentKind.RECIPE, images),
            self.fetch_markdown(ContentKind.BLOG, images),
            self.fetch_page(ContentKind.ABOUT),
            self.fetch_page(ContentKind.STORE),
        )
        highlights = [
            RecipeHighlight(image=card.highlight_image, recipe_file=card.filename)
            for card in recipes
            if card.highlight_image
        ]
        return PublicFeed(
            images=images,
            quotes=quotes,
            recipes=recipes,
            blogs=blogs,
            about=about,
            store=store,
            recipe_highlights=highlights,
        )

    async def fetch_images(self) -> list[RepositoryEntry]:
        return newest_first(await list_or_empty(self.client, ContentKind.IMAGE))

    async def fetch_quotes(self) -> list[Quote]:
        """Load all quotes, skipping files that fail to read or parse."""
        files = await list_or_empty(self.client, ContentKind.QUOTE)
        bodies = await asyncio.gather(
            *(self._read_text(ContentKind.QUOTE, entry.name) for entry in files)
        )

        quotes: list[Quote] = []
        for entry, body in zip(files, bodies):
            if body is None:
                continue
            item = try_deserialize(ContentKind.QUOTE, body, filename=entry.name)
            if isinstance(item, Quote):
                quotes.append(item)
        return quotes

    async def fetch_markdown(
        self, kind: ContentKind, images: list[RepositoryEntry]
    ) -> list[MarkdownCard]:
        """Load and render the Markdown items of a category."""
        files = await list_or_empty(self.client, kind)
        cards = await asyncio.gather(
            *(self._card(kind, entry, images) for entry in files)
        )
        return [card for card in cards if card is not None]

    async def fetch_page(self, kind: ContentKind) -> str:
        """Render the single page of the about or store folder."""
        files = await list_or_empty(self.client, kind)
        if not files:
            return ""
        body = await self._read_text(kind, files[0].name)
        return self.render(body) if body is not None else ""

    async def _card(
        self, kind: ContentKind, entry: RepositoryEntry, images: list[RepositoryEntry]
    ) -> Optional[MarkdownCard]:
        body = await self._read_text(kind, entry.name)
        if body is None:
            return None
        resolved = resolve_images(body, images, self.client.raw_url)
        return MarkdownCard(
            id=entry.content_hash,
            filename=entry.name,
            title=title_from_filename(entry.name),
            html=self.render(resolved.body),
            highlight_image=resolved.highlight_image,
        )

    async def _read_text(self, kind: ContentKind, filename: str) -> Optional[str]:
        path = to_path(kind, filename)
        try:
            entry = await self.client.read(path)
        except RepositoryError as e:
            logger.warning("item_unavailable", path=path, error=e.message)
            return None
        return entry.text
