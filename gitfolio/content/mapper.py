"""Translate content items to repository paths and file bodies, and back.

Every kind has exactly one rule in ``CONTENT_RULES``: its folder, how its
filename is generated, and how its body is serialized. Nothing here does I/O.
"""

import json
import re
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Optional, cast

from gitfolio.content.models import (
    BlogPost,
    ContentItem,
    ContentKind,
    MediaAsset,
    Quote,
    Recipe,
    SinglePage,
)
from gitfolio.core.logging import get_module_logger
from gitfolio.repository.encoding import ensure_transport
from gitfolio.repository.exceptions import MalformedContent

logger = get_module_logger("content_mapper")

_NON_ALPHANUMERIC = re.compile(r"[\W_]+")
_EXTENSION = re.compile(r"\.[a-z0-9]+")
_TIMESTAMP_PREFIX = re.compile(r"^\d+-(?P<name>.+)$")


class MillisecondClock:
    """Millisecond timestamps that never repeat within a process.

    Two calls in the same millisecond get consecutive values, so
    timestamp-prefixed filenames from a fast batch cannot collide.
    """

    def __init__(self, now: Callable[[], float] = time.time):
        self._now = now
        self._last = 0
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            value = max(int(self._now() * 1000), self._last + 1)
            self._last = value
            return value


_clock = MillisecondClock()


def unique_timestamp_ms() -> int:
    return _clock.next()


def slugify(text: str) -> str:
    """Lowercase text and collapse non-alphanumeric runs to single hyphens.

    Letters from any script are kept. Applying it twice gives the same
    result as applying it once.

    Args:
        text: Title, author name or file stem

    Returns:
        Slug, or ``untitled`` when nothing alphanumeric is left
    """
    slug = _NON_ALPHANUMERIC.sub("-", text.lower()).strip("-")
    return slug or "untitled"


def sanitize_media_name(name: str) -> str:
    """Make an uploaded file name safe for a repository path.

    Args:
        name: Original file name, possibly with directories

    Returns:
        Slugged stem plus lowercased extension
    """
    base = PurePosixPath(name.replace("\\", "/")).name
    suffix = PurePosixPath(base).suffix.lower()
    stem = base[: -len(suffix)] if suffix else base
    if not _EXTENSION.fullmatch(suffix):
        stem, suffix = base, ""
    return f"{slugify(stem)}{suffix}"


def title_from_filename(filename: str) -> str:
    """Turn ``banana-bread.md`` into ``Banana Bread``."""
    stem = filename[:-3] if filename.endswith(".md") else filename
    return " ".join(word[:1].upper() + word[1:] for word in stem.split("-") if word)


# Per-kind filename rules


def _markdown_filename(item: ContentItem, timestamp_ms: int) -> str:
    return f"{slugify(cast(BlogPost | Recipe, item).title)}.md"


def _quote_filename(item: ContentItem, timestamp_ms: int) -> str:
    return f"{slugify(cast(Quote, item).author)}-{timestamp_ms}.json"


def _media_filename(item: ContentItem, timestamp_ms: int) -> str:
    return f"{timestamp_ms}-{sanitize_media_name(cast(MediaAsset, item).original_name)}"


def _page_filename(item: ContentItem, timestamp_ms: int) -> str:
    return f"{item.kind.value}.md"


# Per-kind serializers


def _serialize_markdown(item: ContentItem) -> str:
    return cast(BlogPost | Recipe | SinglePage, item).body


def _serialize_quote(item: ContentItem) -> str:
    quote = cast(Quote, item)
    return json.dumps(
        {"quote": quote.quote, "author": quote.author}, indent=2, ensure_ascii=False
    )


def _serialize_media(item: ContentItem) -> str:
    return ensure_transport(cast(MediaAsset, item).data)


# Per-kind deserializers


def _deserialize_blog(body: str, filename: str) -> ContentItem:
    return BlogPost(title=title_from_filename(filename), body=body, filename=filename)


def _deserialize_recipe(body: str, filename: str) -> ContentItem:
    return Recipe(title=title_from_filename(filename), body=body, filename=filename)


def _deserialize_quote(body: str, filename: str) -> ContentItem:
    try:
        data = json.loads(body)
    except ValueError as e:
        raise MalformedContent(
            f"Quote {filename} is not valid JSON: {e}", path=filename
        ) from e
    if not isinstance(data, dict):
        raise MalformedContent(
            f"Quote {filename} must be a JSON object", path=filename
        )
    return Quote(
        quote=str(data.get("quote") or ""),
        author=str(data.get("author") or ""),
        filename=filename,
    )


def _media_deserializer(kind: ContentKind) -> Callable[[str, str], ContentItem]:
    def deserialize(body: str, filename: str) -> ContentItem:
        match = _TIMESTAMP_PREFIX.match(filename)
        original = match.group("name") if match else filename
        return MediaAsset(
            kind=kind, original_name=original, data=body, filename=filename
        )

    return deserialize


def _page_deserializer(kind: ContentKind) -> Callable[[str, str], ContentItem]:
    def deserialize(body: str, filename: str) -> ContentItem:
        return SinglePage(kind=kind, body=body, filename=filename)

    return deserialize


@dataclass(frozen=True)
class ContentRule:
    """How one content kind maps onto the repository."""

    kind: ContentKind
    folder: str
    noun: str  # Used in commit messages
    is_binary: bool
    needs_timestamp: bool
    filename: Callable[[ContentItem, int], str]
    serialize: Callable[[ContentItem], str]
    deserialize: Callable[[str, str], ContentItem]


CONTENT_RULES: dict[ContentKind, ContentRule] = {
    ContentKind.BLOG: ContentRule(
        ContentKind.BLOG,
        "content/blogs",
        "blog",
        False,
        False,
        _markdown_filename,
        _serialize_markdown,
        _deserialize_blog,
    ),
    ContentKind.RECIPE: ContentRule(
        ContentKind.RECIPE,
        "content/recipes",
        "recipe",
        False,
        False,
        _markdown_filename,
        _serialize_markdown,
        _deserialize_recipe,
    ),
    ContentKind.QUOTE: ContentRule(
        ContentKind.QUOTE,
        "content/quotes",
        "quote",
        False,
        True,
        _quote_filename,
        _serialize_quote,
        _deserialize_quote,
    ),
    ContentKind.IMAGE: ContentRule(
        ContentKind.IMAGE,
        "img/photos",
        "image",
        True,
        True,
        _media_filename,
        _serialize_media,
        _media_deserializer(ContentKind.IMAGE),
    ),
    ContentKind.VIDEO: ContentRule(
        ContentKind.VIDEO,
        "content/videos",
        "video",
        True,
        True,
        _media_filename,
        _serialize_media,
        _media_deserializer(ContentKind.VIDEO),
    ),
    ContentKind.ABOUT: ContentRule(
        ContentKind.ABOUT,
        "content/about",
        "about",
        False,
        False,
        _page_filename,
        _serialize_markdown,
        _page_deserializer(ContentKind.ABOUT),
    ),
    ContentKind.STORE: ContentRule(
        ContentKind.STORE,
        "content/store",
        "store",
        False,
        False,
        _page_filename,
        _serialize_markdown,
        _page_deserializer(ContentKind.STORE),
    ),
}


def rule_for(kind: ContentKind) -> ContentRule:
    return CONTENT_RULES[ContentKind(kind)]


def folder_for(kind: ContentKind) -> str:
    return rule_for(kind).folder


def to_path(kind: ContentKind, filename: str) -> str:
    """Repository path of a file of the given kind."""
    return f"{folder_for(kind)}/{filename.strip('/')}"


def filename_for(item: ContentItem, *, timestamp_ms: Optional[int] = None) -> str:
    """Generate the canonical filename for a new item.

    Args:
        item: Content item
        timestamp_ms: Uniqueness timestamp for quotes and media; taken from
            a monotonic clock when omitted

    Returns:
        Filename within the kind's folder
    """
    rule = rule_for(item.kind)
    if timestamp_ms is None and rule.needs_timestamp:
        timestamp_ms = unique_timestamp_ms()
    return rule.filename(item, timestamp_ms or 0)


def serialize(item: ContentItem) -> str:
    """File body for an item: text for documents, base64 for media."""
    return rule_for(item.kind).serialize(item)


def deserialize(kind: ContentKind, body: str, *, filename: str) -> ContentItem:
    """Build an item from a file body.

    Args:
        kind: Content kind of the folder the file was read from
        body: Decoded text (base64 text for media)
        filename: Name of the file

    Returns:
        The content item

    Raises:
        MalformedContent: If the body does not fit the kind
    """
    return rule_for(kind).deserialize(body, filename)


def try_deserialize(
    kind: ContentKind, body: str, *, filename: str
) -> Optional[ContentItem]:
    """Like ``deserialize`` but logs and returns None for malformed files."""
    try:
        return deserialize(kind, body, filename=filename)
    except MalformedContent as e:
        logger.warning(
            "malformed_content_skipped",
            kind=kind.value,
            filename=filename,
            error=e.message,
        )
        return None


def commit_message(kind: ContentKind, filename: str, action: str) -> str:
    """Commit message such as ``Create blog: banana-bread.md``."""
    return f"{action} {rule_for(kind).noun}: {filename}"
