"""Content kinds and their mapping onto repository files."""

from gitfolio.content.mapper import (
    CONTENT_RULES,
    commit_message,
    deserialize,
    filename_for,
    folder_for,
    serialize,
    slugify,
    to_path,
    try_deserialize,
)
from gitfolio.content.models import (
    BlogPost,
    ContentItem,
    ContentKind,
    MediaAsset,
    Quote,
    Recipe,
    SinglePage,
    build_item,
)

__all__ = [
    "CONTENT_RULES",
    "BlogPost",
    "ContentItem",
    "ContentKind",
    "MediaAsset",
    "Quote",
    "Recipe",
    "SinglePage",
    "build_item",
    "commit_message",
    "deserialize",
    "filename_for",
    "folder_for",
    "serialize",
    "slugify",
    "to_path",
    "try_deserialize",
]
