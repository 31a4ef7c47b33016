"""Resolve repository-relative image references in Markdown bodies."""

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Optional

from gitfolio.content.mapper import folder_for
from gitfolio.content.models import ContentKind
from gitfolio.repository.models import RepositoryEntry

IMAGE_REFERENCE = re.compile(r"!\[(?P<alt>[^\]]*)\]\((?P<url>[^)\s]*)\)")

THUMBNAIL_TAG = "thumbnail"


@dataclass
class ResolvedMarkdown:
    """Markdown with absolute image URLs and the item's highlight image."""

    body: str
    highlight_image: Optional[str] = None


def media_prefix() -> str:
    return f"/{folder_for(ContentKind.IMAGE)}/"


def resolve_images(
    markdown: str,
    media_listing: Iterable[RepositoryEntry],
    raw_url: Callable[[str], str],
) -> ResolvedMarkdown:
    """Rewrite ``![alt](/img/photos/name)`` references to fetchable URLs.

    A reference resolves to the ``download_url`` of the matching entry in
    ``media_listing``; unlisted files fall back to ``raw_url``. The alt text
    ``thumbnail`` marks the highlight image and is removed from the output.
    Without a tagged image, the first resolved image is the highlight.

    Args:
        markdown: Markdown body as stored
        media_listing: Entries already listed from the media folder
        raw_url: Maps a repository path to its raw download URL

    Returns:
        ResolvedMarkdown with the rewritten body
    """
    prefix = media_prefix()
    by_name = {entry.name: entry for entry in media_listing}
    first_image: Optional[str] = None
    tagged_image: Optional[str] = None

    def replace(match: re.Match[str]) -> str:
        nonlocal first_image, tagged_image

        url = match.group("url")
        if not url.startswith(prefix):
            return match.group(0)

        name = url.rsplit("/", 1)[-1]
        listed = by_name.get(name)
        if listed is not None and listed.download_url:
            resolved = listed.download_url
        else:
            resolved = raw_url(url.lstrip("/"))

        if first_image is None:
            first_image = resolved

        alt = match.group("alt")
        if alt.strip().lower() == THUMBNAIL_TAG:
            if tagged_image is None:
                tagged_image = resolved
            alt = ""

        return f"![{alt}]({resolved})"

    body = IMAGE_REFERENCE.sub(replace, markdown)
    return ResolvedMarkdown(body=body, highlight_image=tagged_image or first_image)


def image_reference(filename: str, *, thumbnail: bool = False) -> str:
    """Markdown snippet embedding an uploaded image.

    Args:
        filename: Name of the file in the media folder
        thumbnail: Tag the image as the item's highlight

    Returns:
        Snippet surrounded by newlines, ready to insert into a body
    """
    alt = THUMBNAIL_TAG if thumbnail else filename.split("-", 1)[-1]
    return f"\n![{alt}]({media_prefix()}{filename})\n"
