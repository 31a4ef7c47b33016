"""Content item models.

Each content kind is one variant of a discriminated union keyed on ``kind``.
"""

import re
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

# Arabic block, used to flag quotes for right-to-left display
_ARABIC = re.compile(r"[\u0600-\u06FF]")


class ContentKind(str, Enum):
    """Content categories, named after their admin tabs."""

    BLOG = "blogs"
    RECIPE = "recipes"
    QUOTE = "quotes"
    IMAGE = "images"
    VIDEO = "videos"
    ABOUT = "about"
    STORE = "store"


class BlogPost(BaseModel):
    """A Markdown blog post."""

    model_config = ConfigDict(frozen=True)

    kind: Literal[ContentKind.BLOG] = ContentKind.BLOG
    title: str = Field(..., description="Title; also the source of the filename")
    body: str = Field(..., description="Markdown text")
    filename: Optional[str] = None


class Recipe(BaseModel):
    """A Markdown recipe."""

    model_config = ConfigDict(frozen=True)

    kind: Literal[ContentKind.RECIPE] = ContentKind.RECIPE
    title: str = Field(..., description="Title; also the source of the filename")
    body: str = Field(..., description="Markdown text")
    filename: Optional[str] = None


class Quote(BaseModel):
    """A quote stored as a small JSON document."""

    model_config = ConfigDict(frozen=True)

    kind: Literal[ContentKind.QUOTE] = ContentKind.QUOTE
    quote: str
    author: str
    filename: Optional[str] = None

    @property
    def is_rtl(self) -> bool:
        """True when the quote or author contains Arabic script."""
        return bool(_ARABIC.search(self.quote) or _ARABIC.search(self.author))


class MediaAsset(BaseModel):
    """An image or short video."""

    model_config = ConfigDict(frozen=True)

    kind: Literal[ContentKind.IMAGE, ContentKind.VIDEO]
    original_name: str = Field(..., description="Name of the uploaded file")
    data: Union[bytes, str] = Field(
        ..., description="Raw bytes, or base64 transport text"
    )
    content_type: Optional[str] = None
    duration_seconds: Optional[float] = Field(
        default=None, ge=0, description="Video length, measured by the caller"
    )
    filename: Optional[str] = None


class SinglePage(BaseModel):
    """The one Markdown page of the about or store folder."""

    model_config = ConfigDict(frozen=True)

    kind: Literal[ContentKind.ABOUT, ContentKind.STORE]
    body: str
    filename: Optional[str] = None


ContentItem = Annotated[
    Union[BlogPost, Recipe, Quote, MediaAsset, SinglePage],
    Field(discriminator="kind"),
]

_content_item_adapter: TypeAdapter[ContentItem] = TypeAdapter(ContentItem)


def build_item(kind: ContentKind, fields: dict[str, Any]) -> ContentItem:
    """Build a content item from form fields.

    Args:
        kind: Content kind
        fields: Field values (without ``kind``)

    Returns:
        The matching content item variant

    Raises:
        pydantic.ValidationError: If fields do not fit the kind
    """
    return _content_item_adapter.validate_python({**fields, "kind": kind})
