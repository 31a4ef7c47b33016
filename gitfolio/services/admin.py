"""Admin console operations: login, dashboard, editing and uploads."""

import asyncio
import mimetypes
from dataclasses import dataclass
from typing import Optional

from gitfolio.content.mapper import (
    commit_message,
    deserialize,
    filename_for,
    folder_for,
    rule_for,
    serialize,
    to_path,
)
from gitfolio.content.markdown import image_reference
from gitfolio.content.models import (
    BlogPost,
    ContentItem,
    ContentKind,
    MediaAsset,
    Quote,
    Recipe,
    SinglePage,
)
from gitfolio.context import GitfolioContext
from gitfolio.core.logging import get_module_logger
from gitfolio.repository.encoding import decode_bytes, encode_bytes, ensure_transport
from gitfolio.repository.exceptions import (
    AuthFailure,
    Conflict,
    InvalidMedia,
    TransportError,
)
from gitfolio.repository.models import AuthenticatedUser, RepositoryEntry
from gitfolio.services.common import list_or_empty, newest_first

logger = get_module_logger("admin_console")

MEDIA_KINDS = (ContentKind.IMAGE, ContentKind.VIDEO)


@dataclass
class DashboardStats:
    """File counts per category."""

    blogs: int = 0
    recipes: int = 0
    quotes: int = 0
    media: int = 0  # images + videos
    about: int = 0
    store: int = 0


@dataclass
class EditableItem:
    """An item opened for editing, with the hash needed to save it back."""

    item: ContentItem
    path: str
    content_hash: str


@dataclass
class MediaUpload:
    """A file selected for upload."""

    name: str
    data: bytes | str  # raw bytes or base64 text
    content_type: Optional[str] = None
    duration_seconds: Optional[float] = None  # videos only, measured by the caller


class AdminConsole:
    """Operations behind the admin dashboard."""

    def __init__(self, context: GitfolioContext):
        self.context = context
        self.settings = context.settings
        self.credentials = context.credentials
        self.client = context.client

    # Session

    async def login(
        self, token: str, repository_name: Optional[str] = None
    ) -> AuthenticatedUser:
        """Verify a token and bind the session to the user's repository.

        A rejected token is cleared so the user is asked again. A transport
        failure keeps it, so a network blip does not force re-entry.

        Args:
            token: Personal access token
            repository_name: Repository to edit; defaults to settings

        Returns:
            The authenticated user

        Raises:
            ValueError: If the token is empty
            AuthFailure: If the token was rejected
            TransportError: If the provider could not be reached
        """
        if not token or not token.strip():
            raise ValueError("GitHub Access Token is strictly required.")

        self.credentials.set_token(token.strip())
        try:
            user = await self.client.get_authenticated_user()
        except AuthFailure:
            self.credentials.clear_token()
            logger.warning("login_rejected")
            raise
        except TransportError as e:
            logger.warning("login_unreachable", error=e.message)
            raise

        self.credentials.set_repository_coordinates(
            user.login, repository_name or self.settings.REPO_NAME
        )
        logger.info(
            "login_succeeded", owner=user.login, repository=self.credentials.repository
        )
        return user

    def logout(self) -> None:
        self.credentials.clear_token()
        logger.info("logged_out")

    # Reading

    async def dashboard_stats(self) -> DashboardStats:
        """Count files in every category concurrently.

        A category that fails to load counts as zero.
        """
        kinds = list(ContentKind)
        listings = await asyncio.gather(
            *(list_or_empty(self.client, kind) for kind in kinds)
        )
        counts = {kind: len(entries) for kind, entries in zip(kinds, listings)}
        return DashboardStats(
            blogs=counts[ContentKind.BLOG],
            recipes=counts[ContentKind.RECIPE],
            quotes=counts[ContentKind.QUOTE],
            media=counts[ContentKind.IMAGE] + counts[ContentKind.VIDEO],
            about=counts[ContentKind.ABOUT],
            store=counts[ContentKind.STORE],
        )

    async def list_items(self, kind: ContentKind) -> list[RepositoryEntry]:
        """Files of one category, newest timestamp first."""
        return newest_first(await self.client.list(folder_for(kind)))

    async def open_item(self, kind: ContentKind, filename: str) -> EditableItem:
        """Read and decode an item for editing.

        Raises:
            NotFound: If the file does not exist
            MalformedContent: If the file cannot be decoded as its kind
        """
        path = to_path(kind, filename)
        entry = await self.client.read(path, binary=rule_for(kind).is_binary)
        if isinstance(entry.raw_body, bytes):
            body = encode_bytes(entry.raw_body)
        else:
            body = entry.text
        item = deserialize(kind, body, filename=filename)
        return EditableItem(item=item, path=path, content_hash=entry.content_hash)

    # Writing

    async def save_item(
        self, item: ContentItem, *, expected_hash: Optional[str] = None
    ) -> RepositoryEntry:
        """Create or update a text item.

        Without ``expected_hash`` a new file is created under a generated
        name, refusing names already present in the folder. With it, the
        item's existing ``filename`` is replaced.

        Raises:
            ValueError: If required fields are missing
            Conflict: If the name is taken, or the hash is stale
        """
        kind = item.kind
        if kind in MEDIA_KINDS:
            raise ValueError("Media files are saved with upload_media")
        _validate_text_item(item)

        creating = expected_hash is None
        if creating:
            filename = filename_for(item)
            existing = await self.client.list(folder_for(kind))
            if any(entry.name == filename for entry in existing):
                raise Conflict(
                    "A file with this name already exists",
                    path=to_path(kind, filename),
                )
        else:
            filename = item.filename or filename_for(item)

        path = to_path(kind, filename)
        message = commit_message(kind, filename, "Create" if creating else "Update")
        entry = await self.client.write(
            path, serialize(item), message, expected_hash, False
        )
        logger.info("item_saved", kind=kind.value, path=path, created=creating)
        return entry

    async def upload_media(
        self, kind: ContentKind, uploads: list[MediaUpload]
    ) -> list[RepositoryEntry]:
        """Upload a batch of images or videos.

        Every file is validated before anything is written. Writes then run
        one at a time: the provider rejects concurrent commits against the
        same tree.

        Raises:
            InvalidMedia: If any file fails validation
        """
        if kind not in MEDIA_KINDS:
            raise ValueError(f"{kind.value} is not a media category")
        if not uploads:
            raise InvalidMedia("Please select at least one file to upload")

        assets = [self._validated_asset(kind, upload) for upload in uploads]

        created: list[RepositoryEntry] = []
        for index, asset in enumerate(assets):
            if index:
                await asyncio.sleep(self.settings.UPLOAD_DELAY_SECONDS)
            filename = filename_for(asset)
            path = to_path(kind, filename)
            entry = await self.client.write(
                path,
                serialize(asset),
                commit_message(kind, filename, "Upload"),
                None,
                True,
            )
            created.append(entry)

        logger.info("media_uploaded", kind=kind.value, count=len(created))
        return created

    async def upload_inline_image(
        self, upload: MediaUpload, *, thumbnail: bool = False
    ) -> str:
        """Upload an image for a Markdown body.

        Returns:
            Markdown snippet referencing the uploaded image
        """
        asset = self._validated_asset(ContentKind.IMAGE, upload)
        filename = filename_for(asset)
        await self.client.write(
            to_path(ContentKind.IMAGE, filename),
            serialize(asset),
            f"Upload inline image: {filename}",
            None,
            True,
        )
        return image_reference(filename, thumbnail=thumbnail)

    async def delete_item(
        self, kind: ContentKind, filename: str, expected_hash: str
    ) -> bool:
        """Delete a file permanently.

        Raises:
            NotFound: If the file does not exist
            Conflict: If the hash does not match
        """
        path = to_path(kind, filename)
        await self.client.delete(
            path, commit_message(kind, filename, "Delete"), expected_hash
        )
        logger.info("item_deleted", kind=kind.value, path=path)
        return True

    def _validated_asset(self, kind: ContentKind, upload: MediaUpload) -> MediaAsset:
        content_type = (
            upload.content_type or mimetypes.guess_type(upload.name)[0] or ""
        )

        if kind == ContentKind.VIDEO:
            if not content_type.startswith("video/"):
                raise InvalidMedia(
                    "Please select a valid video file.", path=upload.name
                )
            duration = upload.duration_seconds
            if duration is not None and duration > self.settings.MAX_VIDEO_SECONDS:
                raise InvalidMedia(
                    f"Video is too long ({duration:.1f}s). Max allowed is 5 seconds.",
                    path=upload.name,
                )
        else:
            if not content_type.startswith("image/"):
                raise InvalidMedia(
                    "Please select a valid image file.", path=upload.name
                )
            try:
                size = (
                    len(upload.data)
                    if isinstance(upload.data, bytes)
                    else len(decode_bytes(ensure_transport(upload.data)))
                )
            except ValueError as e:
                raise InvalidMedia(str(e), path=upload.name) from e
            if size > self.settings.MAX_IMAGE_BYTES:
                limit_mb = self.settings.MAX_IMAGE_BYTES // (1024 * 1024)
                raise InvalidMedia(
                    f"Image exceeds {limit_mb}MB limit.", path=upload.name
                )

        return MediaAsset(
            kind=kind,
            original_name=upload.name,
            data=upload.data,
            content_type=content_type,
            duration_seconds=upload.duration_seconds,
        )


def _validate_text_item(item: ContentItem) -> None:
    if isinstance(item, (BlogPost, Recipe)):
        if not item.title.strip():
            raise ValueError("Title is required")
        if not item.body.strip():
            raise ValueError("Content cannot be empty")
    elif isinstance(item, Quote):
        if not item.author.strip() or not item.quote.strip():
            raise ValueError("Author Name and Quote Text are required")
    elif isinstance(item, SinglePage):
        if not item.body.strip():
            raise ValueError("Content cannot be empty")
