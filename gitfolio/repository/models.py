"""Data models for repository entries."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from gitfolio.repository.encoding import bytes_to_text


class EntryKind(str, Enum):
    """Kind of a repository entry."""

    FILE = "file"
    DIRECTORY = "dir"


@dataclass
class RepositoryEntry:
    """Represents a file or directory in the content repository."""

    path: str
    name: str
    kind: EntryKind
    content_hash: str
    raw_body: Optional[str | bytes] = None  # Decoded body, only set by read/write
    download_url: Optional[str] = None
    size: int = 0

    @property
    def is_file(self) -> bool:
        return self.kind is EntryKind.FILE

    @property
    def text(self) -> str:
        """Body as text; bytes bodies are decoded as UTF-8, falling back to Latin-1."""
        if self.raw_body is None:
            return ""
        if isinstance(self.raw_body, bytes):
            return bytes_to_text(self.raw_body)
        return self.raw_body

    @classmethod
    def from_api(
        cls, data: dict[str, Any], raw_body: Optional[str | bytes] = None
    ) -> "RepositoryEntry":
        """Build an entry from a contents API item.

        Args:
            data: JSON object describing a file or directory
            raw_body: Decoded body to attach, if known

        Returns:
            RepositoryEntry for the item
        """
        kind = EntryKind.DIRECTORY if data.get("type") == "dir" else EntryKind.FILE
        path = data.get("path", "")
        return cls(
            path=path,
            name=data.get("name") or path.rsplit("/", 1)[-1],
            kind=kind,
            content_hash=data.get("sha", ""),
            raw_body=raw_body,
            download_url=data.get("download_url"),
            size=int(data.get("size") or 0),
        )


@dataclass
class AuthenticatedUser:
    """The account behind the current access token."""

    login: str
    name: Optional[str] = None
