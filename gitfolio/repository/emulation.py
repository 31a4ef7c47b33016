"""Local emulation store used in place of the remote repository.

When no access token is configured, writes and deletes land here so the
editing workflow can be demoed without credentials. Entries are kept in a
SQLite database keyed by repository path, with bodies stored as base64
transport text exactly as they would be sent to the contents API.
"""

import json
import mimetypes
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from gitfolio.core.logging import get_module_logger
from gitfolio.repository.encoding import decode_bytes, git_blob_sha
from gitfolio.repository.models import EntryKind, RepositoryEntry
from gitfolio.repository.retry import with_connection_retry, with_db_retry

logger = get_module_logger("emulation_store")


class LocalEmulationStore:
    """Durable path -> body mapping mirroring the contents API's shallow listing."""

    def __init__(self, db_path: Path, legacy_path: Optional[Path] = None):
        """Initialize emulation store.

        Args:
            db_path: SQLite database file (created if missing)
            legacy_path: JSON file from the older size-capped store; imported
                once and then removed
        """
        self.db_path = db_path
        self.legacy_path = legacy_path

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_database()

        if self.legacy_path is not None:
            self._migrate_legacy()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self.db_path)
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    @with_connection_retry
    def _init_database(self) -> None:
        """Initialize SQLite database for emulated entries."""
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS entries (
                    path TEXT PRIMARY KEY,
                    body TEXT NOT NULL,
                    updated_at TIMESTAMP NOT NULL
                )
            """
            )
            conn.commit()

    def _migrate_legacy(self) -> int:
        """Move entries from the legacy JSON store into SQLite.

        Existing SQLite entries win over legacy ones. The legacy file is
        removed after a successful import.

        Returns:
            Number of entries imported
        """
        if self.legacy_path is None or not self.legacy_path.exists():
            return 0

        try:
            data = json.loads(self.legacy_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(
                "legacy_store_unreadable", path=str(self.legacy_path), error=str(e)
            )
            return 0

        if not isinstance(data, dict):
            logger.warning("legacy_store_invalid", path=str(self.legacy_path))
            return 0

        rows = [
            (str(path), str(body), _now())
            for path, body in data.items()
            if isinstance(body, str)
        ]
        self._insert_missing(rows)
        self.legacy_path.unlink()

        logger.info("legacy_store_migrated", entries=len(rows))
        return len(rows)

    @with_db_retry()
    def _insert_missing(self, rows: list[tuple[str, str, str]]) -> None:
        with self._connect() as conn:
            conn.executemany(
                "INSERT OR IGNORE INTO entries (path, body, updated_at) VALUES (?, ?, ?)",
                rows,
            )
            conn.commit()

    @with_db_retry()
    def get(self, path: str) -> Optional[str]:
        """Get the stored body for a path.

        Args:
            path: Repository path

        Returns:
            Base64 body, or None if the path is not stored
        """
        with self._connect() as conn:
            cursor = conn.execute(
                "SELECT body FROM entries WHERE path = ?", (_normalize(path),)
            )
            row = cursor.fetchone()
            return row[0] if row else None

    @with_db_retry()
    def set(self, path: str, body: str) -> None:
        """Store a body, replacing any existing one.

        Args:
            path: Repository path
            body: Base64 transport body
        """
        with self._connect() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO entries (path, body, updated_at)
                VALUES (?, ?, ?)
            """,
                (_normalize(path), body, _now()),
            )
            conn.commit()

    @with_db_retry()
    def delete(self, path: str) -> bool:
        """Remove a path.

        Args:
            path: Repository path

        Returns:
            True if an entry was removed
        """
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM entries WHERE path = ?", (_normalize(path),)
            )
            conn.commit()
            return cursor.rowcount > 0

    @with_db_retry()
    def list_prefix(self, folder: str) -> list[str]:
        """List paths exactly one segment below a folder.

        Args:
            folder: Folder path (with or without trailing slash)

        Returns:
            Sorted list of child paths
        """
        prefix = _normalize(folder) + "/"
        with self._connect() as conn:
            cursor = conn.execute(
                "SELECT path FROM entries WHERE substr(path, 1, ?) = ? ORDER BY path",
                (len(prefix), prefix),
            )
            paths = [row[0] for row in cursor.fetchall()]

        return [p for p in paths if "/" not in p[len(prefix) :]]

    @with_db_retry()
    def clear(self) -> None:
        """Remove every emulated entry."""
        with self._connect() as conn:
            conn.execute("DELETE FROM entries")
            conn.commit()

    def entry_for(self, path: str, body: str) -> RepositoryEntry:
        """Describe a stored body as a repository entry.

        The content hash is the git blob SHA of the decoded bytes, so it
        changes whenever the body changes.

        Args:
            path: Repository path
            body: Base64 transport body

        Returns:
            RepositoryEntry without a decoded body
        """
        path = _normalize(path)
        try:
            data = decode_bytes(body)
        except ValueError:
            data = body.encode("utf-8")

        # Media previews are served inline since there is no raw URL
        download_url = None
        media_type, _ = mimetypes.guess_type(path)
        if media_type and media_type.startswith(("image/", "video/")):
            download_url = f"data:{media_type};base64,{''.join(body.split())}"

        return RepositoryEntry(
            path=path,
            name=path.rsplit("/", 1)[-1],
            kind=EntryKind.FILE,
            content_hash=git_blob_sha(data),
            download_url=download_url,
            size=len(data),
        )


def _normalize(path: str) -> str:
    return path.strip().strip("/")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()
