"""Credential holder for the content repository."""

import json
from pathlib import Path
from typing import Optional

from gitfolio.core.logging import get_module_logger

logger = get_module_logger("credentials")


class CredentialStore:
    """Holds the access token and the target repository coordinates.

    The token lives only as long as this object (one session). Owner and
    repository name are written to a JSON file and reloaded on construction,
    so they survive restarts.
    """

    def __init__(
        self,
        coordinates_path: Optional[Path] = None,
        *,
        token: Optional[str] = None,
        default_owner: str = "",
        default_repository: str = "",
    ):
        """Initialize the credential store.

        Args:
            coordinates_path: File used to persist coordinates; None keeps
                them in memory only
            token: Initial session token
            default_owner: Owner used when nothing was persisted
            default_repository: Repository used when nothing was persisted
        """
        self.coordinates_path = coordinates_path
        self._token: Optional[str] = token or None
        self.owner = default_owner
        self.repository = default_repository
        self._load_coordinates()

    @property
    def token(self) -> Optional[str]:
        return self._token

    def set_token(self, token: str) -> None:
        """Set the session token. No format validation is done."""
        self._token = token or None

    def clear_token(self) -> None:
        self._token = None

    def is_authenticated(self) -> bool:
        return bool(self._token)

    @property
    def has_coordinates(self) -> bool:
        return bool(self.owner and self.repository)

    def set_repository_coordinates(self, owner: str, name: str) -> None:
        """Set and persist the target repository.

        Args:
            owner: Account login owning the repository
            name: Repository name
        """
        self.owner = owner
        self.repository = name
        self._save_coordinates()

    def _load_coordinates(self) -> None:
        if self.coordinates_path is None or not self.coordinates_path.exists():
            return
        try:
            data = json.loads(self.coordinates_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(
                "coordinates_unreadable",
                path=str(self.coordinates_path),
                error=str(e),
            )
            return
        self.owner = data.get("owner") or self.owner
        self.repository = data.get("repository") or self.repository

    def _save_coordinates(self) -> None:
        """Save coordinates atomically."""
        if self.coordinates_path is None:
            return
        self.coordinates_path.parent.mkdir(parents=True, exist_ok=True)
        temp_file = self.coordinates_path.with_suffix(".tmp")
        temp_file.write_text(
            json.dumps({"owner": self.owner, "repository": self.repository}, indent=2),
            encoding="utf-8",
        )
        temp_file.replace(self.coordinates_path)
