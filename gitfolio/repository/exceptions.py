"""Errors surfaced by the repository layer."""


class RepositoryError(Exception):
    """Base exception for repository errors.

    Attributes:
        message: Human-readable message, from the provider when available
        status_code: HTTP status of the failed call, if any
        path: Repository path the operation addressed, if any
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        path: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.path = path


class NotFound(RepositoryError):  # noqa: N818
    """The path does not exist in the repository."""


class Conflict(RepositoryError):  # noqa: N818
    """The content hash is stale or missing for an existing file."""


class AuthFailure(RepositoryError):  # noqa: N818
    """The access token was rejected."""


class TransportError(RepositoryError):
    """Network or provider failure."""


class RepositoryNotConfigured(RepositoryError):  # noqa: N818
    """Owner or repository name missing for a remote call."""


class MalformedContent(RepositoryError):  # noqa: N818
    """A file exists but cannot be deserialized into its content kind."""


class InvalidMedia(RepositoryError):  # noqa: N818
    """An upload was rejected before reaching the repository."""
