"""Content repository access: remote contents API with local emulation."""

from gitfolio.repository.client import RepositoryClient
from gitfolio.repository.credentials import CredentialStore
from gitfolio.repository.emulation import LocalEmulationStore
from gitfolio.repository.exceptions import (
    AuthFailure,
    Conflict,
    InvalidMedia,
    MalformedContent,
    NotFound,
    RepositoryError,
    RepositoryNotConfigured,
    TransportError,
)
from gitfolio.repository.models import AuthenticatedUser, EntryKind, RepositoryEntry

__all__ = [
    "AuthFailure",
    "AuthenticatedUser",
    "Conflict",
    "CredentialStore",
    "EntryKind",
    "InvalidMedia",
    "LocalEmulationStore",
    "MalformedContent",
    "NotFound",
    "RepositoryClient",
    "RepositoryEntry",
    "RepositoryError",
    "RepositoryNotConfigured",
    "TransportError",
]
