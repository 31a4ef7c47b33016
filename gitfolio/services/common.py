"""Helpers shared by the admin and public services."""

from gitfolio.content.mapper import folder_for
from gitfolio.content.models import ContentKind
from gitfolio.core.logging import get_module_logger
from gitfolio.repository.client import RepositoryClient
from gitfolio.repository.exceptions import RepositoryError
from gitfolio.repository.models import RepositoryEntry

logger = get_module_logger("services")


async def list_or_empty(
    client: RepositoryClient, kind: ContentKind
) -> list[RepositoryEntry]:
    """List a kind's folder, degrading any failure to an empty list.

    Used where several categories load side by side and one failing
    category must not hide the others.
    """
    folder = folder_for(kind)
    try:
        return await client.list(folder)
    except RepositoryError as e:
        logger.warning(
            "category_unavailable",
            kind=kind.value,
            folder=folder,
            error=e.message,
            error_type=type(e).__name__,
        )
        return []


def newest_first(entries: list[RepositoryEntry]) -> list[RepositoryEntry]:
    """Sort by name descending; timestamp-prefixed names put recent uploads first."""
    return sorted(entries, key=lambda entry: entry.name, reverse=True)
