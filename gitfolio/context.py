"""Application context shared by the admin console and the public viewer.

The context is built once at startup with ``create_context`` and handed to
every service. Logging out clears the token held by its credential store;
repository coordinates stay persisted across restarts. Call ``aclose`` on
shutdown to release the HTTP connection pool.
"""

from dataclasses import dataclass
from typing import Optional

import httpx

from gitfolio.core.config import Settings
from gitfolio.core.logging import configure_logging, get_module_logger
from gitfolio.repository.client import RepositoryClient
from gitfolio.repository.credentials import CredentialStore
from gitfolio.repository.emulation import LocalEmulationStore

logger = get_module_logger("context")


@dataclass
class GitfolioContext:
    """Explicitly constructed state for one running application."""

    settings: Settings
    credentials: CredentialStore
    emulation: LocalEmulationStore
    client: RepositoryClient

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> "GitfolioContext":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


def create_context(
    settings: Optional[Settings] = None,
    *,
    http_client: Optional[httpx.AsyncClient] = None,
) -> GitfolioContext:
    """Configure logging and build the stores and repository client.

    Args:
        settings: Application settings; loaded from the environment when omitted
        http_client: Optional shared HTTP client (not closed by the context)

    Returns:
        Ready-to-use context
    """
    settings = settings or Settings()
    configure_logging(level=settings.LOG_LEVEL, json_logs=settings.JSON_LOGS)

    credentials = CredentialStore(
        settings.coordinates_path,
        token=settings.GITHUB_TOKEN,
        default_owner=settings.REPO_OWNER,
        default_repository=settings.REPO_NAME,
    )
    emulation = LocalEmulationStore(
        settings.emulation_db_path, settings.legacy_emulation_path
    )
    client = RepositoryClient.from_settings(
        settings, credentials, emulation, http_client=http_client
    )

    logger.info(
        "context_created",
        owner=credentials.owner,
        repository=credentials.repository,
        authenticated=credentials.is_authenticated(),
        state_dir=str(settings.STATE_DIR),
    )
    return GitfolioContext(
        settings=settings,
        credentials=credentials,
        emulation=emulation,
        client=client,
    )
