"""Application configuration."""

from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings.

    Environment variables (prefixed with ``GITFOLIO_``) will be loaded and
    validated using Pydantic.
    """

    # GitHub Settings
    GITHUB_API_URL: str = "https://api.github.com"
    GITHUB_RAW_URL: str = "https://raw.githubusercontent.com"
    GITHUB_TOKEN: str | None = None  # Seeds the session token when set

    # Repository coordinates (persisted coordinates take precedence)
    REPO_OWNER: str = ""
    REPO_NAME: str = "amna_portfolio"
    REPO_BRANCH: str | None = None  # None means the repository default branch

    # Local state (coordinates file and emulation database)
    STATE_DIR: Path = Path.home() / ".gitfolio"

    # HTTP Settings
    HTTP_TIMEOUT: float = Field(default=30.0, gt=0)
    READ_RETRIES: int = Field(default=2, ge=0)
    RETRY_BASE_DELAY: float = Field(default=0.2, ge=0)

    # Upload Settings
    UPLOAD_DELAY_SECONDS: float = Field(default=0.1, ge=0)
    MAX_IMAGE_BYTES: int = Field(default=10 * 1024 * 1024, gt=0)  # 10MB
    MAX_VIDEO_SECONDS: float = Field(default=5.5, gt=0)  # 5s plus margin

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    JSON_LOGS: bool = True

    model_config = SettingsConfigDict(
        env_prefix="GITFOLIO_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @model_validator(mode="after")
    def normalize_urls(self) -> "Settings":
        """Strip trailing slashes so paths can be joined with a single '/'."""
        self.GITHUB_API_URL = self.GITHUB_API_URL.rstrip("/")
        self.GITHUB_RAW_URL = self.GITHUB_RAW_URL.rstrip("/")
        if self.GITHUB_TOKEN is not None and not self.GITHUB_TOKEN.strip():
            self.GITHUB_TOKEN = None
        return self

    @property
    def emulation_db_path(self) -> Path:
        """Location of the SQLite emulation database."""
        return self.STATE_DIR / "emulation.db"

    @property
    def legacy_emulation_path(self) -> Path:
        """Location of the legacy JSON emulation store, migrated on first use."""
        return self.STATE_DIR / "mock_github_db.json"

    @property
    def coordinates_path(self) -> Path:
        """Location of the persisted repository coordinates."""
        return self.STATE_DIR / "coordinates.json"
