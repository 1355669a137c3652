"""Application settings and configuration.

This module defines all configuration options for the Loadout Hub service.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Loadout Hub", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")

    # Security and authentication
    secret_key: str = Field(alias="SECRET_KEY")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database configuration
    database_url: str = Field(default="sqlite:///./loadout_hub.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # JWT authentication settings (tokens are issued by the identity provider)
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 7,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )

    # Listing behaviour
    page_size: int = Field(default=9, ge=1, alias="PAGE_SIZE")
    max_page_size: int = Field(default=48, ge=1, alias="MAX_PAGE_SIZE")

    # Profile rules
    username_change_cooldown_days: int = Field(
        default=30,
        alias="USERNAME_CHANGE_COOLDOWN_DAYS",
    )

    # Landing page aggregate counters
    stats_cache_seconds: int = Field(default=3600, alias="STATS_CACHE_SECONDS")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides.

        Returns:
            The active database URL (test database if in testing mode, otherwise production)
        """
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url

    @property
    def sqlalchemy_url(self) -> str:
        """Return the active database URL with the PostgreSQL driver pinned.

        Bare ``postgres://`` and ``postgresql://`` URLs are bound to psycopg so
        the application engine and Alembic use the same installed driver.
        """
        url = self.effective_database_url
        for prefix in ("postgresql://", "postgres://"):
            if url.startswith(prefix):
                return "postgresql+psycopg://" + url[len(prefix):]
        return url

    def clamp_page_size(self, page_size: int | None) -> int:
        """Return a page size within the configured bounds."""
        if page_size is None or page_size < 1:
            return self.page_size
        return min(page_size, self.max_page_size)


settings = Settings()  # type: ignore[call-arg]
