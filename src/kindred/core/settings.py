"""Application settings and configuration.

This module defines all configuration options for the Kindred application.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Kindred", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")

    # Security and authentication
    secret_key: str = Field(default="change-me", alias="SECRET_KEY")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database configuration
    database_url: str = Field(default="sqlite:///./kindred.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # JWT authentication settings (tokens are issued by the identity provider)
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 7,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )

    # Generative model used for content moderation
    moderation_api_base_url: str = Field(
        default="https://generativelanguage.googleapis.com",
        alias="MODERATION_API_BASE_URL",
    )
    moderation_api_key: str | None = Field(default=None, alias="MODERATION_API_KEY")
    moderation_model: str = Field(default="gemini-1.5-flash", alias="MODERATION_MODEL")
    moderation_timeout_seconds: float = Field(
        default=5.0,
        alias="MODERATION_TIMEOUT_SECONDS",
    )

    # Presentation defaults for posts and stories
    default_background_color: str = Field(default="white", alias="DEFAULT_BACKGROUND_COLOR")
    default_text_color: str = Field(default="black", alias="DEFAULT_TEXT_COLOR")

    # Stories expire this many hours after creation
    story_ttl_hours: int = Field(default=24, alias="STORY_TTL_HOURS")

    # Rankings
    popular_limit: int = Field(default=5, alias="POPULAR_LIMIT")
    trending_limit: int = Field(default=5, alias="TRENDING_LIMIT")
    trending_comment_weight: int = Field(default=2, alias="TRENDING_COMMENT_WEIGHT")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
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
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling.

        Converts asyncpg URLs to psycopg for synchronous database operations
        like Alembic migrations.
        """
        url = self.effective_database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url

    @property
    def moderation_endpoint(self) -> str:
        """Return the path of the structured-generation call for the configured model."""
        return f"/v1beta/models/{self.moderation_model}:generateContent"


settings = Settings()
