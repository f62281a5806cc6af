"""Application configuration via Pydantic Settings."""

from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # API Settings
    PROJECT_NAME: str = "Orgspace API"
    VERSION: str = "0.3.0"
    API_PREFIX: str = "/api"
    ENVIRONMENT: str = "development"  # "production" enables secure cookies

    # Database Settings
    # Plain PostgreSQL URLs; the +psycopg driver is added in database.py.
    # SQLite URLs are accepted for local development.
    DATABASE_URL: str = "sqlite:///./orgspace.db"
    MIGRATION_DATABASE_URL: str = ""  # Direct connection for alembic (falls back to DATABASE_URL)

    # Identity provider (JWT issued by the external auth service)
    AUTH_JWT_SECRET: str = ""
    AUTH_JWT_ALGORITHM: str = "HS256"
    AUTH_JWT_AUDIENCE: str = ""
    AUTH_JWT_ISSUER: str = ""

    # Tenant selection cookie
    ACTIVE_ORG_COOKIE: str = "active_org_id"
    ACTIVE_ORG_COOKIE_SECURE: bool = False  # Forced on when ENVIRONMENT=production

    # Frontend paths used in redirect hints
    SIGN_IN_PATH: str = "/sign-in"
    ONBOARDING_PATH: str = "/onboarding"
    ORG_SELECT_PATH: str = "/org/select"
    DASHBOARD_PATH: str = "/dashboard"

    # AI Provider Configuration
    AI_PROVIDER: str = "gemini"  # gemini | anthropic | openai
    AI_FORCE_FALLBACK: bool = False  # Deterministic local report text, no network call
    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-1.5-flash"
    GEMINI_API_BASE: str = "https://generativelanguage.googleapis.com/v1beta"
    ANTHROPIC_API_KEY: str = ""
    ANTHROPIC_MODEL: str = "claude-3-5-haiku-latest"
    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "gpt-4o-mini"
    LLM_MAX_TOKENS: int = 1024
    LLM_TEMPERATURE: float = 0.4
    LLM_TIMEOUT_SECONDS: float = 30.0

    # CORS Settings
    BACKEND_CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    # Rate limiting (slowapi syntax)
    RATE_LIMIT_DEFAULT: str = "60/second"

    # Logging
    LOG_LEVEL: str = "INFO"

    def get_migration_database_url(self) -> str:
        """URL used by alembic; direct connection when configured."""
        return self.MIGRATION_DATABASE_URL or self.DATABASE_URL

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"


# Global settings instance
settings = Settings()
