from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from saas_starter.core.exceptions import ConfigurationError


class Settings(BaseSettings):
    """Provisioning and seeding settings with environment variable support."""

    PROJECT_NAME: str = "SaaS Starter"
    VERSION: str = "1.0.0"

    # Cloudflare D1 Configuration
    CLOUDFLARE_ACCOUNT_ID: Optional[str] = None
    CLOUDFLARE_D1_DATABASE_ID: Optional[str] = None
    CLOUDFLARE_D1_DATABASE_NAME: Optional[str] = None
    CLOUDFLARE_D1_BINDING: Optional[str] = None
    CLOUDFLARE_D1_API_TOKEN: Optional[str] = None
    CLOUDFLARE_API_BASE_URL: str = "https://api.cloudflare.com/client/v4"
    D1_REQUEST_TIMEOUT_SECONDS: float = Field(
        default=30.0, description="Timeout for a single D1 HTTP API request"
    )

    # Stripe Configuration
    STRIPE_SECRET_KEY: Optional[str] = None
    STRIPE_WEBHOOK_SECRET: Optional[str] = None

    # Application
    BASE_URL: str = "http://localhost:3000"
    AUTH_SECRET: Optional[str] = None

    # External CLIs (split with shlex, so "pnpm wrangler" works)
    STRIPE_CLI: str = "stripe"
    WRANGLER_CLI: str = "pnpm wrangler"
    COMMAND_TIMEOUT_SECONDS: Optional[float] = Field(
        default=None,
        description="Optional timeout for external CLI calls (None = wait forever)",
    )

    # Local files written by the setup wizard
    WRANGLER_CONFIG_PATH: str = "wrangler.jsonc"
    ENV_FILE_PATH: str = ".env"

    # Seed defaults
    SEED_USER_EMAIL: str = "test@test.com"
    SEED_USER_PASSWORD: str = "admin123"
    SEED_TEAM_NAME: str = "Test Team"

    # Logging Configuration
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"  # json or text

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Only text and json renderers are supported."""
        v = v.lower()
        if v not in ("text", "json"):
            raise ValueError("LOG_FORMAT must be 'text' or 'json'")
        return v

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    def require(self, name: str) -> str:
        """Return a setting value, raising if it is unset or empty."""
        value = getattr(self, name, None)
        if not value:
            raise ConfigurationError(
                f"Missing required environment variable {name}",
                details={"variable": name},
            )
        return value


# Global settings instance
settings = Settings()
