"""Application configuration with environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Environment
    ENV: str = "dev"

    # App Version (format: a.bc.de - major.feature.patch)
    VERSION: str = "0.01.00"

    # Database
    DATABASE_URL: str = "sqlite:///./voicestack_onboarding.db"

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000"

    # Logging
    LOG_LEVEL: str = "INFO"

    # Provisioning payload contract version (external wire format)
    PROVISIONING_PAYLOAD_VERSION: str = "1.0.0"

    # Default extension series when a location has none configured
    DEFAULT_EXTENSION_START: int = 1000
    DEFAULT_EXTENSION_END: int = 9999

    # Rate Limiting (requests per minute)
    RATE_LIMIT_SUBMIT: int = 10  # Onboarding submissions
    RATE_LIMIT_API: int = 120  # General API
    RATE_LIMIT_STORAGE_URI: str = "memory://"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ORIGINS into a list."""
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def is_sqlite(self) -> bool:
        """SQLite needs thread-sharing connect args and has no row locks."""
        return self.DATABASE_URL.startswith("sqlite")


settings = Settings()
