"""Application configuration via pydantic-settings."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """All runtime configuration, loaded from environment / .env file."""

    rules_path: Path | None = None
    rules_url: str | None = None
    rules_hash_url: str | None = None
    strip_referral_marketing: bool = False
    port: int = 7777
    log_level: str = "INFO"
    environment: str = "development"

    model_config = SettingsConfigDict(
        env_prefix="CLEARURLS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


# Module-level instance for the HTTP entry point; the cleaning core takes
# its rules explicitly and never reads it.
settings = Settings()
