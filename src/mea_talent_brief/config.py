"""Configuration helpers for the talent brief workflow."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    openai_api_key: str | None = Field(None, alias="OPENAI_API_KEY")
    discovery_model: str = Field(
        "gpt-4.1-mini", description="Model used for the web-search discovery round trip."
    )
    formatter_model: str = Field(
        "gpt-4.1-mini",
        description="Model that coerces free-form discovery results into the item schema.",
    )
    synthesis_model: str = Field(
        "gpt-4.1", description="Model that writes the newsletter from curated items."
    )
    max_tokens: int = Field(
        8000,
        description=(
            "Max output tokens for synthesis; raise if newsletters come back truncated."
        ),
    )
    temperature: float = Field(0.4, description="Generation temperature.")
    discovery_target_count: int = Field(
        15, description="Number of news items requested from discovery."
    )
    publish_delay_seconds: float = Field(
        2.5,
        description="Pause between finalizing and publishing, shown as a transitional state.",
    )
    share_base_url: str = Field(
        "http://localhost:8000/",
        alias="SHARE_BASE_URL",
        description="Base URL that share links are built against.",
    )


def get_settings() -> Settings:
    """Return a settings instance read from the current environment."""
    return Settings()
