from __future__ import annotations

from datetime import datetime  # noqa: TCH003

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Library settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="ORGFLOW_",
        extra="ignore",
        case_sensitive=False,
    )

    # Application
    debug: bool = False
    log_level: str = "INFO"

    # Document layout
    tasks_header: str = "## Tasks"
    notes_header: str = "## Notes"
    untitled_note_title: str = "Untitled Note"

    # Defaults for notes missing metadata; None means "current UTC time"
    default_timestamp: datetime | None = None

    # Autocompletion
    suggestion_limit: int | None = None  # None keeps every matching candidate


settings = Settings()
