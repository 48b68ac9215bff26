from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from facecards.application.utils.text import ShortNameStyle
from facecards.domain import constants as C

CONFIG_FILES = [
    Path.home() / ".config/facecards/config.toml",
    Path.home() / ".facecards.toml",
]


class AppConfig(BaseSettings):
    """
    Configuration model for facecards.
    Supports loading from:
    1. Config file (~/.config/facecards/config.toml or ~/.facecards.toml)
    2. Environment variables (FACECARDS_*)
    3. Manual overrides (CLI / server)
    """

    model_config = SettingsConfigDict(
        env_prefix="FACECARDS_",
        extra="ignore",
    )

    # Directory
    directory_url: str = C.DEFAULT_DIRECTORY_URL
    directory_scope: str = C.DEFAULT_DIRECTORY_SCOPE
    page_size: int = Field(default=C.DIRECTORY_PAGE_SIZE, ge=1)
    directory_token: str | None = None
    token_file: Path | None = None
    cache_ttl_seconds: float = Field(default=C.CACHE_DURATION, ge=0)
    request_timeout: float = C.REQUEST_TIMEOUT

    # Paths
    state_dir: Path = Field(default_factory=lambda: Path.home() / ".config/facecards/state")
    static_dir: Path | None = None

    # Server
    host: str = "127.0.0.1"
    port: int = 3000

    # Scheduling
    desired_retention: float = Field(default=C.DESIRED_RETENTION, gt=0, lt=1)
    relearn_minutes: float = Field(default=C.RELEARN_MINUTES, gt=0)
    learning_floor_minutes: float = Field(default=C.LEARNING_FLOOR_MINUTES, gt=0)
    max_interval_days: float = Field(default=C.MAX_INTERVAL_DAYS, gt=0)

    # Game
    symmetric_confusion: bool = False
    short_name_style: ShortNameStyle = "double_given"
    advance_delay: float = Field(default=C.ADVANCE_DELAY, ge=0)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        from pydantic_settings import TomlConfigSettingsSource

        # First existing file wins
        toml_file = next((f for f in CONFIG_FILES if f.exists()), None)

        # Earlier sources take priority: overrides, then env, then the file
        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (init_settings, env_settings)

    @field_validator("state_dir", "token_file", "static_dir", mode="before")
    @classmethod
    def resolve_path(cls, v: Any) -> Path | None:
        if v is None or v == "":
            return None
        return Path(v).expanduser().resolve()

    def read_token(self) -> str | None:
        """Configured directory token, falling back to the token file."""
        if self.directory_token:
            return self.directory_token.strip()
        if self.token_file and self.token_file.exists():
            token = self.token_file.read_text(encoding="utf-8").strip()
            return token or None
        return None


def resolve_config(overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/facecards/config.toml (if exists)
    3. Environment variables (FACECARDS_*)
    4. overrides (passed from Typer or the server), None values ignored
    """
    clean = {k: v for k, v in (overrides or {}).items() if v is not None}
    return AppConfig(**clean)
