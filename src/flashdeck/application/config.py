from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)


def config_file_path() -> Path:
    return Path.home() / ".config/flashdeck/config.toml"


class AppConfig(BaseSettings):
    """
    Configuration model for flashdeck.
    Supports loading from:
    1. Environment variables (FLASHDECK_*)
    2. Config file (~/.config/flashdeck/config.toml)
    3. Manual overrides (CLI)
    """

    model_config = SettingsConfigDict(
        env_prefix="FLASHDECK_",
        extra="ignore",
    )

    # Paths
    data_file: Path = Field(
        default_factory=lambda: Path.home() / ".local/share/flashdeck/storage.json"
    )
    log_dir: Path = Field(default_factory=lambda: Path.home() / ".config/flashdeck/logs")

    # Cards
    default_language: str = ""

    # Study
    seed: int | None = None  # Fixed seed for reproducible selection

    # Server
    host: str = "127.0.0.1"
    port: int = 8780

    verbose: int = 0

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

        toml_file = config_file_path()
        if toml_file.exists():
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (init_settings, env_settings)

    @field_validator("data_file", "log_dir", mode="before")
    @classmethod
    def expand_path(cls, v: Any) -> Any:
        if v is None:
            return v
        return Path(v).expanduser()


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/flashdeck/config.toml (if exists)
    3. Environment variables (FLASHDECK_*)
    4. cli_overrides (passed from Typer), None values ignored
    """
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return AppConfig(**overrides)
