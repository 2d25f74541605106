import os
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

_CONFIG_PATH = os.getenv("MCSTATS_CONFIG", "config.toml")
_ENV_PATH = os.getenv("MCSTATS_ENV", ".env")


class TimelineSettings(BaseModel):
    enabled: bool = True
    cron: str = "0 * * * *"
    # servers that pinged within this many seconds count as online
    ping_window_seconds: int = 60 * 60


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="MCSTATS_",
        env_nested_delimiter="__",
        toml_file=_CONFIG_PATH,
        env_file=_ENV_PATH,
    )

    database_url: str
    database_echo: bool = False

    host: str = "0.0.0.0"
    port: int = 8000
    logs_dir: Path = Field(default=Path("logs"))

    max_lookback_hours: int = 31 * 24
    timeline: TimelineSettings = Field(default_factory=TimelineSettings)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Source order: init args > OS env > .env > config.toml > secrets
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            TomlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


settings = Settings()  # type: ignore We want the app to fail if the settings are not loaded correctly
