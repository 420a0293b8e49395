"""Settings merged from command-line values, environment and an options file.

Uses pydantic-settings. Sources by priority: explicit values passed to
:func:`load_settings` (the command line), ``MORK_UNREAD_*`` environment
variables, the TOML options file, field defaults.
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    SettingsError,
    TomlConfigSettingsSource,
)

from .errors import ConfigError
from .profile import DEFAULT_REGISTRY
from .summary import DEFAULT_TOTAL_COLUMNS, DEFAULT_UNREAD_COLUMNS

DEFAULT_CONFIG_FILE = Path("~/.config/mork-unread/options.toml")


class Settings(BaseSettings):
    """Effective options for one run.

    All env vars are prefixed with ``MORK_UNREAD_``.
    Example: ``MORK_UNREAD_PROFILE=~/.thunderbird/abcd.default``
    """

    model_config = SettingsConfigDict(env_prefix="MORK_UNREAD_", extra="ignore")

    # --- Inputs ---------------------------------------------------------
    files: list[str] = Field(
        default_factory=list,
        description="Mailbox .msf files or folders, absolute or profile-relative",
    )
    profile: Path | None = Field(
        default=None,
        description="Mail-client profile directory; located via the registry when unset",
    )
    registry: Path = Field(
        default=DEFAULT_REGISTRY,
        description="Profile registry (profiles.ini) used to find the default profile",
    )
    config: Path | None = Field(
        default=None,
        description="Options file these settings were loaded from",
    )

    # --- Output ---------------------------------------------------------
    no_zero: bool = Field(default=False, description="Suppress the count when it is 0")
    no_newline: bool = Field(default=False, description="Omit the final newline")
    trim: bool = Field(default=False, description="Strip surrounding whitespace from output")
    before: str = Field(default="", description="Text prepended to the total count")
    after: str = Field(default="", description="Text appended to the total count")
    location: bool = Field(default=False, description="Print one line per mailbox with its path")

    # --- Summary columns ------------------------------------------------
    total_columns: list[str] = Field(
        default_factory=lambda: list(DEFAULT_TOTAL_COLUMNS),
        description="Column names holding the total message count",
    )
    unread_columns: list[str] = Field(
        default_factory=lambda: list(DEFAULT_UNREAD_COLUMNS),
        description="Column names holding the unread message count",
    )

    # --- Logging --------------------------------------------------------
    log_level: str = Field(default="WARNING", description="Log level")
    log_json: bool = Field(default=False, description="Use JSON log output instead of console")

    @field_validator("profile", "registry", "config", mode="after")
    @classmethod
    def _expand_home(cls, value: Path | None) -> Path | None:
        return value.expanduser() if value is not None else None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (init_settings, env_settings, TomlConfigSettingsSource(settings_cls))


def load_settings(
    config_file: Path | None = None,
    *,
    no_config: bool = False,
    **overrides: Any,
) -> Settings:
    """Build the effective settings.

    ``overrides`` holds values given on the command line; ``None`` entries
    are treated as not given.  A missing options file is ignored, a
    malformed one raises :class:`ConfigError`.
    """
    toml_file = None if no_config else (config_file or DEFAULT_CONFIG_FILE).expanduser()

    class FileSettings(Settings):
        model_config = SettingsConfigDict(toml_file=toml_file)

    values = {key: value for key, value in overrides.items() if value is not None}
    if toml_file is not None and toml_file.is_file():
        values.setdefault("config", toml_file)

    try:
        return FileSettings(**values)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Malformed options file {toml_file}: {exc}") from exc
    except (ValidationError, SettingsError) as exc:
        raise ConfigError(f"Invalid settings: {exc}") from exc
