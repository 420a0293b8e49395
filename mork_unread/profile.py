"""Locate the default mail-client profile from its ``profiles.ini`` registry."""

from __future__ import annotations

import configparser
import re
from pathlib import Path

import structlog

from .errors import ProfileNotFound

logger = structlog.get_logger()

DEFAULT_REGISTRY = Path("~/.thunderbird/profiles.ini")
PROFILE_SECTION = re.compile(r"^Profile\d+$", re.IGNORECASE)


class ProfileLocator:
    """Reads a profile registry and picks the default profile directory.

    The section marked ``Default=1`` wins; without one, the first
    ``[ProfileN]`` section in file order is used.
    """

    def __init__(self, registry: Path = DEFAULT_REGISTRY) -> None:
        self._registry = registry.expanduser()

    @property
    def registry(self) -> Path:
        return self._registry

    def locate_default(self) -> Path:
        parser = self._read_registry()

        sections = [name for name in parser.sections() if PROFILE_SECTION.match(name)]
        if not sections:
            raise ProfileNotFound(f"No profile sections in {self._registry}")

        chosen = next(
            (name for name in sections if parser[name].get("Default", "0").strip() == "1"),
            sections[0],
        )
        section = parser[chosen]
        raw_path = section.get("Path", "").strip()
        if not raw_path:
            raise ProfileNotFound(f"Profile section [{chosen}] in {self._registry} has no Path")

        if section.get("IsRelative", "1").strip() == "1":
            profile_dir = self._registry.parent / raw_path
        else:
            profile_dir = Path(raw_path).expanduser()

        logger.debug("profile_located", section=chosen, profile=str(profile_dir))
        return profile_dir

    def _read_registry(self) -> configparser.ConfigParser:
        parser = configparser.ConfigParser(interpolation=None, strict=False)
        # keep key case as written
        parser.optionxform = str  # type: ignore[assignment,method-assign]
        try:
            with self._registry.open(encoding="utf-8") as handle:
                parser.read_file(handle)
        except (OSError, UnicodeDecodeError, configparser.Error) as exc:
            raise ProfileNotFound(f"Cannot read profile registry {self._registry}: {exc}") from exc
        return parser
