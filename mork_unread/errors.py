"""Exception taxonomy for unread-count extraction."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .document import MorkDocument


class MorkUnreadError(Exception):
    """Base class for every error raised by this package."""


class ProfileNotFound(MorkUnreadError):
    """Raised when no usable mail-client profile directory can be found."""


class MailboxNotFound(MorkUnreadError):
    """Raised when a mailbox spec does not resolve to an existing file."""

    def __init__(self, spec: str, attempted: list[Path] | None = None) -> None:
        self.spec = spec
        self.attempted = list(attempted or [])
        tried = ", ".join(str(p) for p in self.attempted) or spec
        super().__init__(f"Mailbox not found: {spec} (tried {tried})")


class MailboxUnreadable(MorkUnreadError):
    """Raised when a resolved mailbox file cannot be read."""


class FormatError(MorkUnreadError):
    """Structural parse failure.

    ``document`` holds whatever was materialized before the failure so
    callers can still probe it.
    """

    def __init__(self, message: str, *, offset: int, document: MorkDocument) -> None:
        self.offset = offset
        self.document = document
        super().__init__(f"{message} at byte {offset}")


class NoInputFiles(MorkUnreadError):
    """Raised when no mailbox specs were supplied."""


class ConfigError(MorkUnreadError):
    """Raised when the options file cannot be loaded."""
