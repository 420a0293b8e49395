"""Turn mailbox specs into concrete summary-file paths."""

from __future__ import annotations

from pathlib import Path

import structlog

from .errors import MailboxNotFound, ProfileNotFound
from .profile import ProfileLocator

logger = structlog.get_logger()

INBOX_FILENAMES: tuple[str, ...] = ("INBOX.msf", "Inbox.msf")


class MailboxResolver:
    """Resolves specs against one profile directory.

    The profile is looked up lazily, only when a relative spec needs it,
    and the outcome is cached on this instance for the rest of the run.
    Without an explicit ``profile_dir`` or a ``locator`` relative specs
    cannot be resolved.
    """

    def __init__(
        self,
        profile_dir: Path | None = None,
        locator: ProfileLocator | None = None,
    ) -> None:
        self._explicit_profile = profile_dir.expanduser() if profile_dir is not None else None
        self._locator = locator
        self._profile: Path | None = None
        self._profile_error: ProfileNotFound | None = None
        self._profile_checked = False

    # ------------------------------------------------------------------
    # Profile
    # ------------------------------------------------------------------

    def profile_dir(self) -> Path | None:
        """The profile directory, or ``None`` if there is no way to find one.

        Raises ProfileNotFound when a profile was configured (explicitly or
        through the registry) but cannot be used.
        """
        if not self._profile_checked:
            self._profile_checked = True
            try:
                self._profile = self._find_profile()
            except ProfileNotFound as exc:
                self._profile_error = exc
        if self._profile_error is not None:
            raise self._profile_error
        return self._profile

    def _find_profile(self) -> Path | None:
        if self._explicit_profile is not None:
            if not self._explicit_profile.is_dir():
                raise ProfileNotFound(
                    f"Specified profile directory could not be found: {self._explicit_profile}"
                )
            return self._explicit_profile.absolute()
        if self._locator is None:
            return None
        profile = self._locator.locate_default()
        if not profile.is_dir():
            raise ProfileNotFound(f"Default profile directory does not exist: {profile}")
        return profile.absolute()

    # ------------------------------------------------------------------
    # Mailboxes
    # ------------------------------------------------------------------

    def resolve(self, spec: str) -> Path:
        path = Path(spec).expanduser()
        if path.is_absolute():
            if path.is_file():
                return path
            candidate = path
        else:
            profile = self.profile_dir()
            if profile is None:
                raise MailboxNotFound(spec, [path])
            candidate = profile / path

        if candidate.is_file():
            return candidate.absolute()

        attempted = [candidate]
        if candidate.is_dir():
            try:
                present = {entry.name for entry in candidate.iterdir()}
            except OSError:
                present = set()
            for name in INBOX_FILENAMES:
                inbox = candidate / name
                attempted.append(inbox)
                if name in present and inbox.is_file():
                    logger.debug("mailbox_directory_expanded", spec=spec, path=str(inbox))
                    return inbox.absolute()

        raise MailboxNotFound(spec, attempted)
