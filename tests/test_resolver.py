"""Tests for mork_unread.resolver."""

from __future__ import annotations

from pathlib import Path

import pytest

from tests.conftest import _build_msf, _write, _write_registry

from mork_unread.errors import MailboxNotFound, ProfileNotFound
from mork_unread.profile import ProfileLocator
from mork_unread.resolver import MailboxResolver


class CountingLocator(ProfileLocator):
    """Locator that records how often the registry is consulted."""

    def __init__(self, registry: Path) -> None:
        super().__init__(registry)
        self.calls = 0

    def locate_default(self) -> Path:
        self.calls += 1
        return super().locate_default()


class TestResolve:
    def test_absolute_file(self, tmp_path: Path):
        mailbox = _write(tmp_path / "Trash.msf", _build_msf())
        assert MailboxResolver().resolve(str(mailbox)) == mailbox

    def test_profile_relative_file(self, profile_dir: Path):
        resolver = MailboxResolver(profile_dir)
        expected = profile_dir / "Mail" / "pop3.example.com" / "Inbox.msf"
        assert resolver.resolve("Mail/pop3.example.com/Inbox.msf") == expected

    def test_directory_with_upper_inbox(self, tmp_path: Path):
        account = tmp_path / "ImapMail" / "acct"
        inbox = _write(account / "INBOX.msf", _build_msf())
        assert MailboxResolver(tmp_path).resolve("ImapMail/acct") == inbox

    def test_directory_with_mixed_case_inbox(self, tmp_path: Path):
        account = tmp_path / "ImapMail" / "acct"
        inbox = _write(account / "Inbox.msf", _build_msf())
        assert MailboxResolver(tmp_path).resolve("ImapMail/acct") == inbox

    def test_upper_inbox_has_priority(self, tmp_path: Path):
        account = tmp_path / "ImapMail" / "acct"
        _write(account / "Inbox.msf", _build_msf())
        upper = _write(account / "INBOX.msf", _build_msf())
        assert MailboxResolver(tmp_path).resolve("ImapMail/acct") == upper

    def test_directory_without_inbox(self, tmp_path: Path):
        account = tmp_path / "ImapMail" / "acct"
        _write(account / "Sent.msf", _build_msf())
        with pytest.raises(MailboxNotFound) as excinfo:
            MailboxResolver(tmp_path).resolve("ImapMail/acct")
        assert excinfo.value.attempted == [
            account,
            account / "INBOX.msf",
            account / "Inbox.msf",
        ]

    def test_absolute_directory(self, tmp_path: Path):
        inbox = _write(tmp_path / "acct" / "INBOX.msf", _build_msf())
        assert MailboxResolver().resolve(str(tmp_path / "acct")) == inbox

    def test_missing_file(self, profile_dir: Path):
        with pytest.raises(MailboxNotFound, match="Mail/nowhere"):
            MailboxResolver(profile_dir).resolve("Mail/nowhere")

    def test_relative_without_profile(self):
        with pytest.raises(MailboxNotFound):
            MailboxResolver().resolve("Mail/pop3.example.com")

    def test_tilde_expansion(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        inbox = _write(tmp_path / "tb" / "INBOX.msf", _build_msf())
        assert MailboxResolver().resolve("~/tb/INBOX.msf") == inbox


class TestProfile:
    def test_explicit_profile_missing(self, tmp_path: Path):
        resolver = MailboxResolver(tmp_path / "absent")
        with pytest.raises(ProfileNotFound, match="could not be found"):
            resolver.resolve("Mail/x")

    def test_absolute_spec_does_not_need_profile(self, tmp_path: Path):
        mailbox = _write(tmp_path / "INBOX.msf", _build_msf())
        resolver = MailboxResolver(tmp_path / "absent")
        assert resolver.resolve(str(mailbox)) == mailbox

    def test_default_profile_from_registry(self, tmp_path: Path):
        profile = tmp_path / "tb" / "abcd.default"
        inbox = _write(profile / "Mail" / "local" / "Inbox.msf", _build_msf())
        registry = _write_registry(tmp_path / "tb", [{"IsRelative": "1", "Path": "abcd.default"}])
        resolver = MailboxResolver(locator=ProfileLocator(registry))
        assert resolver.resolve("Mail/local") == inbox

    def test_registry_read_once(self, tmp_path: Path):
        profile = tmp_path / "tb" / "abcd.default"
        _write(profile / "a" / "INBOX.msf", _build_msf())
        _write(profile / "b" / "INBOX.msf", _build_msf())
        registry = _write_registry(tmp_path / "tb", [{"IsRelative": "1", "Path": "abcd.default"}])
        locator = CountingLocator(registry)
        resolver = MailboxResolver(locator=locator)
        resolver.resolve("a")
        resolver.resolve("b")
        assert locator.calls == 1

    def test_registry_failure_cached(self, tmp_path: Path):
        locator = CountingLocator(tmp_path / "missing.ini")
        resolver = MailboxResolver(locator=locator)
        for spec in ("a", "b"):
            with pytest.raises(ProfileNotFound):
                resolver.resolve(spec)
        assert locator.calls == 1

    def test_independent_resolvers(self, tmp_path: Path):
        one = tmp_path / "one"
        two = tmp_path / "two"
        _write(one / "INBOX.msf", _build_msf())
        _write(two / "INBOX.msf", _build_msf())
        assert MailboxResolver(one).resolve(".") == one / "INBOX.msf"
        assert MailboxResolver(two).resolve(".") == two / "INBOX.msf"

    def test_located_profile_must_exist(self, tmp_path: Path):
        registry = _write_registry(tmp_path, [{"IsRelative": "1", "Path": "ghost.default"}])
        resolver = MailboxResolver(locator=ProfileLocator(registry))
        with pytest.raises(ProfileNotFound, match="does not exist"):
            resolver.profile_dir()
