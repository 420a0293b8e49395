"""Shared test fixtures for the mork_unread test suite."""

from __future__ import annotations

from pathlib import Path

import pytest

from mork_unread.parser import MorkParser
from mork_unread.summary import SummaryExtractor

# ------------------------------------------------------------------
# Sample .msf builders
# ------------------------------------------------------------------

MSF_HEADER = '// <!-- <mdb:mork:z v="1.4"/> -->\n'


def _build_msf(
    *,
    unread: int = 3,
    total: int = 10,
    folder: str = "INBOX",
    update_unread: int | None = None,
) -> bytes:
    """Build a Thunderbird-style folder summary with a dbfolderinfo row.

    Counts are written as hex, the way Thunderbird stores them.
    ``update_unread`` appends a committed group that rewrites the unread
    count.
    """
    text = (
        MSF_HEADER
        + "< <(a=c)> // (f=iso-8859-1)\n"
        "  (B8=ns:msg:db:row:scope:dbfolderinfo:all)"
        "(B9=ns:msg:db:table:kind:dbfolderinfo)\n"
        "  (BA=numMsgs)(BB=numNewMsgs)(BC=folderName)(BD=flags)>\n"
        "\n"
        f"<(80=0)(81={folder})(82={total:X})(83={unread:X})>\n"
        "{1:^B8 {(k^B9:c)(s=9)}\n"
        "  [1:^B8(^BA^82)(^BB^83)(^BC^81)(^BD=1000)]}\n"
    )
    if update_unread is not None:
        text += f"@$${{2{{@\n[1:^B8(^BB={update_unread:X})]\n@$$}}2}}@\n"
    return text.encode("latin-1")


def _build_truncated_msf() -> bytes:
    """A summary file cut off in the middle of the dbfolderinfo row."""
    full = _build_msf(unread=7)
    return full[: full.index(b"(^BB^83)") + 4]


def _write(path: Path, content: bytes) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return path


def _write_registry(base: Path, sections: list[dict[str, str]]) -> Path:
    """Write a profiles.ini with one [ProfileN] section per dict."""
    lines = ["[General]", "StartWithLastProfile=1", ""]
    for index, section in enumerate(sections):
        lines.append(f"[Profile{index}]")
        lines.extend(f"{key}={value}" for key, value in section.items())
        lines.append("")
    registry = base / "profiles.ini"
    registry.parent.mkdir(parents=True, exist_ok=True)
    registry.write_text("\n".join(lines), encoding="utf-8")
    return registry


# ------------------------------------------------------------------
# Fixtures
# ------------------------------------------------------------------


@pytest.fixture
def parser() -> MorkParser:
    return MorkParser()


@pytest.fixture
def extractor() -> SummaryExtractor:
    return SummaryExtractor()


@pytest.fixture
def profile_dir(tmp_path: Path) -> Path:
    """A profile with one POP and one IMAP account."""
    profile = tmp_path / "abcd.default"
    _write(profile / "Mail" / "pop3.example.com" / "Inbox.msf", _build_msf(unread=3))
    _write(profile / "ImapMail" / "imap.example.com" / "INBOX.msf", _build_msf(unread=1))
    return profile


@pytest.fixture
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point ``~`` at an empty directory and clear MORK_UNREAD_* env vars."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for name in [
        "FILES", "PROFILE", "REGISTRY", "NO_ZERO", "NO_NEWLINE", "TRIM",
        "BEFORE", "AFTER", "LOCATION", "LOG_LEVEL", "LOG_JSON",
    ]:
        monkeypatch.delenv(f"MORK_UNREAD_{name}", raising=False)
    return home
