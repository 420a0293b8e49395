"""Result models returned by the aggregator."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, computed_field


class FolderSummary(BaseModel):
    """Message counts read from one mailbox summary file.

    ``available=False`` means the count columns were not found, which is
    different from a genuine zero.
    """

    total_messages: int = Field(default=0, ge=0, description="Total messages in the folder")
    unread_messages: int = Field(default=0, ge=0, description="Unread messages in the folder")
    available: bool = Field(default=False, description="Whether the counts were found")

    @classmethod
    def unavailable(cls) -> FolderSummary:
        return cls(total_messages=0, unread_messages=0, available=False)


class MailboxResult(BaseModel):
    """Outcome for one mailbox spec, in input order."""

    spec: str = Field(description="Mailbox spec exactly as supplied")
    path: Path | None = Field(default=None, description="Resolved summary file, if any")
    summary: FolderSummary = Field(default_factory=FolderSummary.unavailable)
    error: str | None = Field(default=None, description="Per-file error message")
    error_kind: str | None = Field(
        default=None,
        description="Exception class name of the per-file error (e.g. MailboxNotFound)",
    )


class AggregateResult(BaseModel):
    """Per-mailbox results plus the sum of available unread counts."""

    entries: list[MailboxResult] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_unread(self) -> int:
        return sum(e.summary.unread_messages for e in self.entries if e.summary.available)

    @property
    def errors(self) -> list[MailboxResult]:
        return [e for e in self.entries if e.error is not None]
