"""Tests for mork_unread.models."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from mork_unread.models import AggregateResult, FolderSummary, MailboxResult


class TestFolderSummary:
    def test_unavailable(self):
        summary = FolderSummary.unavailable()
        assert summary.available is False
        assert (summary.total_messages, summary.unread_messages) == (0, 0)

    def test_rejects_negative_counts(self):
        with pytest.raises(ValidationError):
            FolderSummary(total_messages=-1, unread_messages=0, available=True)


class TestAggregateResult:
    def test_total_counts_available_only(self):
        result = AggregateResult(
            entries=[
                MailboxResult(
                    spec="a",
                    path=Path("/a"),
                    summary=FolderSummary(total_messages=9, unread_messages=3, available=True),
                ),
                MailboxResult(
                    spec="b",
                    summary=FolderSummary(total_messages=0, unread_messages=7, available=False),
                    error="boom",
                    error_kind="FormatError",
                ),
            ]
        )
        assert result.total_unread == 3
        assert [e.spec for e in result.errors] == ["b"]

    def test_empty(self):
        assert AggregateResult().total_unread == 0

    def test_total_in_dump(self):
        result = AggregateResult(
            entries=[MailboxResult(spec="a", summary=FolderSummary(unread_messages=2, available=True))]
        )
        assert result.model_dump()["total_unread"] == 2
