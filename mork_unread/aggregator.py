"""Drive resolution, parsing and extraction over all requested mailboxes."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import structlog

from .errors import FormatError, MailboxNotFound, MailboxUnreadable, NoInputFiles
from .models import AggregateResult, FolderSummary, MailboxResult
from .parser import MorkParser
from .profile import ProfileLocator
from .resolver import MailboxResolver
from .summary import SummaryExtractor

logger = structlog.get_logger()


class Aggregator:
    """Counts unread messages across mailboxes, one file at a time.

    Per-file problems (missing file, unreadable file, malformed content)
    are recorded on that file's entry and never stop the run.  Only an
    empty spec list and an unusable required profile are fatal.
    """

    def __init__(
        self,
        resolver: MailboxResolver,
        *,
        parser: MorkParser | None = None,
        extractor: SummaryExtractor | None = None,
    ) -> None:
        self._resolver = resolver
        self._parser = parser or MorkParser()
        self._extractor = extractor or SummaryExtractor()

    def aggregate(self, specs: Sequence[str]) -> AggregateResult:
        if not specs:
            raise NoInputFiles("No input files for mailboxes specified.")

        result = AggregateResult()
        for spec in specs:
            result.entries.append(self._process(spec))

        logger.info(
            "mailboxes_counted",
            mailboxes=len(result.entries),
            errors=len(result.errors),
            total_unread=result.total_unread,
        )
        return result

    def _process(self, spec: str) -> MailboxResult:
        try:
            path = self._resolver.resolve(spec)
        except MailboxNotFound as exc:
            logger.warning("mailbox_not_found", spec=spec, attempted=[str(p) for p in exc.attempted])
            return MailboxResult(spec=spec, error=str(exc), error_kind=type(exc).__name__)

        try:
            raw_bytes = read_mailbox(path)
        except MailboxUnreadable as exc:
            logger.warning("mailbox_unreadable", spec=spec, path=str(path), error=str(exc))
            return MailboxResult(spec=spec, path=path, error=str(exc), error_kind=type(exc).__name__)

        try:
            document = self._parser.parse(raw_bytes)
        except FormatError as exc:
            # a partial document may still hold the summary row
            summary = self._extractor.extract(exc.document)
            logger.warning(
                "mailbox_format_error",
                spec=spec,
                path=str(path),
                offset=exc.offset,
                error=str(exc),
                summary_available=summary.available,
            )
            return MailboxResult(
                spec=spec,
                path=path,
                summary=summary,
                error=str(exc),
                error_kind=type(exc).__name__,
            )

        summary = self._extractor.extract(document)
        if not summary.available:
            logger.info("summary_unavailable", spec=spec, path=str(path))
        else:
            logger.debug(
                "mailbox_counted",
                spec=spec,
                path=str(path),
                unread=summary.unread_messages,
                total=summary.total_messages,
            )
        return MailboxResult(spec=spec, path=path, summary=summary)


def read_mailbox(path: Path) -> bytes:
    """Read one summary file; the handle is closed on every path."""
    try:
        with path.open("rb") as handle:
            return handle.read()
    except OSError as exc:
        raise MailboxUnreadable(f"Failed to read mailbox: {path}: {exc}") from exc


def aggregate(
    specs: Sequence[str],
    profile_dir: Path | None = None,
    *,
    registry: Path | None = None,
) -> AggregateResult:
    """Convenience wrapper building a fresh resolver for one run.

    With no ``profile_dir`` the default profile is looked up in
    ``registry`` (or the standard location) when a relative spec needs it.
    """
    if not specs:
        raise NoInputFiles("No input files for mailboxes specified.")
    locator = ProfileLocator(registry) if registry is not None else ProfileLocator()
    resolver = MailboxResolver(profile_dir, locator=locator)
    return Aggregator(resolver).aggregate(specs)
