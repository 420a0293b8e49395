"""Command-line entry point.

Usage::

    python -m mork_unread [FILES ...] [-p DIR] [-l] ...
    mork-unread "Mail/pop3.live.com" "ImapMail/imap.googlemail.com/INBOX.msf"
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import structlog

from .aggregator import Aggregator
from .config import DEFAULT_CONFIG_FILE, load_settings
from .errors import MorkUnreadError, ProfileNotFound
from .logging import setup_logging
from .output import render_report, render_settings
from .profile import ProfileLocator
from .resolver import MailboxResolver
from .summary import SummaryExtractor

logger = structlog.get_logger()

PROG = "mork-unread"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Print the number of unread messages in Thunderbird mailbox .msf files.",
    )
    parser.add_argument(
        "files",
        nargs="*",
        help=(
            "Path to one or more mailbox .msf files, absolute or relative to the "
            "profile directory. Folders are searched for INBOX.msf / Inbox.msf. "
            'Examples: "Mail/pop3.live.com", '
            '"~/.thunderbird/abcd.default/ImapMail/imap.googlemail.com/INBOX.msf"'
        ),
    )
    parser.add_argument("-p", "--profile", type=Path, metavar="DIR",
                        help="Path to Thunderbird user profile folder")
    parser.add_argument("-c", "--config", type=Path, metavar="FILE",
                        help=f"Options file in TOML format (default: {DEFAULT_CONFIG_FILE})")
    parser.add_argument("-d", "--dump-config", action="store_true",
                        help="Print current active settings and exit")
    parser.add_argument("-C", "--no-config", action="store_true",
                        help="Ignore user options file")
    parser.add_argument("-z", "--no-zero", action="store_true",
                        help="Suppress output of number if mail count is 0")
    parser.add_argument("-n", "--no-newline", action="store_true",
                        help="Do not output final newline character")
    parser.add_argument("-t", "--trim", action="store_true",
                        help="Strip leading and trailing whitespace from output text")
    parser.add_argument("-b", "--before", metavar="TEXT",
                        help="Prepend text to the beginning of total count")
    parser.add_argument("-a", "--after", metavar="TEXT",
                        help="Append text to end of total count")
    parser.add_argument("-l", "--location", action="store_true",
                        help="Display file path for each input mailbox")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Log debug details to stderr")
    return parser.parse_args(argv)


def _flag(value: bool) -> bool | None:
    # unset flags must not override the options file
    return True if value else None


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    try:
        settings = load_settings(
            args.config,
            no_config=args.no_config,
            files=args.files or None,
            profile=args.profile,
            no_zero=_flag(args.no_zero),
            no_newline=_flag(args.no_newline),
            trim=_flag(args.trim),
            before=args.before,
            after=args.after,
            location=_flag(args.location),
        )
    except MorkUnreadError as exc:
        print(f"{PROG}: {exc}", file=sys.stderr)
        return 1

    setup_logging(json=settings.log_json, level="DEBUG" if args.verbose else settings.log_level)

    resolver = MailboxResolver(settings.profile, locator=ProfileLocator(settings.registry))

    if args.dump_config:
        try:
            profile = resolver.profile_dir()
        except ProfileNotFound:
            profile = None
        print(render_settings(settings, profile))
        return 0

    aggregator = Aggregator(
        resolver,
        extractor=SummaryExtractor(settings.total_columns, settings.unread_columns),
    )
    try:
        result = aggregator.aggregate(settings.files)
    except MorkUnreadError as exc:
        logger.error("run_failed", error=str(exc), kind=type(exc).__name__)
        print(f"{PROG}: {exc}", file=sys.stderr)
        return 1

    sys.stdout.write(render_report(result, settings))
    return 0


if __name__ == "__main__":
    sys.exit(main())
