"""Unread-message counts from Thunderbird Mork (.msf) summary files.

Public API re-exported here for convenience::

    from mork_unread import Aggregator, MailboxResolver, MorkParser
"""

from .aggregator import Aggregator, aggregate, read_mailbox
from .config import Settings, load_settings
from .document import AtomRef, Literal, MorkDocument, Oid, Row, Table
from .errors import (
    ConfigError,
    FormatError,
    MailboxNotFound,
    MailboxUnreadable,
    MorkUnreadError,
    NoInputFiles,
    ProfileNotFound,
)
from .logging import setup_logging
from .models import AggregateResult, FolderSummary, MailboxResult
from .parser import MorkParser
from .profile import ProfileLocator
from .resolver import MailboxResolver
from .summary import SummaryExtractor

__all__ = [
    "AggregateResult",
    "Aggregator",
    "AtomRef",
    "ConfigError",
    "FolderSummary",
    "FormatError",
    "Literal",
    "MailboxNotFound",
    "MailboxResolver",
    "MailboxResult",
    "MailboxUnreadable",
    "MorkDocument",
    "MorkParser",
    "MorkUnreadError",
    "NoInputFiles",
    "Oid",
    "ProfileLocator",
    "ProfileNotFound",
    "Row",
    "Settings",
    "SummaryExtractor",
    "Table",
    "aggregate",
    "load_settings",
    "read_mailbox",
    "setup_logging",
]
