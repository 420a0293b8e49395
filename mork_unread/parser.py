"""Mork parser: raw ``.msf`` bytes → :class:`MorkDocument`.

A single forward pass reads directives (dictionaries, tables, rows,
transaction groups) and applies each one to the document as soon as it
is complete.  Directives inside a ``@$${..{@`` group are held back and
applied only when the group commits.
"""

from __future__ import annotations

import string
from dataclasses import dataclass, field
from typing import NoReturn

import structlog

from .document import (
    COLUMN_SCOPE,
    VALUE_SCOPE,
    AtomRef,
    Literal,
    MorkDocument,
    Oid,
    Value,
)
from .errors import FormatError

logger = structlog.get_logger()

HEX_DIGITS = frozenset(string.hexdigits)
NAME_STOP = frozenset("=^:()[]{}<>\\") | frozenset(string.whitespace)

GROUP_OPEN = "@$${"
GROUP_CLOSE = "@$$}"
GROUP_ABORT = "~"


# ----------------------------------------------------------------------
# Directives
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class DefineAtom:
    scope: str
    atom_id: int
    text: str | None

    def apply(self, doc: MorkDocument) -> None:
        doc.define_atom(self.scope, self.atom_id, self.text)


@dataclass(frozen=True)
class OpenTable:
    oid: Oid
    cut: bool = False
    meta: tuple[tuple[str, Value | None], ...] = ()

    def apply(self, doc: MorkDocument) -> None:
        table = doc.open_table(self.oid, cut=self.cut)
        for column, value in self.meta:
            if value is None:
                table.meta.pop(column, None)
            else:
                table.meta[column] = value


@dataclass(frozen=True)
class PutRow:
    """Add or update a row; ``cut`` deletes it first."""

    oid: Oid
    table: Oid | None = None
    cut: bool = False
    cells: tuple[tuple[str, Value | None], ...] = ()

    def apply(self, doc: MorkDocument) -> None:
        if self.cut:
            doc.delete_row(self.oid)
            if not self.cells:
                return
        table = doc.open_table(self.table) if self.table is not None else None
        row = doc.upsert_row(self.oid, table)
        for column, value in self.cells:
            if value is None:
                row.cells.pop(column, None)
            else:
                row.cells[column] = value


@dataclass(frozen=True)
class CutRowRef:
    """``-oid`` inside a table: drop the row from that table only."""

    table: Oid
    oid: Oid

    def apply(self, doc: MorkDocument) -> None:
        table = doc.tables.get(self.table)
        if table is not None:
            doc.remove_from_table(table, self.oid)


Directive = DefineAtom | OpenTable | PutRow | CutRowRef


@dataclass
class _Group:
    group_id: str
    offset: int
    directives: list[Directive] = field(default_factory=list)


# ----------------------------------------------------------------------
# Parser
# ----------------------------------------------------------------------


class MorkParser:
    """Stateless parser: raw Mork bytes → MorkDocument.

    Raises :class:`FormatError` on the first structural problem; the
    exception carries the partially materialized document.
    """

    def parse(self, raw_bytes: bytes) -> MorkDocument:
        return _Reader(raw_bytes).run()


class _Reader:
    """Cursor over one file's content; owned by a single parse call."""

    def __init__(self, raw_bytes: bytes) -> None:
        # latin-1 keeps offsets equal to byte positions
        self._text = raw_bytes.decode("latin-1")
        self._pos = 0
        self._doc = MorkDocument()
        self._group: _Group | None = None

    def run(self) -> MorkDocument:
        while True:
            self._skip_space()
            if self._eof():
                break
            ch = self._peek()
            if ch == "<":
                self._read_dict()
            elif ch == "{":
                self._read_table()
            elif ch == "[":
                self._read_row(table=None)
            elif ch == "@":
                self._read_group_marker()
            else:
                self._fail(f"Unexpected character {ch!r}")

        if self._group is not None:
            self._pos = self._group.offset
            self._fail(f"Unterminated group {self._group.group_id}")
        return self._doc

    # ------------------------------------------------------------------
    # Cursor helpers
    # ------------------------------------------------------------------

    def _eof(self) -> bool:
        return self._pos >= len(self._text)

    def _peek(self) -> str:
        return self._text[self._pos] if self._pos < len(self._text) else ""

    def _fail(self, message: str) -> NoReturn:
        raise FormatError(message, offset=self._pos, document=self._doc)

    def _expect(self, token: str, what: str) -> None:
        if self._eof():
            self._fail(f"Unterminated {what}")
        if not self._text.startswith(token, self._pos):
            self._fail(f"Expected {token!r} in {what}, found {self._peek()!r}")
        self._pos += len(token)

    def _skip_space(self) -> None:
        text = self._text
        while self._pos < len(text):
            ch = text[self._pos]
            if ch in string.whitespace:
                self._pos += 1
            elif text.startswith("//", self._pos):
                end = text.find("\n", self._pos)
                self._pos = len(text) if end < 0 else end + 1
            else:
                break

    def _read_hex(self, what: str) -> int:
        start = self._pos
        while self._peek() in HEX_DIGITS:
            self._pos += 1
        if start == self._pos:
            if self._eof():
                self._fail(f"Unterminated {what}")
            self._fail(f"Expected hex id in {what}, found {self._peek()!r}")
        return int(self._text[start : self._pos], 16)

    def _read_name(self) -> str:
        start = self._pos
        while not self._eof() and self._peek() not in NAME_STOP:
            self._pos += 1
        return self._text[start : self._pos]

    def _read_token(self, what: str) -> str:
        """Column or scope token: ``^HEX`` normalized, or a bare name."""
        if self._peek() == "^":
            self._pos += 1
            return f"^{self._read_hex(what):X}"
        name = self._read_name()
        if not name:
            if self._eof():
                self._fail(f"Unterminated {what}")
            self._fail(f"Expected name in {what}, found {self._peek()!r}")
        return name

    def _read_oid(self, what: str, default_scope: str | None = None) -> Oid:
        oid_id = self._read_hex(what)
        if self._peek() == ":":
            self._pos += 1
            return Oid(oid_id, self._read_token(what))
        return Oid(oid_id, default_scope)

    def _read_literal(self, what: str) -> str:
        """Read up to the closing ``)``, decoding ``\\`` and ``$HH`` escapes."""
        text = self._text
        out = bytearray()
        while True:
            if self._pos >= len(text):
                self._fail(f"Unterminated {what}")
            ch = text[self._pos]
            if ch == ")":
                self._pos += 1
                return out.decode("utf-8", errors="replace")
            if ch == "\\":
                nxt = text[self._pos + 1 : self._pos + 2]
                if not nxt:
                    self._pos += 1
                    self._fail(f"Unterminated {what}")
                if nxt == "\r":
                    self._pos += 3 if text.startswith("\r\n", self._pos + 1) else 2
                elif nxt == "\n":
                    self._pos += 2
                else:
                    out += nxt.encode("latin-1")
                    self._pos += 2
            elif ch == "$":
                digits = text[self._pos + 1 : self._pos + 3]
                if len(digits) != 2 or not all(d in HEX_DIGITS for d in digits):
                    self._fail(f"Invalid escape in {what}")
                out.append(int(digits, 16))
                self._pos += 3
            else:
                out += ch.encode("latin-1")
                self._pos += 1

    def _read_cell(self, what: str) -> tuple[str, Value | None]:
        """Read ``(column=literal)``, ``(column^ref)`` or ``(column)``.

        The opening ``(`` is already consumed.  ``None`` means delete.
        """
        column = self._read_token(what)
        ch = self._peek()
        if ch == "=":
            self._pos += 1
            return column, Literal(self._read_literal(what))
        if ch == "^":
            self._pos += 1
            atom_id = self._read_hex(what)
            scope = None
            if self._peek() == ":":
                self._pos += 1
                scope = self._read_token(what)
            self._expect(")", what)
            return column, AtomRef(atom_id, scope)
        self._expect(")", what)
        return column, None

    def _read_cells(self, closer: str, what: str) -> list[tuple[str, Value | None]]:
        """Cells up to and including ``closer``; ``-`` marks a deleted cell."""
        cells: list[tuple[str, Value | None]] = []
        while True:
            self._skip_space()
            ch = self._peek()
            if ch == closer:
                self._pos += 1
                return cells
            deleted = False
            if ch == "-":
                deleted = True
                self._pos += 1
                self._skip_space()
            self._expect("(", what)
            if self._peek() == "-":
                deleted = True
                self._pos += 1
            column, value = self._read_cell(what)
            cells.append((column, None if deleted else value))

    def _emit(self, directive: Directive) -> None:
        if self._group is not None:
            self._group.directives.append(directive)
        else:
            directive.apply(self._doc)

    # ------------------------------------------------------------------
    # Directive readers
    # ------------------------------------------------------------------

    def _read_dict(self) -> None:
        self._expect("<", "dictionary")
        scope = VALUE_SCOPE
        self._skip_space()
        if self._peek() == "<":
            self._pos += 1
            for column, value in self._read_cells(">", "dictionary meta"):
                if column == "a" and isinstance(value, Literal):
                    scope = COLUMN_SCOPE if value.text == COLUMN_SCOPE else VALUE_SCOPE
        while True:
            self._skip_space()
            ch = self._peek()
            if ch == ">":
                self._pos += 1
                return
            self._expect("(", "dictionary")
            atom_id = self._read_hex("dictionary atom")
            if self._peek() == "=":
                self._pos += 1
                self._emit(DefineAtom(scope, atom_id, self._read_literal("dictionary atom")))
            else:
                self._expect(")", "dictionary atom")
                self._emit(DefineAtom(scope, atom_id, None))

    def _read_table(self) -> None:
        self._expect("{", "table")
        self._skip_space()
        cut = self._peek() == "-"
        if cut:
            self._pos += 1
        oid = self._read_oid("table")
        self._skip_space()
        meta: list[tuple[str, Value | None]] = []
        if self._peek() == "{":
            self._pos += 1
            meta = self._read_cells("}", "table meta")
        self._emit(OpenTable(oid, cut=cut, meta=tuple(meta)))

        while True:
            self._skip_space()
            ch = self._peek()
            if not ch:
                self._fail("Unterminated table")
            if ch == "}":
                self._pos += 1
                return
            if ch == "[":
                self._read_row(table=oid)
            elif ch == "-":
                self._pos += 1
                self._skip_space()
                if self._peek() == "[":
                    self._read_row(table=oid, cut=True)
                else:
                    ref = self._read_oid("table row reference", oid.scope)
                    self._emit(CutRowRef(oid, ref))
            elif ch in HEX_DIGITS:
                ref = self._read_oid("table row reference", oid.scope)
                self._emit(PutRow(ref, table=oid))
            else:
                self._fail(f"Unexpected character {ch!r} in table")

    def _read_row(self, table: Oid | None, cut: bool = False) -> None:
        self._expect("[", "row")
        self._skip_space()
        if self._peek() == "-":
            cut = True
            self._pos += 1
        oid = self._read_oid("row", table.scope if table is not None else None)
        self._skip_space()
        if self._peek() == "[":
            # row meta such as [(s=9)]; carries nothing we keep
            self._pos += 1
            self._read_cells("]", "row meta")
        cells = self._read_cells("]", "row")
        self._emit(PutRow(oid, table=table, cut=cut, cells=tuple(cells)))

    def _read_group_id(self, what: str) -> str:
        group_id = self._read_name()
        if not group_id:
            if self._eof():
                self._fail(f"Unterminated {what}")
            self._fail(f"Expected group id in {what}, found {self._peek()!r}")
        return group_id

    def _read_group_marker(self) -> None:
        text = self._text
        start = self._pos
        if text.startswith(GROUP_OPEN, self._pos):
            if self._group is not None:
                self._fail("Nested group")
            self._pos += len(GROUP_OPEN)
            group_id = self._read_group_id("group start")
            self._expect("{@", "group start")
            self._group = _Group(group_id=group_id, offset=start)
        elif text.startswith(GROUP_CLOSE, self._pos):
            if self._group is None:
                self._fail("Group end without group start")
            self._pos += len(GROUP_CLOSE)
            group = self._group
            if self._peek() == GROUP_ABORT:
                end = text.find("}@", self._pos)
                if end < 0:
                    self._fail("Unterminated group abort")
                self._pos = end + 2
                self._group = None
                logger.debug("mork_group_aborted", group=group.group_id, offset=start)
                return
            self._read_group_id("group end")
            self._expect("}@", "group end")
            self._group = None
            for directive in group.directives:
                directive.apply(self._doc)
        else:
            self._fail("Unexpected character '@'")
