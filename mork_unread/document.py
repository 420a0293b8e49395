"""In-memory model of a parsed Mork file.

Values keep their two shapes apart: an inline :class:`Literal` or an
:class:`AtomRef` pointing into one of the two atom namespaces.  References
are resolved at read time, so a later dictionary entry changes what an
earlier cell reads as.
"""

from __future__ import annotations

from dataclasses import dataclass, field

COLUMN_SCOPE = "c"
VALUE_SCOPE = "v"


@dataclass(frozen=True)
class Literal:
    """A value written inline in the file."""

    text: str


@dataclass(frozen=True)
class AtomRef:
    """A ``^HEX`` back-reference into a dictionary."""

    atom_id: int
    scope: str | None = None


Value = Literal | AtomRef


@dataclass(frozen=True)
class Oid:
    """Identifier of a table or row: a hex id plus an optional scope token."""

    id: int
    scope: str | None = None


@dataclass
class Row:
    oid: Oid
    cells: dict[str, Value] = field(default_factory=dict)


@dataclass
class Table:
    oid: Oid
    meta: dict[str, Value] = field(default_factory=dict)
    row_ids: dict[Oid, None] = field(default_factory=dict)


@dataclass
class MorkDocument:
    """Dictionaries plus the table/row/cell structure left after all directives.

    Cell keys are column tokens exactly as written (``^80`` or a bare
    name); use :meth:`column_name` to turn one into its decoded name.
    """

    values: dict[int, str] = field(default_factory=dict)
    columns: dict[int, str] = field(default_factory=dict)
    rows: dict[Oid, Row] = field(default_factory=dict)
    tables: dict[Oid, Table] = field(default_factory=dict)

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def column_name(self, token: str) -> str | None:
        """Decode a column token; ``None`` if it references an unknown atom."""
        if not token.startswith("^"):
            return token
        atom_id = int(token[1:], 16)
        if atom_id in self.columns:
            return self.columns[atom_id]
        return self.values.get(atom_id)

    def resolve(self, value: Value) -> str | None:
        """Return the text a value stands for, or ``None`` for a dangling ref."""
        if isinstance(value, Literal):
            return value.text
        if value.scope == COLUMN_SCOPE:
            return self.columns.get(value.atom_id, self.values.get(value.atom_id))
        return self.values.get(value.atom_id, self.columns.get(value.atom_id))

    def scope_name(self, scope: str | None) -> str | None:
        if scope is None:
            return None
        return self.column_name(scope)

    def table_rows(self, table_oid: Oid) -> list[Row]:
        """Rows currently in a table, in insertion order."""
        table = self.tables.get(table_oid)
        if table is None:
            return []
        return [self.rows[oid] for oid in table.row_ids if oid in self.rows]

    def cell(self, table_oid: Oid, row_oid: Oid, column: str) -> str | None:
        """Resolved value at ``(table, row, column)``, ``None`` if absent."""
        table = self.tables.get(table_oid)
        if table is None or row_oid not in table.row_ids:
            return None
        row = self.rows.get(row_oid)
        if row is None or column not in row.cells:
            return None
        return self.resolve(row.cells[column])

    # ------------------------------------------------------------------
    # Mutation, applied in file order by the parser
    # ------------------------------------------------------------------

    def define_atom(self, scope: str, atom_id: int, text: str | None) -> None:
        """Set an atom; ``text=None`` removes it."""
        namespace = self.columns if scope == COLUMN_SCOPE else self.values
        if text is None:
            namespace.pop(atom_id, None)
        else:
            namespace[atom_id] = text

    def open_table(self, oid: Oid, *, cut: bool = False) -> Table:
        table = self.tables.get(oid)
        if table is None:
            table = self.tables[oid] = Table(oid=oid)
        elif cut:
            table.row_ids.clear()
        return table

    def delete_row(self, oid: Oid) -> None:
        """Remove a row everywhere; a no-op if it is already gone."""
        self.rows.pop(oid, None)
        for table in self.tables.values():
            table.row_ids.pop(oid, None)

    def upsert_row(self, oid: Oid, table: Table | None = None) -> Row:
        row = self.rows.get(oid)
        if row is None:
            row = self.rows[oid] = Row(oid=oid)
        if table is not None:
            table.row_ids[oid] = None
        return row

    def remove_from_table(self, table: Table, oid: Oid) -> None:
        table.row_ids.pop(oid, None)
