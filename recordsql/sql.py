from __future__ import annotations

import re
from typing import Sequence

from sqlalchemy.engine import Dialect
from sqlalchemy.engine.default import DefaultDialect

_IDENTIFIER = re.compile(r"[a-zA-Z_][a-zA-Z0-9_]*")

# DB-API paramstyle -> positional placeholder template.
_PLACEHOLDERS = {
    "qmark": "?",
    "format": "%s",
    "pyformat": "%s",
    "numeric": ":{n}",
    "named": ":{n}",
    "numeric_dollar": "${n}",
}


def _validate_identifier(name: str, identifier_type: str = "identifier") -> str:
    """
    Validate that an identifier (table/column name) is safe for SQL interpolation.

    Identifiers are restricted to letters, digits and underscores and must not
    start with a digit. They are quoted by the dialect afterwards, but quoting
    is not a substitute for validation.

    ⚠️ SECURITY CONTRACT ⚠️
    Table and column names are derived from record types, not user input.
    Identifiers MUST be trusted (declared in code, not built from request data).

    Raises:
        TypeError: If identifier is not a string
        ValueError: If identifier contains unsafe characters or is empty

    Example:
        >>> _validate_identifier("users", "table")
        'users'
        >>> _validate_identifier("'; DROP TABLE--", "table")
        ValueError: Invalid table "'; DROP TABLE--": ...
    """
    if not isinstance(name, str):
        raise TypeError(f"{identifier_type} must be a string, got {type(name).__name__}")

    if not name:
        raise ValueError(f"{identifier_type} cannot be empty")

    if not _IDENTIFIER.fullmatch(name):
        raise ValueError(
            f"Invalid {identifier_type} {name!r}: "
            "must start with letter/underscore and contain only alphanumeric characters and underscores"
        )

    return name


class UpdateStatementBuilder:
    """
    Renders single-row UPDATE statements with positional placeholders.

    SET columns are bound first, in the order given, and the primary key is
    bound last:

        UPDATE users SET name = ?, active = ? WHERE id = ?

    Placeholder syntax follows the DB-API paramstyle and identifiers are
    quoted by the SQLAlchemy dialect's identifier preparer.
    """

    def __init__(self, dialect: Dialect | None = None, paramstyle: str | None = None) -> None:
        if dialect is None:
            dialect = DefaultDialect()
            paramstyle = paramstyle or "qmark"
        self.dialect = dialect
        self.paramstyle = paramstyle or dialect.paramstyle
        if self.paramstyle not in _PLACEHOLDERS:
            raise ValueError(f"Unsupported paramstyle: {self.paramstyle!r}")

    @classmethod
    def for_dialect(cls, dialect: Dialect) -> "UpdateStatementBuilder":
        return cls(dialect=dialect)

    def _quote(self, name: str) -> str:
        return self.dialect.identifier_preparer.quote(name)

    def _placeholder(self, position: int) -> str:
        return _PLACEHOLDERS[self.paramstyle].format(n=position)

    def render_update(
        self,
        table: str,
        pk_column: str,
        columns: Sequence[str],
    ) -> str:
        """
        Render ``UPDATE <table> SET <col> = ?, ... WHERE <pk_column> = ?``.

        Raises:
            ValueError: If any identifier is invalid or ``columns`` is empty
        """
        table = _validate_identifier(table, "table")
        pk_column = _validate_identifier(pk_column, "primary key column")
        if not columns:
            raise ValueError("UPDATE requires at least one column to set")

        set_clauses = []
        for position, col in enumerate(columns, start=1):
            col = _validate_identifier(col, "column name")
            set_clauses.append(f"{self._quote(col)} = {self._placeholder(position)}")

        set_sql = ", ".join(set_clauses)
        where_sql = f"{self._quote(pk_column)} = {self._placeholder(len(columns) + 1)}"
        return f"UPDATE {self._quote(table)} SET {set_sql} WHERE {where_sql}"


def render_update_statement(table: str, pk_column: str, columns: Sequence[str]) -> str:
    """Render an UPDATE with ``?`` placeholders and default-dialect quoting."""
    return UpdateStatementBuilder().render_update(table, pk_column, columns)
