from __future__ import annotations

from typing import Any, Protocol

from ..errors import NoMatchError, SchemaError
from ..schema import SchemaRegistry, Table, default_registry
from ..sql import UpdateStatementBuilder
from .models import StatementResult


class DbHandle(Protocol):
    """
    Protocol for anything that can execute a positional-parameter statement.

    DbSession implements it; tests use in-memory fakes.
    """

    statement_builder: UpdateStatementBuilder

    def exec(self, statement: str, *values: Any) -> StatementResult:
        """Execute ``statement`` with positional ``values``."""
        ...


def _checked_table(record: Any, registry: SchemaRegistry) -> Table:
    table = registry.derive(record)

    if table.primary_key_field() is None:
        raise SchemaError(table.name, table.sql_name, "doesn't have a primary-key field")
    if not table.update_column_names():
        raise SchemaError(
            table.name, table.sql_name, "has no columns to update besides its primary key"
        )
    return table


def execute_update(
    db: DbHandle,
    record: Any,
    registry: SchemaRegistry = default_registry,
) -> StatementResult:
    """
    Write every mapped field of ``record`` to the row matching its primary key.

    Returns:
        The StatementResult of the executed UPDATE

    Raises:
        MappingError: If the record cannot be reflected
        SchemaError: If the table has no primary key or nothing to SET;
                     no statement is executed
        ExecutionError: If the database rejects the statement
    """
    return _execute(db, _checked_table(record, registry))


def _execute(db: DbHandle, table: Table) -> StatementResult:
    pk = table.primary_key_field()
    statement = db.statement_builder.render_update(
        table.sql_name, pk.sql_name, table.update_column_names()
    )
    return db.exec(statement, *table.update_column_values())


def update(db: DbHandle, record: Any, registry: SchemaRegistry = default_registry) -> None:
    """
    Best-effort update. Matching zero rows is not an error.
    """
    execute_update(db, record, registry)


def must_update(db: DbHandle, record: Any, registry: SchemaRegistry = default_registry) -> None:
    """
    Strict update: like update(), but raises NoMatchError when no row matched
    the record's primary key.
    """
    table = _checked_table(record, registry)
    result = _execute(db, table)

    if result.affected_row_count() == 0:
        pk = table.primary_key_field()
        raise NoMatchError(table.sql_name, pk.sql_name, pk.value)
