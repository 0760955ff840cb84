from __future__ import annotations

from typing import Any


class RecordSqlError(Exception):
    """Base exception for recordsql errors."""


class MappingError(RecordSqlError):
    """A record value could not be reflected into a table descriptor."""

    def __init__(self, record_type: Any, reason: str) -> None:
        self.record_type = record_type
        self.reason = reason
        type_name = getattr(record_type, "__name__", repr(record_type))
        super().__init__(f"Cannot map {type_name}: {reason}")


class SchemaError(RecordSqlError):
    """The table is unusable for the requested statement (e.g. no primary key)."""

    def __init__(self, table_name: str, table_sql_name: str, reason: str) -> None:
        self.table_name = table_name
        self.table_sql_name = table_sql_name
        self.reason = reason
        super().__init__(f"Table '{table_name}' ({table_sql_name}) {reason}")


class ExecutionError(RecordSqlError):
    """The database failed to execute a statement or report its row count."""

    def __init__(self, message: str, statement: str | None = None) -> None:
        self.statement = statement
        super().__init__(message)


class NoMatchError(RecordSqlError):
    """A strict update executed but matched zero rows."""

    def __init__(self, table_sql_name: str, pk_column: str, pk_value: Any) -> None:
        self.table_sql_name = table_sql_name
        self.pk_column = pk_column
        self.pk_value = pk_value
        super().__init__(
            f"No rows matching {table_sql_name}.{pk_column} = {pk_value!r}"
        )
