from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import pytest

from recordsql.db.models import StatementResult
from recordsql.db.update import execute_update, must_update, update
from recordsql.errors import ExecutionError, MappingError, NoMatchError, SchemaError
from recordsql.sql import UpdateStatementBuilder


@dataclass
class User:
    Id: int
    Name: str
    Active: bool


@dataclass
class UserWithoutId:
    Name: str
    Active: bool

    __tablename__ = "users"


@dataclass
class Token:
    id: int


class FakeDb:
    """Records executed statements and reports a fixed row count."""

    def __init__(self, rowcount: int | None = 1, error: Exception | None = None) -> None:
        self.statement_builder = UpdateStatementBuilder()
        self.rowcount = rowcount
        self.error = error
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    def exec(self, statement: str, *values: Any) -> StatementResult:
        self.calls.append((statement, values))
        if self.error is not None:
            raise self.error
        return StatementResult(statement=statement, values=values, rowcount=self.rowcount)


def test_update_renders_set_columns_and_binds_primary_key_last() -> None:
    db = FakeDb()

    update(db, User(Id=7, Name="a", Active=True))

    assert db.calls == [
        ("UPDATE users SET name = ?, active = ? WHERE id = ?", ("a", True, 7)),
    ]


def test_execute_update_returns_result_handle() -> None:
    db = FakeDb(rowcount=1)

    result = execute_update(db, User(Id=7, Name="a", Active=True))

    assert result.affected_row_count() == 1
    assert result.values == ("a", True, 7)


@pytest.mark.parametrize("operation", [update, must_update])
def test_missing_primary_key_raises_schema_error_without_executing(operation) -> None:
    db = FakeDb()

    with pytest.raises(SchemaError) as exc_info:
        operation(db, UserWithoutId(Name="a", Active=True))

    err = exc_info.value
    assert err.table_name == "UserWithoutId"
    assert err.table_sql_name == "users"
    assert "users" in str(err)
    assert "primary-key" in str(err)
    assert db.calls == []


@pytest.mark.parametrize("operation", [update, must_update])
def test_primary_key_only_record_raises_schema_error_without_executing(operation) -> None:
    db = FakeDb()

    with pytest.raises(SchemaError, match="no columns to update"):
        operation(db, Token(id=1))
    assert db.calls == []


@pytest.mark.parametrize("operation", [update, must_update])
def test_mapping_error_propagates_without_executing(operation) -> None:
    db = FakeDb()

    with pytest.raises(MappingError):
        operation(db, {"id": 1, "name": "a"})
    assert db.calls == []


def test_update_treats_zero_rows_as_success() -> None:
    db = FakeDb(rowcount=0)
    record = User(Id=404, Name="a", Active=True)

    update(db, record)

    assert execute_update(db, record).affected_row_count() == 0


def test_must_update_raises_no_match_error_on_zero_rows() -> None:
    db = FakeDb(rowcount=0)

    with pytest.raises(NoMatchError, match="(?i)no rows matching") as exc_info:
        must_update(db, User(Id=404, Name="a", Active=True))

    err = exc_info.value
    assert err.table_sql_name == "users"
    assert err.pk_column == "id"
    assert err.pk_value == 404
    assert len(db.calls) == 1


def test_must_update_succeeds_when_rows_affected() -> None:
    db = FakeDb(rowcount=1)
    must_update(db, User(Id=7, Name="a", Active=True))
    assert len(db.calls) == 1


def test_must_update_propagates_row_count_failure() -> None:
    db = FakeDb(rowcount=None)

    with pytest.raises(ExecutionError):
        must_update(db, User(Id=7, Name="a", Active=True))


def test_update_ignores_unavailable_row_count() -> None:
    db = FakeDb(rowcount=None)
    update(db, User(Id=7, Name="a", Active=True))
    assert len(db.calls) == 1


@pytest.mark.parametrize("operation", [update, must_update])
def test_execution_error_propagates_unchanged(operation) -> None:
    boom = ExecutionError("connection lost")
    db = FakeDb(error=boom)

    with pytest.raises(ExecutionError) as exc_info:
        operation(db, User(Id=7, Name="a", Active=True))
    assert exc_info.value is boom


def test_must_update_is_idempotent_for_unchanged_record() -> None:
    db = FakeDb(rowcount=1)
    record = User(Id=7, Name="a", Active=True)

    must_update(db, record)
    must_update(db, record)

    assert len(db.calls) == 2
    assert db.calls[0] == db.calls[1]


def test_update_uses_handle_statement_builder() -> None:
    db = FakeDb()
    db.statement_builder = UpdateStatementBuilder(paramstyle="format")

    update(db, User(Id=7, Name="a", Active=True))

    assert db.calls[0][0] == "UPDATE users SET name = %s, active = %s WHERE id = %s"
