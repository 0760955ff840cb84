from __future__ import annotations

import logging
import time
from typing import Any, Callable, Mapping

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql import TextClause

from ..errors import ExecutionError, MappingError, NoMatchError
from ..schema import SchemaRegistry, default_registry
from ..sql import UpdateStatementBuilder
from . import update as _update
from .metrics import observe_db_write
from .models import StatementResult

logger = logging.getLogger(__name__)


class DbSession:
    """
    Transactional wrapper around a SQLAlchemy Engine connection.

    Commits on clean exit, rolls back when the block raises.

    Use as:
        with DbSession(engine) as session:
            session.must_update(user)
            row = session.fetch_one("SELECT name FROM users WHERE id = :id", {"id": user.id})
    """

    def __init__(
        self,
        engine: Engine,
        registry: SchemaRegistry = default_registry,
        statement_builder: UpdateStatementBuilder | None = None,
    ) -> None:
        self.engine = engine
        self.registry = registry
        self.statement_builder = statement_builder or UpdateStatementBuilder.for_dialect(
            engine.dialect
        )
        self._conn: Connection | None = None
        self._tx = None

    def __enter__(self) -> "DbSession":
        if self._conn is not None:
            raise RuntimeError("DbSession is already active; nested sessions are not allowed")
        self._conn = self.engine.connect()
        self._tx = self._conn.begin()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._tx is not None:
                if exc_type:
                    self._tx.rollback()
                else:
                    self._tx.commit()
        finally:
            if self._conn is not None:
                self._conn.close()

            self._conn = None
            self._tx = None

        # propagate exceptions (if any)
        return False

    def _connection(self) -> Connection:
        if self._conn is None:
            raise RuntimeError("DbSession is not active; use within a context manager")
        return self._conn

    def exec(self, statement: str, *values: Any) -> StatementResult:
        """
        Execute a statement with positional driver-level parameters.

        ``statement`` must use the placeholder style of the engine's DB-API
        driver, as rendered by ``self.statement_builder``.

        Raises:
            RuntimeError: If the session is not active
            ExecutionError: If the database rejects the statement
        """
        conn = self._connection()
        logger.debug("Executing %s with %d bound values", statement, len(values))
        try:
            result = conn.exec_driver_sql(statement, tuple(values))
        except SQLAlchemyError as exc:
            raise ExecutionError(str(exc), statement=statement) from exc
        try:
            rowcount = result.rowcount
        finally:
            result.close()
        return StatementResult(statement=statement, values=tuple(values), rowcount=rowcount)

    def execute(
        self,
        sql: str | TextClause,
        params: Mapping[str, Any] | None = None,
    ) -> int:
        """
        Execute a non-SELECT statement with named parameters and return the
        affected row count.

        Raises:
            RuntimeError: If the session is not active
            ExecutionError: If the database rejects the statement or reports
                            no row count
        """
        conn = self._connection()
        stmt = text(sql) if isinstance(sql, str) else sql
        try:
            result = conn.execute(stmt, params or {})
        except SQLAlchemyError as exc:
            raise ExecutionError(str(exc), statement=str(stmt)) from exc
        if result.rowcount is None:
            raise ExecutionError(
                "execute() received None rowcount for statement. "
                "This may indicate a DDL statement or unsupported operation type.",
                statement=str(stmt),
            )
        return int(result.rowcount)

    def fetch_one(
        self,
        sql: str | TextClause,
        params: Mapping[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        """
        Execute a SELECT expected to return 0 or 1 row. Raises if more than one row.

        Raises:
            ExecutionError: If the database rejects the statement
            MultipleResultsFound: If more than one row is returned
        """
        conn = self._connection()
        stmt = text(sql) if isinstance(sql, str) else sql
        try:
            result = conn.execute(stmt, params or {})
        except SQLAlchemyError as exc:
            raise ExecutionError(str(exc), statement=str(stmt)) from exc
        row = result.mappings().one_or_none()
        if row is None:
            return None
        return dict(row)

    def update(self, record: Any) -> None:
        """
        Write ``record`` to the row matching its primary key.

        Matching zero rows is not an error. See recordsql.db.update.update.
        """
        self._observed_update(_update.update, record)

    def must_update(self, record: Any) -> None:
        """
        Write ``record`` to the row matching its primary key, raising
        NoMatchError when no row matched. See recordsql.db.update.must_update.
        """
        self._observed_update(_update.must_update, record)

    def _observed_update(
        self,
        operation: Callable[[Any, Any, SchemaRegistry], None],
        record: Any,
    ) -> None:
        start_time = time.monotonic()
        status = "success"

        try:
            operation(self, record, self.registry)
        except NoMatchError as exc:
            status = "no_match"
            logger.info(
                "UPDATE of %s matched no rows for %s=%r",
                exc.table_sql_name,
                exc.pk_column,
                exc.pk_value,
            )
            raise
        except Exception:
            status = "error"
            raise
        finally:
            latency = time.monotonic() - start_time
            # Metric errors must not mask the update outcome
            try:
                observe_db_write(self._table_label(record), "update", status, latency)
            except Exception:
                logger.debug("Failed to record update metrics", exc_info=True)

    def _table_label(self, record: Any) -> str:
        if isinstance(record, type):
            return "unknown"
        try:
            return self.registry.describe(type(record)).sql_name
        except MappingError:
            return "unknown"
