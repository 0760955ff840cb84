from .db.session import DbSession
from .db.update import must_update, update
from .errors import ExecutionError, MappingError, NoMatchError, RecordSqlError, SchemaError
from .schema import Field, SchemaRegistry, Table, column, derive

__all__ = [
    "DbSession",
    "update",
    "must_update",
    "column",
    "derive",
    "Field",
    "Table",
    "SchemaRegistry",
    "RecordSqlError",
    "MappingError",
    "SchemaError",
    "ExecutionError",
    "NoMatchError",
]
