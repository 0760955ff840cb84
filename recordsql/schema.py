from __future__ import annotations

import dataclasses
import threading
from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from .config import DEFAULT_NAMING, NamingConvention
from .errors import MappingError

# Keys stored in dataclasses.field(metadata=...) by column().
_NAME_KEY = "recordsql.name"
_PK_KEY = "recordsql.primary_key"
_IGNORE_KEY = "recordsql.ignore"


def column(
    *,
    name: str | None = None,
    primary_key: bool = False,
    ignore: bool = False,
    **field_kwargs: Any,
) -> Any:
    """
    Declare a dataclass field with explicit column mapping.

    Args:
        name: SQL column name (overrides the naming convention)
        primary_key: Mark this field as the table's primary key
        ignore: Exclude this field from the table mapping entirely
        field_kwargs: Passed through to dataclasses.field (default, repr, ...)

    Example:
        @dataclass
        class User:
            __tablename__ = "accounts"

            user_id: int = column(primary_key=True)
            display_name: str = column(name="name", default="")
            cache: dict = column(ignore=True, default_factory=dict)
    """
    metadata = dict(field_kwargs.pop("metadata", None) or {})
    metadata[_NAME_KEY] = name
    metadata[_PK_KEY] = primary_key
    metadata[_IGNORE_KEY] = ignore
    return dataclasses.field(metadata=metadata, **field_kwargs)


@dataclass(frozen=True)
class Field:
    """One mapped attribute of a specific record instance."""
    struct_name: str
    sql_name: str
    value: Any
    is_primary_key: bool = False


@dataclass(frozen=True)
class Table:
    """
    Relational projection of one record instance.

    Values are captured when the Table is built; rebinding attributes on the
    record afterwards does not change an existing Table.
    """
    name: str
    sql_name: str
    fields: tuple[Field, ...]

    def primary_key_field(self) -> Field | None:
        """Return the first primary-key field in field order, or None."""
        for f in self.fields:
            if f.is_primary_key:
                return f
        return None

    def _set_fields(self) -> list[Field]:
        pk = self.primary_key_field()
        return [f for f in self.fields if f is not pk]

    def update_column_names(self) -> list[str]:
        """SQL names of every non-primary-key field, in field order."""
        return [f.sql_name for f in self._set_fields()]

    def update_column_values(self) -> list[Any]:
        """
        Bound values for an UPDATE: every non-primary-key value in the same
        order as update_column_names(), then the primary-key value last.
        """
        values = [f.value for f in self._set_fields()]
        pk = self.primary_key_field()
        if pk is not None:
            values.append(pk.value)
        return values


@dataclass(frozen=True)
class FieldSchema:
    struct_name: str
    sql_name: str
    is_primary_key: bool = False


@dataclass(frozen=True)
class TableSchema:
    """Type-level mapping of a record type to a table, without values."""
    name: str
    sql_name: str
    fields: tuple[FieldSchema, ...]

    def snapshot(self, record: Any) -> Table:
        """Capture the current values of ``record`` into a Table."""
        try:
            fields = tuple(
                Field(
                    struct_name=f.struct_name,
                    sql_name=f.sql_name,
                    value=getattr(record, f.struct_name),
                    is_primary_key=f.is_primary_key,
                )
                for f in self.fields
            )
        except AttributeError as exc:
            raise MappingError(type(record), f"missing attribute: {exc}") from exc
        return Table(name=self.name, sql_name=self.sql_name, fields=fields)


class SchemaRegistry:
    """
    Cache of record type -> TableSchema.

    Dataclass types are described on first use. Other types must be
    registered explicitly with register(). Descriptions are immutable and
    built at most once per type.

    Usage:
        registry = SchemaRegistry()
        table = registry.derive(User(id=7, name="a", active=True))
        table.update_column_names()   # ["name", "active"]
        table.update_column_values()  # ["a", True, 7]
    """

    def __init__(self, naming: NamingConvention = DEFAULT_NAMING) -> None:
        self.naming = naming
        self._schemas: dict[type, TableSchema] = {}
        self._lock = threading.Lock()

    def register(
        self,
        record_type: type,
        attributes: Sequence[str],
        *,
        table: str | None = None,
        primary_key: str | None = None,
        columns: dict[str, str] | None = None,
    ) -> TableSchema:
        """
        Register an explicit mapping for a non-dataclass record type.

        Args:
            record_type: The class whose instances will be mapped
            attributes: Attribute names in column order
            table: SQL table name (defaults to the naming convention)
            primary_key: Attribute holding the primary key (defaults to the
                         naming convention)
            columns: Optional attribute -> SQL column name overrides

        Returns:
            The registered TableSchema

        Raises:
            MappingError: If the mapping is empty, names an unknown primary
                          key, or produces duplicate names
        """
        if not isinstance(record_type, type):
            raise MappingError(record_type, "only classes can be registered")
        if primary_key is not None and primary_key not in attributes:
            raise MappingError(
                record_type, f"primary key {primary_key!r} is not a listed attribute"
            )

        overrides = columns or {}
        specs = []
        for attr in attributes:
            if primary_key is None:
                is_pk = self.naming.is_primary_key(attr)
            else:
                is_pk = attr == primary_key
            specs.append(
                FieldSchema(
                    struct_name=attr,
                    sql_name=overrides.get(attr) or self.naming.column_name(attr),
                    is_primary_key=is_pk,
                )
            )

        schema = self._build(record_type, table, specs)
        with self._lock:
            self._schemas[record_type] = schema
        return schema

    def describe(self, record_type: type) -> TableSchema:
        """
        Return the cached TableSchema for ``record_type``, building it from
        the dataclass declaration on first use.

        Raises:
            MappingError: If the type is neither registered nor a dataclass,
                          or has no mappable fields
        """
        with self._lock:
            schema = self._schemas.get(record_type)
            if schema is None:
                schema = self._describe_dataclass(record_type)
                self._schemas[record_type] = schema
        return schema

    def derive(self, record: Any) -> Table:
        """
        Reflect a record instance into a Table.

        Raises:
            MappingError: If ``record`` is a class, or of a type that cannot
                          be described
        """
        if isinstance(record, type):
            raise MappingError(record, "expected a record instance, got a class")
        return self.describe(type(record)).snapshot(record)

    def _describe_dataclass(self, record_type: type) -> TableSchema:
        if not dataclasses.is_dataclass(record_type):
            raise MappingError(
                record_type, "not a dataclass and not registered with a SchemaRegistry"
            )

        declared = [
            f for f in dataclasses.fields(record_type)
            if not f.metadata.get(_IGNORE_KEY, False)
        ]
        # An explicit marker anywhere disables the naming convention.
        explicit_pk = any(f.metadata.get(_PK_KEY, False) for f in declared)

        specs = []
        for f in declared:
            if explicit_pk:
                is_pk = bool(f.metadata.get(_PK_KEY, False))
            else:
                is_pk = self.naming.is_primary_key(f.name)
            specs.append(
                FieldSchema(
                    struct_name=f.name,
                    sql_name=f.metadata.get(_NAME_KEY) or self.naming.column_name(f.name),
                    is_primary_key=is_pk,
                )
            )

        return self._build(record_type, getattr(record_type, "__tablename__", None), specs)

    def _build(
        self,
        record_type: type,
        table: str | None,
        specs: Iterable[FieldSchema],
    ) -> TableSchema:
        fields = tuple(specs)
        if not fields:
            raise MappingError(record_type, "no mappable fields")

        seen: dict[str, str] = {}
        for f in fields:
            if f.sql_name in seen:
                raise MappingError(
                    record_type,
                    f"fields {seen[f.sql_name]!r} and {f.struct_name!r} "
                    f"both map to column {f.sql_name!r}",
                )
            seen[f.sql_name] = f.struct_name

        # WHERE binds a single key; a second key would land in SET.
        keys = [f.struct_name for f in fields if f.is_primary_key]
        if len(keys) > 1:
            raise MappingError(
                record_type, f"multiple primary-key fields: {', '.join(keys)}"
            )

        name = record_type.__name__
        return TableSchema(
            name=name,
            sql_name=table or self.naming.table_name(name),
            fields=fields,
        )


default_registry = SchemaRegistry()


def derive(record: Any) -> Table:
    """Reflect ``record`` using the default registry."""
    return default_registry.derive(record)
