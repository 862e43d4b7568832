# SPDX-PackageName: ormgen
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the ormgen contributors.


from __future__ import annotations
from typing import (
    TYPE_CHECKING,
    Any,
    Protocol,
)

import contextlib
import functools
import logging

import sqlalchemy
import sqlalchemy.exc
from sqlalchemy import sql
from sqlalchemy.sql import sqltypes

from ormgen import errors

from ._base import ColumnDescriptor, ForeignKeyDescriptor
from ._enums import ColumnType

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy.engine import Engine
    from sqlalchemy.engine.reflection import Inspector


logger = logging.getLogger(__name__)


class SchemaIntrospector(Protocol):
    def table_exists(self, table: str, schema: str | None) -> bool: ...

    def describe_columns(
        self, table: str, schema: str | None
    ) -> list[ColumnDescriptor]: ...

    def describe_foreign_keys(
        self, table: str, schema: str | None
    ) -> list[ForeignKeyDescriptor]: ...

    def list_tables(self, schema: str | None) -> list[str]: ...

    def related_tables(
        self, table: str, schema: str | None
    ) -> list[str] | None: ...

    def default_schema(self) -> str | None: ...


_RELATED_TABLES_MYSQL = sql.text(
    """
    SELECT m.TABLE_NAME, m.REFERENCED_TABLE_NAME
    FROM information_schema.KEY_COLUMN_USAGE AS m
    WHERE m.TABLE_SCHEMA = :schema
      AND (m.TABLE_NAME = :table OR m.REFERENCED_TABLE_NAME = :table)
    """
)


def map_column_type(
    sa_type: sqltypes.TypeEngine[Any],
) -> tuple[ColumnType, tuple[str, ...] | None]:
    """Map a reflected SQLAlchemy type to a ColumnType and, for enumerated
    types, its fixed domain."""
    # Order matters: several of these are subclasses of one another.
    if isinstance(sa_type, sqltypes.Enum):
        return ColumnType.Char, tuple(sa_type.enums)
    elif isinstance(sa_type, sqltypes.Boolean):
        return ColumnType.Boolean, None
    elif isinstance(sa_type, sqltypes.BigInteger):
        return ColumnType.BigInteger, None
    elif isinstance(sa_type, sqltypes.Integer):
        return ColumnType.Integer, None
    elif isinstance(sa_type, sqltypes.Float):
        return ColumnType.Float, None
    elif isinstance(sa_type, sqltypes.Numeric):
        return ColumnType.Decimal, None
    elif isinstance(sa_type, sqltypes.DateTime):
        return ColumnType.DateTime, None
    elif isinstance(sa_type, sqltypes.Date):
        return ColumnType.Date, None
    elif isinstance(sa_type, (sqltypes.CHAR, sqltypes.NCHAR)):
        return ColumnType.Char, None
    elif isinstance(sa_type, sqltypes.Text):
        return ColumnType.Text, None
    elif isinstance(sa_type, sqltypes.String):
        return ColumnType.VarChar, None
    else:
        return ColumnType.Other, None


def _column_size(sa_type: sqltypes.TypeEngine[Any]) -> int | None:
    for attr in ("length", "precision", "display_width"):
        value = getattr(sa_type, attr, None)
        if isinstance(value, int):
            return value
    return None


class SQLAlchemyIntrospector:
    """Schema introspection over :func:`sqlalchemy.inspect`."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @classmethod
    def from_url(cls, url: str) -> SQLAlchemyIntrospector:
        try:
            engine = sqlalchemy.create_engine(url)
        except sqlalchemy.exc.ArgumentError as e:
            raise errors.ConfigurationError(
                f"Invalid database URL {url!r}: {e}"
            ) from e
        except ImportError as e:
            raise errors.ConfigurationError(
                f"Database driver for {url!r} is not installed: {e}"
            ) from e
        return cls(engine)

    @functools.cached_property
    def _inspector(self) -> Inspector:
        try:
            return sqlalchemy.inspect(self._engine)
        except sqlalchemy.exc.DBAPIError as e:
            raise errors.ConfigurationError(
                f"Cannot connect to the database: {e}"
            ) from e

    @contextlib.contextmanager
    def _reflecting(self, what: str) -> Iterator[None]:
        try:
            yield
        except sqlalchemy.exc.SQLAlchemyError as e:
            raise errors.SchemaError(f"Cannot {what}: {e}") from e

    def default_schema(self) -> str | None:
        if self._engine.dialect.name == "sqlite":
            return None
        with self._reflecting("determine the default schema"):
            return self._inspector.default_schema_name

    def table_exists(self, table: str, schema: str | None) -> bool:
        with self._reflecting(f"look up table {table!r}"):
            return self._inspector.has_table(table, schema=schema)

    def list_tables(self, schema: str | None) -> list[str]:
        with self._reflecting("list tables"):
            return list(self._inspector.get_table_names(schema=schema))

    def describe_columns(
        self, table: str, schema: str | None
    ) -> list[ColumnDescriptor]:
        with self._reflecting(f"describe columns of {table!r}"):
            columns = self._inspector.get_columns(table, schema=schema)
            pk = self._inspector.get_pk_constraint(table, schema=schema)

        primary = list(pk.get("constrained_columns") or ())
        result = []
        for col in columns:
            col_type, type_values = map_column_type(col["type"])
            is_primary = col["name"] in primary
            autoincrement = col.get("autoincrement", "auto")
            is_autoincrement = autoincrement is True or (
                autoincrement == "auto"
                and is_primary
                and len(primary) == 1
                and col_type in {ColumnType.Integer, ColumnType.BigInteger}
            )
            result.append(
                ColumnDescriptor(
                    name=col["name"],
                    type=col_type,
                    is_nullable=bool(col.get("nullable", True)),
                    size=_column_size(col["type"]),
                    is_primary=is_primary,
                    is_autoincrement=is_autoincrement,
                    type_values=type_values,
                )
            )

        logger.debug(
            "table %r has %d column(s): %s",
            table,
            len(result),
            ", ".join(c.name for c in result),
        )
        return result

    def describe_foreign_keys(
        self, table: str, schema: str | None
    ) -> list[ForeignKeyDescriptor]:
        with self._reflecting(f"describe foreign keys of {table!r}"):
            fks = self._inspector.get_foreign_keys(table, schema=schema)

        return [
            ForeignKeyDescriptor(
                name=fk.get("name"),
                columns=tuple(fk["constrained_columns"]),
                referenced_table=fk["referred_table"],
                referenced_columns=tuple(fk["referred_columns"]),
                referenced_schema=fk.get("referred_schema"),
            )
            for fk in fks
        ]

    def related_tables(
        self, table: str, schema: str | None
    ) -> list[str] | None:
        if self._engine.dialect.name not in {"mysql", "mariadb"}:
            return None

        if schema is None:
            schema = self.default_schema()

        with (
            self._reflecting(f"find tables related to {table!r}"),
            self._engine.connect() as conn,
        ):
            rows = conn.execute(
                _RELATED_TABLES_MYSQL, {"schema": schema, "table": table}
            )
            tables: dict[str, None] = {}
            for this_table, referenced_table in rows:
                if this_table:
                    tables[this_table] = None
                if referenced_table:
                    tables[referenced_table] = None

        return list(tables)
