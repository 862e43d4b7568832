# SPDX-PackageName: ormgen
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the ormgen contributors.

from __future__ import annotations
from typing import (
    TYPE_CHECKING,
    Any,
    ClassVar,
)

import datetime
import pathlib
import tempfile
import unittest

import sqlalchemy

from ormgen._internal._codegen._models import ModelGenerator
from ormgen._internal._config import make_options
from ormgen._internal._reflection import SQLAlchemyIntrospector

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from sqlalchemy.engine import Engine

    from ormgen._internal._config import ModelOptions
    from ormgen._internal._reflection import (
        ColumnDescriptor,
        ForeignKeyDescriptor,
    )


FIXED_NOW = datetime.datetime(2024, 5, 17, 12, 30, 45)


def fixed_clock() -> datetime.datetime:
    return FIXED_NOW


class FakeIntrospector:
    """In-memory schema for tests that need metadata SQLite can't
    reflect, such as enumerated column domains."""

    def __init__(
        self,
        tables: Mapping[str, Sequence[ColumnDescriptor]],
        foreign_keys: (
            Mapping[str, Sequence[ForeignKeyDescriptor]] | None
        ) = None,
        *,
        schema: str | None = None,
        related: Mapping[str, Sequence[str]] | None = None,
    ) -> None:
        self._tables = {t: list(cols) for t, cols in tables.items()}
        self._foreign_keys = {
            t: list(fks) for t, fks in (foreign_keys or {}).items()
        }
        self._schema = schema
        self._related = related
        self.scanned: list[str] = []

    def default_schema(self) -> str | None:
        return self._schema

    def table_exists(self, table: str, schema: str | None) -> bool:
        return table in self._tables

    def describe_columns(
        self, table: str, schema: str | None
    ) -> list[ColumnDescriptor]:
        return list(self._tables[table])

    def describe_foreign_keys(
        self, table: str, schema: str | None
    ) -> list[ForeignKeyDescriptor]:
        self.scanned.append(table)
        return list(self._foreign_keys.get(table, ()))

    def list_tables(self, schema: str | None) -> list[str]:
        return list(self._tables)

    def related_tables(
        self, table: str, schema: str | None
    ) -> list[str] | None:
        if self._related is None:
            return None
        return list(self._related.get(table, ()))


class TestCase(unittest.TestCase):
    maxDiff = None

    def setUp(self) -> None:
        super().setUp()
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.models_dir = pathlib.Path(tmp.name)

    def make_options(self, table_name: str, **kwargs: Any) -> ModelOptions:
        kwargs.setdefault("models_dir", self.models_dir)
        return make_options(None, table_name=table_name, **kwargs)

    def read_model(self, name: str) -> str:
        return (self.models_dir / f"{name}.py").read_text(encoding="utf8")

    def write_model(self, name: str, source: str) -> pathlib.Path:
        path = self.models_dir / f"{name}.py"
        path.write_text(source, encoding="utf8")
        return path


class SchemaTestCase(TestCase):
    """Run tests against a SQLite database created from ``SCHEMA``."""

    SCHEMA: ClassVar[str | None] = None

    engine: ClassVar[Engine]
    introspector: ClassVar[SQLAlchemyIntrospector]
    _db_dir: ClassVar[tempfile.TemporaryDirectory[str]]

    @classmethod
    def setUpClass(cls) -> None:
        super().setUpClass()
        cls._db_dir = tempfile.TemporaryDirectory()
        db_path = pathlib.Path(cls._db_dir.name) / "test.db"
        cls.engine = sqlalchemy.create_engine(f"sqlite:///{db_path}")

        if cls.SCHEMA:
            with cls.engine.begin() as conn:
                for statement in cls.SCHEMA.split(";"):
                    if statement.strip():
                        conn.exec_driver_sql(statement)

        cls.introspector = SQLAlchemyIntrospector(cls.engine)

    @classmethod
    def tearDownClass(cls) -> None:
        try:
            cls.engine.dispose()
            cls._db_dir.cleanup()
        finally:
            super().tearDownClass()

    def generate(self, table_name: str, **kwargs: Any) -> pathlib.Path:
        options = self.make_options(table_name, **kwargs)
        generator = ModelGenerator(
            options,
            introspector=self.introspector,
            interactive=False,
            quiet=True,
            clock=fixed_clock,
        )
        return generator.generate()
