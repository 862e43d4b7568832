# SPDX-PackageName: ormgen
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the ormgen contributors.

from __future__ import annotations

import unittest

import sqlalchemy as sa

from ormgen import _testbase as tb
from ormgen._internal._codegen._models import scalar_type
from ormgen._internal._reflection import ColumnType, map_column_type


class TestScalarType(unittest.TestCase):
    def test_types_scalar(self):
        cases = {
            ColumnType.Boolean: "bool",
            ColumnType.Integer: "int",
            ColumnType.BigInteger: "int",
            ColumnType.Decimal: "float",
            ColumnType.Float: "float",
            ColumnType.Date: "str",
            ColumnType.DateTime: "str",
            ColumnType.Char: "str",
            ColumnType.VarChar: "str",
            ColumnType.Text: "str",
            ColumnType.Other: "str",
        }
        for column_type, expected in cases.items():
            with self.subTest(column_type=column_type):
                self.assertEqual(scalar_type(column_type), expected)

    def test_types_scalar_from_string(self):
        self.assertEqual(scalar_type("integer"), "int")
        self.assertEqual(scalar_type("geometry"), "str")


class TestMapColumnType(unittest.TestCase):
    def test_types_sqlalchemy_mapping(self):
        cases = [
            (sa.Boolean(), ColumnType.Boolean),
            (sa.SmallInteger(), ColumnType.Integer),
            (sa.Integer(), ColumnType.Integer),
            (sa.BigInteger(), ColumnType.BigInteger),
            (sa.Float(), ColumnType.Float),
            (sa.Numeric(10, 2), ColumnType.Decimal),
            (sa.DateTime(), ColumnType.DateTime),
            (sa.Date(), ColumnType.Date),
            (sa.CHAR(2), ColumnType.Char),
            (sa.Text(), ColumnType.Text),
            (sa.String(255), ColumnType.VarChar),
            (sa.LargeBinary(), ColumnType.Other),
            (sa.JSON(), ColumnType.Other),
        ]
        for sa_type, expected in cases:
            with self.subTest(sa_type=repr(sa_type)):
                self.assertEqual(map_column_type(sa_type), (expected, None))

    def test_types_enum_domain(self):
        self.assertEqual(
            map_column_type(sa.Enum("active", "banned")),
            (ColumnType.Char, ("active", "banned")),
        )


class TestSQLiteColumns(tb.SchemaTestCase):
    SCHEMA = """
        CREATE TABLE products (
            id INTEGER PRIMARY KEY,
            code CHAR(8) NOT NULL,
            title VARCHAR(120),
            description TEXT,
            price NUMERIC(10, 2),
            weight FLOAT,
            in_stock BOOLEAN,
            created_at DATETIME,
            released DATE
        );
    """

    def test_types_sqlite_columns(self):
        columns = self.introspector.describe_columns("products", None)

        self.assertEqual(
            [(c.name, c.type) for c in columns],
            [
                ("id", ColumnType.Integer),
                ("code", ColumnType.Char),
                ("title", ColumnType.VarChar),
                ("description", ColumnType.Text),
                ("price", ColumnType.Decimal),
                ("weight", ColumnType.Float),
                ("in_stock", ColumnType.Boolean),
                ("created_at", ColumnType.DateTime),
                ("released", ColumnType.Date),
            ],
        )

        by_name = {c.name: c for c in columns}
        self.assertTrue(by_name["id"].is_primary)
        self.assertFalse(by_name["code"].is_nullable)
        self.assertEqual(by_name["code"].size, 8)
        self.assertEqual(by_name["title"].size, 120)
        self.assertTrue(by_name["title"].is_nullable)

    def test_types_sqlite_lookup(self):
        self.assertTrue(self.introspector.table_exists("products", None))
        self.assertFalse(self.introspector.table_exists("missing", None))
        self.assertIn("products", self.introspector.list_tables(None))
        self.assertIsNone(self.introspector.related_tables("products", None))
        self.assertIsNone(self.introspector.default_schema())
