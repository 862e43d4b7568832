# SPDX-PackageName: ormgen
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the ormgen contributors.


from ._base import (
    FIXED_NOW,
    FakeIntrospector,
    SchemaTestCase,
    TestCase,
    fixed_clock,
)


__all__ = (
    "FIXED_NOW",
    "FakeIntrospector",
    "SchemaTestCase",
    "TestCase",
    "fixed_clock",
)
