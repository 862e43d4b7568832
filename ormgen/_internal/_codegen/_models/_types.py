# SPDX-PackageName: ormgen
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the ormgen contributors.


from __future__ import annotations

from ormgen._internal._reflection import ColumnType


_SCALAR_TYPES: dict[ColumnType, str] = {
    ColumnType.Boolean: "bool",
    ColumnType.Integer: "int",
    ColumnType.BigInteger: "int",
    ColumnType.Decimal: "float",
    ColumnType.Float: "float",
}


def scalar_type(column_type: ColumnType | str) -> str:
    """Return the Python type name used to annotate a column attribute.

    Anything that isn't numeric or boolean is represented as ``str``.
    """
    try:
        column_type = ColumnType(column_type)
    except ValueError:
        return "str"
    return _SCALAR_TYPES.get(column_type, "str")
