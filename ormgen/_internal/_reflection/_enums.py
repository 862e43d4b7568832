# SPDX-PackageName: ormgen
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the ormgen contributors.


import enum


class StrEnum(str, enum.Enum):
    pass


class ColumnType(StrEnum):
    Boolean = "boolean"
    Integer = "integer"
    BigInteger = "big_integer"
    Decimal = "decimal"
    Float = "float"
    Date = "date"
    DateTime = "datetime"
    Char = "char"
    VarChar = "varchar"
    Text = "text"
    Other = "other"


class RelationKind(StrEnum):
    HasMany = "has_many"
    BelongsTo = "belongs_to"

    def is_multi(self) -> bool:
        return self is RelationKind.HasMany
