# SPDX-PackageName: ormgen
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the ormgen contributors.

from ._enums import (
    ColumnType,
    RelationKind,
)

from ._base import (
    ColumnDescriptor,
    ForeignKeyDescriptor,
    RelationDescriptor,
)

from ._introspector import (
    SchemaIntrospector,
    SQLAlchemyIntrospector,
    map_column_type,
)

from ._struct import (
    struct,
)


__all__ = (
    "ColumnDescriptor",
    "ColumnType",
    "ForeignKeyDescriptor",
    "RelationDescriptor",
    "RelationKind",
    "SQLAlchemyIntrospector",
    "SchemaIntrospector",
    "map_column_type",
    "struct",
)
