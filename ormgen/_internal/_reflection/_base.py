# SPDX-PackageName: ormgen
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the ormgen contributors.


from __future__ import annotations

from ._enums import ColumnType, RelationKind
from ._struct import struct


@struct
class ColumnDescriptor:
    name: str
    type: ColumnType
    is_nullable: bool = True
    size: int | None = None
    is_primary: bool = False
    is_autoincrement: bool = False
    type_values: tuple[str, ...] | None = None


@struct
class ForeignKeyDescriptor:
    columns: tuple[str, ...]
    referenced_table: str
    referenced_columns: tuple[str, ...]
    referenced_schema: str | None = None
    name: str | None = None


@struct
class RelationDescriptor:
    kind: RelationKind
    local_column: str
    remote_entity: str
    remote_table: str
    remote_column: str
    alias: str
