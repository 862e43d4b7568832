# SPDX-PackageName: ormgen
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the ormgen contributors.


from __future__ import annotations
from typing import TYPE_CHECKING

import logging

from ormgen._internal import _utils
from ormgen._internal._reflection import (
    ForeignKeyDescriptor,
    RelationDescriptor,
    RelationKind,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from ormgen._internal._reflection import SchemaIntrospector


logger = logging.getLogger(__name__)


ReferenceIndex = dict[str, list[ForeignKeyDescriptor]]


def build_reference_index(
    introspector: SchemaIntrospector,
    table: str,
    schema: str | None,
) -> ReferenceIndex:
    """Collect the foreign keys of every table that may reference *table*.

    Uses the introspector's list of related tables when it can provide
    one, otherwise scans every table in *schema*.
    """
    tables: Iterable[str] | None = introspector.related_tables(table, schema)
    if tables is None:
        tables = introspector.list_tables(schema)
        logger.debug("scanning all %d table(s) for references", len(tables))

    index: ReferenceIndex = {}
    for name in tables:
        if name not in index:
            index[name] = introspector.describe_foreign_keys(name, schema)
    return index


def _normalize_column(column: str, camelize: bool) -> str:
    return _utils.lower_camelize(column) if camelize else column


def _alias(entity: str, camelize: bool) -> str:
    if camelize:
        return _utils.lower_camelize(entity)
    else:
        return _utils.uncamelize(entity)


def resolve_relations(
    table: str,
    own_foreign_keys: Sequence[ForeignKeyDescriptor],
    reference_index: Mapping[str, Sequence[ForeignKeyDescriptor]],
    *,
    camelize: bool = False,
) -> list[RelationDescriptor]:
    relations = []

    for referencing_table, foreign_keys in reference_index.items():
        for fk in foreign_keys:
            if fk.referenced_table != table:
                continue
            if not fk.columns or not fk.referenced_columns:
                continue
            entity = _utils.entity_name(referencing_table)
            relations.append(
                RelationDescriptor(
                    kind=RelationKind.HasMany,
                    local_column=_normalize_column(
                        fk.referenced_columns[0], camelize
                    ),
                    remote_entity=entity,
                    remote_table=referencing_table,
                    remote_column=_normalize_column(fk.columns[0], camelize),
                    alias=_alias(entity, camelize),
                )
            )

    for fk in own_foreign_keys:
        if not fk.columns or not fk.referenced_columns:
            continue
        entity = _utils.entity_name(fk.referenced_table)
        relations.append(
            RelationDescriptor(
                kind=RelationKind.BelongsTo,
                local_column=_normalize_column(fk.columns[0], camelize),
                remote_entity=entity,
                remote_table=fk.referenced_table,
                remote_column=_normalize_column(
                    fk.referenced_columns[0], camelize
                ),
                alias=_alias(entity, camelize),
            )
        )

    for rel in relations:
        logger.debug(
            "relation %s: %s.%s -> %s.%s",
            rel.kind,
            table,
            rel.local_column,
            rel.remote_table,
            rel.remote_column,
        )

    return relations
