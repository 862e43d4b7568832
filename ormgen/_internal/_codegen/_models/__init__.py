# SPDX-PackageName: ormgen
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the ormgen contributors.


from __future__ import annotations
from typing import (
    TYPE_CHECKING,
)

import datetime
import logging
import os
import pathlib

from ormgen import errors
from ormgen._internal import _atomic
from ormgen._internal._codegen._generator import C, AbstractCodeGenerator

from ._builder import SchemaModelBuilder
from ._classmodel import (
    AddResult,
    BlockDescriptor,
    ClassInventory,
    ClassModel,
    ConstantDescriptor,
    Import,
    LiteralBlock,
    MethodDescriptor,
    ParameterKind,
    ParameterSpec,
    PropertyDescriptor,
    Statements,
    Visibility,
)
from ._emitter import render
from ._existing import (
    ExistingClassSnapshot,
    reflect_existing_class,
    reflect_existing_file,
)
from ._merge import merge
from ._relations import build_reference_index, resolve_relations
from ._types import scalar_type

if TYPE_CHECKING:
    from collections.abc import Callable

    from ormgen._internal._config import ModelOptions
    from ormgen._internal._reflection import (
        RelationDescriptor,
        SchemaIntrospector,
    )


COMMENT = """\
#
# Automatically generated by ormgen from the database schema.
#
# Members added by hand are kept when this file is regenerated;
# generated members are replaced.
#\
"""

LICENSE_FILE = "license.txt"

logger = logging.getLogger(__name__)


class ModelGenerator(AbstractCodeGenerator):
    """Generate one model class from a database table."""

    def __init__(
        self,
        options: ModelOptions,
        *,
        introspector: SchemaIntrospector | None = None,
        interactive: bool = True,
        quiet: bool = False,
        clock: Callable[[], datetime.datetime] = datetime.datetime.now,
    ) -> None:
        super().__init__(
            options,
            introspector=introspector,
            interactive=interactive,
            quiet=quiet,
        )
        self._clock = clock
        self._generated: ClassInventory | None = None

    def run(self) -> pathlib.Path:
        try:
            path = self.generate()
        except errors.OrmgenError as e:
            self.print_error(str(e))
            self.abort(1)

        if not self._quiet:
            is_abstract = (
                self._generated is not None and self._generated.is_abstract
            )
            kind = "Abstract model" if is_abstract else "Model"
            self.print_msg(
                f"{C.GREEN}{C.BOLD}{kind} "
                f'"{self._options.entity_name}" '
                f"was successfully created.{C.ENDC}"
            )
        return path

    def generate(self) -> pathlib.Path:
        """Build, merge and write the model; return the written path."""
        opts = self._options
        introspector = self.introspector
        table = opts.table_name
        name = opts.entity_name

        schema = opts.schema_name or introspector.default_schema()
        if not introspector.table_exists(table, schema):
            raise errors.SchemaError(f'Table "{table}" does not exist.')

        path = opts.model_path()
        models_dir = path.parent
        self._check_destination(path)

        columns = introspector.describe_columns(table, schema)
        own_foreign_keys = introspector.describe_foreign_keys(table, schema)
        if opts.explicit_relation_list is not None:
            reference_index = {
                t: list(fks) for t, fks in opts.explicit_relation_list.items()
            }
        else:
            reference_index = build_reference_index(
                introspector, table, schema
            )
        relations = resolve_relations(
            table,
            own_foreign_keys,
            reference_index,
            camelize=opts.use_camel_cased_names,
        )
        self._check_relations(relations, models_dir)

        inventory = SchemaModelBuilder(
            opts,
            columns,
            relations,
            schema,
            self._clock,
        ).build()

        snapshot = None
        if path.exists():
            try:
                snapshot = reflect_existing_file(
                    path, name, superclass=inventory.superclass
                )
            except errors.ReflectionError as e:
                raise errors.ReflectionError(
                    f'Failed to create the model "{name}". Error: {e}'
                ) from e

        self._generated = merge(inventory, snapshot)
        source = render(self._generated, preamble=self._preamble())

        try:
            _atomic.atomic_write(path, source)
        except OSError as e:
            raise errors.WriteError(
                f"Cannot write model file {str(path)!r}: {e.strerror}"
            ) from e

        logger.info("wrote %s to %s", name, path)
        return path

    def _check_destination(self, path: pathlib.Path) -> None:
        if path.exists():
            if not self._options.overwrite_existing:
                raise errors.WriteError(
                    f"The model file {str(path)!r} already exists "
                    f"in the models directory; use --force to regenerate it"
                )
            if not os.access(path, os.W_OK):
                raise errors.WriteError(
                    f"The model file {str(path)!r} is not writable"
                )
        elif not path.parent.is_dir():
            raise errors.WriteError(
                f"The models directory {str(path.parent)!r} does not exist"
            )
        elif not os.access(path.parent, os.W_OK):
            raise errors.WriteError(
                f"The models directory {str(path.parent)!r} is not writable"
            )

    def _check_relations(
        self,
        relations: list[RelationDescriptor],
        models_dir: pathlib.Path,
    ) -> None:
        name = self._options.entity_name
        for rel in relations:
            if rel.remote_entity == name:
                continue
            if not (models_dir / f"{rel.remote_entity}.py").exists():
                logger.warning(
                    "%s relation %r of %s refers to %s, which has no "
                    "model file in %s yet",
                    rel.kind,
                    rel.alias,
                    name,
                    rel.remote_entity,
                    models_dir,
                )

    def _license_path(self) -> pathlib.Path | None:
        if self._options.license_file is not None:
            return self._options.license_file
        if self._options.root_dir is not None:
            candidate = self._options.root_dir / LICENSE_FILE
            if candidate.is_file():
                return candidate
        return None

    def _preamble(self) -> str:
        path = self._license_path()
        if path is None:
            return COMMENT

        try:
            text = path.read_text(encoding="utf8")
        except (OSError, UnicodeDecodeError) as e:
            raise errors.ConfigurationError(
                f"Cannot read license file {str(path)!r}: {e}"
            ) from e

        lines = text.strip("\n").splitlines()
        return "\n".join(f"# {line}".rstrip() for line in lines)


__all__ = (
    "AddResult",
    "BlockDescriptor",
    "ClassInventory",
    "ClassModel",
    "ConstantDescriptor",
    "ExistingClassSnapshot",
    "Import",
    "LiteralBlock",
    "MethodDescriptor",
    "ModelGenerator",
    "ParameterKind",
    "ParameterSpec",
    "PropertyDescriptor",
    "SchemaModelBuilder",
    "Statements",
    "Visibility",
    "build_reference_index",
    "merge",
    "reflect_existing_class",
    "reflect_existing_file",
    "render",
    "resolve_relations",
    "scalar_type",
)
