# SPDX-PackageName: ormgen
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the ormgen contributors.

"""Construction of the schema-derived part of a model class."""

from __future__ import annotations
from typing import (
    TYPE_CHECKING,
)

import datetime
import logging
import textwrap

from ormgen._internal import _utils
from ormgen._internal._codegen._module import MAX_LINE_LENGTH
from ormgen._internal._reflection import ColumnType, RelationKind

from ._classmodel import (
    AddResult,
    ClassModel,
    Import,
    MethodDescriptor,
    ParameterSpec,
    PropertyDescriptor,
    Statements,
)
from ._types import scalar_type

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from ormgen._internal._config import ModelOptions
    from ormgen._internal._reflection import (
        ColumnDescriptor,
        RelationDescriptor,
    )

    from ._classmodel import ClassInventory


logger = logging.getLogger(__name__)

BANNER = "Autogenerated by ormgen."
EMAIL_MESSAGE = "Please enter a correct email address"

# Generated method bodies are nested two levels deep.
_BODY_INDENT = 8

_SELF = ParameterSpec(name="self")
_CLS = ParameterSpec(name="cls")


def quote(s: str) -> str:
    escaped = s.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def format_call(
    callee: str,
    args: Sequence[str],
    *,
    prefix: str = "",
    indent: int = _BODY_INDENT,
) -> str:
    """Render ``prefix + callee(args)``, one argument per line when the
    call doesn't fit."""
    line = f"{prefix}{callee}({', '.join(args)})"
    if indent + len(line) <= MAX_LINE_LENGTH or not args:
        return line
    body = "".join(textwrap.indent(f"{arg},\n", "    ") for arg in args)
    return f"{prefix}{callee}(\n{body})"


def format_dict(
    items: Sequence[tuple[str, str]],
    *,
    prefix: str = "",
) -> str:
    if not items:
        return f"{prefix}{{}}"
    body = "".join(f"    {k}: {v},\n" for k, v in items)
    return f"{prefix}{{\n{body}}}"


class SchemaModelBuilder:
    def __init__(
        self,
        options: ModelOptions,
        columns: Sequence[ColumnDescriptor],
        relations: Sequence[RelationDescriptor],
        schema: str | None = None,
        clock: Callable[[], datetime.datetime] = datetime.datetime.now,
    ) -> None:
        self._options = options
        self._columns = list(columns)
        self._relations = list(relations)
        self._schema = schema
        self._clock = clock
        self._name = options.entity_name
        self._model = ClassModel(
            self._name, namespace=options.namespace_name
        )
        # column name -> attribute name, for every column that got one
        self._attributes: dict[str, str] = {}

    def build(self) -> ClassInventory:
        self._build_doc()
        self._build_superclass()
        self._build_get_source()
        self._build_fields()
        self._build_initialize()
        self._build_finders()
        self._build_validation()
        if self._options.generate_column_map:
            self._build_column_map()
        return self._model.freeze()

    @property
    def _included_columns(self) -> list[ColumnDescriptor]:
        excluded = self._options.excluded_columns
        return [c for c in self._columns if c.name not in excluded]

    def _attribute_name(self, column: str) -> str:
        if self._options.use_camel_cased_names:
            column = _utils.lower_camelize(column)
        return _utils.ident(column)

    def _entity_ref(self, entity: str) -> str:
        ns = self._options.namespace_name
        return f"{ns}.{entity}" if ns else entity

    def _build_doc(self) -> None:
        model = self._model
        model.add_doc(self._name, "")
        if self._options.namespace_name:
            model.add_doc(f"Package: {self._options.namespace_name}")
        now = self._clock()
        model.add_doc(BANNER, f"Date: {now:%Y-%m-%d, %H:%M:%S}")

        if self._relations:
            model.add_doc("")
        for rel in self._relations:
            target = self._entity_ref(rel.remote_entity)
            if rel.kind.is_multi():
                target = f"list[{target}]"
            model.add_doc(f":ivar {rel.alias}: related ``{target}``")

    def _build_superclass(self) -> None:
        module, _, name = self._options.superclass.rpartition(".")
        if module:
            self._model.add_use(Import(module=module, name=name))
        self._model.set_superclass(name)
        self._model.set_abstract(self._options.is_abstract)

    def _build_get_source(self) -> None:
        self._model.add_method(
            MethodDescriptor(
                name="get_source",
                parameters=(_SELF,),
                return_type="str",
                doc=("Return the table name mapped in the model.",),
                body=Statements(
                    lines=(f"return {quote(self._options.table_name)}",)
                ),
            )
        )

    def _column_annotations(
        self,
        column: ColumnDescriptor,
    ) -> tuple[str, ...]:
        if not self._options.annotate_columns:
            return ()

        lines = []
        if column.is_primary:
            lines.append("@Primary")
        if column.is_autoincrement:
            lines.append("@Identity")
        args = [f"column={quote(column.name)}", f"type={quote(column.type)}"]
        if column.size is not None:
            args.append(f"length={column.size}")
        args.append(f"nullable={column.is_nullable}")
        lines.append(f"@Column({', '.join(args)})")
        return tuple(lines)

    def _build_fields(self) -> None:
        model = self._model
        accessors = self._options.generate_accessors
        setters = []
        getters = []
        reserved: set[str] = set()

        for column in self._included_columns:
            attr = self._attribute_name(column.name)
            prop_name = f"_{attr}" if accessors else attr
            annotation = f"{scalar_type(column.type)} | None"
            names = [prop_name]
            if accessors:
                names += [f"set_{attr}", f"get_{attr}"]

            taken = [
                n for n in names if model.has_member(n) or n in reserved
            ]
            if taken:
                logger.warning(
                    "skipping column %r of table %r: %s already defined",
                    column.name,
                    self._options.table_name,
                    ", ".join(repr(n) for n in taken),
                )
                continue

            model.add_property(
                PropertyDescriptor(
                    name=prop_name,
                    annotation=annotation,
                    value="None",
                    doc=self._column_annotations(column),
                )
            )
            self._attributes[column.name] = attr
            reserved.update(names)

            if accessors:
                setters.append(
                    MethodDescriptor(
                        name=f"set_{attr}",
                        parameters=(
                            _SELF,
                            ParameterSpec(
                                name=attr,
                                annotation=annotation,
                                default="None",
                            ),
                        ),
                        return_type=self._name,
                        doc=(f"Method to set the value of field {attr}",),
                        body=Statements(
                            lines=(f"self.{prop_name} = {attr}", "return self")
                        ),
                    )
                )
                getters.append(
                    MethodDescriptor(
                        name=f"get_{attr}",
                        parameters=(_SELF,),
                        return_type=annotation,
                        doc=(f"Return the value of field {attr}",),
                        body=Statements(lines=(f"return self.{prop_name}",)),
                    )
                )

        for method in (*setters, *getters):
            if model.add_method(method) is AddResult.AlreadyExists:
                logger.warning("skipping duplicate accessor %r", method.name)

        logger.debug(
            "built %d attribute(s) for %s", len(self._attributes), self._name
        )

    def _build_initialize(self) -> None:
        lines = []
        if self._options.has_explicit_superclass:
            lines.append("super().initialize()")
        if self._schema:
            lines.append(f"self.set_schema({quote(self._schema)})")
        lines.append(f"self.set_source({quote(self._options.table_name)})")

        for rel in self._relations:
            if rel.kind is RelationKind.HasMany:
                callee = "self.has_many"
            else:
                callee = "self.belongs_to"
            lines.append(
                format_call(
                    callee,
                    [
                        quote(rel.local_column),
                        quote(self._entity_ref(rel.remote_entity)),
                        quote(rel.remote_column),
                        f"alias={quote(rel.alias)}",
                    ],
                )
            )

        self._model.add_method(
            MethodDescriptor(
                name="initialize",
                parameters=(_SELF,),
                return_type="None",
                doc=("Initialize method for model.",),
                body=Statements(lines=tuple(lines)),
            )
        )

    def _build_finders(self) -> None:
        model = self._model
        model.add_use(Import(module="typing", name="Any"))
        param = ParameterSpec(
            name="parameters", annotation="Any", default="None"
        )

        model.add_method(
            MethodDescriptor(
                name="find",
                parameters=(_CLS, param),
                return_type=f"list[{self._name}]",
                decorators=("classmethod",),
                doc=("Return the records matching *parameters*.",),
                body=Statements(lines=("return super().find(parameters)",)),
            )
        )
        model.add_method(
            MethodDescriptor(
                name="find_first",
                parameters=(_CLS, param),
                return_type=f"{self._name} | None",
                decorators=("classmethod",),
                doc=("Return the first record matching *parameters*.",),
                body=Statements(
                    lines=("return super().find_first(parameters)",)
                ),
            )
        )

    def _build_validation(self) -> None:
        model = self._model
        module = self._options.validation_module
        model.add_use(Import(module=module, name="Validation"))

        lines = ["validator = Validation()"]
        for column in self._included_columns:
            attr = self._attributes.get(column.name)
            if attr is None:
                continue

            if column.type is ColumnType.Char and column.type_values:
                model.add_use(Import(module=module, name="InclusionIn"))
                domain = ", ".join(quote(v) for v in column.type_values)
                rule = f"InclusionIn(domain=[{domain}], required=True)"
                lines.append(
                    format_call("validator.add", [quote(attr), rule])
                )

            if column.name == "email":
                model.add_use(Import(module=module, name="Email"))
                rule = format_call(
                    "Email",
                    ["model=self", f"message={quote(EMAIL_MESSAGE)}"],
                    indent=_BODY_INDENT + 4,
                )
                lines.append(
                    format_call("validator.add", [quote(attr), rule])
                )

        lines.append("return self.validate(validator)")

        model.add_method(
            MethodDescriptor(
                name="validation",
                parameters=(_SELF,),
                return_type="bool",
                doc=("Validations and business logic.",),
                body=Statements(lines=tuple(lines)),
            )
        )

    def _build_column_map(self) -> None:
        items = [
            (quote(c.name), quote(self._attribute_name(c.name)))
            for c in self._columns
        ]
        self._model.add_method(
            MethodDescriptor(
                name="column_map",
                parameters=(_SELF,),
                return_type="dict[str, str]",
                doc=(
                    "Independent column mapping.",
                    "",
                    "Keys are the real names in the table and the values are",
                    "their names in the application.",
                ),
                body=Statements(
                    lines=(format_dict(items, prefix="return "),)
                ),
            )
        )
