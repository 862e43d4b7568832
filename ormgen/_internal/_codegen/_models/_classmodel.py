# SPDX-PackageName: ormgen
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the ormgen contributors.

"""In-memory model of a generated class.

:class:`ClassModel` is the mutable builder used while a class is being
assembled; :class:`ClassInventory` is its frozen, ordered result.  All
``add_*`` operations are idempotent: adding a member whose name is already
taken leaves the model unchanged and returns :attr:`AddResult.AlreadyExists`.
"""

from __future__ import annotations
from typing import TypeAlias

import enum

from ormgen._internal._reflection import struct
from ormgen._internal._reflection._enums import StrEnum


class Visibility(StrEnum):
    Public = "public"
    Protected = "protected"
    Private = "private"


def visibility_of(name: str) -> Visibility:
    if name.startswith("__") and name.endswith("__"):
        return Visibility.Public
    elif name.startswith("__"):
        return Visibility.Private
    elif name.startswith("_"):
        return Visibility.Protected
    else:
        return Visibility.Public


def _decorator_name(expr: str) -> str:
    return expr.partition("(")[0].rpartition(".")[2].strip()


class ParameterKind(enum.Enum):
    PositionalOnly = enum.auto()
    PositionalOrKeyword = enum.auto()
    VarPositional = enum.auto()
    KeywordOnly = enum.auto()
    VarKeyword = enum.auto()


@struct
class ParameterSpec:
    name: str
    kind: ParameterKind = ParameterKind.PositionalOrKeyword
    annotation: str | None = None
    default: str | None = None

    def render(self) -> str:
        if self.kind is ParameterKind.VarPositional:
            prefix = "*"
        elif self.kind is ParameterKind.VarKeyword:
            prefix = "**"
        else:
            prefix = ""

        result = f"{prefix}{self.name}"
        if self.annotation is not None:
            result += f": {self.annotation}"
            if self.default is not None:
                result += f" = {self.default}"
        elif self.default is not None:
            result += f"={self.default}"
        return result


@struct
class Import:
    module: str
    name: str | None = None
    alias: str | None = None

    @property
    def key(self) -> str:
        return self.alias or self.name or self.module

    @property
    def bound_name(self) -> str:
        if self.alias:
            return self.alias
        elif self.name:
            return self.name
        else:
            return self.module.partition(".")[0]


@struct
class Statements:
    lines: tuple[str, ...] = ()


@struct
class LiteralBlock:
    text: str
    # Indices of lines that sit inside a multi-line string token and must
    # be emitted exactly as stored.
    verbatim: frozenset[int] = frozenset()


MethodBody: TypeAlias = Statements | LiteralBlock


@struct
class ConstantDescriptor:
    name: str
    value: str
    annotation: str | None = None
    doc: tuple[str, ...] = ()

    @property
    def visibility(self) -> Visibility:
        return visibility_of(self.name)


@struct
class PropertyDescriptor:
    name: str
    annotation: str | None = None
    value: str | None = None
    doc: tuple[str, ...] = ()

    @property
    def visibility(self) -> Visibility:
        return visibility_of(self.name)

    @property
    def is_static(self) -> bool:
        if self.annotation is None:
            return False
        return _decorator_name(self.annotation.partition("[")[0]) == (
            "ClassVar"
        )


@struct
class MethodDescriptor:
    name: str
    parameters: tuple[ParameterSpec, ...] = ()
    return_type: str | None = None
    decorators: tuple[str, ...] = ()
    doc: tuple[str, ...] = ()
    body: MethodBody = Statements()
    is_async: bool = False
    redefinitions: tuple[MethodDescriptor, ...] = ()

    @property
    def visibility(self) -> Visibility:
        return visibility_of(self.name)

    @property
    def is_static(self) -> bool:
        return any(
            _decorator_name(d) in {"staticmethod", "classmethod"}
            for d in self.decorators
        )

    @property
    def is_abstract(self) -> bool:
        return any(
            _decorator_name(d) == "abstractmethod" for d in self.decorators
        )

    @property
    def is_final(self) -> bool:
        return any(_decorator_name(d) == "final" for d in self.decorators)


@struct
class BlockDescriptor:
    """A hand-written statement carried over as source text."""

    names: tuple[str, ...]
    source: LiteralBlock
    is_definition: bool = False

    @property
    def label(self) -> str:
        return ", ".join(self.names) or "<unnamed>"


class AddResult(enum.Enum):
    Added = enum.auto()
    AlreadyExists = enum.auto()


@struct
class ClassInventory:
    name: str
    namespace: str | None = None
    superclass: str | None = None
    uses: tuple[Import, ...] = ()
    mixins: tuple[str, ...] = ()
    decorators: tuple[str, ...] = ()
    is_abstract: bool = False
    doc: tuple[str, ...] = ()
    constants: tuple[ConstantDescriptor, ...] = ()
    properties: tuple[PropertyDescriptor, ...] = ()
    methods: tuple[MethodDescriptor, ...] = ()
    blocks: tuple[BlockDescriptor, ...] = ()
    # Module-level statements emitted before and after the class.
    prologue: tuple[BlockDescriptor, ...] = ()
    epilogue: tuple[BlockDescriptor, ...] = ()

    @property
    def is_final(self) -> bool:
        return any(_decorator_name(d) == "final" for d in self.decorators)

    @property
    def member_names(self) -> frozenset[str]:
        return frozenset(
            m.name
            for m in (*self.constants, *self.properties, *self.methods)
        ) | frozenset(n for b in self.blocks for n in b.names)

    def get_constant(self, name: str) -> ConstantDescriptor | None:
        return next((c for c in self.constants if c.name == name), None)

    def get_property(self, name: str) -> PropertyDescriptor | None:
        return next((p for p in self.properties if p.name == name), None)

    def get_method(self, name: str) -> MethodDescriptor | None:
        return next((m for m in self.methods if m.name == name), None)


class ClassModel:
    def __init__(self, name: str, *, namespace: str | None = None) -> None:
        self._name = name
        self._namespace = namespace
        self._superclass: str | None = None
        self._is_abstract = False
        self._doc: list[str] = []
        self._uses: dict[str, Import] = {}
        self._mixins: dict[str, None] = {}
        self._decorators: dict[str, None] = {}
        self._constants: dict[str, ConstantDescriptor] = {}
        self._properties: dict[str, PropertyDescriptor] = {}
        self._methods: dict[str, MethodDescriptor] = {}
        self._blocks: list[BlockDescriptor] = []
        self._block_names: set[str] = set()
        self._prologue: list[BlockDescriptor] = []
        self._epilogue: list[BlockDescriptor] = []

    @classmethod
    def from_inventory(cls, inventory: ClassInventory) -> ClassModel:
        model = cls(inventory.name, namespace=inventory.namespace)
        model.set_superclass(inventory.superclass)
        model.set_abstract(inventory.is_abstract)
        model.add_doc(*inventory.doc)
        for use in inventory.uses:
            model.add_use(use)
        for mixin in inventory.mixins:
            model.add_mixin(mixin)
        for decorator in inventory.decorators:
            model.add_decorator(decorator)
        for const in inventory.constants:
            model.add_constant(const)
        for prop in inventory.properties:
            model.add_property(prop)
        for method in inventory.methods:
            model.add_method(method)
        for block in inventory.blocks:
            model.add_block(block)
        for block in inventory.prologue:
            model.add_module_block(block)
        for block in inventory.epilogue:
            model.add_module_block(block, after_class=True)
        return model

    @property
    def name(self) -> str:
        return self._name

    @property
    def superclass(self) -> str | None:
        return self._superclass

    def set_superclass(self, superclass: str | None) -> None:
        self._superclass = superclass

    def set_abstract(self, is_abstract: bool) -> None:
        self._is_abstract = is_abstract

    def add_doc(self, *lines: str) -> None:
        self._doc.extend(lines)

    def has_member(self, name: str) -> bool:
        return (
            name in self._constants
            or name in self._properties
            or name in self._methods
            or name in self._block_names
        )

    def has_use(self, use: Import) -> bool:
        return use.key in self._uses

    def add_use(self, use: Import) -> AddResult:
        if use.key in self._uses:
            return AddResult.AlreadyExists
        self._uses[use.key] = use
        return AddResult.Added

    def add_mixin(self, mixin: str) -> AddResult:
        if mixin in self._mixins or mixin == self._superclass:
            return AddResult.AlreadyExists
        self._mixins[mixin] = None
        return AddResult.Added

    def add_decorator(self, decorator: str) -> AddResult:
        if decorator in self._decorators:
            return AddResult.AlreadyExists
        self._decorators[decorator] = None
        return AddResult.Added

    def add_constant(self, constant: ConstantDescriptor) -> AddResult:
        if self.has_member(constant.name):
            return AddResult.AlreadyExists
        self._constants[constant.name] = constant
        return AddResult.Added

    def add_property(self, prop: PropertyDescriptor) -> AddResult:
        if self.has_member(prop.name):
            return AddResult.AlreadyExists
        self._properties[prop.name] = prop
        return AddResult.Added

    def add_method(self, method: MethodDescriptor) -> AddResult:
        if self.has_member(method.name):
            return AddResult.AlreadyExists
        self._methods[method.name] = method
        return AddResult.Added

    def add_block(self, block: BlockDescriptor) -> AddResult:
        # Statements may rebind each other's names, but never a member
        # defined some other way.
        if any(
            self.has_member(name) and name not in self._block_names
            for name in block.names
        ):
            return AddResult.AlreadyExists
        self._blocks.append(block)
        self._block_names.update(block.names)
        return AddResult.Added

    def add_module_block(
        self,
        block: BlockDescriptor,
        *,
        after_class: bool = False,
    ) -> AddResult:
        """Add a statement to the module around the class.

        The statement must not rebind the class itself, ``__all__``,
        or an imported name.
        """
        taken = {self._name, "__all__"}
        taken.update(use.bound_name for use in self._uses.values())
        if any(name in taken for name in block.names):
            return AddResult.AlreadyExists
        if after_class:
            self._epilogue.append(block)
        else:
            self._prologue.append(block)
        return AddResult.Added

    def freeze(self) -> ClassInventory:
        return ClassInventory(
            name=self._name,
            namespace=self._namespace,
            superclass=self._superclass,
            uses=tuple(self._uses.values()),
            mixins=tuple(self._mixins),
            decorators=tuple(self._decorators),
            is_abstract=self._is_abstract,
            doc=tuple(self._doc),
            constants=tuple(self._constants.values()),
            properties=tuple(self._properties.values()),
            methods=tuple(self._methods.values()),
            blocks=tuple(self._blocks),
            prologue=tuple(self._prologue),
            epilogue=tuple(self._epilogue),
        )

    def render(self, *, preamble: str | None = None) -> str:
        from . import _emitter

        return _emitter.render(self.freeze(), preamble=preamble)
