# SPDX-PackageName: ormgen
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the ormgen contributors.


from __future__ import annotations
from typing import (
    TYPE_CHECKING,
)

from ormgen._internal._codegen._module import GeneratedModule

from ._classmodel import (
    LiteralBlock,
    ParameterKind,
    Statements,
)
from ._existing import multiline_string_rows

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from ._classmodel import (
        BlockDescriptor,
        ClassInventory,
        ConstantDescriptor,
        MethodDescriptor,
        ParameterSpec,
        PropertyDescriptor,
    )


def _escape_docstring(text: str) -> str:
    text = text.replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
    if text.endswith('"') and not text.endswith('\\"'):
        text = text[:-1] + '\\"'
    return text


def write_module_blocks(
    module: GeneratedModule,
    blocks: Sequence[BlockDescriptor],
) -> None:
    """Write top-level statements, keeping two blank lines around
    function and class definitions."""
    prev = None
    for block in blocks:
        if prev is not None and (prev.is_definition or block.is_definition):
            module.write()
            module.write()
        module.write_block(block.source.text, block.source.verbatim)
        prev = block


def render_parameters(parameters: Sequence[ParameterSpec]) -> list[str]:
    result = []
    has_varargs = any(
        p.kind is ParameterKind.VarPositional for p in parameters
    )
    prev: ParameterKind | None = None
    for param in parameters:
        if (
            prev is ParameterKind.PositionalOnly
            and param.kind is not ParameterKind.PositionalOnly
        ):
            result.append("/")
        if (
            param.kind is ParameterKind.KeywordOnly
            and prev is not ParameterKind.KeywordOnly
            and not has_varargs
        ):
            result.append("*")
        result.append(param.render())
        prev = param.kind
    if prev is ParameterKind.PositionalOnly:
        result.append("/")
    return result


class _ClassEmitter:
    def __init__(self, module: GeneratedModule, inventory: ClassInventory):
        self._module = module
        self._inventory = inventory

    def write(self) -> None:
        mod = self._module
        inv = self._inventory

        for decorator in inv.decorators:
            mod.write(f"@{decorator}")

        bases = list(inv.mixins)
        if inv.superclass:
            bases.append(inv.superclass)
        if bases:
            mod.write(mod.format_list(f"class {inv.name}({{list}}):", bases))
        else:
            mod.write(f"class {inv.name}:")

        with mod.indented():
            self._write_class_body()

    def _write_class_body(self) -> None:
        mod = self._module
        inv = self._inventory
        sections = 0

        if inv.doc:
            self._write_docstring(inv.doc)
            sections += 1

        if inv.is_abstract or inv.constants:
            if sections:
                mod.write()
            if inv.is_abstract:
                mod.write("__abstract__ = True")
            for const in inv.constants:
                self._write_constant(const)
            sections += 1

        if inv.properties:
            if sections:
                mod.write()
            for prop in inv.properties:
                self._write_property(prop)
            sections += 1

        for block in inv.blocks:
            if sections:
                mod.write()
            mod.write_block(block.source.text, block.source.verbatim)
            sections += 1

        for method in inv.methods:
            for definition in (method, *method.redefinitions):
                if sections:
                    mod.write()
                self._write_method(definition)
                sections += 1

        if not sections:
            mod.write("pass")

    def _write_docstring(self, lines: Iterable[str]) -> None:
        mod = self._module
        doc = [_escape_docstring(line) for line in lines]
        while doc and not doc[-1].strip():
            doc.pop()
        if not doc:
            return
        if len(doc) == 1:
            mod.write(f'"""{doc[0]}"""')
        else:
            mod.write(f'"""{doc[0]}')
            for line in doc[1:]:
                mod.write(line)
            mod.write('"""')

    def _write_doc_comments(self, lines: Iterable[str]) -> None:
        for line in lines:
            self._module.write(f"#: {line}" if line else "#:")

    def _write_statement(self, text: str) -> None:
        if "\n" in text:
            rows = multiline_string_rows(text)
            self._module.write_block(
                text, frozenset(row - 1 for row in rows)
            )
        else:
            self._module.write(text)

    def _write_constant(self, const: ConstantDescriptor) -> None:
        self._write_doc_comments(const.doc)
        if const.annotation is not None:
            self._write_statement(
                f"{const.name}: {const.annotation} = {const.value}"
            )
        else:
            self._write_statement(f"{const.name} = {const.value}")

    def _write_property(self, prop: PropertyDescriptor) -> None:
        self._write_doc_comments(prop.doc)
        if prop.annotation is None:
            self._write_statement(f"{prop.name} = {prop.value}")
        elif prop.value is None:
            self._write_statement(f"{prop.name}: {prop.annotation}")
        else:
            self._write_statement(
                f"{prop.name}: {prop.annotation} = {prop.value}"
            )

    def _write_method(self, method: MethodDescriptor) -> None:
        mod = self._module
        for decorator in method.decorators:
            mod.write(f"@{decorator}")

        keyword = "async def" if method.is_async else "def"
        ret = f" -> {method.return_type}" if method.return_type else ""
        params = render_parameters(method.parameters)
        mod.write(
            mod.format_list(f"{keyword} {method.name}({{list}}){ret}:", params)
        )

        with mod.indented():
            if method.doc:
                self._write_docstring(method.doc)

            body = method.body
            if isinstance(body, Statements) and body.lines:
                for line in body.lines:
                    mod.write(line)
            elif isinstance(body, LiteralBlock) and body.text.strip():
                mod.write_block(body.text, body.verbatim)
            elif not method.doc:
                mod.write("pass")


def render(
    inventory: ClassInventory,
    *,
    preamble: str | None = None,
) -> str:
    """Render *inventory* as the complete source text of a module."""
    local_packages = set()
    if inventory.namespace:
        local_packages.add(inventory.namespace.partition(".")[0])

    module = GeneratedModule(preamble, local_packages=local_packages)
    for use in inventory.uses:
        module.add_import(use.module, use.name, use.alias)

    if inventory.prologue:
        write_module_blocks(module, inventory.prologue)
        module.write()
        module.write()
    _ClassEmitter(module, inventory).write()
    if inventory.epilogue:
        module.write()
        module.write()
        write_module_blocks(module, inventory.epilogue)
    module.export(inventory.name)

    return module.getvalue()
