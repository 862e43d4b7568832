# SPDX-PackageName: ormgen
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the ormgen contributors.

from __future__ import annotations

import ast
import unittest

from ormgen._internal._codegen._module import GeneratedModule
from ormgen._internal._codegen._models import (
    ClassInventory,
    ConstantDescriptor,
    Import,
    LiteralBlock,
    MethodDescriptor,
    ParameterKind,
    ParameterSpec,
    PropertyDescriptor,
    render,
)
from ormgen._internal._codegen._models._emitter import render_parameters


class TestRenderParameters(unittest.TestCase):
    def test_emitter_positional_only_marker(self):
        params = [
            ParameterSpec(name="self", kind=ParameterKind.PositionalOnly),
            ParameterSpec(name="a"),
        ]
        self.assertEqual(render_parameters(params), ["self", "/", "a"])

    def test_emitter_trailing_positional_only_marker(self):
        params = [ParameterSpec(name="a", kind=ParameterKind.PositionalOnly)]
        self.assertEqual(render_parameters(params), ["a", "/"])

    def test_emitter_keyword_only_marker(self):
        params = [
            ParameterSpec(name="self"),
            ParameterSpec(name="a", kind=ParameterKind.KeywordOnly),
            ParameterSpec(
                name="b", kind=ParameterKind.KeywordOnly, default="1"
            ),
        ]
        self.assertEqual(
            render_parameters(params), ["self", "*", "a", "b=1"]
        )

    def test_emitter_keyword_only_after_varargs(self):
        params = [
            ParameterSpec(name="args", kind=ParameterKind.VarPositional),
            ParameterSpec(name="a", kind=ParameterKind.KeywordOnly),
        ]
        self.assertEqual(render_parameters(params), ["*args", "a"])


class TestGeneratedModule(unittest.TestCase):
    def test_module_import_blocks(self):
        mod = GeneratedModule(local_packages={"app"})
        mod.add_import("orm.validation", "Validation")
        mod.add_import("typing", "Any")
        mod.add_import("app.mixins", "Timestamps")
        mod.add_import(".base", "Base")
        mod.add_import("datetime")
        mod.add_import("typing", "ClassVar")
        mod.add_import("sqlalchemy", alias="sa")

        self.assertEqual(
            mod.render_imports(),
            "from __future__ import annotations\n"
            "\n"
            "import datetime\n"
            "from typing import Any, ClassVar\n"
            "\n"
            "import sqlalchemy as sa\n"
            "from orm.validation import Validation\n"
            "\n"
            "from .base import Base\n"
            "from app.mixins import Timestamps",
        )

    def test_module_long_import_is_wrapped(self):
        mod = GeneratedModule()
        names = [f"VeryLongValidatorName{i}" for i in range(4)]
        for name in names:
            mod.add_import("orm.validation", name)

        imports = mod.render_imports()
        self.assertIn(
            "from orm.validation import (\n"
            + "".join(f"    {n},\n" for n in names)
            + ")",
            imports,
        )

    def test_module_import_alias(self):
        mod = GeneratedModule()
        self.assertEqual(mod.add_import("typing", "Any", "TAny"), "TAny")
        self.assertEqual(mod.add_import("os.path"), "os")
        self.assertTrue(mod.has_global("TAny"))
        self.assertIn("from typing import Any as TAny", mod.render_imports())

    def test_module_bare_relative_import(self):
        with self.assertRaises(ValueError):
            GeneratedModule().add_import("..")

    def test_module_write_block_verbatim(self):
        mod = GeneratedModule()
        with mod.indented():
            mod.write_block('x = """\n  keep\n"""\n\ny = 1', {1, 2})

        self.assertEqual(
            mod.getvalue(),
            "from __future__ import annotations\n\n\n"
            '    x = """\n'
            "  keep\n"
            '"""\n'
            "\n"
            "    y = 1\n",
        )


class TestRender(unittest.TestCase):
    def test_emitter_empty_class(self):
        source = render(ClassInventory(name="Users"), preamble="# hi")

        self.assertEqual(
            source,
            "# hi\n"
            "\n"
            "from __future__ import annotations\n\n\n"
            "class Users:\n"
            "    pass\n"
            "\n\n"
            "__all__ = (\n"
            "    'Users',\n"
            ")\n",
        )

    def test_emitter_docstring_escaping(self):
        inv = ClassInventory(
            name="Users",
            doc=('Say """hi"""', 'C:\\path "quoted"'),
        )
        source = render(inv)
        tree = ast.parse(source)

        self.assertEqual(
            ast.get_docstring(tree.body[1]),
            'Say """hi"""\nC:\\path "quoted"',
        )

    def test_emitter_member_layout(self):
        inv = ClassInventory(
            name="Users",
            namespace="app.models",
            superclass="Model",
            uses=(
                Import(module="orm", name="Model"),
                Import(module="app.mixins", name="Timestamps"),
                Import(module="typing", name="Final"),
            ),
            mixins=("Timestamps",),
            decorators=("final",),
            is_abstract=True,
            constants=(
                ConstantDescriptor(
                    name="LIMIT", value="10", annotation="Final"
                ),
            ),
            properties=(
                PropertyDescriptor(
                    name="id", annotation="int | None", doc=("@Primary",)
                ),
            ),
            methods=(
                MethodDescriptor(
                    name="noop",
                    parameters=(ParameterSpec(name="self"),),
                    body=LiteralBlock(text=""),
                ),
                MethodDescriptor(
                    name="ping",
                    parameters=(ParameterSpec(name="self"),),
                    return_type="str",
                    is_async=True,
                    body=LiteralBlock(text='return "pong"'),
                ),
            ),
        )

        self.assertEqual(
            render(inv),
            "from __future__ import annotations\n"
            "\n"
            "from typing import Final\n"
            "\n"
            "from orm import Model\n"
            "\n"
            "from app.mixins import Timestamps\n"
            "\n\n"
            "@final\n"
            "class Users(Timestamps, Model):\n"
            "    __abstract__ = True\n"
            "    LIMIT: Final = 10\n"
            "\n"
            "    #: @Primary\n"
            "    id: int | None\n"
            "\n"
            "    def noop(self):\n"
            "        pass\n"
            "\n"
            "    async def ping(self) -> str:\n"
            '        return "pong"\n'
            "\n\n"
            "__all__ = (\n"
            "    'Users',\n"
            ")\n",
        )
