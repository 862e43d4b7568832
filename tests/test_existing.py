# SPDX-PackageName: ormgen
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the ormgen contributors.

from __future__ import annotations

import pathlib
import tempfile
import unittest

from ormgen import errors
from ormgen._internal._codegen._models import (
    BlockDescriptor,
    ClassInventory,
    Import,
    LiteralBlock,
    ParameterKind,
    ParameterSpec,
    PropertyDescriptor,
    merge,
    reflect_existing_class,
    reflect_existing_file,
    render,
)


SOURCE = '''\
"""Module docstring."""

from __future__ import annotations

import typing as t
from typing import Final, final
from orm import Model
from .mixins import Timestamps, SoftDelete as Soft

LOOKUP = {}


@final
class Users(Timestamps, Soft, Model):
    """Users

    Autogenerated by ormgen.
    """

    __abstract__ = True
    MAX_AGE = 120
    VERSION: Final = "1"
    #: Nickname shown in the UI.
    #: Optional.
    nickname: str | None = None
    tags: t.ClassVar[list[str]] = [
        "a",
        "b",
    ]
    counter = 0

    def plain(self, a, /, b: int = 1, *args: str, c, d=2, **kw) -> int:
        return a + b

    async def fetch(self) -> None:
        """Fetch the row.

        Twice.
        """
        # first comment
        await self.reload()

        # trailing comment

    def query(self) -> str:
        sql = """
SELECT *
    FROM users
"""
        return sql

    @property
    def full(self) -> str:
        return self._full

    @full.setter
    def full(self, value: str) -> None:
        self._full = value

    def short(self): return 1
'''


class TestExistingClassReflector(unittest.TestCase):
    def reflect(self, source=SOURCE, name="Users", superclass="Model"):
        with self.assertNoLogs("ormgen", "WARNING"):
            return reflect_existing_class(
                source, name, filename="Users.py", superclass=superclass
            )

    def test_existing_module_level(self):
        snapshot = self.reflect()

        self.assertEqual(
            snapshot.uses,
            (
                Import(module="typing", alias="t"),
                Import(module="typing", name="Final"),
                Import(module="typing", name="final"),
                Import(module="orm", name="Model"),
                Import(module=".mixins", name="Timestamps"),
                Import(module=".mixins", name="SoftDelete", alias="Soft"),
            ),
        )
        self.assertEqual(
            snapshot.prologue,
            (
                BlockDescriptor(
                    names=("LOOKUP",), source=LiteralBlock(text="LOOKUP = {}")
                ),
            ),
        )
        self.assertEqual(snapshot.epilogue, ())

    def test_existing_class_flags(self):
        snapshot = self.reflect()

        self.assertEqual(snapshot.superclass, "Model")
        self.assertEqual(snapshot.mixins, ("Timestamps", "Soft"))
        self.assertEqual(snapshot.decorators, ("final",))
        self.assertTrue(snapshot.is_final)
        self.assertTrue(snapshot.is_abstract)
        self.assertEqual(
            snapshot.doc, ("Users", "", "Autogenerated by ormgen.")
        )

    def test_existing_superclass_fallback(self):
        snapshot = self.reflect(superclass="BaseModel")

        self.assertEqual(snapshot.superclass, "Model")
        self.assertEqual(snapshot.mixins, ("Timestamps", "Soft"))

    def test_existing_constants(self):
        snapshot = self.reflect()

        self.assertEqual(
            [(c.name, c.annotation, c.value) for c in snapshot.constants],
            [("MAX_AGE", None, "120"), ("VERSION", "Final", '"1"')],
        )

    def test_existing_properties(self):
        snapshot = self.reflect()
        props = {p.name: p for p in snapshot.properties}

        self.assertEqual(list(props), ["nickname", "tags", "counter"])
        self.assertEqual(props["nickname"].annotation, "str | None")
        self.assertEqual(props["nickname"].value, "None")
        self.assertEqual(
            props["nickname"].doc,
            ("Nickname shown in the UI.", "Optional."),
        )
        self.assertEqual(props["tags"].value, '[\n    "a",\n    "b",\n]')
        self.assertTrue(props["tags"].is_static)
        self.assertIsNone(props["counter"].annotation)
        self.assertFalse(props["counter"].is_static)

    def test_existing_parameters(self):
        snapshot = self.reflect()
        plain = snapshot.methods[0]

        self.assertEqual(plain.name, "plain")
        self.assertEqual(plain.return_type, "int")
        self.assertEqual(
            plain.parameters,
            (
                ParameterSpec(name="self", kind=ParameterKind.PositionalOnly),
                ParameterSpec(name="a", kind=ParameterKind.PositionalOnly),
                ParameterSpec(name="b", annotation="int", default="1"),
                ParameterSpec(
                    name="args",
                    kind=ParameterKind.VarPositional,
                    annotation="str",
                ),
                ParameterSpec(name="c", kind=ParameterKind.KeywordOnly),
                ParameterSpec(
                    name="d", kind=ParameterKind.KeywordOnly, default="2"
                ),
                ParameterSpec(name="kw", kind=ParameterKind.VarKeyword),
            ),
        )
        self.assertEqual(plain.body, LiteralBlock(text="return a + b"))

    def test_existing_body_comments(self):
        snapshot = self.reflect()
        fetch = snapshot.methods[1]

        self.assertTrue(fetch.is_async)
        self.assertEqual(fetch.doc, ("Fetch the row.", "", "Twice."))
        self.assertEqual(
            fetch.body,
            LiteralBlock(
                text=(
                    "# first comment\n"
                    "await self.reload()\n"
                    "\n"
                    "# trailing comment"
                ),
            ),
        )

    def test_existing_body_multiline_string(self):
        snapshot = self.reflect()
        query = snapshot.methods[2]

        self.assertEqual(
            query.body,
            LiteralBlock(
                text='sql = """\nSELECT *\n    FROM users\n"""\nreturn sql',
                verbatim=frozenset({1, 2, 3}),
            ),
        )

    def test_existing_redefinitions(self):
        snapshot = self.reflect()
        full = snapshot.methods[3]

        self.assertEqual(full.name, "full")
        self.assertEqual(full.decorators, ("property",))
        self.assertEqual(len(full.redefinitions), 1)
        setter = full.redefinitions[0]
        self.assertEqual(setter.decorators, ("full.setter",))
        self.assertEqual(setter.body, LiteralBlock(text="self._full = value"))

    def test_existing_one_line_method(self):
        snapshot = self.reflect()
        short = snapshot.methods[4]

        self.assertEqual(short.name, "short")
        self.assertIsNone(short.return_type)
        self.assertEqual(short.body, LiteralBlock(text="return 1"))

    def test_existing_tabs_are_expanded(self):
        source = "class Users:\n\tdef f(self):\n\t\tif x:\n\t\t\treturn 1\n"
        snapshot = reflect_existing_class(source, "Users")

        self.assertEqual(
            snapshot.methods[0].body,
            LiteralBlock(text="if x:\n        return 1"),
        )

    def test_existing_shallow_comment(self):
        source = (
            "class Users:\n"
            "    def f(self):\n"
            "        x = 1\n"
            "# reset below\n"
            "        return x\n"
        )
        snapshot = reflect_existing_class(source, "Users")

        self.assertEqual(
            snapshot.methods[0].body.text,
            "x = 1\n# reset below\nreturn x",
        )

    def test_existing_missing_class(self):
        with self.assertRaisesRegex(
            errors.ReflectionError, "'Orders' is not defined in Users.py"
        ):
            reflect_existing_class(
                "class Users:\n    pass\n", "Orders", filename="Users.py"
            )

    def test_existing_syntax_error(self):
        with self.assertRaisesRegex(errors.ReflectionError, "Users.py:2"):
            reflect_existing_class(
                "class Users:\n    def f(self)\n", "Users", filename="Users.py"
            )

    def test_existing_unreadable_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = pathlib.Path(tmp) / "Users.py"
            with self.assertRaisesRegex(errors.ReflectionError, "cannot read"):
                reflect_existing_file(path, "Users")

    def test_existing_render_is_stable(self):
        snapshot = self.reflect()
        generated = ClassInventory(name="Users", superclass="Model")

        first = render(merge(generated, snapshot))
        again = reflect_existing_class(first, "Users", superclass="Model")
        second = render(merge(generated, again))

        self.assertEqual(first, second)
        self.assertIn("\nLOOKUP = {}\n\n\n@final\nclass Users(", first)
        self.assertIn(
            '    def query(self) -> str:\n'
            '        sql = """\n'
            'SELECT *\n'
            '    FROM users\n'
            '"""\n'
            '        return sql\n',
            first,
        )
        self.assertIn(
            "    @full.setter\n"
            "    def full(self, value: str) -> None:\n",
            first,
        )
        self.assertIn(
            "    def plain(self, a, /, b: int = 1, *args: str, c, d=2, **kw)"
            " -> int:\n",
            first,
        )

    def test_existing_docstring_only_body_keeps_comments(self):
        source = (
            "class Users:\n"
            "    def hook(self):\n"
            '        """Doc."""\n'
            "        # TODO: fill in\n"
            "\n"
            "    def bare(self):\n"
            '        """Nothing else."""\n'
            "\n"
            "    def after(self):\n"
            "        return 1\n"
        )
        snapshot = self.reflect(source)
        hook, bare, after = snapshot.methods

        self.assertEqual(hook.doc, ("Doc.",))
        self.assertEqual(hook.body, LiteralBlock(text="# TODO: fill in"))
        self.assertEqual(bare.body, LiteralBlock(text=""))
        self.assertEqual(after.body, LiteralBlock(text="return 1"))

        out = render(merge(ClassInventory(name="Users"), snapshot))
        self.assertIn(
            "    def hook(self):\n"
            '        """Doc."""\n'
            "        # TODO: fill in\n"
            "\n"
            "    def bare(self):\n"
            '        """Nothing else."""\n'
            "\n",
            out,
        )


HELPERS_SOURCE = '''\
import logging

from orm import Model

logger = logging.getLogger(__name__)


def _helper(value):
    return value.strip()


class Users(Model):
    # Options for the mapper.
    class Meta:
        ordering = ["id"]

    first, last = "a", "b"

    def log(self):
        logger.info("x")


if __name__ == "__main__":
    print(Users)
'''

HELPERS_RENDERED = '''\
from __future__ import annotations

import logging

from orm import Model


logger = logging.getLogger(__name__)


def _helper(value):
    return value.strip()


class Users(Model):
    # Options for the mapper.
    class Meta:
        ordering = ["id"]

    first, last = "a", "b"

    def log(self):
        logger.info("x")


if __name__ == "__main__":
    print(Users)


__all__ = (
    'Users',
)
'''


class TestPreservedStatements(unittest.TestCase):
    GENERATED = ClassInventory(
        name="Users",
        superclass="Model",
        uses=(Import(module="orm", name="Model"),),
    )

    def reflect(self, source=HELPERS_SOURCE):
        with self.assertNoLogs("ormgen", "WARNING"):
            return reflect_existing_class(source, "Users", superclass="Model")

    def test_existing_module_statements(self):
        snapshot = self.reflect()

        self.assertEqual(
            snapshot.prologue,
            (
                BlockDescriptor(
                    names=("logger",),
                    source=LiteralBlock(
                        text="logger = logging.getLogger(__name__)"
                    ),
                ),
                BlockDescriptor(
                    names=("_helper",),
                    source=LiteralBlock(
                        text="def _helper(value):\n    return value.strip()"
                    ),
                    is_definition=True,
                ),
            ),
        )
        (main,) = snapshot.epilogue
        self.assertEqual(main.names, ())
        self.assertEqual(main.label, "<unnamed>")
        self.assertEqual(
            main.source.text, 'if __name__ == "__main__":\n    print(Users)'
        )

    def test_existing_class_body_statements(self):
        snapshot = self.reflect()
        meta, pair = snapshot.blocks

        self.assertEqual(meta.names, ("Meta",))
        self.assertTrue(meta.is_definition)
        self.assertEqual(
            meta.source.text,
            '# Options for the mapper.\nclass Meta:\n    ordering = ["id"]',
        )
        self.assertEqual(pair.names, ("first", "last"))
        self.assertEqual(pair.source.text, 'first, last = "a", "b"')
        self.assertEqual([m.name for m in snapshot.methods], ["log"])
        self.assertEqual(snapshot.properties, ())

    def test_existing_statements_survive_regeneration(self):
        first = render(merge(self.GENERATED, self.reflect()))
        second = render(merge(self.GENERATED, self.reflect(first)))

        self.assertEqual(first, HELPERS_RENDERED)
        self.assertEqual(second, first)

    def test_existing_statements_lose_to_generated_members(self):
        generated = ClassInventory(
            name="Users",
            superclass="Model",
            uses=(
                Import(module="orm", name="Model"),
                Import(module="logging", name="getLogger", alias="logger"),
            ),
            properties=(PropertyDescriptor(name="last"),),
        )

        merged = merge(generated, self.reflect())

        self.assertEqual(
            [b.names for b in merged.prologue], [("_helper",)]
        )
        self.assertEqual([b.names for b in merged.blocks], [("Meta",)])
        self.assertEqual(len(merged.epilogue), 1)

    def test_existing_statements_sharing_a_line(self):
        source = "class Users:\n    a = b = 1; c = 2\n"
        snapshot = reflect_existing_class(source, "Users")

        self.assertEqual(
            [(b.names, b.source.text) for b in snapshot.blocks],
            [(("a", "b"), "a = b = 1")],
        )
        self.assertEqual(snapshot.properties[0].name, "c")
