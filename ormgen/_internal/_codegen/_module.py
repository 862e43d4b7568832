# SPDX-PackageName: ormgen
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the ormgen contributors.


from __future__ import annotations
from typing import (
    TYPE_CHECKING,
    TypeAlias,
)

import contextlib
import enum
import io
import sys
import textwrap
from collections import defaultdict

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping
    from collections.abc import Set as AbstractSet


MAX_LINE_LENGTH = 79


class _ImportSource(enum.Enum):
    std = enum.auto()
    lib = enum.auto()
    local = enum.auto()


class _ImportKind(enum.Enum):
    names = enum.auto()
    self = enum.auto()


_Imports: TypeAlias = defaultdict[
    _ImportSource,
    defaultdict[_ImportKind, defaultdict[str, set[str]]],
]


def _new_imports_map() -> _Imports:
    return defaultdict(lambda: defaultdict(lambda: defaultdict(set)))


def _is_all_dots(s: str) -> bool:
    return bool(s) and all(c == "." for c in s)


class GeneratedModule:
    INDENT = " " * 4

    def __init__(
        self,
        preamble: str | None = None,
        *,
        local_packages: Iterable[str] = (),
    ) -> None:
        self._comment_preamble = preamble
        self._local_packages = frozenset(local_packages)
        self._indent_level = 0
        self._code: list[str] = []
        self._imports: _Imports = _new_imports_map()
        self._globals: set[str] = set()
        self._exports: set[str] = set()

    def has_global(self, name: str) -> bool:
        return name in self._globals

    def _get_import_source(self, module: str) -> _ImportSource:
        top = module.partition(".")[0]
        if module.startswith(".") or top in self._local_packages:
            return _ImportSource.local
        elif top in sys.stdlib_module_names or top == "__future__":
            return _ImportSource.std
        else:
            return _ImportSource.lib

    def add_import(
        self,
        module: str,
        name: str | None = None,
        alias: str | None = None,
    ) -> str:
        """Record an import statement exactly as given and return the
        name it binds in the module namespace."""
        if _is_all_dots(module) and name is None:
            raise ValueError(
                f"add_import: bare relative imports are "
                f"not supported: {module!r}"
            )

        source = self._get_import_source(module)
        if name is None:
            self._imports[source][_ImportKind.self][module].add(alias or "")
            bound = alias or module.partition(".")[0]
        else:
            if alias and alias != name:
                entry = f"{name} as {alias}"
            else:
                entry = name
            self._imports[source][_ImportKind.names][module].add(entry)
            bound = alias or name

        self._globals.add(bound)
        return bound

    def export(self, *names: str) -> None:
        self._exports.update(names)

    def current_indentation(self, extra: int = 0) -> str:
        return self.INDENT * (self._indent_level + extra)

    @contextlib.contextmanager
    def indented(self) -> Iterator[None]:
        self._indent_level += 1
        try:
            yield
        finally:
            self._indent_level -= 1

    def write(self, text: str = "") -> None:
        chunk = textwrap.indent(text, prefix=self.INDENT * self._indent_level)
        self._code.append(chunk)

    def write_block(
        self,
        text: str,
        verbatim: AbstractSet[int] = frozenset(),
    ) -> None:
        """Write a multi-line block at the current indentation, leaving
        the lines listed in *verbatim* untouched."""
        prefix = self.INDENT * self._indent_level
        for i, line in enumerate(text.split("\n")):
            if i in verbatim or not line.strip():
                self._code.append(line if i in verbatim else "")
            else:
                self._code.append(f"{prefix}{line}")

    def get_comment_preamble(self) -> str | None:
        return self._comment_preamble

    def render_exports(self) -> str:
        if self._exports:
            return "\n".join(
                [
                    "__all__ = (",
                    *(f"    {ex!r}," for ex in sorted(self._exports)),
                    ")",
                ]
            )
        else:
            return ""

    def render_imports(self) -> str:
        sections = ["from __future__ import annotations"]
        sections.extend(self._render_imports(self._imports))
        return "\n\n".join(filter(None, sections))

    def _render_imports(self, imports: _Imports) -> list[str]:
        blocks = []
        for source in _ImportSource.__members__.values():
            block = self._render_imports_source_block(imports[source])
            if block:
                blocks.append(block)
        return blocks

    def _render_imports_source_block(
        self,
        imports: Mapping[_ImportKind, Mapping[str, set[str]]],
    ) -> str:
        output = []
        self_imports = imports[_ImportKind.self]
        for modname in sorted(self_imports):
            for alias in sorted(self_imports[modname]):
                if alias:
                    import_line = f"import {modname} as {alias}"
                else:
                    import_line = f"import {modname}"
                output.append(import_line)

        name_imports = imports[_ImportKind.names]
        for modname, names in sorted(name_imports.items()):
            if not names:
                continue
            import_line = f"from {modname} import "
            names_list = sorted(names)
            names_part = ", ".join(names_list)
            if len(import_line) + len(names_part) > MAX_LINE_LENGTH:
                import_line += "(\n    " + ",\n    ".join(names_list) + ",\n)"
            else:
                import_line += names_part
            output.append(import_line)

        return "\n".join(output)

    def output(self, out: io.TextIOBase) -> None:
        preamble = self.get_comment_preamble()
        if preamble:
            out.write(preamble)
            out.write("\n\n")
        out.write(self.render_imports())
        if self._code:
            out.write("\n\n\n")
            out.write("\n".join(self._code))
        exports = self.render_exports()
        if exports:
            out.write("\n\n\n")
            out.write(exports)
        out.write("\n")

    def getvalue(self) -> str:
        buf = io.StringIO()
        self.output(buf)
        return buf.getvalue()

    def format_list(
        self,
        tpl: str,
        values: list[str],
        *,
        extra_indent: int = 0,
        separator: str = ", ",
        trailing_separator: bool = True,
    ) -> str:
        list_string = separator.join(values)
        output_string = tpl.format(list=list_string)
        line_length = len(output_string) + len(
            self.current_indentation(extra_indent)
        )
        if line_length > MAX_LINE_LENGTH and values:
            strip_sep = separator.rstrip()
            line_sep = f"{strip_sep}\n{self.INDENT}"
            list_string = line_sep.join(values)
            if trailing_separator:
                list_string += strip_sep
            list_string = f"\n{self.INDENT}{list_string}\n"
            output_string = tpl.format(list=list_string)

        return output_string
