# SPDX-PackageName: ormgen
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the ormgen contributors.

"""Reflection of a previously generated model file.

The previous file is parsed with :mod:`ast` and never imported.  Member
boundaries come from the parse tree; comments and the layout of string
literals are recovered from the source text and :mod:`tokenize`.
"""

from __future__ import annotations
from typing import (
    TYPE_CHECKING,
)

import ast
import dataclasses
import io
import logging
import re
import tokenize

from ormgen import errors
from ormgen._internal._reflection import struct

from ._classmodel import (
    BlockDescriptor,
    ConstantDescriptor,
    Import,
    LiteralBlock,
    MethodDescriptor,
    ParameterKind,
    ParameterSpec,
    PropertyDescriptor,
)

if TYPE_CHECKING:
    import pathlib

    from collections.abc import Sequence


logger = logging.getLogger(__name__)

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


@struct
class ExistingClassSnapshot:
    name: str
    uses: tuple[Import, ...] = ()
    superclass: str | None = None
    mixins: tuple[str, ...] = ()
    decorators: tuple[str, ...] = ()
    is_abstract: bool = False
    is_final: bool = False
    doc: tuple[str, ...] = ()
    constants: tuple[ConstantDescriptor, ...] = ()
    properties: tuple[PropertyDescriptor, ...] = ()
    methods: tuple[MethodDescriptor, ...] = ()
    blocks: tuple[BlockDescriptor, ...] = ()
    prologue: tuple[BlockDescriptor, ...] = ()
    epilogue: tuple[BlockDescriptor, ...] = ()


def multiline_string_rows(source: str) -> frozenset[int]:
    """Return the 1-based numbers of the lines that continue a string
    token started on an earlier line."""
    rows: set[int] = set()
    readline = io.StringIO(source).readline
    try:
        for tok in tokenize.generate_tokens(readline):
            (start_row, _), (end_row, _) = tok.start, tok.end
            if end_row > start_row:
                rows.update(range(start_row + 1, end_row + 1))
    except (tokenize.TokenError, SyntaxError) as e:
        raise errors.ReflectionError(f"cannot tokenize source: {e}") from e
    return frozenset(rows)


def _leading_ws(line: str) -> int:
    return len(line) - len(line.lstrip())


def _is_comment(line: str) -> bool:
    return line.lstrip().startswith("#")


def _last_name(node: ast.expr) -> str | None:
    if isinstance(node, ast.Subscript):
        node = node.value
    if isinstance(node, ast.Name):
        return node.id
    elif isinstance(node, ast.Attribute):
        return node.attr
    elif isinstance(node, ast.Call):
        return _last_name(node.func)
    else:
        return None


_DEFINITIONS = (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)

# Nodes whose bodies bind names in a scope of their own.
_SCOPES = (
    *_DEFINITIONS,
    ast.Lambda,
    ast.ListComp,
    ast.SetComp,
    ast.DictComp,
    ast.GeneratorExp,
)


def _first_row(node: ast.stmt) -> int:
    if isinstance(node, _DEFINITIONS) and node.decorator_list:
        return node.decorator_list[0].lineno
    return node.lineno


def _body_statements(
    fn: ast.FunctionDef | ast.AsyncFunctionDef,
) -> list[ast.stmt]:
    if ast.get_docstring(fn, clean=False) is not None:
        return fn.body[1:]
    return fn.body


def _bound_names(node: ast.stmt) -> tuple[str, ...]:
    """Return the names *node* binds in the scope it appears in."""
    names: dict[str, None] = {}

    def visit(n: ast.AST) -> None:
        if isinstance(n, _DEFINITIONS):
            names[n.name] = None
        elif isinstance(n, ast.Name) and isinstance(n.ctx, ast.Store):
            names[n.id] = None
        elif isinstance(n, ast.alias) and n.name != "*":
            names[n.asname or n.name.partition(".")[0]] = None
        if not isinstance(n, _SCOPES):
            for child in ast.iter_child_nodes(n):
                visit(child)

    visit(node)
    return tuple(names)


class _ClassReflector:
    def __init__(
        self,
        source: str,
        class_name: str,
        *,
        filename: str,
        superclass: str | None,
    ) -> None:
        self._source = source
        self._class_name = class_name
        self._filename = filename
        self._superclass = superclass
        self._lines = _LINE_BREAK.split(source)
        self._string_rows = multiline_string_rows(source)

    def _where(self, node: ast.AST) -> str:
        return f"{self._filename}:{getattr(node, 'lineno', '?')}"

    def _segment(self, node: ast.AST, col: int) -> str:
        """Return the source text of *node* with the indentation of its
        continuation lines made relative to *col*."""
        text = ast.get_source_segment(self._source, node)
        if text is None:
            raise errors.ReflectionError(
                f"{self._where(node)}: cannot locate source text"
            )
        first_row: int = node.lineno  # type: ignore [attr-defined]
        lines = text.split("\n")
        for i in range(1, len(lines)):
            line = lines[i]
            if first_row + i in self._string_rows:
                continue
            lines[i] = line[min(col, _leading_ws(line)) :]
        return "\n".join(lines)

    def _doc_comments(self, node: ast.stmt) -> tuple[str, ...]:
        doc: list[str] = []
        row = node.lineno - 1
        while row >= 1:
            line = self._lines[row - 1].strip()
            if not line.startswith("#:"):
                break
            doc.append(line[2:].removeprefix(" "))
            row -= 1
        return tuple(reversed(doc))

    def reflect(self) -> ExistingClassSnapshot:
        try:
            tree = ast.parse(self._source, filename=self._filename)
        except SyntaxError as e:
            raise errors.ReflectionError(
                f"{self._filename}:{e.lineno}: {e.msg}"
            ) from e

        uses: list[Import] = []
        cls: ast.ClassDef | None = None
        prologue: list[BlockDescriptor] = []
        epilogue: list[BlockDescriptor] = []
        prev_end = 0
        for i, node in enumerate(tree.body):
            if isinstance(node, ast.Import):
                uses.extend(
                    Import(module=alias.name, alias=alias.asname)
                    for alias in node.names
                )
            elif isinstance(node, ast.ImportFrom):
                if node.module != "__future__":
                    module = "." * node.level + (node.module or "")
                    uses.extend(
                        Import(
                            module=module, name=alias.name, alias=alias.asname
                        )
                        for alias in node.names
                    )
            elif (
                isinstance(node, ast.ClassDef)
                and node.name == self._class_name
                and cls is None
            ):
                cls = node
            elif self._is_exports(node) or (i == 0 and self._is_doc(node)):
                pass
            else:
                # The first statement of a file is never given the
                # comments above it: those are the preamble.
                block = self._reflect_block(node, prev_end if i else None)
                (prologue if cls is None else epilogue).append(block)

            if node is cls:
                prev_end = self._claimed_end(cls.body[-1])
            else:
                prev_end = node.end_lineno or node.lineno

        if cls is None:
            raise errors.ReflectionError(
                f"class {self._class_name!r} is not defined "
                f"in {self._filename}"
            )

        snapshot = self._reflect_class(cls, uses)
        return dataclasses.replace(
            snapshot, prologue=tuple(prologue), epilogue=tuple(epilogue)
        )

    def _is_exports(self, node: ast.stmt) -> bool:
        if isinstance(node, ast.Assign):
            targets = node.targets
        elif isinstance(node, (ast.AnnAssign, ast.AugAssign)):
            targets = [node.target]
        else:
            return False
        return all(
            isinstance(t, ast.Name) and t.id == "__all__" for t in targets
        )

    def _is_doc(self, node: ast.stmt) -> bool:
        return (
            isinstance(node, ast.Expr)
            and isinstance(node.value, ast.Constant)
            and isinstance(node.value.value, str)
        )

    def _reflect_class(
        self,
        cls: ast.ClassDef,
        uses: list[Import],
    ) -> ExistingClassSnapshot:
        col = cls.col_offset
        bases = [self._segment(b, col) for b in cls.bases]
        for kw in cls.keywords:
            logger.warning(
                "%s: dropping class keyword %s",
                self._where(cls),
                self._segment(kw, col),
            )

        superclass = None
        if self._superclass is not None and self._superclass in bases:
            superclass = self._superclass
        elif bases:
            superclass = bases[-1]
        mixins = tuple(b for b in bases if b != superclass)

        decorators = tuple(self._segment(d, col) for d in cls.decorator_list)
        is_final = any(_last_name(d) == "final" for d in cls.decorator_list)

        docstring = ast.get_docstring(cls, clean=True)
        body = cls.body
        prev_end = cls.lineno
        if docstring is not None:
            body = body[1:]
            prev_end = cls.body[0].end_lineno or prev_end

        is_abstract = False
        constants: list[ConstantDescriptor] = []
        properties: list[PropertyDescriptor] = []
        methods: dict[str, list[MethodDescriptor]] = {}
        blocks: list[BlockDescriptor] = []

        for node in body:
            if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
                methods.setdefault(node.name, []).append(
                    self._reflect_method(node)
                )
            elif (
                isinstance(node, ast.Assign)
                and len(node.targets) == 1
                and isinstance(node.targets[0], ast.Name)
            ):
                name = node.targets[0].id
                value = self._segment(node.value, node.col_offset)
                doc = self._doc_comments(node)
                if name == "__abstract__":
                    is_abstract = (
                        isinstance(node.value, ast.Constant)
                        and node.value.value is True
                    )
                elif name.isupper():
                    constants.append(
                        ConstantDescriptor(name=name, value=value, doc=doc)
                    )
                else:
                    properties.append(
                        PropertyDescriptor(name=name, value=value, doc=doc)
                    )
            elif isinstance(node, ast.AnnAssign) and isinstance(
                node.target, ast.Name
            ):
                name = node.target.id
                annotation = self._segment(node.annotation, node.col_offset)
                value = (
                    self._segment(node.value, node.col_offset)
                    if node.value is not None
                    else None
                )
                doc = self._doc_comments(node)
                if value is not None and (
                    name.isupper() or _last_name(node.annotation) == "Final"
                ):
                    constants.append(
                        ConstantDescriptor(
                            name=name,
                            value=value,
                            annotation=annotation,
                            doc=doc,
                        )
                    )
                else:
                    properties.append(
                        PropertyDescriptor(
                            name=name,
                            annotation=annotation,
                            value=value,
                            doc=doc,
                        )
                    )
            elif not isinstance(node, ast.Pass):
                # Nested classes and any other statement are kept as
                # written.
                blocks.append(self._reflect_block(node, prev_end))
            prev_end = self._claimed_end(node)

        return ExistingClassSnapshot(
            name=cls.name,
            uses=tuple(uses),
            superclass=superclass,
            mixins=mixins,
            decorators=decorators,
            is_abstract=is_abstract,
            is_final=is_final,
            doc=tuple(docstring.split("\n")) if docstring else (),
            constants=tuple(constants),
            properties=tuple(properties),
            methods=tuple(
                dataclasses.replace(defs[0], redefinitions=tuple(defs[1:]))
                for defs in methods.values()
            ),
            blocks=tuple(blocks),
        )

    def _reflect_block(
        self,
        node: ast.stmt,
        limit: int | None,
    ) -> BlockDescriptor:
        """Reflect *node* as a block of source text, together with the
        comments between line *limit* and the statement."""
        end = node.end_lineno or node.lineno
        if self._shares_line(node):
            text = self._segment(node, node.col_offset)
            source = LiteralBlock(
                text=text,
                verbatim=frozenset(
                    i
                    for i in range(text.count("\n") + 1)
                    if node.lineno + i in self._string_rows
                ),
            )
        else:
            start = _first_row(node)
            if limit is not None:
                start = self._comments_above(start, limit)
            source = self._normalize(start, end)

        return BlockDescriptor(
            names=_bound_names(node),
            source=source,
            is_definition=isinstance(node, _DEFINITIONS),
        )

    def _shares_line(self, node: ast.stmt) -> bool:
        """Return True if other code sits on the first or last line of
        *node*."""
        head = self._lines[_first_row(node) - 1][: node.col_offset]
        last = self._lines[(node.end_lineno or node.lineno) - 1]
        tail = last[node.end_col_offset :].strip()
        return bool(head.strip()) or (
            bool(tail) and not tail.startswith("#")
        )

    def _comments_above(self, row: int, limit: int) -> int:
        """Move the start of a block at *row* up over the comment lines
        that follow line *limit*."""
        start = row
        while start - 1 > limit:
            line = self._lines[start - 2]
            if line.strip() and not _is_comment(line):
                break
            start -= 1
        while start < row and not self._lines[start - 1].strip():
            start += 1
        return start

    def _claimed_end(self, node: ast.stmt) -> int:
        """Return the last line reflected as part of class member
        *node*."""
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
            return self._body_end(node, _body_statements(node))
        return node.end_lineno or node.lineno

    def _reflect_parameters(
        self,
        fn: ast.FunctionDef | ast.AsyncFunctionDef,
    ) -> tuple[ParameterSpec, ...]:
        args = fn.args
        col = fn.col_offset

        def spec(
            arg: ast.arg,
            kind: ParameterKind,
            default: ast.expr | None = None,
        ) -> ParameterSpec:
            return ParameterSpec(
                name=arg.arg,
                kind=kind,
                annotation=(
                    self._segment(arg.annotation, col)
                    if arg.annotation is not None
                    else None
                ),
                default=(
                    self._segment(default, col)
                    if default is not None
                    else None
                ),
            )

        positional = [
            *((a, ParameterKind.PositionalOnly) for a in args.posonlyargs),
            *((a, ParameterKind.PositionalOrKeyword) for a in args.args),
        ]
        defaults: list[ast.expr | None] = [None] * (
            len(positional) - len(args.defaults)
        )
        defaults.extend(args.defaults)

        result = [
            spec(arg, kind, default)
            for (arg, kind), default in zip(positional, defaults, strict=True)
        ]
        if args.vararg is not None:
            result.append(spec(args.vararg, ParameterKind.VarPositional))
        result.extend(
            spec(arg, ParameterKind.KeywordOnly, default)
            for arg, default in zip(
                args.kwonlyargs, args.kw_defaults, strict=True
            )
        )
        if args.kwarg is not None:
            result.append(spec(args.kwarg, ParameterKind.VarKeyword))
        return tuple(result)

    def _reflect_method(
        self,
        fn: ast.FunctionDef | ast.AsyncFunctionDef,
    ) -> MethodDescriptor:
        col = fn.col_offset
        docstring = ast.get_docstring(fn, clean=True)
        stmts = _body_statements(fn)

        return MethodDescriptor(
            name=fn.name,
            parameters=self._reflect_parameters(fn),
            return_type=(
                self._segment(fn.returns, col)
                if fn.returns is not None
                else None
            ),
            decorators=tuple(
                self._segment(d, col) for d in fn.decorator_list
            ),
            doc=tuple(docstring.split("\n")) if docstring else (),
            body=self._extract_body(fn, stmts),
            is_async=isinstance(fn, ast.AsyncFunctionDef),
        )

    def _extract_body(
        self,
        fn: ast.FunctionDef | ast.AsyncFunctionDef,
        stmts: Sequence[ast.stmt],
    ) -> LiteralBlock:
        end = self._body_end(fn, stmts)
        if not stmts:
            # Only a docstring, perhaps followed by comments.
            start = (fn.body[-1].end_lineno or fn.lineno) + 1
            if end < start:
                return LiteralBlock(text="")
            return self._normalize(start, end)

        first = stmts[0]
        if self._on_header_line(first):
            return LiteralBlock(
                text="\n".join(
                    self._segment(s, s.col_offset) for s in stmts
                )
            )

        # Comments right after the header (or the docstring) belong to
        # the body.
        limit = fn.body[0].end_lineno if len(stmts) < len(fn.body) else None
        limit = limit if limit is not None else fn.lineno
        start = self._comments_above(_first_row(first), limit)

        return self._normalize(start, end)

    def _on_header_line(self, first: ast.stmt) -> bool:
        line = self._lines[_first_row(first) - 1]
        return bool(line[: first.col_offset].strip())

    def _body_end(
        self,
        fn: ast.FunctionDef | ast.AsyncFunctionDef,
        stmts: Sequence[ast.stmt],
    ) -> int:
        """Return the last line of the body of *fn*, including trailing
        comments indented at least as deep as the body."""
        if not stmts:
            last = fn.body[-1]
            indent = fn.col_offset + 1
        elif self._on_header_line(stmts[0]):
            return stmts[-1].end_lineno or stmts[-1].lineno
        else:
            last = stmts[-1]
            indent = stmts[0].col_offset

        end = last.end_lineno or last.lineno
        row = end + 1
        while row <= len(self._lines):
            line = self._lines[row - 1]
            if not line.strip():
                row += 1
            elif _is_comment(line) and _leading_ws(
                line.expandtabs()
            ) >= indent:
                end = row
                row += 1
            else:
                break
        return end

    def _normalize(self, start: int, end: int) -> LiteralBlock:
        rows = range(start, end + 1)
        verbatim = {
            i for i, row in enumerate(rows) if row in self._string_rows
        }

        lines = []
        for i, row in enumerate(rows):
            line = self._lines[row - 1]
            if i not in verbatim:
                ws = _leading_ws(line)
                line = line[:ws].expandtabs() + line[ws:]
                line = line.rstrip()
            lines.append(line)

        code_indents = [
            _leading_ws(line)
            for i, line in enumerate(lines)
            if i not in verbatim and line.strip() and not _is_comment(line)
        ]
        if not code_indents:
            code_indents = [
                _leading_ws(line)
                for i, line in enumerate(lines)
                if i not in verbatim and line.strip()
            ]
        indent = min(code_indents, default=0)

        for i, line in enumerate(lines):
            if i in verbatim:
                continue
            lines[i] = line[min(indent, _leading_ws(line)) :]

        return LiteralBlock(
            text="\n".join(lines),
            verbatim=frozenset(verbatim),
        )


def reflect_existing_class(
    source: str,
    class_name: str,
    *,
    filename: str = "<unknown>",
    superclass: str | None = None,
) -> ExistingClassSnapshot:
    """Reflect the members of *class_name* defined in *source*.

    *superclass* is the name the current configuration expects as the
    base class; every other base is treated as a mixin.
    """
    return _ClassReflector(
        source,
        class_name,
        filename=filename,
        superclass=superclass,
    ).reflect()


def reflect_existing_file(
    path: pathlib.Path,
    class_name: str,
    *,
    superclass: str | None = None,
) -> ExistingClassSnapshot:
    try:
        source = path.read_text(encoding="utf8")
    except (OSError, UnicodeDecodeError) as e:
        raise errors.ReflectionError(f"cannot read {str(path)!r}: {e}") from e

    snapshot = reflect_existing_class(
        source, class_name, filename=str(path), superclass=superclass
    )
    logger.debug(
        "reflected %s from %s: %d constant(s), %d property(ies), "
        "%d method(s), %d other statement(s)",
        class_name,
        path,
        len(snapshot.constants),
        len(snapshot.properties),
        len(snapshot.methods),
        len(snapshot.blocks) + len(snapshot.prologue) + len(snapshot.epilogue),
    )
    return snapshot
