# SPDX-PackageName: ormgen
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the ormgen contributors.


from __future__ import annotations
from typing import (
    TYPE_CHECKING,
    TextIO,
)

import io
import sys
import typing

from ormgen import errors
from ormgen._internal._color import get_color
from ormgen._internal._reflection import SQLAlchemyIntrospector

if TYPE_CHECKING:
    from ormgen._internal._config import ModelOptions
    from ormgen._internal._reflection import SchemaIntrospector


C = get_color()


class AbstractCodeGenerator:
    def __init__(
        self,
        options: ModelOptions,
        *,
        introspector: SchemaIntrospector | None = None,
        interactive: bool = True,
        quiet: bool = False,
    ):
        self._options = options
        self._quiet = quiet

        self._interactive = interactive
        self._stderr: TextIO
        if not interactive:
            self._stderr = io.StringIO()
        else:
            self._stderr = sys.stderr

        self._introspector = introspector

    @property
    def introspector(self) -> SchemaIntrospector:
        if self._introspector is None:
            url = self._options.database_url
            if not url:
                raise errors.ConfigurationError(
                    "Database configuration cannot be loaded: "
                    "set url in the [database] section of the config "
                    "file or pass --dsn"
                )
            self._introspector = SQLAlchemyIntrospector.from_url(url)
        return self._introspector

    def get_error_output(self) -> str:
        if isinstance(self._stderr, io.StringIO):
            return self._stderr.getvalue()
        else:
            raise RuntimeError("Cannot get error output in non-silent mode")

    def abort(self, code: int) -> typing.NoReturn:
        if self._interactive:
            sys.exit(code)
        else:
            raise RuntimeError(f"aborting codegen, code={code}")

    def print_msg(self, msg: str) -> None:
        print(msg, file=self._stderr)

    def print_error(self, msg: str) -> None:
        print(
            f"{C.BOLD}{C.FAIL}error: {C.ENDC}{C.BOLD}{msg}{C.ENDC}",
            file=self._stderr,
        )
