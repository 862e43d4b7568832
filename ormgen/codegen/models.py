# SPDX-PackageName: ormgen
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the ormgen contributors.

"""Programmatic entry point for model generation."""

from __future__ import annotations
from typing import (
    TYPE_CHECKING,
    Any,
)

import datetime

from ormgen._internal._codegen._models import ModelGenerator
from ormgen._internal._config import (
    ModelOptions,
    load_config_file,
    make_options,
)

if TYPE_CHECKING:
    import pathlib

    from collections.abc import Callable, Mapping

    from ormgen._internal._reflection import SchemaIntrospector


def generate_model(
    options: ModelOptions | Mapping[str, Any],
    *,
    introspector: SchemaIntrospector | None = None,
    clock: Callable[[], datetime.datetime] = datetime.datetime.now,
) -> pathlib.Path:
    """Generate (or regenerate) the model for one table.

    *options* is either a :class:`ModelOptions` instance or a mapping of
    option names, snake_case or camelCase.  Returns the path of the
    written file.  Raises :exc:`ormgen.errors.OrmgenError` subclasses on
    failure, in which case nothing has been written.
    """
    if not isinstance(options, ModelOptions):
        options = make_options(options)

    generator = ModelGenerator(
        options,
        introspector=introspector,
        interactive=False,
        quiet=True,
        clock=clock,
    )
    return generator.generate()


__all__ = (
    "ModelOptions",
    "generate_model",
    "load_config_file",
    "make_options",
)
