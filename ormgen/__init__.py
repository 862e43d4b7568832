# SPDX-PackageName: ormgen
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the ormgen contributors.

"""Generate Python model classes from database tables."""

from .errors import (
    ConfigurationError,
    OrmgenError,
    ReflectionError,
    SchemaError,
    WriteError,
)

from .codegen.models import (
    ModelOptions,
    generate_model,
    load_config_file,
    make_options,
)


__version__ = "0.1.0"

__all__ = (
    "ConfigurationError",
    "ModelOptions",
    "OrmgenError",
    "ReflectionError",
    "SchemaError",
    "WriteError",
    "generate_model",
    "load_config_file",
    "make_options",
)
