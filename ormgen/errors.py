# SPDX-PackageName: ormgen
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the ormgen contributors.

"""Exceptions raised by ormgen.

Every error is terminal for the build that raised it: nothing is retried
and no output file is written.
"""


class OrmgenError(Exception):
    """Base class for all ormgen errors."""


class ConfigurationError(OrmgenError):
    """A required option is missing or the database settings are invalid."""


class SchemaError(OrmgenError):
    """The target table is absent from the database schema."""


class ReflectionError(OrmgenError):
    """The previously generated class could not be read back."""


class WriteError(OrmgenError):
    """The model file cannot or must not be written."""


__all__ = (
    "ConfigurationError",
    "OrmgenError",
    "ReflectionError",
    "SchemaError",
    "WriteError",
)
