# SPDX-PackageName: ormgen
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the ormgen contributors.

"""Naming utilities."""

import functools
import keyword
import re


_WORD_SEP = re.compile(r"[_\-\s]+")
_CAMEL_BOUNDARY = re.compile(
    r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])"
)


@functools.cache
def ident(s: str) -> str:
    if keyword.iskeyword(s):
        return f"{s}_"
    elif s.isidentifier():
        return s
    else:
        result = "".join(
            c if c.isidentifier() or c.isdigit() else "_" for c in s
        )
        if result and result[0].isdigit():
            result = f"_{result}"

        return result


def uncamelize(s: str) -> str:
    """Convert ``SomeName`` or ``someName`` to ``some_name``."""
    return _CAMEL_BOUNDARY.sub("_", s).lower()


def camelize(s: str) -> str:
    """Convert ``some_name`` or ``some-name`` to ``SomeName``."""
    return "".join(p[:1].upper() + p[1:] for p in _WORD_SEP.split(s) if p)


def lower_camelize(s: str) -> str:
    """Convert ``some_name`` to ``someName``."""
    name = camelize(s)
    return name[:1].lower() + name[1:]


def snakify(s: str) -> str:
    """Convert any of ``SomeName``, ``some-name``, ``some name`` to
    ``some_name``."""
    return "_".join(p for p in _WORD_SEP.split(uncamelize(s)) if p)


def entity_name(table: str) -> str:
    """Return the model class name for *table*."""
    return ident(camelize(uncamelize(table)))
