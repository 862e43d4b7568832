# SPDX-PackageName: ormgen
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the ormgen contributors.

from __future__ import annotations

import os
import sys


class Color:
    HEADER = ""
    BLUE = ""
    CYAN = ""
    GREEN = ""
    WARNING = ""
    FAIL = ""
    ENDC = ""
    BOLD = ""
    UNDERLINE = ""


_color: Color | None = None


def use_color() -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("FORCE_COLOR"):
        return True
    return sys.stderr.isatty()


def get_color() -> Color:
    global _color

    if _color is None:
        _color = Color()
        if use_color():
            _color.HEADER = "\033[95m"
            _color.BLUE = "\033[94m"
            _color.CYAN = "\033[96m"
            _color.GREEN = "\033[92m"
            _color.WARNING = "\033[93m"
            _color.FAIL = "\033[91m"
            _color.ENDC = "\033[0m"
            _color.BOLD = "\033[1m"
            _color.UNDERLINE = "\033[4m"

    return _color
