# SPDX-PackageName: ormgen
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the ormgen contributors.

from ormgen._internal._testbase import *  # noqa: F403
from ormgen._internal._testbase import __all__  # noqa: F401
