# SPDX-PackageName: ormgen
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the ormgen contributors.

from __future__ import annotations

import contextlib
import os
import pathlib
import tempfile


def atomic_write(
    path: pathlib.Path,
    data: bytes | str,
    *,
    encoding: str = "utf8",
) -> None:
    """Write *data* to *path* so that readers observe either the old
    contents or the new contents, never a mix of both.

    The data goes to a temporary file in the destination directory which
    then replaces *path*.  Raises OSError on failure, in which case *path*
    is left untouched.
    """
    if isinstance(data, str):
        data = data.encode(encoding)

    fd, tmp_name = tempfile.mkstemp(
        prefix=f".~{path.name}.",
        suffix=".tmp",
        dir=path.parent,
    )
    tmp_path = pathlib.Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        if path.exists():
            mode = path.stat().st_mode
        else:
            umask = os.umask(0)
            os.umask(umask)
            mode = 0o666 & ~umask
        os.chmod(tmp_path, mode)
        os.replace(tmp_path, path)
    except BaseException:
        with contextlib.suppress(OSError):
            tmp_path.unlink()
        raise
