"""Resolve the file path of the running executable."""

from __future__ import annotations

import shutil
import sys
from collections.abc import Callable
from pathlib import Path

from selfupgrade.errors import ExecutableNotFoundError


def current_executable_path() -> str:
    """Return the absolute path of the executable this process was started from.

    Bundled applications report their own binary through ``sys.executable``;
    otherwise the launched script is looked up the way the shell found it.
    After an in-place install the returned path may already point at the new
    binary.
    """
    if getattr(sys, "frozen", False):
        return str(Path(sys.executable).resolve())

    argv0 = sys.argv[0] if sys.argv else ""
    if not argv0:
        raise ExecutableNotFoundError("process was started without argv[0]")

    candidate = Path(argv0)
    if not candidate.is_file():
        found = shutil.which(argv0)
        if found is None:
            raise ExecutableNotFoundError(f"cannot locate executable {argv0!r}")
        candidate = Path(found)
    return str(candidate.resolve())


def fixed_executable(path: str) -> Callable[[], str]:
    """Return a resolver that always answers *path*."""

    def resolve() -> str:
        if not Path(path).is_file():
            raise ExecutableNotFoundError(f"executable not found: {path}")
        return str(Path(path).resolve())

    return resolve
