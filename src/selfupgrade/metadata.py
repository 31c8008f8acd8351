"""Build metadata of Go binaries.

The default reader shells out to ``go version -m <binary>`` which prints the
build information embedded in the executable::

    /home/me/go/bin/tool: go1.22.1
            path    example.com/tool/cmd/tool
            mod     example.com/tool    v1.4.0  h1:abc=
            dep     golang.org/x/sys    v0.18.0 h1:def=
"""

from __future__ import annotations

import subprocess  # nosec B404
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Protocol

from selfupgrade.errors import MetadataReadError
from selfupgrade.executable import current_executable_path
from selfupgrade.logging import get_logger

log = get_logger("selfupgrade.metadata")

# Version reported by binaries built from a local checkout.
DEVELOPMENT_VERSION = "(devel)"

DEFAULT_VERSION_COMMAND: tuple[str, ...] = ("go", "version", "-m")


@dataclass(frozen=True)
class BuildMetadata:
    """Module identity and version of a build."""

    module: str
    version: str

    def to_dict(self) -> dict[str, str]:
        return {"module": self.module, "version": self.version}


class MetadataReader(Protocol):
    """Reads build metadata for the running binary or any executable."""

    def read_current(self) -> BuildMetadata | None: ...

    def read_from_path(self, path: str) -> BuildMetadata: ...


def parse_version_output(text: str) -> BuildMetadata:
    """Parse ``go version -m`` output into ``BuildMetadata``.

    A binary without module information (GOPATH builds) yields an empty
    module and version.
    """
    lines = text.splitlines()
    if not lines or ": go" not in lines[0]:
        raise MetadataReadError("no Go build information in version output")

    for line in lines[1:]:
        fields = line.split()
        if len(fields) >= 3 and fields[0] == "mod":
            return BuildMetadata(module=fields[1], version=fields[2])
    return BuildMetadata(module="", version="")


class GoBuildInfoReader:
    """``MetadataReader`` backed by the Go toolchain."""

    def __init__(
        self,
        version_command: Sequence[str] = DEFAULT_VERSION_COMMAND,
        executable_resolver: Callable[[], str] = current_executable_path,
    ) -> None:
        self._version_command = list(version_command)
        self._resolve_executable = executable_resolver

    def read_current(self) -> BuildMetadata | None:
        try:
            return self.read_from_path(self._resolve_executable())
        except MetadataReadError as exc:
            log.debug("build_info_unavailable", error=str(exc))
            return None

    def read_from_path(self, path: str) -> BuildMetadata:
        argv = [*self._version_command, path]
        try:
            proc = subprocess.run(  # nosec B603
                argv,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:
            raise MetadataReadError(f"cannot run {argv[0]}: {exc}") from exc

        if proc.returncode != 0:
            log.debug(
                "build_info_read_failed",
                path=path,
                returncode=proc.returncode,
                stderr=proc.stderr[:500],
            )
            raise MetadataReadError(f"cannot read build info from {path}: {proc.stderr.strip()}")

        return parse_version_output(proc.stdout)
