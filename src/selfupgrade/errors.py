"""Exception hierarchy for self-upgrade attempts.

Collaborators (metadata reader, process runner, path resolver) raise these;
the orchestration layer turns them into values on ``UpgradeResult``.
"""

from __future__ import annotations

from collections.abc import Sequence


class UpgradeError(Exception):
    """Base class for every error raised by selfupgrade."""


class MetadataReadError(UpgradeError):
    """Build metadata could not be read from an executable."""


class ExecutableNotFoundError(MetadataReadError):
    """The path of the running executable could not be resolved."""


class InstallError(UpgradeError):
    """The external install step did not succeed."""


class InstallerNotFoundError(InstallError):
    """The installer toolchain is not available in the environment."""

    def __init__(self, command: str) -> None:
        super().__init__(f"installer not found: {command}")
        self.command = command


class InstallFailedError(InstallError):
    """The installer process exited with a non-zero status."""

    def __init__(self, returncode: int, argv: Sequence[str]) -> None:
        super().__init__(f"{' '.join(argv)} exited with status {returncode}")
        self.returncode = returncode
        self.argv = list(argv)


class InstallCanceledError(InstallError):
    """The install step was cancelled before it finished."""


class InstallTimeoutError(InstallCanceledError):
    """The install step ran past its deadline."""

    def __init__(self, timeout: float) -> None:
        super().__init__(f"install timed out after {timeout:g}s")
        self.timeout = timeout
