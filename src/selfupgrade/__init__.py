"""Self-upgrade for installed Go binaries.

Reads the build metadata embedded in the running executable, installs the
newest published build of its module with ``go install``, and reports the
metadata of the binary that is now on disk.
"""

from selfupgrade.errors import (
    ExecutableNotFoundError,
    InstallCanceledError,
    InstallError,
    InstallerNotFoundError,
    InstallFailedError,
    InstallTimeoutError,
    MetadataReadError,
    UpgradeError,
)
from selfupgrade.gate import SkipReason, check_upgrade
from selfupgrade.metadata import DEVELOPMENT_VERSION, BuildMetadata, GoBuildInfoReader
from selfupgrade.result import UpgradeResult
from selfupgrade.target import build_install_target
from selfupgrade.upgrader import UpgradeHandle, Upgrader, upgrade, upgrade_background

__version__ = "0.1.0"

__all__ = [
    "DEVELOPMENT_VERSION",
    "BuildMetadata",
    "ExecutableNotFoundError",
    "GoBuildInfoReader",
    "InstallCanceledError",
    "InstallError",
    "InstallFailedError",
    "InstallTimeoutError",
    "InstallerNotFoundError",
    "MetadataReadError",
    "SkipReason",
    "UpgradeError",
    "UpgradeHandle",
    "UpgradeResult",
    "Upgrader",
    "build_install_target",
    "check_upgrade",
    "upgrade",
    "upgrade_background",
]
