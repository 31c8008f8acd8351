"""Decide whether an upgrade attempt should run at all."""

from __future__ import annotations

from enum import StrEnum

from selfupgrade.metadata import DEVELOPMENT_VERSION, BuildMetadata


class SkipReason(StrEnum):
    """Why an upgrade attempt was skipped without installing anything."""

    METADATA_UNAVAILABLE = "metadata_unavailable"
    DEVELOPMENT_BUILD = "development_build"
    MISSING_MODULE = "missing_module"


def check_upgrade(
    info: BuildMetadata | None,
    development_version: str = DEVELOPMENT_VERSION,
) -> SkipReason | None:
    """Return the reason to skip, or None when the install should proceed."""
    if info is None:
        return SkipReason.METADATA_UNAVAILABLE
    if info.version == development_version:
        return SkipReason.DEVELOPMENT_BUILD
    if not info.module:
        return SkipReason.MISSING_MODULE
    return None
