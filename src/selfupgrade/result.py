"""Outcome of an upgrade attempt."""

from __future__ import annotations

import threading
from collections.abc import Callable
from enum import Enum
from types import TracebackType
from typing import Any, Generic, TypeVar

from selfupgrade.errors import MetadataReadError
from selfupgrade.executable import current_executable_path
from selfupgrade.gate import SkipReason
from selfupgrade.metadata import DEVELOPMENT_VERSION, BuildMetadata, MetadataReader

T = TypeVar("T")


class _CellState(Enum):
    UNRESOLVED = "unresolved"
    RESOLVING = "resolving"
    RESOLVED = "resolved"


class OnceCell(Generic[T]):
    """Value computed at most once, shared by every thread that asks for it.

    The first caller of ``get`` or ``resolve`` runs the compute function; concurrent callers
    block until it finishes. A raised exception is cached like a value:
    ``resolve`` hands it back next to the value, ``get`` re-raises it with the
    traceback it had when it was first caught.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._state = _CellState.UNRESOLVED
        self._value: T | None = None
        self._error: Exception | None = None
        self._traceback: TracebackType | None = None

    @property
    def resolved(self) -> bool:
        with self._cond:
            return self._state is _CellState.RESOLVED

    def get(self, compute: Callable[[], T]) -> T:
        value, error = self.resolve(compute)
        if error is not None:
            raise error.with_traceback(self._traceback)
        return value  # type: ignore[return-value]

    def resolve(self, compute: Callable[[], T]) -> tuple[T | None, Exception | None]:
        """Return ``(value, None)`` or ``(None, error)``, computing on first use."""
        with self._cond:
            while self._state is _CellState.RESOLVING:
                self._cond.wait()
            if self._state is _CellState.UNRESOLVED:
                self._state = _CellState.RESOLVING
                run_compute = True
            else:
                run_compute = False

        if run_compute:
            value: T | None = None
            error: Exception | None = None
            try:
                value = compute()
            except Exception as exc:
                error = exc
            except BaseException:
                # Interrupted, not failed: let the next caller try again.
                with self._cond:
                    self._state = _CellState.UNRESOLVED
                    self._cond.notify_all()
                raise
            with self._cond:
                self._value = value
                self._error = error
                self._traceback = error.__traceback__ if error is not None else None
                self._state = _CellState.RESOLVED
                self._cond.notify_all()

        # RESOLVED is terminal, so the fields are stable from here on.
        return self._value, self._error


class UpgradeResult:
    """Result of one upgrade attempt, including skipped ones.

    ``current_info``, ``install_error``, ``skip_reason`` and ``target`` are
    fixed at construction. Metadata of the newly installed binary is read
    lazily by ``new_build_info`` and cached for the life of the object.
    """

    def __init__(
        self,
        current_info: BuildMetadata | None = None,
        install_error: BaseException | None = None,
        *,
        skip_reason: SkipReason | None = None,
        target: str | None = None,
        reader: MetadataReader | None = None,
        executable_resolver: Callable[[], str] = current_executable_path,
        development_version: str = DEVELOPMENT_VERSION,
    ) -> None:
        self._current_info = current_info
        self._install_error = install_error
        self._skip_reason = skip_reason
        self._target = target
        self._reader = reader
        self._resolve_executable = executable_resolver
        self._development_version = development_version
        self._new_info: OnceCell[BuildMetadata] = OnceCell()

    @property
    def current_info(self) -> BuildMetadata | None:
        return self._current_info

    @property
    def install_error(self) -> BaseException | None:
        return self._install_error

    @property
    def skip_reason(self) -> SkipReason | None:
        return self._skip_reason

    @property
    def target(self) -> str | None:
        return self._target

    def new_build_info(self) -> tuple[BuildMetadata | None, Exception | None]:
        """Return ``(metadata, error)`` for the executable now on disk.

        The first call resolves the running executable's path, which after an
        in-place install points at the new binary, and reads its metadata.
        Every later call, from any thread, returns the same pair without
        reading again, including when the first read failed.
        """
        return self._new_info.resolve(self._read_new_info)

    def did_upgrade(self) -> bool:
        """Return True if the binary on disk now reports a different version.

        A failure to read the new metadata counts as "not upgraded"; the error
        is still available from ``new_build_info``.
        """
        if self._current_info is None:
            return False
        if self._current_info.version == self._development_version:
            return False
        new_info, _ = self.new_build_info()
        return new_info is not None and new_info.version != self._current_info.version

    def to_dict(self) -> dict[str, Any]:
        new_info, new_error = self.new_build_info()
        return {
            "current": self._current_info.to_dict() if self._current_info else None,
            "new": new_info.to_dict() if new_info else None,
            "new_info_error": str(new_error) if new_error else None,
            "install_error": str(self._install_error) if self._install_error else None,
            "skip_reason": self._skip_reason.value if self._skip_reason else None,
            "target": self._target,
            "did_upgrade": self.did_upgrade(),
        }

    def _read_new_info(self) -> BuildMetadata:
        if self._reader is None:
            raise MetadataReadError("no metadata reader configured")
        return self._reader.read_from_path(self._resolve_executable())

    def __repr__(self) -> str:
        return (
            f"UpgradeResult(current_info={self._current_info!r}, "
            f"install_error={self._install_error!r}, skip_reason={self._skip_reason!r})"
        )
