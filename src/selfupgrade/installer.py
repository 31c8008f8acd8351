"""Run the external installer toolchain.

All subprocess calls for installs are confined to this module. Output of the
installer is discarded; callers only see the outcome.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Sequence
from typing import Protocol

from selfupgrade.errors import (
    InstallCanceledError,
    InstallError,
    InstallerNotFoundError,
    InstallFailedError,
    InstallTimeoutError,
)
from selfupgrade.logging import get_logger

log = get_logger("selfupgrade.installer")

DEFAULT_INSTALL_COMMAND: tuple[str, ...] = ("go", "install")


class ProcessRunner(Protocol):
    """Runs a command to completion with its output suppressed."""

    async def run(
        self,
        argv: Sequence[str],
        *,
        cancel_event: asyncio.Event | None = None,
        timeout: float | None = None,
    ) -> None: ...


class AsyncProcessRunner:
    """``ProcessRunner`` built on ``asyncio`` subprocesses.

    The process is killed when *cancel_event* is set, when *timeout* elapses,
    or when the awaiting task is cancelled. The first two surface as
    ``InstallCanceledError``/``InstallTimeoutError``; task cancellation
    propagates as ``asyncio.CancelledError``.
    """

    async def run(
        self,
        argv: Sequence[str],
        *,
        cancel_event: asyncio.Event | None = None,
        timeout: float | None = None,
    ) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise InstallCanceledError("install cancelled before start")

        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except FileNotFoundError as exc:
            log.warning("installer_not_found", command=argv[0])
            raise InstallerNotFoundError(argv[0]) from exc
        except OSError as exc:
            log.warning("installer_start_failed", command=argv[0], error=str(exc))
            raise InstallError(f"cannot start {argv[0]}: {exc}") from exc

        log.debug("install_started", argv=list(argv), pid=proc.pid)

        wait_task = asyncio.ensure_future(proc.wait())
        cancel_task = (
            asyncio.ensure_future(cancel_event.wait()) if cancel_event is not None else None
        )
        waiters = {wait_task} if cancel_task is None else {wait_task, cancel_task}

        try:
            done, _ = await asyncio.wait(
                waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            await self._kill(proc)
            raise
        finally:
            if cancel_task is not None:
                cancel_task.cancel()

        if wait_task not in done:
            await self._kill(proc)
            wait_task.cancel()
            if cancel_task is not None and cancel_task in done:
                log.info("install_cancelled", argv=list(argv))
                raise InstallCanceledError("install cancelled")
            log.info("install_timed_out", argv=list(argv), timeout=timeout)
            raise InstallTimeoutError(timeout or 0.0)

        returncode = wait_task.result()
        if returncode != 0:
            log.warning("install_failed", argv=list(argv), returncode=returncode)
            raise InstallFailedError(returncode, argv)

        log.debug("install_finished", argv=list(argv))

    @staticmethod
    async def _kill(proc: asyncio.subprocess.Process) -> None:
        if proc.returncode is None:
            with contextlib.suppress(ProcessLookupError):
                proc.kill()
        await proc.wait()


class Installer:
    """Installs a target with the configured toolchain command."""

    def __init__(
        self,
        runner: ProcessRunner | None = None,
        command: Sequence[str] = DEFAULT_INSTALL_COMMAND,
    ) -> None:
        self._runner = runner or AsyncProcessRunner()
        self._command = list(command)

    @property
    def command(self) -> list[str]:
        return list(self._command)

    async def install(
        self,
        target: str,
        *,
        cancel_event: asyncio.Event | None = None,
        timeout: float | None = None,
    ) -> InstallError | None:
        """Install *target*; return the failure as a value, or None on success."""
        try:
            await self._runner.run(
                [*self._command, target], cancel_event=cancel_event, timeout=timeout
            )
        except InstallError as exc:
            return exc
        return None
