"""Upgrade orchestration: gate, build the install target, run the installer.

Typical flow::

    result = await upgrade("cmd/tool")
    if result.did_upgrade():
        new_info, _ = result.new_build_info()
        print(f"upgraded to {new_info.version}, restart to use it")

Every failure is reported on the returned ``UpgradeResult``; nothing here
raises for an unsuccessful upgrade.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Generator
from typing import Any

from selfupgrade.config import Settings, get_settings
from selfupgrade.errors import InstallCanceledError
from selfupgrade.executable import current_executable_path
from selfupgrade.gate import check_upgrade
from selfupgrade.installer import Installer
from selfupgrade.metadata import BuildMetadata, GoBuildInfoReader, MetadataReader
from selfupgrade.result import UpgradeResult
from selfupgrade.target import build_install_target


class UpgradeHandle:
    """Single-delivery handle for a background upgrade.

    Exactly one ``UpgradeResult`` is delivered. ``cancel`` asks the attempt
    to stop; the handle then receives either the finished result or one whose
    ``install_error`` is ``InstallCanceledError``, whichever happens first.
    """

    def __init__(self, cancel_event: asyncio.Event) -> None:
        self._cancel_event = cancel_event
        self._future: asyncio.Future[UpgradeResult] = (
            asyncio.get_running_loop().create_future()
        )

    def done(self) -> bool:
        """Return True once the result has been delivered."""
        return self._future.done()

    def result(self) -> UpgradeResult:
        """Return the delivered result; raises ``InvalidStateError`` before delivery."""
        return self._future.result()

    def cancel(self) -> None:
        self._cancel_event.set()

    async def wait(self) -> UpgradeResult:
        return await asyncio.shield(self._future)

    def __await__(self) -> Generator[Any, None, UpgradeResult]:
        return self.wait().__await__()

    def _deliver(self, result: UpgradeResult) -> bool:
        if self._future.done():
            return False
        self._future.set_result(result)
        return True


class Upgrader:
    """Runs upgrade attempts with injectable collaborators."""

    def __init__(
        self,
        reader: MetadataReader | None = None,
        installer: Installer | None = None,
        executable_resolver: Callable[[], str] = current_executable_path,
        settings: Settings | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._resolve_executable = executable_resolver
        self._reader = reader or GoBuildInfoReader(
            version_command=self._settings.version_command,
            executable_resolver=executable_resolver,
        )
        self._installer = installer or Installer(command=self._settings.installer_command)
        self._background: set[asyncio.Task[None]] = set()

    async def upgrade(
        self,
        package_path: str = "",
        *,
        cancel_event: asyncio.Event | None = None,
        timeout: float | None = None,
    ) -> UpgradeResult:
        """Install the latest build of the running executable's module.

        *package_path* is the package's path relative to the module root.
        Setting *cancel_event* or exceeding *timeout* kills the installer.
        """
        # Readers may shell out; keep the event loop free while they run.
        info = await asyncio.to_thread(self._reader.read_current)
        skip = check_upgrade(info, self._settings.development_version)
        if skip is not None or info is None:
            return self._result(info, skip_reason=skip)

        target = build_install_target(info.module, package_path, self._settings.version_tag)
        error = await self._installer.install(
            target,
            cancel_event=cancel_event,
            timeout=timeout if timeout is not None else self._settings.install_timeout,
        )
        return self._result(info, error, target=target)

    def upgrade_background(
        self,
        package_path: str = "",
        *,
        cancel_event: asyncio.Event | None = None,
        timeout: float | None = None,
    ) -> UpgradeHandle:
        """Start ``upgrade`` on a task and return its handle.

        Must be called from a running event loop.
        """
        cancel_event = cancel_event or asyncio.Event()
        handle = UpgradeHandle(cancel_event)

        async def run() -> None:
            attempt = asyncio.ensure_future(
                self.upgrade(package_path, cancel_event=cancel_event, timeout=timeout)
            )
            cancelled = asyncio.ensure_future(cancel_event.wait())
            try:
                await asyncio.wait({attempt, cancelled}, return_when=asyncio.FIRST_COMPLETED)
                if attempt.done():
                    handle._deliver(attempt.result())
                else:
                    handle._deliver(self._result(None, InstallCanceledError("upgrade cancelled")))
                    # The attempt sees the same event and kills the installer.
                    await attempt
            except BaseException as exc:
                attempt.cancel()
                handle._deliver(self._result(None, _as_install_error(exc)))
                if not isinstance(exc, Exception):
                    raise
            finally:
                cancelled.cancel()

        task = asyncio.ensure_future(run())
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return handle

    def _result(
        self,
        info: BuildMetadata | None,
        install_error: BaseException | None = None,
        **kwargs: Any,
    ) -> UpgradeResult:
        return UpgradeResult(
            info,
            install_error,
            reader=self._reader,
            executable_resolver=self._resolve_executable,
            development_version=self._settings.development_version,
            **kwargs,
        )


def _as_install_error(exc: BaseException) -> BaseException:
    if isinstance(exc, asyncio.CancelledError):
        return InstallCanceledError("upgrade task cancelled")
    return exc


async def upgrade(
    package_path: str = "",
    *,
    cancel_event: asyncio.Event | None = None,
    timeout: float | None = None,
) -> UpgradeResult:
    """Run ``Upgrader().upgrade`` with default collaborators."""
    return await Upgrader().upgrade(package_path, cancel_event=cancel_event, timeout=timeout)


def upgrade_background(
    package_path: str = "",
    *,
    cancel_event: asyncio.Event | None = None,
    timeout: float | None = None,
) -> UpgradeHandle:
    """Run ``Upgrader().upgrade_background`` with default collaborators."""
    return Upgrader().upgrade_background(
        package_path, cancel_event=cancel_event, timeout=timeout
    )
