"""Shared fixtures for selfupgrade tests."""

from __future__ import annotations

import asyncio
import os
import threading
from collections.abc import Sequence

import pytest

from selfupgrade.config import Settings, get_settings
from selfupgrade.errors import InstallCanceledError, MetadataReadError
from selfupgrade.metadata import BuildMetadata


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch: pytest.MonkeyPatch):
    """Keep SELFUPGRADE_* variables from the host out of the tests."""
    for key in list(os.environ):
        if key.upper().startswith("SELFUPGRADE_"):
            monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class FakeReader:
    """MetadataReader double that counts reads."""

    def __init__(
        self,
        current: BuildMetadata | None = None,
        new: BuildMetadata | None = None,
        new_error: Exception | None = None,
        delay: float = 0.0,
    ) -> None:
        self.current = current
        self.new = new
        self.new_error = new_error
        self.delay = delay
        self.current_calls = 0
        self.path_calls: list[str] = []
        self._lock = threading.Lock()

    def read_current(self) -> BuildMetadata | None:
        self.current_calls += 1
        return self.current

    def read_from_path(self, path: str) -> BuildMetadata:
        with self._lock:
            self.path_calls.append(path)
        if self.delay:
            threading.Event().wait(self.delay)
        if self.new_error is not None:
            raise self.new_error
        if self.new is None:
            raise MetadataReadError(f"no build info in {path}")
        return self.new


class FakeRunner:
    """ProcessRunner double recording argv and raising a configured error."""

    def __init__(self, error: Exception | None = None, block: bool = False) -> None:
        self.error = error
        self.block = block
        self.calls: list[list[str]] = []
        self.started = asyncio.Event()

    async def run(
        self,
        argv: Sequence[str],
        *,
        cancel_event: asyncio.Event | None = None,
        timeout: float | None = None,
    ) -> None:
        self.calls.append(list(argv))
        self.started.set()
        if self.block:
            assert cancel_event is not None
            await cancel_event.wait()
            raise InstallCanceledError("install cancelled")
        if self.error is not None:
            raise self.error


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def make_reader():
    return FakeReader


@pytest.fixture
def make_runner():
    return FakeRunner
