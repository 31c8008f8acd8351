"""Tests for selfupgrade.executable path resolution."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

from selfupgrade.errors import ExecutableNotFoundError, MetadataReadError
from selfupgrade.executable import current_executable_path, fixed_executable


def _make_binary(path: Path) -> Path:
    path.write_text("#!/bin/sh\n", encoding="utf-8")
    path.chmod(0o755)
    return path


class TestCurrentExecutablePath:
    """Tests for current_executable_path()."""

    def test_frozen_uses_sys_executable(self, monkeypatch, tmp_path: Path) -> None:
        binary = _make_binary(tmp_path / "tool")
        monkeypatch.setattr(sys, "frozen", True, raising=False)
        monkeypatch.setattr(sys, "executable", str(binary))
        assert current_executable_path() == str(binary.resolve())

    def test_argv0_file(self, monkeypatch, tmp_path: Path) -> None:
        binary = _make_binary(tmp_path / "tool")
        monkeypatch.setattr(sys, "argv", [str(binary), "--flag"])
        assert current_executable_path() == str(binary.resolve())

    @pytest.mark.skipif(sys.platform == "win32", reason="PATH lookup of a shell script")
    def test_argv0_found_on_path(self, monkeypatch, tmp_path: Path) -> None:
        binary = _make_binary(tmp_path / "selfupgrade-test-tool")
        monkeypatch.chdir(tmp_path.parent)
        monkeypatch.setenv("PATH", str(tmp_path) + os.pathsep + os.environ.get("PATH", ""))
        monkeypatch.setattr(sys, "argv", ["selfupgrade-test-tool"])
        assert current_executable_path() == str(binary.resolve())

    def test_unknown_argv0_raises(self, monkeypatch, tmp_path: Path) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(sys, "argv", ["selfupgrade-no-such-tool-7f3a"])
        with pytest.raises(ExecutableNotFoundError):
            current_executable_path()

    def test_empty_argv_raises(self, monkeypatch) -> None:
        monkeypatch.setattr(sys, "argv", [])
        with pytest.raises(ExecutableNotFoundError):
            current_executable_path()

    def test_not_found_is_a_metadata_error(self) -> None:
        assert issubclass(ExecutableNotFoundError, MetadataReadError)


class TestFixedExecutable:
    """Tests for fixed_executable()."""

    def test_resolves_existing_file(self, tmp_path: Path) -> None:
        binary = _make_binary(tmp_path / "tool")
        assert fixed_executable(str(binary))() == str(binary.resolve())

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ExecutableNotFoundError):
            fixed_executable(str(tmp_path / "missing"))()
