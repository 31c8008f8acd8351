"""Tests for selfupgrade.target.build_install_target."""

from __future__ import annotations

import pytest

from selfupgrade.target import build_install_target


class TestBuildInstallTarget:
    """Tests for joining module, package path and version tag."""

    def test_sub_package(self) -> None:
        assert build_install_target("a/b", "c/d", "latest") == "a/b/c/d@latest"

    def test_root_package(self) -> None:
        assert build_install_target("a/b", "", "v1.2.3") == "a/b@v1.2.3"

    def test_real_module_path(self) -> None:
        expected = "github.com/melt-inc/autoupgrade/foo/bar@latest"
        actual = build_install_target("github.com/melt-inc/autoupgrade", "foo/bar", "latest")
        assert actual == expected

    @pytest.mark.parametrize(
        ("package_path", "expected"),
        [
            ("c//d", "a/b/c/d@latest"),
            ("c/d/", "a/b/c/d@latest"),
            ("/c/d", "a/b/c/d@latest"),
            ("./c", "a/b/c@latest"),
            (".", "a/b@latest"),
            ("/", "a/b@latest"),
        ],
    )
    def test_separators_are_normalised(self, package_path: str, expected: str) -> None:
        assert build_install_target("a/b", package_path, "latest") == expected

    def test_trailing_separator_on_module(self) -> None:
        assert build_install_target("a/b/", "", "latest") == "a/b@latest"
