"""Build the package reference passed to the installer."""

from __future__ import annotations

import posixpath


def build_install_target(module: str, package_path: str, version_tag: str) -> str:
    """Combine *module*, *package_path* and *version_tag* into ``module/pkg@tag``.

    Segments are joined with posix normalisation, so duplicate or trailing
    separators disappear and an empty *package_path* targets the module root::

        >>> build_install_target("example.com/tool", "cmd/tool", "latest")
        'example.com/tool/cmd/tool@latest'
        >>> build_install_target("example.com/tool", "", "v1.2.3")
        'example.com/tool@v1.2.3'
    """
    joined = posixpath.normpath(posixpath.join(module, package_path.lstrip("/")))
    return f"{joined}@{version_tag}"
