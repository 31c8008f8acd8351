"""Command-line entry point: ``python -m selfupgrade``."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import Sequence

from selfupgrade.config import get_settings
from selfupgrade.executable import current_executable_path, fixed_executable
from selfupgrade.logging import (
    bind_upgrade_context,
    clear_upgrade_context,
    get_logger,
    setup_logging,
)
from selfupgrade.result import UpgradeResult
from selfupgrade.upgrader import Upgrader

log = get_logger("selfupgrade.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="selfupgrade",
        description="Install the newest build of a Go binary in place.",
    )
    parser.add_argument(
        "--executable",
        help="binary to upgrade (default: the running executable)",
    )
    parser.add_argument(
        "--package-path",
        default="",
        help="package path relative to the module root, e.g. cmd/tool",
    )
    parser.add_argument("--timeout", type=float, help="seconds before the install is cancelled")
    parser.add_argument("--json", action="store_true", help="print the result as JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="log at DEBUG level")
    return parser


def render(result: UpgradeResult) -> str:
    """Human readable summary of *result*."""
    if result.skip_reason is not None:
        return f"skipped: {result.skip_reason.value}"
    if result.install_error is not None:
        return f"install failed: {result.install_error}"

    current = result.current_info
    new_info, new_error = result.new_build_info()
    if new_info is None:
        return f"installed {result.target}, new version unknown: {new_error}"
    if result.did_upgrade():
        return f"upgraded {current.version if current else '?'} -> {new_info.version}"
    return f"already at {new_info.version}"


async def run(args: argparse.Namespace) -> int:
    resolver = fixed_executable(args.executable) if args.executable else current_executable_path
    upgrader = Upgrader(executable_resolver=resolver, settings=get_settings())

    bind_upgrade_context(executable=args.executable, package_path=args.package_path)
    log.info("upgrade_started")
    try:
        result = await upgrader.upgrade(args.package_path, timeout=args.timeout)
    finally:
        clear_upgrade_context()
    log.info(
        "upgrade_finished",
        skip_reason=result.skip_reason,
        install_error=str(result.install_error) if result.install_error else None,
    )

    # Both paths read the new binary's metadata, which may shell out.
    if args.json:
        data = await asyncio.to_thread(result.to_dict)
        print(json.dumps(data, indent=2, sort_keys=True))
    else:
        print(await asyncio.to_thread(render, result))
    return 1 if result.install_error is not None else 0


def main(argv: Sequence[str] | None = None) -> int:
    """Parse arguments and run one upgrade attempt."""
    args = build_parser().parse_args(argv)
    setup_logging(level="DEBUG" if args.verbose else None)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
