"""Command line entry point.

    linkstore [--store-dir DIR] [--cwd DIR] [-v] install [SPEC ...] [-D] [--prod]
    linkstore [--store-dir DIR] [--cwd DIR] [-v] uninstall SPEC ...

Fatal install errors are printed to stderr as a JSON envelope and exit 1.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

import structlog

from linkstore.config import Settings
from linkstore.errors import LinkstoreError
from linkstore.install import InstallOptions, run_install
from linkstore.logging_config import setup_logging

log = structlog.get_logger()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="linkstore",
        description="Install package.json dependencies as symlinks into a shared store.",
    )
    parser.add_argument("--store-dir", help="Store directory (overrides config)")
    parser.add_argument("--cwd", default=".", help="Project directory (default: .)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")

    sub = parser.add_subparsers(dest="command")

    install = sub.add_parser("install", aliases=["i", "add"], help="Install dependencies")
    install.add_argument("packages", nargs="*", help="Dependencies to add, e.g. semver@^7")
    install.add_argument(
        "-D", "--save-dev", action="store_true", help="Add packages to devDependencies"
    )
    install.add_argument("--prod", action="store_true", help="Skip devDependencies")

    uninstall = sub.add_parser("uninstall", aliases=["rm", "remove"], help="Remove dependencies")
    uninstall.add_argument("packages", nargs="+", help="Dependencies to remove")
    return parser


def build_options(args: argparse.Namespace, settings: Settings) -> InstallOptions:
    command = args.command or "install"
    packages: list[str] = list(getattr(args, "packages", None) or [])
    save_dev = getattr(args, "save_dev", False)
    is_uninstall = command in ("uninstall", "rm", "remove")
    return InstallOptions(
        cwd=Path(args.cwd).resolve(),
        store_dir=Path(settings.store.dir).expanduser(),
        dev=not getattr(args, "prod", False),
        verbose=args.verbose,
        install_deps=packages if not is_uninstall and not save_dev else [],
        install_dev_deps=packages if save_dev else [],
        uninstall_deps=packages if is_uninstall else [],
    )


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    # ValidationError from a bad config file or env var propagates: the
    # process exits non-zero with the pydantic message.
    settings = Settings()
    if args.store_dir:
        settings.store.dir = args.store_dir
    if args.verbose:
        settings.logging.level = "DEBUG"
    setup_logging(settings)

    options = build_options(args, settings)
    try:
        run_install(options, settings)
    except LinkstoreError as exc:
        log.error("install_failed", code=exc.code.value, message=exc.message)
        print(json.dumps(exc.to_dict()), file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
