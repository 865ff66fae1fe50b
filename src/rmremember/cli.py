"""Command line entry point for talking to the tablet.

All commands read ``settings.yaml`` (see :class:`~rmremember.config.AppPaths`)
and map :class:`~rmremember.errors.TabletError` to a one-line message with
exit status 1.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from .config.app_config import load_settings
from .core.models import Item
from .errors import TabletError
from .remote.tablet import Tablet
from .tools.debug import debug_enabled


logger = logging.getLogger(__name__)


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rmremember", description="reMarkable tablet access")
    parser.add_argument("--config", type=Path, default=None, help="Path to settings.yaml")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("status", help="Check SSH and USB connectivity")
    sub.add_parser("items", help="Print the document tree")

    backup = sub.add_parser("backup", help="Copy the files of one item")
    backup.add_argument("item_id")
    backup.add_argument("--target", type=Path, default=None)

    upload = sub.add_parser("upload", help="Upload a PDF or EPUB over USB")
    upload.add_argument("path", type=Path)
    upload.add_argument("--parent", default="")

    download = sub.add_parser("download", help="Download a document as PDF over USB")
    download.add_argument("item_id")
    download.add_argument("path", type=Path)

    sub.add_parser("restart", help="Restart the tablet UI")

    run = sub.add_parser("run", help="Run a shell command on the tablet")
    run.add_argument("remote_command")
    run.add_argument("--no-check", action="store_true", help="Ignore a non-zero exit status")
    return parser


def _print_items(items: list[Item], depth: int = 0) -> None:
    for item in items:
        flag = " (trashed)" if item.trashed else ""
        print(f"{'  ' * depth}{item.name}{flag}  [{item.id}] {item.modified:%Y-%m-%d %H:%M}")
        if item.children:
            _print_items(item.children, depth + 1)


def _dispatch(tablet: Tablet, args: argparse.Namespace) -> int:
    if args.command == "status":
        failure = tablet.probe_connectivity()
        if failure is None:
            print("connected")
            return 0
        print(failure.error.name if failure.error else failure.message)
        return 1

    if args.command == "items":
        _print_items(tablet.list_items())
    elif args.command == "backup":
        count = tablet.backup(args.item_id, args.target)
        print(f"{count} file(s) copied")
    elif args.command == "upload":
        tablet.upload(args.path, args.parent)
    elif args.command == "download":
        print(tablet.download_to(args.item_id, args.path))
    elif args.command == "restart":
        tablet.restart()
    elif args.command == "run":
        result = tablet.run_command(args.remote_command, check_exit_code=not args.no_check)
        sys.stdout.write(result.stdout)
        sys.stderr.write(result.stderr)
        return result.exit_status
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_arg_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose or debug_enabled() else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = load_settings(args.config)
    except ValueError as exc:
        parser.error(str(exc))

    with Tablet(settings) as tablet:
        try:
            return _dispatch(tablet, args)
        except TabletError as exc:
            logger.debug("Command failed", exc_info=True)
            print(f"error: {exc}", file=sys.stderr)
            return 1


if __name__ == "__main__":
    sys.exit(main())
