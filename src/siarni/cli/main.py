from __future__ import annotations

import argparse
import logging
from pathlib import Path

from rich.console import Console

from siarni.cli.commands import (
    add_cmd,
    doctor_cmd,
    fingerprint_cmd,
    init_cmd,
    link_cmd,
    records_cmd,
    stats_cmd,
    verify_cmd,
    web_cmd,
)
from siarni.cli.context import CLIContext
from siarni.core.config import load_paths, load_settings
from siarni.core.errors import SiarniError
from siarni.core.logging import configure_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="siarni",
        description="SI-ARNI marriage-certificate archive CLI",
    )
    parser.add_argument(
        "--project-root",
        type=Path,
        default=Path.cwd(),
        help="Project root to use for .siarni data (default: current working directory)",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0)

    subparsers = parser.add_subparsers(dest="command", required=True)
    init_cmd.register(subparsers)
    add_cmd.register(subparsers)
    records_cmd.register(subparsers)
    fingerprint_cmd.register(subparsers)
    verify_cmd.register(subparsers)
    link_cmd.register(subparsers)
    stats_cmd.register(subparsers)
    doctor_cmd.register(subparsers)
    web_cmd.register(subparsers)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)
    console = Console()

    ctx = CLIContext(paths=load_paths(args.project_root), settings=load_settings(), console=console)

    handler = getattr(args, "handler", None)
    if handler is None:
        parser.print_help()
        return 2

    try:
        return handler(args, ctx)
    except SiarniError as exc:
        logger.error(str(exc))
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
