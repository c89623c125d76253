from __future__ import annotations

import argparse

from siarni.cli.context import CLIContext
from siarni.cli.record_options import add_record_field_arguments, draft_from_args
from siarni.core.integrity import canonicalize, compute_fingerprint


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser(
        "fingerprint",
        help="Compute the fingerprint of the given field values without archiving",
    )
    add_record_field_arguments(parser)
    parser.add_argument("--canonical", action="store_true", help="Also print the canonical payload")
    parser.set_defaults(handler=run)


def run(args: argparse.Namespace, ctx: CLIContext) -> int:
    draft = draft_from_args(args)
    if args.canonical:
        ctx.console.print(canonicalize(draft), markup=False, highlight=False)
    ctx.console.print(compute_fingerprint(draft), markup=False, highlight=False)
    return 0
