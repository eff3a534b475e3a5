#!/usr/bin/env python3
"""validation_shims/main.py — command-line host for the validator framework.

Usage examples
--------------
    # List every discovered validator (built-ins plus --module imports)
    python -m validation_shims list --module mygame.validators

    # Run one validator by qualified name, Context.name label, or bare name
    python -m validation_shims run check_for_unused_imports \\
        --root Assets/Scripts --metadata build/types.json

    # Run every validator and print a summary
    python -m validation_shims run-all --metadata build/types.json -v

Exit codes
----------
    0   Every validator that ran passed.
    1   At least one validator failed, had an invalid signature, or raised.
    2   Infrastructure failure (unknown validator, module import error, …).
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from typing import List, Optional, Sequence, TextIO

from validation_shims import __version__
from validation_shims.config import ValidationConfig, configure, get_config
from validation_shims.registry import ValidatorRegistry
from validation_shims.runner import RunRecord, RunStatus, run_all, run_validator

_log = logging.getLogger("validation_shims")

EXIT_OK: int = 0
EXIT_FAILED: int = 1
EXIT_INFRA: int = 2


def _configure_logging(verbosity: int) -> None:
    """Set up the package logger: 0 → WARNING, 1 → INFO, 2+ → DEBUG."""
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    root = logging.getLogger("validation_shims")
    root.setLevel(level)
    for old in [h for h in root.handlers if getattr(h, "_cli_handler", False)]:
        root.removeHandler(old)
    handler._cli_handler = True
    root.addHandler(handler)


def _import_modules(names: Sequence[str]) -> bool:
    ok = True
    for name in names:
        try:
            importlib.import_module(name)
        except Exception as exc:
            _log.error("Could not import validator module %s: %s", name, exc)
            ok = False
    return ok


def _build_config(args: argparse.Namespace) -> ValidationConfig:
    return get_config().with_overrides(
        roots=tuple(args.root) if args.root else None,
        suffixes=tuple(args.suffix) if args.suffix else None,
        metadata_catalogs=tuple(args.metadata) if args.metadata else None,
        base_dir=args.base_dir,
    )


# ===========================================================================
# Sub-commands
# ===========================================================================

def cmd_list(registry: ValidatorRegistry, args: argparse.Namespace, out: TextIO) -> int:
    validators = registry.get_validators()
    if not validators:
        out.write("No validators found.\n")
        return EXIT_OK
    for descriptor in validators:
        flag = "" if descriptor.eligible else "  (invalid signature)"
        out.write(
            f"  {descriptor.qualified_name:60s} -> {descriptor.return_kind.value}{flag}\n"
        )
    return EXIT_OK


def _write_record(record: RunRecord, out: TextIO) -> None:
    out.write(f"Validator: {record.descriptor.qualified_name}\n")
    out.write(f"Status: {'Passed' if record.passed else 'Failed'}\n")
    out.write(f"Message: {record.status_message}\n")
    if record.status is RunStatus.INVALID_SIGNATURE:
        out.write(f"Error Details: {record.result.message}\n")
    elif record.exception:
        out.write(f"Error Details:\n{record.exception}")


def cmd_run(registry: ValidatorRegistry, args: argparse.Namespace, out: TextIO) -> int:
    descriptor = registry.find(args.name)
    if descriptor is None:
        _log.error("Unknown validator: %s", args.name)
        return EXIT_INFRA
    record = run_validator(registry, descriptor)
    _write_record(record, out)
    return EXIT_OK if record.passed else EXIT_FAILED


def cmd_run_all(registry: ValidatorRegistry, args: argparse.Namespace, out: TextIO) -> int:
    report = run_all(registry)
    out.write(f"Run All Summary: {report.summary()}\n")
    out.write(report.details() + "\n")
    return EXIT_FAILED if report.has_issues else EXIT_OK


_COMMANDS = {
    "list": cmd_list,
    "run": cmd_run,
    "run-all": cmd_run_all,
}


# ===========================================================================
# Argument parsing
# ===========================================================================

def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--module", action="append", default=[], metavar="NAME",
        help="Import NAME so its @validation_method functions are discovered",
    )
    common.add_argument(
        "--root", action="append", default=None, metavar="DIR",
        help="Source root scanned by the built-in validators (repeatable)",
    )
    common.add_argument(
        "--suffix", action="append", default=None, metavar="EXT",
        help="Source file suffix (repeatable, default: .cs)",
    )
    common.add_argument(
        "--metadata", action="append", default=None, metavar="JSON",
        help="Type metadata catalog used to build the symbol index (repeatable)",
    )
    common.add_argument(
        "--base-dir", default=None, metavar="DIR",
        help="Directory relative roots are resolved against (default: cwd)",
    )
    common.add_argument(
        "-v", "--verbose", action="count", default=0,
        help="Increase log verbosity (-v INFO, -vv DEBUG)",
    )

    parser = argparse.ArgumentParser(
        prog="validation-shims",
        description="Discover and run project validators",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("list", parents=[common], help="List discovered validators")
    run = sub.add_parser("run", parents=[common], help="Run a single validator")
    run.add_argument("name", help="Validator name")
    sub.add_parser("run-all", parents=[common], help="Run every validator")
    return parser


def main(argv: Optional[List[str]] = None, out: Optional[TextIO] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    out = out or sys.stdout

    _configure_logging(args.verbose)

    if not _import_modules(args.module):
        return EXIT_INFRA

    try:
        configure(_build_config(args))
        registry = ValidatorRegistry()
        return _COMMANDS[args.command](registry, args, out)
    except KeyboardInterrupt:
        _log.info("Interrupted by user.")
        return 130
    except Exception as exc:
        _log.error("Unhandled exception: %s", exc, exc_info=True)
        return EXIT_INFRA


if __name__ == "__main__":
    sys.exit(main())
