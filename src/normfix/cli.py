"""Command-line interface for normfix."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass, replace
from pathlib import Path

from normfix.checker import Checker
from normfix.config import Settings, config_dir_for, load_config, settings_from_config
from normfix.diagnostics import CheckResult, format_diagnostic
from normfix.errors import ToolError
from normfix.fileio import read_source


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    command: str
    target: Path
    settings: Settings
    as_json: bool
    verbose: bool


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        metavar="FILE",
        help="Config file (default: auto-discover normfix.toml)",
    )
    common.add_argument("--checker", metavar="CMD", help="Checker executable (default: norminette)")
    common.add_argument(
        "--timeout",
        type=float,
        default=None,
        metavar="SECS",
        help="Checker timeout in seconds (default: 30.0)",
    )
    common.add_argument("--json", action="store_true", help="Print the report as JSON")
    common.add_argument("-v", "--verbose", action="store_true", help="Log pipeline details to stderr")

    p = argparse.ArgumentParser(
        prog="normfix",
        description="Repair norminette violations with minimal, position-addressed edits",
    )
    sub = p.add_subparsers(dest="command", required=True)

    check = sub.add_parser("check", parents=[common], help="Report checker diagnostics")
    check.add_argument("path", help="File or directory to check")

    fix = sub.add_parser("fix", parents=[common], help="Repair files in place")
    fix.add_argument("path", help="File or directory to fix")
    fix.add_argument("--formatter", metavar="CMD", help="clang-format executable")
    fix.add_argument(
        "--no-formatter",
        action="store_true",
        help="Skip clang-format and use the built-in whitespace normalizer",
    )
    fix.add_argument(
        "-j",
        "--jobs",
        type=int,
        default=None,
        metavar="N",
        help="Files to repair in parallel (default: 1)",
    )

    tokens = sub.add_parser("tokens", help="Dump the token stream of a file")
    tokens.add_argument("path", help="C source file")
    return p


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: defaults < config file < CLI flags.
    """
    target = Path(args.path)
    config_path = Path(args.config) if getattr(args, "config", None) else None
    config = load_config(config_path, config_dir_for(target))
    settings = settings_from_config(config)

    if getattr(args, "checker", None):
        settings = replace(settings, checker_command=args.checker)
    if getattr(args, "timeout", None) is not None:
        if args.timeout <= 0:
            raise argparse.ArgumentTypeError(f"timeout must be positive: {args.timeout}")
        settings = replace(settings, checker_timeout=args.timeout)
    if getattr(args, "formatter", None):
        settings = replace(settings, formatter_command=args.formatter)
    if getattr(args, "no_formatter", False):
        settings = replace(settings, use_formatter=False)
    if getattr(args, "jobs", None) is not None:
        if args.jobs < 1:
            raise argparse.ArgumentTypeError(f"jobs must be at least 1: {args.jobs}")
        settings = replace(settings, jobs=args.jobs)

    return CliOptions(
        command=args.command,
        target=target,
        settings=settings,
        as_json=getattr(args, "json", False),
        verbose=getattr(args, "verbose", False),
    )


def print_check_report(result: CheckResult) -> None:
    """Print each diagnostic with source context, then the summary line."""
    sources: dict[str, str] = {}
    for diag in result.diagnostics:
        if diag.file not in sources:
            try:
                sources[diag.file] = read_source(Path(diag.file))
            except (OSError, UnicodeError):
                sources[diag.file] = ""
        print(format_diagnostic(diag, sources[diag.file]))
    print(result.summary)


def run_check(options: CliOptions) -> int:
    from normfix.pipeline import check_path

    checker = Checker(options.settings.checker_command, options.settings.checker_timeout)
    try:
        result = check_path(options.target, checker)
    except ToolError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if options.as_json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print_check_report(result)
    return 0 if result.ok else 1


def run_fix(options: CliOptions) -> int:
    from normfix.pipeline import build_pipeline, fix_path

    pipeline = build_pipeline(options.settings)
    report = fix_path(options.target, pipeline, jobs=options.settings.jobs)

    if options.as_json:
        print(json.dumps(report.to_dict(), indent=2))
        return 0 if report.status == "OK" else 1

    for repair in report.files:
        print(f"{repair.path}: {len(repair.initial)} -> {len(repair.final)} errors")
        for edit in repair.edits:
            print(f"  fixed: {edit}")
        for note in repair.notes:
            print(f"  note: {note}")
    for diag in report.remaining:
        print(f"{diag.file}:{diag.line}:{diag.column}: {diag.code}: {diag.message}")
    print(
        f"Fixed {len(report.files)} files: "
        f"{report.original_errors} errors before, {report.final_errors} after"
    )
    return 0 if report.status == "OK" else 1


def run_tokens(options: CliOptions) -> int:
    from normfix.debug import dump_tokens
    from normfix.lexer import tokenize

    source = read_source(options.target)
    dump_tokens(tokenize(source), file=sys.stdout)
    return 0


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        options = resolve_options(args)
    except argparse.ArgumentTypeError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=logging.DEBUG if options.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if not options.target.exists():
        print(f"error: path does not exist: {options.target}", file=sys.stderr)
        return 2

    if options.command == "check":
        return run_check(options)
    if options.command == "fix":
        return run_fix(options)
    return run_tokens(options)


def entry() -> None:
    sys.exit(main())
