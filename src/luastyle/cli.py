"""
CLI entry point for luastyle.

Usage:
    luastyle <path>...                     Lint files and directories
    luastyle --format json <path>...       Machine-readable output
    luastyle --config style.yaml <path>    Use an explicit configuration
    luastyle --list-rules                  Show rules and their parameters
    luastyle --watch <path>...             Re-lint files as they change

Exit status:
    0  no violations
    1  style violations found
    2  tooling fault (bad configuration, unreadable or malformed input,
       a rule that crashed)
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from luastyle import __version__
from luastyle.config import LintConfig, load_config
from luastyle.errors import ConfigError
from luastyle.pool import DEFAULT_JOBS, lint_paths
from luastyle.rules import all_rules


EXIT_OK = 0
EXIT_VIOLATIONS = 1
EXIT_FAULT = 2

logger = logging.getLogger(__name__)


def _parse_extensions(value: str) -> tuple[str, ...]:
    return tuple(
        e.strip() if e.strip().startswith(".") else f".{e.strip()}"
        for e in value.split(",")
        if e.strip()
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="luastyle",
        description=f"luastyle v{__version__} - Lua style conformance linter",
    )
    parser.add_argument("paths", nargs="*", type=Path,
                        help="Files or directories to lint (directories are scanned recursively)")
    parser.add_argument("--config", "-c", type=Path,
                        help="Path to a YAML configuration file")
    parser.add_argument("--format", "-f", choices=["human", "json"], default="human",
                        help="Output format (default: human)")
    parser.add_argument("--jobs", "-j", type=int, default=1,
                        help=f"Worker processes (default: 1; 0 means {DEFAULT_JOBS})")
    parser.add_argument("--timeout", type=float, default=None,
                        help="Per-file processing bound in seconds")
    parser.add_argument("--extensions", default=".lua",
                        help="Comma-separated extensions to scan in directories (default: .lua)")
    parser.add_argument("--watch", "-w", action="store_true",
                        help="Keep running and re-lint files as they change")
    parser.add_argument("--interval", type=float, default=0.5,
                        help="Watch mode polling interval in seconds (default: 0.5)")
    parser.add_argument("--list-rules", action="store_true",
                        help="List rules with their effective settings and exit")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    parser.add_argument("--quiet", "-q", action="store_true", help="Only log errors")
    parser.add_argument("--version", action="version", version=f"luastyle {__version__}")
    return parser


def _configure_logging(args: argparse.Namespace) -> None:
    level = logging.WARNING
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)


def _list_rules(config: LintConfig) -> None:
    for rule in all_rules():
        settings = config.settings(rule.rule_id)
        state = "on" if config.is_enabled(rule.rule_id) else "off"
        print(f"{rule.rule_id} [{state}, {settings.severity.value}] {rule.description}")
        for param in rule.parameters:
            print(f"    {param.name} = {settings.parameters[param.name]!r}  ({param.description})")


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"error: config: {e}", file=sys.stderr)
        return EXIT_FAULT
    logger.debug(f"Configuration: {config.source or 'defaults'}")

    if args.list_rules:
        _list_rules(config)
        return EXIT_OK

    if not args.paths:
        parser.error("at least one path is required")
    if args.jobs < 0:
        parser.error("--jobs must be >= 0")
    if args.timeout is not None and args.timeout <= 0:
        parser.error("--timeout must be positive")

    extensions = _parse_extensions(args.extensions)
    if args.watch:
        from luastyle.watch import run_watch
        return run_watch(args.paths, config, interval=max(0.1, args.interval),
                         extensions=extensions)

    jobs = args.jobs or DEFAULT_JOBS
    reporter = lint_paths(
        args.paths,
        config,
        jobs=jobs,
        timeout=args.timeout,
        extensions=extensions,
    )

    if args.format == "json":
        print(reporter.render_json())
    else:
        output = reporter.render_human()
        if output:
            print(output)
        if reporter.diagnostics:
            print(reporter.render_diagnostics(), file=sys.stderr)

    if reporter.has_faults:
        return EXIT_FAULT
    return EXIT_VIOLATIONS if reporter.violations else EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
