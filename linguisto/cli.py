"""CLI entrypoint for linguisto."""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path
from typing import List

from rich.console import Console

from .config import ConfigError, LinguistoConfig, load_config
from .knowledge import KnowledgeBaseError
from .logging import configure_logging
from .models import LanguageStat, ScanRequest, SortKey
from .render import render_report, report_to_json
from .scanner import LanguageScanner
from .walker import ScanError, resolve_root


def _non_negative_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError("must be zero or a positive integer")
    return parsed


def _positive_int(value: str) -> int:
    parsed = _non_negative_int(value)
    if parsed == 0:
        raise argparse.ArgumentTypeError("must be a positive integer")
    return parsed


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="linguisto",
        description="Report which programming languages make up a directory tree.",
    )
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Directory to analyse (defaults to current directory).",
    )
    parser.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Print the report as JSON instead of a bar chart.",
    )
    parser.add_argument(
        "--all",
        dest="show_all",
        action="store_true",
        help="List every language instead of folding the tail into Other.",
    )
    parser.add_argument(
        "--sort",
        choices=[key.value for key in SortKey],
        default=None,
        help="Metric used for ratios and ordering (default: bytes).",
    )
    parser.add_argument(
        "--max-lang",
        dest="max_lang",
        type=_non_negative_int,
        default=None,
        help="Number of languages shown before the rest are grouped as Other (0 disables).",
    )
    parser.add_argument(
        "--workers",
        type=_positive_int,
        default=None,
        help="Number of traversal threads (defaults to the CPU count).",
    )
    parser.add_argument(
        "--hidden",
        action="store_true",
        help="Include hidden files and directories.",
    )
    parser.add_argument(
        "--no-ignore",
        dest="no_ignore",
        action="store_true",
        help="Do not read .gitignore/.ignore files.",
    )
    parser.add_argument(
        "--log-file",
        dest="log_file",
        type=Path,
        default=None,
        help="Write detailed logs to this file.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Increase log verbosity for troubleshooting.",
    )
    return parser


def _apply_overrides(config: LinguistoConfig, args: argparse.Namespace) -> LinguistoConfig:
    overrides: dict[str, object] = {}
    if args.sort is not None:
        overrides["sort"] = SortKey.parse(args.sort)
    if args.max_lang is not None:
        overrides["max_languages"] = args.max_lang
    if args.workers is not None:
        overrides["workers"] = args.workers
    if args.hidden:
        overrides["include_hidden"] = True
    if args.no_ignore:
        overrides["respect_ignore_files"] = False
    return replace(config, **overrides) if overrides else config


def _run_scan(
    scanner: LanguageScanner, request: ScanRequest, *, show_spinner: bool
) -> List[LanguageStat]:
    status_console = Console(stderr=True)
    if show_spinner and status_console.is_terminal:
        with status_console.status("Analyzing directory...", spinner="dots"):
            return scanner.scan(request)
    return scanner.scan(request)


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for linguisto."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    try:
        root = resolve_root(args.path)
        config = _apply_overrides(load_config(root), args)
        request = ScanRequest(
            root=str(root),
            sort_key=config.sort,
            keep_top=0 if args.show_all else config.max_languages,
        )
        scanner = LanguageScanner.from_config(config)
        stats = _run_scan(scanner, request, show_spinner=not args.verbose)
    except ScanError as exc:
        parser.exit(1, f"linguisto: {exc}\n")
    except (ConfigError, KnowledgeBaseError) as exc:
        parser.exit(1, f"linguisto: {exc}\n")

    if args.json_output:
        print(report_to_json(stats))
    else:
        render_report(stats, Console())


if __name__ == "__main__":
    main(sys.argv[1:])
