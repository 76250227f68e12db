#!/usr/bin/env python3
"""
Lint block-comment markup in a document.

Usage:
  blocklint -f post.html [-c blocklint.yaml] [-v]
  cat post.html | blocklint

Exit status is 0 when no errors were found, 1 when the document has errors
and 2 when the configuration could not be loaded.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from blocklint.core import logging as core_logging
from blocklint.core.config import LinterConfig, load_config
from blocklint.core.errors import ConfigError
from blocklint.core.linter import BlockLinter
from blocklint.core.report import format_results
from blocklint.core.schemas import export_schemas

CONFIG_PATH_ENV = "BLOCKLINT_CONFIG_PATH"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="blocklint",
        description="Validate block-comment markup without the host platform.",
    )
    parser.add_argument("-f", "--file", help="File to lint (reads stdin when omitted)")
    parser.add_argument(
        "-c",
        "--config",
        default=os.getenv(CONFIG_PATH_ENV),
        help=f"YAML or JSON configuration file (default: ${CONFIG_PATH_ENV})",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument(
        "--export-schemas",
        metavar="DIR",
        help="Write JSON schemas of the result models to DIR and exit",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    core_logging.configure_logging(
        "blocklint", level=logging.DEBUG if args.verbose else logging.WARNING
    )

    if args.export_schemas:
        for path in export_schemas(Path(args.export_schemas)):
            print(path)
        return 0

    try:
        config = load_config(args.config) if args.config else LinterConfig()
    except ConfigError as exc:
        print(f"Configuration error: {exc.detail}", file=sys.stderr)
        return 2

    linter = BlockLinter(config)
    if args.file:
        result = linter.lint_file(args.file)
        print(f"Linting: {args.file}")
    else:
        result = linter.lint(sys.stdin.read(), source="stdin")

    print(format_results(result, verbose=args.verbose))
    print()
    return 0 if result.passed else 1


if __name__ == "__main__":
    sys.exit(main())
