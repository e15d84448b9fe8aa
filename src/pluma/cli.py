"""Command line interface.

    pluma build CONTENT_DIR OUTPUT_DIR [--config FILE] [--workers N]
                [--tie-break] [--ascii-slugs] [-v | -q]

Exit codes:
    0  every document rendered
    1  some documents were skipped (reported on stderr)
    2  fatal: address collision, bad configuration or missing content
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from dataclasses import replace

from pluma import __version__
from pluma.config import DEFAULT_CONFIG, load_config
from pluma.errors import AddressCollisionError, ConfigError, RenderError
from pluma.site import build_site

EXIT_OK = 0
EXIT_PARTIAL = 1
EXIT_FATAL = 2


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pluma", description="Render Markdown posts to HTML")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    build = sub.add_parser("build", help="Render a directory of posts")
    build.add_argument("content_dir", help="Directory containing Markdown posts")
    build.add_argument("output_dir", help="Directory for generated HTML")
    build.add_argument("--config", help="TOML config file ([site] table)")
    build.add_argument("--workers", type=int, help="Maximum render threads")
    build.add_argument(
        "--tie-break",
        action="store_true",
        help="Resolve address collisions by source order instead of failing",
    )
    build.add_argument("--ascii-slugs", action="store_true", help="Keep only ASCII in slugs")
    verbosity = build.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Errors only")
    return parser


def _configure_logging(verbose: bool, quiet: bool) -> None:
    level = logging.DEBUG if verbose else logging.ERROR if quiet else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose, args.quiet)

    try:
        config = load_config(args.config) if args.config else DEFAULT_CONFIG
        overrides: dict[str, object] = {}
        if args.workers is not None:
            overrides["max_workers"] = args.workers
        if args.tie_break:
            overrides["tie_break_collisions"] = True
        if args.ascii_slugs:
            overrides["ascii_slugs"] = True
        if overrides:
            config = replace(config, **overrides)
        result = build_site(args.content_dir, args.output_dir, config=config)
    except (AddressCollisionError, ConfigError, FileNotFoundError, RenderError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_FATAL

    for report in result.failures:
        print(f"skipped: {report.error}", file=sys.stderr)
    for warning in result.warnings:
        print(f"warning: {warning}", file=sys.stderr)

    return EXIT_PARTIAL if result.failures else EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
