# treecollect/cli.py

"""
Command-line entry point.

Usage:
    collect --path src --extension py,toml
    collect --content --max-bytes 4000 --output bundle.txt
    collect --regex "^test_" --scope name --regex-inv
    collect --guide
"""


from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import BinaryIO, Sequence

from treecollect import __version__
from treecollect.config import ConfigError, FilterConfig, Scope
from treecollect.pipeline import SINK_BUFFER_SIZE, SharedSink, collect
from treecollect.walk import entries_for

log = logging.getLogger("treecollect")

GUIDE = """
    TREECOLLECT - USER GUIDE
    ========================

    FILTERS:
      --extension rs,toml    : Only allow .rs and .toml files.
      --no-extension py,js   : Allow everything EXCEPT .py and .js files.
      --regex "Test.*"       : Allow files matching regex.
      --regex-inv            : Allow files NOT matching the regex.
      --scope path           : Regex applies to the full path.

    (Note: --extension and --no-extension are mutually exclusive)

    CONTENT & LIMITS:
      --content              : Print file content after each path.
      --max-bytes 1000       : Stop each file after 1000 bytes.
      --depth 2              : Only go 2 folders deep.
      --output file.txt      : Save result to file.

    EXCLUDES:
      Default: skips hidden files, .gitignore/.ignore matches, .git,
      target/, node_modules/, __pycache__/, build/ and dist/.
      --no-default-excludes  : Scan everything.
      --include-hidden       : Include hidden files.
      --exclude "log,tmp"    : Add gitignore-style exclusion patterns.

    PERFORMANCE TIPS:
      - Use --output for large datasets.
      - Binary files are detected and skipped automatically.
"""


def _csv(value: str) -> list[str]:
    return value.split(",")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="collect",
        description="Traverse a directory tree, filter files and optionally capture their content.",
    )
    parser.add_argument("--path", default=".", help="Base directory to start searching from.")
    parser.add_argument("--content", action="store_true", help="Include file content in the output.")

    ext = parser.add_mutually_exclusive_group()
    ext.add_argument("--extension", type=_csv, help="Only keep these extensions (comma separated, e.g. rs,toml).")
    ext.add_argument("--no-extension", type=_csv, help="Drop these extensions (comma separated, e.g. py,js).")

    parser.add_argument("--regex", help="Regular expression a path must match.")
    parser.add_argument(
        "--scope",
        choices=[s.value for s in Scope],
        default=Scope.NAME.value,
        help="Apply the regex to the file name or to the full path, prefixed with --path as typed (default: name).",
    )
    parser.add_argument("--regex-inv", action="store_true", help="Invert the regex filter.")
    parser.add_argument("--depth", type=int, help="Maximum search depth (0 = base only).")
    parser.add_argument("--exclude", type=_csv, help='Extra exclude patterns (comma separated, e.g. "target,*.log").')
    parser.add_argument("--no-default-excludes", action="store_true", help="Disable default excludes and ignore files.")
    parser.add_argument("--follow-symlinks", action="store_true", help="Follow symbolic links.")
    parser.add_argument("--include-hidden", action="store_true", help="Include hidden files.")
    parser.add_argument("--output", type=Path, help="Write to a file instead of stdout.")
    parser.add_argument("--max-bytes", type=int, help="Maximum content bytes per file with --content.")
    parser.add_argument("--absolute", action="store_true", help="Use absolute paths in the output.")
    parser.add_argument("-q", "--quiet", action="store_true", help="Suppress warnings and the run summary.")
    parser.add_argument("--guide", action="store_true", help="Show the usage guide and exit.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def setup_logging(quiet: bool) -> None:
    """Send diagnostics to stderr, keeping stdout for records."""
    log.handlers.clear()
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    log.addHandler(handler)
    log.setLevel(logging.ERROR if quiet else logging.INFO)


def config_from_args(args: argparse.Namespace) -> FilterConfig:
    return FilterConfig.build(
        base_path=args.path,
        extensions=args.extension,
        no_extensions=args.no_extension,
        regex=args.regex,
        regex_invert=args.regex_inv,
        scope=args.scope,
        max_depth=args.depth,
        exclude=args.exclude,
        default_excludes=not args.no_default_excludes,
        include_hidden=args.include_hidden,
        follow_symlinks=args.follow_symlinks,
        output=args.output,
        absolute_output=args.absolute,
        max_bytes=args.max_bytes,
        read_content=args.content,
        quiet=args.quiet,
    )


def open_sink(output: Path | None) -> BinaryIO:
    """Open the output file, or standard output, with a large write buffer."""
    if output is not None:
        return open(output, "wb", buffering=SINK_BUFFER_SIZE)
    sys.stdout.flush()
    return open(sys.stdout.fileno(), "wb", buffering=SINK_BUFFER_SIZE, closefd=False)


def _silence_stdout() -> None:
    # Later flushes of a closed pipe (ours or the interpreter's) go nowhere.
    devnull = os.open(os.devnull, os.O_WRONLY)
    os.dup2(devnull, sys.stdout.fileno())
    os.close(devnull)


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.guide:
        try:
            print(GUIDE)
            sys.stdout.flush()
        except BrokenPipeError:
            _silence_stdout()
        return 0

    setup_logging(args.quiet)

    try:
        config = config_from_args(args)
        entries = entries_for(config)
    except ConfigError as e:
        log.error("error: %s", e)
        return 1

    try:
        stream = open_sink(config.output)
    except OSError as e:
        log.error("error: failed to create output file: %s", e)
        return 1

    try:
        with stream:
            stats = collect(config, entries, SharedSink(stream))
            if stats.aborted and config.output is None:
                _silence_stdout()
    except OSError as e:
        log.error("error: %s", e)
        return 1

    return 0
