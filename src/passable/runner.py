"""Command-line entry point: format CMake files to stdout or in place."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional
import argparse
import logging
import sys
import time

from rich.console import Console
from rich.logging import RichHandler

from .config import DEFAULT_CONFIGURATION, Configuration, resolve_config
from .debug import dump_ast
from .errors import ConfigError, LexError, ParseError
from .files import expand_paths
from .loader import load_config, load_config_file
from .parser import parse_source
from .printer import print_cmake_to_string

logger = logging.getLogger("passable.runner")

FILE_ERRORS = (LexError, ParseError, OSError, UnicodeDecodeError)


def setup_logging(verbose: bool = False) -> None:
    """Send log records to stderr through rich; stdout carries formatted output."""
    level = logging.DEBUG if verbose else logging.WARNING

    handler = RichHandler(
        console=Console(stderr=True),
        show_time=verbose,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
        log_time_format="[%H:%M:%S]",
    )

    logging.basicConfig(
        level=level,
        format="[%(name)s] %(message)s",
        handlers=[handler],
    )


def format_source(source: str, config: Configuration = DEFAULT_CONFIGURATION) -> str:
    """Tokenize, parse and print one file's text"""
    return print_cmake_to_string(parse_source(source), config)


def read_source(path: str) -> str:
    # newline="" keeps CRLF so unchanged files compare equal
    with open(path, encoding="utf-8", newline="") as f:
        return f.read()


def format_file(path: str, config: Configuration) -> str:
    return format_source(read_source(path), config)


def format_file_in_place(path: str, config: Configuration) -> bool:
    """Rewrite path with its formatted text; returns whether it changed"""
    original = read_source(path)
    formatted = format_source(original, config)
    if formatted == original:
        logger.debug("%s is already formatted", path)
        return False

    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(formatted)
    return True


def build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="passable", description="Format CMake files")
    ap.add_argument("files", nargs="+", metavar="FILE_OR_GLOB", help="Files or glob patterns ('**' recurses)")
    ap.add_argument("-i", "--in-place", action="store_true", help="Rewrite files instead of printing them")
    ap.add_argument("-c", "--config", metavar="FILE", help="Configuration file (.json or .toml); skips discovery")
    ap.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    ap.add_argument("--dump-ast", action="store_true", help="Print the parse tree instead of formatting")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    """Run the formatter.

    Returns:
        0 on success, 1 if any file failed, 2 on usage or configuration errors.
    """
    args = build_arg_parser().parse_args(argv)
    setup_logging(args.verbose)

    try:
        raw = load_config_file(args.config) if args.config else load_config()
    except ConfigError as exc:
        logger.error("%s", exc)
        return 2
    config = resolve_config(raw)

    paths = expand_paths(args.files)
    if not paths:
        logger.error("No input files")
        return 2

    failures = 0
    total_start = time.perf_counter()

    for path in paths:
        start = time.perf_counter()
        try:
            if args.dump_ast:
                sys.stdout.write(dump_ast(parse_source(read_source(path))))
            elif args.in_place:
                if format_file_in_place(path, config):
                    logger.info("Reformatted %s", path)
            else:
                sys.stdout.write(format_file(path, config))
        except FILE_ERRORS as exc:
            failures += 1
            logger.error("%s: %s", path, exc)
            continue

        if args.in_place:
            logger.info("Formatting time: %s %.1fms", Path(path).name, (time.perf_counter() - start) * 1000)

    if args.in_place:
        logger.info("Total formatting time: %.1fms", (time.perf_counter() - total_start) * 1000)

    if failures:
        logger.warning("%d of %d file(s) failed", failures, len(paths))
        return 1
    return 0
