"""Expand command-line file arguments."""

from __future__ import annotations

from typing import Iterable, List
import glob
import logging
import os

logger = logging.getLogger("passable.files")

GLOB_CHARS = ("*", "?")


def is_pattern(arg: str) -> bool:
    return any(ch in arg for ch in GLOB_CHARS)


def expand_paths(patterns: Iterable[str]) -> List[str]:
    """Expand glob patterns into file paths.

    Arguments containing '*' or '?' are expanded with recursive glob ('**'
    crosses directories); square brackets in them match literally. Matches
    are sorted and restricted to regular files. Other arguments pass through
    unchanged, so a missing file is reported when it is opened.
    Duplicates are dropped, first occurrence wins.
    """
    args = list(patterns)
    result: List[str] = []
    seen = set()

    for arg in args:
        if is_pattern(arg):
            literal = arg.replace("[", "[[]")
            matches = sorted(p for p in glob.glob(literal, recursive=True) if os.path.isfile(p))
            if not matches:
                logger.warning("No files match %s", arg)
        else:
            matches = [arg]

        for path in matches:
            if path not in seen:
                seen.add(path)
                result.append(path)

    logger.debug("Expanded %d argument(s) to %d file(s)", len(args), len(result))
    return result
