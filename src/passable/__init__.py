"""passable: a configurable beautifier for CMake files."""

from .config import DEFAULT_CONFIGURATION, CommandRule, Configuration, resolve_config
from .errors import ConfigError, LexError, ParseError, PassableError
from .lexer import tokenize
from .parser import parse, parse_cmake_file, parse_source
from .printer import print_cmake, print_cmake_to_string
from .runner import format_source

__all__ = [
    "DEFAULT_CONFIGURATION",
    "CommandRule",
    "Configuration",
    "ConfigError",
    "LexError",
    "ParseError",
    "PassableError",
    "format_source",
    "parse",
    "parse_cmake_file",
    "parse_source",
    "print_cmake",
    "print_cmake_to_string",
    "resolve_config",
    "tokenize",
]
