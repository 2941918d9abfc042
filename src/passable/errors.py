"""Error types shared by the lexer, parser and configuration layer."""

from __future__ import annotations

from typing import Optional, Sequence

from .token_types import Tok


class PassableError(Exception):
    """Base class for every error raised by passable."""


class LexError(PassableError):
    """Lexical analysis error"""

    def __init__(self, message: str, line: int = 0, column: int = 0):
        self.message = message
        self.line = line
        self.column = column
        super().__init__(f"{message} at line {line}, col {column}")


class ParseError(PassableError):
    """Parse error with position info and the tokens leading up to it"""

    def __init__(
        self,
        message: str,
        token: Optional[Tok] = None,
        context: Sequence[Tok] = (),
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.token = token
        self.context = tuple(context)
        self.source_line = source_line
        self.line = token.line if token else None
        self.column = token.column if token else None

        text = f"{message} at line {token.line}, col {token.column}" if token else message
        if self.context:
            text += " -- after: " + " ".join(tok.describe() for tok in self.context)
        if source_line is not None:
            text += f"\n  {self.line} | {source_line}"
        super().__init__(text)


class ConfigError(PassableError):
    """A configuration field (or a whole configuration file) that is unusable.

    Field errors are recovered during validation: the field is treated as
    absent and the default wins. Only an explicitly named file that cannot
    be read reaches the caller.
    """

    def __init__(self, field: str, message: str, source: Optional[str] = None):
        self.field = field
        self.message = message
        self.source = source
        text = f"Invalid configuration field {field!r}: {message}"
        super().__init__(f"{source}: {text}" if source else text)
