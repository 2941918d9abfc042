"""
Token Types for the CMake formatter

Shared between lexer and parser to avoid circular dependencies.
"""

from typing import Any
from dataclasses import dataclass
from enum import Enum, auto


class TT(Enum):
    """Token Types"""

    # Arguments
    IDENT = auto()
    QUOTED = auto()
    BRACKETED = auto()  # value is (content, equals level)
    VARIABLE = auto()  # a lone ${name}

    # Punctuation
    LPAR = auto()
    RPAR = auto()

    # Comments
    COMMENT = auto()  # standalone or #[[ ]] bracket comment
    TAIL_COMMENT = auto()  # trails code on the same line
    DIRECTIVE = auto()  # @format-off / @format-on

    # Special
    BLANK_LINE = auto()
    EOF = auto()


COMMENT_TYPES = frozenset({TT.COMMENT, TT.TAIL_COMMENT, TT.DIRECTIVE})


@dataclass(frozen=True)
class Tok:
    """Token with position info"""

    type: TT
    value: Any
    line: int = 0
    column: int = 0
    end_line: int = 0

    def describe(self) -> str:
        """Short human readable form used in diagnostics."""
        if self.type == TT.EOF:
            return "end of input"
        if self.type == TT.BLANK_LINE:
            return "blank line"
        if self.type == TT.BRACKETED:
            content, level = self.value
            eq = "=" * level
            return f"[{eq}[{content}]{eq}]"
        if self.type == TT.QUOTED:
            return f'"{self.value}"'
        if self.type == TT.VARIABLE:
            return "${" + self.value + "}"
        return f"{self.value}"

    def __repr__(self):
        return f"Tok({self.type.name}, {self.value!r}, {self.line}:{self.column})"
