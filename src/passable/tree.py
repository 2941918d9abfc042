"""AST node classes produced by the parser and read by the printer.

Every node is a frozen dataclass and every sequence is a tuple, so a parsed
file can be printed any number of times (under any configuration) without
changing it.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union
from typing_extensions import TypeAlias


# ---------- Arguments ----------

@dataclass(frozen=True)
class QuotedString:
    value: str
    tail_comment: Optional[str] = None


@dataclass(frozen=True)
class UnquotedString:
    value: str
    tail_comment: Optional[str] = None


@dataclass(frozen=True)
class VariableReference:
    name: str
    tail_comment: Optional[str] = None


@dataclass(frozen=True)
class BracketedString:
    value: str
    level: int = 0
    tail_comment: Optional[str] = None


@dataclass(frozen=True)
class GroupedArg:
    """A parenthesized argument group, e.g. the `(A OR B)` in `if((A OR B) AND C)`."""

    args: ArgList
    tail_comment: Optional[str] = None


@dataclass(frozen=True)
class BlockComment:
    """A comment on its own line(s); `is_blank` marks a preserved empty line.

    A bracket comment followed by code-line text keeps that line comment as
    its tail_comment.
    """

    text: str
    is_blank: bool = False
    tail_comment: Optional[str] = None


@dataclass(frozen=True)
class ArgList:
    args: Tuple[Argument, ...] = ()
    # comment right after '(' before any argument
    prefix_tail_comment: Optional[str] = None


NonCommentArg: TypeAlias = Union[
    QuotedString, UnquotedString, VariableReference, BracketedString, GroupedArg
]
Argument: TypeAlias = Union[NonCommentArg, BlockComment]


# ---------- Statements ----------

@dataclass(frozen=True)
class CommandInvocation:
    name: str
    args: ArgList
    tail_comment: Optional[str] = None


@dataclass(frozen=True)
class ElseIfBlock:
    condition: ArgList
    body: Tuple[Statement, ...]
    tail_comment: Optional[str] = None
    keyword: str = "elseif"


@dataclass(frozen=True)
class ElseBlock:
    body: Tuple[Statement, ...]
    args: Optional[ArgList] = None
    tail_comment: Optional[str] = None
    keyword: str = "else"


@dataclass(frozen=True)
class ConditionalBlock:
    condition: ArgList
    body: Tuple[Statement, ...]
    elseif_blocks: Tuple[ElseIfBlock, ...] = ()
    else_block: Optional[ElseBlock] = None
    endif_args: Optional[ArgList] = None
    if_tail_comment: Optional[str] = None
    endif_tail_comment: Optional[str] = None
    keyword: str = "if"
    endif_keyword: str = "endif"


@dataclass(frozen=True)
class PairedCall:
    """macro/function/block/while/foreach and their matching end* command."""

    open_keyword: str
    close_keyword: str
    params: ArgList
    body: Tuple[Statement, ...]
    end_args: Optional[ArgList] = None
    start_tail_comment: Optional[str] = None
    end_tail_comment: Optional[str] = None


@dataclass(frozen=True)
class Directive:
    text: str

    @property
    def disables_formatting(self) -> bool:
        return self.text.lstrip("#").strip().startswith("@format-off")

    @property
    def enables_formatting(self) -> bool:
        return self.text.lstrip("#").strip().startswith("@format-on")


@dataclass(frozen=True)
class UnformattedRegion:
    """Source lines between @format-off and @format-on, printed untouched."""

    lines: Tuple[str, ...]


Statement: TypeAlias = Union[
    CommandInvocation,
    ConditionalBlock,
    PairedCall,
    BlockComment,
    Directive,
    UnformattedRegion,
]


@dataclass(frozen=True)
class CMakeFile:
    statements: Tuple[Statement, ...] = ()


BLANK_LINE = BlockComment("", is_blank=True)
