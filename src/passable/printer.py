"""
Pretty-printer for parsed CMake files

Layout rules, per parenthesized argument list:
- Fit-or-split: print `name(args...)` on one line when it fits the print
  width and nothing forces a break (comments inside the list, tail comments
  on arguments, or a nested group that cannot be single-lined). Otherwise
  print `name(`, the arguments one level deeper, and `)` back at the
  command's indent.
- Keyword grouping: for commands with control keywords, each keyword starts
  a group whose arguments print one level under the keyword.
- indentAfter: in a split list, arguments after that index go one level
  deeper.

The printer only reads the AST. Canonicalized keyword spellings are computed
into the output strings, so one tree can be printed under any number of
configurations.
"""

from typing import List, Optional, Sequence
import logging

from .config import DEFAULT_CONFIGURATION, CommandRule, Configuration
from .tree import (
    ArgList,
    Argument,
    BlockComment,
    BracketedString,
    CMakeFile,
    CommandInvocation,
    ConditionalBlock,
    Directive,
    GroupedArg,
    PairedCall,
    QuotedString,
    Statement,
    UnformattedRegion,
    UnquotedString,
    VariableReference,
)

logger = logging.getLogger("passable.printer")

EMPTY_ARGS = ArgList()


def _with_tail(text: str, tail: Optional[str]) -> str:
    return f"{text} {tail}" if tail else text


def _is_blank(stmt: Statement) -> bool:
    return isinstance(stmt, BlockComment) and stmt.is_blank


# ============================================================================
# Printer
# ============================================================================

class Printer:
    """
    Walks a CMakeFile and collects physical output lines.

    Indent levels are integers; a level is rendered with the configured
    indent unit and measured as tab_width columns.
    """

    def __init__(self, config: Configuration):
        self.config = config
        self.lines: List[str] = []

    # ========================================================================
    # Output
    # ========================================================================

    def emit(self, level: int, text: str):
        """
        Append text at an indent level.

        Text spanning several lines (multi-line strings, bracket comments)
        is split; only its first line is indented.
        """
        first, *rest = text.split("\n")
        self.lines.append(self.config.indent_unit * level + first if first else "")
        self.lines.extend(rest)

    def fits(self, level: int, text: str) -> bool:
        """Check every physical line of text against the print width"""
        width = self.config.print_width
        first, *rest = text.split("\n")
        if level * self.config.tab_width + len(first) > width:
            return False
        return all(len(line) <= width for line in rest)

    # ========================================================================
    # Statements
    # ========================================================================

    def print_file(self, ast: CMakeFile):
        statements = list(ast.statements)
        while statements and _is_blank(statements[0]):
            statements.pop(0)
        while statements and _is_blank(statements[-1]):
            statements.pop()
        self.print_body(statements, 0)

    def print_body(self, statements: Sequence[Statement], level: int):
        for stmt in statements:
            self.print_statement(stmt, level)

    def print_statement(self, stmt: Statement, level: int):
        if isinstance(stmt, CommandInvocation):
            rule = self.config.rule_for(stmt.name)
            self.print_call(stmt.name, stmt.args, level, stmt.tail_comment, rule)
        elif isinstance(stmt, ConditionalBlock):
            self.print_conditional(stmt, level)
        elif isinstance(stmt, PairedCall):
            self.print_paired(stmt, level)
        elif isinstance(stmt, BlockComment):
            if stmt.is_blank:
                self.lines.append("")
            else:
                self.emit(level, _with_tail(stmt.text, stmt.tail_comment))
        elif isinstance(stmt, Directive):
            self.emit(level, stmt.text)
        elif isinstance(stmt, UnformattedRegion):
            self.lines.extend(stmt.lines)
        else:
            raise TypeError(f"Unknown statement node: {type(stmt).__name__}")

    def print_conditional(self, block: ConditionalBlock, level: int):
        self.print_header(block.keyword, block.condition, level, block.if_tail_comment)
        self.print_body(block.body, level + 1)

        for branch in block.elseif_blocks:
            self.print_header(branch.keyword, branch.condition, level, branch.tail_comment)
            self.print_body(branch.body, level + 1)

        if block.else_block is not None:
            branch = block.else_block
            self.print_header(branch.keyword, branch.args or EMPTY_ARGS, level, branch.tail_comment)
            self.print_body(branch.body, level + 1)

        self.print_header(
            block.endif_keyword, block.endif_args or EMPTY_ARGS, level, block.endif_tail_comment
        )

    def print_paired(self, block: PairedCall, level: int):
        self.print_header(block.open_keyword, block.params, level, block.start_tail_comment)
        self.print_body(block.body, level + 1)
        self.print_header(
            block.close_keyword, block.end_args or EMPTY_ARGS, level, block.end_tail_comment
        )

    def print_header(self, keyword: str, args: ArgList, level: int, tail: Optional[str]):
        self.print_call(keyword, args, level, tail, self.config.rule_for(keyword))

    # ========================================================================
    # Argument Lists
    # ========================================================================

    def print_call(
        self,
        name: str,
        args: ArgList,
        level: int,
        tail: Optional[str],
        rule: CommandRule,
        nested: bool = False,
    ):
        """
        Fit-or-split one parenthesized list.

        Nested groups (name == "") split one argument per line; keyword
        grouping and indentAfter apply to a command's own list only.
        """
        single = self.single_line(name, args, tail, rule)
        if single is not None and (not args.args or self.fits(level, single)):
            self.emit(level, single)
            return

        self.emit(level, _with_tail(name + "(", args.prefix_tail_comment))
        if nested:
            for arg in args.args:
                self.print_argument(arg, level + 1, rule)
        elif rule.control_keywords:
            self.print_grouped(args.args, level + 1, rule)
        else:
            self.print_ungrouped(args.args, level + 1, rule)
        self.emit(level, _with_tail(")", tail))

    def print_ungrouped(self, args: Sequence[Argument], level: int, rule: CommandRule):
        """One argument per line, with indentAfter applied"""
        index = 0
        for arg in args:
            self.print_argument(arg, self.level_for(index, level, rule), rule)
            if not isinstance(arg, BlockComment):
                index += 1

    def print_grouped(self, args: Sequence[Argument], level: int, rule: CommandRule):
        """
        Print a split list with keyword groups:

            target_link_libraries(
              lib
              PUBLIC
                a b
              PRIVATE
                c
            )
        """
        keyword: Optional[UnquotedString] = None
        group: List[Argument] = []
        index = 0

        for arg in args:
            if isinstance(arg, UnquotedString) and (rule.is_keyword(arg.value) or rule.is_option(arg.value)):
                if keyword is not None:
                    self.print_group(keyword, group, level, rule)
                keyword, group = None, []
                if rule.is_keyword(arg.value):
                    keyword = arg
                else:
                    self.print_argument(arg, level, rule)
            elif keyword is not None:
                group.append(arg)
            else:
                self.print_argument(arg, self.level_for(index, level, rule), rule)

            if not isinstance(arg, BlockComment):
                index += 1

        if keyword is not None:
            self.print_group(keyword, group, level, rule)

    def print_group(self, keyword: UnquotedString, group: Sequence[Argument], level: int, rule: CommandRule):
        self.print_argument(keyword, level, rule)
        if not group:
            return

        texts = [self.single_argument(arg, rule) for arg in group]
        if all(text is not None for text in texts):
            line = " ".join(texts)
            if self.fits(level + 1, line):
                self.emit(level + 1, line)
                return

        for arg in group:
            self.print_argument(arg, level + 1, rule)

    def level_for(self, index: int, level: int, rule: CommandRule) -> int:
        if 0 <= rule.indent_after < index:
            return level + 1
        return level

    def print_argument(self, arg: Argument, level: int, rule: CommandRule):
        if isinstance(arg, BlockComment):
            if not arg.is_blank:
                self.emit(level, _with_tail(arg.text, arg.tail_comment))
            return
        if isinstance(arg, GroupedArg):
            self.print_call("", arg.args, level, arg.tail_comment, rule, nested=True)
            return
        self.emit(level, _with_tail(self.format_atom(arg, rule), arg.tail_comment))

    # ========================================================================
    # Single-Line Rendering
    # ========================================================================

    def single_line(self, name: str, args: ArgList, tail: Optional[str], rule: CommandRule) -> Optional[str]:
        """
        Render `name(args...)` on one line, or None if something inside
        forces the list to split.
        """
        if args.prefix_tail_comment:
            return None
        parts: List[str] = []
        for arg in args.args:
            text = self.single_argument(arg, rule)
            if text is None:
                return None
            parts.append(text)
        return _with_tail(name + "(" + " ".join(parts) + ")", tail)

    def single_argument(self, arg: Argument, rule: CommandRule) -> Optional[str]:
        if isinstance(arg, BlockComment) or arg.tail_comment:
            return None
        if isinstance(arg, GroupedArg):
            return self.single_line("", arg.args, None, rule)
        return self.format_atom(arg, rule)

    def format_atom(self, arg: Argument, rule: CommandRule) -> str:
        if isinstance(arg, UnquotedString):
            return rule.canonical(arg.value)
        if isinstance(arg, QuotedString):
            return f'"{arg.value}"'
        if isinstance(arg, VariableReference):
            return "${" + arg.name + "}"
        if isinstance(arg, BracketedString):
            equals = "=" * arg.level
            return f"[{equals}[{arg.value}]{equals}]"
        raise TypeError(f"Not an atomic argument: {type(arg).__name__}")


# ============================================================================
# Entry Points
# ============================================================================

def print_cmake(ast: CMakeFile, config: Configuration = DEFAULT_CONFIGURATION) -> List[str]:
    """
    Format a parsed file.

    Returns:
        Physical output lines without line terminators. Leading and trailing
        blank lines of the file are dropped.
    """
    printer = Printer(config)
    printer.print_file(ast)
    logger.debug("Printed %d statements as %d lines", len(ast.statements), len(printer.lines))
    return printer.lines


def print_cmake_to_string(ast: CMakeFile, config: Configuration = DEFAULT_CONFIGURATION) -> str:
    """Format a parsed file; lines end with config.end_of_line, empty file gives ''"""
    lines = print_cmake(ast, config)
    if not lines:
        return ""
    eol = config.end_of_line
    return eol.join(lines) + eol


