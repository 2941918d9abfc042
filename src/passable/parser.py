"""
Recursive Descent Parser for CMake

Structure:
- Lexer: Token stream from source (lexer.py)
- Parser: Recursive descent over statements and argument lists
- AST: Frozen dataclasses from tree.py

Statement grammar (informal):

    file        := statement* EOF
    statement   := COMMENT TAIL_COMMENT? | BLANK_LINE | DIRECTIVE
                 | if_block | paired_call | command
    command     := IDENT arglist TAIL_COMMENT?
    arglist     := '(' TAIL_COMMENT? argument* ')'
    argument    := (QUOTED | IDENT | VARIABLE | BRACKETED | arglist) TAIL_COMMENT?
                 | COMMENT TAIL_COMMENT? | DIRECTIVE
    if_block    := 'if' arglist TAIL_COMMENT? statement*
                   ('elseif' arglist TAIL_COMMENT? statement*)*
                   ('else' arglist TAIL_COMMENT? statement*)?
                   'endif' arglist TAIL_COMMENT?
    paired_call := OPEN arglist TAIL_COMMENT? statement* CLOSE arglist TAIL_COMMENT?

Keywords are matched case-insensitively and kept as written.
"""

from dataclasses import replace
from typing import FrozenSet, List, Optional, Sequence, Tuple
import logging

from .errors import ParseError
from .lexer import TokenStream, tokenize
from .token_types import TT, Tok
from .tree import (
    BLANK_LINE,
    ArgList,
    Argument,
    BlockComment,
    BracketedString,
    CMakeFile,
    CommandInvocation,
    ConditionalBlock,
    Directive,
    ElseBlock,
    ElseIfBlock,
    GroupedArg,
    NonCommentArg,
    PairedCall,
    QuotedString,
    Statement,
    UnformattedRegion,
    UnquotedString,
    VariableReference,
)

logger = logging.getLogger("passable.parser")

# Block commands whose body runs until "end" + name
PAIRED_COMMANDS = ("macro", "function", "block", "while", "foreach")

IF_TERMINATORS = frozenset({"elseif", "else", "endif"})

CLOSING_KEYWORDS = IF_TERMINATORS | frozenset("end" + name for name in PAIRED_COMMANDS)

MAX_NESTING_DEPTH = 100

# ============================================================================
# Parser
# ============================================================================

class Parser:
    """
    Recursive descent parser for CMake.

    Nested blocks recurse through parse_statement, so no explicit block stack
    is kept; depth is capped at MAX_NESTING_DEPTH.
    """

    def __init__(self, tokens: TokenStream, source_lines: Optional[Sequence[str]] = None):
        self.tokens = tokens
        self.source_lines = source_lines
        self.depth = 0

    # ========================================================================
    # Token Navigation
    # ========================================================================

    def check(self, *types: TT) -> bool:
        """Check if next token matches any of the given types"""
        return self.tokens.peek().type in types

    def check_keyword(self, names: FrozenSet[str]) -> bool:
        """Check if next token is an identifier naming one of the keywords"""
        tok = self.tokens.peek()
        return tok.type == TT.IDENT and tok.value.lower() in names

    def error(self, message: str, token: Optional[Tok] = None) -> ParseError:
        """Build a ParseError carrying recent tokens and the offending line"""
        token = token or self.tokens.peek()
        source_line = None
        if self.source_lines and 0 < token.line <= len(self.source_lines):
            source_line = self.source_lines[token.line - 1].rstrip("\r")
        return ParseError(message, token, self.tokens.history(10), source_line)

    def enter(self, token: Tok):
        self.depth += 1
        if self.depth > MAX_NESTING_DEPTH:
            raise self.error(f"Nesting too deep (more than {MAX_NESTING_DEPTH} levels)", token)

    def leave(self):
        self.depth -= 1

    def last_line(self) -> int:
        """Last source line touched by the most recently consumed token"""
        prev = self.tokens.history(1)
        return prev[0].end_line if prev else 0

    # ========================================================================
    # Top-Level Parsing
    # ========================================================================

    def parse(self) -> CMakeFile:
        """Parse entire file"""
        statements = self.parse_statements(frozenset())
        self.tokens.expect(TT.EOF)
        logger.debug("Parsed %d top-level statements", len(statements))
        return CMakeFile(tuple(statements))

    def parse_statements(self, terminators: FrozenSet[str]) -> List[Statement]:
        """
        Parse statements until EOF or an identifier in terminators.

        The caller decides whether stopping at EOF is an error.
        """
        statements: List[Statement] = []

        while not self.check(TT.EOF) and not self.check_keyword(terminators):
            if self.check(TT.BLANK_LINE):
                # Collapse runs of blank lines into one
                while self.check(TT.BLANK_LINE):
                    self.tokens.consume()
                statements.append(BLANK_LINE)
                continue

            stmt = self.parse_statement()
            statements.append(stmt)

            if isinstance(stmt, Directive) and stmt.disables_formatting and self.source_lines is not None:
                statements.extend(self.parse_unformatted_region(terminators))

        return statements

    def parse_unformatted_region(self, terminators: FrozenSet[str]) -> List[Statement]:
        """
        Capture the raw lines after a @format-off directive.

        The statements are still parsed so that structural errors surface,
        but only their source lines are kept. The region ends before the next
        @format-on directive in the same statement list, or with the list.

        Statements that share a line with the token ending the region (such
        as `set(x) endif()`) are returned after the region and print
        normally, so that the closer is never copied into the region.
        """
        assert self.source_lines is not None
        first = self.last_line() + 1
        parsed: List[Tuple[int, int, Statement]] = []

        while not self.check(TT.EOF) and not self.check_keyword(terminators):
            tok = self.tokens.peek()
            if tok.type == TT.DIRECTIVE and Directive(tok.value).enables_formatting:
                break
            if tok.type == TT.BLANK_LINE:
                self.tokens.consume()
                continue
            stmt = self.parse_statement()
            parsed.append((tok.line, self.last_line(), stmt))

        keep = len(parsed)
        last = parsed[-1][1] if parsed else first - 1

        if not self.check(TT.EOF):
            stop = self.tokens.peek()
            cut = stop.line
            while keep and parsed[keep - 1][1] >= cut:
                keep -= 1
                cut = min(cut, parsed[keep][0])
            if stop.type == TT.DIRECTIVE:
                last = cut - 1
            else:
                last = min(parsed[keep - 1][1] if keep else first - 1, cut - 1)

        statements: List[Statement] = []
        if last >= first:
            lines = tuple(line.rstrip("\r") for line in self.source_lines[first - 1:last])
            statements.append(UnformattedRegion(lines))
        statements.extend(stmt for _, _, stmt in parsed[keep:])
        return statements

    # ========================================================================
    # Statements
    # ========================================================================

    def parse_statement(self) -> Statement:
        """
        Parse a single statement.

        Statements include:
        - Comments, blank lines and directives
        - if/elseif/else/endif blocks
        - macro/function/block/while/foreach blocks
        - Plain command invocations
        """
        tok = self.tokens.peek()

        if tok.type == TT.COMMENT:
            return self.parse_comment()
        if tok.type == TT.BLANK_LINE:
            self.tokens.consume()
            return BLANK_LINE
        if tok.type == TT.DIRECTIVE:
            return Directive(self.tokens.consume().value)

        if tok.type != TT.IDENT:
            raise self.error(
                f"Expected command name or comment, got {tok.type.name} '{tok.describe()}'"
            )

        name = tok.value.lower()
        if name == "if":
            return self.parse_conditional_block()
        if name in PAIRED_COMMANDS:
            return self.parse_paired_call(name, "end" + name)
        if name in CLOSING_KEYWORDS:
            opener = "if" if name in IF_TERMINATORS else name[3:]
            raise self.error(f"Unexpected {tok.value}() without matching {opener}()")

        return self.parse_command_invocation()

    def parse_command_invocation(self) -> CommandInvocation:
        name = self.tokens.expect(TT.IDENT)
        args = self.parse_arguments(name)
        return CommandInvocation(name.value, args, self.maybe_tail_comment())

    def parse_conditional_block(self) -> ConditionalBlock:
        """
        Parse if block:
        if(cond) body [elseif(cond) body]* [else() body] endif()
        """
        if_tok = self.tokens.expect(TT.IDENT)
        self.enter(if_tok)
        condition = self.parse_arguments(if_tok)
        if_tail = self.maybe_tail_comment()
        body = self.parse_block_body(IF_TERMINATORS, if_tok, "endif")

        elseif_blocks: List[ElseIfBlock] = []
        else_block: Optional[ElseBlock] = None

        while True:
            tok = self.tokens.peek()
            keyword = tok.value.lower()

            if keyword == "endif":
                break

            if else_block is not None:
                raise self.error(f"Unexpected {tok.value}() after else()", tok)

            self.tokens.consume()
            args = self.parse_arguments(tok)
            tail = self.maybe_tail_comment()
            branch_body = self.parse_block_body(IF_TERMINATORS, if_tok, "endif")

            if keyword == "elseif":
                elseif_blocks.append(ElseIfBlock(args, branch_body, tail, tok.value))
            else:
                else_block = ElseBlock(branch_body, args, tail, tok.value)

        endif_tok = self.tokens.consume()
        endif_args = self.parse_arguments(endif_tok)
        endif_tail = self.maybe_tail_comment()
        self.leave()

        return ConditionalBlock(
            condition=condition,
            body=body,
            elseif_blocks=tuple(elseif_blocks),
            else_block=else_block,
            endif_args=endif_args,
            if_tail_comment=if_tail,
            endif_tail_comment=endif_tail,
            keyword=if_tok.value,
            endif_keyword=endif_tok.value,
        )

    def parse_paired_call(self, open_name: str, close_name: str) -> PairedCall:
        """
        Parse a block command and its matching end command, e.g.
        function(name args) body endfunction(name)
        """
        open_tok = self.tokens.expect(TT.IDENT)
        self.enter(open_tok)
        params = self.parse_arguments(open_tok)
        start_tail = self.maybe_tail_comment()
        body = self.parse_block_body(frozenset({close_name}), open_tok, close_name)

        close_tok = self.tokens.consume()
        end_args = self.parse_arguments(close_tok)
        end_tail = self.maybe_tail_comment()
        self.leave()

        return PairedCall(
            open_keyword=open_tok.value,
            close_keyword=close_tok.value,
            params=params,
            body=body,
            end_args=end_args,
            start_tail_comment=start_tail,
            end_tail_comment=end_tail,
        )

    def parse_block_body(self, terminators: FrozenSet[str], opener: Tok, closer: str) -> Tuple[Statement, ...]:
        """Parse a block body; running into EOF means the closer is missing"""
        body = self.parse_statements(terminators)
        if self.check(TT.EOF):
            raise self.error(
                f"Missing {closer}() for {opener.value}() at line {opener.line}"
            )
        return tuple(body)

    # ========================================================================
    # Arguments
    # ========================================================================

    def parse_arguments(self, owner: Tok) -> ArgList:
        """
        Parse a parenthesized argument list, '(' included.

        A tail comment right after '(' is the list's prefix comment.
        """
        if not self.check(TT.LPAR):
            tok = self.tokens.peek()
            raise self.error(
                f"Expected '(' after {owner.value}, got {tok.type.name} '{tok.describe()}'"
            )
        open_tok = self.tokens.consume()

        prefix: Optional[str] = None
        if self.check(TT.TAIL_COMMENT):
            prefix = self.tokens.consume().value

        args: List[Argument] = []
        while not self.check(TT.RPAR):
            if self.check(TT.EOF):
                raise self.error(f"Missing ')' for '(' at line {open_tok.line}, col {open_tok.column}")
            arg = self.parse_argument()
            if arg is not None:
                args.append(arg)

        self.tokens.expect(TT.RPAR)
        return ArgList(tuple(args), prefix)

    def parse_argument(self) -> Optional[Argument]:
        """Parse one argument; blank lines inside argument lists are dropped"""
        tok = self.tokens.peek()

        if tok.type == TT.QUOTED:
            self.tokens.consume()
            return self.with_tail(QuotedString(tok.value))
        if tok.type == TT.IDENT:
            self.tokens.consume()
            return self.with_tail(UnquotedString(tok.value))
        if tok.type == TT.VARIABLE:
            self.tokens.consume()
            return self.with_tail(VariableReference(tok.value))
        if tok.type == TT.BRACKETED:
            self.tokens.consume()
            content, level = tok.value
            return self.with_tail(BracketedString(content, level))
        if tok.type == TT.LPAR:
            # parse_arguments consumes the '(' itself
            self.enter(tok)
            group = GroupedArg(self.parse_arguments(tok))
            self.leave()
            return self.with_tail(group)
        if tok.type == TT.COMMENT:
            return self.parse_comment()
        if tok.type == TT.DIRECTIVE:
            self.tokens.consume()
            return BlockComment(tok.value)
        if tok.type == TT.BLANK_LINE:
            self.tokens.consume()
            return None

        raise self.error(f"Unexpected token in argument: {tok.type.name} '{tok.describe()}'")

    def parse_comment(self) -> BlockComment:
        """A comment; a bracket comment on a code line may carry a tail"""
        text = self.tokens.consume().value
        return BlockComment(text, tail_comment=self.maybe_tail_comment())

    def maybe_tail_comment(self) -> Optional[str]:
        if self.check(TT.TAIL_COMMENT):
            return self.tokens.consume().value
        return None

    def with_tail(self, arg: NonCommentArg) -> NonCommentArg:
        tail = self.maybe_tail_comment()
        if tail is None:
            return arg
        return replace(arg, tail_comment=tail)

# ============================================================================
# Entry Points
# ============================================================================

def parse(tokens: TokenStream, source_lines: Optional[Sequence[str]] = None) -> CMakeFile:
    """
    Parse a token stream into a CMakeFile.

    Args:
        tokens: Stream from lexer.tokenize
        source_lines: The source split into lines; used for error context
            and to reproduce @format-off regions verbatim
    """
    return Parser(tokens, source_lines).parse()


parse_cmake_file = parse


def parse_source(source: str) -> CMakeFile:
    """Tokenize and parse CMake source text"""
    return parse(tokenize(source), source.replace("\r\n", "\n").split("\n"))
