"""
Lexer for the CMake language

Tokenizes CMake source into a stream of tokens.

Features:
- Single-pass tokenization
- Position tracking (line, column)
- Quoted and bracket arguments that may span lines
- Bracket arguments and bracket comments with any number of '=' signs
- Standalone / tail comment classification and @format-off/on directives
- One BLANK_LINE token per empty source line
"""

from typing import Iterator, List, Optional
import logging
import re

from .errors import LexError, ParseError
from .token_types import TT, Tok

logger = logging.getLogger("passable.lexer")

WHITESPACE = frozenset(" \t\r\f\v")

# Characters that end an unquoted argument
ARG_TERMINATORS = frozenset(" \t\r\f\v\n()#")

CODE_TOKENS = frozenset({TT.IDENT, TT.QUOTED, TT.BRACKETED, TT.VARIABLE, TT.LPAR, TT.RPAR})

DIRECTIVES = ("@format-off", "@format-on")

# A whole unquoted argument that is exactly one ${name} reference
VARIABLE_REF = re.compile(r"\$\{([A-Za-z0-9_./+\-]+)\}")

# ============================================================================
# Lexer Implementation
# ============================================================================

class Lexer:
    """
    CMake lexer.

    Comments are classified as they are scanned: a '#' comment with nothing
    but whitespace (or other comments) before it on its line is standalone,
    otherwise it is a tail comment of the code it follows.
    """

    def __init__(self, source: str):
        self.source = source.replace("\r\n", "\n")
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Tok] = []

        # Per-line state, reset at every newline between tokens
        self.line_has_code = False
        self.line_is_blank = True

    # ========================================================================
    # Main Tokenization
    # ========================================================================

    def tokenize(self) -> List[Tok]:
        """Tokenize entire source, return token list"""
        while self.pos < len(self.source):
            self.scan_token()

        self.emit(TT.EOF, None, self.line, self.column)
        logger.debug("Tokenized %d lines into %d tokens", self.line, len(self.tokens))
        return self.tokens

    def scan_token(self):
        """Scan next token"""
        ch = self.peek()

        if ch in WHITESPACE:
            self.advance()
            return

        if ch == "\n":
            self.scan_newline()
            return

        if ch == "#":
            self.scan_comment()
            return

        if ch == "(":
            self.emit(TT.LPAR, "(", self.line, self.column)
            self.advance()
            return

        if ch == ")":
            self.emit(TT.RPAR, ")", self.line, self.column)
            self.advance()
            return

        if ch == '"':
            self.scan_quoted()
            return

        if ch == "[" and self.bracket_level() is not None:
            self.scan_bracket_argument()
            return

        self.scan_unquoted()

    # ========================================================================
    # Token Scanners
    # ========================================================================

    def scan_newline(self):
        """Scan newline character, emitting BLANK_LINE for an empty line"""
        if self.line_is_blank:
            self.emit(TT.BLANK_LINE, "", self.line, 1)

        self.advance()
        self.line_has_code = False
        self.line_is_blank = True

    def scan_comment(self):
        """Scan '#' line comment or '#[[ ]]' bracket comment"""
        line, column = self.line, self.column

        level = self.bracket_level(1)
        if level is not None:
            start = self.pos
            self.advance(level + 3)  # '#[' + '='*level + '['
            self.scan_bracket_body(level, "Unterminated bracket comment", line, column)
            text = self.source[start:self.pos]
            self.emit(TT.COMMENT, text, line, column)
            # A line comment after a bracket comment is its tail
            self.line_has_code = True
            return

        end = self.source.find("\n", self.pos)
        if end < 0:
            end = len(self.source)
        text = self.source[self.pos:end].rstrip()
        self.advance(end - self.pos)

        if self.line_has_code:
            self.emit(TT.TAIL_COMMENT, text, line, column)
        elif text[1:].strip().startswith(DIRECTIVES):
            self.emit(TT.DIRECTIVE, text, line, column)
        else:
            self.emit(TT.COMMENT, text, line, column)

    def scan_quoted(self):
        """Scan quoted argument: "..." (may span lines)"""
        line, column = self.line, self.column
        self.advance()  # opening quote
        start = self.pos
        self.skip_quoted_content(line, column)
        content = self.source[start:self.pos]
        self.advance()  # closing quote
        self.emit(TT.QUOTED, content, line, column)

    def skip_quoted_content(self, line: int, column: int):
        """Advance to the closing quote, keeping escape sequences as-is"""
        while self.pos < len(self.source):
            ch = self.source[self.pos]
            if ch == "\\":
                self.advance(min(2, len(self.source) - self.pos))
                continue
            if ch == '"':
                return
            self.advance()

        raise LexError("Unterminated quoted string", line, column)

    def scan_bracket_argument(self):
        """Scan bracket argument: [=[ ... ]=]"""
        line, column = self.line, self.column
        level = self.bracket_level()
        assert level is not None
        self.advance(level + 2)  # '[' + '='*level + '['
        start = self.pos
        self.scan_bracket_body(level, "Unterminated bracket argument", line, column)
        content = self.source[start:self.pos - (level + 2)]
        self.emit(TT.BRACKETED, (content, level), line, column)

    def scan_bracket_body(self, level: int, message: str, line: int, column: int):
        """Advance past the closing ']' + '='*level + ']'"""
        closer = "]" + "=" * level + "]"
        end = self.source.find(closer, self.pos)
        if end < 0:
            raise LexError(message, line, column)
        self.advance(end + len(closer) - self.pos)

    def scan_unquoted(self):
        """
        Scan an unquoted argument or command name.

        ${...} references, escapes and legacy "..." segments stay inside the
        argument. A run that is exactly one ${name} becomes a VARIABLE token.
        """
        line, column = self.line, self.column
        start = self.pos

        while self.pos < len(self.source):
            ch = self.source[self.pos]
            if ch in ARG_TERMINATORS:
                break
            if ch == "\\":
                self.advance(min(2, len(self.source) - self.pos))
            elif ch == "$" and self.peek(1) == "{":
                self.skip_variable_ref()
            elif ch == '"':
                quote_line, quote_column = self.line, self.column
                self.advance()
                self.skip_quoted_content(quote_line, quote_column)
                self.advance()
            else:
                self.advance()

        text = self.source[start:self.pos]
        match = VARIABLE_REF.fullmatch(text)
        if match:
            self.emit(TT.VARIABLE, match.group(1), line, column)
        else:
            self.emit(TT.IDENT, text, line, column)

    def skip_variable_ref(self):
        """Skip a (possibly nested) ${...} reference"""
        self.advance(2)
        depth = 1
        while depth and self.pos < len(self.source):
            ch = self.source[self.pos]
            if ch in ARG_TERMINATORS or ch == '"':
                return
            if ch == "$" and self.peek(1) == "{":
                depth += 1
                self.advance(2)
                continue
            if ch == "}":
                depth -= 1
            elif ch == "\\":
                self.advance(min(2, len(self.source) - self.pos))
                continue
            self.advance()

    # ========================================================================
    # Utilities
    # ========================================================================

    def bracket_level(self, offset: int = 0) -> Optional[int]:
        """Return N if '[' + N*'=' + '[' starts at pos+offset, else None"""
        idx = self.pos + offset
        if self.peek(offset) != "[":
            return None
        idx += 1
        level = 0
        while idx < len(self.source) and self.source[idx] == "=":
            level += 1
            idx += 1
        if idx < len(self.source) and self.source[idx] == "[":
            return level
        return None

    def peek(self, offset: int = 0) -> str:
        """Look ahead at character"""
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return "\0"

    def advance(self, n: int = 1) -> str:
        """Consume n characters and return them as a string"""
        if n < 0:
            raise ValueError(f"advance() requires n >= 0, got {n}")
        result = self.source[self.pos:self.pos + n]
        for ch in result:
            if ch == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1
        self.pos += len(result)
        return result

    def emit(self, token_type: TT, value, line: int, column: int):
        """Emit a token"""
        tok = Tok(
            type=token_type,
            value=value,
            line=line,
            column=column,
            end_line=self.line,
        )
        self.tokens.append(tok)

        if token_type in CODE_TOKENS:
            self.line_has_code = True
        if token_type not in (TT.BLANK_LINE, TT.EOF):
            self.line_is_blank = False

# ============================================================================
# Token Stream
# ============================================================================

class TokenStream:
    """
    Forward-only view over a token list.

    Reading past EOF is a programming error and raises IndexError.
    """

    def __init__(self, tokens: List[Tok]):
        self._tokens = tokens
        self._pos = 0

    def peek(self) -> Tok:
        """Look at the next token without consuming it"""
        if self._pos >= len(self._tokens):
            raise IndexError("No tokens available")
        return self._tokens[self._pos]

    def consume(self) -> Tok:
        """Consume and return the next token"""
        tok = self.peek()
        self._pos += 1
        return tok

    def expect(self, token_type: TT, value: Optional[str] = None) -> Tok:
        """Consume token of expected type (and value) or raise ParseError"""
        tok = self.peek()
        if tok.type != token_type or (value is not None and tok.value != value):
            expected = token_type.name + (f" '{value}'" if value is not None else "")
            raise ParseError(
                f"Expected {expected}, got {tok.type.name} '{tok.describe()}'",
                tok,
                self.history(5),
            )
        return self.consume()

    def history(self, num: int) -> List[Tok]:
        """The last num consumed tokens, oldest first"""
        return self._tokens[max(0, self._pos - num):self._pos]

    def count(self) -> int:
        """Total number of tokens, EOF included"""
        return len(self._tokens)

    def __len__(self) -> int:
        return len(self._tokens)

    def __iter__(self) -> Iterator[Tok]:
        return iter(self._tokens)


def tokenize(source: str) -> TokenStream:
    """Convenience function to tokenize source"""
    return TokenStream(Lexer(source).tokenize())
