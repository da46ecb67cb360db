"""
Zeb Lexer (Tokenizer)
=====================

This module implements the lexer for the Zeb language. It converts
source text into a stream of tokens for the parser.

Token Categories
----------------
- Keywords: exit, for, in, endfor
- Identifiers: variable names and the built-ins print / range
- Numbers: decimal, hexadecimal (0x), binary (0b)
- Operators: + - * / % =
- Delimiters: ( )
- Separators: newline and ';' both end a statement

Comments
--------
'#' starts a comment that runs to the end of the line.

Example Usage
-------------
>>> from zebc.lang.lexer import ZLexer
>>> for token in ZLexer("exit 7", "test.zb").tokenize():
...     print(token)
Token(EXIT, 'exit', 1:1)
Token(NUMBER, 7, 1:6)
Token(EOF, 1:7)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional
import string

from zebc.errors import SourceLocation
from zebc.lang.errors import ZebSyntaxError, InvalidCharacterError


# =============================================================================
# Token Type Enumeration
# =============================================================================

class ZTokenType(Enum):
    """Token types for the Zeb language."""

    # === Structural Tokens ===
    EOF = auto()            # End of file
    NEWLINE = auto()        # Statement separator (newline or ';')

    # === Identifiers and Literals ===
    IDENTIFIER = auto()     # Variable and built-in names
    NUMBER = auto()         # Integer literals (all formats)

    # === Keywords ===
    EXIT = auto()           # exit
    FOR = auto()            # for
    IN = auto()             # in
    ENDFOR = auto()         # endfor

    # === Operators ===
    PLUS = auto()           # +
    MINUS = auto()          # -
    STAR = auto()           # *
    SLASH = auto()          # /
    PERCENT = auto()        # %
    ASSIGN = auto()         # =

    # === Delimiters ===
    LPAREN = auto()         # (
    RPAREN = auto()         # )


KEYWORDS: dict[str, ZTokenType] = {
    "exit": ZTokenType.EXIT,
    "for": ZTokenType.FOR,
    "in": ZTokenType.IN,
    "endfor": ZTokenType.ENDFOR,
}

SINGLE_CHAR_TOKENS: dict[str, ZTokenType] = {
    "+": ZTokenType.PLUS,
    "-": ZTokenType.MINUS,
    "*": ZTokenType.STAR,
    "/": ZTokenType.SLASH,
    "%": ZTokenType.PERCENT,
    "=": ZTokenType.ASSIGN,
    "(": ZTokenType.LPAREN,
    ")": ZTokenType.RPAREN,
}


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class ZToken:
    """
    A single token from Zeb source code.

    Attributes:
        type: The ZTokenType classification
        value: Token value (str for names/symbols, int for numbers)
        line: Line number in source (1-indexed)
        column: Column number in source (1-indexed)
        filename: Name of the source file
    """
    type: ZTokenType
    value: str | int | None
    line: int
    column: int
    filename: str

    def __repr__(self) -> str:
        if self.value is not None:
            if isinstance(self.value, int):
                return f"Token({self.type.name}, {self.value}, {self.line}:{self.column})"
            return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"
        return f"Token({self.type.name}, {self.line}:{self.column})"

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)


# =============================================================================
# Lexer Implementation
# =============================================================================

class ZLexer:
    """
    Tokenizes Zeb source code.

    Usage:
        lexer = ZLexer(source_text, filename)
        tokens = list(lexer.tokenize())

    Attributes:
        source: The source code being tokenized
        filename: Name of the source file (for error reporting)
    """

    IDENT_START = string.ascii_letters + "_"
    IDENT_CHARS = string.ascii_letters + string.digits + "_"

    def __init__(self, source: str, filename: str = "<input>"):
        self.source = source
        self.filename = filename

        self._pos = 0
        self._line = 1
        self._column = 1
        self._line_start_pos = 0

    def tokenize(self) -> Iterator[ZToken]:
        """
        Generate tokens from the source code.

        Yields:
            ZToken objects, always ending with an EOF token

        Raises:
            ZebSyntaxError: If invalid syntax is encountered
        """
        while True:
            self._skip_blanks_and_comments()
            if self._at_end():
                break
            yield self._scan_token()

        yield self._make_token(ZTokenType.EOF, None)

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self.source)

    def _peek(self, offset: int = 0) -> str:
        """Look ahead without advancing; empty string past the end."""
        pos = self._pos + offset
        if pos >= len(self.source):
            return ""
        return self.source[pos]

    def _advance(self) -> str:
        """Consume and return the current character, tracking line/column."""
        if self._at_end():
            return ""

        char = self.source[self._pos]
        self._pos += 1

        if char == "\n":
            self._line += 1
            self._column = 1
            self._line_start_pos = self._pos
        else:
            self._column += 1

        return char

    # =========================================================================
    # Token Creation
    # =========================================================================

    def _make_token(
        self,
        token_type: ZTokenType,
        value: str | int | None,
        start_line: Optional[int] = None,
        start_column: Optional[int] = None,
    ) -> ZToken:
        return ZToken(
            type=token_type,
            value=value,
            line=start_line or self._line,
            column=start_column or self._column,
            filename=self.filename,
        )

    def _current_source_line(self) -> str:
        line_end = self.source.find("\n", self._line_start_pos)
        if line_end == -1:
            line_end = len(self.source)
        return self.source[self._line_start_pos:line_end]

    def _error(self, message: str, line: int, column: int, hint: Optional[str] = None) -> ZebSyntaxError:
        """Create a syntax error at the given position on the current line."""
        location = SourceLocation(self.filename, line, column)
        return ZebSyntaxError(
            message, location, hint=hint, source_line=self._current_source_line()
        )

    # =========================================================================
    # Scanning
    # =========================================================================

    def _skip_blanks_and_comments(self) -> None:
        """Skip spaces, tabs, carriage returns and '#' comments (not newlines)."""
        while not self._at_end():
            char = self._peek()
            if char in " \t\r":
                self._advance()
            elif char == "#":
                while not self._at_end() and self._peek() != "\n":
                    self._advance()
            else:
                return

    def _scan_token(self) -> ZToken:
        start_line = self._line
        start_column = self._column
        char = self._peek()

        if char in ("\n", ";"):
            self._advance()
            return self._make_token(ZTokenType.NEWLINE, char, start_line, start_column)

        if char in string.digits:
            return self._scan_number(start_line, start_column)

        if char in self.IDENT_START:
            return self._scan_identifier(start_line, start_column)

        if char in SINGLE_CHAR_TOKENS:
            self._advance()
            return self._make_token(SINGLE_CHAR_TOKENS[char], char, start_line, start_column)

        raise InvalidCharacterError(
            char,
            SourceLocation(self.filename, start_line, start_column),
            self._current_source_line(),
        )

    def _scan_identifier(self, start_line: int, start_column: int) -> ZToken:
        chars = []
        while self._peek() and self._peek() in self.IDENT_CHARS:
            chars.append(self._advance())
        text = "".join(chars)
        token_type = KEYWORDS.get(text, ZTokenType.IDENTIFIER)
        return self._make_token(token_type, text, start_line, start_column)

    def _scan_number(self, start_line: int, start_column: int) -> ZToken:
        """
        Scan an integer literal.

        Supports decimal (42), hexadecimal (0x2A) and binary (0b101010).
        A number running straight into letters (e.g. '12ab') is an error.
        """
        base = 10
        digits = string.digits
        prefix = self._peek() + self._peek(1).lower()
        if prefix == "0x":
            base, digits = 16, string.hexdigits
        elif prefix == "0b":
            base, digits = 2, "01"

        if base != 10:
            self._advance()
            self._advance()

        chars = []
        while self._peek() and self._peek() in digits:
            chars.append(self._advance())

        if self._peek() and self._peek() in self.IDENT_CHARS:
            raise self._error(
                f"invalid digit '{self._peek()}' in number",
                start_line,
                start_column,
            )
        if not chars:
            raise self._error(
                "number prefix without digits",
                start_line,
                start_column,
                hint="write e.g. 0x1F or 0b101",
            )

        return self._make_token(
            ZTokenType.NUMBER, int("".join(chars), base), start_line, start_column
        )
