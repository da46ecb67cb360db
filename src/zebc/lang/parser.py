"""
Zeb Recursive Descent Parser
============================

This module implements a recursive descent parser for the Zeb language.
It takes a stream of tokens from the lexer and builds a Program node
holding the flat list of statements.

Grammar (EBNF)
--------------
program         ::= (statement? separator)* EOF
separator       ::= NEWLINE                     (newline or ';')
statement       ::= 'exit' expr
                  | IDENTIFIER '=' expr
                  | 'for' IDENTIFIER 'in' expr
                  | 'endfor'

expr            ::= additive
additive        ::= multiplicative (('+' | '-') multiplicative)*
multiplicative  ::= unary (('*' | '/' | '%') unary)*
unary           ::= '-' unary | primary
primary         ::= NUMBER
                  | IDENTIFIER '(' expr ')'
                  | IDENTIFIER
                  | '(' expr ')'

Notes
-----
- A '-' directly before a number literal folds into a negative literal.
  Any other unary minus becomes (0 - operand).
- '/' and '%' are parsed so the code generator can report them with a
  source location; the generator only lowers '+', '-' and '*'.
- The first syntax error aborts parsing.

Example Usage
-------------
>>> from zebc.lang.parser import parse_source
>>> program = parse_source("x = 5\\nexit x + 2")
>>> program.statements
[Assign(name='x', expression=IntegerLiteral(value=5)), Exit(expression=InfixOp(...))]
"""

from typing import Optional

from zebc.errors import SourceLocation
from zebc.lang.lexer import ZLexer, ZToken, ZTokenType
from zebc.lang.ast import (
    INT64_MIN,
    INT64_MAX,
    Program,
    Statement,
    Exit,
    Assign,
    For,
    EndFor,
    Expression,
    IntegerLiteral,
    VariableReference,
    InfixOp,
    Call,
)
from zebc.lang.errors import (
    ZebSyntaxError,
    UnexpectedTokenError,
    MissingTokenError,
)


ADDITIVE_OPERATORS = (ZTokenType.PLUS, ZTokenType.MINUS)
MULTIPLICATIVE_OPERATORS = (ZTokenType.STAR, ZTokenType.SLASH, ZTokenType.PERCENT)


class ZParser:
    """
    Recursive descent parser for Zeb.

    Attributes:
        tokens: List of tokens to parse (must end with EOF)
        filename: Source filename for error reporting
    """

    def __init__(
        self,
        tokens: list[ZToken],
        filename: str = "<input>",
        source_lines: Optional[list[str]] = None,
    ):
        """
        Initialize the parser.

        Args:
            tokens: List of tokens from the lexer
            filename: Source filename for error messages
            source_lines: Original source lines for error context
        """
        self.tokens = tokens
        self.filename = filename
        self.source_lines = source_lines or []
        self._pos = 0

    def parse(self) -> Program:
        """
        Parse the token stream into a Program.

        Raises:
            ZebSyntaxError: On the first syntax error
        """
        statements: list[Statement] = []

        while not self._at_end():
            if self._match(ZTokenType.NEWLINE):
                continue
            statements.append(self._parse_statement())
            if not self._at_end():
                self._expect_separator()

        return Program(
            statements=statements,
            location=SourceLocation(self.filename, 1, 1),
        )

    # =========================================================================
    # Token Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._peek().type == ZTokenType.EOF

    def _peek(self, offset: int = 0) -> ZToken:
        pos = self._pos + offset
        if pos >= len(self.tokens):
            return self.tokens[-1]
        return self.tokens[pos]

    def _advance(self) -> ZToken:
        if not self._at_end():
            token = self.tokens[self._pos]
            self._pos += 1
            return token
        return self.tokens[-1]

    def _check(self, *types: ZTokenType) -> bool:
        return self._peek().type in types

    def _match(self, *types: ZTokenType) -> Optional[ZToken]:
        """Consume the current token if it is one of the types."""
        if self._check(*types):
            return self._advance()
        return None

    def _expect(self, token_type: ZTokenType, message: str) -> ZToken:
        """
        Expect and consume a specific token type.

        Raises:
            MissingTokenError: If the expected token is not found
        """
        if self._check(token_type):
            return self._advance()

        current = self._peek()
        raise MissingTokenError(
            message,
            current.location,
            self._get_source_line(current.line),
        )

    def _expect_separator(self) -> None:
        """Statements end at a newline, ';' or end of file."""
        if self._match(ZTokenType.NEWLINE):
            return
        raise self._unexpected(self._peek(), "end of statement")

    def _unexpected(self, token: ZToken, expected: str) -> UnexpectedTokenError:
        found = "end of file" if token.type == ZTokenType.EOF else str(token.value).replace("\n", "newline")
        return UnexpectedTokenError(
            found,
            expected,
            token.location,
            self._get_source_line(token.line),
        )

    def _get_source_line(self, line: int) -> Optional[str]:
        if 0 < line <= len(self.source_lines):
            return self.source_lines[line - 1]
        return None

    # =========================================================================
    # Statement Parsing
    # =========================================================================

    def _parse_statement(self) -> Statement:
        token = self._peek()

        if self._match(ZTokenType.EXIT):
            return Exit(expression=self._parse_expression(), location=token.location)

        if self._match(ZTokenType.ENDFOR):
            return EndFor(location=token.location)

        if self._match(ZTokenType.FOR):
            name = self._expect(ZTokenType.IDENTIFIER, "loop variable name")
            self._expect(ZTokenType.IN, "in")
            return For(
                name=name.value,
                expression=self._parse_expression(),
                location=token.location,
            )

        if self._check(ZTokenType.IDENTIFIER) and self._peek(1).type == ZTokenType.ASSIGN:
            name = self._advance()
            self._advance()  # '='
            return Assign(
                name=name.value,
                expression=self._parse_expression(),
                location=token.location,
            )

        raise self._unexpected(token, "'exit', 'for', 'endfor' or an assignment")

    # =========================================================================
    # Expression Parsing
    # =========================================================================

    def _parse_expression(self) -> Expression:
        return self._parse_additive()

    def _parse_additive(self) -> Expression:
        left = self._parse_multiplicative()
        while self._check(*ADDITIVE_OPERATORS):
            op = self._advance()
            right = self._parse_multiplicative()
            left = InfixOp(left, op.value, right, location=op.location)
        return left

    def _parse_multiplicative(self) -> Expression:
        left = self._parse_unary()
        while self._check(*MULTIPLICATIVE_OPERATORS):
            op = self._advance()
            right = self._parse_unary()
            left = InfixOp(left, op.value, right, location=op.location)
        return left

    def _parse_unary(self) -> Expression:
        minus = self._match(ZTokenType.MINUS)
        if minus is None:
            return self._parse_primary()

        if self._check(ZTokenType.NUMBER):
            number = self._advance()
            return self._make_literal(-number.value, minus)

        operand = self._parse_unary()
        return InfixOp(
            IntegerLiteral(0, location=minus.location),
            "-",
            operand,
            location=minus.location,
        )

    def _parse_primary(self) -> Expression:
        token = self._peek()

        if self._match(ZTokenType.NUMBER):
            return self._make_literal(token.value, token)

        if self._match(ZTokenType.IDENTIFIER):
            if self._match(ZTokenType.LPAREN):
                argument = self._parse_expression()
                self._expect(ZTokenType.RPAREN, ")")
                return Call(token.value, argument, location=token.location)
            return VariableReference(token.value, location=token.location)

        if self._match(ZTokenType.LPAREN):
            inner = self._parse_expression()
            self._expect(ZTokenType.RPAREN, ")")
            return inner

        raise self._unexpected(token, "an expression")

    def _make_literal(self, value: int, token: ZToken) -> IntegerLiteral:
        if not INT64_MIN <= value <= INT64_MAX:
            raise ZebSyntaxError(
                f"integer literal {value} does not fit in 64 bits",
                token.location,
                hint=f"literals must lie between {INT64_MIN} and {INT64_MAX}",
                source_line=self._get_source_line(token.line),
            )
        return IntegerLiteral(value, location=token.location)


# =============================================================================
# Convenience Functions
# =============================================================================

def parse_source(source: str, filename: str = "<input>") -> Program:
    """Tokenize and parse Zeb source text in one step."""
    tokens = list(ZLexer(source, filename).tokenize())
    parser = ZParser(tokens, filename, source.splitlines())
    return parser.parse()
