"""Parser for the fieldcheck predicate language.

Recursive descent over the lexer's tokens, producing a small AST.

Operator precedence (lowest to highest):
1. ?: (conditional)
2. || (or)
3. && (and)
4. == != < <= > >= in, not in
5. + -
6. * / %
7. ! - (unary)
8. . (member access / method call) () (function call) [] (index)
"""

from dataclasses import dataclass
from typing import Any

from fieldcheck.expressions.lexer import Lexer, Token, TokenType


@dataclass
class ASTNode:
    """Base class for AST nodes."""


@dataclass
class Literal(ASTNode):
    value: Any


@dataclass
class Identifier(ASTNode):
    """A field of the context object, or ``this``."""
    name: str


@dataclass
class MemberAccess(ASTNode):
    """Dot access (``address.city``)."""
    object: ASTNode
    member: str


@dataclass
class IndexAccess(ASTNode):
    object: ASTNode
    index: ASTNode


@dataclass
class BinaryOp(ASTNode):
    operator: str
    left: ASTNode
    right: ASTNode


@dataclass
class UnaryOp(ASTNode):
    operator: str
    operand: ASTNode


@dataclass
class Conditional(ASTNode):
    """``condition ? when_true : when_false``"""
    condition: ASTNode
    when_true: ASTNode
    when_false: ASTNode


@dataclass
class FunctionCall(ASTNode):
    """Bare call: a method of the context object or a registered function."""
    name: str
    arguments: list[ASTNode]


@dataclass
class MethodCall(ASTNode):
    """Call on a value (``this.isReady()``, ``code.strip()``)."""
    object: ASTNode
    name: str
    arguments: list[ASTNode]


@dataclass
class ArrayLiteral(ASTNode):
    elements: list[ASTNode]


class ParseError(Exception):
    """Error during parsing."""

    def __init__(self, message: str, token: Token):
        self.token = token
        super().__init__(f"{message} at position {token.position}")


_COMPARISONS = {
    TokenType.EQ: "==",
    TokenType.NEQ: "!=",
    TokenType.LT: "<",
    TokenType.LTE: "<=",
    TokenType.GT: ">",
    TokenType.GTE: ">=",
    TokenType.IN: "in",
}

_ADDITIVE = {TokenType.PLUS: "+", TokenType.MINUS: "-"}
_MULTIPLICATIVE = {TokenType.MULTIPLY: "*", TokenType.DIVIDE: "/", TokenType.MODULO: "%"}


class Parser:
    """Recursive descent parser.

    Usage:
        ast = Parser("flag == '0'").parse()
    """

    def __init__(self, source: str):
        self.source = source
        self.tokens = Lexer(source).tokenize()
        self.position = 0

    def parse(self) -> ASTNode:
        """Parse the expression and return the AST root."""
        if self._current().type == TokenType.EOF:
            raise ParseError("Empty expression", self._current())

        ast = self._parse_conditional()
        if self._current().type != TokenType.EOF:
            raise ParseError(f"Unexpected token '{self._current().value}'", self._current())
        return ast

    # -------------------------------------------------------------------------
    # Token helpers
    # -------------------------------------------------------------------------

    def _current(self) -> Token:
        return self.tokens[min(self.position, len(self.tokens) - 1)]

    def _peek(self, offset: int = 1) -> Token:
        return self.tokens[min(self.position + offset, len(self.tokens) - 1)]

    def _advance(self) -> Token:
        token = self._current()
        self.position += 1
        return token

    def _match(self, *types: TokenType) -> bool:
        return self._current().type in types

    def _consume(self, token_type: TokenType, message: str) -> Token:
        if self._current().type == token_type:
            return self._advance()
        raise ParseError(message, self._current())

    # -------------------------------------------------------------------------
    # Grammar, lowest precedence first
    # -------------------------------------------------------------------------

    def _parse_conditional(self) -> ASTNode:
        condition = self._parse_or()
        if not self._match(TokenType.QUESTION):
            return condition
        self._advance()
        when_true = self._parse_conditional()
        self._consume(TokenType.COLON, "Expected ':' in conditional expression")
        when_false = self._parse_conditional()
        return Conditional(condition, when_true, when_false)

    def _parse_or(self) -> ASTNode:
        left = self._parse_and()
        while self._match(TokenType.OR):
            self._advance()
            left = BinaryOp("||", left, self._parse_and())
        return left

    def _parse_and(self) -> ASTNode:
        left = self._parse_comparison()
        while self._match(TokenType.AND):
            self._advance()
            left = BinaryOp("&&", left, self._parse_comparison())
        return left

    def _parse_comparison(self) -> ASTNode:
        left = self._parse_additive()
        while True:
            if self._match(TokenType.NOT) and self._peek().type == TokenType.IN:
                self._advance()
                self._advance()
                left = BinaryOp("not in", left, self._parse_additive())
            elif self._current().type in _COMPARISONS:
                op = _COMPARISONS[self._advance().type]
                left = BinaryOp(op, left, self._parse_additive())
            else:
                return left

    def _parse_additive(self) -> ASTNode:
        left = self._parse_multiplicative()
        while self._current().type in _ADDITIVE:
            op = _ADDITIVE[self._advance().type]
            left = BinaryOp(op, left, self._parse_multiplicative())
        return left

    def _parse_multiplicative(self) -> ASTNode:
        left = self._parse_unary()
        while self._current().type in _MULTIPLICATIVE:
            op = _MULTIPLICATIVE[self._advance().type]
            left = BinaryOp(op, left, self._parse_unary())
        return left

    def _parse_unary(self) -> ASTNode:
        if self._match(TokenType.NOT):
            self._advance()
            return UnaryOp("!", self._parse_unary())
        if self._match(TokenType.MINUS):
            self._advance()
            return UnaryOp("-", self._parse_unary())
        return self._parse_postfix()

    def _parse_postfix(self) -> ASTNode:
        expr = self._parse_primary()
        while True:
            if self._match(TokenType.DOT):
                self._advance()
                name = str(self._consume(TokenType.IDENTIFIER, "Expected name after '.'").value)
                if self._match(TokenType.LPAREN):
                    expr = MethodCall(expr, name, self._parse_arguments())
                else:
                    expr = MemberAccess(expr, name)
            elif self._match(TokenType.LBRACKET):
                self._advance()
                index = self._parse_conditional()
                self._consume(TokenType.RBRACKET, "Expected ']' after index")
                expr = IndexAccess(expr, index)
            else:
                return expr

    def _parse_primary(self) -> ASTNode:
        token = self._current()

        if token.type in (TokenType.NUMBER, TokenType.STRING, TokenType.BOOLEAN):
            self._advance()
            return Literal(token.value)

        if token.type == TokenType.NULL:
            self._advance()
            return Literal(None)

        if token.type == TokenType.IDENTIFIER:
            self._advance()
            if self._match(TokenType.LPAREN):
                return FunctionCall(str(token.value), self._parse_arguments())
            return Identifier(str(token.value))

        if token.type == TokenType.LPAREN:
            self._advance()
            expr = self._parse_conditional()
            self._consume(TokenType.RPAREN, "Expected ')' after expression")
            return expr

        if token.type == TokenType.LBRACKET:
            self._advance()
            elements = self._parse_list(TokenType.RBRACKET)
            self._consume(TokenType.RBRACKET, "Expected ']' after list elements")
            return ArrayLiteral(elements)

        raise ParseError(f"Unexpected token '{token.value}'", token)

    def _parse_arguments(self) -> list[ASTNode]:
        self._consume(TokenType.LPAREN, "Expected '('")
        arguments = self._parse_list(TokenType.RPAREN)
        self._consume(TokenType.RPAREN, "Expected ')' after arguments")
        return arguments

    def _parse_list(self, closing: TokenType) -> list[ASTNode]:
        items: list[ASTNode] = []
        if self._match(closing):
            return items
        items.append(self._parse_conditional())
        while self._match(TokenType.COMMA):
            self._advance()
            items.append(self._parse_conditional())
        return items


def parse(source: str) -> ASTNode:
    """Parse an expression string into its AST."""
    return Parser(source).parse()
