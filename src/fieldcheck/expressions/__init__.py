"""Predicate expression language for conditional constraints.

This module provides:
- Lexer: tokenizes predicate strings
- Parser: produces an AST from tokens
- Evaluator: evaluates the AST against the object that owns the field
- FunctionRegistry: built-in functions callable from predicates
"""

from fieldcheck.expressions.builtins import register_all_builtins
from fieldcheck.expressions.evaluator import (
    EvaluationContext,
    EvaluationError,
    Evaluator,
    evaluate,
    evaluate_bool,
    to_bool,
)
from fieldcheck.expressions.functions import FunctionDefinition, FunctionRegistry
from fieldcheck.expressions.lexer import Lexer, LexerError, Token, TokenType
from fieldcheck.expressions.parser import (
    ArrayLiteral,
    ASTNode,
    BinaryOp,
    Conditional,
    FunctionCall,
    Identifier,
    IndexAccess,
    Literal,
    MemberAccess,
    MethodCall,
    ParseError,
    Parser,
    UnaryOp,
    parse,
)

__all__ = [
    # Evaluator
    "EvaluationContext",
    "EvaluationError",
    "Evaluator",
    "evaluate",
    "evaluate_bool",
    "to_bool",
    # Functions
    "FunctionDefinition",
    "FunctionRegistry",
    "register_all_builtins",
    # Lexer
    "Lexer",
    "LexerError",
    "Token",
    "TokenType",
    # Parser
    "ASTNode",
    "ArrayLiteral",
    "BinaryOp",
    "Conditional",
    "FunctionCall",
    "Identifier",
    "IndexAccess",
    "Literal",
    "MemberAccess",
    "MethodCall",
    "ParseError",
    "Parser",
    "UnaryOp",
    "parse",
]
