"""Predicate evaluation for conditional constraints."""

from functools import lru_cache
from typing import Any, Protocol

from fieldcheck.errors import PredicateError
from fieldcheck.expressions import (
    ASTNode,
    EvaluationContext,
    EvaluationError,
    Evaluator,
    LexerError,
    ParseError,
    parse,
    register_all_builtins,
    to_bool,
)

TEMPLATE_PREFIX = "${"
TEMPLATE_SUFFIX = "}"


class PredicateEvaluator(Protocol):
    """Evaluates a boolean expression against the object owning a field."""

    def evaluate(self, expression: str, context: Any) -> bool:
        """Blank expressions are False.

        Raises:
            PredicateError: If the expression is malformed or fails to evaluate
        """
        ...


def unwrap_template(expression: str) -> str:
    """Expression text inside ``${...}``; bare expressions pass through.

    Raises:
        PredicateError: For text mixing literal parts and ``${...}``
    """
    text = expression.strip()
    if text.startswith(TEMPLATE_PREFIX) and text.endswith(TEMPLATE_SUFFIX):
        return text[len(TEMPLATE_PREFIX):-len(TEMPLATE_SUFFIX)]
    if TEMPLATE_PREFIX in text:
        raise PredicateError(expression, "template text must be a single ${...} expression")
    return text


@lru_cache(maxsize=512)
def _compile(text: str) -> ASTNode:
    return parse(text)


class ExpressionPredicateEvaluator:
    """PredicateEvaluator using the fieldcheck expression language.

    Names in the expression read the context object's fields; calls reach its
    methods first, then the built-in functions.
    """

    def __init__(self) -> None:
        register_all_builtins()

    def evaluate(self, expression: str, context: Any) -> bool:
        if not expression or not expression.strip():
            return False
        text = unwrap_template(expression)
        try:
            ast = _compile(text)
            value = Evaluator(EvaluationContext(target=context)).evaluate(ast)
        except (LexerError, ParseError, EvaluationError) as e:
            raise PredicateError(expression, str(e)) from e
        return to_bool(value)
