"""Evaluator for the fieldcheck predicate language.

Walks the AST against a context object: the instance that owns the field being
validated. Bare names read the object's fields, bare calls invoke its methods
(falling back to registered functions), and ``this`` is the object itself.
"""

import operator
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable

from fieldcheck.expressions.functions import FunctionRegistry
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
    UnaryOp,
    parse,
)
from fieldcheck.metadata.records import Record

_NUMBER = (int, float, Decimal)


class EvaluationError(Exception):
    """Error during expression evaluation."""


@dataclass
class EvaluationContext:
    """Context for expression evaluation.

    Attributes:
        target: The object whose fields and methods the expression can reach
        variables: Extra names, checked before the target's fields
    """

    target: Any
    variables: dict[str, Any] = field(default_factory=dict)


class Evaluator:
    """Evaluates an AST against a context.

    Usage:
        ctx = EvaluationContext(target=order)
        result = Evaluator(ctx).evaluate(parse("status == 'open'"))
    """

    def __init__(self, context: EvaluationContext):
        self.context = context

    def evaluate(self, node: ASTNode) -> Any:
        method = getattr(self, f"_eval_{type(node).__name__.lower()}", None)
        if method is None:
            raise EvaluationError(f"Unknown node type: {type(node).__name__}")
        return method(node)

    # -------------------------------------------------------------------------
    # Node evaluators
    # -------------------------------------------------------------------------

    def _eval_literal(self, node: Literal) -> Any:
        return node.value

    def _eval_identifier(self, node: Identifier) -> Any:
        if node.name == "this":
            return self.context.target
        if node.name in self.context.variables:
            return self.context.variables[node.name]
        return read_member(self.context.target, node.name)

    def _eval_memberaccess(self, node: MemberAccess) -> Any:
        return read_member(self.evaluate(node.object), node.member)

    def _eval_indexaccess(self, node: IndexAccess) -> Any:
        obj = self.evaluate(node.object)
        index = self.evaluate(node.index)
        if obj is None:
            return None
        try:
            return obj[index]
        except (KeyError, IndexError, TypeError):
            return None

    def _eval_arrayliteral(self, node: ArrayLiteral) -> list[Any]:
        return [self.evaluate(element) for element in node.elements]

    def _eval_conditional(self, node: Conditional) -> Any:
        if to_bool(self.evaluate(node.condition)):
            return self.evaluate(node.when_true)
        return self.evaluate(node.when_false)

    def _eval_unaryop(self, node: UnaryOp) -> Any:
        operand = self.evaluate(node.operand)
        if node.operator == "!":
            return not to_bool(operand)
        if operand is None:
            return None
        if isinstance(operand, _NUMBER) and not isinstance(operand, bool):
            return -operand
        raise EvaluationError(f"Cannot negate {type(operand).__name__}")

    def _eval_binaryop(self, node: BinaryOp) -> Any:
        op = node.operator

        if op == "&&":
            return to_bool(self.evaluate(node.left)) and to_bool(self.evaluate(node.right))
        if op == "||":
            return to_bool(self.evaluate(node.left)) or to_bool(self.evaluate(node.right))

        left = self.evaluate(node.left)
        right = self.evaluate(node.right)

        if op == "==":
            return _equals(left, right)
        if op == "!=":
            return not _equals(left, right)
        if op in _ORDERING:
            return _ORDERING[op](_compare(left, right), 0)
        if op == "in":
            return _contains(right, left)
        if op == "not in":
            return not _contains(right, left)
        if op in _ARITHMETIC:
            return _arithmetic(op, left, right)

        raise EvaluationError(f"Unknown operator: {op}")

    def _eval_functioncall(self, node: FunctionCall) -> Any:
        args = [self.evaluate(arg) for arg in node.arguments]

        method = _method_of(self.context.target, node.name)
        if method is not None:
            return _invoke(node.name, method, args)

        if FunctionRegistry.is_registered(node.name):
            return _invoke(node.name, FunctionRegistry.get(node.name).implementation, args)

        raise EvaluationError(f"Unknown function: {node.name}")

    def _eval_methodcall(self, node: MethodCall) -> Any:
        obj = self.evaluate(node.object)
        if obj is None:
            return None
        method = _method_of(obj, node.name)
        if method is None:
            raise EvaluationError(f"{type(obj).__name__} has no method '{node.name}'")
        return _invoke(node.name, method, [self.evaluate(arg) for arg in node.arguments])


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------


def read_member(obj: Any, name: str) -> Any:
    """Field of a record, mapping or object; None when absent."""
    if obj is None:
        return None
    if isinstance(obj, Record):
        return obj.get(name)
    if isinstance(obj, Mapping):
        return obj.get(name)
    try:
        return getattr(obj, name, None)
    except Exception as e:
        raise EvaluationError(f"Cannot read '{name}' of {type(obj).__name__}: {e}") from e


def _method_of(obj: Any, name: str) -> Callable[..., Any] | None:
    if obj is None or isinstance(obj, Record) or name.startswith("_"):
        return None
    candidate = read_member(obj, name)
    return candidate if callable(candidate) else None


def _invoke(name: str, func: Callable[..., Any], args: list[Any]) -> Any:
    try:
        return func(*args)
    except EvaluationError:
        raise
    except Exception as e:
        raise EvaluationError(f"Error calling {name}: {e}") from e


def to_bool(value: Any) -> bool:
    """Truthiness used by logical operators and predicate results."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, _NUMBER):
        return value != 0
    if isinstance(value, (str, list, tuple, set, frozenset, dict)):
        return len(value) > 0
    return True


def _is_number(value: Any) -> bool:
    return isinstance(value, _NUMBER) and not isinstance(value, bool)


def _as_float(value: Any) -> Any:
    return float(value) if isinstance(value, Decimal) else value


def _equals(left: Any, right: Any) -> bool:
    if _is_number(left) and _is_number(right):
        return _as_float(left) == _as_float(right)
    try:
        return bool(left == right)
    except Exception as e:
        raise EvaluationError(
            f"Cannot compare {type(left).__name__} and {type(right).__name__}: {e}"
        ) from e


def _compare(left: Any, right: Any) -> int:
    """-1, 0 or 1; None sorts before every other value."""
    if left is None or right is None:
        return (left is not None) - (right is not None)
    if _is_number(left) and _is_number(right):
        left, right = _as_float(left), _as_float(right)
    elif type(left) is not type(right) and not (
        isinstance(left, str) and isinstance(right, str)
    ):
        raise EvaluationError(
            f"Cannot compare {type(left).__name__} and {type(right).__name__}"
        )
    try:
        return (left > right) - (left < right)
    except TypeError as e:
        raise EvaluationError(str(e)) from e


def _contains(collection: Any, item: Any) -> bool:
    if collection is None:
        return False
    if isinstance(collection, str):
        return item is not None and str(item) in collection
    if isinstance(collection, (list, tuple, set, frozenset, dict)):
        try:
            return item in collection
        except TypeError as e:
            # unhashable item tested against a set or dict
            raise EvaluationError(
                f"Cannot test membership of {type(item).__name__}: {e}"
            ) from e
    raise EvaluationError(f"'in' requires a collection, got {type(collection).__name__}")


_ORDERING = {
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}

_ARITHMETIC = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": operator.truediv,
    "%": operator.mod,
}


def _arithmetic(op: str, left: Any, right: Any) -> Any:
    if left is None or right is None:
        return None
    if op == "+" and (isinstance(left, str) or isinstance(right, str)):
        return f"{left}{right}"
    if not (_is_number(left) and _is_number(right)):
        raise EvaluationError(
            f"Cannot apply '{op}' to {type(left).__name__} and {type(right).__name__}"
        )
    if isinstance(left, Decimal) != isinstance(right, Decimal):
        left, right = _as_float(left), _as_float(right)
    if op in ("/", "%") and right == 0:
        raise EvaluationError("Division by zero")
    try:
        return _ARITHMETIC[op](left, right)
    except (ArithmeticError, TypeError) as e:
        raise EvaluationError(f"Cannot apply '{op}': {e}") from e


# -----------------------------------------------------------------------------
# Convenience functions
# -----------------------------------------------------------------------------


def evaluate(expression: str, target: Any, variables: dict[str, Any] | None = None) -> Any:
    """Evaluate an expression string against a context object.

    Example:
        evaluate("flag == '0' && len(code) > 3", order)
    """
    ctx = EvaluationContext(target=target, variables=variables or {})
    return Evaluator(ctx).evaluate(parse(expression))


def evaluate_bool(expression: str, target: Any, variables: dict[str, Any] | None = None) -> bool:
    """Evaluate an expression and coerce the result with ``to_bool``."""
    return to_bool(evaluate(expression, target, variables))
