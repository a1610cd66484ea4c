"""
Expressions - Condition Evaluator

Evaluates ConditionalExpression trees against a context record. The same
evaluator drives field visibility (showHide / evaluateFieldCondition) and
chain selection after an action completes.

Evaluation is pure and total: type mismatches make a leaf false, they never raise.
"""

import logging
from numbers import Real
from typing import Any, Callable, Dict, Mapping, Union

from ..domain.models import BaseFilterCondition, ConditionalExpression, GroupCondition, parse_condition
from .paths import resolve_path

logger = logging.getLogger(__name__)


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a numeric operand here
    return isinstance(value, Real) and not isinstance(value, bool)


def strict_equals(left: Any, right: Any) -> bool:
    """Equality that never crosses types (True != 1, 1 == 1.0)."""
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left is right
    if _is_number(left) and _is_number(right):
        return left == right
    if type(left) is not type(right):
        if isinstance(left, Mapping) and isinstance(right, Mapping):
            return _mapping_equals(left, right)
        if isinstance(left, (list, tuple)) and isinstance(right, (list, tuple)):
            return _sequence_equals(left, right)
        return False
    if isinstance(left, Mapping):
        return _mapping_equals(left, right)
    if isinstance(left, (list, tuple)):
        return _sequence_equals(left, right)
    return left == right


def _mapping_equals(left: Mapping, right: Mapping) -> bool:
    if set(left.keys()) != set(right.keys()):
        return False
    return all(strict_equals(left[key], right[key]) for key in left)


def _sequence_equals(left, right) -> bool:
    if len(left) != len(right):
        return False
    return all(strict_equals(a, b) for a, b in zip(left, right))


def _contains(left: Any, right: Any, ignore_case: bool) -> bool:
    if not isinstance(left, str) or not isinstance(right, str):
        return False
    if ignore_case:
        return right.lower() in left.lower()
    return right in left


def _member(left: Any, right: Any) -> bool:
    return any(strict_equals(left, item) for item in right)


def _numeric(compare: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    def _apply(left: Any, right: Any) -> bool:
        if not _is_number(left) or not _is_number(right):
            return False
        return compare(left, right)
    return _apply


OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    "eq": strict_equals,
    "ne": lambda left, right: not strict_equals(left, right),
    "like": lambda left, right: _contains(left, right, ignore_case=False),
    "ilike": lambda left, right: _contains(left, right, ignore_case=True),
    "in": lambda left, right: isinstance(right, (list, tuple)) and _member(left, right),
    "nin": lambda left, right: isinstance(right, (list, tuple)) and not _member(left, right),
    "gt": _numeric(lambda left, right: left > right),
    "gte": _numeric(lambda left, right: left >= right),
    "lt": _numeric(lambda left, right: left < right),
    "lte": _numeric(lambda left, right: left <= right),
}


def evaluate_leaf(condition: BaseFilterCondition, context: Any) -> bool:
    actual = resolve_path(context, condition.field)
    compare = OPERATORS.get(condition.operator)
    if compare is None:
        logger.warning(f"Unsupported operator '{condition.operator}', treating condition as false")
        return False
    return compare(actual, condition.value)


def evaluate_condition(expression: Union[ConditionalExpression, Mapping[str, Any]], context: Any) -> bool:
    """
    Evaluates `expression` against `context`.

    Groups: `and` takes precedence over `or`; `and: []` holds, `or: []` does not,
    a group with neither key holds vacuously, and a key present with a null list fails.
    Raw mappings are validated first (pydantic.ValidationError on bad shape).
    """
    expression = parse_condition(expression)

    if isinstance(expression, GroupCondition):
        if expression.all_of is not None:
            return all(evaluate_condition(child, context) for child in expression.all_of)
        if expression.any_of is not None:
            return any(evaluate_condition(child, context) for child in expression.any_of)
        # 'and' / 'or' present but null
        if expression.model_fields_set & {"all_of", "any_of"}:
            return False
        return True

    return evaluate_leaf(expression, context)
