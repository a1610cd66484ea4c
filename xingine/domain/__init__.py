"""
Domain Layer - Serializable Action Trees

Defines the immutable, JSON-safe action descriptors and conditional
expressions interpreted by the engine.
"""

from xingine.domain.models import (
    ActionNode,
    BaseFilterCondition,
    ConditionalChain,
    ConditionalExpression,
    GroupCondition,
    Operator,
    SerializableAction,
    dump_action,
    normalize_action,
    parse_action,
    parse_actions,
    parse_condition,
)

__all__ = [
    "ActionNode",
    "BaseFilterCondition",
    "ConditionalChain",
    "ConditionalExpression",
    "GroupCondition",
    "Operator",
    "SerializableAction",
    "dump_action",
    "normalize_action",
    "parse_action",
    "parse_actions",
    "parse_condition",
]
