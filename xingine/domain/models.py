"""
Domain Layer - Serializable Action Trees

This module defines the JSON-safe descriptions of UI-triggered effects that the
engine interprets. These trees are built ahead of time (by builders or decoders
outside the engine) and are never mutated while they execute.

An action descriptor is either a bare action name ("toggleDarkMode") or an
ActionNode carrying arguments, conditional chains and unconditional continuations.
"""

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

"""
Operator classifies leaf comparisons:
- eq / ne: strict equality / inequality, any types
- like / ilike: substring containment (ilike ignores case), strings only
- in / nin: membership in a list value
- gt / gte / lt / lte: numeric comparison, numbers only
"""
Operator = Literal["eq", "ne", "like", "ilike", "in", "nin", "gt", "gte", "lt", "lte"]


class BaseFilterCondition(BaseModel):
    """
    Leaf comparison of one field of the evaluation context against a value.

    Attributes:
        field: Dotted/bracketed path into the evaluation context (e.g. "__result.user.age").
        operator: Operator applied between the resolved field and `value`.
        value: Right-hand operand. Required, may be null.
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    field: str
    operator: Operator
    value: Any


class GroupCondition(BaseModel):
    """
    Combinator over nested expressions.

    `and` requires every sub-expression to hold, `or` at least one. When both keys
    are present `and` wins; when neither is present the group holds vacuously.
    """
    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    all_of: Optional[List["ConditionalExpression"]] = Field(default=None, alias="and")
    any_of: Optional[List["ConditionalExpression"]] = Field(default=None, alias="or")


ConditionalExpression = Union[BaseFilterCondition, GroupCondition]

GroupCondition.model_rebuild()


class ConditionalChain(BaseModel):
    """
    A conditional continuation attached to an action.

    Fires when `condition` holds against the result-bearing context built for
    the owning action. A single action is accepted in place of a list.
    """
    model_config = ConfigDict(frozen=True)

    condition: ConditionalExpression
    action: List["SerializableAction"] = Field(default_factory=list)

    @field_validator("action", mode="before")
    @classmethod
    def _wrap_single_action(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, (str, dict, BaseModel)):
            return [value]
        return value


class ActionNode(BaseModel):
    """
    Record form of an action descriptor.

    Attributes:
        action: Registry key of the handler to invoke.
        args: Handler-specific arguments (JSON-safe).
        value_from_event: Substitute the triggering event's value into args["value"].
        chains: Conditional continuations, evaluated against this action's result.
        then: Unconditional continuations, run after the action and its chains.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    action: str
    args: Optional[Dict[str, Any]] = None
    value_from_event: bool = Field(default=False, alias="valueFromEvent")
    chains: List[ConditionalChain] = Field(default_factory=list)
    then: List["SerializableAction"] = Field(default_factory=list)


SerializableAction = Union[str, ActionNode]

ConditionalChain.model_rebuild()
ActionNode.model_rebuild()


_ACTION_ADAPTER = TypeAdapter(SerializableAction)
_ACTION_LIST_ADAPTER = TypeAdapter(List[SerializableAction])
_CONDITION_ADAPTER = TypeAdapter(ConditionalExpression)


def parse_action(raw: Any) -> SerializableAction:
    """Validate a raw (JSON-decoded) value into an action descriptor."""
    if isinstance(raw, (str, ActionNode)):
        return raw
    return _ACTION_ADAPTER.validate_python(raw)


def parse_actions(raw: Any) -> List[SerializableAction]:
    """Validate a single descriptor or a list of descriptors into a list."""
    if isinstance(raw, (list, tuple)):
        return _ACTION_LIST_ADAPTER.validate_python(list(raw))
    return [parse_action(raw)]


def parse_condition(raw: Any) -> ConditionalExpression:
    if isinstance(raw, (BaseFilterCondition, GroupCondition)):
        return raw
    return _CONDITION_ADAPTER.validate_python(raw)


def normalize_action(action: Any) -> ActionNode:
    """Turn the bare-string shorthand (or raw data) into an ActionNode."""
    parsed = parse_action(action)
    if isinstance(parsed, str):
        return ActionNode(action=parsed)
    return parsed


def dump_action(action: SerializableAction) -> Any:
    """Serialize a descriptor back to its JSON-safe form."""
    if isinstance(action, str):
        return action
    return action.model_dump(by_alias=True, exclude_defaults=True, mode="json")
