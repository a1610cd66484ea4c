"""
Chains - Conditional Continuation Selection

Builds the record a chain's condition is evaluated against and decides
whether a chain fires. The record is the form data (when inside a form)
overlaid with the reserved result fields:

    __success   the action's success flag
    __hasError  true when an error is set or success is false
    __error     the structured error, if any
    __result    the action's payload
"""

import logging
from typing import Any, Callable, Dict, Mapping

from ..context.interface import ActionExecutionContext
from ..domain.models import ConditionalChain
from ..expressions.conditions import evaluate_condition
from ..state.models import ChainContext

logger = logging.getLogger(__name__)

EvaluationContextBuilder = Callable[[ActionExecutionContext, ChainContext], Mapping[str, Any]]


def build_evaluation_context(context: ActionExecutionContext, chain_context: ChainContext) -> Dict[str, Any]:
    form_data: Dict[str, Any] = {}
    if context.form_context is not None:
        form_data = dict(context.form_context.get_form_data() or {})
    return {**form_data, **chain_context.as_evaluation_fields()}


def chain_matches(chain: ConditionalChain, evaluation_context: Mapping[str, Any]) -> bool:
    try:
        return evaluate_condition(chain.condition, evaluation_context)
    except Exception as e:
        logger.warning(f"Chain condition could not be evaluated, skipping chain: {e}")
        return False
