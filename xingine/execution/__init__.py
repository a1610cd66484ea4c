"""
Execution Layer - Action Orchestration and Handler Execution

Defines the ActionEngine (orchestrator of chains and continuations) and the
HandlerExecutor (single handler invocation behind the exception boundary).
"""

from xingine.execution.executor import HandlerExecutor, extract_event_value
from xingine.execution.engine import ActionEngine
from xingine.execution.chains import build_evaluation_context, chain_matches


__all__ = [
    "HandlerExecutor",
    "extract_event_value",
    "ActionEngine",
    "build_evaluation_context",
    "chain_matches",
]
