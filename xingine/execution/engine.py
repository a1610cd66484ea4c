"""
Engine - Action Orchestration Layer

The ActionEngine interprets one SerializableAction tree against a host
supplied ActionExecutionContext. Per action node:

1. Normalize: a bare name becomes an ActionNode without args/chains/then.
2. Dispatch: the HandlerExecutor runs the handler and returns an ActionResult
   (failures are data, never exceptions).
3. Publish: the result is stored on content.chain_context so nested actions
   can read it through '__result.'.
4. Chains: every chain whose condition holds against the evaluation context
   runs its actions in order.
5. Then: every continuation runs in order, whatever the chains did.
6. The result from step 2 is returned; continuations never replace it.

Execution within one tree is strictly sequential: chain N+1 is not considered
until chain N's actions (and their own continuations) have completed, and
`then` starts only after all chains are done. Each nested action starts from
the owning action's published ChainContext.
"""

import logging
from typing import Any, Iterable, List, Optional

from pydantic import ValidationError

from ..actions.form import build_form_registry
from ..actions.page import build_page_registry
from ..actions.registry import ActionRegistry
from ..context.interface import ActionExecutionContext
from ..domain.models import ActionNode, SerializableAction, normalize_action
from ..schemas.results import ActionResult, ErrorKind
from ..state.models import ChainContext
from .chains import EvaluationContextBuilder, build_evaluation_context, chain_matches
from .executor import HandlerExecutor

logger = logging.getLogger(__name__)


class ActionEngine:
    def __init__(
        self,
        page_registry: Optional[ActionRegistry] = None,
        form_registry: Optional[ActionRegistry] = None,
        evaluation_context_builder: EvaluationContextBuilder = build_evaluation_context,
    ):
        self.page_registry = page_registry if page_registry is not None else build_page_registry()
        self.form_registry = form_registry if form_registry is not None else build_form_registry()
        self.evaluation_context_builder = evaluation_context_builder
        self.executor = HandlerExecutor(self.page_registry, self.form_registry)

    async def run(
        self,
        action: Any,
        context: ActionExecutionContext,
        event: Optional[Any] = None,
        chain_context: Optional[ChainContext] = None,
    ) -> ActionResult:
        """
        Runs one action tree. `chain_context` seeds the prior-result scope for
        the root action (none by default).
        """
        try:
            node = normalize_action(action)
        except ValidationError as e:
            logger.warning(f"Rejected malformed action descriptor: {e.error_count()} error(s)")
            return ActionResult.failure(
                ErrorKind.ARGUMENT,
                "Invalid action descriptor",
                details=e.errors(include_url=False, include_context=False),
            )

        context.content_context.chain_context = chain_context
        return await self._run_node(node, context, event)

    async def run_all(
        self,
        actions: Iterable[SerializableAction],
        context: ActionExecutionContext,
        event: Optional[Any] = None,
        chain_context: Optional[ChainContext] = None,
    ) -> List[ActionResult]:
        """Runs independent action trees one after another."""
        results = []
        for action in actions:
            results.append(await self.run(action, context, event, chain_context))
        return results

    # ==========================================================================
    # Orchestration
    # ==========================================================================

    async def _run_node(
        self,
        node: ActionNode,
        context: ActionExecutionContext,
        event: Optional[Any],
    ) -> ActionResult:
        result = await self.executor.execute(node, context, event)
        if not result.success:
            logger.debug(f"Action '{node.action}' failed: {result.error.message if result.error else 'no error'}")

        published = ChainContext.from_result(result)
        context.content_context.chain_context = published

        if node.chains:
            await self._run_chains(node, context, event, published)

        for continuation in node.then:
            await self._run_nested(continuation, context, event, published)

        context.content_context.chain_context = published
        return result

    async def _run_chains(
        self,
        node: ActionNode,
        context: ActionExecutionContext,
        event: Optional[Any],
        published: ChainContext,
    ) -> None:
        evaluation_context = self.evaluation_context_builder(context, published)
        for index, chain in enumerate(node.chains):
            if not chain_matches(chain, evaluation_context):
                continue
            logger.debug(f"Chain {index} of '{node.action}' matched, running {len(chain.action)} action(s)")
            for nested in chain.action:
                await self._run_nested(nested, context, event, published)

    async def _run_nested(
        self,
        action: SerializableAction,
        context: ActionExecutionContext,
        event: Optional[Any],
        owner: ChainContext,
    ) -> ActionResult:
        context.content_context.chain_context = owner
        return await self._run_node(normalize_action(action), context, event)
