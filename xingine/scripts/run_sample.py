"""
Sample Runner.

Runs the action trees defined in data/sample_actions.py against in-memory
collaborators and prints each result together with the resulting state.

Usage:
    python -m xingine.scripts.run_sample [name ...]

Network calls are answered by a canned delegate, so no server is needed.
"""

import asyncio
import json
import sys

from fastapi.encoders import jsonable_encoder

from xingine.context.interface import ActionExecutionContext
from xingine.context.memory import InMemoryContentContext, InMemoryFormContext, InMemoryGlobalContext
from xingine.data.sample_actions import FORM_SAMPLES, SAMPLE_ACTIONS
from xingine.execution.engine import ActionEngine


def canned_api(request):
    if request["url"].startswith("users/"):
        return {"name": "Ada Lovelace", "email": "ada@example.com"}
    return {"success": True, "token": "sample-token", "user": {"username": "ada"}}


def build_context(with_form: bool = False) -> ActionExecutionContext:
    return ActionExecutionContext(
        global_context=InMemoryGlobalContext(
            {"userId": 42, "user": {"age": 36, "verified": True}},
            api_delegate=canned_api,
        ),
        content_context=InMemoryContentContext(),
        form_context=InMemoryFormContext(
            {"username": "ada"},
            validators={"username": lambda value: None if value else "Required"},
        ) if with_form else None,
    )


async def run_samples(names):
    engine = ActionEngine()

    for name in names:
        print(f"Running sample: {name}")
        context = build_context(with_form=name in FORM_SAMPLES)
        result = await engine.run(SAMPLE_ACTIONS[name], context)

        print(f"--> success={result.success} result={json.dumps(jsonable_encoder(result.result))}")
        if result.error:
            print(f"--> error [{result.error.kind.value}]: {result.error.message}")
        print(f"--> global state: {json.dumps(jsonable_encoder(context.global_context.get_all_state()))}")
        if context.global_context.toasts:
            print(f"--> toasts: {context.global_context.toasts}")

    print("Samples complete.")


if __name__ == "__main__":
    selected = sys.argv[1:] or list(SAMPLE_ACTIONS)
    unknown = [name for name in selected if name not in SAMPLE_ACTIONS]
    if unknown:
        print(f"Unknown sample(s): {', '.join(unknown)}. Available: {', '.join(SAMPLE_ACTIONS)}")
        sys.exit(1)
    asyncio.run(run_samples(selected))
