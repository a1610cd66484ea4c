import pytest

from xingine.context.interface import ActionExecutionContext
from xingine.context.memory import InMemoryContentContext, InMemoryFormContext, InMemoryGlobalContext
from xingine.execution.engine import ActionEngine


@pytest.fixture
def global_context():
    return InMemoryGlobalContext()


@pytest.fixture
def content_context():
    return InMemoryContentContext()


@pytest.fixture
def context(global_context, content_context):
    return ActionExecutionContext(global_context=global_context, content_context=content_context)


@pytest.fixture
def form_context():
    return InMemoryFormContext(
        {"email": "ada@example.com", "age": 36},
        validators={"email": lambda value: None if value and "@" in value else "Invalid email"},
    )


@pytest.fixture
def form_action_context(global_context, content_context, form_context):
    return ActionExecutionContext(
        global_context=global_context,
        content_context=content_context,
        form_context=form_context,
    )


@pytest.fixture
def engine():
    return ActionEngine()
