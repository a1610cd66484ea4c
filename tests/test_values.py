import json

import pytest

from xingine.config import settings
from xingine.schemas.results import ActionResult
from xingine.state.models import ChainContext
from xingine.expressions.values import (
    looks_like_path,
    resolve_context_value,
    resolve_symbolic_tree,
    resolve_symbolic_value,
)


@pytest.fixture
def populated(context, global_context, content_context):
    global_context.state.update({"user": {"name": "Ada", "roles": ["admin"]}, "theme": "dark"})
    content_context.get_component_state_store("default").set_state("draft", {"title": "Hello"})
    content_context.get_component_state_store("editor").set_state("draft", {"title": "Other"})
    return context


class TestResolveContextValue:
    def test_global_markers(self, populated):
        assert resolve_context_value("__global.user.name", populated) == "Ada"
        assert resolve_context_value("GLOBAL.user.roles[0]", populated) == "admin"

    def test_current_component(self, populated):
        assert resolve_context_value("__current.draft.title", populated) == "Hello"
        assert resolve_context_value("__current.draft.title", populated, component_id="editor") == "Other"

    def test_result_marker(self, populated):
        chain = ChainContext(success=True, result={"token": "abc"})
        assert resolve_context_value("__result.token", populated, chain) == "abc"
        assert resolve_context_value("result.token", populated, chain) == "abc"

    def test_result_marker_without_chain(self, populated):
        assert resolve_context_value("__result.token", populated) is None

    def test_legacy_marker_can_be_disabled(self, populated, monkeypatch):
        monkeypatch.setattr(settings, "ALLOW_LEGACY_RESULT_PREFIX", False)
        chain = ChainContext(success=True, result={"result": {"token": "nested"}, "token": "abc"})
        # without the legacy marker the bare path walks the prior result
        assert resolve_context_value("result.token", populated, chain) == "nested"

    def test_bare_path_prefers_prior_result(self, populated):
        chain = ChainContext(success=True, result={"theme": "light"})
        assert resolve_context_value("theme", populated, chain) == "light"

    def test_bare_path_falls_back_to_global(self, populated):
        assert resolve_context_value("theme", populated) == "dark"
        assert resolve_context_value("theme", populated, ChainContext(success=True)) == "dark"

    def test_bare_path_does_not_fall_back_on_miss(self, populated):
        chain = ChainContext(success=True, result={"other": 1})
        assert resolve_context_value("theme", populated, chain) is None

    def test_round_trip_through_plain_form(self, populated):
        original = ActionResult.ok({"user": {"id": 7, "tags": ["a", "b"]}, "ok": True})
        encoded = json.dumps(original.model_dump(mode="json"))
        decoded = ActionResult.model_validate(json.loads(encoded))
        chain = ChainContext.from_result(decoded)

        assert resolve_context_value("__result.user", populated, chain) == original.result["user"]
        assert chain.result == original.result


class TestLooksLikePath:
    @pytest.mark.parametrize(
        "value",
        ["__result.token", "__global.user", "GLOBAL.theme", "result.user.name", "user.profile.name", "items[0].id"],
    )
    def test_paths(self, value):
        assert looks_like_path(value) is True

    @pytest.mark.parametrize("value", ["hello", "Hello. World", "v1.2", "3.14", "ends.with.", "a b.c"])
    def test_literals(self, value):
        assert looks_like_path(value) is False


class TestSymbolicValues:
    def test_no_resolution_without_chain(self, populated):
        assert resolve_symbolic_value("__global.theme", populated) == "__global.theme"

    def test_resolution_inside_chain(self, populated, content_context):
        content_context.chain_context = ChainContext(success=True, result={"token": "abc"})
        assert resolve_symbolic_value("__result.token", populated) == "abc"
        assert resolve_symbolic_value("plain text", populated) == "plain text"
        assert resolve_symbolic_value(5, populated) == 5

    def test_tree_resolves_reserved_markers_only(self, populated, content_context):
        content_context.chain_context = ChainContext(success=True, result={"id": 3})
        body = {
            "id": "__result.id",
            "owner": {"name": "__global.user.name"},
            "tags": ["__current.draft.title", "literal.value"],
            "count": 2,
        }
        assert resolve_symbolic_tree(body, populated) == {
            "id": 3,
            "owner": {"name": "Ada"},
            "tags": ["Hello", "literal.value"],
            "count": 2,
        }
