import asyncio
import json
import logging
from unittest.mock import AsyncMock, Mock

import pytest

from xingine.config import settings
from xingine.context.interface import ActionExecutionContext, GlobalActionContext
from xingine.context.memory import InMemoryContentContext
from xingine.schemas.results import ErrorKind


class BareGlobal(GlobalActionContext):
    """Global collaborator with only the required capabilities."""

    def __init__(self):
        self.state = {}
        self.visited = []

    def get_state(self, key):
        return self.state.get(key)

    def set_state(self, key, value):
        self.state[key] = value

    def get_all_state(self):
        return dict(self.state)

    def navigate(self, path):
        self.visited.append(path)

    def make_api_call(self, request):
        return {"echo": request}


@pytest.fixture
def bare_context():
    return ActionExecutionContext(global_context=BareGlobal(), content_context=InMemoryContentContext())


class TestStateFamily:
    async def test_set_state_global_prefix_strips_marker(self, engine, context, global_context):
        result = await engine.run({"action": "setState", "args": {"key": "GLOBAL.x", "value": 5}}, context)

        assert result.success
        assert result.result == {"key": "GLOBAL.x", "value": 5}
        assert global_context.state == {"x": 5}

    async def test_set_state_component_scope(self, engine, context, content_context, global_context):
        await engine.run({"action": "setState", "args": {"key": "open", "value": True, "componentId": "menu"}}, context)

        assert content_context.component_stores["menu"].get_all_state() == {"open": True}
        assert global_context.state == {}

    async def test_set_state_content_scope(self, engine, context, content_context):
        await engine.run({"action": "setState", "args": {"key": "CONTENT.tab", "value": "b"}}, context)
        assert content_context.content_state == {"tab": "b"}

    async def test_set_state_requires_key(self, engine, context):
        result = await engine.run({"action": "setState", "args": {"value": 1}}, context)

        assert not result.success
        assert result.error.kind == ErrorKind.ARGUMENT

    async def test_set_state_keeps_literals_outside_chains(self, engine, context, global_context):
        global_context.state["user"] = {"name": "Ada"}
        await engine.run({"action": "setState", "args": {"key": "label", "value": "__global.user.name"}}, context)
        assert global_context.state["label"] == "__global.user.name"

    async def test_set_state_resolves_prior_result_in_chain(self, engine, context, global_context):
        global_context.api_delegate = lambda request: {"token": "t-1", "greeting": "Hello. World"}
        action = {
            "action": "makeApiCall",
            "args": {"url": "session"},
            "then": [
                {"action": "setState", "args": {"key": "token", "value": "__result.token"}},
                {"action": "setState", "args": {"key": "message", "value": "Hello. World"}},
            ],
        }
        await engine.run(action, context)

        assert global_context.state["token"] == "t-1"
        assert global_context.state["message"] == "Hello. World"

    async def test_get_state_copies_to_state_key(self, engine, context, global_context):
        global_context.state["source"] = 41
        result = await engine.run({"action": "getState", "args": {"key": "source", "stateKey": "CONTENT.copy"}}, context)

        assert result.result == 41
        assert context.content_context.content_state == {"copy": 41}

    async def test_toggle_state(self, engine, context, global_context):
        first = await engine.run({"action": "toggleState", "args": {"key": "flag"}}, context)
        second = await engine.run({"action": "toggleState", "args": {"key": "flag"}}, context)

        assert first.result == {"key": "flag", "value": True}
        assert second.result == {"key": "flag", "value": False}
        assert global_context.state["flag"] is False

    async def test_clear_state_variants(self, engine, context, global_context, content_context):
        global_context.state.update({"a": 1, "b": 2})
        store = content_context.get_component_state_store("card")
        store.set_state("x", 1)

        single = await engine.run({"action": "clearState", "args": {"key": "a"}}, context)
        component = await engine.run({"action": "clearState", "args": {"componentId": "card"}}, context)
        everything = await engine.run("clearState", context)

        assert single.result == {"key": "a", "cleared": True}
        assert component.result == {"componentId": "card", "cleared": 1}
        assert store.get_state("x") is None
        assert everything.result == {"cleared": 2}
        assert global_context.state == {"a": None, "b": None}


class TestNavigation:
    async def test_navigate_resolves_slugs_from_params_then_state(self, engine, context, global_context):
        global_context.state["tab"] = "posts"
        result = await engine.run(
            {"action": "navigate", "args": {"path": "/users/:id/:tab", "params": {"id": 7}}}, context
        )

        assert result.result == {"path": "/users/7/posts"}
        assert global_context.navigation_history == ["/users/7/posts"]

    async def test_navigate_requires_path(self, engine, context):
        result = await engine.run({"action": "navigate", "args": {"path": 3}}, context)
        assert result.error.kind == ErrorKind.ARGUMENT

    async def test_navigate_host_exception_becomes_failure(self, engine, context, global_context):
        global_context.navigate = Mock(side_effect=RuntimeError("router offline"))
        result = await engine.run({"action": "navigate", "args": {"path": "/home"}}, context)

        assert not result.success
        assert result.error.kind == ErrorKind.HOST
        assert result.error.message == "router offline"
        assert result.error.exception_type == "RuntimeError"


class TestNetwork:
    async def test_make_api_call_builds_request(self, engine, context, global_context, content_context):
        delegate = AsyncMock(return_value={"id": 1})
        global_context.api_delegate = delegate
        global_context.state["orgId"] = "acme"

        result = await engine.run(
            {"action": "makeApiCall", "args": {"url": "orgs/:orgId/users/:id", "method": "POST", "body": {"id": 5}}},
            context,
        )

        assert result.success
        assert result.result == {"id": 1}
        delegate.assert_awaited_once_with({"url": "orgs/acme/users/5", "method": "POST", "body": {"id": 5}})

    async def test_make_api_call_resolves_symbolic_body(self, engine, context, global_context):
        global_context.state["user"] = {"id": 9}
        delegate = Mock(return_value={"ok": True})
        global_context.api_delegate = delegate

        await engine.run(
            {"action": "makeApiCall", "args": {"url": "audit", "method": "POST", "body": {"userId": "__global.user.id"}}},
            context,
        )

        assert delegate.call_args.args[0]["body"] == {"userId": 9}

    async def test_component_override(self, engine, context, content_context, global_context):
        store = content_context.get_component_state_store("table")
        store.make_api_call = AsyncMock(return_value=["row"])
        global_context.api_delegate = AsyncMock()

        result = await engine.run({"action": "makeApiCall", "args": {"url": "rows", "componentId": "table"}}, context)

        assert result.result == ["row"]
        store.make_api_call.assert_awaited_once()
        global_context.api_delegate.assert_not_called()

    async def test_component_without_override_uses_global(self, engine, context, global_context):
        global_context.api_delegate = Mock(return_value="global")
        result = await engine.run({"action": "makeApiCall", "args": {"url": "rows", "componentId": "plain"}}, context)
        assert result.result == "global"

    async def test_delegate_exception(self, engine, context, global_context):
        global_context.api_delegate = AsyncMock(side_effect=ConnectionError("down"))
        result = await engine.run({"action": "makeApiCall", "args": {"url": "x"}}, context)

        assert not result.success
        assert result.error.kind == ErrorKind.HOST


class TestStorageAndFeedback:
    async def test_storage_round(self, engine, context, global_context):
        await engine.run({"action": "setLocalStorage", "args": {"key": "k", "value": "v"}}, context)
        fetched = await engine.run({"action": "getLocalStorage", "args": {"key": "k", "stateKey": "fromStorage"}}, context)
        removed = await engine.run({"action": "removeLocalStorage", "args": {"key": "k"}}, context)

        assert fetched.result == "v"
        assert global_context.state["fromStorage"] == "v"
        assert removed.result == {"key": "k"}
        assert global_context.local_storage == {}

    async def test_clear_local_storage(self, engine, context, global_context):
        global_context.local_storage.update({"a": "1", "b": "2"})
        result = await engine.run("clearLocalStorage", context)
        assert result.result == {"cleared": True}
        assert global_context.local_storage == {}

    async def test_set_local_storage_requires_value(self, engine, context):
        result = await engine.run({"action": "setLocalStorage", "args": {"key": "k"}}, context)
        assert result.error.kind == ErrorKind.ARGUMENT

    @pytest.mark.parametrize(
        "action", ["setLocalStorage", "getLocalStorage", "removeLocalStorage", "clearLocalStorage", "login", "logout"]
    )
    async def test_missing_capability_fails_explicitly(self, engine, bare_context, action):
        result = await engine.run({"action": action, "args": {"key": "k", "value": "v"}}, bare_context)

        assert not result.success
        assert result.error.kind == ErrorKind.CAPABILITY

    async def test_show_toast_uses_hook(self, engine, context, global_context):
        result = await engine.run({"action": "showToast", "args": {"message": "Saved", "type": "success"}}, context)
        assert result.result == {"message": "Saved", "type": "success"}
        assert global_context.toasts == [{"message": "Saved", "type": "success"}]

    async def test_show_toast_falls_back_to_state(self, engine, bare_context):
        await engine.run({"action": "showToast", "args": {"message": "Saved"}}, bare_context)
        assert bare_context.global_context.state == {"toastMessage": "Saved", "toastType": "info", "showToast": True}

    async def test_show_toast_requires_message(self, engine, context):
        result = await engine.run("showToast", context)
        assert result.error.kind == ErrorKind.ARGUMENT

    async def test_error_uses_chain_error_message(self, engine, context, global_context):
        action = {"action": "missingAction", "then": ["error"]}
        await engine.run(action, context)

        assert global_context.errors[0]["message"] == "Unknown action: missingAction"
        assert global_context.errors[0]["details"]["kind"] == "NOT_FOUND"

    async def test_error_falls_back_to_state(self, engine, bare_context):
        result = await engine.run({"action": "error", "args": {"message": "Broken"}}, bare_context)
        assert result.success
        assert bare_context.global_context.state == {"errorMessage": "Broken", "hasError": True}


class TestAuth:
    async def test_login_delegates(self, engine, context, global_context):
        global_context.login = AsyncMock(return_value={"success": True, "user": "ada"})
        result = await engine.run({"action": "login", "args": {"username": "ada", "password": "pw"}}, context)

        assert result.success
        global_context.login.assert_awaited_once_with({"username": "ada", "password": "pw"})

    async def test_login_reports_host_rejection(self, engine, context, global_context):
        global_context.login = Mock(return_value={"success": False, "error": "Bad credentials"})
        result = await engine.run({"action": "login", "args": {"username": "ada", "password": "pw"}}, context)

        assert not result.success
        assert result.error.message == "Bad credentials"

    async def test_login_requires_credentials(self, engine, context, global_context):
        global_context.login = Mock()
        result = await engine.run({"action": "login", "args": {"username": "ada"}}, context)
        assert result.error.kind == ErrorKind.ARGUMENT

    async def test_logout_delegates(self, engine, context, global_context):
        global_context.logout = Mock()
        result = await engine.run("logout", context)
        assert result.result == {"success": True}
        global_context.logout.assert_called_once_with()

    async def test_login_user_success(self, engine, context, global_context, monkeypatch):
        monkeypatch.setattr(settings, "LOGIN_REDIRECT_DELAY_SECONDS", 0)
        delegate = AsyncMock(return_value={"success": True, "token": "jwt", "user": {"username": "ada"}})
        global_context.api_delegate = delegate

        result = await engine.run({"action": "loginUser", "args": {"username": "ada", "password": "pw"}}, context)

        assert result.success
        request = delegate.call_args.args[0]
        assert request["url"] == settings.LOGIN_ENDPOINT
        assert request["method"] == "POST"
        assert global_context.local_storage["auth_token"] == "jwt"
        assert json.loads(global_context.local_storage["user_data"]) == {"username": "ada"}
        assert global_context.state["isAuthenticated"] is True
        assert global_context.state["currentUser"] == {"username": "ada"}
        assert global_context.toasts == [{"message": "Welcome back, ada!", "type": "success"}]
        assert global_context.navigation_history == [settings.LOGIN_REDIRECT_PATH]

    async def test_login_user_delayed_redirect(self, engine, context, global_context, monkeypatch):
        monkeypatch.setattr(settings, "LOGIN_REDIRECT_DELAY_SECONDS", 0.01)
        global_context.api_delegate = AsyncMock(return_value={"success": True, "user": {"username": "ada"}})

        await engine.run({"action": "loginUser", "args": {"username": "ada", "password": "pw"}}, context)
        assert global_context.navigation_history == []

        await asyncio.sleep(0.05)
        assert global_context.navigation_history == [settings.LOGIN_REDIRECT_PATH]

    async def test_delayed_redirect_failure_is_logged(self, engine, context, global_context, monkeypatch, caplog):
        monkeypatch.setattr(settings, "LOGIN_REDIRECT_DELAY_SECONDS", 0.01)
        global_context.api_delegate = AsyncMock(return_value={"success": True, "user": {"username": "ada"}})
        global_context.navigate = AsyncMock(side_effect=RuntimeError("router gone"))

        with caplog.at_level(logging.ERROR, logger="xingine.actions.page"):
            result = await engine.run({"action": "loginUser", "args": {"username": "ada", "password": "pw"}}, context)
            await asyncio.sleep(0.05)

        assert result.success
        global_context.navigate.assert_awaited_once_with(settings.LOGIN_REDIRECT_PATH)
        assert f"Delayed navigation to {settings.LOGIN_REDIRECT_PATH} failed: router gone" in caplog.text

    async def test_login_user_rejected(self, engine, context, global_context):
        global_context.api_delegate = AsyncMock(return_value={"success": False, "message": "Invalid username or password"})

        result = await engine.run({"action": "loginUser", "args": {"username": "ada", "password": "bad"}}, context)

        assert not result.success
        assert result.error.message == "Invalid username or password"
        assert global_context.toasts == [{"message": "Invalid username or password", "type": "error"}]
        assert "isAuthenticated" not in global_context.state

    async def test_login_user_request_error(self, engine, context, global_context):
        global_context.api_delegate = AsyncMock(side_effect=TimeoutError("timed out"))

        result = await engine.run({"action": "loginUser", "args": {"username": "ada", "password": "pw"}}, context)

        assert result.error.kind == ErrorKind.HOST
        assert global_context.toasts == [{"message": "timed out", "type": "error"}]

    async def test_logout_user(self, engine, context, global_context, monkeypatch):
        monkeypatch.setattr(settings, "LOGOUT_REDIRECT_DELAY_SECONDS", 0)
        global_context.local_storage.update({"auth_token": "jwt", "user_data": "{}", "other": "keep"})
        global_context.state["isAuthenticated"] = True

        result = await engine.run("logoutUser", context)

        assert result.result == {"message": "Logout successful"}
        assert global_context.local_storage == {"other": "keep"}
        assert global_context.state["isAuthenticated"] is False
        assert global_context.state["currentUser"] is None
        assert global_context.navigation_history == [settings.LOGOUT_REDIRECT_PATH]


class TestVisibility:
    async def test_show_hide_uses_global_state(self, engine, context, global_context):
        global_context.state["role"] = "admin"
        result = await engine.run(
            {"action": "showHide", "args": {"condition": {"field": "role", "operator": "eq", "value": "admin"}}}, context
        )
        assert result.result is True

    async def test_show_hide_with_explicit_data(self, engine, context):
        result = await engine.run(
            {"action": "showHide", "args": {"condition": {"field": "n", "operator": "gt", "value": 1}, "data": {"n": 0}}},
            context,
        )
        assert result.result is False

    async def test_show_hide_with_provider_spec(self, engine, context):
        args = {
            "condition": {"field": "plan", "operator": "eq", "value": "pro"},
            "provider": {"type": "context", "initialData": {"plan": "pro"}},
        }
        result = await engine.run({"action": "showHide", "args": args}, context)
        assert result.result is True

    async def test_show_hide_overlays_form_data(self, engine, form_action_context):
        args = {
            "condition": {"and": [
                {"field": "age", "operator": "gte", "value": 18},
                {"field": "consent", "operator": "eq", "value": True},
            ]},
            "data": {"consent": True},
        }
        result = await engine.run({"action": "showHide", "args": args}, form_action_context)
        assert result.result is True

    async def test_show_hide_hides_on_error(self, engine, context):
        result = await engine.run(
            {"action": "showHide", "args": {"condition": {"field": "a", "operator": "between", "value": 1}}}, context
        )
        assert not result.success
        assert result.result is False
        assert result.error.kind == ErrorKind.EVALUATION

    async def test_field_condition_shows_on_error(self, engine, context):
        result = await engine.run(
            {"action": "evaluateFieldCondition", "args": {"condition": {"field": "a"}, "fieldName": "a"}}, context
        )
        assert not result.success
        assert result.result is True

    async def test_field_condition_prefers_form_data_arg(self, engine, context, global_context):
        global_context.state["country"] = "FR"
        args = {"condition": {"field": "country", "operator": "eq", "value": "DE"}, "formData": {"country": "DE"}}
        result = await engine.run({"action": "evaluateFieldCondition", "args": args}, context)
        assert result.result is True

    async def test_condition_required(self, engine, context):
        result = await engine.run("showHide", context)
        assert result.error.kind == ErrorKind.ARGUMENT


class TestDemoHandlers:
    async def test_counters(self, engine, context, content_context):
        args = {"componentId": "counter-1"}
        await engine.run({"action": "incrementCounter", "args": args}, context)
        await engine.run({"action": "incrementCounter", "args": args}, context)
        result = await engine.run({"action": "decrementCounter", "args": args}, context)

        assert result.result == {"key": "counter-1", "value": 1}
        assert content_context.component_stores["counter-1"].get_state("counter-1") == 1

    async def test_decrement_floors_at_zero(self, engine, context, global_context):
        result = await engine.run("decrementCounter", context)
        assert result.result == {"key": "default", "value": 0}
        assert global_context.state["default"] == 0

    async def test_content_helpers(self, engine, context, content_context):
        await engine.run({"action": "updateContentState", "args": {"key": "page", "value": 2}}, context)
        await engine.run("toggleContentFilter", context)
        await engine.run({"action": "toggleContentFilter", "args": {"key": "archived"}}, context)

        assert content_context.content_state == {"page": 2, "filterActive": True, "archived": True}

    async def test_component_input_and_toggle(self, engine, context, content_context):
        await engine.run({"action": "updateComponentInput", "args": {"componentId": "search", "value": "abc"}}, context)
        await engine.run({"action": "toggleComponent", "args": {"componentId": "panel"}}, context)

        assert content_context.component_stores["search"].get_state("search") == "abc"
        assert content_context.component_stores["panel"].get_state("panel") is True

    async def test_selector_counter(self, engine, context, global_context):
        await engine.run("incrementSelectorCounter", context)
        result = await engine.run({"action": "incrementSelectorCounter", "args": {"counter": "B"}}, context)

        assert result.result == {"counter": "B", "value": 1}
        assert global_context.state == {"selectorCounterA": 1, "selectorCounterB": 1}

    async def test_mass_components(self, engine, context, global_context):
        created = await engine.run({"action": "createMassComponents", "args": {"count": 3}}, context)
        updated = await engine.run("massUpdateComponents", context)

        assert created.result == {"count": 3, "components": 3}
        assert updated.result == {"updated": 3}
        assert all("lastUpdated" in component for component in global_context.state["massComponents"])

        await engine.run("cleanupMassComponents", context)
        assert global_context.state["massComponents"] == []
        assert global_context.state["massComponentCount"] == 0

    async def test_mass_components_rejects_bad_count(self, engine, context):
        result = await engine.run({"action": "createMassComponents", "args": {"count": "many"}}, context)
        assert result.error.kind == ErrorKind.ARGUMENT

    async def test_high_frequency_ticker(self, engine, context, global_context, monkeypatch):
        monkeypatch.setattr(settings, "HIGH_FREQUENCY_INTERVAL_SECONDS", 0.001)
        monkeypatch.setattr(settings, "HIGH_FREQUENCY_MAX_TICKS", 10_000)

        started = await engine.run("startHighFrequencyTest", context)
        task = global_context.state["highFrequencyInterval"]
        await asyncio.sleep(0.05)
        stopped = await engine.run("stopHighFrequencyTest", context)
        await asyncio.sleep(0.01)

        assert started.result == {"started": True, "counter": 0}
        assert stopped.result == {"stopped": True, "wasRunning": True}
        assert global_context.state["highFrequencyCounter"] > 0
        assert global_context.state["highFrequencyInterval"] is None
        assert task.cancelled()

    async def test_ticker_stops_itself_at_cap(self, engine, context, global_context, monkeypatch):
        monkeypatch.setattr(settings, "HIGH_FREQUENCY_INTERVAL_SECONDS", 0)
        monkeypatch.setattr(settings, "HIGH_FREQUENCY_MAX_TICKS", 3)

        await engine.run("startHighFrequencyTest", context)
        await global_context.state["highFrequencyInterval"]

        assert global_context.state["highFrequencyCounter"] == 3
        assert global_context.state["highFrequencyInterval"] is None
