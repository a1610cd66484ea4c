"""
Actions - Page Handlers

Handlers bound to the global/content collaborators: state, navigation,
network, storage, feedback, auth, conditional visibility and the demo
counters used by the renderer's playground pages.

Every state-touching handler routes through resolve_store so the
'GLOBAL.' / 'CONTENT.' / componentId convention applies uniformly.
Host exceptions are not caught here; the executor converts them into
HOST / CAPABILITY failures at the handler boundary.
"""

import asyncio
import inspect
import json
import logging
import random
import time
from typing import Any, Callable, Dict, Mapping, Optional

from ..config import settings
from ..context.interface import ActionExecutionContext, capability, maybe_await
from ..expressions.conditions import evaluate_condition
from ..expressions.paths import has_slugs, resolve_slugged_path
from ..expressions.scopes import CONTENT_PREFIX, GLOBAL_PREFIX, content_store, global_store, resolve_store
from ..expressions.values import resolve_symbolic_tree, resolve_symbolic_value
from ..schemas.results import ActionResult, ErrorKind
from .registry import ActionArgs, ActionHandler, ActionRegistry

logger = logging.getLogger(__name__)

AUTH_TOKEN_KEY = "auth_token"
USER_DATA_KEY = "user_data"
TICKER_HANDLE_KEY = "highFrequencyInterval"
TICKER_COUNTER_KEY = "highFrequencyCounter"


# ==========================================================================
# Helpers
# ==========================================================================

def _invalid(message: str) -> ActionResult:
    return ActionResult.failure(ErrorKind.ARGUMENT, message)


def _unavailable(action_name: str, method: str) -> ActionResult:
    return ActionResult.failure(
        ErrorKind.CAPABILITY,
        f"{action_name} action requires {method} method to be provided in the global context",
    )


def _component_id(args: ActionArgs) -> Optional[str]:
    component_id = args.get("componentId")
    return component_id if isinstance(component_id, str) and component_id else None


def resolve_url(template: str, context: ActionExecutionContext, params: Any) -> str:
    """
    Fills ':slug' segments from the call-time params first, then from the
    combined global + content state. Unresolvable slugs stay in place.
    """
    if not has_slugs(template):
        return template
    resolved = resolve_slugged_path(template, params if isinstance(params, Mapping) else {})
    if has_slugs(resolved):
        combined = {**global_store(context).get_all_state(), **content_store(context).get_all_state()}
        resolved = resolve_slugged_path(resolved, combined)
    logger.debug(f"URL slug resolution: {template} -> {resolved}")
    return resolved


async def _toast(context: ActionExecutionContext, message: str, toast_type: str) -> None:
    show_toast = capability(context.global_context, "show_toast")
    if show_toast is not None:
        await maybe_await(show_toast(message, toast_type))


def _log_navigation_outcome(path: str, task: "asyncio.Future") -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error(f"Delayed navigation to {path} failed: {exc}")


def _navigate_later(navigate: Callable[[str], Any], path: str) -> None:
    try:
        outcome = navigate(path)
        if inspect.isawaitable(outcome):
            task = asyncio.ensure_future(outcome)
            task.add_done_callback(lambda done: _log_navigation_outcome(path, done))
    except Exception:
        logger.exception(f"Delayed navigation to {path} failed")


async def _schedule_navigation(context: ActionExecutionContext, path: str, delay: float) -> None:
    navigate = capability(context.global_context, "navigate")
    if navigate is None:
        return
    if delay <= 0:
        await maybe_await(navigate(path))
        return
    asyncio.get_running_loop().call_later(delay, _navigate_later, navigate, path)


# ==========================================================================
# State family
# ==========================================================================

async def navigate(args: ActionArgs, context: ActionExecutionContext) -> ActionResult:
    path = args.get("path")
    if not isinstance(path, str):
        return _invalid("navigate requires args.path to be a string")
    resolved = resolve_url(path, context, args.get("params") or {})
    await maybe_await(context.global_context.navigate(resolved))
    return ActionResult.ok({"path": resolved})


def set_state(args: ActionArgs, context: ActionExecutionContext) -> ActionResult:
    key = args.get("key")
    if not isinstance(key, str):
        return _invalid("setState requires args.key to be a string")
    component_id = _component_id(args)
    value = resolve_symbolic_value(args.get("value"), context, component_id)
    target = resolve_store(context, key, component_id)
    target.store.set_state(target.key, value)
    return ActionResult.ok({"key": key, "value": value})


def get_state(args: ActionArgs, context: ActionExecutionContext) -> ActionResult:
    key = args.get("key")
    if not isinstance(key, str):
        return _invalid("getState requires args.key to be a string")
    component_id = _component_id(args)
    source = resolve_store(context, key, component_id)
    value = source.store.get_state(source.key)

    state_key = args.get("stateKey")
    if isinstance(state_key, str) and state_key:
        target = resolve_store(context, state_key, component_id)
        target.store.set_state(target.key, value)

    return ActionResult.ok(value)


def toggle_state(args: ActionArgs, context: ActionExecutionContext) -> ActionResult:
    key = args.get("key")
    if not isinstance(key, str):
        return _invalid("toggleState requires args.key to be a string")
    target = resolve_store(context, key, _component_id(args))
    value = not target.store.get_state(target.key)
    target.store.set_state(target.key, value)
    return ActionResult.ok({"key": key, "value": value})


def clear_state(args: ActionArgs, context: ActionExecutionContext) -> ActionResult:
    """
    Clears one key, every key of one component, or (with neither) every
    global key. Cleared keys are set to None.
    """
    key = args.get("key")
    component_id = _component_id(args)

    if isinstance(key, str) and key:
        target = resolve_store(context, key, component_id)
        target.store.set_state(target.key, None)
        return ActionResult.ok({"key": key, "cleared": True})

    if component_id:
        store = context.content_context.get_component_state_store(component_id)
        keys = list(store.get_all_state())
        for name in keys:
            store.set_state(name, None)
        return ActionResult.ok({"componentId": component_id, "cleared": len(keys)})

    store = global_store(context)
    keys = list(store.get_all_state())
    for name in keys:
        store.set_state(name, None)
    logger.warning(f"clearState wiped {len(keys)} global keys")
    return ActionResult.ok({"cleared": len(keys)})


# ==========================================================================
# Network
# ==========================================================================

async def make_api_call(args: ActionArgs, context: ActionExecutionContext) -> ActionResult:
    url = args.get("url")
    if not isinstance(url, str):
        return _invalid("makeApiCall requires args.url to be a string")

    component_id = _component_id(args)
    body = resolve_symbolic_tree(args.get("body"), context, component_id)
    request: Dict[str, Any] = {key: value for key, value in args.items() if key != "componentId"}
    request["url"] = resolve_url(url, context, body if isinstance(body, Mapping) else {})
    request["method"] = args.get("method") or "GET"
    request["body"] = body

    if component_id:
        store = context.content_context.get_component_state_store(component_id)
        override = capability(store, "make_api_call")
        if override is not None:
            logger.debug(f"Component '{component_id}' handles {request['method']} {request['url']}")
            return ActionResult.ok(await maybe_await(override(request)))

    delegate = capability(context.global_context, "make_api_call")
    if delegate is None:
        return _unavailable("makeApiCall", "make_api_call")
    result = await maybe_await(delegate(request))
    logger.debug(f"API call {request['method']} {request['url']} completed")
    return ActionResult.ok(result)


# ==========================================================================
# Auth / session
# ==========================================================================

async def login(args: ActionArgs, context: ActionExecutionContext) -> ActionResult:
    hook = capability(context.global_context, "login")
    if hook is None:
        return _unavailable("login", "login")
    username, password = args.get("username"), args.get("password")
    if not username or not password:
        return _invalid("Login requires username and password")

    outcome = await maybe_await(hook({"username": username, "password": password}))
    if isinstance(outcome, ActionResult):
        return outcome
    if isinstance(outcome, Mapping) and "success" in outcome:
        if outcome["success"]:
            return ActionResult.ok(dict(outcome))
        message = outcome.get("error") or outcome.get("message") or "Login failed"
        return ActionResult.failure(ErrorKind.HOST, str(message), result=dict(outcome))
    return ActionResult.ok(outcome)


async def logout(args: ActionArgs, context: ActionExecutionContext) -> ActionResult:
    hook = capability(context.global_context, "logout")
    if hook is None:
        return _unavailable("logout", "logout")
    await maybe_await(hook())
    return ActionResult.ok({"success": True})


async def login_user(args: ActionArgs, context: ActionExecutionContext) -> ActionResult:
    """
    Full login flow: POST credentials to the login endpoint, persist the token
    and user, flip the auth flags in global state, greet the user and redirect.
    """
    global_context = context.global_context
    username, password = args.get("username"), args.get("password")
    logger.info(f"Login attempt for user '{username}'")

    call = capability(global_context, "make_api_call")
    if call is None:
        return _unavailable("loginUser", "make_api_call")

    try:
        response = await maybe_await(call({
            "url": settings.LOGIN_ENDPOINT,
            "method": "POST",
            "body": {"username": username, "password": password},
        }))
    except Exception as e:
        logger.error(f"Login request failed: {e}")
        await _toast(context, str(e) or "An error occurred during login", "error")
        return ActionResult.from_exception(e)

    if not isinstance(response, Mapping) or not response.get("success"):
        message = (response.get("message") if isinstance(response, Mapping) else None) or "Login failed"
        logger.info(f"Login rejected for user '{username}': {message}")
        await _toast(context, message, "error")
        return ActionResult.failure(ErrorKind.HOST, message, details=response)

    user = response.get("user")
    set_storage = capability(global_context, "set_local_storage")
    if set_storage is not None and response.get("token"):
        await maybe_await(set_storage(AUTH_TOKEN_KEY, response["token"]))
        await maybe_await(set_storage(USER_DATA_KEY, json.dumps(user)))

    global_context.set_state("isAuthenticated", True)
    global_context.set_state("currentUser", user)

    display_name = user.get("username") if isinstance(user, Mapping) and user.get("username") else username
    await _toast(context, f"Welcome back, {display_name}!", "success")
    await _schedule_navigation(context, settings.LOGIN_REDIRECT_PATH, settings.LOGIN_REDIRECT_DELAY_SECONDS)

    logger.info(f"Login successful for user '{display_name}'")
    return ActionResult.ok(dict(response))


async def logout_user(args: ActionArgs, context: ActionExecutionContext) -> ActionResult:
    global_context = context.global_context
    remove_storage = capability(global_context, "remove_local_storage")
    if remove_storage is not None:
        await maybe_await(remove_storage(AUTH_TOKEN_KEY))
        await maybe_await(remove_storage(USER_DATA_KEY))

    global_context.set_state("isAuthenticated", False)
    global_context.set_state("currentUser", None)

    await _toast(context, "You have been logged out", "info")
    await _schedule_navigation(context, settings.LOGOUT_REDIRECT_PATH, settings.LOGOUT_REDIRECT_DELAY_SECONDS)

    logger.info("User logged out")
    return ActionResult.ok({"message": "Logout successful"})


# ==========================================================================
# Feedback
# ==========================================================================

async def report_error(args: ActionArgs, context: ActionExecutionContext) -> ActionResult:
    """
    Surfaces an error message: the explicit one, else the message of the
    error carried by the chain context, else a generic one.
    """
    chain_error = context.content_context.chain_context.error if context.content_context.chain_context else None
    details = args.get("details")
    message = args.get("message") or (chain_error.message if chain_error else None) or "An error occurred"

    hook = capability(context.global_context, "error")
    if hook is None:
        target = resolve_store(context, None, _component_id(args))
        target.store.set_state("errorMessage", message)
        target.store.set_state("hasError", True)
        logger.warning(f"Action error (no error hook, stored in state): {message}")
    else:
        fallback = chain_error.model_dump(mode="json") if chain_error else None
        await maybe_await(hook(message, details if details is not None else fallback))

    return ActionResult.ok({"message": message, "details": details})


async def show_toast(args: ActionArgs, context: ActionExecutionContext) -> ActionResult:
    message = args.get("message")
    toast_type = args.get("type") or "info"
    if not message:
        return _invalid("showToast requires message")

    hook = capability(context.global_context, "show_toast")
    if hook is None:
        target = resolve_store(context, None, _component_id(args))
        target.store.set_state("toastMessage", message)
        target.store.set_state("toastType", toast_type)
        target.store.set_state("showToast", True)
        logger.warning(f"No toast hook, stored toast in state: [{toast_type}] {message}")
    else:
        await maybe_await(hook(message, toast_type))
    return ActionResult.ok({"message": message, "type": toast_type})


# ==========================================================================
# Storage
# ==========================================================================

async def set_local_storage(args: ActionArgs, context: ActionExecutionContext) -> ActionResult:
    hook = capability(context.global_context, "set_local_storage")
    if hook is None:
        return _unavailable("setLocalStorage", "set_local_storage")
    key = args.get("key")
    if not key or "value" not in args:
        return _invalid("setLocalStorage requires key and value")

    value = resolve_symbolic_value(args["value"], context, _component_id(args))
    await maybe_await(hook(key, value))
    return ActionResult.ok({"key": key, "value": value})


async def get_local_storage(args: ActionArgs, context: ActionExecutionContext) -> ActionResult:
    hook = capability(context.global_context, "get_local_storage")
    if hook is None:
        return _unavailable("getLocalStorage", "get_local_storage")
    key = args.get("key")
    if not key:
        return _invalid("getLocalStorage requires key")

    value = await maybe_await(hook(key))
    state_key = args.get("stateKey")
    if isinstance(state_key, str) and state_key:
        target = resolve_store(context, state_key, _component_id(args))
        target.store.set_state(target.key, value)
    return ActionResult.ok(value)


async def remove_local_storage(args: ActionArgs, context: ActionExecutionContext) -> ActionResult:
    hook = capability(context.global_context, "remove_local_storage")
    if hook is None:
        return _unavailable("removeLocalStorage", "remove_local_storage")
    key = args.get("key")
    if not key:
        return _invalid("removeLocalStorage requires key")
    await maybe_await(hook(key))
    return ActionResult.ok({"key": key})


async def clear_local_storage(args: ActionArgs, context: ActionExecutionContext) -> ActionResult:
    hook = capability(context.global_context, "clear_local_storage")
    if hook is None:
        return _unavailable("clearLocalStorage", "clear_local_storage")
    await maybe_await(hook())
    return ActionResult.ok({"cleared": True})


# ==========================================================================
# Conditional visibility
# ==========================================================================

def show_hide(args: ActionArgs, context: ActionExecutionContext) -> ActionResult:
    """
    Evaluates a visibility condition. The record is the form data (inside a
    form) overlaid with a provider's data or explicit `data`; outside a form and
    without either, global state is used. Evaluation errors hide the target.
    """
    condition = args.get("condition")
    if not condition:
        return _invalid("showHide requires condition parameter")

    try:
        provider = context.providers.from_spec(args.get("provider"))
        explicit = args.get("data")
        data: Dict[str, Any] = {}
        if context.form_context is not None:
            data.update(context.form_context.get_form_data() or {})
        if provider is not None:
            data.update(provider.get_data())
        elif isinstance(explicit, Mapping):
            data.update(explicit)
        elif context.form_context is None:
            data = context.global_context.get_all_state()

        visible = evaluate_condition(condition, data)
    except Exception as e:
        logger.error(f"showHide evaluation failed, hiding: {e}")
        return ActionResult.failure(ErrorKind.EVALUATION, str(e) or type(e).__name__, result=False)

    logger.debug(f"showHide evaluated to {visible}")
    return ActionResult.ok(visible)


def evaluate_field_condition(args: ActionArgs, context: ActionExecutionContext) -> ActionResult:
    """Field-visibility variant of showHide. Evaluation errors keep the field visible."""
    condition = args.get("condition")
    if not condition:
        return _invalid("evaluateFieldCondition requires condition parameter")

    try:
        form_data = args.get("formData")
        data = form_data if isinstance(form_data, Mapping) and form_data else context.global_context.get_all_state()
        visible = evaluate_condition(condition, data)
    except Exception as e:
        logger.error(f"Field condition for '{args.get('fieldName')}' failed, showing: {e}")
        return ActionResult.failure(ErrorKind.EVALUATION, str(e) or type(e).__name__, result=True)

    logger.debug(f"Field condition for '{args.get('fieldName')}' evaluated to {visible}")
    return ActionResult.ok(visible)


# ==========================================================================
# Demo handlers
# ==========================================================================

def increment_counter(args: ActionArgs, context: ActionExecutionContext) -> ActionResult:
    counter_key = _component_id(args) or settings.DEFAULT_COMPONENT_ID
    store = resolve_store(context, None, _component_id(args)).store
    value = (store.get_state(counter_key) or 0) + 1
    store.set_state(counter_key, value)
    logger.debug(f"Counter incremented: {counter_key} = {value}")
    return ActionResult.ok({"key": counter_key, "value": value})


def decrement_counter(args: ActionArgs, context: ActionExecutionContext) -> ActionResult:
    counter_key = _component_id(args) or settings.DEFAULT_COMPONENT_ID
    store = resolve_store(context, None, _component_id(args)).store
    value = max(0, (store.get_state(counter_key) or 0) - 1)
    store.set_state(counter_key, value)
    logger.debug(f"Counter decremented: {counter_key} = {value}")
    return ActionResult.ok({"key": counter_key, "value": value})


def update_content_state(args: ActionArgs, context: ActionExecutionContext) -> ActionResult:
    key = args.get("key")
    if not isinstance(key, str):
        return _invalid("updateContentState requires args.key to be a string")
    target = resolve_store(context, CONTENT_PREFIX + key)
    target.store.set_state(target.key, args.get("value"))
    return ActionResult.ok({"key": key, "value": args.get("value")})


def update_component_input(args: ActionArgs, context: ActionExecutionContext) -> ActionResult:
    input_key = _component_id(args) or settings.DEFAULT_COMPONENT_ID
    value = args.get("value") or ""
    store = resolve_store(context, None, _component_id(args)).store
    store.set_state(input_key, value)
    return ActionResult.ok({"key": input_key, "value": value})


def toggle_component(args: ActionArgs, context: ActionExecutionContext) -> ActionResult:
    toggle_key = _component_id(args) or settings.DEFAULT_COMPONENT_ID
    store = resolve_store(context, None, _component_id(args)).store
    value = not store.get_state(toggle_key)
    store.set_state(toggle_key, value)
    return ActionResult.ok({"key": toggle_key, "value": value})


def toggle_content_filter(args: ActionArgs, context: ActionExecutionContext) -> ActionResult:
    key = args.get("key") or "filterActive"
    target = resolve_store(context, CONTENT_PREFIX + key)
    value = not target.store.get_state(target.key)
    target.store.set_state(target.key, value)
    return ActionResult.ok({"key": key, "value": value})


def increment_selector_counter(args: ActionArgs, context: ActionExecutionContext) -> ActionResult:
    counter = args.get("counter") or "A"
    target = resolve_store(context, f"{GLOBAL_PREFIX}selectorCounter{counter}")
    value = (target.store.get_state(target.key) or 0) + 1
    target.store.set_state(target.key, value)
    return ActionResult.ok({"counter": counter, "value": value})


async def _run_ticker(store, interval: float, max_ticks: int) -> None:
    counter = 0
    while counter < max_ticks:
        await asyncio.sleep(interval)
        counter += 1
        store.set_state(TICKER_COUNTER_KEY, counter)
    store.set_state(TICKER_HANDLE_KEY, None)
    logger.info(f"High frequency test finished after {counter} ticks")


def _cancel_ticker(store) -> bool:
    handle = store.get_state(TICKER_HANDLE_KEY)
    if handle is None:
        return False
    cancel = capability(handle, "cancel")
    if cancel is not None:
        cancel()
    store.set_state(TICKER_HANDLE_KEY, None)
    return True


async def start_high_frequency_test(args: ActionArgs, context: ActionExecutionContext) -> ActionResult:
    """
    Starts a background task bumping 'highFrequencyCounter' in global state
    roughly every frame. Only stopHighFrequencyTest (or a restart) cancels it.
    """
    store = global_store(context)
    _cancel_ticker(store)
    store.set_state(TICKER_COUNTER_KEY, 0)
    task = asyncio.get_running_loop().create_task(
        _run_ticker(store, settings.HIGH_FREQUENCY_INTERVAL_SECONDS, settings.HIGH_FREQUENCY_MAX_TICKS)
    )
    store.set_state(TICKER_HANDLE_KEY, task)
    logger.info("High frequency test started")
    return ActionResult.ok({"started": True, "counter": 0})


def stop_high_frequency_test(args: ActionArgs, context: ActionExecutionContext) -> ActionResult:
    stopped = _cancel_ticker(global_store(context))
    logger.info("High frequency test stopped")
    return ActionResult.ok({"stopped": True, "wasRunning": stopped})


def create_mass_components(args: ActionArgs, context: ActionExecutionContext) -> ActionResult:
    count = args.get("count", 100)
    if not isinstance(count, int) or isinstance(count, bool) or count < 0:
        return _invalid("createMassComponents requires count to be a non-negative integer")

    now = int(time.time() * 1000)
    components = [
        {"id": f"component-{now}-{i}", "name": f"Component {i + 1}", "status": "active", "created": now}
        for i in range(count)
    ]
    store = global_store(context)
    store.set_state("massComponents", components)
    store.set_state("massComponentCount", count)
    logger.debug(f"Created {count} mass components")
    return ActionResult.ok({"count": count, "components": len(components)})


def cleanup_mass_components(args: ActionArgs, context: ActionExecutionContext) -> ActionResult:
    store = global_store(context)
    store.set_state("massComponents", [])
    store.set_state("massComponentCount", 0)
    return ActionResult.ok({"cleaned": True})


def mass_update_components(args: ActionArgs, context: ActionExecutionContext) -> ActionResult:
    store = global_store(context)
    now = int(time.time() * 1000)
    updated = [
        {**component, "lastUpdated": now, "status": "active" if random.random() > 0.5 else "updating"}
        for component in store.get_state("massComponents") or []
    ]
    store.set_state("massComponents", updated)
    store.set_state("lastMassUpdate", now)
    return ActionResult.ok({"updated": len(updated)})


PAGE_HANDLERS: Dict[str, ActionHandler] = {
    "navigate": navigate,
    "setState": set_state,
    "getState": get_state,
    "toggleState": toggle_state,
    "clearState": clear_state,
    "makeApiCall": make_api_call,
    "login": login,
    "logout": logout,
    "loginUser": login_user,
    "logoutUser": logout_user,
    "error": report_error,
    "showToast": show_toast,
    "setLocalStorage": set_local_storage,
    "getLocalStorage": get_local_storage,
    "removeLocalStorage": remove_local_storage,
    "clearLocalStorage": clear_local_storage,
    "showHide": show_hide,
    "evaluateFieldCondition": evaluate_field_condition,
    "incrementCounter": increment_counter,
    "decrementCounter": decrement_counter,
    "updateContentState": update_content_state,
    "updateComponentInput": update_component_input,
    "toggleComponent": toggle_component,
    "toggleContentFilter": toggle_content_filter,
    "incrementSelectorCounter": increment_selector_counter,
    "startHighFrequencyTest": start_high_frequency_test,
    "stopHighFrequencyTest": stop_high_frequency_test,
    "createMassComponents": create_mass_components,
    "cleanupMassComponents": cleanup_mass_components,
    "massUpdateComponents": mass_update_components,
}


def build_page_registry() -> ActionRegistry:
    """A fresh page registry holding the built-in handlers."""
    return ActionRegistry("page", PAGE_HANDLERS)
