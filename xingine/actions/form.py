"""
Actions - Form Lifecycle Handlers

Same dispatch contract as the page registry, bound to the optional
FormActionContext. Without a form context every handler fails with a
CAPABILITY error naming the missing method.
"""

import logging
from typing import Any, Callable, Dict, Mapping, Optional

from ..context.interface import ActionExecutionContext, capability, maybe_await
from ..schemas.results import ActionResult, ErrorKind
from .registry import ActionArgs, ActionHandler, ActionRegistry

logger = logging.getLogger(__name__)


def _form_method(context: ActionExecutionContext, method: str) -> Optional[Callable[..., Any]]:
    return capability(context.form_context, method)


def _form_unavailable(method: str) -> ActionResult:
    return ActionResult.failure(
        ErrorKind.CAPABILITY,
        f"FormActionContext is not set or does not have {method} method",
    )


def _field_name(args: ActionArgs) -> Optional[str]:
    name = args.get("fieldName")
    return name if isinstance(name, str) and name else None


def set_form_data(args: ActionArgs, context: ActionExecutionContext) -> ActionResult:
    """
    Replaces form values with `data` (or the remaining args). With
    `setFromResult`, the previous action's result is merged in and also
    becomes the form's initial data, so a later resetForm returns to it.
    """
    setter = _form_method(context, "set_form_data")
    if setter is None:
        return _form_unavailable("set_form_data")

    if isinstance(args.get("data"), Mapping):
        data: Dict[str, Any] = dict(args["data"])
    else:
        data = {key: value for key, value in args.items() if key != "setFromResult"}

    if args.get("setFromResult"):
        chain_context = context.content_context.chain_context
        prior = chain_context.result if chain_context is not None else None
        if isinstance(prior, Mapping):
            data.update(prior)
        logger.debug(f"Seeding initial form data from the previous result: {list(data)}")
        context.form_context.set_initial_form_data(data)

    setter(data)
    return ActionResult.ok()


def get_form_data(args: ActionArgs, context: ActionExecutionContext) -> ActionResult:
    getter = _form_method(context, "get_form_data")
    if getter is None:
        return _form_unavailable("get_form_data")
    return ActionResult.ok(getter())


def set_form_field(args: ActionArgs, context: ActionExecutionContext) -> ActionResult:
    setter = _form_method(context, "set_field")
    if setter is None:
        return _form_unavailable("set_field")
    name = _field_name(args)
    if name is None:
        return ActionResult.failure(ErrorKind.ARGUMENT, "setFormField requires args.fieldName")
    setter(name, args.get("value"))
    return ActionResult.ok({"fieldName": name, "value": args.get("value")})


def get_form_field(args: ActionArgs, context: ActionExecutionContext) -> ActionResult:
    getter = _form_method(context, "get_field")
    if getter is None:
        return _form_unavailable("get_field")
    name = _field_name(args)
    if name is None:
        return ActionResult.failure(ErrorKind.ARGUMENT, "getFormField requires args.fieldName")
    return ActionResult.ok({"fieldName": name, "value": getter(name)})


async def validate_form(args: ActionArgs, context: ActionExecutionContext) -> ActionResult:
    validator = _form_method(context, "validate_form")
    if validator is None:
        return _form_unavailable("validate_form")
    is_valid = await maybe_await(validator())
    return ActionResult.ok({"isValid": bool(is_valid)})


async def validate_field(args: ActionArgs, context: ActionExecutionContext) -> ActionResult:
    validator = _form_method(context, "validate_field")
    if validator is None:
        return _form_unavailable("validate_field")
    name = _field_name(args)
    if name is None:
        return ActionResult.failure(ErrorKind.ARGUMENT, "validateField requires args.fieldName")
    is_valid = await maybe_await(validator(name))
    return ActionResult.ok({"fieldName": name, "isValid": bool(is_valid)})


def get_form_errors(args: ActionArgs, context: ActionExecutionContext) -> ActionResult:
    getter = _form_method(context, "get_errors")
    if getter is None:
        return _form_unavailable("get_errors")
    return ActionResult.ok(getter())


def set_form_errors(args: ActionArgs, context: ActionExecutionContext) -> ActionResult:
    setter = _form_method(context, "set_errors")
    if setter is None:
        return _form_unavailable("set_errors")
    errors = dict(args.get("errors") if isinstance(args.get("errors"), Mapping) else args)
    setter(errors)
    return ActionResult.ok({"errors": errors})


def clear_form_errors(args: ActionArgs, context: ActionExecutionContext) -> ActionResult:
    clearer = _form_method(context, "clear_errors")
    if clearer is None:
        return _form_unavailable("clear_errors")
    clearer()
    return ActionResult.ok({"cleared": True})


def set_initial_form_data(args: ActionArgs, context: ActionExecutionContext) -> ActionResult:
    setter = _form_method(context, "set_initial_form_data")
    if setter is None:
        return _form_unavailable("set_initial_form_data")
    data = args["data"] if isinstance(args.get("data"), Mapping) else args
    setter(dict(data))
    return ActionResult.ok()


def reset_form(args: ActionArgs, context: ActionExecutionContext) -> ActionResult:
    resetter = _form_method(context, "reset_form")
    if resetter is None:
        return _form_unavailable("reset_form")
    resetter()
    return ActionResult.ok({"reset": True})


async def submit_form(args: ActionArgs, context: ActionExecutionContext) -> ActionResult:
    """Hands the submission events in `args` to the host; its answer is the result."""
    submitter = _form_method(context, "submit_form")
    if submitter is None:
        return _form_unavailable("submit_form")
    if not args:
        logger.warning("submitForm dispatched without submission events")
        return ActionResult.failure(ErrorKind.ARGUMENT, "No events defined for submission")
    return ActionResult.coerce(await maybe_await(submitter(dict(args))))


def on_load(args: ActionArgs, context: ActionExecutionContext) -> ActionResult:
    # Entry point only: the behaviour lives in the action's `then` list.
    return ActionResult.ok({"message": "Delegating execution to then of the SerializableAction"})


FORM_HANDLERS: Dict[str, ActionHandler] = {
    "setFormData": set_form_data,
    "getFormData": get_form_data,
    "setFormField": set_form_field,
    "getFormField": get_form_field,
    "validateForm": validate_form,
    "validateField": validate_field,
    "getFormErrors": get_form_errors,
    "setFormErrors": set_form_errors,
    "clearFormErrors": clear_form_errors,
    "setInitialFormData": set_initial_form_data,
    "resetForm": reset_form,
    "submitForm": submit_form,
    "onLoad": on_load,
}


def build_form_registry() -> ActionRegistry:
    return ActionRegistry("form", FORM_HANDLERS)
