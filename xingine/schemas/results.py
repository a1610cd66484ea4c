"""
Schemas - Uniform Result Envelope

This module defines the ActionResult envelope returned by every handler and the
structured ActionError carried on failure. Errors are data: a failed action
still feeds its chains and continuations, which branch on the reserved
"__success" / "__hasError" fields.
"""
from enum import Enum
from typing import Any, Mapping, Optional
from pydantic import BaseModel, Field, ValidationError

from ..exceptions import CapabilityMissingError


class ErrorKind(str, Enum):
    """
    Classifies why an action failed.

    ARGUMENT: Missing or malformed handler arguments.
    CAPABILITY: A required host capability (method) is absent.
    HOST: A delegated host call raised.
    NOT_FOUND: No handler is registered for the action name.
    EVALUATION: A conditional expression could not be evaluated.
    """
    ARGUMENT = "ARGUMENT"
    CAPABILITY = "CAPABILITY"
    HOST = "HOST"
    NOT_FOUND = "NOT_FOUND"
    EVALUATION = "EVALUATION"


class ActionError(BaseModel):
    kind: ErrorKind = Field(
        ...,
        description="Category of the failure."
    )
    message: str = Field(
        ...,
        description="Human readable description, suitable for a toast or banner."
    )
    details: Any = Field(
        None,
        description="Optional structured context supplied by the handler."
    )
    exception_type: Optional[str] = Field(
        None,
        description="Class name of the host exception that caused the failure, if any."
    )


class ActionResult(BaseModel):
    """
    The envelope every handler returns.
    `result` carries the handler payload consumed downstream via the '__result.' marker.
    """
    success: bool
    result: Any = None
    error: Optional[ActionError] = None

    @classmethod
    def ok(cls, result: Any = None) -> "ActionResult":
        return cls(success=True, result=result)

    @classmethod
    def failure(
        cls,
        kind: ErrorKind,
        message: str,
        result: Any = None,
        details: Any = None,
    ) -> "ActionResult":
        return cls(
            success=False,
            result=result,
            error=ActionError(kind=kind, message=message, details=details),
        )

    @classmethod
    def from_exception(cls, exc: BaseException, result: Any = None) -> "ActionResult":
        """Converts an exception caught at a handler boundary into a failure."""
        kind = ErrorKind.CAPABILITY if isinstance(exc, CapabilityMissingError) else ErrorKind.HOST
        return cls(
            success=False,
            result=result,
            error=ActionError(
                kind=kind,
                message=str(exc) or type(exc).__name__,
                exception_type=type(exc).__name__,
            ),
        )

    @classmethod
    def coerce(cls, value: Any) -> "ActionResult":
        """
        Normalizes whatever a handler returned into an ActionResult.

        None means success without payload. A mapping with 'success' is read as
        an envelope: its 'error' may be anything (see coerce_error), and when it
        has no 'result' key the remaining keys become the result payload.
        Any other value is a successful payload.
        """
        if isinstance(value, ActionResult):
            return value
        if value is None:
            return cls.ok()
        if isinstance(value, Mapping) and "success" in value:
            if "result" in value:
                result = value["result"]
            else:
                extra = {key: item for key, item in value.items() if key not in ("success", "error")}
                result = extra or None
            return cls(
                success=bool(value["success"]),
                result=result,
                error=coerce_error(value.get("error")),
            )
        return cls.ok(value)


def coerce_error(value: Any) -> Optional[ActionError]:
    """
    Reads a host-supplied error into an ActionError. Structured errors that
    validate are kept; a string becomes the message of a HOST error; anything
    else is carried in `details` of a HOST error.
    """
    if value is None or isinstance(value, ActionError):
        return value
    if isinstance(value, str):
        return ActionError(kind=ErrorKind.HOST, message=value)
    if isinstance(value, Mapping):
        try:
            return ActionError.model_validate(dict(value))
        except ValidationError:
            message = value.get("message")
            return ActionError(
                kind=ErrorKind.HOST,
                message=message if isinstance(message, str) and message else str(dict(value)),
                details=dict(value),
            )
    return ActionError(kind=ErrorKind.HOST, message=str(value), details=value)
