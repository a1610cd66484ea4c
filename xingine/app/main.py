import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict

from fastapi import FastAPI, HTTPException, Depends, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import Response

from ..config import settings
from ..expressions.conditions import evaluate_condition
from ..schemas.results import ActionResult
from ..services.dispatch import DispatchService
from ..services.exceptions import SessionNotFoundError
from ..state.session import HostSession
from .dependencies import get_api_client, get_dispatch_service
from .schemas import (
    CreateSessionRequest,
    CreateSessionResponse,
    DispatchRequest,
    DispatchResponse,
    EvaluateConditionRequest,
    EvaluateConditionResponse,
    SessionRead,
)

logging.basicConfig(level=settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Release the pooled connections of the makeApiCall delegate
    await get_api_client().aclose()


app = FastAPI(title="Xingine Action Engine", lifespan=lifespan)

# Background tasks (the demo ticker) live in state but are not JSON
_ENCODERS = {asyncio.Task: lambda task: {"task": task.get_name(), "done": task.done()}}


def _encode(value: Any) -> Any:
    return jsonable_encoder(value, custom_encoder=_ENCODERS)


def _session_read(session: HostSession) -> SessionRead:
    return SessionRead(**_encode(session.snapshot()))


def _result_dump(result: ActionResult) -> Dict[str, Any]:
    return _encode(result.model_dump())


# --- Endpoints ---

@app.post(
    "/sessions",
    response_model=CreateSessionResponse,
    status_code=status.HTTP_201_CREATED
)
def create_session(
    request: CreateSessionRequest,
    service: DispatchService = Depends(get_dispatch_service)
):
    """Creates a session with fresh in-memory collaborators."""
    session = service.create_session(
        initial_state=request.initial_state,
        form_data=request.form_data,
    )
    return CreateSessionResponse(session_id=session.session_id)


@app.get("/sessions/{session_id}", response_model=SessionRead)
def get_session(
    session_id: str,
    service: DispatchService = Depends(get_dispatch_service)
):
    try:
        session = service.get_session(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")
    return _session_read(session)


@app.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_session(
    session_id: str,
    service: DispatchService = Depends(get_dispatch_service)
):
    """
    Deletes a session. Returns 204 No Content on success.
    """
    success = service.delete_session(session_id)
    if not success:
        raise HTTPException(status_code=404, detail="Session not found")

    # For 204, we must explicitly return a Response object with no content
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.post("/sessions/{session_id}/actions", response_model=DispatchResponse)
async def dispatch_actions(
    session_id: str,
    request: DispatchRequest,
    service: DispatchService = Depends(get_dispatch_service)
):
    """
    Runs the submitted action trees in order. Handler failures are reported
    in `results`; they never turn into HTTP errors.
    """
    try:
        results = await service.dispatch(session_id, request.action_list(), event=request.event)
        session = service.get_session(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return DispatchResponse(
        results=[_result_dump(result) for result in results],
        session=_session_read(session),
    )


@app.post("/conditions/evaluate", response_model=EvaluateConditionResponse)
def evaluate(request: EvaluateConditionRequest):
    return EvaluateConditionResponse(result=evaluate_condition(request.condition, request.context))
