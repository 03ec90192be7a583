"""Session extraction and error mapping for the HTTP surface."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Header, HTTPException, Request, status
from fastapi.responses import JSONResponse

from shoot_workflow.api.models import serialize_notice
from shoot_workflow.config import parse_role
from shoot_workflow.domain.auth import AuthContext
from shoot_workflow.domain.errors import (
    AuthenticationMissing,
    AuthorizationFailure,
    PreconditionFailed,
    SubmissionInProgress,
    TransitionNotAllowed,
    ValidationFailure,
    WorkflowError,
)
from shoot_workflow.services.notices import error_notice

if TYPE_CHECKING:
    from shoot_workflow.containers import AppContainer


def get_container(request: Request) -> AppContainer:
    return request.app.state.container


async def require_session(
    authorization: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
    x_user_id: str | None = Header(default=None),
) -> AuthContext:
    """Build the AuthContext from request headers.

    A missing bearer token is not rejected here; workflow operations fail
    fast on it before any upstream call.
    """
    role = parse_role(x_user_role)
    if role is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Unknown role"
        )
    token = None
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization[len("bearer ") :].strip() or None
    return AuthContext(token=token, role=role, user_id=x_user_id)


def status_for(error: WorkflowError) -> int:  # noqa: PLR0911
    """Map a workflow error onto an HTTP status code."""
    if isinstance(error, AuthenticationMissing):
        return status.HTTP_401_UNAUTHORIZED
    if isinstance(error, SubmissionInProgress):
        return status.HTTP_409_CONFLICT
    if isinstance(error, PreconditionFailed):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(error, TransitionNotAllowed | AuthorizationFailure):
        return status.HTTP_403_FORBIDDEN
    if isinstance(error, ValidationFailure):
        return 422
    return status.HTTP_502_BAD_GATEWAY


async def workflow_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    """Render workflow errors as notices."""
    if not isinstance(exc, WorkflowError):
        raise exc
    return JSONResponse(
        status_code=status_for(exc),
        content={
            "notice": serialize_notice(error_notice(exc)),
            "retryable": exc.retryable,
        },
    )
