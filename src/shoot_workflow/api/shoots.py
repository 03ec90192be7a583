"""Shoot workflow endpoints consumed by the dashboard."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, HTTPException, Request, status

from shoot_workflow.api.models import (
    BatchTransitionBody,
    MarkPaidBody,
    RescheduleBody,
    TransitionBody,
    serialize_action,
    serialize_column,
    serialize_notice,
    serialize_payment_view,
    serialize_request,
    serialize_shoot,
)
from shoot_workflow.api.session import get_container, require_session
from shoot_workflow.domain.auth import AuthContext  # noqa: TC001
from shoot_workflow.services.dialogs import DialogState, ShootActionsDialog
from shoot_workflow.services.payments import view_for
from shoot_workflow.services.rescheduling import AVAILABLE_TIME_SLOTS
from shoot_workflow.services.workflow import BookingAction, WorkflowTransition

if TYPE_CHECKING:
    from shoot_workflow.containers import AppContainer

router = APIRouter(prefix="/shoots", tags=["shoots"])


def _parse_transition(transition: str) -> WorkflowTransition:
    try:
        return WorkflowTransition(transition)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND) from exc


@router.get("")
async def workflow_board(
    request: Request, auth: AuthContext = Depends(require_session)
) -> dict[str, object]:
    """Reload the session's shoots and group them into workflow columns."""
    container: AppContainer = get_container(request)
    shoots = await container.board.refresh(auth)
    return {
        "columns": [
            serialize_column(column) for column in container.board.columns(shoots)
        ]
    }


@router.post("/transitions/{transition}")
async def run_batch_transition(
    transition: str,
    body: BatchTransitionBody,
    request: Request,
    auth: AuthContext = Depends(require_session),
) -> dict[str, object]:
    """Run one transition on several shoots; each shoot reports its own notice."""
    parsed = _parse_transition(transition)
    container: AppContainer = get_container(request)
    notices = await asyncio.gather(
        *(
            container.board.perform(auth, shoot_id, parsed, body.notes)
            for shoot_id in body.shoot_ids
        )
    )
    return {
        "notices": {
            shoot_id: serialize_notice(notice)
            for shoot_id, notice in zip(body.shoot_ids, notices, strict=True)
        }
    }


@router.get("/{shoot_id}")
async def shoot_detail(
    shoot_id: str, request: Request, auth: AuthContext = Depends(require_session)
) -> dict[str, object]:
    """Return the shoot with the controls the session may use."""
    container: AppContainer = get_container(request)
    shoot = await container.board.load_shoot(auth, shoot_id)
    return {
        "shoot": serialize_shoot(shoot),
        "actions": [
            serialize_action(action)
            for action in container.board.available_actions(auth, shoot)
        ],
        "payment": serialize_payment_view(view_for(auth.role, shoot)),
    }


@router.get("/{shoot_id}/actions")
async def shoot_actions(
    shoot_id: str, request: Request, auth: AuthContext = Depends(require_session)
) -> dict[str, object]:
    """Return the workflow controls to render for the shoot."""
    container: AppContainer = get_container(request)
    shoot = await container.board.load_shoot(auth, shoot_id)
    return {
        "actions": [
            serialize_action(action)
            for action in container.board.available_actions(auth, shoot)
        ],
        "media_incomplete": shoot.missing_raw or shoot.missing_final,
    }


@router.post("/{shoot_id}/transitions/{transition}")
async def run_transition(
    shoot_id: str,
    transition: str,
    request: Request,
    body: TransitionBody | None = None,
    auth: AuthContext = Depends(require_session),
) -> dict[str, object]:
    """Submit a workflow transition for the shoot."""
    parsed = _parse_transition(transition)
    container: AppContainer = get_container(request)
    notes = body.notes if body else None
    result = await container.board.run_transition(auth, shoot_id, parsed, notes)
    return {
        "shoot": serialize_shoot(result.shoot),
        "notice": serialize_notice(result.notice),
    }


@router.get("/{shoot_id}/payment")
async def shoot_payment(
    shoot_id: str, request: Request, auth: AuthContext = Depends(require_session)
) -> dict[str, object]:
    """Return the payment figures the session may see."""
    container: AppContainer = get_container(request)
    shoot = await container.board.load_shoot(auth, shoot_id)
    return serialize_payment_view(view_for(auth.role, shoot))


@router.post("/{shoot_id}/mark-paid")
async def mark_paid(
    shoot_id: str,
    request: Request,
    body: MarkPaidBody | None = None,
    auth: AuthContext = Depends(require_session),
) -> dict[str, object]:
    """Settle the shoot's outstanding balance manually."""
    container: AppContainer = get_container(request)
    payment_type = body.payment_type if body else "manual"
    async with container.board.tracker.hold(shoot_id):
        shoot = await container.board.load_shoot(auth, shoot_id)
        result = await container.payment_service.mark_paid(auth, shoot, payment_type)
        container.shoot_store.put(result.shoot)
    return {
        "notice": serialize_notice(result.notice),
        "payment": serialize_payment_view(view_for(auth.role, result.shoot)),
    }


@router.get("/{shoot_id}/reschedule/slots")
async def reschedule_slots() -> dict[str, object]:
    """Return the fixed set of bookable time slots."""
    return {"slots": list(AVAILABLE_TIME_SLOTS)}


@router.post("/{shoot_id}/reschedule")
async def reschedule(
    shoot_id: str,
    body: RescheduleBody,
    request: Request,
    auth: AuthContext = Depends(require_session),
) -> dict[str, object]:
    """Request a new date/time; applied immediately for admins."""
    container: AppContainer = get_container(request)
    async with container.board.tracker.hold(shoot_id):
        shoot = await container.board.load_shoot(auth, shoot_id)
        outcome = await container.rescheduling_service.request_reschedule(
            auth, shoot, body.requested_date, body.requested_time, body.reason
        )
        container.shoot_store.put(outcome.shoot)
    return {
        "shoot": serialize_shoot(outcome.shoot),
        "request": serialize_request(outcome.request),
        "notice": serialize_notice(outcome.notice),
    }


@router.get("/{shoot_id}/reschedule-requests")
async def pending_reschedule_requests(
    shoot_id: str, request: Request, auth: AuthContext = Depends(require_session)
) -> dict[str, object]:
    """Return pending reschedule requests (admins only)."""
    if not auth.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN)
    container: AppContainer = get_container(request)
    pending = container.rescheduling_service.list_pending(shoot_id)
    return {"requests": [serialize_request(item) for item in pending]}


@router.post("/{shoot_id}/reschedule-requests/{request_id}/approve")
async def approve_reschedule_request(
    shoot_id: str,
    request_id: str,
    request: Request,
    auth: AuthContext = Depends(require_session),
) -> dict[str, object]:
    """Approve a pending reschedule request."""
    container: AppContainer = get_container(request)
    async with container.board.tracker.hold(shoot_id):
        shoot = await container.board.load_shoot(auth, shoot_id)
        outcome = await container.rescheduling_service.approve_request(
            auth, request_id, shoot
        )
        container.shoot_store.put(outcome.shoot)
    return {
        "shoot": serialize_shoot(outcome.shoot),
        "request": serialize_request(outcome.request),
        "notice": serialize_notice(outcome.notice),
    }


@router.post("/{shoot_id}/reschedule-requests/{request_id}/reject")
async def reject_reschedule_request(
    shoot_id: str,
    request_id: str,
    request: Request,
    auth: AuthContext = Depends(require_session),
) -> dict[str, object]:
    """Reject a pending reschedule request."""
    container: AppContainer = get_container(request)
    rejected = container.rescheduling_service.reject_request(auth, request_id)
    return {"request": serialize_request(rejected)}


@router.post("/{shoot_id}/booking/{action}")
async def booking_action(
    shoot_id: str,
    action: str,
    request: Request,
    body: RescheduleBody | None = None,
    auth: AuthContext = Depends(require_session),
) -> dict[str, object]:
    """Pick cancel, confirm or reschedule from the shoot's actions dialog.

    Reschedule without a body leaves the reschedule form open and returns
    the slots to offer; with a body the form is submitted and stays open
    if the request fails.
    """
    try:
        parsed = BookingAction(action)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND) from exc
    container: AppContainer = get_container(request)
    async with container.board.tracker.hold(shoot_id):
        shoot = await container.board.load_shoot(auth, shoot_id)
        dialog = ShootActionsDialog(shoot=shoot, store=container.shoot_store)
        dialog.open()
        notice = dialog.choose(parsed)
        if notice is None and body is not None:
            notice = await dialog.submit_reschedule(
                container.rescheduling_service,
                auth,
                body.requested_date,
                body.requested_time,
                body.reason,
            )
    payload: dict[str, object] = {
        "dialog": dialog.state.value,
        "shoot": serialize_shoot(dialog.shoot),
    }
    if notice is not None:
        payload["notice"] = serialize_notice(notice)
    if dialog.state == DialogState.RESCHEDULE:
        payload["slots"] = list(AVAILABLE_TIME_SLOTS)
    return payload
