"""Batch payment endpoints."""

from __future__ import annotations

from contextlib import AsyncExitStack
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Request

from shoot_workflow.api.models import BatchBody, serialize_notice
from shoot_workflow.api.session import get_container, require_session
from shoot_workflow.domain.auth import AuthContext  # noqa: TC001
from shoot_workflow.domain.shoots import ShootRecord  # noqa: TC001
from shoot_workflow.services.notices import Notice
from shoot_workflow.services.payments import BatchSelection, remaining_balance

if TYPE_CHECKING:
    from shoot_workflow.containers import AppContainer

router = APIRouter(prefix="/payments", tags=["payments"])

_CHECKOUT_OPENED = Notice(
    title="Payment window opened",
    description="Complete payment in the new window.",
)


async def _load_selection(
    container: AppContainer, auth: AuthContext, shoot_ids: list[str]
) -> list[ShootRecord]:
    return [await container.board.load_shoot(auth, shoot_id) for shoot_id in shoot_ids]


@router.post("/batch-summary")
async def batch_summary(
    body: BatchBody, request: Request, auth: AuthContext = Depends(require_session)
) -> dict[str, object]:
    """Return which of the given shoots can be paid, with totals for admins."""
    container: AppContainer = get_container(request)
    selection = BatchSelection(await _load_selection(container, auth, body.shoot_ids))
    summary: dict[str, object] = {
        "eligible_shoot_ids": [shoot.id for shoot in selection.shoots],
        "count": len(selection.shoots),
    }
    if auth.is_admin:
        summary["balances"] = {
            shoot.id: remaining_balance(shoot.payment) for shoot in selection.shoots
        }
        summary["total_due"] = selection.total
    return summary


@router.post("/checkout")
async def checkout(
    body: BatchBody, request: Request, auth: AuthContext = Depends(require_session)
) -> dict[str, object]:
    """Create an externally hosted checkout for the unpaid shoots."""
    container: AppContainer = get_container(request)
    shoots = await _load_selection(container, auth, body.shoot_ids)
    session = await container.payment_service.start_checkout(auth, shoots)
    return {
        "checkout_url": session.checkout_url,
        "shoot_ids": session.shoot_ids,
        "notice": serialize_notice(_CHECKOUT_OPENED),
    }


@router.post("/mark-paid")
async def mark_paid_batch(
    body: BatchBody, request: Request, auth: AuthContext = Depends(require_session)
) -> dict[str, object]:
    """Manually settle every unpaid shoot in the selection."""
    container: AppContainer = get_container(request)
    async with AsyncExitStack() as stack:
        for shoot_id in body.shoot_ids:
            await stack.enter_async_context(container.board.tracker.hold(shoot_id))
        shoots = await _load_selection(container, auth, body.shoot_ids)
        result = await container.payment_service.mark_paid_many(auth, shoots)
    for shoot in result.paid:
        container.shoot_store.put(shoot)
    return {
        "paid_shoot_ids": [shoot.id for shoot in result.paid],
        "failed": {
            shoot_id: error.user_message for shoot_id, error in result.failed.items()
        },
        "notice": serialize_notice(result.notice),
    }
