"""Tests for the booking actions dialog."""

import asyncio
from datetime import timedelta

import pytest

from shoot_workflow.domain.shoots import BookingStatus, WorkflowStatus
from shoot_workflow.services.dialogs import (
    DialogState,
    InvalidDialogTransition,
    ShootActionsDialog,
)
from shoot_workflow.services.rescheduling import ReschedulingService
from shoot_workflow.services.store import InMemoryShootStore
from shoot_workflow.services.workflow import BookingAction
from tests.conftest import (
    TODAY,
    FakeShootsApiClient,
    InMemoryRescheduleRequestRepository,
    make_shoot,
)


def _service() -> ReschedulingService:
    return ReschedulingService(
        client=FakeShootsApiClient(),
        repository=InMemoryRescheduleRequestRepository(),
        today=lambda: TODAY,
    )


def test_confirm_closes_dialog_and_stores_shoot() -> None:
    store = InMemoryShootStore()
    dialog = ShootActionsDialog(shoot=make_shoot(), store=store)

    dialog.open()
    notice = dialog.choose(BookingAction.CANCEL)

    assert notice is not None
    assert notice.title == "Shoot on hold"
    assert dialog.state == DialogState.NONE
    stored = store.get("s-1")
    assert stored is not None
    assert stored.status == BookingStatus.HOLD


def test_reschedule_choice_swaps_dialogs() -> None:
    dialog = ShootActionsDialog(shoot=make_shoot(), store=InMemoryShootStore())

    dialog.open()
    assert dialog.choose(BookingAction.RESCHEDULE) is None

    assert dialog.state == DialogState.RESCHEDULE
    with pytest.raises(InvalidDialogTransition):
        dialog.open()


def test_choose_requires_open_menu() -> None:
    dialog = ShootActionsDialog(shoot=make_shoot(), store=InMemoryShootStore())

    with pytest.raises(InvalidDialogTransition):
        dialog.choose(BookingAction.CONFIRM)


def test_reschedule_form_stays_open_on_error(admin) -> None:
    dialog = ShootActionsDialog(shoot=make_shoot(), store=InMemoryShootStore())
    dialog.open_reschedule()

    notice = asyncio.run(
        dialog.submit_reschedule(
            _service(), admin, TODAY - timedelta(days=1), "9:00 AM"
        )
    )

    assert notice.is_error
    assert notice.title == "Invalid Date"
    assert dialog.state == DialogState.RESCHEDULE


def test_reschedule_form_applies_admin_request(admin) -> None:
    store = InMemoryShootStore()
    shoot = make_shoot(workflow_status=WorkflowStatus.EDITING_COMPLETE)
    dialog = ShootActionsDialog(shoot=shoot, store=store)
    dialog.open_reschedule()
    new_date = TODAY + timedelta(days=5)

    notice = asyncio.run(
        dialog.submit_reschedule(_service(), admin, new_date, "3:00 PM")
    )

    assert notice.title == "Shoot Rescheduled"
    assert dialog.state == DialogState.NONE
    assert dialog.shoot.scheduled_date == new_date
    assert dialog.shoot.workflow_status == WorkflowStatus.EDITING_COMPLETE
    assert store.get("s-1") == dialog.shoot
