"""Booking actions dialog modelled as an explicit state machine.

Only one dialog is ever active: ``none``, the ``actions`` menu, or the
``reschedule`` form opened from it.
"""

from dataclasses import dataclass
from datetime import date
from enum import StrEnum

from shoot_workflow.domain.auth import AuthContext
from shoot_workflow.domain.errors import WorkflowError
from shoot_workflow.domain.shoots import ShootRecord
from shoot_workflow.services.notices import Notice, error_notice
from shoot_workflow.services.rescheduling import ReschedulingService
from shoot_workflow.services.store import ShootStore
from shoot_workflow.services.workflow import BookingAction, apply_booking_action


class DialogState(StrEnum):
    NONE = "none"
    ACTIONS = "actions"
    RESCHEDULE = "reschedule"


class InvalidDialogTransition(Exception):
    """Raised when a dialog event is not valid in the current state."""


_BOOKING_NOTICES = {
    BookingAction.CONFIRM: Notice(
        title="Shoot accepted",
        description="The shoot has been accepted and scheduled.",
    ),
    BookingAction.CANCEL: Notice(
        title="Shoot on hold",
        description="The shoot has been put on hold.",
    ),
}


@dataclass
class ShootActionsDialog:
    """Dialog flow for cancel / reschedule / confirm on one shoot."""

    shoot: ShootRecord
    store: ShootStore
    state: DialogState = DialogState.NONE

    def open(self) -> None:
        self._expect(DialogState.NONE)
        self.state = DialogState.ACTIONS

    def open_reschedule(self) -> None:
        """Open the reschedule form, from the actions menu or directly."""
        if self.state == DialogState.RESCHEDULE:
            raise InvalidDialogTransition("reschedule dialog is already open")
        self.state = DialogState.RESCHEDULE

    def close(self) -> None:
        self.state = DialogState.NONE

    def choose(self, action: BookingAction) -> Notice | None:
        """Handle a menu choice; reschedule swaps to the reschedule form."""
        self._expect(DialogState.ACTIONS)
        if action == BookingAction.RESCHEDULE:
            self.state = DialogState.RESCHEDULE
            return None
        self.shoot = apply_booking_action(self.shoot, action)
        self.store.put(self.shoot)
        self.state = DialogState.NONE
        return _BOOKING_NOTICES[action]

    async def submit_reschedule(
        self,
        service: ReschedulingService,
        auth: AuthContext,
        requested_date: date,
        requested_time: str,
        reason: str | None = None,
    ) -> Notice:
        """Submit the reschedule form; the form stays open on failure."""
        self._expect(DialogState.RESCHEDULE)
        try:
            outcome = await service.request_reschedule(
                auth, self.shoot, requested_date, requested_time, reason
            )
        except WorkflowError as exc:
            return error_notice(exc)
        self.shoot = outcome.shoot
        self.store.put(self.shoot)
        self.state = DialogState.NONE
        return outcome.notice

    def _expect(self, expected: DialogState) -> None:
        if self.state != expected:
            raise InvalidDialogTransition(
                f"expected {expected} dialog, current is {self.state}"
            )
