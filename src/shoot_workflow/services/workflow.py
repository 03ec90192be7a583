"""Production workflow state machine for shoots.

Pure logic only: which transitions exist, who may trigger them from which
state, and what each one does to a shoot record. The guard table is
consulted both by action surfaces (to decide what to render) and by the
gateway before it sends anything over the network.
"""

from dataclasses import dataclass, replace
from enum import StrEnum

from shoot_workflow.domain.auth import AuthContext, Role
from shoot_workflow.domain.errors import MissingIssueNotes, TransitionNotAllowed
from shoot_workflow.domain.shoots import (
    BookingStatus,
    IssueFlag,
    ShootRecord,
    WorkflowState,
    WorkflowStatus,
)


class WorkflowTransition(StrEnum):
    """Named workflow transitions; values are the API path segments."""

    SUBMIT_FOR_REVIEW = "submit-for-review"
    APPROVE = "approve"
    REJECT = "reject"
    MARK_ISSUES_RESOLVED = "mark-issues-resolved"


class Actor(StrEnum):
    PHOTOGRAPHER = "photographer"
    ADMIN = "admin"


@dataclass(frozen=True)
class TransitionRule:
    """One row of the guard table."""

    sources: frozenset[WorkflowStatus]
    target: WorkflowStatus
    actor: Actor
    requires_flag: bool = False
    requires_notes: bool = False


TRANSITION_RULES: dict[WorkflowTransition, TransitionRule] = {
    WorkflowTransition.SUBMIT_FOR_REVIEW: TransitionRule(
        sources=frozenset(
            {
                WorkflowStatus.RAW_UPLOADED,
                WorkflowStatus.EDITING_COMPLETE,
                WorkflowStatus.ON_HOLD,
            }
        ),
        target=WorkflowStatus.PENDING_REVIEW,
        actor=Actor.PHOTOGRAPHER,
    ),
    WorkflowTransition.APPROVE: TransitionRule(
        sources=frozenset({WorkflowStatus.PENDING_REVIEW}),
        target=WorkflowStatus.ADMIN_VERIFIED,
        actor=Actor.ADMIN,
    ),
    WorkflowTransition.REJECT: TransitionRule(
        sources=frozenset({WorkflowStatus.PENDING_REVIEW}),
        target=WorkflowStatus.ON_HOLD,
        actor=Actor.ADMIN,
        requires_notes=True,
    ),
    WorkflowTransition.MARK_ISSUES_RESOLVED: TransitionRule(
        sources=frozenset({WorkflowStatus.ON_HOLD}),
        target=WorkflowStatus.PENDING_REVIEW,
        actor=Actor.PHOTOGRAPHER,
        requires_flag=True,
    ),
}


def _role_matches(role: Role, actor: Actor) -> bool:
    if actor == Actor.ADMIN:
        return role.is_admin
    return role == Role.PHOTOGRAPHER


def can_perform(
    role: Role, transition: WorkflowTransition, state: WorkflowState
) -> bool:
    """Return True if ``role`` may trigger ``transition`` from ``state``."""
    rule = TRANSITION_RULES[transition]
    if not _role_matches(role, rule.actor):
        return False
    if state.status not in rule.sources:
        return False
    if rule.requires_flag and not state.is_flagged:
        return False
    return True


def is_shoot_owner(auth: AuthContext, shoot: ShootRecord) -> bool:
    """Return True unless the shoot is known to belong to another photographer."""
    if shoot.photographer is None or shoot.photographer.id is None:
        return True
    if auth.user_id is None:
        return True
    return str(shoot.photographer.id) == str(auth.user_id)


def allowed_transitions(
    auth: AuthContext, shoot: ShootRecord
) -> list[WorkflowTransition]:
    """Return the transitions the session may trigger on ``shoot``."""
    return [
        transition
        for transition in WorkflowTransition
        if _is_permitted(auth, shoot, transition)
    ]


def _is_permitted(
    auth: AuthContext, shoot: ShootRecord, transition: WorkflowTransition
) -> bool:
    if not can_perform(auth.role, transition, shoot.workflow):
        return False
    if TRANSITION_RULES[transition].actor == Actor.PHOTOGRAPHER:
        return is_shoot_owner(auth, shoot)
    return True


def ensure_transition_allowed(
    auth: AuthContext,
    shoot: ShootRecord,
    transition: WorkflowTransition,
    notes: str | None = None,
) -> None:
    """Raise if the session may not trigger ``transition`` with ``notes``."""
    if not _is_permitted(auth, shoot, transition):
        raise TransitionNotAllowed(
            f"Cannot {transition.value.replace('-', ' ')} a shoot that is "
            f"{format_workflow_status(shoot.workflow_status).lower()}."
        )
    if TRANSITION_RULES[transition].requires_notes and not (notes and notes.strip()):
        raise MissingIssueNotes()


def apply_transition(
    shoot: ShootRecord,
    transition: WorkflowTransition,
    notes: str | None = None,
) -> ShootRecord:
    """Return ``shoot`` after ``transition``; illegal transitions raise."""
    rule = TRANSITION_RULES[transition]
    state = shoot.workflow
    if state.status not in rule.sources:
        raise TransitionNotAllowed(
            f"Cannot {transition.value.replace('-', ' ')} from {state.status}."
        )
    if rule.requires_flag and not state.is_flagged:
        raise TransitionNotAllowed("There are no flagged issues to resolve.")

    if transition == WorkflowTransition.REJECT:
        if not (notes and notes.strip()):
            raise MissingIssueNotes()
        new_state = WorkflowState(status=rule.target, issue=IssueFlag(notes))
    elif transition == WorkflowTransition.APPROVE:
        new_state = WorkflowState(status=rule.target)
    else:
        # Resubmission keeps the flag and notes until an admin approves.
        new_state = WorkflowState(status=rule.target, issue=state.issue)
    return replace(shoot, workflow=new_state)


class BookingAction(StrEnum):
    """Booking-level actions, independent of the production pipeline."""

    CANCEL = "cancel"
    RESCHEDULE = "reschedule"
    CONFIRM = "confirm"


_BOOKING_TARGETS = {
    BookingAction.CANCEL: BookingStatus.HOLD,
    BookingAction.CONFIRM: BookingStatus.SCHEDULED,
}


def apply_booking_action(shoot: ShootRecord, action: BookingAction) -> ShootRecord:
    """Apply cancel/confirm to the coarse booking status."""
    if action == BookingAction.RESCHEDULE:
        raise ValueError("reschedule is handled by the rescheduling service")
    return replace(shoot, status=_BOOKING_TARGETS[action])


_STATUS_LABELS = {
    "booked": "Booked",
    "scheduled": "Scheduled",
    "raw_uploaded": "Uploaded",
    "photos_uploaded": "Uploaded",
    "editing_complete": "Editing",
    "pending_review": "Pending",
    "on_hold": "On Hold",
    "admin_verified": "Verified",
    "completed": "Completed",
}


def format_workflow_status(status: str | None, fallback: str = "Scheduled") -> str:
    """Return a human label for a workflow status."""
    if not status:
        return fallback
    key = str(status).lower()
    if key in _STATUS_LABELS:
        return _STATUS_LABELS[key]
    return "".join(chunk[:1].upper() + chunk[1:] for chunk in key.split("_"))
