"""Workflow board: action surfaces over the state machine and gateway."""

from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

from shoot_workflow.domain.auth import AuthContext
from shoot_workflow.domain.errors import SubmissionInProgress, WorkflowError
from shoot_workflow.domain.shoots import ShootRecord, WorkflowStatus
from shoot_workflow.services.gateway import TransitionGateway, TransitionResult
from shoot_workflow.services.notices import Notice, error_notice
from shoot_workflow.services.store import ShootStore
from shoot_workflow.services.workflow import (
    TRANSITION_RULES,
    WorkflowTransition,
    allowed_transitions,
    format_workflow_status,
)


@dataclass
class SubmissionTracker:
    """Per-shoot in-flight guard; shoots never block each other."""

    _in_flight: set[str] = field(default_factory=set)

    def is_pending(self, shoot_id: str) -> bool:
        return shoot_id in self._in_flight

    @asynccontextmanager
    async def hold(self, shoot_id: str) -> AsyncIterator[None]:
        """Mark ``shoot_id`` busy for the duration of the block."""
        if shoot_id in self._in_flight:
            raise SubmissionInProgress()
        self._in_flight.add(shoot_id)
        try:
            yield
        finally:
            self._in_flight.discard(shoot_id)


@dataclass(frozen=True)
class ActionSurface:
    """A control the current session may see for a shoot."""

    transition: WorkflowTransition
    label: str
    enabled: bool
    requires_notes: bool = False


@dataclass(frozen=True)
class BoardColumn:
    key: WorkflowStatus
    label: str
    shoots: list[ShootRecord]

    @property
    def count(self) -> int:
        return len(self.shoots)


_BOARD_ORDER = (
    WorkflowStatus.BOOKED,
    WorkflowStatus.RAW_UPLOADED,
    WorkflowStatus.EDITING_COMPLETE,
    WorkflowStatus.PENDING_REVIEW,
    WorkflowStatus.ON_HOLD,
    WorkflowStatus.ADMIN_VERIFIED,
    WorkflowStatus.COMPLETED,
)


def _action_label(shoot: ShootRecord, transition: WorkflowTransition) -> str:
    if transition == WorkflowTransition.SUBMIT_FOR_REVIEW:
        if shoot.workflow_status == WorkflowStatus.ON_HOLD:
            return "Resubmit for Review"
        return "Submit for Review"
    if transition == WorkflowTransition.MARK_ISSUES_RESOLVED:
        return "Mark Issues as Resolved"
    if transition == WorkflowTransition.APPROVE:
        if shoot.missing_raw or shoot.missing_final:
            return "Approve (media incomplete)"
        return "Approve"
    return "Reject"


@dataclass
class WorkflowBoard:
    """Consumes the guard table and gateway on behalf of the UI."""

    gateway: TransitionGateway
    store: ShootStore
    tracker: SubmissionTracker = field(default_factory=SubmissionTracker)

    def available_actions(
        self, auth: AuthContext, shoot: ShootRecord
    ) -> list[ActionSurface]:
        """Return controls to render; disabled while a submission is in flight."""
        busy = self.tracker.is_pending(shoot.id)
        return [
            ActionSurface(
                transition=transition,
                label=_action_label(shoot, transition),
                enabled=not busy,
                requires_notes=TRANSITION_RULES[transition].requires_notes,
            )
            for transition in allowed_transitions(auth, shoot)
        ]

    async def load_shoot(self, auth: AuthContext, shoot_id: str) -> ShootRecord:
        """Return the cached shoot, re-fetching when missing or stale."""
        cached = self.store.get(shoot_id)
        if cached is not None:
            return cached
        shoot = await self.gateway.fetch_shoot(auth, shoot_id)
        self.store.put(shoot)
        return shoot

    async def refresh(self, auth: AuthContext) -> list[ShootRecord]:
        """Poll the shoot list and replace cached records."""
        shoots = await self.gateway.list_shoots(auth)
        for shoot in shoots:
            self.store.put(shoot)
        return shoots

    async def run_transition(
        self,
        auth: AuthContext,
        shoot_id: str,
        transition: WorkflowTransition,
        notes: str | None = None,
    ) -> TransitionResult:
        """Run a transition under the shoot's in-flight guard."""
        async with self.tracker.hold(shoot_id):
            shoot = await self.load_shoot(auth, shoot_id)
            result = await self.gateway.submit(auth, shoot, transition, notes)
            self.store.put(result.shoot)
        return result

    async def perform(
        self,
        auth: AuthContext,
        shoot_id: str,
        transition: WorkflowTransition,
        notes: str | None = None,
    ) -> Notice:
        """Run a transition and return the notice to display."""
        try:
            result = await self.run_transition(auth, shoot_id, transition, notes)
        except WorkflowError as exc:
            return error_notice(exc)
        return result.notice

    def columns(self, shoots: Iterable[ShootRecord]) -> list[BoardColumn]:
        """Group shoots into workflow columns in pipeline order."""
        grouped: dict[WorkflowStatus, list[ShootRecord]] = {
            status: [] for status in _BOARD_ORDER
        }
        for shoot in shoots:
            grouped[shoot.workflow_status].append(shoot)
        return [
            BoardColumn(
                key=status, label=format_workflow_status(status), shoots=grouped[status]
            )
            for status in _BOARD_ORDER
        ]
