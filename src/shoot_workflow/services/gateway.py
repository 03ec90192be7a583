"""Gateway that submits workflow transitions to the remote API."""

import logging
from dataclasses import dataclass

from shoot_workflow.adapters.shoot_payloads import extract_shoot_data, parse_shoot
from shoot_workflow.adapters.shoots_api_client import ApiResponse, ShootsApiClient
from shoot_workflow.domain.auth import AuthContext
from shoot_workflow.domain.errors import (
    AuthorizationFailure,
    InvalidShootPayload,
    RemoteError,
    ValidationFailure,
    WorkflowError,
)
from shoot_workflow.domain.shoots import ShootRecord, WorkflowStatus
from shoot_workflow.services.notices import Notice
from shoot_workflow.services.workflow import (
    WorkflowTransition,
    apply_transition,
    ensure_transition_allowed,
)

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransitionCopy:
    """User-facing text for one transition."""

    success_title: str
    success_message: str
    failure_title: str
    fallback_message: str


_COPY = {
    WorkflowTransition.SUBMIT_FOR_REVIEW: TransitionCopy(
        success_title="Shoot Submitted",
        success_message="Your shoot has been submitted for admin review.",
        failure_title="Submission Failed",
        fallback_message="Failed to submit shoot for review",
    ),
    WorkflowTransition.APPROVE: TransitionCopy(
        success_title="Shoot Approved",
        success_message="The shoot has been approved and marked as accepted.",
        failure_title="Approval Failed",
        fallback_message="Failed to approve shoot",
    ),
    WorkflowTransition.REJECT: TransitionCopy(
        success_title="Shoot Put on Hold",
        success_message=(
            "The shoot has been flagged with issues. "
            "The photographer has been notified."
        ),
        failure_title="Rejection Failed",
        fallback_message="Failed to reject shoot",
    ),
    WorkflowTransition.MARK_ISSUES_RESOLVED: TransitionCopy(
        success_title="Issues Resolved",
        success_message="The shoot has been resubmitted for admin review.",
        failure_title="Update Failed",
        fallback_message="Failed to mark issues as resolved",
    ),
}

_RESUBMITTED = Notice(
    title="Shoot Resubmitted",
    description="Your corrected shoot has been sent back for admin review.",
)


@dataclass(frozen=True)
class TransitionResult:
    """Server-confirmed shoot and the notice to show."""

    shoot: ShootRecord
    notice: Notice


def server_message(body: dict[str, object] | None) -> str | None:
    """Return the server's message field if it is a usable string."""
    if not body:
        return None
    message = body.get("message")
    if isinstance(message, str) and message.strip():
        return message.strip()
    return None


def raise_for_failure(
    response: ApiResponse, *, fallback_message: str, title: str
) -> None:
    """Raise the matching WorkflowError unless the response is a success."""
    body = response.body or {}
    if response.ok and body.get("success") is not False:
        return
    message = server_message(response.body)
    status_code = response.status_code
    if status_code in {401, 403}:
        raise AuthorizationFailure(message, title, status_code)
    if status_code >= 500:
        raise RemoteError(message or fallback_message, title, status_code)
    raise ValidationFailure(message or fallback_message, title, status_code)


@dataclass
class TransitionGateway:
    """Translates workflow transitions into API calls.

    The gateway does not deduplicate; callers keep one submission per shoot
    in flight. Failures leave the given record untouched.
    """

    client: ShootsApiClient

    async def submit(
        self,
        auth: AuthContext,
        shoot: ShootRecord,
        transition: WorkflowTransition,
        notes: str | None = None,
    ) -> TransitionResult:
        """Submit ``transition`` for ``shoot`` and return the confirmed state."""
        token = auth.require_token()
        ensure_transition_allowed(auth, shoot, transition, notes)
        copy = _COPY[transition]
        payload = (
            {"admin_issue_notes": notes}
            if transition == WorkflowTransition.REJECT
            else None
        )
        try:
            response = await self.client.post(
                f"shoots/{shoot.id}/{transition.value}", token, payload
            )
            raise_for_failure(
                response,
                fallback_message=copy.fallback_message,
                title=copy.failure_title,
            )
        except WorkflowError as exc:
            _logger.warning(
                "Transition %s failed for shoot %s (%s): %s",
                transition.value,
                shoot.id,
                type(exc).__name__,
                exc.user_message,
            )
            raise

        data = extract_shoot_data(response.body)
        if data is not None:
            updated = parse_shoot(data)
        else:
            updated = apply_transition(shoot, transition, notes)
        _logger.info(
            "Shoot %s transitioned %s -> %s via %s",
            shoot.id,
            shoot.workflow_status,
            updated.workflow_status,
            transition.value,
        )
        return TransitionResult(
            shoot=updated, notice=_success_notice(shoot, transition)
        )

    async def fetch_shoot(self, auth: AuthContext, shoot_id: str) -> ShootRecord:
        """Re-fetch a single shoot from the server."""
        token = auth.require_token()
        response = await self.client.get(f"shoots/{shoot_id}", token)
        raise_for_failure(
            response, fallback_message="Failed to load shoot", title="Load Failed"
        )
        body = response.body or {}
        data = extract_shoot_data(body)
        return parse_shoot(data if data is not None else body)

    async def list_shoots(self, auth: AuthContext) -> list[ShootRecord]:
        """Fetch the shoots visible to the session, skipping unreadable rows."""
        token = auth.require_token()
        response = await self.client.get("shoots", token)
        raise_for_failure(
            response, fallback_message="Failed to load shoots", title="Load Failed"
        )
        rows = (response.body or {}).get("data", [])
        if not isinstance(rows, list):
            return []
        shoots: list[ShootRecord] = []
        for row in rows:
            if not isinstance(row, dict):
                continue
            try:
                shoots.append(parse_shoot(row))
            except InvalidShootPayload:
                _logger.warning("Skipping unreadable shoot %s", row.get("id"))
        return shoots


def _success_notice(shoot: ShootRecord, transition: WorkflowTransition) -> Notice:
    if (
        transition == WorkflowTransition.SUBMIT_FOR_REVIEW
        and shoot.workflow_status == WorkflowStatus.ON_HOLD
    ):
        return _RESUBMITTED
    copy = _COPY[transition]
    return Notice(title=copy.success_title, description=copy.success_message)
