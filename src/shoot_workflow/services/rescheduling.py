"""Reschedule requests for booked shoots.

A request is recorded as pending before the server is asked to move the
shoot, and is marked rejected if the server refuses. Admin-tier requesters
have it approved in the same operation and the shoot's date/time updated;
anyone else leaves the shoot untouched until an admin resolves the request.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import date
from typing import Protocol

from shoot_workflow.adapters.shoot_payloads import extract_shoot_data, parse_shoot
from shoot_workflow.adapters.shoots_api_client import ShootsApiClient
from shoot_workflow.domain.auth import AuthContext, Role
from shoot_workflow.domain.errors import (
    InvalidRescheduleDate,
    InvalidTimeSlot,
    RescheduleAlreadyResolved,
    RescheduleRequestNotFound,
    RescheduleStorageFailure,
    TransitionNotAllowed,
    WorkflowError,
)
from shoot_workflow.domain.reschedule import RescheduleRequest, RescheduleStatus
from shoot_workflow.domain.shoots import ShootRecord
from shoot_workflow.services.gateway import raise_for_failure
from shoot_workflow.services.notices import Notice

AVAILABLE_TIME_SLOTS = (
    "9:00 AM",
    "10:00 AM",
    "11:00 AM",
    "1:00 PM",
    "2:00 PM",
    "3:00 PM",
)

_logger = logging.getLogger(__name__)


class RescheduleRequestRepository(Protocol):
    """Persistence interface for reschedule requests."""

    def create_request(  # noqa: PLR0913
        self,
        shoot_id: str,
        original_date: date | None,
        requested_date: date,
        requested_time: str,
        reason: str | None,
        requested_by: str,
        requested_role: Role,
    ) -> RescheduleRequest:
        """Create a pending request and return it."""

    def get_request(self, request_id: str) -> RescheduleRequest | None:
        """Return a request by id, if present."""

    def update_status(self, request_id: str, status: RescheduleStatus) -> None:
        """Set the resolution status of a request."""

    def list_requests(
        self, shoot_id: str, status: RescheduleStatus | None = None
    ) -> list[RescheduleRequest]:
        """Return requests for a shoot, optionally filtered by status."""


@dataclass(frozen=True)
class RescheduleOutcome:
    """Result of a reschedule operation."""

    request: RescheduleRequest
    shoot: ShootRecord
    notice: Notice


def validate_requested_date(requested: date, today: date) -> None:
    """Reject dates strictly before today; today itself is allowed."""
    if requested < today:
        raise InvalidRescheduleDate()


def validate_time_slot(requested_time: str) -> None:
    if requested_time not in AVAILABLE_TIME_SLOTS:
        raise InvalidTimeSlot()


@dataclass
class ReschedulingService:
    """Creates and resolves reschedule requests."""

    client: ShootsApiClient
    repository: RescheduleRequestRepository
    today: Callable[[], date] = date.today

    async def request_reschedule(  # noqa: PLR0913
        self,
        auth: AuthContext,
        shoot: ShootRecord,
        requested_date: date,
        requested_time: str,
        reason: str | None = None,
    ) -> RescheduleOutcome:
        """Request a new date/time; auto-approved for admin-tier sessions."""
        token = auth.require_token()
        validate_requested_date(requested_date, self.today())
        validate_time_slot(requested_time)
        try:
            request = self.repository.create_request(
                shoot_id=shoot.id,
                original_date=shoot.scheduled_date,
                requested_date=requested_date,
                requested_time=requested_time,
                reason=reason,
                requested_by=auth.user_id or auth.role.value,
                requested_role=auth.role,
            )
        except Exception as exc:
            _logger.exception("Could not record reschedule for shoot %s", shoot.id)
            raise RescheduleStorageFailure() from exc
        try:
            body = await self._post_reschedule(
                token, shoot.id, requested_date, requested_time, reason
            )
        except WorkflowError:
            # Server kept the old slot.
            self.repository.update_status(request.id, RescheduleStatus.REJECTED)
            raise
        if not auth.is_admin:
            _logger.info(
                "Reschedule request %s pending for shoot %s", request.id, shoot.id
            )
            return RescheduleOutcome(
                request=request,
                shoot=shoot,
                notice=Notice(
                    title="Reschedule Requested",
                    description=(
                        "Your reschedule request has been submitted "
                        "and is awaiting review."
                    ),
                ),
            )
        return self._approve(request, shoot, body)

    async def approve_request(
        self, auth: AuthContext, request_id: str, shoot: ShootRecord
    ) -> RescheduleOutcome:
        """Approve a pending request and move the shoot to the requested slot."""
        request = self._pending_request(auth, request_id)
        if request.shoot_id != shoot.id:
            raise RescheduleRequestNotFound()
        token = auth.require_token()
        validate_requested_date(request.requested_date, self.today())
        body = await self._post_reschedule(
            token,
            shoot.id,
            request.requested_date,
            request.requested_time,
            request.reason,
        )
        return self._approve(request, shoot, body)

    def reject_request(self, auth: AuthContext, request_id: str) -> RescheduleRequest:
        """Reject a pending request; the shoot keeps its date."""
        request = self._pending_request(auth, request_id)
        self.repository.update_status(request.id, RescheduleStatus.REJECTED)
        _logger.info("Reschedule request %s rejected", request.id)
        return replace(request, status=RescheduleStatus.REJECTED)

    def list_pending(self, shoot_id: str) -> list[RescheduleRequest]:
        """Return pending requests for a shoot."""
        return self.repository.list_requests(shoot_id, RescheduleStatus.PENDING)

    def _pending_request(
        self, auth: AuthContext, request_id: str
    ) -> RescheduleRequest:
        if not auth.is_admin:
            raise TransitionNotAllowed("Only admins can resolve reschedule requests.")
        request = self.repository.get_request(request_id)
        if request is None:
            raise RescheduleRequestNotFound()
        if request.is_resolved:
            raise RescheduleAlreadyResolved()
        return request

    def _approve(
        self,
        request: RescheduleRequest,
        shoot: ShootRecord,
        body: dict[str, object] | None,
    ) -> RescheduleOutcome:
        self.repository.update_status(request.id, RescheduleStatus.APPROVED)
        data = extract_shoot_data(body)
        if data is not None:
            updated = parse_shoot(data)
        else:
            updated = replace(
                shoot,
                scheduled_date=request.requested_date,
                time=request.requested_time,
            )
        _logger.info(
            "Shoot %s rescheduled to %s %s",
            shoot.id,
            request.requested_date.isoformat(),
            request.requested_time,
        )
        return RescheduleOutcome(
            request=replace(request, status=RescheduleStatus.APPROVED),
            shoot=updated,
            notice=Notice(
                title="Shoot Rescheduled",
                description="The shoot has been rescheduled successfully.",
            ),
        )

    async def _post_reschedule(  # noqa: PLR0913
        self,
        token: str,
        shoot_id: str,
        requested_date: date,
        requested_time: str,
        reason: str | None,
    ) -> dict[str, object] | None:
        response = await self.client.post(
            f"shoots/{shoot_id}/reschedule",
            token,
            {
                "requested_date": requested_date.isoformat(),
                "requested_time": requested_time,
                "reason": reason,
            },
        )
        raise_for_failure(
            response,
            fallback_message=(
                "There was an error rescheduling the shoot. Please try again."
            ),
            title="Failed to reschedule",
        )
        return response.body
