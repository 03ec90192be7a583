"""Domain models for reschedule requests."""

from dataclasses import dataclass
from datetime import date
from enum import StrEnum

from shoot_workflow.domain.auth import Role


class RescheduleStatus(StrEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


@dataclass(frozen=True)
class RescheduleRequest:
    """A request to move a shoot to a new date and time."""

    id: str
    shoot_id: str
    original_date: date | None
    requested_date: date
    requested_time: str
    requested_by: str
    requested_role: Role
    status: RescheduleStatus = RescheduleStatus.PENDING
    reason: str | None = None

    @property
    def is_resolved(self) -> bool:
        return self.status != RescheduleStatus.PENDING
