"""Domain models for booked shoots."""

from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum


class BookingStatus(StrEnum):
    """Coarse booking-level lifecycle tag."""

    HOLD = "hold"
    SCHEDULED = "scheduled"
    PENDING = "pending"
    COMPLETED = "completed"


class WorkflowStatus(StrEnum):
    """Fine-grained production pipeline tag."""

    BOOKED = "booked"
    RAW_UPLOADED = "raw_uploaded"
    EDITING_COMPLETE = "editing_complete"
    PENDING_REVIEW = "pending_review"
    ON_HOLD = "on_hold"
    ADMIN_VERIFIED = "admin_verified"
    COMPLETED = "completed"

    @classmethod
    def parse(cls, raw: str | None) -> "WorkflowStatus":
        """Parse a wire value; absent means booked."""
        if raw is None or not raw.strip():
            return cls.BOOKED
        value = raw.strip().lower()
        return cls(_LEGACY_STATUSES.get(value, value))


_LEGACY_STATUSES = {"photos_uploaded": "raw_uploaded"}

# Statuses that may carry an issue flag: on hold, or back in review after
# the photographer resubmitted or resolved the issues.
FLAGGABLE_STATUSES = frozenset(
    {WorkflowStatus.ON_HOLD, WorkflowStatus.PENDING_REVIEW}
)


@dataclass(frozen=True)
class IssueFlag:
    """Admin-identified issues attached to a shoot."""

    notes: str

    def __post_init__(self) -> None:
        if not self.notes or not self.notes.strip():
            raise ValueError("issue notes must not be blank")


@dataclass(frozen=True)
class WorkflowState:
    """Workflow status plus the issue flag it may carry."""

    status: WorkflowStatus = WorkflowStatus.BOOKED
    issue: IssueFlag | None = None

    def __post_init__(self) -> None:
        if self.issue is not None and self.status not in FLAGGABLE_STATUSES:
            raise ValueError(f"{self.status} cannot carry an issue flag")
        if self.status == WorkflowStatus.ON_HOLD and self.issue is None:
            raise ValueError("on_hold requires issue notes")

    @property
    def is_flagged(self) -> bool:
        return self.issue is not None

    @property
    def admin_issue_notes(self) -> str | None:
        return self.issue.notes if self.issue else None


@dataclass(frozen=True)
class PaymentSummary:
    """Financial fields of a shoot."""

    base_quote: float = 0.0
    tax_amount: float = 0.0
    total_quote: float = 0.0
    total_paid: float = 0.0
    last_payment_date: date | None = None
    last_payment_type: str | None = None

    def __post_init__(self) -> None:
        if self.total_quote < 0:
            raise ValueError("total_quote must not be negative")
        if self.total_paid < 0:
            raise ValueError("total_paid must not be negative")


@dataclass(frozen=True)
class ContactRef:
    """Reference to a client or photographer."""

    name: str
    id: str | None = None
    email: str | None = None
    phone: str | None = None


@dataclass(frozen=True)
class ShootRecord:
    """A booked shoot and its workflow fields."""

    id: str
    status: BookingStatus = BookingStatus.SCHEDULED
    workflow: WorkflowState = field(default_factory=WorkflowState)
    scheduled_date: date | None = None
    time: str | None = None
    payment: PaymentSummary = field(default_factory=PaymentSummary)
    client: ContactRef | None = None
    photographer: ContactRef | None = None
    missing_raw: bool = False
    missing_final: bool = False

    @property
    def workflow_status(self) -> WorkflowStatus:
        return self.workflow.status

    @property
    def is_flagged(self) -> bool:
        return self.workflow.is_flagged

    @property
    def admin_issue_notes(self) -> str | None:
        return self.workflow.admin_issue_notes
