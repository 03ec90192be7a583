"""Pydantic models for shoot payloads returned by the backend."""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from shoot_workflow.domain.errors import InvalidShootPayload
from shoot_workflow.domain.shoots import (
    FLAGGABLE_STATUSES,
    BookingStatus,
    ContactRef,
    IssueFlag,
    PaymentSummary,
    ShootRecord,
    WorkflowState,
    WorkflowStatus,
)


class ContactPayload(BaseModel):
    """Client or photographer reference."""

    model_config = ConfigDict(extra="ignore")

    id: int | str | None = None
    name: str = ""
    email: str | None = None
    phone: str | None = None

    def to_ref(self) -> ContactRef:
        return ContactRef(
            id=str(self.id) if self.id is not None else None,
            name=self.name,
            email=self.email,
            phone=self.phone,
        )


class PaymentPayload(BaseModel):
    """Financial fields of a shoot."""

    model_config = ConfigDict(extra="ignore")

    base_quote: float = 0.0
    tax_amount: float = 0.0
    total_quote: float = 0.0
    total_paid: float = 0.0
    last_payment_date: date | None = None
    last_payment_type: str | None = None

    @field_validator(
        "base_quote", "tax_amount", "total_quote", "total_paid", mode="before"
    )
    @classmethod
    def _null_amount(cls, value: object) -> object:
        return 0.0 if value is None or value == "" else value


class ShootPayload(BaseModel):
    """Shoot as serialized by the backend (snake_case)."""

    model_config = ConfigDict(extra="ignore")

    id: int | str
    status: str | None = None
    workflow_status: str | None = None
    is_flagged: bool = False
    admin_issue_notes: str | None = None
    scheduled_date: date | None = None
    time: str | None = None
    payment: PaymentPayload = Field(default_factory=PaymentPayload)
    client: ContactPayload | None = None
    photographer: ContactPayload | None = None
    missing_raw: bool = False
    missing_final: bool = False

    @field_validator("payment", mode="before")
    @classmethod
    def _null_payment(cls, value: object) -> object:
        return {} if value is None else value

    @field_validator("scheduled_date", mode="before")
    @classmethod
    def _date_only(cls, value: object) -> object:
        # Accept full ISO timestamps as well as plain dates.
        if isinstance(value, str) and "T" in value:
            return value.split("T", 1)[0]
        return value or None

    def to_record(self) -> ShootRecord:
        """Map the payload onto a domain record."""
        workflow_status = WorkflowStatus.parse(self.workflow_status)
        notes = (self.admin_issue_notes or "").strip()
        issue = None
        flagged = self.is_flagged or workflow_status == WorkflowStatus.ON_HOLD
        if notes and flagged and workflow_status in FLAGGABLE_STATUSES:
            issue = IssueFlag(self.admin_issue_notes or "")
        return ShootRecord(
            id=str(self.id),
            status=_parse_booking_status(self.status),
            workflow=WorkflowState(status=workflow_status, issue=issue),
            scheduled_date=self.scheduled_date,
            time=self.time,
            payment=PaymentSummary(
                base_quote=self.payment.base_quote,
                tax_amount=self.payment.tax_amount,
                total_quote=self.payment.total_quote,
                total_paid=self.payment.total_paid,
                last_payment_date=self.payment.last_payment_date,
                last_payment_type=self.payment.last_payment_type,
            ),
            client=self.client.to_ref() if self.client else None,
            photographer=self.photographer.to_ref() if self.photographer else None,
            missing_raw=self.missing_raw,
            missing_final=self.missing_final,
        )


def _parse_booking_status(raw: str | None) -> BookingStatus:
    if not raw:
        return BookingStatus.SCHEDULED
    return BookingStatus(raw.strip().lower())


def parse_shoot(data: dict[str, object]) -> ShootRecord:
    """Parse a raw shoot dict into a record, raising InvalidShootPayload."""
    try:
        return ShootPayload.model_validate(data).to_record()
    except (ValidationError, ValueError) as exc:
        raise InvalidShootPayload() from exc


def extract_shoot_data(body: dict[str, object] | None) -> dict[str, object] | None:
    """Return the shoot object embedded in a response body, if any."""
    if not body:
        return None
    for key in ("data", "shoot"):
        candidate = body.get(key)
        if isinstance(candidate, dict) and "id" in candidate:
            return candidate
    return None
