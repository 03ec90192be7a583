"""Request bodies and response serializers for the HTTP surface."""

from datetime import date

from pydantic import BaseModel, Field, field_validator

from shoot_workflow.domain.reschedule import RescheduleRequest
from shoot_workflow.domain.shoots import ShootRecord
from shoot_workflow.services.board import ActionSurface, BoardColumn
from shoot_workflow.services.notices import Notice
from shoot_workflow.services.payments import PaymentView


class TransitionBody(BaseModel):
    """Optional notes for a transition (required for reject)."""

    notes: str | None = None


class RescheduleBody(BaseModel):
    requested_date: date
    requested_time: str
    reason: str | None = None


class MarkPaidBody(BaseModel):
    payment_type: str = "manual"


class BatchBody(BaseModel):
    """Shoots selected for a batch action, each id once."""

    shoot_ids: list[str] = Field(default_factory=list)

    @field_validator("shoot_ids")
    @classmethod
    def drop_repeated_ids(cls, value: list[str]) -> list[str]:
        return list(dict.fromkeys(value))


class BatchTransitionBody(BatchBody):
    """The same transition applied to several shoots."""

    notes: str | None = None


def serialize_notice(notice: Notice) -> dict[str, object]:
    return {
        "title": notice.title,
        "description": notice.description,
        "variant": notice.variant,
    }


def serialize_shoot(shoot: ShootRecord) -> dict[str, object]:
    """Serialize workflow fields; payment amounts are exposed separately."""
    return {
        "id": shoot.id,
        "status": shoot.status.value,
        "workflow_status": shoot.workflow_status.value,
        "is_flagged": shoot.is_flagged,
        "admin_issue_notes": shoot.admin_issue_notes,
        "scheduled_date": shoot.scheduled_date.isoformat()
        if shoot.scheduled_date
        else None,
        "time": shoot.time,
    }


def serialize_action(action: ActionSurface) -> dict[str, object]:
    return {
        "transition": action.transition.value,
        "label": action.label,
        "enabled": action.enabled,
        "requires_notes": action.requires_notes,
    }


def serialize_payment_view(view: PaymentView) -> dict[str, object]:
    """Drop hidden amounts so non-admin payloads carry only the flag."""
    payload = {
        "is_paid": view.is_paid,
        "base_quote": view.base_quote,
        "tax_amount": view.tax_amount,
        "total_quote": view.total_quote,
        "total_paid": view.total_paid,
        "remaining_balance": view.remaining_balance,
    }
    return {key: value for key, value in payload.items() if value is not None}


def serialize_request(request: RescheduleRequest) -> dict[str, object]:
    return {
        "id": request.id,
        "shoot_id": request.shoot_id,
        "original_date": request.original_date.isoformat()
        if request.original_date
        else None,
        "requested_date": request.requested_date.isoformat(),
        "requested_time": request.requested_time,
        "reason": request.reason,
        "status": request.status.value,
        "requested_by": request.requested_by,
    }


def serialize_column(column: BoardColumn) -> dict[str, object]:
    return {
        "key": column.key.value,
        "label": column.label,
        "count": column.count,
        "shoots": [serialize_shoot(shoot) for shoot in column.shoots],
    }
