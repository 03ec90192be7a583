"""Supabase-backed reschedule request repository."""

from dataclasses import dataclass
from datetime import UTC, date, datetime

from supabase import Client

from shoot_workflow.domain.auth import Role
from shoot_workflow.domain.reschedule import RescheduleRequest, RescheduleStatus
from shoot_workflow.services.rescheduling import RescheduleRequestRepository

_COLUMNS = (
    "id, shoot_id, original_date, requested_date, requested_time, "
    "reason, status, requested_by, requested_role"
)


@dataclass
class SupabaseRescheduleRequestRepository(RescheduleRequestRepository):
    """Supabase implementation for reschedule requests."""

    client: Client

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
        """Insert a pending request row and return it."""
        response = (
            self.client.table("shoot_reschedule_requests")
            .insert(
                {
                    "shoot_id": shoot_id,
                    "original_date": original_date.isoformat()
                    if original_date
                    else None,
                    "requested_date": requested_date.isoformat(),
                    "requested_time": requested_time,
                    "reason": reason,
                    "status": RescheduleStatus.PENDING.value,
                    "requested_by": requested_by,
                    "requested_role": requested_role.value,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create reschedule request")
        return _to_request(response.data[0])

    def get_request(self, request_id: str) -> RescheduleRequest | None:
        """Return a request by id, if present."""
        response = (
            self.client.table("shoot_reschedule_requests")
            .select(_COLUMNS)
            .eq("id", request_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _to_request(response.data[0])

    def update_status(self, request_id: str, status: RescheduleStatus) -> None:
        """Record the resolution of a request."""
        self.client.table("shoot_reschedule_requests").update(
            {
                "status": status.value,
                "resolved_at": datetime.now(tz=UTC).isoformat(),
            }
        ).eq("id", request_id).execute()

    def list_requests(
        self, shoot_id: str, status: RescheduleStatus | None = None
    ) -> list[RescheduleRequest]:
        """Return requests for a shoot, newest first."""
        query = (
            self.client.table("shoot_reschedule_requests")
            .select(_COLUMNS)
            .eq("shoot_id", shoot_id)
        )
        if status is not None:
            query = query.eq("status", status.value)
        response = query.order("created_at", desc=True).execute()
        return [_to_request(row) for row in response.data or []]


def _to_request(row: dict[str, object]) -> RescheduleRequest:
    original_date = row.get("original_date")
    return RescheduleRequest(
        id=str(row["id"]),
        shoot_id=str(row["shoot_id"]),
        original_date=_parse_date(original_date) if original_date else None,
        requested_date=_parse_date(row["requested_date"]),
        requested_time=str(row.get("requested_time") or ""),
        reason=row.get("reason"),
        status=RescheduleStatus(row.get("status") or "pending"),
        requested_by=str(row.get("requested_by") or ""),
        requested_role=Role(row.get("requested_role") or "client"),
    )


def _parse_date(value: object) -> date:
    # Rows written by older clients store full ISO timestamps.
    return date.fromisoformat(str(value)[:10])
