"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import date
from uuid import uuid4

import pytest

from shoot_workflow.adapters.shoots_api_client import ApiResponse, ShootsApiClient
from shoot_workflow.config import Settings
from shoot_workflow.containers import AppContainer
from shoot_workflow.domain.auth import AuthContext, Role
from shoot_workflow.domain.errors import TransportFailure
from shoot_workflow.domain.reschedule import RescheduleRequest, RescheduleStatus
from shoot_workflow.domain.shoots import (
    ContactRef,
    IssueFlag,
    PaymentSummary,
    ShootRecord,
    WorkflowState,
    WorkflowStatus,
)
from shoot_workflow.services.board import WorkflowBoard
from shoot_workflow.services.gateway import TransitionGateway
from shoot_workflow.services.payments import PaymentService
from shoot_workflow.services.rescheduling import (
    RescheduleRequestRepository,
    ReschedulingService,
)
from shoot_workflow.services.store import InMemoryShootStore

TODAY = date(2026, 3, 10)
PHOTOGRAPHER_ID = "ph-1"


@dataclass
class FakeShootsApiClient(ShootsApiClient):
    """Fake API client that records calls and replays queued responses.

    Unqueued calls answer 200 with ``{"success": true}``.
    """

    calls: list[tuple[str, str, dict[str, object] | None]] = field(
        default_factory=list
    )
    responses: dict[str, list[ApiResponse]] = field(default_factory=dict)
    fail_transport: bool = False

    def queue(
        self, path: str, status_code: int = 200, body: dict[str, object] | None = None
    ) -> None:
        self.responses.setdefault(path, []).append(
            ApiResponse(status_code=status_code, body=body)
        )

    async def get(self, path: str, token: str) -> ApiResponse:
        return self._reply("GET", path, None)

    async def post(
        self, path: str, token: str, payload: dict[str, object] | None = None
    ) -> ApiResponse:
        return self._reply("POST", path, payload)

    def paths(self, method: str = "POST") -> list[str]:
        return [path for verb, path, _ in self.calls if verb == method]

    def _reply(
        self, method: str, path: str, payload: dict[str, object] | None
    ) -> ApiResponse:
        self.calls.append((method, path, payload))
        if self.fail_transport:
            raise TransportFailure()
        queued = self.responses.get(path)
        if queued:
            return queued.pop(0)
        return ApiResponse(status_code=200, body={"success": True})


@dataclass
class InMemoryRescheduleRequestRepository(RescheduleRequestRepository):
    """In-memory reschedule request repository for tests."""

    requests: dict[str, RescheduleRequest] = field(default_factory=dict)

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
        request = RescheduleRequest(
            id=str(uuid4()),
            shoot_id=shoot_id,
            original_date=original_date,
            requested_date=requested_date,
            requested_time=requested_time,
            requested_by=requested_by,
            requested_role=requested_role,
            reason=reason,
        )
        self.requests[request.id] = request
        return request

    def get_request(self, request_id: str) -> RescheduleRequest | None:
        return self.requests.get(request_id)

    def update_status(self, request_id: str, status: RescheduleStatus) -> None:
        request = self.requests[request_id]
        self.requests[request_id] = RescheduleRequest(
            id=request.id,
            shoot_id=request.shoot_id,
            original_date=request.original_date,
            requested_date=request.requested_date,
            requested_time=request.requested_time,
            requested_by=request.requested_by,
            requested_role=request.requested_role,
            status=status,
            reason=request.reason,
        )

    def list_requests(
        self, shoot_id: str, status: RescheduleStatus | None = None
    ) -> list[RescheduleRequest]:
        return [
            request
            for request in self.requests.values()
            if request.shoot_id == shoot_id
            and (status is None or request.status == status)
        ]


def make_shoot(  # noqa: PLR0913
    shoot_id: str = "s-1",
    workflow_status: WorkflowStatus = WorkflowStatus.RAW_UPLOADED,
    notes: str | None = None,
    total_quote: float = 0.0,
    total_paid: float = 0.0,
    photographer_id: str | None = PHOTOGRAPHER_ID,
    scheduled_date: date | None = TODAY,
) -> ShootRecord:
    """Build a shoot record with sensible defaults."""
    issue = IssueFlag(notes) if notes else None
    return ShootRecord(
        id=shoot_id,
        workflow=WorkflowState(status=workflow_status, issue=issue),
        scheduled_date=scheduled_date,
        time="10:00 AM",
        payment=PaymentSummary(total_quote=total_quote, total_paid=total_paid),
        photographer=ContactRef(name="Pat Lens", id=photographer_id)
        if photographer_id
        else None,
    )


def shoot_payload(  # noqa: PLR0913
    shoot_id: str = "s-1",
    workflow_status: str = "raw_uploaded",
    is_flagged: bool = False,
    admin_issue_notes: str | None = None,
    total_quote: float = 0.0,
    total_paid: float = 0.0,
) -> dict[str, object]:
    """Build a backend shoot dict in wire format."""
    return {
        "id": shoot_id,
        "status": "scheduled",
        "workflow_status": workflow_status,
        "is_flagged": is_flagged,
        "admin_issue_notes": admin_issue_notes,
        "scheduled_date": TODAY.isoformat(),
        "time": "10:00 AM",
        "payment": {"total_quote": total_quote, "total_paid": total_paid},
        "photographer": {"id": PHOTOGRAPHER_ID, "name": "Pat Lens"},
    }


@pytest.fixture
def settings() -> Settings:
    return Settings(
        api_base_url="https://api.example.test/api",
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
    )


@pytest.fixture
def photographer() -> AuthContext:
    return AuthContext(
        token="ph-token", role=Role.PHOTOGRAPHER, user_id=PHOTOGRAPHER_ID
    )


@pytest.fixture
def admin() -> AuthContext:
    return AuthContext(token="admin-token", role=Role.ADMIN, user_id="adm-1")


@pytest.fixture
def client_auth() -> AuthContext:
    return AuthContext(token="client-token", role=Role.CLIENT, user_id="cl-1")


@pytest.fixture
def api_client() -> FakeShootsApiClient:
    return FakeShootsApiClient()


@pytest.fixture
def reschedule_repository() -> InMemoryRescheduleRequestRepository:
    return InMemoryRescheduleRequestRepository()


@pytest.fixture
def container(
    settings: Settings,
    api_client: FakeShootsApiClient,
    reschedule_repository: InMemoryRescheduleRequestRepository,
) -> AppContainer:
    shoot_store = InMemoryShootStore(ttl_seconds=settings.shoot_cache_ttl_seconds)
    gateway = TransitionGateway(api_client)

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        shoot_store=shoot_store,
        gateway=gateway,
        board=WorkflowBoard(gateway=gateway, store=shoot_store),
        rescheduling_service=ReschedulingService(
            client=api_client,
            repository=reschedule_repository,
            today=lambda: TODAY,
        ),
        payment_service=PaymentService(api_client, today=lambda: TODAY),
        close_resources=close_resources,
    )
