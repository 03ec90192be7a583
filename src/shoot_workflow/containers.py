"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from shoot_workflow.adapters.shoots_api_client import HttpxShootsApiClient
from shoot_workflow.adapters.supabase_reschedule_repository import (
    SupabaseRescheduleRequestRepository,
)
from shoot_workflow.config import Settings
from shoot_workflow.services.board import WorkflowBoard
from shoot_workflow.services.gateway import TransitionGateway
from shoot_workflow.services.payments import PaymentService
from shoot_workflow.services.rescheduling import ReschedulingService
from shoot_workflow.services.store import InMemoryShootStore, ShootStore


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    shoot_store: ShootStore
    gateway: TransitionGateway
    board: WorkflowBoard
    rescheduling_service: ReschedulingService
    payment_service: PaymentService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    api_client = HttpxShootsApiClient.create(resolved_settings.api_base_url)
    shoot_store = InMemoryShootStore(
        ttl_seconds=resolved_settings.shoot_cache_ttl_seconds
    )
    gateway = TransitionGateway(api_client)
    rescheduling_service = ReschedulingService(
        client=api_client,
        repository=SupabaseRescheduleRequestRepository(supabase_client),
    )
    payment_service = PaymentService(api_client)
    board = WorkflowBoard(gateway=gateway, store=shoot_store)

    async def close_resources() -> None:
        await api_client.close()

    return AppContainer(
        settings=resolved_settings,
        shoot_store=shoot_store,
        gateway=gateway,
        board=board,
        rescheduling_service=rescheduling_service,
        payment_service=payment_service,
        close_resources=close_resources,
    )
