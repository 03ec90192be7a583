"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from shoot_workflow.api.payments import router as payments_router
from shoot_workflow.api.session import workflow_error_handler
from shoot_workflow.api.shoots import router as shoots_router
from shoot_workflow.app_logging import configure_logging
from shoot_workflow.containers import AppContainer
from shoot_workflow.domain.errors import WorkflowError


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "Shoot workflow API starting (environment=%s)",
            app.state.container.settings.environment,
        )
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container
    app.add_exception_handler(WorkflowError, workflow_error_handler)

    app.include_router(shoots_router)
    app.include_router(payments_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
