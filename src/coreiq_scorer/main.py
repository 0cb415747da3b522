"""CoreIQ scorer service entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from coreiq_scorer import __version__
from coreiq_scorer.adapters.csv_exporter import CsvAssessmentExporter
from coreiq_scorer.adapters.repositories import InMemoryAssessmentRepository
from coreiq_scorer.api.router import router
from coreiq_scorer.api.schemas import HealthResponse
from coreiq_scorer.core.scoring import AssessmentScorer
from coreiq_scorer.core.services.assessment_service import AssessmentService
from coreiq_scorer.observability import configure_logging
from coreiq_scorer.settings import Settings

logger = structlog.get_logger(__name__)


def build_service(settings: Settings) -> AssessmentService:
    """Wire the assessment service with its in-memory adapters.

    Args:
        settings: Service settings.

    Returns:
        A ready AssessmentService.
    """
    return AssessmentService(
        repository=InMemoryAssessmentRepository(),
        exporter=CsvAssessmentExporter(),
        scorer=AssessmentScorer(),
        default_scope=settings.default_active_functions,
        default_nda=settings.default_nda_status,
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Optional settings; loaded from the environment when omitted.

    Returns:
        Configured FastAPI instance with the service on app.state.
    """
    resolved = settings or Settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Manage application startup and shutdown lifecycle."""
        configure_logging(resolved)
        if resolved.seed_demo_assessment:
            demo = await app.state.assessment_service.create_demo_assessment()
            logger.info("Demo assessment seeded", assessment_id=str(demo.id))
        yield

    application = FastAPI(
        title=resolved.service_name,
        version=__version__,
        lifespan=lifespan,
    )
    application.state.settings = resolved
    application.state.assessment_service = build_service(resolved)
    application.include_router(router, prefix="/api/v1")

    @application.get("/health", response_model=HealthResponse, tags=["health"])
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", service=resolved.service_name, version=__version__)

    return application


app: FastAPI = create_app()
