"""Test fixtures for coreiq-scorer."""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from coreiq_scorer.adapters.csv_exporter import CsvAssessmentExporter
from coreiq_scorer.adapters.repositories import InMemoryAssessmentRepository
from coreiq_scorer.core.models import NdaStatus
from coreiq_scorer.core.services.assessment_service import AssessmentService
from coreiq_scorer.main import create_app
from coreiq_scorer.settings import Settings


@pytest.fixture()
def settings() -> Settings:
    """Settings with demo seeding disabled so each test starts empty."""
    return Settings(seed_demo_assessment=False)


@pytest.fixture()
def repository() -> InMemoryAssessmentRepository:
    """Fresh in-memory repository."""
    return InMemoryAssessmentRepository()


@pytest.fixture()
def service(repository: InMemoryAssessmentRepository) -> AssessmentService:
    """AssessmentService over a fresh repository, new assessments SIGNED."""
    return AssessmentService(
        repository=repository,
        exporter=CsvAssessmentExporter(),
        default_nda=NdaStatus.SIGNED,
    )


@pytest.fixture()
def app(settings: Settings) -> FastAPI:
    """A fresh application instance per test."""
    return create_app(settings)


@pytest_asyncio.fixture()
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the test application."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://testserver",
    ) as test_client:
        yield test_client
