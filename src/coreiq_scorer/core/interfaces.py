"""Abstract interfaces (Protocol classes) for the CoreIQ scorer service.

The service depends on these interfaces, not on concrete implementations.
Concrete adapters live in ``adapters/``.
"""

import uuid
from collections.abc import Callable
from typing import Protocol, runtime_checkable

from coreiq_scorer.core.models import Assessment


@runtime_checkable
class IAssessmentRepository(Protocol):
    """Owned handles for assessment snapshots.

    Each assessment is held behind one handle. ``apply`` runs an edit as a
    read-modify-write under that handle's lock and swaps in the new snapshot.
    """

    async def add(self, assessment: Assessment) -> Assessment:
        """Register a new assessment."""
        ...

    async def get(self, assessment_id: uuid.UUID) -> Assessment | None:
        """Return the current snapshot, or None if unknown."""
        ...

    async def list_all(self) -> list[Assessment]:
        """Return current snapshots in creation order."""
        ...

    async def apply(
        self,
        assessment_id: uuid.UUID,
        edit: Callable[[Assessment], Assessment],
    ) -> Assessment | None:
        """Apply a pure edit to one assessment; None if unknown."""
        ...


@runtime_checkable
class IAssessmentExporter(Protocol):
    """Serialises an assessment into a flat tabular document."""

    media_type: str

    def export(self, assessment: Assessment) -> str:
        """Render the assessment."""
        ...
