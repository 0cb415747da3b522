"""In-memory assessment handles.

Each assessment lives behind a single handle holding the current immutable
snapshot. Edits are pure functions applied under the handle's lock, so two
concurrent edits to the same assessment never interleave and readers always
see a complete tree. Nothing is persisted; state is lost on restart.
"""

import asyncio
import uuid
from collections.abc import Callable

import structlog

from coreiq_scorer.core.models import Assessment

logger = structlog.get_logger(__name__)


class _Handle:
    """Owned handle for one assessment snapshot."""

    __slots__ = ("snapshot", "lock")

    def __init__(self, snapshot: Assessment) -> None:
        self.snapshot = snapshot
        self.lock = asyncio.Lock()


class InMemoryAssessmentRepository:
    """Implements IAssessmentRepository over a process-local dict."""

    def __init__(self) -> None:
        self._handles: dict[uuid.UUID, _Handle] = {}

    async def add(self, assessment: Assessment) -> Assessment:
        """Register a new assessment.

        Raises:
            ValueError: If an assessment with the same id already exists.
        """
        if assessment.id in self._handles:
            raise ValueError(f"Assessment {assessment.id} already exists")
        self._handles[assessment.id] = _Handle(assessment)
        logger.debug("Assessment handle created", assessment_id=str(assessment.id))
        return assessment

    async def get(self, assessment_id: uuid.UUID) -> Assessment | None:
        handle = self._handles.get(assessment_id)
        return handle.snapshot if handle is not None else None

    async def list_all(self) -> list[Assessment]:
        return [handle.snapshot for handle in self._handles.values()]

    async def apply(
        self,
        assessment_id: uuid.UUID,
        edit: Callable[[Assessment], Assessment],
    ) -> Assessment | None:
        """Apply a pure edit and swap in the result.

        If edit raises, the current snapshot is left untouched and the
        exception propagates.

        Args:
            assessment_id: Target assessment.
            edit: Function from the current snapshot to the next one.

        Returns:
            The new snapshot, or None if the assessment is unknown.
        """
        handle = self._handles.get(assessment_id)
        if handle is None:
            return None
        async with handle.lock:
            updated = edit(handle.snapshot)
            handle.snapshot = updated
        return updated
