"""Service layer for editing and scoring CoreIQ assessments.

Implements the operator workflow:
    1. create_assessment(): seeds an empty assessment tree
    2. set_nda() / set_scope() / set_archived(): update assessment metadata
    3. record_answer(): creates or updates one sub-criterion
    4. get_scores(): runs the scoring engine on the current snapshot
    5. export_csv(): flattens recorded answers for download

Every edit is a pure transformation of the current snapshot, applied through
the repository's owned handle. The scoring engine only ever sees read-only
snapshots. No FastAPI imports belong here.
"""

import uuid
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import datetime, timezone

import structlog

from coreiq_scorer.core.catalog import find_item
from coreiq_scorer.core.interfaces import IAssessmentExporter, IAssessmentRepository
from coreiq_scorer.core.models import (
    UNSET,
    Assessment,
    BusinessFunction,
    Dimension,
    FunctionName,
    NdaStatus,
    new_assessment,
    normalise_scope,
    parse_dimension,
    parse_function_name,
    touch,
    with_sub_criterion,
)
from coreiq_scorer.core.scoring import AssessmentScorer, Scores

logger = structlog.get_logger(__name__)


class AssessmentNotFoundError(Exception):
    """Raised when no assessment exists for the requested id."""


class EditNotPermittedError(Exception):
    """Raised when an answer is recorded while the NDA is not signed."""


class UnknownSubCriterionError(Exception):
    """Raised when a key is not in the catalog for its function and dimension."""


class AssessmentService:
    """Orchestrates assessment edits and scoring.

    Depends on a repository and an exporter injected at construction time.
    Contains no framework-specific code.
    """

    def __init__(
        self,
        repository: IAssessmentRepository,
        exporter: IAssessmentExporter,
        scorer: AssessmentScorer | None = None,
        default_scope: Iterable[FunctionName | str] = (FunctionName.OPS, FunctionName.CX),
        default_nda: NdaStatus = NdaStatus.NOT_SENT,
    ) -> None:
        """Initialise the service.

        Args:
            repository: Owned handles for assessment snapshots.
            exporter: Tabular exporter used by export_csv().
            scorer: Scoring engine; defaults to the shipped weights.
            default_scope: Active function set for new assessments.
            default_nda: NDA status for new assessments.
        """
        self._repository = repository
        self._exporter = exporter
        self._scorer = scorer or AssessmentScorer()
        self._default_scope = normalise_scope(default_scope)
        self._default_nda = default_nda

    async def create_assessment(
        self,
        client: str,
        title: str,
        industry: str | None = None,
        contact_name: str | None = None,
        contact_email: str | None = None,
        nda: NdaStatus | None = None,
        scope: Iterable[FunctionName | str] | None = None,
        status: str = "IN_PROGRESS",
    ) -> Assessment:
        """Create an assessment with an empty tree for every function.

        Raises:
            UnknownFunctionError: If scope names an unknown function.
        """
        assessment = new_assessment(
            client=client,
            title=title,
            scope=tuple(scope) if scope is not None else self._default_scope,
            nda=nda or self._default_nda,
            status=status,
            industry=industry,
            contact_name=contact_name,
            contact_email=contact_email,
        )
        await self._repository.add(assessment)
        logger.info(
            "Assessment created",
            assessment_id=str(assessment.id),
            client=client,
            scope=[name.value for name in assessment.scope],
            nda=assessment.nda.value,
        )
        return assessment

    async def create_demo_assessment(self) -> Assessment:
        """Seed the demo audit used by the dashboard on a fresh instance."""
        return await self.create_assessment(
            client="Durban Logistics",
            title="CoreIQ PoC – Ops Baseline",
            nda=NdaStatus.SIGNED,
        )

    async def get_assessment(self, assessment_id: uuid.UUID) -> Assessment:
        """Return the current snapshot.

        Raises:
            AssessmentNotFoundError: If the id is unknown.
        """
        assessment = await self._repository.get(assessment_id)
        if assessment is None:
            raise AssessmentNotFoundError(f"Assessment {assessment_id} not found.")
        return assessment

    async def list_assessments(self, include_archived: bool = False) -> list[Assessment]:
        """Return assessment snapshots for the dashboard."""
        assessments = await self._repository.list_all()
        if include_archived:
            return assessments
        return [a for a in assessments if not a.archived]

    async def set_nda(self, assessment_id: uuid.UUID, nda: NdaStatus) -> Assessment:
        """Update the NDA gate.

        Raises:
            AssessmentNotFoundError: If the id is unknown.
        """
        updated = await self._apply(
            assessment_id,
            lambda current: touch(replace(current, nda=NdaStatus(nda))),
        )
        logger.info("Assessment NDA updated", assessment_id=str(assessment_id), nda=updated.nda.value)
        return updated

    async def set_archived(self, assessment_id: uuid.UUID, archived: bool) -> Assessment:
        """Hide an assessment from the default dashboard listing, or restore it.

        Raises:
            AssessmentNotFoundError: If the id is unknown.
        """
        updated = await self._apply(
            assessment_id,
            lambda current: touch(replace(current, archived=archived)),
        )
        logger.info("Assessment archive flag updated", assessment_id=str(assessment_id), archived=archived)
        return updated

    async def set_scope(
        self,
        assessment_id: uuid.UUID,
        scope: Iterable[FunctionName | str],
    ) -> Assessment:
        """Replace the active function set.

        Raises:
            AssessmentNotFoundError: If the id is unknown.
            UnknownFunctionError: If scope names an unknown function.
        """
        new_scope = normalise_scope(scope)
        updated = await self._apply(
            assessment_id,
            lambda current: touch(replace(current, scope=new_scope)),
        )
        logger.info(
            "Assessment scope updated",
            assessment_id=str(assessment_id),
            scope=[name.value for name in new_scope],
        )
        return updated

    async def record_answer(
        self,
        assessment_id: uuid.UUID,
        function: FunctionName | str,
        dimension: Dimension | str,
        key: str,
        score: "int | None | object" = UNSET,
        note: "str | object" = UNSET,
    ) -> Assessment:
        """Create or update one sub-criterion.

        Fields left as UNSET keep their current value. Pass score=None to
        clear an answer back to unanswered. An unknown assessment is reported
        before any problem with the function, dimension or key.

        Args:
            assessment_id: Target assessment.
            function: Business function name.
            dimension: Component dimension name.
            key: Catalog key of the sub-criterion.
            score: Raw 0-5 score.
            note: Free-text note.

        Returns:
            The updated snapshot.

        Raises:
            AssessmentNotFoundError: If the id is unknown.
            UnknownFunctionError: If function is not a known function.
            UnknownDimensionError: If dimension is not a known dimension.
            UnknownSubCriterionError: If key is not in the catalog for the pair.
            EditNotPermittedError: If the NDA is not signed.
        """
        await self.get_assessment(assessment_id)
        fn_name = parse_function_name(function)
        dim = parse_dimension(dimension)
        if find_item(fn_name, dim, key) is None:
            raise UnknownSubCriterionError(
                f"Sub-criterion {key!r} is not defined for {fn_name.value}/{dim.value}."
            )

        def _edit(current: Assessment) -> Assessment:
            if not current.is_editable:
                raise EditNotPermittedError(
                    f"Assessment {current.id} cannot be edited while NDA is {current.nda.value}."
                )
            return touch(
                with_sub_criterion(current, fn_name, dim, key, score=score, note=note)  # type: ignore[arg-type]
            )

        updated = await self._apply(assessment_id, _edit)
        logger.debug(
            "Sub-criterion recorded",
            assessment_id=str(assessment_id),
            function=fn_name.value,
            dimension=dim.value,
            key=key,
        )
        return updated

    async def get_scores(
        self,
        assessment_id: uuid.UUID,
        active_functions: Iterable[FunctionName | str] | None = None,
    ) -> Scores:
        """Score the current snapshot.

        Args:
            assessment_id: Target assessment.
            active_functions: Optional override of the assessment's scope.

        Raises:
            AssessmentNotFoundError: If the id is unknown.
        """
        assessment = await self.get_assessment(assessment_id)
        return self._scorer.compute_scores(assessment, active_functions)

    def score_snapshot(self, assessment: Assessment) -> Scores:
        """Score an already-loaded snapshot with this service's scorer."""
        return self._scorer.compute_scores(assessment)

    def score_function(self, function: BusinessFunction) -> float:
        """Weighted score of one function, whether or not it is in scope."""
        return self._scorer.score_function(function)

    @property
    def weights(self) -> dict[Dimension, float]:
        return self._scorer.weights

    async def export_csv(self, assessment_id: uuid.UUID) -> str:
        """Export the recorded answers of the assessment's active functions.

        Raises:
            AssessmentNotFoundError: If the id is unknown.
        """
        assessment = await self.get_assessment(assessment_id)
        document = self._exporter.export(assessment)
        logger.info(
            "Assessment exported",
            assessment_id=str(assessment_id),
            exported_at=datetime.now(tz=timezone.utc).isoformat(),
        )
        return document

    async def _apply(
        self,
        assessment_id: uuid.UUID,
        edit: Callable[[Assessment], Assessment],
    ) -> Assessment:
        updated = await self._repository.apply(assessment_id, edit)
        if updated is None:
            raise AssessmentNotFoundError(f"Assessment {assessment_id} not found.")
        return updated
