"""FastAPI router for the CoreIQ scorer.

All routes are thin: they parse inputs, resolve the service, delegate to
AssessmentService, and serialise responses. No business logic lives here.

API prefix: /api/v1
"""

import uuid

import structlog
from fastapi import APIRouter, Depends, HTTPException, Path, Request, Response, status

from coreiq_scorer.api.schemas import (
    ArchiveUpdateRequest,
    AssessmentDetailResponse,
    AssessmentListResponse,
    AssessmentSummarySchema,
    CatalogComponentSchema,
    CatalogFunctionSchema,
    CatalogItemSchema,
    CatalogResponse,
    ComponentSchema,
    CreateAssessmentRequest,
    FunctionSchema,
    NdaUpdateRequest,
    ScopeUpdateRequest,
    ScoresResponse,
    SubCriterionSchema,
    SubCriterionUpdateRequest,
)
from coreiq_scorer.core.catalog import end_cap_labels, items_for
from coreiq_scorer.core.models import (
    ALL_DIMENSIONS,
    ALL_FUNCTIONS,
    UNSET,
    Assessment,
    AssessmentModelError,
)
from coreiq_scorer.core.scoring import Scores, component_score
from coreiq_scorer.core.services.assessment_service import (
    AssessmentNotFoundError,
    AssessmentService,
    EditNotPermittedError,
    UnknownSubCriterionError,
)

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["CoreIQ Scorer"])


# ---------------------------------------------------------------------------
# Dependency factory
# ---------------------------------------------------------------------------


def get_assessment_service(request: Request) -> AssessmentService:
    """Return the AssessmentService built by the application factory.

    Args:
        request: Incoming request, used to reach app.state.

    Returns:
        The application's AssessmentService instance.
    """
    return request.app.state.assessment_service


# ---------------------------------------------------------------------------
# Serialisation helpers
# ---------------------------------------------------------------------------


def _to_detail(assessment: Assessment, service: AssessmentService) -> AssessmentDetailResponse:
    """Build the detail response, listing every catalog item per component.

    Unanswered items render with display_score 0 but score null, so a client
    never mistakes the slider default for an answer.
    """
    scores = service.score_snapshot(assessment)
    functions: list[FunctionSchema] = []
    for fn in assessment.functions:
        components: list[ComponentSchema] = []
        for component in fn.components:
            sub_criteria: list[SubCriterionSchema] = []
            for item in items_for(fn.name, component.name):
                recorded = component.get(item.key)
                score = recorded.score if recorded is not None else None
                sub_criteria.append(
                    SubCriterionSchema(
                        key=item.key,
                        label=item.label,
                        score=score,
                        display_score=score if score is not None else 0,
                        answered=score is not None,
                        note=recorded.note if recorded is not None else "",
                    )
                )
            components.append(
                ComponentSchema(
                    dimension=component.name,
                    score=component_score(component.sub),
                    sub_criteria=sub_criteria,
                )
            )
        functions.append(
            FunctionSchema(
                function=fn.name,
                in_scope=fn.name in assessment.scope,
                score=(
                    scores.per_function[fn.name]
                    if fn.name in scores.per_function
                    else service.score_function(fn)
                ),
                components=components,
            )
        )

    return AssessmentDetailResponse(
        id=assessment.id,
        client=assessment.client,
        title=assessment.title,
        status=assessment.status,
        nda=assessment.nda,
        editable=assessment.is_editable,
        industry=assessment.industry,
        contact_name=assessment.contact_name,
        contact_email=assessment.contact_email,
        archived=assessment.archived,
        scope=list(assessment.scope),
        updated_at=assessment.updated_at,
        overall_score=scores.overall,
        band=scores.band,
        functions=functions,
    )


def _to_scores(assessment_id: uuid.UUID, scores: Scores) -> ScoresResponse:
    return ScoresResponse(
        assessment_id=assessment_id,
        active_functions=list(scores.per_function),
        per_function=dict(scores.per_function),
        per_component=list(scores.per_component),
        per_component_by_name={
            dimension: scores.component(dimension) for dimension in ALL_DIMENSIONS
        },
        overall=scores.overall,
        band=scores.band,
    )


def _not_found(exc: AssessmentNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


@router.get(
    "/catalog",
    response_model=CatalogResponse,
    summary="Retrieve the questionnaire catalog",
)
async def get_catalog(
    service: AssessmentService = Depends(get_assessment_service),
) -> CatalogResponse:
    """Return every questionnaire item grouped by function and dimension.

    Functions without questions are listed with empty components so clients
    can render the full structure.
    """
    functions: list[CatalogFunctionSchema] = []
    for fn_name in ALL_FUNCTIONS:
        components = []
        for dimension in ALL_DIMENSIONS:
            items = []
            for item in items_for(fn_name, dimension):
                left, right = end_cap_labels(item)
                items.append(
                    CatalogItemSchema(
                        key=item.key,
                        label=item.label,
                        description=item.description,
                        anchor_0=item.anchor.a0,
                        anchor_3=item.anchor.a3,
                        anchor_5=item.anchor.a5,
                        left_label=left,
                        right_label=right,
                    )
                )
            components.append(CatalogComponentSchema(dimension=dimension, items=items))
        functions.append(CatalogFunctionSchema(function=fn_name, components=components))
    return CatalogResponse(functions=functions, weights=service.weights)


# ---------------------------------------------------------------------------
# Assessment lifecycle endpoints
# ---------------------------------------------------------------------------


@router.post(
    "/assessments",
    response_model=AssessmentDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an assessment",
)
async def create_assessment(
    body: CreateAssessmentRequest,
    service: AssessmentService = Depends(get_assessment_service),
) -> AssessmentDetailResponse:
    """Create an assessment with an empty answer tree for every function."""
    assessment = await service.create_assessment(
        client=body.client,
        title=body.title,
        industry=body.industry,
        contact_name=body.contact_name,
        contact_email=str(body.contact_email) if body.contact_email else None,
        nda=body.nda,
        scope=body.scope,
    )
    return _to_detail(assessment, service)


@router.get(
    "/assessments",
    response_model=AssessmentListResponse,
    summary="List assessments for the dashboard",
)
async def list_assessments(
    include_archived: bool = False,
    service: AssessmentService = Depends(get_assessment_service),
) -> AssessmentListResponse:
    """List assessments with their current overall score and band."""
    assessments = await service.list_assessments(include_archived=include_archived)
    rows = []
    for assessment in assessments:
        scores = service.score_snapshot(assessment)
        rows.append(
            AssessmentSummarySchema(
                id=assessment.id,
                client=assessment.client,
                title=assessment.title,
                status=assessment.status,
                nda=assessment.nda,
                overall_score=scores.overall,
                band=scores.band,
                updated_at=assessment.updated_at,
            )
        )
    return AssessmentListResponse(assessments=rows, total=len(rows))


@router.get(
    "/assessments/{assessment_id}",
    response_model=AssessmentDetailResponse,
    summary="Retrieve an assessment",
)
async def get_assessment(
    assessment_id: uuid.UUID = Path(..., description="Assessment UUID"),
    service: AssessmentService = Depends(get_assessment_service),
) -> AssessmentDetailResponse:
    """Return the full answer tree with component and function scores."""
    try:
        assessment = await service.get_assessment(assessment_id)
    except AssessmentNotFoundError as exc:
        raise _not_found(exc) from exc
    return _to_detail(assessment, service)


@router.put(
    "/assessments/{assessment_id}/nda",
    response_model=AssessmentDetailResponse,
    summary="Update the NDA status",
)
async def update_nda(
    body: NdaUpdateRequest,
    assessment_id: uuid.UUID = Path(..., description="Assessment UUID"),
    service: AssessmentService = Depends(get_assessment_service),
) -> AssessmentDetailResponse:
    """Set the NDA status. Answers can only be recorded while SIGNED."""
    try:
        assessment = await service.set_nda(assessment_id, body.nda)
    except AssessmentNotFoundError as exc:
        raise _not_found(exc) from exc
    return _to_detail(assessment, service)


@router.put(
    "/assessments/{assessment_id}/archive",
    response_model=AssessmentDetailResponse,
    summary="Archive or restore an assessment",
)
async def update_archived(
    body: ArchiveUpdateRequest,
    assessment_id: uuid.UUID = Path(..., description="Assessment UUID"),
    service: AssessmentService = Depends(get_assessment_service),
) -> AssessmentDetailResponse:
    """Archived assessments are hidden from the list unless include_archived is set."""
    try:
        assessment = await service.set_archived(assessment_id, body.archived)
    except AssessmentNotFoundError as exc:
        raise _not_found(exc) from exc
    return _to_detail(assessment, service)


@router.put(
    "/assessments/{assessment_id}/scope",
    response_model=AssessmentDetailResponse,
    summary="Replace the active function set",
)
async def update_scope(
    body: ScopeUpdateRequest,
    assessment_id: uuid.UUID = Path(..., description="Assessment UUID"),
    service: AssessmentService = Depends(get_assessment_service),
) -> AssessmentDetailResponse:
    """Choose which business functions take part in aggregation."""
    try:
        assessment = await service.set_scope(assessment_id, body.functions)
    except AssessmentNotFoundError as exc:
        raise _not_found(exc) from exc
    return _to_detail(assessment, service)


@router.put(
    "/assessments/{assessment_id}/functions/{function}/components/{dimension}/sub-criteria/{key}",
    response_model=AssessmentDetailResponse,
    summary="Record a score or note for one sub-criterion",
)
async def record_answer(
    body: SubCriterionUpdateRequest,
    assessment_id: uuid.UUID = Path(..., description="Assessment UUID"),
    function: str = Path(..., description="Business function, e.g. OPS"),
    dimension: str = Path(..., description="Component dimension, e.g. FRICTION"),
    key: str = Path(..., description="Catalog sub-criterion key, e.g. sops"),
    service: AssessmentService = Depends(get_assessment_service),
) -> AssessmentDetailResponse:
    """Record a slider value (0-5) and/or note.

    Rejected with 403 while the assessment's NDA is not SIGNED.
    """
    fields = body.model_fields_set
    try:
        assessment = await service.record_answer(
            assessment_id=assessment_id,
            function=function,
            dimension=dimension,
            key=key,
            score=body.score if "score" in fields else UNSET,
            note=(body.note or "") if "note" in fields else UNSET,
        )
    except AssessmentNotFoundError as exc:
        raise _not_found(exc) from exc
    except EditNotPermittedError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=str(exc),
        ) from exc
    except (AssessmentModelError, UnknownSubCriterionError) as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        ) from exc
    return _to_detail(assessment, service)


@router.get(
    "/assessments/{assessment_id}/scores",
    response_model=ScoresResponse,
    summary="Compute scores for an assessment",
)
async def get_scores(
    assessment_id: uuid.UUID = Path(..., description="Assessment UUID"),
    service: AssessmentService = Depends(get_assessment_service),
) -> ScoresResponse:
    """Return per-function, per-component and overall scores with the band."""
    try:
        scores = await service.get_scores(assessment_id)
    except AssessmentNotFoundError as exc:
        raise _not_found(exc) from exc

    logger.info(
        "Assessment scores served",
        assessment_id=str(assessment_id),
        overall_score=scores.overall,
        band=scores.band.value,
    )
    return _to_scores(assessment_id, scores)


@router.get(
    "/assessments/{assessment_id}/export.csv",
    summary="Download recorded answers as CSV",
    response_class=Response,
)
async def export_csv(
    request: Request,
    assessment_id: uuid.UUID = Path(..., description="Assessment UUID"),
    service: AssessmentService = Depends(get_assessment_service),
) -> Response:
    """Export one row per recorded sub-criterion of the active functions."""
    try:
        document = await service.export_csv(assessment_id)
    except AssessmentNotFoundError as exc:
        raise _not_found(exc) from exc

    filename = request.app.state.settings.export_filename
    return Response(
        content=document,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
