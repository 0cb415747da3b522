"""Pydantic request/response schemas for the CoreIQ scorer API.

All API inputs and outputs are strictly typed Pydantic v2 models.
No raw dicts are returned from any endpoint.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, model_validator

from coreiq_scorer.core.models import Dimension, FunctionName, NdaStatus
from coreiq_scorer.core.scoring import Band


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class CatalogItemSchema(BaseModel):
    """A single questionnaire item.

    Attributes:
        key: Sub-criterion key.
        label: Headline shown to the operator.
        description: What is being rated.
        anchor_0: Anchor text for slider position 0.
        anchor_3: Anchor text for slider position 3.
        anchor_5: Anchor text for slider position 5.
        left_label: Short end-cap label for position 0.
        right_label: Short end-cap label for position 5.
    """

    key: str
    label: str
    description: str
    anchor_0: str
    anchor_3: str
    anchor_5: str
    left_label: str
    right_label: str


class CatalogComponentSchema(BaseModel):
    """Catalog items for one dimension of one function."""

    dimension: Dimension
    items: list[CatalogItemSchema]


class CatalogFunctionSchema(BaseModel):
    """Catalog for one business function, components in canonical order."""

    function: FunctionName
    components: list[CatalogComponentSchema]


class CatalogResponse(BaseModel):
    """The full questionnaire."""

    functions: list[CatalogFunctionSchema]
    weights: dict[Dimension, float]


# ---------------------------------------------------------------------------
# Assessment lifecycle
# ---------------------------------------------------------------------------


class CreateAssessmentRequest(BaseModel):
    """Request body to create an assessment.

    Attributes:
        client: Client organisation name.
        title: Engagement title.
        industry: Optional industry label.
        contact_name: Optional client contact.
        contact_email: Optional client contact email.
        nda: Initial NDA status; service default when omitted.
        scope: Active function set; service default when omitted.
    """

    client: str = Field(..., min_length=1, max_length=255)
    title: str = Field(..., min_length=1, max_length=255)
    industry: str | None = Field(None, max_length=100)
    contact_name: str | None = Field(None, max_length=255)
    contact_email: EmailStr | None = None
    nda: NdaStatus | None = None
    scope: list[FunctionName] | None = Field(
        None,
        description="Functions taking part in aggregation, e.g. ['OPS', 'CX']",
    )


class NdaUpdateRequest(BaseModel):
    """Request body to change the NDA gate."""

    nda: NdaStatus


class ArchiveUpdateRequest(BaseModel):
    """Request body to hide or restore an assessment on the dashboard."""

    archived: bool


class ScopeUpdateRequest(BaseModel):
    """Request body to replace the active function set."""

    functions: list[FunctionName]


class SubCriterionUpdateRequest(BaseModel):
    """Request body to record one answer.

    Omitted fields keep their current value. An explicit ``"score": null``
    clears the answer back to unanswered.
    """

    score: int | None = Field(
        None,
        ge=0,
        le=5,
        description="Slider value on a 0-5 scale",
    )
    note: str | None = Field(None, max_length=4000)

    @model_validator(mode="after")
    def _require_one_field(self) -> "SubCriterionUpdateRequest":
        if not self.model_fields_set & {"score", "note"}:
            raise ValueError("Provide at least one of 'score' or 'note'.")
        return self


class SubCriterionSchema(BaseModel):
    """One questionnaire item with the operator's answer.

    Attributes:
        key: Sub-criterion key.
        label: Catalog headline.
        score: Recorded 0-5 answer, or null while unanswered.
        display_score: Slider position to render; 0 while unanswered.
        answered: Whether score counts towards the component mean.
        note: Operator note.
    """

    key: str
    label: str
    score: int | None
    display_score: int
    answered: bool
    note: str


class ComponentSchema(BaseModel):
    """One dimension of a function with its 0-100 score."""

    dimension: Dimension
    score: float
    sub_criteria: list[SubCriterionSchema]


class FunctionSchema(BaseModel):
    """One business function with its weighted 0-100 score."""

    function: FunctionName
    in_scope: bool
    score: float
    components: list[ComponentSchema]


class AssessmentDetailResponse(BaseModel):
    """Full assessment tree with scores."""

    id: uuid.UUID
    client: str
    title: str
    status: str
    nda: NdaStatus
    editable: bool
    industry: str | None
    contact_name: str | None
    contact_email: str | None
    archived: bool
    scope: list[FunctionName]
    updated_at: datetime
    overall_score: float
    band: Band
    functions: list[FunctionSchema]


class AssessmentSummarySchema(BaseModel):
    """Dashboard row for one assessment."""

    id: uuid.UUID
    client: str
    title: str
    status: str
    nda: NdaStatus
    overall_score: float
    band: Band
    updated_at: datetime


class AssessmentListResponse(BaseModel):
    """Dashboard listing."""

    assessments: list[AssessmentSummarySchema]
    total: int


# ---------------------------------------------------------------------------
# Scores
# ---------------------------------------------------------------------------


class ScoresResponse(BaseModel):
    """Aggregated scores for one assessment.

    Attributes:
        assessment_id: Assessment scored.
        active_functions: Functions that took part in aggregation.
        per_function: Weighted score per active function.
        per_component: Cross-function roll-up in the order FUNCTIONALITY,
            FRICTION, DATA_FITNESS, CHANGE_READINESS.
        per_component_by_name: The same roll-up keyed by dimension.
        overall: Mean of the active function scores.
        band: Band of the overall score.
    """

    assessment_id: uuid.UUID
    active_functions: list[FunctionName]
    per_function: dict[FunctionName, float]
    per_component: list[float]
    per_component_by_name: dict[Dimension, float]
    overall: float
    band: Band


class HealthResponse(BaseModel):
    """Liveness probe payload."""

    status: str
    service: str
    version: str
