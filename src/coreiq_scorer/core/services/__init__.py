"""Service layer for the CoreIQ scorer."""

from coreiq_scorer.core.services.assessment_service import (
    AssessmentNotFoundError,
    AssessmentService,
    EditNotPermittedError,
    UnknownSubCriterionError,
)

__all__ = [
    "AssessmentNotFoundError",
    "AssessmentService",
    "EditNotPermittedError",
    "UnknownSubCriterionError",
]
