"""CoreIQ scoring algorithm.

Raw 0-5 slider answers are normalised to 0-100, averaged per component,
combined per business function with fixed component weights, and averaged
again across the active function set to produce the overall score. The
overall score maps to one of four bands.

Unanswered sub-criteria are excluded from a component's mean, but a
component (or function) with nothing answered contributes a hard 0 to its
parent: partial completion scores as partial failure.

This module is independent of the service and API layers so the scoring
logic can be unit-tested without any infrastructure. Nothing here mutates
its inputs or keeps state between calls.
"""

import enum
import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType

import structlog

from coreiq_scorer.core.models import (
    ALL_DIMENSIONS,
    Assessment,
    BusinessFunction,
    Dimension,
    FunctionName,
    MissingComponentError,
    SubCriterion,
    normalise_scope,
)

logger = structlog.get_logger(__name__)


class Band(str, enum.Enum):
    """Ordinal maturity classification, lowest first."""

    BASELINE = "Baseline"
    COMPETENT = "Competent"
    STRONG = "Strong"
    PRIME = "Prime"

    @property
    def rank(self) -> int:
        return list(Band).index(self)


class WeightConfigurationError(ValueError):
    """Raised when a component weight set is incomplete or does not sum to 1.0."""


# Component weights must sum to 1.0
COMPONENT_WEIGHTS: dict[Dimension, float] = {
    Dimension.FUNCTIONALITY: 0.30,
    Dimension.FRICTION: 0.25,
    Dimension.DATA_FITNESS: 0.15,
    Dimension.CHANGE_READINESS: 0.30,
}

# Band thresholds (inclusive lower bound), checked from highest down:
#   85+      -> Prime
#   70-84.99 -> Strong
#   50-69.99 -> Competent
#   below 50 -> Baseline
_BAND_THRESHOLDS: list[tuple[float, Band]] = [
    (85.0, Band.PRIME),
    (70.0, Band.STRONG),
    (50.0, Band.COMPETENT),
]

_RAW_MIN: int = 0
_RAW_MAX: int = 5
_SCALE_FACTOR: float = 20.0  # 0-5 slider -> 0-100
_WEIGHT_TOLERANCE: float = 1e-9


def validate_weights(weights: Mapping[Dimension, float]) -> None:
    """Check that a weight set covers every dimension and sums to 1.0.

    Args:
        weights: Mapping of dimension to weight.

    Raises:
        WeightConfigurationError: On a missing, unknown, non-finite or negative
            weight, or a total that differs from 1.0 by more than 1e-9.
    """
    missing = [d.value for d in ALL_DIMENSIONS if d not in weights]
    if missing:
        raise WeightConfigurationError(f"No weight configured for: {', '.join(missing)}")
    unknown = [str(k) for k in weights if k not in ALL_DIMENSIONS]
    if unknown:
        raise WeightConfigurationError(f"Weights given for unknown dimensions: {', '.join(unknown)}")
    non_finite = [Dimension(d).value for d, w in weights.items() if not math.isfinite(w)]
    if non_finite:
        raise WeightConfigurationError(f"Non-finite weight for: {', '.join(non_finite)}")
    negative = [Dimension(d).value for d, w in weights.items() if w < 0]
    if negative:
        raise WeightConfigurationError(f"Negative weight for: {', '.join(negative)}")
    total = math.fsum(weights.values())
    if abs(total - 1.0) > _WEIGHT_TOLERANCE:
        raise WeightConfigurationError(f"Component weights sum to {total}, expected 1.0")


validate_weights(COMPONENT_WEIGHTS)


# ---------------------------------------------------------------------------
# Pure scoring functions
# ---------------------------------------------------------------------------


def normalise(raw_score: int | None) -> float | None:
    """Convert a raw 0-5 answer to the 0-100 scale.

    Out-of-range input is clamped rather than rejected. None (unanswered)
    propagates so the caller's mean can exclude it.
    """
    if raw_score is None:
        return None
    return max(_RAW_MIN, min(_RAW_MAX, raw_score)) * _SCALE_FACTOR


def mean_answered(values: Iterable[float | None]) -> float:
    """Arithmetic mean of the non-None values, or 0.0 when there are none."""
    answered = [v for v in values if v is not None]
    if not answered:
        return 0.0
    return sum(answered) / len(answered)


def component_score(sub_criteria: Iterable[SubCriterion]) -> float:
    """Score one component: mean of its normalised, answered sub-criteria."""
    return mean_answered(normalise(item.score) for item in sub_criteria)


def function_score(
    component_scores: Mapping[Dimension, float],
    weights: Mapping[Dimension, float] = COMPONENT_WEIGHTS,
) -> float:
    """Weighted sum of the four component scores.

    Args:
        component_scores: Score 0-100 for every dimension.
        weights: Component weights; defaults to COMPONENT_WEIGHTS.

    Returns:
        Function score in range 0.0-100.0 for in-range inputs.

    Raises:
        MissingComponentError: If a dimension has no score. A function is
            never partially weighted.
    """
    missing = [d.value for d in ALL_DIMENSIONS if d not in component_scores]
    if missing:
        raise MissingComponentError(f"Component scores missing for: {', '.join(missing)}")
    return sum(component_scores[dimension] * weights[dimension] for dimension in ALL_DIMENSIONS)


def overall_score(function_scores: Sequence[float]) -> float:
    """Mean of the function scores; 0.0 when no function is in scope."""
    return mean_answered(function_scores)


def band_for(score: float) -> Band:
    """Map any real score to its band.

    Total over the real line: values below 0 band as Baseline, values above
    100 as Prime. NaN compares false against every threshold and therefore
    bands as Baseline.
    """
    for threshold, band in _BAND_THRESHOLDS:
        if score >= threshold:
            return band
    return Band.BASELINE


def select_active_functions(
    functions: Iterable[BusinessFunction],
    active_functions: Iterable[FunctionName | str],
) -> list[BusinessFunction]:
    """Return the functions belonging to the active set, preserving their order."""
    active = set(normalise_scope(active_functions))
    return [fn for fn in functions if fn.name in active]


def function_component_scores(function: BusinessFunction) -> dict[Dimension, float]:
    """Score each of a function's four components."""
    return {component.name: component_score(component.sub) for component in function.components}


def component_rollup(
    dimension: Dimension,
    functions: Iterable[BusinessFunction],
    active_functions: Iterable[FunctionName | str],
) -> float:
    """Average one dimension's component score across the active functions.

    Each active function counts equally. Returns 0.0 when no function is
    active.
    """
    selected = select_active_functions(functions, active_functions)
    if not selected:
        return 0.0
    scores = [component_score(fn.component(dimension).sub) for fn in selected]
    return sum(scores) / len(scores)


# ---------------------------------------------------------------------------
# Assessment-level scoring
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Scores:
    """Scores derived from one assessment snapshot.

    Attributes:
        per_function: Read-only function score per active function, assessment
            order.
        per_component: Cross-function roll-up per dimension, in the order
            FUNCTIONALITY, FRICTION, DATA_FITNESS, CHANGE_READINESS.
        overall: Mean of the active function scores.
        band: Band of the overall score.
    """

    per_function: Mapping[FunctionName, float]
    per_component: tuple[float, float, float, float]
    overall: float
    band: Band

    def component(self, dimension: Dimension) -> float:
        return self.per_component[ALL_DIMENSIONS.index(dimension)]


class AssessmentScorer:
    """Scoring engine bound to a validated weight set.

    The weight set is checked once at construction so a bad configuration
    fails at startup, not on the first request.

    COMPONENT_WEIGHTS sum to exactly 1.0:
        FUNCTIONALITY     0.30
        FRICTION          0.25
        DATA_FITNESS      0.15
        CHANGE_READINESS  0.30
    """

    def __init__(self, weights: Mapping[Dimension, float] | None = None) -> None:
        """Initialise the scorer.

        Args:
            weights: Component weights. Defaults to COMPONENT_WEIGHTS.

        Raises:
            WeightConfigurationError: If weights are invalid.
        """
        resolved = dict(weights) if weights is not None else dict(COMPONENT_WEIGHTS)
        validate_weights(resolved)
        self._weights = {Dimension(k): v for k, v in resolved.items()}

    @property
    def weights(self) -> dict[Dimension, float]:
        return dict(self._weights)

    def score_function(self, function: BusinessFunction) -> float:
        """Compute one function's weighted score."""
        return function_score(function_component_scores(function), self._weights)

    def compute_scores(
        self,
        assessment: Assessment,
        active_functions: Iterable[FunctionName | str] | None = None,
    ) -> Scores:
        """Run the full scoring pipeline over an assessment snapshot.

        Args:
            assessment: Read-only assessment tree.
            active_functions: Functions taking part in aggregation. Defaults
                to the assessment's own scope.

        Returns:
            Freshly computed Scores; nothing is cached.
        """
        if active_functions is None:
            active_functions = assessment.scope
        selected = select_active_functions(assessment.functions, active_functions)

        per_function: dict[FunctionName, float] = {
            fn.name: self.score_function(fn) for fn in selected
        }
        per_component = tuple(
            component_rollup(dimension, selected, [fn.name for fn in selected])
            for dimension in ALL_DIMENSIONS
        )
        overall = overall_score(list(per_function.values()))
        band = band_for(overall)

        logger.debug(
            "Assessment scores computed",
            assessment_id=str(assessment.id),
            active_functions=[name.value for name in per_function],
            overall_score=overall,
            band=band.value,
        )
        return Scores(
            per_function=MappingProxyType(per_function),
            per_component=per_component,  # type: ignore[arg-type]
            overall=overall,
            band=band,
        )


_DEFAULT_SCORER = AssessmentScorer()


def compute_scores(
    assessment: Assessment,
    active_functions: Iterable[FunctionName | str] | None = None,
) -> Scores:
    """Score an assessment with the shipped component weights."""
    return _DEFAULT_SCORER.compute_scores(assessment, active_functions)
