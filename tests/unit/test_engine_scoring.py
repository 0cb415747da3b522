"""Unit tests for the CoreIQ scoring algorithm.

Tests cover:
- Component weights sum to exactly 1.0 and bad weight sets fail fast
- normalise clamping, None propagation and monotonicity
- mean_answered exclusion of unanswered values
- component_score / function_score / overall_score
- component_rollup across the active function set
- band_for boundary conditions
- compute_scores end-to-end scenarios and idempotence
"""

import math

import pytest

from coreiq_scorer.core.models import (
    ALL_DIMENSIONS,
    Assessment,
    Dimension,
    FunctionName,
    MissingComponentError,
    NdaStatus,
    SubCriterion,
    UnknownFunctionError,
    new_assessment,
    with_sub_criterion,
)
from coreiq_scorer.core.scoring import (
    COMPONENT_WEIGHTS,
    AssessmentScorer,
    Band,
    WeightConfigurationError,
    band_for,
    component_rollup,
    component_score,
    compute_scores,
    function_score,
    mean_answered,
    normalise,
    overall_score,
    select_active_functions,
    validate_weights,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _answer(
    assessment: Assessment,
    function: FunctionName,
    dimension: Dimension,
    scores: list[int | None],
) -> Assessment:
    """Record scores under synthetic keys k0, k1, ... for one component."""
    for index, score in enumerate(scores):
        assessment = with_sub_criterion(
            assessment, function, dimension, f"k{index}", score=score
        )
    return assessment


def _scenario_assessment() -> Assessment:
    """OPS scores 100/80/60/100 per component, CX scores 50 everywhere."""
    assessment = new_assessment("Acme", "Baseline", nda=NdaStatus.SIGNED)
    assessment = _answer(assessment, FunctionName.OPS, Dimension.FUNCTIONALITY, [5, 5])
    assessment = _answer(assessment, FunctionName.OPS, Dimension.FRICTION, [4, 4, 4])
    assessment = _answer(assessment, FunctionName.OPS, Dimension.DATA_FITNESS, [3])
    assessment = _answer(assessment, FunctionName.OPS, Dimension.CHANGE_READINESS, [5])
    for dimension in ALL_DIMENSIONS:
        assessment = _answer(assessment, FunctionName.CX, dimension, [2, 3])
    return assessment


# ---------------------------------------------------------------------------
# COMPONENT_WEIGHTS validation
# ---------------------------------------------------------------------------


class TestComponentWeights:
    """Verify the component weight configuration."""

    def test_weights_sum_to_one(self) -> None:
        """COMPONENT_WEIGHTS must sum to 1.0 within floating-point tolerance."""
        total = math.fsum(COMPONENT_WEIGHTS.values())
        assert abs(total - 1.0) < 1e-9, f"Weights sum to {total}, expected 1.0"

    def test_shipped_weights(self) -> None:
        assert COMPONENT_WEIGHTS == {
            Dimension.FUNCTIONALITY: 0.30,
            Dimension.FRICTION: 0.25,
            Dimension.DATA_FITNESS: 0.15,
            Dimension.CHANGE_READINESS: 0.30,
        }

    def test_weights_not_summing_to_one_rejected(self) -> None:
        weights = dict(COMPONENT_WEIGHTS)
        weights[Dimension.FRICTION] = 0.30
        with pytest.raises(WeightConfigurationError, match="sum to"):
            validate_weights(weights)

    def test_missing_dimension_weight_rejected(self) -> None:
        weights = dict(COMPONENT_WEIGHTS)
        del weights[Dimension.DATA_FITNESS]
        with pytest.raises(WeightConfigurationError, match="DATA_FITNESS"):
            validate_weights(weights)

    def test_negative_weight_rejected(self) -> None:
        weights = {
            Dimension.FUNCTIONALITY: 0.6,
            Dimension.FRICTION: -0.1,
            Dimension.DATA_FITNESS: 0.2,
            Dimension.CHANGE_READINESS: 0.3,
        }
        with pytest.raises(WeightConfigurationError, match="Negative"):
            validate_weights(weights)

    @pytest.mark.parametrize("bad_weight", [math.nan, math.inf])
    def test_non_finite_weight_rejected(self, bad_weight: float) -> None:
        weights = dict(COMPONENT_WEIGHTS)
        weights[Dimension.FUNCTIONALITY] = bad_weight
        with pytest.raises(WeightConfigurationError, match="Non-finite"):
            validate_weights(weights)
        with pytest.raises(WeightConfigurationError):
            AssessmentScorer(weights=weights)

    def test_scorer_validates_custom_weights_at_construction(self) -> None:
        with pytest.raises(WeightConfigurationError):
            AssessmentScorer(weights={Dimension.FUNCTIONALITY: 1.0})

    def test_scorer_accepts_valid_custom_weights(self) -> None:
        weights = {dimension: 0.25 for dimension in ALL_DIMENSIONS}
        scorer = AssessmentScorer(weights=weights)
        assert scorer.weights == weights


# ---------------------------------------------------------------------------
# normalise
# ---------------------------------------------------------------------------


class TestNormalise:
    """Tests for the 0-5 to 0-100 conversion."""

    def test_endpoints(self) -> None:
        assert normalise(0) == 0.0
        assert normalise(5) == 100.0

    def test_each_step_is_twenty_points(self) -> None:
        assert [normalise(v) for v in range(6)] == [0.0, 20.0, 40.0, 60.0, 80.0, 100.0]

    def test_clamps_below_range(self) -> None:
        assert normalise(-3) == normalise(0)

    def test_clamps_above_range(self) -> None:
        assert normalise(9) == normalise(5)

    def test_none_propagates(self) -> None:
        assert normalise(None) is None

    def test_monotonic_non_decreasing(self) -> None:
        values = [normalise(v) for v in range(-2, 8)]
        assert values == sorted(values)


# ---------------------------------------------------------------------------
# mean_answered
# ---------------------------------------------------------------------------


class TestMeanAnswered:
    """Tests for the shared mean-of-answered aggregation."""

    def test_ignores_unset_entries(self) -> None:
        assert mean_answered([3, None, 5]) == mean_answered([3, 5]) == 4.0

    def test_empty_is_zero(self) -> None:
        assert mean_answered([]) == 0.0

    def test_all_unset_is_zero(self) -> None:
        assert mean_answered([None]) == 0.0
        assert mean_answered([None, None, None]) == 0.0

    def test_accepts_generators(self) -> None:
        assert mean_answered(v for v in (10.0, 20.0, None)) == 15.0


# ---------------------------------------------------------------------------
# component_score
# ---------------------------------------------------------------------------


class TestComponentScore:
    """Tests for component_score."""

    def test_empty_component_scores_zero(self) -> None:
        assert component_score([]) == 0.0

    def test_unanswered_only_component_scores_zero(self) -> None:
        assert component_score([SubCriterion("a"), SubCriterion("b", note="later")]) == 0.0

    def test_equal_weight_mean_of_normalised(self) -> None:
        subs = [SubCriterion("a", 3), SubCriterion("b", 5)]
        assert component_score(subs) == 80.0

    def test_unanswered_excluded_from_mean(self) -> None:
        subs = [SubCriterion("a", 4), SubCriterion("b", None)]
        assert component_score(subs) == 80.0

    def test_answered_zero_counts(self) -> None:
        subs = [SubCriterion("a", 0), SubCriterion("b", 5)]
        assert component_score(subs) == 50.0

    def test_out_of_range_scores_clamped(self) -> None:
        subs = [SubCriterion("a", 12), SubCriterion("b", -4)]
        assert component_score(subs) == 50.0


# ---------------------------------------------------------------------------
# function_score
# ---------------------------------------------------------------------------


class TestFunctionScore:
    """Tests for the weighted function score."""

    @pytest.mark.parametrize("value", [0.0, 12.5, 50.0, 73.3, 100.0])
    def test_constant_components_give_constant(self, value: float) -> None:
        scores = {dimension: value for dimension in ALL_DIMENSIONS}
        assert function_score(scores) == pytest.approx(value)

    def test_worked_example(self) -> None:
        scores = {
            Dimension.FUNCTIONALITY: 100.0,
            Dimension.FRICTION: 80.0,
            Dimension.DATA_FITNESS: 60.0,
            Dimension.CHANGE_READINESS: 100.0,
        }
        assert function_score(scores) == pytest.approx(89.0)

    def test_single_component_contributes_its_weight(self) -> None:
        scores = {dimension: 0.0 for dimension in ALL_DIMENSIONS}
        scores[Dimension.DATA_FITNESS] = 100.0
        assert function_score(scores) == pytest.approx(15.0)

    def test_missing_component_is_an_error(self) -> None:
        scores = {
            Dimension.FUNCTIONALITY: 100.0,
            Dimension.FRICTION: 100.0,
            Dimension.DATA_FITNESS: 100.0,
        }
        with pytest.raises(MissingComponentError, match="CHANGE_READINESS"):
            function_score(scores)

    def test_custom_weights(self) -> None:
        weights = {dimension: 0.25 for dimension in ALL_DIMENSIONS}
        scores = {
            Dimension.FUNCTIONALITY: 100.0,
            Dimension.FRICTION: 0.0,
            Dimension.DATA_FITNESS: 0.0,
            Dimension.CHANGE_READINESS: 0.0,
        }
        assert function_score(scores, weights) == pytest.approx(25.0)


# ---------------------------------------------------------------------------
# overall_score
# ---------------------------------------------------------------------------


class TestOverallScore:
    """Tests for overall_score."""

    def test_mean_of_function_scores(self) -> None:
        assert overall_score([80.0, 60.0]) == 70.0

    def test_no_functions_in_scope_is_zero(self) -> None:
        assert overall_score([]) == 0.0

    def test_zero_scoring_function_pulls_mean_down(self) -> None:
        assert overall_score([90.0, 0.0]) == 45.0


# ---------------------------------------------------------------------------
# band_for
# ---------------------------------------------------------------------------


class TestBandFor:
    """Tests for band_for boundary conditions."""

    @pytest.mark.parametrize(
        ("score", "expected"),
        [
            (100.0, Band.PRIME),
            (85.0, Band.PRIME),
            (84.999, Band.STRONG),
            (70.0, Band.STRONG),
            (69.999, Band.COMPETENT),
            (50.0, Band.COMPETENT),
            (49.999, Band.BASELINE),
            (0.0, Band.BASELINE),
        ],
    )
    def test_lower_bounds_are_inclusive(self, score: float, expected: Band) -> None:
        assert band_for(score) is expected

    def test_total_over_real_line(self) -> None:
        assert band_for(-40.0) is Band.BASELINE
        assert band_for(250.0) is Band.PRIME
        assert band_for(float("inf")) is Band.PRIME
        assert band_for(float("-inf")) is Band.BASELINE

    def test_nan_is_baseline(self) -> None:
        assert band_for(float("nan")) is Band.BASELINE

    def test_bands_are_ordinal(self) -> None:
        ranks = [band.rank for band in (Band.BASELINE, Band.COMPETENT, Band.STRONG, Band.PRIME)]
        assert ranks == [0, 1, 2, 3]

    def test_band_labels(self) -> None:
        assert [band.value for band in Band] == ["Baseline", "Competent", "Strong", "Prime"]


# ---------------------------------------------------------------------------
# Active function set and roll-up
# ---------------------------------------------------------------------------


class TestActiveFunctions:
    """Tests for select_active_functions and component_rollup."""

    def test_selection_keeps_assessment_order(self) -> None:
        assessment = new_assessment("Acme", "t")
        selected = select_active_functions(
            assessment.functions, [FunctionName.FINANCE_ADMIN, FunctionName.OPS]
        )
        assert [fn.name for fn in selected] == [FunctionName.OPS, FunctionName.FINANCE_ADMIN]

    def test_selection_accepts_strings(self) -> None:
        assessment = new_assessment("Acme", "t")
        selected = select_active_functions(assessment.functions, ["CX"])
        assert [fn.name for fn in selected] == [FunctionName.CX]

    def test_selection_rejects_unknown_names(self) -> None:
        assessment = new_assessment("Acme", "t")
        with pytest.raises(UnknownFunctionError):
            select_active_functions(assessment.functions, ["HR"])

    def test_rollup_is_plain_mean_over_active_functions(self) -> None:
        assessment = new_assessment("Acme", "t")
        assessment = _answer(assessment, FunctionName.OPS, Dimension.FRICTION, [5])
        assessment = _answer(assessment, FunctionName.CX, Dimension.FRICTION, [2])
        rollup = component_rollup(
            Dimension.FRICTION, assessment.functions, [FunctionName.OPS, FunctionName.CX]
        )
        assert rollup == pytest.approx(70.0)

    def test_rollup_counts_unanswered_function_as_zero(self) -> None:
        assessment = new_assessment("Acme", "t")
        assessment = _answer(assessment, FunctionName.OPS, Dimension.FRICTION, [5])
        rollup = component_rollup(
            Dimension.FRICTION, assessment.functions, [FunctionName.OPS, FunctionName.CX]
        )
        assert rollup == pytest.approx(50.0)

    def test_rollup_ignores_functions_outside_active_set(self) -> None:
        assessment = new_assessment("Acme", "t")
        assessment = _answer(assessment, FunctionName.OPS, Dimension.FRICTION, [5])
        rollup = component_rollup(Dimension.FRICTION, assessment.functions, [FunctionName.OPS])
        assert rollup == 100.0

    def test_rollup_with_no_active_functions_is_zero(self) -> None:
        assessment = new_assessment("Acme", "t")
        assert component_rollup(Dimension.FRICTION, assessment.functions, []) == 0.0


# ---------------------------------------------------------------------------
# compute_scores
# ---------------------------------------------------------------------------


class TestComputeScores:
    """End-to-end scoring of an assessment snapshot."""

    def test_empty_assessment_scores_zero(self) -> None:
        scores = compute_scores(new_assessment("Acme", "t"))
        assert scores.overall == 0.0
        assert scores.band is Band.BASELINE
        assert scores.per_component == (0.0, 0.0, 0.0, 0.0)
        assert scores.per_function == {FunctionName.OPS: 0.0, FunctionName.CX: 0.0}

    def test_single_function_scenario_is_prime(self) -> None:
        scores = compute_scores(_scenario_assessment(), [FunctionName.OPS])
        assert scores.per_function[FunctionName.OPS] == pytest.approx(89.0)
        assert scores.overall == pytest.approx(89.0)
        assert scores.band is Band.PRIME

    def test_two_function_scenario_is_competent(self) -> None:
        scores = compute_scores(_scenario_assessment())
        assert scores.per_function[FunctionName.OPS] == pytest.approx(89.0)
        assert scores.per_function[FunctionName.CX] == pytest.approx(50.0)
        assert scores.overall == pytest.approx(69.5)
        assert scores.band is Band.COMPETENT

    def test_per_component_in_canonical_order(self) -> None:
        scores = compute_scores(_scenario_assessment())
        assert scores.per_component == pytest.approx((75.0, 65.0, 55.0, 75.0))
        assert scores.component(Dimension.DATA_FITNESS) == pytest.approx(55.0)

    def test_defaults_to_assessment_scope(self) -> None:
        assessment = _scenario_assessment()
        assert assessment.scope == (FunctionName.OPS, FunctionName.CX)
        assert list(compute_scores(assessment).per_function) == [FunctionName.OPS, FunctionName.CX]

    def test_explicit_active_set_overrides_scope(self) -> None:
        scores = compute_scores(_scenario_assessment(), [FunctionName.CX])
        assert list(scores.per_function) == [FunctionName.CX]
        assert scores.overall == pytest.approx(50.0)

    def test_empty_catalog_function_in_scope_scores_zero(self) -> None:
        scores = compute_scores(
            _scenario_assessment(), [FunctionName.OPS, FunctionName.SALES_MARKETING]
        )
        assert scores.per_function[FunctionName.SALES_MARKETING] == 0.0
        assert scores.overall == pytest.approx(44.5)

    def test_empty_active_set_scores_zero(self) -> None:
        scores = compute_scores(_scenario_assessment(), [])
        assert scores.per_function == {}
        assert scores.overall == 0.0
        assert scores.per_component == (0.0, 0.0, 0.0, 0.0)

    def test_idempotent(self) -> None:
        assessment = _scenario_assessment()
        assert compute_scores(assessment) == compute_scores(assessment)

    def test_does_not_mutate_input(self) -> None:
        assessment = _scenario_assessment()
        before = repr(assessment)
        compute_scores(assessment)
        assert repr(assessment) == before

    def test_custom_weight_scorer(self) -> None:
        scorer = AssessmentScorer(weights={dimension: 0.25 for dimension in ALL_DIMENSIONS})
        scores = scorer.compute_scores(_scenario_assessment(), [FunctionName.OPS])
        assert scores.overall == pytest.approx(85.0)

    def test_per_function_is_read_only(self) -> None:
        scores = compute_scores(_scenario_assessment())
        with pytest.raises(TypeError):
            scores.per_function[FunctionName.OPS] = 0.0  # type: ignore[index]
        assert scores.per_function[FunctionName.OPS] == pytest.approx(89.0)
