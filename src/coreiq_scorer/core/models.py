"""Assessment model for the CoreIQ maturity diagnostic.

The model is a strict ownership tree::

    Assessment -> BusinessFunction (one per FunctionName)
               -> Component (one per Dimension)
               -> SubCriterion (unique key per component)

Every node is a frozen dataclass. Edits never mutate a tree in place: the
``with_*`` helpers return a new Assessment that shares untouched branches
with the old one. Structural invariants are checked on construction so the
scoring engine can assume a valid tree.
"""

import enum
import uuid
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone


class Dimension(str, enum.Enum):
    """The four weighted scoring dimensions, in canonical order."""

    FUNCTIONALITY = "FUNCTIONALITY"
    FRICTION = "FRICTION"
    DATA_FITNESS = "DATA_FITNESS"
    CHANGE_READINESS = "CHANGE_READINESS"


class FunctionName(str, enum.Enum):
    """Business functions covered by an assessment, in canonical order."""

    OPS = "OPS"
    CX = "CX"
    SALES_MARKETING = "SALES_MARKETING"
    FINANCE_ADMIN = "FINANCE_ADMIN"
    INTERNAL_INTEL = "INTERNAL_INTEL"


class NdaStatus(str, enum.Enum):
    """Consent gate controlling whether an assessment may be edited."""

    SIGNED = "SIGNED"
    SENT = "SENT"
    NOT_SENT = "NOT_SENT"


ALL_DIMENSIONS: tuple[Dimension, ...] = tuple(Dimension)
ALL_FUNCTIONS: tuple[FunctionName, ...] = tuple(FunctionName)


# ---------------------------------------------------------------------------
# Structural errors
# ---------------------------------------------------------------------------


class AssessmentModelError(ValueError):
    """Base class for violations of the assessment tree invariants."""


class UnknownFunctionError(AssessmentModelError):
    """Raised when a function name is not one of the enumerated functions."""


class UnknownDimensionError(AssessmentModelError):
    """Raised when a dimension name is not one of the four dimensions."""


class MissingComponentError(AssessmentModelError):
    """Raised when a function lacks a component for one of the dimensions."""


class DuplicateComponentError(AssessmentModelError):
    """Raised when a function holds two components for the same dimension."""


class DuplicateSubCriterionError(AssessmentModelError):
    """Raised when a component holds two sub-criteria with the same key."""


class DuplicateFunctionError(AssessmentModelError):
    """Raised when an assessment holds the same function twice."""


def parse_function_name(value: "str | FunctionName") -> FunctionName:
    """Coerce a raw function identifier into a FunctionName.

    Args:
        value: Enum member or its string value (e.g. 'OPS').

    Returns:
        The matching FunctionName.

    Raises:
        UnknownFunctionError: If value names no known function.
    """
    try:
        return FunctionName(value)
    except ValueError as exc:
        raise UnknownFunctionError(f"Unknown business function {value!r}") from exc


def parse_dimension(value: "str | Dimension") -> Dimension:
    """Coerce a raw dimension identifier into a Dimension.

    Raises:
        UnknownDimensionError: If value names no known dimension.
    """
    try:
        return Dimension(value)
    except ValueError as exc:
        raise UnknownDimensionError(f"Unknown component dimension {value!r}") from exc


# ---------------------------------------------------------------------------
# Tree nodes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SubCriterion:
    """One measurable question.

    Attributes:
        key: Catalog key, unique within the owning component.
        score: Raw 0-5 answer, or None while unanswered.
        note: Free-text annotation; has no effect on scoring.
    """

    key: str
    score: int | None = None
    note: str = ""

    @property
    def is_answered(self) -> bool:
        return self.score is not None


@dataclass(frozen=True)
class Component:
    """One weighted dimension of a business function.

    Attributes:
        name: The dimension this component scores.
        sub: Sub-criteria in the order they were first recorded.
    """

    name: Dimension
    sub: tuple[SubCriterion, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", parse_dimension(self.name))
        object.__setattr__(self, "sub", tuple(self.sub))
        seen: set[str] = set()
        for item in self.sub:
            if item.key in seen:
                raise DuplicateSubCriterionError(
                    f"Sub-criterion {item.key!r} appears twice in component {self.name.value}"
                )
            seen.add(item.key)

    def get(self, key: str) -> SubCriterion | None:
        """Return the sub-criterion recorded under key, if any."""
        for item in self.sub:
            if item.key == key:
                return item
        return None


@dataclass(frozen=True)
class BusinessFunction:
    """A scored business area holding exactly one component per dimension.

    Components are stored in canonical dimension order regardless of the
    order they were supplied in.
    """

    name: FunctionName
    components: tuple[Component, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", parse_function_name(self.name))
        by_dimension: dict[Dimension, Component] = {}
        for component in self.components:
            if component.name in by_dimension:
                raise DuplicateComponentError(
                    f"Function {self.name.value} has two {component.name.value} components"
                )
            by_dimension[component.name] = component
        missing = [d.value for d in ALL_DIMENSIONS if d not in by_dimension]
        if missing:
            raise MissingComponentError(
                f"Function {self.name.value} is missing components: {', '.join(missing)}"
            )
        object.__setattr__(
            self,
            "components",
            tuple(by_dimension[dimension] for dimension in ALL_DIMENSIONS),
        )

    def component(self, dimension: Dimension) -> Component:
        """Return the component for the given dimension."""
        return self.components[ALL_DIMENSIONS.index(dimension)]


def empty_function(name: FunctionName) -> BusinessFunction:
    """Build a function with four empty components."""
    return BusinessFunction(
        name=name,
        components=tuple(Component(name=dimension) for dimension in ALL_DIMENSIONS),
    )


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


@dataclass(frozen=True)
class Assessment:
    """Top-level assessment owned by a single handle in the service layer.

    Attributes:
        id: Assessment identifier.
        client: Client organisation name.
        title: Engagement title.
        status: Free-text workflow status (e.g. 'IN_PROGRESS').
        nda: Consent gate; edits are only accepted while SIGNED.
        functions: One BusinessFunction per FunctionName, canonical order.
        scope: Active function set taking part in aggregation.
        updated_at: Last mutation time, refreshed by the service layer.
        industry: Optional industry label.
        contact_name: Optional client contact.
        contact_email: Optional client contact email.
        archived: Whether the assessment is hidden from the dashboard.
    """

    id: uuid.UUID
    client: str
    title: str
    functions: tuple[BusinessFunction, ...]
    status: str = "IN_PROGRESS"
    nda: NdaStatus = NdaStatus.NOT_SENT
    scope: tuple[FunctionName, ...] = (FunctionName.OPS, FunctionName.CX)
    updated_at: datetime = field(default_factory=_utcnow)
    industry: str | None = None
    contact_name: str | None = None
    contact_email: str | None = None
    archived: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "nda", NdaStatus(self.nda))
        object.__setattr__(self, "scope", normalise_scope(self.scope))
        object.__setattr__(self, "functions", tuple(self.functions))
        names = [fn.name for fn in self.functions]
        if len(set(names)) != len(names):
            raise DuplicateFunctionError(f"Assessment {self.id} lists a function twice")
        missing = [name.value for name in ALL_FUNCTIONS if name not in names]
        if missing:
            raise AssessmentModelError(
                f"Assessment {self.id} is missing functions: {', '.join(missing)}"
            )

    def function(self, name: FunctionName) -> BusinessFunction:
        """Return the function with the given name."""
        for fn in self.functions:
            if fn.name == name:
                return fn
        raise UnknownFunctionError(f"Unknown business function {name!r}")

    @property
    def is_editable(self) -> bool:
        return self.nda is NdaStatus.SIGNED


def normalise_scope(scope: Iterable["str | FunctionName"]) -> tuple[FunctionName, ...]:
    """Validate an active function set and return it in canonical order.

    Duplicates collapse; unknown names raise UnknownFunctionError.
    """
    requested = {parse_function_name(name) for name in scope}
    return tuple(name for name in ALL_FUNCTIONS if name in requested)


def new_assessment(
    client: str,
    title: str,
    *,
    scope: Sequence["str | FunctionName"] = (FunctionName.OPS, FunctionName.CX),
    nda: NdaStatus = NdaStatus.NOT_SENT,
    status: str = "IN_PROGRESS",
    industry: str | None = None,
    contact_name: str | None = None,
    contact_email: str | None = None,
    assessment_id: uuid.UUID | None = None,
) -> Assessment:
    """Create an assessment with an empty tree for every business function."""
    return Assessment(
        id=assessment_id or uuid.uuid4(),
        client=client,
        title=title,
        status=status,
        nda=nda,
        scope=tuple(scope),
        functions=tuple(empty_function(name) for name in ALL_FUNCTIONS),
        industry=industry,
        contact_name=contact_name,
        contact_email=contact_email,
    )


# ---------------------------------------------------------------------------
# Pure edit transformations
# ---------------------------------------------------------------------------


class _Unset:
    """Marker for 'field not supplied' in partial edits."""

    def __repr__(self) -> str:
        return "UNSET"


UNSET = _Unset()


def with_sub_criterion(
    assessment: Assessment,
    function: FunctionName,
    dimension: Dimension,
    key: str,
    *,
    score: "int | None | _Unset" = UNSET,
    note: "str | _Unset" = UNSET,
) -> Assessment:
    """Return a copy of assessment with one sub-criterion created or updated.

    Fields left as UNSET keep their current value. A sub-criterion first
    created through a note-only edit stays unanswered: the slider's displayed
    0 is not an answer until the operator moves it.

    Args:
        assessment: Current immutable snapshot.
        function: Owning business function.
        dimension: Owning component dimension.
        key: Sub-criterion key.
        score: New raw score (0-5 or None to clear).
        note: New note text.

    Returns:
        A new Assessment; the input is left untouched.
    """
    fn = assessment.function(function)
    component = fn.component(dimension)
    current = component.get(key) or SubCriterion(key=key)
    updated = replace(
        current,
        score=current.score if isinstance(score, _Unset) else score,
        note=current.note if isinstance(note, _Unset) else note,
    )

    if component.get(key) is None:
        new_sub = component.sub + (updated,)
    else:
        new_sub = tuple(updated if item.key == key else item for item in component.sub)

    new_component = replace(component, sub=new_sub)
    new_fn = replace(
        fn,
        components=tuple(
            new_component if c.name == dimension else c for c in fn.components
        ),
    )
    return replace(
        assessment,
        functions=tuple(new_fn if f.name == function else f for f in assessment.functions),
    )


def touch(assessment: Assessment, when: datetime | None = None) -> Assessment:
    """Return a copy with updated_at refreshed."""
    return replace(assessment, updated_at=when or _utcnow())
