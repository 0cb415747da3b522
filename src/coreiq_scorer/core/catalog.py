"""CoreIQ sub-criterion catalog.

Defines which sub-criteria are valid for each (business function, dimension)
pair. Each item carries the label and description shown next to the 0-5
slider, and anchor text for the 0, 3 and 5 positions.

Only OPS and CX carry questions today. SALES_MARKETING, FINANCE_ADMIN and
INTERNAL_INTEL exist structurally with empty catalogs and score 0.
"""

from dataclasses import dataclass

from coreiq_scorer.core.models import ALL_DIMENSIONS, Dimension, FunctionName


@dataclass(frozen=True)
class Anchor:
    """Anchor text for slider positions 0, 3 and 5."""

    a0: str
    a3: str
    a5: str


@dataclass(frozen=True)
class CatalogItem:
    """A single question in the CoreIQ questionnaire.

    Attributes:
        key: Stable sub-criterion key (e.g. 'sops').
        label: Headline shown to the operator.
        description: One-line explanation of what is being rated.
        anchor: Descriptive anchors for 0, 3 and 5.
    """

    key: str
    label: str
    description: str
    anchor: Anchor


def _item(key: str, label: str, description: str, a0: str, a3: str, a5: str) -> CatalogItem:
    return CatalogItem(key=key, label=label, description=description, anchor=Anchor(a0, a3, a5))


_EMPTY: dict[Dimension, tuple[CatalogItem, ...]] = {d: () for d in ALL_DIMENSIONS}

CATALOG: dict[FunctionName, dict[Dimension, tuple[CatalogItem, ...]]] = {
    # -----------------------------------------------------------------------
    # Operations
    # -----------------------------------------------------------------------
    FunctionName.OPS: {
        Dimension.FUNCTIONALITY: (
            _item("sops", "Documented SOPs — order-to-cash, scheduling, QC.", "Coverage & currency of core SOPs.", "none", "partial/key steps", "versioned"),
            _item("roles", "Role Clarity — handoffs between teams.", "Clarity & enforcement of handoffs.", "unclear", "mostly", "RACI"),
            _item("systems", "System Coverage — WMS/ERP, scheduling, task mgmt.", "Fit-for-purpose coverage vs spreadsheets.", "sheets", "single", "fit"),
            _item("integration", "Integration — ERP↔inventory↔dispatch↔finance.", "Stability & breadth of integrations.", "siloed", "partial", "integrated"),
            _item("measurement", "Process Measurement — cycle time, OTIF, defect rate.", "How metrics are captured & surfaced.", "none", "manual", "dashboards"),
        ),
        Dimension.FRICTION: (
            _item("manual_entry", "Manual Data Entry — % touch time.", "Share of work that's manual.", "high", "some", "low"),
            _item("approvals", "Approval Bottlenecks — PO/job sign-offs.", "Time to decision.", "slow", "ok", "fast"),
            _item("duplication", "Duplication — double capture/rekey.", "Duplicate entry prevalence.", "common", "some", "none"),
            _item("rework", "Rework Rate — % jobs redone.", "Rework intensity.", "high", "some", "low"),
            _item("downtime", "System Downtime/Delays — planning/ERP.", "Outage/slowdown frequency.", "freq", "monthly", "rare"),
        ),
        Dimension.DATA_FITNESS: (
            _item("completeness", "Data Completeness — item codes, BOMs, job IDs.", "Required fields present.", "incomplete", "mixed", "complete"),
            _item("accuracy", "Accuracy — stock deltas, route variance.", "Error frequency.", "poor", "ok", "high"),
            _item("access", "Accessibility — ops staff can self-serve.", "Appropriate self-serve access.", "gatekept", "partial", "self-serve"),
            _item("format", "Format Standardisation — units, SKUs, naming.", "Standards adherence.", "chaos", "mostly", "catalogue"),
            _item("data_integration", "Data Integration — ERP↔WMS↔BI.", "Unification level.", "none", "some", "unified"),
        ),
        Dimension.CHANGE_READINESS: (
            _item("leadership", "Leadership Buy-in — ops head sponsorship.", "Sponsor energy.", "resist", "neutral", "driving"),
            _item("culture", "Innovation Culture — kaizen/continuous improvement.", "Continuous improvement cadence.", "never", "adhoc", "routine"),
            _item("past_adoption", "Past Tech Adoption — ERP upgrades succeeded?", "Track record of change.", "failed", "mixed", "success"),
            _item("training", "Training Willingness — floor teams upskill.", "Willingness to learn.", "reluctant", "willing", "eager"),
            _item("resources", "Resources — time/budget/SME available.", "Resourcing for improvement.", "none", "limited", "allocated"),
        ),
    },
    # -----------------------------------------------------------------------
    # Customer experience
    # -----------------------------------------------------------------------
    FunctionName.CX: {
        Dimension.FUNCTIONALITY: (
            _item("sops", "SOPs — intake, triage, escalation, refunds.", "Process coverage.", "none", "partial", "versioned"),
            _item("roles", "Role Clarity — agent vs team lead vs QA.", "Ownership of tasks.", "unclear", "mostly", "RACI"),
            _item("systems", "System Coverage — helpdesk/CRM/telephony/KB.", "Tooling sufficiency.", "adhoc", "single", "fit"),
            _item("integration", "Integration — CRM↔helpdesk↔billing↔comms.", "Data flow between CX tools.", "siloed", "partial", "stable"),
            _item("measurement", "Measurement — SLA, FRT, AHT, CSAT/NPS in dashboards.", "Operational telemetry.", "none", "manual", "dashboards"),
        ),
        Dimension.FRICTION: (
            _item("manual_entry", "Manual Entry — notes/rekeying between tools.", "Manual activity share.", "high", "some", "low"),
            _item("approvals", "Approval Bottlenecks — goodwill/discounts/RMAs.", "Time to authorise.", "slow", "ok", "fast"),
            _item("duplication", "Duplication — duplicate tickets/accounts.", "Duplicates prevalence.", "common", "some", "rare"),
            _item("rework", "Rework — reopened tickets % / transfers.", "Amount of rework.", "high", "some", "low"),
            _item("downtime", "Downtime/Delays — telephony/queue outages.", "Outage frequency.", "freq", "monthly", "rare"),
        ),
        Dimension.DATA_FITNESS: (
            _item("completeness", "Completeness — CRM required fields, contact history.", "Data field fill.", "incomplete", "mixed", "complete"),
            _item("accuracy", "Accuracy — wrong contact/entitlement.", "Error rate.", "poor", "ok", "high"),
            _item("access", "Accessibility — 360° customer view.", "Context availability.", "fragmented", "partial", "unified"),
            _item("standardisation", "Standardisation — tagging, reasons, dispositions.", "Taxonomy discipline.", "inconsistent", "improving", "strict"),
            _item("data_integration", "Integration — events in one timeline.", "Timeline consolidation.", "none", "partial", "consolidated"),
        ),
        Dimension.CHANGE_READINESS: (
            _item("leadership", "Leadership Buy-in — CX lead owns outcomes.", "Sponsor engagement.", "resist", "neutral", "driving"),
            _item("culture", "Innovation Culture — macros, AI, self-service experiments.", "Experiment cadence.", "static", "adhoc", "routine"),
            _item("past_adoption", "Past Adoption — helpdesk/CRM rollouts stuck or shipped?", "Rollout track record.", "failed", "mixed", "success"),
            _item("training", "Training — playbooks, QA coaching cadence.", "Enablement rigour.", "reluctant", "willing", "eager"),
            _item("resources", "Resources — content, ops engineer, budget.", "Capacity to execute.", "none", "limited", "allocated"),
        ),
    },
    FunctionName.SALES_MARKETING: dict(_EMPTY),
    FunctionName.FINANCE_ADMIN: dict(_EMPTY),
    FunctionName.INTERNAL_INTEL: dict(_EMPTY),
}

# Short end-cap labels for the slider (positions 0 and 5 only)
ANCHOR_OVERRIDES: dict[str, tuple[str, str]] = {
    "sops": ("None", "Versioned"),
    "roles": ("Unclear", "RACI"),
    "systems": ("Spreadsheets", "Fit"),
    "integration": ("Siloed", "Integrated"),
    "measurement": ("None", "Dashboards"),
    "manual_entry": ("High", "Low"),
    "approvals": ("Slow", "Fast"),
    "duplication": ("Common", "None"),
    "rework": ("High", "Low"),
    "downtime": ("Frequent", "Rare"),
    "completeness": ("Incomplete", "Complete"),
    "accuracy": ("Poor", "High"),
    "access": ("Gatekept", "Self-serve"),
    "format": ("Unstandardised", "Standardised"),
    "standardisation": ("Inconsistent", "Strict"),
    "data_integration": ("Disconnected", "Unified"),
    "leadership": ("Resistant", "Driving"),
    "culture": ("Static", "Innovates"),
    "past_adoption": ("Failed", "Successful"),
    "training": ("Reluctant", "Eager"),
    "resources": ("None", "Allocated"),
}


def items_for(function: FunctionName, dimension: Dimension) -> tuple[CatalogItem, ...]:
    """Return the catalog items for one (function, dimension) pair."""
    return CATALOG[function][dimension]


def find_item(function: FunctionName, dimension: Dimension, key: str) -> CatalogItem | None:
    """Look up a catalog item by key, or None if the key is not defined there."""
    for item in items_for(function, dimension):
        if item.key == key:
            return item
    return None


def end_cap_labels(item: CatalogItem) -> tuple[str, str]:
    """Return the (left, right) labels shown at slider positions 0 and 5.

    Falls back to the item's own 0 and 5 anchors when no override exists.
    """
    return ANCHOR_OVERRIDES.get(item.key, (item.anchor.a0, item.anchor.a5))
