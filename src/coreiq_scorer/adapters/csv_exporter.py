"""CSV export of recorded sub-criteria.

Produces one row per recorded sub-criterion of each active function:

    Function,Component,SubKey,Score,Note

Unanswered scores export as an empty cell. Commas inside notes are replaced
with semicolons and line breaks collapse to a single space, so every record
is one physical line with exactly five columns.
"""

import csv
import io
import re
from collections.abc import Iterable, Iterator

from coreiq_scorer.core.models import Assessment, FunctionName
from coreiq_scorer.core.scoring import select_active_functions

CSV_HEADER: tuple[str, ...] = ("Function", "Component", "SubKey", "Score", "Note")

_LINE_BREAKS = re.compile(r"[\r\n]+")


def sanitise_note(note: str) -> str:
    """Neutralise delimiter and line-break characters in a free-text note."""
    return _LINE_BREAKS.sub(" ", note).replace(",", ";")


def iter_rows(
    assessment: Assessment,
    active_functions: Iterable[FunctionName | str] | None = None,
) -> Iterator[tuple[str, str, str, str, str]]:
    """Yield export rows (without header) for the active functions."""
    scope = assessment.scope if active_functions is None else active_functions
    for fn in select_active_functions(assessment.functions, scope):
        for component in fn.components:
            for item in component.sub:
                yield (
                    fn.name.value,
                    component.name.value,
                    item.key,
                    "" if item.score is None else str(item.score),
                    sanitise_note(item.note),
                )


def export_assessment_csv(
    assessment: Assessment,
    active_functions: Iterable[FunctionName | str] | None = None,
) -> str:
    """Render the assessment's recorded answers as CSV text.

    Args:
        assessment: Snapshot to export.
        active_functions: Functions to include; defaults to the assessment scope.

    Returns:
        CSV document using '\\n' line endings.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    writer.writerows(iter_rows(assessment, active_functions))
    return buffer.getvalue()


class CsvAssessmentExporter:
    """Implements IAssessmentExporter for text/csv downloads."""

    media_type: str = "text/csv"

    def export(self, assessment: Assessment) -> str:
        return export_assessment_csv(assessment)
