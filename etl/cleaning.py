# WORKFLOW: Record cleaning pass for datasets carrying percentage measurements.
# Used by: Pipeline (brands dataset), anything exporting lab results
# Functions:
# 1. is_record_valid() - Parse each designated field and check percent validity
# 2. clean_records() - Keep valid records in input order, report before/after counts
#
# Cleaning flow: raw record -> per-field Measure parse -> all fields percent-valid? -> keep/drop
# Decimal-shift typos (e.g. 90385%) drop the whole record; no partial repair is attempted.

"""
Record cleaning pass for datasets carrying percentage measurements.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List, Mapping, Sequence, Union

from etl.measure import DEFAULT_ERROR_PATTERNS, ErrorPatterns, Measure, ParseError

logger = logging.getLogger(__name__)

FieldSelector = Union[Sequence[str], Callable[[Any], Iterable[Any]]]


@dataclass
class CleaningResult:
    """Outcome of a cleaning pass."""

    kept: List[Any] = field(default_factory=list)
    input_count: int = 0

    @property
    def kept_count(self) -> int:
        return len(self.kept)

    @property
    def dropped_count(self) -> int:
        return self.input_count - self.kept_count

    def summary(self) -> str:
        return f"{self.input_count} -> {self.kept_count} ({self.dropped_count} removed)"


def _field_value(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def _select_values(record: Any, percent_fields: FieldSelector) -> Iterable[Any]:
    if callable(percent_fields):
        return percent_fields(record)
    if isinstance(percent_fields, str):
        percent_fields = (percent_fields,)
    return [_field_value(record, name) for name in percent_fields]


def is_record_valid(
    record: Any,
    percent_fields: FieldSelector,
    patterns: ErrorPatterns = DEFAULT_ERROR_PATTERNS,
) -> bool:
    """
    Check that every designated field of a record is a valid percentage.

    Args:
        record: Raw record (mapping) or parsed record object
        percent_fields: Field names, or a callable returning the raw values to check
        patterns: Known-bad literals and prefixes

    Returns:
        True if every field parses and lies within [0, 100] (or is empty/zero/trace)
    """
    for raw in _select_values(record, percent_fields):
        try:
            measure = Measure.from_json_value(raw, patterns)
        except ParseError as e:
            logger.debug(f"Unparseable percentage field: {e}")
            return False
        if not measure.is_valid_percent:
            logger.debug(f"Out-of-range percentage: {measure.value}")
            return False
    return True


def clean_records(
    records: Iterable[Any],
    percent_fields: FieldSelector,
    patterns: ErrorPatterns = DEFAULT_ERROR_PATTERNS,
) -> CleaningResult:
    """
    Drop records with unparseable or out-of-range percentage fields.

    Args:
        records: Raw records to clean
        percent_fields: Field names, or a callable returning the raw values to check
        patterns: Known-bad literals and prefixes

    Returns:
        CleaningResult with the kept records (input order) and counts
    """
    records = list(records)
    kept = [r for r in records if is_record_valid(r, percent_fields, patterns)]
    return CleaningResult(kept=kept, input_count=len(records))
