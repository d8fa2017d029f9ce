"""Aggregation over game results.

Pure functions - no database access, no shared state. Every mode orders
records by (date, result_id) first, so output does not depend on the
order the store returned them in.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime

from gametrack.errors import ErrorKind, ResultError
from gametrack.models.domain import (
    MONTH_LABEL,
    YEAR_LABEL,
    AggregationMode,
    EmptyResult,
    PartitionSummary,
    RawEntry,
    ResultRecord,
    is_metric_value,
)

logger = logging.getLogger(__name__)


@dataclass
class MetricAccumulator:
    """Running sums and counts per metric, in first-seen key order."""

    sums: dict[str, float] = field(default_factory=dict)
    counts: dict[str, int] = field(default_factory=dict)

    def add(self, record: ResultRecord) -> None:
        for key, value in _checked_metrics(record):
            if key in self.sums:
                self.sums[key] += value
                self.counts[key] += 1
            else:
                self.sums[key] = value
                self.counts[key] = 1

    def means(self) -> dict[str, float]:
        return {key: self.sums[key] / self.counts[key] for key in self.sums}


def _checked_metrics(record: ResultRecord) -> list[tuple[str, int | float]]:
    """Return (metric, value) pairs, failing on anything non-numeric."""
    if not isinstance(record.results, Mapping):
        logger.warning(f"Result {record.result_id} has non-mapping results")
        raise ResultError(
            ErrorKind.COMPUTATION,
            f"Result {record.result_id} has results that are not a mapping",
        )
    pairs = []
    for key, value in record.results.items():
        if not is_metric_value(value):
            logger.warning(f"Non-numeric metric {key!r} in result {record.result_id}")
            raise ResultError(
                ErrorKind.COMPUTATION,
                f"Metric {key!r} in result {record.result_id} is not a finite number: {value!r}",
            )
        pairs.append((key, value))
    return pairs


def _labelled(label_key: str, label: str, means: dict[str, float]) -> dict[str, float | str]:
    """Partition results: the label first, then the metric means."""
    if label_key in means:
        raise ResultError(
            ErrorKind.COMPUTATION,
            f"Metric name {label_key!r} collides with the partition label",
        )
    return {label_key: label, **means}


def _ordered(records: Iterable[ResultRecord]) -> list[ResultRecord]:
    return sorted(records, key=lambda r: (r.date, r.result_id))


# ============================================================================
# Modes
# ============================================================================


def raw_listing(records: Sequence[ResultRecord]) -> list[RawEntry] | EmptyResult:
    """Return every record, date ascending, each counting as one logged day.

    Metric values are still validated so a raw listing never hands out
    data the averaging modes would reject.
    """
    if not records:
        return EmptyResult()

    entries = []
    for record in _ordered(records):
        _checked_metrics(record)
        entries.append(RawEntry(record=record))
    return entries


def period_average(records: Sequence[ResultRecord]) -> dict[str, float] | EmptyResult:
    """Mean of each metric over the whole selection.

    Records missing a metric are left out of that metric's mean.
    """
    if not records:
        return EmptyResult()

    acc = MetricAccumulator()
    for record in _ordered(records):
        acc.add(record)
    return acc.means()


def _partitioned(
    records: Sequence[ResultRecord],
    key_fn: Callable[[datetime], tuple[int, ...]],
) -> dict[tuple[int, ...], list[ResultRecord]]:
    """Group records by a date-derived key, in chronological key order."""
    groups: dict[tuple[int, ...], list[ResultRecord]] = {}
    for record in _ordered(records):
        groups.setdefault(key_fn(record.date), []).append(record)
    return groups


def monthly_average(records: Sequence[ResultRecord]) -> list[PartitionSummary] | EmptyResult:
    """Per-metric means for each calendar month.

    daysLogged is the number of distinct calendar days in the month's
    records; several sessions on one day count once.
    """
    if not records:
        return EmptyResult()

    # (year, month) sorts chronologically; label is month-year.
    groups = _partitioned(records, lambda d: (d.year, d.month))

    summaries = []
    for (year, month), members in groups.items():
        acc = MetricAccumulator()
        for record in members:
            acc.add(record)
        days = {record.date.date() for record in members}
        summaries.append(
            PartitionSummary(
                days_logged=len(days),
                results=_labelled(MONTH_LABEL, f"{month}-{year}", acc.means()),
            )
        )
    return summaries


def yearly_average(records: Sequence[ResultRecord]) -> list[PartitionSummary] | EmptyResult:
    """Per-metric means for each calendar year.

    daysLogged is the number of distinct years across the whole selection,
    repeated on every partition.
    """
    if not records:
        return EmptyResult()

    groups = _partitioned(records, lambda d: (d.year,))
    years_logged = len(groups)

    summaries = []
    for (year,), members in groups.items():
        acc = MetricAccumulator()
        for record in members:
            acc.add(record)
        summaries.append(
            PartitionSummary(
                days_logged=years_logged,
                results=_labelled(YEAR_LABEL, str(year), acc.means()),
            )
        )
    return summaries


_MODES: dict[str, Callable[[Sequence[ResultRecord]], object]] = {
    "raw": raw_listing,
    "period_average": period_average,
    "monthly_average": monthly_average,
    "yearly_average": yearly_average,
}


def aggregate(records: Sequence[ResultRecord], mode: AggregationMode):
    """Run one aggregation mode over a record set.

    Returns:
        The mode's output, or EmptyResult when records is empty.

    Raises:
        ResultError: VALIDATION for an unknown mode, COMPUTATION for a
            non-numeric metric.
    """
    try:
        compute = _MODES[mode]
    except KeyError:
        raise ResultError(ErrorKind.VALIDATION, f"Unknown aggregation mode: {mode!r}") from None
    return compute(records)
