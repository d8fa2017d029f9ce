"""Domain models for gametrack.

Pure Python dataclasses representing domain entities.
These models are independent of SQLAlchemy and used throughout
the application for clean separation from the database layer.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

# Metric values are open-ended per game; the engine validates them.
Metrics = dict[str, int | float]

AggregationMode = Literal["raw", "period_average", "monthly_average", "yearly_average"]

# Partition labels inside monthly/yearly results; not usable as metric names.
MONTH_LABEL = "month-year"
YEAR_LABEL = "year"
RESERVED_METRIC_NAMES = frozenset({MONTH_LABEL, YEAR_LABEL})


# ============================================================================
# Result Domain
# ============================================================================


@dataclass(frozen=True)
class ResultRecord:
    """One logged game session."""

    result_id: str
    patient_id: str
    game_id: str
    sound: str
    results: Metrics
    date: datetime


@dataclass(frozen=True)
class ResultSelector:
    """Selection of results for a single aggregation call.

    ``sound`` of None matches every sound condition.
    """

    patient_id: str
    game_id: str
    start: datetime
    end: datetime
    sound: str | None = None


@dataclass(frozen=True)
class EmptyResult:
    """Well-formed selection that matched no records."""

    selector: ResultSelector | None = None


# ============================================================================
# Aggregation Domain
# ============================================================================


@dataclass
class RawEntry:
    """A single record as returned by the raw listing."""

    record: ResultRecord
    days_logged: int = 1


@dataclass
class PartitionSummary:
    """Averages for one month or year partition.

    ``results`` holds the partition label first, then one mean per metric.
    """

    days_logged: int
    results: dict[str, float | str] = field(default_factory=dict)


def is_metric_value(value: object) -> bool:
    """True for finite int/float metric values. Booleans are not metrics."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # int too large to average as a float
        return False
