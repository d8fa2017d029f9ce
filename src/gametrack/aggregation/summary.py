"""Game result summaries.

Each operation performs exactly one store query and one in-memory
computation. Domain logic is pure - database operations go through repo.
"""

from __future__ import annotations

from gametrack.aggregation import engine
from gametrack.db import repo
from gametrack.db.repo import DbSession
from gametrack.models.domain import (
    AggregationMode,
    EmptyResult,
    PartitionSummary,
    RawEntry,
    ResultSelector,
)


def summarize(session: DbSession, selector: ResultSelector, mode: AggregationMode):
    """Query the selection and aggregate it with the given mode.

    Args:
        session: Database session.
        selector: Patient, game, date range and optional sound condition.
        mode: Aggregation mode.

    Returns:
        The mode's output, or EmptyResult carrying the selector when
        nothing matched.

    Raises:
        ResultError: VALIDATION, COMPUTATION or STORAGE.
    """
    records = repo.query_results(session, selector)
    if not records:
        return EmptyResult(selector=selector)
    return engine.aggregate(records, mode)


def list_results(
    session: DbSession, selector: ResultSelector
) -> list[RawEntry] | EmptyResult:
    """All matching results, date ascending."""
    return summarize(session, selector, "raw")


def period_average(
    session: DbSession, selector: ResultSelector
) -> dict[str, float] | EmptyResult:
    """Per-metric mean over the whole date range."""
    return summarize(session, selector, "period_average")


def monthly_average(
    session: DbSession, selector: ResultSelector
) -> list[PartitionSummary] | EmptyResult:
    """Per-metric means for each calendar month in the range."""
    return summarize(session, selector, "monthly_average")


def yearly_average(
    session: DbSession, selector: ResultSelector
) -> list[PartitionSummary] | EmptyResult:
    """Per-metric means for each calendar year in the range."""
    return summarize(session, selector, "yearly_average")
