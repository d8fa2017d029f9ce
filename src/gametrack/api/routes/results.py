"""Game results API endpoints.

POST /api/game-results - Log a game session result
GET /api/patients/{patient_id}/games/{game_id}/results - List results
GET /api/patients/{patient_id}/games/{game_id}/results/average - Period average
GET /api/patients/{patient_id}/games/{game_id}/results/monthly-average - Monthly averages
GET /api/patients/{patient_id}/games/{game_id}/results/yearly-average - Yearly averages

Date range and optional sound condition are query parameters. A range
with no results answers 204 No Content.
"""

from __future__ import annotations

from datetime import date, datetime, time

from fastapi import APIRouter, Depends, Query, Response

from gametrack.aggregation import summary
from gametrack.api.app import get_db_session
from gametrack.db.repo import DbSession
from gametrack.ingest.results import ResultInput, create_result
from gametrack.models.domain import EmptyResult, PartitionSummary, ResultRecord, ResultSelector
from gametrack.models.types import (
    PartitionAverage,
    RawResultEntry,
    ResultDetail,
    ResultSubmission,
)

router = APIRouter()

RESULTS_PATH = "/patients/{patient_id}/games/{game_id}/results"


def build_selector(
    patient_id: str,
    game_id: str,
    start: date = Query(..., description="First day of the range (inclusive)"),
    end: date = Query(..., description="Last day of the range (inclusive)"),
    sound: str | None = Query(None, description="Sound condition; omit to match all"),
) -> ResultSelector:
    """Build a selector covering whole days from start through end."""
    return ResultSelector(
        patient_id=patient_id,
        game_id=game_id,
        start=datetime.combine(start, time.min),
        end=datetime.combine(end, time.max),
        sound=sound,
    )


def _record_to_detail(record: ResultRecord) -> ResultDetail:
    """Convert ResultRecord to ResultDetail."""
    return ResultDetail(
        result_id=record.result_id,
        patient_id=record.patient_id,
        game_id=record.game_id,
        sound=record.sound,
        results=record.results,
        date=record.date,
    )


def _partitions_to_response(partitions: list[PartitionSummary]) -> list[PartitionAverage]:
    return [PartitionAverage(days_logged=p.days_logged, results=p.results) for p in partitions]


@router.post("/game-results", response_model=ResultDetail, status_code=201)
def post_result(
    submission: ResultSubmission,
    session: DbSession = Depends(get_db_session),
) -> ResultDetail:
    """Log one game session result.

    Raises:
        ResultError: 400 for missing fields or non-numeric results.
    """
    result_input = ResultInput(
        patient_id=submission.patient_id,
        game_id=submission.game_id,
        sound=submission.sound,
        results=submission.results,
        date=submission.date,
    )
    record = create_result(session, result_input)
    return _record_to_detail(record)


@router.get(RESULTS_PATH, response_model=list[RawResultEntry])
def get_results(
    selector: ResultSelector = Depends(build_selector),
    session: DbSession = Depends(get_db_session),
):
    """List results for a patient and game, date ascending."""
    entries = summary.list_results(session, selector)
    if isinstance(entries, EmptyResult):
        return Response(status_code=204)

    return [
        RawResultEntry(
            **_record_to_detail(entry.record).model_dump(),
            days_logged=entry.days_logged,
        )
        for entry in entries
    ]


@router.get(f"{RESULTS_PATH}/average", response_model=dict[str, float])
def get_period_average(
    selector: ResultSelector = Depends(build_selector),
    session: DbSession = Depends(get_db_session),
):
    """Per-metric mean over the whole range."""
    averages = summary.period_average(session, selector)
    if isinstance(averages, EmptyResult):
        return Response(status_code=204)
    return averages


@router.get(f"{RESULTS_PATH}/monthly-average", response_model=list[PartitionAverage])
def get_monthly_average(
    selector: ResultSelector = Depends(build_selector),
    session: DbSession = Depends(get_db_session),
):
    """Per-metric means for each month, with distinct days logged."""
    partitions = summary.monthly_average(session, selector)
    if isinstance(partitions, EmptyResult):
        return Response(status_code=204)
    return _partitions_to_response(partitions)


@router.get(f"{RESULTS_PATH}/yearly-average", response_model=list[PartitionAverage])
def get_yearly_average(
    selector: ResultSelector = Depends(build_selector),
    session: DbSession = Depends(get_db_session),
):
    """Per-metric means for each year."""
    partitions = summary.yearly_average(session, selector)
    if isinstance(partitions, EmptyResult):
        return Response(status_code=204)
    return _partitions_to_response(partitions)
