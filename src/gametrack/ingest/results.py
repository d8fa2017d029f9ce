"""Game result submission.

Handles result validation and storage.
Domain logic is pure - database operations go through repo.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from gametrack.db import repo
from gametrack.models.domain import Metrics, ResultRecord


@dataclass
class ResultInput:
    """Input for result submission."""

    patient_id: str
    game_id: str
    sound: bool | str
    results: Metrics
    date: datetime | None = None


def create_result(
    session: Session,
    result_input: ResultInput,
) -> ResultRecord:
    """Store one game session result.

    Args:
        session: Database session.
        result_input: Result data.

    Returns:
        The stored ResultRecord with its assigned result_id and date.

    Raises:
        ResultError: VALIDATION for missing fields or non-numeric results,
            STORAGE when the write fails.
    """
    record = repo.append_result(
        session,
        patient_id=result_input.patient_id,
        game_id=result_input.game_id,
        sound=result_input.sound,
        results=result_input.results,
        date=result_input.date,
    )
    repo.commit(session)
    return record
