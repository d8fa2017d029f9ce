"""Repository pattern for game results.

Encapsulates all SQLAlchemy queries, keeping aggregation logic pure.
Returns domain models (not SQLAlchemy entities) to external callers.
"""

from __future__ import annotations

import json
import logging
import uuid
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gametrack.db.schema import GameResult, utc_now
from gametrack.errors import ErrorKind, ResultError
from gametrack.models.domain import (
    RESERVED_METRIC_NAMES,
    ResultRecord,
    ResultSelector,
    is_metric_value,
)

if TYPE_CHECKING:
    from sqlalchemy.orm import Session as DbSession
else:
    DbSession = Session

# Re-export for external use
__all__ = ["DbSession", "append_result", "commit", "normalize_sound", "query_results"]

logger = logging.getLogger(__name__)


# ============================================================================
# Converters
# ============================================================================


def _result_to_entity(row: GameResult) -> ResultRecord:
    """Convert SQLAlchemy GameResult to domain entity."""
    try:
        results = json.loads(row.results_json)
    except json.JSONDecodeError as e:
        raise ResultError(
            ErrorKind.STORAGE, f"Stored results for {row.result_id} are not valid JSON"
        ) from e

    return ResultRecord(
        result_id=row.result_id,
        patient_id=row.patient_id,
        game_id=row.game_id,
        sound=row.sound,
        results=results,
        date=row.date,
    )


def to_storage_time(value: datetime) -> datetime:
    """Normalize a timestamp to naive UTC; naive input is kept as given."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def normalize_sound(value: object) -> str | None:
    """Normalize a sound condition to its stored string form.

    Booleans become "true"/"false"; strings are stripped and lower-cased.
    Returns None for missing or blank values.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value.strip().lower() or None
    return None


def _validate_fields(
    patient_id: str | None,
    game_id: str | None,
    sound: str | None,
    results: object,
) -> list[str]:
    """Collect validation problems for a new result."""
    problems: list[str] = []
    if not patient_id:
        problems.append("patient_id is required")
    if not game_id:
        problems.append("game_id is required")
    if sound is None:
        problems.append("sound is required")

    if not isinstance(results, Mapping) or not results:
        problems.append("results must be a non-empty mapping")
    else:
        for key, value in results.items():
            if not isinstance(key, str) or not key:
                problems.append(f"results key {key!r} must be a non-empty string")
            elif key in RESERVED_METRIC_NAMES:
                problems.append(f"results key {key!r} is reserved")
            elif not is_metric_value(value):
                problems.append(f"results.{key} must be a finite number")
    return problems


# ============================================================================
# Result Repository
# ============================================================================


def query_results(session: DbSession, selector: ResultSelector) -> list[ResultRecord]:
    """Get all results matching a selector.

    Matches patient_id, game_id and (when given) sound exactly, and dates
    within the inclusive [start, end] range. No ordering is guaranteed.

    Raises:
        ResultError: VALIDATION for a malformed selector, STORAGE when the
            query fails.
    """
    if not selector.patient_id or not selector.game_id:
        raise ResultError(ErrorKind.VALIDATION, "patient_id and game_id are required")

    start = to_storage_time(selector.start)
    end = to_storage_time(selector.end)
    if start > end:
        raise ResultError(
            ErrorKind.VALIDATION,
            f"Date range start {start.isoformat()} is after end {end.isoformat()}",
        )

    try:
        query = session.query(GameResult).filter(
            GameResult.patient_id == selector.patient_id,
            GameResult.game_id == selector.game_id,
            GameResult.date >= start,
            GameResult.date <= end,
        )
        sound = normalize_sound(selector.sound)
        if sound is not None:
            query = query.filter(GameResult.sound == sound)
        rows = query.all()
    except SQLAlchemyError as e:
        logger.warning(f"Result query failed for patient={selector.patient_id}: {e}")
        raise ResultError(ErrorKind.STORAGE, "Failed to query game results") from e

    logger.debug(
        f"Matched {len(rows)} results for patient={selector.patient_id} "
        f"game={selector.game_id}"
    )
    return [_result_to_entity(r) for r in rows]


def append_result(
    session: DbSession,
    patient_id: str,
    game_id: str,
    sound: object,
    results: Mapping[str, int | float],
    date: datetime | None = None,
) -> ResultRecord:
    """Create a new result.

    Assigns a result_id and defaults date to now. The row is flushed but not
    committed; call commit() to persist.

    Raises:
        ResultError: VALIDATION when a field is missing or results is not a
            non-empty numeric mapping, STORAGE when the write fails.
    """
    stored_sound = normalize_sound(sound)
    problems = _validate_fields(patient_id, game_id, stored_sound, results)
    if problems:
        raise ResultError(ErrorKind.VALIDATION, " | ".join(problems))

    row = GameResult(
        result_id=str(uuid.uuid4()),
        patient_id=patient_id,
        game_id=game_id,
        sound=stored_sound,
        results_json=json.dumps(dict(results)),
        date=to_storage_time(date) if date is not None else utc_now(),
    )

    try:
        session.add(row)
        session.flush()
    except SQLAlchemyError as e:
        session.rollback()
        logger.warning(f"Failed to store result for patient={patient_id}: {e}")
        raise ResultError(ErrorKind.STORAGE, "Failed to store game result") from e

    logger.info(f"Stored result {row.result_id} for patient={patient_id} game={game_id}")
    return _result_to_entity(row)


# ============================================================================
# Batch Operations
# ============================================================================


def commit(session: DbSession) -> None:
    """Commit current transaction."""
    try:
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.warning(f"Commit failed: {e}")
        raise ResultError(ErrorKind.STORAGE, "Failed to commit transaction") from e
