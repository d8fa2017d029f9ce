"""Pydantic models for the gametrack API.

Field names are snake_case in Python; the wire format keeps the
camelCase keys the clients already consume (patientId, daysLogged, ...).
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ResultSubmission(BaseModel):
    """Game result submission.

    ``results`` is validated by the store, so a non-numeric metric is a
    domain validation error rather than a schema error.
    """

    model_config = ConfigDict(populate_by_name=True)

    patient_id: str = Field(alias="patientId")
    game_id: str = Field(alias="gameId")
    sound: bool | str
    results: dict[str, Any]
    date: datetime | None = None


class ResultDetail(BaseModel):
    """Stored result for API response."""

    model_config = ConfigDict(populate_by_name=True)

    result_id: str = Field(alias="id")
    patient_id: str = Field(alias="patientId")
    game_id: str = Field(alias="gameId")
    sound: str
    results: dict[str, int | float]
    date: datetime


class RawResultEntry(ResultDetail):
    """One row of the raw listing; each row is one logged session."""

    days_logged: int = Field(default=1, alias="daysLogged")


class PartitionAverage(BaseModel):
    """Averages for a month or year.

    ``results`` holds the label ("month-year" or "year") and one mean
    per metric.
    """

    model_config = ConfigDict(populate_by_name=True)

    days_logged: int = Field(alias="daysLogged")
    results: dict[str, float | str]
