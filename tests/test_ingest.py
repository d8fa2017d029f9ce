"""Tests for result submission."""

from datetime import datetime

import pytest

from gametrack.db.schema import GameResult
from gametrack.errors import ErrorKind, ResultError
from gametrack.ingest.results import ResultInput, create_result


class TestCreateResult:
    """Test create_result."""

    def test_persists_result(self, session):
        record = create_result(
            session,
            ResultInput(
                patient_id="patient-1",
                game_id="game-1",
                sound=True,
                results={"score": 10, "level": 3},
            ),
        )

        row = session.query(GameResult).one()
        assert row.result_id == record.result_id
        assert row.sound == "true"
        assert record.results == {"score": 10, "level": 3}

    def test_keeps_explicit_date(self, session):
        record = create_result(
            session,
            ResultInput(
                patient_id="patient-1",
                game_id="game-1",
                sound="false",
                results={"score": 1},
                date=datetime(2023, 7, 4, 15, 30),
            ),
        )
        assert record.date == datetime(2023, 7, 4, 15, 30)

    def test_rejects_non_numeric_results(self, session):
        with pytest.raises(ResultError) as exc_info:
            create_result(
                session,
                ResultInput(
                    patient_id="patient-1",
                    game_id="game-1",
                    sound=True,
                    results={"score": "ten"},
                ),
            )
        assert exc_info.value.kind is ErrorKind.VALIDATION
        assert session.query(GameResult).count() == 0
