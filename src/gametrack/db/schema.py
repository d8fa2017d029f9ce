"""Database schema for gametrack.

Results are append-only. The ``results_json`` payload has no fixed keys;
its shape is decided per game.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    """Current UTC time as a naive timestamp (storage convention)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class GameResult(Base):
    """One logged game session for a patient."""

    __tablename__ = "game_results"

    result_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    patient_id: Mapped[str] = mapped_column(String(64), nullable=False)
    game_id: Mapped[str] = mapped_column(String(64), nullable=False)
    sound: Mapped[str] = mapped_column(String(16), nullable=False)
    results_json: Mapped[str] = mapped_column(Text, nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utc_now)

    __table_args__ = (
        Index("ix_game_results_selection", "patient_id", "game_id", "date"),
    )
