#!/usr/bin/env python3
"""Seed a demo database with game results.

Usage:
    python scripts/seed_demo.py

This script:
1. Initializes the demo database
2. Logs sessions for one demo patient across two games, spread over
   fourteen months, with and without sound
3. Prints the yearly averages so the seed can be eyeballed
"""

from __future__ import annotations

import random
import sys
from datetime import datetime, timedelta
from pathlib import Path

# Add src to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from gametrack.aggregation import summary  # noqa: E402
from gametrack.db import repo  # noqa: E402
from gametrack.db.session import get_session, init_db  # noqa: E402
from gametrack.models.domain import EmptyResult, ResultSelector  # noqa: E402

# Constants
DEMO_DB_PATH = PROJECT_ROOT / "demo.db"

# Demo identifiers
DEMO_PATIENT_ID = "demo_patient"
DEMO_GAMES = {
    "demo_memory": ("time", "errors"),
    "demo_rhythm": ("hits", "misses", "reaction_ms"),
}

DEMO_START = datetime(2023, 1, 5, 10, 0)
DEMO_SESSIONS = 120
DEMO_SEED = 42


def seed_results(rng: random.Random) -> int:
    """Log DEMO_SESSIONS results per game. Returns the number stored."""
    session = get_session(DEMO_DB_PATH)
    stored = 0
    try:
        for game_id, metrics in DEMO_GAMES.items():
            for i in range(DEMO_SESSIONS):
                played_at = DEMO_START + timedelta(days=i * 3.5, minutes=rng.randint(0, 600))
                results = {name: round(rng.uniform(1, 100), 2) for name in metrics}
                repo.append_result(
                    session,
                    patient_id=DEMO_PATIENT_ID,
                    game_id=game_id,
                    sound=i % 2 == 0,
                    results=results,
                    date=played_at,
                )
                stored += 1
        repo.commit(session)
    finally:
        session.close()
    return stored


def print_yearly_averages() -> None:
    """Print yearly averages for each demo game."""
    session = get_session(DEMO_DB_PATH)
    try:
        for game_id in DEMO_GAMES:
            selector = ResultSelector(
                patient_id=DEMO_PATIENT_ID,
                game_id=game_id,
                start=datetime(2000, 1, 1),
                end=datetime(2100, 1, 1),
            )
            partitions = summary.yearly_average(session, selector)
            if isinstance(partitions, EmptyResult):
                print(f"{game_id}: no results")
                continue
            for partition in partitions:
                print(f"{game_id}: {partition.results}")
    finally:
        session.close()


def main() -> int:
    print(f"Initializing database: {DEMO_DB_PATH}")
    init_db(DEMO_DB_PATH)

    stored = seed_results(random.Random(DEMO_SEED))
    print(f"Stored {stored} results for {DEMO_PATIENT_ID}")

    print_yearly_averages()
    print()
    print("Run the API against this database with:")
    print(f"  GAMETRACK_DB_PATH={DEMO_DB_PATH} uvicorn gametrack.api.app:app --reload")
    return 0


if __name__ == "__main__":
    sys.exit(main())
