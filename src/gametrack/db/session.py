"""SQLite engine and sessions for the results database.

The database file comes from, in order: an explicit path (the app's
``state.db_path`` or a script constant), GAMETRACK_DB_PATH, then
DEFAULT_DB_PATH. One engine and one sessionmaker exist per resolved file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from gametrack.db.schema import Base

DB_PATH_ENV = "GAMETRACK_DB_PATH"
DEFAULT_DB_PATH = Path("data/gametrack.db")


@dataclass
class _Database:
    engine: Engine
    sessions: sessionmaker


# Keyed by the resolved file path
_databases: dict[str, _Database] = {}


def resolve_db_path(db_path: Path | None = None) -> Path:
    """Pick the database file: explicit path, then env, then default."""
    if db_path is not None:
        return Path(db_path)
    env_path = os.environ.get(DB_PATH_ENV)
    if env_path:
        return Path(env_path)
    return DEFAULT_DB_PATH


def _database(db_path: Path | None) -> _Database:
    path = resolve_db_path(db_path)
    key = str(path.resolve())
    database = _databases.get(key)
    if database is None:
        path.parent.mkdir(parents=True, exist_ok=True)
        # Request handlers run in FastAPI's threadpool; SQLite needs one
        # shared connection with the same-thread check off.
        engine = create_engine(
            f"sqlite:///{path}",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        database = _Database(engine=engine, sessions=sessionmaker(bind=engine))
        _databases[key] = database
    return database


def get_engine(db_path: Path | None = None) -> Engine:
    """Engine for the results database (cached per file)."""
    return _database(db_path).engine


def get_session(db_path: Path | None = None) -> Session:
    """New session on the results database. The caller closes it."""
    return _database(db_path).sessions()


def init_db(db_path: Path | None = None) -> None:
    """Create the game_results table if it does not exist yet."""
    Base.metadata.create_all(get_engine(db_path))
