"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures/variables required for testing multiple layers.
"""

from itertools import count
from typing import Callable, Generator

import pytest
from sqlalchemy import StaticPool, create_engine
from sqlalchemy.orm import Session, sessionmaker

from src.core.config import Settings
from src.db.local_storage import MemoryLocalStorage
from src.db.schema import Base
from src.db.sql_store import SQLDocumentStore

# Setup an in-memory SQLite database for testing
DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autoflush=False, bind=engine)


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    """Connection to a test database. Tables are removed at teardown to make tests independent of each other."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def clock() -> Callable[[], int]:
    """Deterministic store clock: every call returns a later timestamp (ms)."""
    ticks = count(start=1_700_000_000_000, step=1000)
    return lambda: next(ticks)


@pytest.fixture
def store(db_session: Session, clock: Callable[[], int]) -> SQLDocumentStore:
    return SQLDocumentStore(db_session, clock=clock)


@pytest.fixture
def local_storage() -> MemoryLocalStorage:
    return MemoryLocalStorage()


@pytest.fixture
def settings() -> Settings:
    """Defaults, independent of whatever is set in the environment of the test run."""
    return Settings(
        database_url=DATABASE_URL,
        default_player_count=4,
        slots_per_lane=18,
        pegs_per_player=5,
        exact_home=True,
        last_game_key="pegtrack.lastGameId",
        log_level="DEBUG",
    )
