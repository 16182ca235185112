"""Unit tests for src/db/local_storage.py"""

import pytest
from sqlalchemy.orm import Session

from src.db.local_storage import LocalStorage, MemoryLocalStorage, SQLLocalStorage


@pytest.fixture(params=["sql", "memory"])
def storage(request: pytest.FixtureRequest, db_session: Session) -> LocalStorage:
    if request.param == "sql":
        return SQLLocalStorage(db_session)
    return MemoryLocalStorage()


def test_missing_key(storage: LocalStorage) -> None:
    assert storage.get_item("pegtrack.lastGameId") is None


def test_set_get_remove(storage: LocalStorage) -> None:
    storage.set_item("pegtrack.lastGameId", "abc")
    assert storage.get_item("pegtrack.lastGameId") == "abc"

    storage.set_item("pegtrack.lastGameId", "def")
    assert storage.get_item("pegtrack.lastGameId") == "def"

    storage.remove_item("pegtrack.lastGameId")
    assert storage.get_item("pegtrack.lastGameId") is None

    # removing a missing key is not an error
    storage.remove_item("pegtrack.lastGameId")


def test_sql_storage_is_durable(db_session: Session) -> None:
    """A new storage object (e.g. after restarting the app) sees the same items."""
    SQLLocalStorage(db_session).set_item("pegtrack.lastGameId", "abc")
    assert SQLLocalStorage(db_session).get_item("pegtrack.lastGameId") == "abc"
