"""Durable key/value storage for data that only this client needs (e.g. the ID of the last joined game)."""

from typing import Optional, Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.core.exceptions import StoreError
from src.db.schema import DBLocalItem


class LocalStorage(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class SQLLocalStorage:
    """One row per key in the local_storage table"""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def get_item(self, key: str) -> Optional[str]:
        item = self._fetch(key)
        return item.value if item else None

    def set_item(self, key: str, value: str) -> None:
        try:
            item = self._fetch(key)
            if item is None:
                self.db.add(DBLocalItem(key=key, value=value))
            else:
                item.value = value
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StoreError(f"Failed to store local item {key!r}") from exc

    def remove_item(self, key: str) -> None:
        try:
            item = self._fetch(key)
            if item is not None:
                self.db.delete(item)
                self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StoreError(f"Failed to remove local item {key!r}") from exc

    def _fetch(self, key: str) -> Optional[DBLocalItem]:
        return self.db.scalar(select(DBLocalItem).where(DBLocalItem.key == key))


class MemoryLocalStorage:
    """Keeps items for the lifetime of the process only"""

    def __init__(self) -> None:
        self._items: dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)
