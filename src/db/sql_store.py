"""Implementation of the DocumentStore using SQLAlchemy"""

import logging
import time
from copy import deepcopy
from itertools import count
from typing import Any, Callable
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.core.exceptions import StoreError
from src.db.schema import DBDocument
from src.db.store import (
    SERVER_TIMESTAMP_KEY,
    OnError,
    OnValue,
    Unsubscribe,
    join_path,
    resolve_server_timestamps,
    split_path,
)

logger = logging.getLogger(__name__)


def epoch_ms() -> int:
    return int(time.time() * 1000)


class SQLDocumentStore:
    """
    Documents stored as JSON rows, one row per top-level document (collection/key).

    Subscribers are notified in-process, synchronously, in the order the writes happen.
    A subscriber gets notified whenever a write touches its path, a parent of it, or a child of it.
    """

    def __init__(self, db_session: Session, clock: Callable[[], int] = epoch_ms) -> None:
        self.db = db_session
        self.clock = clock
        self._subscriptions: dict[int, tuple[list[str], OnValue, OnError]] = {}
        self._ids = count()

    # --- DocumentStore protocol ---
    def create(self, path: str) -> str:
        """Allocate a fresh unique key under the collection at `path`. Returns the full path of the new child."""
        if not split_path(path):
            raise StoreError("Cannot create a child of the root path.")
        return join_path(path, uuid4().hex)

    def read(self, path: str) -> Any | None:
        """Current value at path, None if absent."""
        segments = self._segments(path)
        try:
            return self._read(segments)
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to read {path!r}") from exc

    def write(self, path: str, value: Any) -> None:
        """Overwrite the value at path (None removes it)."""
        segments = self._segments(path)
        if len(segments) < 2:
            raise StoreError(f"Cannot overwrite the whole collection {path!r}.")

        value = resolve_server_timestamps(deepcopy(value), self.clock())
        try:
            self._write(segments, value)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StoreError(f"Failed to write {path!r}") from exc

        self._notify(segments)

    def subscribe(self, path: str, on_value: OnValue, on_error: OnError) -> Unsubscribe:
        """Call on_value with the current value right away, and again after every change at (or below) path."""
        segments = self._segments(path)
        subscription_id = next(self._ids)
        self._subscriptions[subscription_id] = (segments, on_value, on_error)
        logger.debug("Subscription %d opened on %s", subscription_id, path)

        self._deliver(segments, on_value, on_error)

        def unsubscribe() -> None:
            if self._subscriptions.pop(subscription_id, None) is not None:
                logger.debug("Subscription %d closed", subscription_id)

        return unsubscribe

    def server_timestamp(self) -> dict[str, str]:
        return {SERVER_TIMESTAMP_KEY: "timestamp"}

    @property
    def subscription_count(self) -> int:
        return len(self._subscriptions)

    # -- Internal helpers --
    def _segments(self, path: str) -> list[str]:
        segments = split_path(path)
        if not segments:
            raise StoreError("Path must contain at least a collection name.")
        return segments

    def _read(self, segments: list[str]) -> Any | None:
        if len(segments) == 1:
            rows = self.db.scalars(
                select(DBDocument).where(DBDocument.collection == segments[0])
            ).all()
            if not rows:
                return None
            return {split_path(row.key)[1]: deepcopy(row.value) for row in rows}

        row = self._fetch_document(segments)
        if row is None:
            return None
        node = row.value
        for segment in segments[2:]:
            node = _child(node, segment)
            if node is None:
                return None
        return deepcopy(node)

    def _write(self, segments: list[str], value: Any) -> None:
        row = self._fetch_document(segments)
        nested = segments[2:]

        if not nested:
            if value is None:
                if row is not None:
                    self.db.delete(row)
                return
            if row is None:
                self.db.add(
                    DBDocument(key=join_path(*segments[:2]), collection=segments[0], value=value)
                )
            else:
                row.value = value
            return

        document = deepcopy(row.value) if row is not None else {}
        if not isinstance(document, dict):
            document = {}
        _set_child(document, nested, value)
        if row is None:
            self.db.add(
                DBDocument(key=join_path(*segments[:2]), collection=segments[0], value=document)
            )
        else:
            # assign a new object so SQLAlchemy picks up the change in the JSON column
            row.value = document

    def _fetch_document(self, segments: list[str]) -> DBDocument | None:
        query = select(DBDocument).where(DBDocument.key == join_path(*segments[:2]))
        return self.db.scalar(query)

    def _notify(self, written: list[str]) -> None:
        # copy: callbacks are allowed to (un)subscribe
        for segments, on_value, on_error in list(self._subscriptions.values()):
            if _overlaps(segments, written):
                self._deliver(segments, on_value, on_error)

    def _deliver(self, segments: list[str], on_value: OnValue, on_error: OnError) -> None:
        try:
            value = self._read(segments)
        except SQLAlchemyError as exc:
            on_error(StoreError(f"Failed to read {join_path(*segments)!r}: {exc}"))
            return
        on_value(value)


def _overlaps(first: list[str], second: list[str]) -> bool:
    """True if one path is equal to, or nested below, the other."""
    shortest = min(len(first), len(second))
    return first[:shortest] == second[:shortest]


def _child(node: Any, segment: str) -> Any | None:
    if isinstance(node, dict):
        return node.get(segment)
    if isinstance(node, list) and segment.isdigit():
        index = int(segment)
        return node[index] if index < len(node) else None
    return None


def _set_child(document: dict[str, Any], nested: list[str], value: Any) -> None:
    """Set (or remove, if value is None) the value at the nested path, creating intermediate objects as needed."""
    node: Any = document
    for segment in nested[:-1]:
        child = _child(node, segment)
        if not isinstance(child, (dict, list)):
            child = {}
            _assign(node, segment, child)
        node = child
    _assign(node, nested[-1], value)


def _assign(node: Any, segment: str, value: Any) -> None:
    if isinstance(node, dict):
        if value is None:
            node.pop(segment, None)
        else:
            node[segment] = value
        return

    if not segment.isdigit():
        raise StoreError(f"Cannot use {segment!r} as index into a list.")
    index = int(segment)
    if index < len(node):
        if value is None:
            del node[index]
        else:
            node[index] = value
    elif index == len(node) and value is not None:
        node.append(value)
    else:
        raise StoreError(f"List index {index} out of range (length {len(node)}).")
