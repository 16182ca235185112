"""
Protocol for the shared document store the Service layer synchronizes with.

Documents live under slash separated paths (e.g. games/{id}/players). Writes always overwrite the whole value
at a path: there is no merging.
"""

from typing import Any, Callable, Protocol

SERVER_TIMESTAMP_KEY = ".sv"

OnValue = Callable[[Any], None]
OnError = Callable[[Exception], None]
Unsubscribe = Callable[[], None]


def split_path(path: str) -> list[str]:
    """'games//abc/' -> ['games', 'abc']"""
    return [segment for segment in path.split("/") if segment]


def join_path(*segments: str) -> str:
    return "/".join(split_path("/".join(segments)))


def is_server_timestamp(value: Any) -> bool:
    return isinstance(value, dict) and value.get(SERVER_TIMESTAMP_KEY) == "timestamp"


def resolve_server_timestamps(value: Any, now_ms: int) -> Any:
    """Replace every server timestamp placeholder in `value` by `now_ms`."""
    if is_server_timestamp(value):
        return now_ms
    if isinstance(value, dict):
        return {key: resolve_server_timestamps(item, now_ms) for key, item in value.items()}
    if isinstance(value, list):
        return [resolve_server_timestamps(item, now_ms) for item in value]
    return value


class DocumentStore(Protocol):
    """Keyed document store offering read / write / subscribe."""

    def create(self, path: str) -> str:
        """Allocate a fresh unique key under the collection at `path`. Returns the full path of the new child."""
        ...

    def read(self, path: str) -> Any | None:
        """Current value at path, None if absent."""
        ...

    def write(self, path: str, value: Any) -> None:
        """Overwrite the value at path (None removes it). Raises StoreError on failure."""
        ...

    def subscribe(self, path: str, on_value: OnValue, on_error: OnError) -> Unsubscribe:
        """Call on_value with the current value right away, and again after every change at (or below) path."""
        ...

    def server_timestamp(self) -> dict[str, str]:
        """Placeholder that the store replaces by its own clock at write time."""
        ...
