"""
Type definitions used across layers
"""

from enum import StrEnum
from typing import Optional

from src.core.exceptions import InvalidPegPositionError


class PegLocation(StrEnum):
    """Positions of a peg that are not a slot on the shared track."""

    HOME = "HOME"
    SAFE = "SAFE"


class GameStatus(StrEnum):
    WAITING = "waiting"
    PLAYING = "playing"
    FINISHED = "finished"


class ConnectionStatus(StrEnum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERROR = "error"


# A peg is either on a (1-based) slot of the shared track, or at one of the PegLocations
PegPosition = int | PegLocation


def to_peg_position(value: object, total_slots: Optional[int] = None) -> PegPosition:
    """
    Check the shape of a peg position. Whether the move is legal is not checked here.
    ----

    With `total_slots`, slot indices beyond the end of the track are rejected too.
    """
    # bool is a subclass of int, but True/False are never slot indices
    if isinstance(value, int) and not isinstance(value, bool):
        if value < 1:
            raise InvalidPegPositionError(f"Slot index must be 1 or higher, got {value}")
        if total_slots is not None and value > total_slots:
            raise InvalidPegPositionError(
                f"Slot index {value} is beyond the end of the track ({total_slots} slots)"
            )
        return value
    if isinstance(value, str) and value in PegLocation.__members__:
        return PegLocation(value)
    raise InvalidPegPositionError(
        f"Cannot interpret {value!r} as a peg position. Expected a slot index, 'HOME' or 'SAFE'."
    )
