"""
Track geometry: derives the 2-D coordinates of every main-track slot, home cell, and safe cell.

The track is drawn as a regular polygon with one side per player. Each side holds one lane of slots.
Home and safe areas hang inward from a player's side, and their shapes only depend on the supplied spacing,
so adding players never distorts a single player's home or safe area.

Everything in here is stateless. `get_track_layout` is the entrypoint for the rest of the application.
"""

import math
from dataclasses import dataclass, field
from typing import Any

from src.core.config import MAX_PLAYERS, MIN_PLAYERS
from src.core.exceptions import GeometryError

SLOTS_PER_LANE = 18
CELLS_PER_AREA = 5

# Where along a player's side the home and safe areas are anchored (as fraction of the side)
HOME_ANCHOR_FRACTION = 9 / 18
SAFE_ANCHOR_FRACTION = 4 / 18

# Distance (in units of spacing) from the track edge to the center of the home "plus"
HOME_DEPTH = 3.0

DEFAULT_ROTATION = -math.pi / 2

# Below this, the center counts as lying on the edge itself (the 2 sides of a 2 player board)
_ON_EDGE_TOLERANCE = 1e-9


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    def __add__(self, other: "Point") -> "Point":
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Point") -> "Point":
        return Point(self.x - other.x, self.y - other.y)

    def scale(self, factor: float) -> "Point":
        return Point(self.x * factor, self.y * factor)

    def dot(self, other: "Point") -> float:
        return self.x * other.x + self.y * other.y

    def length(self) -> float:
        return math.hypot(self.x, self.y)

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class TrackSlot:
    x: float
    y: float
    index: int  # 1-based, matches peg positions
    player_lane: int

    def to_dict(self) -> dict[str, Any]:
        return {"x": self.x, "y": self.y, "index": self.index, "playerLane": self.player_lane}


@dataclass(frozen=True)
class CellGroup:
    """The 5 cells of one player's home or safe area"""

    positions: list[Point]
    player_index: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "positions": [p.to_dict() for p in self.positions],
            "playerIndex": self.player_index,
        }


@dataclass(frozen=True)
class TrackLayout:
    main_track: list[TrackSlot] = field(default_factory=list)
    homes: list[CellGroup] = field(default_factory=list)
    safes: list[CellGroup] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "mainTrack": [slot.to_dict() for slot in self.main_track],
            "homes": [group.to_dict() for group in self.homes],
            "safes": [group.to_dict() for group in self.safes],
        }


# --- Circular placement ---
def polar_to_xy(center: Point, radius: float, angle: float) -> Point:
    return Point(center.x + radius * math.cos(angle), center.y + radius * math.sin(angle))


def slot_angle(index: int, total: int, rotation_offset: float = DEFAULT_ROTATION) -> float:
    """
    Angle of the slot with 0-based `index` when `total` slots are spread over a full circle.

    With the default rotation offset, index 0 sits at the top. Indices wrap around, so index + total gives the same angle.
    """
    if total <= 0:
        raise GeometryError(f"Need at least one slot to compute an angle, got {total=}")
    return (index % total) / total * math.tau + rotation_offset


def slot_position(
    index: int,
    total: int,
    center: Point,
    radius: float,
    rotation_offset: float = DEFAULT_ROTATION,
) -> Point:
    """Slot placed on a circle (instead of on the polygon)."""
    return polar_to_xy(center, radius, slot_angle(index, total, rotation_offset))


# --- Polygon placement ---
def polygon_corners(player_count: int, center: Point, radius: float) -> list[Point]:
    """Corner k of the polygon sits at the same angle as slot k would on a circle with player_count slots."""
    return [
        polar_to_xy(center, radius, slot_angle(corner, player_count))
        for corner in range(player_count)
    ]


def ngon_slot_position(
    index: int,
    total: int,
    player_count: int,
    center: Point,
    radius: float,
) -> Point:
    """
    Slot with 0-based `index` on the polygon shaped track.

    Slots on the same side are evenly spaced along the straight edge. The first slot of a side sits exactly on its corner,
    the last slot one step before the next corner. So the end of one side and the start of the next do not coincide.
    With 2 players the polygon degenerates to a diameter: the second side retraces the first in the opposite direction.
    """
    slots_per_side = total // player_count
    if slots_per_side == 0:
        raise GeometryError(f"Cannot spread {total} slots over {player_count} sides.")

    index %= total
    side = min(index // slots_per_side, player_count - 1)
    t = (index % slots_per_side) / slots_per_side

    corners = polygon_corners(player_count, center, radius)
    start = corners[side]
    end = corners[(side + 1) % player_count]
    return start + (end - start).scale(t)


def _side_frame(
    player_index: int, player_count: int, center: Point, radius: float, fraction: float
) -> tuple[Point, Point, Point]:
    """Anchor point at `fraction` along the player's side, plus the unit tangent and inward normal at that point."""
    corners = polygon_corners(player_count, center, radius)
    start = corners[player_index % player_count]
    end = corners[(player_index + 1) % player_count]

    edge = end - start
    tangent = edge.scale(1 / edge.length())
    anchor = start + edge.scale(fraction)

    # perpendicular to the edge. Flip it if it points away from the center of the polygon.
    # With 2 players both sides run through the center: keep the left-hand normal, so the areas mirror each other.
    normal = Point(-tangent.y, tangent.x)
    if normal.dot(center - anchor) < -_ON_EDGE_TOLERANCE * radius:
        normal = normal.scale(-1)
    return anchor, tangent, normal


def get_home_positions(
    player_index: int,
    player_count: int,
    center: Point,
    radius: float,
    spacing: float,
) -> list[Point]:
    """
    5 cells arranged as a plus: a center cell, with one cell on each side along the normal and the tangent.
    """
    anchor, tangent, normal = _side_frame(
        player_index, player_count, center, radius, HOME_ANCHOR_FRACTION
    )
    middle = anchor + normal.scale(HOME_DEPTH * spacing)
    return [
        middle,
        middle - normal.scale(spacing),
        middle + normal.scale(spacing),
        middle - tangent.scale(spacing),
        middle + tangent.scale(spacing),
    ]


def get_safe_positions(
    player_index: int,
    player_count: int,
    center: Point,
    radius: float,
    spacing: float,
) -> list[Point]:
    """
    5 cells arranged as an L: 3 cells going straight inward, then 2 cells turning along the track direction.
    """
    anchor, tangent, normal = _side_frame(
        player_index, player_count, center, radius, SAFE_ANCHOR_FRACTION
    )
    straight = [anchor + normal.scale(step * spacing) for step in range(1, 4)]
    corner = straight[-1]
    turn = [corner + tangent.scale(step * spacing) for step in range(1, 3)]
    return straight + turn


def get_track_layout(
    player_count: int,
    center: Point,
    radius: float,
    spacing: float,
    slots_per_lane: int = SLOTS_PER_LANE,
) -> TrackLayout:
    """All coordinates needed to draw the track for the given number of players."""
    if not MIN_PLAYERS <= player_count <= MAX_PLAYERS:
        raise GeometryError(
            f"Track layout supports {MIN_PLAYERS} to {MAX_PLAYERS} players, got {player_count}"
        )
    if slots_per_lane < 1:
        raise GeometryError(f"Need at least one slot per lane, got {slots_per_lane}")

    total = player_count * slots_per_lane
    main_track: list[TrackSlot] = []
    for index in range(total):
        point = ngon_slot_position(index, total, player_count, center, radius)
        main_track.append(
            TrackSlot(
                x=point.x,
                y=point.y,
                index=index + 1,
                player_lane=index // slots_per_lane,
            )
        )

    homes = [
        CellGroup(
            get_home_positions(player, player_count, center, radius, spacing), player
        )
        for player in range(player_count)
    ]
    safes = [
        CellGroup(
            get_safe_positions(player, player_count, center, radius, spacing), player
        )
        for player in range(player_count)
    ]
    return TrackLayout(main_track=main_track, homes=homes, safes=safes)
