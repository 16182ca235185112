"""Unit tests for src/core/shared_types.py"""

import pytest

from src.core.exceptions import InvalidPegPositionError
from src.core.shared_types import PegLocation, to_peg_position


@pytest.mark.parametrize("value", [1, 18, 42, 144])
def test_slot_indices_are_valid_positions(value: int) -> None:
    assert to_peg_position(value) == value


@pytest.mark.parametrize(
    "value, expected",
    [
        ("HOME", PegLocation.HOME),
        ("SAFE", PegLocation.SAFE),
        (PegLocation.HOME, PegLocation.HOME),
    ],
)
def test_named_locations(value: str, expected: PegLocation) -> None:
    position = to_peg_position(value)
    assert position == expected
    assert isinstance(position, PegLocation)


@pytest.mark.parametrize("value", [0, -3, True, False, 1.5, "home", "BASE", None, [1]])
def test_other_shapes_are_rejected(value: object) -> None:
    """Only 3 shapes are allowed: slot index (1-based), HOME, SAFE."""
    with pytest.raises(InvalidPegPositionError):
        to_peg_position(value)


def test_slot_index_bounded_by_track_length() -> None:
    assert to_peg_position(72, total_slots=72) == 72
    assert to_peg_position(PegLocation.SAFE, total_slots=72) == PegLocation.SAFE
    with pytest.raises(InvalidPegPositionError):
        to_peg_position(73, total_slots=72)
