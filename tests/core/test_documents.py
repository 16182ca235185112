"""Unit tests for src/core/documents.py"""

import pytest
from pydantic import ValidationError

from src.core.documents import GameDocument, MoveLogEntry, PegDocument
from src.core.shared_types import GameStatus, PegLocation

RAW_GAME = {
    "rules": {"slotsPerLane": 18, "exactHome": True},
    "totalSlots": 72,
    "players": [
        {
            "id": "P1",
            "name": "Red",
            "color": "#ef4444",
            "startIndex": 1,
            "homeEntryIndex": 4,
            "isComputer": False,
            "accountId": "acc-1",
            "pegs": [{"pegId": "R1", "pos": 7}, {"pegId": "R2", "pos": "HOME"}],
        }
    ],
    "currentTurn": 0,
    "createdAt": 1_700_000_000_000,
    "lastUpdated": 1_700_000_000_000,
    "status": "waiting",
    "participants": {"acc-1": True},
    "maxPlayers": 4,
    "moves": {"abc": {"playerId": "P1", "pegId": "R1", "newPosition": 7}},
}


def test_parse_game_document() -> None:
    """camelCase keys on the wire, extra subtrees (like the move log) are ignored"""
    document = GameDocument.from_document(RAW_GAME)
    assert document.total_slots == 72
    assert document.rules.slots_per_lane == 18
    assert document.status == GameStatus.WAITING
    assert document.players[0].account_id == "acc-1"
    assert document.players[0].pegs[0].pos == 7
    assert document.players[0].pegs[1].pos == PegLocation.HOME
    assert document.has_participant("acc-1")
    assert not document.has_participant("someone else")


def test_to_document_uses_wire_keys() -> None:
    document = GameDocument.from_document(RAW_GAME).to_document()
    assert document["totalSlots"] == 72
    assert document["maxPlayers"] == 4
    assert document["players"][0]["pegs"][1] == {"pegId": "R2", "pos": "HOME"}
    assert "moves" not in document


def test_malformed_peg_position_is_rejected() -> None:
    with pytest.raises(ValidationError):
        PegDocument.model_validate({"pegId": "R1", "pos": "BASE"})

    with pytest.raises(ValidationError):
        PegDocument.model_validate({"pegId": "R1", "pos": 0})


def test_missing_players_is_rejected() -> None:
    raw = {key: value for key, value in RAW_GAME.items() if key != "players"}
    with pytest.raises(ValidationError):
        GameDocument.from_document(raw)


def test_move_log_entry() -> None:
    entry = MoveLogEntry(player_id="P2", peg_id="B3", new_position="SAFE")
    assert entry.to_document() == {
        "playerId": "P2",
        "pegId": "B3",
        "newPosition": "SAFE",
        "timestamp": None,
    }
