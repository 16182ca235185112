"""Unit tests for src/services/lifecycle.py"""

import pytest

from src.core.config import Settings
from src.core.exceptions import InvalidPlayerCountError
from src.core.shared_types import ConnectionStatus, PegLocation
from src.db.local_storage import MemoryLocalStorage
from src.db.sql_store import SQLDocumentStore
from src.services.lifecycle import LifecycleManager
from src.services.sync_service import GameSyncService, Identity

ALICE = Identity(account_id="acc-alice", display_name="Alice")


@pytest.fixture
def sync(
    store: SQLDocumentStore, local_storage: MemoryLocalStorage, settings: Settings
) -> GameSyncService:
    return GameSyncService(store, local_storage, identity=ALICE, settings=settings)


@pytest.fixture
def lifecycle(sync: GameSyncService) -> LifecycleManager:
    return LifecycleManager(sync)


# --- Player count ---
def test_add_player(lifecycle: LifecycleManager, sync: GameSyncService) -> None:
    assert lifecycle.add_player()
    assert lifecycle.player_count == 5
    assert sync.players[-1].name == "Orange"
    assert sync.players[-1].color == "#f59e0b"
    assert sync.total_slots == 90


def test_remove_player_keeps_two(lifecycle: LifecycleManager) -> None:
    lifecycle.set_player_count(2)
    assert not lifecycle.remove_player()
    assert lifecycle.player_count == 2


@pytest.mark.parametrize("player_count", range(2, 9))
def test_set_player_count(
    lifecycle: LifecycleManager, sync: GameSyncService, player_count: int
) -> None:
    lifecycle.set_player_count(player_count)
    assert lifecycle.player_count == player_count
    assert sync.total_slots == player_count * 18
    assert [player.id for player in sync.players] == [f"P{i}" for i in range(1, player_count + 1)]


@pytest.mark.parametrize("player_count", [1, 9])
def test_set_player_count_out_of_range(lifecycle: LifecycleManager, player_count: int) -> None:
    with pytest.raises(InvalidPlayerCountError):
        lifecycle.set_player_count(player_count)
    assert lifecycle.player_count == 4


def test_roster_changes_are_pushed(
    lifecycle: LifecycleManager, sync: GameSyncService, store: SQLDocumentStore
) -> None:
    game_id = lifecycle.start_game()
    lifecycle.add_player()
    stored = store.read(f"games/{game_id}")
    assert len(stored["players"]) == 5
    assert stored["totalSlots"] == 90

    lifecycle.set_player_count(4)
    stored = store.read(f"games/{game_id}")
    assert len(stored["players"]) == 4
    assert stored["totalSlots"] == 72


# --- Starting a shared game ---
def test_start_game_uses_local_player_count(
    lifecycle: LifecycleManager, sync: GameSyncService
) -> None:
    lifecycle.set_player_count(6)
    game_id = lifecycle.start_game()
    assert game_id is not None
    assert sync.connection_status == ConnectionStatus.CONNECTED
    assert lifecycle.player_count == 6


def test_start_game_with_too_few_players(
    lifecycle: LifecycleManager, sync: GameSyncService
) -> None:
    lifecycle.set_player_count(3)
    with pytest.raises(InvalidPlayerCountError):
        lifecycle.start_game()
    assert sync.connection_status == ConnectionStatus.DISCONNECTED


def test_start_game_with_explicit_count(lifecycle: LifecycleManager) -> None:
    assert lifecycle.start_game(8) is not None
    assert lifecycle.player_count == 8


# --- Computer players ---
def test_computer_players(lifecycle: LifecycleManager) -> None:
    assert len(lifecycle.computer_players()) == 4
    lifecycle.start_game(4)
    assert [player.id for player in lifecycle.computer_players()] == ["P2", "P3", "P4"]


def test_substitute_computer(
    lifecycle: LifecycleManager, store: SQLDocumentStore
) -> None:
    game_id = lifecycle.start_game(4)
    assert lifecycle.substitute_computer("P1")
    assert len(lifecycle.computer_players()) == 4

    stored = store.read(f"games/{game_id}/players/0")
    assert stored["isComputer"] is True
    assert stored["accountId"] is None


def test_substitute_unknown_or_computer_player(lifecycle: LifecycleManager) -> None:
    assert not lifecycle.substitute_computer("P9")
    assert not lifecycle.substitute_computer("P2")


# --- Reset ---
def test_reset_game(
    lifecycle: LifecycleManager, sync: GameSyncService, store: SQLDocumentStore
) -> None:
    game_id = lifecycle.start_game(4)
    sync.select_peg("P1", "R1")
    sync.move_selected_peg_to(10)
    sync.select_peg("P2", "B1")

    lifecycle.reset_game()

    assert sync.selected_peg is None
    assert all(
        peg.position == PegLocation.HOME for player in sync.players for peg in player.pegs
    )
    assert store.read(f"games/{game_id}/players/0/pegs/0/pos") == "HOME"
    assert lifecycle.player_count == 4
