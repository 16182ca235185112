"""Player count scaling, computer substitution, and resetting a game. Thin orchestration over the GameSyncService."""

import logging
from typing import Optional

from src.board.players import Player
from src.core.config import MAX_PLAYERS, MIN_PLAYERS
from src.core.exceptions import InvalidPlayerCountError
from src.services.sync_service import MAX_GAME_PLAYERS, MIN_GAME_PLAYERS, GameSyncService

logger = logging.getLogger(__name__)


class LifecycleManager:
    """Holds no state of its own: everything is read from / written to the sync service and its session."""

    def __init__(self, sync: GameSyncService) -> None:
        self.sync = sync

    @property
    def player_count(self) -> int:
        return self.sync.session.player_count

    # --- Player count ---
    def add_player(self) -> bool:
        added = self.sync.session.add_player()
        if added:
            self.sync.push_players()
        return added

    def remove_player(self) -> bool:
        removed = self.sync.session.remove_player()
        if removed:
            self.sync.push_players()
        return removed

    def set_player_count(self, player_count: int) -> None:
        """Scale the roster up or down (seats are added / removed at the end)."""
        if not MIN_PLAYERS <= player_count <= MAX_PLAYERS:
            raise InvalidPlayerCountError(player_count, MIN_PLAYERS, MAX_PLAYERS)

        session = self.sync.session
        changed = False
        while session.player_count < player_count:
            changed |= session.add_player()
        while session.player_count > player_count:
            changed |= session.remove_player()
        if changed:
            self.sync.push_players()

    def start_game(self, player_count: Optional[int] = None) -> Optional[str]:
        """Create a shared game for the chosen number of players (defaults to the current local roster size)."""
        player_count = player_count if player_count is not None else self.player_count
        if not MIN_GAME_PLAYERS <= player_count <= MAX_GAME_PLAYERS:
            raise InvalidPlayerCountError(player_count, MIN_GAME_PLAYERS, MAX_GAME_PLAYERS)
        return self.sync.create_game(player_count)

    # --- Computer players ---
    def computer_players(self) -> list[Player]:
        return [player for player in self.sync.players if player.is_computer]

    def substitute_computer(self, player_id: str) -> bool:
        """Let the computer take over a seat (e.g. for a player that dropped out). Unknown players are ignored."""
        player = self.sync.session.find_player(player_id)
        if player is None or player.is_computer:
            return False
        player.release()
        logger.info("Computer took over seat %s", player_id)
        self.sync.push_players()
        return True

    # --- Reset ---
    def reset_game(self) -> None:
        self.sync.session.reset_game()
        self.sync.push_players()
