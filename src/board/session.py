"""
The GameSession is the single mutable source of truth for a game in this process.

Its methods form the action layer. They mutate the session directly (optimistically) and do not talk to the store:
pushing changes outward is the responsibility of the Service layer.
Actions that refer to players or pegs that do not exist are silently ignored.
"""

from dataclasses import dataclass
from typing import Optional, Self

from src.board.pegs import Peg
from src.board.players import (
    DEFAULT_PEGS_PER_PLAYER,
    DEFAULT_SLOTS_PER_LANE,
    PALETTE,
    Player,
    Rules,
    build_roster,
    make_player,
)
from src.core.config import MAX_PLAYERS, MIN_PLAYERS
from src.core.documents import GameDocument
from src.core.shared_types import GameStatus, PegLocation, PegPosition

DEFAULT_PLAYER_COUNT = 4


@dataclass(frozen=True)
class SelectedPeg:
    player_id: str
    peg_id: str


@dataclass(frozen=True)
class MoveResult:
    """What changed after a successful move (used by the Service layer to log/push the move)"""

    player_id: str
    peg_id: str
    new_position: PegPosition


@dataclass
class GameSession:
    players: list[Player]
    rules: Rules
    total_slots: int
    # local UI state only: never written to or overwritten by the store
    selected_peg: Optional[SelectedPeg] = None
    pegs_per_player: int = DEFAULT_PEGS_PER_PLAYER

    @classmethod
    def new_session(
        cls,
        player_count: int = DEFAULT_PLAYER_COUNT,
        slots_per_lane: int = DEFAULT_SLOTS_PER_LANE,
        pegs_per_player: int = DEFAULT_PEGS_PER_PLAYER,
        exact_home: bool = True,
    ) -> Self:
        """Local default: every seat taken by the computer and all pegs at home."""
        return cls(
            players=build_roster(player_count, slots_per_lane, pegs_per_player),
            rules=Rules(slots_per_lane=slots_per_lane, exact_home=exact_home),
            total_slots=player_count * slots_per_lane,
            pegs_per_player=pegs_per_player,
        )

    # --- Lookups ---
    def find_player(self, player_id: str) -> Optional[Player]:
        return next((player for player in self.players if player.id == player_id), None)

    def find_peg(self, player_id: str, peg_id: str) -> Optional[Peg]:
        player = self.find_player(player_id)
        if player is None:
            return None
        return player.peg(peg_id)

    @property
    def player_count(self) -> int:
        return len(self.players)

    # --- Actions ---
    def select_peg(self, player_id: str, peg_id: str) -> None:
        """Overwrite the selection. Selecting a peg that does not exist is allowed (moving it is then a no-op)."""
        self.selected_peg = SelectedPeg(player_id, peg_id)

    def move_selected_peg_to(self, target: PegPosition) -> Optional[MoveResult]:
        """
        Place the selected peg on `target`
        ----

        Returns None (and changes nothing) when nothing is selected, or when the selected player/peg cannot be found.
        In the latter case the selection is kept.
        A slot index outside 1..total_slots raises InvalidPegPositionError, and the selection is kept.
        Any other transition is accepted: the rules of the game are not checked here.
        """
        selection = self.selected_peg
        if selection is None:
            return None

        peg = self.find_peg(selection.player_id, selection.peg_id)
        if peg is None:
            return None

        peg.move_to(target, self.total_slots)
        self.selected_peg = None
        return MoveResult(selection.player_id, selection.peg_id, peg.position)

    def add_player(self) -> bool:
        """Seat the next player from the palette. Returns False if the table is already full."""
        if self.player_count >= min(MAX_PLAYERS, len(PALETTE)):
            return False
        self.players.append(
            make_player(self.player_count, self.rules.slots_per_lane, self.pegs_per_player)
        )
        self._update_total_slots()
        return True

    def remove_player(self) -> bool:
        """Remove the last seated player. Returns False if that would leave fewer than the minimum number of players."""
        if self.player_count <= MIN_PLAYERS:
            return False
        self.players.pop()
        self._update_total_slots()
        # the selection may have pointed at the removed player
        self.selected_peg = None
        return True

    def reset_game(self) -> None:
        """All pegs back home. Roster and rules stay as they are."""
        for player in self.players:
            for peg in player.pegs:
                peg.move_to(PegLocation.HOME)
        self.selected_peg = None

    # --- Conversion from/to the store ---
    def apply_snapshot(self, document: GameDocument) -> None:
        """Replace players, rules, and total slots with the remote state. The selection is left alone."""
        self.players = [Player.from_document(player) for player in document.players]
        self.rules = Rules.from_document(document.rules)
        self.total_slots = document.total_slots

    def to_document(
        self,
        participants: Optional[dict[str, bool]] = None,
        status: GameStatus = GameStatus.WAITING,
        max_players: Optional[int] = None,
    ) -> GameDocument:
        return GameDocument(
            rules=self.rules.to_document(),
            total_slots=self.total_slots,
            players=[player.to_document() for player in self.players],
            current_turn=0,
            status=status,
            participants=participants or {},
            max_players=max_players if max_players is not None else self.player_count,
        )

    def _update_total_slots(self) -> None:
        self.total_slots = self.player_count * self.rules.slots_per_lane
