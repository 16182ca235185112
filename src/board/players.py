"""Players, the rules they play by, and how a roster of players gets built."""

from dataclasses import dataclass, field
from typing import Optional, Self

from src.board.pegs import Peg, peg_id_for
from src.core.config import MAX_PLAYERS
from src.core.documents import PlayerDocument, RulesDocument
from src.core.exceptions import InvalidPlayerCountError

DEFAULT_SLOTS_PER_LANE = 18
DEFAULT_PEGS_PER_PLAYER = 5

# Distance from a player's start slot to the slot next to the entrance of their safe lane
SAFE_ENTRY_OFFSET = 3

# Seating order: player i always gets the i-th (name, color) pair
PALETTE: tuple[tuple[str, str], ...] = (
    ("Red", "#ef4444"),
    ("Blue", "#3b82f6"),
    ("Green", "#10b981"),
    ("Purple", "#a855f7"),
    ("Orange", "#f59e0b"),
    ("Pink", "#ec4899"),
    ("Teal", "#14b8a6"),
    ("Yellow", "#eab308"),
)


@dataclass
class Rules:
    slots_per_lane: int = DEFAULT_SLOTS_PER_LANE
    # NOTE: not enforced. Moves are not validated against the rules of the game
    exact_home: bool = True

    @classmethod
    def from_document(cls, document: RulesDocument) -> Self:
        return cls(slots_per_lane=document.slots_per_lane, exact_home=document.exact_home)

    def to_document(self) -> RulesDocument:
        return RulesDocument(slots_per_lane=self.slots_per_lane, exact_home=self.exact_home)


@dataclass
class Player:
    id: str
    name: str
    color: str
    start_index: int
    home_entry_index: int
    pegs: list[Peg] = field(default_factory=list)
    is_computer: bool = False
    account_id: Optional[str] = None

    @property
    def safe_entry_index(self) -> int:
        """Same slot as home_entry_index: the slot right before this player's safe lane."""
        return self.home_entry_index

    def peg(self, peg_id: str) -> Optional[Peg]:
        return next((peg for peg in self.pegs if peg.peg_id == peg_id), None)

    def claim(self, account_id: str, display_name: str) -> None:
        """A human takes over this seat."""
        self.name = display_name
        self.account_id = account_id
        self.is_computer = False

    def release(self) -> None:
        """Hand this seat (back) to the computer."""
        self.account_id = None
        self.is_computer = True

    @classmethod
    def from_document(cls, document: PlayerDocument) -> Self:
        return cls(
            id=document.id,
            name=document.name,
            color=document.color,
            start_index=document.start_index,
            home_entry_index=document.home_entry_index,
            pegs=[Peg.from_document(peg) for peg in document.pegs],
            is_computer=document.is_computer,
            account_id=document.account_id,
        )

    def to_document(self) -> PlayerDocument:
        return PlayerDocument(
            id=self.id,
            name=self.name,
            color=self.color,
            start_index=self.start_index,
            home_entry_index=self.home_entry_index,
            is_computer=self.is_computer,
            account_id=self.account_id,
            pegs=[peg.to_document() for peg in self.pegs],
        )


def make_player(
    ordinal: int,
    slots_per_lane: int = DEFAULT_SLOTS_PER_LANE,
    pegs_per_player: int = DEFAULT_PEGS_PER_PLAYER,
) -> Player:
    """Create the player seated at (0-based) `ordinal`, with all pegs at home."""
    if not 0 <= ordinal < MAX_PLAYERS:
        raise InvalidPlayerCountError(ordinal + 1, 1, MAX_PLAYERS)

    name, color = PALETTE[ordinal]
    start_index = ordinal * slots_per_lane + 1
    return Player(
        id=f"P{ordinal + 1}",
        name=name,
        color=color,
        start_index=start_index,
        home_entry_index=start_index + SAFE_ENTRY_OFFSET,
        pegs=[Peg(peg_id_for(name, p)) for p in range(1, pegs_per_player + 1)],
        is_computer=True,
    )


def build_roster(
    player_count: int,
    slots_per_lane: int = DEFAULT_SLOTS_PER_LANE,
    pegs_per_player: int = DEFAULT_PEGS_PER_PLAYER,
) -> list[Player]:
    """All computer controlled players, in seating order."""
    return [
        make_player(ordinal, slots_per_lane, pegs_per_player)
        for ordinal in range(player_count)
    ]
