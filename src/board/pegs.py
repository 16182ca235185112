"""A single peg and where it is on the board"""

from dataclasses import dataclass
from typing import Optional, Self

from src.core.documents import PegDocument
from src.core.shared_types import PegLocation, PegPosition, to_peg_position


def peg_id_for(player_name: str, ordinal: int) -> str:
    """Initial of the owner + 1-based ordinal, e.g. 'R1' for the first peg of Red."""
    return f"{player_name[0].upper()}{ordinal}"


@dataclass
class Peg:
    peg_id: str
    position: PegPosition = PegLocation.HOME

    def __post_init__(self) -> None:
        self.position = to_peg_position(self.position)

    @property
    def is_on_track(self) -> bool:
        return not isinstance(self.position, PegLocation)

    def move_to(self, target: PegPosition, total_slots: Optional[int] = None) -> None:
        self.position = to_peg_position(target, total_slots)

    @classmethod
    def from_document(cls, document: PegDocument) -> Self:
        return cls(peg_id=document.peg_id, position=document.pos)

    def to_document(self) -> PegDocument:
        return PegDocument(peg_id=self.peg_id, pos=self.position)
