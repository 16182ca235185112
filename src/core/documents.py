"""
Wire format of the documents stored in the shared document store.

Both the Service layer (writing) and the subscription callbacks (reading snapshots) go through these models,
so a malformed snapshot coming from another client gets rejected at the boundary instead of deep in the domain layer.
Keys on the wire are camelCase, attribute names are snake_case.
"""

from typing import Any, Optional, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from src.core.shared_types import GameStatus, PegPosition, to_peg_position

AccountId = str


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> dict[str, Any]:
        """Plain JSON-compatible data, using the wire (camelCase) keys."""
        return self.model_dump(mode="json", by_alias=True)


class PegDocument(WireModel):
    peg_id: str
    pos: PegPosition

    @field_validator("pos", mode="before")
    @classmethod
    def validate_pos(cls, value: Any) -> PegPosition:
        return to_peg_position(value)


class PlayerDocument(WireModel):
    id: str
    name: str
    color: str
    start_index: int
    home_entry_index: int
    is_computer: bool = False
    account_id: Optional[AccountId] = None
    pegs: list[PegDocument]


class RulesDocument(WireModel):
    slots_per_lane: int = Field(gt=0)
    exact_home: bool = True


class GameDocument(WireModel):
    """Full document stored under games/{id}"""

    rules: RulesDocument
    total_slots: int
    players: list[PlayerDocument]
    current_turn: int = 0
    # epoch milliseconds once resolved by the store
    created_at: Optional[int] = None
    last_updated: Optional[int] = None
    status: GameStatus = GameStatus.WAITING
    participants: dict[AccountId, bool] = Field(default_factory=dict)
    max_players: int

    @classmethod
    def from_document(cls, value: Any) -> Self:
        return cls.model_validate(value)

    def has_participant(self, account_id: AccountId) -> bool:
        return self.participants.get(account_id, False)


class MoveLogEntry(WireModel):
    """Append-only audit record written to games/{id}/moves for every successful move."""

    player_id: str
    peg_id: str
    new_position: PegPosition
    timestamp: Optional[int] = None

    @field_validator("new_position", mode="before")
    @classmethod
    def validate_new_position(cls, value: Any) -> PegPosition:
        return to_peg_position(value)
