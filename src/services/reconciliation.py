"""How inbound remote snapshots get merged into the local GameSession."""

from typing import Protocol

from src.board.session import GameSession
from src.core.documents import GameDocument


class ReconciliationStrategy(Protocol):
    def reconcile(self, session: GameSession, snapshot: GameDocument) -> None:
        """Bring the local session in line with a snapshot received from the store."""
        ...


class LastWriterWins:
    """
    The remote snapshot simply replaces players, rules, and total slots (there is no field-level merge).

    A local move that has not been pushed yet gets overwritten by an older snapshot, and a later push overwrites
    whatever another client wrote in the meantime. Conflicts are not detected.
    """

    def reconcile(self, session: GameSession, snapshot: GameDocument) -> None:
        session.apply_snapshot(snapshot)
