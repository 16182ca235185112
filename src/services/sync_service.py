"""
Synchronization of the local GameSession with the shared document store.

Local actions are applied to the session right away (optimistically), then pushed to the store.
The store fans every change out to all subscribers (this client included), and each inbound snapshot is handed to the
ReconciliationStrategy. The local peg selection is never pushed nor overwritten.
"""

import logging
from copy import deepcopy
from dataclasses import dataclass
from typing import Any, Optional

from pydantic import ValidationError

from src.board.players import Player, Rules
from src.board.session import GameSession, MoveResult, SelectedPeg
from src.core.config import Settings, get_settings
from src.core.documents import GameDocument, MoveLogEntry
from src.core.exceptions import (
    GameNotFoundError,
    InvalidPlayerCountError,
    StoreError,
    StoreUnavailableError,
)
from src.core.shared_types import ConnectionStatus, GameStatus, PegPosition
from src.db.local_storage import LocalStorage
from src.db.store import DocumentStore, Unsubscribe, join_path, split_path
from src.services.reconciliation import LastWriterWins, ReconciliationStrategy

logger = logging.getLogger(__name__)

GAMES_COLLECTION = "games"
MOVES_COLLECTION = "moves"

# Shared games need more players than a local table
MIN_GAME_PLAYERS = 4
MAX_GAME_PLAYERS = 8


@dataclass(frozen=True)
class Identity:
    """The (already authenticated) account using this client."""

    account_id: str
    display_name: str


@dataclass(frozen=True)
class GameSummary:
    game_id: str
    document: GameDocument


class GameSyncService:
    """
    Owns the local GameSession, the ID of the shared game, and the (single) live subscription to it.
    ----

    Connection status: disconnected -> connecting -> connected. Any store failure while connecting leads to error.
    A failed create/join mirrors no game afterwards, and restores the local session from before the attempt.
    Only leave_game(), dispose() and a failed reconnect in init() go back to disconnected.
    """

    def __init__(
        self,
        store: Optional[DocumentStore],
        local_storage: LocalStorage,
        identity: Optional[Identity] = None,
        strategy: Optional[ReconciliationStrategy] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.store = store
        self.local_storage = local_storage
        self.identity = identity
        self.strategy = strategy or LastWriterWins()
        self.settings = settings or get_settings()

        self.session = self._default_session()
        self.game_id: Optional[str] = None
        self.connection_status = ConnectionStatus.DISCONNECTED
        self._unsubscribe: Optional[Unsubscribe] = None

    # --- Read-only view on the session ---
    @property
    def players(self) -> list[Player]:
        return self.session.players

    @property
    def rules(self) -> Rules:
        return self.session.rules

    @property
    def total_slots(self) -> int:
        return self.session.total_slots

    @property
    def selected_peg(self) -> Optional[SelectedPeg]:
        return self.session.selected_peg

    @property
    def is_connected(self) -> bool:
        return self.connection_status == ConnectionStatus.CONNECTED

    # --- Lifecycle ---
    def init(self) -> bool:
        """Reconnect to the game this client joined last (if any). A game that cannot be joined anymore is forgotten."""
        if self.game_id is not None or self.is_connected:
            return False

        remembered = self.local_storage.get_item(self.settings.last_game_key)
        if not remembered:
            return False

        try:
            self.join_game(remembered)
        except (GameNotFoundError, StoreError) as exc:
            logger.warning("Could not reconnect to game %s, forgetting it: %s", remembered, exc)
            self._forget_game_id()
            self.connection_status = ConnectionStatus.DISCONNECTED
            return False
        logger.info("Reconnected to game %s", remembered)
        return True

    def dispose(self) -> None:
        """Release the subscription. The remembered game ID is kept, so init() can reconnect later."""
        self._release_subscription()
        self.game_id = None
        self.connection_status = ConnectionStatus.DISCONNECTED

    # --- Shared game handling ---
    def create_game(self, player_count: int) -> Optional[str]:
        """
        Create a new shared game with the caller in the first seat and the computer in all other seats.
        ----

        Returns the new game ID, or None if the store is not available / fails.
        """
        if not MIN_GAME_PLAYERS <= player_count <= MAX_GAME_PLAYERS:
            raise InvalidPlayerCountError(player_count, MIN_GAME_PLAYERS, MAX_GAME_PLAYERS)

        if self.store is None:
            logger.error("Cannot create a game: no document store available.")
            self.connection_status = ConnectionStatus.ERROR
            return None

        self._warn_if_subscribed()
        previous_session = deepcopy(self.session)
        self.connection_status = ConnectionStatus.CONNECTING
        try:
            game_path = self.store.create(GAMES_COLLECTION)
            game_id = split_path(game_path)[-1]
            self.store.write(game_path, self._initial_document(player_count))
            self.local_storage.set_item(self.settings.last_game_key, game_id)
            self.game_id = game_id
            self._subscribe(game_path)
        except StoreError:
            logger.exception("Failed to create a new game.")
            self._abandon_connection(previous_session)
            return None

        self.connection_status = ConnectionStatus.CONNECTED
        logger.info("Created game %s for %d players", game_id, player_count)
        return game_id

    def join_game(self, game_id: str) -> None:
        """
        Mirror an existing shared game, and take over the first seat still played by the computer.
        ----

        Raises GameNotFoundError (without touching the connection status) if the game does not exist.
        NOTE: two clients joining at the same time may both claim the same seat. Nothing arbitrates between them.
        """
        if self.store is None:
            self.connection_status = ConnectionStatus.ERROR
            raise StoreUnavailableError("Cannot join a game: no document store available.")

        game_path = join_path(GAMES_COLLECTION, game_id)
        try:
            existing = self.store.read(game_path)
        except StoreError:
            self.connection_status = ConnectionStatus.ERROR
            raise
        if existing is None:
            raise GameNotFoundError(game_id)

        self._warn_if_subscribed()
        previous_session = deepcopy(self.session)
        self.connection_status = ConnectionStatus.CONNECTING
        try:
            self.game_id = game_id
            self._subscribe(game_path)
            if self.identity is not None:
                self.store.write(
                    join_path(game_path, "participants", self.identity.account_id), True
                )
                self._claim_seat(game_path, self.identity)
            self.local_storage.set_item(self.settings.last_game_key, game_id)
        except StoreError:
            logger.exception("Failed to join game %s", game_id)
            self._abandon_connection(previous_session)
            raise

        self.connection_status = ConnectionStatus.CONNECTED
        logger.info("Joined game %s", game_id)

    def leave_game(self) -> None:
        """Stop mirroring the shared game and go back to a local game. The store is not told that we left."""
        left = self.game_id
        self._release_subscription()
        self._forget_game_id()
        self.session = self._default_session()
        self.game_id = None
        self.connection_status = ConnectionStatus.DISCONNECTED
        if left is not None:
            logger.info("Left game %s", left)

    def get_user_games(self) -> list[GameSummary]:
        """All games the caller ever participated in, newest first."""
        if self.identity is None:
            return []
        if self.store is None:
            raise StoreUnavailableError("Cannot list games: no document store available.")

        games: dict[str, Any] = self.store.read(GAMES_COLLECTION) or {}
        summaries: list[GameSummary] = []
        for game_id, raw in games.items():
            try:
                document = GameDocument.from_document(raw)
            except ValidationError:
                logger.warning("Skipping malformed game document %s", game_id)
                continue
            if document.has_participant(self.identity.account_id):
                summaries.append(GameSummary(game_id, document))

        summaries.sort(key=lambda summary: summary.document.created_at or 0, reverse=True)
        return summaries

    # --- Actions (optimistic) ---
    def select_peg(self, player_id: str, peg_id: str) -> None:
        self.session.select_peg(player_id, peg_id)

    def move_selected_peg_to(self, target: PegPosition) -> Optional[MoveResult]:
        """
        Move the selected peg locally, then push the new state and a move log entry.

        The local move is kept when pushing fails: local and remote state then differ until the next snapshot arrives.
        """
        result = self.session.move_selected_peg_to(target)
        if result is None or not self.is_connected:
            return result

        try:
            self._write_players()
            self._append_move(result)
        except StoreError:
            logger.error(
                "Failed to sync move of %s/%s in game %s",
                result.player_id,
                result.peg_id,
                self.game_id,
                exc_info=True,
            )
        return result

    def push_players(self) -> bool:
        """Push the full roster (e.g. after changing the players). Failures are logged, not raised."""
        if not self.is_connected:
            return False
        try:
            self._write_players()
        except StoreError:
            logger.error("Failed to sync players of game %s", self.game_id, exc_info=True)
            return False
        return True

    # -- Internal helpers --
    def _default_session(self) -> GameSession:
        return GameSession.new_session(
            player_count=self.settings.default_player_count,
            slots_per_lane=self.settings.slots_per_lane,
            pegs_per_player=self.settings.pegs_per_player,
            exact_home=self.settings.exact_home,
        )

    def _require_store(self) -> DocumentStore:
        if self.store is None:
            raise StoreUnavailableError("No document store available.")
        return self.store

    def _game_path(self) -> str:
        if self.game_id is None:
            raise StoreError("Not connected to a game.")
        return join_path(GAMES_COLLECTION, self.game_id)

    def _initial_document(self, player_count: int) -> dict[str, Any]:
        store = self._require_store()
        session = GameSession.new_session(
            player_count=player_count,
            slots_per_lane=self.settings.slots_per_lane,
            pegs_per_player=self.settings.pegs_per_player,
            exact_home=self.settings.exact_home,
        )
        participants: dict[str, bool] = {}
        if self.identity is not None:
            session.players[0].claim(self.identity.account_id, self.identity.display_name)
            participants[self.identity.account_id] = True

        document = session.to_document(
            participants=participants,
            status=GameStatus.WAITING,
            max_players=player_count,
        ).to_document()
        document["createdAt"] = store.server_timestamp()
        document["lastUpdated"] = store.server_timestamp()
        return document

    def _claim_seat(self, game_path: str, identity: Identity) -> None:
        """Take the first computer-controlled seat, unless the caller already has a seat in this game."""
        store = self._require_store()
        try:
            document = GameDocument.from_document(store.read(game_path))
        except ValidationError as exc:
            raise StoreError(f"Malformed game document at {game_path!r}") from exc

        players = [Player.from_document(player) for player in document.players]
        if any(player.account_id == identity.account_id for player in players):
            return

        seat = next((i for i, player in enumerate(players) if player.is_computer), None)
        if seat is None:
            logger.info("No free seat in %s, joining without a seat", game_path)
            return

        player = players[seat]
        player.claim(identity.account_id, identity.display_name)
        store.write(join_path(game_path, "players", str(seat)), player.to_document().to_document())
        logger.info("Claimed seat %s in %s", player.id, game_path)

    def _write_players(self) -> None:
        store = self._require_store()
        game_path = self._game_path()
        # capture before writing: every write triggers a snapshot that replaces the session's players
        players = [player.to_document().to_document() for player in self.session.players]
        total_slots = self.session.total_slots
        store.write(join_path(game_path, "players"), players)
        store.write(join_path(game_path, "totalSlots"), total_slots)
        store.write(join_path(game_path, "lastUpdated"), store.server_timestamp())

    def _append_move(self, result: MoveResult) -> None:
        store = self._require_store()
        entry_path = store.create(join_path(self._game_path(), MOVES_COLLECTION))
        entry = MoveLogEntry(
            player_id=result.player_id,
            peg_id=result.peg_id,
            new_position=result.new_position,
        ).to_document()
        entry["timestamp"] = store.server_timestamp()
        store.write(entry_path, entry)

    def _subscribe(self, game_path: str) -> None:
        self._release_subscription()
        self._unsubscribe = self._require_store().subscribe(
            game_path, self._on_snapshot, self._on_subscription_error
        )

    def _on_snapshot(self, value: Any) -> None:
        if value is None:
            logger.warning("Game %s does not exist (anymore), ignoring snapshot", self.game_id)
            return
        try:
            snapshot = GameDocument.from_document(value)
        except ValidationError as exc:
            logger.warning("Ignoring malformed snapshot of game %s: %s", self.game_id, exc)
            return
        self.strategy.reconcile(self.session, snapshot)

    def _on_subscription_error(self, exc: Exception) -> None:
        logger.error("Subscription to game %s failed: %s", self.game_id, exc)
        self.connection_status = ConnectionStatus.ERROR

    def _abandon_connection(self, previous_session: GameSession) -> None:
        # snapshots of the failed game may already have replaced the roster
        self._release_subscription()
        self.game_id = None
        self.session = previous_session
        self.connection_status = ConnectionStatus.ERROR

    def _release_subscription(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _warn_if_subscribed(self) -> None:
        if self._unsubscribe is not None:
            logger.warning(
                "Opening a new subscription while still subscribed to game %s. Call leave_game() first.",
                self.game_id,
            )

    def _forget_game_id(self) -> None:
        try:
            self.local_storage.remove_item(self.settings.last_game_key)
        except StoreError:
            logger.error("Failed to forget the last joined game", exc_info=True)
