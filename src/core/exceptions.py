"""
Custom exceptions raised by the domain, persistence, and service layers.

Callers can catch PegTrackError to handle anything raised by this package.
"""


class PegTrackError(Exception):
    """Base class for all errors raised by pegtrack."""


# --- Domain layer ---
class GeometryError(PegTrackError, ValueError):
    """Track layout requested with arguments that cannot describe a track."""


class InvalidPegPositionError(PegTrackError, ValueError):
    """A peg position must be a 1-based slot index, 'HOME' or 'SAFE'."""


class InvalidPlayerCountError(PegTrackError, ValueError):
    """Number of players outside of the allowed range."""

    def __init__(self, player_count: int, minimum: int, maximum: int) -> None:
        self.player_count = player_count
        super().__init__(
            f"Player count {player_count} not in allowed range [{minimum}, {maximum}]."
        )


# --- Persistence layer ---
class StoreError(PegTrackError):
    """Reading from or writing to the document store failed."""


class StoreUnavailableError(StoreError):
    """No document store was configured / initialized."""


class GameNotFoundError(PegTrackError):
    """No game document exists under the requested ID."""

    def __init__(self, game_id: str) -> None:
        self.game_id = game_id
        super().__init__(f"Game with {game_id=} not found.")


# --- Configuration ---
class ConfigError(PegTrackError):
    """Settings could not be loaded."""
