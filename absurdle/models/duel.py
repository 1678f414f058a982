"""
Duel Data Models

Contains the two-player duel record and its players.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from .game import GuessRecord


class DuelStatus(str, Enum):
    """Duel lifecycle status."""
    WAITING = "Waiting"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"


@dataclass
class Player:
    """A duel participant. Owned exclusively by its DuelGame."""
    player_id: str
    display_name: str
    transport_ref: str = ""  # Socket.IO sid used for targeted pushes
    finished: bool = False
    best_score: int = 0
    best_round: int = 0
    guess_count: int = 0
    history: List[GuessRecord] = field(default_factory=list)
    pending_guess: Optional[str] = None
    has_submitted_this_round: bool = False

    def clear_pending(self) -> None:
        self.pending_guess = None
        self.has_submitted_this_round = False

    def public_view(self) -> dict:
        """Player fields safe to send to either client (no pending guess, no transport)."""
        return {
            "player_id": self.player_id,
            "player_name": self.display_name,
            "finished": self.finished,
            "score": self.best_score,
            "best_round": self.best_round,
            "guess_count": self.guess_count,
            "has_submitted_this_round": self.has_submitted_this_round,
            "guesses": [record.guess for record in self.history],
            "feedback": [[status.value for status in record.feedback] for record in self.history],
        }


@dataclass
class DuelGame:
    """Server-side duel record."""
    game_id: str
    max_trials: int
    created_at: datetime
    status: DuelStatus = DuelStatus.WAITING
    shared_answer: str = ""  # Empty until the first round is resolved
    players: List[Player] = field(default_factory=list)
    winner_id: Optional[str] = None

    def find_player(self, player_id: str) -> Optional[Player]:
        for player in self.players:
            if player.player_id == player_id:
                return player
        return None

    def opponent_of(self, player_id: str) -> Optional[Player]:
        for player in self.players:
            if player.player_id != player_id:
                return player
        return None

    def sanitized(self) -> dict:
        """Game state without the shared answer."""
        return {
            "game_id": self.game_id,
            "status": self.status.value,
            "max_trials": self.max_trials,
            "created_at": self.created_at.isoformat(),
            "winner_id": self.winner_id,
            "players": [player.public_view() for player in self.players],
        }


@dataclass
class DuelJoinResult:
    """Response for a matchmaking request."""
    game_id: str
    player_id: str
    player_name: str
    waiting: bool
    state: dict


@dataclass
class DuelGuessOutcome:
    """Result of a duel guess submission for the submitting player."""
    waiting_for_opponent: bool
    feedback: List[str] = field(default_factory=list)
    correct: bool = False
    game_completed_for_me: bool = False
    won: bool = False
    remaining_trials: int = 0
    score: int = 0
    opponent_guess: Optional[str] = None
    opponent_feedback: List[str] = field(default_factory=list)
    winner_id: Optional[str] = None
