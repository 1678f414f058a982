"""
Game Data Models

Contains the feedback vocabulary and the single-player session record.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple


class LetterStatus(str, Enum):
    """Per-letter feedback symbol."""
    HIT = "HIT"
    PRESENT = "PRESENT"
    MISS = "MISS"


Feedback = Tuple[LetterStatus, ...]

# Priority used when folding feedback into the keyboard letter board
_STATUS_RANK = {LetterStatus.MISS: 0, LetterStatus.PRESENT: 1, LetterStatus.HIT: 2}


class SessionMode(str, Enum):
    """Single-player answer policy."""
    FIXED = "fixed"
    ADAPTIVE = "adaptive"


@dataclass(frozen=True)
class GuessRecord:
    """One evaluated guess. Immutable once created."""
    guess: str
    feedback: Feedback
    submitted_at: datetime


@dataclass
class Session:
    """Server-side single-player session record."""
    session_id: str
    mode: SessionMode
    max_trials: int
    created_at: datetime
    expires_at: datetime
    committed_answer: str = ""  # Empty until forced in adaptive mode
    history: List[GuessRecord] = field(default_factory=list)
    used_letters: Set[str] = field(default_factory=set)
    letter_status: Dict[str, LetterStatus] = field(default_factory=dict)
    completed: bool = False
    won: bool = False

    @property
    def remaining_trials(self) -> int:
        return max(self.max_trials - len(self.history), 0)

    @property
    def score(self) -> int:
        from ..engine.scoring import round_score
        return max((round_score(record.feedback) for record in self.history), default=0)

    def record_guess(self, record: GuessRecord) -> None:
        """Append a guess and fold its letters into the letter board."""
        self.history.append(record)
        for letter, status in zip(record.guess, record.feedback):
            self.used_letters.add(letter)
            current = self.letter_status.get(letter)
            if current is None or _STATUS_RANK[status] > _STATUS_RANK[current]:
                self.letter_status[letter] = status


@dataclass
class SessionStart:
    """Response for a newly started session."""
    session_id: str
    max_trials: int
    expires_at: datetime
    mode: str


@dataclass
class SessionView:
    """Session validation response. Only `valid` and `error_message` are set when invalid."""
    session_id: str
    valid: bool
    error_message: Optional[str] = None
    max_trials: int = 0
    remaining_trials: int = 0
    completed: bool = False
    won: bool = False
    guesses: List[str] = field(default_factory=list)
    feedback: List[List[str]] = field(default_factory=list)
    used_letters: List[str] = field(default_factory=list)
    letter_status: Dict[str, str] = field(default_factory=dict)
    score: int = 0
    expires_at: Optional[datetime] = None


@dataclass
class GuessOutcome:
    """Result of one single-player guess."""
    feedback: List[str]
    correct: bool
    completed: bool
    won: bool
    remaining_trials: int
    used_letters: List[str]
    score: int
    answer: Optional[str] = None  # Only revealed once the session is completed
