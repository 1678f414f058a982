"""
Game Service

Contains the single-player session logic for fixed-answer Wordle and the
adaptive ("cheating") Absurdle mode.
"""

import random
import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from ..engine import evaluate, filter_candidates, is_solved, normalize_guess, select_answer
from ..errors import NotFoundError, StateError, ValidationError
from ..models.game import (
    GuessOutcome, GuessRecord, Session, SessionMode, SessionStart, SessionView
)
from ..utils.game_logger import game_logger
from .store import KeyedLock, TTLStore

SESSION_KEY_PREFIX = "session:"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GameService:
    """
    Core single-player service.

    This class handles:
    - Session creation in fixed or adaptive mode
    - Guess validation and evaluation
    - Trial counting, win/loss detection and best-guess scoring
    - Session state snapshots that never expose an unrevealed answer
    """

    def __init__(self,
                 store: TTLStore,
                 word_list: List[str],
                 max_trials: int = 6,
                 session_timeout_minutes: int = 30,
                 rng: Optional[random.Random] = None,
                 now: Callable[[], datetime] = _utcnow):
        self.store = store
        self.word_list = list(word_list)
        self.max_trials = max_trials
        self.session_timeout = timedelta(minutes=session_timeout_minutes)
        self.rng = rng or random.Random()
        self.now = now
        self._locks = KeyedLock()
        self.store.add_expiry_listener(self._locks.discard)

    @staticmethod
    def _key(session_id: str) -> str:
        return f"{SESSION_KEY_PREFIX}{session_id}"

    def _load(self, session_id: str) -> Session:
        session = self.store.get(self._key(session_id)) if session_id else None
        if session is None:
            # No record behind this key, so no lock to keep
            self._locks.discard(self._key(session_id))
            raise NotFoundError("Session not found or expired")
        return session

    def _save(self, session: Session) -> None:
        ttl = (session.expires_at - self.now()).total_seconds()
        self.store.set(self._key(session.session_id), session, max(ttl, 0))

    def start_session(self, mode: str = SessionMode.ADAPTIVE.value) -> SessionStart:
        """
        Creates a new session.

        Args:
            mode: "adaptive" (answer chosen adversarially as the game goes) or
                  "fixed" (random answer drawn up front)

        Returns:
            SessionStart with the new session id, trial budget and expiry
        """
        try:
            session_mode = SessionMode(mode)
        except ValueError:
            raise ValidationError('Invalid game mode. Must be "adaptive" or "fixed"') from None

        created_at = self.now()
        session = Session(
            session_id=str(uuid.uuid4()),
            mode=session_mode,
            max_trials=self.max_trials,
            created_at=created_at,
            expires_at=created_at + self.session_timeout,
            # Fixed mode keeps this secret; adaptive mode fills it in per guess
            committed_answer=self.rng.choice(self.word_list) if session_mode == SessionMode.FIXED else "",
        )
        self._save(session)

        game_logger.log_game_event(session.session_id, 'session_created', mode=session_mode.value,
                                   max_trials=session.max_trials)

        return SessionStart(
            session_id=session.session_id,
            max_trials=session.max_trials,
            expires_at=session.expires_at,
            mode=session_mode.value,
        )

    def validate_session(self, session_id: str) -> SessionView:
        """
        Returns the resumable state of a session.

        Missing, expired and already-completed sessions all come back with
        valid=False and an error message rather than raising.
        """
        if not session_id:
            return SessionView(session_id=session_id, valid=False, error_message="Session ID is required")

        session = self.store.get(self._key(session_id))
        if session is None:
            game_logger.logger.warning(f"Session validation failed: {session_id} not found or expired")
            return SessionView(session_id=session_id, valid=False, error_message="Session not found or expired")

        if session.completed:
            return SessionView(session_id=session_id, valid=False,
                               error_message="Game session has already been completed")

        return SessionView(
            session_id=session.session_id,
            valid=True,
            max_trials=session.max_trials,
            remaining_trials=session.remaining_trials,
            completed=session.completed,
            won=session.won,
            guesses=[record.guess for record in session.history],
            feedback=[[status.value for status in record.feedback] for record in session.history],
            used_letters=sorted(session.used_letters),
            letter_status={letter: status.value for letter, status in session.letter_status.items()},
            score=session.score,
            expires_at=session.expires_at,
        )

    def submit_guess(self, session_id: str, raw_guess: str) -> GuessOutcome:
        """
        Processes a guess and updates the session.

        Args:
            session_id: Session identifier
            raw_guess: The 5-letter word guess, any case

        Returns:
            GuessOutcome for this guess

        Raises:
            ValidationError: Malformed guess (no trial consumed)
            NotFoundError: Unknown or expired session
            StateError: Session already completed
        """
        guess = normalize_guess(raw_guess)
        key = self._key(session_id)

        with self._locks.hold(key):
            session = self._load(session_id)

            if session.completed:
                raise StateError("Game session is already completed")

            if session.mode == SessionMode.ADAPTIVE:
                pool = filter_candidates(self.word_list, session.history)
                answer, feedback = select_answer(guess, pool)
                session.committed_answer = answer
                game_logger.logger.info(
                    f"Adaptive session {session_id}: {len(pool)} candidates, selected '{answer}'"
                )
            else:
                feedback = evaluate(guess, session.committed_answer)

            is_correct = guess == session.committed_answer or is_solved(feedback)

            session.record_guess(GuessRecord(guess=guess, feedback=feedback, submitted_at=self.now()))

            # Check win / lose condition
            if is_correct:
                session.completed = True
                session.won = True
            elif len(session.history) >= session.max_trials:
                session.completed = True
                session.won = False

            self._save(session)

        if session.completed:
            self._locks.discard(key)
            game_logger.log_game_event(
                session_id, 'session_won' if session.won else 'session_lost',
                rounds_used=len(session.history), score=session.score
            )

        return GuessOutcome(
            feedback=[status.value for status in feedback],
            correct=is_correct,
            completed=session.completed,
            won=session.won,
            remaining_trials=session.remaining_trials,
            used_letters=sorted(session.used_letters),
            score=session.score,
            answer=session.committed_answer if session.completed else None,
        )

    def active_sessions_count(self) -> int:
        return self.store.count(SESSION_KEY_PREFIX)


# Global service instance
_game_service = None


def get_game_service() -> Optional[GameService]:
    """Get the global game service instance."""
    return _game_service


def initialize_game_service(store: TTLStore, word_list: List[str], max_trials: int = 6,
                            session_timeout_minutes: int = 30) -> GameService:
    """Initialize the global game service instance."""
    global _game_service
    _game_service = GameService(store, word_list, max_trials, session_timeout_minutes)
    return _game_service
