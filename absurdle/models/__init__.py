"""
Data Models Package

Contains all data models and schemas used throughout the application.
"""

from .game import (
    Feedback, GuessOutcome, GuessRecord, LetterStatus, Session, SessionMode, SessionStart, SessionView
)
from .duel import DuelGame, DuelGuessOutcome, DuelJoinResult, DuelStatus, Player

__all__ = [
    'Feedback', 'GuessOutcome', 'GuessRecord', 'LetterStatus', 'Session', 'SessionMode',
    'SessionStart', 'SessionView',
    'DuelGame', 'DuelGuessOutcome', 'DuelJoinResult', 'DuelStatus', 'Player'
]
