"""
Game Errors

Exception taxonomy shared by the session and duel services.
Controllers map each family to an HTTP status code.
"""


class GameError(Exception):
    """Base class for all errors raised by the game services."""


class ValidationError(GameError):
    """Malformed guess or request payload. Never consumes a trial."""


class NotFoundError(GameError):
    """Unknown or expired session/game."""


class StateError(GameError):
    """Operation not allowed in the record's current state."""


class UnknownPlayerError(NotFoundError, StateError):
    """Player id does not belong to the requested duel."""


class DegenerateCandidateError(GameError):
    """No candidate word is consistent with the recorded feedback."""
