"""
Candidate filtering given game history.

In adaptive mode the answer is never fixed ahead of time: any word that would
have produced identical feedback for every guess so far is still a legal
answer. This module narrows a word pool to exactly those words.
"""

from typing import Iterable, List, Sequence

from ..models.game import GuessRecord
from .scoring import evaluate


def is_consistent(candidate: str, history: Iterable[GuessRecord]) -> bool:
    """True if `candidate` reproduces every recorded feedback in `history`."""
    for record in history:
        if evaluate(record.guess, candidate) != tuple(record.feedback):
            return False
    return True


def filter_candidates(pool: Iterable[str], *histories: Sequence[GuessRecord]) -> List[str]:
    """
    Keep only words that are consistent with every history given.

    Passing several histories (e.g. both duel players') requires a candidate
    to satisfy all of them simultaneously.

    Args:
        pool: Candidate words, in word-list order
        *histories: One or more sequences of GuessRecord

    Returns:
        List[str]: Consistent candidates, order preserved as in `pool`
    """
    return [
        word for word in pool
        if all(is_consistent(word, history) for history in histories)
    ]
