"""
Adversarial answer selection.

Given a guess and the words still consistent with prior feedback, pick the
answer that reveals the least information: fewest hits first, then fewest
presents. Ties go to the earliest word in pool order, so selection is
deterministic.
"""

from typing import Dict, List, Sequence, Tuple

from ..errors import DegenerateCandidateError
from ..models.game import Feedback
from .scoring import SOLVED, count_statuses, evaluate


def group_by_score(guess: str, pool: Sequence[str]) -> Dict[Tuple[int, int], List[str]]:
    """Groups candidates by the (hits, presents) pair they produce for `guess`."""
    groups: Dict[Tuple[int, int], List[str]] = {}
    for word in pool:
        key = count_statuses(evaluate(guess, word))
        groups.setdefault(key, []).append(word)
    return groups


def select_answer(guess: str, pool: Sequence[str]) -> Tuple[str, Feedback]:
    """
    Selects the hardest truthful answer for a single player's guess.

    The guessed word itself is removed from the pool first. If nothing is left
    the player is conceded a win: `(guess, all HIT)` is returned instead of
    raising, so a session always terminates.

    Args:
        guess: The current normalized guess
        pool: Candidates consistent with the session history, in word-list order

    Returns:
        Tuple of (selected answer, feedback of guess against that answer)
    """
    candidates = [word for word in pool if word != guess]

    if not candidates:
        return guess, SOLVED

    if len(candidates) == 1:
        forced = candidates[0]
        return forced, evaluate(guess, forced)

    groups = group_by_score(guess, candidates)
    # dict preserves insertion order, so each group keeps pool order
    hardest_group = groups[min(groups)]
    answer = hardest_group[0]
    return answer, evaluate(guess, answer)


def select_shared_answer(guesses: Sequence[str], pool: Sequence[str]) -> str:
    """
    Selects one answer that is hardest for several simultaneous guesses.

    Each candidate is scored by hits and presents summed over all guesses; the
    first candidate minimizing (total hits, total presents) wins.

    Raises:
        DegenerateCandidateError: If the pool is empty
    """
    if not pool:
        raise DegenerateCandidateError("No candidate word is consistent with both players' feedback")

    best_word = pool[0]
    best_key = None
    for word in pool:
        total_hits = 0
        total_presents = 0
        for guess in guesses:
            hits, presents = count_statuses(evaluate(guess, word))
            total_hits += hits
            total_presents += presents
        key = (total_hits, total_presents)
        if best_key is None or key < best_key:
            best_word, best_key = word, key
    return best_word
