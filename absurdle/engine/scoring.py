"""
Feedback Evaluation

Implements the Wordle letter evaluation algorithm and the per-round score
derived from it.
"""

from typing import List, Optional, Tuple

from ..models.game import Feedback, LetterStatus

WORD_LENGTH = 5

SOLVED: Feedback = (LetterStatus.HIT,) * WORD_LENGTH


def evaluate(guess: str, answer: str) -> Feedback:
    """
    Evaluates a guess against an answer.

    Both words must already be normalized 5-letter lowercase words.

    Pass 1 marks exact position matches (HIT) and consumes both letters.
    Pass 2 scans the unconsumed answer letters left to right for each
    remaining guess letter; the first unconsumed occurrence is marked
    PRESENT and consumed, otherwise the letter is a MISS. Each answer letter
    is therefore consumed at most once.

    Args:
        guess: The guessed word
        answer: The word the guess is scored against

    Returns:
        Feedback: Tuple of 5 LetterStatus values aligned with the guess
    """
    result: List[Optional[LetterStatus]] = [None] * WORD_LENGTH

    # Working copy of the answer to track letter consumption
    answer_chars: List[Optional[str]] = list(answer)

    # First pass: exact position matches
    for i in range(WORD_LENGTH):
        if guess[i] == answer_chars[i]:
            result[i] = LetterStatus.HIT
            answer_chars[i] = None

    # Second pass: present letters and misses
    for i in range(WORD_LENGTH):
        if result[i] is not None:
            continue

        letter = guess[i]
        if letter in answer_chars:
            result[i] = LetterStatus.PRESENT
            answer_chars[answer_chars.index(letter)] = None
        else:
            result[i] = LetterStatus.MISS

    return tuple(result)  # type: ignore[return-value]


def count_statuses(feedback: Feedback) -> Tuple[int, int]:
    """Returns (hits, presents) for a feedback sequence."""
    hits = sum(1 for status in feedback if status == LetterStatus.HIT)
    presents = sum(1 for status in feedback if status == LetterStatus.PRESENT)
    return hits, presents


def round_score(feedback: Feedback) -> int:
    """Hit = 2 points, present = 1 point, miss = 0."""
    hits, presents = count_statuses(feedback)
    return 2 * hits + presents


def is_solved(feedback: Feedback) -> bool:
    return len(feedback) == WORD_LENGTH and all(status == LetterStatus.HIT for status in feedback)
