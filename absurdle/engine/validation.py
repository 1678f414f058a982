"""
Guess validation.

A guess is acceptable iff, after trimming and lowercasing, it is a string of
exactly five alphabetic characters. Dictionary membership is not required.
"""

from typing import Any

from ..errors import ValidationError
from .scoring import WORD_LENGTH


def normalize_guess(raw: Any) -> str:
    """
    Normalizes a raw guess and validates its format.

    Raises:
        ValidationError: If the guess is not exactly 5 alphabetic characters
    """
    if not raw or not isinstance(raw, str):
        raise ValidationError("Guess must be a valid string")

    guess = raw.strip().lower()

    if len(guess) != WORD_LENGTH:
        raise ValidationError(f"Guess must be exactly {WORD_LENGTH} letters")

    if not guess.isalpha():
        raise ValidationError("Guess must contain only alphabetic characters")

    return guess
