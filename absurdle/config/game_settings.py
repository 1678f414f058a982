"""
Game Configuration Constants Module

This module defines the word source and the helpers that validate and
describe it. The word list is supplied as a comma-separated string
(the WORDS setting) and is trimmed and lowercased at load.
"""

from typing import Dict, List, Final

DEFAULT_WORDS: Final[str] = "apple,girls,sunny"
"""
Fallback word source used when no WORDS setting is provided.
"""

WORD_LENGTH: Final[int] = 5


def parse_word_list(raw: str) -> List[str]:
    """
    Parses a comma-separated word list.

    Args:
        raw: Comma-separated words, e.g. "apple, Girls ,sunny"

    Returns:
        List[str]: Trimmed lowercase words in their original order, empty
        entries dropped
    """
    return [word.strip().lower() for word in (raw or "").split(",") if word.strip()]


def validate_word_list_integrity(words: List[str]) -> bool:
    """
    Validates the integrity and consistency of the word database.

    This function performs validation to ensure:
    1. Length validation: All words must be exactly 5 characters
    2. Character validation: Only alphabetic characters allowed
    3. Uniqueness validation: No duplicate entries
    4. Format validation: Consistent lowercase formatting

    Returns:
        bool: True if word list passes all validation checks

    Raises:
        ValueError: If any validation check fails with detailed error message
    """
    if not words:
        raise ValueError("Word list cannot be empty")

    # Validate each word meets game requirements
    for index, word in enumerate(words):
        if len(word) != WORD_LENGTH:
            raise ValueError(f"Word at index {index} '{word}' is not {WORD_LENGTH} characters long")

        if not word.isalpha():
            raise ValueError(f"Word at index {index} '{word}' contains non-alphabetic characters")

        if not word.islower():
            raise ValueError(f"Word at index {index} '{word}' is not in lowercase format")

    # Validate uniqueness (no duplicates)
    if len(words) != len(set(words)):
        duplicates = sorted({word for word in words if words.count(word) > 1})
        raise ValueError(f"Duplicate words found in word list: {duplicates}")

    return True


def load_word_list(raw: str) -> List[str]:
    """Parses and validates a word source in one step."""
    words = parse_word_list(raw or DEFAULT_WORDS)
    validate_word_list_integrity(words)
    return words


def get_word_statistics(words: List[str]) -> Dict:
    """
    Analyzes word list and returns statistical information for game balancing.

    Returns:
        dict: Statistical analysis including:
            - total_words: Number of words in database
            - avg_vowel_count: Average vowels per word
            - letter_frequency: Distribution of letters across all words
            - most_common_letters: Top five letters by frequency
    """
    if not words:
        return {"error": "Word list is empty"}

    vowels = set('aeiou')
    total_vowels = sum(len([char for char in word if char in vowels]) for word in words)

    # Calculate letter frequency distribution
    letter_frequency: Dict[str, int] = {}
    for word in words:
        for char in word:
            letter_frequency[char] = letter_frequency.get(char, 0) + 1

    return {
        "total_words": len(words),
        "avg_vowel_count": round(total_vowels / len(words), 2),
        "letter_frequency": letter_frequency,
        "most_common_letters": sorted(letter_frequency.items(), key=lambda x: x[1], reverse=True)[:5]
    }
