from .scoring import SOLVED, WORD_LENGTH, count_statuses, evaluate, is_solved, round_score
from .validation import normalize_guess
from .constraints import filter_candidates, is_consistent
from .selector import group_by_score, select_answer, select_shared_answer

__all__ = [
    "SOLVED", "WORD_LENGTH", "count_statuses", "evaluate", "is_solved", "round_score",
    "normalize_guess",
    "filter_candidates", "is_consistent",
    "group_by_score", "select_answer", "select_shared_answer",
]
