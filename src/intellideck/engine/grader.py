"""
Answer grading for Write and Test modes.

Write mode forgives small typos: an answer is accepted when its edit distance
to the term is within a threshold that grows with the term's length.
Test mode compares exactly (after trimming and lowercasing).
"""
from typing import List, Sequence


class EmptyAnswerError(ValueError):
    """Raised when a blank answer is submitted for grading"""


SHORT_TERM_MAX_LENGTH = 7
SHORT_TERM_THRESHOLD = 1
LONG_TERM_THRESHOLD = 2


def normalize(text: str) -> str:
    return text.strip().lower()


def require_answer(answer: str) -> str:
    """Reject empty or whitespace-only answers before they reach a grader"""
    if answer is None or not answer.strip():
        raise EmptyAnswerError("Please type an answer before submitting.")
    return answer


def levenshtein_distance(a: str, b: str, allow_transposition: bool = False) -> int:
    """
    Minimum number of single-character insertions, deletions and
    substitutions turning a into b.

    Args:
        a: Source string
        b: Target string
        allow_transposition: Also count swapping two adjacent characters as
            a single edit (optimal string alignment distance)

    Returns:
        The edit distance, computed over a full (len(a)+1) x (len(b)+1) table
    """
    if not a:
        return len(b)
    if not b:
        return len(a)

    table: List[List[int]] = [[0] * (len(b) + 1) for _ in range(len(a) + 1)]
    for i in range(len(a) + 1):
        table[i][0] = i
    for j in range(len(b) + 1):
        table[0][j] = j

    for i in range(1, len(a) + 1):
        for j in range(1, len(b) + 1):
            substitution_cost = 0 if a[i - 1] == b[j - 1] else 1
            table[i][j] = min(
                table[i - 1][j] + 1,  # deletion
                table[i][j - 1] + 1,  # insertion
                table[i - 1][j - 1] + substitution_cost,
            )
            if (
                allow_transposition
                and i > 1
                and j > 1
                and a[i - 1] == b[j - 2]
                and a[i - 2] == b[j - 1]
            ):
                table[i][j] = min(table[i][j], table[i - 2][j - 2] + 1)

    return table[len(a)][len(b)]


def typo_threshold(correct_term: str) -> int:
    if len(normalize(correct_term)) > SHORT_TERM_MAX_LENGTH:
        return LONG_TERM_THRESHOLD
    return SHORT_TERM_THRESHOLD


def grade(user_answer: str, correct_term: str) -> bool:
    """
    Accept exact matches, or near misses within the typo threshold.

    Distance is optimal string alignment rather than plain Levenshtein:
    swapped adjacent letters ("recieve") count as one typo instead of two,
    so a swap in a short term ("ab" for "ba") is accepted too.
    """
    answer = normalize(user_answer)
    expected = normalize(correct_term)
    if answer == expected:
        return True
    distance = levenshtein_distance(answer, expected, allow_transposition=True)
    return distance <= typo_threshold(correct_term)


def grade_exact(user_answer: str, correct_term: str) -> bool:
    return normalize(user_answer) == normalize(correct_term)


def distinct_other_terms(term: str, terms: Sequence[str]) -> List[str]:
    """Terms that differ from term after normalizing, first spelling of each kept"""
    seen = {normalize(term)}
    distinct: List[str] = []
    for candidate in terms:
        key = normalize(candidate)
        if key and key not in seen:
            seen.add(key)
            distinct.append(candidate)
    return distinct
