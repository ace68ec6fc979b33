"""
Grading

Pure functions turning per-question scores into a total, a percentage and
a letter grade. Percentages are always derived from their inputs, never
stored on their own.
"""

import math
from dataclasses import dataclass
from fractions import Fraction
from typing import Sequence, Tuple, Union

from trainassess.common.exceptions import ValidationError

Number = Union[int, float]

DEFAULT_MAX_SCORE_PER_QUESTION = 10

# Descending (minimum percentage, grade) breakpoints.
GRADE_BREAKPOINTS: Tuple[Tuple[int, str], ...] = (
    (90, "A+"),
    (85, "A"),
    (80, "B+"),
    (75, "B"),
    (70, "C+"),
    (65, "C"),
    (60, "D"),
)
FAILING_GRADE = "F"


@dataclass(frozen=True)
class GradeSummary:
    """Aggregate outcome of a set of per-question scores."""
    total_score: Number
    max_score: int
    percentage: int
    grade: str


def compute_percentage(total_score: Number, max_score: Number) -> int:
    """
    Compute ``round(100 * total / max)`` with halves rounded up.

    Exact rational arithmetic keeps results such as 12.5 from drifting
    below the half-way point.
    """
    if max_score <= 0:
        raise ValidationError("Maximum score must be positive", {"maxScore": max_score})
    ratio = Fraction(total_score) * 100 / Fraction(max_score)
    return math.floor(ratio + Fraction(1, 2))


def grade_for(percentage: Number) -> str:
    """Map a percentage to its letter grade."""
    for threshold, grade in GRADE_BREAKPOINTS:
        if percentage >= threshold:
            return grade
    return FAILING_GRADE


def validate_scores(scores: Sequence[Number], max_per_question: int) -> None:
    """
    Check every score lies within ``0..max_per_question``.

    Raises:
        ValidationError: With the offending positions as field errors
    """
    errors = {}
    for index, score in enumerate(scores):
        if isinstance(score, bool) or not isinstance(score, (int, float)):
            errors[f"questionAnswers[{index}].score"] = "Score must be a number"
        elif math.isnan(score) or score < 0 or score > max_per_question:
            errors[f"questionAnswers[{index}].score"] = f"Score must be between 0 and {max_per_question}"
    if errors:
        raise ValidationError("Invalid scores", errors)


def summarize(scores: Sequence[Number], max_per_question: int = DEFAULT_MAX_SCORE_PER_QUESTION) -> GradeSummary:
    """
    Grade a list of per-question scores.

    Args:
        scores: One score per question
        max_per_question: Maximum score of a single question

    Returns:
        Total, maximum, percentage and letter grade
    """
    if not scores:
        raise ValidationError("At least one score is required", {"questionAnswers": "empty"})
    validate_scores(scores, max_per_question)

    total_score = sum(scores)
    max_score = len(scores) * max_per_question
    percentage = compute_percentage(total_score, max_score)
    return GradeSummary(
        total_score=total_score,
        max_score=max_score,
        percentage=percentage,
        grade=grade_for(percentage)
    )
