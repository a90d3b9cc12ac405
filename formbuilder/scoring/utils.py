"""
Score Utilities
formbuilder/scoring/utils.py

Display helpers derived from a ScoreResult. The engine itself works in
whole points and never rounds.
"""

from decimal import Decimal, ROUND_HALF_UP


def score_percentage(score: int, max_score: int) -> int:
    """
    Percentage of available points, rounded half-up to a whole number.

    Returns 0 when max_score is 0 (nothing was scorable).

    Examples:
        >>> score_percentage(2, 3)
        67
        >>> score_percentage(1, 8)
        13
        >>> score_percentage(0, 0)
        0
    """
    if max_score <= 0:
        return 0
    pct = Decimal(score) * Decimal(100) / Decimal(max_score)
    return int(pct.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
