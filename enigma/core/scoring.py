"""
Enigma scoring rules

Formula:
  awarded = max(1, base_points[difficulty] - hint_penalty × hints_used)

Rules:
  - easy = 50, medium = 100, hard = 200 by default
  - each revealed hint costs 5 points
  - a correct answer is always worth at least 1 point
  - answers match case-insensitively, exact otherwise
"""
from typing import Dict, Optional

from enigma.models import Difficulty


BASE_POINTS: Dict[Difficulty, int] = {
    Difficulty.EASY: 50,
    Difficulty.MEDIUM: 100,
    Difficulty.HARD: 200,
}
HINT_PENALTY = 5
MIN_AWARD = 1


def base_points_for(difficulty: Difficulty, base_points: Optional[Dict[Difficulty, int]] = None) -> int:
    """Base points for a difficulty, falling back to the easy value"""
    table = base_points or BASE_POINTS
    return table.get(Difficulty(difficulty), table.get(Difficulty.EASY, BASE_POINTS[Difficulty.EASY]))


def award_points(
    difficulty: Difficulty,
    hints_used: int = 0,
    base_points: Optional[Dict[Difficulty, int]] = None,
    hint_penalty: int = HINT_PENALTY,
) -> int:
    """
    Points awarded for a correct answer

    Args:
        difficulty: Question difficulty
        hints_used: Hints revealed before answering (>= 0)
        base_points: Optional per-difficulty table (defaults to BASE_POINTS)
        hint_penalty: Points deducted per hint

    Returns:
        Awarded points, never below 1
    """
    if hints_used < 0:
        raise ValueError(f"hints_used must be >= 0, got {hints_used}")
    base = base_points_for(difficulty, base_points)
    return max(MIN_AWARD, base - hint_penalty * hints_used)


def answers_match(expected: str, candidate: str) -> bool:
    """Case-insensitive exact comparison; the candidate is trimmed like the answer form does"""
    if candidate is None:
        return False
    return expected.lower() == candidate.strip().lower()
