"""
Deterministic question selection

Every member of a team derives the same board from the team's question seed:
partition by difficulty, seeded shuffle of each partition, take the quota,
then one more seeded shuffle (seed + offset) to interleave difficulties.
"""
import random
from typing import Dict, List, Optional, Sequence, TypeVar

from enigma.core.store import DataStore
from enigma.models import Difficulty, Question


T = TypeVar("T")

DEFAULT_QUOTAS: Dict[Difficulty, int] = {
    Difficulty.EASY: 7,
    Difficulty.MEDIUM: 5,
    Difficulty.HARD: 3,
}
SHUFFLE_OFFSET = 1000


class SeededRandom:
    """
    Linear congruential generator with 32-bit state

    Uses the Numerical Recipes constants. Owns its state, so two instances
    with the same seed always produce the same sequence.
    """

    MULTIPLIER = 1664525
    INCREMENT = 1013904223
    MODULUS = 2 ** 32
    # Knuth's multiplicative hash spreads nearby seeds across the state space
    SEED_SCRAMBLE = 2654435761

    def __init__(self, seed: int):
        self.state = (seed * self.SEED_SCRAMBLE) % self.MODULUS

    def random(self) -> float:
        """Next float in [0, 1)"""
        self.state = (self.MULTIPLIER * self.state + self.INCREMENT) % self.MODULUS
        return self.state / self.MODULUS


def seeded_shuffle(items: Sequence[T], rng) -> List[T]:
    """
    Fisher-Yates shuffle into a new list

    Args:
        items: Items to shuffle (left untouched)
        rng: Anything with a ``random() -> float`` method

    Returns:
        Shuffled copy
    """
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = int(rng.random() * (i + 1))
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def select_questions(
    questions: Sequence[Question],
    seed: Optional[int] = None,
    quotas: Optional[Dict[Difficulty, int]] = None,
    shuffle_offset: int = SHUFFLE_OFFSET,
) -> List[Question]:
    """
    Pick and order the board for a team

    Args:
        questions: Candidate questions (inactive ones are ignored)
        seed: Team question seed; None means an unseeded shuffle
        quotas: Max questions per difficulty (default 7/5/3)
        shuffle_offset: Added to the seed for the final interleaving shuffle

    Returns:
        Ordered questions, at most sum(quotas); shorter if a difficulty runs out
    """
    quotas = quotas or DEFAULT_QUOTAS

    # Sort first so the store's return order cannot change the result
    pool = sorted((q for q in questions if q.active), key=lambda q: q.id)

    selected: List[Question] = []
    for difficulty in (Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD):
        partition = [q for q in pool if q.difficulty == difficulty]
        rng = SeededRandom(seed) if seed is not None else random.Random()
        selected.extend(seeded_shuffle(partition, rng)[:quotas.get(difficulty, 0)])

    final_rng = SeededRandom(seed + shuffle_offset) if seed is not None else random.Random()
    return seeded_shuffle(selected, final_rng)


async def fetch_board(
    store: DataStore,
    seed: Optional[int] = None,
    quotas: Optional[Dict[Difficulty, int]] = None,
    shuffle_offset: int = SHUFFLE_OFFSET,
) -> List[Question]:
    """Fetch active questions from the store and select the team's board"""
    questions = await store.list_active_questions()
    return select_questions(questions, seed, quotas, shuffle_offset)
