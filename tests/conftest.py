"""
Shared fixtures: a seeded in-memory store and a controllable clock
"""
import pytest

from enigma.core.store import MemoryStore
from enigma.models import AccessCode, Difficulty, GameSettings, Question


START = 1_700_000_000.0


class FakeClock:
    """Callable clock that only moves when told to"""

    def __init__(self, now: float = START):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_questions():
    questions = []
    for i in range(10):
        questions.append(Question(id=f"e{i:02d}", prompt=f"easy {i}", answer=f"easy{i}",
                                  hints=["first", "second", "third"], difficulty=Difficulty.EASY, points=50))
    for i in range(6):
        questions.append(Question(id=f"m{i:02d}", prompt=f"medium {i}", answer=f"medium{i}",
                                  hints=["only"], difficulty=Difficulty.MEDIUM, points=100))
    for i in range(4):
        questions.append(Question(id=f"h{i:02d}", prompt=f"hard {i}", answer=f"Hard{i}",
                                  difficulty=Difficulty.HARD, points=200))
    questions.append(Question(id="x00", prompt="retired", answer="gone",
                              difficulty=Difficulty.EASY, active=False))
    return questions


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def settings():
    return GameSettings()


@pytest.fixture
def store(clock):
    store = MemoryStore(clock=clock)
    store.add_access_code(AccessCode(code="BSIT3A", section="BSIT-3A", active=True))
    store.add_access_code(AccessCode(code="BSCS4B", section="BSCS-4B", active=True))
    store.add_access_code(AccessCode(code="OLD", section="BSCS-1A", active=False))
    for question in make_questions():
        store.add_question(question)
    store.add_admin_user("admin", "changeme")
    return store
