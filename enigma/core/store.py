"""
Data store contract and in-memory implementation

The store offers row-level reads and writes only: no transactions. Every
mutation protocol built on top of it relies on monotonic merges instead.
"""
import itertools
import time
import uuid
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from enigma.core.scoring import answers_match
from enigma.models import AccessCode, Question, Team


# Fields a client may change on an existing team row
UPDATABLE_TEAM_FIELDS = {"members", "points", "completed_puzzles", "start_time", "end_time", "team_name"}


class DataStore(ABC):
    """Operations the game needs from the backing store"""

    @abstractmethod
    async def get_access_code(self, code: str) -> Optional[AccessCode]:
        ...

    @abstractmethod
    async def find_team(self, access_code: str, team_name: Optional[str] = None) -> Optional[Team]:
        """Most recent team for the code (and name, when given)"""

    @abstractmethod
    async def create_team(self, fields: Dict[str, Any]) -> Team:
        ...

    @abstractmethod
    async def update_team(self, team_id: str, fields: Dict[str, Any]) -> Team:
        """Partial update; fields not named are left untouched"""

    @abstractmethod
    async def get_team(self, team_id: str) -> Optional[Team]:
        ...

    @abstractmethod
    async def list_teams_by_section(self, section: str) -> List[Team]:
        ...

    @abstractmethod
    async def list_teams(self, section: Optional[str] = None) -> List[Team]:
        ...

    @abstractmethod
    async def list_active_questions(self) -> List[Question]:
        ...

    @abstractmethod
    async def get_question(self, question_id: str) -> Optional[Question]:
        ...

    @abstractmethod
    async def check_answer(self, question_id: str, candidate: str) -> bool:
        ...

    @abstractmethod
    async def get_hint(self, question_id: str, index: int) -> Optional[str]:
        ...

    @abstractmethod
    async def validate_admin_credentials(self, username: str, password: str) -> bool:
        ...


def check_team_update(fields: Dict[str, Any]) -> None:
    """Reject updates touching immutable or unknown team fields"""
    unknown = set(fields) - UPDATABLE_TEAM_FIELDS
    if unknown:
        raise ValueError(f"Cannot update team fields: {', '.join(sorted(unknown))}")


class MemoryStore(DataStore):
    """
    Dict-backed store

    Rows are copied on the way in and out so callers never share state
    with the store. Methods never await, so each call is atomic on the
    event loop.
    """

    def __init__(self, clock=time.time):
        self._clock = clock
        self._access_codes: Dict[str, AccessCode] = {}
        self._teams: Dict[str, Team] = {}
        self._team_order: Dict[str, int] = {}
        self._questions: Dict[str, Question] = {}
        self._admins: Dict[str, str] = {}
        self._counter = itertools.count()

    # ---- seeding ----

    def add_access_code(self, access_code: AccessCode) -> None:
        self._access_codes[access_code.code] = access_code.model_copy()

    def add_question(self, question: Question) -> None:
        if question.id in self._questions:
            raise ValueError(f"Duplicate question id: {question.id}")
        self._questions[question.id] = question.model_copy(deep=True)

    def add_admin_user(self, username: str, password: str) -> None:
        self._admins[username] = password

    # ---- access codes ----

    async def get_access_code(self, code: str) -> Optional[AccessCode]:
        found = self._access_codes.get(code)
        return found.model_copy() if found else None

    # ---- teams ----

    async def find_team(self, access_code: str, team_name: Optional[str] = None) -> Optional[Team]:
        matches = [
            team for team in self._teams.values()
            if team.access_code == access_code and (team_name is None or team.team_name == team_name)
        ]
        if not matches:
            return None
        latest = max(matches, key=lambda t: self._team_order[t.id])
        return latest.model_copy(deep=True)

    async def create_team(self, fields: Dict[str, Any]) -> Team:
        data = dict(fields)
        data["id"] = uuid.uuid4().hex
        data.setdefault("start_time", self._clock())
        team = Team(**data)
        self._teams[team.id] = team
        self._team_order[team.id] = next(self._counter)
        return team.model_copy(deep=True)

    async def update_team(self, team_id: str, fields: Dict[str, Any]) -> Team:
        check_team_update(fields)
        current = self._teams.get(team_id)
        if current is None:
            raise KeyError(f"Team {team_id} not found")
        # Re-validate the merged row so invariants on field types still hold
        updated = Team(**{**current.model_dump(), **fields})
        self._teams[team_id] = updated
        return updated.model_copy(deep=True)

    async def get_team(self, team_id: str) -> Optional[Team]:
        team = self._teams.get(team_id)
        return team.model_copy(deep=True) if team else None

    async def list_teams_by_section(self, section: str) -> List[Team]:
        return await self.list_teams(section)

    async def list_teams(self, section: Optional[str] = None) -> List[Team]:
        ordered = sorted(self._teams.values(), key=lambda t: self._team_order[t.id])
        return [
            team.model_copy(deep=True) for team in ordered
            if section is None or team.section == section
        ]

    # ---- questions ----

    async def list_active_questions(self) -> List[Question]:
        return [q.public() for q in self._questions.values() if q.active]

    async def get_question(self, question_id: str) -> Optional[Question]:
        question = self._questions.get(question_id)
        return question.public() if question else None

    async def check_answer(self, question_id: str, candidate: str) -> bool:
        question = self._questions.get(question_id)
        if question is None or question.answer is None:
            return False
        return answers_match(question.answer, candidate)

    async def get_hint(self, question_id: str, index: int) -> Optional[str]:
        question = self._questions.get(question_id)
        if question is None or not 0 <= index < 3:
            return None
        if index >= len(question.hints) or not question.hints[index]:
            return None
        return question.hints[index]

    # ---- admin ----

    async def validate_admin_credentials(self, username: str, password: str) -> bool:
        if not username or not password:
            return False
        return self._admins.get(username) == password
