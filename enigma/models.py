"""
Data models for the Enigma game store and client core
"""
from enum import Enum
from pydantic import BaseModel, Field
from typing import List, Dict, Optional


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class AccessCode(BaseModel):
    """Access code handed out to a class section"""
    code: str
    section: str
    active: bool = True


class Team(BaseModel):
    """
    Shared team row, one per (access_code, team_name)

    completed_puzzles has set semantics; order carries no meaning.
    """
    id: str
    team_name: str
    access_code: str
    section: str
    members: List[str] = Field(min_length=1, max_length=8)
    question_seed: int
    points: int = Field(default=0, ge=0)
    completed_puzzles: List[str] = []
    start_time: float                     # Unix timestamp
    end_time: Optional[float] = None      # Unix timestamp, absent until the timer starts


class Question(BaseModel):
    """Riddle question; answer is None in every copy handed to players"""
    id: str
    prompt: str
    answer: Optional[str] = None
    hints: List[str] = Field(default=[], max_length=3)
    difficulty: Difficulty
    points: int = 0
    active: bool = True
    image_url: Optional[str] = None

    def public(self) -> "Question":
        """Copy with the answer stripped"""
        return self.model_copy(update={"answer": None}, deep=True)


class SessionDescriptor(BaseModel):
    """Client-local session, persisted between reloads"""
    team_id: str
    member_display_name: str
    section: str
    access_code: str
    team_name: str


class AccessCheck(BaseModel):
    """Result of validating an access code"""
    valid: bool
    section: Optional[str] = None
    error: Optional[str] = None
    existing_team_id: Optional[str] = None


class Registration(BaseModel):
    """Result of registering or joining a team"""
    team_id: Optional[str] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.team_id is not None and self.error is None


class SubmissionOutcome(str, Enum):
    CORRECT = "correct"
    INCORRECT = "incorrect"
    ALREADY_SOLVED = "already_solved"


class SubmissionResult(BaseModel):
    """Outcome of one answer submission"""
    outcome: SubmissionOutcome
    points_awarded: int = 0
    total_points: int = 0


class LeaderboardEntry(BaseModel):
    team_name: str
    points: int


class TimerReading(BaseModel):
    """Countdown snapshot for display"""
    remaining: float          # seconds, never negative
    minutes: int
    seconds: int
    low_time: bool = False    # < low_time_threshold
    warning: bool = False     # < warning_threshold
    expired: bool = False


class SessionSummary(BaseModel):
    """Admin view of a live team session"""
    team_id: str
    team_name: str
    section: str
    members: List[str]
    points: int
    solved: int
    start_time: float
    end_time: Optional[float] = None
    remaining: Optional[float] = None


class GameSettings(BaseModel):
    """Tunables for the game, loaded from config/game.yaml"""
    default_duration: int = 7200          # seconds (120 minutes)
    poll_interval: float = 5.0            # seconds between store polls
    tick_interval: float = 1.0            # countdown tick
    min_reconcile_interval: float = 1.0   # rate limit for reconciliation
    end_time_tolerance: float = 1.0       # ignore end_time jitter below this
    hint_cooldown: float = 30.0
    hint_penalty: int = 5
    max_hints: int = 3
    max_members: int = Field(8, ge=1, le=8)   # can only tighten the team row bound
    base_points: Dict[Difficulty, int] = {
        Difficulty.EASY: 50,
        Difficulty.MEDIUM: 100,
        Difficulty.HARD: 200,
    }
    quotas: Dict[Difficulty, int] = {
        Difficulty.EASY: 7,
        Difficulty.MEDIUM: 5,
        Difficulty.HARD: 3,
    }
    shuffle_offset: int = 1000
    leaderboard_limit: int = 10
    low_time_threshold: float = 300.0
    warning_threshold: float = 120.0
