"""
Group scoring and completion synchronization

Each client holds a local view of its team row and keeps it in step with
the shared row by polling. There is no lock on the row, so every merge is
monotonic:

  - completed puzzles: set union, never subtraction
  - points: the remote total wins, the client never re-sums deltas
  - end time: remote value adopted when it differs by >= tolerance

States: INITIALIZING -> ACTIVE -> ENDED (terminal, latched). A row that
disappears mid-session is re-resolved by the recovery chain; when nothing
matches the session ends with `stale` set.

Known race: two teammates solving the same question in the same instant can
both pass the re-read in submit_answer() and both be credited. The re-read
and the write are kept back to back to keep that window narrow. Submissions
from one client are serialized per question.
"""
import asyncio
import logging
import time
from enum import Enum
from typing import Callable, Dict, FrozenSet, List, Optional

from enigma.core.access import recover_team
from enigma.core.leaderboard import rank
from enigma.core.scoring import award_points
from enigma.core.selector import fetch_board
from enigma.core.store import DataStore
from enigma.core.timer import Countdown, CountdownTicker
from enigma.errors import EnigmaError, GameOver, HintCooldown, SessionStale, TeamNotFound
from enigma.models import (
    Difficulty,
    GameSettings,
    LeaderboardEntry,
    Question,
    SessionDescriptor,
    SubmissionOutcome,
    SubmissionResult,
    Team,
    TimerReading,
)
from enigma.services.session_cache import SessionCache


logger = logging.getLogger(__name__)


class SyncState(str, Enum):
    INITIALIZING = "initializing"
    ACTIVE = "active"
    ENDED = "ended"


class GroupSynchronizer:
    """
    One client's view of a shared team session

    Owns exactly one polling task and one countdown ticker while active;
    both are cancelled on stop() and when the session ends.
    """

    def __init__(
        self,
        store: DataStore,
        descriptor: SessionDescriptor,
        settings: Optional[GameSettings] = None,
        clock: Callable[[], float] = time.time,
        on_change: Optional[Callable[["GroupSynchronizer"], None]] = None,
        on_end: Optional[Callable[["GroupSynchronizer"], None]] = None,
        cache: Optional[SessionCache] = None,
    ):
        self.store = store
        self.descriptor = descriptor
        self.settings = settings or GameSettings()
        self.clock = clock
        self.on_change = on_change
        self.on_end = on_end
        self.cache = cache

        self._state = SyncState.INITIALIZING
        self._team: Optional[Team] = None
        self._points = 0
        self._completed = set()
        self._end_time: Optional[float] = None
        self._questions: List[Question] = []

        self._hints: Dict[str, List[str]] = {}
        self._hint_requested_at: Dict[str, float] = {}
        self._submit_locks: Dict[str, asyncio.Lock] = {}

        self._last_reconcile: Optional[float] = None
        self._stale = False
        self._reconcile_lock = asyncio.Lock()
        self._leaderboard: Optional[List[LeaderboardEntry]] = None
        self._leaderboard_lock = asyncio.Lock()

        self.countdown = Countdown(
            None,
            on_time_up=self._on_time_up,
            clock=clock,
            low_time_threshold=self.settings.low_time_threshold,
            warning_threshold=self.settings.warning_threshold,
        )
        self._ticker = CountdownTicker(self.countdown, self.settings.tick_interval)
        self._poll_task: Optional[asyncio.Task] = None

    # ==================== READ-ONLY VIEW ====================

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def stale(self) -> bool:
        """True once the session pointed at no recoverable team"""
        return self._stale

    @property
    def team_id(self) -> str:
        return self.descriptor.team_id

    @property
    def team(self) -> Optional[Team]:
        return self._team

    @property
    def points(self) -> int:
        return self._points

    @property
    def completed(self) -> FrozenSet[str]:
        return frozenset(self._completed)

    @property
    def end_time(self) -> Optional[float]:
        return self._end_time

    @property
    def questions(self) -> List[Question]:
        return list(self._questions)

    def hints_for(self, question_id: str) -> List[str]:
        return list(self._hints.get(question_id, []))

    def remaining(self) -> TimerReading:
        return self.countdown.reading()

    # ==================== LIFECYCLE ====================

    async def initialize(self) -> Team:
        """
        Fetch the team row, build the board and start the shared clock

        Returns:
            The team row as first observed

        Raises:
            SessionStale: the session points at no recoverable team
        """
        team = await recover_team(self.store, self.descriptor)
        if team.id != self.descriptor.team_id:
            self._rebind(team)

        self._questions = await fetch_board(
            self.store,
            team.question_seed,
            self.settings.quotas,
            self.settings.shuffle_offset,
        )
        self.apply_snapshot(team)

        if self._end_time is None:
            await self._start_clock()

        self._state = SyncState.ACTIVE
        logger.info(
            f"🎮 Team '{team.team_name}' active: {len(self._questions)} questions, "
            f"{len(self._completed)} solved, {self._points} points"
        )
        if self._expired():
            self._enter_ended("time already up")
        return team

    def _rebind(self, team: Team) -> None:
        """Point the session at a recovered row and persist it"""
        logger.info(f"Session recovered onto team {team.id} ('{team.team_name}')")
        self.descriptor = self.descriptor.model_copy(update={
            "team_id": team.id,
            "team_name": team.team_name,
            "section": team.section,
            "access_code": team.access_code,
        })
        if self.cache is not None:
            self.cache.save(self.descriptor)

    async def _recover(self) -> Team:
        """
        Re-resolve a team id that went missing mid-session

        Local progress belonged to the old row, so it is dropped before the
        recovered row is applied.

        Raises:
            SessionStale: nothing matched; the session ends and is flagged stale
        """
        try:
            team = await recover_team(self.store, self.descriptor)
        except SessionStale:
            self._stale = True
            self._enter_ended("session stale")
            raise

        old_seed = self._team.question_seed if self._team is not None else None
        self._rebind(team)
        self._points = 0
        self._completed = set()
        if team.question_seed != old_seed:
            self._questions = await fetch_board(
                self.store,
                team.question_seed,
                self.settings.quotas,
                self.settings.shuffle_offset,
            )
        self.apply_snapshot(team)
        return team

    async def _start_clock(self) -> None:
        """Set end_time unless a teammate got there first"""
        latest = await self.store.get_team(self.team_id)
        if latest is None:
            raise TeamNotFound(f"Team {self.team_id} disappeared")
        if latest.end_time is not None:
            self.apply_snapshot(latest)
            return

        end_time = self.clock() + self.settings.default_duration
        updated = await self.store.update_team(self.team_id, {"end_time": end_time})
        logger.info(f"⏱️ Started team clock, ends at {end_time:.0f}")
        self.apply_snapshot(updated)

    def start(self) -> None:
        """Start the polling loop and the countdown ticker"""
        if self._state is not SyncState.ACTIVE:
            return
        if self._poll_task is None or self._poll_task.done():
            self._poll_task = asyncio.create_task(self._poll_loop())
        self._ticker.start()

    async def stop(self) -> None:
        """Cancel the polling loop and the countdown ticker"""
        task, self._poll_task = self._poll_task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        await self._ticker.stop()

    async def __aenter__(self) -> "GroupSynchronizer":
        await self.initialize()
        self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()

    async def _poll_loop(self) -> None:
        while self._state is SyncState.ACTIVE:
            await asyncio.sleep(self.settings.poll_interval)
            try:
                await self.reconcile()
            except SessionStale as e:
                logger.warning(f"Session for team {self.team_id} is stale: {e}")
            except Exception as e:
                # Background failures never end the session; retry next cycle
                logger.warning(f"Poll for team {self.team_id} failed: {e!r}")

    # ==================== RECONCILIATION ====================

    def apply_snapshot(self, team: Team) -> bool:
        """
        Merge a remote team row into local state

        Returns:
            True if anything visible changed
        """
        changed = False
        self._team = team

        if team.points != self._points:
            self._points = team.points
            changed = True

        new_ids = set(team.completed_puzzles) - self._completed
        if new_ids:
            self._completed |= new_ids
            changed = True

        if team.end_time is not None and (
            self._end_time is None
            or abs(team.end_time - self._end_time) >= self.settings.end_time_tolerance
        ):
            self._end_time = team.end_time
            self.countdown.set_end_time(team.end_time)
            changed = True

        if changed and self.on_change is not None:
            self.on_change(self)
        return changed

    async def reconcile(self, force: bool = False) -> bool:
        """
        Fetch the shared row and merge it

        Runs at most once per min_reconcile_interval; triggers arriving while
        a run is in flight are dropped. A missing row is re-resolved through
        the recovery chain.

        Args:
            force: Manual refresh; skips the interval check but is still
                dropped while another run is in flight

        Returns:
            True if a fetch happened

        Raises:
            SessionStale: the row is gone and nothing else matched
        """
        if self._state is not SyncState.ACTIVE or self._reconcile_lock.locked():
            return False

        now = self.clock()
        if (
            not force
            and self._last_reconcile is not None
            and now - self._last_reconcile < self.settings.min_reconcile_interval
        ):
            return False

        async with self._reconcile_lock:
            self._last_reconcile = now
            team = await self.store.get_team(self.team_id)
            if team is None:
                await self._recover()
            else:
                self.apply_snapshot(team)
            if self._expired():
                self._enter_ended("time up")
        return True

    # ==================== GAMEPLAY ====================

    async def submit_answer(
        self,
        question_id: str,
        answer: str,
        hints_used: Optional[int] = None,
    ) -> SubmissionResult:
        """
        Check an answer and credit the team once per question

        Args:
            question_id: Question being answered
            answer: Candidate answer
            hints_used: Hints revealed; defaults to those requested on this client

        Returns:
            SubmissionResult (correct, incorrect or already_solved)

        Raises:
            GameOver: the session has ended
            SessionStale: the team row is gone and nothing else matched
            TransientStoreError: the store failed; the user may retry
        """
        self._require_active()

        # One submission per question at a time on this client
        lock = self._submit_locks.setdefault(question_id, asyncio.Lock())
        async with lock:
            return await self._submit_locked(question_id, answer, hints_used)

    async def _submit_locked(
        self,
        question_id: str,
        answer: str,
        hints_used: Optional[int],
    ) -> SubmissionResult:
        self._require_active()

        if question_id in self._completed:
            return SubmissionResult(outcome=SubmissionOutcome.ALREADY_SOLVED, total_points=self._points)

        if not await self.store.check_answer(question_id, answer):
            return SubmissionResult(outcome=SubmissionOutcome.INCORRECT, total_points=self._points)

        if hints_used is None:
            hints_used = len(self._hints.get(question_id, []))
        difficulty = await self._difficulty_of(question_id)
        awarded = award_points(difficulty, hints_used, self.settings.base_points, self.settings.hint_penalty)

        # Re-read and write back to back
        remote = await self.store.get_team(self.team_id)
        if remote is None:
            remote = await self._recover()
        if question_id in remote.completed_puzzles:
            self.apply_snapshot(remote)
            return SubmissionResult(outcome=SubmissionOutcome.ALREADY_SOLVED, total_points=self._points)
        updated = await self.store.update_team(self.team_id, {
            "completed_puzzles": remote.completed_puzzles + [question_id],
            "points": remote.points + awarded,
        })

        self.apply_snapshot(updated)
        logger.info(f"✅ Team {self.team_id} solved {question_id} for {awarded} points (total {self._points})")
        return SubmissionResult(
            outcome=SubmissionOutcome.CORRECT,
            points_awarded=awarded,
            total_points=self._points,
        )

    async def request_hint(self, question_id: str) -> Optional[str]:
        """
        Reveal the next hint for a question

        Each revealed hint lowers the award for that question.

        Returns:
            Hint text, or None when no further hint exists

        Raises:
            HintCooldown: asked again within the cooldown for this question
        """
        self._require_active()

        revealed = self._hints.setdefault(question_id, [])
        if len(revealed) >= self.settings.max_hints:
            return None

        now = self.clock()
        last = self._hint_requested_at.get(question_id)
        if last is not None and now - last < self.settings.hint_cooldown:
            raise HintCooldown(self.settings.hint_cooldown - (now - last))
        self._hint_requested_at[question_id] = now

        hint = await self.store.get_hint(question_id, len(revealed))
        if hint is None:
            return None
        revealed.append(hint)
        return hint

    async def end_game_early(self) -> None:
        """Stop the clock for the whole team, then end locally"""
        if self._state is SyncState.ENDED:
            return
        updated = await self.store.update_team(self.team_id, {"end_time": self.clock()})
        self.apply_snapshot(updated)
        self._enter_ended("ended early")

    async def final_leaderboard(self) -> List[LeaderboardEntry]:
        """Section leaderboard, fetched once per session"""
        async with self._leaderboard_lock:
            if self._leaderboard is None:
                self._leaderboard = await rank(
                    self.store, self.descriptor.section, self.settings.leaderboard_limit
                )
        return list(self._leaderboard)

    # ==================== INTERNALS ====================

    def _require_active(self) -> None:
        if self._state is SyncState.ENDED:
            raise GameOver("The game has ended")
        if self._state is SyncState.INITIALIZING:
            raise EnigmaError("Session is not initialized")

    def _expired(self) -> bool:
        return self._end_time is not None and self.clock() > self._end_time

    async def _difficulty_of(self, question_id: str) -> Difficulty:
        for question in self._questions:
            if question.id == question_id:
                return question.difficulty
        question = await self.store.get_question(question_id)
        return question.difficulty if question else Difficulty.EASY

    def _on_time_up(self) -> None:
        self._enter_ended("time up")

    def _enter_ended(self, reason: str) -> None:
        if self._state is SyncState.ENDED:
            return
        self._state = SyncState.ENDED
        logger.info(f"🏁 Team {self.team_id} session ended ({reason}): {self._points} points")

        # Both loops exit on their own once ENDED; cancel whichever isn't us
        self._ticker.cancel()
        if self._poll_task is not None and not self._poll_task.done():
            try:
                current = asyncio.current_task()
            except RuntimeError:
                current = None
            if self._poll_task is not current:
                self._poll_task.cancel()

        if self.on_end is not None:
            self.on_end(self)
