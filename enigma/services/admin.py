"""
Admin session controls - inspect and time live team sessions
"""
import logging
import time
from typing import List, Optional

from enigma.core.store import DataStore
from enigma.models import SessionSummary, Team


logger = logging.getLogger(__name__)


def _is_live(team: Team, now: float) -> bool:
    return team.end_time is None or team.end_time > now


def summarize(team: Team, now: float) -> SessionSummary:
    return SessionSummary(
        team_id=team.id,
        team_name=team.team_name,
        section=team.section,
        members=team.members,
        points=team.points,
        solved=len(set(team.completed_puzzles)),
        start_time=team.start_time,
        end_time=team.end_time,
        remaining=max(0.0, team.end_time - now) if team.end_time is not None else None,
    )


async def list_active_sessions(
    store: DataStore,
    section: Optional[str] = None,
    clock=time.time,
) -> List[SessionSummary]:
    """
    Sessions still running: no end time yet, or an end time in the future

    Returns:
        Most recently started first
    """
    now = clock()
    teams = await store.list_teams(section)
    live = [t for t in teams if _is_live(t, now)]
    live.sort(key=lambda t: t.start_time, reverse=True)
    return [summarize(t, now) for t in live]


async def start_timer_for_all(
    store: DataStore,
    duration: float,
    section: Optional[str] = None,
    clock=time.time,
) -> int:
    """
    Start the clock on every session in a section that has none yet

    Sessions that already have an end time keep it.

    Returns:
        Number of sessions updated
    """
    if duration <= 0:
        raise ValueError("duration must be positive")

    end_time = clock() + duration
    count = 0
    for team in await store.list_teams(section):
        if team.end_time is not None:
            continue
        await store.update_team(team.id, {"end_time": end_time})
        count += 1

    logger.info(f"⏱️ Started {duration:.0f}s timer for {count} sessions (section={section or 'all'})")
    return count


async def stop_session(store: DataStore, team_id: str, clock=time.time) -> Team:
    """End one team's session now"""
    team = await store.get_team(team_id)
    if team is None:
        raise KeyError(f"Team {team_id} not found")
    now = clock()
    if team.end_time is not None and team.end_time <= now:
        return team
    logger.info(f"🛑 Stopping session for team {team_id}")
    return await store.update_team(team_id, {"end_time": now})


async def stop_all_sessions(store: DataStore, section: Optional[str] = None, clock=time.time) -> int:
    """
    End every live session in a section (or everywhere)

    Returns:
        Number of sessions stopped
    """
    now = clock()
    count = 0
    for team in await store.list_teams(section):
        if not _is_live(team, now):
            continue
        await store.update_team(team.id, {"end_time": now})
        count += 1

    logger.info(f"🛑 Stopped {count} sessions (section={section or 'all'})")
    return count
