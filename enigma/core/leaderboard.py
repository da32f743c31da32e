"""
Leaderboard aggregation

Rows are grouped by team name rather than row id: a join race can leave
two rows for one team, and only the best of them counts. Ties keep input
order.
"""
from typing import Dict, Iterable, List

from enigma.core.store import DataStore
from enigma.models import LeaderboardEntry, Team


LEADERBOARD_LIMIT = 10


def rank_rows(rows: Iterable[Team], limit: int = LEADERBOARD_LIMIT) -> List[LeaderboardEntry]:
    """
    Reduce team rows to one best entry per team name, highest first

    Args:
        rows: Team rows for one section
        limit: Max entries returned

    Returns:
        Sorted leaderboard entries
    """
    best: Dict[str, LeaderboardEntry] = {}
    for row in rows:
        if not row.team_name:
            continue
        current = best.get(row.team_name)
        if current is None or row.points > current.points:
            best[row.team_name] = LeaderboardEntry(team_name=row.team_name, points=row.points)

    # sorted() is stable, so equal totals keep first-seen order
    ranked = sorted(best.values(), key=lambda e: -e.points)
    return ranked[:limit]


async def rank(store: DataStore, section: str, limit: int = LEADERBOARD_LIMIT) -> List[LeaderboardEntry]:
    """Leaderboard for a section"""
    rows = await store.list_teams_by_section(section)
    return rank_rows(rows, limit)
