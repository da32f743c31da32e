"""
Tests for leaderboard aggregation
"""
import itertools

import pytest

from enigma.core.leaderboard import rank_rows, rank
from enigma.core.access import register_or_join_team
from enigma.models import LeaderboardEntry, Team


_ids = itertools.count(1)


def row(name, points, section="BSIT-3A"):
    return Team(
        id=f"t{next(_ids)}",
        team_name=name,
        access_code="BSIT3A",
        section=section,
        members=["m"],
        question_seed=1,
        points=points,
        start_time=0.0,
    )


def test_dedup_by_team_name():
    """Duplicate rows for one team collapse to the best score"""
    rows = [row("A", 50), row("A", 80), row("B", 60)]
    assert rank_rows(rows) == [
        LeaderboardEntry(team_name="A", points=80),
        LeaderboardEntry(team_name="B", points=60),
    ]


def test_sorted_descending():
    """Highest score first"""
    rows = [row("C", 10), row("A", 300), row("B", 150)]
    assert [e.team_name for e in rank_rows(rows)] == ["A", "B", "C"]


def test_ties_keep_input_order():
    """Equal totals stay in first-seen order"""
    rows = [row("X", 100), row("Y", 100), row("Z", 100)]
    assert [e.team_name for e in rank_rows(rows)] == ["X", "Y", "Z"]


def test_top_ten_only():
    """At most 10 entries"""
    rows = [row(f"T{i}", i * 10) for i in range(25)]
    ranked = rank_rows(rows)
    assert len(ranked) == 10
    assert ranked[0].points == 240
    assert len(rank_rows(rows, limit=3)) == 3


def test_empty():
    """No rows → empty board"""
    assert rank_rows([]) == []


@pytest.mark.asyncio
async def test_rank_by_section(store):
    """Only the requested section is ranked"""
    a = await register_or_join_team(store, "BSIT3A", "Alpha", ["Bo"])
    b = await register_or_join_team(store, "BSIT3A", "Beta", ["Cy"])
    await register_or_join_team(store, "BSCS4B", "Gamma", ["Di"])
    await store.update_team(a.team_id, {"points": 50})
    await store.update_team(b.team_id, {"points": 120})

    board = await rank(store, "BSIT-3A")
    assert [(e.team_name, e.points) for e in board] == [("Beta", 120), ("Alpha", 50)]
