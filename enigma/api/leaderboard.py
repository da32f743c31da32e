"""
Leaderboard endpoint
"""
from fastapi import APIRouter

from enigma import state
from enigma.api.deps import get_store
from enigma.core.leaderboard import rank


router = APIRouter(tags=["leaderboard"])


@router.get("/leaderboard/{section}")
async def get_leaderboard(section: str):
    """
    Top teams of a section, one entry per team name

    Response:
        {"section": "BSIT-3A", "teams": [{"rank": 1, "team_name": "Alpha", "points": 250}, ...]}
    """
    entries = await rank(get_store(), section, state.SETTINGS.leaderboard_limit)
    return {
        "section": section,
        "teams": [
            {"rank": idx + 1, **entry.model_dump()}
            for idx, entry in enumerate(entries)
        ],
        "total_teams": len(entries)
    }
