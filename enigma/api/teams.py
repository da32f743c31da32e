"""
Team row endpoints

Row-level reads and partial writes only; the game logic on the clients
provides the merge semantics.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field, ValidationError

from enigma import state
from enigma.api.deps import get_store
from enigma.core.access import require_access_code
from enigma.errors import InvalidCode
from enigma.models import Team


logger = logging.getLogger(__name__)

router = APIRouter(tags=["teams"])


def check_team_size(members: List[str]) -> None:
    limit = state.SETTINGS.max_members
    if len(members) > limit:
        raise HTTPException(status_code=400, detail=f"Team is full ({limit} members max)")


class TeamCreate(BaseModel):
    team_name: str = Field(min_length=1)
    access_code: str = Field(min_length=1)
    section: str
    members: List[str] = Field(min_length=1)
    question_seed: int
    points: int = 0
    completed_puzzles: List[str] = []
    start_time: Optional[float] = None
    end_time: Optional[float] = None


@router.get("/teams", response_model=Team)
async def find_team(access_code: str, team_name: Optional[str] = None):
    """Most recent team for an access code (and team name, when given)"""
    team = await get_store().find_team(access_code, team_name)
    if team is None:
        raise HTTPException(status_code=404, detail="Team not found")
    return team


@router.get("/teams/all", response_model=List[Team])
async def list_all_teams():
    return await get_store().list_teams()


@router.post("/teams", response_model=Team)
async def create_team(payload: TeamCreate):
    """Insert a team row under an active access code"""
    store = get_store()
    try:
        await require_access_code(store, payload.access_code)
    except InvalidCode as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    check_team_size(payload.members)

    fields = payload.model_dump(exclude_none=True)
    team = await store.create_team(fields)
    logger.info(f"📥 Created team row {team.id} ({team.team_name})")
    return team


@router.get("/teams/{team_id}", response_model=Team)
async def get_team(team_id: str):
    team = await get_store().get_team(team_id)
    if team is None:
        raise HTTPException(status_code=404, detail=f"Team {team_id} not found")
    return team


@router.patch("/teams/{team_id}", response_model=Team)
async def update_team(team_id: str, fields: dict):
    """
    Partial update of a team row

    Request:
        {"points": 150, "completed_puzzles": ["q1", "q7"]}
    """
    store = get_store()
    if await store.get_team(team_id) is None:
        raise HTTPException(status_code=404, detail=f"Team {team_id} not found")
    if isinstance(fields.get("members"), list):
        check_team_size(fields["members"])
    try:
        return await store.update_team(team_id, fields)
    except (ValueError, ValidationError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.get("/sections/{section}/teams", response_model=List[Team])
async def list_section_teams(section: str):
    return await get_store().list_teams_by_section(section)
