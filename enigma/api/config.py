"""
Configuration endpoints
"""
from fastapi import APIRouter

from enigma import state


router = APIRouter(tags=["config"])


@router.get("/config")
async def get_config():
    """Current game settings"""
    return state.SETTINGS.model_dump(mode="json")
