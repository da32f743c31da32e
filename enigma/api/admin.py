"""
Admin endpoints for live session management
"""
from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel
import logging

from enigma import state
from enigma.api.deps import get_store
from enigma.services import admin as admin_service


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


class LoginPayload(BaseModel):
    username: str = ""
    password: str = ""


class TimerPayload(BaseModel):
    section: Optional[str] = None
    minutes: int = 0
    seconds: int = 0


class StopSessionPayload(BaseModel):
    team_id: str


class StopAllPayload(BaseModel):
    section: Optional[str] = None


@router.post("/login")
async def login(payload: LoginPayload):
    """
    Admin: Check credentials

    Response:
        {"valid": true}
    """
    valid = await get_store().validate_admin_credentials(payload.username, payload.password)
    if not valid:
        logger.warning(f"Rejected admin login for {payload.username!r}")
    return {"valid": valid}


@router.get("/sessions")
async def get_sessions(section: Optional[str] = None):
    """Admin: Sessions still running, optionally for one section"""
    sessions = await admin_service.list_active_sessions(get_store(), section)
    return {
        "sessions": [s.model_dump() for s in sessions],
        "total_active": len(sessions)
    }


@router.post("/start-timer")
async def start_timer(payload: TimerPayload):
    """
    Admin: Start a timer for sessions that have none yet
    
    Request:
        {
            "section": "BSIT-3A",  # optional, default all sections
            "minutes": 15,
            "seconds": 0
        }
    """
    duration = payload.minutes * 60 + payload.seconds
    if duration <= 0:
        duration = state.SETTINGS.default_duration
    count = await admin_service.start_timer_for_all(get_store(), duration, payload.section)
    if count == 0:
        raise HTTPException(status_code=404, detail="No sessions without a timer found")
    return {
        "success": True,
        "updated": count,
        "duration": duration,
        "message": f"Timer started for {count} sessions."
    }


@router.post("/stop-session")
async def stop_session(payload: StopSessionPayload):
    """Admin: End one team's session immediately"""
    try:
        team = await admin_service.stop_session(get_store(), payload.team_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=f"Team {payload.team_id} not found") from exc
    return {
        "success": True,
        "team_id": team.id,
        "end_time": team.end_time,
        "message": f"Session for {team.team_name} stopped."
    }


@router.post("/stop-all")
async def stop_all(payload: StopAllPayload):
    """Admin: End every live session (optionally for one section)"""
    count = await admin_service.stop_all_sessions(get_store(), payload.section)
    return {
        "success": True,
        "stopped": count,
        "message": f"Stopped {count} sessions."
    }
