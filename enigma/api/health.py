"""
Health check and system status endpoints
"""
from fastapi import APIRouter
from enigma import state


router = APIRouter(tags=["health"])


@router.get("/")
async def health_check():
    """Health check endpoint"""
    questions = await state.STORE.list_active_questions() if state.STORE else []
    return {
        "status": "ok",
        "message": "Enigma Game Store",
        "version": "1.0.0",
        "active_questions": len(questions)
    }
