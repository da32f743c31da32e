"""Access code lookup endpoint"""
from fastapi import APIRouter, HTTPException

from enigma.api.deps import get_store


router = APIRouter(tags=["access"])


@router.get("/access-codes/{code}")
async def get_access_code(code: str):
    """Look up an access code (active or not; callers check `active`)"""
    access_code = await get_store().get_access_code(code)
    if access_code is None:
        raise HTTPException(status_code=404, detail="Access code not found")
    return access_code
