"""Shared router helpers"""
from fastapi import HTTPException

from enigma import state
from enigma.core.store import MemoryStore


def get_store() -> MemoryStore:
    """Loaded store, or 500 if startup never populated it"""
    if state.STORE is None:
        raise HTTPException(status_code=500, detail="Store is not loaded")
    return state.STORE
