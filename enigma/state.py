"""
Global application state for the store service
Shared resources accessible across all routers
"""
from typing import Optional

from enigma.core.store import MemoryStore
from enigma.models import GameSettings

# Row store backing the service
# Loaded at startup from the seed file unless already set (tests inject one)
STORE: Optional[MemoryStore] = None

# Game settings (applied to admin timer defaults and leaderboard size)
SETTINGS: GameSettings = GameSettings()
