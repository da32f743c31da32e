"""
FastAPI main application
Enigma - Shared game store for the classroom riddle hunt

Stands in for the managed database the game clients talk to. Routers in
enigma/api/:
- health.py: Health check
- access.py: Access code lookup
- teams.py: Team row reads and partial writes
- questions.py: Public questions, answer verification, hints
- leaderboard.py: Per-section leaderboard
- admin.py: Admin login and live session timer controls
- config.py: Game settings

All routers access shared state via enigma.state module.
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging
import os

from enigma import state
from enigma.config import load_config
from enigma.seed_loader import load_seed

# Import all API routers
from enigma.api import health, access, teams, questions, leaderboard, admin
from enigma.api import config as config_router


# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

CONFIG_PATH = os.getenv("ENIGMA_CONFIG", "config/game.yaml")
SEED_PATH = os.getenv("ENIGMA_SEED", "data/seed.yaml")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    # Startup: load settings and seed the store unless one was injected
    try:
        if os.path.exists(CONFIG_PATH):
            state.SETTINGS = load_config(CONFIG_PATH)
        if state.STORE is None:
            state.STORE = load_seed(SEED_PATH)
        logger.info("✅ Store ready")
    except Exception as e:
        logger.error(f"❌ Failed to load store: {e}")
        raise

    yield

    # Shutdown
    logger.info("🛑 Store shutting down")


# Create FastAPI app
app = FastAPI(
    title="Enigma Game Store",
    description="Shared row store for access codes, teams and questions",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware (browser clients call the store directly)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ==================== INCLUDE ROUTERS ====================

# Health check (GET /)
app.include_router(health.router)

# Access codes (GET /access-codes/{code})
app.include_router(access.router)

# Team rows (GET/POST /teams, GET/PATCH /teams/{id}, GET /sections/{section}/teams)
app.include_router(teams.router)

# Questions (GET /questions, POST /questions/{id}/verify, ...)
app.include_router(questions.router)

# Leaderboard (GET /leaderboard/{section})
app.include_router(leaderboard.router)

# Admin endpoints (POST /admin/login, /admin/start-timer, ...)
app.include_router(admin.router)

# Config endpoint (GET /config)
app.include_router(config_router.router)


# ==================== RUN SERVER ====================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
