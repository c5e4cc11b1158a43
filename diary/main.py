# diary api
# fastapi app with async mongodb, jwt auth, and live per-session diary workspaces

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from diary.config import settings
from diary.services.db import db
from diary.state.registry import registry
from diary.routers import auth, diary

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """startup: connect to mongodb. shutdown: close workspaces, then the connection."""
    logger.info("Starting diary backend...")
    await db.connect()
    logger.info("Diary backend ready")
    yield
    logger.info("Shutting down diary backend...")
    await registry.close_all()
    await db.close()


app = FastAPI(
    title="Diary API",
    description="Personal diary: accounts, a live entry list and the entry editor",
    version="0.1.0",
    lifespan=lifespan,
)

# cors — allow frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL, "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# register routers
app.include_router(auth.router)
app.include_router(diary.router)


@app.get("/health")
async def health_check():
    """basic health check endpoint"""
    return {"status": "ok", "service": "diary-api"}
