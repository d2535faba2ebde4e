import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from app import models  # noqa: F401  (register tables on Base.metadata)
from app.core.config import settings
from app.core.db import engine, Base
from app.core.errors import register_error_handlers
from app.core.events import LoggingEmitter
from app.core.scheduler import start_scheduler, stop_scheduler
from app.routers import claims, conversations, friends, items, notifications, ratings, users


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown events"""
    # Startup
    if engine.dialect.name == "postgresql":
        with engine.begin() as conn:
            conn.execute(text("CREATE SCHEMA IF NOT EXISTS market"))
    if settings.AUTO_CREATE_TABLES:
        Base.metadata.create_all(bind=engine)
        logger.info("[DB] Tables created")

    if settings.SCHEDULER_ENABLED:
        start_scheduler()

    yield

    # Shutdown
    stop_scheduler()


app = FastAPI(
    title="Surplus Marketplace API",
    version="0.1",
    root_path=settings.ROOT_PATH,
    lifespan=lifespan,
)

# Live events go through this; swap in a real push transport at deploy time
app.state.emitter = LoggingEmitter()

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)


@app.get("/health", tags=["system"])
def health():
    return {"ok": True}


@app.get("/", tags=["system"])
def root():
    return {"service": "surplus-api"}


app.include_router(users.router)
app.include_router(items.router)
app.include_router(claims.router)
app.include_router(conversations.router)
app.include_router(ratings.router)
app.include_router(friends.router)
app.include_router(notifications.router)
