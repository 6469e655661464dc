# app/main.py
import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import admin, auth, ban, notification, report, unban_request, ws
from app.config import settings
from app.core.exception_handlers import setup_exception_handlers
from app.database import Base, engine
from app.services.realtime import manager
from app.tasks import start_ban_sweeper

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create database tables
    Base.metadata.create_all(bind=engine)
    manager.bind_loop(asyncio.get_running_loop())
    scheduler = start_ban_sweeper()
    app.state.scheduler = scheduler
    logger.info("PawVaidya moderation API started (env=%s)", settings.APP_ENV)
    yield
    if scheduler:
        scheduler.shutdown(wait=False)
    manager.bind_loop(None)


# Initialize FastAPI app
app = FastAPI(title="PawVaidya Moderation API", lifespan=lifespan)

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_exception_handlers(app)

# API routers
app.include_router(auth.router)           # /auth/*
app.include_router(ban.router)            # /ban/*
app.include_router(report.router)         # /reports/*
app.include_router(unban_request.router)  # /unban-requests/*
app.include_router(admin.router)          # /admin/*
app.include_router(notification.router)   # /notifications/*
app.include_router(ws.router)             # /ws/{account_type}/{account_id}


@app.get("/health")
def health_check():
    return {
        "status": "healthy",
        "message": "PawVaidya moderation API is running",
        "version": "1.0.0",
    }
