"""Scheduled lifting of expired bans."""

from __future__ import annotations

import logging
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler

from app.config import settings
from app.database import SessionLocal
from app.services.ban_service import lift_expired_bans

logger = logging.getLogger(__name__)


def _sweep_job() -> None:
    db = SessionLocal()
    try:
        lifted = lift_expired_bans(db)
        if lifted:
            logger.info("Ban sweep lifted %s expired bans", lifted)
    except Exception:
        logger.exception("Ban sweep failed")
    finally:
        db.close()


def start_ban_sweeper() -> Optional[BackgroundScheduler]:
    if not settings.BAN_SWEEP_ENABLED or settings.APP_ENV.lower() == "test":
        return None

    scheduler = BackgroundScheduler()
    scheduler.add_job(
        _sweep_job,
        "interval",
        minutes=settings.BAN_SWEEP_INTERVAL_MINUTES,
        id="ban_expiry_sweep",
        max_instances=1,
        coalesce=True,
    )
    scheduler.start()
    logger.info("Ban sweeper started (every %s min)", settings.BAN_SWEEP_INTERVAL_MINUTES)
    return scheduler
