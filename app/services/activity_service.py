"""Moderator activity trail."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import Request
from sqlalchemy.orm import Session

from app.models.activity_log import ActivityLog

logger = logging.getLogger(__name__)


def log_activity(
    db: Session,
    *,
    actor_id: Optional[str],
    actor_type: str,
    activity_type: str,
    description: str,
    request: Optional[Request] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Optional[ActivityLog]:
    """Record an activity entry in its own commit. Failures are only logged."""
    ip_address = ""
    user_agent = ""
    if request is not None:
        ip_address = request.client.host if request.client else ""
        user_agent = request.headers.get("user-agent", "")[:255]

    try:
        entry = ActivityLog(
            actor_id=actor_id,
            actor_type=actor_type,
            activity_type=activity_type,
            description=description,
            ip_address=ip_address,
            user_agent=user_agent,
            details=metadata or {},
        )
        db.add(entry)
        db.commit()
        return entry
    except Exception as exc:
        db.rollback()
        logger.warning("Activity log write failed (%s): %s", activity_type, exc)
        return None


def list_activity(
    db: Session,
    *,
    actor_type: Optional[str] = None,
    activity_type: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
) -> List[ActivityLog]:
    query = db.query(ActivityLog)
    if actor_type:
        query = query.filter(ActivityLog.actor_type == actor_type)
    if activity_type:
        query = query.filter(ActivityLog.activity_type == activity_type)
    return (
        query.order_by(ActivityLog.timestamp.desc(), ActivityLog.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )
