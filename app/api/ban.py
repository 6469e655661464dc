# app/api/ban.py
"""Moderation panel ban / unban endpoints (admin only)."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from app import models, schemas
from app.database import get_db
from app.services import ban_service
from app.utils.security import moderator_id_of, require_admin

router = APIRouter(prefix="/ban", tags=["Ban"])


@router.post("/ban")
def ban_account(
    payload: schemas.BanCreate,
    request: Request,
    admin: models.Admin = Depends(require_admin),
    db: Session = Depends(get_db),
):
    result = ban_service.ban(
        db,
        account_id=payload.account_id,
        account_type=payload.account_type,
        ban_duration=payload.ban_duration,
        reason=payload.ban_reason,
        moderator_id=moderator_id_of(admin),
        request=request,
    )
    return {"success": True, **result}


@router.post("/unban")
def unban_account(
    payload: schemas.UnbanBody,
    request: Request,
    admin: models.Admin = Depends(require_admin),
    db: Session = Depends(get_db),
):
    result = ban_service.unban(
        db,
        account_id=payload.account_id,
        account_type=payload.account_type,
        reason=payload.unban_reason,
        moderator_id=moderator_id_of(admin),
        request=request,
    )
    return {"success": True, **result}


@router.get("/status")
def ban_status(
    account_id: Optional[int] = Query(None),
    account_type: Optional[str] = Query(None),
    admin: models.Admin = Depends(require_admin),
    db: Session = Depends(get_db),
):
    data = ban_service.get_ban_status(db, account_id=account_id, account_type=account_type)
    return {"success": True, "data": data}
