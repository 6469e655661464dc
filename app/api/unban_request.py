# app/api/unban_request.py
"""Unban request endpoints: banned accounts petition, admins decide."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from app import models, schemas
from app.database import get_db
from app.models.account import ACCOUNT_TYPES
from app.services import unban_request_service
from app.services.exceptions import ValidationFailed
from app.services.unban_request_service import unban_request_to_dict
from app.utils.security import moderator_id_of, require_admin

router = APIRouter(prefix="/unban-requests", tags=["Unban Requests"])


@router.post("/submit")
def submit_unban_request(payload: schemas.UnbanRequestCreate, db: Session = Depends(get_db)):
    # Banned accounts cannot log in, so this route is open.
    result = unban_request_service.submit_unban_request(
        db,
        requester_type=payload.requester_type,
        requester_id=payload.requester_id,
        request_message=payload.request_message,
    )
    return {"success": True, **result}


@router.get("/my-request/{requester_type}/{requester_id}")
def my_unban_request(requester_type: str, requester_id: int, db: Session = Depends(get_db)):
    if requester_type not in ACCOUNT_TYPES:
        raise ValidationFailed('Invalid requester type. Must be "user" or "doctor"')
    latest = unban_request_service.get_latest_request(
        db, requester_type=requester_type, requester_id=requester_id
    )
    return {
        "success": True,
        "request": unban_request_to_dict(latest) if latest else None,
    }


@router.get("/all")
def all_unban_requests(
    status: Optional[str] = Query(None),
    admin: models.Admin = Depends(require_admin),
    db: Session = Depends(get_db),
):
    requests = unban_request_service.list_unban_requests(db, status=status)
    return {"success": True, "requests": [unban_request_to_dict(r) for r in requests]}


@router.post("/approve")
def approve_unban_request(
    payload: schemas.UnbanDecision,
    request: Request,
    admin: models.Admin = Depends(require_admin),
    db: Session = Depends(get_db),
):
    result = unban_request_service.approve(
        db,
        request_id=payload.request_id,
        moderator_id=moderator_id_of(admin),
        admin_response=payload.admin_response,
        http_request=request,
    )
    return {"success": True, **result}


@router.post("/deny")
def deny_unban_request(
    payload: schemas.UnbanDecision,
    request: Request,
    admin: models.Admin = Depends(require_admin),
    db: Session = Depends(get_db),
):
    result = unban_request_service.deny(
        db,
        request_id=payload.request_id,
        moderator_id=moderator_id_of(admin),
        admin_response=payload.admin_response,
        http_request=request,
    )
    return {"success": True, **result}
