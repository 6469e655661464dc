# app/services/unban_request_service.py
"""
Unban Request Service Layer
Banned accounts petition for reinstatement; admins approve or deny.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.crud import account as account_crud
from app.crud import unban_request as unban_request_crud
from app.models.account import ACCOUNT_TYPES
from app.models.unban_request import UnbanRequest, UnbanRequestStatus
from app.services import activity_service, notification_service
from app.services.ban_service import lift_ban
from app.services.exceptions import NotFound, PreconditionFailed, ValidationFailed
from app.utils.timeutils import utcnow

logger = logging.getLogger(__name__)

APPROVE = "approve"
DENY = "deny"
DEFAULT_APPROVE_RESPONSE = "Your unban request has been approved."
DEFAULT_DENY_RESPONSE = "Your unban request has been denied."


def unban_request_to_dict(request: UnbanRequest) -> Dict[str, Any]:
    return {
        "id": request.id,
        "requester_type": request.requester_type,
        "requester_id": request.requester_id,
        "requester_name": request.requester_name,
        "requester_email": request.requester_email,
        "ban_reason": request.ban_reason,
        "request_message": request.request_message,
        "status": request.status,
        "admin_response": request.admin_response,
        "reviewed_by": request.reviewed_by,
        "reviewed_at": request.reviewed_at.isoformat() if request.reviewed_at else None,
        "created_at": request.created_at.isoformat() if request.created_at else None,
    }


def _commit(db: Session) -> None:
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise


def submit_unban_request(
    db: Session,
    *,
    requester_type: Optional[str],
    requester_id: Optional[int],
    request_message: Optional[str],
) -> Dict[str, Any]:
    """
    File an unban request for a banned account.

    Checks run in order and the first failure wins: the account exists, it
    is banned, it has attempts left, and it has no pending request. The
    attempt is consumed here, whatever the later decision.
    """
    request_message = (request_message or "").strip()
    if not requester_type or not requester_id or not request_message:
        raise ValidationFailed("Missing required fields: requester_type, requester_id, request_message")
    if requester_type not in ACCOUNT_TYPES:
        raise ValidationFailed('Invalid requester type. Must be "user" or "doctor"')

    account = account_crud.get_account(db, requester_type, requester_id)
    if not account:
        raise NotFound(f"{requester_type} not found")
    if not account.is_banned:
        raise PreconditionFailed("Account is not banned")

    max_attempts = settings.MAX_UNBAN_REQUEST_ATTEMPTS
    if (account.unban_request_attempts or 0) >= max_attempts:
        raise PreconditionFailed(
            "You have exceeded the maximum number of unban requests "
            f"({max_attempts} attempts). Please contact support directly."
        )
    if unban_request_crud.get_pending_for_requester(db, requester_type, requester_id):
        raise PreconditionFailed("You already have a pending unban request")

    account.unban_request_attempts = (account.unban_request_attempts or 0) + 1
    request = unban_request_crud.create_unban_request(
        db,
        requester_type=requester_type,
        requester_id=requester_id,
        requester_name=account.name,
        requester_email=account.email,
        ban_reason=account.ban_reason,
        request_message=request_message,
    )
    _commit(db)
    logger.info(
        "Unban request %s filed by %s %s (attempt %s/%s)",
        request.id,
        requester_type,
        requester_id,
        account.unban_request_attempts,
        max_attempts,
    )
    return {"message": "Unban request submitted successfully. Admin will review your request."}


def decide(
    db: Session,
    *,
    request_id: int,
    action: str,
    moderator_id: str,
    admin_response: Optional[str] = None,
    http_request: Optional[Request] = None,
) -> Dict[str, Any]:
    """
    Approve or deny a pending unban request.

    Approval clears every ban field on the account (doctors become available
    again); denial only closes the request. Decided requests are final.

    Raises:
        ValidationFailed: Unknown action
        NotFound: Request or account does not exist
        PreconditionFailed: Request was already processed
    """
    if action not in (APPROVE, DENY):
        raise ValidationFailed('Action must be "approve" or "deny"')

    request = unban_request_crud.get_unban_request(db, request_id)
    if not request:
        raise NotFound("Request not found")
    if request.status != UnbanRequestStatus.PENDING.value:
        raise PreconditionFailed("Request already processed")

    response = (admin_response or "").strip()
    if action == APPROVE:
        account = account_crud.get_account(db, request.requester_type, request.requester_id)
        if not account:
            raise NotFound("Account not found")
        lift_ban(account, clear_history=True, restore_availability=True)
        request.status = UnbanRequestStatus.APPROVED.value
        request.admin_response = response or DEFAULT_APPROVE_RESPONSE
        message = f"{request.requester_name} has been unbanned successfully"
        event_type = "unban_request_approved"
    else:
        request.status = UnbanRequestStatus.DENIED.value
        request.admin_response = response or DEFAULT_DENY_RESPONSE
        message = f"Unban request from {request.requester_name} denied"
        event_type = "unban_request_denied"

    request.reviewed_by = moderator_id
    request.reviewed_at = utcnow()
    _commit(db)
    logger.info("Unban request %s %s by %s", request.id, request.status, moderator_id)

    activity_service.log_activity(
        db,
        actor_id=moderator_id,
        actor_type="admin",
        activity_type=event_type,
        description=f"{message} (request {request.id})",
        request=http_request,
        metadata={
            "request_id": request.id,
            "requester_type": request.requester_type,
            "requester_id": request.requester_id,
        },
    )
    notification_service.notify_account(
        db,
        recipient_type=request.requester_type,
        recipient_id=request.requester_id,
        actor_id=moderator_id,
        event_type=event_type,
        message=request.admin_response,
    )
    return {"message": message}


def approve(
    db: Session,
    *,
    request_id: int,
    moderator_id: str,
    admin_response: Optional[str] = None,
    http_request: Optional[Request] = None,
) -> Dict[str, Any]:
    return decide(
        db,
        request_id=request_id,
        action=APPROVE,
        moderator_id=moderator_id,
        admin_response=admin_response,
        http_request=http_request,
    )


def deny(
    db: Session,
    *,
    request_id: int,
    moderator_id: str,
    admin_response: Optional[str] = None,
    http_request: Optional[Request] = None,
) -> Dict[str, Any]:
    return decide(
        db,
        request_id=request_id,
        action=DENY,
        moderator_id=moderator_id,
        admin_response=admin_response,
        http_request=http_request,
    )


def list_unban_requests(db: Session, *, status: Optional[str] = None) -> List[UnbanRequest]:
    if status and status not in {s.value for s in UnbanRequestStatus}:
        raise ValidationFailed("Status must be one of: pending, approved, denied")
    return unban_request_crud.list_unban_requests(db, status=status)


def get_latest_request(db: Session, *, requester_type: str, requester_id: int) -> Optional[UnbanRequest]:
    return unban_request_crud.get_latest_for_requester(db, requester_type, requester_id)
