# app/crud/unban_request.py
from sqlalchemy.orm import Session
from typing import List, Optional

from app.models.unban_request import UnbanRequest, UnbanRequestStatus


def create_unban_request(
    db: Session,
    *,
    requester_type: str,
    requester_id: int,
    requester_name: str,
    requester_email: str,
    ban_reason: str,
    request_message: str,
) -> UnbanRequest:
    request = UnbanRequest(
        requester_type=requester_type,
        requester_id=requester_id,
        requester_name=requester_name,
        requester_email=requester_email,
        ban_reason=ban_reason,
        request_message=request_message,
        status=UnbanRequestStatus.PENDING.value,
    )
    db.add(request)
    db.flush()
    return request


def get_unban_request(db: Session, request_id: int) -> Optional[UnbanRequest]:
    return db.query(UnbanRequest).filter(UnbanRequest.id == request_id).first()


def get_pending_for_requester(db: Session, requester_type: str, requester_id: int) -> Optional[UnbanRequest]:
    return db.query(UnbanRequest).filter(
        UnbanRequest.requester_type == requester_type,
        UnbanRequest.requester_id == requester_id,
        UnbanRequest.status == UnbanRequestStatus.PENDING.value,
    ).first()


def get_latest_for_requester(db: Session, requester_type: str, requester_id: int) -> Optional[UnbanRequest]:
    return db.query(UnbanRequest).filter(
        UnbanRequest.requester_type == requester_type,
        UnbanRequest.requester_id == requester_id,
    ).order_by(UnbanRequest.created_at.desc(), UnbanRequest.id.desc()).first()


def list_unban_requests(db: Session, *, status: Optional[str] = None) -> List[UnbanRequest]:
    query = db.query(UnbanRequest)
    if status:
        query = query.filter(UnbanRequest.status == status)
    return query.order_by(UnbanRequest.created_at.desc(), UnbanRequest.id.desc()).all()
