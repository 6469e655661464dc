from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.crud import account as account_crud
from app.database import get_db
from app.services import notification_service
from app.utils.security import get_current_account

router = APIRouter(prefix="/notifications", tags=["Notifications"])


def _notification_to_dict(n) -> dict:
    return {
        "id": n.id,
        "recipient_type": n.recipient_type,
        "recipient_id": n.recipient_id,
        "actor_id": n.actor_id,
        "event_type": n.event_type,
        "message": n.message,
        "is_read": n.is_read,
        "created_at": n.created_at.isoformat() if n.created_at else None,
    }


@router.get("/my")
def get_my_notifications(
    unread_only: bool = Query(False),
    limit: int = Query(50, ge=1, le=200),
    current_account=Depends(get_current_account),
    db: Session = Depends(get_db),
):
    notifications = notification_service.list_account_notifications(
        db,
        recipient_type=account_crud.account_type_of(current_account),
        recipient_id=current_account.id,
        unread_only=unread_only,
        limit=limit,
    )
    return [_notification_to_dict(n) for n in notifications]


@router.get("/unread-count")
def get_unread_count(
    current_account=Depends(get_current_account),
    db: Session = Depends(get_db),
):
    count = notification_service.get_unread_count(
        db,
        recipient_type=account_crud.account_type_of(current_account),
        recipient_id=current_account.id,
    )
    return {"unread_count": count}


@router.patch("/read-all")
def mark_all_notifications_read(
    current_account=Depends(get_current_account),
    db: Session = Depends(get_db),
):
    count = notification_service.mark_all_notifications_read(
        db,
        recipient_type=account_crud.account_type_of(current_account),
        recipient_id=current_account.id,
    )
    return {"message": "All notifications marked as read", "updated": count}


@router.patch("/{notification_id}/read")
def mark_notification_read(
    notification_id: int,
    current_account=Depends(get_current_account),
    db: Session = Depends(get_db),
):
    notification = notification_service.mark_notification_read(
        db,
        recipient_type=account_crud.account_type_of(current_account),
        recipient_id=current_account.id,
        notification_id=notification_id,
    )
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")

    return {"message": "Notification marked as read", "id": notification.id}
