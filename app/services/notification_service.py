from __future__ import annotations

import logging
import threading
from typing import List, Optional

from sqlalchemy.orm import Session

from app.crud import account as account_crud
from app.models.notification import Notification
from app.services import realtime
from app.utils.email import is_email_enabled, send_email

logger = logging.getLogger(__name__)


EMAIL_SUBJECT_BY_EVENT = {
    "account_banned": "Your PawVaidya account has been banned",
    "account_unbanned": "Your PawVaidya account has been reinstated",
    "unban_request_approved": "Your unban request was approved",
    "unban_request_denied": "Your unban request was denied",
}


def list_account_notifications(
    db: Session,
    *,
    recipient_type: str,
    recipient_id: int,
    unread_only: bool = False,
    limit: int = 50,
) -> List[Notification]:
    query = db.query(Notification).filter(
        Notification.recipient_type == recipient_type,
        Notification.recipient_id == recipient_id,
    )
    if unread_only:
        query = query.filter(Notification.is_read.is_(False))
    return query.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit).all()


def mark_notification_read(
    db: Session,
    *,
    recipient_type: str,
    recipient_id: int,
    notification_id: int,
) -> Optional[Notification]:
    notification = db.query(Notification).filter(
        Notification.id == notification_id,
        Notification.recipient_type == recipient_type,
        Notification.recipient_id == recipient_id,
    ).first()
    if not notification:
        return None
    notification.is_read = True
    db.commit()
    return notification


def mark_all_notifications_read(db: Session, *, recipient_type: str, recipient_id: int) -> int:
    updated = db.query(Notification).filter(
        Notification.recipient_type == recipient_type,
        Notification.recipient_id == recipient_id,
        Notification.is_read.is_(False),
    ).update({"is_read": True}, synchronize_session=False)
    db.commit()
    return int(updated)


def get_unread_count(db: Session, *, recipient_type: str, recipient_id: int) -> int:
    return db.query(Notification).filter(
        Notification.recipient_type == recipient_type,
        Notification.recipient_id == recipient_id,
        Notification.is_read.is_(False),
    ).count()


def create_notification(
    db: Session,
    *,
    recipient_type: str,
    recipient_id: int,
    actor_id: Optional[str],
    event_type: str,
    message: str,
) -> Notification:
    notification = Notification(
        recipient_type=recipient_type,
        recipient_id=recipient_id,
        actor_id=actor_id,
        event_type=event_type,
        message=message[:500],
    )
    db.add(notification)
    db.flush()
    return notification


def _send_notification_email(to_email: str, subject: str, body_text: str, *, notification_id: Optional[int], recipient_id: Optional[int]) -> None:
    """Send SMTP mail in a background thread so API latency stays low."""
    sent = send_email(
        to_email=to_email,
        subject=subject,
        body_text=body_text,
    )
    if not sent:
        logger.info(
            "Notification email not sent (recipient_id=%s, notification_id=%s)",
            recipient_id,
            notification_id,
        )


def dispatch_email_for_notification(db: Session, notification: Notification) -> bool:
    """
    Best-effort email delivery for a committed notification.
    This function never raises and should not impact request success.
    """
    try:
        if not is_email_enabled():
            return False

        recipient = account_crud.get_account(
            db, notification.recipient_type, notification.recipient_id
        )
        if not recipient or not recipient.email:
            return False

        subject = EMAIL_SUBJECT_BY_EVENT.get(
            notification.event_type,
            "New notification from PawVaidya",
        )
        recipient_name = (recipient.name or "there").strip() or "there"
        body_text = (
            f"Hi {recipient_name},\n\n"
            f"{notification.message}\n\n"
            "If you believe this is a mistake, you can submit an unban request "
            "from the PawVaidya login page."
        )

        worker = threading.Thread(
            target=_send_notification_email,
            args=(
                recipient.email,
                subject,
                body_text,
            ),
            kwargs={
                "notification_id": getattr(notification, "id", None),
                "recipient_id": notification.recipient_id,
            },
            daemon=True,
        )
        worker.start()
        return True
    except Exception as exc:
        logger.warning(
            "Notification email dispatch failed (notification_id=%s): %s",
            getattr(notification, "id", None),
            exc,
        )
        return False


def notify_account(
    db: Session,
    *,
    recipient_type: str,
    recipient_id: int,
    actor_id: Optional[str],
    event_type: str,
    message: str,
) -> Optional[Notification]:
    """Store an in-app notification and mail it. Never raises."""
    try:
        notification = create_notification(
            db,
            recipient_type=recipient_type,
            recipient_id=recipient_id,
            actor_id=actor_id,
            event_type=event_type,
            message=message,
        )
        db.commit()
    except Exception as exc:
        db.rollback()
        logger.warning(
            "Notification not stored for %s %s (%s): %s",
            recipient_type,
            recipient_id,
            event_type,
            exc,
        )
        return None
    dispatch_email_for_notification(db, notification)
    return notification


def notify_banned(
    db: Session,
    *,
    account_id: int,
    account_type: str,
    message: str,
    ban_reason: str = "",
    actor_id: Optional[str] = None,
) -> bool:
    """
    Tell a banned account about the ban and force any live session to log out.

    Fire-and-forget: returns whether a realtime push was scheduled and never
    raises, so a delivery failure cannot undo the ban.
    """
    notify_account(
        db,
        recipient_type=account_type,
        recipient_id=account_id,
        actor_id=actor_id,
        event_type="account_banned",
        message=message,
    )
    try:
        return realtime.manager.push(
            {
                "event": realtime.banned_event_name(account_type),
                "account_id": account_id,
                "account_type": account_type,
                "message": message,
                "ban_reason": ban_reason,
            },
            account_type,
            account_id,
        )
    except Exception as exc:
        logger.warning("Banned event not pushed to %s %s: %s", account_type, account_id, exc)
        return False
