# app/services/ban_service.py
"""
Ban Service Layer
Account ban and unban transitions for users and doctors.

Two entry points exist for each direction:
- the moderation panel (``ban`` / ``unban``): timed bans, no appointment
  cascade, unban keeps banned_at/banned_by as the last-ban audit trail;
- the report workflow (``ban_from_report`` / ``unban_from_report``):
  permanent bans that cancel the account's active appointments, and unbans
  that wipe every ban field.

Both are thin wrappers over ``apply_ban`` and ``lift_ban``.
"""

import logging
import re
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.crud import account as account_crud
from app.crud import appointment as appointment_crud
from app.models.account import ACCOUNT_TYPES
from app.models.doctor import Doctor
from app.services import activity_service, notification_service
from app.services.exceptions import NotFound, PreconditionFailed, ValidationFailed
from app.utils.timeutils import utcnow

logger = logging.getLogger(__name__)


PERMANENT = "permanent"
DURATION_PATTERN = re.compile(r"^(\d+)([hdwm])$")
DURATION_UNITS = {
    "h": timedelta(hours=1),
    "d": timedelta(days=1),
    "w": timedelta(weeks=1),
    "m": timedelta(days=30),
}
DEFAULT_UNBAN_REASON = "Unbanned by admin"
EXPIRED_UNBAN_REASON = "Ban expired"
SYSTEM_MODERATOR = "system"


# ======================
# HELPERS
# ======================

def parse_ban_duration(ban_duration: str, now: datetime) -> Optional[datetime]:
    """
    Turn "permanent" or "<n><h|d|w|m>" into the scheduled unban time.

    Months are 30 days. Returns None for a permanent ban.

    Raises:
        ValidationFailed: If the value does not match the format
    """
    value = (ban_duration or "").strip()
    if value == PERMANENT:
        return None
    match = DURATION_PATTERN.match(value)
    if not match:
        raise ValidationFailed(
            "Invalid ban duration format. Use: 1h, 24h, 7d, 30d, or permanent"
        )
    amount = int(match.group(1))
    try:
        return now + amount * DURATION_UNITS[match.group(2)]
    except OverflowError:
        raise ValidationFailed("Invalid ban duration: value is too large")


def _label(account_type: str) -> str:
    return account_type.capitalize()


def _validate_account_type(account_type: str) -> str:
    normalized = (account_type or "").strip().lower()
    if normalized not in ACCOUNT_TYPES:
        raise ValidationFailed('Invalid account type. Must be "user" or "doctor"')
    return normalized


def _require_account(db: Session, account_type: str, account_id: int):
    account = account_crud.get_account(db, account_type, account_id)
    if not account:
        raise NotFound(f"{_label(account_type)} not found")
    return account


def _commit(db: Session, what: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to persist %s", what)
        raise


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


# ======================
# PRIMITIVES
# ======================

def apply_ban(
    account,
    *,
    reason: str,
    unban_at: Optional[datetime],
    moderator_id: Optional[str],
    now: datetime,
    take_offline: bool = False,
) -> None:
    """Set every ban field on an account. Does not commit."""
    account.is_banned = True
    account.ban_reason = reason
    account.banned_at = now
    account.banned_by = moderator_id
    account.unban_at = unban_at
    account.unban_request_attempts = 0
    if take_offline and isinstance(account, Doctor):
        account.available = False


def lift_ban(account, *, clear_history: bool, restore_availability: bool = False) -> None:
    """
    Clear the ban on an account. Does not commit.

    ``clear_history`` also wipes banned_at/banned_by; otherwise they stay as
    a record of the last ban.
    """
    account.is_banned = False
    account.ban_reason = ""
    account.unban_at = None
    account.unban_request_attempts = 0
    if clear_history:
        account.banned_at = None
        account.banned_by = None
    if restore_availability and isinstance(account, Doctor):
        account.available = True


def _cascade_appointments(db: Session, account_id: int, account_type: str) -> int:
    """Cancel the account's active appointments after the ban is committed."""
    reason = f"{_label(account_type)} account has been banned"
    try:
        cancelled = appointment_crud.cancel_all_active_for(db, account_id, account_type, reason)
        db.commit()
    except Exception as exc:
        db.rollback()
        logger.warning(
            "Appointment cancellation failed for banned %s %s: %s",
            account_type,
            account_id,
            exc,
        )
        return 0
    logger.info("Cancelled %s appointments for banned %s %s", cancelled, account_type, account_id)
    return cancelled


def _emit_banned(db: Session, account, account_type: str, reason: str, moderator_id: Optional[str]) -> bool:
    try:
        return notification_service.notify_banned(
            db,
            account_id=account.id,
            account_type=account_type,
            message=f"Your account has been banned. Reason: {reason}",
            ban_reason=reason,
            actor_id=moderator_id,
        )
    except Exception as exc:
        logger.warning("Banned notification failed for %s %s: %s", account_type, account.id, exc)
        return False


# ======================
# MODERATION PANEL
# ======================

def ban(
    db: Session,
    *,
    account_id: Optional[int],
    account_type: Optional[str],
    ban_duration: Optional[str],
    reason: Optional[str],
    moderator_id: str,
    request: Optional[Request] = None,
) -> Dict[str, Any]:
    """
    Ban a user or doctor for a fixed duration or permanently.

    Banning an already-banned account overwrites the previous ban. Active
    appointments are left untouched on this path.

    Raises:
        ValidationFailed: Missing field, bad account type or bad duration
        NotFound: Account does not exist
    """
    reason = (reason or "").strip()
    ban_duration = (ban_duration or "").strip()
    if not account_id or not account_type or not ban_duration or not reason:
        raise ValidationFailed(
            "Missing required fields: account_id, account_type, ban_duration, ban_reason"
        )
    account_type = _validate_account_type(account_type)
    now = utcnow()
    unban_at = parse_ban_duration(ban_duration, now)
    account = _require_account(db, account_type, account_id)

    apply_ban(account, reason=reason, unban_at=unban_at, moderator_id=moderator_id, now=now)
    _commit(db, f"ban of {account_type} {account_id}")
    logger.info(
        "Banned %s %s for %s by %s (unban_at=%s)",
        account_type,
        account_id,
        ban_duration,
        moderator_id,
        unban_at,
    )

    activity_service.log_activity(
        db,
        actor_id=moderator_id,
        actor_type="admin",
        activity_type="ban_user",
        description=f"Banned {account_type}: {account.email} for {ban_duration}. Reason: {reason}",
        request=request,
        metadata={
            "account_id": account_id,
            "account_type": account_type,
            "ban_duration": ban_duration,
            "ban_reason": reason,
            "unban_at": _iso(unban_at),
        },
    )
    _emit_banned(db, account, account_type, reason, moderator_id)

    return {
        "message": f"{_label(account_type)} banned successfully for {ban_duration}",
        "data": {
            "account_id": account.id,
            "name": account.name,
            "email": account.email,
            "ban_duration": ban_duration,
            "ban_reason": reason,
            "unban_at": _iso(unban_at),
            "banned_at": _iso(account.banned_at),
        },
    }


def unban(
    db: Session,
    *,
    account_id: Optional[int],
    account_type: Optional[str],
    reason: Optional[str],
    moderator_id: str,
    request: Optional[Request] = None,
) -> Dict[str, Any]:
    """
    Lift a ban from the moderation panel.

    The reason is kept in last_unban_reason; banned_at/banned_by survive.

    Raises:
        ValidationFailed: Missing field or bad account type
        NotFound: Account does not exist
        PreconditionFailed: Account is not banned
    """
    if not account_id or not account_type:
        raise ValidationFailed("Missing required fields: account_id, account_type")
    account_type = _validate_account_type(account_type)
    account = _require_account(db, account_type, account_id)
    if not account.is_banned:
        raise PreconditionFailed(f"{_label(account_type)} is not banned")

    unban_reason = (reason or "").strip() or DEFAULT_UNBAN_REASON
    lift_ban(account, clear_history=False)
    account.last_unban_reason = unban_reason
    _commit(db, f"unban of {account_type} {account_id}")
    unbanned_at = utcnow()
    logger.info("Unbanned %s %s by %s", account_type, account_id, moderator_id)

    activity_service.log_activity(
        db,
        actor_id=moderator_id,
        actor_type="admin",
        activity_type="unban_user",
        description=f"Unbanned {account_type}: {account.email}. Reason: {unban_reason}",
        request=request,
        metadata={
            "account_id": account_id,
            "account_type": account_type,
            "unban_reason": unban_reason,
        },
    )
    notification_service.notify_account(
        db,
        recipient_type=account_type,
        recipient_id=account.id,
        actor_id=moderator_id,
        event_type="account_unbanned",
        message=f"Your account has been reinstated. Reason: {unban_reason}",
    )

    return {
        "message": f"{_label(account_type)} unbanned successfully",
        "data": {
            "account_id": account.id,
            "name": account.name,
            "email": account.email,
            "unban_reason": unban_reason,
            "unbanned_at": _iso(unbanned_at),
        },
    }


def get_ban_status(db: Session, *, account_id: Optional[int], account_type: Optional[str]) -> Dict[str, Any]:
    if not account_id or not account_type:
        raise ValidationFailed("Missing required fields: account_id, account_type")
    account_type = _validate_account_type(account_type)
    account = _require_account(db, account_type, account_id)
    return {
        "is_banned": account.is_banned,
        "ban_reason": account.ban_reason,
        "banned_at": _iso(account.banned_at),
        "unban_at": _iso(account.unban_at),
        "banned_by": account.banned_by,
        "unban_request_attempts": account.unban_request_attempts,
    }


# ======================
# REPORT WORKFLOW
# ======================

def ban_from_report(
    db: Session,
    *,
    account_id: int,
    account_type: str,
    reason: Optional[str],
    moderator_id: str,
    request: Optional[Request] = None,
) -> Dict[str, Any]:
    """
    Permanently ban the party of a report and cancel its active appointments.

    Doctors are also taken out of the booking pool.
    """
    account_type = _validate_account_type(account_type)
    reason = (reason or "").strip()
    if not reason:
        raise ValidationFailed("A ban reason is required")
    account = _require_account(db, account_type, account_id)

    apply_ban(
        account,
        reason=reason,
        unban_at=None,
        moderator_id=moderator_id,
        now=utcnow(),
        take_offline=True,
    )
    _commit(db, f"report ban of {account_type} {account_id}")
    logger.info("Banned %s %s from report workflow by %s", account_type, account_id, moderator_id)

    cancelled = _cascade_appointments(db, account.id, account_type)
    activity_service.log_activity(
        db,
        actor_id=moderator_id,
        actor_type="admin",
        activity_type="report_ban",
        description=f"Banned {account_type}: {account.email} from report. Reason: {reason}",
        request=request,
        metadata={
            "account_id": account_id,
            "account_type": account_type,
            "ban_reason": reason,
            "cancelled_appointments": cancelled,
        },
    )
    _emit_banned(db, account, account_type, reason, moderator_id)

    return {
        "message": (
            f"{_label(account_type)} {account.name} has been banned successfully. "
            f"{cancelled} appointments cancelled."
        ),
        "cancelled_appointments": cancelled,
    }


def unban_from_report(
    db: Session,
    *,
    account_id: int,
    account_type: str,
    moderator_id: str,
    request: Optional[Request] = None,
) -> Dict[str, Any]:
    """Clean-slate unban from the report workflow; restores doctor availability."""
    account_type = _validate_account_type(account_type)
    account = _require_account(db, account_type, account_id)

    lift_ban(account, clear_history=True, restore_availability=True)
    _commit(db, f"report unban of {account_type} {account_id}")
    logger.info("Unbanned %s %s from report workflow by %s", account_type, account_id, moderator_id)

    activity_service.log_activity(
        db,
        actor_id=moderator_id,
        actor_type="admin",
        activity_type="report_unban",
        description=f"Unbanned {account_type}: {account.email} from report workflow",
        request=request,
        metadata={"account_id": account_id, "account_type": account_type},
    )
    return {"message": f"{_label(account_type)} {account.name} has been unbanned successfully"}


# ======================
# SCHEDULED EXPIRY
# ======================

def lift_expired_bans(db: Session, now: Optional[datetime] = None) -> int:
    """Unban every account whose unban_at has passed. Returns the count."""
    now = now or utcnow()
    lifted = []
    for account_type in ACCOUNT_TYPES:
        for account in account_crud.list_expired_bans(db, account_type, now):
            lift_ban(account, clear_history=False)
            account.last_unban_reason = EXPIRED_UNBAN_REASON
            lifted.append((account_type, account.id, account.email))
    if not lifted:
        return 0

    _commit(db, "expired ban sweep")
    for account_type, account_id, email in lifted:
        logger.info("Ban expired for %s %s", account_type, account_id)
        activity_service.log_activity(
            db,
            actor_id=SYSTEM_MODERATOR,
            actor_type="admin",
            activity_type="ban_expired",
            description=f"Ban expired for {account_type}: {email}",
            metadata={"account_id": account_id, "account_type": account_type},
        )
    return len(lifted)


__all__ = [
    "parse_ban_duration",
    "apply_ban",
    "lift_ban",
    "ban",
    "unban",
    "get_ban_status",
    "ban_from_report",
    "unban_from_report",
    "lift_expired_bans",
]
