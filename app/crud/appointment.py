# app/crud/appointment.py
"""Bulk appointment operations consumed by moderation."""

from sqlalchemy.orm import Session

from app.models.account import AccountType
from app.models.appointment import Appointment


def _owner_column(account_type: str):
    if account_type == AccountType.DOCTOR.value:
        return Appointment.doctor_id
    return Appointment.user_id


def cancel_all_active_for(db: Session, account_id: int, account_type: str, reason: str) -> int:
    """
    Cancel every appointment of an account that is neither completed nor
    already cancelled. Flushes only; the caller owns the commit.

    Returns:
        Number of appointments cancelled
    """
    updated = db.query(Appointment).filter(
        _owner_column(account_type) == account_id,
        Appointment.cancelled.is_(False),
        Appointment.is_completed.is_(False),
    ).update(
        {"cancelled": True, "cancel_reason": reason},
        synchronize_session=False,
    )
    return int(updated)


def delete_all_for(db: Session, account_id: int, account_type: str) -> int:
    deleted = db.query(Appointment).filter(
        _owner_column(account_type) == account_id,
    ).delete(synchronize_session=False)
    return int(deleted)
