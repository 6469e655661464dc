# app/models/account.py
import enum

from sqlalchemy import Column, Integer, String, Boolean, TIMESTAMP


class AccountType(str, enum.Enum):
    USER = "user"
    DOCTOR = "doctor"


ACCOUNT_TYPES = tuple(t.value for t in AccountType)


class BanFieldsMixin:
    """Ban state shared by every account table that can be moderated."""

    is_banned = Column(Boolean, default=False, nullable=False, index=True)
    ban_reason = Column(String(500), default="", nullable=False)
    banned_at = Column(TIMESTAMP, nullable=True)
    banned_by = Column(String(64), nullable=True)
    unban_at = Column(TIMESTAMP, nullable=True, index=True)
    unban_request_attempts = Column(Integer, default=0, nullable=False)
    # Reason given on the last plain unban; ban_reason itself is cleared.
    last_unban_reason = Column(String(500), nullable=True)
