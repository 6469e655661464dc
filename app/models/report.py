import enum

from sqlalchemy import Column, Integer, String, Text, Boolean, JSON, TIMESTAMP, Index, func

from app.database import Base


class ReportReason(str, enum.Enum):
    INAPPROPRIATE_BEHAVIOR = "inappropriate_behavior"
    HARASSMENT = "harassment"
    UNPROFESSIONAL_CONDUCT = "unprofessional_conduct"
    FAKE_PROFILE = "fake_profile"
    SPAM = "spam"
    NO_SHOW = "no_show"
    PAYMENT_ISSUE = "payment_issue"
    MEDICAL_MALPRACTICE = "medical_malpractice"
    PRIVACY_VIOLATION = "privacy_violation"
    OTHER = "other"


class ReportStatus(str, enum.Enum):
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    RESOLVED = "resolved"
    DISMISSED = "dismissed"


class ReportAction(str, enum.Enum):
    NONE = "none"
    WARNING = "warning"
    TEMPORARY_BAN = "temporary_ban"
    PERMANENT_BAN = "permanent_ban"
    ACCOUNT_SUSPENDED = "account_suspended"


OPEN_REPORT_STATUSES = (ReportStatus.PENDING.value, ReportStatus.UNDER_REVIEW.value)


class Report(Base):
    __tablename__ = "reports"

    id = Column(Integer, primary_key=True, index=True)
    # Reporter and reported may live in either account table, so no foreign keys.
    reporter_type = Column(String(10), nullable=False)
    reporter_id = Column(Integer, nullable=False)
    reported_type = Column(String(10), nullable=False)
    reported_id = Column(Integer, nullable=False, index=True)
    appointment_id = Column(Integer, nullable=True)
    reason = Column(String(40), nullable=False)
    description = Column(Text, nullable=False)
    evidence = Column(JSON, nullable=False, default=list)
    status = Column(String(20), nullable=False, default=ReportStatus.PENDING.value, index=True)
    admin_notes = Column(Text, nullable=False, default="")
    action_taken = Column(String(30), nullable=False, default=ReportAction.NONE.value)
    reviewed_by = Column(String(64), nullable=True)
    reviewed_at = Column(TIMESTAMP, nullable=True)
    is_read = Column(Boolean, nullable=False, default=False)
    is_trashed = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(TIMESTAMP, server_default=func.now(), nullable=False)
    updated_at = Column(TIMESTAMP, onupdate=func.now())

    __table_args__ = (
        Index("ix_reports_reporter_reported", "reporter_id", "reported_id"),
        Index("ix_reports_reported_status", "reported_id", "status"),
    )
