# app/models/__init__.py
# Import models in dependency order
from .account import AccountType, ACCOUNT_TYPES
from .admin import Admin
from .user import User
from .doctor import Doctor
from .appointment import Appointment  # Needs User and Doctor
from .report import Report, ReportReason, ReportStatus, ReportAction
from .unban_request import UnbanRequest, UnbanRequestStatus
from .notification import Notification
from .activity_log import ActivityLog

__all__ = [
    "AccountType",
    "ACCOUNT_TYPES",
    "Admin",
    "User",
    "Doctor",
    "Appointment",
    "Report",
    "ReportReason",
    "ReportStatus",
    "ReportAction",
    "UnbanRequest",
    "UnbanRequestStatus",
    "Notification",
    "ActivityLog",
]
