# app/services/report_service.py
"""
Report Service Layer
Submission, admin review and the soft-delete pipeline for account reports.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.crud import account as account_crud
from app.crud import report as report_crud
from app.models.account import ACCOUNT_TYPES, AccountType
from app.models.report import Report, ReportAction, ReportReason, ReportStatus
from app.services.exceptions import NotFound, PreconditionFailed, ValidationFailed
from app.utils.timeutils import utcnow

logger = logging.getLogger(__name__)

MAX_DESCRIPTION_LENGTH = 1000
REPORT_REASONS = {reason.value for reason in ReportReason}
REPORT_STATUSES = {status.value for status in ReportStatus}
REPORT_ACTIONS = {action.value for action in ReportAction}


def report_to_dict(report: Report) -> Dict[str, Any]:
    return {
        "id": report.id,
        "reporter_type": report.reporter_type,
        "reporter_id": report.reporter_id,
        "reported_type": report.reported_type,
        "reported_id": report.reported_id,
        "appointment_id": report.appointment_id,
        "reason": report.reason,
        "description": report.description,
        "evidence": list(report.evidence or []),
        "status": report.status,
        "admin_notes": report.admin_notes,
        "action_taken": report.action_taken,
        "reviewed_by": report.reviewed_by,
        "reviewed_at": report.reviewed_at.isoformat() if report.reviewed_at else None,
        "is_read": report.is_read,
        "is_trashed": report.is_trashed,
        "created_at": report.created_at.isoformat() if report.created_at else None,
    }


def _commit(db: Session) -> None:
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise


# ======================
# SUBMISSION
# ======================

def submit_report(
    db: Session,
    *,
    reporter_type: Optional[str],
    reporter_id: Optional[int],
    reported_type: Optional[str],
    reported_id: Optional[int],
    reason: Optional[str],
    description: Optional[str],
    appointment_id: Optional[int] = None,
) -> Dict[str, Any]:
    """
    File a report from one account against another.

    Only one open (pending or under review) report may exist per
    reporter/reported pair; a new one is accepted once the previous report
    is resolved or dismissed.

    Raises:
        ValidationFailed: Missing or malformed fields
        NotFound: Reporter or reported account does not exist
        PreconditionFailed: An open report for the pair already exists
    """
    description = (description or "").strip()
    if not (reporter_type and reporter_id and reported_type and reported_id and reason and description):
        raise ValidationFailed("All fields are required")
    if reporter_type not in ACCOUNT_TYPES or reported_type not in ACCOUNT_TYPES:
        raise ValidationFailed('Account types must be "user" or "doctor"')
    if reason not in REPORT_REASONS:
        raise ValidationFailed(f"Invalid report reason: {reason}")
    if len(description) > MAX_DESCRIPTION_LENGTH:
        raise ValidationFailed(
            f"Description must be {MAX_DESCRIPTION_LENGTH} characters or less"
        )
    if reporter_type == reported_type and reporter_id == reported_id:
        raise ValidationFailed("You cannot report yourself")

    if not account_crud.get_account(db, reporter_type, reporter_id):
        raise NotFound("Reporter not found")
    if not account_crud.get_account(db, reported_type, reported_id):
        raise NotFound("Reported person not found")

    existing = report_crud.get_open_report_for_pair(
        db,
        reporter_type=reporter_type,
        reporter_id=reporter_id,
        reported_type=reported_type,
        reported_id=reported_id,
    )
    if existing:
        raise PreconditionFailed("You have already reported this person")

    report = report_crud.create_report(
        db,
        reporter_type=reporter_type,
        reporter_id=reporter_id,
        reported_type=reported_type,
        reported_id=reported_id,
        reason=reason,
        description=description,
        appointment_id=appointment_id,
    )
    _commit(db)
    logger.info(
        "Report %s filed by %s %s against %s %s (%s)",
        report.id,
        reporter_type,
        reporter_id,
        reported_type,
        reported_id,
        reason,
    )
    return {
        "message": "Report submitted successfully. Our team will review it shortly.",
        "report_id": report.id,
    }


def add_evidence(db: Session, *, report_id: int, evidence_url: str) -> str:
    url = (evidence_url or "").strip()
    if not url.startswith(("http://", "https://")):
        raise ValidationFailed("Evidence must be an http(s) URL")
    report = get_report(db, report_id)
    # Reassign so the JSON column is flagged dirty.
    report.evidence = [*(report.evidence or []), url]
    _commit(db)
    return url


# ======================
# ADMIN REVIEW
# ======================

def get_report(db: Session, report_id: int) -> Report:
    report = report_crud.get_report(db, report_id)
    if not report:
        raise NotFound("Report not found")
    return report


def update_report_status(
    db: Session,
    *,
    report_id: int,
    status: str,
    moderator_id: str,
    admin_notes: Optional[str] = None,
    action_taken: Optional[str] = None,
) -> Report:
    """
    Move a report to any status and stamp the reviewer.

    Any status is reachable from any other. Notes and action are only
    overwritten when supplied.
    """
    if status not in REPORT_STATUSES:
        raise ValidationFailed(
            "Status must be one of: pending, under_review, resolved, dismissed"
        )
    if action_taken and action_taken not in REPORT_ACTIONS:
        raise ValidationFailed(f"Invalid action: {action_taken}")

    report = get_report(db, report_id)
    report.status = status
    if admin_notes:
        report.admin_notes = admin_notes
    if action_taken:
        report.action_taken = action_taken
    report.reviewed_by = moderator_id
    report.reviewed_at = utcnow()
    _commit(db)
    db.refresh(report)
    logger.info("Report %s set to %s by %s", report.id, status, moderator_id)
    return report


def list_reports(
    db: Session,
    *,
    status: Optional[str] = None,
    reported_type: Optional[str] = None,
) -> List[Report]:
    if status and status not in REPORT_STATUSES:
        raise ValidationFailed(
            "Status must be one of: pending, under_review, resolved, dismissed"
        )
    if reported_type and reported_type not in ACCOUNT_TYPES:
        raise ValidationFailed('Reported type must be "user" or "doctor"')
    return report_crud.list_reports(db, status=status, reported_type=reported_type)


def list_trashed_reports(db: Session) -> List[Report]:
    return report_crud.list_reports(db, trashed=True)


def list_my_reports(db: Session, *, account_type: str, account_id: int) -> List[Report]:
    return report_crud.list_reports_by_reporter(db, account_type, account_id)


def list_reports_against(db: Session, *, account_type: str, account_id: int) -> List[Report]:
    return report_crud.list_reports_against(db, account_type, account_id)


def get_statistics(db: Session) -> Dict[str, Any]:
    by_status = report_crud.count_by_status(db)
    return {
        "total_reports": sum(by_status.values()),
        "pending_reports": by_status[ReportStatus.PENDING.value],
        "under_review_reports": by_status[ReportStatus.UNDER_REVIEW.value],
        "resolved_reports": by_status[ReportStatus.RESOLVED.value],
        "dismissed_reports": by_status[ReportStatus.DISMISSED.value],
        "banned_users": account_crud.count_banned(db, AccountType.USER.value),
        "banned_doctors": account_crud.count_banned(db, AccountType.DOCTOR.value),
        "reports_by_reason": report_crud.count_by_reason(db),
    }


# ======================
# SOFT-DELETE PIPELINE
# ======================
# Each call is one bulk statement; ids that do not exist are skipped.

def mark_read(db: Session, report_ids: Iterable[int]) -> int:
    updated = report_crud.bulk_set_flags(db, report_ids, {"is_read": True})
    _commit(db)
    return updated


def move_to_trash(db: Session, report_ids: Iterable[int]) -> int:
    updated = report_crud.bulk_set_flags(db, report_ids, {"is_trashed": True})
    _commit(db)
    logger.info("Moved %s reports to trash", updated)
    return updated


def restore(db: Session, report_ids: Iterable[int]) -> int:
    updated = report_crud.bulk_set_flags(db, report_ids, {"is_trashed": False})
    _commit(db)
    logger.info("Restored %s reports from trash", updated)
    return updated


def delete_permanently(db: Session, report_ids: Iterable[int]) -> int:
    deleted = report_crud.bulk_delete(db, report_ids)
    _commit(db)
    logger.info("Permanently deleted %s reports", deleted)
    return deleted
