# app/crud/report.py
"""
Report CRUD Operations
Queries and bulk flag updates over the reports table.
"""

from sqlalchemy import func
from sqlalchemy.orm import Session
from typing import Dict, Iterable, List, Optional

from app.models.report import Report, OPEN_REPORT_STATUSES, ReportStatus


def create_report(
    db: Session,
    *,
    reporter_type: str,
    reporter_id: int,
    reported_type: str,
    reported_id: int,
    reason: str,
    description: str,
    appointment_id: Optional[int] = None,
) -> Report:
    report = Report(
        reporter_type=reporter_type,
        reporter_id=reporter_id,
        reported_type=reported_type,
        reported_id=reported_id,
        appointment_id=appointment_id,
        reason=reason,
        description=description,
        evidence=[],
        status=ReportStatus.PENDING.value,
    )
    db.add(report)
    db.flush()
    return report


def get_report(db: Session, report_id: int) -> Optional[Report]:
    return db.query(Report).filter(Report.id == report_id).first()


def get_open_report_for_pair(
    db: Session,
    *,
    reporter_type: str,
    reporter_id: int,
    reported_type: str,
    reported_id: int,
) -> Optional[Report]:
    """An existing pending or under-review report from reporter against reported."""
    # Users and doctors have separate id sequences, so the types are part of the key.
    return db.query(Report).filter(
        Report.reporter_type == reporter_type,
        Report.reporter_id == reporter_id,
        Report.reported_type == reported_type,
        Report.reported_id == reported_id,
        Report.status.in_(OPEN_REPORT_STATUSES),
    ).first()


def list_reports(
    db: Session,
    *,
    status: Optional[str] = None,
    reported_type: Optional[str] = None,
    trashed: bool = False,
) -> List[Report]:
    query = db.query(Report).filter(Report.is_trashed.is_(trashed))
    if status:
        query = query.filter(Report.status == status)
    if reported_type:
        query = query.filter(Report.reported_type == reported_type)
    return query.order_by(Report.created_at.desc(), Report.id.desc()).all()


def list_reports_by_reporter(db: Session, account_type: str, account_id: int) -> List[Report]:
    return db.query(Report).filter(
        Report.reporter_id == account_id,
        Report.reporter_type == account_type,
    ).order_by(Report.created_at.desc(), Report.id.desc()).all()


def list_reports_against(db: Session, account_type: str, account_id: int) -> List[Report]:
    return db.query(Report).filter(
        Report.reported_id == account_id,
        Report.reported_type == account_type,
    ).order_by(Report.created_at.desc(), Report.id.desc()).all()


def count_by_status(db: Session) -> Dict[str, int]:
    rows = db.query(Report.status, func.count(Report.id)).group_by(Report.status).all()
    counts = {status.value: 0 for status in ReportStatus}
    for status, count in rows:
        counts[status] = int(count)
    return counts


def count_by_reason(db: Session) -> List[Dict[str, object]]:
    rows = (
        db.query(Report.reason, func.count(Report.id).label("count"))
        .group_by(Report.reason)
        .order_by(func.count(Report.id).desc())
        .all()
    )
    return [{"reason": reason, "count": int(count)} for reason, count in rows]


# ======================
# BULK FLAG UPDATES
# ======================

def bulk_set_flags(db: Session, report_ids: Iterable[int], values: Dict[str, object]) -> int:
    """Single UPDATE over the given ids; unknown ids are ignored."""
    ids = list(report_ids)
    if not ids:
        return 0
    updated = db.query(Report).filter(Report.id.in_(ids)).update(
        values, synchronize_session=False
    )
    return int(updated)


def bulk_delete(db: Session, report_ids: Iterable[int]) -> int:
    ids = list(report_ids)
    if not ids:
        return 0
    deleted = db.query(Report).filter(Report.id.in_(ids)).delete(synchronize_session=False)
    return int(deleted)
