# app/api/report.py
"""
Report endpoints.

Reporters file reports and evidence; admins review them, ban or unban the
reported party and run the read / trash / restore / delete pipeline.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from app import models, schemas
from app.crud import account as account_crud
from app.database import get_db
from app.models.account import AccountType
from app.services import ban_service, report_service
from app.services.exceptions import ModerationError, OperationFailed
from app.services.report_service import report_to_dict
from app.utils.security import get_current_account, moderator_id_of, require_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["Reports"])


# ======================
# REPORTER SIDE
# ======================

@router.post("/submit")
def submit_report(payload: schemas.ReportCreate, db: Session = Depends(get_db)):
    result = report_service.submit_report(
        db,
        reporter_type=payload.reporter_type,
        reporter_id=payload.reporter_id,
        reported_type=payload.reported_type,
        reported_id=payload.reported_id,
        reason=payload.reason,
        description=payload.description,
        appointment_id=payload.appointment_id,
    )
    return {"success": True, **result}


@router.post("/evidence")
def add_evidence(payload: schemas.EvidenceAdd, db: Session = Depends(get_db)):
    url = report_service.add_evidence(db, report_id=payload.report_id, evidence_url=payload.evidence_url)
    return {"success": True, "message": "Evidence added", "evidence_url": url}


@router.get("/my-reports")
def my_reports(
    current_account=Depends(get_current_account),
    db: Session = Depends(get_db),
):
    reports = report_service.list_my_reports(
        db,
        account_type=account_crud.account_type_of(current_account),
        account_id=current_account.id,
    )
    return {"success": True, "reports": [report_to_dict(r) for r in reports]}


@router.get("/against-me")
def reports_against_me(
    current_account=Depends(get_current_account),
    db: Session = Depends(get_db),
):
    reports = report_service.list_reports_against(
        db,
        account_type=account_crud.account_type_of(current_account),
        account_id=current_account.id,
    )
    return {"success": True, "reports": [report_to_dict(r) for r in reports]}


# ======================
# ADMIN REVIEW
# ======================

@router.get("/all")
def all_reports(
    status: Optional[str] = Query(None),
    reported_type: Optional[str] = Query(None),
    admin: models.Admin = Depends(require_admin),
    db: Session = Depends(get_db),
):
    reports = report_service.list_reports(db, status=status, reported_type=reported_type)
    return {"success": True, "reports": [report_to_dict(r) for r in reports]}


@router.get("/statistics/overview")
def report_statistics(
    admin: models.Admin = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return {"success": True, "statistics": report_service.get_statistics(db)}


@router.get("/trash-view")
def trashed_reports(
    admin: models.Admin = Depends(require_admin),
    db: Session = Depends(get_db),
):
    reports = report_service.list_trashed_reports(db)
    return {"success": True, "reports": [report_to_dict(r) for r in reports]}


@router.put("/update-status")
def update_report_status(
    payload: schemas.ReportStatusUpdate,
    admin: models.Admin = Depends(require_admin),
    db: Session = Depends(get_db),
):
    report = report_service.update_report_status(
        db,
        report_id=payload.report_id,
        status=payload.status,
        moderator_id=moderator_id_of(admin),
        admin_notes=payload.admin_notes,
        action_taken=payload.action_taken,
    )
    return {
        "success": True,
        "message": "Report status updated successfully",
        "report": report_to_dict(report),
    }


# ======================
# BAN FROM REPORT
# ======================

def _ban_from_report(db: Session, request: Request, admin, account_type: str, payload: schemas.ReportBan):
    try:
        result = ban_service.ban_from_report(
            db,
            account_id=payload.account_id,
            account_type=account_type,
            reason=payload.reason,
            moderator_id=moderator_id_of(admin),
            request=request,
        )
    except ModerationError:
        raise
    except Exception as exc:
        logger.exception("Report ban of %s %s failed", account_type, payload.account_id)
        raise OperationFailed(f"Failed to ban {account_type}", error=str(exc))
    return {"success": True, **result}


def _unban_from_report(db: Session, request: Request, admin, account_type: str, payload: schemas.ReportUnban):
    try:
        result = ban_service.unban_from_report(
            db,
            account_id=payload.account_id,
            account_type=account_type,
            moderator_id=moderator_id_of(admin),
            request=request,
        )
    except ModerationError:
        raise
    except Exception as exc:
        logger.exception("Report unban of %s %s failed", account_type, payload.account_id)
        raise OperationFailed(f"Failed to unban {account_type}", error=str(exc))
    return {"success": True, **result}


@router.post("/ban-user")
def ban_user(
    payload: schemas.ReportBan,
    request: Request,
    admin: models.Admin = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return _ban_from_report(db, request, admin, AccountType.USER.value, payload)


@router.post("/unban-user")
def unban_user(
    payload: schemas.ReportUnban,
    request: Request,
    admin: models.Admin = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return _unban_from_report(db, request, admin, AccountType.USER.value, payload)


@router.post("/ban-doctor")
def ban_doctor(
    payload: schemas.ReportBan,
    request: Request,
    admin: models.Admin = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return _ban_from_report(db, request, admin, AccountType.DOCTOR.value, payload)


@router.post("/unban-doctor")
def unban_doctor(
    payload: schemas.ReportUnban,
    request: Request,
    admin: models.Admin = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return _unban_from_report(db, request, admin, AccountType.DOCTOR.value, payload)


# ======================
# READ / TRASH / RESTORE / DELETE
# ======================

@router.post("/mark-read")
def mark_reports_read(
    payload: schemas.ReportIds,
    admin: models.Admin = Depends(require_admin),
    db: Session = Depends(get_db),
):
    updated = report_service.mark_read(db, payload.report_ids)
    return {"success": True, "message": "Reports marked as read", "updated": updated}


@router.post("/trash")
def trash_reports(
    payload: schemas.ReportIds,
    admin: models.Admin = Depends(require_admin),
    db: Session = Depends(get_db),
):
    updated = report_service.move_to_trash(db, payload.report_ids)
    return {"success": True, "message": "Reports moved to trash", "updated": updated}


@router.post("/restore")
def restore_reports(
    payload: schemas.ReportIds,
    admin: models.Admin = Depends(require_admin),
    db: Session = Depends(get_db),
):
    updated = report_service.restore(db, payload.report_ids)
    return {"success": True, "message": "Reports restored", "updated": updated}


@router.post("/delete")
def delete_reports(
    payload: schemas.ReportIds,
    admin: models.Admin = Depends(require_admin),
    db: Session = Depends(get_db),
):
    deleted = report_service.delete_permanently(db, payload.report_ids)
    return {"success": True, "message": "Reports permanently deleted", "deleted": deleted}


# Registered last so it does not shadow the fixed paths above.
@router.get("/{report_id}")
def get_report(
    report_id: int,
    admin: models.Admin = Depends(require_admin),
    db: Session = Depends(get_db),
):
    report = report_service.get_report(db, report_id)
    return {"success": True, "report": report_to_dict(report)}
