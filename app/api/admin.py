# app/api/admin.py
"""
Admin console endpoints.
Moderation dashboard counts, user and doctor management, and the
activity log. Ban / report / unban-request actions live in their own routers.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy import desc
from sqlalchemy.orm import Session

from app import schemas
from app.crud import account as account_crud
from app.crud import appointment as appointment_crud
from app.database import get_db
from app.models.account import AccountType
from app.models.admin import Admin
from app.models.doctor import Doctor
from app.models.report import Report, ReportStatus
from app.models.unban_request import UnbanRequest, UnbanRequestStatus
from app.models.user import User
from app.services import activity_service
from app.utils.security import get_password_hash, moderator_id_of, require_admin

router = APIRouter(prefix="/admin", tags=["Admin"])


def _account_query(db: Session, model, search: Optional[str], is_banned: Optional[bool]):
    query = db.query(model)
    if search:
        like = f"%{search}%"
        query = query.filter((model.name.ilike(like)) | (model.email.ilike(like)))
    if is_banned is not None:
        query = query.filter(model.is_banned.is_(is_banned))
    return query.order_by(desc(model.created_at), desc(model.id))


# ─────────────────────────────────────────
# GET /admin/stats - Moderation dashboard
# ─────────────────────────────────────────
@router.get("/stats")
def get_dashboard_stats(
    admin: Admin = Depends(require_admin),
    db: Session = Depends(get_db)
):
    total_users   = db.query(User).count()
    total_doctors = db.query(Doctor).count()
    open_reports  = db.query(Report).filter(
        Report.status.in_([ReportStatus.PENDING.value, ReportStatus.UNDER_REVIEW.value]),
        Report.is_trashed.is_(False),
    ).count()
    unread_reports = db.query(Report).filter(
        Report.is_read.is_(False),
        Report.is_trashed.is_(False),
    ).count()
    pending_unban_requests = db.query(UnbanRequest).filter(
        UnbanRequest.status == UnbanRequestStatus.PENDING.value
    ).count()

    return {
        "success": True,
        "users": {
            "total":  total_users,
            "banned": account_crud.count_banned(db, AccountType.USER.value),
        },
        "doctors": {
            "total":  total_doctors,
            "banned": account_crud.count_banned(db, AccountType.DOCTOR.value),
        },
        "reports": {
            "open":   open_reports,
            "unread": unread_reports,
        },
        "unban_requests": {
            "pending": pending_unban_requests,
        },
    }


# ─────────────────────────────────────────
# GET /admin/users - List users with ban state
# ─────────────────────────────────────────
@router.get("/users")
def get_all_users(
    search: Optional[str] = Query(None, description="Search by name or email"),
    is_banned: Optional[bool] = Query(None, description="Filter by ban state"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    admin: Admin = Depends(require_admin),
    db: Session = Depends(get_db)
):
    users = _account_query(db, User, search, is_banned).offset(skip).limit(limit).all()
    return {
        "success": True,
        "users": [schemas.AccountSummary.model_validate(u).model_dump(mode="json") for u in users],
    }


# ─────────────────────────────────────────
# GET /admin/doctors - List doctors with ban state
# ─────────────────────────────────────────
@router.get("/doctors")
def get_all_doctors(
    search: Optional[str] = Query(None, description="Search by name or email"),
    is_banned: Optional[bool] = Query(None, description="Filter by ban state"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    admin: Admin = Depends(require_admin),
    db: Session = Depends(get_db)
):
    doctors = _account_query(db, Doctor, search, is_banned).offset(skip).limit(limit).all()
    return {
        "success": True,
        "doctors": [schemas.DoctorSummary.model_validate(d).model_dump(mode="json") for d in doctors],
    }


# ─────────────────────────────────────────
# POST /admin/doctors - Add a doctor
# ─────────────────────────────────────────
@router.post("/doctors")
def add_doctor(
    payload: schemas.DoctorCreate,
    request: Request,
    admin: Admin = Depends(require_admin),
    db: Session = Depends(get_db)
):
    email = payload.email.strip().lower()
    if account_crud.get_account_by_email(db, AccountType.DOCTOR.value, email):
        raise HTTPException(status_code=400, detail="Email already registered")

    doctor = Doctor(
        name=payload.name,
        email=email,
        password_hash=get_password_hash(payload.password),
        speciality=payload.speciality,
        degree=payload.degree,
        fees=payload.fees,
    )
    db.add(doctor)
    db.commit()
    db.refresh(doctor)

    activity_service.log_activity(
        db,
        actor_id=moderator_id_of(admin),
        actor_type="admin",
        activity_type="add_doctor",
        description=f"Added doctor: {doctor.email}",
        request=request,
        metadata={"doctor_id": doctor.id},
    )
    return {"success": True, "message": "Doctor added successfully", "doctor_id": doctor.id}


# ─────────────────────────────────────────
# DELETE /admin/{account_type}s/{account_id}
# ─────────────────────────────────────────
def _delete_account(db: Session, request: Request, admin: Admin, account_type: str, account_id: int):
    account = account_crud.get_account(db, account_type, account_id)
    if not account:
        raise HTTPException(status_code=404, detail=f"{account_type.capitalize()} not found")

    email = account.email
    removed = appointment_crud.delete_all_for(db, account_id, account_type)
    db.delete(account)
    db.commit()

    activity_service.log_activity(
        db,
        actor_id=moderator_id_of(admin),
        actor_type="admin",
        activity_type=f"delete_{account_type}",
        description=f"Deleted {account_type}: {email}",
        request=request,
        metadata={"account_id": account_id, "deleted_appointments": removed},
    )
    return {
        "success": True,
        "message": f"{account_type.capitalize()} deleted successfully",
        "deleted_appointments": removed,
    }


@router.delete("/users/{user_id}")
def delete_user(
    user_id: int,
    request: Request,
    admin: Admin = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return _delete_account(db, request, admin, AccountType.USER.value, user_id)


@router.delete("/doctors/{doctor_id}")
def delete_doctor(
    doctor_id: int,
    request: Request,
    admin: Admin = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return _delete_account(db, request, admin, AccountType.DOCTOR.value, doctor_id)


# ─────────────────────────────────────────
# GET /admin/activity-logs
# ─────────────────────────────────────────
@router.get("/activity-logs")
def get_activity_logs(
    actor_type: Optional[str] = Query(None),
    activity_type: Optional[str] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    admin: Admin = Depends(require_admin),
    db: Session = Depends(get_db),
):
    entries = activity_service.list_activity(
        db,
        actor_type=actor_type,
        activity_type=activity_type,
        skip=skip,
        limit=limit,
    )
    return {
        "success": True,
        "logs": [
            {
                "id":            e.id,
                "actor_id":      e.actor_id,
                "actor_type":    e.actor_type,
                "activity_type": e.activity_type,
                "description":   e.description,
                "ip_address":    e.ip_address,
                "user_agent":    e.user_agent,
                "metadata":      e.details,
                "timestamp":     e.timestamp.isoformat() if e.timestamp else None,
            }
            for e in entries
        ],
    }
