from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from app import models, schemas
from app.crud import account as account_crud
from app.database import get_db
from app.models.account import ACCOUNT_TYPES
from app.utils.security import (
    ADMIN_ROLE,
    authenticate,
    create_access_token,
    get_password_hash,
)
from app.utils.timeutils import utcnow

router = APIRouter(prefix="/auth", tags=["Authentication"])


# ===== REGISTER ENDPOINT =====

@router.post("/register")
def register(user_data: schemas.RegisterRequest, db: Session = Depends(get_db)):
    """Register a pet owner. Doctors are added by admins."""
    normalized_email = user_data.email.strip().lower()

    existing = account_crud.get_account_by_email(db, "user", normalized_email)
    if existing:
        raise HTTPException(status_code=400, detail="Email already registered")

    new_user = models.User(
        name=user_data.name,
        email=normalized_email,
        password_hash=get_password_hash(user_data.password),
        phone=user_data.phone,
    )
    db.add(new_user)
    db.commit()
    db.refresh(new_user)
    return {"success": True, "message": "Registration successful", "user_id": new_user.id}


# ===== LOGIN ENDPOINTS =====

@router.post("/login", response_model=schemas.Token)
def login(credentials: schemas.LoginRequest, db: Session = Depends(get_db)):
    """Verify credentials for a user or doctor and return an access token."""
    account_type = (credentials.account_type or "user").strip().lower()
    if account_type not in ACCOUNT_TYPES:
        raise HTTPException(status_code=400, detail='Account type must be "user" or "doctor"')

    account = authenticate(
        db, account_crud.model_for(account_type), credentials.email, credentials.password
    )
    if not account:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if account.is_banned:
        raise HTTPException(
            status_code=403,
            detail=f"Your account has been banned. Reason: {account.ban_reason}",
        )

    access_token = create_access_token(data={"sub": account.email, "role": account_type})
    return {
        "access_token": access_token,
        "token_type": "bearer",
        "role": account_type,
    }


def _issue_admin_token(db: Session, email: str, password: str) -> dict:
    admin = authenticate(db, models.Admin, email, password)
    if not admin:
        raise HTTPException(status_code=401, detail="Invalid admin credentials")

    admin.last_login = utcnow()
    db.commit()

    access_token = create_access_token(data={"sub": admin.email, "role": ADMIN_ROLE})
    return {
        "access_token": access_token,
        "token_type": "bearer",
        "role": ADMIN_ROLE,
    }


@router.post("/admin/login", response_model=schemas.Token)
def admin_login(credentials: schemas.AdminLoginRequest, db: Session = Depends(get_db)):
    """Login endpoint restricted to admin accounts only."""
    return _issue_admin_token(db, credentials.email, credentials.password)


@router.post("/token", response_model=schemas.Token)
def admin_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    """OAuth2 password-form variant of admin login, used by the docs console."""
    return _issue_admin_token(db, form_data.username, form_data.password)
