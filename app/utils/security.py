from datetime import datetime, timedelta, UTC
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from app import models, schemas
from app.config import settings
from app.crud import account as account_crud
from app.database import get_db


# ==========================
# AUTH CONFIG
# ==========================

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/token")

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto"
)

ADMIN_ROLE = "admin"


# ==========================
# PASSWORD UTILS
# ==========================

def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """
    Bcrypt max input length = 72 bytes
    Truncate safely to avoid crash
    """
    password_bytes = password.encode("utf-8")

    if len(password_bytes) > 72:
        password_bytes = password_bytes[:72]
        password = password_bytes.decode("utf-8", errors="ignore")

    return pwd_context.hash(password)


# ==========================
# JWT TOKEN
# ==========================

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(UTC) + expires_delta
    else:
        expire = datetime.now(UTC) + timedelta(
            minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
        )

    to_encode.update({"exp": expire})

    encoded_jwt = jwt.encode(
        to_encode,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM
    )

    return encoded_jwt


def decode_access_token(token: str) -> Optional[schemas.TokenData]:
    """Return the token claims, or None when the token is invalid."""
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM]
        )
    except JWTError:
        return None

    email: str = payload.get("sub")
    role: str = payload.get("role")
    if email is None or role is None:
        return None
    return schemas.TokenData(email=email, role=role)


# ==========================
# AUTH HELPERS
# ==========================

def authenticate(db: Session, model, email: str, password: str):
    account = db.query(model).filter(
        model.email == email.strip().lower()
    ).first()

    if not account:
        return False

    if not verify_password(password, account.password_hash):
        return False

    return account


def _credentials_exception() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_account(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
):
    """Resolve a user or doctor session. Banned accounts are logged out."""
    token_data = decode_access_token(token)
    if token_data is None or token_data.role not in models.ACCOUNT_TYPES:
        raise _credentials_exception()

    account = account_crud.get_account_by_email(db, token_data.role, token_data.email)
    if account is None:
        raise _credentials_exception()

    if account.is_banned:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Your account has been banned. Reason: {account.ban_reason}",
        )

    return account


def require_admin(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> models.Admin:
    token_data = decode_access_token(token)
    if token_data is None:
        raise _credentials_exception()
    if token_data.role != ADMIN_ROLE:
        raise HTTPException(status_code=403, detail="Admin access required")

    admin = db.query(models.Admin).filter(
        models.Admin.email == token_data.email
    ).first()
    if admin is None:
        raise _credentials_exception()

    return admin


def moderator_id_of(admin: models.Admin) -> str:
    return str(admin.id)
