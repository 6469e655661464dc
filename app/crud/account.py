# app/crud/account.py
"""
Account CRUD Operations
Lookups over the two moderated account tables (users and doctors).
"""

from sqlalchemy.orm import Session
from typing import Optional, Type, Union

from app.models.account import AccountType
from app.models.doctor import Doctor
from app.models.user import User

Account = Union[User, Doctor]

_MODEL_BY_TYPE = {
    AccountType.USER.value: User,
    AccountType.DOCTOR.value: Doctor,
}


def model_for(account_type: str) -> Type[Account]:
    """
    Resolve the ORM class for an account type.

    Raises:
        ValueError: If account_type is not "user" or "doctor"
    """
    model = _MODEL_BY_TYPE.get((account_type or "").strip().lower())
    if model is None:
        raise ValueError('Invalid account type. Must be "user" or "doctor"')
    return model


def get_account(db: Session, account_type: str, account_id: int) -> Optional[Account]:
    model = model_for(account_type)
    return db.query(model).filter(model.id == account_id).first()


def get_account_by_email(db: Session, account_type: str, email: str) -> Optional[Account]:
    model = model_for(account_type)
    return db.query(model).filter(model.email == email.strip().lower()).first()


def account_type_of(account: Account) -> str:
    return AccountType.DOCTOR.value if isinstance(account, Doctor) else AccountType.USER.value


def count_banned(db: Session, account_type: str) -> int:
    model = model_for(account_type)
    return db.query(model).filter(model.is_banned.is_(True)).count()


def list_expired_bans(db: Session, account_type: str, now) -> list:
    """Banned accounts whose scheduled unban time has passed."""
    model = model_for(account_type)
    return (
        db.query(model)
        .filter(
            model.is_banned.is_(True),
            model.unban_at.isnot(None),
            model.unban_at <= now,
        )
        .all()
    )
