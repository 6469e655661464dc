from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class DoctorCreate(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72)
    speciality: str = "General physician"
    degree: Optional[str] = None
    fees: int = Field(0, ge=0)


class AccountSummary(BaseModel):
    """Account row as shown in the admin console."""
    id: int
    name: str
    email: str
    is_banned: bool
    ban_reason: str
    banned_at: Optional[datetime] = None
    banned_by: Optional[str] = None
    unban_at: Optional[datetime] = None
    unban_request_attempts: int
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class DoctorSummary(AccountSummary):
    speciality: str
    available: bool
