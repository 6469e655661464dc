from typing import List, Optional

from pydantic import BaseModel, Field

# ======================
# BAN / UNBAN
# ======================
# Required fields are checked by the services so that a missing one comes
# back as a {success: false, message} body instead of a 422.

class BanCreate(BaseModel):
    account_id: Optional[int] = None
    account_type: Optional[str] = None
    ban_duration: Optional[str] = Field(None, description='"permanent" or <n><h|d|w|m>, e.g. 24h, 7d')
    ban_reason: Optional[str] = None


class UnbanBody(BaseModel):
    account_id: Optional[int] = None
    account_type: Optional[str] = None
    unban_reason: Optional[str] = None


# ======================
# REPORTS
# ======================

class ReportCreate(BaseModel):
    reporter_type: Optional[str] = None
    reporter_id: Optional[int] = None
    reported_type: Optional[str] = None
    reported_id: Optional[int] = None
    reason: Optional[str] = None
    description: Optional[str] = None
    appointment_id: Optional[int] = None


class EvidenceAdd(BaseModel):
    report_id: int
    evidence_url: str


class ReportStatusUpdate(BaseModel):
    report_id: int
    status: str
    admin_notes: Optional[str] = None
    action_taken: Optional[str] = None


class ReportIds(BaseModel):
    report_ids: List[int] = Field(default_factory=list)


class ReportBan(BaseModel):
    account_id: int
    reason: Optional[str] = None


class ReportUnban(BaseModel):
    account_id: int


# ======================
# UNBAN REQUESTS
# ======================

class UnbanRequestCreate(BaseModel):
    requester_type: Optional[str] = None
    requester_id: Optional[int] = None
    request_message: Optional[str] = None


class UnbanDecision(BaseModel):
    request_id: int
    admin_response: Optional[str] = None
