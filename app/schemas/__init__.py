# app/schemas/__init__.py

# Auth schemas
from .auth import Token, TokenData, LoginRequest, AdminLoginRequest, RegisterRequest

# Account schemas
from .account import DoctorCreate, AccountSummary, DoctorSummary

# Moderation schemas
from .moderation import (
    BanCreate,
    UnbanBody,
    ReportCreate,
    EvidenceAdd,
    ReportStatusUpdate,
    ReportIds,
    ReportBan,
    ReportUnban,
    UnbanRequestCreate,
    UnbanDecision,
)

__all__ = [
    "Token",
    "TokenData",
    "LoginRequest",
    "AdminLoginRequest",
    "RegisterRequest",
    "DoctorCreate",
    "AccountSummary",
    "DoctorSummary",
    "BanCreate",
    "UnbanBody",
    "ReportCreate",
    "EvidenceAdd",
    "ReportStatusUpdate",
    "ReportIds",
    "ReportBan",
    "ReportUnban",
    "UnbanRequestCreate",
    "UnbanDecision",
]
