import enum

from sqlalchemy import Column, Integer, String, Text, TIMESTAMP, func

from app.database import Base


class UnbanRequestStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"


class UnbanRequest(Base):
    __tablename__ = "unban_requests"

    id = Column(Integer, primary_key=True, index=True)
    requester_type = Column(String(10), nullable=False)
    requester_id = Column(Integer, nullable=False, index=True)
    requester_name = Column(String(100), nullable=False)
    requester_email = Column(String(255), nullable=False)
    ban_reason = Column(String(500), nullable=False)
    request_message = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default=UnbanRequestStatus.PENDING.value, index=True)
    admin_response = Column(Text, nullable=False, default="")
    reviewed_by = Column(String(64), nullable=True)
    reviewed_at = Column(TIMESTAMP, nullable=True)
    created_at = Column(TIMESTAMP, server_default=func.now(), nullable=False)
