from sqlalchemy import Column, Integer, String, Text, JSON, TIMESTAMP, func
from app.database import Base


class ActivityLog(Base):
    __tablename__ = "activity_logs"

    id = Column(Integer, primary_key=True, index=True)
    actor_id = Column(String(64), nullable=True, index=True)
    actor_type = Column(String(10), nullable=False, index=True)
    activity_type = Column(String(50), nullable=False, index=True)
    description = Column(Text, nullable=False)
    ip_address = Column(String(64), nullable=False, default="")
    user_agent = Column(String(255), nullable=False, default="")
    # "metadata" is reserved on declarative classes.
    details = Column("metadata", JSON, nullable=False, default=dict)
    timestamp = Column(TIMESTAMP, server_default=func.now(), nullable=False, index=True)
