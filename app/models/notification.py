from sqlalchemy import Column, Integer, String, Boolean, TIMESTAMP, Index, func
from app.database import Base


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    recipient_type = Column(String(10), nullable=False)
    recipient_id = Column(Integer, nullable=False)
    actor_id = Column(String(64), nullable=True)
    event_type = Column(String(50), nullable=False, index=True)
    message = Column(String(500), nullable=False)
    is_read = Column(Boolean, default=False, nullable=False)
    created_at = Column(TIMESTAMP, server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("ix_notifications_recipient", "recipient_type", "recipient_id"),
    )
