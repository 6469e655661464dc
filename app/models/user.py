from sqlalchemy import Column, Integer, String, TIMESTAMP, func
from sqlalchemy.orm import relationship

from app.database import Base
from app.models.account import BanFieldsMixin


# ---------------- USER (PET OWNER) ----------------
class User(BanFieldsMixin, Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    phone = Column(String(20))
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, onupdate=func.now())

    appointments = relationship(
        "Appointment",
        back_populates="user",
        cascade="all, delete-orphan",
    )
