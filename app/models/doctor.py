from sqlalchemy import Column, Integer, String, Boolean, TIMESTAMP, func
from sqlalchemy.orm import relationship

from app.database import Base
from app.models.account import BanFieldsMixin


class Doctor(BanFieldsMixin, Base):
    __tablename__ = "doctors"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    speciality = Column(String(100), nullable=False, default="General physician")
    degree = Column(String(100))
    fees = Column(Integer, nullable=False, default=0)
    # Banning takes a doctor out of the booking pool; lifting the ban restores it.
    available = Column(Boolean, default=True, nullable=False)
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, onupdate=func.now())

    appointments = relationship(
        "Appointment",
        back_populates="doctor",
        cascade="all, delete-orphan",
    )
