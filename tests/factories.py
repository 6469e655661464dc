"""Row builders shared by the test modules."""

from app.models.admin import Admin
from app.models.appointment import Appointment
from app.models.doctor import Doctor
from app.models.user import User


def create_user(db, email: str = "owner@test.com", name: str = "Pet Owner") -> User:
    user = User(name=name, email=email, password_hash="hash")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def create_doctor(db, email: str = "vet@test.com", name: str = "Dr. Vet") -> Doctor:
    doctor = Doctor(name=name, email=email, password_hash="hash", speciality="Surgery", fees=500)
    db.add(doctor)
    db.commit()
    db.refresh(doctor)
    return doctor


def create_admin(db, email: str = "admin@test.com", password_hash: str = "hash") -> Admin:
    admin = Admin(name="Admin", email=email, password_hash=password_hash)
    db.add(admin)
    db.commit()
    db.refresh(admin)
    return admin


def create_appointment(db, user, doctor, *, cancelled=False, is_completed=False) -> Appointment:
    appointment = Appointment(
        user_id=user.id,
        doctor_id=doctor.id,
        slot_date="2026_10_20",
        slot_time="10:00",
        amount=doctor.fees,
        cancelled=cancelled,
        is_completed=is_completed,
    )
    db.add(appointment)
    db.commit()
    db.refresh(appointment)
    return appointment
