from __future__ import annotations

from datetime import datetime, timedelta

import pytest
from sqlalchemy.orm import sessionmaker

pytest.importorskip("fastapi")

from app.models.activity_log import ActivityLog
from app.models.appointment import Appointment
from app.models.notification import Notification
from app.models.user import User
from app.services import ban_service, notification_service
from app.services.exceptions import NotFound, PreconditionFailed, ValidationFailed
from app.utils.timeutils import utcnow
from factories import create_appointment, create_doctor, create_user


def _ban(db, account, account_type="user", duration="7d", reason="Abusive language", moderator="1"):
    return ban_service.ban(
        db,
        account_id=account.id,
        account_type=account_type,
        ban_duration=duration,
        reason=reason,
        moderator_id=moderator,
    )


def test_parse_ban_duration_units():
    now = datetime(2026, 1, 1, 12, 0, 0)
    assert ban_service.parse_ban_duration("permanent", now) is None
    assert ban_service.parse_ban_duration("1h", now) == now + timedelta(hours=1)
    assert ban_service.parse_ban_duration("24h", now) == now + timedelta(hours=24)
    assert ban_service.parse_ban_duration("2w", now) == now + timedelta(weeks=2)
    assert ban_service.parse_ban_duration("1m", now) == now + timedelta(days=30)


@pytest.mark.parametrize("bad", ["", "7x", "d7", "7 d", "-1d", "forever", "1.5h", "99999999d"])
def test_parse_ban_duration_rejects_bad_format(bad):
    with pytest.raises(ValidationFailed) as exc_info:
        ban_service.parse_ban_duration(bad, datetime(2026, 1, 1))
    assert exc_info.value.message.startswith("Invalid ban duration")


def test_ban_sets_fields_and_returns_payload(db_session):
    user = create_user(db_session)
    user.unban_request_attempts = 2
    db_session.commit()

    before = utcnow()
    result = _ban(db_session, user, duration="24h")

    db_session.refresh(user)
    assert user.is_banned is True
    assert user.ban_reason == "Abusive language"
    assert user.banned_by == "1"
    assert user.unban_request_attempts == 0
    assert user.unban_at - user.banned_at == timedelta(hours=24)
    assert user.banned_at >= before.replace(microsecond=0) - timedelta(seconds=1)

    data = result["data"]
    assert data["account_id"] == user.id
    assert data["email"] == user.email
    assert data["ban_duration"] == "24h"
    assert data["unban_at"] is not None
    assert result["message"] == "User banned successfully for 24h"


def test_permanent_ban_has_no_unban_time(db_session):
    doctor = create_doctor(db_session)
    result = _ban(db_session, doctor, account_type="doctor", duration="permanent")

    db_session.refresh(doctor)
    assert doctor.is_banned is True
    assert doctor.unban_at is None
    assert result["data"]["unban_at"] is None


def test_plain_ban_does_not_touch_appointments(db_session):
    user = create_user(db_session)
    doctor = create_doctor(db_session)
    appointment = create_appointment(db_session, user, doctor)

    _ban(db_session, doctor, account_type="doctor")

    db_session.refresh(appointment)
    db_session.refresh(doctor)
    assert appointment.cancelled is False
    assert doctor.available is True


def test_ban_overwrites_existing_ban(db_session):
    user = create_user(db_session)
    _ban(db_session, user, duration="1h", reason="First", moderator="1")
    _ban(db_session, user, duration="permanent", reason="Second", moderator="2")

    db_session.refresh(user)
    assert user.ban_reason == "Second"
    assert user.banned_by == "2"
    assert user.unban_at is None


def test_concurrent_bans_leave_one_complete_ban(engine):
    make_session = sessionmaker(bind=engine)
    setup = make_session()
    user_id = create_user(setup).id
    setup.close()

    first = make_session()
    second = make_session()
    try:
        first_user = first.get(User, user_id)
        second_user = second.get(User, user_id)
        now = utcnow()
        ban_service.apply_ban(first_user, reason="Spam", unban_at=None, moderator_id="1", now=now)
        ban_service.apply_ban(second_user, reason="Harassment", unban_at=None, moderator_id="2", now=now)
        first.commit()
        second.commit()
    finally:
        first.close()
        second.close()

    check = make_session()
    try:
        user = check.get(User, user_id)
        assert user.is_banned is True
        assert (user.ban_reason, user.banned_by) in {("Spam", "1"), ("Harassment", "2")}
    finally:
        check.close()


def test_ban_with_out_of_range_duration_is_rejected(db_session):
    user = create_user(db_session)
    with pytest.raises(ValidationFailed):
        _ban(db_session, user, duration="99999999d")

    db_session.refresh(user)
    assert user.is_banned is False


def test_ban_validation_errors(db_session):
    user = create_user(db_session)
    with pytest.raises(ValidationFailed) as missing:
        ban_service.ban(
            db_session,
            account_id=user.id,
            account_type="user",
            ban_duration="7d",
            reason="   ",
            moderator_id="1",
        )
    assert missing.value.message.startswith("Missing required fields")

    with pytest.raises(ValidationFailed):
        _ban(db_session, user, account_type="admin")

    with pytest.raises(ValidationFailed):
        _ban(db_session, user, duration="7x")

    with pytest.raises(NotFound) as not_found:
        ban_service.ban(
            db_session,
            account_id=999,
            account_type="doctor",
            ban_duration="7d",
            reason="Spam",
            moderator_id="1",
        )
    assert not_found.value.message == "Doctor not found"

    db_session.refresh(user)
    assert user.is_banned is False


def test_unban_keeps_audit_trail_and_clears_reason(db_session):
    user = create_user(db_session)
    _ban(db_session, user)
    db_session.refresh(user)
    banned_at = user.banned_at

    result = ban_service.unban(
        db_session,
        account_id=user.id,
        account_type="user",
        reason="Appeal accepted",
        moderator_id="1",
    )

    db_session.refresh(user)
    assert user.is_banned is False
    assert user.ban_reason == ""
    assert user.unban_at is None
    assert user.unban_request_attempts == 0
    assert user.banned_at == banned_at
    assert user.banned_by == "1"
    assert user.last_unban_reason == "Appeal accepted"
    assert result["data"]["unban_reason"] == "Appeal accepted"


def test_unban_default_reason(db_session):
    user = create_user(db_session)
    _ban(db_session, user)
    ban_service.unban(db_session, account_id=user.id, account_type="user", reason=None, moderator_id="1")
    db_session.refresh(user)
    assert user.last_unban_reason == "Unbanned by admin"


def test_unban_not_banned_is_rejected(db_session):
    doctor = create_doctor(db_session)
    with pytest.raises(PreconditionFailed) as exc_info:
        ban_service.unban(
            db_session,
            account_id=doctor.id,
            account_type="doctor",
            reason=None,
            moderator_id="1",
        )
    assert exc_info.value.message == "Doctor is not banned"


def test_get_ban_status(db_session):
    user = create_user(db_session)
    _ban(db_session, user, duration="permanent", reason="Spam")

    status = ban_service.get_ban_status(db_session, account_id=user.id, account_type="user")
    assert status["is_banned"] is True
    assert status["ban_reason"] == "Spam"
    assert status["unban_at"] is None


def test_ban_writes_notification_and_activity(db_session):
    user = create_user(db_session)
    _ban(db_session, user, reason="Harassment")

    notification = db_session.query(Notification).filter(
        Notification.recipient_type == "user",
        Notification.recipient_id == user.id,
    ).one()
    assert notification.event_type == "account_banned"
    assert "Harassment" in notification.message

    log = db_session.query(ActivityLog).filter(ActivityLog.activity_type == "ban_user").one()
    assert log.actor_id == "1"
    assert log.details["ban_duration"] == "7d"


def test_relay_failure_does_not_undo_ban(db_session, monkeypatch):
    user = create_user(db_session)

    def broken_notify(*args, **kwargs):
        raise RuntimeError("socket relay down")

    monkeypatch.setattr(notification_service, "notify_banned", broken_notify)
    result = _ban(db_session, user)

    db_session.refresh(user)
    assert user.is_banned is True
    assert result["data"]["account_id"] == user.id


def test_ban_from_report_cancels_active_appointments(db_session):
    user = create_user(db_session)
    doctor = create_doctor(db_session)
    active = create_appointment(db_session, user, doctor)
    done = create_appointment(db_session, user, doctor, is_completed=True)
    already = create_appointment(db_session, user, doctor, cancelled=True)

    result = ban_service.ban_from_report(
        db_session,
        account_id=doctor.id,
        account_type="doctor",
        reason="Medical malpractice",
        moderator_id="1",
    )

    assert result["cancelled_appointments"] == 1
    assert "1 appointments cancelled" in result["message"]

    db_session.expire_all()
    assert db_session.get(Appointment, active.id).cancelled is True
    assert db_session.get(Appointment, active.id).cancel_reason == "Doctor account has been banned"
    assert db_session.get(Appointment, done.id).cancelled is False
    assert db_session.get(Appointment, already.id).cancel_reason is None

    db_session.refresh(doctor)
    assert doctor.is_banned is True
    assert doctor.unban_at is None
    assert doctor.available is False


def test_ban_from_report_requires_reason(db_session):
    user = create_user(db_session)
    with pytest.raises(ValidationFailed):
        ban_service.ban_from_report(
            db_session, account_id=user.id, account_type="user", reason="", moderator_id="1"
        )


def test_unban_from_report_clears_everything(db_session):
    doctor = create_doctor(db_session)
    ban_service.ban_from_report(
        db_session,
        account_id=doctor.id,
        account_type="doctor",
        reason="No show",
        moderator_id="1",
    )

    ban_service.unban_from_report(
        db_session, account_id=doctor.id, account_type="doctor", moderator_id="1"
    )

    db_session.refresh(doctor)
    assert doctor.is_banned is False
    assert doctor.ban_reason == ""
    assert doctor.banned_at is None
    assert doctor.banned_by is None
    assert doctor.unban_at is None
    assert doctor.available is True


def test_lift_expired_bans(db_session):
    expired = create_user(db_session, email="expired@test.com")
    current = create_user(db_session, email="current@test.com")
    forever = create_doctor(db_session)
    _ban(db_session, expired, duration="1h")
    _ban(db_session, current, duration="7d")
    _ban(db_session, forever, account_type="doctor", duration="permanent")

    lifted = ban_service.lift_expired_bans(db_session, now=utcnow() + timedelta(hours=2))

    assert lifted == 1
    db_session.refresh(expired)
    db_session.refresh(current)
    db_session.refresh(forever)
    assert expired.is_banned is False
    assert expired.ban_reason == ""
    assert expired.last_unban_reason == "Ban expired"
    assert current.is_banned is True
    assert forever.is_banned is True


def test_unbanned_accounts_hold_invariant(db_session):
    user = create_user(db_session)
    for step in (
        lambda: _ban(db_session, user),
        lambda: ban_service.unban(db_session, account_id=user.id, account_type="user", reason="ok", moderator_id="1"),
        lambda: ban_service.ban_from_report(db_session, account_id=user.id, account_type="user", reason="Spam", moderator_id="1"),
        lambda: ban_service.unban_from_report(db_session, account_id=user.id, account_type="user", moderator_id="1"),
    ):
        step()
        db_session.refresh(user)
        if user.is_banned:
            assert user.ban_reason
        else:
            assert user.ban_reason == ""
            assert user.unban_at is None
