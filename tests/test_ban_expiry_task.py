from __future__ import annotations

from datetime import timedelta

from sqlalchemy.orm import sessionmaker

from app.config import settings
from app.services import ban_service
from app.tasks import ban_expiry
from app.utils.timeutils import utcnow
from factories import create_user


def test_sweeper_disabled_under_test_env(monkeypatch):
    monkeypatch.setattr(settings, "APP_ENV", "test")
    assert ban_expiry.start_ban_sweeper() is None

    monkeypatch.setattr(settings, "APP_ENV", "production")
    monkeypatch.setattr(settings, "BAN_SWEEP_ENABLED", False)
    assert ban_expiry.start_ban_sweeper() is None


def test_sweep_job_lifts_expired_bans(engine, db_session, monkeypatch):
    user = create_user(db_session)
    ban_service.ban(
        db_session,
        account_id=user.id,
        account_type="user",
        ban_duration="1h",
        reason="Spam",
        moderator_id="1",
    )
    user.unban_at = utcnow() - timedelta(minutes=1)
    db_session.commit()

    monkeypatch.setattr(ban_expiry, "SessionLocal", sessionmaker(bind=engine))
    ban_expiry._sweep_job()

    db_session.expire_all()
    db_session.refresh(user)
    assert user.is_banned is False
    assert user.last_unban_reason == "Ban expired"


def test_sweep_job_swallows_failures(monkeypatch):
    def broken(db, now=None):
        raise RuntimeError("database unavailable")

    class _Session:
        closed = False

        def close(self):
            _Session.closed = True

    monkeypatch.setattr(ban_expiry, "SessionLocal", _Session)
    monkeypatch.setattr(ban_expiry, "lift_expired_bans", broken)

    ban_expiry._sweep_job()
    assert _Session.closed is True
