from __future__ import annotations

import asyncio

from app.models.notification import Notification
from app.services import notification_service, realtime
from factories import create_doctor, create_user


class _FakeSocket:
    def __init__(self):
        self.sent = []
        self.accepted = False

    async def accept(self):
        self.accepted = True

    async def send_json(self, message):
        self.sent.append(message)


class _BrokenSocket(_FakeSocket):
    async def send_json(self, message):
        raise RuntimeError("connection reset")


def test_notification_service_crud_flow(db_session):
    doctor = create_doctor(db_session)
    for event_type in ("account_banned", "account_unbanned"):
        notification_service.create_notification(
            db_session,
            recipient_type="doctor",
            recipient_id=doctor.id,
            actor_id="1",
            event_type=event_type,
            message=event_type,
        )
    db_session.commit()

    scope = {"recipient_type": "doctor", "recipient_id": doctor.id}
    unread = notification_service.list_account_notifications(db_session, unread_only=True, limit=50, **scope)
    assert len(unread) == 2
    assert notification_service.get_unread_count(db_session, **scope) == 2

    one = notification_service.mark_notification_read(db_session, notification_id=unread[0].id, **scope)
    assert one is not None
    assert one.is_read is True
    assert notification_service.get_unread_count(db_session, **scope) == 1

    assert notification_service.mark_all_notifications_read(db_session, **scope) == 1
    assert notification_service.get_unread_count(db_session, **scope) == 0


def test_dispatch_email_failure_is_non_blocking(db_session, monkeypatch):
    user = create_user(db_session, email="safe@test.com")
    notification = notification_service.create_notification(
        db_session,
        recipient_type="user",
        recipient_id=user.id,
        actor_id=None,
        event_type="account_banned",
        message="Banned",
    )
    db_session.commit()

    monkeypatch.setattr(notification_service, "is_email_enabled", lambda: True)
    monkeypatch.setattr(
        notification_service.account_crud,
        "get_account",
        lambda *args, **kwargs: (_ for _ in ()).throw(RuntimeError("db down")),
    )

    assert notification_service.dispatch_email_for_notification(db_session, notification) is False


def test_notify_banned_without_live_session(db_session):
    user = create_user(db_session)

    pushed = notification_service.notify_banned(
        db_session,
        account_id=user.id,
        account_type="user",
        message="Your account has been banned. Reason: Spam",
        ban_reason="Spam",
    )

    assert pushed is False
    stored = db_session.query(Notification).one()
    assert stored.event_type == "account_banned"


def test_notify_banned_pushes_to_connected_socket(db_session, monkeypatch):
    user = create_user(db_session)
    manager = realtime.ConnectionManager()
    monkeypatch.setattr(realtime, "manager", manager)
    socket = _FakeSocket()

    loop = asyncio.new_event_loop()
    try:
        loop.run_until_complete(manager.connect(socket, "user", user.id))
        manager.bind_loop(loop)

        pushed = notification_service.notify_banned(
            db_session,
            account_id=user.id,
            account_type="user",
            message="Banned",
            ban_reason="Spam",
        )
        assert pushed is True
        # Let the scheduled send run.
        loop.run_until_complete(asyncio.sleep(0.05))
    finally:
        manager.bind_loop(None)
        loop.close()

    assert socket.accepted is True
    assert socket.sent == [
        {
            "event": "user-banned",
            "account_id": user.id,
            "account_type": "user",
            "message": "Banned",
            "ban_reason": "Spam",
        }
    ]


def test_broken_socket_is_dropped():
    manager = realtime.ConnectionManager()
    good, broken = _FakeSocket(), _BrokenSocket()

    async def scenario():
        await manager.connect(good, "doctor", 3)
        await manager.connect(broken, "doctor", 3)
        return await manager.send_to_account({"event": "doctor-banned"}, "doctor", 3)

    delivered = asyncio.run(scenario())

    assert delivered == 1
    assert manager.active_connections[("doctor", 3)] == [good]
    assert realtime.banned_event_name("doctor") == "doctor-banned"
