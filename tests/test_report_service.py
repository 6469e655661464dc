from __future__ import annotations

import pytest

pytest.importorskip("fastapi")

from app.models.report import Report
from app.services import ban_service, report_service
from app.services.exceptions import NotFound, PreconditionFailed, ValidationFailed
from factories import create_doctor, create_user


def _submit(db, reporter, reported, reporter_type="user", reported_type="doctor", reason="no_show", description="Doctor never joined the call"):
    return report_service.submit_report(
        db,
        reporter_type=reporter_type,
        reporter_id=reporter.id,
        reported_type=reported_type,
        reported_id=reported.id,
        reason=reason,
        description=description,
    )


def test_submit_report_creates_pending_report(db_session):
    user = create_user(db_session)
    doctor = create_doctor(db_session)

    result = _submit(db_session, user, doctor)

    report = db_session.get(Report, result["report_id"])
    assert report.status == "pending"
    assert report.action_taken == "none"
    assert report.admin_notes == ""
    assert report.evidence == []
    assert report.is_read is False
    assert report.is_trashed is False


def test_duplicate_open_report_is_rejected(db_session):
    user = create_user(db_session)
    doctor = create_doctor(db_session)
    first = _submit(db_session, user, doctor)

    with pytest.raises(PreconditionFailed) as exc_info:
        _submit(db_session, user, doctor, reason="harassment", description="Again")
    assert exc_info.value.message == "You have already reported this person"

    # Moving to under_review keeps the report open.
    report_service.update_report_status(
        db_session, report_id=first["report_id"], status="under_review", moderator_id="1"
    )
    with pytest.raises(PreconditionFailed):
        _submit(db_session, user, doctor)

    assert db_session.query(Report).count() == 1


def test_resubmit_after_resolution_is_allowed(db_session):
    user = create_user(db_session)
    doctor = create_doctor(db_session)
    first = _submit(db_session, user, doctor)
    report_service.update_report_status(
        db_session, report_id=first["report_id"], status="resolved", moderator_id="1"
    )

    second = _submit(db_session, user, doctor)
    assert second["report_id"] != first["report_id"]


def test_same_ids_across_account_types_are_distinct_pairs(db_session):
    user = create_user(db_session)
    doctor = create_doctor(db_session)
    other_user = create_user(db_session, email="other@test.com")
    assert user.id == doctor.id

    _submit(db_session, other_user, user, reported_type="user")
    # Same numeric id, different table.
    _submit(db_session, other_user, doctor, reported_type="doctor")
    assert db_session.query(Report).count() == 2


def test_submit_validation(db_session):
    user = create_user(db_session)
    doctor = create_doctor(db_session)

    with pytest.raises(ValidationFailed) as missing:
        _submit(db_session, user, doctor, description="   ")
    assert missing.value.message == "All fields are required"

    with pytest.raises(ValidationFailed):
        _submit(db_session, user, doctor, reason="rude")

    with pytest.raises(ValidationFailed):
        _submit(db_session, user, doctor, description="x" * 1001)

    with pytest.raises(ValidationFailed) as self_report:
        _submit(db_session, user, user, reported_type="user")
    assert self_report.value.message == "You cannot report yourself"

    with pytest.raises(NotFound) as missing_target:
        report_service.submit_report(
            db_session,
            reporter_type="user",
            reporter_id=user.id,
            reported_type="doctor",
            reported_id=404,
            reason="spam",
            description="Spam",
        )
    assert missing_target.value.message == "Reported person not found"

    assert db_session.query(Report).count() == 0


def test_description_at_limit_is_accepted(db_session):
    user = create_user(db_session)
    doctor = create_doctor(db_session)
    result = _submit(db_session, user, doctor, description="x" * 1000)
    assert result["report_id"]


def test_add_evidence_appends_urls(db_session):
    user = create_user(db_session)
    doctor = create_doctor(db_session)
    report_id = _submit(db_session, user, doctor)["report_id"]

    report_service.add_evidence(db_session, report_id=report_id, evidence_url="https://cdn.test/a.png")
    report_service.add_evidence(db_session, report_id=report_id, evidence_url="https://cdn.test/b.png")

    report = report_service.get_report(db_session, report_id)
    assert report.evidence == ["https://cdn.test/a.png", "https://cdn.test/b.png"]

    with pytest.raises(ValidationFailed):
        report_service.add_evidence(db_session, report_id=report_id, evidence_url="ftp://x")


def test_update_status_only_overwrites_given_fields(db_session):
    user = create_user(db_session)
    doctor = create_doctor(db_session)
    report_id = _submit(db_session, user, doctor)["report_id"]

    report_service.update_report_status(
        db_session,
        report_id=report_id,
        status="resolved",
        moderator_id="7",
        admin_notes="Confirmed by call logs",
        action_taken="warning",
    )
    report = report_service.update_report_status(
        db_session, report_id=report_id, status="pending", moderator_id="8"
    )

    assert report.status == "pending"
    assert report.admin_notes == "Confirmed by call logs"
    assert report.action_taken == "warning"
    assert report.reviewed_by == "8"
    assert report.reviewed_at is not None

    with pytest.raises(ValidationFailed):
        report_service.update_report_status(
            db_session, report_id=report_id, status="closed", moderator_id="8"
        )
    with pytest.raises(NotFound):
        report_service.update_report_status(
            db_session, report_id=999, status="resolved", moderator_id="8"
        )


def test_trash_restore_delete_pipeline(db_session):
    user = create_user(db_session)
    doctor = create_doctor(db_session)
    other = create_user(db_session, email="second@test.com")
    first = _submit(db_session, user, doctor)["report_id"]
    second = _submit(db_session, other, doctor)["report_id"]

    assert report_service.mark_read(db_session, [first, 999]) == 1
    assert report_service.move_to_trash(db_session, [first]) == 1

    db_session.expire_all()
    visible = [r.id for r in report_service.list_reports(db_session)]
    trashed = [r.id for r in report_service.list_trashed_reports(db_session)]
    assert visible == [second]
    assert trashed == [first]
    assert report_service.get_report(db_session, first).is_read is True

    assert report_service.restore(db_session, [first]) == 1
    db_session.expire_all()
    assert report_service.get_report(db_session, first).is_trashed is False
    # Read flag is independent of the trash flag.
    assert report_service.get_report(db_session, first).is_read is True

    assert report_service.delete_permanently(db_session, [first, second, 12345]) == 2
    assert db_session.query(Report).count() == 0
    assert report_service.delete_permanently(db_session, []) == 0


def test_list_filters_and_account_views(db_session):
    user = create_user(db_session)
    doctor = create_doctor(db_session)
    other = create_user(db_session, email="other@test.com")
    _submit(db_session, user, doctor)
    _submit(db_session, doctor, other, reporter_type="doctor", reported_type="user", reason="spam")

    assert len(report_service.list_reports(db_session, reported_type="user")) == 1
    assert len(report_service.list_reports(db_session, status="resolved")) == 0
    assert len(report_service.list_my_reports(db_session, account_type="user", account_id=user.id)) == 1
    assert len(report_service.list_reports_against(db_session, account_type="user", account_id=other.id)) == 1
    assert report_service.list_reports_against(db_session, account_type="doctor", account_id=other.id) == []

    with pytest.raises(ValidationFailed):
        report_service.list_reports(db_session, reported_type="admin")


def test_statistics_overview(db_session):
    user = create_user(db_session)
    doctor = create_doctor(db_session)
    other = create_user(db_session, email="other@test.com")
    _submit(db_session, user, doctor, reason="no_show")
    resolved = _submit(db_session, other, doctor, reason="no_show")["report_id"]
    report_service.update_report_status(db_session, report_id=resolved, status="resolved", moderator_id="1")
    ban_service.ban_from_report(
        db_session, account_id=doctor.id, account_type="doctor", reason="No show", moderator_id="1"
    )

    stats = report_service.get_statistics(db_session)
    assert stats["total_reports"] == 2
    assert stats["pending_reports"] == 1
    assert stats["resolved_reports"] == 1
    assert stats["under_review_reports"] == 0
    assert stats["banned_doctors"] == 1
    assert stats["banned_users"] == 0
    assert stats["reports_by_reason"] == [{"reason": "no_show", "count": 2}]
