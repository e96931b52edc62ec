from datetime import datetime, timezone

import pytest

from models.notification import Notification
from models.verification import VerificationRecord


@pytest.fixture
def admin_headers(make_user, login_as):
    return login_as(make_user(role="admin"))


@pytest.fixture
def make_record(db, verified_user):
    def _make(kind="id", status="pending", user=None):
        record = VerificationRecord(
            user_id=(user or verified_user).id,
            kind=kind,
            status=status,
            doc_type="passport" if kind == "id" else "utility bill",
            document_front_image=f"uploads/{kind}/front.png",
        )
        db.add(record)
        db.commit()
        return record

    return _make


def _review(client, headers, record, **body):
    return client.post(f"/admin/verifications/{record.kind}/{record.id}/review", json=body, headers=headers)


def test_non_admin_is_forbidden(client, make_user, login_as):
    resp = client.get("/admin/users", headers=login_as(make_user()))

    assert resp.status_code == 403
    assert resp.json()["message"] == "Administration rights required"


def test_admin_lists_users(client, make_user, admin_headers):
    make_user()

    resp = client.get("/admin/users", headers=admin_headers)

    assert resp.status_code == 200
    assert len(resp.json()["data"]) == 2


def test_approving_id_stamps_user_and_notifies(client, db, verified_user, make_record, admin_headers, notifier):
    record = make_record()

    resp = _review(client, admin_headers, record, status="verified")

    assert resp.status_code == 200
    assert resp.json()["data"]["status"] == "verified"
    assert resp.json()["data"]["remark"] == "ID Verified."
    db.refresh(verified_user)
    assert verified_user.id_verified_at is not None
    assert verified_user.user_level == 0

    notification = db.query(Notification).filter(Notification.user_id == verified_user.id).one()
    assert notification.title == "ID verified successfully"
    assert notifier.published[0][0] == f"user:{verified_user.id}"


def test_approval_promotes_fully_verified_user(client, db, make_user, make_record, admin_headers):
    now = datetime.now(timezone.utc)
    user = make_user(email_verified_at=now, number_verified_at=now)
    record = make_record(user=user)

    _review(client, admin_headers, record, status="verified")

    db.refresh(user)
    assert user.user_level == 1


def test_address_approval_does_not_promote(client, db, make_user, make_record, admin_headers):
    now = datetime.now(timezone.utc)
    user = make_user(email_verified_at=now, number_verified_at=now)
    record = make_record(kind="address", user=user)

    resp = _review(client, admin_headers, record, status="verified", remark="Looks good")

    assert resp.json()["data"]["remark"] == "Looks good"
    db.refresh(user)
    assert user.address_verified_at is not None
    assert user.user_level == 0


def test_rejection_requires_remark(client, db, make_record, admin_headers):
    record = make_record()

    resp = _review(client, admin_headers, record, status="reject")

    assert resp.status_code == 422
    assert "remark" in resp.json()["errors"]
    db.refresh(record)
    assert record.status == "pending"


def test_rejection_clears_verified_at_and_notifies_with_remark(client, db, verified_user, make_record, admin_headers):
    verified_user.id_verified_at = datetime.now(timezone.utc)
    db.commit()
    record = make_record(status="verified")

    resp = _review(client, admin_headers, record, status="reject", remark="Document expired")

    assert resp.status_code == 200
    db.refresh(verified_user)
    assert verified_user.id_verified_at is None
    notification = db.query(Notification).one()
    assert notification.title == "ID verification rejected"
    assert notification.message == "Document expired"


@pytest.mark.parametrize("status", ["pending", "approved", None])
def test_invalid_review_status(client, make_record, admin_headers, status):
    record = make_record()

    resp = _review(client, admin_headers, record, status=status)

    assert resp.status_code == 422
    assert "status" in resp.json()["errors"]


def test_review_of_unknown_record(client, admin_headers):
    resp = client.post(
        "/admin/verifications/id/does-not-exist/review",
        json={"status": "verified"},
        headers=admin_headers,
    )

    assert resp.status_code == 404
    assert resp.json()["message"] == "No verification details found for the given id."


def test_review_checks_record_kind(client, make_record, admin_headers):
    record = make_record(kind="address")

    resp = client.post(
        f"/admin/verifications/id/{record.id}/review",
        json={"status": "verified"},
        headers=admin_headers,
    )

    assert resp.status_code == 404


def test_list_records_with_counts(client, make_record, admin_headers):
    make_record()
    make_record(status="verified")
    make_record(status="reject")
    make_record(kind="address")

    resp = client.get("/admin/verifications/id", params={"status": "pending"}, headers=admin_headers)

    data = resp.json()["data"]
    assert len(data["items"]) == 1
    assert data["items"][0]["status"] == "pending"
    assert data["counts"] == {"pending": 1, "verified": 1, "reject": 1}


def test_broadcast_notification(client, db, admin_headers, notifier):
    resp = client.post(
        "/admin/notifications",
        json={"title": "Maintenance", "message": "Trading pauses at midnight."},
        headers=admin_headers,
    )

    assert resp.status_code == 201
    assert resp.json()["data"]["user_id"] is None
    assert db.query(Notification).one().type == "announcement"
    assert notifier.published[0][0] == "broadcast"


def test_targeted_notification_for_unknown_user(client, db, admin_headers):
    resp = client.post(
        "/admin/notifications",
        json={"title": "Hi", "message": "Hello", "user_id": "missing"},
        headers=admin_headers,
    )

    assert resp.status_code == 404
    assert db.query(Notification).count() == 0
