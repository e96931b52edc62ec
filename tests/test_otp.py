from datetime import datetime, timedelta, timezone

import pytest

from core.errors import MailDeliveryError
from core.unit_of_work import UnitOfWork
from models.notification import Notification
from models.otp import OneTimeCode, OtpOperation
from models.session import Session as SessionModel
from services.notification_service import NotificationService
from services.otp_service import OPERATION_EFFECTS, OtpService, _confirm_email


def _codes(db, user):
    db.expire_all()
    return db.query(OneTimeCode).filter(OneTimeCode.user_id == user.id).all()


def test_issue_sends_one_mail_and_stores_code(client, db, make_user, login_as, mailer):
    user = make_user()
    resp = client.post("/otp/email/send", json={}, headers=login_as(user))

    assert resp.status_code == 200
    assert resp.json()["status"] is True
    assert resp.json()["message"] == "OTP sent successfully!"
    assert len(mailer.sent) == 1
    assert mailer.sent[0]["to"] == user.email
    assert mailer.sent[0]["subject"] == "Verify Your Email"

    codes = _codes(db, user)
    assert len(codes) == 1
    assert codes[0].code == mailer.last_code()
    assert 100000 <= int(codes[0].code) <= 999999
    assert codes[0].operation == "email_verification"


def test_reissue_replaces_previous_code(client, db, make_user, login_as, mailer):
    user = make_user()
    headers = login_as(user)
    client.post("/otp/email/send", json={}, headers=headers)
    first = _codes(db, user)[0]
    first_id, first_expiry = first.id, first.expires_at

    resp = client.post("/otp/email/send", json={"operation": "two_fa", "operation_type": "sell"}, headers=headers)

    assert resp.status_code == 200
    codes = _codes(db, user)
    assert len(codes) == 1
    assert codes[0].id == first_id
    assert codes[0].code == mailer.last_code()
    assert codes[0].operation == "two_fa"
    assert codes[0].operation_type == "sell"
    assert codes[0].expires_at >= first_expiry
    assert mailer.sent[-1]["subject"] == "Your OTP for Trade Verification"
    assert "initiate a sell trade" in mailer.sent[-1]["body"]


def test_two_fa_requires_buy_or_sell(client, db, make_user, login_as, mailer):
    user = make_user()
    resp = client.post(
        "/otp/email/send",
        json={"operation": "two_fa", "operation_type": "trade"},
        headers=login_as(user),
    )

    assert resp.status_code == 400
    assert resp.json() == {
        "status": False,
        "message": "operation_type must be buy or sell",
        "data": None,
        "errors": None,
    }
    assert mailer.sent == []
    assert _codes(db, user) == []


def test_issue_rejects_unknown_operation(client, make_user, login_as, mailer):
    resp = client.post("/otp/email/send", json={"operation": "withdraw"}, headers=login_as(make_user()))

    assert resp.status_code == 400
    assert resp.json()["message"] == "Invalid operation"
    assert mailer.sent == []


def test_issue_for_verified_email_is_a_noop(client, db, verified_user, login_as, mailer):
    resp = client.post("/otp/email/send", json={"operation": "EMAIL_VERIFICATION"}, headers=login_as(verified_user))

    assert resp.status_code == 200
    assert resp.json()["status"] is True
    assert resp.json()["message"] == "Email is already verified."
    assert mailer.sent == []
    assert _codes(db, verified_user) == []


def test_issue_requires_authentication(client):
    resp = client.post("/otp/email/send", json={})

    assert resp.status_code == 401
    assert resp.json()["status"] is False
    assert resp.json()["message"] == "Not authenticated"


def test_mail_failure_surfaces_as_500(client, make_user, login_as, mailer):
    mailer.fail_with = MailDeliveryError(errors="Connection refused")

    resp = client.post("/otp/email/send", json={}, headers=login_as(make_user()))

    assert resp.status_code == 500
    assert resp.json()["status"] is False
    assert resp.json()["errors"] == "Connection refused"


def test_verify_email_marks_user_and_consumes_code(client, db, make_user, login_as, mailer, notifier):
    user = make_user()
    headers = login_as(user)
    client.post("/otp/email/send", json={}, headers=headers)

    resp = client.post("/otp/email/verify", json={"otp": mailer.last_code()}, headers=headers)

    assert resp.status_code == 200
    assert resp.json()["message"] == "Email OTP verified successfully!"
    db.refresh(user)
    assert user.email_verified_at is not None
    assert user.user_level == 0
    assert _codes(db, user) == []

    notifications = db.query(Notification).filter(Notification.user_id == user.id).all()
    assert [n.title for n in notifications] == ["Email verified successfully."]
    assert len(notifier.published) == 1
    topic, payload = notifier.published[0]
    assert topic == f"user:{user.id}"
    assert payload["title"] == "Email verified successfully."


def test_code_cannot_be_used_twice(client, make_user, login_as, mailer):
    headers = login_as(make_user())
    client.post("/otp/email/send", json={}, headers=headers)
    code = mailer.last_code()

    assert client.post("/otp/email/verify", json={"otp": code}, headers=headers).status_code == 200
    resp = client.post("/otp/email/verify", json={"otp": code}, headers=headers)

    assert resp.status_code == 400
    assert resp.json()["message"] == "Invalid OTP"


def test_numeric_code_is_accepted(client, db, make_user, login_as, mailer):
    user = make_user()
    headers = login_as(user)
    client.post("/otp/email/send", json={}, headers=headers)

    resp = client.post("/otp/email/verify", json={"otp": int(mailer.last_code())}, headers=headers)

    assert resp.status_code == 200


def test_expired_code_is_rejected_and_left_in_place(client, db, make_user, login_as):
    user = make_user()
    db.add(OneTimeCode(
        user_id=user.id,
        code="123456",
        operation="email_verification",
        expires_at=datetime.now(timezone.utc) - timedelta(minutes=5),
    ))
    db.commit()

    resp = client.post("/otp/email/verify", json={"otp": "123456"}, headers=login_as(user))

    assert resp.status_code == 400
    assert resp.json()["message"] == "OTP has expired"
    assert [c.code for c in _codes(db, user)] == ["123456"]
    db.refresh(user)
    assert user.email_verified_at is None


def test_wrong_code_keeps_stored_code(client, db, make_user, login_as, mailer):
    user = make_user()
    headers = login_as(user)
    client.post("/otp/email/send", json={}, headers=headers)
    stored = mailer.last_code()
    wrong = "100000" if stored != "100000" else "100001"

    resp = client.post("/otp/email/verify", json={"otp": wrong}, headers=headers)

    assert resp.status_code == 400
    assert resp.json()["message"] == "Invalid OTP"
    assert [c.code for c in _codes(db, user)] == [stored]


def test_email_verification_promotes_fully_verified_user(client, db, make_user, login_as, mailer):
    now = datetime.now(timezone.utc)
    user = make_user(number_verified_at=now, id_verified_at=now)
    headers = login_as(user)
    client.post("/otp/email/send", json={}, headers=headers)

    client.post("/otp/email/verify", json={"otp": mailer.last_code()}, headers=headers)

    db.refresh(user)
    assert user.user_level == 1


def test_email_verification_without_phone_does_not_promote(client, db, make_user, login_as, mailer):
    user = make_user(id_verified_at=datetime.now(timezone.utc))
    headers = login_as(user)
    client.post("/otp/email/send", json={}, headers=headers)

    client.post("/otp/email/verify", json={"otp": mailer.last_code()}, headers=headers)

    db.refresh(user)
    assert user.email_verified_at is not None
    assert user.user_level == 0


@pytest.mark.parametrize("operation", ["login", "two_fa"])
def test_two_factor_codes_clear_the_current_session(client, db, make_user, login_as, mailer, notifier, operation):
    user = make_user(two_factor_auth=True)
    headers = login_as(user, two_fa_verified=False)
    body = {"operation": operation, "operation_type": "buy"}
    client.post("/otp/email/send", json=body, headers=headers)

    resp = client.post("/otp/email/verify", json={"otp": mailer.last_code(), "operation": operation}, headers=headers)

    assert resp.status_code == 200
    token = headers["Authorization"].split()[1]
    db.expire_all()
    s = db.query(SessionModel).filter(SessionModel.token == token).one()
    assert s.two_fa_verified is True
    assert notifier.published == []


def test_two_fa_disable_only_consumes_code(client, db, make_user, login_as, mailer):
    user = make_user(two_factor_auth=True)
    headers = login_as(user)
    client.post("/otp/email/send", json={"operation": "two_fa_disable"}, headers=headers)

    resp = client.post(
        "/otp/email/verify",
        json={"otp": mailer.last_code(), "operation": "two_fa_disable"},
        headers=headers,
    )

    assert resp.status_code == 200
    assert _codes(db, user) == []
    db.refresh(user)
    assert user.email_verified_at is None
    assert db.query(Notification).count() == 0


def test_verify_requires_code(client, make_user, login_as):
    resp = client.post("/otp/email/verify", json={}, headers=login_as(make_user()))

    assert resp.status_code == 422
    assert resp.json()["message"] == "Validation failed"
    assert resp.json()["errors"] == {"otp": "OTP is required"}


def test_verify_rejects_unknown_operation(client, make_user, login_as):
    resp = client.post("/otp/email/verify", json={"otp": "123456", "operation": "reset"}, headers=login_as(make_user()))

    assert resp.status_code == 422
    assert resp.json()["message"] == "Invalid operation type"


def test_issuance_is_rate_limited(client, make_user, login_as):
    headers = login_as(make_user())
    statuses = [client.post("/otp/email/send", json={}, headers=headers).status_code for _ in range(6)]

    assert statuses[:5] == [200] * 5
    assert statuses[5] == 429


def test_verification_guesses_are_rate_limited(client, db, make_user, login_as, mailer):
    user = make_user()
    headers = login_as(user)
    client.post("/otp/email/send", json={}, headers=headers)
    wrong = "100000" if mailer.last_code() != "100000" else "100001"

    statuses = [
        client.post("/otp/email/verify", json={"otp": wrong}, headers=headers).status_code
        for _ in range(6)
    ]

    assert statuses[:5] == [400] * 5
    assert statuses[5] == 429
    assert len(_codes(db, user)) == 1


def test_failed_effect_rolls_back_consumption(db, make_user, mailer, notifier, monkeypatch):
    user = make_user()
    uow = UnitOfWork(db)
    service = OtpService(uow, mailer, NotificationService(uow, notifier))
    service.issue(user)
    code = mailer.last_code()

    def failing_effect(ctx):
        _confirm_email(ctx)
        raise RuntimeError("lost connection")

    monkeypatch.setitem(OPERATION_EFFECTS, OtpOperation.EMAIL_VERIFICATION, failing_effect)

    with pytest.raises(RuntimeError):
        service.verify(user, code)

    assert [c.code for c in _codes(db, user)] == [code]
    assert user.email_verified_at is None
    assert db.query(Notification).count() == 0
    assert notifier.published == []


def test_service_uses_injected_clock_for_expiry(db, make_user, mailer, notifier):
    user = make_user()
    uow = UnitOfWork(db)
    now = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
    clock = {"now": now}
    service = OtpService(uow, mailer, NotificationService(uow, notifier), clock=lambda: clock["now"])
    service.issue(user)

    clock["now"] = now + timedelta(minutes=5)

    from core.errors import ExpiredError
    with pytest.raises(ExpiredError):
        service.verify(user, mailer.last_code())
