import os
import re

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from core.database import get_db, get_session_factory
from core.errors import InvalidCodeError
from core.mailer import get_mailer
from core.notifier import get_notifier
from core.phone import get_phone_verifier
from core.rate_limit import limiter
from core.security import generate_session_token, get_password_hash
from crud.session_crud import create_session
from main import app
from models.base import Base
from models.user import User

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

PASSWORD = "correct-horse-battery"


class RecordingMailer:
    def __init__(self):
        self.sent = []
        self.fail_with = None

    def send(self, to_email, subject, body):
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append({"to": to_email, "subject": subject, "body": body})

    def last_code(self):
        return re.search(r"OTP: (\d{6})", self.sent[-1]["body"]).group(1)


class RecordingNotifier:
    def __init__(self):
        self.published = []

    def publish(self, topic, payload):
        self.published.append((topic, payload))


class FakePhoneVerifier:
    valid_code = "654321"

    def __init__(self):
        self.sent_to = []

    def send_code(self, phone_number):
        self.sent_to.append(phone_number)
        return f"session-for-{phone_number}"

    def verify_code(self, session_info, code):
        if code != self.valid_code:
            raise InvalidCodeError()
        return session_info.removeprefix("session-for-")


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def phone_verifier():
    return FakePhoneVerifier()


@pytest.fixture
def client(db, mailer, notifier, phone_verifier):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: TestingSessionLocal
    app.dependency_overrides[get_mailer] = lambda: mailer
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_phone_verifier] = lambda: phone_verifier
    limiter.reset()
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(email=None, **fields):
        counter["n"] += 1
        user = User(
            name=fields.pop("name", f"Trader {counter['n']}"),
            email=email or f"trader{counter['n']}@onnbit.io",
            password_hash=get_password_hash(PASSWORD),
            **fields,
        )
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture
def login_as(db):
    """Open a session for the user directly and return its auth headers."""
    def _login(user, two_fa_verified=True, expires_in=timedelta(days=1)):
        token = generate_session_token()
        create_session(
            db,
            user_id=user.id,
            token=token,
            expires_at=datetime.now(timezone.utc) + expires_in,
            two_fa_verified=two_fa_verified,
        )
        db.commit()
        return {"Authorization": f"Bearer {token}"}

    return _login


@pytest.fixture
def verified_user(make_user):
    return make_user(email_verified_at=datetime.now(timezone.utc))
