import os

# Set testing environment before the application is imported
os.environ["TESTING"] = "1"
os.environ["TEST_DATABASE_URL"] = "sqlite:///./test.db"
for key in ("SMTP_HOST", "SMTP_USER", "SMTP_PASSWORD",
            "TWILIO_ACCOUNT_SID", "TWILIO_AUTH_TOKEN", "TWILIO_PHONE_NUMBER"):
    os.environ.pop(key, None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.main import app
from app.api.deps import get_notifier
from app.core.database import get_db, Base, redis_client
from app.services.notifications import NotificationService

SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(
    SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False}
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def override_get_db():
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()

app.dependency_overrides[get_db] = override_get_db


class FakeEmailSender:
    """Records messages instead of talking to SMTP."""

    def __init__(self):
        self.enabled = True
        self.succeed = True
        self.error = None
        self.sent = []

    async def send(self, to, subject, html_content):
        if self.error:
            raise self.error
        self.sent.append({"to": to, "subject": subject, "html": html_content})
        return (True, None) if self.succeed else (False, "smtp unavailable")


class FakeSmsSender:
    """Records messages instead of talking to the SMS provider."""

    def __init__(self):
        self.enabled = True
        self.succeed = True
        self.error = None
        self.sent = []

    async def send(self, to, body):
        if self.error:
            raise self.error
        self.sent.append({"to": to, "body": body})
        return (True, None) if self.succeed else (False, "provider returned 500")


@pytest.fixture(scope="function")
def test_db():
    # Create tables
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)

@pytest.fixture
def db_session(test_db):
    db = TestingSessionLocal()
    yield db
    db.close()

@pytest.fixture
def email_sender():
    return FakeEmailSender()

@pytest.fixture
def sms_sender():
    return FakeSmsSender()

@pytest.fixture
def notifier(email_sender, sms_sender):
    service = NotificationService(email_sender, sms_sender)
    app.dependency_overrides[get_notifier] = lambda: service
    yield service
    app.dependency_overrides.pop(get_notifier, None)

@pytest.fixture
def client(test_db, notifier):
    redis_client.data.clear()
    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client
