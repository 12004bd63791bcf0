import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ["TESTING"] = "true"
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient

from postflow.api.dependencies import get_email_service, get_payment_service
from postflow.core.security import create_access_token, get_password_hash
from postflow.db.database import SessionLocal, engine
from postflow.db.models import Base
from postflow.domain.enums import UserRole, UserStatus, UserType
from postflow.infrastructure.orm.user_model import UserModel
from postflow.main import app
from postflow import tasks

PASSWORD = "password123"


class FakeEmailService:
    def __init__(self):
        self.sent = []

    async def send_email(self, to_email, subject, html_content, text_content=None):
        self.sent.append({"to": to_email, "subject": subject})
        return True

    async def send_verification_email(self, to_email, verification_token):
        self.sent.append({"to": to_email, "subject": "verify", "token": verification_token})
        return True

    async def send_password_reset_email(self, to_email, reset_token):
        self.sent.append({"to": to_email, "subject": "reset", "token": reset_token})
        return True


class FakePaymentService:
    def __init__(self):
        self.sessions = []
        self.event = None

    async def create_checkout_session(self, order_id, amount_cents, customer_email, description):
        self.sessions.append({"order_id": order_id, "amount": amount_cents, "email": customer_email})
        return {
            "checkout_id": f"cs_test_{len(self.sessions)}",
            "checkout_url": "https://checkout.stripe.test/session",
            "amount": amount_cents,
            "currency": "USD",
        }

    def verify_webhook(self, payload, signature):
        if signature != "valid":
            raise ValueError("Invalid webhook signature")
        return self.event


class FakeAIService:
    """Answers each extraction prompt with a canned JSON object."""

    def __init__(self, basic=None, pricing=None, requirements=None, fail=False):
        self.basic = basic or {}
        self.pricing = pricing or {}
        self.requirements = requirements or {}
        self.fail = fail
        self.calls = 0

    async def extract_json(self, system_prompt, user_prompt):
        from postflow.infrastructure.external_services.ai_service import AIServiceError

        self.calls += 1
        if self.fail:
            raise AIServiceError("LLM unavailable")
        if "Extract their name" in user_prompt:
            return self.basic
        if "pricing details" in user_prompt:
            return self.pricing
        return self.requirements

    async def aclose(self):
        pass


@pytest.fixture(autouse=True)
def database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(database):
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def email_service():
    return FakeEmailService()


@pytest.fixture
def payment_service():
    return FakePaymentService()


@pytest.fixture
def queued_emails(monkeypatch):
    queued = []
    monkeypatch.setattr(tasks.process_inbound_email, "delay", lambda log_id: queued.append(log_id))
    return queued


@pytest.fixture
def client(email_service, payment_service, queued_emails):
    app.dependency_overrides[get_email_service] = lambda: email_service
    app.dependency_overrides[get_payment_service] = lambda: payment_service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    def _make_user(email, user_type=UserType.ACCOUNT, role=UserRole.USER, status=UserStatus.ACTIVE, **fields):
        user = UserModel(
            email=email,
            hashed_password=get_password_hash(PASSWORD),
            user_type=user_type.value,
            role=role.value,
            status=status.value,
            email_verified=True,
            **fields,
        )
        db.add(user)
        db.commit()
        return user
    return _make_user


def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(str(user.id), user.user_type)}"}


@pytest.fixture
def account(make_user):
    return make_user("owner@brand.com", company_name="Brand Co")


@pytest.fixture
def other_account(make_user):
    return make_user("other@rival.com")


@pytest.fixture
def staff(make_user):
    return make_user("ops@postflow.app", user_type=UserType.INTERNAL)


@pytest.fixture
def admin(make_user):
    return make_user("admin@postflow.app", user_type=UserType.INTERNAL, role=UserRole.ADMIN)


@pytest.fixture
def publisher_user(make_user):
    return make_user("editor@techblog.com", user_type=UserType.PUBLISHER, first_name="Ana")
