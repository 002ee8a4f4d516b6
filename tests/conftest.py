"""
Pytest configuration for testing
"""

import os
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from itertools import count

import pytest

# Set up environment variables for testing before any imports
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["ENVIRONMENT"] = "development"
os.environ["PUBLIC_BASE_URL"] = "http://testserver"
os.environ.pop("STRIPE_SECRET_KEY", None)
os.environ.pop("PAYPAL_CLIENT_ID", None)
os.environ.pop("PAYPAL_CLIENT_SECRET", None)
os.environ.pop("STATIC_DIR", None)

from fastapi.testclient import TestClient  # noqa: E402

from lessonbook.payments.types import (  # noqa: E402
    CardIntent,
    ProcessorResult,
    WalletPayment,
    to_minor_units,
)


class FakeCardProcessor:
    """Stands in for Stripe; intents live in memory until marked succeeded."""

    def __init__(self):
        self.intents = {}
        self.retrieve_calls = 0
        self.fail_next = None
        self._ids = count(1)

    def add_intent(self, amount: float, status: str = "succeeded", metadata: dict = None) -> CardIntent:
        intent_id = f"pi_test_{next(self._ids)}"
        intent = CardIntent(
            id=intent_id,
            status=status,
            amount=to_minor_units(amount),
            client_secret=f"{intent_id}_secret",
            metadata=metadata or {},
        )
        self.intents[intent_id] = intent
        return intent

    def purchase_intent(self, amount: float, user: dict, payment_type: str, item_id: str,
                        status: str = "succeeded") -> CardIntent:
        """Intent tagged the way /create-intent tags it"""
        metadata = {"userId": user["user"]["id"], "type": payment_type, "itemId": item_id}
        return self.add_intent(amount, status, metadata)

    async def create_intent(self, amount, metadata):
        if self.fail_next:
            error, self.fail_next = self.fail_next, None
            return ProcessorResult.failure(error)
        return ProcessorResult.success(self.add_intent(amount, "requires_payment_method", metadata))

    async def retrieve_intent(self, intent_id):
        self.retrieve_calls += 1
        if self.fail_next:
            error, self.fail_next = self.fail_next, None
            return ProcessorResult.failure(error)
        intent = self.intents.get(intent_id)
        if intent is None:
            return ProcessorResult.failure(f"No such payment_intent: '{intent_id}'")
        return ProcessorResult.success(intent)


class FakeWalletProcessor:
    """Stands in for PayPal; records created payments and executes them."""

    def __init__(self):
        self.payments = {}
        self.created = []
        self.execute_state = "approved"
        self.fail_execute = False
        self._ids = count(1)

    async def create_payment(self, amount, item_name, sku, description, custom, return_url, cancel_url):
        payment_id = f"PAYID-TEST-{next(self._ids)}"
        payment = WalletPayment(
            id=payment_id,
            state="created",
            approval_url=f"https://www.sandbox.paypal.com/checkoutnow?token={payment_id}",
            custom=custom,
            total=round(amount, 2),
        )
        self.payments[payment_id] = payment
        self.created.append({
            "amount": amount,
            "item_name": item_name,
            "sku": sku,
            "description": description,
            "return_url": return_url,
            "cancel_url": cancel_url,
        })
        return ProcessorResult.success(payment)

    async def execute_payment(self, payment_id, payer_id):
        if self.fail_execute:
            return ProcessorResult.failure("PAYMENT_NOT_APPROVED_FOR_EXECUTION")
        payment = self.payments.get(payment_id)
        if payment is None:
            return ProcessorResult.failure("INVALID_RESOURCE_ID")
        payment.state = self.execute_state
        return ProcessorResult.success(payment)


@pytest.fixture
def card_processor():
    return FakeCardProcessor()


@pytest.fixture
def wallet_processor():
    return FakeWalletProcessor()


@pytest.fixture
def app(card_processor, wallet_processor):
    """Fresh app (and fresh in-memory database) per test"""
    from lessonbook.api.v1.routes.payments import get_card_processor, get_wallet_processor
    from lessonbook.main import create_app

    application = create_app()
    application.dependency_overrides[get_card_processor] = lambda: card_processor
    application.dependency_overrides[get_wallet_processor] = lambda: wallet_processor
    return application


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db_session(app, client):
    """Open a short-lived session; close it before issuing more requests"""

    @contextmanager
    def _session():
        db = app.state.database.session()
        try:
            yield db
        finally:
            db.close()

    return _session


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def register(client):
    """Register a user through the API; returns (token, user, headers)"""

    def _register(name="Test Student", email="student@example.com", password="secret123"):
        response = client.post(
            "/api/auth/register",
            json={"name": name, "email": email, "password": password},
        )
        assert response.status_code == 201, response.text
        data = response.json()
        return data["token"], data["user"], auth_headers(data["token"])

    return _register


@pytest.fixture
def student(register):
    token, user, headers = register()
    return {"token": token, "user": user, "headers": headers}


@pytest.fixture
def other_student(register):
    token, user, headers = register(name="Other Student", email="other@example.com")
    return {"token": token, "user": user, "headers": headers}


@pytest.fixture
def admin(register, db_session):
    from lessonbook.models.user import UserRole
    from lessonbook.services.user_service import UserService

    token, user, headers = register(name="Teacher", email="admin@example.com")
    with db_session() as db:
        UserService().set_role(db, "admin@example.com", UserRole.ADMIN)
    return {"token": token, "user": user, "headers": headers}


@pytest.fixture
def lesson(client, admin):
    response = client.post(
        "/api/lessons",
        json={
            "title": "Business English Grammar",
            "description": "Tenses and conditionals for meetings",
            "price": 25.0,
            "level": "intermediate",
            "category": "business",
        },
        headers=admin["headers"],
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def subscription(client, student):
    response = client.post(
        "/api/subscriptions",
        json={"type": "monthly", "price": 49.99},
        headers=student["headers"],
    )
    assert response.status_code == 201, response.text
    return response.json()


def future_iso(days: int = 3) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


def past_iso(days: int = 1) -> str:
    return (datetime.now(timezone.utc) - timedelta(days=days)).isoformat()


def parse_iso(value: str) -> datetime:
    return datetime.fromisoformat(value.rstrip("Z"))
