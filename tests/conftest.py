# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from core.relay import Delivered
from core.service import QuoteService
from core.store import MemoryQuoteStore
from web.api import create_app


class FakeWebhook:
    """Answers with a fixed outcome and remembers what it was sent."""

    def __init__(self, outcome=None):
        self.outcome = outcome or Delivered()
        self.payloads = []

    def deliver(self, payload):
        self.payloads.append(payload)
        return self.outcome


@pytest.fixture
def store():
    return MemoryQuoteStore()


@pytest.fixture
def fake_webhook():
    return FakeWebhook


@pytest.fixture
def webhook():
    return FakeWebhook()


@pytest.fixture
def service(store, webhook):
    return QuoteService(store, webhook)


@pytest.fixture
def client(service):
    return TestClient(create_app(service))


@pytest.fixture
def jane():
    return {
        "client_name": "Jane Doe",
        "client_email": "jane@x.com",
        "client_phone": "123",
        "client_address": "1 Main St",
        "validity_days": 14,
        "services": [
            {"description": "Bricklaying", "unit": "m²", "quantity": 10, "unit_price": 5},
        ],
    }
