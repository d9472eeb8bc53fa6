import requests
from fastapi.testclient import TestClient

from core import relay as relay_mod
from core.relay import HttpWebhook
from core.service import QuoteService
from web.api import create_app


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_submit_happy_path(client, store, jane):
    r = client.post("/api/quotes", json=jane)

    assert r.status_code == 200
    assert r.json() == {
        "success": True,
        "quote_number": "LZQ-001",
        "message": "Quote LZQ-001 created successfully",
    }
    quote = store.get_quote_by_number("LZQ-001")
    assert quote.grand_total == 50.0
    assert quote.status == "sent"


def test_submit_webhook_timeout_still_creates_quote(monkeypatch, store, jane):
    def hang(url, **kw):
        raise requests.Timeout("read timed out")

    monkeypatch.setattr(relay_mod.requests, "post", hang)
    client = TestClient(create_app(QuoteService(store, HttpWebhook("https://n8n.example.com/webhook/x"))))

    r = client.post("/api/quotes", json=jane)

    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["quote_number"] == "LZQ-001"
    assert "timed out" in body["webhook_error"]
    assert body["webhook_status"] == "timeout_or_network_error"
    assert store.get_quote_by_number("LZQ-001").status == "draft"


def test_submit_empty_services_is_400(client, store, jane):
    jane["services"] = []

    r = client.post("/api/quotes", json=jane)

    assert r.status_code == 400
    body = r.json()
    assert body["error"] == "Validation failed"
    assert body["details"] == [
        "Please add at least one valid service with description, quantity, and unit price"
    ]
    assert store.list_quotes() == []
    assert store.next_quote_number() == "LZQ-001"


def test_submit_bad_client_fields_is_400(client, jane):
    jane["client_email"] = "not-an-email"
    jane["client_phone"] = " "

    r = client.post("/api/quotes", json=jane)

    assert r.status_code == 400
    assert r.json()["details"] == ["Please enter a valid email address", "Phone number is required"]


def test_submit_out_of_range_validity_is_400(client, jane):
    jane["validity_days"] = 400

    r = client.post("/api/quotes", json=jane)

    assert r.status_code == 400
    body = r.json()
    assert body["error"] == "Validation failed"
    assert body["details"][0]["loc"] == ["body", "validity_days"]


def test_internal_error_is_500(webhook, jane):
    class BrokenStore:
        def next_quote_number(self):
            raise RuntimeError("store unavailable")

    client = TestClient(create_app(QuoteService(BrokenStore(), webhook)))

    r = client.post("/api/quotes", json=jane)

    assert r.status_code == 500
    assert r.json() == {"error": "Failed to create quote", "message": "store unavailable"}
    assert webhook.payloads == []


def test_list_and_fetch(client, jane):
    client.post("/api/quotes", json=jane)
    jane["client_name"] = "John Roe"
    client.post("/api/quotes", json=jane)

    listed = client.get("/api/quotes").json()
    assert [q["quote_number"] for q in listed] == ["LZQ-002", "LZQ-001"]

    one = client.get("/api/quotes/1").json()
    assert one["client_name"] == "Jane Doe"
    assert one["services"] == [
        {
            "id": 1,
            "quote_id": 1,
            "description": "Bricklaying",
            "unit": "m²",
            "quantity": 10.0,
            "unit_price": 5.0,
            "total": 50.0,
        }
    ]

    by_number = client.get("/api/quotes/number/LZQ-002").json()
    assert by_number["client_name"] == "John Roe"


def test_fetch_missing_is_404(client):
    assert client.get("/api/quotes/99").status_code == 404
    assert client.get("/api/quotes/number/LZQ-404").status_code == 404


def test_preview_has_no_side_effects(client, store, webhook, jane):
    r = client.post("/api/quotes/preview", json=jane)

    assert r.status_code == 200
    body = r.json()
    assert body["quote_number"].startswith("LZQ-PREVIEW-")
    assert body["grand_total"] == 50.0
    assert store.list_quotes() == []
    assert webhook.payloads == []
