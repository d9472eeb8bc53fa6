"""Quick runtime checks for the quote pipeline (no network).
Run: python scripts/quickcheck.py
Exits with code 0 on success, non-zero on failure.
"""
from core.calculator import build_submission
from core.models import QuoteRequest, ServiceLine
from core.relay import Delivered, flatten_payload
from core.service import QuoteService
from core.store import MemoryQuoteStore


class RecordingWebhook:
    def __init__(self):
        self.payloads = []

    def deliver(self, payload):
        self.payloads.append(payload)
        return Delivered()


def approx(a, b, tol=1e-6):
    return abs(a - b) <= tol


def main():
    store = MemoryQuoteStore()
    webhook = RecordingWebhook()
    service = QuoteService(store, webhook)

    req = QuoteRequest(
        client_name="Jane Doe",
        client_email="jane@x.com",
        client_phone="123",
        client_address="1 Main St",
        services=[
            ServiceLine(description="Bricklaying", unit="m²", quantity=10, unit_price=5),
            ServiceLine(description="Plastering", unit="m²", quantity=4, unit_price=2.5),
            ServiceLine(description="", unit="m²", quantity=3, unit_price=3),
        ],
    )

    res = service.submit(req)
    quote = store.get_quote_by_number(res.quote_number)

    assert res.quote_number == "LZQ-001"
    assert res.webhook_error is None
    assert quote is not None and quote.status == "sent"
    assert approx(quote.grand_total, 60.0)
    assert len(store.list_services_for_quote(quote.id)) == 2

    payload = webhook.payloads[0]
    assert payload["services[1].unit_price"] == "2.5"
    assert "services[2].description" not in payload
    assert payload == flatten_payload(build_submission(req, req.services), "LZQ-001")

    print("Quickcheck OK")


if __name__ == '__main__':
    main()
