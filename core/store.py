# core/store.py
# Quote storage. Only the store hands out ids and quote numbers.

from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Protocol, Union

from .models import ClientFields, Quote, QuoteServiceRecord, QuoteSubmission, ServiceItem

ClientLike = Union[ClientFields, QuoteSubmission]


class QuoteStore(Protocol):
    def next_quote_number(self) -> str: ...

    def create_quote(self, quote_number: str, client: ClientLike, grand_total: float) -> Quote: ...

    def create_service_record(self, quote_id: int, line: ServiceItem) -> QuoteServiceRecord: ...

    def mark_sent(self, quote_id: int) -> Quote | None: ...

    def get_quote(self, quote_id: int) -> Quote | None: ...

    def get_quote_by_number(self, quote_number: str) -> Quote | None: ...

    def list_quotes(self) -> list[Quote]: ...

    def list_services_for_quote(self, quote_id: int) -> list[QuoteServiceRecord]: ...


class MemoryQuoteStore:
    """
    Process-lifetime store. Everything is gone on restart.

    Quote ids, service ids and the quote-number counter are separate sequences,
    all starting at 1. A quote number, once issued, is never issued again, even
    if the quote it was meant for is never created.
    """

    def __init__(self, prefix: str = "LZQ") -> None:
        self.prefix = prefix
        self._lock = threading.Lock()

        self._quotes: dict[int, Quote] = {}
        self._services: dict[int, QuoteServiceRecord] = {}

        self._next_quote_id = 1
        self._next_service_id = 1
        self._quote_counter = 1

    # ---------- counters ----------

    def next_quote_number(self) -> str:
        with self._lock:
            n = self._quote_counter
            self._quote_counter += 1
        return f"{self.prefix}-{n:03d}"

    # ---------- writes ----------

    def create_quote(self, quote_number: str, client: ClientLike, grand_total: float) -> Quote:
        with self._lock:
            quote = Quote(
                id=self._next_quote_id,
                quote_number=quote_number,
                client_name=client.client_name,
                client_email=client.client_email,
                client_phone=client.client_phone,
                client_address=client.client_address,
                validity_days=client.validity_days,
                terms=client.terms,
                grand_total=grand_total,
                status="draft",
                created_at=datetime.now(timezone.utc),
            )
            self._next_quote_id += 1
            self._quotes[quote.id] = quote
        return quote.model_copy()

    def create_service_record(self, quote_id: int, line: ServiceItem) -> QuoteServiceRecord:
        with self._lock:
            record = QuoteServiceRecord(
                id=self._next_service_id,
                quote_id=quote_id,
                description=line.description,
                unit=line.unit,
                quantity=line.quantity,
                unit_price=line.unit_price,
                total=line.quantity * line.unit_price,
            )
            self._next_service_id += 1
            self._services[record.id] = record
        return record.model_copy()

    def mark_sent(self, quote_id: int) -> Quote | None:
        with self._lock:
            quote = self._quotes.get(quote_id)
            if quote is None:
                return None
            if quote.status == "draft":
                quote.status = "sent"
            return quote.model_copy()

    # ---------- reads (None / [] on miss, always copies) ----------

    def get_quote(self, quote_id: int) -> Quote | None:
        with self._lock:
            quote = self._quotes.get(quote_id)
            return quote.model_copy() if quote is not None else None

    def get_quote_by_number(self, quote_number: str) -> Quote | None:
        with self._lock:
            for quote in self._quotes.values():
                if quote.quote_number == quote_number:
                    return quote.model_copy()
        return None

    def list_quotes(self) -> list[Quote]:
        with self._lock:
            quotes = [q.model_copy() for q in self._quotes.values()]
        # newest first; id breaks ties inside one clock tick
        return sorted(quotes, key=lambda q: (q.created_at, q.id), reverse=True)

    def list_services_for_quote(self, quote_id: int) -> list[QuoteServiceRecord]:
        with self._lock:
            return [r.model_copy() for r in self._services.values() if r.quote_id == quote_id]
