import threading
from concurrent.futures import ThreadPoolExecutor

from core.models import ClientFields, ServiceItem
from core.store import MemoryQuoteStore

CLIENT = ClientFields(
    client_name="Jane Doe",
    client_email="jane@x.com",
    client_phone="123",
    client_address="1 Main St",
    terms="Net 30",
)


def test_quote_numbers_are_sequential_and_padded(store):
    assert [store.next_quote_number() for _ in range(3)] == ["LZQ-001", "LZQ-002", "LZQ-003"]


def test_padding_grows_past_999():
    store = MemoryQuoteStore()
    store._quote_counter = 999
    assert store.next_quote_number() == "LZQ-999"
    assert store.next_quote_number() == "LZQ-1000"


def test_unused_number_is_not_reissued(store):
    # number taken, quote never created
    store.next_quote_number()
    number = store.next_quote_number()
    quote = store.create_quote(number, CLIENT, 0.0)
    assert quote.quote_number == "LZQ-002"
    assert store.next_quote_number() == "LZQ-003"


def test_ids_and_numbers_are_separate_sequences(store):
    store.next_quote_number()
    store.next_quote_number()
    quote = store.create_quote(store.next_quote_number(), CLIENT, 10.0)
    assert quote.id == 1
    assert quote.quote_number == "LZQ-003"
    assert quote.status == "draft"
    assert quote.terms == "Net 30"
    assert quote.created_at is not None


def test_service_records_round_trip(store):
    lines = [
        ServiceItem(description="Bricklaying", unit="m²", quantity=10, unit_price=5),
        ServiceItem(description="Plastering", unit="m²", quantity=4, unit_price=2.5),
        ServiceItem(description="Skip", unit="each", quantity=1, unit_price=199.99),
    ]
    grand_total = sum(line.quantity * line.unit_price for line in lines)
    quote = store.create_quote(store.next_quote_number(), CLIENT, grand_total)
    other = store.create_quote(store.next_quote_number(), CLIENT, 1.0)
    for line in lines:
        store.create_service_record(quote.id, line)
    store.create_service_record(other.id, ServiceItem(description="x", unit="m", quantity=1, unit_price=1))

    records = store.list_services_for_quote(quote.id)

    assert len(records) == 3
    assert [r.total for r in records] == [50.0, 10.0, 199.99]
    assert sum(r.total for r in records) == quote.grand_total
    assert len({r.id for r in records}) == 3


def test_reads_on_miss_return_nothing(store):
    assert store.get_quote(42) is None
    assert store.get_quote_by_number("LZQ-042") is None
    assert store.list_quotes() == []
    assert store.list_services_for_quote(42) == []
    assert store.mark_sent(42) is None


def test_list_is_newest_first(store):
    first = store.create_quote(store.next_quote_number(), CLIENT, 1.0)
    second = store.create_quote(store.next_quote_number(), CLIENT, 2.0)
    third = store.create_quote(store.next_quote_number(), CLIENT, 3.0)
    assert [q.id for q in store.list_quotes()] == [third.id, second.id, first.id]
    assert store.get_quote_by_number("LZQ-002") == second


def test_returned_quotes_are_copies(store):
    quote = store.create_quote(store.next_quote_number(), CLIENT, 1.0)
    store.create_service_record(quote.id, ServiceItem(description="x", unit="m", quantity=2, unit_price=3))

    quote.status = "accepted"
    store.get_quote(quote.id).grand_total = 999.0
    store.get_quote_by_number("LZQ-001").client_name = "Mallory"
    store.list_quotes()[0].quote_number = "LZQ-999"
    store.list_services_for_quote(quote.id)[0].total = 0.0

    stored = store.get_quote(quote.id)
    assert stored.status == "draft"
    assert stored.grand_total == 1.0
    assert stored.client_name == "Jane Doe"
    assert stored.quote_number == "LZQ-001"
    assert store.list_services_for_quote(quote.id)[0].total == 6.0


def test_mark_sent(store):
    quote = store.create_quote(store.next_quote_number(), CLIENT, 1.0)
    store.mark_sent(quote.id)
    assert store.get_quote(quote.id).status == "sent"


def test_concurrent_numbers_are_unique(store):
    start = threading.Barrier(8)

    def grab(_):
        start.wait()
        return [store.next_quote_number() for _ in range(250)]

    with ThreadPoolExecutor(max_workers=8) as pool:
        batches = list(pool.map(grab, range(8)))

    numbers = [n for batch in batches for n in batch]
    assert len(numbers) == 2000
    assert len(set(numbers)) == 2000
    # each thread sees its own numbers strictly increasing
    for batch in batches:
        values = [int(n.split("-")[1]) for n in batch]
        assert values == sorted(values)
    assert store.next_quote_number() == "LZQ-2001"


def test_concurrent_quote_creation_gets_distinct_ids(store):
    def create(_):
        return store.create_quote(store.next_quote_number(), CLIENT, 1.0)

    with ThreadPoolExecutor(max_workers=8) as pool:
        quotes = list(pool.map(create, range(200)))

    assert len({q.id for q in quotes}) == 200
    assert len({q.quote_number for q in quotes}) == 200
    assert len(store.list_quotes()) == 200
