# cli/app.py
# CLI = stand-in for the web form. It talks to the API like the browser does,
# so the server can change without touching this.

from __future__ import annotations

import os

import requests

from core.calculator import build_submission, compute_grand_total, row_total
from core.models import ClientFields, ServiceLine
from core.validation import join_errors, validate_client, validate_services

MAX_SERVICE_ROWS = 20

DEFAULT_TERMS = (
    "50% upfront payment required before project commencement. "
    "Balance payable upon completion. All materials provided meet industry standards."
)

API_URL = os.getenv("QUOTE_API_URL", "http://127.0.0.1:8000")


# ---------- INPUT HELPERS ----------

def ask_text(prompt: str, default: str = "") -> str:
    suffix = f" [{default}]" if default else ""
    raw = input(f"{prompt}{suffix}: ").strip()
    return raw or default


def ask_optional_float(prompt: str) -> float | None:
    """Number or Enter for an empty cell. Keeps asking on garbage."""
    while True:
        raw = input(prompt).strip().replace(",", ".")
        if raw == "":
            return None
        try:
            return float(raw)
        except ValueError:
            print("❌ Enter a number (example: 12.5) or press Enter to leave empty")


def ask_int_default(prompt: str, default: int, *, min_value: int, max_value: int) -> int:
    while True:
        raw = input(f"{prompt} [{default}]: ").strip()
        if raw == "":
            return default
        try:
            value = int(raw)
        except ValueError:
            print("❌ Enter a whole number")
            continue
        if not min_value <= value <= max_value:
            print(f"❌ Value must be between {min_value} and {max_value}")
            continue
        return value


def ask_yes_no(prompt: str) -> bool:
    while True:
        raw = input(prompt + " (y/n): ").strip().lower()
        if raw in ("y", "yes"):
            return True
        if raw in ("n", "no"):
            return False
        print("❌ Enter y or n")


def money(x: float) -> str:
    return f"${x:,.2f}"


# ---------- SERVICE ROWS ----------

def add_row(rows: list[ServiceLine]) -> list[ServiceLine]:
    if len(rows) >= MAX_SERVICE_ROWS:
        return rows
    return [*rows, ServiceLine()]


def remove_row(rows: list[ServiceLine], index: int) -> list[ServiceLine]:
    return [row for i, row in enumerate(rows) if i != index]


def update_row(rows: list[ServiceLine], index: int, **changes) -> list[ServiceLine]:
    out = list(rows)
    out[index] = out[index].model_copy(update=changes)
    return out


def print_rows(rows: list[ServiceLine]) -> None:
    print("\n  #  Description                    Unit    Qty       Unit price   Total")
    for i, row in enumerate(rows, start=1):
        qty = "" if row.quantity is None else f"{row.quantity:g}"
        price = "" if row.unit_price is None else money(row.unit_price)
        total = money(row_total(row.quantity, row.unit_price))
        print(f" {i:>2}  {row.description[:30]:<30} {row.unit[:6]:<6}  {qty:<8}  {price:>11}  {total:>10}")
    print(f"{'GRAND TOTAL:':>68} {money(compute_grand_total(rows))}\n")


def edit_row(rows: list[ServiceLine], index: int) -> list[ServiceLine]:
    row = rows[index]
    return update_row(
        rows,
        index,
        description=ask_text("  Description", row.description),
        unit=ask_text("  Unit (example: m²)", row.unit),
        quantity=ask_optional_float("  Quantity: "),
        unit_price=ask_optional_float("  Unit price ($): "),
    )


def collect_services() -> list[ServiceLine]:
    rows = [ServiceLine()]
    rows = edit_row(rows, 0)

    while True:
        print_rows(rows)
        choice = input("[a]dd row, [e]dit row, [r]emove row, [d]one: ").strip().lower()
        if choice == "a":
            if len(rows) >= MAX_SERVICE_ROWS:
                print(f"❌ At most {MAX_SERVICE_ROWS} services per quote")
                continue
            rows = add_row(rows)
            rows = edit_row(rows, len(rows) - 1)
        elif choice in ("e", "r"):
            raw = input("Row number: ").strip()
            if not raw.isdigit() or not 1 <= int(raw) <= len(rows):
                print("❌ Unknown row")
                continue
            index = int(raw) - 1
            rows = edit_row(rows, index) if choice == "e" else remove_row(rows, index)
        elif choice == "d":
            return rows
        else:
            print("❌ Enter a, e, r or d")


def collect_client() -> ClientFields:
    while True:
        client = ClientFields(
            client_name=ask_text("Client name"),
            client_email=ask_text("Client email"),
            client_phone=ask_text("Phone number"),
            client_address=ask_text("Client address"),
            validity_days=ask_int_default("Quote valid for (days)", 14, min_value=1, max_value=365),
            terms=ask_text("Terms & conditions", DEFAULT_TERMS),
        )
        errors = validate_client(client)
        if not errors:
            return client
        print("\n❌ Please fix the following errors:\n" + join_errors(errors) + "\n")


# ---------- MAIN SCENARIO ----------

def run_cli(api_url: str = API_URL) -> None:
    print("\n=== Lazope Construction - Quote Generator (CLI) ===\n")

    client = collect_client()

    while True:
        rows = collect_services()
        errors = validate_services(rows)
        if not errors:
            break
        print("❌ " + join_errors(errors))

    submission = build_submission(client, rows)

    print("\n--- Preview ---")
    print(f"Client:   {submission.client_name} <{submission.client_email}>")
    print(f"Phone:    {submission.client_phone}")
    print(f"Address:  {submission.client_address}")
    print(f"Valid:    {submission.validity_days} days")
    for s in submission.services:
        print(f" - {s.description}: {s.quantity:g} {s.unit} x {money(s.unit_price)} = {money(s.quantity * s.unit_price)}")
    print(f"TOTAL:    {money(compute_grand_total(rows))}")
    print("---------------\n")

    if not ask_yes_no("Send quote?"):
        return

    try:
        resp = requests.post(f"{api_url}/api/quotes", json=submission.model_dump(), timeout=30)
    except requests.RequestException as e:
        print(f"❌ Failed to send quote. Please check your connection and try again. ({e})")
        return

    try:
        data = resp.json()
    except ValueError:
        data = {}
    if not resp.ok:
        print(f"❌ Failed to send quote (HTTP {resp.status_code})")
        details = data.get("details") or []
        if data.get("message"):
            print(data["message"])
        elif details:
            print(join_errors(str(d.get("msg", d)) if isinstance(d, dict) else str(d) for d in details))
        return

    print(f"✅ Quote {data['quote_number']} has been created and processed")
    if data.get("webhook_error"):
        print(f"⚠️  Workflow was not notified ({data.get('webhook_status')}): {data['webhook_error']}")
    else:
        print("✅ Workflow is receiving data successfully")
