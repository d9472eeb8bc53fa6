from __future__ import annotations

import math
from typing import Any, Iterable, Mapping, Union

from .models import ClientFields, QuoteSubmission, ServiceItem, ServiceLine
from .validation import valid_lines

RowLike = Union[ServiceLine, Mapping[str, Any]]


def _number(x: Any) -> float:
    """Anything that isn't a usable number counts as 0 (an empty cell)."""
    if x is None or isinstance(x, bool):
        return 0.0
    try:
        value = float(x)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(value) or math.isinf(value):
        return 0.0
    return value


def _cell(row: RowLike, name: str) -> Any:
    if isinstance(row, Mapping):
        # the form posts camelCase, the API snake_case
        if name == "unit_price" and name not in row:
            return row.get("unitPrice")
        return row.get(name)
    return getattr(row, name, None)


def row_total(quantity: Any, unit_price: Any) -> float:
    return _number(quantity) * _number(unit_price)


def compute_grand_total(lines: Iterable[RowLike]) -> float:
    """
    Live total for display: every row counts, half-filled ones included.
    The authoritative figure is submission_total().
    """
    return sum(
        (row_total(_cell(row, "quantity"), _cell(row, "unit_price")) for row in lines),
        0.0,
    )


def submission_total(services: Iterable[ServiceItem]) -> float:
    return sum((s.quantity * s.unit_price for s in services), 0.0)


def build_submission(client: ClientFields, lines: Iterable[ServiceLine]) -> QuoteSubmission:
    """
    Drops invalid rows and maps the rest to the wire shape.
    Run validate_services() first: a submission with no valid rows is rejected
    by the model.
    """
    services = [
        ServiceItem(
            description=line.description,
            unit=line.unit,
            quantity=line.quantity,
            unit_price=line.unit_price,
        )
        for line in valid_lines(lines)
    ]

    return QuoteSubmission(
        client_name=client.client_name,
        client_email=client.client_email,
        client_phone=client.client_phone,
        client_address=client.client_address,
        validity_days=client.validity_days,
        terms=client.terms or "",
        services=services,
    )
