# core/validation.py
# Form rules. Errors come back as a list of messages; nothing here raises.

from __future__ import annotations

import re
from typing import Iterable

from .models import ClientFields, ServiceLine

EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")

NO_VALID_SERVICES = "Please add at least one valid service with description, quantity, and unit price"


def is_valid_email(email: str) -> bool:
    return EMAIL_RE.fullmatch(email) is not None


def is_valid_line(line: ServiceLine) -> bool:
    """description non-blank, quantity > 0, unit_price > 0. Unit is not checked."""
    return bool(
        line.description.strip()
        and (line.quantity or 0) > 0
        and (line.unit_price or 0) > 0
    )


def valid_lines(lines: Iterable[ServiceLine]) -> list[ServiceLine]:
    return [line for line in lines if is_valid_line(line)]


def validate_client(fields: ClientFields) -> list[str]:
    errors: list[str] = []

    if not fields.client_name.strip():
        errors.append("Client name is required")

    if not fields.client_email.strip():
        errors.append("Email address is required")
    elif not is_valid_email(fields.client_email):
        errors.append("Please enter a valid email address")

    if not fields.client_phone.strip():
        errors.append("Phone number is required")

    if not fields.client_address.strip():
        errors.append("Client address is required")

    return errors


def validate_services(lines: Iterable[ServiceLine]) -> list[str]:
    if not valid_lines(lines):
        return [NO_VALID_SERVICES]
    return []


def join_errors(errors: Iterable[str]) -> str:
    """One message for display, one error per line."""
    return "\n".join(errors)
