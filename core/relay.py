from __future__ import annotations

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from dataclasses import dataclass
from typing import Protocol, Union

import requests

from .config import USER_AGENT, WEBHOOK_TIMEOUT_SECONDS
from .models import QuoteSubmission

log = logging.getLogger(__name__)


# ---------- OUTCOMES ----------

@dataclass(frozen=True)
class Delivered:
    status_code: int = 200


@dataclass(frozen=True)
class Rejected:
    """Webhook answered, but not with 2xx."""

    status_code: int
    body: str = ""
    reason: str = ""

    def describe(self) -> str:
        status = f"{self.status_code} {self.reason}".strip()
        return f"Status: {status} - {self.body}"


@dataclass(frozen=True)
class Failed:
    """Webhook never answered: timeout, DNS, refused connection, ..."""

    reason: str

    def describe(self) -> str:
        return self.reason


RelayOutcome = Union[Delivered, Rejected, Failed]


class Webhook(Protocol):
    def deliver(self, payload: dict[str, str]) -> RelayOutcome: ...


# ---------- WIRE FORMAT ----------

def _str_number(x: float) -> str:
    # 10.0 -> "10", 2.5 -> "2.5"
    if float(x).is_integer():
        return str(int(x))
    return str(x)


def flatten_payload(submission: QuoteSubmission, quote_number: str) -> dict[str, str]:
    """
    n8n's form trigger only reads flat keys, so services become
    services[0].description, services[0].unit, ... All values are strings.
    """
    payload: dict[str, str] = {
        "client_name": submission.client_name,
        "client_email": submission.client_email,
        "client_phone": submission.client_phone,
        "client_address": submission.client_address,
        "validity_days": str(submission.validity_days),
        "terms": submission.terms or "",
        "quote_number": quote_number,
    }

    for i, service in enumerate(submission.services):
        payload[f"services[{i}].description"] = service.description
        payload[f"services[{i}].unit"] = service.unit
        payload[f"services[{i}].quantity"] = _str_number(service.quantity)
        payload[f"services[{i}].unit_price"] = _str_number(service.unit_price)

    return payload


# ---------- HTTP ----------

class HttpWebhook:
    """
    POSTs the payload once. No retries: a failed relay needs a new submission.

    `timeout` bounds the whole exchange, headers and body together. requests'
    own timeout only bounds each connect/read, so the call runs in a worker
    and is abandoned (response closed) once the deadline passes.
    """

    def __init__(self, url: str, *, timeout: float = WEBHOOK_TIMEOUT_SECONDS) -> None:
        self.url = url
        self.timeout = timeout

    def _send(self, payload: dict[str, str], opened: list) -> tuple[int, str, str]:
        resp = requests.post(
            self.url,
            json=payload,
            headers={"Content-Type": "application/json", "User-Agent": USER_AGENT},
            timeout=self.timeout,
            stream=True,
        )
        opened.append(resp)
        try:
            ok = 200 <= resp.status_code < 300
            try:
                body = resp.text
            except requests.RequestException:
                # a 2xx whose body never arrives is not a delivery
                if ok:
                    raise
                body = ""
            return resp.status_code, resp.reason or "", body
        finally:
            resp.close()

    def _timed_out(self) -> Failed:
        log.error("Webhook timed out after %ss", self.timeout)
        return Failed(f"Webhook request timed out after {self.timeout:g} seconds")

    def deliver(self, payload: dict[str, str]) -> RelayOutcome:
        if not self.url:
            log.error("Webhook URL is not configured (set N8N_WEBHOOK_URL)")
            return Failed("Webhook URL is not configured")

        log.info("Sending to webhook: %s", self.url)
        log.debug("Payload: %s", json.dumps(payload, ensure_ascii=False, indent=2))

        opened: list = []
        pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="webhook")
        try:
            future = pool.submit(self._send, payload, opened)
            status_code, reason, body = future.result(timeout=self.timeout)
        except FutureTimeout:
            # unblocks the worker's pending read
            for resp in opened:
                resp.close()
            return self._timed_out()
        except requests.Timeout:
            return self._timed_out()
        except requests.RequestException as e:
            log.error("Webhook error (%s): %s", type(e).__name__, e)
            return Failed(str(e) or type(e).__name__)
        finally:
            pool.shutdown(wait=False)

        if not 200 <= status_code < 300:
            log.warning("Webhook failed with status: %s %s", status_code, reason)
            log.warning("Response body: %s", body)
            return Rejected(status_code=status_code, body=body, reason=reason)

        log.info("Webhook sent successfully")
        return Delivered(status_code=status_code)


def relay(submission: QuoteSubmission, quote_number: str, webhook: Webhook) -> RelayOutcome:
    return webhook.deliver(flatten_payload(submission, quote_number))
