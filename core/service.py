from __future__ import annotations

import logging
import time

from .calculator import build_submission, compute_grand_total, row_total, submission_total
from .models import (
    PreviewLine,
    QuoteDetail,
    QuotePreview,
    QuoteRequest,
    QuoteSubmission,
    SubmissionResult,
)
from .relay import Delivered, Failed, Rejected, RelayOutcome, Webhook, relay
from .store import QuoteStore
from .validation import join_errors, validate_client, validate_services

log = logging.getLogger(__name__)

NETWORK_ERROR_STATUS = "timeout_or_network_error"


class QuoteValidationError(ValueError):
    """The request can't become a quote. `errors` is meant for the user as-is."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__(join_errors(self.errors))


class QuoteService:
    """
    validate -> build -> persist -> relay -> respond.

    Saving the quote and notifying the webhook are separate results: once the
    quote is stored it stays stored, whatever the webhook does, and the caller
    gets told about webhook trouble through `webhook_error`.
    """

    def __init__(self, store: QuoteStore, webhook: Webhook, *, prefix: str = "LZQ") -> None:
        self.store = store
        self.webhook = webhook
        self.prefix = prefix

    def _validate(self, req: QuoteRequest) -> QuoteSubmission:
        errors = validate_client(req) + validate_services(req.services)
        if errors:
            log.info("Quote rejected by validation: %s", "; ".join(errors))
            raise QuoteValidationError(errors)
        return build_submission(req, req.services)

    def _relay(self, submission: QuoteSubmission, quote_number: str) -> RelayOutcome:
        try:
            return relay(submission, quote_number, self.webhook)
        except Exception as e:
            # the quote is already stored; report, don't unwind
            log.exception("Webhook relay crashed for %s", quote_number)
            return Failed(str(e) or type(e).__name__)

    def submit(self, req: QuoteRequest) -> SubmissionResult:
        submission = self._validate(req)

        quote_number = self.store.next_quote_number()
        grand_total = submission_total(submission.services)

        quote = self.store.create_quote(quote_number, submission, grand_total)
        for service in submission.services:
            self.store.create_service_record(quote.id, service)
        log.info("Created quote %s (id=%s, total=%.2f)", quote_number, quote.id, grand_total)

        outcome = self._relay(submission, quote_number)
        result = SubmissionResult(
            quote_number=quote_number,
            message=f"Quote {quote_number} created successfully",
        )

        if isinstance(outcome, Delivered):
            self.store.mark_sent(quote.id)
            return result

        log.warning("Quote %s saved as draft, webhook not delivered: %s", quote_number, outcome.describe())
        result.webhook_error = outcome.describe()
        if isinstance(outcome, Rejected):
            result.webhook_status = outcome.status_code
        else:
            result.webhook_status = NETWORK_ERROR_STATUS

        return result

    def preview(self, req: QuoteRequest) -> QuotePreview:
        """Same checks as submit(), but nothing is stored and no number is used up."""
        submission = self._validate(req)

        return QuotePreview(
            quote_number=f"{self.prefix}-PREVIEW-{int(time.time() * 1000)}",
            client_name=submission.client_name,
            client_email=submission.client_email,
            client_phone=submission.client_phone,
            client_address=submission.client_address,
            validity_days=submission.validity_days,
            terms=submission.terms,
            services=[
                PreviewLine(**s.model_dump(), total=row_total(s.quantity, s.unit_price))
                for s in submission.services
            ],
            grand_total=compute_grand_total(req.services),
        )

    def get_quote_detail(self, quote_id: int) -> QuoteDetail | None:
        quote = self.store.get_quote(quote_id)
        if quote is None:
            return None
        return QuoteDetail(
            **quote.model_dump(),
            services=self.store.list_services_for_quote(quote_id),
        )
