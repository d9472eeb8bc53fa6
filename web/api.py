from __future__ import annotations

import logging

from fastapi import Body, Depends, FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.config import settings
from core.models import Quote, QuoteDetail, QuotePreview, QuoteRequest, SubmissionResult
from core.relay import HttpWebhook
from core.service import QuoteService, QuoteValidationError
from core.store import MemoryQuoteStore

log = logging.getLogger(__name__)


def default_service() -> QuoteService:
    return QuoteService(
        MemoryQuoteStore(prefix=settings.quote_prefix),
        HttpWebhook(settings.webhook_url),
        prefix=settings.quote_prefix,
    )


def get_service(request: Request) -> QuoteService:
    return request.app.state.quote_service


def create_app(service: QuoteService | None = None) -> FastAPI:
    """One store per app: quotes live as long as the process does."""
    app = FastAPI(title="Quote Generator API", version="1.0.0")
    app.state.quote_service = service or default_service()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ---- errors: validation is the user's to fix, so 400 with the reasons ----

    @app.exception_handler(RequestValidationError)
    async def request_validation_failed(request: Request, exc: RequestValidationError) -> JSONResponse:
        log.info("Invalid request body on %s", request.url.path)
        return JSONResponse(
            status_code=400,
            content={"error": "Validation failed", "details": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(QuoteValidationError)
    async def quote_validation_failed(request: Request, exc: QuoteValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"error": "Validation failed", "details": exc.errors, "message": str(exc)},
        )

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/quotes", response_model=SubmissionResult, response_model_exclude_none=True)
    def create_quote(
        req: QuoteRequest = Body(...),
        service: QuoteService = Depends(get_service),
    ):
        """
        Saves the quote, then relays it to the automation webhook.
        A webhook problem still answers 200: the quote exists, `webhook_error` says why
        nobody was notified.
        """
        try:
            return service.submit(req)
        except QuoteValidationError:
            raise
        except Exception as e:
            log.exception("Quote creation error")
            return JSONResponse(
                status_code=500,
                content={"error": "Failed to create quote", "message": str(e) or "Unknown error"},
            )

    @app.post("/api/quotes/preview", response_model=QuotePreview)
    def preview_quote(
        req: QuoteRequest = Body(...),
        service: QuoteService = Depends(get_service),
    ) -> QuotePreview:
        return service.preview(req)

    @app.get("/api/quotes", response_model=list[Quote])
    def list_quotes(service: QuoteService = Depends(get_service)) -> list[Quote]:
        return service.store.list_quotes()

    @app.get("/api/quotes/number/{quote_number}", response_model=QuoteDetail)
    def get_quote_by_number(quote_number: str, service: QuoteService = Depends(get_service)) -> QuoteDetail:
        quote = service.store.get_quote_by_number(quote_number)
        detail = service.get_quote_detail(quote.id) if quote else None
        if detail is None:
            raise HTTPException(status_code=404, detail="Quote not found")
        return detail

    @app.get("/api/quotes/{quote_id}", response_model=QuoteDetail)
    def get_quote(quote_id: int, service: QuoteService = Depends(get_service)) -> QuoteDetail:
        detail = service.get_quote_detail(quote_id)
        if detail is None:
            raise HTTPException(status_code=404, detail="Quote not found")
        return detail

    return app


logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
if not settings.webhook_url:
    log.warning("N8N_WEBHOOK_URL is not set; quotes will be saved as drafts only")

app = create_app()
