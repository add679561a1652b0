"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, File, Form, Query, Request, Response, UploadFile
from fastapi.responses import JSONResponse, RedirectResponse

from card_handoff.api.pages import router as pages_router
from card_handoff.app_logging import configure_logging
from card_handoff.containers import AppContainer
from card_handoff.domain.cards import CardRecord
from card_handoff.domain.errors import HandoffError
from card_handoff.services.urls import resolve_public_base_url


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)
    settings = container.settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        state_container: AppContainer = app.state.container
        await state_container.session_registry.start()
        if settings.public_base_url:
            logger.info("Using PUBLIC_BASE_URL for QR: %s", settings.public_base_url)
        yield
        await state_container.session_registry.stop()
        await state_container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(pages_router)

    @app.middleware("http")
    async def response_headers(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        if settings.is_production:
            forwarded_proto = _first_forwarded(request.headers.get("x-forwarded-proto"))
            if forwarded_proto and forwarded_proto != "https":
                return RedirectResponse(
                    str(request.url.replace(scheme="https")), status_code=308
                )
        response = await call_next(request)
        if request.url.path.startswith("/api"):
            response.headers["Cache-Control"] = "no-store"
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        response.headers.setdefault("X-Frame-Options", "DENY")
        return response

    @app.exception_handler(HandoffError)
    async def handoff_error(request: Request, exc: HandoffError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.warning("Request failed: path=%s error=%s", request.url.path, exc)
        return JSONResponse(
            status_code=exc.status_code,
            content={"ok": False, "error": exc.message, "category": exc.category},
        )

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error: path=%s", request.url.path)
        message = "Internal server error" if settings.is_production else str(exc)
        return JSONResponse(
            status_code=500,
            content={"ok": False, "error": message or "Internal server error"},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/api/session")
    async def create_session(request: Request) -> dict[str, object]:
        """Open a hand-off session and return the QR code for the phone."""
        state_container: AppContainer = request.app.state.container
        base_url = resolve_public_base_url(
            configured=settings.public_base_url,
            production=settings.is_production,
            host=request.headers.get("host", ""),
            scheme=request.url.scheme,
            forwarded_proto=request.headers.get("x-forwarded-proto"),
            port=settings.port,
        )
        ticket = state_container.handoff_coordinator.create_session(base_url)
        return {
            "ok": True,
            "sessionId": ticket.session_id,
            "mobileUrl": ticket.mobile_url,
            "desktopUrl": ticket.desktop_url,
            "qrCode": ticket.qr_code,
            "expiresInSec": ticket.expires_in_sec,
        }

    @app.post("/api/scan")
    async def scan(
        request: Request,
        session_id: str | None = Form(default=None, alias="sessionId"),
        card_image: UploadFile | None = File(default=None, alias="cardImage"),
    ) -> dict[str, object]:
        """Accept a card photo from the phone."""
        state_container: AppContainer = request.app.state.container
        coordinator = state_container.handoff_coordinator
        image_bytes = None
        content_type = None
        if card_image is not None:
            # One byte past the limit is enough to reject an oversized upload.
            image_bytes = await card_image.read(coordinator.max_upload_bytes + 1)
            content_type = card_image.content_type
        record = await coordinator.submit_scan(
            session_id, image_bytes, content_type
        )
        return {
            "ok": True,
            "message": "Card scanned successfully",
            "data": {
                "maskedCardNumber": record.masked_card_number,
                "cardholderName": record.cardholder_name,
                "expiryDate": record.expiry_date,
                "cardType": record.card_type.value,
            },
        }

    @app.get("/api/get-data")
    async def get_data(
        request: Request,
        session_id: str | None = Query(default=None, alias="sessionId"),
    ) -> dict[str, object]:
        """Return the scanned card once the phone has delivered it."""
        state_container: AppContainer = request.app.state.container
        result = state_container.handoff_coordinator.poll(session_id)
        if result.record is None:
            return {"ok": True, "status": result.status.value}
        return {
            "ok": True,
            "status": result.status.value,
            "data": _serialize_record(result.record, result.delivered_at),
        }

    @app.get("/api/health")
    async def api_health(request: Request) -> dict[str, object]:
        """Report active sessions and the configured public URL."""
        state_container: AppContainer = request.app.state.container
        return {
            "ok": True,
            "service": "card-scanner",
            **state_container.handoff_coordinator.diagnostics(),
        }

    return app


def _first_forwarded(value: str | None) -> str:
    return (value or "").split(",")[0].strip()


def _serialize_record(
    record: CardRecord, delivered_at: datetime | None
) -> dict[str, object]:
    return {
        "cardNumber": record.card_number,
        "maskedCardNumber": record.masked_card_number,
        "cardholderName": record.cardholder_name,
        "expiryDate": record.expiry_date,
        "cardType": record.card_type.value,
        "scannedAt": record.scanned_at.isoformat(),
        "deliveredAt": delivered_at.isoformat() if delivered_at else None,
    }
