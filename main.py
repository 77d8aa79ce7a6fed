import logging
import os
import re
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from api.auth import AuthMiddleware, REQUIRE_AUTH
from api.contact import router as contact_router
from api.middleware import add_cors_middleware
from api.reports import router as reports_router
from api.routes import router
from server import configure_logging, find_free_port, start_server
from storage import get_db

_logger = logging.getLogger(__name__)

_SENTRY_DSN = os.getenv("SENTRY_DSN", "")

# PHI patterns to scrub from error reports (covers HIPAA Safe Harbor identifiers)
_PHI_PATTERNS = [
    re.compile(r"\b\d{3}-\d{2}-\d{4}\b"),                    # SSN
    re.compile(r"\b\d{1,2}[/-]\d{1,2}[/-]\d{2,4}\b"),        # dates
    re.compile(r"\b\d{4}-\d{2}-\d{2}\b"),                     # ISO dates (DOB)
    re.compile(r"\b\d{3}[-.\s]?\d{3}[-.\s]?\d{4}\b"),         # phone
    re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Z|a-z]{2,}\b"),  # email
    re.compile(r"(?i)(?:claimant|patient|name)\s*[:=]\s*[^\n,;]{2,40}"),  # labeled names
    re.compile(r"(?i)claim\s*(?:number|no\.?|#)\s*[:=]?\s*\S+"),          # claim numbers
    re.compile(r"(?i)FCE_Report_[A-Za-z0-9_]+"),              # report filenames carry the name
]


def _scrub_phi(text: str) -> str:
    for pattern in _PHI_PATTERNS:
        text = pattern.sub("[REDACTED]", text)
    return text


def _init_sentry() -> None:
    if not _SENTRY_DSN:
        return
    try:
        import sentry_sdk
        from sentry_sdk.integrations.fastapi import FastApiIntegration
        from sentry_sdk.integrations.starlette import StarletteIntegration
    except ImportError:
        _logger.warning("SENTRY_DSN is set but sentry-sdk is not installed")
        return

    def before_send(event, hint):
        if "exception" in event:
            for exc_info in event["exception"].get("values", []):
                if exc_info.get("value"):
                    exc_info["value"] = _scrub_phi(exc_info["value"])
        for bc in event.get("breadcrumbs", {}).get("values", []):
            if bc.get("message"):
                bc["message"] = _scrub_phi(bc["message"])
        return event

    sentry_sdk.init(
        dsn=_SENTRY_DSN,
        environment=os.getenv("SENTRY_ENVIRONMENT", "development"),
        integrations=[FastApiIntegration(), StarletteIntegration()],
        before_send=before_send,
        send_default_pii=False,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the SQLite store (creating the schema) before serving."""
    get_db()
    _logger.info("FCE server ready")
    yield


def create_app() -> FastAPI:
    _init_sentry()
    app = FastAPI(title="FCE Evaluator", version="1.0.0", lifespan=lifespan)
    # Middleware order (inner → outer): Auth → Audit → CORS
    # CORS must be outermost so ALL responses (including 500s) get headers.
    app.add_middleware(AuthMiddleware)
    if REQUIRE_AUTH:
        from api.audit import AuditMiddleware
        from api.rate_limit import limiter, rate_limit_exceeded_handler
        from slowapi.errors import RateLimitExceeded

        app.add_middleware(AuditMiddleware)
        app.state.limiter = limiter
        app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    add_cors_middleware(app)

    # Unhandled errors still return JSON with CORS headers
    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(request: Request, exc: Exception):
        _logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error."},
        )

    app.include_router(router)
    app.include_router(reports_router)
    app.include_router(contact_router)
    return app


if __name__ == "__main__":
    configure_logging()
    port = find_free_port()
    app = create_app()
    start_server(app, port)
