"""Response header middleware: no-cache for evaluation data, CORS on every response."""

import os

from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.types import ASGIApp, Message, Receive, Scope, Send

NO_CACHE = "no-store, no-cache, must-revalidate, max-age=0"


def allowed_origins() -> list[str]:
    """Origins from ALLOWED_ORIGINS (comma-separated); any origin when unset."""
    raw = os.getenv("ALLOWED_ORIGINS", "")
    origins = [o.strip() for o in raw.split(",") if o.strip()]
    return origins or ["*"]


class NoCacheMiddleware(BaseHTTPMiddleware):
    """Keep claimant data out of browser and proxy caches.

    Report downloads set their own Cache-Control, which is left alone.
    """

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers.setdefault("Cache-Control", NO_CACHE)
        response.headers["Pragma"] = "no-cache"
        response.headers["Expires"] = "0"
        return response


def _request_origin(scope: Scope) -> str | None:
    for name, value in scope.get("headers", []):
        if name == b"origin":
            return value.decode("latin-1")
    return None


class CORSErrorWrapper:
    """Raw ASGI wrapper that adds CORS headers to responses missing them.

    BaseHTTPMiddleware turns exceptions from call_next() into bare 500s that
    never pass through CORSMiddleware, so a browser would see a CORS failure
    instead of the error. This wrapper sits outside everything.
    """

    def __init__(self, app: ASGIApp, allowed_origins: list[str]) -> None:
        self.app = app
        self.allowed_origins = allowed_origins

    def _allows(self, origin: str) -> bool:
        return "*" in self.allowed_origins or origin in self.allowed_origins

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        origin = _request_origin(scope) if scope["type"] == "http" else None
        if not origin or not self._allows(origin):
            await self.app(scope, receive, send)
            return

        cors_headers = [
            (b"access-control-allow-origin", origin.encode("latin-1")),
            (b"access-control-allow-credentials", b"true"),
        ]

        async def send_with_cors(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = list(message.get("headers", []))
                if not any(name == b"access-control-allow-origin" for name, _ in headers):
                    message["headers"] = headers + cors_headers
            await send(message)

        await self.app(scope, receive, send_with_cors)


def add_cors_middleware(app):
    """Install no-cache, CORS and the CORS error wrapper (outermost last)."""
    origins = allowed_origins()
    app.add_middleware(NoCacheMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(CORSErrorWrapper, allowed_origins=origins)
