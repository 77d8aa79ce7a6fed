"""JWT authentication middleware for web mode.

In desktop mode (REQUIRE_AUTH not set), all requests pass through with user_id=None.
In web mode, validates Cognito JWT tokens and extracts user_id from the 'sub' claim.
"""

import logging
import os

import jwt
from jwt import PyJWKClient
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

_logger = logging.getLogger(__name__)

REQUIRE_AUTH = os.getenv("REQUIRE_AUTH", "").lower() == "true"
COGNITO_USER_POOL_ID = os.getenv("COGNITO_USER_POOL_ID", "")
COGNITO_REGION = os.getenv("AWS_REGION", "us-east-1")
COGNITO_CLIENT_ID = os.getenv("COGNITO_CLIENT_ID", "")

if REQUIRE_AUTH:
    if not COGNITO_USER_POOL_ID:
        raise ValueError("COGNITO_USER_POOL_ID must be set when REQUIRE_AUTH=true")
    if not COGNITO_CLIENT_ID:
        raise ValueError("COGNITO_CLIENT_ID must be set when REQUIRE_AUTH=true")

_COGNITO_ISSUER = (
    f"https://cognito-idp.{COGNITO_REGION}.amazonaws.com/{COGNITO_USER_POOL_ID}"
    if COGNITO_USER_POOL_ID
    else ""
)

# The contact form is submitted by prospective clinics without an account
PUBLIC_PATHS = ("/health", "/contact")

_jwks_client: PyJWKClient | None = None


def _get_jwks_client() -> PyJWKClient:
    """Get or create the cached JWKS client for Cognito."""
    global _jwks_client
    if _jwks_client is None:
        _jwks_client = PyJWKClient(f"{_COGNITO_ISSUER}/.well-known/jwks.json")
    return _jwks_client


def _decode_token(token: str) -> dict:
    """Decode a Cognito JWT using RS256 + JWKS."""
    signing_key = _get_jwks_client().get_signing_key_from_jwt(token)
    return jwt.decode(
        token,
        signing_key.key,
        algorithms=["RS256"],
        issuer=_COGNITO_ISSUER,
        audience=COGNITO_CLIENT_ID,
    )


def _bearer_token(request: Request) -> str | None:
    auth_header = request.headers.get("authorization", "")
    if not auth_header.startswith("Bearer "):
        return None
    return auth_header[7:]


class AuthMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        # Desktop mode: a single local evaluator
        if not REQUIRE_AUTH:
            request.state.user_id = None
            return await call_next(request)

        if request.url.path in PUBLIC_PATHS or request.method == "OPTIONS":
            request.state.user_id = None
            return await call_next(request)

        token = _bearer_token(request)
        if token is None:
            return JSONResponse({"detail": "Missing authorization header"}, status_code=401)

        try:
            payload = _decode_token(token)
        except jwt.ExpiredSignatureError:
            return JSONResponse({"detail": "Token expired"}, status_code=401)
        except jwt.InvalidTokenError:
            _logger.info("Rejected invalid token on %s %s", request.method, request.url.path)
            return JSONResponse({"detail": "Invalid token"}, status_code=401)

        request.state.user_id = payload.get("sub")
        if not request.state.user_id:
            return JSONResponse({"detail": "Invalid token: missing sub"}, status_code=401)
        return await call_next(request)
