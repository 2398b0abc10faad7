# auth_middleware.py
import logging

from fastapi import Request

from auth import TokenService
from errors import AuthError, MissingTokenError, InvalidTokenError, error_response

logger = logging.getLogger(__name__)

PUBLIC_AUTH_ROUTES = ("/auth/signup", "/auth/signin", "/auth/guest-signin")
PUBLIC_PREFIXES = ("/uploads/",)
DOCS_PATHS = ("/docs", "/redoc", "/openapi.json", "/docs/oauth2-redirect")


def extract_bearer(header):
    if not header:
        raise MissingTokenError()
    parts = header.split(" ")
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1]:
        raise InvalidTokenError()
    return parts[1]


def bearer_auth_middleware(tokens: TokenService, api_prefix: str = ""):
    open_paths = {"/health", *DOCS_PATHS, *(api_prefix + p for p in PUBLIC_AUTH_ROUTES)}

    async def middleware(request: Request, call_next):
        path = request.url.path

        # open endpoints
        if path in open_paths or path.startswith(PUBLIC_PREFIXES):
            return await call_next(request)

        # all other routes require a bearer token
        try:
            token = extract_bearer(request.headers.get("Authorization"))
            request.state.user_id = tokens.verify(token)
        except AuthError as e:
            if e.status_code >= 500:
                logger.error(f"Rejecting {request.method} {path}: {e.message}")
            return error_response(e.status_code, e.message, e.code)
        return await call_next(request)

    return middleware
