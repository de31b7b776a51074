"""Security middleware for FastAPI - identity resolution and request-scoped identity context."""

import logging

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from auth.config import AuthConfig
from auth.identity import IdentityProvider
from auth.exceptions import AuthenticationRequiredError, InvalidTokenError
from api.base import error_response, ErrorCodes
from clients.identity_client import IdentityProviderError
from utils.identity_context import set_current_identity, clear_current_identity

logger = logging.getLogger(__name__)


def _unauthorized(code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=401,
        content=error_response(code, message).model_dump(mode="json"),
    )


class AuthMiddleware(BaseHTTPMiddleware):
    """Middleware that resolves the caller's identity and sets identity context.

    For protected routes:
    1. Uses 'Authorization: Bearer <token>' if present (OAuth clients),
       otherwise the session cookie (browser sessions)
    2. Resolves the credential via IdentityProvider
    3. Sets the identity in request.state and in the identity context
    4. Clears context after request completes

    Public paths bypass authentication entirely.
    """

    def __init__(self, app, identity_provider: IdentityProvider, config: AuthConfig | None = None):
        super().__init__(app)
        self._identity_provider = identity_provider
        self._config = config or AuthConfig()

    def _is_public_path(self, path: str) -> bool:
        """Check if path is in public paths list."""
        for public_path in self._config.public_paths:
            if path == public_path or path.startswith(public_path):
                return True
        return False

    def _bearer_token(self, request: Request) -> str | None:
        header = request.headers.get("Authorization", "")
        scheme, _, token = header.partition(" ")
        if scheme.lower() == "bearer" and token.strip():
            return token.strip()
        return None

    async def dispatch(self, request: Request, call_next):
        """Process request through middleware."""
        path = request.url.path

        if self._is_public_path(path):
            return await call_next(request)

        bearer = self._bearer_token(request)
        session_token = request.cookies.get(self._config.session_cookie_name)

        if not bearer and not session_token:
            return _unauthorized(ErrorCodes.NOT_AUTHENTICATED, "Authentication required")

        try:
            if bearer:
                identity = self._identity_provider.authenticate_access_token(bearer)
            else:
                identity = self._identity_provider.authenticate_session(session_token)
        except InvalidTokenError as e:
            logger.info(f"Rejected credential on {path}: {e}")
            return _unauthorized(ErrorCodes.INVALID_TOKEN, "Session is invalid or has expired")
        except AuthenticationRequiredError as e:
            logger.warning(f"Incomplete identity on {path}: {e}")
            return _unauthorized(ErrorCodes.NOT_AUTHENTICATED, "Authentication required")
        except IdentityProviderError:
            return JSONResponse(
                status_code=502,
                content=error_response(
                    ErrorCodes.IDENTITY_PROVIDER_ERROR,
                    "Identity provider unavailable",
                ).model_dump(mode="json"),
            )

        set_current_identity(identity)
        request.state.identity = identity

        try:
            response = await call_next(request)
            return response
        finally:
            # Always clear context
            clear_current_identity()
