"""Caller identity resolution.

This module turns an inbound request into a caller identifier. How the
identifier is obtained depends on the configured IdentityMode, which is
fixed when the application starts:

- local_header: the identifier is read from a plain header (``x-user-id``).
  Meant for local development and tests; nothing is verified.
- claims: the identifier is the ``sub`` claim of a signed bearer token
  (``Authorization: Bearer <JWT>``), verified with the configured secret.

Security: the header mode trusts the client completely and must never be
enabled in production.
"""

from typing import Optional

from fastapi import HTTPException, Request, status
from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTError

from app.config import IdentityMode, Settings
from app.logging_config import get_logger

logger = get_logger(__name__)


class CallerIdentityResolver:
    """Resolve the caller identifier of a request.

    Attributes:
        mode: Identity source
        settings: Settings the resolver was built from
    """

    def __init__(self, settings: Settings):
        """Initialize resolver from settings.

        Args:
            settings: Application settings (identity_mode and jwt_* fields)
        """
        self.settings = settings
        self.mode = settings.identity_mode
        logger.debug(f"CallerIdentityResolver initialized in {self.mode.value} mode")

    def resolve(self, request: Request) -> Optional[str]:
        """Return the caller identifier, or None for anonymous requests.

        Args:
            request: Inbound request

        Returns:
            Caller identifier, or None if the request carries no (valid) identity
        """
        if self.mode == IdentityMode.LOCAL_HEADER:
            return request.headers.get(self.settings.local_user_header) or None
        return self._resolve_claims(request)

    def default_caller_id(self) -> Optional[str]:
        """Caller id used by authenticated routes when none was resolved.

        Only the local header mode has a fallback; in claims mode an
        authenticated route without a caller is rejected.
        """
        if self.mode == IdentityMode.LOCAL_HEADER:
            return self.settings.local_default_user_id
        return None

    def _resolve_claims(self, request: Request) -> Optional[str]:
        authorization = request.headers.get("authorization")
        if not authorization:
            return None

        scheme, _, token = authorization.partition(" ")
        if scheme.lower() != "bearer" or not token:
            logger.warning("Unsupported authorization scheme")
            return None

        try:
            claims = jwt.decode(
                token.strip(),
                self.settings.jwt_secret,
                algorithms=[self.settings.jwt_algorithm],
                audience=self.settings.jwt_audience,
                issuer=self.settings.jwt_issuer,
                options={"verify_aud": self.settings.jwt_audience is not None},
            )
        except ExpiredSignatureError:
            logger.warning("Bearer token has expired")
            return None
        except JWTError as e:
            # Never log the token itself
            logger.warning(
                f"Invalid bearer token: {e}",
                extra={"error_type": type(e).__name__}
            )
            return None

        subject = claims.get("sub")
        if not subject:
            logger.warning("Bearer token has no 'sub' claim")
            return None
        return str(subject)


def get_identity_resolver(request: Request) -> CallerIdentityResolver:
    """Return the resolver created at application startup."""
    return request.app.state.identity_resolver


async def get_optional_caller_id(request: Request) -> Optional[str]:
    """FastAPI dependency: caller identifier, or None for anonymous callers.

    Usage:
        @router.get("/surveys")
        def list_surveys(caller_id: Optional[str] = Depends(get_optional_caller_id)):
            ...
    """
    caller_id = get_identity_resolver(request).resolve(request)
    logger.debug(f"Resolved caller: {caller_id or 'anonymous'}")
    return caller_id


async def require_caller_id(request: Request) -> str:
    """FastAPI dependency: caller identifier for routes that need one.

    Raises:
        HTTPException(401): If no identity could be resolved and the
            identity mode has no fallback caller
    """
    resolver = get_identity_resolver(request)
    caller_id = resolver.resolve(request) or resolver.default_caller_id()

    if not caller_id:
        logger.warning("Unauthorized request - no user ID found")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized"
        )

    return caller_id
