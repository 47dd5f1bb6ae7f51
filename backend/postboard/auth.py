"""Authentication dependencies.

Two FastAPI dependencies resolve the caller of a request:

- `require_principal` rejects the request unless a valid bearer token
  belongs to an existing user (401/403 with one of four fixed messages).
- `optional_principal` never rejects on token problems; it returns `None`
  when there is no usable token.

Both return a `Principal` built from the looked-up user row rather than
from the raw token claims.
"""

import logging
from dataclasses import dataclass
from typing import Annotated, Optional

from fastapi import Depends, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from . import repositories
from .database import get_session
from .errors import AuthError, InternalError
from .security import InvalidToken, TokenService

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

ACCESS_TOKEN_REQUIRED = "Access token required"
INVALID_TOKEN = "Invalid or expired token"
USER_NOT_FOUND = "User not found"


@dataclass(frozen=True)
class Principal:
    id: int
    email: str


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def _bearer_token(credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    """Return the token only for a header of exactly `Bearer <token>`."""
    if credentials is None or credentials.scheme != "Bearer":
        return None
    token = credentials.credentials
    if not token or " " in token:
        return None
    return token


def _resolve(token: str, tokens: TokenService, session: Session) -> Principal:
    try:
        claims = tokens.verify(token)
    except InvalidToken as exc:
        raise AuthError(INVALID_TOKEN, status_code=403) from exc
    try:
        user = repositories.UserRepository(session).get(claims.user_id)
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception("auth.lookup_failed user_id=%s", claims.user_id)
        raise InternalError() from exc
    if user is None:
        raise AuthError(USER_NOT_FOUND, status_code=401)
    return Principal(id=user.id, email=user.email)


def require_principal(
    request: Request,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Security(bearer_scheme)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
    session: Annotated[Session, Depends(get_session)],
) -> Principal:
    """FastAPI dependency that returns the authenticated principal."""
    token = _bearer_token(credentials)
    if token is None:
        logger.warning("auth.rejected method=%s path=%s reason=missing_bearer", request.method, request.url.path)
        raise AuthError(ACCESS_TOKEN_REQUIRED, status_code=401)
    try:
        principal = _resolve(token, tokens, session)
    except AuthError as exc:
        logger.warning(
            "auth.rejected method=%s path=%s reason=%s",
            request.method,
            request.url.path,
            exc.message,
        )
        raise
    logger.debug("auth.accepted method=%s path=%s user_id=%s", request.method, request.url.path, principal.id)
    return principal


def optional_principal(
    request: Request,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Security(bearer_scheme)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
    session: Annotated[Session, Depends(get_session)],
) -> Optional[Principal]:
    """Like `require_principal`, but degrades to anonymous instead of failing.

    A failed user lookup also degrades to anonymous; it is logged by
    `_resolve`.
    """
    token = _bearer_token(credentials)
    if token is None:
        return None
    try:
        return _resolve(token, tokens, session)
    except (AuthError, InternalError) as exc:
        logger.debug("auth.anonymous method=%s path=%s reason=%s", request.method, request.url.path, exc.message)
        return None


CurrentPrincipal = Annotated[Principal, Depends(require_principal)]
MaybePrincipal = Annotated[Optional[Principal], Depends(optional_principal)]
