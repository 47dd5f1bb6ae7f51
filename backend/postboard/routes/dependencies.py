"""Dependency wiring for routes."""

from typing import Annotated

from fastapi import Depends, Request
from sqlmodel import Session

from ..auth import get_token_service
from ..database import get_session
from ..security import CredentialService, TokenService
from ..services import AuthService, PostService


def get_credential_service(request: Request) -> CredentialService:
    return request.app.state.credential_service


def get_auth_service(
    session: Annotated[Session, Depends(get_session)],
    credentials: Annotated[CredentialService, Depends(get_credential_service)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> AuthService:
    return AuthService(session, credentials, tokens)


def get_post_service(session: Annotated[Session, Depends(get_session)]) -> PostService:
    return PostService(session)
