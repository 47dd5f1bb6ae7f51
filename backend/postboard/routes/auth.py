"""Registration and login routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from ..errors import AuthError
from ..schemas import LoginRequest, RegisterRequest
from ..services import INVALID_CREDENTIALS, AuthService
from ..validation import validate_request
from .dependencies import get_auth_service

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post('/register', status_code=status.HTTP_201_CREATED)
def register(
    payload: Annotated[RegisterRequest, Depends(validate_request(RegisterRequest))],
    auth: Annotated[AuthService, Depends(get_auth_service)],
):
    """Register a new user.

    Responds 409 when the email or username is already taken. The password
    hash is never part of the response.
    """
    body = payload.body
    user = auth.register(body.username, body.email, body.password)
    return {
        'success': True,
        'message': 'User created successfully',
        'data': {
            'id': user.id,
            'username': user.username,
            'email': user.email,
            'created_at': user.created_at,
        },
    }


@router.post('/login')
def login(
    payload: Annotated[LoginRequest, Depends(validate_request(LoginRequest))],
    auth: Annotated[AuthService, Depends(get_auth_service)],
):
    """Authenticate by email/password and return a signed token.

    Unknown email and wrong password produce the same 401.
    """
    result = auth.authenticate(payload.body.email, payload.body.password)
    if result is None:
        raise AuthError(INVALID_CREDENTIALS, status_code=401)
    token, user = result
    return {
        'success': True,
        'message': 'Login successful',
        'data': {
            'token': token,
            'user': {'id': user.id, 'username': user.username, 'email': user.email},
        },
    }
