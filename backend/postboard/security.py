"""Password hashing and token signing.

`CredentialService` wraps a passlib `CryptContext` configured for bcrypt
and `TokenService` wraps PyJWT. Both are stateless apart from their
configuration and are built once by the application factory, so the
signing secret never lives in a module-level global.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from passlib.context import CryptContext

DEFAULT_BCRYPT_ROUNDS = 12
JWT_ALGORITHM = "HS256"


class CredentialService:
    """Hash and verify passwords with a salted, cost-factored bcrypt."""

    def __init__(self, rounds: int = DEFAULT_BCRYPT_ROUNDS):
        self.rounds = rounds
        self._ctx = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    def hash(self, plaintext: str) -> str:
        return self._ctx.hash(plaintext)

    def verify(self, plaintext: str, hashed: str) -> bool:
        """Return True when `plaintext` matches `hashed`.

        A malformed or unrecognised hash verifies as False; any other
        failure propagates to the caller.
        """
        if not hashed:
            return False
        try:
            return self._ctx.verify(plaintext, hashed)
        except (ValueError, TypeError):
            return False


class InvalidToken(Exception):
    """The presented token is not a valid, unexpired token of this service."""


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    email: str


class TokenService:
    """Issue and verify HS256 tokens carrying `{userId, email}`.

    Tokens only carry an `exp` claim when `expires_in` (seconds) is set.
    """

    def __init__(self, secret: str, algorithm: str = JWT_ALGORITHM, expires_in: Optional[int] = None):
        if not secret:
            raise ValueError("token secret must be a non-empty string")
        self._secret = secret
        self.algorithm = algorithm
        self.expires_in = expires_in

    def issue(self, claims: TokenClaims, now: Optional[datetime] = None) -> str:
        payload = {"userId": claims.user_id, "email": claims.email}
        if self.expires_in:
            issued = now or datetime.now(timezone.utc)
            payload["iat"] = int(issued.timestamp())
            payload["exp"] = int((issued + timedelta(seconds=self.expires_in)).timestamp())
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self.algorithm])
        except jwt.InvalidTokenError as exc:
            raise InvalidToken(str(exc)) from exc
        user_id = payload.get("userId")
        email = payload.get("email")
        # bool is an int subclass; reject it explicitly
        if not isinstance(user_id, int) or isinstance(user_id, bool) or not isinstance(email, str):
            raise InvalidToken("token payload is missing userId/email")
        return TokenClaims(user_id=user_id, email=email)
