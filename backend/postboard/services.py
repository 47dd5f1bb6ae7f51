"""Business logic services used by HTTP controllers.

Services are intentionally thin: they coordinate repositories and the
security helpers, and translate persistence failures into the API error
taxonomy (`ConflictError`, `NotFoundError`, `InternalError`) so nothing
from SQLAlchemy leaks to the transport layer.
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session

from . import models, repositories
from .errors import ConflictError, InternalError, NotFoundError
from .security import CredentialService, TokenClaims, TokenService

logger = logging.getLogger(__name__)

USER_EXISTS = "User already exists"
INVALID_CREDENTIALS = "Invalid credentials"
POST_NOT_FOUND = "Post not found"
POST_NOT_FOUND_OR_UNAUTHORIZED = "Post not found or unauthorized"


class AuthService:
    """Authentication related operations (register + authenticate)."""
    def __init__(self, session: Session, credentials: CredentialService, tokens: TokenService):
        self.session = session
        self.credentials = credentials
        self.tokens = tokens
        self.user_repo = repositories.UserRepository(session)

    def register(self, username: str, email: str, password: str) -> models.User:
        """Create a new user with a hashed password.

        The lookup is a fast path only; the unique constraints on
        `email`/`username` decide, and a losing concurrent insert is
        reported as the same conflict.
        """
        try:
            if self.user_repo.find_by_email_or_username(email, username):
                raise ConflictError(USER_EXISTS)
            user = models.User(username=username, email=email, password_hash=self.credentials.hash(password))
            return self.user_repo.create(user)
        except IntegrityError as exc:
            self.session.rollback()
            logger.info("register.conflict username=%s", username)
            raise ConflictError(USER_EXISTS) from exc
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("register.failed username=%s", username)
            raise InternalError() from exc

    def authenticate(self, email: str, password: str) -> Optional[Tuple[str, models.User]]:
        """Verify credentials and return `(token, user)` on success.

        Returns `None` if authentication fails.
        """
        try:
            user = self.user_repo.get_by_email(email)
        except SQLAlchemyError as exc:
            logger.exception("login.lookup_failed")
            raise InternalError() from exc
        if not user:
            return None
        if not self.credentials.verify(password, user.password_hash):
            return None
        token = self.tokens.issue(TokenClaims(user_id=user.id, email=user.email))
        return token, user


class PostService:
    """Read and owner-scoped write operations on posts."""
    def __init__(self, session: Session):
        self.session = session
        self.post_repo = repositories.PostRepository(session)

    def list_posts(self) -> List[Tuple[models.Post, str]]:
        try:
            return self.post_repo.list_with_authors()
        except SQLAlchemyError as exc:
            logger.exception("posts.list_failed")
            raise InternalError() from exc

    def get_post(self, post_id: int) -> Tuple[models.Post, str]:
        try:
            found = self.post_repo.get_with_author(post_id)
        except SQLAlchemyError as exc:
            logger.exception("posts.get_failed post_id=%s", post_id)
            raise InternalError() from exc
        if found is None:
            raise NotFoundError(POST_NOT_FOUND)
        return found

    def create_post(self, user_id: int, title: str, content: str) -> models.Post:
        try:
            return self.post_repo.create(models.Post(user_id=user_id, title=title, content=content))
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("posts.create_failed user_id=%s", user_id)
            raise InternalError() from exc

    def update_post(self, post_id: int, user_id: int, title: str, content: str) -> models.Post:
        try:
            post = self.post_repo.update_owned(post_id, user_id, title, content)
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("posts.update_failed post_id=%s", post_id)
            raise InternalError() from exc
        if post is None:
            raise NotFoundError(POST_NOT_FOUND_OR_UNAUTHORIZED)
        return post

    def delete_post(self, post_id: int, user_id: int) -> None:
        try:
            deleted = self.post_repo.delete_owned(post_id, user_id)
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("posts.delete_failed post_id=%s", post_id)
            raise InternalError() from exc
        if not deleted:
            raise NotFoundError(POST_NOT_FOUND_OR_UNAUTHORIZED)
