"""Repository classes encapsulating database operations.

Each repository is small and focused on a single aggregate (users,
posts). Repositories return SQLModel objects and perform
commits/refreshes where appropriate; they do not translate database
errors, which is left to the services.
"""

from typing import List, Optional, Tuple
from sqlmodel import Session, select, or_
from . import models


class UserRepository:
    """CRUD operations for `User` objects."""
    def __init__(self, session: Session):
        self.session = session

    def create(self, user: models.User) -> models.User:
        """Persist a new user and return the managed instance."""
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return user

    def get(self, user_id: int) -> Optional[models.User]:
        """Get a `User` by primary key."""
        return self.session.get(models.User, user_id)

    def get_by_email(self, email: str) -> Optional[models.User]:
        """Return a `User` by (already normalized) email or `None`."""
        stmt = select(models.User).where(models.User.email == email)
        return self.session.exec(stmt).first()

    def find_by_email_or_username(self, email: str, username: str) -> Optional[models.User]:
        """Return any user holding either `email` or `username`."""
        stmt = select(models.User).where(
            or_(models.User.email == email, models.User.username == username)
        )
        return self.session.exec(stmt).first()


class PostRepository:
    """CRUD operations for `Post` records.

    Mutations are scoped by owner: `update_owned` and `delete_owned` only
    match a post whose `user_id` equals the caller's id.
    """
    def __init__(self, session: Session):
        self.session = session

    def list_with_authors(self) -> List[Tuple[models.Post, str]]:
        """Return `(post, author_username)` pairs, newest first."""
        stmt = (
            select(models.Post, models.User.username)
            .join(models.User, models.User.id == models.Post.user_id)
            .order_by(models.Post.created_at.desc(), models.Post.id.desc())
        )
        return list(self.session.exec(stmt).all())

    def get_with_author(self, post_id: int) -> Optional[Tuple[models.Post, str]]:
        """Return the `(post, author_username)` pair or `None`."""
        stmt = (
            select(models.Post, models.User.username)
            .join(models.User, models.User.id == models.Post.user_id)
            .where(models.Post.id == post_id)
        )
        return self.session.exec(stmt).first()

    def create(self, post: models.Post) -> models.Post:
        self.session.add(post)
        self.session.commit()
        self.session.refresh(post)
        return post

    def _get_owned(self, post_id: int, user_id: int) -> Optional[models.Post]:
        stmt = select(models.Post).where(models.Post.id == post_id, models.Post.user_id == user_id)
        return self.session.exec(stmt).first()

    def update_owned(self, post_id: int, user_id: int, title: str, content: str) -> Optional[models.Post]:
        """Update title/content of an owned post; `None` when nothing matched."""
        post = self._get_owned(post_id, user_id)
        if post is None:
            return None
        post.title = title
        post.content = content
        post.updated_at = models.utcnow()
        self.session.add(post)
        self.session.commit()
        self.session.refresh(post)
        return post

    def delete_owned(self, post_id: int, user_id: int) -> bool:
        """Delete an owned post; returns False when nothing matched."""
        post = self._get_owned(post_id, user_id)
        if post is None:
            return False
        self.session.delete(post)
        self.session.commit()
        return True
