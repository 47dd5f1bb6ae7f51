"""CLI script to seed the database with demo users and posts.
Usage: python scripts/seed.py [--password PASSWORD]

Reads the same environment as the API (`DATABASE_URL`, `BCRYPT_ROUNDS`,
...). Safe to run repeatedly: existing users and posts are left alone.
"""
import argparse
import logging

from sqlmodel import Session, select

from postboard import models, repositories
from postboard.config import Settings
from postboard.database import build_engine, create_db_and_tables
from postboard.security import CredentialService

logger = logging.getLogger("postboard.seed")

DEMO_USERS = [
    ('john_doe', 'john@example.com'),
    ('jane_smith', 'jane@example.com'),
]

DEMO_POSTS = [
    ('john@example.com', 'First Post', 'This is my first post!'),
    ('john@example.com', 'Second Post', 'Another post from John.'),
    ('jane@example.com', 'Hello from Jane', 'Jane here! This is my first post.'),
]


def seed(session: Session, credentials: CredentialService, password: str) -> dict:
    """Upsert the demo users and their posts.

    Returns counts of created users and posts.
    """
    users = repositories.UserRepository(session)
    posts = repositories.PostRepository(session)
    by_email = {}
    created_users = 0
    password_hash = None
    for username, email in DEMO_USERS:
        user = users.get_by_email(email)
        if user is None:
            # one hash is shared by all demo users, as they share a password
            password_hash = password_hash or credentials.hash(password)
            user = users.create(models.User(username=username, email=email, password_hash=password_hash))
            created_users += 1
        by_email[email] = user
    created_posts = 0
    for email, title, content in DEMO_POSTS:
        owner = by_email[email]
        exists = session.exec(
            select(models.Post.id).where(models.Post.user_id == owner.id, models.Post.title == title)
        ).first()
        if exists is None:
            posts.create(models.Post(user_id=owner.id, title=title, content=content))
            created_posts += 1
    return {'users': created_users, 'posts': created_posts}


def main(password: str):
    settings = Settings()
    engine = build_engine(settings.DATABASE_URL)
    create_db_and_tables(engine)
    with Session(engine) as session:
        result = seed(session, CredentialService(rounds=settings.BCRYPT_ROUNDS), password)
    logger.info('seed complete: created %d users, %d posts', result['users'], result['posts'])
    engine.dispose()


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    parser = argparse.ArgumentParser()
    parser.add_argument('--password', default='password123', help='Password for every demo user')
    args = parser.parse_args()
    main(password=args.password)
