"""
Pytest configuration and fixtures for backend tests.
"""
import os
import sys
from datetime import datetime, timedelta, timezone
from typing import Generator

import pytest

os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite://")

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from threadline.core.database import Base, Database
from threadline.core.rate_limit import CommentRateLimiter
from threadline.core.security import get_password_hash
from threadline.models import Comment, Post, User
from main import app


@pytest.fixture(scope="function")
def database() -> Generator[Database, None, None]:
    """Fresh in-memory SQLite database for each test."""
    db = Database("sqlite://", poolclass=StaticPool)
    db.SessionLocal.configure(expire_on_commit=False)
    db.create_all()
    try:
        yield db
    finally:
        Base.metadata.drop_all(bind=db.engine)
        db.dispose()


@pytest.fixture(scope="function")
def db_session(database: Database) -> Generator[Session, None, None]:
    """Session for driving services directly."""
    session = database.session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def rate_limiter() -> CommentRateLimiter:
    """Limiter without a Redis backend, i.e. never limits."""
    return CommentRateLimiter(None, max_requests=10, window_seconds=900)


@pytest.fixture(scope="function")
def client(database: Database, rate_limiter: CommentRateLimiter) -> Generator[TestClient, None, None]:
    """Test client bound to the per-test database."""
    app.state.database = database
    app.state.rate_limiter = rate_limiter
    with TestClient(app) as test_client:
        yield test_client
    app.state.database = None
    app.state.rate_limiter = None


@pytest.fixture
def test_user_data():
    """Sample user data for testing."""
    return {
        "name": "Test User",
        "email": "testuser@example.com",
        "password": "TestPass123",
    }


@pytest.fixture
def auth_headers(client: TestClient, test_user_data):
    """Register a user and return bearer headers."""
    response = client.post("/api/auth/register", json=test_user_data)
    token = response.json()["token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def test_post_data():
    """Sample post data for testing."""
    return {
        "title": "Why adjacency lists",
        "content": "Every comment points at its parent.",
    }


@pytest.fixture
def post_id(client: TestClient, auth_headers, test_post_data) -> int:
    response = client.post("/api/posts", json=test_post_data, headers=auth_headers)
    return response.json()["id"]


class ThreadBuilder:
    """Seeds users, posts and comments with explicit, strictly increasing timestamps."""

    def __init__(self, session: Session):
        self.session = session
        self.clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def tick(self) -> datetime:
        self.clock += timedelta(minutes=1)
        return self.clock

    def user(self, name: str = "alice") -> User:
        user = User(name=name, email=f"{name}@example.com", password=get_password_hash("Secret123"))
        self.session.add(user)
        self.session.commit()
        return user

    def post(self, author: User, title: str = "Post") -> Post:
        post = Post(authorId=author.id, title=title, content=f"{title} body")
        self.session.add(post)
        self.session.commit()
        return post

    def comment(self, post: Post, author: User, text: str, parent: Comment | None = None) -> Comment:
        comment = Comment(
            text=text,
            postId=post.id,
            authorId=author.id,
            parentCommentId=parent.id if parent else None,
            createdAt=self.tick(),
        )
        self.session.add(comment)
        self.session.commit()
        return comment


@pytest.fixture
def thread(db_session: Session) -> ThreadBuilder:
    return ThreadBuilder(db_session)
