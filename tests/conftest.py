"""Shared test fixtures.

The application is configured for the in-memory store without Redis, so the
HTTP tests run without external services.
"""

import os
import tempfile
from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient


os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("INTERACTIONS_STORE_BACKEND", "memory")
os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="interactions-logs-"))
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("STORE_RETRY_BACKOFF_SECONDS", "0")

from src.auth.security import create_access_token  # noqa: E402
from src.interactions.models import Identity  # noqa: E402
from src.interactions.service import InteractionService  # noqa: E402
from src.store import InMemoryDocumentStore  # noqa: E402


@pytest.fixture
def client() -> Iterator[TestClient]:
    """Test client with the application lifespan running."""
    from src.main import app  # noqa: PLC0415

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def service(store: InMemoryDocumentStore) -> InteractionService:
    return InteractionService(store=store)


@pytest.fixture
def alice() -> Identity:
    return Identity(user_id="alice", display_name="Alice", role="Member")


@pytest.fixture
def bob() -> Identity:
    return Identity(user_id="bob", display_name="Bob", role="Member")


@pytest.fixture
def admin() -> Identity:
    return Identity(user_id="root", display_name="Site Admin", role="Admin")


def _auth_headers(
    user_id: str, name: str = "", role: str = "Member"
) -> dict[str, str]:
    token = create_access_token({"sub": user_id, "name": name, "role": role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers():
    """Build an Authorization header carrying a freshly signed access token."""
    return _auth_headers
