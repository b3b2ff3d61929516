import os

import pytest

# Settings require Supabase credentials at import time
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "service-role-key")

from fastapi.testclient import TestClient

from courtside.core.dependencies import get_database_service
from courtside.main import app
from tests.utils import InMemoryDatabaseService


@pytest.fixture
def db_service() -> InMemoryDatabaseService:
    """Create a fresh in-memory database for each test."""
    return InMemoryDatabaseService()


@pytest.fixture
def test_client(db_service):
    """Create a test client with overridden database dependency."""
    app.dependency_overrides[get_database_service] = lambda: db_service

    client = TestClient(app)
    yield client

    app.dependency_overrides.clear()
