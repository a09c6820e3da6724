"""
Pytest configuration and fixtures for VendorHive API tests.

Storage integration tests run against the in-memory backend and, when
``MONGODB_TEST_URI`` points at a MongoDB server, against MongoDB too.
Each MongoDB test uses its own throwaway database, dropped afterwards.
"""

import os
import uuid
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from vendorhive_api.app.core.config import Settings
from vendorhive_api.app.main import create_app
from vendorhive_api.app.storage import MemStorage, MongoStorage
from vendorhive_api.app.storage.memory import MemoryDocumentStore

MONGODB_TEST_URI = os.getenv("MONGODB_TEST_URI")

BACKENDS = [
    "memory",
    pytest.param(
        "mongodb",
        marks=pytest.mark.skipif(not MONGODB_TEST_URI, reason="MONGODB_TEST_URI not set"),
    ),
]


# =============================================================================
# Test Settings
# =============================================================================

def get_test_settings(**overrides) -> Settings:
    """Return settings configured for testing."""
    values = {
        "secret_key": "test-secret",
        "storage_backend": "memory",
        "log_level": "WARNING",
        "log_file": "",
        "id_strategy": "max",
        "strict_user_resolution": False,
        "enforce_booking_transitions": False,
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def store() -> MemoryDocumentStore:
    return MemoryDocumentStore()


# =============================================================================
# Storage Fixtures
# =============================================================================

@pytest_asyncio.fixture(params=BACKENDS)
async def make_storage(request):
    """Factory building connected storage facades for the current backend."""
    created = []

    async def factory(**options):
        if request.param == "memory":
            storage = MemStorage(**options)
        else:
            storage = MongoStorage(MONGODB_TEST_URI, f"vendorhive_test_{uuid.uuid4().hex[:12]}", **options)
        await storage.connect()
        created.append(storage)
        return storage

    yield factory

    for storage in created:
        if isinstance(storage, MongoStorage):
            database = storage.store.database
            await database.client.drop_database(database.name)
        await storage.close()


@pytest_asyncio.fixture
async def storage(make_storage):
    return await make_storage()


# =============================================================================
# Application Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def app():
    """Create FastAPI application backed by a fresh in-memory storage."""
    return create_app(get_test_settings(), storage=MemStorage())


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Provide async HTTP client for API tests."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
