"""Shared test fixtures."""

import json
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

from macconfigurator.config import Settings
from macconfigurator.db.base import Base
# Import all models to register with Base.metadata
import macconfigurator.db.models  # noqa: F401
from macconfigurator.models.application import Application
from macconfigurator.services.registry import ApplicationRegistry, CachePolicy
from macconfigurator.storage.database import DatabaseStorageBackend
from macconfigurator.storage.memory import MemoryStorageBackend

EXAMPLES_DIR = Path(__file__).resolve().parent / "examples"


def load_example(name: str) -> dict:
    return json.loads((EXAMPLES_DIR / name).read_text(encoding="utf-8"))


@pytest.fixture
def example():
    """Return a fresh copy of an example payload by file name."""
    return load_example


@pytest.fixture
def example_app(example):
    """Return an Application model built from an example payload."""

    def _build(name: str) -> Application:
        return Application.model_validate(example(name))

    return _build


@pytest.fixture
async def db_engine():
    """Create an in-memory SQLite async engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def database_backend(db_engine):
    return DatabaseStorageBackend(db_engine, operation_timeout=5.0)


@pytest.fixture
def memory_backend():
    return MemoryStorageBackend()


@pytest.fixture(params=["memory", "database"])
async def backend(request):
    """Each storage backend in turn; the registry must behave the same on both."""
    if request.param == "memory":
        yield MemoryStorageBackend()
        return

    engine = create_async_engine("sqlite+aiosqlite:///", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield DatabaseStorageBackend(engine, operation_timeout=5.0)
    await engine.dispose()


@pytest.fixture
def registry(backend):
    return ApplicationRegistry(backend, cache_policy=CachePolicy(named_max_age=600, default_max_age=604800))


@pytest.fixture
def app(memory_backend):
    """Create a test application instance with an in-memory registry."""
    from macconfigurator.main import create_app

    _app = create_app(Settings(storage_backend="memory", mount_path="/configurator"))
    _app.state.registry = ApplicationRegistry(memory_backend)
    return _app


@pytest.fixture
async def client(app):
    """Async HTTP test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
