"""Tests for the storage backends and the backend factory."""

import asyncio

import pytest
from sqlalchemy import exc as sa_exc
from sqlalchemy.ext.asyncio import create_async_engine

from macconfigurator.config import Settings
from macconfigurator.errors.exceptions import (
    ApplicationNotFoundError,
    BackendUnavailableError,
    WriteConflictError,
)
from macconfigurator.models.application import Application, NamedConfig
from macconfigurator.services.registry import ApplicationRegistry
from macconfigurator.storage.database import DatabaseStorageBackend
from macconfigurator.storage.factory import create_backend
from macconfigurator.storage.memory import MemoryStorageBackend

UNREACHABLE_SQLITE = "sqlite+aiosqlite:////nonexistent-dir/configurator/apps.sqlite"


@pytest.fixture
async def unreachable_backend():
    engine = create_async_engine(UNREACHABLE_SQLITE)
    yield DatabaseStorageBackend(engine, operation_timeout=5.0)
    await engine.dispose()


def _failing_session(error: BaseException):
    async def _in_session(operation):
        raise error

    return _in_session


# -- shared contract -----------------------------------------------------------


@pytest.mark.asyncio
async def test_get_returns_isolated_copies(backend, example_app):
    await backend.put(example_app("application-app-test.json"))

    first = await backend.get("app-test")
    first.default_config.data["foo"] = "mutated"
    first.named_configs["sneaky"] = NamedConfig(data={"foo": "x"}, versions=["1.0.0"])

    second = await backend.get("app-test")
    assert second.default_config.data == {"foo": "default config"}
    assert second.named_configs == {}


@pytest.mark.asyncio
async def test_put_stores_a_copy(backend, example_app):
    application = example_app("application-app-test.json")
    await backend.put(application)
    application.default_config.data["foo"] = "changed after put"

    assert (await backend.get("app-test")).default_config.data == {"foo": "default config"}


@pytest.mark.asyncio
async def test_put_replaces_whole_aggregate(backend, example_app):
    await backend.put(example_app("application-with-named-configs.json"))
    replacement = example_app("application-with-named-configs.json")
    replacement.named_configs = {}
    replacement.archived = True
    await backend.put(replacement)

    stored = await backend.get("app-storefront")
    assert stored.named_configs == {}
    assert stored.archived is True


@pytest.mark.asyncio
async def test_named_config_order_survives_storage(backend, example):
    payload = example("application-with-named-configs.json")
    payload["namedConfigs"] = dict(reversed(list(payload["namedConfigs"].items())))
    await backend.put(Application.model_validate(payload))

    stored = await backend.get("app-storefront")
    assert list(stored.named_configs) == ["legacy", "range", "exact"]


@pytest.mark.asyncio
async def test_list_all_returns_every_application(backend, example_app):
    assert await backend.list_all() == []

    archived = example_app("application-appearance.json")
    archived.archived = True
    await backend.put(archived)
    await backend.put(example_app("application-app-test.json"))

    listed = await backend.list_all()
    assert [app.application_id for app in listed] == ["app-appearance", "app-test"]
    assert listed[0].archived is True


@pytest.mark.asyncio
async def test_ping_reports_ready(backend):
    assert await backend.ping() is True


@pytest.mark.asyncio
async def test_lock_serializes_same_key(backend):
    events = []

    async def worker(label: str):
        async with backend.lock("app"):
            events.append(f"{label}-in")
            await asyncio.sleep(0.01)
            events.append(f"{label}-out")

    await asyncio.gather(worker("a"), worker("b"))
    assert events in (["a-in", "a-out", "b-in", "b-out"], ["b-in", "b-out", "a-in", "a-out"])


@pytest.mark.asyncio
async def test_lock_does_not_block_other_keys(backend):
    async with backend.lock("first"):
        await asyncio.wait_for(_enter_and_leave(backend, "second"), timeout=1.0)


async def _enter_and_leave(backend, key):
    async with backend.lock(key):
        return True


# -- memory backend ------------------------------------------------------------


@pytest.mark.asyncio
async def test_memory_backends_do_not_share_state(example_app):
    first, second = MemoryStorageBackend(), MemoryStorageBackend()
    await first.put(example_app("application-app-test.json"))
    assert await second.get("app-test") is None


@pytest.mark.asyncio
async def test_memory_close_discards_contents(example_app):
    backend = MemoryStorageBackend()
    await backend.put(example_app("application-app-test.json"))
    await backend.close()
    assert await backend.list_all() == []


# -- database backend: failure classification ----------------------------------


@pytest.mark.asyncio
async def test_unreachable_database_raises_network_error(unreachable_backend):
    with pytest.raises(BackendUnavailableError) as exc_info:
        await unreachable_backend.get("app-test")
    assert exc_info.value.kind == "network"
    assert exc_info.value.status_code == 503
    assert exc_info.value.details["retryable"] is True


@pytest.mark.asyncio
async def test_unreachable_database_fails_ping(unreachable_backend):
    with pytest.raises(BackendUnavailableError):
        await unreachable_backend.ping()


@pytest.mark.asyncio
async def test_slow_operation_times_out(database_backend, monkeypatch):
    async def _stalled(operation):
        await asyncio.sleep(1)

    monkeypatch.setattr(database_backend, "_in_session", _stalled)
    monkeypatch.setattr(database_backend, "_operation_timeout", 0.05)

    with pytest.raises(BackendUnavailableError) as exc_info:
        await database_backend.get("app-test")
    assert exc_info.value.kind == "timeout"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error, kind",
    [
        (sa_exc.TimeoutError("QueuePool limit reached"), "pool_exhausted"),
        (sa_exc.OperationalError("SELECT 1", {}, Exception("connection refused")), "network"),
        (
            sa_exc.OperationalError(
                "SELECT 1", {}, Exception('password authentication failed for user "x"')
            ),
            "auth",
        ),
        (sa_exc.InterfaceError("SELECT 1", {}, Exception("connection is closed")), "network"),
        (ConnectionResetError("reset by peer"), "network"),
    ],
)
async def test_driver_errors_are_classified(database_backend, monkeypatch, error, kind):
    monkeypatch.setattr(database_backend, "_in_session", _failing_session(error))

    with pytest.raises(BackendUnavailableError) as exc_info:
        await database_backend.list_all()
    assert exc_info.value.kind == kind


@pytest.mark.asyncio
async def test_integrity_error_is_write_conflict(database_backend, monkeypatch, example_app):
    error = sa_exc.IntegrityError("INSERT", {}, Exception("duplicate key value"))
    monkeypatch.setattr(database_backend, "_in_session", _failing_session(error))

    with pytest.raises(WriteConflictError) as exc_info:
        await database_backend.put(example_app("application-app-test.json"))
    assert exc_info.value.status_code == 409


# -- registry over a failing backend ------------------------------------------


@pytest.mark.asyncio
async def test_registry_masks_read_failures(unreachable_backend):
    registry = ApplicationRegistry(unreachable_backend)

    assert await registry.list_applications() == []
    assert await registry.get_application("app-test") is None
    assert await registry.get_config("app-test", "1.0.0") is None


@pytest.mark.asyncio
async def test_registry_propagates_write_failures(unreachable_backend, example_app):
    registry = ApplicationRegistry(unreachable_backend)

    with pytest.raises(BackendUnavailableError):
        await registry.create_application(example_app("application-app-test.json"))
    with pytest.raises(BackendUnavailableError):
        await registry.archive_application("app-test")
    with pytest.raises(BackendUnavailableError):
        await registry.create_named_config("app-test", "test", {"foo": "x"}, ["1.0.0"])


@pytest.mark.asyncio
async def test_registry_does_not_mistake_outage_for_missing(unreachable_backend):
    registry = ApplicationRegistry(unreachable_backend)
    with pytest.raises(BackendUnavailableError):
        await registry.update_application("app-test", {"archived": True})

    registry = ApplicationRegistry(MemoryStorageBackend())
    with pytest.raises(ApplicationNotFoundError):
        await registry.update_application("app-test", {"archived": True})


# -- factory -------------------------------------------------------------------


@pytest.mark.parametrize("name", ["memory", "in-memory", " MEMORY "])
def test_factory_builds_memory_backend(name):
    backend = create_backend(Settings(storage_backend=name))
    assert isinstance(backend, MemoryStorageBackend)


@pytest.mark.asyncio
@pytest.mark.parametrize("name", ["database", "db", "sql"])
async def test_factory_builds_database_backend(name):
    backend = create_backend(
        Settings(storage_backend=name, database_url="sqlite+aiosqlite:///")
    )
    try:
        assert isinstance(backend, DatabaseStorageBackend)
    finally:
        await backend.close()


def test_factory_rejects_unknown_backend():
    with pytest.raises(ValueError, match="Unknown storage backend 'redis'"):
        create_backend(Settings(storage_backend="redis"))


def test_factory_returns_fresh_instances():
    config = Settings(storage_backend="memory")
    assert create_backend(config) is not create_backend(config)
