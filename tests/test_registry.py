"""Tests for ConnectionRegistry bookkeeping and query plumbing."""

import pytest
import sqlalchemy

from replwatch.registry import (
    ConnectionRegistry,
    Instance,
    InstanceNotRegistered,
    InstanceStatus,
    QueryError,
    RegistryError,
)
from replwatch.utils import Endpoint


ENDPOINT_1 = Endpoint("127.0.0.1", 3301)
ENDPOINT_2 = Endpoint("127.0.0.1", 3302)
ENDPOINT_3 = Endpoint("127.0.0.1", 3303)


@pytest.fixture
def registry():
    registry = ConnectionRegistry()
    yield registry
    registry.close()


@pytest.fixture
def sqlite_registry(registry):
    """Registry whose only endpoint is backed by in-memory SQLite."""
    engine = sqlalchemy.create_engine("sqlite://")
    registry._instances[ENDPOINT_1] = Instance(
        endpoint=ENDPOINT_1,
        dba_user="dba",
        repl_user="repl",
        repl_password="repl",
        params={},
        engine=engine,
    )
    return registry


@pytest.fixture
def broken_registry(registry, tmp_path):
    """Registry whose only endpoint points at a database file that cannot be opened."""
    engine = sqlalchemy.create_engine(f"sqlite:///{tmp_path / 'missing' / 'db.sqlite'}")
    registry._instances[ENDPOINT_1] = Instance(
        endpoint=ENDPOINT_1,
        dba_user="dba",
        repl_user="repl",
        repl_password="repl",
        params={},
        engine=engine,
    )
    return registry


class TestRegistration:

    def test_register_and_unregister(self, registry):
        for endpoint in (ENDPOINT_1, ENDPOINT_2, ENDPOINT_3):
            registry.register(endpoint, "dba", "dba", "repl", "repl", {"charset": "utf8mb4"})

        registry.unregister(ENDPOINT_1)

        assert set(registry.endpoints()) == {ENDPOINT_2, ENDPOINT_3}
        assert ENDPOINT_1 not in registry

        registry.register(ENDPOINT_1, "dba", "dba")
        assert ENDPOINT_1 in registry

    def test_register_twice_keeps_first(self, registry):
        registry.register(ENDPOINT_1, "dba", "dba", "repl", "first")
        registry.register(ENDPOINT_1, "dba", "dba", "repl", "second")

        assert registry.replication_credentials(ENDPOINT_1) == ("repl", "first")

    def test_unregister_unknown_is_noop(self, registry):
        registry.unregister(ENDPOINT_2)

        assert registry.endpoints() == []

    def test_unregistered_status(self, registry):
        assert registry.check_instance(ENDPOINT_1) == InstanceStatus.unregistered
        assert registry.is_reachable(ENDPOINT_1) is False

    def test_unregistered_fetch_raises(self, registry):
        with pytest.raises(InstanceNotRegistered):
            registry.fetch_rows(ENDPOINT_1, "SELECT 1")

    @pytest.mark.parametrize("endpoint", [
        Endpoint("127.0.0.1", "3306"),
        Endpoint("", 3306),
        Endpoint("127.0.0.1", 0),
        Endpoint("127.0.0.1", 70000),
        Endpoint("127.0.0.1", True),
    ])
    def test_invalid_endpoint_raises(self, registry, endpoint):
        with pytest.raises(RegistryError):
            registry.register(endpoint, "dba", "dba")

        assert registry.endpoints() == []

    def test_unregistered_execute_raises(self, registry):
        with pytest.raises(InstanceNotRegistered):
            registry.execute(ENDPOINT_1, "STOP SLAVE")


class TestQueries:

    def test_check_instance_ok(self, sqlite_registry):
        assert sqlite_registry.check_instance(ENDPOINT_1) == InstanceStatus.ok
        assert sqlite_registry.is_reachable(ENDPOINT_1) is True

    def test_fetch_rows(self, sqlite_registry):
        result = sqlite_registry.fetch_rows(ENDPOINT_1, "SELECT 1 AS id, 'hello' AS name")

        assert result.columns == ["id", "name"]
        assert result.rows == [(1, "hello")]

    def test_fetch_rows_with_args(self, sqlite_registry):
        result = sqlite_registry.fetch_rows(ENDPOINT_1, "SELECT ? AS pattern", "re%")

        assert result.rows == [("re%",)]

    def test_execute_then_fetch(self, sqlite_registry):
        sqlite_registry.execute(ENDPOINT_1, "CREATE TABLE tbl_test (id INTEGER, name TEXT)")

        result = sqlite_registry.fetch_rows(ENDPOINT_1, "SELECT * FROM tbl_test")

        assert result.columns == ["id", "name"]
        assert result.rows == []

    def test_driver_error_is_query_error(self, sqlite_registry):
        with pytest.raises(QueryError):
            sqlite_registry.fetch_rows(ENDPOINT_1, "SHOW SLAVE STATUS")

    def test_ping_failure_is_error(self, broken_registry):
        assert broken_registry.check_instance(ENDPOINT_1) == InstanceStatus.error
        assert broken_registry.is_reachable(ENDPOINT_1) is False

    def test_unopenable_database_fetch_is_query_error(self, broken_registry):
        with pytest.raises(QueryError):
            broken_registry.fetch_rows(ENDPOINT_1, "SELECT 1")
