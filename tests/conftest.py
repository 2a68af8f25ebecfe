"""Shared fixtures for replwatch tests."""

import pytest

from replwatch.registry import InstanceNotRegistered, InstanceStatus
from replwatch.snapshot import ResultSet
from replwatch.utils import Endpoint


MASTER = Endpoint("10.0.0.1", 3306)
SLAVE = Endpoint("10.0.0.2", 3306)


class FakeRegistry:
    """
    In-memory stand-in for ConnectionRegistry.

    `results` maps (endpoint, query) to a ResultSet or an exception to raise.
    """

    def __init__(self, reachable=None, results=None):
        self.reachable = set(reachable or [])
        self.results = dict(results or {})
        self.executed = []
        self.queries = []

    def check_instance(self, endpoint):
        if endpoint in self.reachable:
            return InstanceStatus.ok
        return InstanceStatus.unregistered

    def is_reachable(self, endpoint):
        return endpoint in self.reachable

    def fetch_rows(self, endpoint, query, *args):
        self.queries.append((endpoint, query, args))
        if endpoint not in self.reachable:
            raise InstanceNotRegistered(endpoint)
        result = self.results.get((endpoint, query), ResultSet(columns=[]))
        if isinstance(result, Exception):
            raise result
        return result

    def execute(self, endpoint, statement, *args):
        if endpoint not in self.reachable:
            raise InstanceNotRegistered(endpoint)
        self.executed.append((endpoint, statement, args))


def master_status_rows(file="binlog.000002", position="500"):
    return ResultSet(
        columns=["File", "Position", "Binlog_Do_DB", "Binlog_Ignore_DB", "Executed_Gtid_Set"],
        rows=[(file, position, "", "", "")],
    )


def slave_status_rows(**overrides):
    row = {
        "Slave_IO_State": "Waiting for master to send event",
        "Master_Host": "10.0.0.1",
        "Master_Port": "3306",
        "Master_Log_File": "binlog.000002",
        "Read_Master_Log_Pos": "500",
        "Slave_IO_Running": "Yes",
        "Slave_SQL_Running": "Yes",
        "Last_Errno": "0",
        "Last_Error": "",
        "Exec_Master_Log_Pos": "500",
        "Seconds_Behind_Master": "0",
    }
    row.update(overrides)
    return ResultSet(columns=list(row), rows=[tuple(row.values())])


@pytest.fixture
def fake_registry():
    """Both sides reachable, healthy replication."""
    return FakeRegistry(
        reachable={MASTER, SLAVE},
        results={
            (MASTER, "SHOW MASTER STATUS"): master_status_rows(),
            (SLAVE, "SHOW SLAVE STATUS"): slave_status_rows(),
        },
    )


@pytest.fixture
def hosts_file(tmp_path, monkeypatch):
    """A hosts.yaml with one master and two replicas, wired via REPLWATCH_HOSTS_FILE."""
    path = tmp_path / "hosts.yaml"
    path.write_text(
        "hosts:\n"
        "  - id: primary\n"
        "    label: Primary\n"
        "    host: 10.0.0.1\n"
        "    port: 3306\n"
        "    user: dba\n"
        "    password: secret\n"
        "  - id: replica-1\n"
        "    label: Replica 1\n"
        "    host: 10.0.0.2\n"
        "    port: 3306\n"
        "    user: dba\n"
        "    password: secret\n"
        "    master: primary\n"
        "  - id: replica-2\n"
        "    label: Replica 2\n"
        "    host: 10.0.0.3\n"
        "    port: 3306\n"
        "    user: dba\n"
        "    password: secret\n"
        "    master: missing\n"
    )
    monkeypatch.setenv("REPLWATCH_HOSTS_FILE", str(path))
    return path
