"""Replication health classification for a master/slave pair."""

import enum

from .snapshot import MasterStatus, SlaveStatus
from .utils import Endpoint


class ReplicationHealth(str, enum.Enum):
    """
    Health of one slave against its expected master.

    Declared in the order the checks are applied.
    """
    unknown = "unknown"
    not_configured = "not_configured"
    wrong_master = "wrong_master"
    error = "error"
    paused = "paused"
    syncing = "syncing"
    healthy = "healthy"


NOT_CONFIGURED = SlaveStatus()


def configured_master(slave: SlaveStatus) -> Endpoint:
    """The master endpoint the slave reports it replicates from."""
    return Endpoint(slave.master_host, slave.master_port)


def is_lagging(slave: SlaveStatus, master: MasterStatus) -> bool:
    """
    Whether the slave is behind the master.

    Either an applied position that differs from the master's current
    binlog position or a positive Seconds_Behind_Master counts as lag.
    """
    if slave.master_log_file != master.file:
        return True
    if slave.exec_master_log_pos != master.position:
        return True
    return (slave.seconds_behind_master or 0) > 0


def classify_replication(
    slave: SlaveStatus,
    master: MasterStatus,
    expected_master: Endpoint,
    slave_reachable: bool = True,
    master_reachable: bool = True,
) -> ReplicationHealth:
    """
    Classify replication health.

    Checks run in priority order and the first match wins:
    unreachable -> unknown, empty slave status -> not_configured,
    other master -> wrong_master, Last_Errno set -> error,
    both threads "No" -> paused, lag -> syncing, else healthy.
    """
    if not slave_reachable or not master_reachable:
        return ReplicationHealth.unknown
    if slave == NOT_CONFIGURED:
        return ReplicationHealth.not_configured
    if configured_master(slave) != expected_master:
        return ReplicationHealth.wrong_master
    if slave.last_errno != 0:
        return ReplicationHealth.error
    if slave.slave_io_running == "No" and slave.slave_sql_running == "No":
        return ReplicationHealth.paused
    if is_lagging(slave, master):
        return ReplicationHealth.syncing
    return ReplicationHealth.healthy
