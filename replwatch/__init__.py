"""MySQL replication health checks and diagnostics."""

from .classifier import ReplicationHealth, classify_replication
from .parser import InnoDBCounters, parse_innodb_counters
from .registry import (
    ConnectionRegistry,
    InstanceNotRegistered,
    InstanceStatus,
    QueryError,
    RegistryError,
)
from .service import TopologyHealthService
from .snapshot import (
    MasterStatus,
    Process,
    ResultSet,
    SlaveStatus,
    decode_master_status,
    decode_processlist,
    decode_slave_status,
    decode_variables,
)
from .utils import Endpoint, HostConfig

__all__ = [
    "ConnectionRegistry",
    "Endpoint",
    "HostConfig",
    "InnoDBCounters",
    "InstanceNotRegistered",
    "InstanceStatus",
    "MasterStatus",
    "Process",
    "QueryError",
    "RegistryError",
    "ReplicationHealth",
    "ResultSet",
    "SlaveStatus",
    "TopologyHealthService",
    "classify_replication",
    "decode_master_status",
    "decode_processlist",
    "decode_slave_status",
    "decode_variables",
    "parse_innodb_counters",
]
