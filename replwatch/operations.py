"""Diagnostic reads and fixed administrative statements against one endpoint."""

import re
from typing import Dict, List, Union

from .parser import InnoDBCounters, parse_innodb_counters
from .registry import ConnectionRegistry
from .snapshot import (
    MasterStatus,
    Process,
    SlaveStatus,
    decode_innodb_text,
    decode_master_status,
    decode_processlist,
    decode_slave_status,
    decode_variables,
)
from .utils import Endpoint

MASTER_STATUS_QUERY = "SHOW MASTER STATUS"
SLAVE_STATUS_QUERY = "SHOW SLAVE STATUS"
GLOBAL_VARIABLES_QUERY = "SHOW GLOBAL VARIABLES LIKE %s"
GLOBAL_STATUS_QUERY = "SHOW GLOBAL STATUS LIKE %s"
PROCESSLIST_QUERY = "SHOW FULL PROCESSLIST"
INNODB_STATUS_QUERY = "SHOW ENGINE INNODB STATUS"

# Variable names are interpolated into SET GLOBAL, so only plain identifiers pass
GLOBAL_KEY_PATTERN = re.compile(r"[_0-9a-zA-Z]+")


def get_master_status(registry: ConnectionRegistry, endpoint: Endpoint) -> MasterStatus:
    return decode_master_status(registry.fetch_rows(endpoint, MASTER_STATUS_QUERY))


def get_slave_status(registry: ConnectionRegistry, endpoint: Endpoint) -> SlaveStatus:
    return decode_slave_status(registry.fetch_rows(endpoint, SLAVE_STATUS_QUERY))


def get_global_variables(registry: ConnectionRegistry, endpoint: Endpoint, pattern: str = "%") -> Dict[str, str]:
    """SHOW GLOBAL VARIABLES LIKE pattern, as a name -> value mapping."""
    return decode_variables(registry.fetch_rows(endpoint, GLOBAL_VARIABLES_QUERY, pattern))


def get_global_status(registry: ConnectionRegistry, endpoint: Endpoint, pattern: str = "%") -> Dict[str, str]:
    """SHOW GLOBAL STATUS LIKE pattern, as a name -> value mapping."""
    return decode_variables(registry.fetch_rows(endpoint, GLOBAL_STATUS_QUERY, pattern))


def get_processlist(registry: ConnectionRegistry, endpoint: Endpoint) -> List[Process]:
    return decode_processlist(registry.fetch_rows(endpoint, PROCESSLIST_QUERY))


def get_innodb_status(registry: ConnectionRegistry, endpoint: Endpoint) -> str:
    return decode_innodb_text(registry.fetch_rows(endpoint, INNODB_STATUS_QUERY))


def get_innodb_counters(registry: ConnectionRegistry, endpoint: Endpoint) -> InnoDBCounters:
    return parse_innodb_counters(get_innodb_status(registry, endpoint))


def set_global_variable(
    registry: ConnectionRegistry,
    endpoint: Endpoint,
    key: str,
    value: Union[str, int, float],
) -> None:
    """
    Execute SET GLOBAL key = value.

    Raises:
        ValueError: key is not a plain variable name
    """
    if not GLOBAL_KEY_PATTERN.fullmatch(key or ""):
        raise ValueError(f"invalid global variable name {key!r}")
    registry.execute(endpoint, f"SET GLOBAL {key} = %s", value)


def start_slave(registry: ConnectionRegistry, endpoint: Endpoint) -> None:
    registry.execute(endpoint, "START SLAVE")


def stop_slave(registry: ConnectionRegistry, endpoint: Endpoint) -> None:
    registry.execute(endpoint, "STOP SLAVE")


def kill_process(registry: ConnectionRegistry, endpoint: Endpoint, pid: int) -> None:
    if isinstance(pid, bool) or not isinstance(pid, int):
        raise ValueError(f"process id must be an integer, got {pid!r}")
    registry.execute(endpoint, f"KILL {pid}")
