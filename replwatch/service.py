"""Topology health service: fetch both sides of a pair and classify."""

import logging
from typing import Optional

from .classifier import ReplicationHealth, classify_replication
from .operations import get_innodb_counters, get_master_status, get_slave_status
from .parser import InnoDBCounters
from .registry import ConnectionRegistry, RegistryError
from .snapshot import MasterStatus, SlaveStatus
from .utils import Endpoint

logger = logging.getLogger("replwatch.service")


class TopologyHealthService:
    """Checks replication pairs through a connection registry."""

    def __init__(self, registry: ConnectionRegistry):
        self.registry = registry

    def check_replication(self, slave_endpoint: Endpoint, master_endpoint: Endpoint) -> ReplicationHealth:
        """
        Classify replication from slave_endpoint to master_endpoint.

        Fetch failures of any kind collapse to ReplicationHealth.unknown.
        """
        slave_reachable = self.registry.is_reachable(slave_endpoint)
        master_reachable = self.registry.is_reachable(master_endpoint)

        if not (slave_reachable and master_reachable):
            logger.warning(
                f"[REPLICATION] {slave_endpoint} -> {master_endpoint}: unreachable "
                f"(slave={slave_reachable}, master={master_reachable})"
            )
            return classify_replication(
                SlaveStatus(), MasterStatus(), master_endpoint, slave_reachable, master_reachable
            )

        try:
            master_status = get_master_status(self.registry, master_endpoint)
            slave_status = get_slave_status(self.registry, slave_endpoint)
        except RegistryError as e:
            logger.warning(f"[REPLICATION] {slave_endpoint} -> {master_endpoint}: fetch failed: {e}")
            return ReplicationHealth.unknown

        health = classify_replication(slave_status, master_status, master_endpoint)
        logger.info(
            f"[REPLICATION] {slave_endpoint} -> {master_endpoint}: {health.value} "
            f"(slave at {slave_status.master_log_file}:{slave_status.exec_master_log_pos}, "
            f"master at {master_status.file}:{master_status.position})"
        )
        return health

    def inspect_innodb(self, endpoint: Endpoint) -> Optional[InnoDBCounters]:
        """Mutex counters for one endpoint, or None if they could not be fetched."""
        try:
            return get_innodb_counters(self.registry, endpoint)
        except RegistryError as e:
            logger.warning(f"[INNODB] {endpoint}: fetch failed: {e}")
            return None
