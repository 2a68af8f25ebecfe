"""Parallel replication checks across the configured topology."""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime
from typing import Dict, Any, List, Optional

from .classifier import ReplicationHealth
from .registry import ConnectionRegistry, RegistryError
from .service import TopologyHealthService
from .utils import HostConfig, hosts_by_id

logger = logging.getLogger("replwatch.collector")

MAX_WORKERS = 16


def _timestamp() -> str:
    """Get current timestamp string."""
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


def register_hosts(registry: ConnectionRegistry, hosts: List[HostConfig]) -> int:
    """
    Register every configured host with the registry.

    Returns:
        Number of hosts registered
    """
    registered = 0
    for host in hosts:
        try:
            registry.register(
                host.endpoint,
                host.user,
                host.password,
                repl_user=host.repl_user,
                repl_password=host.repl_password,
                params=host.params,
            )
            registered += 1
        except RegistryError as e:
            logger.error(f"[REGISTRY] Skipping {host.label} ({host.endpoint}): {e}")
    return registered


def _check_single_pair(
    service: TopologyHealthService,
    replica: HostConfig,
    master: Optional[HostConfig],
) -> Dict[str, Any]:
    """
    Check one replica against its configured master.

    Returns:
        Dict with master id, health value and duration in seconds
    """
    start_time = time.time()
    if master is None:
        logger.warning(f"[PAIR] {replica.label}: master '{replica.master}' not found in configuration")
        health = ReplicationHealth.unknown
    else:
        health = service.check_replication(replica.endpoint, master.endpoint)
    duration = time.time() - start_time
    return {
        "master": replica.master,
        "health": health.value,
        "duration": round(duration, 3),
    }


def check_topology(service: TopologyHealthService, hosts: List[HostConfig]) -> Dict[str, Any]:
    """
    Check every replica/master pair in PARALLEL.

    Args:
        service: Health service bound to a registry
        hosts: Host configuration; hosts with a `master` entry are replicas

    Returns:
        Dict with timing and a `pairs` map of replica id -> result
    """
    hosts_map = hosts_by_id(hosts)
    replicas = [h for h in hosts if h.master]
    overall_start = time.time()

    report: Dict[str, Any] = {
        "started_at": _timestamp(),
        "pairs": {},
    }

    logger.info(f"[PARALLEL] Checking {len(replicas)} replication pair(s)")

    if replicas:
        workers = min(MAX_WORKERS, len(replicas))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                executor.submit(_check_single_pair, service, replica, hosts_map.get(replica.master)): replica
                for replica in replicas
            }

            for future in as_completed(futures):
                replica = futures[future]
                try:
                    report["pairs"][replica.id] = future.result()
                except Exception as e:
                    logger.exception(f"[PARALLEL] Exception for {replica.label}: {e}")
                    report["pairs"][replica.id] = {
                        "master": replica.master,
                        "health": ReplicationHealth.unknown.value,
                        "duration": 0,
                        "error": str(e),
                    }

    overall_duration = time.time() - overall_start
    report["completed_at"] = _timestamp()
    report["total_duration"] = round(overall_duration, 3)

    unhealthy = [
        host_id for host_id, result in report["pairs"].items()
        if result["health"] != ReplicationHealth.healthy.value
    ]
    if unhealthy:
        logger.warning(f"[PARALLEL] Completed in {overall_duration:.2f}s - Not healthy: {sorted(unhealthy)}")
    else:
        logger.info(f"[PARALLEL] Completed in {overall_duration:.2f}s - all pairs healthy")

    return report
