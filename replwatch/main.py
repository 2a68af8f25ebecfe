"""FastAPI application for replwatch."""

import logging
import sys

from fastapi import FastAPI, Depends
from fastapi.responses import JSONResponse

from .collector import check_topology, register_hosts
from .registry import ConnectionRegistry
from .service import TopologyHealthService
from .utils import load_hosts, get_host_by_id, hosts_by_id, host_summary

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger("replwatch")

# Initialize FastAPI app
app = FastAPI(
    title="replwatch",
    description="MySQL replication health checks",
    version="1.0.0"
)

_registry = ConnectionRegistry()


def get_registry() -> ConnectionRegistry:
    """Registry dependency."""
    return _registry


def _not_found(host_id: str) -> JSONResponse:
    return JSONResponse({"error": f"Host {host_id} not found"}, status_code=404)


@app.on_event("startup")
async def startup_event():
    """Register configured hosts on startup."""
    logger.info("Starting replwatch...")
    hosts = load_hosts()
    registered = register_hosts(_registry, hosts)
    logger.info(f"Registered {registered}/{len(hosts)} host(s) from configuration:")
    for h in hosts:
        role = f"replica of {h.master}" if h.master else "master"
        logger.info(f"  - {h.id}: {h.label} ({h.endpoint}, user={h.user}, {role})")
    logger.info("replwatch ready")


@app.on_event("shutdown")
async def shutdown_event():
    _registry.close()


# =============================================================================
# HOSTS
# =============================================================================

@app.get("/api/hosts")
def list_hosts():
    """List configured hosts."""
    return {"hosts": [host_summary(h) for h in load_hosts()]}


@app.get("/api/hosts/{host_id}/status")
def host_status(host_id: str, registry: ConnectionRegistry = Depends(get_registry)):
    """Connectivity status of one host."""
    host = get_host_by_id(host_id)
    if not host:
        return _not_found(host_id)

    status = registry.check_instance(host.endpoint)
    return {"host_id": host_id, "endpoint": str(host.endpoint), "status": status.value}


@app.get("/api/hosts/{host_id}/innodb")
def host_innodb(host_id: str, registry: ConnectionRegistry = Depends(get_registry)):
    """InnoDB mutex counters of one host."""
    host = get_host_by_id(host_id)
    if not host:
        return _not_found(host_id)

    counters = TopologyHealthService(registry).inspect_innodb(host.endpoint)
    if counters is None:
        return JSONResponse(
            {"host_id": host_id, "error": "InnoDB status unavailable"},
            status_code=503,
        )
    return {
        "host_id": host_id,
        "mutex_spin_waits": counters.mutex_spin_waits,
        "mutex_spin_rounds": counters.mutex_spin_rounds,
        "mutex_os_waits": counters.mutex_os_waits,
    }


# =============================================================================
# REPLICATION
# =============================================================================

@app.get("/api/replication")
def replication_overview(registry: ConnectionRegistry = Depends(get_registry)):
    """Check every configured replica against its master."""
    return check_topology(TopologyHealthService(registry), load_hosts())


@app.get("/api/replication/{host_id}")
def replication_detail(host_id: str, registry: ConnectionRegistry = Depends(get_registry)):
    """Check one replica against its configured master."""
    hosts = load_hosts()
    hosts_map = hosts_by_id(hosts)
    replica = hosts_map.get(host_id)
    if not replica:
        return _not_found(host_id)
    if not replica.master:
        return JSONResponse({"error": f"Host {host_id} has no master configured"}, status_code=400)

    master = hosts_map.get(replica.master)
    if not master:
        return _not_found(replica.master)

    health = TopologyHealthService(registry).check_replication(replica.endpoint, master.endpoint)
    return {
        "host_id": host_id,
        "master": replica.master,
        "endpoint": str(replica.endpoint),
        "master_endpoint": str(master.endpoint),
        "health": health.value,
    }
