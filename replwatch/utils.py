"""Endpoint identity and host configuration helpers."""

import os
import yaml
from pathlib import Path
from typing import List, Dict, Any, Optional
from dataclasses import dataclass, field


@dataclass(frozen=True)
class Endpoint:
    """
    A database server address.

    Equality is exact on host and port; no DNS or case normalization.
    """
    host: str
    port: int

    def __str__(self) -> str:
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"

    @classmethod
    def parse(cls, value: str) -> "Endpoint":
        """Parse a "host:port" (or "[v6host]:port") string."""
        host, sep, port = value.rpartition(":")
        if not sep or not host or not port.isdigit():
            raise ValueError(f"invalid endpoint {value!r}, expected host:port")
        if host.startswith("[") and host.endswith("]"):
            host = host[1:-1]
        return cls(host=host, port=int(port))


@dataclass
class HostConfig:
    """Host configuration data class."""
    id: str
    label: str
    host: str
    port: int
    user: str
    password: str
    repl_user: str = ""
    repl_password: str = ""
    master: Optional[str] = None
    params: Dict[str, str] = field(default_factory=dict)

    @property
    def endpoint(self) -> Endpoint:
        return Endpoint(self.host, self.port)


# Project paths
PROJECT_ROOT = Path(__file__).parent.parent
HOSTS_FILE = PROJECT_ROOT / "hosts.yaml"


def get_hosts_file() -> Path:
    """Hosts file location, overridable with REPLWATCH_HOSTS_FILE."""
    override = os.environ.get("REPLWATCH_HOSTS_FILE")
    return Path(override) if override else HOSTS_FILE


def load_hosts(path: Optional[Path] = None) -> List[HostConfig]:
    """Load hosts from the hosts.yaml configuration file."""
    hosts_file = path or get_hosts_file()
    if not hosts_file.exists():
        return []

    with open(hosts_file, "r") as f:
        data = yaml.safe_load(f) or {}

    hosts = []
    for h in data.get("hosts", []):
        hosts.append(HostConfig(
            id=h["id"],
            label=h.get("label", h["id"]),
            host=h["host"],
            port=int(h["port"]),
            user=h["user"],
            password=h.get("password", ""),
            repl_user=h.get("repl_user", ""),
            repl_password=h.get("repl_password", ""),
            master=h.get("master"),
            params={str(k): str(v) for k, v in (h.get("params") or {}).items()},
        ))
    return hosts


def get_host_by_id(host_id: str, hosts: Optional[List[HostConfig]] = None) -> Optional[HostConfig]:
    """Get a specific host by ID."""
    if hosts is None:
        hosts = load_hosts()
    for h in hosts:
        if h.id == host_id:
            return h
    return None


def hosts_by_id(hosts: List[HostConfig]) -> Dict[str, HostConfig]:
    """Index hosts by their ID."""
    return {h.id: h for h in hosts}


def host_summary(host: HostConfig) -> Dict[str, Any]:
    """Public view of a host entry (no credentials)."""
    return {
        "id": host.id,
        "label": host.label,
        "endpoint": str(host.endpoint),
        "master": host.master,
    }
