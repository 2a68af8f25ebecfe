"""Connection registry mapping endpoints to SQLAlchemy engines."""

import enum
import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import sqlalchemy
from sqlalchemy.engine import Engine, URL
from sqlalchemy.exc import SQLAlchemyError

from .snapshot import ResultSet
from .utils import Endpoint

logger = logging.getLogger("replwatch.registry")

DRIVER_NAME = "mysql+pymysql"


class RegistryError(Exception):
    """Base class for structural failures talking to an endpoint."""


class InstanceNotRegistered(RegistryError):
    def __init__(self, endpoint: Endpoint):
        super().__init__(f"the instance {endpoint} is not registered")
        self.endpoint = endpoint


class QueryError(RegistryError):
    """The driver failed to run a statement."""


def _validate_endpoint(endpoint: Endpoint) -> None:
    """Reject endpoints that cannot form a connection URL."""
    if not isinstance(endpoint.host, str) or not endpoint.host:
        raise RegistryError(f"invalid host in endpoint {endpoint!r}")
    port = endpoint.port
    if isinstance(port, bool) or not isinstance(port, int) or not 0 < port < 65536:
        raise RegistryError(f"invalid port in endpoint {endpoint!r}")


class InstanceStatus(str, enum.Enum):
    ok = "ok"
    error = "error"
    unregistered = "unregistered"


@dataclass
class Instance:
    """Credentials and engine for one registered endpoint."""
    endpoint: Endpoint
    dba_user: str
    repl_user: str
    repl_password: str
    params: Dict[str, str]
    engine: Engine = field(repr=False)


class ConnectionRegistry:
    """
    Thread-safe table of registered endpoints.

    The DBA user needs at least RELOAD, PROCESS, SUPER, REPLICATION CLIENT
    and REPLICATION SLAVE. The replication user is handed to other
    endpoints when they are pointed at this one.
    """

    def __init__(self, pool_recycle: int = 3600, connect_timeout: int = 5):
        self._instances: Dict[Endpoint, Instance] = {}
        self._lock = threading.Lock()
        self.pool_recycle = pool_recycle
        self.connect_timeout = connect_timeout

    def register(
        self,
        endpoint: Endpoint,
        dba_user: str,
        dba_password: str,
        repl_user: str = "",
        repl_password: str = "",
        params: Optional[Dict[str, str]] = None,
    ) -> None:
        """Register an endpoint. Registering an existing endpoint is a no-op."""
        with self._lock:
            if endpoint in self._instances:
                return
            params = dict(params or {})
            _validate_endpoint(endpoint)
            url = URL.create(
                DRIVER_NAME,
                username=dba_user,
                password=dba_password,
                host=endpoint.host,
                port=endpoint.port,
                query=params,
            )
            engine = sqlalchemy.create_engine(
                url,
                pool_pre_ping=True,
                pool_recycle=self.pool_recycle,
                connect_args={"connect_timeout": self.connect_timeout},
            )
            self._instances[endpoint] = Instance(
                endpoint=endpoint,
                dba_user=dba_user,
                repl_user=repl_user,
                repl_password=repl_password,
                params=params,
                engine=engine,
            )
        logger.info(f"[REGISTRY] Registered {endpoint} (user={dba_user})")

    def unregister(self, endpoint: Endpoint) -> None:
        """Forget an endpoint and close its connections."""
        with self._lock:
            instance = self._instances.pop(endpoint, None)
        if instance is not None:
            instance.engine.dispose()
            logger.info(f"[REGISTRY] Unregistered {endpoint}")

    def endpoints(self) -> List[Endpoint]:
        with self._lock:
            return list(self._instances)

    def __contains__(self, endpoint: Endpoint) -> bool:
        with self._lock:
            return endpoint in self._instances

    def _get(self, endpoint: Endpoint) -> Instance:
        with self._lock:
            instance = self._instances.get(endpoint)
        if instance is None:
            raise InstanceNotRegistered(endpoint)
        return instance

    def replication_credentials(self, endpoint: Endpoint) -> Tuple[str, str]:
        instance = self._get(endpoint)
        return instance.repl_user, instance.repl_password

    def check_instance(self, endpoint: Endpoint) -> InstanceStatus:
        """Ping the endpoint."""
        try:
            instance = self._get(endpoint)
        except InstanceNotRegistered:
            return InstanceStatus.unregistered
        try:
            with instance.engine.connect() as conn:
                conn.exec_driver_sql("SELECT 1")
        except SQLAlchemyError as e:
            logger.warning(f"[REGISTRY] Ping failed for {endpoint}: {e}")
            return InstanceStatus.error
        return InstanceStatus.ok

    def is_reachable(self, endpoint: Endpoint) -> bool:
        return self.check_instance(endpoint) == InstanceStatus.ok

    def fetch_rows(self, endpoint: Endpoint, query: str, *args) -> ResultSet:
        """
        Run a read query and return its rows.

        Args:
            endpoint: Registered endpoint
            query: SQL text using the driver's %s placeholders
            args: Positional parameters for the placeholders

        Raises:
            InstanceNotRegistered: endpoint unknown
            QueryError: the driver failed
        """
        instance = self._get(endpoint)
        try:
            with instance.engine.connect() as conn:
                result = conn.exec_driver_sql(query, args) if args else conn.exec_driver_sql(query)
                if not result.returns_rows:
                    return ResultSet(columns=[])
                columns = list(result.keys())
                rows = [tuple(row) for row in result]
        except SQLAlchemyError as e:
            raise QueryError(f"{endpoint}: {query}: {e}") from e
        logger.debug(f"[QUERY] {endpoint} | {query} -> {len(rows)} row(s)")
        return ResultSet(columns=columns, rows=rows)

    def execute(self, endpoint: Endpoint, statement: str, *args) -> None:
        """Run a statement that returns no rows."""
        instance = self._get(endpoint)
        try:
            with instance.engine.connect() as conn:
                if args:
                    conn.exec_driver_sql(statement, args)
                else:
                    conn.exec_driver_sql(statement)
                conn.commit()
        except SQLAlchemyError as e:
            raise QueryError(f"{endpoint}: {statement}: {e}") from e
        logger.info(f"[EXEC] {endpoint} | {statement}")

    def close(self) -> None:
        """Unregister every endpoint."""
        for endpoint in self.endpoints():
            self.unregister(endpoint)
