"""
Per-role connection pools over SQLAlchemy's QueuePool.

Backends are described by BackendConfig (uri, connection_properties,
init_statement); drivers are psycopg, pymysql, trino or sqlite3 by URI scheme.
"""

from .connect import DRIVERS, ConnectionFactory, parse_uri, run_statement
from .errors import (
    ConnectionAcquisitionError,
    InitStatementError,
    PoolConstructionError,
    PoolError,
)
from .handle import PoolHandle
from .health import check_role, health_check, readiness_check
from .manager import RolePoolManager

__all__ = [
    "DRIVERS",
    "ConnectionFactory",
    "parse_uri",
    "run_statement",
    "PoolError",
    "PoolConstructionError",
    "ConnectionAcquisitionError",
    "InitStatementError",
    "PoolHandle",
    "health_check",
    "check_role",
    "readiness_check",
    "RolePoolManager",
]
