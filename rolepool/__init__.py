from rolepool.core.pool import (
    ConnectionAcquisitionError,
    InitStatementError,
    PoolConstructionError,
    PoolError,
    PoolHandle,
    RolePoolManager,
)
from rolepool.models import BackendConfig, PoolOptions, Role

__all__ = [
    "BackendConfig",
    "PoolOptions",
    "Role",
    "RolePoolManager",
    "PoolHandle",
    "PoolError",
    "PoolConstructionError",
    "ConnectionAcquisitionError",
    "InitStatementError",
]
