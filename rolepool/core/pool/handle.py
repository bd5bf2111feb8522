"""
PoolHandle: one SQLAlchemy QueuePool bound to one role's BackendConfig.

Sizing, blocking waits, recycling and return-time rollback are QueuePool's
job; the handle only wires the factory in and translates failures.
"""

import logging
from typing import Any

from sqlalchemy import event
from sqlalchemy.exc import DisconnectionError
from sqlalchemy.pool import PoolProxiedConnection, QueuePool

from rolepool.models import BackendConfig, PoolOptions, Role

from .connect import ConnectionFactory
from .errors import ConnectionAcquisitionError, PoolConstructionError
from .health import health_check

_log = logging.getLogger(__name__)


def _ping_on_checkout(dbapi_connection: Any, connection_record: Any, connection_proxy: Any) -> None:
    # QueuePool discards the connection and retries with a fresh one
    if not health_check(dbapi_connection):
        raise DisconnectionError("connection failed SELECT 1 on checkout")


class PoolHandle:
    """Live pool for a single role. Construction either fully succeeds or raises."""

    def __init__(self, role: Role, config: BackendConfig, options: PoolOptions) -> None:
        self.role = role
        self.config = config
        try:
            self.factory = ConnectionFactory(
                config.uri,
                config.connection_properties,
                connect_timeout=options.connect_timeout,
            )
        except (ValueError, ImportError) as e:
            raise PoolConstructionError(role, f"Invalid backend config: {e}") from e

        pool = QueuePool(
            self.factory.connect,
            pool_size=options.pool_size,
            max_overflow=options.max_overflow,
            timeout=options.timeout,
            recycle=options.recycle,
            reset_on_return="rollback" if self.factory.transactional else None,
            logging_name=role.value,
        )
        if options.pre_ping:
            event.listen(pool, "checkout", _ping_on_checkout)
        self._pool = pool
        _log.info(
            "Created %s pool for %s (size=%s, overflow=%s, timeout=%ss)",
            self.factory.backend,
            role.value,
            options.pool_size,
            options.max_overflow,
            options.timeout,
        )

    def borrow(self) -> PoolProxiedConnection:
        """Check out a connection; ``close()`` on it returns it to this pool."""
        try:
            return self._pool.connect()
        except Exception as e:
            raise ConnectionAcquisitionError(
                self.role, f"Could not borrow a connection: {e}"
            ) from e

    def checked_out(self) -> int:
        return self._pool.checkedout()

    def checked_in(self) -> int:
        return self._pool.checkedin()

    def status(self) -> str:
        return self._pool.status()

    def dispose(self) -> None:
        """Close idle connections. The handle stays usable and reopens on demand."""
        self._pool.dispose()
        _log.info("Disposed idle connections of %s pool", self.role.value)

    def __repr__(self) -> str:
        return f"<PoolHandle role={self.role.value} uri={self.factory.safe_uri}>"
