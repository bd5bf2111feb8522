"""
Per-role connection pools.

One PoolHandle per configured role, built lazily on first use (or eagerly
by ``init()``) and never replaced afterwards. Pass the manager to whatever
needs connections; it holds no process-wide state.
"""

import contextlib
import logging
import threading
from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING, Any

from sqlalchemy.pool import PoolProxiedConnection

from rolepool.models import BackendConfig, PoolOptions, Role, resolve_role

from .connect import run_statement
from .errors import InitStatementError
from .handle import PoolHandle

if TYPE_CHECKING:
    from rolepool.core.config import Settings

_log = logging.getLogger(__name__)


class RolePoolManager:
    """Lazy, construct-once pools keyed by Role."""

    def __init__(
        self,
        backends: Mapping[Role | str, BackendConfig | None],
        options: PoolOptions | None = None,
    ) -> None:
        self._configs: dict[Role, BackendConfig] = {}
        for role, config in backends.items():
            if config is not None:
                self._configs[resolve_role(role)] = config
        self._options = options or PoolOptions()
        self._pools: dict[Role, PoolHandle] = {}
        self._locks: dict[Role, threading.Lock] = {role: threading.Lock() for role in Role}

    @classmethod
    def from_settings(cls, settings: "Settings | None" = None) -> "RolePoolManager":
        if settings is None:
            from rolepool.core.config import settings
        return cls(settings.backends, settings.pool_options)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def options(self) -> PoolOptions:
        return self._options

    def configured_roles(self) -> list[Role]:
        return [role for role in Role if role in self._configs]

    def is_configured(self, role: Role | str) -> bool:
        return resolve_role(role) in self._configs

    def get_config(self, role: Role | str) -> BackendConfig | None:
        return self._configs.get(resolve_role(role))

    # ------------------------------------------------------------------
    # Pools
    # ------------------------------------------------------------------

    def init(self) -> None:
        """Build the pool of every configured role now; raises PoolConstructionError."""
        for role in self.configured_roles():
            self.get_pool(role)

    def get_pool(self, role: Role | str) -> PoolHandle | None:
        """Return the role's pool, building it on first call; None when not configured."""
        r = resolve_role(role)
        config = self._configs.get(r)
        if config is None:
            return None
        handle = self._pools.get(r)
        if handle is not None:
            return handle
        with self._locks[r]:
            handle = self._pools.get(r)
            if handle is None:
                handle = PoolHandle(r, config, self._options)
                self._pools[r] = handle
        return handle

    def acquire_connection(self, role: Role | str) -> PoolProxiedConnection | None:
        """
        Borrow a connection for *role* and run its init statement on it.

        Returns None when the role is not configured. The caller owns the
        connection and must ``close()`` it to hand it back to the pool.
        Raises ConnectionAcquisitionError or InitStatementError.

        The wait for a free connection is bounded by the pool-wide
        ``PoolOptions.timeout`` (``POOL_TIMEOUT``); there is no per-call
        deadline.
        """
        r = resolve_role(role)
        handle = self.get_pool(r)
        if handle is None:
            return None
        conn = handle.borrow()
        statement = handle.config.init_statement
        if statement is None:
            return conn
        try:
            run_statement(conn, statement)
        except Exception as e:
            _log.warning("Init statement failed for %s: %s", r.value, e)
            self._release_quiet(conn)
            raise InitStatementError(
                r, statement, f"Init statement {statement!r} failed: {e}"
            ) from e
        except BaseException:
            self._release_quiet(conn)
            raise
        return conn

    @contextlib.contextmanager
    def connection(self, role: Role | str) -> Iterator[PoolProxiedConnection | None]:
        """``with manager.connection(role) as conn:`` — released on exit; None if not configured."""
        conn = self.acquire_connection(role)
        try:
            yield conn
        finally:
            if conn is not None:
                conn.close()

    def dispose(self, role: Role | str | None = None) -> None:
        """Close idle pooled connections. ``None`` = every built pool."""
        if role is not None:
            handle = self._pools.get(resolve_role(role))
            handles = [handle] if handle is not None else []
        else:
            handles = list(self._pools.values())
        for h in handles:
            h.dispose()

    def stats(self) -> dict[str, dict[str, Any]]:
        """Return per-role pool statistics for monitoring."""
        out: dict[str, dict[str, Any]] = {}
        for role in Role:
            handle = self._pools.get(role)
            out[role.value] = {
                "configured": role in self._configs,
                "initialized": handle is not None,
                "checked_out": handle.checked_out() if handle is not None else 0,
                "checked_in": handle.checked_in() if handle is not None else 0,
            }
        return out

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _release_quiet(conn: PoolProxiedConnection) -> None:
        try:
            conn.close()
        except Exception:
            _log.exception("Could not return connection to pool")
