"""
Connection and role health checks.

Readiness — can every configured role hand out a working connection?
"""

import logging
from typing import TYPE_CHECKING, Any

from rolepool.models import Role

from .connect import run_statement

if TYPE_CHECKING:
    from .manager import RolePoolManager

_log = logging.getLogger(__name__)


def health_check(conn: Any) -> bool:
    """
    Run SELECT 1 and return True if no exception.
    """
    try:
        run_statement(conn, "SELECT 1")
        return True
    except Exception:
        return False


def check_role(manager: "RolePoolManager", role: Role | str) -> bool:
    """Acquire, ping and release one connection. Unconfigured roles count as healthy."""
    try:
        conn = manager.acquire_connection(role)
    except Exception:
        _log.warning("Health check could not acquire a connection for %s", role, exc_info=True)
        return False
    if conn is None:
        return True
    try:
        return health_check(conn)
    finally:
        conn.close()


def readiness_check(manager: "RolePoolManager") -> tuple[bool, list[str]]:
    """
    Check every configured role.
    Returns (ok, list of failing role names).
    """
    failures = [
        role.value for role in manager.configured_roles() if not check_role(manager, role)
    ]
    return (len(failures) == 0, failures)
