"""Unit tests for core.pool.health role checks."""

from unittest.mock import MagicMock

from rolepool.core.pool import ConnectionAcquisitionError, check_role, readiness_check
from rolepool.core.pool.manager import RolePoolManager
from rolepool.models import BackendConfig, PoolOptions, Role
from tests.utils.fake_driver import fake_driver


def test_check_role_absent_is_healthy() -> None:
    assert check_role(RolePoolManager({}), Role.ANALYSIS) is True


def test_check_role_releases_connection() -> None:
    with fake_driver() as driver:
        manager = RolePoolManager({Role.METASTORE: BackendConfig(uri="fake://h/db")})
        assert check_role(manager, Role.METASTORE) is True
        assert manager.stats()["metastore"]["checked_out"] == 0
        assert driver.connections[0].statements == ["SELECT 1"]


def test_check_role_acquire_failure() -> None:
    manager = MagicMock(spec=RolePoolManager)
    manager.acquire_connection.side_effect = ConnectionAcquisitionError(Role.METASTORE, "down")
    assert check_role(manager, Role.METASTORE) is False


def test_readiness_check_lists_failing_roles() -> None:
    with fake_driver() as driver:
        manager = RolePoolManager(
            {
                Role.METASTORE: BackendConfig(uri="fake://meta/db"),
                Role.ANALYSIS: BackendConfig(uri="fake://analysis/db", init_statement="USE broken"),
            },
            PoolOptions(timeout=0.2),
        )
        driver.failing.add("USE broken")
        ok, failures = readiness_check(manager)
        assert ok is False
        assert failures == ["analysis"]

        driver.failing.clear()
        assert readiness_check(manager) == (True, [])


def test_readiness_check_nothing_configured() -> None:
    assert readiness_check(RolePoolManager({})) == (True, [])
