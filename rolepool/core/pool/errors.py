"""Errors raised by role pools. Absent configuration is never one of them."""

from rolepool.models import Role


class PoolError(Exception):
    """Base class; ``role`` names the backend the failure belongs to."""

    def __init__(self, role: Role, message: str) -> None:
        super().__init__(f"[{role.value}] {message}")
        self.role = role


class PoolConstructionError(PoolError):
    """A configured role's BackendConfig could not be turned into a pool."""


class ConnectionAcquisitionError(PoolError):
    """Borrow failed: pool exhausted, timed out, or backend unreachable."""


class InitStatementError(PoolError):
    """The post-connect statement failed; the connection was already released."""

    def __init__(self, role: Role, statement: str, message: str) -> None:
        super().__init__(role, message)
        self.statement = statement
