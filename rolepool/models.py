"""
Backend roles and per-role connection configuration.

A role with no BackendConfig is simply not configured; every consumer
treats that as "absent", never as an error.
"""

from collections.abc import Mapping
from enum import Enum
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Role(str, Enum):
    """Logical backends the manager can pool connections for."""

    METASTORE = "metastore"
    QUERY_SERVER = "query_server"
    ANALYSIS = "analysis"


def resolve_role(role: "Role | str") -> Role:
    """Accept a Role or its string value; unknown values raise ValueError."""
    if isinstance(role, Role):
        return role
    return Role(role)


class BackendConfig(BaseModel):
    """Connection description for one role. Frozen once built."""

    model_config = ConfigDict(frozen=True)

    uri: str = Field(min_length=1)
    connection_properties: Mapping[str, str] = Field(default_factory=dict, validate_default=True)
    init_statement: str | None = None

    @field_validator("connection_properties", mode="after")
    @classmethod
    def _read_only_properties(cls, v: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType(dict(v))

    @field_validator("init_statement", mode="after")
    @classmethod
    def _blank_statement_is_none(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v.strip()

    def __hash__(self) -> int:
        return hash(
            (self.uri, tuple(sorted(self.connection_properties.items())), self.init_statement)
        )


class PoolOptions(BaseModel):
    """Pool tuning shared by every role (passed through to QueuePool)."""

    model_config = ConfigDict(frozen=True)

    pool_size: int = Field(default=8, ge=1)
    max_overflow: int = Field(default=0, ge=-1)
    timeout: float = Field(default=30.0, gt=0)
    recycle: int = -1
    pre_ping: bool = False
    connect_timeout: int = Field(default=10, ge=0)
