from pydantic_settings import BaseSettings, SettingsConfigDict

from rolepool.models import BackendConfig, PoolOptions, Role


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        env_nested_delimiter="__",
        extra="ignore",
    )

    LOG_LEVEL: str = "INFO"

    # Backends; leave unset to disable a role.
    # e.g. METASTORE__URI=mysql://hive:secret@db:3306/metastore
    #      METASTORE__CONNECTION_PROPERTIES='{"charset": "utf8mb4"}'
    #      METASTORE__INIT_STATEMENT="SET SESSION sql_mode='ANSI_QUOTES'"
    METASTORE: BackendConfig | None = None
    QUERY_SERVER: BackendConfig | None = None
    ANALYSIS: BackendConfig | None = None

    # Pool tuning, shared by all roles
    POOL_SIZE: int = 8
    POOL_MAX_OVERFLOW: int = 0
    POOL_TIMEOUT: float = 30.0  # seconds to wait for a free connection
    POOL_RECYCLE: int = -1  # seconds; -1 = never recycle
    POOL_PRE_PING: bool = False
    CONNECT_TIMEOUT: int = 10

    @property
    def backends(self) -> dict[Role, BackendConfig | None]:
        return {
            Role.METASTORE: self.METASTORE,
            Role.QUERY_SERVER: self.QUERY_SERVER,
            Role.ANALYSIS: self.ANALYSIS,
        }

    @property
    def pool_options(self) -> PoolOptions:
        return PoolOptions(
            pool_size=self.POOL_SIZE,
            max_overflow=self.POOL_MAX_OVERFLOW,
            timeout=self.POOL_TIMEOUT,
            recycle=self.POOL_RECYCLE,
            pre_ping=self.POOL_PRE_PING,
            connect_timeout=self.CONNECT_TIMEOUT,
        )


settings = Settings()  # type: ignore
