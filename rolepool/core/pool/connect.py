"""
Raw DB-API connection factories for role backends.

The backend is picked from the URI scheme (``postgresql://``, ``mysql://``,
``trino://``, ``hive2://``, ``sqlite://``); JDBC-style ``jdbc:`` prefixes are
accepted.
Drivers are imported when a factory is built so that a missing driver is
reported as a configuration problem instead of failing at import time.
"""

import functools
import importlib
import logging
from collections.abc import Callable, Mapping
from typing import Any

from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import ArgumentError

_log = logging.getLogger(__name__)

_JDBC_PREFIX = "jdbc:"

Opener = Callable[[URL, dict[str, Any], int], Callable[[], Any]]


def parse_uri(uri: str) -> URL:
    """Parse a backend URI into a SQLAlchemy URL; raises ValueError when malformed."""
    raw = uri.strip()
    if raw.lower().startswith(_JDBC_PREFIX):
        raw = raw[len(_JDBC_PREFIX) :]
    try:
        return make_url(raw)
    except ArgumentError as e:
        raise ValueError(f"Could not parse backend URI: {e}") from e


def _compact(**kwargs: Any) -> dict[str, Any]:
    return {k: v for k, v in kwargs.items() if v is not None}


def _query_params(url: URL) -> dict[str, Any]:
    # repeated query keys come back as tuples; last one wins
    return {
        k: (v if isinstance(v, str) else v[-1]) for k, v in url.query.items()
    }


def _open_postgres(url: URL, params: dict[str, Any], connect_timeout: int) -> Callable[[], Any]:
    psycopg = importlib.import_module("psycopg")
    kwargs = _compact(
        host=url.host,
        port=url.port,
        dbname=url.database,
        user=url.username,
        password=url.password,
        connect_timeout=connect_timeout or None,
    )
    kwargs.update(params)
    return functools.partial(psycopg.connect, **kwargs)


def _open_mysql(url: URL, params: dict[str, Any], connect_timeout: int) -> Callable[[], Any]:
    pymysql = importlib.import_module("pymysql")
    kwargs = _compact(
        host=url.host,
        port=url.port,
        database=url.database,
        user=url.username,
        password=url.password,
        connect_timeout=connect_timeout or None,
    )
    kwargs.update(params)
    return functools.partial(pymysql.connect, **kwargs)


def _open_trino(url: URL, params: dict[str, Any], connect_timeout: int) -> Callable[[], Any]:
    trino_dbapi = importlib.import_module("trino.dbapi")
    trino_auth = importlib.import_module("trino.auth")
    catalog, _, schema = (url.database or "").partition("/")
    kwargs = _compact(
        host=url.host,
        port=url.port,
        user=url.username,
        catalog=catalog or None,
        schema=schema or None,
        source="rolepool",
        request_timeout=connect_timeout or None,
    )
    if url.password:
        # Trino only accepts basic auth over HTTPS
        kwargs["auth"] = trino_auth.BasicAuthentication(url.username or "", url.password)
        kwargs["http_scheme"] = "https"
    kwargs.update(params)
    return functools.partial(trino_dbapi.connect, **kwargs)


def _open_sqlite(url: URL, params: dict[str, Any], connect_timeout: int) -> Callable[[], Any]:
    sqlite3 = importlib.import_module("sqlite3")
    kwargs: dict[str, Any] = {"check_same_thread": False}
    if connect_timeout:
        kwargs["timeout"] = float(connect_timeout)
    kwargs.update(params)
    return functools.partial(sqlite3.connect, url.database or ":memory:", **kwargs)


# PyHive takes these as connect() arguments; anything else is Hive session conf
_HIVE_CONNECT_ARGS = frozenset(
    {"auth", "kerberos_service_name", "scheme", "check_hostname", "ssl_cert"}
)


def _open_hive(url: URL, params: dict[str, Any], connect_timeout: int) -> Callable[[], Any]:
    hive = importlib.import_module("pyhive.hive")
    # JDBC style: /db;key=value;key=value
    database, *session = (url.database or "").split(";")
    options = dict(p.split("=", 1) for p in session if "=" in p)
    options.update(params)
    kwargs = _compact(
        host=url.host,
        port=url.port,
        username=url.username,
        password=url.password,
        database=database or None,
    )
    if url.password:
        # PyHive only sends a password with LDAP or CUSTOM auth
        kwargs["auth"] = "LDAP"
    configuration: dict[str, str] = {}
    for key, value in options.items():
        if key in _HIVE_CONNECT_ARGS:
            kwargs[key] = value
        else:
            configuration[key] = value
    if configuration:
        kwargs["configuration"] = configuration
    return functools.partial(hive.connect, **kwargs)


DRIVERS: dict[str, Opener] = {
    "postgresql": _open_postgres,
    "postgres": _open_postgres,
    "mysql": _open_mysql,
    "mariadb": _open_mysql,
    "trino": _open_trino,
    "sqlite": _open_sqlite,
    "hive": _open_hive,
    "hive2": _open_hive,
}

# autocommit-only drivers: rollback() raises, so the pool must not reset on return
NON_TRANSACTIONAL = frozenset({"trino", "hive", "hive2"})


class ConnectionFactory:
    """Opens raw connections for one ``{uri, connection_properties}`` pair.

    URI query parameters and ``connection_properties`` are passed to the
    driver unchanged, properties taking precedence.
    """

    def __init__(
        self,
        uri: str,
        connection_properties: Mapping[str, str] | None = None,
        *,
        connect_timeout: int = 0,
    ) -> None:
        self.url = parse_uri(uri)
        self.backend = self.url.get_backend_name()
        opener = DRIVERS.get(self.backend)
        if opener is None:
            raise ValueError(f"Unsupported backend: {self.backend}")
        params = _query_params(self.url)
        params.update(connection_properties or {})
        self._open = opener(self.url, params, connect_timeout)

    @property
    def transactional(self) -> bool:
        return self.backend not in NON_TRANSACTIONAL

    @property
    def safe_uri(self) -> str:
        return self.url.render_as_string(hide_password=True)

    def connect(self) -> Any:
        conn = self._open()
        _log.debug("Opened new %s connection to %s", self.backend, self.safe_uri)
        return conn


def run_statement(conn: Any, sql: str) -> None:
    """Execute one plain statement (no parameters, results ignored)."""
    cur = conn.cursor()
    try:
        cur.execute(sql)
    finally:
        cur.close()
