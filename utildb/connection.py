"""Connection factory: resolves a connection type to role settings and opens sessions.

Connection types are usually given as the string tokens used throughout the
calling applications:

  - 'ADMIN' - administration apps only
  - 'RW'    - SELECT/INSERT/UPDATE/DELETE performed during normal end-user
              requests, with just enough privileges for those tables
  - 'RO'    - SELECTs on slowly-changing, replicated tables, served from the
              geographically local database

Any of these may be prefixed with 'MULTI_' to allow several statements in one
execute call. That is off by default since single statements are safer against
SQL injection.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Union

import psycopg2
from psycopg2.extras import LoggingConnection, LoggingCursor, RealDictCursor

from .config import DatabaseConfig, DriverDebugLevel, RoleConfig
from .errors import MultipleStatementsError

driver_logger = logging.getLogger("utildb.driver")

MULTI_PREFIX = "MULTI_"


class Role(Enum):
    ADMIN = "ADMIN"
    RW = "RW"
    RO = "RO"


@dataclass(frozen=True)
class ConnectionType:
    role: Role = Role.RO
    multi_statements: bool = False


def parse_connection_type(connection_type: Union[str, ConnectionType]) -> ConnectionType:
    """Parse a legacy token such as 'RW' or 'MULTI_ADMIN'.

    Anything other than ADMIN or RW falls back to the read-only role.
    """
    if isinstance(connection_type, ConnectionType):
        return connection_type

    token = connection_type or ""
    multi = token.startswith(MULTI_PREFIX)
    if multi:
        token = token[len(MULTI_PREFIX):]

    if token == Role.ADMIN.value:
        role = Role.ADMIN
    elif token == Role.RW.value:
        role = Role.RW
    else:
        role = Role.RO
    return ConnectionType(role=role, multi_statements=multi)


def role_config(config: DatabaseConfig, role: Role) -> RoleConfig:
    return {Role.ADMIN: config.admin, Role.RW: config.rw, Role.RO: config.ro}[role]


def get_database_name(config: DatabaseConfig, connection_type) -> Optional[str]:
    return role_config(config, parse_connection_type(connection_type).role).database


@dataclass(frozen=True)
class ConnectionOptions:
    host: Optional[str]
    port: Optional[int]
    user: Optional[str]
    password: Optional[str]
    dbname: Optional[str]
    debug: DriverDebugLevel = DriverDebugLevel.OFF
    multi_statements: bool = False

    def connect_kwargs(self) -> dict:
        """Keyword arguments for psycopg2.connect(), unset fields omitted."""
        kwargs = {
            "host": self.host,
            "port": self.port,
            "user": self.user,
            "password": self.password,
            "dbname": self.dbname,
        }
        return {k: v for k, v in kwargs.items() if v is not None}


# --- Statement counting ---

_DOLLAR_TAG = re.compile(r"\$[A-Za-z_][A-Za-z0-9_]*\$|\$\$")


def _is_escape_string(sql: str, i: int) -> bool:
    """True when the quote at i opens an E'...' string, where backslash escapes."""
    if sql[i] != "'" or i == 0 or sql[i - 1] not in "Ee":
        return False
    return i == 1 or not (sql[i - 2].isalnum() or sql[i - 2] == "_")


def _literal_end(sql: str, start: int, backslash: bool = False) -> int:
    """Index just past the quoted literal or identifier opened at start."""
    quote = sql[start]
    i, n = start + 1, len(sql)
    while i < n:
        ch = sql[i]
        if backslash and ch == "\\":
            i += 2
            continue
        if ch == quote:
            # doubled quote is an escaped quote
            if i + 1 < n and sql[i + 1] == quote:
                i += 2
                continue
            return i + 1
        i += 1
    return n


def count_statements(sql: str) -> int:
    """Count non-empty statements, ignoring semicolons in literals and comments."""
    count = 0
    pending = False
    i, n = 0, len(sql)
    while i < n:
        ch = sql[i]
        if ch in ("'", '"'):
            i = _literal_end(sql, i, backslash=_is_escape_string(sql, i))
            pending = True
            continue
        if sql.startswith("--", i):
            end = sql.find("\n", i)
            i = n if end == -1 else end + 1
            continue
        if sql.startswith("/*", i):
            end = sql.find("*/", i + 2)
            i = n if end == -1 else end + 2
            continue
        if ch == "$":
            match = _DOLLAR_TAG.match(sql, i)
            if match:
                end = sql.find(match.group(0), match.end())
                i = n if end == -1 else end + len(match.group(0))
                pending = True
                continue
        if ch == ";":
            if pending:
                count += 1
            pending = False
        elif not ch.isspace():
            pending = True
        i += 1
    if pending:
        count += 1
    return count


class LoggingRealDictCursor(LoggingCursor, RealDictCursor):
    """RealDictCursor whose executed queries go through LoggingConnection.log."""
    pass


class ConnectionHandle:
    """One database session, created unopened and owned by a single call."""

    def __init__(self, options: ConnectionOptions):
        self.options = options
        self.connection = None

    def connect(self):
        if self.options.debug.traces_queries:
            conn = psycopg2.connect(connection_factory=LoggingConnection, **self.options.connect_kwargs())
            conn.initialize(driver_logger)
        else:
            conn = psycopg2.connect(**self.options.connect_kwargs())
        conn.autocommit = True
        self.connection = conn
        return conn

    def execute(self, sql: str, values: Optional[Sequence] = None):
        """Run one statement and return the RealDictCursor holding its result."""
        if not self.options.multi_statements and count_statements(sql) > 1:
            raise MultipleStatementsError(
                "Multiple statements are not allowed on this connection; "
                "use a MULTI_ connection type"
            )
        factory = LoggingRealDictCursor if self.options.debug.traces_queries else RealDictCursor
        cur = self.connection.cursor(cursor_factory=factory)
        cur.execute(sql, values)
        return cur

    def fetch_all(self, cur) -> list:
        if cur.description is None:
            return []
        rows = cur.fetchall()
        if self.options.debug.traces_rows:
            for row in rows:
                driver_logger.debug("row: %s", dict(row))
        return rows

    def fetch_one(self, cur):
        if cur.description is None:
            return None
        row = cur.fetchone()
        if row is not None and self.options.debug.traces_rows:
            driver_logger.debug("row: %s", dict(row))
        return row

    def close(self):
        if self.connection is not None:
            self.connection.close()
            self.connection = None


def create_connection(
    config: DatabaseConfig,
    connection_type,
    driver_debug_level: DriverDebugLevel = DriverDebugLevel.OFF,
) -> ConnectionHandle:
    """Build an unopened handle for the role named by ``connection_type``."""
    ctype = parse_connection_type(connection_type)
    settings = role_config(config, ctype.role)
    options = ConnectionOptions(
        host=settings.host,
        port=settings.port,
        user=settings.username,
        password=settings.password,
        dbname=settings.database,
        debug=driver_debug_level,
        multi_statements=ctype.multi_statements,
    )
    return ConnectionHandle(options)
