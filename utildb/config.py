"""Connection settings for the three database roles and the debug levels."""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional

from psycopg2.extensions import parse_dsn


class DriverDebugLevel(Enum):
    """How much psycopg2-level tracing to write to the ``utildb.driver`` logger."""

    OFF = "OFF"
    QUERIES = "QUERIES"
    ROWS = "ROWS"
    QUERIES_AND_ROWS = "QUERIES_AND_ROWS"
    ON = "ON"

    @property
    def traces_queries(self) -> bool:
        return self in (DriverDebugLevel.QUERIES, DriverDebugLevel.QUERIES_AND_ROWS, DriverDebugLevel.ON)

    @property
    def traces_rows(self) -> bool:
        return self in (DriverDebugLevel.ROWS, DriverDebugLevel.QUERIES_AND_ROWS, DriverDebugLevel.ON)

    @classmethod
    def parse(cls, level) -> "DriverDebugLevel":
        return _parse_level(cls, level)


class HelperDebugLevel(Enum):
    """Whether executors trace statements and errors to the ``utildb`` logger."""

    OFF = "OFF"
    ON = "ON"

    @classmethod
    def parse(cls, level) -> "HelperDebugLevel":
        return _parse_level(cls, level)


def _parse_level(enum_cls, level):
    # Unknown names resolve to OFF
    if isinstance(level, enum_cls):
        return level
    if level is None or level is False:
        return enum_cls.OFF
    if level is True:
        return enum_cls.ON
    try:
        return enum_cls[str(level).strip().upper()]
    except KeyError:
        return enum_cls.OFF


@dataclass
class RoleConfig:
    """Connection settings for one role. Fields are not validated."""

    host: Optional[str] = None
    port: Optional[int] = None
    username: Optional[str] = None
    password: Optional[str] = None
    database: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "RoleConfig":
        data = data or {}
        return cls(
            host=data.get("host"),
            port=data.get("port"),
            username=data.get("username", data.get("user")),
            password=data.get("password"),
            database=data.get("database", data.get("dbname")),
        )

    @classmethod
    def from_url(cls, url: str) -> "RoleConfig":
        """Build from a libpq connection string or URL."""
        parts = parse_dsn(url)
        port = parts.get("port")
        return cls(
            host=parts.get("host"),
            port=int(port) if port else None,
            username=parts.get("user"),
            password=parts.get("password"),
            database=parts.get("dbname"),
        )


# Mapping keys accepted for each role, current name first
ROLE_KEYS = {
    "admin": ("admin", "mysql_admin"),
    "rw": ("rw", "mysql_rw"),
    "ro": ("ro", "mysql_ro"),
}
DRIVER_DEBUG_KEYS = ("driver_debug_level", "mySqlDebugLevel")
HELPER_DEBUG_KEYS = ("helper_debug_level", "utilDbDebugLevel")


def _first_present(data: Mapping[str, Any], keys):
    for key in keys:
        if key in data:
            return data[key]
    return None


@dataclass
class DatabaseConfig:
    """Settings for the admin, read-write and read-only roles.

    Built once at application start and handed to a ``Database``; replaced
    wholesale rather than edited field by field.
    """

    admin: RoleConfig = field(default_factory=RoleConfig)
    rw: RoleConfig = field(default_factory=RoleConfig)
    ro: RoleConfig = field(default_factory=RoleConfig)
    driver_debug_level: DriverDebugLevel = DriverDebugLevel.OFF
    helper_debug_level: HelperDebugLevel = HelperDebugLevel.OFF

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "DatabaseConfig":
        """Build from a plain dict.

        Accepts ``admin``/``rw``/``ro`` role keys as well as the older
        ``mysql_admin``/``mysql_rw``/``mysql_ro`` names, and the debug keys
        ``driver_debug_level``/``helper_debug_level`` or
        ``mySqlDebugLevel``/``utilDbDebugLevel``.
        """
        roles = {
            name: RoleConfig.from_mapping(_first_present(data, keys))
            for name, keys in ROLE_KEYS.items()
        }
        return cls(
            **roles,
            driver_debug_level=DriverDebugLevel.parse(_first_present(data, DRIVER_DEBUG_KEYS)),
            helper_debug_level=HelperDebugLevel.parse(_first_present(data, HELPER_DEBUG_KEYS)),
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "DatabaseConfig":
        """Build from DATABASE_URL_ADMIN / _RW / _RO, falling back to DATABASE_URL."""
        environ = os.environ if environ is None else environ
        default_url = environ.get("DATABASE_URL")

        roles = {}
        for name in ROLE_KEYS:
            url = environ.get(f"DATABASE_URL_{name.upper()}") or default_url
            if not url:
                raise ValueError("DATABASE_URL must be set")
            roles[name] = RoleConfig.from_url(url)

        return cls(
            **roles,
            driver_debug_level=DriverDebugLevel.parse(environ.get("UTILDB_DRIVER_DEBUG")),
            helper_debug_level=HelperDebugLevel.parse(environ.get("UTILDB_HELPER_DEBUG")),
        )


def coerce_config(config) -> DatabaseConfig:
    """Accept either a DatabaseConfig or a mapping in the legacy shape."""
    if isinstance(config, DatabaseConfig):
        return config
    return DatabaseConfig.from_mapping(config)
