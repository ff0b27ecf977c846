"""Query helpers: one connection and one parameterized statement per call.

Each executor opens its own connection, runs a single statement, closes the
connection on both the success and error path, then delivers exactly one
outcome through the returned Future (and the optional ``callback(error,
result)``). Without a configuration every public method returns None and does
no I/O.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

from .config import DatabaseConfig, DriverDebugLevel, HelperDebugLevel, coerce_config
from .connection import ConnectionHandle, create_connection, get_database_name
from .errors import DatabaseError, InsertResultError

logger = logging.getLogger("utildb")

Callback = Callable[[Optional[BaseException], Any], None]


@dataclass
class WriteResult:
    """Raw outcome of an INSERT/UPDATE/DELETE."""

    affected_rows: int
    status: Optional[str] = None
    returned: Optional[dict] = None


class Database:
    """Database access helper bound to one DatabaseConfig."""

    def __init__(self, config=None, max_workers: Optional[int] = None):
        self.config: Optional[DatabaseConfig] = None
        self.driver_debug_level = DriverDebugLevel.OFF
        self.helper_debug_level = HelperDebugLevel.OFF
        self._pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="utildb")
        if config is not None:
            self.configure(config)

    # --- Configuration ---

    def configure(self, config) -> None:
        """Replace the whole configuration, including both debug levels."""
        self.config = coerce_config(config)
        self.set_driver_debug_level(self.config.driver_debug_level)
        self.set_helper_debug_level(self.config.helper_debug_level)

    def reset(self) -> None:
        self.config = None
        self.driver_debug_level = DriverDebugLevel.OFF
        self.helper_debug_level = HelperDebugLevel.OFF

    def set_driver_debug_level(self, level) -> None:
        self.driver_debug_level = DriverDebugLevel.parse(level)

    def set_helper_debug_level(self, level) -> None:
        self.helper_debug_level = HelperDebugLevel.parse(level)

    @property
    def tracing(self) -> bool:
        return self.helper_debug_level is HelperDebugLevel.ON

    def shutdown(self, wait: bool = True) -> None:
        self._pool.shutdown(wait=wait)

    # --- Connections ---

    def create_connection(self, connection_type) -> Optional[ConnectionHandle]:
        if self.config is None:
            return None
        return create_connection(self.config, connection_type, self.driver_debug_level)

    def get_database_name(self, connection_type) -> Optional[str]:
        if self.config is None:
            return None
        return get_database_name(self.config, connection_type)

    # --- Executors ---

    def get_count(self, connection_type, table_name: str, callback: Optional[Callback] = None) -> Optional[Future]:
        """SELECT COUNT(*) from a trusted table name (interpolated, not bound)."""
        sql = f"SELECT COUNT(*) AS count FROM {table_name}"

        def handle(conn, cur):
            return conn.fetch_one(cur)["count"]

        return self._submit("get_count", connection_type, sql, None, handle, callback)

    def do_parameterized_query(
        self, connection_type, sql: str, values: Optional[Sequence] = None,
        callback: Optional[Callback] = None,
    ) -> Optional[Future]:
        """Run any statement with %s placeholders and return all rows."""
        return self._submit(
            "do_parameterized_query", connection_type, sql, values,
            lambda conn, cur: conn.fetch_all(cur), callback,
        )

    def do_parameterized_query_single(
        self, connection_type, sql: str, values: Optional[Sequence] = None,
        callback: Optional[Callback] = None,
    ) -> Optional[Future]:
        """Return the first row, or None when nothing matched.

        There is no check that the query matches at most one row.
        """
        def handle(conn, cur):
            rows = conn.fetch_all(cur)
            return rows[0] if rows else None

        return self._submit("do_parameterized_query_single", connection_type, sql, values, handle, callback)

    def do_parameterized_insert(
        self, connection_type, sql: str, values: Optional[Sequence] = None,
        callback: Optional[Callback] = None, id_column: str = "id",
    ) -> Optional[Future]:
        """Run an INSERT ... RETURNING <id_column> and return the generated id.

        If the statement returns no row holding ``id_column`` the outcome is an
        InsertResultError carrying the raw WriteResult.
        """
        def handle(conn, cur):
            row = conn.fetch_one(cur)
            result = _write_result(cur, row)
            if row is None or id_column not in row:
                raise InsertResultError(result, id_column)
            return row[id_column]

        return self._submit("do_parameterized_insert", connection_type, sql, values, handle, callback)

    def do_parameterized_update(
        self, connection_type, sql: str, values: Optional[Sequence] = None,
        callback: Optional[Callback] = None,
    ) -> Optional[Future]:
        def handle(conn, cur):
            return _write_result(cur, conn.fetch_one(cur))

        return self._submit("do_parameterized_update", connection_type, sql, values, handle, callback)

    def do_parameterized_delete(
        self, connection_type, sql: str, id, callback: Optional[Callback] = None,
    ) -> Optional[Future]:
        """Run a DELETE whose only placeholder is bound to ``id``."""
        def handle(conn, cur):
            return _write_result(cur, conn.fetch_one(cur))

        return self._submit(
            "do_parameterized_delete", connection_type, sql, [id], handle, callback,
            trace=f"ID: {id}",
        )

    # --- Internals ---

    def _submit(self, name, connection_type, sql, values, handle, callback, trace=None) -> Optional[Future]:
        if self.config is None:
            return None

        if self.tracing:
            logger.info("%s: SQL: %s %s", name, sql, trace or f"Values: {values}")

        # Settings are read now so later reconfiguration does not affect this call
        settings = (self.config, self.driver_debug_level)
        try:
            future = self._pool.submit(self._run, name, settings, connection_type, sql, values, handle)
        except RuntimeError as e:
            # pool already shut down
            future = Future()
            future.set_exception(DatabaseError(f"{name}: {e}"))
        if callback is not None:
            future.add_done_callback(lambda f: _deliver(f, callback))
        return future

    def _run(self, name, settings, connection_type, sql, values, handle):
        conn: Optional[ConnectionHandle] = None
        try:
            conn = create_connection(settings[0], connection_type, settings[1])
            conn.connect()
            cur = conn.execute(sql, values)
            return handle(conn, cur)
        except Exception as e:
            if self.tracing:
                logger.info("%s: ERROR: %s", name, e)
            raise
        finally:
            if conn is not None:
                conn.close()


def _write_result(cur, row) -> WriteResult:
    return WriteResult(
        affected_rows=cur.rowcount,
        status=getattr(cur, "statusmessage", None),
        returned=dict(row) if row is not None else None,
    )


def _deliver(future: Future, callback: Callback) -> None:
    error = future.exception()
    if error is not None:
        callback(error, None)
    else:
        callback(None, future.result())
