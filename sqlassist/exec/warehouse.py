"""
Snowflake access for the remote path.

The connection is process-wide. ``connect()`` may open a browser for SSO and
only returns once that login completes or times out; concurrent callers share
one in-flight attempt. Blocking connector calls run in worker threads; a login
that times out or is cancelled closes any session its worker produces later.
"""
from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Callable, Dict, List, Optional

import snowflake.connector
from snowflake.connector import DictCursor
from snowflake.connector.errors import Error as SnowflakeError

from sqlassist.config import SnowflakeConfig
from sqlassist.errors import RemoteAuthError, RemoteExecutionError, SourceUnavailableError
from sqlassist.store.tabular import ColumnDescriptor, Row

logger = logging.getLogger(__name__)

# Snowflake: authenticated identity differs from the configured user
USER_MISMATCH_ERRNO = 390322

SCHEMA_SQL = (
    "SELECT TABLE_NAME, COLUMN_NAME, DATA_TYPE, IS_NULLABLE "
    "FROM INFORMATION_SCHEMA.COLUMNS "
    "WHERE TABLE_SCHEMA = COALESCE(%s, CURRENT_SCHEMA()) "
    "ORDER BY TABLE_NAME, ORDINAL_POSITION"
)


class _LoginAttempt:
    """One blocking connector call. A session that arrives after the caller gave up is closed."""

    def __init__(self, open_fn: Callable[[], Any]):
        self._open_fn = open_fn
        self._lock = threading.Lock()
        self._abandoned = False
        self._conn: Any = None

    def run(self) -> Any:
        conn = self._open_fn()
        with self._lock:
            if self._abandoned:
                logger.warning("Snowflake login completed after it was abandoned; closing the session")
                conn.close()
                return None
            self._conn = conn
        return conn

    def abandon(self) -> None:
        with self._lock:
            self._abandoned = True
            # handed over by the worker but never received by the caller
            conn, self._conn = self._conn, None
        if conn is not None:
            logger.warning("Closing Snowflake session from an abandoned login")
            conn.close()


class SnowflakeWarehouse:
    def __init__(self, config: Optional[SnowflakeConfig] = None, connect_fn: Optional[Callable[..., Any]] = None):
        self.config = config or SnowflakeConfig()
        self._connect_fn = connect_fn or snowflake.connector.connect
        self._conn: Any = None
        self._attempt: Optional[asyncio.Task] = None
        self.active_warehouse: Optional[str] = None

    @property
    def is_connected(self) -> bool:
        return self._conn is not None and not self._conn.is_closed()

    @property
    def was_connected(self) -> bool:
        return self._conn is not None

    def _open(self) -> Any:
        cfg = self.config
        if not cfg.account or not cfg.user:
            raise RemoteAuthError("Snowflake is not configured", details="set SNOWFLAKE_ACCOUNT and SNOWFLAKE_USER")
        logger.info("Connecting to Snowflake as %s (authenticator=%s)", cfg.user, cfg.authenticator)
        if cfg.authenticator == "externalbrowser":
            logger.info("A browser window should open for authentication")
        try:
            return self._connect_fn(**cfg.connect_params())
        except SnowflakeError as exc:
            errno = getattr(exc, "errno", None)
            if errno == USER_MISMATCH_ERRNO:
                logger.error(
                    "User mismatch: the authenticated user does not match %s. "
                    "Log out from your SSO provider and authenticate as %s.",
                    cfg.user,
                    cfg.user,
                )
                raise RemoteAuthError("Authenticated user does not match the configured user", details=str(exc), errno=errno) from exc
            logger.error("Error connecting to Snowflake: %s", exc)
            raise RemoteAuthError("Failed to connect to Snowflake", details=str(exc), errno=errno) from exc

    async def _establish(self) -> None:
        login = _LoginAttempt(self._open)
        try:
            conn = await asyncio.wait_for(asyncio.to_thread(login.run), timeout=self.config.login_timeout_sec)
        except asyncio.TimeoutError as exc:
            login.abandon()
            logger.error("Snowflake login did not complete within %ss", self.config.login_timeout_sec)
            raise RemoteAuthError("Timed out waiting for Snowflake authentication", details=f"no login within {self.config.login_timeout_sec}s") from exc
        except asyncio.CancelledError:
            login.abandon()
            logger.info("Snowflake login cancelled")
            raise
        self._conn = conn
        logger.info("Connected to Snowflake")
        await self.activate_warehouse()

    async def connect(self) -> "SnowflakeWarehouse":
        if self.is_connected:
            return self
        if self._attempt is None or self._attempt.done():
            self._attempt = asyncio.ensure_future(self._establish())
        # shield: one caller going away must not cancel the shared attempt
        await asyncio.shield(self._attempt)
        return self

    def cancel(self) -> bool:
        if self._attempt is not None and not self._attempt.done():
            return self._attempt.cancel()
        return False

    async def ensure_connected(self) -> None:
        if self._conn is None:
            raise SourceUnavailableError("No remote connection", details="connect to Snowflake first")
        if not self.is_connected:
            logger.info("Connection lost, reconnecting to Snowflake")
            await self.connect()

    def _run(self, sql: str, params: Optional[List[Any]] = None) -> List[Row]:
        cur = self._conn.cursor(DictCursor)
        try:
            if params is None:
                cur.execute(sql)
            else:
                cur.execute(sql, params)
            return list(cur.fetchall())
        except SnowflakeError as exc:
            raise RemoteExecutionError("Query failed on Snowflake", details=str(exc)) from exc
        finally:
            cur.close()

    async def execute(self, sql: str, params: Optional[List[Any]] = None) -> List[Row]:
        if self._conn is None:
            raise SourceUnavailableError("No remote connection", details="connect to Snowflake first")
        return await asyncio.to_thread(self._run, sql, params)

    async def _use(self, name: str) -> str:
        await self.execute(f"USE WAREHOUSE {name}")
        self.active_warehouse = name
        logger.info("Warehouse activated: %s", name)
        return name

    async def activate_warehouse(self) -> Optional[str]:
        try:
            listed = await self.execute("SHOW WAREHOUSES")
            if not listed:
                logger.warning("No warehouses available, continuing without warehouse")
                return None
            first = listed[0].get("name") or listed[0].get("NAME")
            return await self._use(first)
        except RemoteExecutionError as exc:
            logger.warning("Warehouse activation failed (%s); trying fallbacks", exc.details)

        for name in self.config.warehouses:
            try:
                return await self._use(name)
            except RemoteExecutionError as exc:
                logger.debug("USE WAREHOUSE %s failed: %s", name, exc.details)
        logger.warning("Could not activate a warehouse, continuing without warehouse")
        return None

    async def describe_schema(self) -> List[ColumnDescriptor]:
        await self.ensure_connected()
        rows = await self.execute(SCHEMA_SQL, [self.config.schema])
        return [_descriptor(r) for r in rows]

    def close(self) -> None:
        self.cancel()
        if self._conn is not None:
            self._conn.close()
            self._conn = None


def _descriptor(row: Dict[str, Any]) -> ColumnDescriptor:
    def pick(key: str) -> Any:
        return row.get(key, row.get(key.lower()))

    return ColumnDescriptor(
        table_name=str(pick("TABLE_NAME")),
        column_name=str(pick("COLUMN_NAME")),
        data_type=str(pick("DATA_TYPE")),
        nullable=str(pick("IS_NULLABLE")).upper() == "YES",
    )
