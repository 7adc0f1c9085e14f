from __future__ import annotations

import logging
import time
from typing import Any, Callable, Optional, TypeVar

from databricks import sql as databricks_sql

from offer_runtime.domain.common.ids import CorrelationId
from offer_runtime.settings import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DatabricksSqlClient:
    """Read-only client for the offer catalog tables in a Databricks SQL warehouse."""

    def __init__(
        self,
        settings: Settings,
        correlation_id: Optional[CorrelationId] = None,
        max_retries: int = 3,
        initial_delay: float = 0.5,
    ) -> None:
        self.settings = settings
        self.correlation_id = correlation_id
        self.max_retries = max_retries
        self.initial_delay = initial_delay
        self._connection: Optional[Any] = None

    def _log_extra(self) -> dict[str, str]:
        if self.correlation_id:
            return {"correlation_id": self.correlation_id.value}
        return {}

    def _connect(self) -> Any:
        if self._connection is not None:
            return self._connection

        missing = [
            name
            for name, value in (
                ("DATABRICKS_SERVER_HOSTNAME", self.settings.databricks_server_hostname),
                ("DATABRICKS_HTTP_PATH", self.settings.databricks_http_path),
                ("DATABRICKS_ACCESS_TOKEN", self.settings.databricks_access_token),
            )
            if not value
        ]
        if missing:
            raise ValueError(f"Databricks connection requires {', '.join(missing)}")

        logger.info(
            f"Connecting to Databricks server: {self.settings.databricks_server_hostname}",
            extra=self._log_extra(),
        )
        connection_params: dict[str, Any] = {
            "server_hostname": self.settings.databricks_server_hostname,
            "http_path": self.settings.databricks_http_path,
            "access_token": self.settings.databricks_access_token,
        }
        if self.settings.databricks_catalog:
            connection_params["catalog"] = self.settings.databricks_catalog
        if self.settings.databricks_schema:
            connection_params["schema"] = self.settings.databricks_schema

        self._connection = databricks_sql.connect(**connection_params)
        return self._connection

    def _with_retries(self, operation: Callable[[], T]) -> T:
        """Run operation, retrying transient failures with exponential backoff.

        max_retries counts total attempts; anything below 1 still runs once.
        """
        attempts = max(self.max_retries, 1)
        attempt = 1
        while True:
            try:
                return operation()
            except Exception as e:
                if attempt >= attempts:
                    logger.error(f"Query failed after {attempt} attempts: {e}", extra=self._log_extra())
                    raise
                delay = self.initial_delay * (2 ** (attempt - 1))
                logger.warning(
                    f"Query failed (attempt {attempt}/{attempts}), retrying in {delay}s: {e}",
                    extra=self._log_extra(),
                )
                # Drop a possibly broken connection before the next attempt
                self.close()
                time.sleep(delay)
                attempt += 1

    def query(self, sql: str, params: Optional[list[Any]] = None) -> list[dict[str, Any]]:
        """
        Execute a SELECT and return rows as dictionaries.

        Args:
            sql: SQL with ? placeholders
            params: Positional parameters

        Returns:
            List of dictionaries, one per row
        """
        logger.debug(f"Executing query: {sql[:200]}...", extra=self._log_extra())

        def _execute() -> list[dict[str, Any]]:
            cursor = self._connect().cursor()
            try:
                if params:
                    cursor.execute(sql, parameters=params)
                else:
                    cursor.execute(sql)
                columns = [desc[0] for desc in cursor.description]
                return [dict(zip(columns, row)) for row in cursor.fetchall()]
            finally:
                cursor.close()

        return self._with_retries(_execute)

    def close(self) -> None:
        if self._connection is None:
            return
        try:
            self._connection.close()
        except Exception as e:
            logger.warning(f"Error closing connection: {e}", extra=self._log_extra())
        finally:
            self._connection = None

    def __enter__(self) -> "DatabricksSqlClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False
