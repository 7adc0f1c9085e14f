from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Settings:
    """Offer runtime configuration, read from environment variables."""

    log_level: str = "INFO"
    # Where offers come from: "memory", "file" or "databricks"
    offer_catalog_adapter: str = "memory"
    offer_catalog_path: Optional[str] = None
    # Engine tunables
    free_item_grant_policy: str = "PER_THRESHOLD"
    money_decimal_places: int = 2
    # Databricks SQL warehouse holding the admin subsystem's offer tables
    databricks_server_hostname: Optional[str] = None
    databricks_http_path: Optional[str] = None
    databricks_access_token: Optional[str] = None
    databricks_catalog: Optional[str] = None
    databricks_schema: Optional[str] = None
    databricks_table_prefix: str = ""
    databricks_max_retries: int = 3
    databricks_retry_delay_seconds: float = 0.5

    @classmethod
    def from_env(cls) -> "Settings":
        env = os.environ
        return cls(
            log_level=env.get("LOG_LEVEL", cls.log_level),
            offer_catalog_adapter=env.get("OFFER_CATALOG_ADAPTER", cls.offer_catalog_adapter).lower(),
            offer_catalog_path=env.get("OFFER_CATALOG_PATH") or None,
            free_item_grant_policy=env.get("FREE_ITEM_GRANT_POLICY", cls.free_item_grant_policy).upper(),
            money_decimal_places=int(env.get("MONEY_DECIMAL_PLACES", cls.money_decimal_places)),
            databricks_server_hostname=env.get("DATABRICKS_SERVER_HOSTNAME") or None,
            databricks_http_path=env.get("DATABRICKS_HTTP_PATH") or None,
            databricks_access_token=env.get("DATABRICKS_ACCESS_TOKEN") or None,
            databricks_catalog=env.get("DATABRICKS_CATALOG") or None,
            databricks_schema=env.get("DATABRICKS_SCHEMA") or None,
            databricks_table_prefix=env.get("DATABRICKS_TABLE_PREFIX", cls.databricks_table_prefix),
            databricks_max_retries=int(env.get("DATABRICKS_MAX_RETRIES", cls.databricks_max_retries)),
            databricks_retry_delay_seconds=float(
                env.get("DATABRICKS_RETRY_DELAY_SECONDS", cls.databricks_retry_delay_seconds)
            ),
        )


def get_settings(_cache: dict[str, Settings] = {}) -> Settings:
    """Return the process-wide Settings, read from the environment on first use."""

    if "settings" not in _cache:
        _cache["settings"] = Settings.from_env()
    return _cache["settings"]
