"""Configuration for the migration service."""

import os
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from ..exceptions import ConfigurationError

DEFAULT_DATABASE_URL = "sqlite:///wcart_migrator.db"


def _int_setting(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e


def _float_setting(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = environ.get(name)
    if raw in (None, ""):
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e


@dataclass
class MigrationSettings:
    """Settings passed explicitly into the processor, publisher and API."""

    # Destination
    wcart_api_url: str = ""
    wcart_api_key: Optional[str] = None

    # Persistence
    database_url: str = DEFAULT_DATABASE_URL

    # Execution options
    batch_size: int = 50
    publish_timeout: float = 30.0  # Per published item
    connect_timeout: float = 5.0  # Connection tests
    log_page_size: int = 100
    max_workers: int = 4
    dry_run: bool = False

    # Source
    shopify_store: Optional[str] = None
    shopify_access_token: Optional[str] = None
    shopify_api_version: str = "2024-01"

    def __post_init__(self):
        if self.batch_size < 1:
            raise ConfigurationError(f"batch_size must be at least 1, got {self.batch_size}")
        if self.max_workers < 1:
            raise ConfigurationError(f"max_workers must be at least 1, got {self.max_workers}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation. Secrets are redacted."""
        return {
            "wcart_api_url": self.wcart_api_url,
            "wcart_api_key": "***" if self.wcart_api_key else None,
            "database_url": self.database_url,
            "batch_size": self.batch_size,
            "publish_timeout": self.publish_timeout,
            "connect_timeout": self.connect_timeout,
            "log_page_size": self.log_page_size,
            "max_workers": self.max_workers,
            "dry_run": self.dry_run,
            "shopify_store": self.shopify_store,
            "shopify_access_token": "***" if self.shopify_access_token else None,
            "shopify_api_version": self.shopify_api_version,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MigrationSettings":
        """Create from dictionary representation."""
        return cls(
            wcart_api_url=data.get("wcart_api_url", ""),
            wcart_api_key=data.get("wcart_api_key"),
            database_url=data.get("database_url", DEFAULT_DATABASE_URL),
            batch_size=data.get("batch_size", 50),
            publish_timeout=data.get("publish_timeout", 30.0),
            connect_timeout=data.get("connect_timeout", 5.0),
            log_page_size=data.get("log_page_size", 100),
            max_workers=data.get("max_workers", 4),
            dry_run=data.get("dry_run", False),
            shopify_store=data.get("shopify_store"),
            shopify_access_token=data.get("shopify_access_token"),
            shopify_api_version=data.get("shopify_api_version", "2024-01"),
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "MigrationSettings":
        """Build settings from environment variables."""
        env = os.environ if environ is None else environ
        return cls(
            wcart_api_url=env.get("WCART_API_URL", ""),
            wcart_api_key=env.get("WCART_API_KEY"),
            database_url=env.get("DATABASE_URL", DEFAULT_DATABASE_URL),
            batch_size=_int_setting(env, "BATCH_SIZE", 50),
            publish_timeout=_float_setting(env, "WCART_TIMEOUT", 30.0),
            max_workers=_int_setting(env, "MIGRATION_WORKERS", 4),
            dry_run=env.get("MIGRATION_DRY_RUN", "").lower() in ("1", "true", "yes"),
            shopify_store=env.get("SHOPIFY_STORE"),
            shopify_access_token=env.get("SHOPIFY_ACCESS_TOKEN"),
            shopify_api_version=env.get("SHOPIFY_API_VERSION", "2024-01"),
        )
