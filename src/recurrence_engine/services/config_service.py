"""Configuration service for the recurrence engine.

Loads and saves ``config.json`` in the platform config directory, creates a
default configuration on first run and builds the storage strategy for the
configured database.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from platformdirs import user_config_dir, user_data_dir

from recurrence_engine.adapters.sqlite.connection import get_connection
from recurrence_engine.adapters.sqlite.user_manager import (
    get_or_create_local_user,
    get_system_timezone,
)
from recurrence_engine.models.config_models import AppConfig, StorageConfig
from recurrence_engine.models.storage_strategy import (
    LocalStorageStrategy,
    StorageStrategyContext,
)


class ConfigService:
    """Service for managing application configuration."""

    def __init__(self):
        """Initialize the config service."""
        self.config_dir = Path(user_config_dir("recurrence_engine"))
        self.config_path = self.config_dir / "config.json"
        self.data_dir = Path(user_data_dir("recurrence_engine"))

        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.data_dir.mkdir(parents=True, exist_ok=True)

        self._config: AppConfig | None = None
        self._storage_strategy_context: StorageStrategyContext | None = None

    @property
    def config(self) -> AppConfig:
        """Get or load the current configuration."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    def load_config(self) -> AppConfig:
        """Load configuration from disk, creating defaults on first run.

        Raises:
            RuntimeError: If the config file exists but cannot be parsed
        """
        if self._config is not None:
            return self._config

        try:
            with open(self.config_path, encoding="utf-8") as f:
                self._config = AppConfig.model_validate_json(f.read())
        except FileNotFoundError:
            self._config = self.create_default_config()
        except Exception as e:
            raise RuntimeError(f"Failed to load config: {e}") from e

        return self._config

    def save_config(self) -> None:
        """Save the current configuration to disk with owner-only permissions."""
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "w", encoding="utf-8") as f:
                f.write(self.config.model_dump_json(indent=4))
            self.config_path.chmod(0o600)
        except OSError as e:
            raise RuntimeError(f"Failed to save config: {e}") from e

    def create_default_config(self) -> AppConfig:
        """Create and persist the default configuration."""
        self._config = AppConfig(
            storage=StorageConfig(database_path=str(self.data_dir / "recurrence.db")),
            default_timezone=get_system_timezone(),
        )
        self.save_config()
        return self._config

    def reset_config(self) -> AppConfig:
        """Discard the stored configuration and recreate the defaults."""
        self._config = None
        self._storage_strategy_context = None
        if self.config_path.exists():
            self.config_path.unlink()
        return self.create_default_config()

    @property
    def storage_strategy_context(self) -> StorageStrategyContext:
        """StorageStrategyContext for the configured database."""
        if self._storage_strategy_context is None:
            strategy = LocalStorageStrategy(db_path=self.config.storage.database_path)
            self._storage_strategy_context = StorageStrategyContext(strategy)
        return self._storage_strategy_context

    def get_owner_id(self) -> str:
        """Return the local owner ID, creating the owner profile on first use."""
        if self.config.owner_id is None:
            connection = get_connection(self.config.storage.database_path)
            self.config.owner_id = get_or_create_local_user(connection)
            self.save_config()
        return self.config.owner_id


@lru_cache(maxsize=1)
def get_config_service() -> ConfigService:
    """Get a cached ConfigService instance."""
    return ConfigService()