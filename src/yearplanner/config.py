"""Configuration management for Year Planner."""

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)

YEARPLANNER_HOME = Path(os.environ.get("YEARPLANNER_HOME", Path.home() / "yearplanner"))
CONFIG_FILE = YEARPLANNER_HOME / "config" / "yearplanner.conf"
STATE_FILE = YEARPLANNER_HOME / "state.json"
DATA_DIR = YEARPLANNER_HOME / "data"

DEFAULT_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:8080",
]


class StorageType(Enum):
    """Backend variant for the storage service."""

    MEMORY = "memory"
    LOCAL = "local"
    OBJECT_STORAGE = "object-storage"

    @classmethod
    def parse(cls, value: str) -> "StorageType":
        """Parse a config value, falling back to memory for unknown names."""
        try:
            return cls(value.strip().lower())
        except ValueError:
            logger.warning(f"Unknown storage type {value!r}, using memory")
            return cls.MEMORY


@dataclass
class Config:
    """Year Planner configuration."""

    storage_type: StorageType = StorageType.MEMORY
    data_dir: str = ""
    bucket_name: str = ""
    object_storage_endpoint: str = ""
    object_storage_region: str = ""
    allowed_origins: list[str] = field(default_factory=lambda: list(DEFAULT_ORIGINS))
    frontend_url: str = ""
    # Sync client settings
    api_base_url: str = ""
    enable_cloud_storage: bool = False
    user_id: str = "year-planner-user"
    # Server settings
    environment: str = "production"
    host: str = "127.0.0.1"
    port: int = 3000

    @property
    def cors_origins(self) -> list[str]:
        """Allow-list for CORS, with the frontend URL appended when set."""
        origins = list(self.allowed_origins)
        if self.frontend_url and self.frontend_url not in origins:
            origins.append(self.frontend_url)
        return origins

    @property
    def resolved_data_dir(self) -> Path:
        if self.data_dir:
            return Path(self.data_dir).expanduser()
        return DATA_DIR

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _strip_value(value: str) -> str:
    """Handle quoted values with inline comments: "value" # comment"""
    if value.startswith('"') or value.startswith("'"):
        quote = value[0]
        end_quote = value.find(quote, 1)
        if end_quote != -1:
            return value[1:end_quote]
        return value[1:]
    # Unquoted: strip inline comments
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def _apply(config: Config, key: str, value: str) -> None:
    match key:
        case "storage_type":
            config.storage_type = StorageType.parse(value)
        case "data_dir":
            config.data_dir = value
        case "bucket_name":
            config.bucket_name = value
        case "object_storage_endpoint":
            config.object_storage_endpoint = value
        case "object_storage_region":
            config.object_storage_region = value
        case "allowed_origins":
            config.allowed_origins = [o.strip() for o in value.split(",") if o.strip()]
        case "frontend_url":
            config.frontend_url = value
        case "api_base_url":
            config.api_base_url = value.rstrip("/")
        case "enable_cloud_storage":
            config.enable_cloud_storage = _parse_bool(value)
        case "user_id":
            config.user_id = value
        case "environment" | "node_env":
            config.environment = value
        case "host":
            config.host = value
        case "port":
            try:
                config.port = int(value)
            except ValueError:
                logger.warning(f"Invalid PORT value {value!r}, keeping {config.port}")


ENV_KEYS = (
    "STORAGE_TYPE",
    "DATA_DIR",
    "BUCKET_NAME",
    "OBJECT_STORAGE_ENDPOINT",
    "FRONTEND_URL",
    "API_BASE_URL",
    "ENABLE_CLOUD_STORAGE",
    "ENVIRONMENT",
    "PORT",
)


def load_config(config_file: Path | None = None) -> Config:
    """Load configuration from yearplanner.conf, then environment overrides."""
    config = Config()
    config_file = config_file or CONFIG_FILE

    if config_file.exists():
        for line in config_file.read_text().splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            if "=" not in line:
                continue

            key, _, value = line.partition("=")
            _apply(config, key.strip().lower(), _strip_value(value.strip()))

    for env_key in ENV_KEYS:
        value = os.environ.get(env_key)
        if value:
            _apply(config, env_key.lower(), value)

    return config
