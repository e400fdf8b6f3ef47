"""
Configuration management for the Notion memo service.

Sources, lowest to highest precedence:
  1. Built-in defaults
  2. config.json in the working directory (optional)
  3. Environment variables (a .env file is loaded first)
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Load environment variables from .env file
env_path = Path(__file__).parent / ".env"
load_dotenv(env_path)

DEFAULT_CONFIG_FILE = "config.json"

MEMO_BACKENDS = ("notion", "stub")


class ConfigError(Exception):
    """Configuration is missing or invalid. Fatal at startup."""
    pass


def load_local_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Read config.json if present.

    A file that cannot be parsed is logged and ignored.
    """
    config_path = path or Path.cwd() / DEFAULT_CONFIG_FILE
    if not config_path.exists():
        return {}

    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.error(f"Failed to parse config file {config_path}: {e}")
        return {}

    if not isinstance(data, dict):
        logger.error(f"Ignoring config file {config_path}: top level is not an object")
        return {}
    return data


@dataclass(frozen=True)
class Config:
    """Immutable service configuration, resolved once at startup."""

    # HTTP
    port: int = 3000
    environment: str = "development"
    log_level: str = "INFO"

    # Notion
    notion_api_key: str = ""
    database_id: str = ""
    tag_property: str = "Tags"
    content_property: str = "Content"
    notion_base_url: str = "https://api.notion.com/v1"
    notion_version: str = "2022-06-28"
    notion_timeout_s: float = 30.0

    # Repository
    memo_backend: str = "notion"
    operation_timeout_s: float = 60.0
    default_limit: int = 50
    block_fetch_concurrency: int = 1

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        config_path: Optional[Path] = None,
    ) -> "Config":
        """
        Resolve configuration from defaults, config.json and environment.

        Args:
            environ: Environment mapping (defaults to os.environ)
            config_path: Explicit config.json path (defaults to ./config.json)
        """
        env = os.environ if environ is None else environ
        local = load_local_config(config_path)
        defaults = cls()

        def pick(env_key: str, local_key: str, default: Any) -> Any:
            value = env.get(env_key)
            if value not in (None, ""):
                return value
            value = local.get(local_key)
            if value not in (None, ""):
                return value
            return default

        def as_int(name: str, value: Any) -> int:
            try:
                return int(value)
            except (TypeError, ValueError):
                raise ConfigError(f"{name} must be an integer, got {value!r}")

        def as_float(name: str, value: Any) -> float:
            try:
                return float(value)
            except (TypeError, ValueError):
                raise ConfigError(f"{name} must be a number, got {value!r}")

        return cls(
            port=as_int("PORT", pick("PORT", "port", defaults.port)),
            environment=str(pick("ENVIRONMENT", "environment", defaults.environment)),
            log_level=str(pick("LOG_LEVEL", "logLevel", defaults.log_level)).upper(),
            notion_api_key=str(pick("NOTION_API_KEY", "notionApiKey", defaults.notion_api_key)),
            database_id=str(pick("NOTION_DATABASE_ID", "databaseId", defaults.database_id)),
            tag_property=str(pick("NOTION_TAG_PROPERTY", "tagProperty", defaults.tag_property)),
            content_property=str(
                pick("NOTION_CONTENT_PROPERTY", "contentProperty", defaults.content_property)
            ),
            notion_base_url=str(pick("NOTION_BASE_URL", "notionBaseUrl", defaults.notion_base_url)),
            notion_version=str(pick("NOTION_VERSION", "notionVersion", defaults.notion_version)),
            notion_timeout_s=as_float(
                "NOTION_TIMEOUT_S",
                pick("NOTION_TIMEOUT_S", "notionTimeoutS", defaults.notion_timeout_s),
            ),
            memo_backend=str(pick("MEMO_BACKEND", "memoBackend", defaults.memo_backend)).lower(),
            operation_timeout_s=as_float(
                "MEMO_OPERATION_TIMEOUT_S",
                pick("MEMO_OPERATION_TIMEOUT_S", "operationTimeoutS", defaults.operation_timeout_s),
            ),
            default_limit=as_int(
                "MEMO_DEFAULT_LIMIT",
                pick("MEMO_DEFAULT_LIMIT", "defaultLimit", defaults.default_limit),
            ),
            block_fetch_concurrency=as_int(
                "MEMO_BLOCK_FETCH_CONCURRENCY",
                pick(
                    "MEMO_BLOCK_FETCH_CONCURRENCY",
                    "blockFetchConcurrency",
                    defaults.block_fetch_concurrency,
                ),
            ),
        )

    def missing(self) -> List[str]:
        """Names of required settings that are not set."""
        if self.memo_backend != "notion":
            return []
        required = {
            "NOTION_API_KEY": self.notion_api_key,
            "NOTION_DATABASE_ID": self.database_id,
        }
        return [key for key, value in required.items() if not value]

    def validate(self) -> None:
        """
        Check that the configuration can start the service.

        Raises:
            ConfigError: Invalid values or missing credentials
        """
        if self.memo_backend not in MEMO_BACKENDS:
            raise ConfigError(
                f"MEMO_BACKEND must be one of {', '.join(MEMO_BACKENDS)}, "
                f"got {self.memo_backend!r}"
            )
        if not 1 <= self.default_limit <= 100:
            raise ConfigError("MEMO_DEFAULT_LIMIT must be between 1 and 100")
        if self.block_fetch_concurrency < 1:
            raise ConfigError("MEMO_BLOCK_FETCH_CONCURRENCY must be at least 1")
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ConfigError(f"LOG_LEVEL {self.log_level!r} is not a logging level")

        missing = self.missing()
        if missing:
            raise ConfigError(
                f"Missing required configuration: {', '.join(missing)}. "
                f"Set them as environment variables or in {DEFAULT_CONFIG_FILE}"
            )


def get_config() -> Config:
    """Get configuration from the current environment."""
    return Config.from_env()


if __name__ == "__main__":
    # Test configuration loading
    config = get_config()
    print("Configuration loaded:")
    print(f"  Notion API Key: {'✓ Set' if config.notion_api_key else '✗ Missing'}")
    print(f"  Database ID: {config.database_id or '✗ Missing'}")
    print(f"  Tag Property: {config.tag_property}")
    print(f"  Content Property: {config.content_property}")
    print(f"  Backend: {config.memo_backend}")
    print(f"  Port: {config.port}")
    print(f"  Environment: {config.environment}")
    try:
        config.validate()
        print("\n  Validation: ✓ PASSED")
    except ConfigError as e:
        print(f"\n  Validation: ✗ FAILED ({e})")
