"""
Configuration management for the guest agent.

Precedence: env vars > .env file > config.yaml > defaults

Config file: /etc/guest-agent/config.yaml (override with GUEST_AGENT_CONFIG)
"""

import logging
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = Path("/etc/guest-agent/config.yaml")

# Known config keys that can be set via `guestagent config set`
CONFIG_KEYS = {
    "oci_config_base_path", "guest_hook_path", "log_level", "log_format", "debug",
}


def get_config_path() -> Path:
    """Get the config.yaml path, honouring GUEST_AGENT_CONFIG."""
    raw = os.environ.get("GUEST_AGENT_CONFIG", "")
    if raw:
        return Path(raw).expanduser()
    return DEFAULT_CONFIG_FILE


def _load_yaml_config(config_file: Optional[Path] = None) -> dict[str, Any]:
    """Load config.yaml. Missing or malformed files yield an empty dict."""
    config_file = config_file or get_config_path()
    if not config_file.exists():
        return {}
    try:
        with open(config_file) as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            logger.warning(f"config.yaml is not a dict, ignoring: {config_file}")
            return {}
        return data
    except Exception as e:
        logger.warning(f"Error loading config.yaml: {e}")
        return {}


def save_yaml_config(data: dict[str, Any], config_file: Optional[Path] = None) -> Path:
    """Write config values to config.yaml."""
    config_file = config_file or get_config_path()
    config_file.parent.mkdir(parents=True, exist_ok=True)
    with open(config_file, "w") as f:
        yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
    return config_file


class Settings(BaseSettings):
    """Agent configuration. Precedence: env vars > .env > config.yaml > defaults."""

    # OCI bookkeeping
    oci_config_base_path: Path = Field(
        default=Path("/run/libcontainer"),
        description="Directory holding <container-id>/config.json",
    )
    guest_hook_path: Optional[Path] = Field(
        default=None,
        description="Root of guest hook directories (<path>/<hook-type>/*). Unset disables guest hooks",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string",
    )

    debug: bool = Field(default=False, description="Enable debug mode")

    model_config = {
        "env_prefix": "",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @model_validator(mode="before")
    @classmethod
    def _inject_yaml_config(cls, data: Any) -> Any:
        """Inject config.yaml values as fallbacks below env vars and .env."""
        if not isinstance(data, dict):
            data = {}

        yaml_config = _load_yaml_config()

        for key, value in yaml_config.items():
            if key not in data or data[key] is None:
                env_val = os.environ.get(key.upper()) or os.environ.get(key)
                if env_val is None:
                    data[key] = value

        return data

    @property
    def guest_hooks_enabled(self) -> bool:
        """Whether a guest hook root is configured."""
        return self.guest_hook_path is not None


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get the global settings instance."""
    return settings


def reload_settings() -> Settings:
    """Reload settings from environment."""
    global settings
    settings = Settings()
    return settings
