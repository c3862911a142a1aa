"""Configuration management service"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from ..api.exceptions import ConfigError
from ..constants import (
    PROJECT_CONFIG_FILE,
    ENV_API_TOKEN,
    ENV_API_KEY,
    ENV_EMAIL,
    ENV_ACCOUNT_ID,
    ENV_API_BASE_URL,
)
from ..models.config import Config

logger = logging.getLogger(__name__)

# Environment variable -> cloudflare config key
ENV_OVERRIDES = {
    ENV_API_TOKEN: "api_token",
    ENV_API_KEY: "api_key",
    ENV_EMAIL: "email",
    ENV_ACCOUNT_ID: "account_id",
    ENV_API_BASE_URL: "base_url",
}


class ConfigService:
    """Service for loading pages-deploy configuration"""

    def __init__(self,
                 config_path: Optional[Union[str, Path]] = None,
                 environ: Optional[Dict[str, str]] = None):
        """Initialize config service

        Args:
            config_path: Explicit config file; defaults to
                ``.pages-deploy.yaml`` in the working directory when present
            environ: Mapping read for the CLOUDFLARE_* overrides
                (defaults to os.environ)
        """
        self.config_path = Path(config_path) if config_path else None
        self.environ = os.environ if environ is None else environ
        self._config: Optional[Config] = None

    @property
    def config(self) -> Config:
        """Get current configuration (lazy load)"""
        if self._config is None:
            self.load_config()
        return self._config

    def _resolve_path(self) -> Optional[Path]:
        if self.config_path is not None:
            if not self.config_path.exists():
                raise ConfigError(f"Configuration file not found: {self.config_path}")
            return self.config_path

        default = Path.cwd() / PROJECT_CONFIG_FILE
        return default if default.exists() else None

    def _read_file(self, path: Path) -> Dict[str, Any]:
        with open(path, 'r', encoding='utf-8') as f:
            content = f.read()

        # Expand $VAR / ${VAR} from the process environment
        content = os.path.expandvars(content)

        try:
            data = yaml.safe_load(content) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Configuration in {path} must be a mapping")
        return data

    def load_config(self) -> Config:
        """Load configuration from file and environment

        Returns:
            Loaded configuration
        """
        path = self._resolve_path()
        data: Dict[str, Any] = self._read_file(path) if path else {}
        if path:
            logger.debug("Loaded configuration from %s", path)

        cloudflare = dict(data.get("cloudflare") or {})
        for env_name, key in ENV_OVERRIDES.items():
            value = self.environ.get(env_name)
            if value:
                cloudflare[key] = value
        data["cloudflare"] = cloudflare

        try:
            self._config = Config.from_dict(data)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

        return self._config

    def save_config(self, path: Union[str, Path], config: Optional[Config] = None) -> Path:
        """Write configuration (without secrets) to a YAML file"""
        config = config or self.config
        path = Path(path)

        with open(path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)

        return path
