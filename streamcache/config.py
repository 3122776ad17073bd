"""
Configuration Loader - YAML settings and environment overrides for the cache

Example config.yaml:

    cache:
      enabled: true
      base_dir: ~/.cache/streamcache
      image_capacity: 256
    logging:
      level: INFO
      file: null
"""
import logging
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from platformdirs import user_cache_dir

from .cache import WebApiCache
from .memory_tier import DEFAULT_CAPACITY

logger = logging.getLogger(__name__)

APP_NAME = "streamcache"

ENV_CACHE_DIR = "STREAMCACHE_DIR"
ENV_CACHE_DISABLED = "STREAMCACHE_DISABLED"

_TRUTHY = {"1", "true", "yes", "on"}


class CacheConfig:
    """Configuration manager for the cache"""

    def __init__(self, config_path: Optional[str] = None):
        """
        Args:
            config_path: Path to a YAML file. None means defaults only; an
                explicit path that does not exist is an error.
        """
        self.config_path = config_path
        self._base_dir_override: Optional[Path] = None
        self.config = self._load_config()
        self._validate_config()

    @classmethod
    def from_dict(cls, data: dict) -> "CacheConfig":
        instance = cls.__new__(cls)
        instance.config_path = None
        instance._base_dir_override = None
        instance.config = dict(data or {})
        instance._validate_config()
        return instance

    def _load_config(self) -> dict:
        """Load configuration from YAML file"""
        if self.config_path is None:
            return {}
        if not os.path.exists(self.config_path):
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        with open(self.config_path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f) or {}

    def _validate_config(self):
        """Validate section shapes and value ranges"""
        if not isinstance(self.config, dict):
            raise ValueError("Configuration root must be a mapping")
        for section in ('cache', 'logging'):
            value = self.config.get(section)
            if value is not None and not isinstance(value, dict):
                raise ValueError(f"Configuration section '{section}' must be a mapping")

        capacity = self.get('cache', 'image_capacity', DEFAULT_CAPACITY)
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
            raise ValueError(f"cache.image_capacity must be a positive integer, got {capacity!r}")

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """
        Get configuration value

        Args:
            section: Configuration section
            key: Configuration key
            default: Default value if not found

        Returns:
            Configuration value or default
        """
        values = self.config.get(section) or {}
        return values.get(key, default)

    @property
    def enabled(self) -> bool:
        """Whether the disk tier is on (env STREAMCACHE_DISABLED wins)"""
        if os.getenv(ENV_CACHE_DISABLED, '').strip().lower() in _TRUTHY:
            return False
        return bool(self.get('cache', 'enabled', True))

    def override_base_dir(self, path) -> None:
        """Pin the cache root, taking precedence over env and file"""
        self._base_dir_override = Path(os.path.expanduser(str(path)))

    @property
    def base_dir(self) -> Path:
        """Configured cache root (override > env STREAMCACHE_DIR > file > platform default)"""
        if self._base_dir_override is not None:
            return self._base_dir_override
        raw = os.getenv(ENV_CACHE_DIR) or self.get('cache', 'base_dir')
        if raw:
            return Path(os.path.expanduser(str(raw)))
        return Path(user_cache_dir(APP_NAME, APP_NAME))

    @property
    def image_capacity(self) -> int:
        return int(self.get('cache', 'image_capacity', DEFAULT_CAPACITY))

    @property
    def log_level(self) -> str:
        return str(self.get('logging', 'level', 'INFO')).upper()

    @property
    def log_file(self) -> Optional[str]:
        return self.get('logging', 'file')

    def resolved_base_dir(self) -> Optional[Path]:
        """Cache root to hand to the disk tier, or None when disabled"""
        return self.base_dir if self.enabled else None


def build_cache(config: Optional[CacheConfig] = None, **overrides) -> WebApiCache:
    """
    Construct the process-wide cache from configuration.

    Call once at startup and pass the result to the components that need it.
    Keyword overrides are forwarded to WebApiCache (e.g. decoder=...).
    """
    config = config or CacheConfig()
    base = config.resolved_base_dir()
    if base is None:
        logger.info("Disk cache disabled by configuration")
    return WebApiCache(base, image_capacity=config.image_capacity, **overrides)
