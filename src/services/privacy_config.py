"""
Privacy configuration loader.

Loads the email privacy config from:
    $PRIVACY_CONFIG_PATH
    $XDG_CONFIG_HOME/stella2211-google-calendar-mcp/config.json
    ~/.config/stella2211-google-calendar-mcp/config.json
(first match wins).

The config is cached in memory with a TTL so repeated lookups don't hit the
filesystem. A missing or broken file never raises: the default config is
returned instead.
"""

import asyncio
import json
import logging
import os
import time
from pathlib import Path
from typing import Any, Mapping, Optional

from domain.models import (
    ConfigLoadResult,
    PrivacyConfig,
    SOURCE_DEFAULT,
    SOURCE_FILE,
    default_privacy_config,
)

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = 'stella2211-google-calendar-mcp'
CONFIG_FILE_NAME = 'config.json'

CONFIG_PATH_ENV = 'PRIVACY_CONFIG_PATH'
CONFIG_HOME_ENV = 'XDG_CONFIG_HOME'

DEFAULT_CACHE_TTL_SECONDS = 60.0


def _parse_cache_ttl(value: Optional[str]) -> float:
    """
    Parse the cache TTL from an environment value.

    Args:
        value: Raw PRIVACY_CONFIG_CACHE_TTL value (None if unset)

    Returns:
        float: TTL in seconds, DEFAULT_CACHE_TTL_SECONDS if unset or invalid
    """
    if value is None or not value.strip():
        return DEFAULT_CACHE_TTL_SECONDS

    try:
        ttl = float(value)
    except ValueError:
        ttl = None

    # Rejects NaN as well as negatives
    if ttl is None or not ttl >= 0:
        logger.warning(
            f"Invalid PRIVACY_CONFIG_CACHE_TTL={value!r}, "
            f"using {DEFAULT_CACHE_TTL_SECONDS:g}s"
        )
        return DEFAULT_CACHE_TTL_SECONDS

    return ttl


# Cache TTL in seconds (default: 1 minute)
# After this time, the config file is re-read on next request
CACHE_TTL_SECONDS = _parse_cache_ttl(os.environ.get('PRIVACY_CONFIG_CACHE_TTL'))


def get_privacy_config_path(environ: Optional[Mapping[str, str]] = None) -> str:
    """
    Get the privacy config file path.

    Priority: PRIVACY_CONFIG_PATH > XDG_CONFIG_HOME > ~/.config

    Args:
        environ: Environment mapping (default: os.environ)

    Returns:
        str: Absolute path of the config file (symlinks are not followed)
    """
    env = os.environ if environ is None else environ

    override_path = env.get(CONFIG_PATH_ENV)
    if override_path:
        return str(Path(override_path).expanduser().absolute())

    config_home = env.get(CONFIG_HOME_ENV)
    config_dir = Path(config_home) if config_home else Path.home() / '.config'
    return str(config_dir / CONFIG_DIR_NAME / CONFIG_FILE_NAME)


def validate_config(parsed: Any) -> PrivacyConfig:
    """
    Validate and normalize a parsed JSON value into a PrivacyConfig.

    Well-typed fields override the defaults; wrong-typed fields and
    non-string mapping values are dropped. Unknown fields are ignored.

    Args:
        parsed: Any value produced by json.loads()

    Returns:
        PrivacyConfig with lowercase email_mappings keys
    """
    config = default_privacy_config()

    if not isinstance(parsed, dict):
        return config

    version = parsed.get('version')
    # Only integral numbers; bool is an int subclass
    if isinstance(version, int) and not isinstance(version, bool):
        config.version = version
    elif isinstance(version, float) and version.is_integer():
        config.version = int(version)

    mappings = parsed.get('emailMappings')
    if isinstance(mappings, dict):
        config.email_mappings = {
            str(email).lower(): name
            for email, name in mappings.items()
            if isinstance(name, str)
        }

    calendar_id = parsed.get('defaultCalendarId')
    if isinstance(calendar_id, str) and calendar_id:
        config.default_calendar_id = calendar_id

    return config


class PrivacyConfigLoader:
    """
    Cached loader for the privacy config file.

    The config is re-read when the cache is empty, invalidated, or older
    than the TTL. A process-wide instance is available via get_instance();
    tests construct their own loaders or call reset_instance().
    """

    _instance: Optional['PrivacyConfigLoader'] = None

    def __init__(
        self,
        config_path: Optional[str] = None,
        cache_ttl: float = CACHE_TTL_SECONDS,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the loader.

        Args:
            config_path: Config file path (default: resolved from environment)
            cache_ttl: Seconds a loaded config stays fresh
            logger: Logger for diagnostics (pass a silenced logger to suppress them)
        """
        self._config_path = config_path or get_privacy_config_path()
        self._cache_ttl = cache_ttl
        self._logger = logger or logging.getLogger(__name__)
        self._cached: Optional[ConfigLoadResult] = None
        self._last_load_time = 0.0

    @classmethod
    def get_instance(cls) -> 'PrivacyConfigLoader':
        """Get the process-wide loader, creating it on first use."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Drop the process-wide loader (for testing)."""
        cls._instance = None

    def load(self) -> ConfigLoadResult:
        """
        Load config with caching and fallback to defaults.

        Returns:
            ConfigLoadResult (never raises)
        """
        if self._cached is not None:
            age_seconds = time.time() - self._last_load_time
            if age_seconds < self._cache_ttl:
                return self._cached
            self._logger.info(
                f"Privacy config cache expired (age: {int(age_seconds)}s >= "
                f"TTL: {self._cache_ttl}s), reloading..."
            )

        result = self._read_config()

        self._cached = result
        self._last_load_time = time.time()
        return result

    def load_config(self) -> PrivacyConfig:
        """Load config, returning defaults if the file is missing or invalid."""
        return self.load().config

    async def aload_config(self) -> PrivacyConfig:
        """
        Load config without blocking the event loop.

        Overlapping calls while the cache is stale may each read the file.
        """
        return await asyncio.to_thread(self.load_config)

    def invalidate_cache(self) -> None:
        """Force the next load to re-read the file."""
        self._cached = None
        self._last_load_time = 0.0
        self._logger.info("Privacy config cache cleared")

    def get_path(self) -> str:
        return self._config_path

    def cache_age(self) -> Optional[float]:
        """Seconds since the cached config was loaded, or None if nothing is cached."""
        if self._cached is None:
            return None
        return time.time() - self._last_load_time

    def _read_config(self) -> ConfigLoadResult:
        path = self._config_path

        try:
            with open(path, 'r', encoding='utf-8') as f:
                content = f.read()
            parsed = json.loads(content)
        except FileNotFoundError:
            self._logger.info(f"No privacy config at {path}, using defaults")
            return ConfigLoadResult(
                config=default_privacy_config(),
                source=SOURCE_DEFAULT,
                path=path
            )
        except (OSError, UnicodeDecodeError, ValueError) as e:
            self._logger.warning(f"Failed to load privacy config from {path}: {e}")
            return ConfigLoadResult(
                config=default_privacy_config(),
                source=SOURCE_DEFAULT,
                path=path,
                error_message=str(e)
            )

        if not isinstance(parsed, dict):
            message = f"expected a JSON object, got {type(parsed).__name__}"
            self._logger.warning(f"Failed to load privacy config from {path}: {message}")
            return ConfigLoadResult(
                config=default_privacy_config(),
                source=SOURCE_DEFAULT,
                path=path,
                error_message=message
            )

        config = validate_config(parsed)
        self._logger.info(
            f"Loaded privacy config from {path}: "
            f"{len(config.email_mappings)} email mapping(s)"
        )
        return ConfigLoadResult(config=config, source=SOURCE_FILE, path=path)


def load_privacy_config() -> PrivacyConfig:
    """
    Load privacy config through the process-wide loader.

    Returns:
        PrivacyConfig (defaults if the file is missing or invalid)
    """
    return PrivacyConfigLoader.get_instance().load_config()
