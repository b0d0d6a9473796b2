"""Application settings from environment variables.

Centralized environment variable parsing and validation.
"""

import logging
import os
from dataclasses import dataclass, field

from clustrz.utils.shell import join_path

logger = logging.getLogger(__name__)


@dataclass
class Settings:
    """Application settings from environment.

    Handles parsing, validation, and defaults for all env vars.
    """

    # Remote layout
    base_dir: str = field(default="~/.clustrz/")

    # Transport
    connect_timeout: int = field(default=0)  # seconds, 0 = client default
    jmx_timeout: int = field(default=10)

    # Dispatch
    max_concurrency: int = field(default=0)  # 0 = one task per node

    # OOME watcher
    oome_log: str = field(default="")
    restart_command: str = field(default="")

    # Logging
    log_level: str = field(default="INFO")
    log_colors: bool = field(default=True)

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from CLUSTRZ_* environment variables.

        Returns:
            Settings instance with values from environment
        """
        return cls(
            base_dir=os.getenv("CLUSTRZ_HOME", "~/.clustrz/"),
            connect_timeout=cls._get_int("CLUSTRZ_CONNECT_TIMEOUT", 0),
            jmx_timeout=cls._get_int("CLUSTRZ_JMX_TIMEOUT", 10),
            max_concurrency=cls._get_int("CLUSTRZ_MAX_CONCURRENCY", 0),
            oome_log=os.getenv("CLUSTRZ_OOME_LOG", ""),
            restart_command=os.getenv("CLUSTRZ_RESTART_COMMAND", ""),
            log_level=os.getenv("CLUSTRZ_LOG_LEVEL", "INFO").upper(),
            log_colors=cls._get_bool("CLUSTRZ_LOG_COLORS", True),
        )

    @property
    def kvs_dir(self) -> str:
        """Remote directory holding one file per key."""
        return join_path(self.base_dir, "kvs")

    @property
    def node_log(self) -> str:
        """Remote append-only activity log."""
        return join_path(self.base_dir, "node.log")

    @staticmethod
    def _get_int(key: str, default: int) -> int:
        """Get a non-negative integer from environment.

        Args:
            key: Environment variable key
            default: Default value if not set

        Returns:
            Integer value from environment or default
        """
        value = os.getenv(key)
        if value is None:
            return default

        try:
            parsed = int(value)
        except ValueError:
            logger.warning("Invalid int for %s: %s, using default %d", key, value, default)
            return default

        if parsed < 0:
            logger.warning("%s must be >= 0, got %d, using default %d", key, parsed, default)
            return default
        return parsed

    @staticmethod
    def _get_bool(key: str, default: bool) -> bool:
        """Get boolean from environment.

        Args:
            key: Environment variable key
            default: Default value if not set

        Returns:
            Boolean value from environment or default
        """
        value = os.getenv(key)
        if value is None:
            return default
        return value.lower() in ("1", "true", "yes", "on")
