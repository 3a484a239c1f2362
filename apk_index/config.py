"""Configuration and logging setup for the APK package index."""

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path


def setup_logging(level: str | None = None) -> None:
    """Set up logging for command line runs.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to INFO.
    """
    log_level = level or os.getenv(ENV_LOG_LEVEL, "INFO")

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Retry chatter from urllib3 is noise for a CLI
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def get_env_var(name: str, default: str | None = None, required: bool = False) -> str:
    """Get environment variable with optional default and validation.

    Args:
        name: Environment variable name
        default: Default value if not set
        required: Whether the variable is required

    Returns:
        Environment variable value

    Raises:
        ValueError: If required variable is not set
    """
    value = os.getenv(name, default)

    if required and not value:
        raise ValueError(f"Required environment variable {name} is not set")

    return value or ""


# Environment variable names
ENV_REGISTRY_PATH = "APK_INDEX_REGISTRY"
ENV_SERVERS_PATH = "APK_INDEX_SERVERS"
ENV_HOME = "APK_INDEX_HOME"
ENV_TIMEOUT = "APK_INDEX_TIMEOUT"
ENV_LOG_LEVEL = "LOG_LEVEL"

DEFAULT_REGISTRY_PATH = "packages.json"
DEFAULT_SERVERS_PATH = "servers.json"
DEFAULT_TIMEOUT = 30


@dataclass
class Settings:
    """Runtime settings resolved from the environment."""

    registry_path: Path
    servers_path: Path
    home_dir: Path
    timeout: int = DEFAULT_TIMEOUT

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables, falling back to defaults.

        Raises:
            ValueError: If the timeout is not a positive integer
        """
        raw_timeout = get_env_var(ENV_TIMEOUT, str(DEFAULT_TIMEOUT))
        try:
            timeout = int(raw_timeout)
        except ValueError:
            raise ValueError(f"{ENV_TIMEOUT} must be an integer, got {raw_timeout!r}") from None
        if timeout <= 0:
            raise ValueError(f"{ENV_TIMEOUT} must be positive, got {timeout}")

        home = get_env_var(ENV_HOME) or str(Path.home())

        return cls(
            registry_path=Path(get_env_var(ENV_REGISTRY_PATH, DEFAULT_REGISTRY_PATH)),
            servers_path=Path(get_env_var(ENV_SERVERS_PATH, DEFAULT_SERVERS_PATH)),
            home_dir=Path(home),
            timeout=timeout,
        )

    @property
    def downloads_dir(self) -> Path:
        return self.home_dir / ".path" / "downloads"
