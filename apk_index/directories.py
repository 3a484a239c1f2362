"""Local directory layout for installed packages."""

import logging
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class PathConfig:
    """Package-management directories under the user's home."""

    path_dir: Path
    usr_dir: Path
    bin_dir: Path
    lib_dir: Path
    share_dir: Path

    @classmethod
    def for_home(cls, home_dir: Path) -> "PathConfig":
        path_dir = home_dir / ".path"
        usr_dir = path_dir / "usr"
        return cls(
            path_dir=path_dir,
            usr_dir=usr_dir,
            bin_dir=usr_dir / "bin",
            lib_dir=usr_dir / "lib",
            share_dir=usr_dir / "share",
        )


def initialize_directories(home_dir: Path | None = None) -> PathConfig:
    """Create the package directory tree. Safe to call repeatedly.

    Args:
        home_dir: Base directory, defaults to the user's home

    Returns:
        PathConfig describing the created directories
    """
    paths = PathConfig.for_home(home_dir or Path.home())

    logger.info(f"Initializing package directories under {paths.path_dir}")
    for directory in (paths.bin_dir, paths.lib_dir, paths.share_dir):
        directory.mkdir(parents=True, exist_ok=True)

    logger.info("Created all package directories")
    return paths
