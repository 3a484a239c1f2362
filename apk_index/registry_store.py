"""File-backed store for the package registry."""

import json
import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import IO

from .exceptions import RegistryCorruptError
from .models import Package, PackageRegistry, Repository

logger = logging.getLogger(__name__)


class RegistryStore:
    """Loads, merges and persists the package registry JSON file.

    The registry is always rewritten as a whole snapshot. Writes go to a
    temporary file next to the target which is then renamed over it, so a
    failed write never leaves a truncated registry behind.
    """

    def __init__(self, path: str | Path = "packages.json") -> None:
        """Initialize the store.

        Args:
            path: Location of the registry JSON file
        """
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> PackageRegistry | None:
        """Load the registry from disk.

        Returns:
            The registry, or None if the file does not exist

        Raises:
            RegistryCorruptError: If the file exists but is not a valid registry
        """
        if not self.exists():
            logger.debug(f"Registry file {self.path} does not exist")
            return None

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
            registry = PackageRegistry.from_dict(data)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise RegistryCorruptError(f"Registry file {self.path} is not valid JSON: {e}") from e
        except (KeyError, TypeError, AttributeError) as e:
            raise RegistryCorruptError(
                f"Registry file {self.path} has an unexpected structure: {e}"
            ) from e

        logger.info(
            f"Loaded registry with {registry.total_packages} packages "
            f"from {len(registry.repositories)} repositories"
        )
        return registry

    def load_or_empty(self) -> PackageRegistry:
        """Load the registry, starting from an empty one if absent or corrupt."""
        try:
            registry = self.load()
        except RegistryCorruptError as e:
            logger.warning(f"{e}; starting with an empty registry")
            return PackageRegistry()

        return registry if registry is not None else PackageRegistry()

    def merge(
        self, registry: PackageRegistry, url: str, packages: list[Package]
    ) -> PackageRegistry:
        """Insert or replace the repository for ``url``.

        An existing entry for the URL is replaced wholesale, never appended to.

        Args:
            registry: Registry to update in place
            url: Repository listing URL
            packages: Packages found for the repository

        Returns:
            The updated registry
        """
        new_repo = Repository.build(url, packages)

        for index, repo in enumerate(registry.repositories):
            if repo.url == url:
                logger.info(f"Updating existing repository: {url}")
                registry.repositories[index] = new_repo
                break
        else:
            logger.info(f"Adding new repository: {url}")
            registry.repositories.append(new_repo)

        registry.recompute_total()
        return registry

    def persist(self, registry: PackageRegistry) -> None:
        """Write the full registry, replacing the previous file atomically.

        Args:
            registry: Registry to write

        Raises:
            OSError: If the file cannot be written
        """
        registry.recompute_total()

        with self._atomic_write() as f:
            json.dump(registry.to_dict(), f, indent=2)
            f.write("\n")

        logger.info(
            f"Saved {registry.total_packages} total packages from "
            f"{len(registry.repositories)} repositories to {self.path}"
        )

    @contextmanager
    def _atomic_write(self) -> Iterator[IO[str]]:
        """Yield a temp file that replaces the registry file on success."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        temp_file = self.path.with_name(f".{self.path.name}.tmp")

        try:
            with open(temp_file, "w", encoding="utf-8") as f:
                yield f
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_file, self.path)
        except BaseException:
            if temp_file.exists():
                temp_file.unlink()
            raise
