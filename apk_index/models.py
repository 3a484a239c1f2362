"""Data models for the APK package index."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigError

UNKNOWN = "unknown"
DEFAULT_ARCHITECTURE = "x86_64"


@dataclass(frozen=True)
class Package:
    """A single package archive advertised by a repository listing."""

    name: str
    version: str
    filename: str
    size: str = UNKNOWN
    date: str = UNKNOWN

    def to_dict(self) -> dict[str, str]:
        return {
            "name": self.name,
            "version": self.version,
            "size": self.size,
            "date": self.date,
            "filename": self.filename,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Package":
        """Create a Package from a registry JSON entry."""
        return cls(
            name=data["name"],
            version=data.get("version", UNKNOWN),
            filename=data["filename"],
            size=data.get("size", UNKNOWN),
            date=data.get("date", UNKNOWN),
        )


@dataclass
class Repository:
    """One remote listing page and the packages found on it.

    Attributes:
        url: Listing page URL, unique within a registry
        architecture: Architecture tag, currently always x86_64
        package_count: Number of packages; kept equal to len(packages) by the merge step
        packages: Packages in discovery order
    """

    url: str
    architecture: str = DEFAULT_ARCHITECTURE
    package_count: int = 0
    packages: list[Package] = field(default_factory=list)

    @classmethod
    def build(
        cls, url: str, packages: list[Package], architecture: str = DEFAULT_ARCHITECTURE
    ) -> "Repository":
        """Create a repository with package_count derived from the package list."""
        packages = list(packages)
        return cls(
            url=url,
            architecture=architecture,
            package_count=len(packages),
            packages=packages,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "architecture": self.architecture,
            "package_count": self.package_count,
            "packages": [package.to_dict() for package in self.packages],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Repository":
        """Create a Repository from a registry JSON entry.

        The stored package_count is ignored and derived from the package list.
        """
        packages = [Package.from_dict(item) for item in data.get("packages", [])]
        return cls(
            url=data["url"],
            architecture=data.get("architecture", DEFAULT_ARCHITECTURE),
            package_count=len(packages),
            packages=packages,
        )


@dataclass
class PackageRegistry:
    """All known repositories and their packages."""

    repositories: list[Repository] = field(default_factory=list)
    total_packages: int = 0

    def recompute_total(self) -> int:
        """Recalculate total_packages from the repository counts."""
        self.total_packages = sum(repo.package_count for repo in self.repositories)
        return self.total_packages

    def to_dict(self) -> dict[str, Any]:
        return {
            "repositories": [repo.to_dict() for repo in self.repositories],
            "total_packages": self.total_packages,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PackageRegistry":
        """Create a registry from its JSON document.

        The stored total_packages is ignored and recomputed.
        """
        registry = cls(
            repositories=[Repository.from_dict(item) for item in data["repositories"]]
        )
        registry.recompute_total()
        return registry


@dataclass
class ServersConfig:
    """Repository listing URLs to index when no URL is given explicitly."""

    repositories: list[str]

    @classmethod
    def from_file(cls, path: Path) -> "ServersConfig":
        """Load the sources configuration.

        The file is normally JSON; YAML is accepted as well since JSON
        documents are valid YAML.

        Args:
            path: Path to the configuration file

        Returns:
            ServersConfig with the configured repository URLs

        Raises:
            FileNotFoundError: If the configuration file does not exist
            ConfigError: If the file is not a valid sources document
        """
        with open(path, encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid sources configuration {path}: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("repositories"), list):
            raise ConfigError(
                f"Sources configuration {path} must contain a 'repositories' list"
            )

        urls = data["repositories"]
        if not all(isinstance(url, str) and url for url in urls):
            raise ConfigError(
                f"Sources configuration {path} contains a non-string repository entry"
            )

        return cls(repositories=urls)
