"""Resolution of package queries against the registry."""

import logging
from dataclasses import dataclass

from .exceptions import PackageNotFoundError
from .models import Package, PackageRegistry, Repository
from .utils import join_url

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PackageMatch:
    """A package together with the repository that lists it."""

    repository: Repository
    package: Package

    @property
    def download_url(self) -> str:
        return join_url(self.repository.url, self.package.filename)


@dataclass
class Resolution:
    """Outcome of resolving a query: all candidates plus the chosen one."""

    query: str
    candidates: list[PackageMatch]

    @property
    def selected(self) -> PackageMatch:
        return self.candidates[0]

    @property
    def is_ambiguous(self) -> bool:
        return len(self.candidates) > 1


def resolve(registry: PackageRegistry, query: str) -> list[PackageMatch]:
    """Find packages whose name matches ``query``, case-insensitively.

    Exact name matches come first, partial (substring) matches after them.
    Each exact match is inserted at the front as it is found, so exact
    matches from several repositories end up in reverse discovery order.
    Partial matches keep discovery order. Existing registries and scripts
    rely on this ordering.

    Args:
        registry: Registry to search
        query: Package name or part of one

    Returns:
        Ordered list of matches

    Raises:
        PackageNotFoundError: If nothing matches
    """
    needle = query.lower()
    matches: list[PackageMatch] = []

    for repo in registry.repositories:
        for package in repo.packages:
            name = package.name.lower()
            if name == needle:
                matches.insert(0, PackageMatch(repo, package))
            elif needle in name:
                matches.append(PackageMatch(repo, package))

    if not matches:
        raise PackageNotFoundError(query)

    return matches


class PackageResolver:
    """Selects the package to download for a user query."""

    def __init__(self, registry: PackageRegistry) -> None:
        self.registry = registry

    def select(self, query: str) -> Resolution:
        """Resolve ``query`` and pick the first candidate.

        Multiple candidates are not an error; they are logged and the first
        one is used.

        Raises:
            PackageNotFoundError: If nothing matches
        """
        resolution = Resolution(query=query, candidates=resolve(self.registry, query))

        if resolution.is_ambiguous:
            logger.warning(
                f"Multiple packages match '{query}' ({len(resolution.candidates)} "
                f"candidates), using {resolution.selected.package.filename}"
            )
        else:
            logger.info(f"Resolved '{query}' to {resolution.selected.package.filename}")

        return resolution
