"""Builds the package registry from repository listing pages."""

import logging
from pathlib import Path

import requests

from .exceptions import RegistryCorruptError
from .extractor import PackageExtractor
from .listing_client import ListingClient
from .models import PackageRegistry, ServersConfig
from .registry_store import RegistryStore

logger = logging.getLogger(__name__)


class IndexBuilder:
    """Fetches listing pages, extracts packages and merges them into the store."""

    def __init__(
        self,
        store: RegistryStore,
        servers_path: str | Path = "servers.json",
        client: ListingClient | None = None,
        extractor: PackageExtractor | None = None,
    ) -> None:
        """Initialize the index builder.

        Args:
            store: Registry store to read from and write to
            servers_path: Sources configuration used when no URLs are given
            client: Listing client, created with defaults if omitted
            extractor: Package extractor, created with defaults if omitted
        """
        self.store = store
        self.servers_path = Path(servers_path)
        self.client = client or ListingClient()
        self.extractor = extractor or PackageExtractor()
        self.failed_urls: list[str] = []

    def configured_urls(self) -> list[str]:
        """Read repository URLs from the sources configuration.

        Raises:
            FileNotFoundError: If the configuration file does not exist
            ConfigError: If the configuration is malformed
        """
        config = ServersConfig.from_file(self.servers_path)
        logger.info(
            f"Loaded {len(config.repositories)} repositories from {self.servers_path}"
        )
        return config.repositories

    def build(self, urls: list[str] | None = None) -> PackageRegistry:
        """Index the given repositories and persist the registry.

        Repositories are processed one at a time. A repository that cannot be
        fetched is logged, recorded in ``failed_urls`` and skipped; it keeps
        whatever entry it already had in the registry.

        Args:
            urls: Listing URLs to index. Defaults to the configured sources.

        Returns:
            The persisted registry
        """
        if urls is None:
            urls = self.configured_urls()

        registry = self.store.load_or_empty()
        self.failed_urls = []

        for url in urls:
            logger.info(f"Parsing packages from: {url}")

            try:
                html = self.client.fetch_listing(url)
            except requests.RequestException as e:
                logger.warning(f"Skipping repository {url}: {e}")
                self.failed_urls.append(url)
                continue

            packages = self.extractor.extract(html)
            logger.info(f"Found {len(packages)} packages at {url}")
            self.store.merge(registry, url, packages)

        self.store.persist(registry)

        if self.failed_urls:
            logger.warning(
                f"{len(self.failed_urls)} of {len(urls)} repositories could not be fetched"
            )

        return registry

    def ensure_registry(self) -> PackageRegistry:
        """Load the registry, building it from the configured sources if needed."""
        try:
            registry = self.store.load()
        except RegistryCorruptError as e:
            logger.warning(f"{e}; rebuilding")
            registry = None

        if registry is None:
            logger.info(f"No usable registry at {self.store.path}, building it now")
            registry = self.build()

        return registry
