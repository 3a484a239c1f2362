"""Package extraction from repository listing pages."""

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass

from bs4 import BeautifulSoup

from .models import Package
from .utils import ARCHIVE_EXTENSION, filename_from_href, split_package_filename

logger = logging.getLogger(__name__)

# Built-in parser, so no lxml/html5lib install is needed
HTML_PARSER = "html.parser"


@dataclass
class ListingPage:
    """A listing page kept both as raw markup and as a parsed tree."""

    markup: str
    soup: BeautifulSoup

    @classmethod
    def parse(cls, markup: str) -> "ListingPage":
        return cls(markup=markup, soup=BeautifulSoup(markup, HTML_PARSER))

    @classmethod
    def from_soup(cls, soup: BeautifulSoup) -> "ListingPage":
        return cls(markup=str(soup), soup=soup)


def package_from_filename(filename: str) -> Package:
    """Build a Package record for an archive filename."""
    name, version = split_package_filename(filename)
    return Package(name=name, version=version, filename=filename)


class ExtractionStrategy(ABC):
    """Base class for ways of locating package archives in a listing page.

    Strategies are tried in priority order by PackageExtractor; the first one
    that returns any packages wins.
    """

    name: str = "strategy"

    @abstractmethod
    def extract(self, page: ListingPage) -> list[Package]:
        """Return the packages this strategy finds, in document order.

        Args:
            page: Parsed listing page

        Returns:
            List of packages, empty when nothing matched
        """


class SelectorStrategy(ExtractionStrategy):
    """Finds package anchors with a CSS selector."""

    def __init__(self, selector: str) -> None:
        """Initialize with a CSS selector matching anchor elements.

        Args:
            selector: CSS selector (e.g., "pre a")
        """
        self.selector = selector
        self.name = selector

    def extract(self, page: ListingPage) -> list[Package]:
        links = page.soup.select(self.selector)
        if not links:
            return []

        logger.debug(f"Selector '{self.selector}' matched {len(links)} links")

        packages = []
        for link in links:
            href = link.get("href")
            if not href or not href.endswith(ARCHIVE_EXTENSION):
                continue
            try:
                filename = filename_from_href(href)
            except ValueError as e:
                logger.debug(f"Skipping unparseable link {href!r}: {e}")
                continue
            if not filename:
                continue
            packages.append(package_from_filename(filename))

        return packages


class RegexScanStrategy(ExtractionStrategy):
    """Scans the raw markup for archive-filename shaped tokens.

    Used as a last resort when no structural selector finds anything.
    Results are de-duplicated by filename, keeping the first occurrence.
    """

    name = "regex"

    # The version part may not run past a separator or another ".apk"
    PATTERN = re.compile(
        r"([A-Za-z0-9_+-]+(?:-[0-9](?:(?!\.apk)[^\"'\s<>/,;])*)?\.apk)"
    )

    def extract(self, page: ListingPage) -> list[Package]:
        seen: set[str] = set()
        packages = []

        for match in self.PATTERN.finditer(page.markup):
            filename = match.group(1)
            if filename in seen:
                continue
            seen.add(filename)
            packages.append(package_from_filename(filename))

        return packages


DEFAULT_SELECTORS = (
    "pre a",  # Apache/nginx autoindex pages
    "a[href$='.apk']",
    "tr td a",  # Table based listings
)


class PackageExtractor:
    """Extracts package records from listing pages using a strategy chain."""

    def __init__(
        self,
        strategies: list[ExtractionStrategy] | None = None,
        fallback: ExtractionStrategy | None = None,
    ) -> None:
        """Initialize the extractor.

        Args:
            strategies: Structural strategies in priority order. Defaults to
                the built-in selector chain.
            fallback: Strategy used when every structural strategy finds
                nothing. Defaults to a whole-document regex scan.
        """
        if strategies is None:
            strategies = [SelectorStrategy(selector) for selector in DEFAULT_SELECTORS]
        self.strategies = list(strategies)
        self.fallback = fallback or RegexScanStrategy()

    def extract(self, document: str | BeautifulSoup) -> list[Package]:
        """Extract packages from a listing page.

        Never raises for malformed markup; returns an empty list when no
        packages can be found.

        Args:
            document: Raw HTML or an already parsed BeautifulSoup tree

        Returns:
            Packages in discovery order
        """
        if isinstance(document, BeautifulSoup):
            page = ListingPage.from_soup(document)
        else:
            page = ListingPage.parse(document)

        for strategy in self.strategies:
            packages = strategy.extract(page)
            if packages:
                logger.info(
                    f"Using selector '{strategy.name}': found {len(packages)} packages"
                )
                return packages

        logger.info("No packages found by HTML selectors, trying regex fallback")
        packages = self.fallback.extract(page)
        logger.info(f"Regex fallback found {len(packages)} packages")
        return packages
