"""HTTP client for fetching repository listing pages."""

import logging

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)


def create_session(max_retries: int = 3) -> requests.Session:
    """Create a requests session with retry configuration.

    Args:
        max_retries: Maximum number of retry attempts

    Returns:
        Configured requests session with exponential backoff retry
    """
    session = requests.Session()

    retry_strategy = Retry(
        total=max_retries,
        backoff_factor=1,  # 1, 2, 4 seconds
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods=["GET"],
        # Let raise_for_status report the final status instead of MaxRetryError
        raise_on_status=False,
    )

    adapter = HTTPAdapter(max_retries=retry_strategy)
    session.mount("http://", adapter)
    session.mount("https://", adapter)

    return session


class ListingClient:
    """Fetches raw HTML for repository directory listings."""

    def __init__(self, timeout: int = DEFAULT_TIMEOUT, max_retries: int = 3):
        """Initialize the listing client.

        Args:
            timeout: Request timeout in seconds
            max_retries: Maximum number of retry attempts
        """
        self.timeout = timeout
        self.max_retries = max_retries
        self.session = create_session(max_retries)

    def fetch_listing(self, url: str) -> str:
        """Fetch the listing page at ``url``.

        Args:
            url: Repository listing URL

        Returns:
            The page body as text

        Raises:
            requests.RequestException: On transport failure or non-success status
        """
        logger.info(f"Fetching repository listing from {url}")

        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Failed to fetch repository listing {url}: {e}")
            raise

        logger.debug(
            f"Fetched {len(response.content)} bytes from {url} "
            f"(status: {response.status_code})"
        )
        return response.text
