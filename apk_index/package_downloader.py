"""Package downloader for resolved archive URLs."""

import logging
from pathlib import Path

from .config import DEFAULT_TIMEOUT
from .listing_client import create_session

logger = logging.getLogger(__name__)


class PackageDownloader:
    """Downloads package archives into a local directory."""

    def __init__(self, download_dir: str | Path, timeout: int = DEFAULT_TIMEOUT):
        """Initialize the package downloader.

        Args:
            download_dir: Directory to store downloaded files
            timeout: Request timeout in seconds
        """
        self.download_dir = Path(download_dir)
        self.timeout = timeout
        self.session = create_session()

    def download(self, url: str, filename: str) -> Path:
        """Download ``url`` to ``<download_dir>/<filename>``.

        Args:
            url: URL to download from
            filename: Name for the downloaded file

        Returns:
            Path to the downloaded file

        Raises:
            requests.RequestException: On transport failure or non-success status
            OSError: If the file cannot be written
        """
        self.download_dir.mkdir(parents=True, exist_ok=True)
        target_path = self.download_dir / filename

        logger.info(f"Downloading {url}")
        logger.info(f"Saving to {target_path}")

        try:
            response = self.session.get(url, timeout=self.timeout, stream=True)
            response.raise_for_status()

            with open(target_path, "wb") as f:
                for chunk in response.iter_content(chunk_size=8192):
                    if chunk:  # Filter out keep-alive chunks
                        f.write(chunk)

        except OSError as e:
            # requests.RequestException is an OSError subclass
            logger.error(f"Failed to download {filename} from {url}: {e}")
            # Clean up partial file
            if target_path.exists():
                target_path.unlink()
            raise

        file_size = target_path.stat().st_size
        logger.info(f"Download completed: {filename} ({file_size} bytes)")
        return target_path
