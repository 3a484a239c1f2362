"""Tests for the package downloader."""

from unittest.mock import Mock, patch

import pytest
import requests

from apk_index.package_downloader import PackageDownloader

PACKAGE_URL = "https://mirror.example/alpine/v3.18/main/x86_64/curl-8.1.2-r0.apk"


def mock_response(chunks: list[bytes]) -> Mock:
    response = Mock()
    response.status_code = 200
    response.raise_for_status = Mock()
    response.iter_content.return_value = iter(chunks)
    return response


class TestPackageDownloader:
    def test_download_writes_file(self, tmp_path):
        downloader = PackageDownloader(tmp_path / "downloads")
        response = mock_response([b"abc", b"", b"def"])

        with patch.object(downloader.session, "get", return_value=response) as mock_get:
            path = downloader.download(PACKAGE_URL, "curl-8.1.2-r0.apk")

        assert path == tmp_path / "downloads" / "curl-8.1.2-r0.apk"
        assert path.read_bytes() == b"abcdef"
        mock_get.assert_called_once_with(PACKAGE_URL, timeout=30, stream=True)

    def test_http_error_is_fatal(self, tmp_path):
        downloader = PackageDownloader(tmp_path)
        response = mock_response([])
        response.raise_for_status.side_effect = requests.HTTPError("404 Not Found")

        with patch.object(downloader.session, "get", return_value=response):
            with pytest.raises(requests.HTTPError):
                downloader.download(PACKAGE_URL, "curl-8.1.2-r0.apk")

        assert not (tmp_path / "curl-8.1.2-r0.apk").exists()

    def test_partial_file_removed_on_stream_error(self, tmp_path):
        downloader = PackageDownloader(tmp_path)
        response = Mock()
        response.raise_for_status = Mock()

        def broken_stream(chunk_size):
            yield b"partial"
            raise requests.ConnectionError("connection reset")

        response.iter_content.side_effect = broken_stream

        with patch.object(downloader.session, "get", return_value=response):
            with pytest.raises(requests.ConnectionError):
                downloader.download(PACKAGE_URL, "curl-8.1.2-r0.apk")

        assert list(tmp_path.iterdir()) == []

    def test_partial_file_removed_on_write_error(self, tmp_path):
        downloader = PackageDownloader(tmp_path)
        response = Mock()
        response.raise_for_status = Mock()

        def full_disk(chunk_size):
            yield b"partial"
            raise OSError(28, "No space left on device")

        response.iter_content.side_effect = full_disk

        with patch.object(downloader.session, "get", return_value=response):
            with pytest.raises(OSError, match="No space left"):
                downloader.download(PACKAGE_URL, "curl-8.1.2-r0.apk")

        assert list(tmp_path.iterdir()) == []
