"""Utility functions for the APK package index."""

import re
from pathlib import PurePosixPath
from urllib.parse import unquote, urlparse

ARCHIVE_EXTENSION = ".apk"
UNKNOWN_VERSION = "unknown"

# Name is everything up to the last hyphen-separated group that starts with a
# digit, optionally followed by an Alpine revision group (-rN).
_NAME_VERSION_RE = re.compile(r"^(.+)-([0-9][^-]*(?:-r[0-9]+)?)$")


def split_package_filename(filename: str) -> tuple[str, str]:
    """Split an archive filename into package name and version.

    Version strings are not delimited by a fixed number of hyphens, so the
    version is taken to be the trailing group starting with a digit plus an
    optional ``-rN`` revision. A package whose name itself ends in a
    digit-leading segment (e.g. ``foo-2-1.0-r0``) is therefore ambiguous and
    gets split at ``foo-2``. Falls back to the whole stem with an
    ``"unknown"`` version when no version-shaped suffix exists.

    Args:
        filename: Archive filename (e.g., "curl-7.88.1-r0.apk").

    Returns:
        Tuple of (name, version).

    Examples:
        >>> split_package_filename("curl-7.88.1-r0.apk")
        ('curl', '7.88.1-r0')
        >>> split_package_filename("py3-requests-2.31.0-r1.apk")
        ('py3-requests', '2.31.0-r1')
        >>> split_package_filename("busybox.apk")
        ('busybox', 'unknown')
    """
    stem = filename[: -len(ARCHIVE_EXTENSION)] if filename.endswith(ARCHIVE_EXTENSION) else filename

    match = _NAME_VERSION_RE.match(stem)
    if match:
        return match.group(1), match.group(2)

    return stem, UNKNOWN_VERSION


def filename_from_href(href: str) -> str:
    """Return the last path segment of a link target, URL-decoded.

    Args:
        href: Link target, relative or absolute.

    Returns:
        Filename without any directory part.
    """
    path = urlparse(href).path
    return PurePosixPath(unquote(path)).name


def join_url(base_url: str, filename: str) -> str:
    """Join a listing URL and a filename with exactly one slash."""
    return f"{base_url.rstrip('/')}/{filename.lstrip('/')}"
