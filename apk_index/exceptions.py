"""Custom exceptions for the APK package index."""


class ApkIndexError(Exception):
    """Base exception for all package index errors."""

    pass


class ConfigError(ApkIndexError, ValueError):
    """Raised when the repository sources configuration is unusable."""

    pass


class RegistryCorruptError(ApkIndexError):
    """Raised when the registry file exists but cannot be decoded."""

    pass


class PackageNotFoundError(ApkIndexError):
    """Raised when no indexed package matches a query."""

    def __init__(self, query: str):
        super().__init__(f"Package '{query}' not found in registry")
        self.query = query
