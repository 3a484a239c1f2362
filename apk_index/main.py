"""Command line entry point for the APK package index."""

import argparse
import logging
import sys

from .config import Settings, setup_logging
from .directories import initialize_directories
from .exceptions import ApkIndexError
from .index_builder import IndexBuilder
from .listing_client import ListingClient
from .package_downloader import PackageDownloader
from .registry_store import RegistryStore
from .resolver import PackageResolver
from .utils import filename_from_href

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="apk-index",
        description="Index and download packages from APK repository listings",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init", help="Create the local package directories")

    parse_cmd = subparsers.add_parser(
        "parse", help="Fetch repository listings and rebuild the package registry"
    )
    parse_cmd.add_argument(
        "-u", "--url", help="Index this repository URL instead of the configured ones"
    )

    download_cmd = subparsers.add_parser("download", help="Download a package")
    download_cmd.add_argument(
        "package", help="Package name to download, or a URL if --url is given"
    )
    download_cmd.add_argument(
        "--url",
        action="store_true",
        help="Treat PACKAGE as a direct download URL",
    )

    for name in ("install", "uninstall", "extract"):
        subparsers.add_parser(name, help=f"{name.capitalize()} a package (not implemented)")

    return parser


def cmd_init(settings: Settings, args: argparse.Namespace) -> int:
    initialize_directories(settings.home_dir)
    return EXIT_OK


def cmd_parse(settings: Settings, args: argparse.Namespace) -> int:
    builder = _make_builder(settings)
    urls = [args.url] if args.url else None

    registry = builder.build(urls)

    print(
        f"Saved {registry.total_packages} total packages from "
        f"{len(registry.repositories)} repositories to {builder.store.path}"
    )
    return EXIT_OK


def cmd_download(settings: Settings, args: argparse.Namespace) -> int:
    downloader = PackageDownloader(settings.downloads_dir, timeout=settings.timeout)

    if args.url:
        url = args.package
        filename = filename_from_href(url)
        if not filename:
            print(f"Error downloading: cannot derive a filename from {url}", file=sys.stderr)
            return EXIT_FAILURE
    else:
        registry = _make_builder(settings).ensure_registry()
        resolution = PackageResolver(registry).select(args.package)

        if resolution.is_ambiguous:
            print(f"Multiple packages match '{args.package}':")
            for match in resolution.candidates:
                print(
                    f"  {match.package.name} {match.package.version} "
                    f"({match.repository.url})"
                )
            print(f"Using {resolution.selected.package.filename}")

        url = resolution.selected.download_url
        filename = resolution.selected.package.filename

    path = downloader.download(url, filename)
    print(f"Downloaded {path}")
    return EXIT_OK


def cmd_not_implemented(settings: Settings, args: argparse.Namespace) -> int:
    print(f"{args.command.capitalize()} command not yet implemented", file=sys.stderr)
    return EXIT_FAILURE


COMMANDS = {
    "init": cmd_init,
    "parse": cmd_parse,
    "download": cmd_download,
    "install": cmd_not_implemented,
    "uninstall": cmd_not_implemented,
    "extract": cmd_not_implemented,
}


def _make_builder(settings: Settings) -> IndexBuilder:
    return IndexBuilder(
        RegistryStore(settings.registry_path),
        servers_path=settings.servers_path,
        client=ListingClient(timeout=settings.timeout),
    )


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns the process exit status."""
    args = build_parser().parse_args(argv)
    setup_logging("DEBUG" if args.verbose else None)

    try:
        settings = Settings.from_env()
        return COMMANDS[args.command](settings, args)
    except (ApkIndexError, OSError, ValueError) as e:
        # requests.RequestException is an OSError subclass
        print(f"Error running {args.command}: {e}", file=sys.stderr)
        logger.debug("Command failed", exc_info=True)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
