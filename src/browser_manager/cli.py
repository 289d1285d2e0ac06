# src/browser_manager/cli.py

import argparse
import asyncio
import importlib.metadata
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from browser_manager import log_utils, settings
from browser_manager.browsers import create_resolver, list_browsers
from browser_manager.constants import APP_NAME, SUPPORTED_ARCHS, SUPPORTED_PLATFORMS
from browser_manager.exceptions import BrowserManagerError, ConfigurationError
from browser_manager.platforms import get_current_arch, get_current_platform
from browser_manager.resolve.http_client import create_http_client

COMMAND_RESOLVE = "resolve"
COMMAND_LATEST = "getLatestVersion"
COMMAND_DOWNLOAD = "download"
BROWSER_COMMANDS = (COMMAND_RESOLVE, COMMAND_LATEST, COMMAND_DOWNLOAD)


def get_version() -> str:
    """
    Return the installed browser-manager version, or "unknown" outside an install.
    """
    try:
        return importlib.metadata.version(APP_NAME)
    except importlib.metadata.PackageNotFoundError:
        return "unknown"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="browser-manager - resolve and download Chromium-family browsers",
    )
    subparsers = parser.add_subparsers(dest="browser")

    subparsers.add_parser("version", help="Display browser-manager version")

    for name in list_browsers():
        browser_parser = subparsers.add_parser(name, help=f"Operate on {name}")
        browser_parser.add_argument("command", choices=BROWSER_COMMANDS)
        browser_parser.add_argument(
            "--version",
            dest="browser_version",
            help="Browser version to resolve (defaults to the latest)",
        )
        browser_parser.add_argument(
            "--platform",
            choices=SUPPORTED_PLATFORMS,
            help="Target platform (defaults to the current one)",
        )
        browser_parser.add_argument(
            "--arch",
            choices=SUPPORTED_ARCHS,
            help="Target architecture (defaults to the current one)",
        )
        browser_parser.add_argument(
            "--output-dir",
            dest="output_dir",
            default=None,
            help="Directory for downloaded artifacts (download only)",
        )
        browser_parser.add_argument(
            "--silent",
            action="store_true",
            help="Only log errors",
        )

    return parser


def _artifact_filename(url: str, browser: str, version: str) -> str:
    name = os.path.basename(urlparse(url).path)
    return name or f"{browser}-{version}"


async def run_browser_command(args: argparse.Namespace, config: Dict[str, Any]) -> str:
    """
    Execute one browser command and return the value to print.

    For `download` the returned value is the path of the downloaded file.
    """
    async with create_http_client(timeout=config["REQUEST_TIMEOUT"]) as client:
        resolver = create_resolver(args.browser, client, config)

        if args.command == COMMAND_LATEST:
            return await resolver.get_latest_version(args.platform, args.arch)

        platform = args.platform or get_current_platform()
        arch = args.arch or get_current_arch()

        url = await resolver.resolve_download_url(platform, arch, args.browser_version)
        if args.command == COMMAND_RESOLVE:
            return url

        output_dir = Path(args.output_dir or os.getcwd())
        target = output_dir / _artifact_filename(
            url, args.browser, args.browser_version or "latest"
        )
        log_utils.logger.info(f"Downloading {url}")
        downloaded = await client.download_file(url, target)
        return str(downloaded)


def _configure_logging(config: Dict[str, Any], silent: bool) -> None:
    if silent:
        log_utils.set_log_level("ERROR")
    elif config.get("LOG_LEVEL"):
        log_utils.set_log_level(str(config["LOG_LEVEL"]))

    if config.get("LOG_TO_FILE"):
        log_utils.add_file_logging(
            Path(settings.LOG_DIR), str(config.get("LOG_LEVEL") or "INFO")
        )


def main(argv: Optional[List[str]] = None) -> None:
    # Logging is automatically initialized by importing log_utils

    """
    Entry point for the browser-manager command-line interface.

    Parses arguments, loads configuration, and dispatches either the top-level
    `version` command or a `<browser> <command>` pair. Every browser-manager
    error is logged and turns into exit status 1.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.browser is None:
        parser.print_help()
        sys.exit(1)

    if args.browser == "version":
        print(f"{APP_NAME} v{get_version()}")
        return

    try:
        config = settings.load_config()
    except ConfigurationError as error:
        log_utils.logger.error(f"Failed to load configuration: {error}")
        sys.exit(1)

    _configure_logging(config, args.silent)

    try:
        result = asyncio.run(run_browser_command(args, config))
    except BrowserManagerError as error:
        log_utils.logger.error(str(error))
        sys.exit(1)
    except OSError as error:
        log_utils.logger.error(f"File operation failed: {error}")
        sys.exit(1)

    print(result)


if __name__ == "__main__":
    main()
