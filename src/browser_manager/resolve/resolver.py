"""
Browser Resolver

Turns (platform, arch, version) into a download URL for one browser, and
answers latest-version queries through a per-resolver TTL cache.
"""

from typing import Dict, Optional, Tuple

from browser_manager.constants import ARC_LATEST_SENTINEL
from browser_manager.exceptions import (
    UnsupportedArchError,
    UnsupportedPlatformError,
    VersionNotFoundError,
)
from browser_manager.log_utils import logger
from browser_manager.platforms import (
    get_current_arch,
    get_current_platform,
    normalize_arch,
    normalize_platform,
)

from .sources import LatestVersionSource
from .strategies import BuildSearch, CuratedTable, DownloadStrategy, StaticTemplate
from .version_cache import VersionCache


class BrowserResolver:
    """
    Version and download-URL resolution for a single browser.

    Usage:
        resolver = create_resolver("chromium", client)
        url = await resolver.resolve_download_url("mac", "arm64", "120.0.6099.109")
        latest = await resolver.get_latest_version("linux", "x64")
    """

    def __init__(
        self,
        name: str,
        display_name: str,
        platforms: Dict[str, Tuple[str, ...]],
        strategy: DownloadStrategy,
        latest_source: LatestVersionSource,
        cache: Optional[VersionCache] = None,
        rolling_only: bool = False,
    ) -> None:
        """
        Initialize the resolver.

        Parameters:
            name (str): Registry name (e.g., "chromium").
            display_name (str): Human-readable name used in messages.
            platforms (Dict[str, Tuple[str, ...]]): Supported platform -> arches.
            strategy (DownloadStrategy): How download URLs are produced.
            latest_source (LatestVersionSource): Upstream for latest-version queries.
            cache (Optional[VersionCache]): Latest-version cache; a fresh one by default.
            rolling_only (bool): The browser only ships a rolling "latest" build,
                so explicit versions are rejected.
        """
        self.name = name
        self.display_name = display_name
        self.platforms = platforms
        self.strategy = strategy
        self.latest_source = latest_source
        self.cache = cache if cache is not None else VersionCache()
        self.rolling_only = rolling_only

    def validate_target(self, platform: str, arch: str) -> Tuple[str, str]:
        """
        Normalize and check a platform/arch pair against this browser's support.

        Raises:
            UnsupportedPlatformError: If the browser has no build for the platform.
            UnsupportedArchError: If the platform has no build for the arch.
        """
        platform = normalize_platform(platform)
        arch = normalize_arch(arch)
        if platform not in self.platforms:
            raise UnsupportedPlatformError(platform, self.display_name)
        if arch not in self.platforms[platform]:
            raise UnsupportedArchError(arch, platform, self.display_name)
        return platform, arch

    async def get_latest_version(
        self, platform: Optional[str] = None, arch: Optional[str] = None
    ) -> str:
        """
        Return the newest version for a platform/arch, defaulting to the host.

        A fresh cached value is returned without network I/O. On a miss the
        family's upstream is queried and the result cached; if the upstream
        fails, the error propagates and the cache is left untouched.
        """
        platform = platform or get_current_platform()
        arch = arch or get_current_arch()
        platform, arch = self.validate_target(platform, arch)

        key = (platform, arch)
        entry = self.cache.get(key)
        if entry is not None:
            logger.debug(f"Using cached version for {self.display_name}: {entry.version}")
            return entry.version

        version = await self.latest_source.fetch_latest(platform, arch)
        self.cache.put(key, version)
        logger.debug(f"Latest {self.display_name} version for {platform}/{arch}: {version}")
        return version

    async def resolve_download_url(
        self, platform: str, arch: str, version: Optional[str] = None
    ) -> str:
        """
        Resolve the download URL for a version, or the latest when omitted.

        Raises:
            UnsupportedPlatformError: If the platform is not supported.
            UnsupportedArchError: If the arch is not supported on the platform.
            VersionNotFoundError: If the version cannot be matched.
            NoArtifactNearPositionError: If Chromium has no snapshot near the build.
            FeedUnavailableError: If an upstream cannot be reached.
        """
        platform, arch = self.validate_target(platform, arch)

        if version is None:
            version = await self.get_latest_version(platform, arch)
        elif self.rolling_only and version != ARC_LATEST_SENTINEL:
            raise VersionNotFoundError(
                version,
                f"{platform}/{arch}",
                details=f"{self.display_name} only provides the latest version",
            )

        url = await self._dispatch(platform, arch, version)
        logger.info(f"Resolved {self.display_name} {version} ({platform}/{arch}): {url}")
        return url

    async def _dispatch(self, platform: str, arch: str, version: str) -> str:
        strategy = self.strategy
        if isinstance(strategy, StaticTemplate):
            return strategy.render(platform, arch, version)
        if isinstance(strategy, CuratedTable):
            return await strategy.table.download_url(version, platform, arch)
        if isinstance(strategy, BuildSearch):
            platform_key = strategy.platform_keys.get((platform, arch))
            if platform_key is None:
                raise UnsupportedArchError(arch, platform, self.display_name)
            result = await strategy.locator.locate_artifact(version, platform_key)
            assert result.url is not None
            return result.url
        raise TypeError(f"Unknown download strategy: {type(strategy).__name__}")

    def __repr__(self) -> str:
        return f"BrowserResolver(name={self.name!r})"
