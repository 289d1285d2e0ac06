"""
Latest-Version Sources

One upstream per browser family answers "what is the newest stable version
for this platform/arch?":

- Brave: the GitHub "latest release" endpoint
- Edge: Microsoft's update feed, Stable product
- Chrome: a curated version -> per-platform URL table
- Chromium: the release feed queried with num=1
- Arc: no discrete versions, always the "latest" sentinel

Sources perform network I/O on every call. Caching is the resolver's job.
"""

from typing import Any, Dict, List, Optional, Protocol

from browser_manager.constants import (
    ARC_LATEST_SENTINEL,
    ARCH_ARM64,
    BRAVE_RELEASES_URL,
    CHROME_MAC_ARM64_MIN_VERSION,
    CHROME_VERSIONS_URL,
    EDGE_UPDATES_URL,
    PLATFORM_LINUX,
    PLATFORM_MAC,
    PLATFORM_WINDOWS,
)
from browser_manager.exceptions import (
    FeedUnavailableError,
    UnsupportedPlatformError,
    VersionNotFoundError,
)
from browser_manager.log_utils import logger

from .http_client import AsyncHttpClient
from .interfaces import PlatformKey
from .release_feed import ReleaseFeed
from .version import compare_versions, find_closest_version

EDGE_STABLE_PRODUCT = "Stable"
EDGE_PLATFORM_KEYS = {
    PLATFORM_WINDOWS: "Windows",
    PLATFORM_MAC: "Darwin",
    PLATFORM_LINUX: "Linux",
}
EDGE_ARCH_KEYS = {"x64": "x64", "arm64": "ARM64"}

CHROME_TABLE_PLATFORM_KEYS = {
    PLATFORM_WINDOWS: "win",
    PLATFORM_MAC: "mac",
    PLATFORM_LINUX: "linux",
}


class LatestVersionSource(Protocol):
    """Anything that can report the newest version for a platform/arch."""

    async def fetch_latest(self, platform: str, arch: str) -> str: ...


class GithubLatestReleaseSource:
    """
    Latest version from a GitHub repository's "latest release".

    The tag's leading "v" is stripped. Draft and prerelease tags are rejected
    rather than skipped, since the endpoint only ever returns one release.
    """

    def __init__(
        self,
        client: AsyncHttpClient,
        url: str = BRAVE_RELEASES_URL,
        github_token: Optional[str] = None,
    ) -> None:
        self.client = client
        self.url = url
        self.github_token = github_token

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/vnd.github+json"}
        if self.github_token:
            headers["Authorization"] = f"token {self.github_token}"
        return headers

    async def fetch_latest(self, platform: str, arch: str) -> str:
        data = await self.client.get_json(self.url, headers=self._headers())
        if not isinstance(data, dict):
            raise FeedUnavailableError(
                "Unexpected GitHub release payload",
                url=self.url,
                details=f"expected dict, got {type(data).__name__}",
            )
        if data.get("draft") or data.get("prerelease"):
            raise VersionNotFoundError(
                "latest",
                f"{platform}/{arch}",
                details="latest release is a draft or prerelease",
            )

        tag_name = data.get("tag_name")
        if not isinstance(tag_name, str) or not tag_name.strip():
            raise FeedUnavailableError(
                "GitHub release has no tag_name", url=self.url
            )
        version = tag_name.strip()
        if version.startswith("v"):
            version = version[1:]
        logger.debug(f"Latest release from {self.url}: {version}")
        return version


class EdgeUpdateFeedSource:
    """Latest version from Microsoft's Edge update feed (Stable product)."""

    def __init__(self, client: AsyncHttpClient, url: str = EDGE_UPDATES_URL) -> None:
        self.client = client
        self.url = url

    async def fetch_latest(self, platform: str, arch: str) -> str:
        logger.debug(f"Fetching latest Edge version from: {self.url}")
        data = await self.client.get_json(self.url)
        if not isinstance(data, list):
            raise FeedUnavailableError(
                "Unexpected Edge update feed payload",
                url=self.url,
                details=f"expected list, got {type(data).__name__}",
            )

        stable = next(
            (
                product
                for product in data
                if isinstance(product, dict)
                and product.get("Product") == EDGE_STABLE_PRODUCT
                and product.get("Releases")
            ),
            None,
        )
        if stable is None:
            raise VersionNotFoundError(
                "latest",
                f"{platform}/{arch}",
                details="no stable releases in Edge update feed",
            )

        platform_key = EDGE_PLATFORM_KEYS.get(platform)
        arch_key = EDGE_ARCH_KEYS.get(arch)
        for release in stable["Releases"]:
            if not isinstance(release, dict):
                continue
            if (
                release.get("Platform") == platform_key
                and release.get("Architecture") == arch_key
                and release.get("ProductVersion")
            ):
                version = str(release["ProductVersion"])
                logger.debug(f"Latest Edge version: {version}")
                return version

        raise VersionNotFoundError(
            "latest",
            f"{platform}/{arch}",
            details="no compatible Edge release",
        )


class CuratedVersionTable:
    """
    Curated table mapping Chrome versions to per-platform download URLs.

    The table is a JSON object `{version: {"win": url, "mac": url, "linux": url}}`.
    It is fetched once per instance and reused for every lookup.
    """

    def __init__(self, client: AsyncHttpClient, url: str = CHROME_VERSIONS_URL) -> None:
        self.client = client
        self.url = url
        self._table: Optional[Dict[str, Dict[str, Any]]] = None

    async def load(self) -> Dict[str, Dict[str, Any]]:
        if self._table is None:
            logger.debug("Fetching Chrome versions data...")
            data = await self.client.get_json(self.url)
            if not isinstance(data, dict):
                raise FeedUnavailableError(
                    "Unexpected Chrome versions payload",
                    url=self.url,
                    details=f"expected dict, got {type(data).__name__}",
                )
            self._table = {
                str(version): urls
                for version, urls in data.items()
                if isinstance(urls, dict)
            }
        return self._table

    @staticmethod
    def _table_key(platform: str) -> str:
        try:
            return CHROME_TABLE_PLATFORM_KEYS[platform]
        except KeyError:
            raise UnsupportedPlatformError(platform, "Google Chrome") from None

    async def available_versions(self, platform: str, arch: str) -> List[str]:
        """
        Versions with a download for the platform, in table order.

        Apple Silicon builds only exist from CHROME_MAC_ARM64_MIN_VERSION on.
        """
        table = await self.load()
        key = self._table_key(platform)
        versions = [version for version, urls in table.items() if urls.get(key)]
        if platform == PLATFORM_MAC and arch == ARCH_ARM64:
            versions = [
                v
                for v in versions
                if compare_versions(v, CHROME_MAC_ARM64_MIN_VERSION) >= 0
            ]
        return versions

    async def fetch_latest(self, platform: str, arch: str) -> str:
        """Return the table's first entry available for the platform."""
        versions = await self.available_versions(platform, arch)
        if not versions:
            raise VersionNotFoundError("latest", f"{platform}/{arch}")
        return versions[0]

    async def closest(self, version: str, platform: str, arch: str) -> str:
        """
        Return the smallest available version at least `version`.

        Falls back to the newest available version when the request is newer
        than everything in the table.
        """
        match = find_closest_version(
            version, await self.available_versions(platform, arch)
        )
        if match is None:
            raise VersionNotFoundError(
                version,
                f"{platform}/{arch}",
                details="no available versions in Chrome table",
            )
        logger.debug(
            f"Found closest Chrome version {match} for requested version {version}"
        )
        return match

    async def download_url(self, version: str, platform: str, arch: str) -> str:
        """Resolve the closest table version and return its URL for the platform."""
        match = await self.closest(version, platform, arch)
        table = await self.load()
        return str(table[match][self._table_key(platform)])


class ChromiumFeedLatestSource:
    """Latest Chromium version from the release feed."""

    def __init__(self, feed: ReleaseFeed, platform_keys: Dict[tuple, PlatformKey]) -> None:
        self.feed = feed
        self.platform_keys = platform_keys

    async def fetch_latest(self, platform: str, arch: str) -> str:
        platform_key = self.platform_keys.get((platform, arch))
        if platform_key is None:
            raise UnsupportedPlatformError(platform, "Chromium", details=arch)
        release = await self.feed.fetch_latest(platform_key)
        return release.version


class StaticLatestSource:
    """
    Fixed "latest" answer for browsers that only ship a rolling build.

    Performs no network I/O.
    """

    def __init__(
        self,
        version: str = ARC_LATEST_SENTINEL,
        platforms: tuple = (PLATFORM_WINDOWS, PLATFORM_MAC),
        browser: Optional[str] = None,
    ) -> None:
        self.version = version
        self.platforms = platforms
        self.browser = browser

    async def fetch_latest(self, platform: str, arch: str) -> str:
        if platform not in self.platforms:
            raise UnsupportedPlatformError(platform, self.browser)
        return self.version
