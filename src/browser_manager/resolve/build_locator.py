"""
Chromium Build Locator

Maps a Chromium version to a build position that actually has a snapshot in
storage. This happens in two phases:

1. Search the paginated release feed for the exact version. Pages are
   newest-first, so the scan stops as soon as a page's oldest release is older
   than the target. An optional bisect pass narrows the starting page first.
2. Probe storage around the feed's build position, because the reported
   position frequently has no snapshot published. Candidates are checked one
   at a time, nearest first, and the first existing artifact wins.
"""

from dataclasses import dataclass
from typing import Dict, Iterator, Optional

from browser_manager.constants import (
    CHROMIUM_STORAGE_URL,
    FEED_MAX_OFFSET,
    FEED_SEARCH_BISECT,
    FEED_SEARCH_LINEAR,
    NARROW_PROBE_ATTEMPTS,
    NARROW_PROBE_STRIDE,
    PROBE_STRATEGY_NARROW,
    PROBE_STRATEGY_WIDE,
    WIDE_PROBE_ATTEMPTS,
    WIDE_PROBE_STRIDE,
)
from browser_manager.exceptions import (
    NoArtifactNearPositionError,
    VersionNotFoundError,
)
from browser_manager.log_utils import logger

from .http_client import AsyncHttpClient
from .interfaces import PlatformKey, ProbeResult, Release, ReleasePage
from .release_feed import ReleaseFeed
from .version import compare_versions


@dataclass(frozen=True)
class ProbePolicy:
    """
    Bounded symmetric sweep around a build position.

    Attempt `i` (0 <= i < attempts) tests `position + i * stride` and then
    `position - i * stride`.
    """

    attempts: int
    stride: int = 1

    def __post_init__(self) -> None:
        if self.attempts < 1:
            raise ValueError(f"attempts must be >= 1, got {self.attempts}")
        if self.stride < 1:
            raise ValueError(f"stride must be >= 1, got {self.stride}")

    def candidates(self, position: int) -> Iterator[int]:
        """
        Yield candidate positions ordered by distance, upward side first.

        The starting position is yielded once and negative positions are skipped.
        """
        for i in range(self.attempts):
            delta = i * self.stride
            if delta == 0:
                yield position
                continue
            yield position + delta
            if position - delta >= 0:
                yield position - delta


NARROW_PROBE = ProbePolicy(attempts=NARROW_PROBE_ATTEMPTS, stride=NARROW_PROBE_STRIDE)
WIDE_PROBE = ProbePolicy(attempts=WIDE_PROBE_ATTEMPTS, stride=WIDE_PROBE_STRIDE)

PROBE_POLICIES: Dict[str, ProbePolicy] = {
    PROBE_STRATEGY_NARROW: NARROW_PROBE,
    PROBE_STRATEGY_WIDE: WIDE_PROBE,
}


def get_probe_policy(name: str) -> ProbePolicy:
    """Look up a named probe policy ("narrow" or "wide")."""
    try:
        return PROBE_POLICIES[name.strip().lower()]
    except KeyError:
        raise ValueError(
            f"Unknown probe strategy {name!r}; expected one of {', '.join(PROBE_POLICIES)}"
        ) from None


class ArtifactStore:
    """Snapshot storage: URL layout and existence checks."""

    def __init__(
        self, client: AsyncHttpClient, base_url: str = CHROMIUM_STORAGE_URL
    ) -> None:
        self.client = client
        self.base_url = base_url.rstrip("/")

    def artifact_url(self, platform_key: PlatformKey, build_position: int) -> str:
        """Build `<base>/<storage_key>/<position>/<archive_name>`."""
        return (
            f"{self.base_url}/{platform_key.storage_key}/"
            f"{build_position}/{platform_key.archive_name}"
        )

    async def exists(self, platform_key: PlatformKey, build_position: int) -> bool:
        return await self.client.exists(self.artifact_url(platform_key, build_position))


class BuildLocator:
    """
    Resolves a Chromium version to a downloadable build position.

    Usage:
        locator = BuildLocator(ReleaseFeed(client), ArtifactStore(client))
        position = await locator.locate("120.0.6099.109", platform_key)
    """

    def __init__(
        self,
        feed: ReleaseFeed,
        store: ArtifactStore,
        probe_policy: ProbePolicy = NARROW_PROBE,
        max_offset: int = FEED_MAX_OFFSET,
        search: str = FEED_SEARCH_LINEAR,
    ) -> None:
        """
        Initialize the locator.

        Parameters:
            feed (ReleaseFeed): Source of version -> build position mappings.
            store (ArtifactStore): Storage probed for snapshots.
            probe_policy (ProbePolicy): Sweep bound used around the feed position.
            max_offset (int): Feed offsets at or beyond this are never fetched.
            search (str): "linear" to scan from offset 0, or "bisect" to narrow the
                starting page first.
        """
        if search not in (FEED_SEARCH_LINEAR, FEED_SEARCH_BISECT):
            raise ValueError(f"Unknown feed search mode {search!r}")
        self.feed = feed
        self.store = store
        self.probe_policy = probe_policy
        self.max_offset = max_offset
        self.search = search

    async def locate(self, version: str, platform_key: PlatformKey) -> int:
        """
        Return the build position of a downloadable snapshot for `version`.

        Raises:
            VersionNotFoundError: If no feed page within the bound lists the version.
            NoArtifactNearPositionError: If no probed position has a snapshot.
            FeedUnavailableError: If the feed or storage cannot be reached.
        """
        result = await self.locate_artifact(version, platform_key)
        # locate_artifact raises rather than returning a miss
        assert result.build_position is not None
        return result.build_position

    async def locate_artifact(
        self, version: str, platform_key: PlatformKey
    ) -> ProbeResult:
        """Like locate(), but return the full probe result including the URL."""
        logger.debug(
            f"Searching for Chromium build number for {version} on {platform_key.api_key}..."
        )
        release = await self.find_release(version, platform_key)
        result = await self.probe(release.build_position, platform_key)
        if not result.found:
            raise NoArtifactNearPositionError(
                release.build_position,
                platform_key.storage_key,
                attempts=result.attempts,
            )
        logger.debug(
            f"Found closest build snapshot for {release.build_position} "
            f"which is {result.build_position}"
        )
        return result

    async def find_release(self, version: str, platform_key: PlatformKey) -> Release:
        """
        Find the first feed entry whose version equals `version`.

        Raises:
            VersionNotFoundError: If the scan overshoots the version, hits an empty
                page, or exhausts the offset bound without a match.
        """
        pages: Dict[int, ReleasePage] = {}
        start = 0
        if self.search == FEED_SEARCH_BISECT:
            bisected = await self._bisect_start_offset(version, platform_key, pages)
            if bisected is None:
                raise VersionNotFoundError(
                    version,
                    platform_key.api_key,
                    details=f"older than every release within offset {self.max_offset}",
                )
            start = bisected

        offset = start
        while offset < self.max_offset:
            page = pages.get(offset)
            if page is None:
                page = await self.feed.fetch_page(offset, platform_key)
            if not len(page):
                break

            match = page.find(version)
            if match is not None:
                logger.debug(
                    f"Found release for {version} on {platform_key.api_key} at offset {offset}"
                )
                return match

            oldest = page.oldest
            if oldest is not None and compare_versions(oldest.version, version) < 0:
                logger.debug(
                    f"Oldest release {oldest.version} at offset {offset} is older than "
                    f"{version}; stopping search"
                )
                break

            offset += self.feed.page_size

        raise VersionNotFoundError(version, platform_key.api_key)

    async def _bisect_start_offset(
        self,
        version: str,
        platform_key: PlatformKey,
        pages: Dict[int, ReleasePage],
    ) -> Optional[int]:
        """
        Find the first page whose oldest release is not newer than `version`.

        Fetched pages are stored in `pages` so the linear scan can reuse them.
        Returns None when every page within the bound is newer than the target.
        """
        page_size = self.feed.page_size
        page_count = -(-self.max_offset // page_size)
        low, high = 0, page_count

        while low < high:
            mid = (low + high) // 2
            offset = mid * page_size
            page = await self.feed.fetch_page(offset, platform_key)
            pages[offset] = page
            oldest = page.oldest
            if oldest is None or compare_versions(oldest.version, version) <= 0:
                high = mid
            else:
                low = mid + 1

        if low >= page_count:
            return None
        return low * page_size

    async def probe(self, build_position: int, platform_key: PlatformKey) -> ProbeResult:
        """
        Check candidate positions around `build_position` in policy order.

        Returns:
            ProbeResult: The first position with an artifact, or a result with
                `build_position=None` once the sweep is exhausted.
        """
        attempts = 0
        for candidate in self.probe_policy.candidates(build_position):
            attempts += 1
            if await self.store.exists(platform_key, candidate):
                return ProbeResult(
                    build_position=candidate,
                    url=self.store.artifact_url(platform_key, candidate),
                    attempts=attempts,
                )
        logger.debug(
            f"No snapshot within {self.probe_policy.attempts} attempt(s) of {build_position}"
        )
        return ProbeResult(build_position=None, attempts=attempts)
