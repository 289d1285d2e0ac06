"""
Chromium Release Feed

Paginated read access to the Chromium release dashboard, which maps stable
versions to the build positions used as keys in snapshot storage. Pagination
is the only way to reach older releases; there is no lookup by version.
"""

from typing import Any, Dict, List, Optional

from browser_manager.constants import (
    CHROMIUM_BUILD_POSITION_FIELD,
    CHROMIUM_FEED_CHANNEL,
    CHROMIUM_FEED_URL,
    FEED_PAGE_SIZE,
)
from browser_manager.exceptions import FeedUnavailableError, VersionNotFoundError
from browser_manager.log_utils import logger

from .http_client import AsyncHttpClient
from .interfaces import PlatformKey, Release, ReleasePage


class ReleaseFeed:
    """
    Client for the stable-channel release feed.

    Usage:
        feed = ReleaseFeed(client)
        page = await feed.fetch_page(0, platform_key)
        release = page.find("120.0.6099.109")
    """

    def __init__(
        self,
        client: AsyncHttpClient,
        base_url: str = CHROMIUM_FEED_URL,
        page_size: int = FEED_PAGE_SIZE,
        channel: str = CHROMIUM_FEED_CHANNEL,
        build_position_field: str = CHROMIUM_BUILD_POSITION_FIELD,
    ) -> None:
        """
        Initialize the feed client.

        Parameters:
            client (AsyncHttpClient): HTTP client used for requests.
            base_url (str): Feed endpoint.
            page_size (int): Number of releases requested per page.
            channel (str): Release channel to filter on.
            build_position_field (str): Payload field holding the build position.
        """
        if page_size < 1:
            raise ValueError(f"page_size must be >= 1, got {page_size}")
        self.client = client
        self.base_url = base_url
        self.page_size = page_size
        self.channel = channel
        self.build_position_field = build_position_field

    def _params(self, platform_key: PlatformKey, num: int, offset: int) -> Dict[str, Any]:
        return {
            "channel": self.channel,
            "platform": platform_key.api_key,
            "num": num,
            "offset": offset,
        }

    async def fetch_page(self, offset: int, platform_key: PlatformKey) -> ReleasePage:
        """
        Fetch up to `page_size` releases starting at `offset`, newest first.

        Raises:
            FeedUnavailableError: If the endpoint fails or returns a non-list payload.
        """
        logger.debug(
            f"Searching feed page at offset {offset} for {platform_key.api_key}"
        )
        data = await self.client.get_json(
            self.base_url, params=self._params(platform_key, self.page_size, offset)
        )
        return ReleasePage(offset=offset, releases=self._parse_releases(data))

    async def fetch_latest(self, platform_key: PlatformKey) -> Release:
        """
        Fetch the newest stable release for a platform.

        Raises:
            FeedUnavailableError: If the endpoint fails.
            VersionNotFoundError: If the feed lists no release for the platform.
        """
        data = await self.client.get_json(
            self.base_url, params=self._params(platform_key, 1, 0)
        )
        releases = self._parse_releases(data)
        if not releases:
            raise VersionNotFoundError("latest", platform_key.api_key)
        logger.debug(f"Latest {platform_key.api_key} release: {releases[0].version}")
        return releases[0]

    def _parse_releases(self, data: Any) -> List[Release]:
        if not isinstance(data, list):
            raise FeedUnavailableError(
                "Unexpected release feed payload",
                url=self.base_url,
                details=f"expected list, got {type(data).__name__}",
            )

        releases: List[Release] = []
        for item in data:
            release = self._parse_release(item)
            if release is not None:
                releases.append(release)
        return releases

    def _parse_release(self, item: Any) -> Optional[Release]:
        if not isinstance(item, dict):
            logger.warning(
                "Skipping malformed release entry from %s: expected dict, got %s",
                self.base_url,
                type(item).__name__,
            )
            return None

        version = item.get("version")
        if not isinstance(version, str) or not version.strip():
            logger.warning("Skipping release entry with missing or invalid version")
            return None

        raw_position = item.get(self.build_position_field)
        try:
            position = int(raw_position)
        except (TypeError, ValueError):
            logger.warning(
                "Skipping release %s with invalid %s value %r",
                version,
                self.build_position_field,
                raw_position,
            )
            return None

        return Release(version=version.strip(), build_position=position)
