"""
Tests for the per-family latest-version sources.
"""

import pytest

from browser_manager.exceptions import (
    FeedUnavailableError,
    UnsupportedPlatformError,
    VersionNotFoundError,
)
from browser_manager.resolve.interfaces import PlatformKey
from browser_manager.resolve.release_feed import ReleaseFeed
from browser_manager.resolve.sources import (
    ChromiumFeedLatestSource,
    CuratedVersionTable,
    EdgeUpdateFeedSource,
    GithubLatestReleaseSource,
    StaticLatestSource,
)

CHROME_TABLE = {
    "121.0.6167.85": {
        "mac": "https://dl.test/mac-121.dmg",
        "win": "https://dl.test/win-121.exe",
        "linux": "https://dl.test/linux-121.deb",
    },
    "120.0.6099.109": {
        "mac": "https://dl.test/mac-120.dmg",
        "win": "https://dl.test/win-120.exe",
    },
    "88.0.4324.96": {"mac": "https://dl.test/mac-88-96.dmg"},
    "88.0.4324.150": {"mac": "https://dl.test/mac-88-150.dmg"},
    "broken": "not-a-dict",
}


class TestGithubLatestReleaseSource:
    @pytest.mark.asyncio
    async def test_strips_leading_v(self, mock_client):
        mock_client.get_json.return_value = {
            "tag_name": "v1.61.120",
            "draft": False,
            "prerelease": False,
        }
        source = GithubLatestReleaseSource(mock_client, "https://api.test/latest")

        assert await source.fetch_latest("linux", "x64") == "1.61.120"

    @pytest.mark.asyncio
    async def test_tag_without_prefix(self, mock_client):
        mock_client.get_json.return_value = {"tag_name": "1.61.120"}
        source = GithubLatestReleaseSource(mock_client)

        assert await source.fetch_latest("mac", "arm64") == "1.61.120"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("flag", ["draft", "prerelease"])
    async def test_rejects_unstable_release(self, mock_client, flag):
        mock_client.get_json.return_value = {"tag_name": "v1.62.0", flag: True}
        source = GithubLatestReleaseSource(mock_client)

        with pytest.raises(VersionNotFoundError):
            await source.fetch_latest("linux", "x64")

    @pytest.mark.asyncio
    async def test_missing_tag(self, mock_client):
        mock_client.get_json.return_value = {"name": "no tag"}
        source = GithubLatestReleaseSource(mock_client)

        with pytest.raises(FeedUnavailableError):
            await source.fetch_latest("linux", "x64")

    @pytest.mark.asyncio
    async def test_token_sent_as_authorization(self, mock_client):
        mock_client.get_json.return_value = {"tag_name": "v1.0.0"}
        source = GithubLatestReleaseSource(
            mock_client, "https://api.test/latest", github_token="ghp_test"  # noqa: S106
        )

        await source.fetch_latest("linux", "x64")

        _, kwargs = mock_client.get_json.call_args
        assert kwargs["headers"]["Authorization"] == "token ghp_test"

    @pytest.mark.asyncio
    async def test_no_token_no_authorization(self, mock_client):
        mock_client.get_json.return_value = {"tag_name": "v1.0.0"}
        source = GithubLatestReleaseSource(mock_client)

        await source.fetch_latest("linux", "x64")

        _, kwargs = mock_client.get_json.call_args
        assert "Authorization" not in kwargs["headers"]


class TestEdgeUpdateFeedSource:
    PAYLOAD = [
        {"Product": "Beta", "Releases": [
            {"Platform": "Windows", "Architecture": "x64", "ProductVersion": "122.0.1"}
        ]},
        {"Product": "Stable", "Releases": [
            {"Platform": "Windows", "Architecture": "x86", "ProductVersion": "121.0.9"},
            {"Platform": "Windows", "Architecture": "x64", "ProductVersion": "121.0.2277.83"},
            {"Platform": "Windows", "Architecture": "ARM64", "ProductVersion": "121.0.2277.80"},
            {"Platform": "Darwin", "Architecture": "universal", "ProductVersion": "121.0.1"},
            {"Platform": "Darwin", "Architecture": "ARM64", "ProductVersion": "121.0.2277.84"},
            {"Platform": "Linux", "Architecture": "x64", "ProductVersion": "121.0.2277.85"},
        ]},
    ]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "platform,arch,expected",
        [
            ("windows", "x64", "121.0.2277.83"),
            ("windows", "arm64", "121.0.2277.80"),
            ("mac", "arm64", "121.0.2277.84"),
            ("linux", "x64", "121.0.2277.85"),
        ],
    )
    async def test_matches_platform_and_arch(self, mock_client, platform, arch, expected):
        mock_client.get_json.return_value = self.PAYLOAD
        source = EdgeUpdateFeedSource(mock_client, "https://edge.test/api")

        assert await source.fetch_latest(platform, arch) == expected
        mock_client.get_json.assert_awaited_once_with("https://edge.test/api")

    @pytest.mark.asyncio
    async def test_no_compatible_release(self, mock_client):
        mock_client.get_json.return_value = self.PAYLOAD
        source = EdgeUpdateFeedSource(mock_client)

        with pytest.raises(VersionNotFoundError):
            await source.fetch_latest("linux", "arm64")

    @pytest.mark.asyncio
    async def test_no_stable_product(self, mock_client):
        mock_client.get_json.return_value = [self.PAYLOAD[0]]
        source = EdgeUpdateFeedSource(mock_client)

        with pytest.raises(VersionNotFoundError):
            await source.fetch_latest("windows", "x64")

    @pytest.mark.asyncio
    async def test_unexpected_payload(self, mock_client):
        mock_client.get_json.return_value = {"Product": "Stable"}
        source = EdgeUpdateFeedSource(mock_client)

        with pytest.raises(FeedUnavailableError):
            await source.fetch_latest("windows", "x64")


class TestCuratedVersionTable:
    @pytest.mark.asyncio
    async def test_table_fetched_once(self, mock_client):
        mock_client.get_json.return_value = CHROME_TABLE
        table = CuratedVersionTable(mock_client, "https://table.test/versions.json")

        await table.fetch_latest("mac", "x64")
        await table.closest("100", "windows", "x64")

        assert mock_client.get_json.await_count == 1

    @pytest.mark.asyncio
    async def test_latest_is_first_available_entry(self, mock_client):
        mock_client.get_json.return_value = CHROME_TABLE
        table = CuratedVersionTable(mock_client)

        assert await table.fetch_latest("linux", "x64") == "121.0.6167.85"
        assert await table.fetch_latest("windows", "arm64") == "121.0.6167.85"

    @pytest.mark.asyncio
    async def test_available_versions_filter_platform(self, mock_client):
        mock_client.get_json.return_value = CHROME_TABLE
        table = CuratedVersionTable(mock_client)

        assert await table.available_versions("windows", "x64") == [
            "121.0.6167.85",
            "120.0.6099.109",
        ]

    @pytest.mark.asyncio
    async def test_apple_silicon_minimum_version(self, mock_client):
        mock_client.get_json.return_value = CHROME_TABLE
        table = CuratedVersionTable(mock_client)

        arm = await table.available_versions("mac", "arm64")
        intel = await table.available_versions("mac", "x64")

        assert "88.0.4324.96" not in arm
        assert "88.0.4324.150" in arm
        assert "88.0.4324.96" in intel
        assert await table.closest("80", "mac", "arm64") == "88.0.4324.150"
        assert await table.closest("80", "mac", "x64") == "88.0.4324.96"

    @pytest.mark.asyncio
    async def test_closest_version_policy(self, mock_client):
        mock_client.get_json.return_value = CHROME_TABLE
        table = CuratedVersionTable(mock_client)

        assert await table.closest("120.0.6099.109", "windows", "x64") == "120.0.6099.109"
        assert await table.closest("120.0.6099.200", "windows", "x64") == "121.0.6167.85"
        assert await table.closest("130", "windows", "x64") == "121.0.6167.85"

    @pytest.mark.asyncio
    async def test_download_url(self, mock_client):
        mock_client.get_json.return_value = CHROME_TABLE
        table = CuratedVersionTable(mock_client)

        url = await table.download_url("119", "windows", "x64")

        assert url == "https://dl.test/win-120.exe"

    @pytest.mark.asyncio
    async def test_no_versions_for_platform(self, mock_client):
        mock_client.get_json.return_value = {"1.0": {"mac": "https://dl.test/a"}}
        table = CuratedVersionTable(mock_client)

        with pytest.raises(VersionNotFoundError):
            await table.closest("1.0", "linux", "x64")
        with pytest.raises(VersionNotFoundError):
            await table.fetch_latest("linux", "x64")

    @pytest.mark.asyncio
    async def test_failed_fetch_not_memoized(self, mock_client):
        mock_client.get_json.side_effect = [
            FeedUnavailableError("HTTP error 502"),
            CHROME_TABLE,
        ]
        table = CuratedVersionTable(mock_client)

        with pytest.raises(FeedUnavailableError):
            await table.load()
        assert await table.fetch_latest("linux", "x64") == "121.0.6167.85"

    @pytest.mark.asyncio
    async def test_non_dict_payload(self, mock_client):
        mock_client.get_json.return_value = ["121.0"]
        table = CuratedVersionTable(mock_client)

        with pytest.raises(FeedUnavailableError):
            await table.load()

    @pytest.mark.asyncio
    async def test_unknown_platform(self, mock_client):
        mock_client.get_json.return_value = CHROME_TABLE
        table = CuratedVersionTable(mock_client)

        with pytest.raises(UnsupportedPlatformError):
            await table.available_versions("solaris", "x64")


class TestChromiumFeedLatestSource:
    @pytest.mark.asyncio
    async def test_uses_platform_key(self, mock_client):
        mock_client.get_json.return_value = [
            {"version": "121.0.6167.85", "chromium_main_branch_position": 1233107}
        ]
        key = PlatformKey("Linux", "Linux_x64", "chrome-linux.zip")
        source = ChromiumFeedLatestSource(
            ReleaseFeed(mock_client), {("linux", "x64"): key}
        )

        assert await source.fetch_latest("linux", "x64") == "121.0.6167.85"
        _, kwargs = mock_client.get_json.call_args
        assert kwargs["params"]["platform"] == "Linux"

    @pytest.mark.asyncio
    async def test_unmapped_target(self, mock_client):
        source = ChromiumFeedLatestSource(ReleaseFeed(mock_client), {})

        with pytest.raises(UnsupportedPlatformError):
            await source.fetch_latest("linux", "arm64")
        mock_client.get_json.assert_not_awaited()


class TestStaticLatestSource:
    @pytest.mark.asyncio
    async def test_returns_sentinel(self):
        source = StaticLatestSource()
        assert await source.fetch_latest("mac", "arm64") == "latest"

    @pytest.mark.asyncio
    async def test_linux_unsupported(self):
        source = StaticLatestSource(browser="Arc")

        with pytest.raises(UnsupportedPlatformError):
            await source.fetch_latest("linux", "x64")
