"""
Browser registry.

Per-browser platform support, URL templates and upstream wiring. Resolvers are
built on demand by create_resolver()/create_resolvers(); nothing here holds
state between calls.
"""

from typing import Any, Callable, Dict, List, Optional, Tuple

from browser_manager.constants import (
    ARC_LATEST_SENTINEL,
    ARCH_ARM64,
    ARCH_X64,
    FEED_SEARCH_LINEAR,
    PLATFORM_LINUX,
    PLATFORM_MAC,
    PLATFORM_WINDOWS,
    PROBE_STRATEGY_NARROW,
)
from browser_manager.resolve.build_locator import (
    ArtifactStore,
    BuildLocator,
    get_probe_policy,
)
from browser_manager.resolve.http_client import AsyncHttpClient
from browser_manager.resolve.interfaces import PlatformKey
from browser_manager.resolve.release_feed import ReleaseFeed
from browser_manager.resolve.resolver import BrowserResolver
from browser_manager.resolve.sources import (
    ChromiumFeedLatestSource,
    CuratedVersionTable,
    EdgeUpdateFeedSource,
    GithubLatestReleaseSource,
    StaticLatestSource,
)
from browser_manager.resolve.strategies import BuildSearch, CuratedTable, StaticTemplate
from browser_manager.settings import DEFAULT_CONFIG, validate_config

BOTH_ARCHS = (ARCH_X64, ARCH_ARM64)
X64_ONLY = (ARCH_X64,)

CHROME_PLATFORMS = {
    PLATFORM_WINDOWS: BOTH_ARCHS,
    PLATFORM_MAC: BOTH_ARCHS,
    PLATFORM_LINUX: BOTH_ARCHS,
}
CHROMIUM_PLATFORMS = {
    PLATFORM_WINDOWS: X64_ONLY,
    PLATFORM_MAC: BOTH_ARCHS,
    PLATFORM_LINUX: X64_ONLY,
}
EDGE_PLATFORMS = dict(CHROME_PLATFORMS)
BRAVE_PLATFORMS = dict(CHROME_PLATFORMS)
ARC_PLATFORMS = {
    PLATFORM_WINDOWS: X64_ONLY,
    PLATFORM_MAC: BOTH_ARCHS,
}

# Feed and storage spell the same platform differently
CHROMIUM_PLATFORM_KEYS: Dict[Tuple[str, str], PlatformKey] = {
    (PLATFORM_WINDOWS, ARCH_X64): PlatformKey("Windows", "Win_x64", "chrome-win.zip"),
    (PLATFORM_MAC, ARCH_X64): PlatformKey("Mac", "Mac", "chrome-mac.zip"),
    (PLATFORM_MAC, ARCH_ARM64): PlatformKey("Mac", "Mac_Arm", "chrome-mac.zip"),
    (PLATFORM_LINUX, ARCH_X64): PlatformKey("Linux", "Linux_x64", "chrome-linux.zip"),
}

EDGE_TEMPLATE = StaticTemplate(
    patterns={
        PLATFORM_WINDOWS: (
            "https://msedge.sf.dl.delivery.mp.microsoft.com/filestreamingservice/"
            "files/{version}/MicrosoftEdgeSetup.exe"
        ),
        PLATFORM_MAC: (
            "https://officecdn-microsoft-com.akamaized.net/pr/"
            "C1297A47-86C4-4C1F-97FA-950631F94777/MacAutoupdate/"
            "MicrosoftEdge-{version}.pkg"
        ),
        PLATFORM_LINUX: (
            "https://packages.microsoft.com/repos/edge/pool/main/m/"
            "microsoft-edge-stable/microsoft-edge-stable_{version}_{arch}.deb"
        ),
    },
    arch_tokens={PLATFORM_LINUX: {ARCH_X64: "amd64", ARCH_ARM64: "arm64"}},
)

BRAVE_DOWNLOAD_BASE = "https://github.com/brave/brave-browser/releases/download"
BRAVE_TEMPLATE = StaticTemplate(
    patterns={
        PLATFORM_WINDOWS: BRAVE_DOWNLOAD_BASE + "/v{version}/BraveBrowserSetup{arch}.exe",
        PLATFORM_MAC: BRAVE_DOWNLOAD_BASE + "/v{version}/Brave-Browser-{arch}.dmg",
        PLATFORM_LINUX: (
            BRAVE_DOWNLOAD_BASE + "/v{version}/brave-browser_{version}_{arch}.deb"
        ),
    },
    arch_tokens={
        PLATFORM_WINDOWS: {ARCH_X64: "", ARCH_ARM64: "ARM64"},
        PLATFORM_LINUX: {ARCH_X64: "amd64", ARCH_ARM64: "arm64"},
    },
)

ARC_TEMPLATE = StaticTemplate(
    patterns={
        PLATFORM_WINDOWS: "https://releases.arc.net/windows/ArcInstaller.exe",
        PLATFORM_MAC: "https://releases.arc.net/release/Arc-latest.dmg",
    }
)


def _prepare_config(config: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Merge `config` over DEFAULT_CONFIG and normalise it like a loaded config file."""
    overrides = {k: v for k, v in (config or {}).items() if v is not None}
    return validate_config({**DEFAULT_CONFIG, **overrides})


def _config_value(config: Optional[Dict[str, Any]], key: str) -> Any:
    if config and config.get(key) is not None:
        return config[key]
    return DEFAULT_CONFIG[key]


def _create_chrome(client: AsyncHttpClient, config: Optional[Dict[str, Any]]) -> BrowserResolver:
    table = CuratedVersionTable(client, _config_value(config, "CHROME_VERSIONS_URL"))
    return BrowserResolver(
        name="chrome",
        display_name="Google Chrome",
        platforms=CHROME_PLATFORMS,
        strategy=CuratedTable(table),
        latest_source=table,
    )


def _create_chromium(client: AsyncHttpClient, config: Optional[Dict[str, Any]]) -> BrowserResolver:
    feed = ReleaseFeed(client, _config_value(config, "CHROMIUM_FEED_URL"))
    store = ArtifactStore(client, _config_value(config, "CHROMIUM_STORAGE_URL"))
    locator = BuildLocator(
        feed,
        store,
        probe_policy=get_probe_policy(
            _config_value(config, "PROBE_STRATEGY") or PROBE_STRATEGY_NARROW
        ),
        search=_config_value(config, "FEED_SEARCH") or FEED_SEARCH_LINEAR,
    )
    return BrowserResolver(
        name="chromium",
        display_name="Chromium",
        platforms=CHROMIUM_PLATFORMS,
        strategy=BuildSearch(locator, CHROMIUM_PLATFORM_KEYS),
        latest_source=ChromiumFeedLatestSource(feed, CHROMIUM_PLATFORM_KEYS),
    )


def _create_edge(client: AsyncHttpClient, config: Optional[Dict[str, Any]]) -> BrowserResolver:
    return BrowserResolver(
        name="edge",
        display_name="Microsoft Edge",
        platforms=EDGE_PLATFORMS,
        strategy=EDGE_TEMPLATE,
        latest_source=EdgeUpdateFeedSource(client, _config_value(config, "EDGE_UPDATES_URL")),
    )


def _create_brave(client: AsyncHttpClient, config: Optional[Dict[str, Any]]) -> BrowserResolver:
    return BrowserResolver(
        name="brave",
        display_name="Brave",
        platforms=BRAVE_PLATFORMS,
        strategy=BRAVE_TEMPLATE,
        latest_source=GithubLatestReleaseSource(
            client,
            _config_value(config, "BRAVE_RELEASES_URL"),
            github_token=_config_value(config, "GITHUB_TOKEN"),
        ),
    )


def _create_arc(client: AsyncHttpClient, config: Optional[Dict[str, Any]]) -> BrowserResolver:
    return BrowserResolver(
        name="arc",
        display_name="Arc",
        platforms=ARC_PLATFORMS,
        strategy=ARC_TEMPLATE,
        latest_source=StaticLatestSource(
            ARC_LATEST_SENTINEL, tuple(ARC_PLATFORMS), browser="Arc"
        ),
        rolling_only=True,
    )


_FACTORIES: Dict[
    str, Callable[[AsyncHttpClient, Optional[Dict[str, Any]]], BrowserResolver]
] = {
    "chrome": _create_chrome,
    "chromium": _create_chromium,
    "edge": _create_edge,
    "brave": _create_brave,
    "arc": _create_arc,
}


def list_browsers() -> List[str]:
    """
    Return supported browser names.
    """
    return sorted(_FACTORIES.keys())


def create_resolver(
    name: str,
    client: AsyncHttpClient,
    config: Optional[Dict[str, Any]] = None,
) -> BrowserResolver:
    """
    Build a resolver for one browser.

    Each call returns a new resolver with its own latest-version cache.

    Raises:
        ValueError: If `name` is not a supported browser.
        ConfigurationError: If a config value is outside its allowed set.
    """
    factory = _FACTORIES.get(name.strip().lower())
    if factory is None:
        raise ValueError(
            f"Unknown browser {name!r}; expected one of {', '.join(list_browsers())}"
        )
    return factory(client, _prepare_config(config))


def create_resolvers(
    client: AsyncHttpClient, config: Optional[Dict[str, Any]] = None
) -> Dict[str, BrowserResolver]:
    """Build a resolver for every supported browser, sharing one HTTP client."""
    config = _prepare_config(config)
    return {name: factory(client, config) for name, factory in sorted(_FACTORIES.items())}
