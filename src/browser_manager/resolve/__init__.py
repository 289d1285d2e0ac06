"""
browser-manager Resolution Subsystem

This package maps a requested browser version to a concrete download URL.

Core Components:
- version: Dotted-version comparison
- release_feed: Paginated Chromium release feed
- build_locator: Feed search and snapshot probing for Chromium
- sources: Latest-version upstreams per browser family
- strategies: Download strategy variants
- resolver: Per-browser resolver with a latest-version cache
- http_client: Shared aiohttp client
"""

from .build_locator import (
    NARROW_PROBE,
    WIDE_PROBE,
    ArtifactStore,
    BuildLocator,
    ProbePolicy,
    get_probe_policy,
)
from .http_client import AsyncHttpClient, create_http_client
from .interfaces import PlatformKey, ProbeResult, Release, ReleasePage
from .release_feed import ReleaseFeed
from .resolver import BrowserResolver
from .sources import (
    ChromiumFeedLatestSource,
    CuratedVersionTable,
    EdgeUpdateFeedSource,
    GithubLatestReleaseSource,
    LatestVersionSource,
    StaticLatestSource,
)
from .strategies import BuildSearch, CuratedTable, DownloadStrategy, StaticTemplate
from .version import compare_versions, find_closest_version, parse_version
from .version_cache import VersionCache, VersionCacheEntry

__all__ = [
    # Data structures
    "Release",
    "ReleasePage",
    "PlatformKey",
    "ProbeResult",
    # Chromium build discovery
    "ReleaseFeed",
    "BuildLocator",
    "ArtifactStore",
    "ProbePolicy",
    "NARROW_PROBE",
    "WIDE_PROBE",
    "get_probe_policy",
    # Latest-version sources
    "LatestVersionSource",
    "GithubLatestReleaseSource",
    "EdgeUpdateFeedSource",
    "CuratedVersionTable",
    "ChromiumFeedLatestSource",
    "StaticLatestSource",
    # Strategies and resolver
    "DownloadStrategy",
    "StaticTemplate",
    "CuratedTable",
    "BuildSearch",
    "BrowserResolver",
    "VersionCache",
    "VersionCacheEntry",
    # Utilities
    "AsyncHttpClient",
    "create_http_client",
    "compare_versions",
    "find_closest_version",
    "parse_version",
]
