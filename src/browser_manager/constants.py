"""
Constants and configuration values for browser-manager.

This module contains the upstream URLs, search bounds, timeouts, and logging
settings used throughout the application.
"""

# Chromium release feed and snapshot storage
CHROMIUM_FEED_URL = "https://chromiumdash.appspot.com/fetch_releases"
CHROMIUM_STORAGE_URL = (
    "https://commondatastorage.googleapis.com/chromium-browser-snapshots"
)
CHROMIUM_FEED_CHANNEL = "Stable"
# Field carrying the build position in the feed payload
CHROMIUM_BUILD_POSITION_FIELD = "chromium_main_branch_position"

# Latest-version upstreams
GITHUB_API_BASE = "https://api.github.com/repos"
BRAVE_RELEASES_URL = f"{GITHUB_API_BASE}/brave/brave-browser/releases/latest"
EDGE_UPDATES_URL = "https://edgeupdates.microsoft.com/api/products"
CHROME_VERSIONS_URL = (
    "https://raw.githubusercontent.com/ulixee/chrome-versions/refs/heads/main/"
    "versions.json"
)

# Feed pagination
FEED_PAGE_SIZE = 50
FEED_MAX_OFFSET = 1000
FEED_SEARCH_LINEAR = "linear"
FEED_SEARCH_BISECT = "bisect"

# Build probing: attempts per side and distance between candidates
NARROW_PROBE_ATTEMPTS = 5
NARROW_PROBE_STRIDE = 1
WIDE_PROBE_ATTEMPTS = 11  # 0..1000 in steps of 100
WIDE_PROBE_STRIDE = 100
PROBE_STRATEGY_NARROW = "narrow"
PROBE_STRATEGY_WIDE = "wide"

# Latest-version cache
LATEST_VERSION_CACHE_TTL_SECONDS = 60 * 60
ARC_LATEST_SENTINEL = "latest"

# Chrome on Apple Silicon has no builds before this version
CHROME_MAC_ARM64_MIN_VERSION = "88.0.4324.150"

# Network settings (in seconds)
DEFAULT_REQUEST_TIMEOUT = 30
DEFAULT_CHUNK_SIZE = 8192
HTTP_STATUS_OK = 200
HTTP_STATUS_ERROR_THRESHOLD = 400
BYTES_PER_MEGABYTE = 1024 * 1024
FILE_SIZE_MB_LOGGING_THRESHOLD = 1.0

# Platforms and architectures
PLATFORM_WINDOWS = "windows"
PLATFORM_MAC = "mac"
PLATFORM_LINUX = "linux"
SUPPORTED_PLATFORMS = (PLATFORM_WINDOWS, PLATFORM_MAC, PLATFORM_LINUX)
ARCH_X64 = "x64"
ARCH_ARM64 = "arm64"
SUPPORTED_ARCHS = (ARCH_X64, ARCH_ARM64)

# Configuration
APP_NAME = "browser-manager"
CONFIG_FILE_NAME = "browser-manager.yaml"
CONFIG_PATH_ENV_VAR = "BROWSER_MANAGER_CONFIG"
GITHUB_TOKEN_ENV_VAR = "GITHUB_TOKEN"

# Logging configuration
LOGGER_NAME = "browser_manager"
LOG_FILE_NAME = "browser-manager.log"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
INFO_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
DEBUG_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s: %(message)s"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
LOG_FILE_BACKUP_COUNT = 5

# Environment variable names
LOG_LEVEL_ENV_VAR = "BROWSER_MANAGER_LOG_LEVEL"
