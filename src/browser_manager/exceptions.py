"""
Custom exceptions for browser-manager.

Every failure a resolution can end in maps to exactly one exception class
below. None of them is retried by the resolver; the caller decides whether to
retry, prompt, or abort.
"""

from typing import Optional


class BrowserManagerError(Exception):
    """
    Base exception for all browser-manager errors.

    Catch this to handle any resolution failure in one place.
    """

    def __init__(self, message: str, details: Optional[str] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: The primary error message.
            details: Optional additional context about the error.
        """
        self.message = message
        self.details = details
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


# =============================================================================
# Platform Errors
# =============================================================================


class UnsupportedPlatformError(BrowserManagerError):
    """Raised when a browser has no build for the requested platform."""

    def __init__(
        self,
        platform: str,
        browser: Optional[str] = None,
        details: Optional[str] = None,
    ) -> None:
        self.platform = platform
        self.browser = browser
        target = f" for {browser}" if browser else ""
        super().__init__(f"Unsupported platform{target}: {platform}", details)


class UnsupportedArchError(BrowserManagerError):
    """Raised when a browser has no build for the requested architecture."""

    def __init__(
        self,
        arch: str,
        platform: Optional[str] = None,
        browser: Optional[str] = None,
    ) -> None:
        self.arch = arch
        self.platform = platform
        self.browser = browser
        parts = [p for p in (browser, platform) if p]
        target = f" for {' on '.join(parts)}" if parts else ""
        super().__init__(f"Unsupported architecture{target}: {arch}")


# =============================================================================
# Resolution Errors
# =============================================================================


class VersionNotFoundError(BrowserManagerError):
    """
    Raised when the requested version cannot be matched.

    For Chromium this means no feed page within the search bound listed the
    version, either because the scan overshot it or the bound was exhausted.
    """

    def __init__(
        self,
        version: str,
        platform_key: Optional[str] = None,
        details: Optional[str] = None,
    ) -> None:
        self.version = version
        self.platform_key = platform_key
        where = f" on {platform_key}" if platform_key else ""
        super().__init__(f"No build found for version {version}{where}", details)


class NoArtifactNearPositionError(BrowserManagerError):
    """
    Raised when a feed entry matched but no nearby build has a snapshot.

    Attributes:
        build_position: The position reported by the feed.
        attempts: Number of existence checks issued before giving up.
    """

    def __init__(
        self,
        build_position: int,
        platform_key: Optional[str] = None,
        attempts: int = 0,
    ) -> None:
        self.build_position = build_position
        self.platform_key = platform_key
        self.attempts = attempts
        where = f" for {platform_key}" if platform_key else ""
        super().__init__(
            f"No valid build found near {build_position}{where}",
            f"checked {attempts} candidate(s)" if attempts else None,
        )


class FeedUnavailableError(BrowserManagerError):
    """
    Raised for transport or HTTP failures talking to an upstream feed.

    Attributes:
        url: The URL that was being requested.
        status_code: HTTP status code, or None for network-level failures.
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[str] = None,
    ) -> None:
        super().__init__(message, details)
        self.url = url
        self.status_code = status_code


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(BrowserManagerError):
    """Raised when the configuration file cannot be read or is invalid."""

    pass
