"""
Core data structures for the browser-manager resolution subsystem.
"""

from dataclasses import dataclass, field
from typing import Iterator, List, Optional


@dataclass(frozen=True)
class Release:
    """A single entry of the release feed."""

    version: str
    """Dotted version string as reported by the feed (e.g., '120.0.6099.109')"""

    build_position: int
    """Snapshot counter used as the key into artifact storage"""


@dataclass
class ReleasePage:
    """One page of the release feed, newest first."""

    offset: int
    """Feed offset the page was fetched at"""

    releases: List[Release] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.releases)

    def __iter__(self) -> Iterator[Release]:
        return iter(self.releases)

    @property
    def newest(self) -> Optional[Release]:
        return self.releases[0] if self.releases else None

    @property
    def oldest(self) -> Optional[Release]:
        return self.releases[-1] if self.releases else None

    def find(self, version: str) -> Optional[Release]:
        """Return the first release whose version string equals `version`."""
        for release in self.releases:
            if release.version == version:
                return release
        return None


@dataclass(frozen=True)
class PlatformKey:
    """
    Identifiers for one platform/arch in the Chromium feed and storage.

    The feed query and the storage bucket use different spellings for the same
    platform, so both are carried explicitly.
    """

    api_key: str
    """Value of the feed's `platform` query parameter (e.g., 'Windows')"""

    storage_key: str
    """Directory name in the snapshot bucket (e.g., 'Win_x64')"""

    archive_name: str
    """File name of the snapshot archive (e.g., 'chrome-win.zip')"""

    def __str__(self) -> str:
        return self.storage_key


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of probing storage around a build position."""

    build_position: Optional[int]
    """Position with a retrievable artifact, or None if nothing was found"""

    url: Optional[str] = None
    """Artifact URL for the found position"""

    attempts: int = 0
    """Number of existence checks issued"""

    @property
    def found(self) -> bool:
        return self.build_position is not None
