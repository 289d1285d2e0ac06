"""
Download strategies.

Each browser resolves URLs through exactly one of these variants. The resolver
dispatches on the variant type; there is no per-browser subclassing.
"""

from dataclasses import dataclass, field
from typing import Dict, Tuple, Union

from .build_locator import BuildLocator
from .interfaces import PlatformKey
from .sources import CuratedVersionTable


@dataclass(frozen=True)
class StaticTemplate:
    """
    Per-platform URL pattern with `{version}` and `{arch}` placeholders.

    `arch_tokens` maps platform -> arch -> the string substituted for `{arch}`;
    platforms without an entry get the canonical arch name.
    """

    patterns: Dict[str, str]
    arch_tokens: Dict[str, Dict[str, str]] = field(default_factory=dict)

    def render(self, platform: str, arch: str, version: str) -> str:
        arch_token = self.arch_tokens.get(platform, {}).get(arch, arch)
        return self.patterns[platform].format(version=version, arch=arch_token)


@dataclass(frozen=True)
class CuratedTable:
    """Closest-version lookup in a curated version -> URL table."""

    table: CuratedVersionTable


@dataclass(frozen=True)
class BuildSearch:
    """Chromium feed search plus storage probing."""

    locator: BuildLocator
    platform_keys: Dict[Tuple[str, str], PlatformKey]


DownloadStrategy = Union[StaticTemplate, CuratedTable, BuildSearch]
