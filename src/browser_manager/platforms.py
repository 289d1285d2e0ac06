"""
Platform and architecture detection helpers.
"""

from __future__ import annotations

import platform

from browser_manager.constants import (
    ARCH_ARM64,
    ARCH_X64,
    PLATFORM_LINUX,
    PLATFORM_MAC,
    PLATFORM_WINDOWS,
)
from browser_manager.exceptions import UnsupportedArchError, UnsupportedPlatformError

_PLATFORM_ALIASES = {
    "mac": PLATFORM_MAC,
    "macos": PLATFORM_MAC,
    "darwin": PLATFORM_MAC,
    "osx": PLATFORM_MAC,
    "windows": PLATFORM_WINDOWS,
    "win": PLATFORM_WINDOWS,
    "win32": PLATFORM_WINDOWS,
    "linux": PLATFORM_LINUX,
}

_ARCH_ALIASES = {
    "x64": ARCH_X64,
    "x86_64": ARCH_X64,
    "amd64": ARCH_X64,
    "arm64": ARCH_ARM64,
    "aarch64": ARCH_ARM64,
}


def normalize_platform(name: str) -> str:
    """
    Map a platform spelling ("darwin", "macOS", "Win", ...) to its canonical name.

    Unknown names are returned lower-cased so callers can report them verbatim.
    """
    normalized = (name or "").strip().lower()
    return _PLATFORM_ALIASES.get(normalized, normalized)


def normalize_arch(name: str) -> str:
    """Map an architecture spelling ("x86_64", "aarch64", ...) to "x64" or "arm64"."""
    normalized = (name or "").strip().lower()
    return _ARCH_ALIASES.get(normalized, normalized)


def get_current_platform() -> str:
    """
    Determine the canonical platform of the running interpreter.

    Raises:
        UnsupportedPlatformError: If the host OS is not Windows, macOS or Linux.
    """
    system = platform.system()
    normalized = normalize_platform(system)
    if normalized not in (PLATFORM_WINDOWS, PLATFORM_MAC, PLATFORM_LINUX):
        raise UnsupportedPlatformError(system or "unknown")
    return normalized


def get_current_arch() -> str:
    """
    Determine the canonical CPU architecture of the running interpreter.

    Raises:
        UnsupportedArchError: If the host is neither x86-64 nor ARM64.
    """
    machine = platform.machine()
    normalized = normalize_arch(machine)
    if normalized not in (ARCH_X64, ARCH_ARM64):
        raise UnsupportedArchError(machine or "unknown")
    return normalized
