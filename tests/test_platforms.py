"""
Tests for platform and architecture normalization.
"""

import pytest

from browser_manager import platforms
from browser_manager.exceptions import UnsupportedArchError, UnsupportedPlatformError

pytestmark = [pytest.mark.unit]


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("Darwin", "mac"),
        ("macOS", "mac"),
        ("Windows", "windows"),
        ("win32", "windows"),
        ("Linux", "linux"),
        (" linux ", "linux"),
        ("FreeBSD", "freebsd"),
    ],
)
def test_normalize_platform(raw, expected):
    assert platforms.normalize_platform(raw) == expected


@pytest.mark.parametrize(
    "raw,expected",
    [("x86_64", "x64"), ("AMD64", "x64"), ("aarch64", "arm64"), ("arm64", "arm64"), ("i386", "i386")],
)
def test_normalize_arch(raw, expected):
    assert platforms.normalize_arch(raw) == expected


def test_current_platform(mocker):
    mocker.patch("browser_manager.platforms.platform.system", return_value="Darwin")
    assert platforms.get_current_platform() == "mac"


def test_current_platform_unsupported(mocker):
    mocker.patch("browser_manager.platforms.platform.system", return_value="SunOS")
    with pytest.raises(UnsupportedPlatformError):
        platforms.get_current_platform()


def test_current_arch(mocker):
    mocker.patch("browser_manager.platforms.platform.machine", return_value="aarch64")
    assert platforms.get_current_arch() == "arm64"


def test_current_arch_unsupported(mocker):
    mocker.patch("browser_manager.platforms.platform.machine", return_value="ppc64le")
    with pytest.raises(UnsupportedArchError):
        platforms.get_current_arch()
