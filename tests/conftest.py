from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple
from unittest.mock import AsyncMock, MagicMock

import platformdirs
import pytest

_ASYNC_NETWORK_BLOCK_MSG = (
    "Async network access is blocked during tests. Mock aiohttp.ClientSession."
)


async def _async_block_network(*_args, **_kwargs):
    """
    Prevent async network calls during tests by raising a RuntimeError.

    Raises:
        RuntimeError: `_ASYNC_NETWORK_BLOCK_MSG` suggesting to mock `aiohttp.ClientSession`.
    """
    raise RuntimeError(_ASYNC_NETWORK_BLOCK_MSG)


def pytest_configure(config):
    """
    Register the markers used across the suite.

    Parameters:
        config: pytest.Config
    """
    config.addinivalue_line("markers", "asyncio: mark test as an asyncio test")
    config.addinivalue_line("markers", "unit: fast tests without I/O")


@pytest.fixture(autouse=True)
def _isolate_test_environment(tmp_path_factory, monkeypatch):
    """
    Point platformdirs, XDG variables and browser_manager.settings at a temp tree.

    Also clears the environment variables browser-manager reads so a developer's
    shell cannot leak configuration or tokens into tests.
    """
    base = tmp_path_factory.mktemp("browser-manager")
    cache_dir = base / "cache"
    state_dir = base / "state"
    config_dir = base / "config"
    log_dir = state_dir / "log"

    for path in (cache_dir, state_dir, config_dir, log_dir):
        path.mkdir(parents=True, exist_ok=True)

    monkeypatch.setenv("XDG_CACHE_HOME", str(cache_dir))
    monkeypatch.setenv("XDG_STATE_HOME", str(state_dir))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_dir))
    monkeypatch.delenv("BROWSER_MANAGER_CONFIG", raising=False)
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)

    monkeypatch.setattr(
        platformdirs, "user_cache_dir", lambda *_args, **_kwargs: str(cache_dir)
    )
    monkeypatch.setattr(
        platformdirs, "user_config_dir", lambda *_args, **_kwargs: str(config_dir)
    )
    monkeypatch.setattr(
        platformdirs, "user_log_dir", lambda *_args, **_kwargs: str(log_dir)
    )

    import browser_manager.settings as settings

    monkeypatch.setattr(settings, "CONFIG_DIR", str(config_dir))
    monkeypatch.setattr(
        settings, "CONFIG_FILE", str(Path(config_dir) / "browser-manager.yaml")
    )
    monkeypatch.setattr(settings, "LOG_DIR", str(log_dir))


def pytest_runtest_setup():
    """
    Prevent real network requests by replacing aiohttp entry points with a blocker.
    """
    import aiohttp

    aiohttp.request = _async_block_network
    aiohttp.ClientSession.request = _async_block_network  # type: ignore[assignment]
    aiohttp.ClientSession.get = _async_block_network  # type: ignore[assignment]
    aiohttp.ClientSession.post = _async_block_network  # type: ignore[assignment]
    aiohttp.ClientSession.head = _async_block_network  # type: ignore[assignment]


# =============================================================================
# Async Test Fixtures
# =============================================================================


@pytest.fixture
def mock_async_response(mocker):
    """
    Provide a factory that creates mock aiohttp responses usable with `async with`.

    Returns:
        factory (callable): Accepts `status`, `headers`, `json_data`, `json_error`
        and `content_chunks` and returns a configured mock response.
    """

    def _create_response(
        status=200,
        headers=None,
        json_data=None,
        json_error=None,
        content_chunks=None,
    ):
        response = AsyncMock()
        response.status = status
        response.reason = "OK" if status < 400 else "Error"
        response.headers = headers or {}
        if json_error is not None:
            response.json = AsyncMock(side_effect=json_error)
        else:
            response.json = AsyncMock(return_value=json_data)
        response.__aenter__ = AsyncMock(return_value=response)
        response.__aexit__ = AsyncMock(return_value=False)

        if content_chunks is not None:

            async def _async_iter_chunks():
                for chunk in content_chunks:
                    yield chunk

            mock_content = mocker.MagicMock()
            mock_content.iter_chunked = mocker.Mock(return_value=_async_iter_chunks())
            response.content = mock_content

        return response

    return _create_response


class FakeChromiumUpstream:
    """
    In-memory release feed and snapshot bucket.

    `releases` is the full newest-first feed as (version, position) tuples and
    `available` the set of positions with a snapshot. Every call is recorded.
    """

    def __init__(
        self,
        releases: Iterable[Tuple[str, int]],
        available: Iterable[int] = (),
    ) -> None:
        self.releases: List[Tuple[str, int]] = list(releases)
        self.available = set(available)
        self.page_requests: List[Dict[str, Any]] = []
        self.head_requests: List[str] = []

    async def get_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        params = params or {}
        self.page_requests.append(dict(params))
        offset = int(params.get("offset", 0))
        num = int(params.get("num", 50))
        return [
            {"version": version, "chromium_main_branch_position": position}
            for version, position in self.releases[offset : offset + num]
        ]

    async def exists(self, url: str) -> bool:
        self.head_requests.append(url)
        position = int(url.rstrip("/").split("/")[-2])
        return position in self.available

    @property
    def probed_positions(self) -> List[int]:
        return [int(url.split("/")[-2]) for url in self.head_requests]


@pytest.fixture
def fake_upstream_factory():
    """Build FakeChromiumUpstream instances."""
    return FakeChromiumUpstream


@pytest.fixture
def mock_client():
    """
    An AsyncHttpClient stand-in whose network methods are AsyncMocks.
    """
    from browser_manager.resolve.http_client import AsyncHttpClient

    client = MagicMock(spec=AsyncHttpClient)
    client.get_json = AsyncMock()
    client.exists = AsyncMock(return_value=False)
    client.download_file = AsyncMock()
    client.close = AsyncMock()
    return client


@pytest.fixture
def sample_chromium_feed():
    """
    A 120-entry newest-first feed: six patches each of majors 120 down to 101.
    """
    releases = []
    position = 1_300_000
    for major in range(120, 100, -1):
        for patch in range(5, -1, -1):
            releases.append((f"{major}.0.{major * 50}.{patch}", position))
            position -= 1_000
    return releases


@pytest.fixture
def frozen_clock():
    """A controllable clock: call `advance(seconds)` to move it forward."""

    class _Clock:
        def __init__(self):
            self.now = 1_000.0

        def __call__(self):
            return self.now

        def advance(self, seconds):
            self.now += seconds

    return _Clock()

