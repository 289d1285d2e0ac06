"""
Async HTTP Client for browser-manager

This module provides asynchronous HTTP operations using aiohttp, with session
management and error handling shared by every upstream the resolver talks to:

- JSON GETs against release feeds and update APIs
- HEAD existence checks against artifact storage
- Streaming downloads of resolved artifacts
"""

import asyncio
import importlib.metadata
import os
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Dict, Optional, Union

import aiofiles  # type: ignore[import-untyped]
import aiohttp
from aiohttp import ClientSession, ClientTimeout

from browser_manager.constants import (
    APP_NAME,
    BYTES_PER_MEGABYTE,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_REQUEST_TIMEOUT,
    FILE_SIZE_MB_LOGGING_THRESHOLD,
    HTTP_STATUS_ERROR_THRESHOLD,
    HTTP_STATUS_OK,
)
from browser_manager.exceptions import FeedUnavailableError
from browser_manager.log_utils import logger

Pathish = Union[str, Path]

_USER_AGENT_CACHE: Optional[str] = None


def get_user_agent() -> str:
    """
    Get the User-Agent string used for HTTP requests.

    Returns:
        The string `browser-manager/{version}`, or `browser-manager/unknown`
        when the package metadata is unavailable.
    """
    global _USER_AGENT_CACHE

    if _USER_AGENT_CACHE is None:
        try:
            app_version = importlib.metadata.version(APP_NAME)
        except importlib.metadata.PackageNotFoundError:
            app_version = "unknown"
        _USER_AGENT_CACHE = f"{APP_NAME}/{app_version}"

    return _USER_AGENT_CACHE


class AsyncHttpClient:
    """
    Asynchronous HTTP client using aiohttp.

    One client (and one underlying session) is shared by all resolvers created
    from the same registry. Requests are issued one at a time by the callers;
    the client itself never retries.

    Example:
        async with AsyncHttpClient() as client:
            data = await client.get_json(
                "https://chromiumdash.appspot.com/fetch_releases",
                params={"channel": "Stable", "platform": "Mac", "num": 1},
            )
    """

    def __init__(
        self,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        session: Optional[ClientSession] = None,
    ) -> None:
        """
        Initialize the async client.

        Parameters:
            timeout (float): Total request timeout in seconds.
            session (Optional[ClientSession]): Pre-built session to use instead of
                creating one lazily (the caller keeps ownership of its lifecycle).
        """
        self.timeout = ClientTimeout(total=timeout)
        self._session: Optional[ClientSession] = session
        self._owns_session = session is None

    async def __aenter__(self) -> "AsyncHttpClient":
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def _ensure_session(self) -> ClientSession:
        """
        Ensure a session exists, creating one if needed.

        Returns:
            ClientSession: The active aiohttp session.
        """
        if self._session is None or self._session.closed:
            self._session = ClientSession(
                timeout=self.timeout,
                headers=self._get_default_headers(),
            )
            self._owns_session = True
        return self._session

    def _get_default_headers(self) -> Dict[str, str]:
        return {
            "Accept": "application/json",
            "User-Agent": get_user_agent(),
        }

    async def close(self) -> None:
        """Close the client session and release resources."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def get_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """
        Issue a GET request and decode the JSON body.

        Parameters:
            url (str): Endpoint to query.
            params (Optional[Dict[str, Any]]): Query parameters.
            headers (Optional[Dict[str, str]]): Extra request headers.

        Returns:
            Any: The decoded JSON payload.

        Raises:
            FeedUnavailableError: On a non-success status, a network failure, or
                a body that is not valid JSON.
        """
        session = await self._ensure_session()
        request_params = {k: str(v) for k, v in (params or {}).items()}

        try:
            async with session.get(
                url, params=request_params, headers=headers
            ) as response:
                if response.status >= HTTP_STATUS_ERROR_THRESHOLD:
                    raise self._status_error(url, response)
                data = await response.json(content_type=None)
        except aiohttp.ClientError as e:
            logger.error(f"Network error fetching {url}: {e}")
            raise FeedUnavailableError(f"Network error: {e}", url=url) from e
        except ValueError as e:
            # aiohttp raises json.JSONDecodeError (a ValueError) for bad bodies
            raise FeedUnavailableError(
                f"Invalid JSON received from {url}", url=url, details=str(e)
            ) from e

        logger.debug(f"Fetched {url} with params {request_params}")
        return data

    def _status_error(self, url: str, response: Any) -> FeedUnavailableError:
        status = response.status
        if status == 403 and response.headers.get("X-RateLimit-Remaining") == "0":
            reset = response.headers.get("X-RateLimit-Reset")
            return FeedUnavailableError(
                "GitHub API rate limit exceeded",
                url=url,
                status_code=status,
                details=f"Resets at: {reset}" if reset else None,
            )
        reason = getattr(response, "reason", None) or ""
        return FeedUnavailableError(
            f"HTTP error {status} {reason}".rstrip(),
            url=url,
            status_code=status,
        )

    async def exists(self, url: str) -> bool:
        """
        Check whether a URL serves a retrievable resource.

        Issues a HEAD request; only a 200 response counts as present.

        Raises:
            FeedUnavailableError: On network-level failures (not on 4xx/5xx).
        """
        session = await self._ensure_session()
        try:
            async with session.head(url, allow_redirects=True) as response:
                present = response.status == HTTP_STATUS_OK
        except aiohttp.ClientError as e:
            logger.error(f"Network error checking {url}: {e}")
            raise FeedUnavailableError(f"Network error: {e}", url=url) from e

        logger.debug(f"HEAD {url} -> {'found' if present else 'absent'}")
        return present

    async def download_file(
        self,
        url: str,
        target_path: Pathish,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        progress_callback: Optional[Any] = None,
    ) -> Path:
        """
        Download a file to the given path with atomic replacement.

        Parameters:
            url (str): Source URL to download.
            target_path (Pathish): Destination file path; parent directories are created.
            chunk_size (int): Number of bytes to read per chunk.
            progress_callback (Optional[callable]): Called with (downloaded, total, filename);
                may be a coroutine function. Callback errors are logged and ignored.

        Returns:
            Path: The final path of the downloaded file.

        Raises:
            FeedUnavailableError: On HTTP or network failures.
            OSError: On filesystem failures. The temporary file is removed on any error.
        """
        session = await self._ensure_session()
        target = Path(target_path)
        target.parent.mkdir(parents=True, exist_ok=True)
        temp_path = target.with_suffix(
            f"{target.suffix}.tmp.{os.getpid()}.{int(time.time() * 1000)}"
        )

        try:
            start_time = time.time()
            async with session.get(url) as response:
                if response.status >= HTTP_STATUS_ERROR_THRESHOLD:
                    raise self._status_error(url, response)

                raw_content_length = response.headers.get("Content-Length")
                try:
                    total_size = int(raw_content_length) if raw_content_length else 0
                except (TypeError, ValueError):
                    total_size = 0
                downloaded = 0

                async with aiofiles.open(temp_path, "wb") as f:
                    async for chunk in response.content.iter_chunked(chunk_size):
                        await f.write(chunk)
                        downloaded += len(chunk)

                        if progress_callback:
                            try:
                                result = progress_callback(
                                    downloaded, total_size or None, target.name
                                )
                                if asyncio.iscoroutine(result):
                                    await result
                            except Exception as cb_err:
                                logger.debug(f"Progress callback error: {cb_err}")

            elapsed = time.time() - start_time
            file_size_mb = downloaded / BYTES_PER_MEGABYTE
            logger.debug(f"Downloaded {url} in {elapsed:.2f}s ({file_size_mb:.2f} MB)")

            temp_path.replace(target)

            if file_size_mb >= FILE_SIZE_MB_LOGGING_THRESHOLD:
                logger.info(f"Downloaded: {target.name} ({file_size_mb:.1f} MB)")
            else:
                logger.info(f"Downloaded: {target.name} ({downloaded} bytes)")
            return target

        except aiohttp.ClientError as e:
            logger.error(f"Download failed for {url}: {e}")
            _discard(temp_path)
            raise FeedUnavailableError(f"Download failed: {e}", url=url) from e
        except BaseException:
            _discard(temp_path)
            raise


def _discard(path: Path) -> None:
    if path.exists():
        try:
            path.unlink()
        except OSError:
            pass


@asynccontextmanager
async def create_http_client(
    timeout: float = DEFAULT_REQUEST_TIMEOUT,
) -> AsyncIterator[AsyncHttpClient]:
    """
    Provide a configured AsyncHttpClient and ensure it is closed after use.
    """
    client = AsyncHttpClient(timeout=timeout)
    try:
        yield client
    finally:
        await client.close()
