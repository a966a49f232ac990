"""Tarball download over HTTP.

Opens the provider's tarball endpoint as a streaming `httpx` response so the
extraction engine can consume it chunk by chunk. Redirects (GitHub answers
the API endpoint with a 302 to codeload) are followed by the client.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx

from .Errors import DownloadError
from .Protocols import ExtractOptions, GitProviderProtocol, RepoInfo, Settings
from .TarExtractor import ExtractResult, ProgressCallback, extract_tarball

logger = logging.getLogger(__name__)

DEFAULT_RETRY_AFTER = 3  # seconds


def create_client(settings: Settings) -> httpx.AsyncClient:
    """Build the HTTP client used for tarball downloads (keep-alive, redirects)."""
    return httpx.AsyncClient(
        follow_redirects=True,
        timeout=httpx.Timeout(settings.timeout, read=300.0),
    )


def _retry_after(response: httpx.Response) -> int:
    try:
        return max(int(response.headers.get("Retry-After", DEFAULT_RETRY_AFTER)), 0)
    except ValueError:
        return DEFAULT_RETRY_AFTER


async def _send(
    client: httpx.AsyncClient,
    provider: GitProviderProtocol,
    info: RepoInfo,
    settings: Settings,
) -> httpx.Response:
    url = provider.tarball_url(info)
    headers = {**provider.headers(settings), **settings.extra_headers}
    request = client.build_request("GET", url, headers=headers)
    logger.debug("GET %s", url)

    for attempt in range(settings.max_retries + 1):
        try:
            response = await client.send(request, stream=True)
        except httpx.TransportError as e:
            raise DownloadError(f"Network error: {e}") from e

        if response.status_code == 429 and attempt < settings.max_retries:
            # Rate limited before any data was read; safe to try again
            wait_time = _retry_after(response)
            await response.aclose()
            logger.warning("Received 429 Too Many Requests, retrying after %d seconds", wait_time)
            await asyncio.sleep(wait_time)
            continue

        if response.status_code >= 400:
            await response.aclose()
            raise DownloadError(
                provider.format_error(info, response.status_code, response.headers),
                status_code=response.status_code,
            )
        return response

    # Only reached with a negative max_retries
    raise DownloadError(f"{provider.name} error: 429", status_code=429)


@asynccontextmanager
async def open_tarball(
    provider: GitProviderProtocol,
    info: RepoInfo,
    settings: Settings | None = None,
    client: httpx.AsyncClient | None = None,
) -> AsyncIterator[httpx.Response]:
    """Open a streaming response for the tarball of `info`.

    Args:
        provider: Provider that owns the repository.
        info: Repository coordinate; `info.ref` selects the revision.
        settings: Token, timeout and retry settings. Defaults to `Settings()`.
        client: Optional client to reuse. A private one is created and closed
            otherwise.

    Yields:
        httpx.Response: A response whose body has not been read yet.

    Raises:
        DownloadError: For HTTP errors (formatted by the provider) and
            network failures.
    """
    settings = settings or Settings()
    owns_client = client is None
    if owns_client:
        client = create_client(settings)

    try:
        response = await _send(client, provider, info, settings)
        try:
            yield response
        finally:
            await response.aclose()
    finally:
        if owns_client:
            await client.aclose()


async def download_and_extract(
    provider: GitProviderProtocol,
    info: RepoInfo,
    options: ExtractOptions,
    settings: Settings | None = None,
    client: httpx.AsyncClient | None = None,
    progress_callback: ProgressCallback | None = None,
) -> ExtractResult:
    """Stream the tarball of `info` straight into the extraction engine."""
    async with open_tarball(provider, info, settings, client) as response:
        return await extract_tarball(response.aiter_bytes(), options, progress_callback)
