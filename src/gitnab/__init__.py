"""gitnab package initializer.

This module provides the package-level public surface for `gitnab`, which
extracts one subdirectory of a GitHub or GitLab repository by streaming the
provider's tarball. It exports a few convenience symbols:

- __version__: Package version string.
- extract_tarball: Filter-and-extract engine over a tarball stream.
- download_and_extract: Download a tarball and feed it to the engine.
- parse_url: Detect the provider for a tree URL and parse it.
- ExtractOptions / RepoInfo / Settings: Value types used by the above.

The CLI lives in `gitnab.CLI` and is not imported here so that importing the
package stays cheap.

Example:
    import asyncio
    from gitnab import ExtractOptions, download_and_extract, parse_url

    provider, info = parse_url("https://github.com/owner/repo/tree/main/docs")
    asyncio.run(download_and_extract(provider, info, ExtractOptions("docs", info.subpath)))
"""

# Public version string
__version__ = "1.1.0"

from .Downloader import download_and_extract, open_tarball
from .Errors import (
    ArchiveStreamError,
    DownloadError,
    ExtractionWriteError,
    GitnabError,
    InvalidURLError,
    NoFilesFoundError,
    UnsafePathError,
    UnsupportedURLError,
)
from .Protocols import ExtractOptions, GitProviderProtocol, RepoInfo, Settings
from .Providers import parse_url
from .TarExtractor import ExtractResult, extract_tarball

# Define the public API
__all__ = [
    "__version__",
    "extract_tarball",
    "download_and_extract",
    "open_tarball",
    "parse_url",
    "ExtractOptions",
    "ExtractResult",
    "RepoInfo",
    "Settings",
    "GitProviderProtocol",
    "GitnabError",
    "ArchiveStreamError",
    "DownloadError",
    "ExtractionWriteError",
    "InvalidURLError",
    "NoFilesFoundError",
    "UnsafePathError",
    "UnsupportedURLError",
]
