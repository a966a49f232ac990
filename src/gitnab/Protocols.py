"""Shared value types and the provider protocol.

`RepoInfo` is what URL parsing produces, `ExtractOptions` is what the
extraction engine consumes, and `GitProviderProtocol` is the contract every
hosting provider adapter (GitHub, GitLab) implements.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Protocol


@dataclass(frozen=True)
class RepoInfo:
    """Provider-agnostic repository coordinate."""
    owner: str
    repo: str
    ref: str
    subpath: str


@dataclass(frozen=True)
class ExtractOptions:
    """Options for a single extraction run.

    Attributes:
        destination (Path): Directory the extracted tree is written into.
        subpath (str): Path inside the repository to extract, e.g. "src/lib".
        keep_folder_name (bool): Keep the last subpath segment as a folder
            under `destination` instead of flattening it away.
    """
    destination: Path
    subpath: str
    keep_folder_name: bool = False


@dataclass(frozen=True)
class Settings:
    """Runtime settings for downloads, usually filled in from CLI options."""
    token: str | None = None
    timeout: float = 30.0
    max_retries: int = 3
    user_agent: str = "gitnab"
    extra_headers: Mapping[str, str] = field(default_factory=dict)


class GitProviderProtocol(Protocol):
    """Protocol describing a Git hosting provider.

    Implementations know how to recognise and parse their own tree URLs and
    where the provider serves a tarball for a given ref.
    """
    name: str

    def can_handle(self, url: str) -> bool:
        """Return True if `url` looks like it belongs to this provider."""
        ...

    def parse_url(self, url: str) -> RepoInfo:
        """Parse a tree URL into a RepoInfo.

        Raises:
            InvalidURLError: If the URL does not match the provider's format.
        """
        ...

    def tarball_url(self, info: RepoInfo) -> str:
        """Return the URL serving the repository tarball for `info.ref`."""
        ...

    def headers(self, settings: Settings) -> dict[str, str]:
        """Return request headers, including authentication if configured."""
        ...

    def format_error(self, info: RepoInfo, status: int, headers: Mapping[str, str]) -> str:
        """Return a human readable message for a failed tarball request."""
        ...
