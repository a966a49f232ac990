"""Git hosting provider adapters.

Each provider recognises its own tree URLs, turns them into a `RepoInfo`, and
knows where the matching tarball is served. `parse_url` picks the first
provider that claims a URL.
"""

import re
from typing import Mapping
from urllib.parse import quote

from .Errors import InvalidURLError, UnsupportedURLError
from .Protocols import GitProviderProtocol, RepoInfo, Settings

SHORTHAND_REGEX = re.compile(r"^([^/:]+)/([^/]+)/(.+)$")


def normalize_subpath(subpath: str) -> str:
    """Remove leading and trailing slashes from a subpath."""
    return subpath.strip("/")


def clean_url(url: str) -> str:
    """Drop the query string and trailing slashes."""
    return url.split("?", 1)[0].rstrip("/")


class GitHubProvider(GitProviderProtocol):
    """github.com tree URLs, downloaded through the REST API tarball endpoint."""
    name = "GitHub"

    URL_REGEX = re.compile(r"^https?://github\.com/([^/]+)/([^/]+)/tree/([^/]+)/(.+)$")

    def can_handle(self, url: str) -> bool:
        return "github.com" in url

    def parse_url(self, url: str) -> RepoInfo:
        match = self.URL_REGEX.match(clean_url(url))
        if not match:
            raise InvalidURLError(
                "Invalid GitHub URL format.\n\n"
                "Expected: https://github.com/owner/repo/tree/branch/path\n"
                f"Received: {url}"
            )
        owner, repo, ref, subpath = match.groups()
        return RepoInfo(owner=owner, repo=repo, ref=ref, subpath=normalize_subpath(subpath))

    def tarball_url(self, info: RepoInfo) -> str:
        return f"https://api.github.com/repos/{info.owner}/{info.repo}/tarball/{info.ref}"

    def headers(self, settings: Settings) -> dict[str, str]:
        headers = {
            "User-Agent": settings.user_agent,
            "Accept": "application/vnd.github+json",
        }
        if settings.token:
            headers["Authorization"] = f"Bearer {settings.token}"
        return headers

    def format_error(self, info: RepoInfo, status: int, headers: Mapping[str, str]) -> str:
        if status == 404:
            return (
                f"Repository or branch not found: {info.owner}/{info.repo}@{info.ref}\n"
                "Please check that:\n"
                "  - The repository exists and is public\n"
                f'  - The branch/tag "{info.ref}" exists'
            )
        if status == 403 and headers.get("x-ratelimit-remaining") == "0":
            return "GitHub API rate limit exceeded. Please wait a few minutes and try again."
        return f"GitHub error: {status}"


class GitLabProvider(GitProviderProtocol):
    """gitlab.com tree URLs; the namespace may contain nested groups."""
    name = "GitLab"

    URL_REGEX = re.compile(r"^https?://gitlab\.com/(.+?)/-/tree/([^/]+)/(.+)$")

    def can_handle(self, url: str) -> bool:
        return "gitlab.com" in url

    def parse_url(self, url: str) -> RepoInfo:
        match = self.URL_REGEX.match(clean_url(url))
        if not match:
            raise InvalidURLError(
                "Invalid GitLab URL format.\n\n"
                "Expected: https://gitlab.com/namespace/project/-/tree/branch/path\n"
                f"Received: {url}"
            )
        project_path, ref, subpath = match.groups()
        owner, _, repo = project_path.rpartition("/")
        return RepoInfo(owner=owner, repo=repo, ref=ref, subpath=normalize_subpath(subpath))

    @staticmethod
    def project_path(info: RepoInfo) -> str:
        return f"{info.owner}/{info.repo}" if info.owner else info.repo

    def tarball_url(self, info: RepoInfo) -> str:
        project_id = quote(self.project_path(info), safe="")
        return f"https://gitlab.com/api/v4/projects/{project_id}/repository/archive.tar.gz?sha={quote(info.ref, safe='')}"

    def headers(self, settings: Settings) -> dict[str, str]:
        headers = {"User-Agent": settings.user_agent}
        if settings.token:
            headers["PRIVATE-TOKEN"] = settings.token
        return headers

    def format_error(self, info: RepoInfo, status: int, headers: Mapping[str, str]) -> str:
        if status == 404:
            return (
                f"Project or branch not found: {self.project_path(info)}@{info.ref}\n"
                "Please check that:\n"
                "  - The project exists and is public\n"
                f'  - The branch/tag "{info.ref}" exists'
            )
        return f"GitLab error: {status}"


PROVIDERS: list[GitProviderProtocol] = [GitHubProvider(), GitLabProvider()]


def parse_url(url: str) -> tuple[GitProviderProtocol, RepoInfo]:
    """Detect the provider for `url` and parse it.

    Full tree URLs are tried against each provider in turn. A bare
    ``owner/repo/path`` shorthand is read as GitHub on the ``main`` branch.

    Raises:
        InvalidURLError: A provider recognised the URL but it is malformed.
        UnsupportedURLError: No provider recognised the URL.
    """
    trimmed = url.rstrip("/")

    for provider in PROVIDERS:
        if provider.can_handle(trimmed):
            return provider, provider.parse_url(trimmed)

    if "://" not in trimmed:
        match = SHORTHAND_REGEX.match(trimmed)
        if match:
            owner, repo, subpath = match.groups()
            return PROVIDERS[0], RepoInfo(owner=owner, repo=repo, ref="main", subpath=normalize_subpath(subpath))

    raise UnsupportedURLError(
        "Unsupported URL format.\n\n"
        "Supported formats:\n"
        "  GitHub: https://github.com/owner/repo/tree/branch/path\n"
        "  GitLab: https://gitlab.com/namespace/project/-/tree/branch/path\n"
        "  Shorthand: owner/repo/path (GitHub, main branch)\n\n"
        f"Received: {url}"
    )
