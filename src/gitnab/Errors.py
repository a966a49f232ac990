"""Exception types raised by gitnab.

Library code raises these; only the CLI turns them into messages and exit
codes. Every exception derives from `GitnabError` so callers can catch the
whole family at once.
"""

from pathlib import Path


class GitnabError(Exception):
    """Base class for all gitnab failures."""


class UnsupportedURLError(GitnabError):
    """The URL does not belong to any known provider."""


class InvalidURLError(GitnabError):
    """The URL belongs to a provider but does not point at a subdirectory."""


class DownloadError(GitnabError):
    """The tarball could not be fetched.

    Attributes:
        status_code (int | None): HTTP status returned by the server, or None
            for transport-level failures.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ArchiveStreamError(GitnabError):
    """The byte stream ended early or was not valid tar data."""


class ExtractionWriteError(GitnabError):
    """A directory or file could not be written to the destination."""

    def __init__(self, path: Path, cause: OSError) -> None:
        super().__init__(f"Failed to write {path}: {cause.strerror or cause}")
        self.path = path


class UnsafePathError(GitnabError):
    """An archive entry would be written outside the destination."""

    def __init__(self, entry_name: str) -> None:
        super().__init__(f"Unsafe archive member path detected: {entry_name!r}")
        self.entry_name = entry_name


class NoFilesFoundError(GitnabError):
    """No archive entry fell under the requested subpath."""

    def __init__(self, subpath: str) -> None:
        super().__init__(
            f'No files found at path "{subpath}".\n'
            "Please check that the path exists in the repository."
        )
        self.subpath = subpath
