"""Path matching and rewriting for provider tarballs.

Provider tarballs wrap the repository in one generated root folder such as
``owner-repo-1a2b3c4/``. The helpers here work on the raw member path of one
archive entry at a time and decide whether it lies below the requested
subpath and where it should land relative to the destination.

Directory entries must be passed with a trailing ``/`` (tarfile strips it
from member names), so that the root folder entry yields the prefix.

All functions are pure; the extraction engine owns any state.
"""

import enum
from dataclasses import dataclass

SEPARATOR = "/"


class EntryKind(enum.Enum):
    FILE = "file"
    DIRECTORY = "directory"
    OTHER = "other"


class Action(enum.Enum):
    SKIP = "skip"
    WRITE_DIRECTORY = "write_directory"
    WRITE_FILE = "write_file"


@dataclass(frozen=True)
class Decision:
    """Outcome of resolving one archive entry.

    `matched` is reported separately from `action` because an entry can lie
    under the subpath and still have nothing to write (the kept folder's own
    marker, or a symlink).
    """
    action: Action
    path: str = ""
    matched: bool = False


SKIP = Decision(Action.SKIP)


def split_subpath(subpath: str) -> tuple[str, ...]:
    """Split a subpath string into its non-empty segments."""
    return tuple(part for part in subpath.split(SEPARATOR) if part)


def detect_prefix(entry_path: str) -> str | None:
    """Return the archive root prefix (including the separator) or None."""
    index = entry_path.find(SEPARATOR)
    if index <= 0:
        return None
    return entry_path[:index + 1]


def strip_count(subpath_parts: tuple[str, ...], keep_folder_name: bool) -> int:
    """Number of leading segments removed from every matched entry path.

    One for the root prefix plus the subpath depth, minus one if the last
    subpath segment should survive as a folder.
    """
    depth = len(subpath_parts)
    if keep_folder_name and depth:
        depth -= 1
    return 1 + depth


def matches(entry_path: str, prefix: str | None, subpath_parts: tuple[str, ...]) -> bool:
    """Return True if `entry_path` is a descendant of the requested subpath.

    Segments are compared whole, so ``examples-v2/x`` never matches the
    subpath ``examples``. The subpath directory itself does not match.
    """
    if not prefix or not entry_path.startswith(prefix):
        return False

    parts = split_subpath(entry_path[len(prefix):])
    if len(parts) <= len(subpath_parts):
        return False
    return parts[:len(subpath_parts)] == subpath_parts


def rewrite_path(entry_path: str, count: int) -> str:
    """Drop the first `count` segments of `entry_path`.

    An empty result means the entry has nothing left to write.
    """
    return SEPARATOR.join(entry_path.split(SEPARATOR)[count:])


def decide(
    entry_path: str,
    kind: EntryKind,
    prefix: str | None,
    subpath_parts: tuple[str, ...],
    count: int,
) -> Decision:
    """Resolve one entry into a single action for the engine to carry out."""
    if not matches(entry_path, prefix, subpath_parts):
        return SKIP

    new_path = rewrite_path(entry_path, count).rstrip(SEPARATOR)
    if not new_path or kind is EntryKind.OTHER:
        return Decision(Action.SKIP, matched=True)

    if kind is EntryKind.DIRECTORY:
        return Decision(Action.WRITE_DIRECTORY, new_path, matched=True)
    return Decision(Action.WRITE_FILE, new_path, matched=True)
