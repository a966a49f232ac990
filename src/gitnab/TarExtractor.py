"""Streaming tarball extraction engine.

Decodes a provider tarball in a single forward pass with `tarfile` stream
mode, discovers the generated root folder from the first entry, and writes
only the entries below the requested subpath to the destination. Nothing is
buffered beyond one 128 KiB chunk of the current member.

The decode loop is blocking, so `extract_tarball` runs it in a worker
thread. Async byte sources are bridged through
`gitnab.FileIO.AsyncIteratorStream`.
"""

import asyncio
import enum
import logging
import lzma
import tarfile
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterable, BinaryIO, Callable

from .Errors import ArchiveStreamError, ExtractionWriteError, GitnabError, NoFilesFoundError, UnsafePathError
from .FileIO import AsyncIteratorStream
from .PathResolver import Action, EntryKind, SEPARATOR, decide, detect_prefix, split_subpath, strip_count
from .Protocols import ExtractOptions

logger = logging.getLogger(__name__)

CHUNK_SIZE = 128 * 1024  # 128 KiB

# Errors the decoder (or the source stream beneath it) raises on bad input;
# ValueError covers reads from a closed file object
STREAM_ERRORS = (tarfile.TarError, EOFError, OSError, ValueError, zlib.error, lzma.LZMAError)

ProgressCallback = Callable[[int], None]


class State(enum.Enum):
    AWAITING_PREFIX = "awaiting_prefix"
    STREAMING = "streaming"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class ExtractResult:
    """Summary of a finished extraction."""
    output_path: Path
    files: int = 0
    directories: int = 0
    bytes_written: int = 0


def entry_kind(member: tarfile.TarInfo) -> EntryKind:
    if member.isdir():
        return EntryKind.DIRECTORY
    if member.isfile():
        return EntryKind.FILE
    return EntryKind.OTHER


def _read_chunks(source: BinaryIO):
    """Yield chunks of a member's content, tagging read failures as stream errors."""
    while True:
        try:
            chunk = source.read(CHUNK_SIZE)
        except STREAM_ERRORS as e:
            raise ArchiveStreamError(f"Failed to read archive: {e}") from e
        if not chunk:
            return
        yield chunk


class ExtractionRun:
    """State of one extraction call.

    Holds the discovered root prefix, the strip count and the match flag.
    A new instance is created for every call so nothing leaks between runs.

    Attributes:
        destination (Path): Resolved destination directory.
        subpath_parts (tuple[str, ...]): Requested subpath segments.
        strip (int): Leading segments removed from matched entry paths.
        prefix (str | None): Archive root prefix once discovered.
        found (bool): Whether any entry matched the subpath.
        state (State): Current position in the run's lifecycle.
    """

    def __init__(self, options: ExtractOptions, progress_callback: ProgressCallback | None = None) -> None:
        self.options = options
        self.progress_callback = progress_callback
        self.destination = Path(options.destination).resolve()
        self.subpath_parts = split_subpath(options.subpath)
        self.strip = strip_count(self.subpath_parts, options.keep_folder_name)
        self.prefix: str | None = None
        self.found = False
        self.state = State.AWAITING_PREFIX

        output_path = self.destination
        if options.keep_folder_name and self.subpath_parts:
            output_path = output_path / self.subpath_parts[-1]
        self.result = ExtractResult(output_path=output_path)

    def extract(self, fileobj: BinaryIO) -> ExtractResult:
        """Decode `fileobj` to the end and write every matching entry.

        Raises:
            ArchiveStreamError: If the stream is not valid (compressed) tar data
                or ends unexpectedly.
            ExtractionWriteError: If a directory or file cannot be written.
            UnsafePathError: If an entry would land outside the destination.
            NoFilesFoundError: If no entry lies below the requested subpath.
        """
        try:
            with tarfile.open(fileobj=fileobj, mode="r|*") as archive:
                for member in archive:
                    self.handle(archive, member)
        except STREAM_ERRORS as e:
            self.state = State.FAILED
            raise ArchiveStreamError(f"Failed to read archive: {e}") from e
        except GitnabError:
            self.state = State.FAILED
            raise

        return self.finish()

    def handle(self, archive: tarfile.TarFile, member: tarfile.TarInfo) -> None:
        """Process one entry in arrival order."""
        kind = entry_kind(member)
        entry_path = member.name + SEPARATOR if kind is EntryKind.DIRECTORY else member.name

        if self.state is State.AWAITING_PREFIX:
            self.prefix = detect_prefix(entry_path)
            if self.prefix:
                logger.debug("Detected archive root prefix %r", self.prefix)
            else:
                logger.warning("Could not detect archive root prefix from %r", entry_path)
            self.state = State.STREAMING

        decision = decide(entry_path, kind, self.prefix, self.subpath_parts, self.strip)
        if decision.matched:
            self.found = True

        if decision.action is Action.WRITE_DIRECTORY:
            self.make_directory(self.target_for(member.name, decision.path))
        elif decision.action is Action.WRITE_FILE:
            self.write_file(archive, member, self.target_for(member.name, decision.path))
        elif decision.matched and kind is EntryKind.OTHER:
            logger.debug("Skipping unsupported entry type: %s", member.name)

    def target_for(self, entry_name: str, relative_path: str) -> Path:
        target = (self.destination / relative_path).resolve()
        if target != self.destination and self.destination not in target.parents:
            raise UnsafePathError(entry_name)
        return target

    def make_directory(self, target: Path) -> None:
        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ExtractionWriteError(target, e) from e
        self.result.directories += 1

    def write_file(self, archive: tarfile.TarFile, member: tarfile.TarInfo, target: Path) -> None:
        """Stream one member's content into a newly created file."""
        logger.debug("Writing %s", target)
        source = archive.extractfile(member)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "wb") as target_file:
                # The flow is tar stream -> ExtractionRun -> local file
                for chunk in _read_chunks(source):
                    target_file.write(chunk)
                    self.result.bytes_written += len(chunk)
                    if self.progress_callback:
                        self.progress_callback(len(chunk))
        except OSError as e:
            raise ExtractionWriteError(target, e) from e
        self.result.files += 1

    def finish(self) -> ExtractResult:
        if not self.found:
            self.state = State.FAILED
            raise NoFilesFoundError(self.options.subpath)

        self.state = State.COMPLETED
        logger.info(
            "Extracted %d files (%d bytes) to %s",
            self.result.files, self.result.bytes_written, self.result.output_path,
        )
        return self.result


async def extract_tarball(
    stream: BinaryIO | AsyncIterable[bytes],
    options: ExtractOptions,
    progress_callback: ProgressCallback | None = None,
) -> ExtractResult:
    """Extract the entries below `options.subpath` from a tarball stream.

    Args:
        stream: A readable binary file object, or an async iterable of byte
            chunks such as ``httpx.Response.aiter_bytes()``. Gzip, bzip2 and xz
            compression are detected automatically.
        options: Destination, subpath and folder-name handling.
        progress_callback: Optional callable invoked with the number of bytes
            written after every chunk. It runs in the worker thread.

    Returns:
        ExtractResult: Counts and the directory the tree was written to. All
        file writes have completed by the time this returns.

    Raises:
        GitnabError: One of ArchiveStreamError, ExtractionWriteError,
            UnsafePathError or NoFilesFoundError. Files already written are
            left in place.
    """
    run = ExtractionRun(options, progress_callback)

    if hasattr(stream, "read"):
        fileobj = stream
    else:
        fileobj = AsyncIteratorStream(stream, asyncio.get_running_loop())

    return await asyncio.to_thread(run.extract, fileobj)
