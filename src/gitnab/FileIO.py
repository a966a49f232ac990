"""Blocking file-like adapter over an async byte stream.

Provides AsyncIteratorStream, an io.RawIOBase-compatible stream that pulls
chunks from an async iterable (such as ``httpx.Response.aiter_bytes()``)
owned by an event loop running in another thread. It lets the stdlib
`tarfile` stream decoder, which only knows blocking ``read()``, run in a
worker thread while the download keeps running on the loop.

Classes:
    AsyncIteratorStream: Forward-only, read-only bridge stream.
"""

import asyncio
import io
from typing import AsyncIterable, AsyncIterator

import httpx

from .Errors import ArchiveStreamError


class AsyncIteratorStream(io.RawIOBase):
    """File-like stream backed by an async iterator of byte chunks.

    Only one region is held in memory at a time: the remainder of the chunk
    most recently received from the iterator. Each refill schedules one
    ``__anext__`` on `loop` and blocks the calling thread until it resolves,
    so this object must never be read from the loop's own thread.

    Attributes:
        loop (asyncio.AbstractEventLoop): Loop that owns the async iterator.
        pos (int): Number of bytes handed out so far.
    """
    def __init__(self, chunks: AsyncIterable[bytes], loop: asyncio.AbstractEventLoop):
        self.loop = loop
        self.pos: int = 0
        self._iterator: AsyncIterator[bytes] = chunks.__aiter__()
        self._buffer: memoryview = memoryview(b"")
        self._exhausted: bool = False

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return False

    def writable(self) -> bool:
        return False

    def tell(self) -> int:
        return self.pos

    async def _pull(self) -> bytes:
        try:
            return await self._iterator.__anext__()
        except StopAsyncIteration:
            return b""

    def _refill(self) -> None:
        """Block until the next non-empty chunk arrives or the iterator ends.

        Raises:
            ArchiveStreamError: If the underlying source fails mid-read.
        """
        while not self._buffer and not self._exhausted:
            future = asyncio.run_coroutine_threadsafe(self._pull(), self.loop)
            try:
                chunk = future.result()
            except httpx.TransportError as e:
                raise ArchiveStreamError(f"Network error while reading archive stream: {e}") from e
            except Exception as e:
                raise ArchiveStreamError(f"Failed to read archive stream: {e}") from e
            if chunk:
                self._buffer = memoryview(chunk)
            else:
                self._exhausted = True

    def readinto(self, b) -> int:
        """Copy up to ``len(b)`` buffered bytes into `b`.

        Returns:
            int: Number of bytes copied, 0 at end of stream.
        """
        self._refill()
        if not self._buffer:
            return 0

        size = min(len(b), len(self._buffer))
        b[:size] = self._buffer[:size]
        # Slicing a memoryview does not copy the remainder
        self._buffer = self._buffer[size:]
        self.pos += size
        return size
