"""Shared fixtures: in-memory provider-style tarballs."""

from __future__ import annotations

import io
import tarfile

import pytest

PREFIX = "owner-repo-abc123"


def _add_directory(tar: tarfile.TarFile, name: str) -> None:
    info = tarfile.TarInfo(name)
    info.type = tarfile.DIRTYPE
    info.mode = 0o755
    tar.addfile(info)


def build_tarball(entries, prefix: str = PREFIX, mode: str = "w", global_header: bool = True) -> bytes:
    """Build a tarball laid out like a GitHub/GitLab source archive.

    `entries` maps repository-relative paths to file content; a value of None
    adds a directory. Ancestor directory entries are emitted before their
    children, with the root folder first, as the providers do.
    """
    buffer = io.BytesIO()
    pax_headers = {"comment": "abc123def456"} if global_header else {}
    with tarfile.open(fileobj=buffer, mode=mode, format=tarfile.PAX_FORMAT, pax_headers=pax_headers) as tar:
        seen = set()

        def ensure_directory(name):
            if name not in seen:
                seen.add(name)
                _add_directory(tar, name)

        if prefix:
            ensure_directory(prefix)
        for path, content in entries.items():
            parts = path.strip("/").split("/")
            for depth in range(1, len(parts)):
                ensure_directory("/".join(filter(None, [prefix, *parts[:depth]])))

            name = "/".join(filter(None, [prefix, *parts]))
            if content is None:
                ensure_directory(name)
            else:
                data = content.encode("utf-8")
                info = tarfile.TarInfo(name)
                info.size = len(data)
                info.mode = 0o644
                tar.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


@pytest.fixture
def make_tarball():
    return build_tarball


@pytest.fixture
def output_dir(tmp_path):
    path = tmp_path / "output"
    path.mkdir()
    return path


async def aiter_chunks(data: bytes, size: int = 512):
    """Yield `data` in fixed-size chunks, like an HTTP body."""
    for start in range(0, len(data), size):
        yield data[start:start + size]


@pytest.fixture
def chunked():
    return aiter_chunks
