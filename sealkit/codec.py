from __future__ import annotations

import io
from typing import Optional

import zstandard

from .constants import ZSTD_MAGIC
from .errors import DecodeError


class _ZstdStream:
    """Read-only file object over a zstd stream that reports decode failures as DecodeError."""

    def __init__(self, reader):
        self._reader = reader
        self._pending = b""

    def _read(self, size: int) -> bytes:
        try:
            return self._reader.read(size)
        except zstandard.ZstdError as e:
            raise DecodeError(f"zstd decompression failed: {e}") from e

    def empty(self) -> bool:
        """True if the decompressed stream has no data left; nothing is consumed."""
        if not self._pending:
            self._pending = self._read(1)
        return not self._pending

    def read(self, size: int = -1) -> bytes:
        if size == 0:
            return b""
        data, self._pending = self._pending, b""
        if size is None or size < 0:
            return data + self._read(-1)
        if len(data) >= size:
            return data
        return data + self._read(size - len(data))

    @property
    def closed(self) -> bool:
        return self._reader.closed

    def close(self) -> None:
        self._reader.close()


def open_zstd_stream(data: bytes) -> _ZstdStream:
    """Return a sequential reader over the decompressed contents of ``data``.

    The frame header is checked up front so that non-zstd input fails before
    any consumer starts reading. Corruption further into the stream surfaces
    as DecodeError from ``read()``.
    """
    if not data.startswith(ZSTD_MAGIC):
        raise DecodeError("input is not zstd compressed (bad frame magic)")
    try:
        zstandard.get_frame_parameters(data)
    except zstandard.ZstdError as e:
        raise DecodeError(f"invalid zstd frame header: {e}") from e
    dctx = zstandard.ZstdDecompressor()
    # read_across_frames: archives produced by multi-threaded compressors may span frames
    reader = dctx.stream_reader(io.BytesIO(data), read_across_frames=True)
    return _ZstdStream(reader)


def compress(data: bytes, level: Optional[int] = None) -> bytes:
    try:
        c = zstandard.ZstdCompressor(level=level if level is not None else 3)
        return c.compress(data)
    except zstandard.ZstdError as e:
        raise RuntimeError(f"zstd compression failed: {e}")
