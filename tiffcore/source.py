"""Byte sources -- where TIFF bytes come from.

``ByteSource`` is the only seam that touches raw storage. Implementations
provide ``length()`` and a pure, bounds-checked ``read(offset, count)``;
fixed-width helpers are derived from ``read``. ``ByteCursor`` layers a
position on top of a source for sequential parsing.

Sources are read-only, so one source may be shared between threads as
long as its ``read`` is safe to call concurrently. A cursor is not: give
each reader its own cursor over the shared source.
"""

import mmap
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Union

from tiffcore.byteorder import ByteOrder, to_u16, to_u32, to_u64
from tiffcore.config import ParserConfig, resolve
from tiffcore.errors import InvalidString, OutOfBounds


class ByteSource(ABC):
    """Addressable, bounds-checked, read-only byte container."""

    @abstractmethod
    def length(self) -> int:
        """Total number of addressable bytes."""
        ...

    @abstractmethod
    def read(self, offset: int, count: int) -> bytes:
        """Return exactly ``count`` bytes starting at ``offset``.

        Raises OutOfBounds when ``offset + count`` exceeds ``length()``
        or when either argument is negative. Never changes any state.
        """
        ...

    def is_empty(self) -> bool:
        return self.length() == 0

    def check_range(self, offset: int, count: int):
        """Raise OutOfBounds unless ``[offset, offset + count)`` is readable."""
        size = self.length()
        if offset < 0 or count < 0 or offset + count > size:
            raise OutOfBounds(offset + count, size)

    def read_u8(self, offset: int) -> int:
        return self.read(offset, 1)[0]

    def read_u16(self, offset: int, order: ByteOrder) -> int:
        return to_u16(self.read(offset, 2), order)

    def read_u32(self, offset: int, order: ByteOrder) -> int:
        return to_u32(self.read(offset, 4), order)

    def read_u64(self, offset: int, order: ByteOrder) -> int:
        return to_u64(self.read(offset, 8), order)


class InMemorySource(ByteSource):
    """Byte source over an in-memory buffer (copied on construction)."""

    __slots__ = ('_data',)

    def __init__(self, data: Union[bytes, bytearray, memoryview]):
        self._data = bytes(data)

    def length(self) -> int:
        return len(self._data)

    def read(self, offset: int, count: int) -> bytes:
        self.check_range(offset, count)
        return self._data[offset:offset + count]

    def as_bytes(self) -> bytes:
        """The underlying buffer."""
        return self._data

    def __repr__(self) -> str:
        return f'InMemorySource(length={len(self._data)})'


class MappedFileSource(ByteSource):
    """Read-only memory-mapped file.

    Use as a context manager, or call ``close()`` when done. Reads after
    closing raise ValueError.
    """

    def __init__(self, path):
        self.path = Path(path)
        self._size = os.path.getsize(self.path)
        self._mm = None
        if self._size > 0:
            # Empty files cannot be mapped; they behave as a zero-length source
            with open(self.path, 'rb') as f:
                self._mm = mmap.mmap(f.fileno(), 0, access=mmap.ACCESS_READ)

    def length(self) -> int:
        return self._size

    def read(self, offset: int, count: int) -> bytes:
        self.check_range(offset, count)
        if count == 0:
            return b''
        if self._mm is None:
            raise ValueError('mapped file source is closed')
        return self._mm[offset:offset + count]

    def close(self):
        if self._mm is not None:
            self._mm.close()
            self._mm = None

    @property
    def closed(self) -> bool:
        return self._mm is None

    def __enter__(self) -> 'MappedFileSource':
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __repr__(self) -> str:
        return f'MappedFileSource({str(self.path)!r}, length={self._size})'


class ByteCursor:
    """Stateful reader over a ByteSource.

    Every read delegates to ``source.read`` at the current position and
    advances only after the read succeeded, so a failed read leaves the
    position where it was.
    """

    __slots__ = ('source', '_position', 'max_ascii_length')

    def __init__(self, source: ByteSource, position: int = 0,
                 config: Optional[ParserConfig] = None):
        self.source = source
        self.max_ascii_length = resolve(config).max_ascii_length
        self._position = 0
        self.seek(position)

    @property
    def position(self) -> int:
        return self._position

    def seek(self, position: int):
        """Move to ``position``; seeking exactly to the end is allowed."""
        size = self.source.length()
        if position < 0 or position > size:
            raise OutOfBounds(position, size)
        self._position = position

    def skip(self, count: int):
        self.seek(self._position + count)

    def remaining(self) -> int:
        return max(self.source.length() - self._position, 0)

    def is_at_end(self) -> bool:
        return self._position >= self.source.length()

    # ------------------------------------------------------------------
    # Sequential reads (advance position)
    # ------------------------------------------------------------------

    def read_bytes(self, count: int) -> bytes:
        data = self.source.read(self._position, count)
        self._position += count
        return data

    def read_u8(self) -> int:
        return self.read_bytes(1)[0]

    def read_u16(self, order: ByteOrder) -> int:
        return to_u16(self.read_bytes(2), order)

    def read_u32(self, order: ByteOrder) -> int:
        return to_u32(self.read_bytes(4), order)

    def read_u64(self, order: ByteOrder) -> int:
        return to_u64(self.read_bytes(8), order)

    def read_u16_array(self, count: int, order: ByteOrder) -> List[int]:
        return [self.read_u16(order) for _ in range(count)]

    def read_u32_array(self, count: int, order: ByteOrder) -> List[int]:
        return [self.read_u32(order) for _ in range(count)]

    def read_ascii_string(self, max_length: Optional[int] = None) -> str:
        """Read up to ``max_length`` bytes, stopping after a NUL byte.

        The terminator is consumed but not returned. ``max_length``
        defaults to the configured ``max_ascii_length``.
        """
        if max_length is None:
            max_length = self.max_ascii_length
        start = self._position
        raw = bytearray()
        try:
            for _ in range(max_length):
                byte = self.read_u8()
                if byte == 0:
                    break
                raw.append(byte)
        except OutOfBounds:
            self._position = start
            raise
        try:
            return raw.decode('utf-8')
        except UnicodeDecodeError as e:
            raise InvalidString(f'ASCII string at offset {start}') from e

    def read_header(self):
        """Parse a TIFF header at the current position and advance past it."""
        from tiffcore.tiff.header import TiffHeader, parse_header
        available = self.remaining()
        if available < TiffHeader.SIZE:
            # Report the same error parse_header gives for a short buffer
            return parse_header(self.source.read(self._position, available))
        return parse_header(self.read_bytes(TiffHeader.SIZE))

    def __repr__(self) -> str:
        return f'ByteCursor(position={self._position}, length={self.source.length()})'
