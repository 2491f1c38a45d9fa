"""Image File Directory parsing and chain walking.

An IFD is a 2-byte entry count, that many 12-byte entries, and a 4-byte
offset of the next IFD (0 ends the chain). The walk refuses to revisit
an offset and stops with MalformedFile past ``config.max_directories``.
"""

import logging
import struct
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from tiffcore.byteorder import ByteOrder, u32_to_bytes
from tiffcore.config import ParserConfig, resolve
from tiffcore.errors import MalformedFile, OutOfBounds
from tiffcore.source import ByteCursor, ByteSource
from tiffcore.tiff.header import TiffHeader
from tiffcore.tiff.tags import tag_name
from tiffcore.tiff.values import INLINE_THRESHOLD, FieldType

logger = logging.getLogger(__name__)

ENTRY_SIZE = 12


@dataclass(frozen=True)
class DirectoryEntry:
    """A single 12-byte IFD entry as stored in the file.

    ``value_slot`` is the slot decoded as an unsigned 32-bit integer in
    the file's byte order. Whether it is a value or an offset is derived
    from ``dtype`` and ``count`` on demand.
    """

    tag_id: int
    dtype: int
    count: int
    value_slot: int

    @property
    def tag_name(self) -> str:
        return tag_name(self.tag_id)

    @property
    def field_type(self) -> FieldType:
        """Declared type; raises InvalidFieldType for unknown codes."""
        return FieldType.from_code(self.dtype)

    @property
    def total_size(self) -> int:
        return self.field_type.byte_size * self.count

    @property
    def is_inline(self) -> bool:
        return self.total_size <= INLINE_THRESHOLD

    def slot_bytes(self, order: ByteOrder) -> bytes:
        """The value slot re-serialised as it appears on the wire."""
        return u32_to_bytes(self.value_slot, order)


@dataclass(frozen=True)
class Directory:
    """One IFD: its entries in file order and the next IFD offset."""

    entries: Tuple[DirectoryEntry, ...]
    next_ifd_offset: int
    offset: int = 0

    def find_entry(self, tag: int) -> Optional[DirectoryEntry]:
        """First entry with ``tag``; duplicates after it are ignored."""
        for entry in self.entries:
            if entry.tag_id == tag:
                return entry
        return None

    def find_all(self, tag: int) -> List[DirectoryEntry]:
        return [entry for entry in self.entries if entry.tag_id == tag]

    def tag_ids(self) -> List[int]:
        return [entry.tag_id for entry in self.entries]

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[DirectoryEntry]:
        return iter(self.entries)


def _read_entry(cursor: ByteCursor, order: ByteOrder) -> DirectoryEntry:
    data = cursor.read_bytes(ENTRY_SIZE)
    tag_id, dtype, count, value_slot = struct.unpack(order.value + 'HHII', data)
    return DirectoryEntry(tag_id, dtype, count, value_slot)


def read_directory(source: ByteSource, offset: int,
                   order: ByteOrder) -> Directory:
    """Read the IFD at ``offset``.

    Read failures surface as OutOfBounds annotated with the step that
    failed ("reading IFD" or "reading IFD entry").
    """
    try:
        cursor = ByteCursor(source, offset)
        num_entries = cursor.read_u16(order)
    except OutOfBounds as e:
        raise e.with_operation('reading IFD') from e

    entries = []
    try:
        for _ in range(num_entries):
            entries.append(_read_entry(cursor, order))
    except OutOfBounds as e:
        raise e.with_operation('reading IFD entry') from e

    try:
        next_offset = cursor.read_u32(order)
    except OutOfBounds as e:
        raise e.with_operation('reading IFD') from e

    logger.debug("IFD at %d: %d entries, next at %d", offset, num_entries, next_offset)
    return Directory(tuple(entries), next_offset, offset)


def iter_directories(source: ByteSource, header: TiffHeader,
                     config: Optional[ParserConfig] = None) -> Iterator[Directory]:
    """Lazily walk the IFD chain starting at the header's first offset.

    The generator is finite and single-use. A revisited offset or more
    than ``config.max_directories`` directories raises MalformedFile.
    """
    config = resolve(config)
    order = header.byte_order
    offset = header.first_ifd_offset
    seen = set()

    while offset != 0:
        if offset in seen:
            logger.warning("IFD chain loops back to offset %d", offset)
            raise MalformedFile(f'IFD chain revisits offset {offset}')
        if len(seen) >= config.max_directories:
            logger.warning("IFD chain longer than %d directories", config.max_directories)
            raise MalformedFile(
                f'IFD chain exceeds {config.max_directories} directories')
        seen.add(offset)

        directory = read_directory(source, offset, order)
        yield directory
        offset = directory.next_ifd_offset

    logger.debug("IFD chain ended after %d directories", len(seen))


def read_all_directories(source: ByteSource, header: TiffHeader,
                         config: Optional[ParserConfig] = None) -> List[Directory]:
    """Eagerly read the whole IFD chain into a list."""
    return list(iter_directories(source, header, config))
