"""TIFF file header -- byte order marker, magic 42, first IFD offset."""

import struct
from dataclasses import dataclass

from tiffcore.byteorder import ByteOrder, to_u16, to_u32
from tiffcore.errors import InsufficientData, InvalidMagic
from tiffcore.source import ByteSource


@dataclass(frozen=True)
class TiffHeader:
    """Parsed 8-byte TIFF header."""

    byte_order: ByteOrder
    magic: int
    first_ifd_offset: int

    SIZE = 8
    MAGIC = 42

    @property
    def is_little_endian(self) -> bool:
        return self.byte_order is ByteOrder.LITTLE

    @property
    def is_big_endian(self) -> bool:
        return self.byte_order is ByteOrder.BIG

    def to_bytes(self) -> bytes:
        """Serialise back to the 8 header bytes."""
        endian = self.byte_order.value
        return (self.byte_order.marker
                + struct.pack(endian + 'HI', self.magic, self.first_ifd_offset))


def parse_header(data: bytes) -> TiffHeader:
    """Parse the first 8 bytes of a TIFF file.

    The byte order comes from the raw marker bytes; only then is the
    magic number decoded with it. A first IFD offset of 0 is accepted and
    simply yields a file without directories.
    """
    if len(data) < TiffHeader.SIZE:
        raise InsufficientData('reading TIFF header', TiffHeader.SIZE, len(data))

    order = ByteOrder.from_marker(bytes(data[0:2]))

    magic = to_u16(bytes(data[2:4]), order)
    if magic != TiffHeader.MAGIC:
        raise InvalidMagic(magic)

    first_ifd_offset = to_u32(bytes(data[4:8]), order)
    return TiffHeader(order, magic, first_ifd_offset)


def read_header(source: ByteSource) -> TiffHeader:
    """Read and validate the header at offset 0 of ``source``."""
    available = source.length()
    if available < TiffHeader.SIZE:
        raise InsufficientData('reading TIFF header', TiffHeader.SIZE, available)
    return parse_header(source.read(0, TiffHeader.SIZE))
