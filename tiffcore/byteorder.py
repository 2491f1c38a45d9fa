"""Byte order handling -- stdlib only (struct module).

The byte order is decided once from the header marker and threaded
through every later read. Enum values are the ``struct`` prefix
characters so they can be glued straight onto a format string.
"""

import struct
from enum import Enum

from tiffcore.errors import InvalidByteOrder


class ByteOrder(Enum):
    LITTLE = '<'
    BIG = '>'

    @property
    def marker(self) -> bytes:
        """The two-byte header marker for this order."""
        return b'II' if self is ByteOrder.LITTLE else b'MM'

    @classmethod
    def from_marker(cls, marker: bytes) -> 'ByteOrder':
        """Map ``II``/``MM`` to a byte order; anything else is rejected."""
        if marker == b'II':
            return cls.LITTLE
        if marker == b'MM':
            return cls.BIG
        raise InvalidByteOrder(bytes(marker[:2]))

    def __str__(self) -> str:
        return 'little-endian' if self is ByteOrder.LITTLE else 'big-endian'


def to_u16(data: bytes, order: ByteOrder) -> int:
    return struct.unpack(order.value + 'H', data)[0]


def to_u32(data: bytes, order: ByteOrder) -> int:
    return struct.unpack(order.value + 'I', data)[0]


def to_u64(data: bytes, order: ByteOrder) -> int:
    return struct.unpack(order.value + 'Q', data)[0]


def u32_to_bytes(value: int, order: ByteOrder) -> bytes:
    """Serialise an unsigned 32-bit value in ``order``."""
    return struct.pack(order.value + 'I', value)
