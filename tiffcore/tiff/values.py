"""Tag value decoding -- field types, inline/offset resolution, typed values.

A directory entry's 4-byte value slot holds the value itself when the
payload fits (``count * size <= 4``) and a file offset otherwise. The
choice is recomputed from the declared type and count every time a
value is decoded.
"""

import logging
import math
import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, List, Optional, Tuple, Union

from tiffcore.byteorder import ByteOrder
from tiffcore.config import ParserConfig, resolve
from tiffcore.errors import InvalidFieldType, InvalidString, MalformedFile, OutOfBounds
from tiffcore.source import ByteSource

logger = logging.getLogger(__name__)

# Largest payload that is stored inside the entry's value slot
INLINE_THRESHOLD = 4


class FieldType(IntEnum):
    BYTE = 1
    ASCII = 2
    SHORT = 3
    LONG = 4
    RATIONAL = 5
    SBYTE = 6
    UNDEFINED = 7
    SSHORT = 8
    SLONG = 9
    SRATIONAL = 10
    FLOAT = 11
    DOUBLE = 12

    @classmethod
    def from_code(cls, code: int) -> 'FieldType':
        """Map a raw type code to a FieldType; unknown codes are errors."""
        try:
            return cls(code)
        except ValueError:
            raise InvalidFieldType(code) from None

    @property
    def byte_size(self) -> int:
        return FIELD_TYPES[self][0]

    @property
    def struct_char(self) -> str:
        return FIELD_TYPES[self][1]


# {field_type: (element_size_bytes, struct_format_char)}
# Floats are unpacked through their same-width unsigned integer.
FIELD_TYPES: Dict[FieldType, Tuple[int, str]] = {
    FieldType.BYTE: (1, 'B'),
    FieldType.ASCII: (1, 's'),
    FieldType.SHORT: (2, 'H'),
    FieldType.LONG: (4, 'I'),
    FieldType.RATIONAL: (8, 'II'),
    FieldType.SBYTE: (1, 'b'),
    FieldType.UNDEFINED: (1, 's'),
    FieldType.SSHORT: (2, 'h'),
    FieldType.SLONG: (4, 'i'),
    FieldType.SRATIONAL: (8, 'ii'),
    FieldType.FLOAT: (4, 'I'),
    FieldType.DOUBLE: (8, 'Q'),
}

_RATIONAL_TYPES = (FieldType.RATIONAL, FieldType.SRATIONAL)


@dataclass(frozen=True)
class TagValue:
    """A decoded tag value.

    ``values`` depends on ``field_type``:

    - ASCII: ``str`` without the trailing NUL
    - UNDEFINED: ``bytes``
    - RATIONAL / SRATIONAL: tuple of ``(numerator, denominator)`` pairs
    - FLOAT / DOUBLE: tuple of ``float``
    - every integer type: tuple of ``int``
    """

    field_type: FieldType
    values: Union[str, bytes, Tuple]

    def __len__(self) -> int:
        return len(self.values)

    def _first(self, *types: FieldType):
        if self.field_type in types and len(self.values) > 0:
            return self.values[0]
        return None

    def as_u32(self) -> Optional[int]:
        return self._first(FieldType.SHORT, FieldType.LONG, FieldType.BYTE)

    def as_u16(self) -> Optional[int]:
        return self._first(FieldType.SHORT, FieldType.BYTE)

    def as_i32(self) -> Optional[int]:
        return self._first(FieldType.SLONG, FieldType.SSHORT, FieldType.SBYTE)

    def as_f64(self) -> Optional[float]:
        return self._first(FieldType.DOUBLE, FieldType.FLOAT)

    def as_f32(self) -> Optional[float]:
        value = self.as_f64()
        if value is None:
            return None
        # Narrow to single precision; out-of-range doubles saturate to infinity
        try:
            return struct.unpack('=f', struct.pack('=f', value))[0]
        except OverflowError:
            return math.copysign(math.inf, value)

    def as_string(self) -> Optional[str]:
        if self.field_type is FieldType.ASCII:
            return self.values
        return None

    def as_u32_vec(self) -> Optional[List[int]]:
        if self.field_type in (FieldType.LONG, FieldType.SHORT):
            return list(self.values)
        return None

    def as_bytes(self) -> Optional[bytes]:
        if self.field_type is FieldType.UNDEFINED:
            return self.values
        if self.field_type is FieldType.BYTE:
            return bytes(self.values)
        return None

    def as_rational_f64(self) -> Optional[float]:
        """First rational as a float; None when the denominator is 0."""
        pair = self._first(*_RATIONAL_TYPES)
        if pair is None:
            return None
        numerator, denominator = pair
        if denominator == 0:
            return None
        return numerator / denominator

    def to_python(self):
        """JSON-friendly rendering of the decoded values."""
        if self.field_type is FieldType.ASCII:
            return self.values
        if self.field_type in _RATIONAL_TYPES:
            return [list(pair) for pair in self.values]
        return list(self.values)


def _float_from_bits(bits: int, width: int) -> float:
    """Reinterpret an unsigned integer's bits as an IEEE float."""
    if width == 4:
        return struct.unpack('=f', struct.pack('=I', bits))[0]
    return struct.unpack('=d', struct.pack('=Q', bits))[0]


def decode_value_bytes(data: bytes, field_type: FieldType, count: int,
                       order: ByteOrder,
                       config: Optional[ParserConfig] = None,
                       context: str = 'ASCII tag') -> TagValue:
    """Decode a raw payload buffer into a TagValue.

    Yields ``count`` elements when ``data`` is long enough. A short
    buffer keeps only the complete elements (lenient) or raises
    MalformedFile when ``config.strict_values`` is set.
    """
    config = resolve(config)
    size, fmt_char = FIELD_TYPES[field_type]

    available = min(count, len(data) // size)
    if available < count:
        if config.strict_values:
            raise MalformedFile(
                f'{field_type.name} value needs {count * size} bytes, got {len(data)}')
        logger.warning("%s value truncated: %d of %d elements decoded",
                       field_type.name, available, count)
    payload = bytes(data[:available * size])

    if field_type is FieldType.ASCII:
        if payload.endswith(b'\x00'):
            payload = payload[:-1]
        try:
            return TagValue(field_type, payload.decode('utf-8'))
        except UnicodeDecodeError as e:
            raise InvalidString(context) from e

    if field_type is FieldType.UNDEFINED:
        return TagValue(field_type, payload)

    if field_type in _RATIONAL_TYPES:
        flat = struct.unpack(order.value + fmt_char * available, payload)
        pairs = tuple(zip(flat[0::2], flat[1::2]))
        return TagValue(field_type, pairs)

    raw = struct.unpack(order.value + fmt_char * available, payload)
    if field_type in (FieldType.FLOAT, FieldType.DOUBLE):
        return TagValue(field_type, tuple(_float_from_bits(bits, size) for bits in raw))
    return TagValue(field_type, raw)


def decode_tag_value(entry, source: ByteSource, order: ByteOrder,
                     config: Optional[ParserConfig] = None) -> TagValue:
    """Resolve and decode the value of one directory entry.

    Payloads of at most 4 bytes are the leading bytes of the value slot
    re-serialised in the file's byte order; larger payloads are read
    from the source at the offset held in the slot.
    """
    field_type = entry.field_type
    total = field_type.byte_size * entry.count

    if total <= INLINE_THRESHOLD:
        data = entry.slot_bytes(order)[:total]
    else:
        try:
            data = source.read(entry.value_slot, total)
        except OutOfBounds as e:
            raise e.with_operation(f'reading tag {entry.tag_id} value') from e

    return decode_value_bytes(data, field_type, entry.count, order, config,
                              context=f'ASCII tag {entry.tag_id}')
