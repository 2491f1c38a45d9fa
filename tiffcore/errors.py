"""Exception taxonomy for TIFF structural decoding.

Every parsing function either returns a value or raises exactly one
``TiffError`` subclass. Nothing in the core recovers from these; callers
that want to skip a bad tag or directory catch them themselves.
"""

from typing import Optional


class TiffError(Exception):
    """Base class for all tiffcore errors."""


class InsufficientData(TiffError):
    """Input ended before a fixed-size structure could be parsed."""

    def __init__(self, operation: str, needed: int, available: int):
        self.operation = operation
        self.needed = needed
        self.available = available
        super().__init__(
            f'Insufficient data for {operation}: needed {needed} bytes, '
            f'but only {available} available')


class InvalidMagic(TiffError):
    """Header magic number is not 42."""

    def __init__(self, found: int):
        self.found = found
        super().__init__(f'Invalid TIFF magic number: expected 42, found {found}')


class InvalidByteOrder(TiffError):
    """First two header bytes are neither ``II`` nor ``MM``."""

    def __init__(self, found: bytes):
        self.found = bytes(found)
        super().__init__(
            f"Invalid byte order indicator: expected 'II' or 'MM', found {self.found!r}")


class OutOfBounds(TiffError):
    """A read reached past the end of the byte source.

    ``index`` is one past the last byte requested, ``max`` is the source
    length. ``operation`` names the parse step when the error was
    re-raised with context.
    """

    def __init__(self, index: int, max: int, operation: Optional[str] = None):
        self.index = index
        self.max = max
        self.operation = operation
        msg = f'Index {index} out of bounds (maximum: {max})'
        if operation:
            msg = f'{msg} while {operation}'
        super().__init__(msg)

    def with_operation(self, operation: str) -> 'OutOfBounds':
        """Return a copy of this error annotated with the failing operation."""
        return OutOfBounds(self.index, self.max, operation)


class InvalidFieldType(TiffError):
    """Directory entry declares a type code outside 1..12."""

    def __init__(self, found: int):
        self.found = found
        super().__init__(f'Invalid field type: {found}')


class UnsupportedFeature(TiffError):
    """Recognised format feature that is not implemented (e.g. a codec)."""

    def __init__(self, feature: str):
        self.feature = feature
        super().__init__(f'Unsupported TIFF feature: {feature}')


class MalformedFile(TiffError):
    """Structural violation not covered by the other errors."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f'Malformed TIFF file: {reason}')


class InvalidTag(TiffError):
    """Tag-specific semantic violation."""

    def __init__(self, tag: int, reason: str):
        self.tag = tag
        self.reason = reason
        super().__init__(f'Invalid tag {tag}: {reason}')


class InvalidString(TiffError):
    """Text-typed tag holds bytes that are not valid text."""

    def __init__(self, context: str):
        self.context = context
        super().__init__(f'Invalid string data in {context}')
