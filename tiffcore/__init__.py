"""tiffcore -- Structural TIFF parser: header, directory chain and tag values."""

__version__ = "1.0.0"

from tiffcore.errors import (
    InsufficientData,
    InvalidByteOrder,
    InvalidFieldType,
    InvalidMagic,
    InvalidString,
    InvalidTag,
    MalformedFile,
    OutOfBounds,
    TiffError,
    UnsupportedFeature,
)
from tiffcore.byteorder import ByteOrder
from tiffcore.config import ParserConfig
from tiffcore.source import ByteCursor, ByteSource, InMemorySource, MappedFileSource
# tiff must load before models: the query layer imports models, models imports tiff.tags
from tiffcore.tiff import (
    Directory,
    DirectoryEntry,
    FieldType,
    TagValue,
    TiffHeader,
)
from tiffcore.models import ImageSummary
from tiffcore.file import TiffFile

__all__ = [
    "__version__",
    "TiffError",
    "InsufficientData",
    "InvalidMagic",
    "InvalidByteOrder",
    "OutOfBounds",
    "InvalidFieldType",
    "UnsupportedFeature",
    "MalformedFile",
    "InvalidTag",
    "InvalidString",
    "ByteOrder",
    "ParserConfig",
    "ByteSource",
    "InMemorySource",
    "MappedFileSource",
    "ByteCursor",
    "TiffHeader",
    "DirectoryEntry",
    "Directory",
    "FieldType",
    "TagValue",
    "ImageSummary",
    "TiffFile",
]
