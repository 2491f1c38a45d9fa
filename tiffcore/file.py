"""Top-level TIFF file handle.

Parses the header and walks every directory eagerly on construction.
Tag values are decoded on demand through the query layer.
"""

import logging
from typing import List, Optional

from tiffcore.byteorder import ByteOrder
from tiffcore.config import ParserConfig, resolve
from tiffcore.models import ImageSummary
from tiffcore.source import ByteCursor, ByteSource, InMemorySource, MappedFileSource
from tiffcore.tiff import query
from tiffcore.tiff.directory import Directory, read_all_directories
from tiffcore.tiff.header import TiffHeader, read_header
from tiffcore.tiff.values import TagValue

logger = logging.getLogger(__name__)


class TiffFile:
    """A parsed TIFF file: header, directory list and the source they came from."""

    def __init__(self, source: ByteSource, header: TiffHeader,
                 directories: List[Directory],
                 config: Optional[ParserConfig] = None):
        self.source = source
        self.header = header
        self.directories = directories
        self.config = resolve(config)

    @classmethod
    def from_source(cls, source: ByteSource,
                    config: Optional[ParserConfig] = None) -> 'TiffFile':
        config = resolve(config)
        header = read_header(source)
        directories = read_all_directories(source, header, config)
        logger.debug("Parsed %s TIFF with %d directories", header.byte_order, len(directories))
        return cls(source, header, directories, config)

    @classmethod
    def from_bytes(cls, data: bytes,
                   config: Optional[ParserConfig] = None) -> 'TiffFile':
        """Parse a TIFF held in memory."""
        return cls.from_source(InMemorySource(data), config)

    @classmethod
    def open(cls, path, config: Optional[ParserConfig] = None) -> 'TiffFile':
        """Parse a TIFF file through a memory map. Close it when done."""
        source = MappedFileSource(path)
        try:
            return cls.from_source(source, config)
        except Exception:
            source.close()
            raise

    def close(self):
        close = getattr(self.source, 'close', None)
        if close is not None:
            close()

    def __enter__(self) -> 'TiffFile':
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    # ------------------------------------------------------------------
    # Directory access
    # ------------------------------------------------------------------

    @property
    def byte_order(self) -> ByteOrder:
        return self.header.byte_order

    def image_count(self) -> int:
        return len(self.directories)

    def get_directory(self, index: int) -> Optional[Directory]:
        """Directory at ``index``, or None when out of range."""
        if 0 <= index < len(self.directories):
            return self.directories[index]
        return None

    def main_directory(self) -> Optional[Directory]:
        return self.get_directory(0)

    def cursor(self, position: int = 0) -> ByteCursor:
        """A fresh cursor over this file's bytes, honouring its config."""
        return ByteCursor(self.source, position, self.config)

    def tag_value(self, index: int, tag: int) -> Optional[TagValue]:
        """Decode ``tag`` from directory ``index``; None if either is missing."""
        directory = self.get_directory(index)
        if directory is None:
            return None
        return query.get_tag_value(directory, tag, self.source, self.byte_order, self.config)

    # ------------------------------------------------------------------
    # Summaries and validation
    # ------------------------------------------------------------------

    def image_summary(self, index: int) -> Optional[ImageSummary]:
        directory = self.get_directory(index)
        if directory is None:
            return None
        return query.image_summary(directory, self.source, self.byte_order, self.config)

    def main_image_info(self) -> Optional[ImageSummary]:
        return self.image_summary(0)

    def all_image_info(self) -> List[ImageSummary]:
        return [query.image_summary(d, self.source, self.byte_order, self.config)
                for d in self.directories]

    def is_valid(self) -> bool:
        """True when the main directory describes a locatable image."""
        main = self.main_directory()
        if main is None:
            return False
        return query.is_valid_image(main, self.source, self.byte_order, self.config)

    def __repr__(self) -> str:
        return (f'TiffFile({self.byte_order}, '
                f'{len(self.directories)} directories, source={self.source!r})')
