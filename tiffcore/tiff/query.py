"""Directory query layer -- typed accessors over a parsed IFD.

Each accessor looks up a fixed tag, returns None when it is absent,
otherwise decodes it and narrows the value to the requested shape
(None again when the stored type cannot be narrowed). Decode errors
propagate unchanged.

Every accessor takes an optional ``config`` that is handed to the
value decoder.
"""

from typing import List, Optional, Tuple

from tiffcore.byteorder import ByteOrder
from tiffcore.config import ParserConfig
from tiffcore.errors import InvalidTag
from tiffcore.models import ImageSummary
from tiffcore.source import ByteSource
from tiffcore.tiff import tags
from tiffcore.tiff.directory import Directory
from tiffcore.tiff.tags import (
    Compression,
    PhotometricInterpretation,
    ResolutionUnit,
    SampleFormat,
)
from tiffcore.tiff.values import TagValue, decode_tag_value


def get_tag_value(directory: Directory, tag: int, source: ByteSource,
                  order: ByteOrder,
                  config: Optional[ParserConfig] = None) -> Optional[TagValue]:
    """Decode the first entry for ``tag``, or None if the tag is absent."""
    entry = directory.find_entry(tag)
    if entry is None:
        return None
    return decode_tag_value(entry, source, order, config)


def _u32(directory, tag, source, order, config) -> Optional[int]:
    value = get_tag_value(directory, tag, source, order, config)
    return value.as_u32() if value is not None else None


def _u32_vec(directory, tag, source, order, config) -> Optional[List[int]]:
    value = get_tag_value(directory, tag, source, order, config)
    return value.as_u32_vec() if value is not None else None


def _rational(directory, tag, source, order, config) -> Optional[float]:
    value = get_tag_value(directory, tag, source, order, config)
    return value.as_rational_f64() if value is not None else None


def _text(directory, tag, source, order, config) -> Optional[str]:
    value = get_tag_value(directory, tag, source, order, config)
    return value.as_string() if value is not None else None


# ---------------------------------------------------------------------------
# Basic image information
# ---------------------------------------------------------------------------

def image_width(directory: Directory, source: ByteSource, order: ByteOrder,
                config: Optional[ParserConfig] = None) -> Optional[int]:
    return _u32(directory, tags.IMAGE_WIDTH, source, order, config)


def image_height(directory: Directory, source: ByteSource, order: ByteOrder,
                 config: Optional[ParserConfig] = None) -> Optional[int]:
    return _u32(directory, tags.IMAGE_LENGTH, source, order, config)


def bits_per_sample(directory: Directory, source: ByteSource, order: ByteOrder,
                    config: Optional[ParserConfig] = None) -> Optional[List[int]]:
    return _u32_vec(directory, tags.BITS_PER_SAMPLE, source, order, config)


def samples_per_pixel(directory: Directory, source: ByteSource, order: ByteOrder,
                      config: Optional[ParserConfig] = None) -> Optional[int]:
    return _u32(directory, tags.SAMPLES_PER_PIXEL, source, order, config)


def compression_code(directory: Directory, source: ByteSource, order: ByteOrder,
                     config: Optional[ParserConfig] = None) -> Optional[int]:
    """Raw Compression tag value, including codes without an enum member."""
    return _u32(directory, tags.COMPRESSION, source, order, config)


def compression(directory: Directory, source: ByteSource, order: ByteOrder,
                config: Optional[ParserConfig] = None) -> Optional[Compression]:
    return Compression.from_value(compression_code(directory, source, order, config))


def photometric_interpretation(directory: Directory, source: ByteSource, order: ByteOrder,
                               config: Optional[ParserConfig] = None
                               ) -> Optional[PhotometricInterpretation]:
    return PhotometricInterpretation.from_value(
        _u32(directory, tags.PHOTOMETRIC_INTERPRETATION, source, order, config))


def sample_format(directory: Directory, source: ByteSource, order: ByteOrder,
                  config: Optional[ParserConfig] = None) -> Optional[SampleFormat]:
    return SampleFormat.from_value(
        _u32(directory, tags.SAMPLE_FORMAT, source, order, config))


# ---------------------------------------------------------------------------
# Image data organisation
# ---------------------------------------------------------------------------

def strip_offsets(directory: Directory, source: ByteSource, order: ByteOrder,
                  config: Optional[ParserConfig] = None) -> Optional[List[int]]:
    return _u32_vec(directory, tags.STRIP_OFFSETS, source, order, config)


def strip_byte_counts(directory: Directory, source: ByteSource, order: ByteOrder,
                      config: Optional[ParserConfig] = None) -> Optional[List[int]]:
    return _u32_vec(directory, tags.STRIP_BYTE_COUNTS, source, order, config)


def rows_per_strip(directory: Directory, source: ByteSource, order: ByteOrder,
                   config: Optional[ParserConfig] = None) -> Optional[int]:
    return _u32(directory, tags.ROWS_PER_STRIP, source, order, config)


def tile_width(directory: Directory, source: ByteSource, order: ByteOrder,
               config: Optional[ParserConfig] = None) -> Optional[int]:
    return _u32(directory, tags.TILE_WIDTH, source, order, config)


def tile_height(directory: Directory, source: ByteSource, order: ByteOrder,
                config: Optional[ParserConfig] = None) -> Optional[int]:
    return _u32(directory, tags.TILE_LENGTH, source, order, config)


def tile_offsets(directory: Directory, source: ByteSource, order: ByteOrder,
                 config: Optional[ParserConfig] = None) -> Optional[List[int]]:
    return _u32_vec(directory, tags.TILE_OFFSETS, source, order, config)


def tile_byte_counts(directory: Directory, source: ByteSource, order: ByteOrder,
                     config: Optional[ParserConfig] = None) -> Optional[List[int]]:
    return _u32_vec(directory, tags.TILE_BYTE_COUNTS, source, order, config)


def is_tiled(directory: Directory, source: ByteSource, order: ByteOrder,
             config: Optional[ParserConfig] = None) -> bool:
    """Tiled layout is signalled by the presence of TileWidth."""
    return tile_width(directory, source, order, config) is not None


def data_segments(directory: Directory, source: ByteSource, order: ByteOrder,
                  config: Optional[ParserConfig] = None) -> List[Tuple[int, int]]:
    """(offset, byte_count) pairs locating the image data.

    Uses the tile tags for tiled images and the strip tags otherwise.
    Returns an empty list when either array is missing.
    """
    if is_tiled(directory, source, order, config):
        offset_tag, count_tag = tags.TILE_OFFSETS, tags.TILE_BYTE_COUNTS
    else:
        offset_tag, count_tag = tags.STRIP_OFFSETS, tags.STRIP_BYTE_COUNTS

    offsets = _u32_vec(directory, offset_tag, source, order, config)
    counts = _u32_vec(directory, count_tag, source, order, config)
    if offsets is None or counts is None:
        return []
    if len(offsets) != len(counts):
        raise InvalidTag(count_tag, f'{len(counts)} byte counts for {len(offsets)} offsets')
    return list(zip(offsets, counts))


def image_data_size(directory: Directory, source: ByteSource, order: ByteOrder,
                    config: Optional[ParserConfig] = None) -> int:
    """Total size of the image data (strips or tiles) in bytes."""
    return sum(count for _, count in data_segments(directory, source, order, config))


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------

def x_resolution(directory: Directory, source: ByteSource, order: ByteOrder,
                 config: Optional[ParserConfig] = None) -> Optional[float]:
    return _rational(directory, tags.X_RESOLUTION, source, order, config)


def y_resolution(directory: Directory, source: ByteSource, order: ByteOrder,
                 config: Optional[ParserConfig] = None) -> Optional[float]:
    return _rational(directory, tags.Y_RESOLUTION, source, order, config)


def resolution_unit(directory: Directory, source: ByteSource, order: ByteOrder,
                    config: Optional[ParserConfig] = None) -> Optional[ResolutionUnit]:
    return ResolutionUnit.from_value(
        _u32(directory, tags.RESOLUTION_UNIT, source, order, config))


# ---------------------------------------------------------------------------
# Descriptive text
# ---------------------------------------------------------------------------

def image_description(directory: Directory, source: ByteSource, order: ByteOrder,
                      config: Optional[ParserConfig] = None) -> Optional[str]:
    return _text(directory, tags.IMAGE_DESCRIPTION, source, order, config)


def make(directory: Directory, source: ByteSource, order: ByteOrder,
         config: Optional[ParserConfig] = None) -> Optional[str]:
    return _text(directory, tags.MAKE, source, order, config)


def model(directory: Directory, source: ByteSource, order: ByteOrder,
          config: Optional[ParserConfig] = None) -> Optional[str]:
    return _text(directory, tags.MODEL, source, order, config)


def software(directory: Directory, source: ByteSource, order: ByteOrder,
             config: Optional[ParserConfig] = None) -> Optional[str]:
    return _text(directory, tags.SOFTWARE, source, order, config)


def date_time(directory: Directory, source: ByteSource, order: ByteOrder,
              config: Optional[ParserConfig] = None) -> Optional[str]:
    return _text(directory, tags.DATE_TIME, source, order, config)


def artist(directory: Directory, source: ByteSource, order: ByteOrder,
           config: Optional[ParserConfig] = None) -> Optional[str]:
    return _text(directory, tags.ARTIST, source, order, config)


def copyright(directory: Directory, source: ByteSource, order: ByteOrder,
              config: Optional[ParserConfig] = None) -> Optional[str]:
    return _text(directory, tags.COPYRIGHT, source, order, config)


# ---------------------------------------------------------------------------
# Validation and summary
# ---------------------------------------------------------------------------

def is_valid_image(directory: Directory, source: ByteSource, order: ByteOrder,
                   config: Optional[ParserConfig] = None) -> bool:
    """Width, height and one complete data layout (strips or tiles)."""
    has_size = (image_width(directory, source, order, config) is not None
                and image_height(directory, source, order, config) is not None)
    has_strips = (strip_offsets(directory, source, order, config) is not None
                  and strip_byte_counts(directory, source, order, config) is not None)
    has_tiles = (tile_offsets(directory, source, order, config) is not None
                 and tile_byte_counts(directory, source, order, config) is not None)
    return has_size and (has_strips or has_tiles)


def image_summary(directory: Directory, source: ByteSource, order: ByteOrder,
                  config: Optional[ParserConfig] = None) -> ImageSummary:
    """Aggregate the directory's key properties into one snapshot.

    Missing values default to 0x0, one sample per pixel, one bit per
    sample and no compression.
    """
    spp = samples_per_pixel(directory, source, order, config)
    if spp is None:
        spp = 1
    bps = bits_per_sample(directory, source, order, config)
    if bps is None:
        bps = [1] * spp

    code = compression_code(directory, source, order, config)
    comp = Compression.NONE if code is None else Compression.from_value(code)

    return ImageSummary(
        width=image_width(directory, source, order, config) or 0,
        height=image_height(directory, source, order, config) or 0,
        samples_per_pixel=spp,
        bits_per_sample=bps,
        compression=comp,
        photometric_interpretation=photometric_interpretation(directory, source, order, config),
        is_tiled=is_tiled(directory, source, order, config),
    )
