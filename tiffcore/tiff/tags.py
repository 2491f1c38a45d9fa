"""Standard TIFF tag numbers, value enums and tag classification."""

from enum import IntEnum
from typing import Dict, Optional

from tiffcore.errors import UnsupportedFeature

# Basic image information
IMAGE_WIDTH = 256
IMAGE_LENGTH = 257
BITS_PER_SAMPLE = 258
COMPRESSION = 259
PHOTOMETRIC_INTERPRETATION = 262

# Descriptive text
IMAGE_DESCRIPTION = 270
MAKE = 271
MODEL = 272
SOFTWARE = 305
DATE_TIME = 306
ARTIST = 315
COPYRIGHT = 33432

# Strip layout
STRIP_OFFSETS = 273
SAMPLES_PER_PIXEL = 277
ROWS_PER_STRIP = 278
STRIP_BYTE_COUNTS = 279

# Resolution
X_RESOLUTION = 282
Y_RESOLUTION = 283
RESOLUTION_UNIT = 296

# Compression helpers
PREDICTOR = 317

# Colour
COLORMAP = 320
EXTRA_SAMPLES = 338
SAMPLE_FORMAT = 339

# Tile layout
TILE_WIDTH = 322
TILE_LENGTH = 323
TILE_OFFSETS = 324
TILE_BYTE_COUNTS = 325

# GeoTIFF (stored raw, no key-directory interpretation)
MODEL_PIXEL_SCALE = 33550
MODEL_TIEPOINT = 33922
MODEL_TRANSFORMATION = 34264
GEO_KEY_DIRECTORY = 34735
GEO_DOUBLE_PARAMS = 34736
GEO_ASCII_PARAMS = 34737

TAG_NAMES: Dict[int, str] = {
    256: 'ImageWidth', 257: 'ImageLength', 258: 'BitsPerSample',
    259: 'Compression', 262: 'PhotometricInterpretation',
    270: 'ImageDescription', 271: 'Make', 272: 'Model',
    273: 'StripOffsets', 277: 'SamplesPerPixel', 278: 'RowsPerStrip',
    279: 'StripByteCounts', 282: 'XResolution', 283: 'YResolution',
    296: 'ResolutionUnit', 305: 'Software', 306: 'DateTime', 315: 'Artist',
    317: 'Predictor', 320: 'ColorMap',
    322: 'TileWidth', 323: 'TileLength', 324: 'TileOffsets', 325: 'TileByteCounts',
    338: 'ExtraSamples', 339: 'SampleFormat',
    33432: 'Copyright',
    33550: 'ModelPixelScale', 33922: 'ModelTiepoint',
    34264: 'ModelTransformation', 34735: 'GeoKeyDirectory',
    34736: 'GeoDoubleParams', 34737: 'GeoAsciiParams',
}

_REQUIRED_TAGS = frozenset({IMAGE_WIDTH, IMAGE_LENGTH, STRIP_OFFSETS, STRIP_BYTE_COUNTS})

_LAYOUT_TAGS = frozenset({
    IMAGE_WIDTH, IMAGE_LENGTH, BITS_PER_SAMPLE, SAMPLES_PER_PIXEL,
    ROWS_PER_STRIP, TILE_WIDTH, TILE_LENGTH,
})

_DATA_LOCATION_TAGS = frozenset({
    STRIP_OFFSETS, STRIP_BYTE_COUNTS, TILE_OFFSETS, TILE_BYTE_COUNTS,
})


def tag_name(tag: int) -> str:
    """Human-readable tag name, or ``Unknown``."""
    return TAG_NAMES.get(tag, 'Unknown')


def is_required_tag(tag: int) -> bool:
    """Tags a baseline stripped image cannot do without."""
    return tag in _REQUIRED_TAGS


def is_layout_tag(tag: int) -> bool:
    return tag in _LAYOUT_TAGS


def is_data_location_tag(tag: int) -> bool:
    return tag in _DATA_LOCATION_TAGS


class _TagEnum(IntEnum):

    @classmethod
    def from_value(cls, value: Optional[int]):
        """Map a raw tag value to a member, or None if unrecognised."""
        if value is None:
            return None
        try:
            return cls(value)
        except ValueError:
            return None


class Compression(_TagEnum):
    NONE = 1
    CCITT_1D = 2
    GROUP3_FAX = 3
    GROUP4_FAX = 4
    LZW = 5
    JPEG_OLD = 6
    JPEG = 7
    DEFLATE = 8
    PACKBITS = 32773
    ADOBE_DEFLATE = 32946

    def is_supported(self) -> bool:
        """Whether image data with this compression can be consumed."""
        return self in (Compression.NONE, Compression.PACKBITS)

    def require_supported(self):
        """Raise UnsupportedFeature for codecs that are not implemented."""
        if not self.is_supported():
            raise UnsupportedFeature(f'{self.name} compression')


class PhotometricInterpretation(_TagEnum):
    WHITE_IS_ZERO = 0
    BLACK_IS_ZERO = 1
    RGB = 2
    PALETTE = 3
    TRANSPARENCY_MASK = 4
    CMYK = 5
    YCBCR = 6
    CIELAB = 8


class ResolutionUnit(_TagEnum):
    NONE = 1
    INCH = 2
    CENTIMETER = 3


class SampleFormat(_TagEnum):
    UINT = 1
    INT = 2
    FLOAT = 3
    UNDEFINED = 4


class ExtraSample(_TagEnum):
    UNSPECIFIED = 0
    ASSOCIATED_ALPHA = 1
    UNASSOCIATED_ALPHA = 2
