"""Data models for derived image information."""

from dataclasses import dataclass, field
from typing import List, Optional

from tiffcore.tiff.tags import Compression, PhotometricInterpretation

_GRAYSCALE = (PhotometricInterpretation.BLACK_IS_ZERO,
              PhotometricInterpretation.WHITE_IS_ZERO)


@dataclass(frozen=True)
class ImageSummary:
    """Read-only snapshot of one directory's key image properties.

    ``compression`` is None when the Compression tag holds a code that
    is not recognised (an absent tag means NONE).
    """
    width: int
    height: int
    samples_per_pixel: int
    bits_per_sample: List[int] = field(default_factory=list)
    compression: Optional[Compression] = Compression.NONE
    photometric_interpretation: Optional[PhotometricInterpretation] = None
    is_tiled: bool = False

    def bits_per_pixel(self) -> int:
        return sum(self.bits_per_sample)

    def bytes_per_pixel(self) -> int:
        """Bytes per pixel, rounded up."""
        return (self.bits_per_pixel() + 7) // 8

    def is_grayscale(self) -> bool:
        return (self.samples_per_pixel == 1
                or self.photometric_interpretation in _GRAYSCALE)

    def is_rgb(self) -> bool:
        return (self.samples_per_pixel >= 3
                and self.photometric_interpretation is PhotometricInterpretation.RGB)

    def has_alpha(self) -> bool:
        return ((self.samples_per_pixel == 2 and self.is_grayscale())
                or (self.samples_per_pixel == 4 and self.is_rgb()))

    def description(self) -> str:
        """One-line summary, e.g. ``1920x1080 RGB 24-bit stripped (NONE)``."""
        photometric = self.photometric_interpretation
        if photometric is PhotometricInterpretation.RGB:
            color = 'RGBA' if self.has_alpha() else 'RGB'
        elif photometric in _GRAYSCALE:
            color = 'Grayscale+Alpha' if self.has_alpha() else 'Grayscale'
        elif photometric is PhotometricInterpretation.PALETTE:
            color = 'Palette'
        elif photometric is PhotometricInterpretation.CMYK:
            color = 'CMYK'
        else:
            color = 'Unknown'

        layout = 'tiled' if self.is_tiled else 'stripped'
        compression = self.compression.name if self.compression is not None else 'UNKNOWN'
        return (f'{self.width}x{self.height} {color} {self.bits_per_pixel()}-bit '
                f'{layout} ({compression})')

    def to_dict(self) -> dict:
        photometric = self.photometric_interpretation
        return {
            'width': self.width,
            'height': self.height,
            'samples_per_pixel': self.samples_per_pixel,
            'bits_per_sample': list(self.bits_per_sample),
            'compression': self.compression.name if self.compression is not None else None,
            'photometric_interpretation': photometric.name if photometric is not None else None,
            'is_tiled': self.is_tiled,
        }
