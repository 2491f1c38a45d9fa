"""TIFF structural parser package.

Re-exports the public names of the header, directory, value and tag
modules so ``from tiffcore.tiff import X`` works for all of them.
"""

# --- header.py: 8-byte file header ---
from tiffcore.tiff.header import (  # noqa: F401
    TiffHeader,
    parse_header,
    read_header,
)

# --- values.py: field types and tag value decoding ---
from tiffcore.tiff.values import (  # noqa: F401
    FIELD_TYPES,
    INLINE_THRESHOLD,
    FieldType,
    TagValue,
    decode_tag_value,
    decode_value_bytes,
)

# --- directory.py: IFD entries, directories, chain walking ---
from tiffcore.tiff.directory import (  # noqa: F401
    ENTRY_SIZE,
    Directory,
    DirectoryEntry,
    iter_directories,
    read_all_directories,
    read_directory,
)

# --- tags.py: tag numbers and value enums ---
from tiffcore.tiff.tags import (  # noqa: F401
    TAG_NAMES,
    Compression,
    ExtraSample,
    PhotometricInterpretation,
    ResolutionUnit,
    SampleFormat,
    is_data_location_tag,
    is_layout_tag,
    is_required_tag,
    tag_name,
)

# --- query.py: typed accessors, validity check, summaries ---
from tiffcore.tiff.query import (  # noqa: F401
    data_segments,
    get_tag_value,
    image_data_size,
    image_summary,
    is_valid_image,
)
