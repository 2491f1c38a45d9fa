"""Shared test fixtures -- synthetic TIFF file generators."""

import struct

import pytest

# Element formats used to lay out inline values in the 4-byte slot
_INLINE_FORMATS = {1: 'B', 3: 'H', 6: 'b', 8: 'h', 4: 'I', 9: 'i', 11: 'I'}


def pack_slot(type_id, value, endian='<'):
    """Pack an inline int value left-justified in a 4-byte slot.

    SHORT values occupy the first two bytes of the slot in both byte
    orders, the way a TIFF writer stores them.
    """
    fmt = _INLINE_FORMATS.get(type_id, 'I')
    packed = struct.pack(endian + fmt, value)
    return packed + b'\x00' * (4 - len(packed))


def pack_values(fmt, values, endian='<'):
    """Pack a list of values as out-of-line data, e.g. pack_values('I', [1, 2])."""
    return struct.pack(endian + fmt * len(values), *values)


def _entry_bytes(entries, data_start, endian):
    """Serialise IFD entries; bytes values are appended to the data area."""
    entry_bytes = b''
    data_bytes = b''
    for tag_id, type_id, count, value in entries:
        entry_bytes += struct.pack(endian + 'HHI', tag_id, type_id, count)
        if isinstance(value, bytes):
            # Out-of-line: store offset to data area
            entry_bytes += struct.pack(endian + 'I', data_start + len(data_bytes))
            data_bytes += value
        else:
            entry_bytes += pack_slot(type_id, value, endian)
    return entry_bytes, data_bytes


def build_tiff(entries, endian='<', extra_data=None):
    """Build a minimal TIFF file in memory with given IFD entries.

    Args:
        entries: List of (tag_id, type_id, count, value_or_bytes) tuples.
            For inline values (<=4 bytes), pass an int.
            For out-of-line values, pass bytes.
        endian: '<' for little-endian, '>' for big-endian.
        extra_data: Optional bytes appended after the out-of-line data.

    Returns:
        bytes: Complete TIFF file content.
    """
    bo = b'II' if endian == '<' else b'MM'
    header = bo + struct.pack(endian + 'HI', 42, 8)

    # Out-of-line data starts after: header(8) + ifd_count(2) + entries(12*n) + next_ifd(4)
    data_start = 8 + 2 + 12 * len(entries) + 4
    entry_bytes, data_bytes = _entry_bytes(entries, data_start, endian)

    result = (header + struct.pack(endian + 'H', len(entries)) + entry_bytes
              + struct.pack(endian + 'I', 0) + data_bytes)
    if extra_data:
        result += extra_data
    return result


def ifd_offsets(ifd_entries_list):
    """Offsets at which build_tiff_multi_ifd places each IFD."""
    starts = []
    offset = 8
    for entries in ifd_entries_list:
        starts.append(offset)
        ool = sum(len(v) for _, _, _, v in entries if isinstance(v, bytes))
        offset += 2 + 12 * len(entries) + 4 + ool
    return starts


def build_tiff_multi_ifd(ifd_entries_list, endian='<', last_next_ifd=0):
    """Build a TIFF with multiple linked IFDs.

    Args:
        ifd_entries_list: List of lists, each inner list contains
            (tag_id, type_id, count, value_or_bytes) tuples for one IFD.
        endian: '<' or '>'.
        last_next_ifd: Next-IFD offset written into the last IFD. Pointing
            it back at an earlier IFD produces a cyclic chain.

    Returns:
        bytes: Complete TIFF file with chained IFDs.
    """
    bo = b'II' if endian == '<' else b'MM'
    starts = ifd_offsets(ifd_entries_list)
    result = bo + struct.pack(endian + 'HI', 42, starts[0])

    for i, entries in enumerate(ifd_entries_list):
        data_start = starts[i] + 2 + 12 * len(entries) + 4
        entry_bytes, data_bytes = _entry_bytes(entries, data_start, endian)
        next_ifd = starts[i + 1] if i + 1 < len(ifd_entries_list) else last_next_ifd
        result += (struct.pack(endian + 'H', len(entries)) + entry_bytes
                   + struct.pack(endian + 'I', next_ifd) + data_bytes)

    return result


def build_tiff_with_strips(tag_entries, strip_data, endian='<'):
    """Build a TIFF with tag entries and one strip of image data.

    Automatically adds StripOffsets (273) and StripByteCounts (279) entries.
    """
    bo = b'II' if endian == '<' else b'MM'
    num_entries = len(tag_entries) + 2
    ool_size = sum(len(v) for _, _, _, v in tag_entries if isinstance(v, bytes))

    # Layout: header(8) + ifd_count(2) + entries(12*n) + next_ifd(4) + ool_data + strip_data
    data_start = 8 + 2 + 12 * num_entries + 4
    strip_offset = data_start + ool_size

    entries = list(tag_entries) + [
        (273, 4, 1, strip_offset),
        (279, 4, 1, len(strip_data)),
    ]
    entry_bytes, data_bytes = _entry_bytes(entries, data_start, endian)

    header = bo + struct.pack(endian + 'HI', 42, 8)
    return (header + struct.pack(endian + 'H', num_entries) + entry_bytes
            + struct.pack(endian + 'I', 0) + data_bytes + strip_data)


# ---------------------------------------------------------------------------
# Standard image entries
# ---------------------------------------------------------------------------

def rgb_entries(width=64, height=48, endian='<'):
    """Tag entries of an uncompressed 8-bit RGB image (without strip tags)."""
    return [
        (256, 3, 1, width),                                   # ImageWidth
        (257, 3, 1, height),                                  # ImageLength
        (258, 3, 3, pack_values('H', [8, 8, 8], endian)),     # BitsPerSample
        (259, 3, 1, 1),                                       # Compression: none
        (262, 3, 1, 2),                                       # Photometric: RGB
        (277, 3, 1, 3),                                       # SamplesPerPixel
    ]


# ---------------------------------------------------------------------------
# File fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def tmp_tiff_with_strips(tmp_path):
    """A valid 64x48 RGB TIFF file with one strip of data."""
    strip_data = b'\xAB\xCD\xEF' * 100
    content = build_tiff_with_strips(rgb_entries(), strip_data)
    filepath = tmp_path / 'strips.tif'
    filepath.write_bytes(content)
    return filepath


@pytest.fixture
def tmp_tiff_multi_ifd(tmp_path):
    """A TIFF file with two linked IFDs, both containing DateTime."""
    datetime1 = b'2024:06:15 10:30:00\x00'
    datetime2 = b'2024:06:15 10:31:00\x00'

    ifd0 = [
        (256, 3, 1, 1024),
        (257, 3, 1, 768),
        (306, 2, len(datetime1), datetime1),
    ]
    ifd1 = [
        (256, 3, 1, 512),
        (257, 3, 1, 384),
        (306, 2, len(datetime2), datetime2),
    ]
    filepath = tmp_path / 'multi_ifd.tif'
    filepath.write_bytes(build_tiff_multi_ifd([ifd0, ifd1]))
    return filepath


@pytest.fixture
def tmp_tiff_no_layout(tmp_path):
    """A parseable TIFF whose only IFD has no strip or tile tags."""
    filepath = tmp_path / 'no_layout.tif'
    filepath.write_bytes(build_tiff([(256, 3, 1, 16), (257, 3, 1, 16)]))
    return filepath


@pytest.fixture
def tmp_not_tiff(tmp_path):
    """A file that is not a TIFF at all."""
    filepath = tmp_path / 'not_a_tiff.tif'
    filepath.write_bytes(b'\x89PNG\r\n\x1a\n' + b'\x00' * 32)
    return filepath
