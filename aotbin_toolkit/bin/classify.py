"""Entry classification from directory row fields.

The inflated-size field doubles as the compression flag, and two PS3 titles
ship entries whose chunk stream is framed in the opposite byte order. Those
are recognized by exact (size, inflated size) pairs only.
"""

from .header import DUMMY_INFLATED_SIZE, DUMMY_SIZE, FileType
from ..utils.binary import swap_u32

# Closed list of known alternate-endian (stored size, inflated size) pairs
ALTERNATE_ENDIAN_ENTRIES = frozenset(
    {
        (0x00001A48, 0x10290000),
        (0x00001681, 0xBC4B0000),
    }
)


def classify(stored_size: int, inflated_size: int) -> FileType:
    """Classify an entry from its stored size and raw inflated-size field."""
    if stored_size == 0:
        return FileType.EMPTY
    if stored_size == DUMMY_SIZE and inflated_size == DUMMY_INFLATED_SIZE:
        return FileType.DUMMY
    if inflated_size == 0:
        return FileType.NORMAL
    if (stored_size, inflated_size) in ALTERNATE_ENDIAN_ENTRIES:
        return FileType.COMPRESSED_ALTERNATE_ENDIAN
    return FileType.COMPRESSED


def true_inflated_size(file_type: FileType, inflated_size: int) -> int:
    """Return the real inflated size for a row read in the archive's byte order."""
    if file_type == FileType.COMPRESSED_ALTERNATE_ENDIAN:
        return swap_u32(inflated_size)
    return inflated_size
