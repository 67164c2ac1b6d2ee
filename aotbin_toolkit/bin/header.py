"""BIN header and directory structures."""

from dataclasses import dataclass
from enum import Enum, IntEnum

# Magic numbers, as read big-endian from offset 0
STANDARD_MAGIC = 0x00077DF9
DLC_MAGIC = 0x00000064

HEADER_SIZE = 0x10
ROW_SIZE = 0x10  # i64 block index, i32 size, u32 inflated size
DEFAULT_BLOCK_SIZE = 0x800

# DLC archives keep two fixed tables of i32 right after the header
DLC_OFFSET_TABLE = 0x10
DLC_SIZE_TABLE = 0x90
DLC_TABLE_END = 0x110
DLC_MAX_FILES = (DLC_SIZE_TABLE - DLC_OFFSET_TABLE) // 4

# Tag keys carried by tree nodes
TAG_TYPE = "type"
TAG_INDEX = "index"
TAG_INFLATED_SIZE = "inflated_size"
TAG_DEFLATED = "deflated"
TAG_VARIANT = "variant"
TAG_ENDIANNESS = "endianness"
TAG_BLOCK_SIZE = "block_size"


class Variant(Enum):
    """Container variants."""

    STANDARD = "standard"
    DLC = "dlc"

    @property
    def magic(self) -> int:
        return STANDARD_MAGIC if self is Variant.STANDARD else DLC_MAGIC


class FileType(IntEnum):
    """Entry classification, assigned once when the directory is read."""

    NORMAL = 0
    COMPRESSED = 1
    COMPRESSED_ALTERNATE_ENDIAN = 2
    DUMMY = 3
    EMPTY = 4

    @property
    def is_compressed(self) -> bool:
        return self in (FileType.COMPRESSED, FileType.COMPRESSED_ALTERNATE_ENDIAN)


# PS3 placeholder entry: a fixed Shift-JIS notice stored verbatim
DUMMY_SIZE = 0x70
DUMMY_INFLATED_SIZE = 0x835F837E
DUMMY_DATA = bytes(
    [
        0x83, 0x5F, 0x83, 0x7E, 0x81, 0x5B, 0x82, 0xC5, 0x82, 0xB7, 0x2E, 0x0D, 0x0A, 0x90, 0xB3, 0x8E,
        0xAE, 0x82, 0xC8, 0x83, 0x66, 0x81, 0x5B, 0x83, 0x5E, 0x82, 0xAA, 0x93, 0xFC, 0x82, 0xE9, 0x82,
        0xDC, 0x82, 0xC5, 0x81, 0x41, 0x82, 0xD0, 0x82, 0xC6, 0x82, 0xDC, 0x82, 0xB8, 0x83, 0x8A, 0x83,
        0x93, 0x83, 0x4E, 0x83, 0x66, 0x81, 0x5B, 0x83, 0x5E, 0x82, 0xF0, 0x8D, 0xEC, 0x90, 0xAC, 0x82,
        0xB7, 0x82, 0xE9, 0x82, 0xBD, 0x82, 0xDF, 0x82, 0xCC, 0x83, 0x5F, 0x83, 0x7E, 0x81, 0x5B, 0x83,
        0x74, 0x83, 0x40, 0x83, 0x43, 0x83, 0x8B, 0x82, 0xC6, 0x82, 0xB5, 0x82, 0xC4, 0x8D, 0xEC, 0x90,
        0xAC, 0x82, 0xB3, 0x82, 0xEA, 0x82, 0xC4, 0x82, 0xA2, 0x82, 0xDC, 0x82, 0xB7, 0x2E, 0x0D, 0x0A,
    ]
)


@dataclass
class BinHeader:
    """BIN archive header (16 bytes)."""

    magic: int  # 4 bytes
    file_count: int  # 4 bytes
    block_size: int  # 4 bytes: 0 for DLC archives
    padding: int = 0  # 4 bytes


@dataclass
class DirectoryRow:
    """One directory entry, resolved to a byte range."""

    index: int  # 1-based directory position
    offset: int
    size: int
    inflated_size: int = 0  # Raw field value, overloaded with sentinels
