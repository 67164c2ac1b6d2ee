"""BIN header and directory decoding and encoding.

Standard archives:

    0x00  u32 magic (0x00077DF9)
    0x04  i32 file count
    0x08  i32 block size
    0x0C  i32 padding
    0x10  per entry: i64 block index, i32 size, u32 inflated size

DLC archives share the header (block size 0) and follow it with a table of
i32 offsets at 0x10 and a table of i32 sizes at 0x90.

The magic is read big-endian; its byte-reversed form marks a little-endian
archive.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..utils.binary import BinaryReader, BinaryWriter, Endianness, swap_u32
from .errors import FormatError, UnrecognizedFormatError
from .header import (
    DLC_MAX_FILES,
    DLC_OFFSET_TABLE,
    DLC_SIZE_TABLE,
    HEADER_SIZE,
    ROW_SIZE,
    BinHeader,
    DirectoryRow,
    Variant,
)

logger = logging.getLogger(__name__)

_MAGICS = {
    Variant.STANDARD.magic: (Variant.STANDARD, Endianness.BIG),
    swap_u32(Variant.STANDARD.magic): (Variant.STANDARD, Endianness.LITTLE),
    Variant.DLC.magic: (Variant.DLC, Endianness.BIG),
    swap_u32(Variant.DLC.magic): (Variant.DLC, Endianness.LITTLE),
}


@dataclass
class Directory:
    """Decoded header and rows of an archive."""

    variant: Variant
    endianness: Endianness
    header: BinHeader
    rows: List[DirectoryRow]


def align(value: int, alignment: int) -> int:
    """Round value up to the next multiple of alignment."""
    if alignment <= 0:
        return value
    return -(-value // alignment) * alignment


def probe(data: bytes) -> Tuple[Variant, Endianness]:
    """Detect the archive variant and byte order from the magic number."""
    if len(data) < HEADER_SIZE:
        raise FormatError("Not a valid BIN file.")

    magic = BinaryReader(data[:4], Endianness.BIG).read_u32()
    try:
        return _MAGICS[magic]
    except KeyError:
        raise UnrecognizedFormatError(magic) from None


def read_header(reader: BinaryReader) -> BinHeader:
    """Read the 16-byte header at the reader's position."""
    return BinHeader(
        magic=reader.read_u32(),
        file_count=reader.read_i32(),
        block_size=reader.read_i32(),
        padding=reader.read_i32(),
    )


def read_standard_rows(reader: BinaryReader, header: BinHeader) -> List[DirectoryRow]:
    """Read block-indexed rows following the header."""
    rows = []
    reader.seek(HEADER_SIZE)
    for i in range(header.file_count):
        block_index = reader.read_i64()
        size = reader.read_i32()
        inflated_size = reader.read_u32()
        rows.append(
            DirectoryRow(
                index=i + 1,
                offset=block_index * header.block_size,
                size=size,
                inflated_size=inflated_size,
            )
        )
    return rows


def read_dlc_rows(reader: BinaryReader, header: BinHeader) -> List[DirectoryRow]:
    """Read the positional offset and size tables of a DLC archive."""
    if header.file_count > DLC_MAX_FILES:
        raise FormatError(f"DLC archive declares {header.file_count} files, maximum is {DLC_MAX_FILES}")

    rows = []
    for i in range(header.file_count):
        reader.seek(DLC_OFFSET_TABLE + 4 * i)
        offset = reader.read_i32()
        reader.seek(DLC_SIZE_TABLE + 4 * i)
        size = reader.read_i32()
        rows.append(DirectoryRow(index=i + 1, offset=offset, size=size))
    return rows


def read_directory(data: bytes) -> Directory:
    """Decode header and directory rows, validating every row's byte range."""
    variant, endianness = probe(data)

    reader = BinaryReader(data, endianness)
    header = read_header(reader)
    if header.file_count < 0:
        raise FormatError(f"Invalid file count: {header.file_count}")

    try:
        if variant is Variant.STANDARD:
            rows = read_standard_rows(reader, header)
        else:
            rows = read_dlc_rows(reader, header)
    except EOFError as e:
        raise FormatError(f"Truncated directory: {e}") from e

    for row in rows:
        # Empty entries may point one block past the end of the archive
        if row.size == 0:
            continue
        if row.offset < 0 or row.size < 0 or row.offset + row.size > len(data):
            raise FormatError(
                f"Entry {row.index} range 0x{row.offset:X}+0x{row.size:X} "
                f"exceeds archive size 0x{len(data):X}"
            )

    logger.debug(
        "%s archive, %s endian, %d files, block size 0x%X",
        variant.value,
        endianness.name.lower(),
        header.file_count,
        header.block_size,
    )
    return Directory(variant=variant, endianness=endianness, header=header, rows=rows)


def directory_end(file_count: int, block_size: int) -> int:
    """First block-aligned offset after the header and rows of a standard archive."""
    return align(HEADER_SIZE + ROW_SIZE * file_count, block_size)


def write_header(writer: BinaryWriter, header: BinHeader) -> None:
    """Write the 16-byte header at offset 0."""
    writer.seek(0)
    writer.write_u32(header.magic)
    writer.write_i32(header.file_count)
    writer.write_i32(header.block_size)
    writer.write_i32(header.padding)


def write_standard_row(
    writer: BinaryWriter,
    position: int,
    block_index: int,
    size: int,
    inflated_size: int,
    inflated_endianness: Optional[Endianness] = None,
) -> None:
    """Backpatch the row at 0-based position.

    inflated_endianness overrides the byte order of the inflated-size
    field only.
    """
    writer.seek(HEADER_SIZE + ROW_SIZE * position)
    writer.write_i64(block_index)
    writer.write_i32(size)
    writer.write_u32(inflated_size, inflated_endianness)


def write_dlc_row(writer: BinaryWriter, position: int, offset: int, size: int) -> None:
    """Backpatch the offset and size table slots at 0-based position."""
    writer.seek(DLC_OFFSET_TABLE + 4 * position)
    writer.write_i32(offset)
    writer.seek(DLC_SIZE_TABLE + 4 * position)
    writer.write_i32(size)
