"""Chunked zlib stream used inside compressed BIN entries.

Layout (all integers in the entry's byte order):

    i32 total inflated size
    repeated: i32 compressed chunk size, zlib stream of that many bytes
    i32 0 terminator

Each chunk holds at most CHUNK_SIZE raw bytes when written. Chunk
boundaries carry no meaning on read beyond framing.
"""

import zlib

from ..utils.binary import BinaryReader, BinaryWriter, Endianness
from .errors import ChunkIntegrityError

CHUNK_SIZE = 0x8000


def compress(data: bytes, endianness: Endianness) -> bytes:
    """Frame data as a chunk stream."""
    writer = BinaryWriter(endianness)
    writer.write_i32(len(data))

    view = memoryview(data)
    for start in range(0, len(data), CHUNK_SIZE):
        # Reserve the size field, then backpatch once the chunk length is known
        size_pos = writer.tell()
        writer.write_i32(0)

        deflated = zlib.compress(view[start : start + CHUNK_SIZE], 9)
        writer.write_bytes(deflated)
        end_pos = writer.tell()

        writer.seek(size_pos)
        writer.write_i32(len(deflated))
        writer.seek(end_pos)

    writer.write_i32(0)
    return writer.getvalue()


def decompress(data: bytes, endianness: Endianness) -> bytes:
    """Inflate a chunk stream.

    Raises ChunkIntegrityError if a chunk is corrupt or the inflated
    length differs from the declared total.
    """
    reader = BinaryReader(data, endianness)
    total = reader.read_i32()

    result = bytearray()
    chunk_size = reader.read_i32()
    while chunk_size != 0:
        chunk = reader.read_bytes(chunk_size)
        try:
            result.extend(zlib.decompress(chunk))
        except zlib.error as e:
            raise ChunkIntegrityError(total, len(result)) from e
        chunk_size = reader.read_i32()

    if len(result) != total:
        raise ChunkIntegrityError(total, len(result))

    return bytes(result)
