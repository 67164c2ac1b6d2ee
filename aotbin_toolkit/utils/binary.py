"""Binary reading and writing utilities with explicit byte order.

BIN archives exist in both little-endian (PC) and big-endian (PS3) flavours,
and a few PS3 entries use the opposite order of the archive that holds them,
so every field accessor takes an optional per-call byte order override.
"""

import struct
from enum import Enum
from io import BytesIO
from typing import BinaryIO, Optional, Union


class Endianness(Enum):
    """Byte order, valued as its struct format prefix."""

    BIG = ">"
    LITTLE = "<"

    @property
    def swapped(self) -> "Endianness":
        return Endianness.LITTLE if self is Endianness.BIG else Endianness.BIG


class BinaryReader:
    """Helper for reading binary data in a configurable byte order."""

    def __init__(self, data: Union[bytes, bytearray, BinaryIO], endianness: Endianness = Endianness.BIG):
        if isinstance(data, (bytes, bytearray)):
            self._stream = BytesIO(data)
        else:
            self._stream = data
        self.endianness = endianness

    def tell(self) -> int:
        return self._stream.tell()

    def seek(self, offset: int, whence: int = 0) -> int:
        return self._stream.seek(offset, whence)

    def read_bytes(self, size: int) -> bytes:
        data = self._stream.read(size)
        if len(data) < size:
            raise EOFError(f"Expected {size} bytes, got {len(data)}")
        return data

    def _unpack(self, fmt: str, size: int, endianness: Optional[Endianness]) -> int:
        order = (endianness or self.endianness).value
        return struct.unpack(order + fmt, self.read_bytes(size))[0]

    def read_u32(self, endianness: Optional[Endianness] = None) -> int:
        return self._unpack("I", 4, endianness)

    def read_i32(self, endianness: Optional[Endianness] = None) -> int:
        return self._unpack("i", 4, endianness)

    def read_i64(self, endianness: Optional[Endianness] = None) -> int:
        return self._unpack("q", 8, endianness)

    def skip(self, count: int) -> None:
        """Skip forward by count bytes."""
        self._stream.seek(count, 1)

    def remaining(self) -> int:
        """Return number of bytes remaining in stream."""
        current = self.tell()
        self._stream.seek(0, 2)  # Seek to end
        end = self.tell()
        self._stream.seek(current)
        return end - current


class BinaryWriter:
    """In-memory counterpart of BinaryReader.

    Writes past the current end zero-fill the gap, which is how block
    padding ends up in the output.
    """

    def __init__(self, endianness: Endianness = Endianness.BIG):
        self._stream = BytesIO()
        self.endianness = endianness

    def tell(self) -> int:
        return self._stream.tell()

    def seek(self, offset: int, whence: int = 0) -> int:
        return self._stream.seek(offset, whence)

    def __len__(self) -> int:
        position = self.tell()
        end = self._stream.seek(0, 2)
        self._stream.seek(position)
        return end

    def ensure_length(self, length: int) -> None:
        """Grow the buffer with zero bytes up to length, keeping the position."""
        current = len(self)
        if current < length:
            position = self.tell()
            self._stream.seek(current)
            self._stream.write(b"\x00" * (length - current))
            self._stream.seek(position)

    def write_bytes(self, data: bytes) -> None:
        self._stream.write(data)

    def _pack(self, fmt: str, value: int, endianness: Optional[Endianness]) -> None:
        order = (endianness or self.endianness).value
        self._stream.write(struct.pack(order + fmt, value))

    def write_u32(self, value: int, endianness: Optional[Endianness] = None) -> None:
        self._pack("I", value, endianness)

    def write_i32(self, value: int, endianness: Optional[Endianness] = None) -> None:
        self._pack("i", value, endianness)

    def write_i64(self, value: int, endianness: Optional[Endianness] = None) -> None:
        self._pack("q", value, endianness)

    def getvalue(self) -> bytes:
        return self._stream.getvalue()


def swap_u32(value: int) -> int:
    """Reverse the byte order of a 32-bit unsigned integer."""
    return int.from_bytes(value.to_bytes(4, "big"), "little")
