"""Attack on Titan BIN archive codec."""

from .errors import (
    BinError,
    ChunkIntegrityError,
    FormatError,
    NotFoundError,
    UnrecognizedFormatError,
    UnsupportedTypeError,
)
from .header import FileType, Variant
from .reader import BinReader, decompress_nodes, read_bin
from .update import UpdateResult, update_bin, update_nodes
from .writer import BinWriter, WriterParameters, write_bin

__all__ = [
    "BinError",
    "BinReader",
    "BinWriter",
    "ChunkIntegrityError",
    "FileType",
    "FormatError",
    "NotFoundError",
    "UnrecognizedFormatError",
    "UnsupportedTypeError",
    "UpdateResult",
    "Variant",
    "WriterParameters",
    "decompress_nodes",
    "read_bin",
    "update_bin",
    "update_nodes",
    "write_bin",
]
