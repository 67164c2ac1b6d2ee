"""BIN archive writer.

Entries are encoded into private buffers first (compression runs in a
thread pool), then laid out sequentially and their directory rows
backpatched, so only one thread ever touches the output stream.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional

from ..tree import Node
from ..utils.binary import BinaryWriter, Endianness, swap_u32
from . import chunks
from .classify import ALTERNATE_ENDIAN_ENTRIES
from .directory import align, directory_end, write_dlc_row, write_header, write_standard_row
from .errors import FormatError, UnsupportedTypeError
from .header import (
    DEFAULT_BLOCK_SIZE,
    DLC_MAX_FILES,
    DLC_TABLE_END,
    DUMMY_DATA,
    DUMMY_INFLATED_SIZE,
    TAG_DEFLATED,
    TAG_ENDIANNESS,
    TAG_INDEX,
    TAG_INFLATED_SIZE,
    TAG_TYPE,
    BinHeader,
    FileType,
    Variant,
)

logger = logging.getLogger(__name__)


@dataclass
class WriterParameters:
    """Output configuration for one write call."""

    endianness: Endianness = Endianness.LITTLE
    block_size: int = DEFAULT_BLOCK_SIZE
    variant: Variant = Variant.STANDARD
    max_workers: Optional[int] = None


@dataclass
class EncodedEntry:
    """Payload and row fields of one entry, ready to be placed."""

    file_type: FileType
    payload: bytes
    inflated_size: int = 0
    # Byte order of the inflated-size field when it differs from the archive
    inflated_endianness: Optional[Endianness] = None


def _resolve_type(node: Node) -> FileType:
    tag = node.tags.get(TAG_TYPE)
    try:
        return FileType(tag)
    except ValueError:
        raise UnsupportedTypeError(tag) from None


def ordered_leaves(root: Node) -> List[Node]:
    """Leaves sorted by index tag; leaves without one follow in tree order."""
    leaves = list(root.iterate_leaves())
    indexed = sorted((n for n in leaves if n.tags.get(TAG_INDEX) is not None), key=lambda n: n.tags[TAG_INDEX])
    return indexed + [n for n in leaves if n.tags.get(TAG_INDEX) is None]


class BinWriter:
    """Writer for Standard and DLC BIN archives."""

    def __init__(self, params: Optional[WriterParameters] = None):
        self.params = params or WriterParameters()
        if self.params.variant is Variant.STANDARD and self.params.block_size <= 0:
            raise ValueError(f"Invalid block size: {self.params.block_size}")

    def encode_entry(self, node: Node) -> EncodedEntry:
        """Encode one leaf according to its type tag."""
        file_type = _resolve_type(node)
        endianness = self.params.endianness

        if self.params.variant is Variant.DLC:
            if file_type not in (FileType.NORMAL, FileType.EMPTY):
                raise UnsupportedTypeError(file_type, "DLC archives only store normal files")
            return EncodedEntry(FileType.NORMAL, bytes(node.data))

        if file_type == FileType.EMPTY:
            return EncodedEntry(file_type, b"")
        if file_type == FileType.DUMMY:
            return EncodedEntry(file_type, DUMMY_DATA, DUMMY_INFLATED_SIZE)

        if file_type == FileType.NORMAL:
            if not node.data:
                # A zero stored size always reads back as empty
                return EncodedEntry(FileType.EMPTY, b"")
            return EncodedEntry(file_type, bytes(node.data))

        alternate = file_type == FileType.COMPRESSED_ALTERNATE_ENDIAN
        data = node.data
        if node.tags.get(TAG_DEFLATED):
            framed = node.tags.get(TAG_ENDIANNESS, endianness)
            if framed is endianness:
                logger.debug("%s: keeping original compressed stream", node.path)
                return EncodedEntry(
                    file_type,
                    bytes(node.data),
                    node.tags[TAG_INFLATED_SIZE],
                    endianness.swapped if alternate else None,
                )
            logger.debug("%s: reframing %s endian compressed stream", node.path, framed.name.lower())
            data = chunks.decompress(node.data, framed.swapped if alternate else framed)

        if not data:
            return EncodedEntry(FileType.EMPTY, b"")

        if alternate:
            payload = chunks.compress(data, endianness.swapped)
            # Readers only recognize the swapped framing by exact row fields
            if (len(payload), swap_u32(len(data))) in ALTERNATE_ENDIAN_ENTRIES:
                return EncodedEntry(file_type, payload, len(data), endianness.swapped)
            logger.warning(
                "%s: 0x%X byte stream is not a known alternate-endian entry, writing as compressed",
                node.path,
                len(payload),
            )

        return EncodedEntry(FileType.COMPRESSED, chunks.compress(data, endianness), len(data))

    def _encode_all(self, leaves: List[Node]) -> List[EncodedEntry]:
        with ThreadPoolExecutor(max_workers=self.params.max_workers, thread_name_prefix="bin_deflate") as pool:
            # map keeps directory order and re-raises the first worker error
            return list(pool.map(self.encode_entry, leaves))

    def _layout_standard(self, entries: List[EncodedEntry]) -> bytes:
        block_size = self.params.block_size
        writer = BinaryWriter(self.params.endianness)
        write_header(
            writer,
            BinHeader(magic=Variant.STANDARD.magic, file_count=len(entries), block_size=block_size),
        )

        current_offset = directory_end(len(entries), block_size)
        writer.ensure_length(current_offset)

        for position, entry in enumerate(entries):
            write_standard_row(
                writer,
                position,
                block_index=current_offset // block_size,
                size=len(entry.payload),
                inflated_size=entry.inflated_size,
                inflated_endianness=entry.inflated_endianness,
            )
            if not entry.payload:
                continue

            writer.ensure_length(current_offset)
            writer.seek(current_offset)
            writer.write_bytes(entry.payload)
            current_offset = align(current_offset + len(entry.payload), block_size)

        return writer.getvalue()

    def _layout_dlc(self, entries: List[EncodedEntry]) -> bytes:
        if len(entries) > DLC_MAX_FILES:
            raise FormatError(f"DLC archives hold at most {DLC_MAX_FILES} files, got {len(entries)}")

        writer = BinaryWriter(self.params.endianness)
        write_header(writer, BinHeader(magic=Variant.DLC.magic, file_count=len(entries), block_size=0))
        writer.ensure_length(DLC_TABLE_END)

        current_offset = DLC_TABLE_END
        for position, entry in enumerate(entries):
            write_dlc_row(writer, position, current_offset, len(entry.payload))
            writer.seek(current_offset)
            writer.write_bytes(entry.payload)
            current_offset += len(entry.payload)

        return writer.getvalue()

    def write(self, root: Node) -> bytes:
        """Serialize every leaf of the tree into an archive."""
        leaves = ordered_leaves(root)
        if not leaves:
            raise FormatError("No files selected.")

        entries = self._encode_all(leaves)
        logger.debug("writing %d entries as %s archive", len(entries), self.params.variant.value)

        if self.params.variant is Variant.DLC:
            return self._layout_dlc(entries)
        return self._layout_standard(entries)


def write_bin(root: Node, params: Optional[WriterParameters] = None) -> bytes:
    """Serialize a tree into an archive."""
    return BinWriter(params).write(root)
