"""BIN archive reader."""

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional, Sequence, Union

from ..tree import Node
from ..utils.binary import Endianness
from . import chunks
from .classify import classify, true_inflated_size
from .directory import Directory, read_directory
from .header import (
    TAG_BLOCK_SIZE,
    TAG_DEFLATED,
    TAG_ENDIANNESS,
    TAG_INDEX,
    TAG_INFLATED_SIZE,
    TAG_TYPE,
    TAG_VARIANT,
    BinHeader,
    DirectoryRow,
    FileType,
    Variant,
)

logger = logging.getLogger(__name__)

ROOT_NAME = "root"


class BinReader:
    """Reader for Standard and DLC BIN archives.

    Compressed entries are left framed (tagged ``deflated``) until
    decompress_nodes runs over the tree.
    """

    def __init__(self, data: Union[bytes, Path], file_names: Sequence[str] = ()):
        if isinstance(data, Path):
            data = data.read_bytes()
        self._data = bytes(data)
        self._file_names = list(file_names)
        self._directory: Directory = read_directory(self._data)

    @property
    def header(self) -> BinHeader:
        return self._directory.header

    @property
    def variant(self) -> Variant:
        return self._directory.variant

    @property
    def endianness(self) -> Endianness:
        return self._directory.endianness

    @property
    def rows(self) -> List[DirectoryRow]:
        return self._directory.rows

    def _split_name(self, position: int):
        """Return (sub path, leaf name) for the entry at 0-based position."""
        default_name = f"{position + 1:04d}"
        if position < len(self._file_names) and self._file_names[position]:
            sub_path, _, name = self._file_names[position].strip().rpartition("/")
            return sub_path, name or default_name
        return "", default_name

    def _make_node(self, name: str, row: DirectoryRow) -> Node:
        content = self._data[row.offset : row.offset + row.size]

        if self.variant is Variant.DLC:
            # DLC archives never compress; an empty slot is still a normal file
            return Node(name, content, {TAG_TYPE: FileType.NORMAL})

        file_type = classify(row.size, row.inflated_size)
        tags = {TAG_TYPE: file_type}
        if file_type.is_compressed:
            tags[TAG_INFLATED_SIZE] = true_inflated_size(file_type, row.inflated_size)
            tags[TAG_DEFLATED] = True
            # Byte order the chunk stream is framed in, before any alternate-endian swap
            tags[TAG_ENDIANNESS] = self.endianness
        elif file_type == FileType.EMPTY:
            content = b""

        logger.debug("entry %d: %s at 0x%X, 0x%X bytes", row.index, file_type.name, row.offset, row.size)
        return Node(name, content, tags)

    def read(self) -> Node:
        """Build the entry tree. The root node carries archive-level tags."""
        root = Node(
            ROOT_NAME,
            tags={
                TAG_VARIANT: self.variant,
                TAG_ENDIANNESS: self.endianness,
                TAG_BLOCK_SIZE: self.header.block_size,
            },
        )

        for position, row in enumerate(self.rows):
            sub_path, name = self._split_name(position)
            node = self._make_node(name, row)
            node.tags[TAG_INDEX] = row.index
            root.add_at(sub_path, node)

        return root

    def list_files(self) -> List[str]:
        """List entry paths in directory order."""
        names = []
        for position in range(len(self.rows)):
            sub_path, name = self._split_name(position)
            names.append(f"{sub_path}/{name}" if sub_path else name)
        return names


def _decompress_node(node: Node, endianness: Endianness) -> None:
    endianness = node.tags.get(TAG_ENDIANNESS, endianness)
    if node.tags[TAG_TYPE] == FileType.COMPRESSED_ALTERNATE_ENDIAN:
        endianness = endianness.swapped
    node.data = chunks.decompress(node.data, endianness)
    node.tags[TAG_INFLATED_SIZE] = len(node.data)
    node.tags[TAG_DEFLATED] = False
    node.tags.pop(TAG_ENDIANNESS, None)


def decompress_nodes(root: Node, endianness: Endianness, max_workers: Optional[int] = None) -> Node:
    """Inflate every deflated leaf of the tree in place.

    Alternate-endian leaves are inflated with the opposite byte order.
    """
    pending = [node for node in root.iterate_leaves() if node.tags.get(TAG_DEFLATED)]
    if not pending:
        return root

    logger.debug("decompressing %d entries", len(pending))
    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="bin_inflate") as pool:
        # Consuming the results re-raises the first worker error
        list(pool.map(lambda node: _decompress_node(node, endianness), pending))

    return root


def read_bin(
    data: Union[bytes, Path],
    file_names: Sequence[str] = (),
    decompress: bool = True,
    max_workers: Optional[int] = None,
) -> Node:
    """Read an archive into a tree, optionally inflating compressed entries."""
    reader = BinReader(data, file_names)
    root = reader.read()
    if decompress:
        decompress_nodes(root, reader.endianness, max_workers)
    return root
