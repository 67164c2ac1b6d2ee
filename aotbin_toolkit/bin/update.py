"""In-place replacement of archive entries.

Only replaced entries lose their original compressed stream; every other
compressed entry is written back as it was read. The whole archive is still
re-laid out on write.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional, Sequence, Tuple, Union

from ..tree import Node
from .errors import NotFoundError
from .header import (
    DEFAULT_BLOCK_SIZE,
    TAG_BLOCK_SIZE,
    TAG_DEFLATED,
    TAG_ENDIANNESS,
    TAG_INFLATED_SIZE,
    TAG_TYPE,
    TAG_VARIANT,
    FileType,
)
from .reader import BinReader
from .writer import WriterParameters, write_bin

logger = logging.getLogger(__name__)


@dataclass
class UpdateResult:
    """Outcome of an update batch."""

    updated: List[str] = field(default_factory=list)
    not_found: List[NotFoundError] = field(default_factory=list)


def replace_content(node: Node, data: bytes) -> None:
    """Replace a leaf's content, keeping its type unless it has no real content."""
    file_type = node.tags.get(TAG_TYPE)

    if file_type in (FileType.EMPTY, FileType.DUMMY):
        # Placeholders carry no content of their own
        node.tags[TAG_TYPE] = FileType.NORMAL
    elif file_type in (FileType.COMPRESSED, FileType.COMPRESSED_ALTERNATE_ENDIAN):
        node.tags[TAG_INFLATED_SIZE] = len(data)

    node.tags.pop(TAG_DEFLATED, None)
    node.tags.pop(TAG_ENDIANNESS, None)
    node.data = bytes(data)


def update_nodes(root: Node, changes: Mapping[str, bytes], max_workers: Optional[int] = None) -> UpdateResult:
    """Replace the content of leaves found at the given relative paths.

    Missing paths are collected in the result and do not stop the batch.
    """
    result = UpdateResult()

    def _update_one(item: Tuple[str, bytes]) -> Optional[NotFoundError]:
        path, data = item
        node = root.find(path)
        if node is None or node.is_container:
            return NotFoundError(path)
        replace_content(node, data)
        return None

    items = list(changes.items())
    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="bin_update") as pool:
        outcomes = list(pool.map(_update_one, items))

    for (path, _), error in zip(items, outcomes):
        if error is None:
            logger.debug("updated %s", path)
            result.updated.append(path)
        else:
            logger.warning("%s", error)
            result.not_found.append(error)

    return result


def update_bin(
    data: Union[bytes, Path],
    changes: Mapping[str, bytes],
    file_names: Sequence[str] = (),
    max_workers: Optional[int] = None,
) -> Tuple[bytes, UpdateResult]:
    """Replace entries of an archive and rebuild it in its original layout."""
    reader = BinReader(data, file_names)
    root = reader.read()

    result = update_nodes(root, changes, max_workers)

    params = WriterParameters(
        endianness=root.tags[TAG_ENDIANNESS],
        block_size=root.tags[TAG_BLOCK_SIZE] or DEFAULT_BLOCK_SIZE,
        variant=root.tags[TAG_VARIANT],
        max_workers=max_workers,
    )
    return write_bin(root, params), result
