"""fileInfo.yaml side-car written next to extracted files.

Records, per extracted leaf, its relative path, entry type and directory
index so that ``build`` can recreate the same archive layout.
"""

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import List, Union

import yaml

from .bin.header import TAG_INDEX, TAG_TYPE, FileType
from .tree import Node

FILE_INFO_NAME = "fileInfo.yaml"


@dataclass
class FileInfo:
    """Extracted file entry."""

    name: str
    type: str
    index: int

    @property
    def file_type(self) -> Union[FileType, str]:
        """FileType for known names; unknown names are kept as given."""
        return FileType.__members__.get(self.type.upper(), self.type)

    @classmethod
    def from_node(cls, node: Node, root: Node) -> "FileInfo":
        file_type = node.tags[TAG_TYPE]
        return cls(
            name=node.relative_path(root),
            type=file_type.name.lower() if isinstance(file_type, FileType) else str(file_type),
            index=node.tags[TAG_INDEX],
        )


def dump_file_info(infos: List[FileInfo]) -> str:
    return yaml.safe_dump([asdict(info) for info in infos], sort_keys=False)


def save_file_info(path: Path, infos: List[FileInfo]) -> None:
    """Save to YAML file."""
    Path(path).write_text(dump_file_info(infos), encoding="utf-8")


def load_file_info(path: Path) -> List[FileInfo]:
    """Load a YAML side-car written by save_file_info."""
    raw = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or []
    if not isinstance(raw, list):
        raise ValueError(f"{path}: expected a list of file entries")
    return [FileInfo(name=str(item["name"]), type=str(item["type"]), index=int(item["index"])) for item in raw]
