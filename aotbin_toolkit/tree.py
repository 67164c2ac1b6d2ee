"""In-memory file tree holding decoded archive entries.

Containers have ``data is None``; leaves own their bytes. Both carry a
free-form ``tags`` dict for per-entry metadata.
"""

from typing import Any, Dict, Iterator, List, Optional


class Node:
    """A named node in an ordered tree."""

    def __init__(self, name: str, data: Optional[bytes] = None, tags: Optional[Dict[str, Any]] = None):
        if not name or "/" in name:
            raise ValueError(f"Invalid node name: {name!r}")
        self.name = name
        self.data = data
        self.tags: Dict[str, Any] = dict(tags or {})
        self.parent: Optional["Node"] = None
        self._children: List["Node"] = []

    @classmethod
    def container(cls, name: str) -> "Node":
        return cls(name)

    @property
    def is_container(self) -> bool:
        return self.data is None

    @property
    def children(self) -> List["Node"]:
        return list(self._children)

    @property
    def path(self) -> str:
        """Absolute path, e.g. ``/root/dir/file``."""
        if self.parent is None:
            return f"/{self.name}"
        return f"{self.parent.path}/{self.name}"

    def child(self, name: str) -> Optional["Node"]:
        for node in self._children:
            if node.name == name:
                return node
        return None

    def add(self, node: "Node") -> "Node":
        """Add a child, replacing any existing child with the same name."""
        if self.data is not None:
            raise ValueError(f"Cannot add children to leaf node {self.path}")

        existing = self.child(node.name)
        if existing is not None:
            self._children[self._children.index(existing)] = node
            existing.parent = None
        else:
            self._children.append(node)
        node.parent = self
        return node

    def add_at(self, sub_path: str, node: "Node") -> "Node":
        """Add node under sub_path, creating missing containers on the way."""
        parent = self
        for part in (p for p in sub_path.split("/") if p):
            found = parent.child(part)
            if found is None:
                found = parent.add(Node.container(part))
            parent = found
        return parent.add(node)

    def find(self, path: str) -> Optional["Node"]:
        """Find a descendant by a slash-delimited path relative to this node."""
        node: Optional[Node] = self
        for part in (p for p in path.split("/") if p):
            node = node.child(part)
            if node is None:
                return None
        return node

    def iterate_nodes(self) -> Iterator["Node"]:
        """Yield every descendant, depth first, in child order."""
        for node in self._children:
            yield node
            yield from node.iterate_nodes()

    def iterate_leaves(self) -> Iterator["Node"]:
        return (node for node in self.iterate_nodes() if not node.is_container)

    def relative_path(self, ancestor: "Node") -> str:
        """Path of this node below ancestor, without a leading slash."""
        return self.path[len(ancestor.path) + 1 :]

    def __repr__(self) -> str:
        if self.is_container:
            return f"Node({self.path!r}, children={len(self._children)})"
        return f"Node({self.path!r}, size={len(self.data)})"
