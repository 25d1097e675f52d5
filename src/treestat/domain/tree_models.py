from __future__ import annotations

"""
Directory Statistics Tree Data Models.

Provides the aggregate node type produced by the traversal engine. Every
node carries the counters of its own entry plus the rolled-up counters of
all its descendants, forming a strict merge-tree.
"""

import stat
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional

# -----------------------------------------------------------------------------
# ENTRY CLASSIFICATION
# -----------------------------------------------------------------------------

class EntryKind(str, Enum):
    """Filesystem entry type as observed through symlink-aware metadata."""
    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    OTHER = "other"

    @classmethod
    def from_mode(cls, mode: int) -> "EntryKind":
        """
        Classify an ``st_mode`` value.

        Precedence is regular file, directory, symlink, other. The mode must
        come from ``lstat`` so a link is never mistaken for its target.
        """
        if stat.S_ISREG(mode):
            return cls.FILE
        if stat.S_ISDIR(mode):
            return cls.DIRECTORY
        if stat.S_ISLNK(mode):
            return cls.SYMLINK
        return cls.OTHER


# Counters merged from a child into its parent
COUNTER_FIELDS = ("files", "dirs", "links", "others", "errors", "size")

# -----------------------------------------------------------------------------
# AGGREGATE NODE
# -----------------------------------------------------------------------------

@dataclass
class Tree:
    """
    Aggregate statistics for one filesystem entry and its subtree.

    Attributes:
        path: Filesystem path of the entry.
        kind: Entry classification, or None if metadata or size failed.
        files: Regular files in the subtree.
        dirs: Directories in the subtree, excluding the node itself.
        links: Symbolic links in the subtree.
        others: Device nodes, sockets, fifos and the like.
        errors: Failures recorded anywhere in the subtree.
        size: Total real (allocation-aware) size in bytes.
        local_error_log: Error descriptions observed at this node only.
        children: Child nodes, populated for directories only.
    """
    path: str = ""
    kind: Optional[EntryKind] = None

    files: int = 0
    dirs: int = 0
    links: int = 0
    others: int = 0
    errors: int = 0
    size: int = 0

    local_error_log: List[str] = field(default_factory=list)
    children: List["Tree"] = field(default_factory=list)

    @property
    def is_directory(self) -> bool:
        return self.kind is EntryKind.DIRECTORY

    def absorb(self, other: "Tree") -> None:
        """
        Add every counter of ``other`` into this node.

        Only counters are merged; error text stays attached to the node
        where it was observed and children are handled by the caller.
        """
        self.files += other.files
        self.dirs += other.dirs
        self.links += other.links
        self.others += other.others
        self.errors += other.errors
        self.size += other.size

    def record_error(self, error: Any) -> None:
        """Count a failure observed at this node and keep its description."""
        self.errors += 1
        self.local_error_log.append(str(error))

    def iter_nodes(self) -> Iterator["Tree"]:
        """Yield this node and all descendants in pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def counters(self) -> Dict[str, int]:
        return {name: getattr(self, name) for name in COUNTER_FIELDS}

    def to_dict(self, max_depth: Optional[int] = None) -> Dict[str, Any]:
        """
        Build a JSON-compatible view of the subtree.

        Args:
            max_depth: Number of child levels to include. None keeps the
                       whole tree; 0 keeps only this node. Counters are
                       always the full aggregates.

        Returns:
            Dict[str, Any]: Nested plain-data representation.
        """
        data: Dict[str, Any] = {
            "path": self.path,
            "kind": self.kind.value if self.kind is not None else None,
        }
        data.update(self.counters())
        data["local_error_log"] = list(self.local_error_log)

        if max_depth is not None and max_depth <= 0:
            data["children"] = []
        else:
            next_depth = None if max_depth is None else max_depth - 1
            data["children"] = [child.to_dict(next_depth) for child in self.children]
        return data
