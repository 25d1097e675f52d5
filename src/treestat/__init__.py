from __future__ import annotations

from treestat.core.engine.builder import TreeBuilder, build, build_async
from treestat.core.services.filesystem import FileSystem, ListedEntry, LocalFileSystem
from treestat.domain.config import ScanConfig
from treestat.domain.tree_models import EntryKind, Tree

__version__ = "0.1.0"

__all__ = [
    "EntryKind",
    "FileSystem",
    "ListedEntry",
    "LocalFileSystem",
    "ScanConfig",
    "Tree",
    "TreeBuilder",
    "build",
    "build_async",
]
