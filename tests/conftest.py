from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. An in-memory FileSystem used to inject failures, gate completion order
   and observe how many calls run at once.
3. Logging reset helpers for tests that configure the root logger.
"""

import errno
import logging
import os
import stat
import sys
import threading
import time
from contextlib import contextmanager
from logging.handlers import QueueListener
from typing import Dict, Iterator, List, Optional, Set, Union

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from treestat.core.services.filesystem import FileSystem, ListedEntry  # noqa: E402
from treestat.domain.tree_models import Tree  # noqa: E402

# Upper bound for a gated call, so a broken test fails instead of hanging
GATE_TIMEOUT = 5.0


# -----------------------------------------------------------------------------
# In-Memory FileSystem
# -----------------------------------------------------------------------------
class FakeFileSystem(FileSystem):
    """
    Deterministic FileSystem for engine tests.

    Paths are plain '/'-joined strings. Entries are listed in the order they
    were added. Any path can be made to fail at a given stage. A path with
    an entry in ``gates`` blocks its size computation until the test sets
    the event, and every call is counted in ``in_flight`` while it runs.
    """

    def __init__(self) -> None:
        self.nodes: Dict[str, tuple] = {}
        self.listings: Dict[str, List[Union[str, OSError]]] = {}
        self.lstat_failures: Dict[str, OSError] = {}
        self.size_failures: Dict[str, OSError] = {}
        self.list_failures: Dict[str, OSError] = {}
        self.gates: Dict[str, threading.Event] = {}
        self.waiting: Set[str] = set()
        self.io_delay = 0.0
        self.listed: List[str] = []
        self.in_flight = 0
        self.peak_in_flight = 0
        self._lock = threading.Lock()

    # --- tree construction ---
    def _add(self, path: str, mode: int, size: int) -> str:
        self.nodes[path] = (mode, size)
        parent = path.rsplit("/", 1)[0] if "/" in path else None
        if parent is not None and parent in self.listings:
            self.listings[parent].append(path)
        return path

    def add_dir(self, path: str, size: int = 0) -> str:
        self._add(path, stat.S_IFDIR | 0o755, size)
        self.listings[path] = []
        return path

    def add_file(self, path: str, size: int = 0) -> str:
        return self._add(path, stat.S_IFREG | 0o644, size)

    def add_link(self, path: str, size: int = 0) -> str:
        return self._add(path, stat.S_IFLNK | 0o777, size)

    def add_other(self, path: str, size: int = 0) -> str:
        return self._add(path, stat.S_IFIFO | 0o644, size)

    def add_unreadable_entry(self, directory: str, message: str = "Input/output error") -> None:
        self.listings[directory].append(OSError(errno.EIO, message))

    def gate(self, path: str) -> threading.Event:
        self.gates[path] = threading.Event()
        return self.gates[path]

    # --- call accounting ---
    @contextmanager
    def _call(self) -> Iterator[None]:
        with self._lock:
            self.in_flight += 1
            self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            if self.io_delay:
                time.sleep(self.io_delay)
            yield
        finally:
            with self._lock:
                self.in_flight -= 1

    def _wait_at_gate(self, path: str) -> None:
        gate = self.gates.get(path)
        if gate is None:
            return
        with self._lock:
            self.waiting.add(path)
        gate.wait(GATE_TIMEOUT)
        with self._lock:
            self.waiting.discard(path)

    # --- FileSystem capability ---
    def lstat(self, path: str) -> os.stat_result:
        with self._call():
            if path in self.lstat_failures:
                raise self.lstat_failures[path]
            if path not in self.nodes:
                raise FileNotFoundError(errno.ENOENT, "No such file or directory", path)
            mode, size = self.nodes[path]
            return os.stat_result((mode, 0, 0, 1, 0, 0, size, 0, 0, 0))

    def real_size(self, path: str, metadata: os.stat_result) -> int:
        self._wait_at_gate(path)
        with self._call():
            if path in self.size_failures:
                raise self.size_failures[path]
            return self.nodes[path][1]

    def list_dir(self, path: str) -> List[ListedEntry]:
        with self._call():
            self.listed.append(path)
            if path in self.list_failures:
                raise self.list_failures[path]
            out: List[ListedEntry] = []
            for item in self.listings[path]:
                if isinstance(item, OSError):
                    out.append(ListedEntry(error=item))
                else:
                    out.append(ListedEntry(path=item))
            return out


# -----------------------------------------------------------------------------
# Shared Helpers
# -----------------------------------------------------------------------------
def find_child(tree: Tree, path: str) -> Optional[Tree]:
    """Return the direct child of ``tree`` with the given path."""
    for child in tree.children:
        if child.path == path:
            return child
    return None


def assert_merge_invariants(tree: Tree) -> None:
    """Check aggregation and error bookkeeping for every node of the tree."""
    for node in tree.iter_nodes():
        own = {
            "files": 1 if node.kind is not None and node.kind.value == "file" else 0,
            "links": 1 if node.kind is not None and node.kind.value == "symlink" else 0,
            "others": 1 if node.kind is not None and node.kind.value == "other" else 0,
            "dirs": sum(1 for c in node.children if c.is_directory),
            "errors": len(node.local_error_log),
        }
        for name, value in own.items():
            expected = value + sum(getattr(c, name) for c in node.children)
            assert getattr(node, name) == expected, f"{name} mismatch at {node.path}"

        subtree_logs = sum(len(n.local_error_log) for n in node.iter_nodes())
        assert node.errors == subtree_logs


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def fake_fs() -> FakeFileSystem:
    """Return an empty in-memory filesystem."""
    return FakeFileSystem()


@pytest.fixture
def reset_logging():
    """Detach treestat logging handlers before and after a test."""
    from treestat.infra.logging import _CONFIGURED_FLAG_ATTR, _QUEUE_LISTENER_ATTR

    def _reset() -> None:
        root = logging.getLogger()
        listener = getattr(root, _QUEUE_LISTENER_ATTR, None)
        if isinstance(listener, QueueListener) and getattr(listener, "_thread", None) is not None:
            listener.stop()
        setattr(root, _QUEUE_LISTENER_ATTR, None)

        for h in list(root.handlers):
            if getattr(h, "_treestat_handler", False):
                root.removeHandler(h)
                h.close()

        if hasattr(root, _CONFIGURED_FLAG_ATTR):
            delattr(root, _CONFIGURED_FLAG_ATTR)

    _reset()
    yield
    _reset()
