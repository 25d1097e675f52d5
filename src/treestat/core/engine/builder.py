from __future__ import annotations

"""
Concurrent Tree Builder.

Walks a filesystem subtree with asyncio tasks and aggregates per-entry
statistics into a merge-tree. Blocking filesystem calls run on a thread
pool; each directory spawns one task per child and merges finished
children into its own node under a per-directory lock. Failures are
recorded on the node where they happen and never abort the walk.
"""

import asyncio
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Union

from treestat.core.services.filesystem import FileSystem, ListedEntry, LocalFileSystem
from treestat.domain.config import CHILD_ORDER_COMPLETION, ScanConfig
from treestat.domain.scan_errors import (
    DirectoryEntryError,
    DirectoryOpenError,
    MetadataError,
    ScanError,
    SizeComputationError,
)
from treestat.domain.tree_models import EntryKind, Tree

logger = logging.getLogger(__name__)

PathArg = Union[str, "os.PathLike[str]"]

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def build(
        path: PathArg,
        config: Optional[ScanConfig] = None,
        filesystem: Optional[FileSystem] = None,
) -> Tree:
    """
    Scan the subtree rooted at ``path`` and return its statistics tree.

    Runs its own event loop and returns once every reachable entry has been
    visited. Must not be called from inside a running loop; use
    ``build_async`` there.

    Args:
        path: Root of the scan, taken as already resolved.
        config: Scan settings. Defaults to ScanConfig().
        filesystem: Capability provider. Defaults to LocalFileSystem.

    Returns:
        Tree: Fully populated root node.
    """
    return asyncio.run(build_async(path, config=config, filesystem=filesystem))


async def build_async(
        path: PathArg,
        config: Optional[ScanConfig] = None,
        filesystem: Optional[FileSystem] = None,
) -> Tree:
    """Coroutine flavour of ``build`` for callers that already own a loop."""
    return await TreeBuilder(filesystem=filesystem, config=config).build_async(path)


@dataclass
class _ScanContext:
    """Resources shared by every task of a single scan."""
    loop: asyncio.AbstractEventLoop
    executor: ThreadPoolExecutor
    io_slots: Optional[asyncio.Semaphore]


class TreeBuilder:
    """
    Builds Tree nodes for filesystem paths.

    A builder holds no per-scan state, so one instance may run several
    scans, sequentially or concurrently.

    Args:
        filesystem: Capability provider. Defaults to LocalFileSystem honoring
                    ``config.apparent_size``.
        config: Scan settings.
    """

    def __init__(
            self,
            filesystem: Optional[FileSystem] = None,
            config: Optional[ScanConfig] = None,
    ) -> None:
        self.config = config or ScanConfig()
        self.filesystem = filesystem or LocalFileSystem(apparent_size=self.config.apparent_size)

    async def build_async(self, path: PathArg) -> Tree:
        """
        Scan the subtree rooted at ``path``.

        Args:
            path: Root of the scan.

        Returns:
            Tree: Fully populated root node.
        """
        root = os.fspath(path)
        logger.info(f"Scanning subtree: {root}")

        io_slots = None
        if self.config.max_concurrency:
            io_slots = asyncio.Semaphore(self.config.max_concurrency)

        with ThreadPoolExecutor(
                max_workers=self.config.workers,
                thread_name_prefix="TreeStatWorker",
        ) as executor:
            ctx = _ScanContext(asyncio.get_running_loop(), executor, io_slots)
            tree = await self._build_node(root, ctx)

        logger.info(
            f"Scan finished: {root} | files={tree.files} dirs={tree.dirs} "
            f"links={tree.links} others={tree.others} errors={tree.errors} size={tree.size}"
        )
        return tree

    # -------------------------------------------------------------------------
    # NODE CONSTRUCTION
    # -------------------------------------------------------------------------

    async def _build_node(self, path: str, ctx: _ScanContext) -> Tree:
        """Produce the node for one entry, recursing into directories."""
        try:
            metadata = await self._run_io(ctx, self.filesystem.lstat, path)
        except OSError as e:
            return self._failed_node(MetadataError(path, e))

        try:
            size = await self._run_io(ctx, self.filesystem.real_size, path, metadata)
        except OSError as e:
            return self._failed_node(SizeComputationError(path, e))

        kind = EntryKind.from_mode(metadata.st_mode)
        tree = Tree(path=path, kind=kind, size=size)

        if kind is EntryKind.FILE:
            tree.files = 1
        elif kind is EntryKind.SYMLINK:
            tree.links = 1
        elif kind is EntryKind.OTHER:
            tree.others = 1
        else:
            await self._fan_out(tree, ctx)

        return tree

    async def _fan_out(self, tree: Tree, ctx: _ScanContext) -> None:
        """Build every child of a directory node and merge them into it."""
        try:
            listing: List[ListedEntry] = await self._run_io(ctx, self.filesystem.list_dir, tree.path)
        except OSError as e:
            self._record(tree, DirectoryOpenError(tree.path, e))
            return

        merge_lock = asyncio.Lock()
        slots: List[Optional[Tree]] = []
        builds = []

        for entry in listing:
            if entry.error is not None:
                self._record(tree, DirectoryEntryError(tree.path, entry.error))
                continue
            builds.append(self._build_child(tree, entry.path, len(slots), slots, merge_lock, ctx))
            slots.append(None)

        if builds:
            await asyncio.gather(*builds)

        if self.config.child_order != CHILD_ORDER_COMPLETION:
            tree.children = [child for child in slots if child is not None]

    async def _build_child(
            self,
            parent: Tree,
            path: str,
            index: int,
            slots: List[Optional[Tree]],
            merge_lock: asyncio.Lock,
            ctx: _ScanContext,
    ) -> None:
        child = await self._build_node(path, ctx)

        async with merge_lock:
            if child.is_directory:
                parent.dirs += 1
            parent.absorb(child)
            if self.config.child_order == CHILD_ORDER_COMPLETION:
                parent.children.append(child)
            else:
                slots[index] = child

    # -------------------------------------------------------------------------
    # HELPERS
    # -------------------------------------------------------------------------

    async def _run_io(self, ctx: _ScanContext, func: Callable[..., Any], *args: Any) -> Any:
        """Run a blocking filesystem call on the pool, honoring the I/O cap."""
        if ctx.io_slots is None:
            return await ctx.loop.run_in_executor(ctx.executor, func, *args)
        async with ctx.io_slots:
            return await ctx.loop.run_in_executor(ctx.executor, func, *args)

    def _failed_node(self, error: ScanError) -> Tree:
        tree = Tree(path=error.path)
        self._record(tree, error)
        return tree

    @staticmethod
    def _record(tree: Tree, error: ScanError) -> None:
        logger.debug(f"Recorded failure at '{error.path}': {error}")
        tree.record_error(error)
