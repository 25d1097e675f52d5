from __future__ import annotations

"""
Filesystem Capability Layer.

Defines the three operations the traversal engine consumes (symlink-aware
metadata, real size, directory listing) behind an abstract interface, and
the default implementation backed by the local operating system. All
methods are blocking; the engine dispatches them off the event loop.
"""

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

# POSIX reports allocation in 512-byte units regardless of the filesystem block size
STAT_BLOCK_SIZE = 512


@dataclass(frozen=True)
class ListedEntry:
    """
    One item produced by a directory listing.

    Exactly one of the attributes is meaningful: ``path`` for an entry
    that was read successfully, ``error`` for one that could not be read.

    Attributes:
        path: Full path of the child entry.
        error: Failure raised while reading this entry.
    """
    path: str = ""
    error: Optional[OSError] = None


class FileSystem(ABC):
    """
    Abstract source of filesystem facts for the traversal engine.

    Implementations signal failures by raising OSError; any other exception
    is treated as a programming error and propagates.
    """

    @abstractmethod
    def lstat(self, path: str) -> os.stat_result:
        """
        Fetch metadata for ``path`` without following a trailing symlink.

        Args:
            path: Entry to inspect.

        Returns:
            os.stat_result: Metadata describing the entry itself.
        """

    @abstractmethod
    def real_size(self, path: str, metadata: os.stat_result) -> int:
        """
        Compute the allocation-aware size of an entry.

        Args:
            path: Entry being measured.
            metadata: Result of a previous ``lstat`` on the same path.

        Returns:
            int: Size in bytes.
        """

    @abstractmethod
    def list_dir(self, path: str) -> List[ListedEntry]:
        """
        Read the entries of a directory.

        Raises OSError if the directory cannot be opened at all. Failures
        on individual entries are returned inline as ListedEntry errors.

        Args:
            path: Directory to read.

        Returns:
            List[ListedEntry]: Entries in the order the OS produced them.
        """


class LocalFileSystem(FileSystem):
    """
    FileSystem backed by the 'os' module.

    Args:
        apparent_size: Report logical sizes (st_size) instead of
                       allocated sizes.
    """

    def __init__(self, apparent_size: bool = False) -> None:
        self.apparent_size = apparent_size

    def lstat(self, path: str) -> os.stat_result:
        return os.lstat(path)

    def real_size(self, path: str, metadata: os.stat_result) -> int:
        if self.apparent_size:
            return metadata.st_size
        blocks = getattr(metadata, "st_blocks", None)
        if blocks is None:
            # Windows does not expose allocation; logical size is the best estimate
            return metadata.st_size
        return blocks * STAT_BLOCK_SIZE

    def list_dir(self, path: str) -> List[ListedEntry]:
        entries: List[ListedEntry] = []
        with os.scandir(path) as it:
            while True:
                try:
                    entry = next(it)
                except StopIteration:
                    break
                except OSError as e:
                    # The scandir iterator cannot be resumed after a read error
                    entries.append(ListedEntry(error=e))
                    break
                entries.append(ListedEntry(path=entry.path))
        return entries
