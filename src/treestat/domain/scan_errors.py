from __future__ import annotations

"""
Scan Failure Taxonomy.

Recoverable failures observed while walking a subtree. They are never
raised out of the traversal; the engine converts them into counters and
log entries on the node where they happen.
"""


class ScanError(Exception):
    """
    Base class for a failure tied to one filesystem path.

    Attributes:
        path: Path being processed when the failure occurred.
        cause: Underlying operating system error.
    """
    category = "scan"

    def __init__(self, path: str, cause: BaseException) -> None:
        super().__init__(path, cause)
        self.path = path
        self.cause = cause

    def __str__(self) -> str:
        return f"{self.category}: {self.cause}"


class MetadataError(ScanError):
    """The entry could not be stat-ed."""
    category = "metadata"


class SizeComputationError(ScanError):
    """The real size of an otherwise readable entry could not be determined."""
    category = "size"


class DirectoryOpenError(ScanError):
    """The directory could not be opened for listing."""
    category = "open directory"


class DirectoryEntryError(ScanError):
    """A single entry of a directory listing could not be read."""
    category = "read directory entry"
