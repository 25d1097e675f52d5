from __future__ import annotations

"""Human-readable rendering helpers."""

import os

_UNITS = ("KiB", "MiB", "GiB", "TiB", "PiB")


def format_size(size_bytes: int) -> str:
    """Convert a byte count into a binary-prefixed human string (like ``du -h``)."""
    if size_bytes < 1024:
        return f"{size_bytes} B"

    value = float(size_bytes)
    for unit in _UNITS:
        value /= 1024
        if value < 1024 or unit == _UNITS[-1]:
            return f"{value:.1f} {unit}"
    return f"{size_bytes} B"


def display_path(path: str) -> str:
    """
    Make a filesystem path safe to print on any text stream.

    Names that are not valid in the filesystem encoding come back from the
    OS with surrogate escapes; their raw bytes are rendered as ``\\xNN``.

    Args:
        path: Path as returned by ``os`` functions.

    Returns:
        str: Printable rendering of the path.
    """
    return os.fsencode(path).decode("utf-8", "backslashreplace")
