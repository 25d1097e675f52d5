from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line schema and translates the parsed namespace into
configuration overrides understood by the domain layer.
"""

import argparse
from typing import Any, Dict

from treestat.domain.config import CHILD_ORDERS
from treestat.infra.logging import get_default_log_path

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the treestat CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="treestat",
        description="Count files, directories, links and real disk usage of a directory tree.",
    )

    p.add_argument(
        "root",
        nargs="?",
        default=None,
        help="Directory to scan (default: current directory).",
    )

    # --- Traversal Settings ---
    p.add_argument(
        "--max-concurrency",
        dest="max_concurrency",
        type=int,
        default=None,
        help="Cap on filesystem operations in flight (default: unbounded).",
    )
    p.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Threads used for blocking filesystem calls.",
    )
    p.add_argument(
        "--child-order",
        dest="child_order",
        choices=CHILD_ORDERS,
        default=None,
        help="Order of children in the output tree.",
    )
    p.add_argument(
        "--apparent-size",
        action="store_true",
        help="Report logical file sizes instead of allocated disk usage.",
    )

    # --- Output ---
    p.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Print the statistics tree as JSON.",
    )
    p.add_argument(
        "--depth",
        type=int,
        default=None,
        help="Number of child levels included in JSON output.",
    )
    p.add_argument(
        "--show-errors",
        action="store_true",
        help="List every recorded error with the path it belongs to.",
    )

    # --- Configuration and Diagnostics ---
    p.add_argument(
        "--use-defaults",
        action="store_true",
        help="Ignore the saved configuration file.",
    )
    p.add_argument(
        "--dump-config",
        action="store_true",
        help="Print the effective configuration and exit.",
    )
    p.add_argument(
        "--save-config",
        action="store_true",
        help="Persist the effective configuration as the new default and exit.",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )
    p.add_argument(
        "--log-file",
        dest="log_file",
        nargs="?",
        const=get_default_log_path(),
        default=None,
        metavar="PATH",
        help="Also write logs to PATH (default location if PATH is omitted).",
    )

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into configuration overrides.

    Values left at None mean "keep the configured value".

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Configuration overrides subset.
    """
    overrides: Dict[str, Any] = {
        "max_concurrency": args.max_concurrency,
        "workers": args.workers,
        "child_order": args.child_order,
    }

    if args.apparent_size:
        overrides["apparent_size"] = True

    return overrides
