from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: logging bootstrap, merging of configuration
sources (defaults, persisted file, command-line overrides), the scan itself
and rendering of the resulting tree.
"""

import json
import os
import sys
from typing import Any, Dict, List, Optional

from treestat.core.engine.builder import build
from treestat.core.services.validator import validate_config
from treestat.domain.config import (
    ScanConfig,
    get_config_path,
    get_default_config,
    load_config,
    save_config,
)
from treestat.domain.tree_models import Tree
from treestat.infra.fs import normalize_path
from treestat.infra.logging import LoggingConfig, configure_logging, get_logger
from treestat.interface.cli import args as cli_args
from treestat.utils.formatting import display_path, format_size

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_SCAN_ERRORS = 1
EXIT_INTERRUPTED = 130

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the CLI workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: 0 for a clean scan, 1 if any error was recorded, 130 on interrupt.
    """
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 1. Logging bootstrap
    log_level = "DEBUG" if args.debug else "WARNING"
    configure_logging(LoggingConfig(level=log_level, console=True, log_file=args.log_file))

    # 2. Configuration hierarchy
    base_conf = get_default_config() if args.use_defaults else load_config()
    raw_conf = _merge_config(base_conf, cli_args.args_to_overrides(args))
    clean_conf, warnings = validate_config(raw_conf, strict=False)
    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    if args.dump_config:
        print(json.dumps(clean_conf, ensure_ascii=False, indent=2))
        return EXIT_OK

    if args.save_config:
        if not save_config(clean_conf):
            print("Failed to save configuration.", file=sys.stderr)
            return EXIT_SCAN_ERRORS
        print(f"Configuration saved to {get_config_path()}")
        return EXIT_OK

    # 3. Scan
    root = normalize_path(args.root, os.getcwd())
    try:
        tree = build(root, config=ScanConfig.from_dict(clean_conf))
    except KeyboardInterrupt:
        print("Scan interrupted.", file=sys.stderr)
        return EXIT_INTERRUPTED

    # 4. Rendering
    if args.json_output:
        print(json.dumps(tree.to_dict(max_depth=args.depth), indent=2))
    else:
        _print_human_summary(tree)

    if args.show_errors:
        _print_error_logs(tree)

    return EXIT_OK if tree.errors == 0 else EXIT_SCAN_ERRORS

# -----------------------------------------------------------------------------
# CONFIGURATION MERGING
# -----------------------------------------------------------------------------

def _merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Shallow merge of the non-None overrides into a copy of ``base``."""
    out = dict(base)
    for k, v in overrides.items():
        if v is not None:
            out[k] = v
    return out

# -----------------------------------------------------------------------------
# VIEW RENDERING
# -----------------------------------------------------------------------------

def _print_human_summary(tree: Tree) -> None:
    print(f"Path:   {display_path(tree.path)}")
    print(f"Size:   {format_size(tree.size)} ({tree.size:,} bytes)")
    print(f"Files:  {tree.files:,}")
    print(f"Dirs:   {tree.dirs:,}")
    print(f"Links:  {tree.links:,}")
    print(f"Others: {tree.others:,}")
    print(f"Errors: {tree.errors:,}")
    if tree.errors:
        print("Totals are a lower bound: some entries could not be read.")


def _print_error_logs(tree: Tree) -> None:
    for node in tree.iter_nodes():
        for message in node.local_error_log:
            print(f"{display_path(node.path)}: {message}", file=sys.stderr)


if __name__ == "__main__":
    sys.exit(main())
