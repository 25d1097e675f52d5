from __future__ import annotations

"""
Unit tests for CLI Argument Parsing.

Verifies:
1. Mapping of CLI flags to configuration keys.
2. None values for options left untouched.
3. Rejection of invalid choices.
"""

import pytest

from treestat.infra.logging import get_default_log_path
from treestat.interface.cli.args import args_to_overrides, build_parser


def parse_args(arg_list):
    """Helper to simulate CLI argument parsing."""
    return build_parser().parse_args(arg_list)


def test_cli_traversal_flags_mapping():
    args = parse_args([
        "/data",
        "--max-concurrency", "16",
        "--workers", "4",
        "--child-order", "completion",
        "--apparent-size",
    ])

    overrides = args_to_overrides(args)

    assert args.root == "/data"
    assert overrides == {
        "max_concurrency": 16,
        "workers": 4,
        "child_order": "completion",
        "apparent_size": True,
    }


def test_cli_defaults_are_explicit_in_overrides():
    """Untouched options map to None so the merge keeps configured values."""
    args = parse_args([])
    overrides = args_to_overrides(args)

    assert args.root is None
    assert overrides["max_concurrency"] is None
    assert overrides["workers"] is None
    assert overrides["child_order"] is None
    assert "apparent_size" not in overrides


def test_cli_output_flags():
    args = parse_args(["--json", "--depth", "2", "--show-errors", "--debug", "--log-file", "/tmp/x.log"])

    assert args.json_output is True
    assert args.depth == 2
    assert args.show_errors is True
    assert args.debug is True
    assert args.log_file == "/tmp/x.log"


def test_cli_rejects_unknown_child_order():
    with pytest.raises(SystemExit):
        parse_args(["--child-order", "alphabetical"])


def test_cli_log_file_without_path_uses_default_location():
    args = parse_args(["--log-file"])

    assert args.log_file == get_default_log_path()


def test_cli_save_config_flag():
    assert parse_args(["--save-config"]).save_config is True
    assert parse_args([]).save_config is False
