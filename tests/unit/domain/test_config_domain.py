from __future__ import annotations

"""
Unit tests for the Configuration Domain.

Verifies JSON persistence, merging over defaults, resilience to corrupt
files, and construction of the typed ScanConfig.
"""

import json
from pathlib import Path
from unittest.mock import patch

from treestat.domain.config import (
    ScanConfig,
    get_config_path,
    get_default_config,
    load_config,
    save_config,
)


def test_missing_file_returns_defaults(tmp_path: Path) -> None:
    assert load_config(str(tmp_path / "none.json")) == get_default_config()


def test_save_then_load(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "config.json"
    cfg = get_default_config()
    cfg["max_concurrency"] = 8
    cfg["child_order"] = "completion"

    assert save_config(cfg, str(path)) is True
    loaded = load_config(str(path))

    assert loaded["max_concurrency"] == 8
    assert loaded["child_order"] == "completion"
    assert loaded["apparent_size"] is False


def test_partial_file_is_merged_over_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"workers": 2, "legacy_key": 1}), encoding="utf-8")

    loaded = load_config(str(path))

    assert loaded["workers"] == 2
    assert "legacy_key" not in loaded
    assert set(loaded) == set(get_default_config())


def test_corrupted_file_returns_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")

    assert load_config(str(path)) == get_default_config()


def test_non_object_file_returns_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("[1, 2]", encoding="utf-8")

    assert load_config(str(path)) == get_default_config()


def test_config_path_lives_in_user_data_dir(tmp_path: Path) -> None:
    with patch("treestat.domain.config.get_user_data_dir", return_value=str(tmp_path)):
        assert get_config_path() == str(tmp_path / "config.json")


def test_scan_config_from_dict() -> None:
    cfg = ScanConfig.from_dict({"max_concurrency": 4, "apparent_size": True})

    assert cfg == ScanConfig(max_concurrency=4, apparent_size=True)
    assert cfg.child_order == "listing"
    assert cfg.workers is None


def test_save_failure_is_reported_not_raised(tmp_path: Path) -> None:
    blocker = tmp_path / "occupied"
    blocker.write_text("not a directory", encoding="utf-8")

    assert save_config(get_default_config(), str(blocker / "config.json")) is False
