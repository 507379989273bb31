from __future__ import annotations

from pathlib import Path

import pytest

from letterdesk import config
from letterdesk.assets import build_placeholder_letterheads
from letterdesk.models import reset_engine


@pytest.fixture(scope="session")
def letterhead_dir(tmp_path_factory) -> Path:
    asset_dir = tmp_path_factory.mktemp("letterheads")
    build_placeholder_letterheads(asset_dir)
    return asset_dir


@pytest.fixture()
def workspace(tmp_path: Path, letterhead_dir: Path, monkeypatch) -> Path:
    monkeypatch.setattr(config, "OUT_DIR", config.OUT_DIR)
    monkeypatch.setattr(config, "DB_PATH", config.DB_PATH)
    monkeypatch.setattr(config, "ASSET_DIR", config.ASSET_DIR)
    out_dir = tmp_path / "out"
    config.set_out_dir(out_dir)
    config.set_asset_dir(letterhead_dir)
    reset_engine()
    return out_dir
