from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest

from imagespecs.models import FetchOptions

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep user-level config files and env overrides out of every test."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path_factory.mktemp("xdg")))
    monkeypatch.delenv("IMAGESPECS_CONFIG_PATH", raising=False)


@pytest.fixture
def in_tmp_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def fetch_options() -> FetchOptions:
    return FetchOptions(timeout=2.0, max_bytes=4096, user_agent="test-agent/1.0")


@pytest.fixture
def _restore_root_logging() -> Iterator[None]:
    """``cli`` reconfigures the root logger; put it back afterwards."""
    root = logging.getLogger()
    level, handlers = root.level, list(root.handlers)
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
