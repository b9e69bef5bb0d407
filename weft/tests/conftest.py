# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Shared fixtures for the weft test suite.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from weft.weftc.options import ENV_SEARCH_PATH


@pytest.fixture(autouse=True)
def _isolate_search_path(monkeypatch: pytest.MonkeyPatch) -> None:
	"""Keep a developer's WEFT_PATH from leaking into search-path tests."""
	monkeypatch.delenv(ENV_SEARCH_PATH, raising=False)


@pytest.fixture
def write(tmp_path: Path) -> Callable[..., Path]:
	"""Write `text` to `tmp_path / rel` (creating parent dirs) and return the path."""

	def _write(rel: str, text: str) -> Path:
		path = tmp_path / rel
		path.parent.mkdir(parents=True, exist_ok=True)
		path.write_text(text, encoding="utf-8")
		return path

	return _write
