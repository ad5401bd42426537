"""Shared fixtures: controller files written into a temporary routes tree."""

import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest


@pytest.fixture
def routes_dir(tmp_path: Path) -> Path:
    path = tmp_path / "routes"
    path.mkdir()
    return path


@pytest.fixture
def write_controller(routes_dir: Path) -> Callable[[str, str], Path]:
    """Write ``source`` (dedented) to ``routes_dir / relative``."""

    def write(relative: str, source: str) -> Path:
        path = routes_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(source), encoding="utf-8")
        return path

    return write
