"""Pytest fixtures for fivem-utility tests."""

from pathlib import Path

import pytest


@pytest.fixture
def write_cfg(tmp_path: Path):
    """Write a .cfg file under tmp_path. Returns a callable (name, text) -> Path."""

    def _write(name: str, text: str) -> Path:
        p = tmp_path / name
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(text)
        return p

    return _write


@pytest.fixture
def cargo_project(tmp_path: Path) -> Path:
    """Minimal cargo source tree. Returns the project root."""
    (tmp_path / "Cargo.toml").write_text('[package]\nname = "fivem-utility"\nversion = "0.1.0"\n')
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "main.rs").write_text("fn main() {}\n")
    return tmp_path
