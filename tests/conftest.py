from pathlib import Path
from typing import Callable

import pytest

from sitestack.application.site_engine import SiteEngine


@pytest.fixture(scope="session")
def repo_root() -> Path:
    """Resolve the repository root directory.

    Assumes tests live under <repo>/tests/.
    """
    return Path(__file__).resolve().parents[1]


@pytest.fixture
def utf8() -> str:
    """Canonical encoding used throughout tests."""
    return "utf-8"


@pytest.fixture
def engine() -> SiteEngine:
    """Fresh engine; paths registered in tests are relative, so cwd is irrelevant."""
    return SiteEngine()


@pytest.fixture
def make_engine() -> Callable[[dict[str, str]], SiteEngine]:
    """Build an engine from a {path: source} mapping, registered in mapping order."""

    def _make(files: dict[str, str], **kwargs) -> SiteEngine:
        eng = SiteEngine(**kwargs)
        for path, source in files.items():
            eng.register(source, path)
        return eng

    return _make


@pytest.fixture
def write_tree(utf8: str) -> Callable[[Path, dict[str, str]], Path]:
    """Write a {relative path: text} mapping under a root directory."""

    def _write(root: Path, files: dict[str, str]) -> Path:
        for rel, text in files.items():
            target = root / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(text, encoding=utf8)
        return root

    return _write
