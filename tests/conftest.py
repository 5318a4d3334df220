"""Shared fixtures for cheatdocs tests."""

import json
from pathlib import Path

import pytest

from cheatdocs.config import CheatdocsConfig

REPO_ROOT = Path(__file__).resolve().parent.parent
DECLARATIONS_DIR = REPO_ROOT / "cheatsheets"


def make_declaration(keyword: str = "tst", **overrides) -> dict:
    """Build a small valid declaration payload."""
    data = {
        "title": f"Test Cheatsheet {keyword}",
        "docset_file_name": f"test_{keyword}",
        "keyword": keyword,
        "introduction": "Fixture cheatsheet.",
        "source_url": "https://example.com/cheatsheet",
        "categories": [
            {
                "id": "First",
                "entries": [
                    {"command": "a", "name": "Alpha."},
                    {"command": "b", "name": "Bravo.", "notes": "with notes"},
                ],
            },
            {
                "id": "Second",
                "entries": [{"command": "c", "name": "Charlie."}],
            },
        ],
        "notes": "Fixture notes.",
    }
    data.update(overrides)
    return data


@pytest.fixture
def declarations_dir() -> Path:
    return DECLARATIONS_DIR


@pytest.fixture
def config(tmp_path):
    """Create a CheatdocsConfig rooted in a temporary directory."""
    return CheatdocsConfig(base_path=tmp_path)


@pytest.fixture
def write_declaration(tmp_path):
    """Write a declaration into <tmp>/cheatsheets and return its path."""
    source_dir = tmp_path / "cheatsheets"
    source_dir.mkdir(exist_ok=True)

    def _write(name: str, payload) -> Path:
        path = source_dir / name
        if isinstance(payload, str):
            path.write_text(payload)
        else:
            path.write_text(json.dumps(payload, indent=2))
        return path

    return _write
