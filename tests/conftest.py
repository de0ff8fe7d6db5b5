from __future__ import annotations

import json
from pathlib import Path
import sys


import pytest


# Ensure the repository root (parent of ./tests) is importable during pytest collection.
# This avoids ModuleNotFoundError for imports like `import persistence...` under pytest import modes
# that don't automatically prepend the cwd/rootdir to sys.path.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    """
    Path of a not-yet-existing backing file inside the test's temp directory.
    """
    return tmp_path / "db.json"


@pytest.fixture
def write_db(db_path: Path):
    """
    Write a raw JSON document (or text) to the backing file.
    """

    def _write(doc) -> Path:
        text = doc if isinstance(doc, str) else json.dumps(doc)
        db_path.write_text(text, encoding="utf-8")
        return db_path

    return _write


@pytest.fixture
def read_db(db_path: Path):
    def _read():
        return json.loads(db_path.read_text(encoding="utf-8"))

    return _read


@pytest.fixture
def make_client(db_path: Path):
    """
    Build a TestClient over a repository loaded from the backing file.
    Use as a context manager so one event loop serves the whole test.
    """
    from fastapi.testclient import TestClient

    import app as app_module
    from persistence.disk_store import DiskJsonDatabase
    from persistence.repositories import AsyncDiskResourceRepository

    def _make() -> TestClient:
        repo = AsyncDiskResourceRepository.open(DiskJsonDatabase(db_path))
        return TestClient(app_module.create_app(repo))

    return _make
