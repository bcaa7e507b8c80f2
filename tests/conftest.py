# tests/conftest.py
import os

import pytest
from fastapi.testclient import TestClient

from dependencies import get_registry, get_script_runner
from deployer import ScriptRunner
from main import app
from models.registry import RepositoryRegistry

TEST_SHELL = "/bin/sh"


@pytest.fixture
def make_script(tmp_path):
    """Write a shell script into tmp_path and return its path."""
    def _make(body: str, name: str = "deploy.sh") -> str:
        path = tmp_path / name
        path.write_text(body)
        os.chmod(path, 0o755)
        return str(path)
    return _make


@pytest.fixture
def runner():
    return ScriptRunner(TEST_SHELL)


@pytest.fixture
def make_client(runner):
    """Build a TestClient whose registry (and optionally runner) are swapped in."""
    def _make(scripts: dict, script_runner=None) -> TestClient:
        registry = RepositoryRegistry(scripts=scripts)
        app.dependency_overrides[get_registry] = lambda: registry
        app.dependency_overrides[get_script_runner] = lambda: script_runner or runner
        return TestClient(app)
    yield _make
    app.dependency_overrides.clear()


class SpyRunner:
    """Stands in for ScriptRunner and records every call."""

    def __init__(self, outcome):
        self.outcome = outcome
        self.calls = []

    async def run(self, repo_name, script_path):
        self.calls.append((repo_name, script_path))
        return self.outcome


@pytest.fixture
def make_spy():
    return SpyRunner
