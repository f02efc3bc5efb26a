from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from inkwell.api import create_app
from inkwell.config import Settings
from inkwell.workspace import Workspace
from tests.fakes import FakeActivityLog, FakeClock


@pytest.fixture
def data_root(tmp_path: Path) -> Path:
    """Empty data root, the way a fresh installation starts out."""
    root = tmp_path / "data"
    root.mkdir()
    return root


@pytest.fixture
def test_settings(data_root: Path) -> Settings:
    return Settings(data_dir=data_root)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_activity_log() -> FakeActivityLog:
    return FakeActivityLog()


@pytest.fixture
def workspace(
    test_settings: Settings,
    fake_activity_log: FakeActivityLog,
    fake_clock: FakeClock,
) -> Workspace:
    """Workspace on the temporary data root with a frozen clock and in-memory activity log."""
    return Workspace.from_settings(test_settings, activity_log=fake_activity_log, clock=fake_clock)


@pytest.fixture
def test_client(workspace: Workspace) -> TestClient:
    """Create test client backed by the temporary workspace."""
    return TestClient(create_app(workspace=workspace))
