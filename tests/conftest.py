"""Pytest configuration and shared fixtures."""

import os
import textwrap
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Keep the developer's real dock home out of reach of the test session
os.environ.setdefault("DOCK_HOME", "/tmp/dock-test-home")

from dock.config import Settings
from dock.models import ContainerConfig, ContainerStatus
from dock.services.container import ContainerManager
from dock.services.locks import ContainerLocks
from dock.services.sandbox import ProcessHandle, ProcessLocator, RootManager, SandboxLauncher
from dock.services.storage import ConfigStore
from dock.utils.logging import setup_logging


@pytest.fixture(autouse=True)
def quiet_logging():
    """Route diagnostics to stderr at WARNING, as the CLI does by default."""
    setup_logging(level="WARNING", fmt="console")


@pytest.fixture
def dock_settings(tmp_path):
    """Settings rooted in a per-test dock home."""
    return Settings(dock_home=str(tmp_path / "dock-home"), stop_timeout_seconds=2)


@pytest.fixture
def store(dock_settings):
    """Initialised ConfigStore."""
    return ConfigStore(dock_settings).init()


@pytest.fixture
def roots(dock_settings):
    return RootManager(dock_settings)


@pytest.fixture
def script_file(tmp_path):
    """A Python 3 entry-point script."""
    script = tmp_path / "app.py"
    script.write_text(
        textwrap.dedent(
            """\
            import time

            print(f"hello from {__name__}", flush=True)
            time.sleep(60)
            """
        )
    )
    return script


@pytest.fixture
def sample_config(script_file):
    """A stopped container record."""
    return ContainerConfig(
        id="0b8d7c1e-3f7e-4a57-9d43-5d1f3a0f6c21",
        name="web",
        script=str(script_file),
        runtime_version="Python3",
        status=ContainerStatus.STOPPED,
    )


@pytest.fixture
def mock_launcher(tmp_path):
    """Mock SandboxLauncher that never spawns anything."""
    launcher = MagicMock(spec=SandboxLauncher)

    def _launch(config, root, log_path, port_mapping=None):
        Path(log_path).write_text("")
        return ProcessHandle(
            pid=4242,
            container_name=config.name,
            command=["proot", "-r", str(root), "python3", config.script],
            log_path=Path(log_path),
        )

    launcher.launch.side_effect = _launch
    return launcher


@pytest.fixture
def mock_locator():
    """Mock ProcessLocator with an empty process table."""
    locator = MagicMock(spec=ProcessLocator)
    locator.find_by_tag.return_value = []
    locator.terminate_by_tag.return_value = []
    return locator


@pytest.fixture
def manager(dock_settings, store, roots, mock_launcher, mock_locator):
    """ContainerManager with process operations mocked out."""
    return ContainerManager(
        store=store,
        roots=roots,
        launcher=mock_launcher,
        locator=mock_locator,
        locks=ContainerLocks(dock_settings),
        config=dock_settings,
    )
