"""Unit tests for ProotConfig builder and ProcessHandle dataclass."""

from pathlib import Path

from dock.config import Settings
from dock.services.sandbox.proot import ProcessHandle, ProotConfig


class TestProotConfigBuildArgs:
    """Test ProotConfig.build_args() generates the sandbox argv."""

    def test_python3_args(self, dock_settings):
        config = ProotConfig(dock_settings)
        args = config.build_args(root="/data/rootfs/web", runtime_version="Python3", script="/home/u/app.py")
        assert args == ["proot", "-r", "/data/rootfs/web", "python3", "/home/u/app.py"]

    def test_python2_args(self, dock_settings):
        config = ProotConfig(dock_settings)
        args = config.build_args(root="/r", runtime_version="Python2", script="/app.py")
        assert args[3] == "python2"

    def test_unknown_tag_uses_generic_python(self, dock_settings):
        """Test unsupported tags fall back instead of failing."""
        config = ProotConfig(dock_settings)
        args = config.build_args(root="/r", runtime_version="Jython", script="/app.py")
        assert args[3] == "python"

    def test_binary_and_flag_from_settings(self, tmp_path):
        settings = Settings(
            dock_home=str(tmp_path),
            sandbox_binary="/opt/bin/proot",
            sandbox_root_flag="--rootfs",
        )
        args = ProotConfig(settings).build_args(root="/r", runtime_version="Python3", script="/a.py")
        assert args[:3] == ["/opt/bin/proot", "--rootfs", "/r"]


class TestProotConfigBuildEnv:
    """Test ProotConfig.build_env() tags the child environment."""

    def test_tag_always_set(self, dock_settings):
        env = ProotConfig(dock_settings).build_env("web", base_env={"PATH": "/bin"})
        assert env["DOCK_CONTAINER"] == "web"
        assert env["PATH"] == "/bin"

    def test_port_hint_only_when_given(self, dock_settings):
        config = ProotConfig(dock_settings)
        assert "DOCK_PORT_MAP" not in config.build_env("web", base_env={})
        env = config.build_env("web", port_mapping="8080:80", base_env={})
        assert env["DOCK_PORT_MAP"] == "8080:80"

    def test_inherited_port_hint_is_dropped(self, dock_settings):
        """Test a hint present in the caller's environment does not leak."""
        env = ProotConfig(dock_settings).build_env(
            "web", base_env={"DOCK_PORT_MAP": "1:1"}
        )
        assert "DOCK_PORT_MAP" not in env

    def test_inherited_tag_is_overwritten(self, dock_settings):
        env = ProotConfig(dock_settings).build_env(
            "web", base_env={"DOCK_CONTAINER": "other"}
        )
        assert env["DOCK_CONTAINER"] == "web"

    def test_does_not_mutate_base_env(self, dock_settings):
        base = {"PATH": "/bin"}
        ProotConfig(dock_settings).build_env("web", port_mapping="1:2", base_env=base)
        assert base == {"PATH": "/bin"}


class TestProcessHandle:
    """Test ProcessHandle dataclass."""

    def test_creation(self):
        handle = ProcessHandle(
            pid=123,
            container_name="web",
            command=["proot", "-r", "/r", "python3", "/a.py"],
            log_path=Path("/tmp/web.log"),
        )
        assert handle.pid == 123
        assert handle.container_name == "web"
        assert handle.started_at is not None
