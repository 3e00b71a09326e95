"""Unit tests for RootManager."""

import pytest
from unittest.mock import patch

from dock.models import StorageError
from dock.services.sandbox.manager import RootManager


class TestRootManagerAvailability:
    """Test RootManager availability checks."""

    def test_is_available_when_proot_exists(self, roots):
        """Test is_available returns True when proot binary is found."""
        with patch("shutil.which", return_value="/usr/bin/proot"):
            assert roots.is_available() is True

    def test_is_not_available_when_proot_missing(self, roots):
        """Test is_available returns False when proot binary is not found."""
        with patch("shutil.which", return_value=None):
            assert roots.is_available() is False

    def test_get_initialization_error_proot_missing(self, roots):
        """Test error message when proot is not available."""
        with patch("shutil.which", return_value=None):
            error = roots.get_initialization_error()
            assert error is not None
            assert "proot" in error.lower()

    def test_get_initialization_error_none_when_available(self, roots):
        with patch("shutil.which", return_value="/usr/bin/proot"):
            assert roots.get_initialization_error() is None


class TestRootPaths:
    """Test deterministic path mapping."""

    def test_paths_are_pure_functions_of_name(self, dock_settings):
        first = RootManager(dock_settings)
        second = RootManager(dock_settings)
        assert first.root_path("web") == second.root_path("web")
        assert first.log_path("web") == second.log_path("web")

    def test_paths_differ_per_name(self, roots):
        assert roots.root_path("web") != roots.root_path("api")
        assert roots.log_path("web") != roots.log_path("api")

    def test_paths_live_under_dock_home(self, roots, dock_settings):
        assert roots.root_path("web") == dock_settings.rootfs_dir / "web"
        assert roots.log_path("web") == dock_settings.logs_dir / "web.log"


class TestRootLifecycle:
    """Test root creation and destruction."""

    def test_ensure_root_creates_directory(self, roots):
        root = roots.ensure_root("web")
        assert root.is_dir()
        assert roots.log_path("web").parent.is_dir()

    def test_ensure_root_is_idempotent(self, roots):
        roots.ensure_root("web")
        (roots.root_path("web") / "keep.txt").write_text("data")
        roots.ensure_root("web")
        assert (roots.root_path("web") / "keep.txt").exists()

    def test_ensure_root_failure_raises_storage_error(self, roots):
        with patch("pathlib.Path.mkdir", side_effect=PermissionError("denied")):
            with pytest.raises(StorageError):
                roots.ensure_root("web")

    def test_destroy_root_removes_tree_and_log(self, roots):
        """Test destroy_root removes the directory tree and the log file."""
        root = roots.ensure_root("web")
        (root / "nested").mkdir()
        (root / "nested" / "file.txt").write_text("x")
        roots.log_path("web").write_text("output")

        roots.destroy_root("web")

        assert not root.exists()
        assert not roots.log_path("web").exists()

    def test_destroy_root_missing_is_fine(self, roots):
        roots.destroy_root("never-created")

    def test_destroy_root_failure_is_surfaced(self, roots):
        roots.ensure_root("web")
        with patch("shutil.rmtree", side_effect=OSError("busy")):
            with pytest.raises(StorageError) as exc_info:
                roots.destroy_root("web")
        assert "busy" in exc_info.value.message


class TestReadLog:
    """Test log reading."""

    def test_read_log_missing_returns_none(self, roots):
        assert roots.read_log("web") is None

    def test_read_log_returns_content(self, roots):
        roots.ensure_root("web")
        roots.log_path("web").write_text("line 1\nline 2\n")
        assert roots.read_log("web") == "line 1\nline 2\n"

    def test_read_log_replaces_invalid_utf8(self, roots):
        roots.ensure_root("web")
        roots.log_path("web").write_bytes(b"ok \xff\xfe end")
        content = roots.read_log("web")
        assert content.startswith("ok ")
        assert content.endswith(" end")
