"""Unit tests for the launcher installer (cproj.installer).

Tests cover:
- SourceNotFound before any mutation
- Local (no sudo) copy, chmod and directory creation
- PATH advisory and command availability
- sudo command sequencing and failure reporting via a patched run_command
- The write-access heuristic behind use_sudo=None
"""

from __future__ import annotations

import os
import stat
from pathlib import Path
from unittest.mock import patch

import pytest

from cproj import installer
from cproj.installer import (
    InstallError,
    InstallResult,
    SourceNotFound,
    install,
    path_contains,
)


pytestmark = pytest.mark.unit


@pytest.fixture
def launcher(tmp_path: Path) -> Path:
    src = tmp_path / "src" / "generate-cpp-project"
    src.parent.mkdir()
    src.write_text("#!/usr/bin/env python3\nprint('hi')\n", encoding="utf-8")
    return src


@pytest.fixture
def install_dir(tmp_path: Path) -> Path:
    return tmp_path / "bin"


# ---------------------------------------------------------------------------
# Source checks
# ---------------------------------------------------------------------------


class TestSourceNotFound:
    def test_missing_source(self, tmp_path, install_dir):
        with pytest.raises(SourceNotFound) as exc_info:
            install(tmp_path / "missing", install_dir, use_sudo=False)
        assert exc_info.value.source_path == tmp_path / "missing"
        assert "missing not found" in str(exc_info.value)
        assert not install_dir.exists()

    def test_directory_is_not_a_source(self, tmp_path, install_dir):
        with pytest.raises(SourceNotFound):
            install(tmp_path, install_dir, use_sudo=False)

    def test_is_an_install_error(self, tmp_path, install_dir):
        with pytest.raises(InstallError):
            install(tmp_path / "missing", install_dir, use_sudo=False)

    def test_missing_source_never_runs_sudo(self, tmp_path, install_dir):
        with patch("cproj.installer.run_command") as run:
            with pytest.raises(SourceNotFound):
                install(tmp_path / "missing", install_dir, use_sudo=True)
        run.assert_not_called()


# ---------------------------------------------------------------------------
# Local install
# ---------------------------------------------------------------------------


class TestLocalInstall:
    def test_copies_and_creates_directory(self, launcher, install_dir):
        result = install(launcher, install_dir, "generate-cpp-project", path_value="", use_sudo=False)
        assert isinstance(result, InstallResult)
        assert result.destination == install_dir / "generate-cpp-project"
        assert result.destination.read_bytes() == launcher.read_bytes()
        assert result.used_sudo is False

    def test_nested_install_dir(self, launcher, tmp_path):
        target = tmp_path / "a" / "b" / "bin"
        result = install(launcher, target, path_value="", use_sudo=False)
        assert result.destination.is_file()

    def test_install_name_defaults_to_source_name(self, launcher, install_dir):
        result = install(launcher, install_dir, path_value="", use_sudo=False)
        assert result.destination.name == launcher.name

    def test_custom_install_name(self, launcher, install_dir):
        result = install(launcher, install_dir, "cppgen", path_value="", use_sudo=False)
        assert result.destination == install_dir / "cppgen"

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits")
    def test_sets_executable_bit(self, launcher, install_dir):
        result = install(launcher, install_dir, path_value="", use_sudo=False)
        mode = result.destination.stat().st_mode
        assert mode & stat.S_IXUSR and mode & stat.S_IXGRP and mode & stat.S_IXOTH

    def test_overwrites_existing_install(self, launcher, install_dir):
        install_dir.mkdir()
        (install_dir / launcher.name).write_text("old", encoding="utf-8")
        result = install(launcher, install_dir, path_value="", use_sudo=False)
        assert result.destination.read_bytes() == launcher.read_bytes()

    def test_install_dir_is_a_file(self, launcher, install_dir):
        install_dir.write_text("not a dir", encoding="utf-8")
        with pytest.raises(InstallError) as exc_info:
            install(launcher, install_dir, path_value="", use_sudo=False)
        assert "Failed to create" in str(exc_info.value)

    def test_chmod_failure_keeps_copied_file(self, launcher, install_dir):
        with patch("cproj.installer._make_executable", side_effect=PermissionError(1, "Operation not permitted")):
            with pytest.raises(InstallError) as exc_info:
                install(launcher, install_dir, path_value="", use_sudo=False)
        assert "Operation not permitted" in str(exc_info.value)
        assert (install_dir / launcher.name).is_file()


# ---------------------------------------------------------------------------
# PATH advisory
# ---------------------------------------------------------------------------


class TestPathAdvisory:
    def test_not_on_path(self, launcher, install_dir, tmp_path):
        result = install(launcher, install_dir, path_value=str(tmp_path / "elsewhere"), use_sudo=False)
        assert result.on_path is False
        assert result.command_available is False

    @pytest.mark.skipif(os.name == "nt", reason="shutil.which needs PATHEXT on Windows")
    def test_on_path(self, launcher, install_dir, tmp_path):
        path_value = os.pathsep.join([str(tmp_path / "elsewhere"), str(install_dir)])
        result = install(launcher, install_dir, path_value=path_value, use_sudo=False)
        assert result.on_path is True
        assert result.command_available is True

    def test_defaults_to_environment(self, launcher, install_dir, monkeypatch):
        monkeypatch.setenv("PATH", str(install_dir))
        result = install(launcher, install_dir, use_sudo=False)
        assert result.on_path is True

    def test_path_contains_normalises(self):
        sep = os.pathsep
        assert path_contains("/usr/local/bin", f"/usr/bin{sep}/usr/local/bin/")
        assert path_contains(Path("/usr/local/bin"), f"{sep}/usr/local/bin{sep}")
        assert not path_contains("/usr/local/bin", f"/usr/local/bin/sub{sep}/usr/bin")
        assert not path_contains("/usr/local/bin", "")


# ---------------------------------------------------------------------------
# sudo
# ---------------------------------------------------------------------------


class TestSudoInstall:
    def test_runs_each_step_through_sudo(self, launcher, install_dir):
        with patch("cproj.installer.run_command", return_value=(0, "", "")) as run:
            result = install(launcher, install_dir, "gen", path_value="", use_sudo=True, timeout=30)

        dest = str(install_dir / "gen")
        assert [c.args[0] for c in run.call_args_list] == [
            ["sudo", "mkdir", "-p", str(install_dir)],
            ["sudo", "cp", str(launcher), dest],
            ["sudo", "chmod", "+x", dest],
        ]
        assert all(c.kwargs["timeout"] == 30 for c in run.call_args_list)
        assert result.used_sudo is True

    def test_skips_mkdir_when_directory_exists(self, launcher, install_dir):
        install_dir.mkdir()
        with patch("cproj.installer.run_command", return_value=(0, "", "")) as run:
            install(launcher, install_dir, path_value="", use_sudo=True)
        assert [c.args[0][1] for c in run.call_args_list] == ["cp", "chmod"]

    def test_failure_reports_command_and_stderr(self, launcher, install_dir):
        install_dir.mkdir()
        responses = [(1, "", "sudo: a password is required")]
        with patch("cproj.installer.run_command", side_effect=responses) as run:
            with pytest.raises(InstallError) as exc_info:
                install(launcher, install_dir, path_value="", use_sudo=True)

        err = exc_info.value
        assert err.command.startswith("sudo cp ")
        assert err.stderr == "sudo: a password is required"
        assert "exit code 1" in str(err)
        # chmod is never attempted after a failed copy
        assert run.call_count == 1


class TestNeedsSudo:
    def test_writable_directory(self, tmp_path, monkeypatch):
        monkeypatch.setattr(os, "geteuid", lambda: 1000, raising=False)
        assert installer._needs_sudo(tmp_path) is False

    def test_missing_directory_checks_ancestor(self, tmp_path, monkeypatch):
        monkeypatch.setattr(os, "geteuid", lambda: 1000, raising=False)
        assert installer._needs_sudo(tmp_path / "x" / "y") is False

    def test_unwritable_directory(self, tmp_path, monkeypatch):
        monkeypatch.setattr(os, "geteuid", lambda: 1000, raising=False)
        monkeypatch.setattr(installer.os, "access", lambda path, mode: False)
        assert installer._needs_sudo(tmp_path) is True

    def test_root_never_needs_sudo(self, tmp_path, monkeypatch):
        monkeypatch.setattr(os, "geteuid", lambda: 0, raising=False)
        monkeypatch.setattr(installer.os, "access", lambda path, mode: False)
        assert installer._needs_sudo(tmp_path) is False

    def test_auto_mode_uses_heuristic(self, launcher, install_dir, monkeypatch):
        monkeypatch.setattr(installer, "_needs_sudo", lambda target: True)
        with patch("cproj.installer.run_command", return_value=(0, "", "")) as run:
            result = install(launcher, install_dir, path_value="")
        assert result.used_sudo is True
        assert run.call_args_list[0].args[0][0] == "sudo"
