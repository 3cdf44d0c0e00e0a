"""Installs the scaffolder launcher onto the system PATH.

Copies a launcher script into an install directory (``/usr/local/bin`` by
default), marks it executable, and reports whether that directory is on the
PATH.  The installer never escalates privileges itself: when the target is
not writable it runs the individual steps through ``sudo`` and surfaces any
failure as ``InstallError``.  Nothing is rolled back on failure.
"""

from __future__ import annotations

import os
import shutil
import stat
from dataclasses import dataclass
from pathlib import Path

from cproj.utils import run_command

DEFAULT_INSTALL_DIR = Path("/usr/local/bin")


class InstallError(Exception):
    """Raised when an installation step fails."""

    def __init__(self, message: str, command: str = "", stderr: str = ""):
        self.command = command
        self.stderr = stderr
        super().__init__(message)


class SourceNotFound(InstallError):
    """Raised when the launcher to install does not exist."""

    def __init__(self, source_path: Path) -> None:
        self.source_path = source_path
        super().__init__(f"{source_path.name} not found in {source_path.parent}")


@dataclass
class InstallResult:
    """Outcome of a successful installation."""

    destination: Path
    on_path: bool
    command_available: bool
    used_sudo: bool


def install(
    source_path: str | Path,
    install_dir: str | Path = DEFAULT_INSTALL_DIR,
    install_name: str | None = None,
    *,
    path_value: str | None = None,
    use_sudo: bool | None = None,
    timeout: int = 120,
) -> InstallResult:
    """Copy *source_path* into *install_dir* and make it executable.

    Args:
        source_path: Launcher file to install.
        install_dir: Target directory, created when missing.
        install_name: File name inside *install_dir*; defaults to the
            source file name.
        path_value: PATH-like string to check; defaults to ``$PATH``.
        use_sudo: Run mkdir/cp/chmod through ``sudo``.  ``None`` picks sudo
            only when the target is not writable by the current user.
        timeout: Per-command timeout for the ``sudo`` steps.

    Returns:
        An ``InstallResult``.  ``on_path`` is an advisory: a directory
        missing from PATH is not an error.

    Raises:
        SourceNotFound: If *source_path* is not an existing file.
        InstallError: If creating the directory, copying or chmod fails.
    """
    source = Path(source_path)
    if not source.is_file():
        raise SourceNotFound(source)

    target_dir = Path(install_dir)
    destination = target_dir / (install_name or source.name)
    sudo = _needs_sudo(target_dir) if use_sudo is None else use_sudo

    if not target_dir.is_dir():
        if sudo:
            _run_privileged(["mkdir", "-p", str(target_dir)], timeout)
        else:
            _run_local(f"create {target_dir}", target_dir.mkdir, parents=True, exist_ok=True)

    if sudo:
        _run_privileged(["cp", str(source), str(destination)], timeout)
        _run_privileged(["chmod", "+x", str(destination)], timeout)
    else:
        _run_local(f"copy {source} to {destination}", shutil.copyfile, source, destination)
        _run_local(f"make {destination} executable", _make_executable, destination)

    if path_value is None:
        path_value = os.environ.get("PATH", "")

    return InstallResult(
        destination=destination,
        on_path=path_contains(target_dir, path_value),
        command_available=shutil.which(destination.name, path=path_value) is not None,
        used_sudo=sudo,
    )


def path_contains(directory: str | Path, path_value: str) -> bool:
    """Return ``True`` if *directory* is one of the entries of *path_value*."""
    wanted = os.path.normpath(str(directory))
    return any(
        os.path.normpath(entry) == wanted
        for entry in path_value.split(os.pathsep)
        if entry
    )


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _needs_sudo(target_dir: Path) -> bool:
    """Decide whether writing into *target_dir* requires ``sudo``.

    Root never needs it.  Otherwise the nearest existing ancestor of
    *target_dir* must be writable by the current user.
    """
    geteuid = getattr(os, "geteuid", None)
    if geteuid is not None and geteuid() == 0:
        return False
    probe = target_dir
    while not probe.exists() and probe != probe.parent:
        probe = probe.parent
    return not os.access(probe, os.W_OK)


def _run_privileged(cmd: list[str], timeout: int) -> None:
    """Run *cmd* through ``sudo``, raising ``InstallError`` on failure."""
    full = ["sudo", *cmd]
    returncode, _stdout, stderr = run_command(full, timeout=timeout)
    if returncode != 0:
        command = " ".join(full)
        raise InstallError(
            f"'{command}' failed with exit code {returncode}",
            command=command,
            stderr=stderr,
        )


def _run_local(action: str, func, *args, **kwargs) -> None:
    try:
        func(*args, **kwargs)
    except OSError as exc:
        raise InstallError(f"Failed to {action}: {exc.strerror or exc}") from exc


def _make_executable(path: Path) -> None:
    """Set the executable bit on a file."""
    current = path.stat().st_mode
    path.chmod(current | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
