"""Main scaffolding orchestrator.

Takes a ``ProjectSpec`` and writes the project tree for its variant:
directories first, then the ``.gitkeep`` markers, then every registered
template in registry order.  Files are always overwritten; directories are
created only when missing.
"""

from __future__ import annotations

import shutil
import stat
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .registry import (
    KEEP_DIRECTORIES,
    KEEP_MARKER,
    ScaffoldError,
    Variant,
    all_template_paths,
    directory_plan,
    resolve,
)
from .templates import TemplateRenderer


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class InvalidName(ScaffoldError):
    """Raised when the project name is missing or cannot be used as a folder."""

    def __init__(self, name: str | None, reason: str = "project name is required") -> None:
        self.name = name
        super().__init__(reason)


class EmitError(ScaffoldError):
    """Raised when a filesystem operation fails while writing the project."""

    def __init__(self, path: Path, error: OSError) -> None:
        self.path = path
        self.error = error
        detail = error.strerror or str(error)
        super().__init__(f"Failed to write {path}: {detail}")


_EXEC_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH

# Characters the shell, Make or CMake would interpret inside a name
_UNSAFE_CHARS = frozenset("\"'$`#;&|<>*?()")


# ---------------------------------------------------------------------------
# Configuration model
# ---------------------------------------------------------------------------


class ProjectSpec(BaseModel):
    """The project to scaffold: a folder name and a variant."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Project name, used as the folder name")
    variant: Variant = Field(default=Variant.CPP_FULL, description="Project flavour")


# ---------------------------------------------------------------------------
# Main generator
# ---------------------------------------------------------------------------


class ProjectGenerator:
    """Writes a C/C++ project tree for a ``ProjectSpec``.

    Given a spec, generates a directory containing:
    - ``bin/``, ``build/``, ``lib/`` with ``.gitkeep`` markers
    - a header and a hello-world source under ``include/`` and ``src/``
    - ``CMakeLists.txt``, ``.clangd``, ``.gitignore`` and a README
    - executable ``scripts/build.sh``, ``format.sh`` and ``clean.sh``
    - a ``Makefile`` and a ``tests/`` stub, depending on the variant
    """

    def __init__(self, renderer: TemplateRenderer | None = None) -> None:
        self.renderer = renderer or TemplateRenderer()

    # -- Public API --------------------------------------------------------

    def generate(
        self, spec: ProjectSpec, output_dir: str | Path, *, clean: bool = False
    ) -> Path:
        """Generate the complete project structure.

        Args:
            spec: Project name and variant.
            output_dir: Parent directory where the project folder will be
                created.  A subdirectory named after the project is created
                inside it.
            clean: Remove an existing project folder before writing, so no
                files from an earlier run survive.

        Returns:
            Path to the generated project root.

        Raises:
            InvalidName: If the name is empty or unsafe.  Nothing has been
                written when this is raised.
            EmitError: If any filesystem operation fails.  Files written
                before the failure are left in place.
        """
        validate_name(spec.name)
        project_root = Path(output_dir) / spec.name
        context = self._build_context(spec)

        if clean and project_root.exists():
            _guard(project_root, shutil.rmtree, project_root)

        # 1. Directory skeleton
        self._create_directory_structure(project_root, spec.variant)

        # 2. Markers for directories that must stay tracked
        for directory in KEEP_DIRECTORIES:
            marker = project_root / directory / KEEP_MARKER
            _guard(marker, marker.write_bytes, b"")

        # 3. Templates, in registry order
        for template in resolve(spec.variant):
            out = project_root / template.path
            _guard(out, self.renderer.render_to_file, template.source, out, context)
            _guard(out, _set_executable, out, template.executable)

        return project_root

    # -- Context building --------------------------------------------------

    def _build_context(self, spec: ProjectSpec) -> dict[str, Any]:
        """Build the Jinja2 template context from the spec."""
        return {"project_name": spec.name}

    # -- Directory structure -----------------------------------------------

    def _create_directory_structure(self, root: Path, variant: Variant) -> None:
        """Create the project root and every planned directory."""
        _guard(root, root.mkdir, parents=True, exist_ok=True)
        for d in directory_plan(variant):
            p = root / d
            _guard(p, p.mkdir, parents=True, exist_ok=True)


def emit(spec: ProjectSpec, base_path: str | Path, *, clean: bool = False) -> Path:
    """Scaffold *spec* under *base_path* with the default renderer."""
    return ProjectGenerator().generate(spec, base_path, clean=clean)


def find_stale_files(project_root: str | Path, variant: Variant | str) -> list[Path]:
    """Return files left behind by a different variant.

    A re-run with another variant overwrites shared files but never deletes
    the ones only the earlier variant produced (``Makefile``, ``tests/...``,
    ``src/main.c`` and so on).  This lists those leftovers so the caller can
    warn about them.
    """
    root = Path(project_root)
    current = {t.path for t in resolve(variant)}
    stale = sorted(all_template_paths() - current)
    return [root / rel for rel in stale if (root / rel).is_file()]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def validate_name(name: str | None) -> str:
    """Check that *name* can be used as the project folder name.

    The name ends up in shell scripts, Makefile recipes and CMake, so it must
    be a single word those tools pass through untouched.

    Returns the name unchanged.  Raises ``InvalidName`` when it is missing,
    blank, a relative-path component, starts with ``-``, or contains a path
    separator, whitespace or a shell/Make metacharacter.
    """
    if name is None or not name.strip():
        raise InvalidName(name)
    if name in (".", ".."):
        raise InvalidName(name, f"'{name}' is not a valid project name")
    if "/" in name or "\\" in name:
        raise InvalidName(name, f"project name '{name}' must not contain path separators")
    if name.startswith("-"):
        raise InvalidName(name, f"project name '{name}' must not start with '-'")
    if any(ch.isspace() for ch in name):
        raise InvalidName(name, f"project name '{name}' must not contain whitespace")
    bad = sorted(set(name) & _UNSAFE_CHARS)
    if bad:
        raise InvalidName(
            name, f"project name '{name}' must not contain {' '.join(bad)}"
        )
    return name


def _guard(path: Path, func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func* and wrap any ``OSError`` in ``EmitError`` for *path*."""
    try:
        return func(*args, **kwargs)
    except OSError as exc:
        raise EmitError(path, exc) from exc


def _set_executable(path: Path, executable: bool) -> None:
    """Set or clear the executable bits on a file."""
    current = path.stat().st_mode
    if executable:
        path.chmod(current | _EXEC_BITS)
    else:
        path.chmod(current & ~_EXEC_BITS)
