"""Shared pytest fixtures for the cproj test suite.

Provides reusable fixtures for:
- Isolation from ``CPROJ_*`` environment variables
- A wide Rich console so assertions never hit line wrapping
- Output directories, generators and per-variant file sets
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from cproj import utils
from cproj.scaffolder import ProjectGenerator, ProjectSpec, TemplateRenderer, Variant


# ---------------------------------------------------------------------------
# Expected layouts
# ---------------------------------------------------------------------------

KEEP_MARKERS = {"bin/.gitkeep", "build/.gitkeep", "lib/.gitkeep"}

EXPECTED_FILES: dict[Variant, set[str]] = {
    Variant.CPP_FULL: {
        ".gitignore",
        ".clangd",
        "CMakeLists.txt",
        "Makefile",
        "README.md",
        "include/main.hpp",
        "src/main.cpp",
        "scripts/build.sh",
        "scripts/format.sh",
        "scripts/clean.sh",
        "tests/test_main.cpp",
    },
    Variant.CPP_MINIMAL: {
        ".gitignore",
        ".clangd",
        "CMakeLists.txt",
        "README.md",
        "include/main.hpp",
        "src/main.cpp",
        "scripts/build.sh",
        "scripts/format.sh",
        "scripts/clean.sh",
    },
    Variant.C_PLAIN: {
        ".gitignore",
        ".clangd",
        "CMakeLists.txt",
        "Makefile",
        "README.md",
        "include/main.h",
        "src/main.c",
        "scripts/build.sh",
        "scripts/format.sh",
        "scripts/clean.sh",
        "tests/test_main.c",
    },
}

EXECUTABLE_FILES = {"scripts/build.sh", "scripts/format.sh", "scripts/clean.sh"}


def list_files(root: Path) -> set[str]:
    """Every regular file under *root*, as POSIX paths relative to it."""
    return {p.relative_to(root).as_posix() for p in root.rglob("*") if p.is_file()}


# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _clean_cproj_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop any ``CPROJ_*`` variables inherited from the developer's shell."""
    for key in list(os.environ):
        if key.startswith("CPROJ_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def _wide_console(monkeypatch: pytest.MonkeyPatch) -> None:
    """Stop Rich from wrapping long paths across lines in captured output."""
    monkeypatch.setattr(utils.console, "width", 500)
    monkeypatch.setattr(utils.err_console, "width", 500)


# ---------------------------------------------------------------------------
# Scaffolding helpers
# ---------------------------------------------------------------------------


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """Empty parent directory for generated projects."""
    out = tmp_path / "out"
    out.mkdir()
    return out


@pytest.fixture
def generator() -> ProjectGenerator:
    return ProjectGenerator()


@pytest.fixture(params=list(Variant), ids=lambda v: v.value)
def variant(request: pytest.FixtureRequest) -> Variant:
    """Parametrises a test over every project variant."""
    return request.param


@pytest.fixture
def demo_spec(variant: Variant) -> ProjectSpec:
    return ProjectSpec(name="demo", variant=variant)


@pytest.fixture
def expected_files() -> dict[Variant, set[str]]:
    """Templated files each variant must produce (markers excluded)."""
    return {v: set(files) for v, files in EXPECTED_FILES.items()}


@pytest.fixture(name="list_files")
def list_files_fixture():
    """Expose :func:`list_files` to test modules."""
    return list_files


@pytest.fixture
def template_sources() -> set[str]:
    """Every bundled `.j2` file, relative to the template directory."""
    root = TemplateRenderer().template_dir
    return {p.relative_to(root).as_posix() for p in root.rglob("*.j2")}
