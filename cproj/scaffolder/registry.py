"""Template registry for project scaffolding.

Holds, per project variant, the ordered list of files to generate together
with the Jinja2 template each one is rendered from.  Templates that are the
same for every variant live once under ``templates/shared/``; each variant
starts from its family's base list and overrides entries by output path.

The registry is pure data: nothing here touches the filesystem.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ScaffoldError(Exception):
    """Base class for every scaffolding failure."""


class UnknownVariant(ScaffoldError, ValueError):
    """Raised when a variant outside the fixed set is requested."""

    def __init__(self, variant: object) -> None:
        self.variant = variant
        choices = ", ".join(v.value for v in Variant)
        super().__init__(f"Unknown project variant {variant!r} (expected one of: {choices})")


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class Variant(str, Enum):
    """Project flavours the scaffolder knows how to generate."""

    CPP_FULL = "cpp"
    CPP_MINIMAL = "cpp-minimal"
    C_PLAIN = "c"


class Template(BaseModel):
    """A single file emitted into the generated project."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="Output path relative to the project root")
    source: str = Field(..., description="Jinja2 template path relative to the template directory")
    executable: bool = Field(default=False, description="Set the execute bit after writing")


# ---------------------------------------------------------------------------
# Directory layout
# ---------------------------------------------------------------------------

BASE_DIRECTORIES: tuple[str, ...] = ("bin", "build", "include", "lib", "scripts", "src")

# Directories that are emptied by ``clean`` but must stay tracked in git.
KEEP_DIRECTORIES: tuple[str, ...] = ("bin", "build", "lib")

KEEP_MARKER = ".gitkeep"


# ---------------------------------------------------------------------------
# Template tables
# ---------------------------------------------------------------------------

_SHARED_BUILD = Template(path="scripts/build.sh", source="shared/scripts/build.sh.j2", executable=True)
_SHARED_CLEAN = Template(path="scripts/clean.sh", source="shared/scripts/clean.sh.j2", executable=True)
_SHARED_CLANGD = Template(path=".clangd", source="shared/clangd.j2")

_CPP_BASE: tuple[Template, ...] = (
    Template(path=".gitignore", source="cpp/gitignore.j2"),
    Template(path="CMakeLists.txt", source="cpp/CMakeLists.txt.j2"),
    Template(path="include/main.hpp", source="cpp/include/main.hpp.j2"),
    Template(path="src/main.cpp", source="cpp/src/main.cpp.j2"),
    _SHARED_BUILD,
    Template(path="scripts/format.sh", source="cpp/scripts/format.sh.j2", executable=True),
    _SHARED_CLEAN,
    _SHARED_CLANGD,
    Template(path="Makefile", source="cpp/Makefile.j2"),
    Template(path="tests/test_main.cpp", source="cpp/tests/test_main.cpp.j2"),
    Template(path="README.md", source="cpp/README.md.j2"),
)

_C_BASE: tuple[Template, ...] = (
    Template(path=".gitignore", source="c/gitignore.j2"),
    Template(path="CMakeLists.txt", source="c/CMakeLists.txt.j2"),
    Template(path="include/main.h", source="c/include/main.h.j2"),
    Template(path="src/main.c", source="c/src/main.c.j2"),
    _SHARED_BUILD,
    Template(path="scripts/format.sh", source="c/scripts/format.sh.j2", executable=True),
    _SHARED_CLEAN,
    _SHARED_CLANGD,
    Template(path="Makefile", source="c/Makefile.j2"),
    Template(path="tests/test_main.c", source="c/tests/test_main.c.j2"),
    Template(path="README.md", source="c/README.md.j2"),
)

# Per-variant overrides: ``None`` drops the base entry for that path.
_OVERRIDES: dict[Variant, dict[str, Template | None]] = {
    Variant.CPP_FULL: {},
    Variant.CPP_MINIMAL: {
        "CMakeLists.txt": Template(path="CMakeLists.txt", source="cpp_minimal/CMakeLists.txt.j2"),
        "scripts/format.sh": Template(
            path="scripts/format.sh", source="cpp_minimal/scripts/format.sh.j2", executable=True
        ),
        "Makefile": None,
        "tests/test_main.cpp": None,
        "README.md": Template(path="README.md", source="cpp_minimal/README.md.j2"),
    },
    Variant.C_PLAIN: {},
}

_BASES: dict[Variant, tuple[Template, ...]] = {
    Variant.CPP_FULL: _CPP_BASE,
    Variant.CPP_MINIMAL: _CPP_BASE,
    Variant.C_PLAIN: _C_BASE,
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def coerce_variant(variant: Variant | str) -> Variant:
    """Return *variant* as a ``Variant``, raising ``UnknownVariant`` otherwise."""
    if isinstance(variant, Variant):
        return variant
    try:
        return Variant(variant)
    except ValueError:
        raise UnknownVariant(variant) from None


def resolve(variant: Variant | str) -> tuple[Template, ...]:
    """Return the ordered templates emitted for *variant*.

    Args:
        variant: A ``Variant`` member or its string value (``"cpp"``,
            ``"cpp-minimal"``, ``"c"``).

    Returns:
        Templates in emission order.

    Raises:
        UnknownVariant: If *variant* is not one of the known variants.
    """
    key = coerce_variant(variant)
    return _compose(_BASES[key], _OVERRIDES[key])


def directory_plan(variant: Variant | str) -> tuple[str, ...]:
    """Return the directories created before any file is written.

    ``tests`` is only part of the plan for variants that ship a test stub.
    """
    templates = resolve(variant)
    dirs = list(BASE_DIRECTORIES)
    if any(t.path.startswith("tests/") for t in templates):
        dirs.append("tests")
    return tuple(dirs)


def all_template_paths() -> set[str]:
    """Every output path produced by any variant."""
    return {t.path for v in Variant for t in resolve(v)}


def _compose(
    base: tuple[Template, ...], overrides: dict[str, Template | None]
) -> tuple[Template, ...]:
    """Apply path-keyed *overrides* to *base*, keeping base order."""
    composed: list[Template] = []
    seen: set[str] = set()
    for template in base:
        seen.add(template.path)
        if template.path in overrides:
            replacement = overrides[template.path]
            if replacement is not None:
                composed.append(replacement)
            continue
        composed.append(template)
    # Overrides for paths the base does not have are appended in order
    for path, template in overrides.items():
        if path not in seen and template is not None:
            composed.append(template)
    return tuple(composed)
