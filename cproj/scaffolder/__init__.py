"""cproj scaffolder -- generates C and C++ project structures.

This module takes a ``ProjectSpec`` (project name + variant) and renders a
ready-to-build project directory with CMake, a Makefile, helper scripts and
a hello-world program.

Quick usage::

    from cproj.scaffolder import ProjectGenerator, ProjectSpec, Variant

    spec = ProjectSpec(name="demo", variant=Variant.CPP_FULL)
    project_path = ProjectGenerator().generate(spec, "/tmp/output")
"""

from cproj.scaffolder.generator import (
    EmitError,
    InvalidName,
    ProjectGenerator,
    ProjectSpec,
    emit,
    find_stale_files,
    validate_name,
)
from cproj.scaffolder.registry import (
    ScaffoldError,
    Template,
    UnknownVariant,
    Variant,
    directory_plan,
    resolve,
)
from cproj.scaffolder.templates import TemplateRenderer

__all__ = [
    "EmitError",
    "InvalidName",
    "ProjectGenerator",
    "ProjectSpec",
    "ScaffoldError",
    "Template",
    "TemplateRenderer",
    "UnknownVariant",
    "Variant",
    "directory_plan",
    "emit",
    "find_stale_files",
    "resolve",
    "validate_name",
]
