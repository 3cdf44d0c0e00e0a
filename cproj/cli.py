"""Command-line entry points.

Usage::

    generate-cpp-project my-app            # C++ with tests and a Makefile
    generate-cpp-minimal-project my-app    # C++, CMake and scripts only
    generate-c-project my-app              # C11 with tests and a Makefile
    cproj --variant c my-app -o ~/code     # generic form
    install-cpp-project                    # copy ./generate-cpp-project to /usr/local/bin
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import NoReturn

from pydantic import ValidationError

from cproj.config import Config
from cproj.installer import InstallError, SourceNotFound, install
from cproj.scaffolder import (
    InvalidName,
    ProjectGenerator,
    ProjectSpec,
    ScaffoldError,
    Variant,
    find_stale_files,
)
from cproj.utils import (
    console,
    err_console,
    print_error,
    print_success,
    print_summary_table,
    print_warning,
)

# Program name shown in usage messages for each variant entry point.
PROGRAM_NAMES: dict[Variant, str] = {
    Variant.CPP_FULL: "generate-cpp-project",
    Variant.CPP_MINIMAL: "generate-cpp-minimal-project",
    Variant.C_PLAIN: "generate-c-project",
}

_SUCCESS_LABELS: dict[Variant, str] = {
    Variant.CPP_FULL: "Project",
    Variant.CPP_MINIMAL: "Project",
    Variant.C_PLAIN: "C Project",
}

_NEXT_STEPS: dict[Variant, list[str]] = {
    Variant.CPP_FULL: ["./scripts/build.sh", "./bin/main"],
    Variant.CPP_MINIMAL: ["./scripts/build.sh", "./bin/main"],
    Variant.C_PLAIN: ["make build", "make run"],
}


# ---------------------------------------------------------------------------
# Scaffolder
# ---------------------------------------------------------------------------


class _Parser(argparse.ArgumentParser):
    """ArgumentParser whose usage errors exit with status 1."""

    def error(self, message: str) -> NoReturn:
        print_error(message)
        err_console.print(self.format_usage().rstrip(), highlight=False, markup=False)
        sys.exit(1)


def _build_parser(prog: str, *, with_variant: bool) -> argparse.ArgumentParser:
    parser = _Parser(
        prog=prog,
        description="Scaffold a new C/C++ project directory",
    )
    parser.add_argument(
        "project_name",
        nargs="?",
        default="",
        help="Name of the project folder to create",
    )
    if with_variant:
        parser.add_argument(
            "--variant",
            choices=[v.value for v in Variant],
            default=None,
            help="Project flavour (default: cpp, or $CPROJ_VARIANT)",
        )
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Parent directory for the project (default: ., or $CPROJ_OUTPUT_DIR)",
    )
    parser.add_argument(
        "--clean",
        action="store_true",
        default=None,
        help="Delete an existing project folder before generating",
    )
    return parser


def _load_config() -> Config:
    try:
        return Config.from_env()
    except (ValidationError, ValueError) as exc:
        print_error(f"Invalid configuration: {exc}")
        sys.exit(1)


def _run_scaffold(
    variant: Variant | None, argv: list[str] | None, prog: str
) -> None:
    """Shared body of every scaffolder entry point."""
    parser = _build_parser(prog, with_variant=variant is None)
    args = parser.parse_args(argv)
    config = _load_config()

    if variant is None:
        variant = Variant(args.variant) if args.variant else config.variant
    output_dir = Path(args.output) if args.output else config.output_dir
    clean = config.clean if args.clean is None else args.clean

    spec = ProjectSpec(name=args.project_name, variant=variant)
    generator = ProjectGenerator()
    try:
        project_root = generator.generate(spec, output_dir, clean=clean)
    except InvalidName as exc:
        print_error(str(exc))
        err_console.print(f"Usage: {prog} <project-name>", highlight=False)
        sys.exit(1)
    except ScaffoldError as exc:
        print_error(str(exc))
        sys.exit(1)

    print_success(f"✅ {_SUCCESS_LABELS[variant]} '{spec.name}' created successfully!")

    stale = find_stale_files(project_root, variant)
    if stale:
        print_warning(
            "These files were not generated for this variant and were left in place "
            "(re-run with --clean to remove them):"
        )
        for path in stale:
            rel = path.relative_to(project_root).as_posix()
            console.print(f"  {rel}", highlight=False, markup=False)

    console.print()
    console.print("Next steps:")
    console.print(f"  cd {spec.name}", highlight=False, markup=False)
    for step in _NEXT_STEPS[variant]:
        console.print(f"  {step}", highlight=False, markup=False)
    if variant is Variant.C_PLAIN:
        console.print()
        console.print("For memory checking:")
        console.print("  make valgrind", highlight=False)


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``cproj`` / ``python -m cproj.cli``."""
    _run_scaffold(None, argv, "cproj")


def cpp_main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``generate-cpp-project``."""
    _run_scaffold(Variant.CPP_FULL, argv, PROGRAM_NAMES[Variant.CPP_FULL])


def cpp_minimal_main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``generate-cpp-minimal-project``."""
    _run_scaffold(Variant.CPP_MINIMAL, argv, PROGRAM_NAMES[Variant.CPP_MINIMAL])


def c_main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``generate-c-project``."""
    _run_scaffold(Variant.C_PLAIN, argv, PROGRAM_NAMES[Variant.C_PLAIN])


# ---------------------------------------------------------------------------
# Installer
# ---------------------------------------------------------------------------


def install_main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``install-cpp-project``."""
    parser = _Parser(
        prog="install-cpp-project",
        description=(
            "Install the generate-cpp-project launcher from the current "
            "directory into /usr/local/bin"
        ),
    )
    parser.parse_args(argv)
    settings = _load_config().installer

    source = Path.cwd() / settings.source_name
    install_dir = settings.install_dir
    console.print("[bold green]Installing C++ Project Generator...[/bold green]")

    try:
        result = install(
            source,
            install_dir,
            settings.install_name,
            use_sudo=settings.use_sudo,
            timeout=settings.timeout,
        )
    except SourceNotFound as exc:
        print_error(f"{exc.source_path.name} not found in current directory")
        err_console.print(
            f"Please run this script from the directory containing {exc.source_path.name}",
            highlight=False,
            markup=False,
        )
        sys.exit(1)
    except InstallError as exc:
        print_error(str(exc))
        if exc.stderr:
            err_console.print(exc.stderr, highlight=False, markup=False)
        sys.exit(1)

    print_summary_table(
        {
            "Source": str(source),
            "Installed to": str(result.destination),
            "Used sudo": "yes" if result.used_sudo else "no",
        },
        title="Installation",
    )

    if result.on_path:
        print_success(f"✅ {install_dir} is already in your PATH")
    else:
        print_warning(f"Warning: {install_dir} is not in your PATH")
        console.print()
        console.print("Add the following line to your shell profile:")
        console.print("  ~/.bashrc (for Bash)")
        console.print("  ~/.zshrc (for Zsh)")
        console.print("  ~/.config/fish/config.fish (for Fish)")
        console.print()
        print_warning(f'export PATH="{install_dir}:$PATH"')
        console.print()
        console.print("Then reload your shell or run:")
        print_warning("source ~/.bashrc (or ~/.zshrc, etc.)")

    console.print()
    print_success("✅ Installation complete!")
    console.print()
    console.print("Usage:")
    console.print(f"  {settings.install_name} <project-name>", highlight=False, markup=False)
    console.print()
    console.print("Example:")
    console.print(f"  {settings.install_name} my-awesome-project", highlight=False, markup=False)
    console.print()

    if result.command_available:
        print_success(f"✅ Command '{settings.install_name}' is ready to use!")
    else:
        print_warning("⚠️  You may need to reload your shell or update your PATH")
        console.print("Try running: hash -r")


if __name__ == "__main__":
    main()
