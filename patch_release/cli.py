"""CLI entry point for patch-release."""

from __future__ import annotations

import os
from functools import wraps
from pathlib import Path
from typing import Any, Callable

import click

from patch_release.actions import write_outputs
from patch_release.config import load_settings
from patch_release.errors import PatchReleaseError
from patch_release.models import ProjectType
from patch_release.pipeline import run_release

TEMPLATES_DIR = Path(__file__).parent / "templates"
PROJECT_TYPES = [t.value for t in ProjectType]


def _input_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Add the pipeline inputs, readable from GitHub Action INPUT_* variables."""
    options = [
        click.option(
            "--project-dir",
            envvar="INPUT_PROJECT_DIR",
            help="Project directory, relative to the workspace root.",
        ),
        click.option(
            "--project-type",
            envvar="INPUT_PROJECT_TYPE",
            help=f"One of: {', '.join(PROJECT_TYPES)}.",
        ),
        click.option(
            "--project-name",
            envvar="INPUT_PROJECT_NAME",
            help="Package name prefix. Defaults to the repository name.",
        ),
        click.option(
            "--base-version",
            envvar="INPUT_BASE_VERSION",
            help="Base version; the patch is taken from <base-version>-patches.",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _fail_on_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """Report pipeline and I/O errors as a clean CLI failure."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except (PatchReleaseError, OSError) as exc:
            raise click.ClickException(str(exc)) from exc

    return wrapper


@click.group()
@click.version_option(package_name="patch-release")
def cli() -> None:
    """Build patched, versioned release packages from a patches branch."""


@cli.command()
@_input_options
@_fail_on_errors
def release(
    project_dir: str | None,
    project_type: str | None,
    project_name: str | None,
    base_version: str | None,
) -> None:
    """Patch, stamp and package the project (usually called from CI)."""
    settings = load_settings(
        project_dir=project_dir,
        project_type=project_type,
        project_name=project_name,
        base_version=base_version,
    )
    result = run_release(settings)
    write_outputs(result, os.environ.get("GITHUB_OUTPUT"))


@cli.command()
@_input_options
@_fail_on_errors
def version(
    project_dir: str | None,
    project_type: str | None,
    project_name: str | None,
    base_version: str | None,
) -> None:
    """Print the patch version a release would get, without changing anything."""
    settings = load_settings(
        project_dir=project_dir,
        project_type=project_type,
        project_name=project_name,
        base_version=base_version,
    )
    click.echo(settings.patch_version)


@cli.command()
@click.option(
    "--workflow-dir",
    type=click.Path(),
    default=".github/workflows",
    show_default=True,
    help="Directory to write the workflow file.",
)
def init(workflow_dir: str) -> None:
    """Scaffold the GitHub Actions workflow into your patches repo."""
    root = Path.cwd()

    # Sanity checks
    if not (root / ".git").exists():
        raise click.ClickException("Not a git repository. Run from the repo root.")

    dest_dir = root / workflow_dir
    dest_dir.mkdir(parents=True, exist_ok=True)
    dest = dest_dir / "patch-release.yml"
    if dest.exists():
        raise click.ClickException(f"{dest.relative_to(root)} already exists.")

    template = TEMPLATES_DIR / "patch-release.yml"
    dest.write_text(template.read_text())

    click.echo(f"✓ Wrote workflow to {dest.relative_to(root)}")
    click.echo()
    click.echo("Next steps:")
    click.echo("  1. Set project_dir, project_type and base_version in the workflow")
    click.echo("  2. Commit and push the workflow file")
    click.echo("  3. Trigger a release:")
    click.echo("       gh workflow run patch-release.yml")
