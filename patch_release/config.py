"""Pipeline settings resolved from inputs and the CI environment.

Inputs come from CLI options or GitHub Action inputs (``INPUT_*``), falling
back to ``patch-release.toml`` at the workspace root. The workspace root,
repository name and commit come from the GitHub Actions environment.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel

from .errors import ConfigurationError
from .models import Project, ProjectType
from .shell import Runner, run
from .toml import read_input_defaults
from .versions import current_revision, resolve_patch_version


class Settings(BaseModel):
    """Everything a pipeline run needs, validated up front.

    Attributes:
        workspace_root: Absolute workspace path; packages are written here.
        project: The project to patch.
        base_version: Base version, also naming the patches branch.
        revision: Commit id the patch version is derived from.
    """

    workspace_root: Path
    project: Project
    base_version: str
    revision: str

    @property
    def patch_version(self) -> str:
        return resolve_patch_version(self.base_version, self.revision)


def get_workspace_root(environ: Mapping[str, str] | None = None) -> Path:
    """Return the absolute workspace path from GITHUB_WORKSPACE.

    Raises:
        ConfigurationError: If GITHUB_WORKSPACE is not defined.
    """
    env = os.environ if environ is None else environ
    workspace = env.get("GITHUB_WORKSPACE")
    if not workspace:
        raise ConfigurationError("GITHUB_WORKSPACE not defined")
    return Path(workspace).resolve()


def repository_name(environ: Mapping[str, str]) -> str | None:
    """Repository part of GITHUB_REPOSITORY ("owner/repo" → "repo")."""
    repository = environ.get("GITHUB_REPOSITORY", "")
    return repository.rsplit("/", 1)[-1] or None


def load_settings(
    *,
    project_dir: str | None = None,
    project_type: str | None = None,
    project_name: str | None = None,
    base_version: str | None = None,
    environ: Mapping[str, str] | None = None,
    runner: Runner = run,
) -> Settings:
    """Resolve and validate pipeline settings.

    Explicit arguments win over the workspace config file. The project
    directory must exist and the project type must be recognized; both are
    checked here so that a bad input never reaches a mutating step.

    Raises:
        ConfigurationError: On a missing workspace root, a missing required
            input, a project directory that does not exist, or an
            unrecognized project type.
    """
    env = os.environ if environ is None else environ
    workspace_root = get_workspace_root(env)

    defaults = read_input_defaults(workspace_root)
    project_dir = project_dir or defaults.get("project_dir")
    project_type = project_type or defaults.get("project_type")
    project_name = project_name or defaults.get("project_name")
    base_version = base_version or defaults.get("base_version")

    for name, value in (
        ("project_dir", project_dir),
        ("project_type", project_type),
        ("base_version", base_version),
    ):
        if not value:
            raise ConfigurationError(f"Missing required input: {name}")

    kind = ProjectType.parse(project_type)
    directory = workspace_root / project_dir
    if not directory.is_dir():
        raise ConfigurationError(f"Project directory does not exist: {directory}")

    name = project_name or repository_name(env) or workspace_root.name
    revision = current_revision(workspace_root, env.get("GITHUB_SHA"), runner=runner)

    return Settings(
        workspace_root=workspace_root,
        project=Project(directory=directory, type=kind, name=name),
        base_version=base_version,
        revision=revision,
    )
