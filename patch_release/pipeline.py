"""Release pipeline: resolve → diff → apply → stamp → package.

This module orchestrates a patch release:
1. Resolve the patch version from the base version and current commit
2. Diff the checkout against the ``<base_version>-patches`` branch
3. Apply the diff to the project directory (and delete the patch file)
4. Stamp the patch version into the project's metadata
5. Archive the project directory under the workspace root

Steps run strictly in order. The first failure stops the run and is raised
unchanged; nothing is retried and the project directory is left as it is.
"""

from __future__ import annotations

from enum import Enum

from .archive import create_package
from .config import Settings
from .errors import ConfigurationError
from .models import Package, ProjectType, ReleaseResult
from .patching import apply_patch, generate_patch
from .shell import Runner, run
from .stamping import stamp_version


class PipelineState(str, Enum):
    """Position of a pipeline run. Transitions only move forward."""

    START = "start"
    PATCH_GENERATED = "patch-generated"
    PATCH_APPLIED = "patch-applied"
    VERSION_STAMPED = "version-stamped"
    PACKAGED = "packaged"
    DONE = "done"
    FAILED = "failed"


class ReleasePipeline:
    """A single run of the release pipeline.

    A pipeline object runs once. After a failure, start over with a fresh
    checkout and a new pipeline.
    """

    def __init__(self, settings: Settings, *, runner: Runner = run) -> None:
        self.settings = settings
        self.runner = runner
        self.state = PipelineState.START
        self.package: Package | None = None

    def run(self) -> ReleaseResult:
        """Execute every step in order and return the release outputs."""
        if self.state is not PipelineState.START:
            raise RuntimeError(f"Pipeline already ran (state: {self.state.value})")
        try:
            return self._run()
        except BaseException:
            self.state = PipelineState.FAILED
            raise

    def _run(self) -> ReleaseResult:
        settings = self.settings
        project = settings.project
        ProjectType.parse(project.type)
        if not project.directory.is_dir():
            raise ConfigurationError(
                f"Project directory does not exist: {project.directory}"
            )

        patch_version = settings.patch_version
        print(f"Releasing {project.name} {patch_version}")

        patch_file = generate_patch(
            project.directory,
            settings.base_version,
            repo_dir=settings.workspace_root,
            runner=self.runner,
        )
        self.state = PipelineState.PATCH_GENERATED

        apply_patch(project.directory, patch_file, runner=self.runner)
        self.state = PipelineState.PATCH_APPLIED

        stamp_version(project.directory, project.type, patch_version)
        self.state = PipelineState.VERSION_STAMPED

        self.package = create_package(
            project.name,
            patch_version,
            project.directory,
            workspace_root=settings.workspace_root,
            runner=self.runner,
        )
        self.state = PipelineState.PACKAGED

        result = ReleaseResult(version=patch_version, package=self.package)
        self.state = PipelineState.DONE
        print(f"\n{'=' * 60}\nDone! {self.package.path}\n{'=' * 60}")
        return result


def run_release(settings: Settings, *, runner: Runner = run) -> ReleaseResult:
    """Execute the full release pipeline.

    Args:
        settings: Validated pipeline settings (see config.load_settings).
        runner: Command runner for git, patch and tar.
    """
    return ReleasePipeline(settings, runner=runner).run()
