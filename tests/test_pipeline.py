"""Tests for patch_release.pipeline."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from conftest import FakeRunner, make_settings, snapshot

from patch_release.config import Settings
from patch_release.errors import (
    ConfigurationError,
    DiffGenerationError,
    PatchApplyError,
    UnrecognizedProjectTypeError,
)
from patch_release.models import Project, ProjectType
from patch_release.patching import PATCH_FILE_NAME
from patch_release.pipeline import PipelineState, ReleasePipeline, run_release

DIFF = "--- a/README.txt\n+++ b/README.txt\n@@ -1 +1 @@\n-readme\n+patched\n"


@pytest.fixture(autouse=True)
def quiet_steps():
    """Silence step headers from every pipeline stage."""
    with (
        patch("patch_release.patching.step"),
        patch("patch_release.stamping.step"),
        patch("patch_release.archive.step"),
    ):
        yield


class TestRunRelease:
    """Tests for a complete, successful run."""

    def test_returns_version_and_package(
        self, module_project: Path, fake_runner: FakeRunner
    ) -> None:
        workspace = module_project.parent

        result = run_release(make_settings(workspace), runner=fake_runner)

        assert result.version == "5.60+patch.abcdef"
        assert result.package.file_name == "myext-5.60+patch.abcdef.tar.gz"
        assert result.package.path == workspace / "myext-5.60+patch.abcdef.tar.gz"

    def test_runs_steps_in_order(
        self, module_project: Path, fake_runner: FakeRunner
    ) -> None:
        fake_runner.script("git", "--no-pager", stdout=DIFF)

        run_release(make_settings(module_project.parent), runner=fake_runner)

        assert fake_runner.commands() == ["git", "git", "patch", "tar"]

    def test_git_runs_in_workspace_root(
        self, module_project: Path, fake_runner: FakeRunner
    ) -> None:
        workspace = module_project.parent

        run_release(make_settings(workspace), runner=fake_runner)

        git_calls = [c for c in fake_runner.calls if c.args[0] == "git"]
        assert {c.cwd for c in git_calls} == {workspace}

    def test_project_is_stamped_and_patch_file_removed(
        self, module_project: Path, fake_runner: FakeRunner
    ) -> None:
        fake_runner.script("git", "--no-pager", stdout=DIFF)

        run_release(make_settings(module_project.parent), runner=fake_runner)

        assert not (module_project / PATCH_FILE_NAME).exists()
        assert (module_project / "myext.info").read_text().endswith(
            ";patch = 5.60+patch.abcdef\n"
        )

    def test_reaches_done(
        self, module_project: Path, fake_runner: FakeRunner
    ) -> None:
        pipeline = ReleasePipeline(
            make_settings(module_project.parent), runner=fake_runner
        )

        pipeline.run()

        assert pipeline.state is PipelineState.DONE
        assert pipeline.package is not None

    def test_pipeline_runs_once(
        self, module_project: Path, fake_runner: FakeRunner
    ) -> None:
        pipeline = ReleasePipeline(
            make_settings(module_project.parent), runner=fake_runner
        )
        pipeline.run()

        with pytest.raises(RuntimeError):
            pipeline.run()


class TestFailures:
    """The first failing step stops the run and its error propagates as-is."""

    def test_unrecognized_type_changes_nothing(
        self, module_project: Path, fake_runner: FakeRunner
    ) -> None:
        workspace = module_project.parent
        settings = Settings.model_construct(
            workspace_root=workspace,
            project=Project.model_construct(
                directory=module_project, type="wordpress-plugin", name="myext"
            ),
            base_version="5.60",
            revision="abcdef1234",
        )
        before = snapshot(workspace)
        pipeline = ReleasePipeline(settings, runner=fake_runner)

        with pytest.raises(UnrecognizedProjectTypeError):
            pipeline.run()

        assert pipeline.state is PipelineState.FAILED
        assert fake_runner.calls == []
        assert snapshot(workspace) == before

    def test_missing_project_directory(
        self, workspace: Path, fake_runner: FakeRunner
    ) -> None:
        (workspace / "myext").rmdir()

        with pytest.raises(ConfigurationError, match="does not exist"):
            run_release(make_settings(workspace), runner=fake_runner)

        assert fake_runner.calls == []

    def test_diff_failure_stops_run(
        self, module_project: Path, fake_runner: FakeRunner
    ) -> None:
        fake_runner.script("git", "rev-parse", returncode=1)
        before = snapshot(module_project)
        pipeline = ReleasePipeline(
            make_settings(module_project.parent), runner=fake_runner
        )

        with pytest.raises(DiffGenerationError):
            pipeline.run()

        assert pipeline.state is PipelineState.FAILED
        assert "patch" not in fake_runner.commands()
        assert "tar" not in fake_runner.commands()
        assert snapshot(module_project) == before

    @patch("patch_release.pipeline.generate_patch")
    def test_error_is_not_wrapped(
        self,
        mock_generate: MagicMock,
        module_project: Path,
        fake_runner: FakeRunner,
    ) -> None:
        error = DiffGenerationError("boom")
        mock_generate.side_effect = error

        with pytest.raises(DiffGenerationError) as excinfo:
            run_release(make_settings(module_project.parent), runner=fake_runner)

        assert excinfo.value is error

    def test_apply_failure_skips_stamp_and_package(
        self, module_project: Path, fake_runner: FakeRunner
    ) -> None:
        fake_runner.script("git", "--no-pager", stdout=DIFF)
        fake_runner.script("patch", returncode=1, stdout="Hunk #1 FAILED at 1.\n")
        pipeline = ReleasePipeline(
            make_settings(module_project.parent), runner=fake_runner
        )

        with pytest.raises(PatchApplyError):
            pipeline.run()

        assert pipeline.state is PipelineState.FAILED
        assert "tar" not in fake_runner.commands()
        assert not (module_project / PATCH_FILE_NAME).exists()
        assert ";patch" not in (module_project / "myext.info").read_text()

    def test_stamp_failure_skips_package(
        self, workspace: Path, fake_runner: FakeRunner
    ) -> None:
        """A core package without xml/version.xml cannot be stamped."""
        pipeline = ReleasePipeline(
            make_settings(workspace, ProjectType.CORE_PACKAGE), runner=fake_runner
        )

        with pytest.raises(FileNotFoundError):
            pipeline.run()

        assert pipeline.state is PipelineState.FAILED
        assert "tar" not in fake_runner.commands()
        assert pipeline.package is None
