"""Shared test fixtures."""

from __future__ import annotations

import hashlib
import subprocess
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from patch_release.config import Settings
from patch_release.models import Project, ProjectType

REVISION = "abcdef1234567890"


@dataclass
class Call:
    args: tuple[str, ...]
    cwd: Path | None
    text: bool = True


@dataclass
class Script:
    prefix: tuple[str, ...]
    returncode: int = 0
    stdout: str | bytes = ""
    stderr: str | bytes = ""
    raises: Exception | None = None
    effect: Callable[[tuple[str, ...], Path | None], None] | None = None


def _output(value: str | bytes, text: bool) -> str | bytes:
    """Convert scripted output to what a real run with ``text`` would return."""
    if text:
        return value if isinstance(value, str) else value.decode()
    return value if isinstance(value, bytes) else value.encode()


@dataclass
class FakeRunner:
    """Command runner that records invocations and returns scripted results.

    Commands without a matching script succeed with empty output.
    """

    calls: list[Call] = field(default_factory=list)
    scripts: list[Script] = field(default_factory=list)

    def script(self, *prefix: str, **kwargs) -> None:
        self.scripts.append(Script(prefix=prefix, **kwargs))

    def commands(self) -> list[str]:
        return [call.args[0] for call in self.calls]

    def __call__(
        self,
        *args: str,
        cwd: Path | None = None,
        capture: bool = False,
        check: bool = True,
        text: bool = True,
    ) -> subprocess.CompletedProcess:
        self.calls.append(Call(args=args, cwd=cwd, text=text))
        script = next(
            (s for s in self.scripts if args[: len(s.prefix)] == s.prefix),
            Script(prefix=()),
        )
        if script.raises is not None:
            raise script.raises
        if script.effect is not None:
            script.effect(args, cwd)
        stdout = _output(script.stdout, text)
        stderr = _output(script.stderr, text)
        if check and script.returncode != 0:
            raise subprocess.CalledProcessError(
                script.returncode, args, stdout, stderr
            )
        return subprocess.CompletedProcess(args, script.returncode, stdout, stderr)


def snapshot(directory: Path) -> dict[str, str]:
    """Map each file under directory to the sha256 of its contents."""
    return {
        str(p.relative_to(directory)): hashlib.sha256(p.read_bytes()).hexdigest()
        for p in sorted(directory.rglob("*"))
        if p.is_file()
    }


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create a workspace root holding an empty project directory."""
    ws = tmp_path / "ws"
    (ws / "myext").mkdir(parents=True)
    return ws


@pytest.fixture
def module_project(workspace: Path) -> Path:
    """Create a Drupal-style module with a descriptor and a nested one."""
    project = workspace / "myext"
    (project / "myext.info").write_text("name = My ext\ncore = 7.x\n")
    (project / "README.txt").write_text("readme\n")
    (project / "sub").mkdir()
    (project / "sub" / "nested.info").write_text("name = Nested\n")
    return project


@pytest.fixture
def core_project(workspace: Path) -> Path:
    """Create a CiviCRM-core-style tree with xml/version.xml."""
    project = workspace / "myext"
    (project / "xml").mkdir()
    (project / "xml" / "version.xml").write_text(
        '<?xml version="1.0" encoding="iso-8859-1" ?>\n'
        "<version>\n"
        "  <version_no>5.60.0</version_no>\n"
        "</version>\n"
    )
    return project


def make_settings(
    workspace: Path,
    project_type: ProjectType = ProjectType.MODULE_PACKAGE,
    revision: str = REVISION,
) -> Settings:
    return Settings(
        workspace_root=workspace,
        project=Project(directory=workspace / "myext", type=project_type, name="myext"),
        base_version="5.60",
        revision=revision,
    )
