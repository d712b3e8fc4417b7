"""Release archive creation."""

from __future__ import annotations

from pathlib import Path

from .errors import PackagingError
from .models import Package
from .shell import Runner, run, step


def package_file_name(project_name: str, patch_version: str) -> str:
    """File name of the release archive, e.g. "myext-5.60+patch.abcdef.tar.gz"."""
    return f"{project_name}-{patch_version}.tar.gz"


def create_package(
    project_name: str,
    patch_version: str,
    project_dir: Path,
    *,
    workspace_root: Path,
    runner: Runner = run,
) -> Package:
    """Archive the project directory into a gzipped tarball.

    tar runs from the parent of project_dir so the archive's root entry is
    the project directory name rather than an absolute path.

    Raises:
        PackagingError: If tar is unavailable or fails. Any partially written
            archive is removed first.
    """
    file_name = package_file_name(project_name, patch_version)
    path = workspace_root / file_name
    step(f"Packaging {file_name}")

    cmd = ("tar", "czf", str(path), project_dir.name)
    try:
        result = runner(
            *cmd, cwd=project_dir.parent, capture=True, check=False, text=False
        )
    except OSError as exc:
        path.unlink(missing_ok=True)
        raise PackagingError(f"Unable to run tar: {exc}", cmd) from exc
    if result.returncode != 0:
        path.unlink(missing_ok=True)
        raise PackagingError(
            f"Failed to archive {project_dir}",
            cmd,
            result.returncode,
            result.stderr.decode(errors="replace"),
        )

    print(f"  {path}")
    return Package(file_name=file_name, path=path)
