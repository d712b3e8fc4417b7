"""Patch generation and application.

The patch is the diff between the current checkout and the remote
``<base_version>-patches`` branch. It is written to ``patch.diff`` inside the
project directory, applied with ``patch -p1`` and deleted straight away.
"""

from __future__ import annotations

from pathlib import Path

from .errors import DiffGenerationError, PatchApplyError
from .shell import Runner, run, step

PATCH_FILE_NAME = "patch.diff"

# CI-internal paths that never belong in a patch
EXCLUDED_PATHS = (".github",)


def patches_branch(base_version: str) -> str:
    """Name of the remote branch holding the patch set for a base version."""
    return f"origin/{base_version}-patches"


def generate_patch(
    project_dir: Path,
    base_version: str,
    *,
    repo_dir: Path | None = None,
    runner: Runner = run,
) -> Path:
    """Diff the checkout against the patches branch and save it as a patch file.

    Args:
        project_dir: Directory the patch file is written into.
        base_version: Base version naming the patches branch.
        repo_dir: Repository to run git in. Defaults to project_dir.
        runner: Command runner.

    Returns:
        Path to the patch file. An empty diff yields an empty file.

    Raises:
        DiffGenerationError: If git is unavailable, the branch does not exist,
            or the diff command fails.
    """
    branch = patches_branch(base_version)
    repo_dir = repo_dir or project_dir
    step(f"Generating patch from {branch}")

    verify = ("git", "rev-parse", "--verify", "--quiet", f"{branch}^{{commit}}")
    try:
        found = runner(*verify, cwd=repo_dir, capture=True, check=False)
    except OSError as exc:
        raise DiffGenerationError(f"Unable to run git: {exc}", verify) from exc
    if found.returncode != 0:
        raise DiffGenerationError(
            f"Remote branch {branch} does not exist", verify, found.returncode
        )

    excludes = [f":!{path}" for path in EXCLUDED_PATHS]
    cmd = ("git", "--no-pager", "diff", "-p", f"..{branch}", "--", ".", *excludes)
    try:
        # Bytes, so CRLF line endings and non-UTF-8 content survive untouched
        result = runner(*cmd, cwd=repo_dir, capture=True, check=False, text=False)
    except OSError as exc:
        raise DiffGenerationError(f"Unable to run git: {exc}", cmd) from exc
    if result.returncode != 0:
        raise DiffGenerationError(
            f"git diff against {branch} failed",
            cmd,
            result.returncode,
            result.stderr.decode(errors="replace"),
        )

    patch_file = project_dir / PATCH_FILE_NAME
    patch_file.write_bytes(result.stdout)
    lines = result.stdout.count(b"\n")
    print(f"  {patch_file} ({lines} lines)")
    return patch_file


def apply_patch(project_dir: Path, patch_file: Path, *, runner: Runner = run) -> None:
    """Apply a patch file to the project directory, then delete it.

    Paths inside the patch are repository-root relative with one leading
    component (``a/``, ``b/``), so the patch is applied with ``-p1``. The
    patch file is deleted whether or not it applied. An empty patch file has
    nothing to apply and is only deleted.

    Raises:
        PatchApplyError: If ``patch`` is unavailable or rejects any hunk.
            The project directory may then be partially patched.
    """
    step(f"Applying {patch_file.name}")
    cmd = ("patch", "-p1", "-i", str(patch_file))
    try:
        if patch_file.stat().st_size == 0:
            print("  Patch is empty, nothing to apply")
            return
        try:
            result = runner(
                *cmd, cwd=project_dir, capture=True, check=False, text=False
            )
        except OSError as exc:
            raise PatchApplyError(f"Unable to run patch: {exc}", cmd) from exc
        # File names in patch output are not necessarily UTF-8
        output = result.stdout.decode(errors="replace")
        if output:
            print(output.rstrip())
        if result.returncode != 0:
            raise PatchApplyError(
                f"Patch did not apply cleanly to {project_dir}",
                cmd,
                result.returncode,
                result.stderr.decode(errors="replace") or output,
            )
    finally:
        patch_file.unlink(missing_ok=True)
