"""Patch version derivation.

A patch version is the base version with a build tag naming the commit the
patch was generated from, e.g. "5.60" at abcdef1234 → "5.60+patch.abcdef".
"""

from __future__ import annotations

import subprocess
from pathlib import Path

from .errors import ConfigurationError
from .shell import Runner, git, run

SHORT_REVISION_LENGTH = 6


def short_revision(revision: str) -> str:
    """Truncate a commit id to its short form.

    Revisions shorter than SHORT_REVISION_LENGTH are returned whole.
    """
    return revision[:SHORT_REVISION_LENGTH]


def resolve_patch_version(base_version: str, revision: str) -> str:
    """Build the patch version for a base version and commit.

    Examples:
        ("5.60", "abcdef1234") → "5.60+patch.abcdef"
        ("5.60", "ab") → "5.60+patch.ab"
    """
    return f"{base_version}+patch.{short_revision(revision)}"


def current_revision(
    repo_dir: Path, sha: str | None = None, *, runner: Runner = run
) -> str:
    """Return the commit the patch is generated from.

    Args:
        repo_dir: Repository holding the patches branch.
        sha: Commit id supplied by CI (GITHUB_SHA). Used as-is when set.
        runner: Command runner used to ask git for HEAD otherwise.

    Raises:
        ConfigurationError: If no sha is given and git cannot resolve HEAD.
    """
    if sha:
        return sha
    try:
        revision = git("rev-parse", "HEAD", cwd=repo_dir, runner=runner)
    except (OSError, subprocess.CalledProcessError) as exc:
        raise ConfigurationError(
            f"Unable to determine the current revision in {repo_dir}"
        ) from exc
    if not revision:
        raise ConfigurationError(f"git returned no revision in {repo_dir}")
    return revision
