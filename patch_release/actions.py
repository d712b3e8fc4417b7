"""GitHub Actions step output helpers."""

from __future__ import annotations

from .models import ReleaseResult


def release_outputs(result: ReleaseResult) -> dict[str, str]:
    """Step outputs published for a release, in publication order."""
    return {
        "version": result.version,
        "package": result.package.file_name,
        "package_path": str(result.package.path),
    }


def write_outputs(result: ReleaseResult, output_path: str | None) -> None:
    """Append ``name=value`` lines to the GITHUB_OUTPUT file.

    Outside of GitHub Actions (no output file) the lines are printed instead.
    """
    lines = [f"{name}={value}\n" for name, value in release_outputs(result).items()]
    if not output_path:
        print("".join(lines), end="")
        return
    with open(output_path, "a") as fh:
        fh.writelines(lines)
