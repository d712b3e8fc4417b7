"""Exceptions raised by the release pipeline.

Every failure is fatal: the pipeline stops at the first error and the caller
is expected to discard the checkout. Nothing here is retried or rolled back.
"""

from __future__ import annotations

from collections.abc import Sequence


class PatchReleaseError(Exception):
    """Base class for all pipeline errors."""


class ConfigurationError(PatchReleaseError):
    """Invalid or missing input, detected before any step mutates files."""


class UnrecognizedProjectTypeError(ConfigurationError):
    """The project type is not one of the supported values."""

    def __init__(self, project_type: str) -> None:
        super().__init__(f"Non-recognized project type: {project_type!r}")
        self.project_type = project_type


class CommandError(PatchReleaseError):
    """An external tool failed or could not be started.

    Attributes:
        command: The command line that was executed.
        returncode: Exit code, or None if the tool never ran.
        output: Captured stderr/stdout of the tool, if any.
    """

    def __init__(
        self,
        message: str,
        command: Sequence[str] = (),
        returncode: int | None = None,
        output: str = "",
    ) -> None:
        super().__init__(message)
        self.command = tuple(command)
        self.returncode = returncode
        self.output = output

    def __str__(self) -> str:
        msg = super().__str__()
        if self.returncode is not None:
            msg += f" (exit {self.returncode})"
        if self.output.strip():
            msg += f"\n{self.output.strip()}"
        return msg


class DiffGenerationError(CommandError):
    """The patch could not be generated from the patches branch."""


class PatchApplyError(CommandError):
    """The patch did not apply cleanly to the project directory."""


class PackagingError(CommandError):
    """The release archive could not be created."""
